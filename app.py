import logging

from flask import Flask, request, jsonify
from flask_cors import CORS
from pydantic import ValidationError

import lca_settings
from cost_calculations import (
    BASELINE_FALLBACK, CONFIGURED_FALLBACK, CostFactors, ProjectConfig, calculate_pathway_costs,
    format_cost_display, get_cost_breakdown, get_cost_efficiency_rating, optimized_project,
    primary_route_baseline,
)
from imputation import get_orchestrator
from lca_calculation import LcaResult, compare_results
from lci_data import LCIDataMissingError, ReferenceDataError
from project_parameters import MATERIALS, REGIONS, InvalidProjectError, QuickCompareParams

logger = logging.getLogger(__name__)

app = Flask(__name__)
CORS(app)


def error_response(message, status):
    return jsonify({'error': message, 'status': 'error'}), status


def _is_saved_project(data):
    return data.get('material') is not None


def _pathway_config(data, fallback):
    """Saved projects carry 'material'; quick-compare configs do not."""
    if _is_saved_project(data):
        return ProjectConfig.from_project(data, fallback)
    return ProjectConfig.from_dict(data)


def _pathway_result(data, config: ProjectConfig, supplied):
    if supplied:
        return LcaResult.from_dict(supplied)
    # Saved projects keep their own material, product and mass
    payload = data if _is_saved_project(data) else config.to_dict()
    return get_orchestrator().impute_and_calculate(payload).result


@app.route('/api/impute', methods=['POST'])
def impute_and_calculate():
    """Fill missing parameters with the models and run the LCA"""
    try:
        body = request.get_json(silent=True) or {}
        outcome = get_orchestrator().impute_and_calculate(body.get('project'))
        response = outcome.to_dict()
        response['status'] = 'success'
        return jsonify(response)

    except (LCIDataMissingError, ReferenceDataError) as e:
        logger.error("LCA calculation failed: %s", e)
        return error_response(str(e), 500)
    except ValidationError as e:
        return error_response(f"Invalid project data: {e}", 400)
    except (InvalidProjectError, TypeError, ValueError) as e:
        return error_response(str(e), 400)


@app.route('/api/pathway-costs', methods=['POST'])
def pathway_costs():
    """Cost of moving from a baseline configuration to a configured one

    Without 'configured', a saved project is compared with its optimised
    scenario and a quick-compare config with its all-primary baseline.
    """
    try:
        body = request.get_json(silent=True) or {}
        baseline_data = body.get('baseline')
        configured_data = body.get('configured')
        if not isinstance(baseline_data, dict):
            raise InvalidProjectError("'baseline' is required")
        if configured_data is None:
            if _is_saved_project(baseline_data):
                configured_data = optimized_project(baseline_data)
            else:
                baseline_data, configured_data = primary_route_baseline(baseline_data), baseline_data
        elif not isinstance(configured_data, dict):
            raise InvalidProjectError("'configured' must be an object")

        baseline = _pathway_config(baseline_data, BASELINE_FALLBACK)
        configured = _pathway_config(configured_data, CONFIGURED_FALLBACK)

        baseline_result = _pathway_result(baseline_data, baseline, body.get('baselineResult'))
        configured_result = _pathway_result(configured_data, configured, body.get('configuredResult'))

        costs = calculate_pathway_costs(
            baseline, configured, baseline_result, configured_result,
            CostFactors.from_dict(body.get('costFactors')),
            body.get('productionVolume'),
        )

        return jsonify({
            'costs': costs.to_dict(),
            'efficiency': get_cost_efficiency_rating(costs.costPerKgCO2eSaved),
            'breakdown': get_cost_breakdown(costs),
            'deltas': compare_results(baseline_result, configured_result),
            'display': {
                'totalAdditionalCost': format_cost_display(costs.totalAdditionalCost),
                'costPerKgCO2eSaved': format_cost_display(costs.costPerKgCO2eSaved),
                'costPerTonneCO2eSaved': format_cost_display(costs.costPerTonneCO2eSaved),
            },
            'pathway': {
                'baseline': {**baseline_data, 'results': baseline_result.to_dict()},
                'configured': {**configured_data, 'results': configured_result.to_dict()},
            },
            'status': 'success',
        })

    except (LCIDataMissingError, ReferenceDataError) as e:
        logger.error("Pathway cost calculation failed: %s", e)
        return error_response(str(e), 500)
    except ValidationError as e:
        return error_response(f"Invalid pathway data: {e}", 400)
    except (InvalidProjectError, KeyError, TypeError, ValueError) as e:
        return error_response(f"Invalid pathway data: {e}", 400)


@app.route('/api/health', methods=['GET'])
def health_check():
    """Health check endpoint"""
    orchestrator = get_orchestrator()
    return jsonify({
        'status': 'healthy',
        'materials': orchestrator.engine.lci_data.materials,
        'model': orchestrator.models.linear_model.model_name,
    })


@app.route('/api/reference', methods=['GET'])
def reference_data():
    """Accepted categorical values and the defaults applied to quick-compare inputs"""
    orchestrator = get_orchestrator()
    return jsonify({
        'materials': list(MATERIALS),
        'regions': list(REGIONS),
        'product_types': orchestrator.engine.modifiers.product_types,
        'tree_features': orchestrator.models.recycling_tree.feature_names,
        'quick_compare_fields': QuickCompareParams.wire_keys(),
    })


if __name__ == '__main__':
    lca_settings.configure_logging()
    logger.info("Loading reference data and models...")
    get_orchestrator()
    logger.info("Starting Flask server on port %d", lca_settings.API_PORT)
    app.run(debug=lca_settings.DEBUG, port=lca_settings.API_PORT)
