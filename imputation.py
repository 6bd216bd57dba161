# imputation.py
"""Fill missing project parameters with the pre-trained models, then run the LCA."""
import logging
from dataclasses import dataclass
from typing import List, NamedTuple, Optional

from imputation_models import ImputationModels
from lca_calculation import LcaResult, MetalLCA, QUICK_COMPARE_MATERIAL, to_fixed
from lci_data import LCIDataStore, ProductModifierTable
from project_parameters import InvalidProjectError, ProjectParameters, QuickCompareParams

logger = logging.getLogger(__name__)

LINEAR_METHOD = "AI (Linear Regression)"
TREE_METHOD = "AI (Decision Tree)"

# Fixed display confidences; not derived from model error
LINEAR_CONFIDENCE = 0.85
TREE_CONFIDENCE = 0.75

QUICK_COMPARE = 'quick_compare'
CUSTOM_PROJECT = 'custom_project'


def confidence_band(confidence):
    """'high' / 'medium' / 'low' for a 0-1 or 0-100 confidence."""
    percent = confidence * 100 if confidence <= 1 else confidence
    if percent >= 80:
        return 'high'
    if percent >= 60:
        return 'medium'
    return 'low'


@dataclass(frozen=True)
class ImputationRecord:
    field: str
    method: str
    confidence: float
    source: Optional[str] = None

    def to_dict(self):
        record = {'field': self.field, 'method': self.method, 'confidence': self.confidence}
        if self.source is not None:
            record['source'] = self.source
        return record


class ImputationOutcome(NamedTuple):
    enriched_params: dict
    result: LcaResult
    imputation_meta: List[ImputationRecord]

    def to_dict(self):
        return {
            'project_imputed': {**self.enriched_params, 'results': self.result.to_dict()},
            'imputation_meta': [record.to_dict() for record in self.imputation_meta],
        }


def detect_mode(raw):
    if not isinstance(raw, dict):
        raise InvalidProjectError("Invalid project data format.")
    if raw.get('material') is not None:
        return CUSTOM_PROJECT
    if 'recycledContent' in raw:
        return QUICK_COMPARE
    raise InvalidProjectError("Invalid project data format.")


class ImputationOrchestrator:
    def __init__(self, engine: MetalLCA, models: ImputationModels):
        self.engine = engine
        self.models = models

    @classmethod
    def load(cls, lci_file=None, modifiers_file=None, models_dir=None):
        engine = MetalLCA(LCIDataStore.from_csv(lci_file), ProductModifierTable.from_csv(modifiers_file))
        return cls(engine, ImputationModels.load(models_dir))

    def impute_quick_compare(self, raw):
        params = QuickCompareParams.from_dict(raw)
        linear_model = self.models.linear_model
        predicted_energy = linear_model.predict(QUICK_COMPARE_MATERIAL, params.recycled_content)
        logger.info("Predicted processing energy %.3f kWh/kg at %.1f%% recycled content",
                    predicted_energy, params.recycled_content)
        records = [ImputationRecord('totalEnergy', LINEAR_METHOD, LINEAR_CONFIDENCE, linear_model.model_name)]
        return params, predicted_energy, records

    def impute_custom_project(self, raw):
        project = ProjectParameters.from_dict(raw)
        records = []

        if project.end_of_life_recycling_rate is None:
            prediction = self.models.recycling_tree.predict_project(
                project.material, project.product_type, project.region)
            if prediction is not None:
                project.end_of_life_recycling_rate = to_fixed(prediction * 100, 1)
                records.append(ImputationRecord('end_of_life_recycling_rate', TREE_METHOD, TREE_CONFIDENCE))
                logger.info("Imputed end-of-life recycling rate %.1f%% for %s / %s / %s",
                            project.end_of_life_recycling_rate, project.material,
                            project.product_type, project.region)

        missing = project.missing_fields()
        if missing:
            logger.debug("Using default values for %s", missing)
        return project.with_defaults(), records

    def impute_and_calculate(self, raw) -> ImputationOutcome:
        mode = detect_mode(raw)
        if mode == QUICK_COMPARE:
            params, predicted_energy, records = self.impute_quick_compare(raw)
            result = self.engine.calculate_quick_compare(params, predicted_energy)
            return ImputationOutcome({**raw, **params.to_dict()}, result, records)

        project, records = self.impute_custom_project(raw)
        result = self.engine.calculate_custom_project(project.resolve())
        return ImputationOutcome({**raw, **project.to_dict()}, result, records)


_orchestrator = None


def get_orchestrator():
    """Load the reference data and models on first use."""
    global _orchestrator
    if _orchestrator is None:
        _orchestrator = ImputationOrchestrator.load()
    return _orchestrator


def impute_and_calculate(raw_params) -> ImputationOutcome:
    return get_orchestrator().impute_and_calculate(raw_params)
