import pytest
from pydantic import ValidationError

from imputation import (
    CUSTOM_PROJECT, LINEAR_METHOD, QUICK_COMPARE, TREE_METHOD, ImputationRecord,
    confidence_band, detect_mode,
)
from project_parameters import InvalidProjectError, PROJECT_DEFAULTS, ProjectParameters, QuickCompareParams


def test_detect_mode(quick_compare_input, custom_project_input):
    assert detect_mode(quick_compare_input) == QUICK_COMPARE
    assert detect_mode(custom_project_input) == CUSTOM_PROJECT


@pytest.mark.parametrize("raw", [None, {}, {"name": "no parameters"}, ["recycledContent"]])
def test_detect_mode_rejects_unknown_shapes(raw):
    with pytest.raises(InvalidProjectError):
        detect_mode(raw)


def test_quick_compare_records_linear_model(orchestrator, quick_compare_input):
    outcome = orchestrator.impute_and_calculate(quick_compare_input)

    assert outcome.imputation_meta == [
        ImputationRecord("totalEnergy", LINEAR_METHOD, 0.85, "lr_processing_energy_v1"),
    ]
    assert outcome.enriched_params["energyConsumption"] == 15.2
    assert outcome.enriched_params["wasteGeneration"] == 0.15
    assert outcome.result.totalEnergy == pytest.approx(22.5)


def test_quick_compare_requires_core_fields(orchestrator):
    with pytest.raises(ValidationError, match="gridEmissions"):
        orchestrator.impute_and_calculate({"recycledContent": 20, "transportDistance": 10, "recyclingRate": 5})


def test_custom_project_imputes_eol_rate(orchestrator, custom_project_input):
    custom_project_input["end_of_life_recycling_rate"] = None

    outcome = orchestrator.impute_and_calculate(custom_project_input)

    assert outcome.enriched_params["end_of_life_recycling_rate"] == 76.0
    assert outcome.imputation_meta == [
        ImputationRecord("end_of_life_recycling_rate", TREE_METHOD, 0.75),
    ]


def test_custom_project_keeps_supplied_eol_rate(orchestrator, custom_project_input):
    outcome = orchestrator.impute_and_calculate(custom_project_input)

    assert outcome.enriched_params["end_of_life_recycling_rate"] == 70
    assert outcome.imputation_meta == []


def test_defaults_fill_remaining_fields_without_records(orchestrator):
    outcome = orchestrator.impute_and_calculate({
        "material": "Copper", "product_type": "Bicycle Frame", "region": "Global", "mass_kg": 1,
    })
    params = outcome.enriched_params

    assert params["recycledContent"] == PROJECT_DEFAULTS["recycled_content"]
    assert params["gridEmissions_gCO2_per_kWh"] == PROJECT_DEFAULTS["grid_emissions"]
    assert params["transportDistance_km"] == PROJECT_DEFAULTS["transport_distance"]
    assert params["smeltingEnergy"] == PROJECT_DEFAULTS["smelting_energy"]
    assert params["end_of_life_recycling_rate"] == 45.0
    assert [r.field for r in outcome.imputation_meta] == ["end_of_life_recycling_rate"]


def test_unresolvable_tree_prediction_falls_back_to_default(orchestrator, monkeypatch, custom_project_input):
    monkeypatch.setattr(orchestrator.models.recycling_tree, "feature_names", [])
    custom_project_input["end_of_life_recycling_rate"] = None

    outcome = orchestrator.impute_and_calculate(custom_project_input)

    assert outcome.imputation_meta == []
    assert outcome.enriched_params["end_of_life_recycling_rate"] == PROJECT_DEFAULTS["end_of_life_recycling_rate"]


def test_imputation_is_deterministic(orchestrator, custom_project_input):
    custom_project_input["end_of_life_recycling_rate"] = None

    first = orchestrator.impute_and_calculate(dict(custom_project_input))
    second = orchestrator.impute_and_calculate(dict(custom_project_input))

    assert first == second


def test_outcome_serialises_like_the_web_client_expects(orchestrator, quick_compare_input):
    payload = orchestrator.impute_and_calculate(quick_compare_input).to_dict()

    assert payload["project_imputed"]["recycledContent"] == 60
    assert payload["project_imputed"]["results"]["circularityScore"] == pytest.approx(64.0)
    assert payload["imputation_meta"][0]["source"] == "lr_processing_energy_v1"


def test_project_parameters_reject_unsupported_material():
    with pytest.raises(ValidationError, match="material"):
        ProjectParameters.from_dict({"material": "Steel", "mass_kg": 1})


def test_project_parameters_require_mass():
    with pytest.raises(ValidationError, match="mass_kg"):
        ProjectParameters.from_dict({"material": "Copper"})


def test_record_without_source_omits_key():
    assert ImputationRecord("x", TREE_METHOD, 0.75).to_dict() == {
        "field": "x", "method": TREE_METHOD, "confidence": 0.75,
    }


@pytest.mark.parametrize("confidence, band", [
    (0.85, "high"), (0.75, "medium"), (0.4, "low"), (80, "high"), (60, "medium"), (59, "low"),
])
def test_confidence_band(confidence, band):
    assert confidence_band(confidence) == band


def test_quick_compare_echoes_unknown_keys(orchestrator, quick_compare_input):
    quick_compare_input["scenarioLabel"] = "Plant B"
    quick_compare_input["waterUsage"] = None

    params = orchestrator.impute_and_calculate(quick_compare_input).enriched_params

    assert params["scenarioLabel"] == "Plant B"
    assert params["waterUsage"] == 2.3
    assert params["recycledContent"] == 60


def test_custom_project_echoes_unknown_keys(orchestrator, custom_project_input):
    custom_project_input["id"] = "proj-42"

    params = orchestrator.impute_and_calculate(custom_project_input).enriched_params

    assert params["id"] == "proj-42"
    assert params["name"] == "EU Beverage Cans"


def test_quick_compare_null_optionals_take_defaults():
    params = QuickCompareParams.from_dict({
        "recycledContent": 20, "gridEmissions": 400, "transportDistance": 100, "recyclingRate": 50,
        "energyConsumption": None, "smeltingEnergy": 9.1,
    })

    assert params.energy_consumption == 15.2
    assert params.smelting_energy == 9.1
    assert params.to_dict()["wasteGeneration"] == 0.15


def test_quick_compare_rejects_non_numeric_values():
    with pytest.raises(ValidationError, match="recycledContent"):
        QuickCompareParams.from_dict({
            "recycledContent": "lots", "gridEmissions": 400, "transportDistance": 100, "recyclingRate": 50,
        })


def test_project_parameters_null_metadata_takes_defaults():
    project = ProjectParameters.from_dict({"material": "Copper", "mass_kg": 3, "region": None, "name": None})

    assert project.region == "Global"
    assert project.name == ""
    assert project.resolve().recycled_content == PROJECT_DEFAULTS["recycled_content"]
