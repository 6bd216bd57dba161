import pytest

from imputation import ImputationOrchestrator


@pytest.fixture(scope="session")
def orchestrator():
    return ImputationOrchestrator.load()


@pytest.fixture(scope="session")
def engine(orchestrator):
    return orchestrator.engine


@pytest.fixture(scope="session")
def models(orchestrator):
    return orchestrator.models


@pytest.fixture
def client():
    from app import app

    app.config["TESTING"] = True
    with app.test_client() as client:
        yield client


@pytest.fixture
def quick_compare_input():
    return {
        "recycledContent": 60,
        "gridEmissions": 75,
        "transportDistance": 5000,
        "recyclingRate": 40,
    }


@pytest.fixture
def custom_project_input():
    return {
        "name": "EU Beverage Cans",
        "material": "Aluminium",
        "product_type": "Beverage Can",
        "region": "EU",
        "mass_kg": 2,
        "recycledContent": 50,
        "gridEmissions_gCO2_per_kWh": 300,
        "transportDistance_km": 1000,
        "end_of_life_recycling_rate": 70,
        "energyConsumption": None,
        "smeltingEnergy": None,
        "waterUsage": None,
        "wasteGeneration": None,
    }
