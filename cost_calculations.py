# cost_calculations.py
"""
Cost of moving from a baseline process configuration to an improved one,
and the resulting cost per kg of CO2eq saved.

All currency amounts are in Indian Rupees (Rs).
"""
import logging
from typing import Optional

import pandas as pd
from pydantic import BaseModel, ConfigDict

import lca_settings
from lca_calculation import LcaResult

logger = logging.getLogger(__name__)


class CostFactors(BaseModel):
    """Per-unit improvement costs, approximate industry figures in Rs."""
    model_config = ConfigDict(frozen=True)

    recycledContentPremium: float = 2.5       # per kg per % increase in recycled content
    gridTransitionCost: float = 0.003         # per kWh per g CO2/kWh reduction
    transportOptimization: float = 0.8        # per km reduction
    energyEfficiencyUpgrade: float = 15.0     # per kWh/kg reduction
    recyclingInfrastructure: float = 50.0     # per % increase in recycling rate
    waterTreatmentUpgrade: float = 25.0       # per L/kg reduction
    wasteReductionTechnology: float = 200.0   # per kg/kg waste reduction

    @classmethod
    def from_dict(cls, data):
        return cls.model_validate(data or {})


DEFAULT_COST_FACTORS = CostFactors()


class ProjectConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    recycledContent: float
    gridEmissions: float
    transportDistance: float
    recyclingRate: float
    energyConsumption: float
    smeltingEnergy: float
    waterUsage: float
    wasteGeneration: float

    @property
    def process_energy(self):
        return self.energyConsumption + self.smeltingEnergy

    @classmethod
    def from_dict(cls, data):
        return cls.model_validate(data)

    @classmethod
    def from_project(cls, project, fallback: 'ProjectConfig'):
        """Map a saved custom project onto a cost configuration.

        Parameters left null on the project take their value from ``fallback``.
        """
        keys = {
            'recycledContent': 'recycledContent',
            'gridEmissions': 'gridEmissions_gCO2_per_kWh',
            'transportDistance': 'transportDistance_km',
            'recyclingRate': 'end_of_life_recycling_rate',
            'energyConsumption': 'energyConsumption',
            'smeltingEnergy': 'smeltingEnergy',
            'waterUsage': 'waterUsage',
            'wasteGeneration': 'wasteGeneration',
        }
        values = {}
        for attr, key in keys.items():
            value = project.get(key)
            values[attr] = getattr(fallback, attr) if value is None else value
        return cls.model_validate(values)

    def to_dict(self):
        return self.model_dump()


# Fallbacks used when comparing two saved projects
BASELINE_FALLBACK = ProjectConfig(
    recycledContent=60, gridEmissions=450, transportDistance=500, recyclingRate=60,
    energyConsumption=15.2, smeltingEnergy=8.7, waterUsage=2.3, wasteGeneration=0.15,
)
CONFIGURED_FALLBACK = ProjectConfig(
    recycledContent=85, gridEmissions=250, transportDistance=500, recyclingRate=75,
    energyConsumption=12.2, smeltingEnergy=6.7, waterUsage=1.8, wasteGeneration=0.10,
)


def _value_or(project, key, default):
    value = project.get(key)
    return default if value is None else value


def optimized_project(project):
    """Improved copy of a saved project to compare it against.

    Stored results are dropped; each process parameter moves a fixed step
    towards best practice, capped or floored at a realistic limit.
    """
    comparison = {key: value for key, value in project.items() if key != 'results'}
    comparison['name'] = f"{_value_or(project, 'name', '')} (Optimized)"
    comparison['recycledContent'] = min(_value_or(project, 'recycledContent', 0) + 25, 95)
    comparison['gridEmissions_gCO2_per_kWh'] = max(_value_or(project, 'gridEmissions_gCO2_per_kWh', 500) - 200, 100)
    comparison['end_of_life_recycling_rate'] = min(_value_or(project, 'end_of_life_recycling_rate', 0) + 15, 95)
    comparison['energyConsumption'] = max(_value_or(project, 'energyConsumption', 15.2) - 3, 5)
    comparison['smeltingEnergy'] = max(_value_or(project, 'smeltingEnergy', 8.7) - 2, 3)
    comparison['waterUsage'] = max(_value_or(project, 'waterUsage', 2.3) - 0.5, 0.5)
    comparison['wasteGeneration'] = max(_value_or(project, 'wasteGeneration', 0.15) - 0.05, 0.05)
    return comparison


def primary_route_baseline(config):
    """The same quick-compare configuration made entirely from primary metal."""
    return {**config, 'recycledContent': 0}


class PathwayCosts(BaseModel):
    recycledContentCost: float = 0.0
    gridTransitionCost: float = 0.0
    transportOptimizationCost: float = 0.0
    energyEfficiencyCost: float = 0.0
    recyclingInfrastructureCost: float = 0.0
    waterTreatmentCost: float = 0.0
    wasteReductionCost: float = 0.0
    totalAdditionalCost: float = 0.0
    costPerKgCO2eSaved: float = 0.0
    costPerTonneCO2eSaved: float = 0.0

    def to_dict(self):
        return self.model_dump()


# (label, PathwayCosts attribute) in display order
COST_CATEGORIES = [
    ('Recycled Content Premium', 'recycledContentCost'),
    ('Grid Transition', 'gridTransitionCost'),
    ('Transport Optimization', 'transportOptimizationCost'),
    ('Energy Efficiency', 'energyEfficiencyCost'),
    ('Recycling Infrastructure', 'recyclingInfrastructureCost'),
    ('Water Treatment', 'waterTreatmentCost'),
    ('Waste Reduction', 'wasteReductionCost'),
]


def calculate_pathway_costs(baseline: ProjectConfig, configured: ProjectConfig,
                            baseline_result: Optional[LcaResult], configured_result: Optional[LcaResult],
                            cost_factors: Optional[CostFactors] = None,
                            production_volume: Optional[float] = None) -> PathwayCosts:
    """Additional cost of ``configured`` over ``baseline`` for a yearly volume (kg)."""
    factors = cost_factors or DEFAULT_COST_FACTORS
    volume = lca_settings.DEFAULT_PRODUCTION_VOLUME_KG if production_volume is None else production_volume
    costs = PathwayCosts()

    recycled_content_increase = max(0.0, configured.recycledContent - baseline.recycledContent)
    costs.recycledContentCost = recycled_content_increase * factors.recycledContentPremium * volume

    grid_emission_reduction = max(0.0, baseline.gridEmissions - configured.gridEmissions)
    costs.gridTransitionCost = (grid_emission_reduction * configured.process_energy
                                * factors.gridTransitionCost * volume)

    transport_reduction = max(0.0, baseline.transportDistance - configured.transportDistance)
    costs.transportOptimizationCost = transport_reduction * factors.transportOptimization * volume

    energy_reduction = max(0.0, baseline.process_energy - configured.process_energy)
    costs.energyEfficiencyCost = energy_reduction * factors.energyEfficiencyUpgrade * volume

    recycling_rate_increase = max(0.0, configured.recyclingRate - baseline.recyclingRate)
    costs.recyclingInfrastructureCost = recycling_rate_increase * factors.recyclingInfrastructure * volume

    water_reduction = max(0.0, baseline.waterUsage - configured.waterUsage)
    costs.waterTreatmentCost = water_reduction * factors.waterTreatmentUpgrade * volume

    waste_reduction = max(0.0, baseline.wasteGeneration - configured.wasteGeneration)
    costs.wasteReductionCost = waste_reduction * factors.wasteReductionTechnology * volume

    costs.totalAdditionalCost = sum(getattr(costs, attr) for _, attr in COST_CATEGORIES)

    if (baseline_result is not None and configured_result is not None
            and baseline_result.totalGwp > configured_result.totalGwp):
        co2e_saved = (baseline_result.totalGwp - configured_result.totalGwp) * volume
        if co2e_saved > 0:
            costs.costPerKgCO2eSaved = costs.totalAdditionalCost / co2e_saved
            costs.costPerTonneCO2eSaved = costs.costPerKgCO2eSaved * 1000
    else:
        logger.debug("No GWP saving between configurations; cost per CO2e saved left at 0")

    return costs


def format_cost_display(amount):
    """Rs amount scaled to crore / lakh / thousand."""
    if amount >= 10_000_000:
        return f"₹{amount / 10_000_000:.2f} Cr"
    if amount >= 100_000:
        return f"₹{amount / 100_000:.2f} L"
    if amount >= 1000:
        return f"₹{amount / 1000:.2f} K"
    return f"₹{amount:.2f}"


EFFICIENCY_RATINGS = [
    (500, 'Excellent', 'Highly cost-effective carbon reduction'),
    (1500, 'Good', 'Cost-effective carbon reduction'),
    (3000, 'Fair', 'Moderately cost-effective'),
]


def get_cost_efficiency_rating(cost_per_kg_co2e):
    for limit, rating, description in EFFICIENCY_RATINGS:
        if cost_per_kg_co2e <= limit:
            return {'rating': rating, 'description': description}
    return {'rating': 'Poor', 'description': 'High cost per unit carbon reduction'}


def get_cost_breakdown(costs: PathwayCosts):
    """Non-zero cost categories with their share of the total, largest first."""
    df = pd.DataFrame(
        [(label, getattr(costs, attr)) for label, attr in COST_CATEGORIES],
        columns=['category', 'amount'],
    )
    df = df[df['amount'] > 0].copy()
    total = costs.totalAdditionalCost
    df['percentage'] = df['amount'] / total * 100 if total > 0 else 0.0
    df = df.sort_values('amount', ascending=False, kind='stable')
    return [
        {'category': row.category, 'amount': float(row.amount), 'percentage': float(row.percentage)}
        for row in df.itertuples(index=False)
    ]
