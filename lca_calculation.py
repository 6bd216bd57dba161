# lca_calculation.py
"""
Simplified cradle-to-gate LCA for aluminium and copper products.

Global Warming Potential (GWP) is built from four contributions, all in
g CO2eq before the final conversion to kg:

* material production - primary/recycled LCI emissions blended by recycled
  content, plus the grid share of smelting energy
* transport - blended LCI transport emissions scaled to the distance
  (the LCI figures are quoted for 500 km)
* grid energy - process energy times grid intensity
* environmental - water use and waste generation proxies

A 0-100 circularity score is derived from the same parameters.

Disclaimer: the reference data shipped with this project is for
demonstration purposes and is not a validated LCI database.
"""
import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from lci_data import LCIDataStore, ProductModifierTable
from project_parameters import QuickCompareParams, ResolvedProject

logger = logging.getLogger(__name__)

QUICK_COMPARE_MATERIAL = 'Aluminium'

REFERENCE_TRANSPORT_KM = 500.0
SMELTING_GRID_SHARE = 0.5
WATER_GCO2_PER_L = 50.0      # g CO2eq per L/kg of water use
WASTE_GCO2_PER_KG = 200.0    # g CO2eq per kg/kg of waste generated
BASELINE_SUSTAINABILITY = 0.95


class GwpBreakdown(BaseModel):
    model_config = ConfigDict(frozen=True)

    materialProduction: float = 0.0
    transport: float = 0.0
    gridEnergy: float = 0.0
    environmental: Optional[float] = None

    def to_dict(self):
        return self.model_dump(exclude_none=True)


class LcaResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    totalGwp: float
    gwpBreakdown: GwpBreakdown = Field(default_factory=GwpBreakdown)
    totalEnergy: float = 0.0
    circularityScore: float = 0.0

    def to_dict(self):
        return self.model_dump(exclude_none=True)

    @classmethod
    def from_dict(cls, data):
        return cls.model_validate(data)


def to_fixed(value, places):
    """Round half away from zero on the exact binary value, like JS ``toFixed``."""
    quantum = Decimal(1).scaleb(-places)
    return float(Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def _blend(primary_value, recycled_value, recycled_ratio):
    return (1 - recycled_ratio) * primary_value + recycled_ratio * recycled_value


def circularity_score(recycled_ratio, eol_fraction, water_usage, waste_generation, energy_consumption,
                      waste_factor=None):
    """Weighted circularity index on a 0-100 scale (unrounded, unclamped).

    When ``waste_factor`` is given the end-of-life term is divided by it.
    """
    eol_term = 0.25 * eol_fraction
    if waste_factor is not None:
        eol_term = eol_term / waste_factor
    waste_efficiency = max(0.0, (1 - waste_generation) * 100) / 100
    water_efficiency = max(0.0, (10 - water_usage) / 10)
    energy_efficiency = max(0.0, (50 - energy_consumption) / 50)
    return 100 * (
        0.3 * recycled_ratio
        + eol_term
        + 0.15 * waste_efficiency
        + 0.15 * water_efficiency
        + 0.1 * energy_efficiency
        + 0.05 * BASELINE_SUSTAINABILITY
    )


def _build_result(material_gwp, transport_gwp, grid_gwp, water_impact, waste_impact,
                  total_energy, score):
    total_gwp = (material_gwp + transport_gwp + grid_gwp + water_impact + waste_impact) / 1000
    return LcaResult(
        totalGwp=to_fixed(total_gwp, 3),
        gwpBreakdown=GwpBreakdown(
            materialProduction=to_fixed(material_gwp / 1000, 3),
            transport=to_fixed(transport_gwp / 1000, 3),
            gridEnergy=to_fixed(grid_gwp / 1000, 3),
            environmental=to_fixed((water_impact + waste_impact) / 1000, 3),
        ),
        totalEnergy=to_fixed(total_energy, 3),
        circularityScore=to_fixed(score, 1),
    )


class MetalLCA:
    """
    Calculation engine shared by the quick-compare and custom-project modes.

    Holds read-only references to the LCI store and product modifiers; it
    keeps no per-request state, so one instance can serve every request.
    """

    def __init__(self, lci_data: LCIDataStore, modifiers: ProductModifierTable):
        self.lci_data = lci_data
        self.modifiers = modifiers

    def calculate_quick_compare(self, params: QuickCompareParams, predicted_energy) -> LcaResult:
        """Per-kg aluminium LCA; ``predicted_energy`` comes from the linear model."""
        primary, recycled = self.lci_data.get_process_pair(QUICK_COMPARE_MATERIAL)
        recycled_ratio = params.recycled_content / 100

        material_gwp = (_blend(primary.gCO2_per_kg, recycled.gCO2_per_kg, recycled_ratio)
                        + params.smelting_energy * params.grid_emissions * SMELTING_GRID_SHARE)
        transport_gwp = (_blend(primary.transport_gCO2_per_kg, recycled.transport_gCO2_per_kg, recycled_ratio)
                         * (params.transport_distance / REFERENCE_TRANSPORT_KM))

        total_energy = predicted_energy + params.energy_consumption
        grid_gwp = total_energy * params.grid_emissions

        water_impact = params.water_usage * WATER_GCO2_PER_L
        waste_impact = params.waste_generation * WASTE_GCO2_PER_KG

        score = circularity_score(
            recycled_ratio,
            params.recycling_rate / 100,
            params.water_usage,
            params.waste_generation,
            params.energy_consumption,
        )
        return _build_result(material_gwp, transport_gwp, grid_gwp, water_impact, waste_impact,
                             total_energy, min(100.0, score))

    def calculate_custom_project(self, project: ResolvedProject) -> LcaResult:
        """Mass-scaled LCA for a fully resolved custom project."""
        primary, recycled = self.lci_data.get_process_pair(project.material)
        modifier = self.modifiers.get(project.product_type)
        mass = project.mass_kg
        recycled_ratio = project.recycled_content / 100

        ingot_energy = _blend(primary.energy_kWh_per_kg, recycled.energy_kWh_per_kg, recycled_ratio)
        manufacturing_energy = ((ingot_energy + project.energy_consumption + project.smelting_energy)
                                * modifier.manufacturingEnergyFactor)

        material_gwp = (_blend(primary.gCO2_per_kg, recycled.gCO2_per_kg, recycled_ratio) * mass
                        + project.smelting_energy * project.grid_emissions * mass * SMELTING_GRID_SHARE)
        transport_gwp = (_blend(primary.transport_gCO2_per_kg, recycled.transport_gCO2_per_kg, recycled_ratio)
                         * (project.transport_distance / REFERENCE_TRANSPORT_KM) * mass)
        grid_gwp = manufacturing_energy * project.grid_emissions * mass

        water_impact = project.water_usage * WATER_GCO2_PER_L * mass
        waste_impact = project.waste_generation * WASTE_GCO2_PER_KG * mass

        # A less favourable product waste factor dilutes the EOL credit
        score = circularity_score(
            recycled_ratio,
            project.end_of_life_recycling_rate / 100,
            project.water_usage,
            project.waste_generation,
            project.energy_consumption,
            waste_factor=modifier.wasteFactor,
        )
        return _build_result(material_gwp, transport_gwp, grid_gwp, water_impact, waste_impact,
                             manufacturing_energy * mass, score)


def compare_results(original: LcaResult, comparison: LcaResult):
    """GWP and circularity deltas of ``comparison`` relative to ``original``."""
    gwp_delta = comparison.totalGwp - original.totalGwp
    gwp_delta_percent = (gwp_delta / original.totalGwp) * 100 if original.totalGwp != 0 else 0.0
    return {
        'gwp_delta': to_fixed(gwp_delta, 3),
        'gwp_delta_percent': to_fixed(gwp_delta_percent, 1),
        'circularity_score_delta': to_fixed(comparison.circularityScore - original.circularityScore, 1),
    }


def format_results(result: LcaResult):
    """Readable text summary of an LCA result."""
    total = result.totalGwp
    stages = result.gwpBreakdown.to_dict()
    lines = [
        "--- Life Cycle Assessment Results ---",
        "Impact Category: Global Warming Potential (GWP)",
        "",
    ]
    for stage, gwp in stages.items():
        label = ''.join(' ' + c if c.isupper() else c for c in stage).title()
        percentage = (gwp / total) * 100 if total > 0 else 0
        lines.append(f"{label:<22}: {gwp:12.3f} kg CO2eq ({percentage:.1f}%)")
    lines.append("-" * 48)
    lines.append(f"{'Total GWP':<22}: {total:12.3f} kg CO2eq")
    lines.append(f"{'Total Energy':<22}: {result.totalEnergy:12.3f} kWh")
    lines.append(f"{'Circularity Score':<22}: {result.circularityScore:12.1f} / 100")
    return "\n".join(lines)


if __name__ == '__main__':
    import lca_settings
    from imputation import impute_and_calculate

    lca_settings.configure_logging()

    # --- Example scenario: 250 kg of EU beverage cans, recycling rate unknown ---
    beverage_cans = {
        "name": "EU Beverage Can Line",
        "material": "Aluminium",
        "product_type": "Beverage Can",
        "region": "EU",
        "mass_kg": 250,
        "recycledContent": 55,
        "gridEmissions_gCO2_per_kWh": 300,
        "transportDistance_km": 800,
        "end_of_life_recycling_rate": None,
    }

    outcome = impute_and_calculate(beverage_cans)
    for record in outcome.imputation_meta:
        print(f"Imputed {record.field} via {record.method} (confidence {record.confidence:.0%})")
    print()
    print(format_results(outcome.result))
