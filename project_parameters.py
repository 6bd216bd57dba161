# project_parameters.py
"""
Request-side parameter records for the two calculation modes.

Wire format keys follow the web client (camelCase for the process
parameters, snake_case for the project metadata). Nullable fields are
resolved in a single pass before any arithmetic runs.
"""
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

MATERIALS = ('Aluminium', 'Copper')
REGIONS = ('EU', 'US', 'CN', 'Global')

Material = Literal['Aluminium', 'Copper']

# Fixed fallbacks for the quick-compare optional parameters
QUICK_COMPARE_DEFAULTS = {
    'energy_consumption': 15.2,
    'smelting_energy': 8.7,
    'water_usage': 2.3,
    'waste_generation': 0.15,
}

# Fallbacks for every nullable custom-project parameter
PROJECT_DEFAULTS = {
    'recycled_content': 10.0,
    'grid_emissions': 450.0,
    'transport_distance': 500.0,
    'end_of_life_recycling_rate': 60.0,
    'energy_consumption': 15.2,
    'smelting_energy': 8.7,
    'water_usage': 2.3,
    'waste_generation': 0.15,
}


class InvalidProjectError(ValueError):
    """The request body matches neither calculation mode."""


def _drop_nulls(data, keys):
    """Let explicit nulls on ``keys`` fall through to the field default."""
    if isinstance(data, dict):
        return {k: v for k, v in data.items() if not (k in keys and v is None)}
    return data


class QuickCompareParams(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    recycled_content: float = Field(..., alias='recycledContent')
    grid_emissions: float = Field(..., alias='gridEmissions')
    transport_distance: float = Field(..., alias='transportDistance')
    recycling_rate: float = Field(..., alias='recyclingRate')
    energy_consumption: float = Field(QUICK_COMPARE_DEFAULTS['energy_consumption'], alias='energyConsumption')
    smelting_energy: float = Field(QUICK_COMPARE_DEFAULTS['smelting_energy'], alias='smeltingEnergy')
    water_usage: float = Field(QUICK_COMPARE_DEFAULTS['water_usage'], alias='waterUsage')
    waste_generation: float = Field(QUICK_COMPARE_DEFAULTS['waste_generation'], alias='wasteGeneration')

    @model_validator(mode='before')
    @classmethod
    def _optional_nulls(cls, data):
        return _drop_nulls(data, ('energyConsumption', 'smeltingEnergy', 'waterUsage', 'wasteGeneration'))

    @classmethod
    def wire_keys(cls):
        return [f.alias for f in cls.model_fields.values()]

    @classmethod
    def from_dict(cls, data):
        return cls.model_validate(data)

    def to_dict(self):
        return self.model_dump(by_alias=True)


class ResolvedProject(BaseModel):
    """A custom project with every parameter populated."""
    model_config = ConfigDict(frozen=True)

    name: str = ''
    material: Material
    product_type: str
    region: str
    mass_kg: float
    recycled_content: float
    grid_emissions: float
    transport_distance: float
    end_of_life_recycling_rate: float
    energy_consumption: float
    smelting_energy: float
    water_usage: float
    waste_generation: float


class ProjectParameters(BaseModel):
    """A custom project as submitted, with nullable process parameters."""
    model_config = ConfigDict(populate_by_name=True)

    name: str = ''
    material: Material
    product_type: str = ''
    region: str = 'Global'
    mass_kg: float = Field(..., gt=0)
    recycled_content: Optional[float] = Field(None, alias='recycledContent')
    grid_emissions: Optional[float] = Field(None, alias='gridEmissions_gCO2_per_kWh')
    transport_distance: Optional[float] = Field(None, alias='transportDistance_km')
    end_of_life_recycling_rate: Optional[float] = None
    energy_consumption: Optional[float] = Field(None, alias='energyConsumption')
    smelting_energy: Optional[float] = Field(None, alias='smeltingEnergy')
    water_usage: Optional[float] = Field(None, alias='waterUsage')
    waste_generation: Optional[float] = Field(None, alias='wasteGeneration')

    @model_validator(mode='before')
    @classmethod
    def _metadata_nulls(cls, data):
        return _drop_nulls(data, ('name', 'product_type', 'region'))

    @classmethod
    def from_dict(cls, data):
        return cls.model_validate(data)

    def to_dict(self):
        return self.model_dump(by_alias=True)

    def missing_fields(self):
        return [attr for attr in PROJECT_DEFAULTS if getattr(self, attr) is None]

    def with_defaults(self):
        """Fill every remaining null from PROJECT_DEFAULTS."""
        return self.model_copy(update={attr: PROJECT_DEFAULTS[attr] for attr in self.missing_fields()})

    def resolve(self) -> ResolvedProject:
        return ResolvedProject(**self.with_defaults().model_dump())
