# lci_data.py
"""
Static life-cycle inventory (LCI) reference data and product-type modifiers.

Both tables are read once from CSV at start-up and are read-only afterwards.
Every supported material carries exactly one primary-route and one
recycled-route process record; a material without both cannot be assessed.
"""
import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple

import pandas as pd

import lca_settings

logger = logging.getLogger(__name__)

# Process records used for each supported material: (primary, recycled)
PROCESS_IDS = {
    'Aluminium': ('AL_INGOT_PRIMARY_ELCD_V1', 'AL_INGOT_RECYCLED_ELCD_V1'),
    'Copper': ('CU_CATHODE_PRIMARY_V1', 'CU_CATHODE_RECYCLED_V1'),
}

DEFAULT_PRODUCT_KEY = 'default'

LCI_COLUMNS = ['material', 'process_id', 'gCO2_per_kg', 'transport_gCO2_per_kg', 'energy_kWh_per_kg']
MODIFIER_COLUMNS = ['product_type', 'manufacturingEnergyFactor', 'wasteFactor']


class LCIDataMissingError(LookupError):
    """Core LCI data for a material is absent. Not recoverable."""

    def __init__(self, material):
        super().__init__(f"{material} LCI data missing")
        self.material = material


class ReferenceDataError(ValueError):
    """A reference table or model artifact is malformed."""


@dataclass(frozen=True)
class LCIProcess:
    process_id: str
    gCO2_per_kg: float
    transport_gCO2_per_kg: float
    energy_kWh_per_kg: float

    @property
    def is_primary(self):
        return '_PRIMARY_' in self.process_id

    @property
    def is_recycled(self):
        return '_RECYCLED_' in self.process_id


@dataclass(frozen=True)
class ProductModifier:
    manufacturingEnergyFactor: float
    wasteFactor: float


def _check_columns(df, expected, path):
    missing = [c for c in expected if c not in df.columns]
    if missing:
        raise ReferenceDataError(f"'{path}' is missing columns: {missing}")


class LCIDataStore:
    """Per-material process records, keyed by material then process id."""

    def __init__(self, processes: Dict[str, Dict[str, LCIProcess]]):
        self._processes = {material: dict(records) for material, records in processes.items()}

    @classmethod
    def from_csv(cls, csv_file=None):
        csv_file = csv_file or lca_settings.LCI_PROCESSES_FILE
        df = pd.read_csv(csv_file)
        _check_columns(df, LCI_COLUMNS, csv_file)

        processes = {}
        for row in df.itertuples(index=False):
            record = LCIProcess(
                process_id=str(row.process_id),
                gCO2_per_kg=float(row.gCO2_per_kg),
                transport_gCO2_per_kg=float(row.transport_gCO2_per_kg),
                energy_kWh_per_kg=float(row.energy_kWh_per_kg),
            )
            processes.setdefault(str(row.material), {})[record.process_id] = record

        logger.info("Loaded %d LCI process records for %d materials from %s",
                    len(df), len(processes), csv_file)
        return cls(processes)

    @property
    def materials(self):
        return sorted(self._processes)

    def find_process(self, material, process_id) -> Optional[LCIProcess]:
        return self._processes.get(material, {}).get(process_id)

    def get_process_pair(self, material) -> Tuple[LCIProcess, LCIProcess]:
        """Return the (primary, recycled) records for a material or fail."""
        primary_id, recycled_id = PROCESS_IDS.get(material, (None, None))
        primary = self.find_process(material, primary_id)
        recycled = self.find_process(material, recycled_id)
        if primary is None or recycled is None:
            logger.error("Core LCI data for %s is missing (need %s and %s)",
                         material, primary_id, recycled_id)
            raise LCIDataMissingError(material)
        return primary, recycled


class ProductModifierTable:
    """Manufacturing-energy and waste multipliers keyed by product type."""

    def __init__(self, modifiers: Dict[str, ProductModifier]):
        if DEFAULT_PRODUCT_KEY not in modifiers:
            raise ReferenceDataError("Product modifier table has no 'default' entry")
        self._modifiers = dict(modifiers)

    @classmethod
    def from_csv(cls, csv_file=None):
        csv_file = csv_file or lca_settings.PRODUCT_MODIFIERS_FILE
        df = pd.read_csv(csv_file)
        _check_columns(df, MODIFIER_COLUMNS, csv_file)

        modifiers = {
            str(row.product_type): ProductModifier(
                manufacturingEnergyFactor=float(row.manufacturingEnergyFactor),
                wasteFactor=float(row.wasteFactor),
            )
            for row in df.itertuples(index=False)
        }
        logger.info("Loaded %d product modifiers from %s", len(modifiers), csv_file)
        return cls(modifiers)

    @property
    def product_types(self):
        return sorted(k for k in self._modifiers if k != DEFAULT_PRODUCT_KEY)

    def lookup(self, product_type) -> Optional[ProductModifier]:
        return self._modifiers.get(product_type)

    def get(self, product_type) -> ProductModifier:
        modifier = self.lookup(product_type)
        if modifier is None:
            logger.debug("No modifier for product type %r, using default", product_type)
            return self._modifiers[DEFAULT_PRODUCT_KEY]
        return modifier
