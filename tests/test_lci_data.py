import pytest

from lci_data import (
    LCIDataMissingError, LCIDataStore, LCIProcess, ProductModifier, ProductModifierTable,
    ReferenceDataError,
)


def test_shipped_store_has_both_routes_for_every_material(engine):
    store = engine.lci_data

    assert store.materials == ["Aluminium", "Copper"]
    for material in store.materials:
        primary, recycled = store.get_process_pair(material)
        assert primary.is_primary and not primary.is_recycled
        assert recycled.is_recycled and not recycled.is_primary


def test_aluminium_reference_values(engine):
    primary, recycled = engine.lci_data.get_process_pair("Aluminium")

    assert primary.process_id == "AL_INGOT_PRIMARY_ELCD_V1"
    assert primary.gCO2_per_kg == 8600
    assert recycled.process_id == "AL_INGOT_RECYCLED_ELCD_V1"
    assert recycled.energy_kWh_per_kg == pytest.approx(0.8)


def test_missing_recycled_record_is_fatal():
    store = LCIDataStore({
        "Copper": {"CU_CATHODE_PRIMARY_V1": LCIProcess("CU_CATHODE_PRIMARY_V1", 4100, 150, 9.5)},
    })

    with pytest.raises(LCIDataMissingError, match="Copper LCI data missing"):
        store.get_process_pair("Copper")


def test_unknown_material_is_fatal(engine):
    with pytest.raises(LCIDataMissingError) as exc_info:
        engine.lci_data.get_process_pair("Steel")
    assert exc_info.value.material == "Steel"


def test_store_from_csv(tmp_path):
    csv_file = tmp_path / "lci.csv"
    csv_file.write_text(
        "material,process_id,gCO2_per_kg,transport_gCO2_per_kg,energy_kWh_per_kg\n"
        "Aluminium,AL_INGOT_PRIMARY_ELCD_V1,1000,10,1.5\n"
        "Aluminium,AL_INGOT_RECYCLED_ELCD_V1,100,5,0.5\n"
    )

    store = LCIDataStore.from_csv(csv_file)

    primary, recycled = store.get_process_pair("Aluminium")
    assert primary.gCO2_per_kg == 1000
    assert recycled.transport_gCO2_per_kg == 5


def test_store_rejects_csv_with_missing_columns(tmp_path):
    csv_file = tmp_path / "lci.csv"
    csv_file.write_text("material,process_id\nAluminium,AL_INGOT_PRIMARY_ELCD_V1\n")

    with pytest.raises(ReferenceDataError, match="missing columns"):
        LCIDataStore.from_csv(csv_file)


def test_modifier_lookup_and_default_fallback(engine):
    modifiers = engine.modifiers

    assert modifiers.lookup("Beverage Can") == ProductModifier(1.20, 1.05)
    assert modifiers.lookup("Bicycle Frame") is None
    assert modifiers.get("Bicycle Frame") == ProductModifier(1.20, 1.10)
    assert "default" not in modifiers.product_types
    assert "Electronics (PCB)" in modifiers.product_types


def test_modifier_table_requires_default_entry():
    with pytest.raises(ReferenceDataError):
        ProductModifierTable({"Cookware": ProductModifier(1.25, 1.02)})
