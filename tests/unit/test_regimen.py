"""
Unit Tests for regimen types and drug-class patterns.
"""
import pytest

from pain_safety.core.regimen import Cyp2d6Phenotype, MedicationEntry, PatientContext, Route
from pain_safety.core.regimen import drug_classes as dc
from pain_safety.utils.exceptions import MedicationInputError


class TestRoute:

    def test_parse_case_insensitive(self):
        assert Route.parse("Transdermal") == Route.TRANSDERMAL
        assert Route.parse(" IV ") == Route.IV

    def test_blank_defaults_to_oral(self):
        assert Route.parse(None) == Route.ORAL
        assert Route.parse("") == Route.ORAL

    def test_unknown_route_raises(self):
        with pytest.raises(MedicationInputError) as exc_info:
            Route.parse("intranasal")
        assert exc_info.value.status_code == 400
        assert exc_info.value.details["field"] == "route"


class TestMedicationEntry:

    def test_normalises_fields(self):
        entry = MedicationEntry(name="  Oxycodone ", route="ORAL", frequency=" q6h ")
        assert entry.name == "Oxycodone"
        assert entry.normalized_name == "oxycodone"
        assert entry.route == Route.ORAL
        assert entry.frequency == "q6h"

    @pytest.mark.parametrize("field", [
        "dose_mg_per_administration", "administrations_per_day", "patch_strength_mcg_per_hr",
    ])
    def test_negative_values_rejected(self, field):
        with pytest.raises(MedicationInputError) as exc_info:
            MedicationEntry(name="morphine", **{field: -1})
        assert exc_info.value.field == field
        assert exc_info.value.to_dict()["error"] == "MEDICATION_INPUT_ERROR"

    def test_to_dict(self):
        data = MedicationEntry(name="fentanyl", route=Route.TRANSDERMAL,
                               patch_strength_mcg_per_hr=12).to_dict()
        assert data["route"] == "transdermal"
        assert data["patch_strength_mcg_per_hr"] == 12


class TestCyp2d6Phenotype:

    @pytest.mark.parametrize("text,expected", [
        ("PM", Cyp2d6Phenotype.POOR),
        ("Poor Metabolizer", Cyp2d6Phenotype.POOR),
        ("IM", Cyp2d6Phenotype.INTERMEDIATE),
        ("Extensive", Cyp2d6Phenotype.NORMAL),
        ("Ultrarapid Metabolizer", Cyp2d6Phenotype.ULTRARAPID),
        ("rapid", Cyp2d6Phenotype.RAPID),
        ("", None),
        ("not tested", None),
    ])
    def test_parse(self, text, expected):
        assert Cyp2d6Phenotype.parse(text) == expected

    def test_reduces_activation(self):
        assert Cyp2d6Phenotype.POOR.reduces_activation
        assert Cyp2d6Phenotype.INTERMEDIATE.reduces_activation
        assert not Cyp2d6Phenotype.NORMAL.reduces_activation

    def test_patient_context_parses_phenotype(self):
        assert PatientContext(cyp2d6_phenotype="pm").cyp2d6_phenotype == Cyp2d6Phenotype.POOR


class TestDrugClasses:

    def test_members_preserve_order(self):
        names = ["Lorazepam 1 MG", "oxycodone", "Diazepam"]
        assert dc.members(dc.BENZODIAZEPINE, names) == ["Lorazepam 1 MG", "Diazepam"]

    def test_blank_name_not_member(self):
        assert not dc.is_member(dc.OPIOID, "")

    def test_buprenorphine_is_opioid(self):
        assert dc.is_member(dc.OPIOID, "buprenorphine/naloxone")
