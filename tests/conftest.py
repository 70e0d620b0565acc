"""
Pytest Configuration and Fixtures

Shared fixtures for pain safety service tests.
"""
import pytest
from pathlib import Path
import sys

# Add package root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from pain_safety.core.regimen import MedicationEntry, PatientContext, Route


@pytest.fixture
def oxycodone_q6h() -> MedicationEntry:
    """Oxycodone 5 mg four times a day (30 MME/day)."""
    return MedicationEntry(name="oxycodone", route=Route.ORAL,
                           dose_mg_per_administration=5, administrations_per_day=4)


@pytest.fixture
def fentanyl_patch() -> MedicationEntry:
    """Fentanyl 25 mcg/hr patch (60 MME/day)."""
    return MedicationEntry(name="fentanyl", route=Route.TRANSDERMAL,
                           patch_strength_mcg_per_hr=25)


@pytest.fixture
def high_risk_regimen() -> list:
    """Opioid + benzodiazepine + gabapentinoid."""
    return [
        MedicationEntry(name="oxycodone", dose_mg_per_administration=10, administrations_per_day=4),
        MedicationEntry(name="lorazepam", dose_mg_per_administration=1, administrations_per_day=2),
        MedicationEntry(name="gabapentin", dose_mg_per_administration=300, administrations_per_day=3),
    ]


@pytest.fixture
def empty_patient() -> PatientContext:
    return PatientContext()


@pytest.fixture
def reports_dir(tmp_path) -> Path:
    """Temporary report output directory."""
    out = tmp_path / "reports"
    out.mkdir()
    return out
