"""
Regimen - Base Types

Data contracts for the medication list and patient covariates that every
calculator and rule module consumes. Instances are transient: they are built
per request and never persisted.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional

from pain_safety.utils.exceptions import MedicationInputError


class Route(str, Enum):
    """Route of administration."""
    ORAL        = "oral"
    TRANSDERMAL = "transdermal"
    SUBLINGUAL  = "sublingual"
    BUCCAL      = "buccal"
    IV          = "iv"
    IM          = "im"

    @classmethod
    def parse(cls, value: Any) -> "Route":
        """Accept an enum member or case-insensitive string; blank means oral."""
        if isinstance(value, Route):
            return value
        text = str(value or "").strip().lower()
        if not text:
            return cls.ORAL
        try:
            return cls(text)
        except ValueError:
            raise MedicationInputError(
                f"Unknown route '{value}'. Valid: {[r.value for r in cls]}",
                field="route",
            )


class Cyp2d6Phenotype(str, Enum):
    """CYP2D6 metabolizer phenotype (CPIC terms)."""
    POOR         = "poor"
    INTERMEDIATE = "intermediate"
    NORMAL       = "normal"
    RAPID        = "rapid"
    ULTRARAPID   = "ultrarapid"

    @classmethod
    def parse(cls, value: Any) -> Optional["Cyp2d6Phenotype"]:
        """
        Parse free-text lab phenotypes.

        "Poor Metabolizer", "PM", "intermediate", "IM", "extensive", "UM" ...
        Unrecognised text returns None rather than raising: phenotype is an
        optional covariate and an unreadable one is treated as unknown.
        """
        if value is None:
            return None
        if isinstance(value, Cyp2d6Phenotype):
            return value
        text = str(value).strip().lower()
        if not text:
            return None
        abbreviations = {
            "pm": cls.POOR,
            "im": cls.INTERMEDIATE,
            "nm": cls.NORMAL,
            "em": cls.NORMAL,
            "rm": cls.RAPID,
            "um": cls.ULTRARAPID,
        }
        if text in abbreviations:
            return abbreviations[text]
        # "ultrarapid" must be checked before "rapid"
        if "ultra" in text:
            return cls.ULTRARAPID
        if "poor" in text:
            return cls.POOR
        if "intermediate" in text:
            return cls.INTERMEDIATE
        if "rapid" in text:
            return cls.RAPID
        if "normal" in text or "extensive" in text:
            return cls.NORMAL
        return None

    @property
    def reduces_activation(self) -> bool:
        """PM/IM phenotypes cannot activate codeine/tramadol adequately."""
        return self in (Cyp2d6Phenotype.POOR, Cyp2d6Phenotype.INTERMEDIATE)


def _non_negative(value: Optional[float], name: str, field_name: str) -> Optional[float]:
    if value is None:
        return None
    number = float(value)
    if number < 0:
        raise MedicationInputError(
            f"{field_name} must not be negative (got {number})",
            medication=name or "unknown",
            field=field_name,
        )
    return number


@dataclass
class MedicationEntry:
    """
    One row of the medication list.

    Only `name` is required; a row that is still being edited may have no
    dose yet. Doses are mg per administration, except transdermal fentanyl
    which is described by its patch strength in mcg/hr.
    """
    name: str
    route: Route = Route.ORAL
    dose_mg_per_administration: Optional[float] = None
    administrations_per_day: Optional[float] = None
    patch_strength_mcg_per_hr: Optional[float] = None
    frequency: str = ""          # free-text sig, e.g. "q6h", "twice daily"
    rxcui: Optional[str] = None

    def __post_init__(self):
        self.name = (self.name or "").strip()
        self.route = Route.parse(self.route)
        self.frequency = (self.frequency or "").strip()
        self.dose_mg_per_administration = _non_negative(
            self.dose_mg_per_administration, self.name, "dose_mg_per_administration")
        self.administrations_per_day = _non_negative(
            self.administrations_per_day, self.name, "administrations_per_day")
        self.patch_strength_mcg_per_hr = _non_negative(
            self.patch_strength_mcg_per_hr, self.name, "patch_strength_mcg_per_hr")

    @property
    def normalized_name(self) -> str:
        return self.name.lower()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "route": self.route.value,
            "dose_mg_per_administration": self.dose_mg_per_administration,
            "administrations_per_day": self.administrations_per_day,
            "patch_strength_mcg_per_hr": self.patch_strength_mcg_per_hr,
            "frequency": self.frequency,
            "rxcui": self.rxcui,
        }


@dataclass
class PatientContext:
    """
    Patient covariates used by the safety rules and risk scoring.

    Attributes:
        age:                       Years.
        renal_clearance:           Creatinine clearance in mL/min.
        has_respiratory_disease:   COPD, asthma, other chronic lung disease.
        has_sleep_apnea:           Obstructive sleep apnea.
        is_pregnant:               Pregnancy.
        cyp2d6_phenotype:          Metabolizer status, if genotyped.
        has_liver_disease:         Hepatic impairment.
        has_opioid_use_disorder:   Current or past OUD.
        history_of_substance_abuse, has_depression_or_anxiety,
        has_chronic_pain, multiple_prescribers:
                                   Inputs to the misuse risk score.
    """
    age: Optional[float] = None
    renal_clearance: Optional[float] = None
    has_respiratory_disease: bool = False
    has_sleep_apnea: bool = False
    is_pregnant: bool = False
    cyp2d6_phenotype: Optional[Cyp2d6Phenotype] = None
    has_liver_disease: bool = False
    has_opioid_use_disorder: bool = False
    history_of_substance_abuse: bool = False
    has_depression_or_anxiety: bool = False
    has_chronic_pain: bool = False
    multiple_prescribers: bool = False

    def __post_init__(self):
        self.cyp2d6_phenotype = Cyp2d6Phenotype.parse(self.cyp2d6_phenotype)
