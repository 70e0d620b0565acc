"""
Opioid Misuse Risk Assessment

Weighted risk-factor score used on the opioid risk report. Each factor is a
yes/no observation with a fixed weight; the sum is banded into four levels,
each with a fixed set of prescribing recommendations.

Score bands:
    0-2   low
    3-5   moderate
    6-8   high
    9+    very_high
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

from pain_safety.core.regimen import drug_classes as dc
from pain_safety.core.regimen.base import Cyp2d6Phenotype, MedicationEntry, PatientContext
from pain_safety.utils import get_logger

logger = get_logger(__name__)


class MisuseRiskLevel(str, Enum):
    LOW       = "low"
    MODERATE  = "moderate"
    HIGH      = "high"
    VERY_HIGH = "very_high"


# ── Band upper bounds (inclusive) ────────────────────────────────────────────
LOW_MAX      = 2
MODERATE_MAX = 5
HIGH_MAX     = 8

_RECOMMENDATIONS = {
    MisuseRiskLevel.LOW: [
        "Standard opioid prescribing guidelines apply",
        "Monitor for signs of misuse at routine intervals",
    ],
    MisuseRiskLevel.MODERATE: [
        "Enhanced monitoring and shorter prescription intervals",
        "Consider non-opioid alternatives first",
        "Use prescription drug monitoring program (PDMP)",
    ],
    MisuseRiskLevel.HIGH: [
        "Opioids only after non-opioid options exhausted",
        "Mandatory PDMP checks and frequent monitoring",
        "Consider addiction medicine consultation",
        "Naloxone prescription recommended",
    ],
    MisuseRiskLevel.VERY_HIGH: [
        "Avoid opioids except in severe circumstances",
        "Immediate addiction medicine consultation",
        "Comprehensive substance abuse evaluation",
        "Naloxone prescription mandatory",
    ],
}


@dataclass
class RiskFactor:
    factor: str
    present: bool
    weight: int
    description: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "factor": self.factor,
            "present": self.present,
            "weight": self.weight,
            "description": self.description,
        }


@dataclass
class MisuseRiskAssessment:
    overall_risk: MisuseRiskLevel
    risk_score: int
    max_score: int
    risk_factors: List[RiskFactor] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    @property
    def present_factors(self) -> List[RiskFactor]:
        return [f for f in self.risk_factors if f.present]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "overall_risk": self.overall_risk.value,
            "risk_score": self.risk_score,
            "max_score": self.max_score,
            "risk_factors": [f.to_dict() for f in self.risk_factors],
            "recommendations": list(self.recommendations),
        }


def band_for_score(score: int) -> MisuseRiskLevel:
    if score <= LOW_MAX:
        return MisuseRiskLevel.LOW
    if score <= MODERATE_MAX:
        return MisuseRiskLevel.MODERATE
    if score <= HIGH_MAX:
        return MisuseRiskLevel.HIGH
    return MisuseRiskLevel.VERY_HIGH


class OpioidMisuseRiskAssessor:
    """Scores misuse risk from patient history and the current regimen."""

    def assess(
        self,
        patient: Optional[PatientContext] = None,
        medications: Iterable[MedicationEntry] = (),
    ) -> MisuseRiskAssessment:
        patient = patient or PatientContext()
        names = [m.name for m in medications if m.name]

        factors = [
            RiskFactor(
                "Age > 65 years",
                patient.age is not None and patient.age > 65,
                2,
                "Increased sensitivity to opioids and slower metabolism",
            ),
            RiskFactor(
                "History of substance abuse",
                patient.history_of_substance_abuse or patient.has_opioid_use_disorder,
                4,
                "Significantly increases risk of opioid misuse and addiction",
            ),
            RiskFactor(
                "Depression/Anxiety",
                patient.has_depression_or_anxiety,
                2,
                "Mental health conditions increase addiction vulnerability",
            ),
            RiskFactor(
                "Chronic pain condition",
                patient.has_chronic_pain,
                1,
                "Long-term opioid use increases dependency risk",
            ),
            RiskFactor(
                "CYP2D6 Poor Metabolizer",
                patient.cyp2d6_phenotype == Cyp2d6Phenotype.POOR,
                2,
                "Reduced efficacy of prodrug opioids may lead to dose escalation",
            ),
            RiskFactor(
                "Multiple prescribers",
                patient.multiple_prescribers,
                2,
                "Lack of coordination increases risk of overprescribing",
            ),
            RiskFactor(
                "Concurrent benzodiazepines",
                dc.any_member(dc.BENZODIAZEPINE, names),
                3,
                "Dangerous combination increasing overdose risk",
            ),
        ]

        score = sum(f.weight for f in factors if f.present)
        max_score = sum(f.weight for f in factors)
        level = band_for_score(score)
        logger.debug(f"OpioidMisuseRiskAssessor: score={score}/{max_score} → {level.value}")

        return MisuseRiskAssessment(
            overall_risk=level,
            risk_score=score,
            max_score=max_score,
            risk_factors=factors,
            recommendations=list(_RECOMMENDATIONS[level]),
        )
