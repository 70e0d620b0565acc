"""
Risk Layer

MME threshold flags, naloxone recommendation and the weighted opioid misuse
risk score.
"""
from .flags import (
    mme_risk_flags,
    mme_recommendations,
    should_offer_naloxone,
    safety_recommendations,
    NALOXONE_RECOMMENDATION,
)
from .misuse import (
    OpioidMisuseRiskAssessor,
    MisuseRiskAssessment,
    MisuseRiskLevel,
    RiskFactor,
    band_for_score,
)

__all__ = [
    "mme_risk_flags",
    "mme_recommendations",
    "should_offer_naloxone",
    "safety_recommendations",
    "NALOXONE_RECOMMENDATION",
    "OpioidMisuseRiskAssessor",
    "MisuseRiskAssessment",
    "MisuseRiskLevel",
    "RiskFactor",
    "band_for_score",
]
