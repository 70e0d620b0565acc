"""
MME and patient-context risk flags, plus the naloxone recommendation.
"""
from __future__ import annotations

from typing import Iterable, List, Optional

from pain_safety.core.mme.calculator import MmeResult, MME_CAUTION_THRESHOLD
from pain_safety.core.regimen import drug_classes as dc
from pain_safety.core.regimen.base import PatientContext

# Age (years) at which opioid sensitivity is flagged
ELDERLY_AGE = 65

NALOXONE_RECOMMENDATION = "Offer naloxone and counsel household on use."


def _is_elderly(patient: PatientContext) -> bool:
    return patient.age is not None and patient.age >= ELDERLY_AGE


def mme_risk_flags(result: MmeResult, patient: Optional[PatientContext] = None) -> List[str]:
    """Short warning labels shown under the MME total."""
    patient = patient or PatientContext()
    flags = []
    if result.caution_at_50:
        flags.append("Total MME ≥ 50/day")
    if result.avoid_at_90:
        flags.append("Total MME ≥ 90/day")
    if _is_elderly(patient):
        flags.append("Age ≥ 65: increased sensitivity")
    if patient.has_respiratory_disease or patient.has_sleep_apnea:
        flags.append("Respiratory disease or OSA")
    if patient.is_pregnant:
        flags.append("Pregnancy: avoid chronic opioid use")
    return flags


def mme_recommendations(result: MmeResult) -> List[str]:
    recs = []
    if result.caution_at_50:
        recs.append("Consider naloxone co-prescription and risk mitigation.")
    if result.avoid_at_90:
        recs.append("Avoid or justify high MME; taper to safer dose if possible.")
    return recs


def should_offer_naloxone(
    names: Iterable[str],
    patient: Optional[PatientContext] = None,
    total_mme: float = 0.0,
) -> bool:
    """
    Naloxone is offered to anyone on an opioid with an overdose risk
    modifier: age ≥ 65, a concurrent benzodiazepine, ≥ 50 MME/day,
    respiratory disease or opioid use disorder.
    """
    names = list(names)
    patient = patient or PatientContext()
    if not dc.any_member(dc.OPIOID, names):
        return False
    return (
        _is_elderly(patient)
        or dc.any_member(dc.BENZODIAZEPINE, names)
        or total_mme >= MME_CAUTION_THRESHOLD
        or patient.has_respiratory_disease
        or patient.has_opioid_use_disorder
    )


def safety_recommendations(
    names: Iterable[str],
    patient: Optional[PatientContext] = None,
    total_mme: float = 0.0,
) -> List[str]:
    """Regimen-level recommendations that accompany the safety findings."""
    if should_offer_naloxone(names, patient, total_mme):
        return [NALOXONE_RECOMMENDATION]
    return []
