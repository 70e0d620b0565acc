"""
Organ Function Rules

Morphine and codeine have renally cleared active metabolites (M3G/M6G) that
accumulate when creatinine clearance falls. Oxycodone, hydrocodone and
methadone depend on hepatic CYP metabolism.
"""
from __future__ import annotations

from typing import List, Optional

from pain_safety.core.regimen import drug_classes as dc
from pain_safety.core.regimen.base import PatientContext
from .base import SafetyFinding, Severity

# Creatinine clearance (mL/min) below which metabolite accumulation is flagged
RENAL_CLEARANCE_THRESHOLD = 30.0


def rule_renal_impairment(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    crcl = patient.renal_clearance
    if crcl is None or not crcl < RENAL_CLEARANCE_THRESHOLD:
        return None
    affected = dc.members(dc.RENAL_METABOLITE_OPIOID, names)
    if not affected:
        return None

    return SafetyFinding(
        finding_id="OPI-ORG-001",
        issue="Renal impairment with morphine/codeine",
        severity=Severity.MODERATE,
        reason="CrCl < 30 with morphine/codeine",
        explanation=(
            "Active metabolites can accumulate in renal impairment; prefer "
            "alternatives with careful dosing."
        ),
        recommendation=(
            "Accumulation of active metabolites; prefer hydromorphone/fentanyl "
            "with careful dosing."
        ),
        triggering_medications=affected,
    )


def rule_hepatic_impairment(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    if not patient.has_liver_disease:
        return None
    affected = dc.members(dc.HEPATIC_OPIOID, names)
    if not affected:
        return None

    return SafetyFinding(
        finding_id="OPI-ORG-002",
        issue="Hepatic impairment with CYP-metabolized opioids",
        severity=Severity.MODERATE,
        reason="Hepatic impairment",
        explanation=(
            "Reduced hepatic clearance prolongs half-life and raises exposure "
            "of oxycodone, hydrocodone and methadone."
        ),
        recommendation="Start low and go slow; consider non-hepatic routes or agents.",
        triggering_medications=affected,
    )


ORGAN_FUNCTION_RULES = [
    rule_renal_impairment,
    rule_hepatic_impairment,
]
