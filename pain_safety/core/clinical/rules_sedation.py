"""
CNS Depressant Combination Rules

Opioids combined with other sedatives cause additive respiratory depression,
the leading mechanism of co-prescribing overdose deaths.

  - Each rule function is pure: (names, PatientContext) -> Optional[SafetyFinding]
  - A pair rule fires on class membership anywhere in the list, so entry
    order never matters.
"""
from __future__ import annotations

from typing import List, Optional

from pain_safety.core.regimen import drug_classes as dc
from pain_safety.core.regimen.base import PatientContext
from .base import SafetyFinding, Severity, CDC_2022, FDA_GABAPENTINOID


def rule_opioid_benzodiazepine(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    """Opioid + benzodiazepine or Z-hypnotic (CDC 2022 recommendation 11)."""
    opioids = dc.members(dc.OPIOID, names)
    sedatives = [n for n in names if dc.is_member(dc.BENZODIAZEPINE, n) or dc.is_member(dc.Z_DRUG, n)]
    if not opioids or not sedatives:
        return None

    return SafetyFinding(
        finding_id="OPI-SED-001",
        issue="Opioid + benzo/Z-drug",
        severity=Severity.MAJOR,
        reason="Opioid + benzo/Z-drug",
        explanation=(
            "Additive CNS/respiratory depression; avoid co-prescribing or use "
            "lowest doses and consider naloxone."
        ),
        recommendation=(
            "Avoid co-prescribing; consider taper and non-sedating alternatives; "
            "ensure naloxone availability."
        ),
        references=[CDC_2022],
        triggering_medications=opioids + sedatives,
    )


def rule_opioid_gabapentinoid(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    """Opioid + gabapentin/pregabalin (FDA 2019 breathing-problem warning)."""
    opioids = dc.members(dc.OPIOID, names)
    gabapentinoids = dc.members(dc.GABAPENTINOID, names)
    if not opioids or not gabapentinoids:
        return None

    return SafetyFinding(
        finding_id="OPI-SED-002",
        issue="Opioid + gabapentinoid",
        severity=Severity.MODERATE,
        reason="Opioid + gabapentinoid",
        explanation=(
            "Increased sedation/respiratory depression; FDA warns of serious "
            "breathing problems with co-use."
        ),
        recommendation=(
            "Increased sedation/respiratory depression; use lowest effective "
            "doses and monitor."
        ),
        references=[FDA_GABAPENTINOID],
        triggering_medications=opioids + gabapentinoids,
    )


SEDATION_RULES = [
    rule_opioid_benzodiazepine,
    rule_opioid_gabapentinoid,
]
