"""
Cardiac Rules: methadone QT prolongation.
"""
from __future__ import annotations

from typing import List, Optional

from pain_safety.core.regimen import drug_classes as dc
from pain_safety.core.regimen.base import PatientContext
from .base import SafetyFinding, Severity, FDA_METHADONE


def rule_methadone_qt(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    methadone = dc.members(dc.METHADONE, names)
    qt_agents = dc.members(dc.QT_PROLONGING, names)
    if not methadone or not qt_agents:
        return None

    return SafetyFinding(
        finding_id="OPI-QT-001",
        issue="Methadone + QT-prolonging agents",
        severity=Severity.MAJOR,
        reason="QT-prolonging agents with methadone",
        explanation=(
            "Additive QT prolongation increases torsades risk; baseline/follow-up "
            "ECG and electrolytes; avoid if possible."
        ),
        recommendation="Avoid if possible; baseline and follow-up ECG; monitor electrolytes.",
        references=[FDA_METHADONE],
        triggering_medications=methadone + qt_agents,
    )


CARDIAC_RULES = [
    rule_methadone_qt,
]
