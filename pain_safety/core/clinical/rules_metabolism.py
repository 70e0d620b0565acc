"""
Pharmacokinetic Interaction Rules

CYP3A4 clears oxycodone, fentanyl, methadone and hydrocodone; inhibitors
raise exposure and inducers lower it. Codeine and tramadol are prodrugs
activated by CYP2D6, so poor and intermediate metabolizers get little
analgesia from them.
"""
from __future__ import annotations

from typing import List, Optional

from pain_safety.core.regimen import drug_classes as dc
from pain_safety.core.regimen.base import PatientContext
from .base import SafetyFinding, Severity, FDA_OPIOID_LABEL, CPIC_CODEINE


def rule_cyp3a4_inhibitor(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    substrates = dc.members(dc.CYP3A4_SUBSTRATE_OPIOID, names)
    inhibitors = dc.members(dc.CYP3A4_INHIBITOR, names)
    if not substrates or not inhibitors:
        return None

    return SafetyFinding(
        finding_id="OPI-PK-001",
        issue="CYP3A4 inhibitor with opioid substrate",
        severity=Severity.MAJOR,
        reason="CYP3A4 inhibitor present",
        explanation=(
            "CYP3A4 inhibitors can raise opioid levels (e.g., oxycodone/fentanyl/"
            "methadone/hydrocodone) → overdose risk; reduce dose/avoid and monitor."
        ),
        recommendation="Avoid combination or reduce opioid dose; monitor for toxicity.",
        references=[FDA_OPIOID_LABEL],
        triggering_medications=substrates + inhibitors,
    )


def rule_cyp3a4_inducer(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    substrates = dc.members(dc.CYP3A4_SUBSTRATE_OPIOID, names)
    inducers = dc.members(dc.CYP3A4_INDUCER, names)
    if not substrates or not inducers:
        return None

    return SafetyFinding(
        finding_id="OPI-PK-002",
        issue="CYP3A4 inducer with opioid substrate",
        severity=Severity.MODERATE,
        reason="CYP3A4 inducer present",
        explanation=(
            "CYP3A4 inducers can lower opioid exposure → loss of analgesia or "
            "withdrawal; avoid or monitor closely."
        ),
        recommendation="May reduce analgesia; avoid or monitor closely.",
        references=[FDA_OPIOID_LABEL],
        triggering_medications=substrates + inducers,
    )


def rule_cyp2d6_prodrug(names: List[str], patient: PatientContext) -> Optional[SafetyFinding]:
    """
    CPIC: avoid codeine and tramadol in CYP2D6 poor metabolizers; IM
    phenotypes get reduced activation as well.
    """
    phenotype = patient.cyp2d6_phenotype
    if phenotype is None or not phenotype.reduces_activation:
        return None
    prodrugs = dc.members(dc.CYP2D6_PRODRUG_OPIOID, names)
    if not prodrugs:
        return None

    return SafetyFinding(
        finding_id="OPI-PK-003",
        issue="CYP2D6 PM/IM with codeine/tramadol",
        severity=Severity.MAJOR,
        reason="CYP2D6 PM/IM reduces activation",
        explanation=(
            "Codeine/tramadol require CYP2D6 for activation; PM/IM phenotypes "
            "reduce analgesia and increase risk."
        ),
        recommendation="Avoid; use non–CYP2D6-dependent opioid (e.g., morphine).",
        references=[CPIC_CODEINE],
        triggering_medications=prodrugs,
    )


METABOLISM_RULES = [
    rule_cyp3a4_inhibitor,
    rule_cyp3a4_inducer,
    rule_cyp2d6_prodrug,
]
