"""
Interaction Rule Evaluator

Central dispatcher. Takes the medication list plus patient covariates and
returns every SafetyFinding across all registered rule modules.

Usage:
    from pain_safety.core.clinical import InteractionRuleEvaluator

    evaluator = InteractionRuleEvaluator()
    findings = evaluator.evaluate(medications, patient)
    for f in findings:
        print(f.issue, f.severity, f.triggering_medications)

Adding a rule:
    1. Write rule_<name>(names, PatientContext) -> Optional[SafetyFinding]
       in the matching rules_<group>.py module.
    2. Append it to that module's <GROUP>_RULES list.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Union

from pain_safety.core.regimen.base import MedicationEntry, PatientContext
from pain_safety.utils import get_logger
from .base import RowHighlight, SafetyFinding, Severity
from .rules_sedation import SEDATION_RULES
from .rules_metabolism import METABOLISM_RULES
from .rules_cardiac import CARDIAC_RULES
from .rules_organ_function import ORGAN_FUNCTION_RULES

logger = get_logger(__name__)

# ── Registry: all rules in evaluation order ───────────────────────────────────
_RULES = [
    *SEDATION_RULES,
    *METABOLISM_RULES,
    *CARDIAC_RULES,
    *ORGAN_FUNCTION_RULES,
]

MedicationLike = Union[MedicationEntry, str]


def _names(medications: Iterable[MedicationLike]) -> List[str]:
    """Non-blank medication names in input order."""
    names = []
    for m in medications:
        name = m.name if isinstance(m, MedicationEntry) else str(m or "")
        name = name.strip()
        if name:
            names.append(name)
    return names


class InteractionRuleEvaluator:
    """
    Applies every registered rule to a regimen.

    Stateless; safe to call from multiple threads / concurrent requests.
    """

    def evaluate(
        self,
        medications: Iterable[MedicationLike],
        patient: Optional[PatientContext] = None,
    ) -> List[SafetyFinding]:
        """
        Evaluate all rules against a medication list.

        Args:
            medications: MedicationEntry rows or plain names.
            patient:     Covariates; defaults to an empty context.

        Returns:
            Findings sorted major first; within the same severity, rule
            registration order. Empty when nothing matches.
        """
        names = _names(medications)
        patient = patient or PatientContext()
        if not names:
            return []

        findings: List[SafetyFinding] = []
        for rule in _RULES:
            try:
                finding = rule(names, patient)
            except Exception as exc:
                # One failing rule must not hide the others
                logger.error(f"InteractionRuleEvaluator: {rule.__name__} raised {exc}", exc_info=True)
                continue
            if finding is not None:
                findings.append(finding)

        findings.sort(key=lambda f: -f.severity.rank)
        if findings:
            logger.info(
                f"InteractionRuleEvaluator: {len(findings)} finding(s): "
                + ", ".join(f.finding_id for f in findings)
            )
        return findings

    def highlight(
        self,
        medications: Iterable[MedicationLike],
        patient: Optional[PatientContext] = None,
        findings: Optional[List[SafetyFinding]] = None,
    ) -> List[RowHighlight]:
        """
        Per-row badges, one per input row (blank rows included, unflagged).

        A row's severity is the most severe finding it participates in;
        major always wins over moderate.
        """
        medications = list(medications)
        if findings is None:
            findings = self.evaluate(medications, patient)
        rows = []
        for m in medications:
            name = (m.name if isinstance(m, MedicationEntry) else str(m or "")).strip()
            rows.append(self._row(name, findings))
        return rows

    def highlight_medication(
        self,
        name: str,
        medications: Iterable[MedicationLike],
        patient: Optional[PatientContext] = None,
    ) -> RowHighlight:
        """Badge for a single row in the context of the full list."""
        return self._row(name.strip(), self.evaluate(medications, patient))

    @staticmethod
    def _row(name: str, findings: List[SafetyFinding]) -> RowHighlight:
        row = RowHighlight(name=name)
        if not name:
            return row
        hits = [f for f in findings if name in f.triggering_medications]
        row.reasons = [f.reason for f in hits]
        row.severity = Severity.most_severe(f.severity for f in hits)
        return row

    @staticmethod
    def registered_rules() -> List[str]:
        """Names of the active rule functions, in evaluation order."""
        return [rule.__name__ for rule in _RULES]

    @staticmethod
    def summarise(findings: List[SafetyFinding]) -> Dict:
        """
        Compact summary dict suitable for JSON API responses.

        Example output:
        {
            "total_findings": 2,
            "major_count": 1,
            "moderate_count": 1,
            "findings": [{...}, {...}]
        }
        """
        major = sum(1 for f in findings if f.severity == Severity.MAJOR)
        moderate = sum(1 for f in findings if f.severity == Severity.MODERATE)
        return {
            "total_findings": len(findings),
            "major_count": major,
            "moderate_count": moderate,
            "findings": [f.to_dict() for f in findings],
        }
