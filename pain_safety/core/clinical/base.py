"""
Opioid Safety Rules - Base Types

Defines the data contracts that all rule modules produce. These are consumed
by the HTTP layer and the report generator.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional


class Severity(str, Enum):
    """
    Clinical severity of a finding.

    MAJOR    – avoid the combination or act before dispensing
    MODERATE – use with caution; monitor or adjust dose
    """
    MAJOR    = "major"
    MODERATE = "moderate"

    @property
    def rank(self) -> int:
        """Higher is more severe."""
        return _SEVERITY_RANK[self]

    @classmethod
    def most_severe(cls, severities) -> Optional["Severity"]:
        """Highest severity in an iterable, or None if it is empty."""
        result = None
        for s in severities:
            if result is None or s.rank > result.rank:
                result = s
        return result


_SEVERITY_RANK = {
    Severity.MODERATE: 1,
    Severity.MAJOR:    2,
}


@dataclass(frozen=True)
class Reference:
    """Citation shown next to a finding."""
    label: str
    url: str


# ── Shared references ─────────────────────────────────────────────────────────
CDC_2022 = Reference(
    "CDC Guideline 2022",
    "https://www.cdc.gov/mmwr/volumes/71/rr/rr7103a1.htm",
)
FDA_GABAPENTINOID = Reference(
    "FDA Safety",
    "https://www.fda.gov/drugs/drug-safety-and-availability/"
    "fda-warns-about-serious-breathing-problems-seizure-and-nerve-pain-medicines-gabapentin-neurontin",
)
FDA_OPIOID_LABEL = Reference(
    "FDA Label",
    "https://www.accessdata.fda.gov/drugsatfda_docs/label/2013/019516s074lbl.pdf",
)
CPIC_CODEINE = Reference(
    "CPIC Codeine",
    "https://cpicpgx.org/guidelines/guideline-for-codeine-and-cyp2d6/",
)
FDA_METHADONE = Reference(
    "FDA Methadone",
    "https://www.fda.gov/drugs/postmarket-drug-safety-information-patients-and-providers/"
    "methadone-information",
)


@dataclass
class SafetyFinding:
    """
    One interaction or organ-function problem detected in a regimen.

    A single safety check can produce 0-N findings; each rule contributes at
    most one.
    """
    # ── Core identity ─────────────────────────────────────────────────────
    finding_id: str                          # e.g. "OPI-SED-001"
    issue: str                               # Short title shown in the UI
    severity: Severity
    reason: str = ""                         # Badge label on the medication row

    # ── Guidance ──────────────────────────────────────────────────────────
    explanation: str = ""
    recommendation: str = ""
    references: List[Reference] = field(default_factory=list)

    # ── Evidence ──────────────────────────────────────────────────────────
    # Names of the medication rows that participate in this finding.
    triggering_medications: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "finding_id": self.finding_id,
            "issue": self.issue,
            "severity": self.severity.value,
            "reason": self.reason,
            "explanation": self.explanation,
            "recommendation": self.recommendation,
            "references": [{"label": r.label, "url": r.url} for r in self.references],
            "triggering_medications": list(self.triggering_medications),
        }


@dataclass
class RowHighlight:
    """Inline severity badge for one medication row."""
    name: str
    severity: Optional[Severity] = None
    reasons: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "severity": self.severity.value if self.severity else None,
            "reasons": list(self.reasons),
        }
