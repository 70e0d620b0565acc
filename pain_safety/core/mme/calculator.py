"""
MME Calculator

Converts a medication list into morphine milligram equivalents per day.

Usage:
    from pain_safety.core.mme import MmeCalculator

    result = MmeCalculator().calculate(medications)
    print(result.total_mme_per_day, [b.mme_per_day for b in result.breakdown])

Every input row appears in the breakdown, including rows that contribute
nothing (unknown names, buprenorphine, routes without a factor), so a UI can
line the breakdown up with the rows it shows. The total is the sum of the
breakdown.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from pain_safety.core.regimen.base import MedicationEntry, Route
from pain_safety.core.regimen.sig_parser import infer_dose_from_name, parse_frequency
from pain_safety.utils import get_logger
from .conversion import EXCLUDED_FROM_MME, UNIT_MCG_PER_HR, lookup_factor, match_drug

logger = get_logger(__name__)

# ── Thresholds (CDC 2022) ────────────────────────────────────────────────────
MME_CAUTION_THRESHOLD = 50.0   # reassess benefit/risk, offer naloxone
MME_AVOID_THRESHOLD = 90.0     # avoid or carefully justify

_PRECISION = 2


@dataclass
class MedicationMme:
    """MME contribution of one medication row."""
    name: str
    route: Route
    drug: Optional[str] = None               # canonical opioid matched in name
    daily_dose: float = 0.0                  # mg/day, or mcg/hr for patches
    dose_unit: str = "mg/day"
    conversion_factor: Optional[float] = None
    mme_per_day: float = 0.0
    excluded: bool = False
    note: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "route": self.route.value,
            "drug": self.drug,
            "daily_dose": round(self.daily_dose, _PRECISION),
            "dose_unit": self.dose_unit,
            "conversion_factor": self.conversion_factor,
            "mme_per_day": self.mme_per_day,
            "excluded": self.excluded,
            "note": self.note,
        }


@dataclass
class MmeResult:
    """Total MME/day and the per-medication breakdown it was summed from."""
    total_mme_per_day: float = 0.0
    breakdown: List[MedicationMme] = field(default_factory=list)

    @property
    def caution_at_50(self) -> bool:
        return self.total_mme_per_day >= MME_CAUTION_THRESHOLD

    @property
    def avoid_at_90(self) -> bool:
        return self.total_mme_per_day >= MME_AVOID_THRESHOLD

    @property
    def has_excluded(self) -> bool:
        return any(b.excluded for b in self.breakdown)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_mme_per_day": self.total_mme_per_day,
            "breakdown": [b.to_dict() for b in self.breakdown],
            "thresholds": {
                "caution_at_50": self.caution_at_50,
                "avoid_at_90": self.avoid_at_90,
            },
        }


class MmeCalculator:
    """
    Dose aggregator.

    Stateless; safe to call from multiple threads / concurrent requests.
    """

    def calculate(self, medications: Iterable[MedicationEntry]) -> MmeResult:
        breakdown = [self.medication_mme(m) for m in medications]
        total = round(sum(b.mme_per_day for b in breakdown), _PRECISION)
        counted = [b.drug for b in breakdown if b.mme_per_day > 0]
        logger.debug(f"MmeCalculator: total={total} MME/day from {counted or 'no opioids'}")
        return MmeResult(total_mme_per_day=total, breakdown=breakdown)

    def medication_mme(self, entry: MedicationEntry) -> MedicationMme:
        """MME contribution of a single row (zero for anything unconvertible)."""
        row = MedicationMme(name=entry.name, route=entry.route)

        drug = match_drug(entry.name)
        if drug is None:
            return row
        row.drug = drug

        if drug in EXCLUDED_FROM_MME:
            row.excluded = True
            row.note = f"{drug.capitalize()} is excluded from MME."
            return row

        factor = lookup_factor(drug, entry.route)
        if factor is None:
            row.note = f"No MME conversion factor for {drug} by {entry.route.value} route."
            logger.debug(f"MmeCalculator: {row.note}")
            return row
        row.conversion_factor = factor.factor

        if factor.unit == UNIT_MCG_PER_HR:
            row.dose_unit = UNIT_MCG_PER_HR
            if entry.patch_strength_mcg_per_hr is None:
                row.note = "Patch strength (mcg/hr) is required for transdermal fentanyl."
                return row
            row.daily_dose = entry.patch_strength_mcg_per_hr
        else:
            row.daily_dose = self._daily_dose_mg(entry)

        row.mme_per_day = round(row.daily_dose * factor.factor, _PRECISION)
        return row

    @staticmethod
    def _daily_dose_mg(entry: MedicationEntry) -> float:
        dose = entry.dose_mg_per_administration
        inferred_per_day = None
        if dose is None:
            inferred = infer_dose_from_name(entry.name)
            if inferred is None:
                return 0.0
            dose, inferred_per_day = inferred

        per_day = entry.administrations_per_day
        if per_day is None:
            per_day = parse_frequency(entry.frequency)
        if per_day is None:
            per_day = inferred_per_day if inferred_per_day is not None else 1
        return dose * per_day


def calculate_mme(medications: Iterable[MedicationEntry]) -> MmeResult:
    """Module-level convenience wrapper around MmeCalculator."""
    return MmeCalculator().calculate(medications)
