"""
Sig and free-text medication parsing.

Turns prescription directions ("1 tab PO q4-6h prn", "twice daily") into an
administrations-per-day count, and pulls the strength out of product names
such as "oxycodone hydrochloride 7.5 MG Oral Tablet".

Interval sigs with a range ("q4-6h") resolve to the shorter interval, which
is the maximum daily exposure and therefore the conservative MME input.
"""
from __future__ import annotations

import re
from typing import Optional, Tuple

from .base import MedicationEntry, Route

# ── Frequency patterns ───────────────────────────────────────────────────────
_TIMES_PER_DAY = re.compile(
    r"\b(\d+)\s*(?:x|times)\s*(?:a|per|/)?\s*(?:day|daily|d)\b"
)
_Q_HOURS = re.compile(r"\bq\s*(\d+)(?:\s*-\s*\d+)?\s*h(?:rs?|ours?)?\b")
_EVERY_HOURS = re.compile(
    r"\bevery\s*(\d+)(?:\s*(?:-|to)\s*\d+)?\s*(?:h|hrs?|hours?)\b"
)
_WORD_FREQUENCIES = [
    (re.compile(r"\b(qid|four times)\b"), 4),
    (re.compile(r"\b(tid|three times|thrice)\b"), 3),
    (re.compile(r"\b(bid|twice)\b"), 2),
    (re.compile(r"\b(daily|qd|once|nightly|qhs|at bedtime|every day)\b"), 1),
]

# ── Name/strength patterns ───────────────────────────────────────────────────
# Opioids whose product names commonly carry a mg strength.
_NAMED_OPIOIDS = [
    "oxycodone", "morphine", "fentanyl", "hydrocodone",
    "hydromorphone", "oxymorphone", "codeine", "tramadol",
]
# "5 mg", and combination strengths "5-325 mg" / "5/325 mg" where the first
# figure belongs to the leading ingredient.
_DOSE_MG = re.compile(
    r"(\d+(?:\.\d+)?)(?:\s*[-/]\s*\d+(?:\.\d+)?)*\s*mg\b", re.IGNORECASE
)
_PATCH_MCG_HR = re.compile(r"(\d+(?:\.\d+)?)\s*mcg\s*/\s*h(?:r|our)?\b", re.IGNORECASE)

_ROUTE_KEYWORDS = [
    (re.compile(r"\b(patch|transdermal|td)\b", re.IGNORECASE), Route.TRANSDERMAL),
    (re.compile(r"\b(iv|intravenous(?:ly)?)\b", re.IGNORECASE), Route.IV),
    (re.compile(r"\b(im|intramuscular(?:ly)?)\b", re.IGNORECASE), Route.IM),
    (re.compile(r"\b(sl|sublingual(?:ly)?)\b", re.IGNORECASE), Route.SUBLINGUAL),
    (re.compile(r"\b(buccal(?:ly)?)\b", re.IGNORECASE), Route.BUCCAL),
]


def parse_frequency(text: Optional[str]) -> Optional[int]:
    """
    Administrations per day for a sig, or None when it cannot be read.

    >>> parse_frequency("1 tab q6h prn pain")
    4
    >>> parse_frequency("twice daily")
    2
    """
    if not text:
        return None
    sig = text.lower()

    m = _TIMES_PER_DAY.search(sig)
    if m:
        return int(m.group(1))

    m = _Q_HOURS.search(sig) or _EVERY_HOURS.search(sig)
    if m:
        hours = int(m.group(1))
        if hours > 0:
            return max(1, 24 // hours)
        return None

    for pattern, count in _WORD_FREQUENCIES:
        if pattern.search(sig):
            return count
    return None


def default_administrations_for_dose(dose_mg: float) -> int:
    """Typical immediate-release schedule for a given tablet strength."""
    if dose_mg <= 5:
        return 6
    if dose_mg <= 15:
        return 4
    return 3


def infer_dose_from_name(name: Optional[str]) -> Optional[Tuple[float, int]]:
    """
    (dose_mg, administrations_per_day) from a product name, or None.

    Only names containing a recognised opioid are considered, and the mg
    figure must follow the drug name ("oxycodone / APAP 5 MG / 325 MG" gives 5).
    """
    m = _opioid_strength(name or "")
    if m is None:
        return None
    dose = float(m.group(1))
    return dose, default_administrations_for_dose(dose)


def _opioid_strength(text: str) -> Optional[re.Match]:
    """First mg strength following a recognised opioid name."""
    lower = text.lower()
    for opioid in _NAMED_OPIOIDS:
        idx = lower.find(opioid)
        if idx < 0:
            continue
        m = _DOSE_MG.search(text, idx + len(opioid))
        if m:
            return m
    return None


def _detect_route(text: str) -> Route:
    for pattern, route in _ROUTE_KEYWORDS:
        if pattern.search(text):
            return route
    return Route.ORAL


def parse_medication_line(line: str) -> MedicationEntry:
    """
    Build a MedicationEntry from one free-text line.

    "oxycodone 5 mg q6h"             -> oral, 5 mg, 4/day
    "fentanyl 25 mcg/hr patch q72h"  -> transdermal, 25 mcg/hr
    "lorazepam 1 mg nightly"         -> oral, 1 mg, 1/day
    "oxycodone/APAP 5-325 mg q6h"    -> oral, 5 mg, 4/day
    """
    text = (line or "").strip()
    route = _detect_route(text)

    patch_strength = None
    m_patch = _PATCH_MCG_HR.search(text)
    if m_patch:
        patch_strength = float(m_patch.group(1))
        route = Route.TRANSDERMAL

    m_dose = _opioid_strength(text) or _DOSE_MG.search(text)
    dose = float(m_dose.group(1)) if m_dose else None

    # Name is everything before the first strength figure.
    cut_points = [m.start() for m in (m_dose, m_patch) if m is not None]
    name = text[:min(cut_points)].strip(" /-,") if cut_points else text
    sig = text[max(m.end() for m in (m_dose, m_patch) if m is not None):].strip() if cut_points else ""

    return MedicationEntry(
        name=name or text,
        route=route,
        dose_mg_per_administration=None if patch_strength is not None else dose,
        administrations_per_day=None if route == Route.TRANSDERMAL else parse_frequency(sig),
        patch_strength_mcg_per_hr=patch_strength,
        frequency=sig,
    )
