"""
MME conversion factors.

Oral factors follow the CDC Clinical Practice Guideline for Prescribing
Opioids for Pain (2022), Table 1. Parenteral and transmucosal fentanyl
factors follow the equianalgesic tables the guideline's 2016 edition
published (buccal tablet 0.13 per mcg; 100 mcg IV fentanyl ~ 30 mg oral
morphine). All dose-based factors are expressed per mg so a single unit
flows through the calculator; transdermal fentanyl is per mcg/hr of patch
strength.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from pain_safety.core.regimen.base import Route

UNIT_MG = "mg"
UNIT_MCG_PER_HR = "mcg/hr"


@dataclass(frozen=True)
class ConversionFactor:
    """MME multiplier for one drug by one route."""
    drug: str
    route: Route
    factor: float
    unit: str = UNIT_MG

    def to_dict(self) -> dict:
        return {
            "drug": self.drug,
            "route": self.route.value,
            "factor": self.factor,
            "unit": self.unit,
        }


_FACTOR_TABLE: List[ConversionFactor] = [
    ConversionFactor("codeine",       Route.ORAL,        0.15),
    ConversionFactor("hydrocodone",   Route.ORAL,        1.0),
    ConversionFactor("hydromorphone", Route.ORAL,        5.0),
    ConversionFactor("hydromorphone", Route.IV,          20.0),
    ConversionFactor("hydromorphone", Route.IM,          20.0),
    ConversionFactor("methadone",     Route.ORAL,        4.7),
    ConversionFactor("morphine",      Route.ORAL,        1.0),
    ConversionFactor("morphine",      Route.IV,          3.0),
    ConversionFactor("morphine",      Route.IM,          3.0),
    ConversionFactor("oxycodone",     Route.ORAL,        1.5),
    ConversionFactor("oxymorphone",   Route.ORAL,        3.0),
    ConversionFactor("tapentadol",    Route.ORAL,        0.4),
    ConversionFactor("tramadol",      Route.ORAL,        0.2),
    ConversionFactor("fentanyl",      Route.TRANSDERMAL, 2.4, UNIT_MCG_PER_HR),
    ConversionFactor("fentanyl",      Route.BUCCAL,      130.0),
    ConversionFactor("fentanyl",      Route.SUBLINGUAL,  130.0),
    ConversionFactor("fentanyl",      Route.IV,          300.0),
    ConversionFactor("fentanyl",      Route.IM,          300.0),
]

CONVERSION_FACTORS: Dict[Tuple[str, Route], ConversionFactor] = {
    (cf.drug, cf.route): cf for cf in _FACTOR_TABLE
}

# Opioids never counted toward MME (partial agonist; CDC excludes it).
EXCLUDED_FROM_MME = ("buprenorphine",)

# Substring match order. Excluded drugs are checked first so that
# combination products ("buprenorphine and naloxone") are never converted.
_MATCH_ORDER: Tuple[str, ...] = EXCLUDED_FROM_MME + (
    "hydromorphone", "oxymorphone", "hydrocodone", "oxycodone", "morphine",
    "codeine", "methadone", "fentanyl", "tapentadol", "tramadol",
)


def match_drug(name: Optional[str]) -> Optional[str]:
    """Canonical opioid name contained in a free-text medication name."""
    if not name:
        return None
    lower = name.lower()
    for drug in _MATCH_ORDER:
        if drug in lower:
            return drug
    return None


def lookup_factor(drug: str, route: Route) -> Optional[ConversionFactor]:
    return CONVERSION_FACTORS.get((drug, route))


def factor_table() -> List[ConversionFactor]:
    """All factors, in table order."""
    return list(_FACTOR_TABLE)
