"""
MME Layer

Morphine milligram equivalent aggregation.

Usage:
    from pain_safety.core.mme import calculate_mme

    result = calculate_mme(medications)   # List[MedicationEntry]
"""
from .calculator import (
    MmeCalculator,
    MmeResult,
    MedicationMme,
    calculate_mme,
    MME_CAUTION_THRESHOLD,
    MME_AVOID_THRESHOLD,
)
from .conversion import ConversionFactor, factor_table, match_drug

__all__ = [
    "MmeCalculator",
    "MmeResult",
    "MedicationMme",
    "calculate_mme",
    "MME_CAUTION_THRESHOLD",
    "MME_AVOID_THRESHOLD",
    "ConversionFactor",
    "factor_table",
    "match_drug",
]
