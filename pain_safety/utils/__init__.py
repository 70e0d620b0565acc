"""
Utilities Package - Logging and Exception Handling
"""
from .logging import get_logger, setup_logging
from .exceptions import (
    PainSafetyError,
    MedicationInputError,
    ReportGenerationError,
    PainApiError,
)

__all__ = [
    "get_logger",
    "setup_logging",
    "PainSafetyError",
    "MedicationInputError",
    "ReportGenerationError",
    "PainApiError",
]
