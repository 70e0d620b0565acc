"""
API request/response models.
"""
from .pain import (
    MedicationInput,
    PatientContextInput,
    MmeRequest,
    SafetyCheckRequest,
    ReportRequest,
    ParseRequest,
    MmeResponse,
    SafetyCheckResponse,
    HighlightResponse,
    RiskAssessmentResponse,
    ParseResponse,
    ConversionFactorsResponse,
    ReportResponse,
    HealthResponse,
)

__all__ = [
    "MedicationInput",
    "PatientContextInput",
    "MmeRequest",
    "SafetyCheckRequest",
    "ReportRequest",
    "ParseRequest",
    "MmeResponse",
    "SafetyCheckResponse",
    "HighlightResponse",
    "RiskAssessmentResponse",
    "ParseResponse",
    "ConversionFactorsResponse",
    "ReportResponse",
    "HealthResponse",
]
