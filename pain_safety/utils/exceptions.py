"""
Custom Exception Hierarchy

Provides specific exception types for the pain-management safety service
with structured error information.
"""
from typing import Optional, Dict, Any


class PainSafetyError(Exception):
    """Base exception for all pain-management safety errors."""

    status_code = 500

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for API responses."""
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details
        }


class MedicationInputError(PainSafetyError):
    """Invalid medication entry (negative dose, frequency or patch strength)."""

    status_code = 400

    def __init__(
        self,
        message: str,
        medication: str = "unknown",
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        extra = {"medication": medication}
        if field:
            extra["field"] = field
        super().__init__(
            message=message,
            code="MEDICATION_INPUT_ERROR",
            details={**extra, **(details or {})}
        )
        self.medication = medication
        self.field = field


class ReportGenerationError(PainSafetyError):
    """Errors during report export."""

    def __init__(
        self,
        message: str,
        report_type: str = "unknown",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="REPORT_ERROR",
            details={"report_type": report_type, **(details or {})}
        )
        self.report_type = report_type


class PainApiError(PainSafetyError):
    """Non-success response (or transport failure) from the pain API."""

    status_code = 502

    def __init__(
        self,
        message: str,
        endpoint: str = "unknown",
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=message,
            code="PAIN_API_ERROR",
            details={"endpoint": endpoint, "status_code": status_code, **(details or {})}
        )
        self.endpoint = endpoint
        self.response_status = status_code
