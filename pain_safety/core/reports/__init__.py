"""
Report Generation Module

Exports the opioid risk & pain management report as JSON, CSV or PDF.
"""
from .opioid_report import OpioidReportGenerator, OpioidReport

__all__ = [
    "OpioidReportGenerator",
    "OpioidReport",
]
