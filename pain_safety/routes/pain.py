"""
FastAPI endpoints for the Pain Management page.

MME totals, opioid interaction checks, per-row highlights, misuse risk
scoring, free-text parsing and report export.
"""
import os
from typing import Dict

from fastapi import APIRouter, HTTPException, Query, Response
from fastapi.responses import FileResponse

from pain_safety.models.pain import (
    ConversionFactorsResponse,
    HighlightResponse,
    MmeRequest,
    MmeResponse,
    ParsedMedicationResponse,
    ParseRequest,
    ParseResponse,
    ReportRequest,
    ReportResponse,
    RiskAssessmentResponse,
    SafetyCheckRequest,
    SafetyCheckResponse,
)
from pain_safety.services import PainManagementService
from pain_safety.utils import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/pain", tags=["Pain Management"])

_service = PainManagementService()

# report_id -> pdf path (in-memory; lost on restart)
_reports: Dict[str, str] = {}

REPORT_FORMATS = ("json", "csv", "pdf")


@router.post("/opiates/mme", response_model=MmeResponse)
async def calculate_mme(request: MmeRequest):
    """Total MME/day with per-medication breakdown and threshold flags."""
    result = _service.calculate_mme(request.entries(), request.context())
    return MmeResponse(**result)


@router.post("/opiates/safety-check", response_model=SafetyCheckResponse)
async def safety_check(request: SafetyCheckRequest):
    """Interaction and organ-function findings for the regimen."""
    result = _service.safety_check(request.entries(), request.context())
    return SafetyCheckResponse(**result)


@router.post("/opiates/highlight", response_model=HighlightResponse)
async def highlight(request: SafetyCheckRequest):
    """Severity badge and reasons for every medication row, in input order."""
    return HighlightResponse(**_service.highlight(request.entries(), request.context()))


@router.post("/opiates/risk-assessment", response_model=RiskAssessmentResponse)
async def risk_assessment(request: SafetyCheckRequest):
    return RiskAssessmentResponse(**_service.risk_assessment(request.entries(), request.context()))


@router.post("/opiates/parse", response_model=ParseResponse)
async def parse_medications(request: ParseRequest):
    """Parse free-text lines such as 'oxycodone 5 mg q6h'."""
    entries = _service.parse_lines(request.lines)
    return ParseResponse(medications=[ParsedMedicationResponse(**e.to_dict()) for e in entries])


@router.get("/opiates/conversion-factors", response_model=ConversionFactorsResponse)
async def conversion_factors():
    return ConversionFactorsResponse(**_service.conversion_factors())


@router.post("/opiates/report")
async def export_report(
    request: ReportRequest,
    format: str = Query("json", description="json, csv or pdf"),
):
    """
    Export the opioid risk report.

    json returns the full report, csv returns the MME breakdown as a file,
    pdf renders the report and returns its download link.
    """
    fmt = format.lower()
    if fmt not in REPORT_FORMATS:
        raise HTTPException(
            status_code=400,
            detail=f"Invalid format '{format}'. Use one of: {', '.join(REPORT_FORMATS)}."
        )

    report = _service.build_report(
        request.entries(),
        request.context(),
        patient_id=request.patient_id,
        include_misuse_risk=request.include_misuse_risk,
    )

    if fmt == "csv":
        return Response(
            content=_service.report_csv(report),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{report.report_id}.csv"'},
        )

    download_url = None
    if fmt == "pdf":
        pdf_path = await _service.write_report_pdf(report)
        _reports[report.report_id] = pdf_path
        download_url = f"{router.prefix}/reports/{report.report_id}/download"

    return ReportResponse(
        report_id=report.report_id,
        format=fmt,
        generated_at=report.generated_at.isoformat(),
        pdf_path=report.pdf_path,
        download_url=download_url,
        report=report.to_dict(),
    )


@router.get("/reports/{report_id}/download")
async def download_report(report_id: str):
    """Download a generated PDF report."""
    if report_id not in _reports:
        raise HTTPException(status_code=404, detail="Report not found")

    pdf_path = _reports[report_id]
    if not pdf_path or not os.path.exists(pdf_path):
        raise HTTPException(status_code=404, detail="PDF file not found")

    return FileResponse(
        path=pdf_path,
        media_type="application/pdf",
        filename=f"{report_id}.pdf"
    )
