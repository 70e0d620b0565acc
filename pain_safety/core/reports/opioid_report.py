"""
Opioid Risk & Pain Management Report

Bundles the MME breakdown, safety findings and misuse risk assessment for one
patient and exports it as:
- JSON (to_dict) for download or archiving
- CSV of the MME breakdown with a Total row
- PDF for printing, rendered with reportlab
"""
from dataclasses import dataclass, field
from typing import Dict, Any, List, Optional
from datetime import datetime
from xml.sax.saxutils import escape
import csv
import io
import os
import uuid

from reportlab.lib.pagesizes import letter
from reportlab.lib.colors import HexColor, white
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.lib.enums import TA_CENTER
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle

from pain_safety.core.clinical.base import SafetyFinding, Severity
from pain_safety.core.mme.calculator import MmeResult
from pain_safety.core.risk.misuse import MisuseRiskAssessment, MisuseRiskLevel
from pain_safety.utils import get_logger
from pain_safety.utils.exceptions import ReportGenerationError

logger = get_logger(__name__)


SEVERITY_COLORS = {
    Severity.MAJOR: HexColor("#FEE2E2"),      # Light red
    Severity.MODERATE: HexColor("#FEF3C7"),   # Light amber
}

MISUSE_COLORS = {
    MisuseRiskLevel.LOW: HexColor("#22C55E"),        # Green
    MisuseRiskLevel.MODERATE: HexColor("#F59E0B"),   # Amber
    MisuseRiskLevel.HIGH: HexColor("#F97316"),       # Orange
    MisuseRiskLevel.VERY_HIGH: HexColor("#991B1B"),  # Dark Red
}

CSV_HEADER = ["Medication", "Route", "Daily Dose", "Conversion Factor", "Daily MME"]

CAVEATS = [
    "MME is a dose-comparison tool; it is not an equianalgesic conversion "
    "guide for switching opioids.",
    "Buprenorphine is excluded from MME totals.",
    "Findings support, and do not replace, clinical judgement.",
]

# Helvetica has no glyphs for these
_PDF_REPLACEMENTS = {"≥": ">=", "≤": "<=", "→": "->", "–": "-"}


@dataclass
class OpioidReport:
    """Data container for one exported report."""
    report_id: str
    generated_at: datetime
    patient_id: str = "ANONYMOUS"

    mme: MmeResult = field(default_factory=MmeResult)
    risk_flags: List[str] = field(default_factory=list)
    findings: List[SafetyFinding] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)
    misuse_risk: Optional[MisuseRiskAssessment] = None

    pdf_path: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "report_id": self.report_id,
            "generated_at": self.generated_at.isoformat(),
            "patient_id": self.patient_id,
            "mme": {
                "total_mme": self.mme.total_mme_per_day,
                "items": [b.to_dict() for b in self.mme.breakdown],
            },
            "risk_flags": list(self.risk_flags),
            "findings": [f.to_dict() for f in self.findings],
            "recommendations": list(self.recommendations),
            "misuse_risk": self.misuse_risk.to_dict() if self.misuse_risk else None,
            "pdf_path": self.pdf_path,
        }


def _pdf_text(text: str) -> str:
    for src, dst in _PDF_REPLACEMENTS.items():
        text = text.replace(src, dst)
    return escape(text)


def _fmt_number(value: Optional[float]) -> str:
    if value is None:
        return ""
    return f"{value:g}"


def _fmt_mme(value: float) -> str:
    # Same precision as the calculator so rows add up to the Total
    return f"{value:.2f}"


class OpioidReportGenerator:
    """Builds OpioidReports and renders them to CSV and PDF."""

    def __init__(self, output_dir: str = "reports"):
        self.output_dir = output_dir
        self._styles = getSampleStyleSheet()
        self._create_custom_styles()
        logger.info(f"OpioidReportGenerator initialized, output: {output_dir}")

    def _create_custom_styles(self):
        if 'ReportTitle' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='ReportTitle',
                parent=self._styles['Title'],
                fontSize=20,
                spaceAfter=14,
                textColor=HexColor("#991B1B"),
                alignment=TA_CENTER,
                fontName='Helvetica-Bold'
            ))
        if 'SectionHeader' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='SectionHeader',
                parent=self._styles['Heading2'],
                fontSize=14,
                spaceBefore=16,
                spaceAfter=8,
                textColor=HexColor("#1F2937"),
                fontName='Helvetica-Bold'
            ))
        if 'Caveat' not in self._styles:
            self._styles.add(ParagraphStyle(
                name='Caveat',
                parent=self._styles['Normal'],
                fontSize=8,
                textColor=HexColor("#6B7280"),
                spaceBefore=4,
                spaceAfter=4
            ))

    def build(
        self,
        mme: MmeResult,
        findings: List[SafetyFinding],
        risk_flags: Optional[List[str]] = None,
        recommendations: Optional[List[str]] = None,
        misuse_risk: Optional[MisuseRiskAssessment] = None,
        patient_id: str = "ANONYMOUS",
    ) -> OpioidReport:
        report_id = f"OR-{datetime.now().strftime('%Y%m%d-%H%M%S')}-{uuid.uuid4().hex[:6]}"
        return OpioidReport(
            report_id=report_id,
            generated_at=datetime.now(),
            patient_id=patient_id,
            mme=mme,
            risk_flags=list(risk_flags or []),
            findings=list(findings),
            recommendations=list(recommendations or []),
            misuse_risk=misuse_risk,
        )

    # ── CSV ──────────────────────────────────────────────────────────────────

    def to_csv(self, report: OpioidReport) -> str:
        """MME breakdown as CSV; quoting follows RFC 4180."""
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\n")
        writer.writerow(CSV_HEADER)
        for item in report.mme.breakdown:
            writer.writerow([
                item.name,
                item.route.value,
                f"{_fmt_number(item.daily_dose)} {item.dose_unit}" if item.drug else "",
                _fmt_number(item.conversion_factor),
                _fmt_mme(item.mme_per_day),
            ])
        writer.writerow(["Total", "", "", "", _fmt_mme(report.mme.total_mme_per_day)])
        return buf.getvalue()

    # ── PDF ──────────────────────────────────────────────────────────────────

    def write_pdf(self, report: OpioidReport) -> str:
        """Render the report to <output_dir>/<report_id>.pdf and return the path."""
        os.makedirs(self.output_dir, exist_ok=True)
        pdf_path = os.path.join(self.output_dir, f"{report.report_id}.pdf")
        try:
            doc = SimpleDocTemplate(
                pdf_path,
                pagesize=letter,
                leftMargin=0.75 * inch,
                rightMargin=0.75 * inch,
                topMargin=0.75 * inch,
                bottomMargin=0.75 * inch,
                title="Opioid Risk & Pain Management Report",
            )
            doc.build(self._story(report))
        except Exception as exc:
            logger.error(f"PDF generation failed for {report.report_id}: {exc}", exc_info=True)
            raise ReportGenerationError(
                f"PDF generation failed: {exc}",
                report_type="pdf",
                details={"report_id": report.report_id},
            ) from exc

        report.pdf_path = pdf_path
        logger.info(f"Opioid report written: {pdf_path}")
        return pdf_path

    def _story(self, report: OpioidReport) -> list:
        styles = self._styles
        story = [
            Paragraph("Opioid Risk &amp; Pain Management Report", styles['ReportTitle']),
            Paragraph(
                f"Patient: {escape(report.patient_id)} &nbsp;&nbsp; "
                f"Generated: {report.generated_at.strftime('%Y-%m-%d %H:%M')} &nbsp;&nbsp; "
                f"Report ID: {report.report_id}",
                styles['Normal'],
            ),
            Spacer(1, 0.2 * inch),
        ]

        # MME
        story.append(Paragraph("Morphine Milligram Equivalents", styles['SectionHeader']))
        story.append(Paragraph(
            f"<b>Total: {_fmt_mme(report.mme.total_mme_per_day)} MME/day</b>", styles['Normal']))
        for flag in report.risk_flags:
            story.append(Paragraph(f"• {_pdf_text(flag)}", styles['Normal']))
        story.append(Spacer(1, 0.1 * inch))
        story.append(self._mme_table(report))

        # Findings
        story.append(Paragraph("Safety Findings", styles['SectionHeader']))
        if report.findings:
            story.append(self._findings_table(report.findings))
        else:
            story.append(Paragraph("No interaction or organ-function concerns detected.", styles['Normal']))

        if report.recommendations:
            story.append(Paragraph("Recommendations", styles['SectionHeader']))
            for rec in report.recommendations:
                story.append(Paragraph(f"• {_pdf_text(rec)}", styles['Normal']))

        # Misuse risk
        if report.misuse_risk is not None:
            risk = report.misuse_risk
            story.append(Paragraph("Opioid Misuse Risk", styles['SectionHeader']))
            color = MISUSE_COLORS[risk.overall_risk]
            badge = Table(
                [[f"{risk.overall_risk.value.replace('_', ' ').upper()}  "
                  f"(score {risk.risk_score}/{risk.max_score})"]],
                colWidths=[3 * inch],
            )
            badge.setStyle(TableStyle([
                ('BACKGROUND', (0, 0), (-1, -1), color),
                ('TEXTCOLOR', (0, 0), (-1, -1), white),
                ('FONTNAME', (0, 0), (-1, -1), 'Helvetica-Bold'),
                ('ALIGN', (0, 0), (-1, -1), 'CENTER'),
            ]))
            story.append(badge)
            story.append(Spacer(1, 0.1 * inch))
            for f in risk.present_factors:
                story.append(Paragraph(
                    f"• {_pdf_text(f.factor)} (weight {f.weight}): {_pdf_text(f.description)}",
                    styles['Normal']))
            for rec in risk.recommendations:
                story.append(Paragraph(f"• {_pdf_text(rec)}", styles['Normal']))

        story.append(Spacer(1, 0.3 * inch))
        for caveat in CAVEATS:
            story.append(Paragraph(_pdf_text(caveat), styles['Caveat']))
        return story

    def _mme_table(self, report: OpioidReport) -> Table:
        rows = [CSV_HEADER]
        for item in report.mme.breakdown:
            rows.append([
                Paragraph(_pdf_text(item.name or "-"), self._styles['Normal']),
                item.route.value,
                f"{_fmt_number(item.daily_dose)} {item.dose_unit}" if item.drug else "-",
                _fmt_number(item.conversion_factor) or "-",
                _fmt_mme(item.mme_per_day),
            ])
        rows.append(["Total", "", "", "", _fmt_mme(report.mme.total_mme_per_day)])
        table = Table(rows, colWidths=[2.2 * inch, 0.9 * inch, 1.3 * inch, 1.2 * inch, 1.0 * inch])
        table.setStyle(TableStyle([
            ('BACKGROUND', (0, 0), (-1, 0), HexColor("#1F2937")),
            ('TEXTCOLOR', (0, 0), (-1, 0), white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('FONTNAME', (0, -1), (-1, -1), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, HexColor("#D1D5DB")),
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ALIGN', (-1, 0), (-1, -1), 'RIGHT'),
        ]))
        return table

    def _findings_table(self, findings: List[SafetyFinding]) -> Table:
        body = self._styles['Normal']
        rows = [["Severity", "Issue", "Recommendation"]]
        style = [
            ('BACKGROUND', (0, 0), (-1, 0), HexColor("#1F2937")),
            ('TEXTCOLOR', (0, 0), (-1, 0), white),
            ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
            ('GRID', (0, 0), (-1, -1), 0.5, HexColor("#D1D5DB")),
            ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ]
        for i, f in enumerate(findings, start=1):
            rows.append([
                f.severity.value.upper(),
                Paragraph(_pdf_text(f.issue), body),
                Paragraph(_pdf_text(f.recommendation), body),
            ])
            style.append(('BACKGROUND', (0, i), (-1, i), SEVERITY_COLORS[f.severity]))
        table = Table(rows, colWidths=[0.9 * inch, 2.4 * inch, 3.3 * inch])
        table.setStyle(TableStyle(style))
        return table
