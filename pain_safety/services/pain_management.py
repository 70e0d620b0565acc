"""
Pain Management Service

Orchestrates the MME calculator, interaction rules, risk layer and report
generator for the HTTP routes. Returns plain dicts keyed by the response
model field names; the routes wrap them in pydantic models.
"""
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from pain_safety import config
from pain_safety.core.clinical import InteractionRuleEvaluator
from pain_safety.core.mme import MmeCalculator, MmeResult, factor_table
from pain_safety.core.mme.conversion import EXCLUDED_FROM_MME
from pain_safety.core.regimen import MedicationEntry, PatientContext, parse_medication_line
from pain_safety.core.reports import OpioidReport, OpioidReportGenerator
from pain_safety.core.risk import (
    OpioidMisuseRiskAssessor,
    mme_recommendations,
    mme_risk_flags,
    safety_recommendations,
)
from pain_safety.utils import get_logger

logger = get_logger(__name__)


class PainManagementService:
    """Unified service for MME, safety checks, risk scoring and reports."""

    def __init__(
        self,
        calculator: Optional[MmeCalculator] = None,
        evaluator: Optional[InteractionRuleEvaluator] = None,
        assessor: Optional[OpioidMisuseRiskAssessor] = None,
        report_generator: Optional[OpioidReportGenerator] = None,
    ):
        self.calculator = calculator or MmeCalculator()
        self.evaluator = evaluator or InteractionRuleEvaluator()
        self.assessor = assessor or OpioidMisuseRiskAssessor()
        self.report_generator = report_generator or OpioidReportGenerator(output_dir=config.REPORTS_DIR)

    # ---- MME ----

    def calculate_mme(
        self,
        medications: List[MedicationEntry],
        patient: Optional[PatientContext] = None,
    ) -> Dict[str, Any]:
        result = self.calculator.calculate(medications)
        return self._mme_payload(result, patient)

    @staticmethod
    def _mme_payload(result: MmeResult, patient: Optional[PatientContext]) -> Dict[str, Any]:
        return {
            "total_mme": result.total_mme_per_day,
            "per_medication": [b.to_dict() for b in result.breakdown],
            "risk_flags": mme_risk_flags(result, patient),
            "recommendations": mme_recommendations(result),
            "thresholds": {
                "caution_at_50": result.caution_at_50,
                "avoid_at_90": result.avoid_at_90,
            },
            "notes": [b.note for b in result.breakdown if b.note],
        }

    # ---- Safety ----

    def safety_check(
        self,
        medications: List[MedicationEntry],
        patient: Optional[PatientContext] = None,
    ) -> Dict[str, Any]:
        findings = self.evaluator.evaluate(medications, patient)
        total = self.calculator.calculate(medications).total_mme_per_day
        summary = self.evaluator.summarise(findings)
        names = [m.name for m in medications if m.name]
        return {
            "findings": summary["findings"],
            "recommendations": safety_recommendations(names, patient, total),
            "total_mme": total,
            "major_count": summary["major_count"],
            "moderate_count": summary["moderate_count"],
        }

    def highlight(
        self,
        medications: List[MedicationEntry],
        patient: Optional[PatientContext] = None,
    ) -> Dict[str, Any]:
        rows = self.evaluator.highlight(medications, patient)
        return {"rows": [r.to_dict() for r in rows]}

    # ---- Misuse risk ----

    def risk_assessment(
        self,
        medications: List[MedicationEntry],
        patient: Optional[PatientContext] = None,
    ) -> Dict[str, Any]:
        return self.assessor.assess(patient, medications).to_dict()

    # ---- Parsing ----

    @staticmethod
    def parse_lines(lines: List[str]) -> List[MedicationEntry]:
        """Parse free-text medication lines; blank lines are skipped."""
        return [parse_medication_line(line) for line in lines if line and line.strip()]

    # ---- Reference ----

    @staticmethod
    def conversion_factors() -> Dict[str, Any]:
        return {
            "factors": [cf.to_dict() for cf in factor_table()],
            "excluded": list(EXCLUDED_FROM_MME),
        }

    # ---- Reports ----

    def build_report(
        self,
        medications: List[MedicationEntry],
        patient: Optional[PatientContext] = None,
        patient_id: str = "ANONYMOUS",
        include_misuse_risk: bool = True,
    ) -> OpioidReport:
        result = self.calculator.calculate(medications)
        findings = self.evaluator.evaluate(medications, patient)
        names = [m.name for m in medications if m.name]
        recommendations = mme_recommendations(result)
        for rec in safety_recommendations(names, patient, result.total_mme_per_day):
            if rec not in recommendations:
                recommendations.append(rec)
        misuse = self.assessor.assess(patient, medications) if include_misuse_risk else None

        report = self.report_generator.build(
            mme=result,
            findings=findings,
            risk_flags=mme_risk_flags(result, patient),
            recommendations=recommendations,
            misuse_risk=misuse,
            patient_id=patient_id,
        )
        logger.info(
            f"Report {report.report_id}: {result.total_mme_per_day} MME/day, "
            f"{len(findings)} finding(s)"
        )
        return report

    def report_csv(self, report: OpioidReport) -> str:
        return self.report_generator.to_csv(report)

    async def write_report_pdf(self, report: OpioidReport) -> str:
        """Render the PDF off the event loop."""
        return await run_in_threadpool(self.report_generator.write_pdf, report)
