"""
Unit Tests for Report Generation

Opioid risk report JSON, CSV and PDF export.
"""
import csv
import io
import os

import pytest

from pain_safety.core.clinical import InteractionRuleEvaluator
from pain_safety.core.mme import calculate_mme
from pain_safety.core.regimen import MedicationEntry, PatientContext
from pain_safety.core.reports import OpioidReport, OpioidReportGenerator
from pain_safety.core.reports.opioid_report import CSV_HEADER
from pain_safety.core.risk import OpioidMisuseRiskAssessor, mme_risk_flags
from pain_safety.utils.exceptions import ReportGenerationError


@pytest.fixture
def generator(reports_dir) -> OpioidReportGenerator:
    return OpioidReportGenerator(output_dir=str(reports_dir))


@pytest.fixture
def report(generator, high_risk_regimen) -> OpioidReport:
    patient = PatientContext(age=70, has_sleep_apnea=True)
    meds = high_risk_regimen + [MedicationEntry(name="buprenorphine", dose_mg_per_administration=8)]
    mme = calculate_mme(meds)
    return generator.build(
        mme=mme,
        findings=InteractionRuleEvaluator().evaluate(meds, patient),
        risk_flags=mme_risk_flags(mme, patient),
        recommendations=["Offer naloxone and counsel household on use."],
        misuse_risk=OpioidMisuseRiskAssessor().assess(patient, meds),
        patient_id="PT-001",
    )


class TestOpioidReport:

    def test_report_id_format(self, report):
        assert report.report_id.startswith("OR-")
        assert report.patient_id == "PT-001"

    def test_to_dict(self, report):
        data = report.to_dict()
        assert data["mme"]["total_mme"] == 60.0
        assert len(data["mme"]["items"]) == 4
        assert [f["finding_id"] for f in data["findings"]] == ["OPI-SED-001", "OPI-SED-002"]
        assert data["misuse_risk"]["overall_risk"] == "moderate"
        assert data["pdf_path"] is None

    def test_report_ids_unique(self, generator):
        mme = calculate_mme([])
        ids = {generator.build(mme=mme, findings=[]).report_id for _ in range(5)}
        assert len(ids) == 5


class TestCsvExport:

    def test_header_rows_and_total(self, generator, report):
        rows = list(csv.reader(io.StringIO(generator.to_csv(report))))
        assert rows[0] == CSV_HEADER
        assert len(rows) == 1 + 4 + 1
        assert rows[1] == ["oxycodone", "oral", "40 mg/day", "1.5", "60.00"]
        assert rows[-1] == ["Total", "", "", "", "60.00"]

    def test_non_opioid_has_blank_dose(self, generator, report):
        rows = list(csv.reader(io.StringIO(generator.to_csv(report))))
        lorazepam = rows[2]
        assert lorazepam[0] == "lorazepam"
        assert lorazepam[2] == ""
        assert lorazepam[4] == "0.00"

    def test_names_with_commas_are_quoted(self, generator):
        mme = calculate_mme([MedicationEntry(name="oxycodone, IR", dose_mg_per_administration=5,
                                             administrations_per_day=2)])
        text = generator.to_csv(generator.build(mme=mme, findings=[]))
        assert '"oxycodone, IR"' in text

    def test_fractional_rows_add_up_to_total(self, generator):
        mme = calculate_mme([
            MedicationEntry(name="codeine", dose_mg_per_administration=1, administrations_per_day=1),
            MedicationEntry(name="codeine", dose_mg_per_administration=1, administrations_per_day=1),
        ])
        rows = list(csv.reader(io.StringIO(generator.to_csv(generator.build(mme=mme, findings=[])))))
        assert [r[4] for r in rows[1:-1]] == ["0.15", "0.15"]
        assert rows[-1][4] == "0.30"
        assert sum(float(r[4]) for r in rows[1:-1]) == pytest.approx(float(rows[-1][4]))


class TestJsonExport:

    def test_total_matches_items(self, generator):
        mme = calculate_mme([
            MedicationEntry(name="oxycodone", dose_mg_per_administration=5.5, administrations_per_day=1),
        ])
        data = generator.build(mme=mme, findings=[]).to_dict()
        assert data["mme"]["total_mme"] == pytest.approx(8.25)
        assert data["mme"]["total_mme"] == pytest.approx(
            sum(item["mme_per_day"] for item in data["mme"]["items"]))


class TestPdfExport:

    def test_write_pdf(self, generator, report, reports_dir):
        path = generator.write_pdf(report)
        assert path == os.path.join(str(reports_dir), f"{report.report_id}.pdf")
        assert report.pdf_path == path
        with open(path, "rb") as f:
            assert f.read(4) == b"%PDF"

    def test_pdf_without_findings_or_misuse(self, generator):
        report = generator.build(mme=calculate_mme([]), findings=[])
        path = generator.write_pdf(report)
        assert os.path.getsize(path) > 0

    def test_pdf_failure_raises_report_error(self, generator, report, monkeypatch):
        def boom(*args, **kwargs):
            raise OSError("disk full")

        monkeypatch.setattr(generator, "_story", boom)
        with pytest.raises(ReportGenerationError) as exc_info:
            generator.write_pdf(report)
        assert exc_info.value.code == "REPORT_ERROR"
        assert report.pdf_path is None
