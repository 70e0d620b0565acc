"""
Integration Tests for the FastAPI app

Tests for MME, safety-check, highlight, risk, parse, report and health
endpoints. Uses async httpx for ASGI app testing.
"""
import csv
import io

import httpx
import pytest

from pain_safety.main import app
from pain_safety.routes import pain as pain_routes
from pain_safety.services.live_preview import LivePreviewSession, PainApiClient


@pytest.fixture
async def async_client():
    """Create async test client."""
    async with httpx.AsyncClient(
        transport=httpx.ASGITransport(app=app),
        base_url="http://test"
    ) as client:
        yield client


@pytest.fixture
def pdf_output(reports_dir, monkeypatch):
    """Redirect PDF output to a temp directory."""
    monkeypatch.setattr(pain_routes._service.report_generator, "output_dir", str(reports_dir))
    return reports_dir


OXY_AND_BENZO = {
    "medications": [
        {"name": "oxycodone", "route": "oral", "doseMgPerDose": 10, "dosesPerDay": 4},
        {"name": "lorazepam", "route": "oral", "doseMgPerDose": 1, "dosesPerDay": 2},
    ],
    "patient_context": {"age": 45},
}


@pytest.mark.asyncio
class TestHealthEndpoints:

    async def test_root_endpoint(self, async_client):
        response = await async_client.get("/")
        assert response.status_code == 200

        data = response.json()
        assert data["status"] == "healthy"
        assert "version" in data

    async def test_health_endpoint(self, async_client):
        response = await async_client.get("/health")
        assert response.status_code == 200
        assert "rule_opioid_benzodiazepine" in response.json()["rules"]


@pytest.mark.asyncio
class TestMmeEndpoint:

    async def test_camel_case_request(self, async_client):
        response = await async_client.post("/api/pain/opiates/mme", json={
            "medications": [
                {"name": "oxycodone", "route": "oral", "doseMgPerDose": 5, "dosesPerDay": 4},
                {"name": "fentanyl", "route": "transdermal", "strengthMcgPerHr": 25},
            ]
        })
        assert response.status_code == 200

        data = response.json()
        assert data["totalMME"] == pytest.approx(90.0)
        assert [m["mmePerDay"] for m in data["perMedication"]] == [30.0, 60.0]
        assert "Total MME ≥ 90/day" in data["riskFlags"]
        assert data["thresholds"] == {"caution_at_50": True, "avoid_at_90": True}
        assert len(data["recommendations"]) == 2

    async def test_snake_case_request(self, async_client):
        response = await async_client.post("/api/pain/opiates/mme", json={
            "medications": [{"name": "morphine", "dose_mg_per_administration": 15,
                             "administrations_per_day": 2}],
            "patient_context": {"age": 70, "respiratory": True},
        })
        data = response.json()
        assert data["totalMME"] == pytest.approx(30.0)
        assert "Age ≥ 65: increased sensitivity" in data["riskFlags"]
        assert "Respiratory disease or OSA" in data["riskFlags"]

    async def test_empty_list(self, async_client):
        response = await async_client.post("/api/pain/opiates/mme", json={"medications": []})
        assert response.status_code == 200
        assert response.json()["totalMME"] == 0

    async def test_buprenorphine_note(self, async_client):
        response = await async_client.post("/api/pain/opiates/mme", json={
            "medications": [{"name": "buprenorphine", "route": "sublingual", "doseMgPerDose": 8}]
        })
        data = response.json()
        assert data["totalMME"] == 0
        assert data["perMedication"][0]["excluded"] is True
        assert data["notes"]

    async def test_negative_dose_rejected(self, async_client):
        response = await async_client.post("/api/pain/opiates/mme", json={
            "medications": [{"name": "oxycodone", "doseMgPerDose": -5}]
        })
        assert response.status_code == 422

    async def test_unknown_route_rejected(self, async_client):
        response = await async_client.post("/api/pain/opiates/mme", json={
            "medications": [{"name": "oxycodone", "route": "intranasal", "doseMgPerDose": 5}]
        })
        assert response.status_code == 422


@pytest.mark.asyncio
class TestSafetyCheckEndpoint:

    async def test_opioid_benzodiazepine(self, async_client):
        response = await async_client.post("/api/pain/opiates/safety-check", json=OXY_AND_BENZO)
        assert response.status_code == 200

        data = response.json()
        assert data["findings"][0]["issue"] == "Opioid + benzo/Z-drug"
        assert data["findings"][0]["severity"] == "major"
        assert data["majorCount"] == 1
        assert data["totalMME"] == pytest.approx(60.0)
        assert data["recommendations"] == ["Offer naloxone and counsel household on use."]

    async def test_phenotype_override(self, async_client):
        response = await async_client.post("/api/pain/opiates/safety-check", json={
            "medications": ["codeine"],
            "patient_context": {"cyp2d6": "normal"},
            "phenotypes": {"CYP2D6": "Poor Metabolizer"},
        })
        findings = response.json()["findings"]
        assert [f["findingId"] for f in findings] == ["OPI-PK-003"]

    async def test_renal_and_hepatic(self, async_client):
        response = await async_client.post("/api/pain/opiates/safety-check", json={
            "medications": [{"name": "morphine"}, {"name": "oxycodone"}],
            "patient_context": {"renal_clearance": 20, "liver_disease": True},
        })
        ids = {f["findingId"] for f in response.json()["findings"]}
        assert ids == {"OPI-ORG-001", "OPI-ORG-002"}

    async def test_no_findings(self, async_client):
        response = await async_client.post("/api/pain/opiates/safety-check", json={
            "medications": [{"name": "acetaminophen"}]
        })
        data = response.json()
        assert data["findings"] == []
        assert data["recommendations"] == []


@pytest.mark.asyncio
class TestHighlightEndpoint:

    async def test_rows_in_input_order(self, async_client):
        response = await async_client.post("/api/pain/opiates/highlight", json={
            "medications": [{"name": "oxycodone"}, {"name": "gabapentin"},
                            {"name": "lorazepam"}, {"name": "senna"}]
        })
        rows = response.json()["rows"]
        assert [r["name"] for r in rows] == ["oxycodone", "gabapentin", "lorazepam", "senna"]
        assert [r["severity"] for r in rows] == ["major", "moderate", "major", None]


@pytest.mark.asyncio
class TestRiskAssessmentEndpoint:

    async def test_assessment(self, async_client):
        response = await async_client.post("/api/pain/opiates/risk-assessment", json={
            "medications": [{"name": "oxycodone"}, {"name": "alprazolam"}],
            "patient_context": {"age": 70, "history_of_substance_abuse": True},
        })
        data = response.json()
        assert data["riskScore"] == 9
        assert data["overallRisk"] == "very_high"
        assert data["maxScore"] == 16


@pytest.mark.asyncio
class TestParseAndReference:

    async def test_parse_lines(self, async_client):
        response = await async_client.post("/api/pain/opiates/parse", json={
            "lines": ["oxycodone 5 mg q6h", "", "fentanyl 25 mcg/hr patch"]
        })
        meds = response.json()["medications"]
        assert len(meds) == 2
        assert meds[0]["doseMgPerAdministration"] == 5
        assert meds[0]["administrationsPerDay"] == 4
        assert meds[1]["route"] == "transdermal"
        assert meds[1]["patchStrengthMcgPerHr"] == 25

    async def test_parsed_lines_feed_mme(self, async_client):
        parsed = await async_client.post("/api/pain/opiates/parse", json={"lines": ["oxycodone 5 mg q6h"]})
        response = await async_client.post("/api/pain/opiates/mme", json=parsed.json())
        assert response.json()["totalMME"] == pytest.approx(30.0)

    async def test_conversion_factors(self, async_client):
        response = await async_client.get("/api/pain/opiates/conversion-factors")
        data = response.json()
        assert {"drug": "oxycodone", "route": "oral", "factor": 1.5, "unit": "mg"} in data["factors"]
        assert data["excluded"] == ["buprenorphine"]


@pytest.mark.asyncio
class TestReportEndpoints:

    async def test_json_report(self, async_client):
        response = await async_client.post("/api/pain/opiates/report",
                                           json={**OXY_AND_BENZO, "patient_id": "PT-9"})
        assert response.status_code == 200
        data = response.json()
        assert data["format"] == "json"
        assert data["report"]["patient_id"] == "PT-9"
        assert data["report"]["mme"]["total_mme"] == 60.0
        assert data["downloadUrl"] is None

    async def test_csv_report(self, async_client):
        response = await async_client.post("/api/pain/opiates/report?format=csv", json=OXY_AND_BENZO)
        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/csv")
        rows = list(csv.reader(io.StringIO(response.text)))
        assert rows[-1] == ["Total", "", "", "", "60.00"]

    async def test_pdf_report_and_download(self, async_client, pdf_output):
        response = await async_client.post("/api/pain/opiates/report?format=pdf", json=OXY_AND_BENZO)
        assert response.status_code == 200
        data = response.json()
        assert data["downloadUrl"].endswith("/download")

        download = await async_client.get(data["downloadUrl"])
        assert download.status_code == 200
        assert download.headers["content-type"] == "application/pdf"
        assert download.content[:4] == b"%PDF"

    async def test_invalid_format(self, async_client):
        response = await async_client.post("/api/pain/opiates/report?format=xml", json=OXY_AND_BENZO)
        assert response.status_code == 400

    async def test_download_unknown_report(self, async_client):
        response = await async_client.get("/api/pain/reports/OR-missing/download")
        assert response.status_code == 404


@pytest.mark.asyncio
class TestLivePreviewAgainstApp:

    async def test_preview_round_trip(self, async_client):
        client = PainApiClient(base_url="http://test/api", client=async_client)
        session = LivePreviewSession(client, mme_debounce_s=0, safety_debounce_s=0)
        session.update(OXY_AND_BENZO["medications"], OXY_AND_BENZO["patient_context"])
        await session.flush()
        assert session.mme["totalMME"] == pytest.approx(60.0)
        assert session.safety["findings"][0]["findingId"] == "OPI-SED-001"
        await session.aclose()
