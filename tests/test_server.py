import base64

import pytest
from fastapi.testclient import TestClient

from server.app import app


@pytest.fixture()
def client():
    return TestClient(app)


def test_health(client):
    assert client.get("/healthz").json() == {"ok": True}


def test_generate_returns_encoded_pdf(client, agreement_request):
    resp = client.post("/api/agreements/generate", json=agreement_request)
    assert resp.status_code == 200
    body = resp.json()
    assert body["success"] is True
    assert body["state"] == "completed"
    assert body["agreementNumber"].startswith("AGR-")
    assert body["agreementSummary"]["totalMonthlyCost"] == 1300
    assert base64.b64decode(body["pdfDocument"]).startswith(b"%PDF")


def test_generate_rejects_invalid_request(client, agreement_request):
    agreement_request["landlord"]["contact"]["email"] = "not-an-email"
    resp = client.post("/api/agreements/generate", json=agreement_request)
    assert resp.status_code == 400
    body = resp.json()
    assert body["success"] is False
    assert body["errors"] == ["Landlord email is invalid"]
    assert body["pdfDocument"] is None
    assert body["agreementNumber"] is None


def test_generate_pdf_streams_bytes(client, agreement_request):
    resp = client.post("/api/agreements/generate/pdf", json=agreement_request)
    assert resp.status_code == 200
    assert resp.headers["content-type"] == "application/pdf"
    number = resp.headers["x-agreement-number"]
    assert f"rental_agreement_{number}.pdf" in resp.headers["content-disposition"]
    assert resp.content.startswith(b"%PDF")


def test_generate_pdf_validation_failure_is_json(client):
    resp = client.post("/api/agreements/generate/pdf", json={})
    assert resp.status_code == 400
    body = resp.json()
    assert "pdfDocument" not in body
    assert "Landlord name is required" in body["errors"]


def test_validate_endpoint(client, agreement_request):
    agreement_request.pop("familyMembers")
    resp = client.post("/api/agreements/validate", json=agreement_request)
    assert resp.status_code == 200
    assert resp.json() == {
        "isValid": True,
        "errors": [],
        "warnings": ["No family members added - consider adding if applicable"],
    }


def test_duration_endpoint(client):
    resp = client.get("/api/agreements/duration", params={"startDate": "2024-01-01", "endDate": "2025-03-15"})
    assert resp.json() == {"years": 1, "months": 2, "days": 14, "totalDays": 439}

    bad = client.get("/api/agreements/duration", params={"startDate": "soon", "endDate": "2025-03-15"})
    assert bad.status_code == 400


def test_costs_endpoint(client):
    resp = client.post(
        "/api/agreements/costs",
        json={
            "rentAmount": 1000,
            "maintenanceCharges": 200,
            "additionalServices": [{"serviceName": "Gardening", "cost": 300, "billingFrequency": "Quarterly"}],
        },
    )
    body = resp.json()
    assert body["monthlyTotal"] == 1300
    assert body["yearlyTotal"] == 15600
    assert [row["item"] for row in body["breakdown"]] == ["Rent", "Maintenance Charges", "Gardening"]


def test_document_endpoint(client):
    ok = client.post("/api/documents/generate", json={"docType": "PDF", "content": "abc"})
    assert ok.json() == {"message": "PDF document class implementation generated with content length: 3"}
    bad = client.post("/api/documents/generate", json={"docType": "ODT"})
    assert bad.status_code == 400
    assert bad.json()["detail"] == "Unsupported document type: ODT"


def test_metrics_endpoint_reads_recorded_stages(client, agreement_request, monkeypatch):
    monkeypatch.setenv("METRICS_ENABLED", "1")
    client.post("/api/agreements/generate", json=agreement_request)
    body = client.get("/api/metrics").json()
    components = {row["component"] for row in body["records"]}
    assert components == {"validation", "render"}
    assert body["summary"]["sample_size"] == 2
    assert body["summary"]["errors"] == {}
