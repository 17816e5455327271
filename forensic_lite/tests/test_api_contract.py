"""
Tests for API Contract
======================

Ensures the API always returns valid JSON with expected structure.
Tests both success and error cases.
"""

import pytest
import json
import uuid
from pathlib import Path

# Add parent to path for imports
import sys
sys.path.insert(0, str(Path(__file__).parent.parent.parent))

from fastapi.testclient import TestClient
from forensic_lite.api import app
from forensic_lite.custody import GENESIS_HASH, CustodyLedger
from forensic_lite.schemas import AnalysisResponse, HealthResponse


# =============================================================================
# Test Client
# =============================================================================

@pytest.fixture
def client():
    """Create test client"""
    return TestClient(app)


@pytest.fixture
def sample_case():
    """Load sample case fixture with a unique case id"""
    fixture_path = Path(__file__).parent / "fixtures" / "sample_case.json"
    with open(fixture_path, 'r', encoding='utf-8') as f:
        data = json.load(f)
    data["case_id"] = f"case_{uuid.uuid4().hex[:12]}"
    return data


@pytest.fixture
def case_id():
    return f"case_{uuid.uuid4().hex[:12]}"


# =============================================================================
# Health Check Tests
# =============================================================================

class TestHealthEndpoint:
    """Tests for /health endpoint"""

    def test_health_returns_200(self, client):
        """Health check should return 200"""
        response = client.get("/health")
        assert response.status_code == 200

    def test_health_matches_schema(self, client):
        """Health check should match HealthResponse schema"""
        data = client.get("/health").json()
        health = HealthResponse(**data)
        assert health.status == "healthy"
        assert health.version == "1.0.0"


# =============================================================================
# Analysis Tests
# =============================================================================

class TestAnalyzeEndpoint:
    """Tests for /analyze endpoint"""

    def test_analyze_returns_200(self, client, sample_case):
        response = client.post("/analyze", json=sample_case)
        assert response.status_code == 200

    def test_analyze_matches_schema(self, client, sample_case):
        """Response should parse back into AnalysisResponse"""
        data = client.post("/analyze", json=sample_case).json()
        result = AnalysisResponse(**data)

        assert result.case_id == sample_case["case_id"]
        assert len(result.report_hash) == 128
        assert len(result.statements) == 8
        assert len(result.entities) == 2
        assert result.contradictions
        assert result.contradictions[0].severity.value == "critical"

    def test_analyze_records_custody(self, client, sample_case):
        data = client.post("/analyze", json=sample_case).json()

        assert data["metadata"]["custody_entries"] == 5
        assert data["metadata"]["documents"] == 2

        log = client.get(f"/cases/{sample_case['case_id']}/custody").json()
        assert log["head_hash"] == data["custody_head_hash"]
        assert log["entries"][-1]["action"] == "REPORT_GENERATED"
        assert log["entries"][-1]["target_hash"] == data["report_hash"]

    def test_same_input_same_report_hash(self, client, sample_case):
        first = client.post("/analyze", json=sample_case).json()
        second = client.post("/analyze", json=sample_case).json()
        assert first["report_hash"] == second["report_hash"]

    def test_case_id_generated(self, client, sample_case):
        del sample_case["case_id"]
        data = client.post("/analyze", json=sample_case).json()
        assert data["case_id"].startswith("case_")

    def test_empty_documents_returns_400(self, client):
        response = client.post("/analyze", json={"documents": []})

        assert response.status_code == 400
        error = response.json()["error"]
        assert error["code"] == "bad_request"
        assert "empty" in error["message"].lower()

    def test_missing_documents_returns_422(self, client):
        response = client.post("/analyze", json={"case_id": "x"})
        assert response.status_code == 422


# =============================================================================
# Custody Tests
# =============================================================================

class TestCustodyEndpoints:
    """Tests for /cases/{case_id}/custody endpoints"""

    def test_append_entry(self, client, case_id):
        response = client.post(f"/cases/{case_id}/custody", json={
            "action": "DOCUMENT_UPLOAD",
            "target_hash": "abc",
            "user_id": "investigator",
            "details": "Exhibit A",
        })

        assert response.status_code == 200
        entry = response.json()
        assert entry["previous_hash"] == GENESIS_HASH
        assert len(entry["entry_hash"]) == 128
        assert entry["user_id"] == "investigator"
        assert entry["integrity_status"] == "VERIFIED"

    def test_unknown_action_returns_422(self, client, case_id):
        response = client.post(f"/cases/{case_id}/custody", json={
            "action": "SHRED_EVIDENCE",
            "target_hash": "abc",
        })
        assert response.status_code == 422

    def test_list_and_verify(self, client, case_id):
        for target in ("a", "b", "c"):
            client.post(f"/cases/{case_id}/custody", json={"action": "EVIDENCE_ACCESSED", "target_hash": target})

        log = client.get(f"/cases/{case_id}/custody").json()
        assert len(log["entries"]) == 3
        assert log["head_hash"] == log["entries"][-1]["entry_hash"]

        verify = client.get(f"/cases/{case_id}/custody/verify").json()
        assert verify["integrity_status"] == "VERIFIED"
        assert verify["entries"] == 3

    def test_unknown_case_is_empty(self, client, case_id):
        log = client.get(f"/cases/{case_id}/custody").json()
        assert log["entries"] == []
        assert log["head_hash"] == GENESIS_HASH

    def test_reset(self, client, case_id):
        client.post(f"/cases/{case_id}/custody", json={"action": "CASE_CREATED", "target_hash": "abc"})

        reset = client.delete(f"/cases/{case_id}/custody").json()
        assert reset["entries"] == []
        assert reset["head_hash"] == GENESIS_HASH

        log = client.get(f"/cases/{case_id}/custody").json()
        assert log["entries"] == []

    def test_verify_records_tampering(self, client, case_id):
        for target in ("a", "b", "c"):
            client.post(f"/cases/{case_id}/custody", json={"action": "EVIDENCE_ACCESSED", "target_hash": target})
        records = client.get(f"/cases/{case_id}/custody").json()["entries"]
        records[0]["details"] = "edited after the fact"
        app.state.ledgers.put(case_id, CustodyLedger.from_records(records, case_id=case_id))

        verify = client.get(f"/cases/{case_id}/custody/verify").json()

        assert verify["integrity_status"] == "ENTRY_TAMPERED"
        assert verify["entries"] == 4
        log = client.get(f"/cases/{case_id}/custody").json()
        assert log["entries"][-1]["action"] == "TAMPERING_DETECTED"
