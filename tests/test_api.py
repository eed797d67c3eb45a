"""Tests for the scoring and transition HTTP API."""

import hashlib
import hmac
import json
import pytest
import tempfile
from pathlib import Path

from fastapi.testclient import TestClient

from enquiry_engine.core.definitions import DefinitionStore
from enquiry_engine.website_api import config
from enquiry_engine.website_api.main import create_app
from enquiry_engine.website_api.services import evaluation

SECRET = "test-secret"
AUTH = {"X-Enquiry-Secret": SECRET}


@pytest.fixture
def store():
    """Definition store seeded with two tiers and a quotation status."""
    with tempfile.TemporaryDirectory() as tmpdir:
        store = DefinitionStore(data_path=Path(tmpdir) / "definitions.json")
        store.add_tier({
            "id": "PRI-20240101-0001",
            "name": "Solar High",
            "display_label": "HIGH",
            "color_code": "#ff0000",
            "score_range": {"min": 25, "max": 50},
            "scoring_rules": [
                {"field": "pv_capacity_kw", "operator": "greater_than", "value": 5, "score": 30},
            ],
        })
        store.add_tier({
            "id": "PRI-20240101-0002",
            "name": "Dormant",
            "is_active": False,
            "score_range": {"min": 0, "max": 100},
        })
        store.add_status({
            "id": "STS-20240101-0001",
            "name": "Quotation Sent",
            "category": "enquiry",
            "allowed_transitions": [
                {
                    "to_status": "Converted",
                    "roles": ["Sales Head"],
                    "conditions": [
                        {"field": "quotation_status", "operator": "equals", "value": "Accepted"},
                    ],
                },
                {"to_status": "Lost"},
            ],
        })
        yield store


@pytest.fixture
def client(store, monkeypatch):
    """Test client with the seeded store and a known API secret."""
    monkeypatch.setenv("ENQUIRY_API_SECRET", SECRET)
    monkeypatch.setenv("ENQUIRY_DEFINITIONS_PATH", str(store.data_path))
    config.reset_settings()
    monkeypatch.setattr(evaluation, "_store", store)

    app = create_app()
    app.dependency_overrides[evaluation.get_definition_store] = lambda: store
    yield TestClient(app)
    config.reset_settings()


class TestHealth:
    """Tests for health routes."""

    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"

    def test_ready_reports_active_counts(self, client):
        response = client.get("/ready")
        assert response.json() == {"status": "ready", "priority_score_types": 1, "status_types": 1}

    def test_ready_fails_on_invalid_definitions(self, client, monkeypatch, tmp_path):
        bad = tmp_path / "definitions.json"
        bad.write_text(json.dumps({"priority_score_types": ["not a tier"]}))
        monkeypatch.setenv("ENQUIRY_DEFINITIONS_PATH", str(bad))
        config.reset_settings()
        monkeypatch.setattr(evaluation, "_store", None)

        response = client.get("/ready")
        assert response.status_code == 503
        assert response.json()["status"] == "not_ready"


class TestAuth:
    """Tests for request authentication."""

    def test_missing_credentials(self, client):
        response = client.post("/v1/priority-score-types/calculate-score", json={"enquiry_data": {}})
        assert response.status_code == 401
        assert response.json()["detail"]["error"] == "auth_error"
        assert "X-Enquiry-Secret" in response.json()["detail"]["detail"]

    def test_wrong_shared_secret(self, client):
        response = client.get("/v1/profile-types", headers={"X-Enquiry-Secret": "nope"})
        assert response.status_code == 401
        assert response.json()["detail"]["detail"] == "Invalid shared secret"

    def test_bad_signature_rejected_even_with_valid_secret(self, client):
        response = client.post(
            "/v1/priority-score-types/calculate-score",
            json={"enquiry_data": {}},
            headers={"X-Enquiry-Signature": "0" * 64, **AUTH},
        )
        assert response.status_code == 401
        assert response.json()["detail"] == {
            "success": False,
            "error": "auth_error",
            "detail": "Request signature does not match body",
        }

    def test_hmac_signature(self, client):
        body = json.dumps({"enquiry_data": {"pv_capacity_kw": 10}}).encode()
        signature = hmac.new(SECRET.encode(), body, hashlib.sha256).hexdigest()
        response = client.post(
            "/v1/priority-score-types/calculate-score",
            content=body,
            headers={"X-Enquiry-Signature": signature, "Content-Type": "application/json"},
        )
        assert response.status_code == 200


class TestPriorityRoutes:
    """Tests for priority score type routes."""

    def test_calculate_score_selects_matching_tier(self, client):
        response = client.post(
            "/v1/priority-score-types/calculate-score",
            json={"enquiry_data": {"pv_capacity_kw": 10}},
            headers=AUTH,
        )
        assert response.status_code == 200
        data = response.json()["data"]
        assert data["total_score"] == 30
        assert data["selected_priority"]["name"] == "Solar High"
        assert data["selected_priority"]["display_label"] == "HIGH"
        assert data["selected_priority"]["color_code"] == "#ff0000"
        assert len(data["all_scores"]) == 1

    def test_calculate_score_without_match(self, client):
        response = client.post(
            "/v1/priority-score-types/calculate-score",
            json={"enquiry_data": {"pv_capacity_kw": 2}},
            headers=AUTH,
        )
        data = response.json()["data"]
        assert data == {"all_scores": [], "selected_priority": None, "total_score": 0}

    def test_calculate_score_requires_enquiry_data(self, client):
        response = client.post("/v1/priority-score-types/calculate-score", json={}, headers=AUTH)
        assert response.status_code == 400
        assert response.json()["detail"]["detail"] == "Enquiry data is required"

    def test_active_tiers(self, client):
        response = client.get("/v1/priority-score-types/active", headers=AUTH)
        body = response.json()
        assert body["count"] == 1
        assert body["data"][0]["id"] == "PRI-20240101-0001"


class TestStatusRoutes:
    """Tests for status type routes."""

    def test_allowed_transition(self, client):
        response = client.post(
            "/v1/status-types/Quotation Sent/can-transition",
            json={
                "record": {"quotation_status": "Accepted"},
                "target_status": "Converted",
                "actor_role": "Sales Head",
            },
            headers=AUTH,
        )
        assert response.status_code == 200
        assert response.json()["data"]["allowed"] is True

    def test_role_denied_is_forbidden(self, client):
        response = client.post(
            "/v1/status-types/Quotation Sent/can-transition",
            json={
                "record": {"quotation_status": "Accepted"},
                "target_status": "Converted",
                "actor_role": "Telecaller",
            },
            headers=AUTH,
        )
        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "role-not-permitted"

    def test_condition_denied_is_forbidden(self, client):
        response = client.post(
            "/v1/status-types/Quotation Sent/can-transition",
            json={
                "record": {"quotation_status": "Sent"},
                "target_status": "Converted",
                "actor_role": "Sales Head",
            },
            headers=AUTH,
        )
        assert response.status_code == 403
        assert response.json()["detail"]["error"] == "conditions-not-met"

    def test_unknown_status(self, client):
        response = client.post(
            "/v1/status-types/Nope/can-transition",
            json={"target_status": "Converted"},
            headers=AUTH,
        )
        assert response.status_code == 404

    def test_available_transitions(self, client):
        response = client.post(
            "/v1/status-types/Quotation Sent/available-transitions",
            json={"record": {"quotation_status": "Accepted"}, "actor_role": "Telecaller"},
            headers=AUTH,
        )
        assert response.json()["data"] == ["Lost"]

    def test_active_statuses(self, client):
        response = client.get("/v1/status-types/active", headers=AUTH)
        assert response.json()["data"][0]["name"] == "Quotation Sent"

    def test_active_statuses_filtered_by_category(self, client, store):
        store.add_status({"name": "New", "category": "lead"})

        response = client.get("/v1/status-types/active?category=lead", headers=AUTH)
        assert [s["name"] for s in response.json()["data"]] == ["New"]

        response = client.get("/v1/status-types/active", headers=AUTH)
        assert response.json()["count"] == 2

    def test_unknown_category_rejected(self, client):
        response = client.get("/v1/status-types/active?category=invoice", headers=AUTH)
        assert response.status_code == 422


class TestProfileRoutes:
    """Tests for profile type routes."""

    def test_profile_types(self, client):
        response = client.get("/v1/profile-types", headers=AUTH)
        data = response.json()["data"]
        assert data["project"] == "ProjectProfile"
        assert len(data) == 7
