"""
Tests for the tenant journey HTTP endpoints.
"""

import asyncio
from datetime import date

import pytest
from fastapi.testclient import TestClient

from rentdesk.api.deps import get_journey_service
from rentdesk.config import settings
from rentdesk.main import app
from rentdesk.services.journey_service import JourneyService
from tests.factories import FakeSources, make_tenant

HEADERS = {"X-Api-Key": "test-key", "X-Workspace-Id": "ws-1"}

RECORDS = {
    "bills": [
        {"id": "b1", "bill_number": "B-1", "status": "overdue", "total_amount": 8000,
         "balance_due": 8000, "bill_date": date(2024, 2, 1), "due_date": date(2024, 2, 5)},
    ],
    "complaints": [
        {"id": "k1", "title": "Noise", "status": "open", "created_at": "2024-02-10T09:00:00Z"},
    ],
}


@pytest.fixture
def sources():
    return FakeSources(tenant=make_tenant(), records=RECORDS)


@pytest.fixture
def client(monkeypatch, sources):
    monkeypatch.setattr(settings, "api_key", "test-key")
    app.dependency_overrides[get_journey_service] = lambda: JourneyService(sources, settings)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_requires_api_key(client):
    response = client.get("/tenants/tenant-1/journey", headers={"X-Workspace-Id": "ws-1"})
    assert response.status_code == 401

    response = client.get(
        "/tenants/tenant-1/journey",
        headers={"X-Api-Key": "wrong", "X-Workspace-Id": "ws-1"},
    )
    assert response.status_code == 401


def test_get_journey(client):
    response = client.get("/tenants/tenant-1/journey", headers=HEADERS)

    assert response.status_code == 200
    data = response.json()
    assert data["tenant_id"] == "tenant-1"
    assert data["total_events"] == 2
    assert [e["id"] for e in data["events"]] == ["complaint_created_k1", "bill_b1"]
    assert data["financial"]["total_overdue"] == 8000
    assert data["insights"]["active_alerts"][0]["id"] == "overdue_amount"


def test_query_filters(client):
    response = client.get(
        "/tenants/tenant-1/journey",
        headers=HEADERS,
        params={"categories": "financial", "from": "2024-02-01", "to": "2024-02-28", "limit": 1},
    )

    data = response.json()
    assert [e["id"] for e in data["events"]] == ["bill_b1"]
    assert data["has_more_events"] is False


def test_limit_is_capped(client, monkeypatch):
    monkeypatch.setattr(settings, "journey_max_events_limit", 1)

    data = client.get("/tenants/tenant-1/journey", headers=HEADERS, params={"limit": 50}).json()

    assert len(data["events"]) == 1
    assert data["has_more_events"] is True


def test_unknown_category_is_rejected(client):
    response = client.get(
        "/tenants/tenant-1/journey", headers=HEADERS, params={"categories": "financial,parking"}
    )
    assert response.status_code == 422


def test_unknown_tenant_is_404(client):
    response = client.get("/tenants/nobody/journey", headers=HEADERS)

    assert response.status_code == 404
    assert response.json()["detail"]["code"] == "NOT_FOUND"


def test_internal_failure_is_500(client, sources):
    sources.tenant_error = RuntimeError("boom")

    response = client.get("/tenants/tenant-1/journey", headers=HEADERS)

    assert response.status_code == 500
    assert response.json()["detail"]["code"] == "UNKNOWN_ERROR"


def test_timeout_is_504(client, monkeypatch):
    class SlowSources(FakeSources):
        async def get_tenant(self, tenant_id, workspace_id):
            await asyncio.sleep(5)

    monkeypatch.setattr(settings, "journey_timeout_seconds", 0.05)
    app.dependency_overrides[get_journey_service] = lambda: JourneyService(SlowSources(), settings)

    response = client.get("/tenants/tenant-1/journey", headers=HEADERS)

    assert response.status_code == 504


def test_category_counts(client):
    response = client.get("/tenants/tenant-1/journey/categories", headers=HEADERS)

    assert response.status_code == 200
    counts = response.json()["counts"]
    assert counts["financial"] == 1
    assert counts["complaint"] == 1
    assert counts["system"] == 0
