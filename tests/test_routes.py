"""
Tests for the HTTP API.

GmailClient.from_access_token is patched to return an in-memory mailbox,
and AI classification is disabled so every record comes from heuristics.
"""

from unittest.mock import patch

import pytest

from apptrack.email.client import AuthenticationError, GmailClient, MailProviderError
from apptrack.sync import SUBJECT_QUERY
from conftest import FakeGmailClient

AUTH = {"Authorization": "Bearer test-token"}


@pytest.fixture
def mailbox(sample_messages):
    client = FakeGmailClient(sample_messages)
    with patch.object(GmailClient, "from_access_token", return_value=client) as factory:
        factory.client = client
        yield factory


def _use_client(fake):
    return patch.object(GmailClient, "from_access_token", return_value=fake)


# ===== AUTH =====


@pytest.mark.parametrize(
    "method,path",
    [("get", "/classify"), ("post", "/classify/incremental"), ("post", "/sync")],
)
@pytest.mark.parametrize("headers", [{}, {"Authorization": "Basic abc"}, {"Authorization": "Bearer "}])
def test_missing_bearer_token_is_401(client, method, path, headers):
    response = getattr(client, method)(path, headers=headers, json={"lastFetchTime": 0})
    assert response.status_code == 401
    assert response.get_json() == {"error": "Not authenticated"}


def test_rejected_credential_is_401(client):
    fake = FakeGmailClient(list_error=AuthenticationError("expired", status=401))
    with _use_client(fake):
        response = client.get("/classify", headers=AUTH)
    assert response.status_code == 401
    assert response.get_json() == {"error": "Not authenticated"}


# ===== CLASSIFY =====


def test_classify_returns_records(client, mailbox):
    response = client.get("/classify", headers=AUTH)

    assert response.status_code == 200
    data = response.get_json()
    assert [r["id"] for r in data] == ["m1", "m2", "m3"]
    assert data[1]["companyName"] == "Acme"
    assert data[1]["applicationStatus"] == "Rejected"
    mailbox.assert_called_once_with("test-token")


def test_classify_provider_failure_is_500(client, failing_list_client):
    with _use_client(failing_list_client):
        response = client.get("/classify", headers=AUTH)
    assert response.status_code == 500
    data = response.get_json()
    assert data["error"] == "Failed to fetch emails"
    assert "quota" in data["details"]


def test_incremental_requires_last_fetch_time(client, mailbox):
    for body in ({}, {"lastFetchTime": "yesterday"}, {"lastFetchTime": True}):
        response = client.post("/classify/incremental", headers=AUTH, json=body)
        assert response.status_code == 400


def test_incremental_queries_after_last_fetch_time(client, mailbox):
    response = client.post(
        "/classify/incremental", headers=AUTH, json={"lastFetchTime": 1705314600123}
    )
    assert response.status_code == 200
    assert len(response.get_json()) == 3
    query, limit = mailbox.client.queries[0]
    assert query == f"{SUBJECT_QUERY} after:2024-01-15T10:30:00.123Z"
    assert limit == 1000


def test_incremental_provider_failure_is_500(client):
    fake = FakeGmailClient(list_error=MailProviderError("backend error", status=503))
    with _use_client(fake):
        response = client.post("/classify/incremental", headers=AUTH, json={"lastFetchTime": 0})
    assert response.status_code == 500
    assert response.get_json()["error"] == "Failed to fetch new emails"


# ===== SYNC / DASHBOARD =====


def test_sync_then_incremental(client, mailbox):
    first = client.post("/sync", headers=AUTH)
    assert first.status_code == 200
    data = first.get_json()
    assert data["mode"] == "full"
    assert data["newRecords"] == 3
    assert data["total"] == 3
    assert data["lastSync"].endswith("Z")

    second = client.post("/sync", headers=AUTH)
    assert second.get_json()["mode"] == "incremental"
    assert second.get_json()["total"] == 3


def test_sync_in_flight_is_409(app, client, mailbox):
    coordinator = app.config["APPTRACK_COORDINATOR"]
    coordinator._lock.acquire()
    try:
        response = client.post("/sync", headers=AUTH)
    finally:
        coordinator._lock.release()
    assert response.status_code == 409


def test_failed_sync_keeps_stored_applications(app, client, mailbox, failing_list_client):
    client.post("/sync", headers=AUTH)
    before = client.get("/applications").get_json()

    with _use_client(failing_list_client):
        response = client.post("/sync", headers=AUTH)

    assert response.status_code == 500
    assert client.get("/applications").get_json() == before
    assert "quota" in client.get("/health").get_json()["lastSyncError"]


def test_applications_empty_before_first_sync(client):
    data = client.get("/applications").get_json()
    assert data["applications"] == []
    assert data["lastSync"] is None
    assert data["stats"]["Applied"] == 0


def test_applications_filters_and_stats(client, mailbox):
    client.post("/sync", headers=AUTH)

    data = client.get("/applications?status=Interview").get_json()
    assert [a["id"] for a in data["applications"]] == ["m1"]
    assert data["stats"]["Interview"] == 1
    assert data["stats"]["Rejected"] == 1
    assert data["stats"]["Application Received"] == 1
    assert data["lastSync"] is not None

    data = client.get("/applications?search=globex").get_json()
    assert [a["id"] for a in data["applications"]] == ["m3"]

    data = client.get("/applications?sort=company&order=asc").get_json()
    assert [a["companyName"] for a in data["applications"]] == ["Acme", "Acme Corp", "Globex"]


def test_applications_bad_query_is_400(client):
    assert client.get("/applications?status=Ghosted").status_code == 400
    assert client.get("/applications?sort=salary").status_code == 400


# ===== HEALTH =====


def test_health(app, client):
    response = client.get("/health")
    assert response.status_code == 200
    data = response.get_json()
    assert data["status"] == "ok"
    assert data["aiProvider"] is None
    assert data["store"] == str(app.config["APPTRACK_STORE"].db_path)
    assert data["syncInProgress"] is False
