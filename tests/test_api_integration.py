import os
from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient
from psycopg import connect

from oneuptime.main import app
from tests.helpers.db_env import isolated_database

_SEED = """
INSERT INTO projects (id, name) VALUES (1, 'Acme');
INSERT INTO users (id, name, email) VALUES (7, 'Ada', 'ada@example.com'), (8, 'Grace', 'grace@example.com');
INSERT INTO project_users (project_id, user_id) VALUES (1, 7), (1, 8);
INSERT INTO monitors (id, project_id, name, third_party_variables) VALUES
    (10, 1, 'api', ARRAY['prod']),
    (11, 1, 'web', ARRAY['staging']);
"""


@pytest.fixture(scope="module")
def integration_client() -> Iterator[TestClient]:
    base_url = os.getenv("TEST_DATABASE_URL")
    if not base_url:
        pytest.skip("Set TEST_DATABASE_URL to run integration tests.")

    # nothing listens on port 1, so member emails fail fast and are only logged
    previous_smtp_port = os.environ.get("SMTP_PORT")
    os.environ["SMTP_PORT"] = "1"
    try:
        with isolated_database(base_url, schema_prefix="oneuptime_api_test") as scoped_url:
            with connect(scoped_url, autocommit=True) as connection:
                with connection.cursor() as cursor:
                    cursor.execute(_SEED)
            with TestClient(app) as client:
                yield client
    finally:
        if previous_smtp_port is None:
            os.environ.pop("SMTP_PORT", None)
        else:
            os.environ["SMTP_PORT"] = previous_smtp_port


def test_incident_lifecycle_end_to_end(integration_client: TestClient) -> None:
    created = integration_client.post("/api/projects/1/incidents", json={"monitor_id": 10, "created_by_id": 7})
    assert created.status_code == 201
    incident = created.json()["data"]
    incident_id = incident["id"]
    assert incident["monitor_name"] == "api"
    assert incident["not_closed_by"] == [7, 8]

    missing_monitor = integration_client.post("/api/projects/1/incidents", json={"monitor_id": 999})
    assert missing_monitor.status_code == 400
    assert missing_monitor.json()["error"]["message"] == "Monitor is not present."

    acknowledged = integration_client.post(
        f"/api/projects/1/incidents/{incident_id}/acknowledge",
        json={"user_id": 8, "name": "Grace"},
    )
    assert acknowledged.status_code == 200
    assert acknowledged.json()["data"]["acknowledged_by"] == 8

    resolved = integration_client.post(
        f"/api/projects/1/incidents/{incident_id}/resolve",
        json={"user_id": 7, "name": "Ada"},
    )
    assert resolved.status_code == 200
    assert resolved.json()["data"]["resolved"] is True
    assert resolved.json()["data"]["acknowledged_by"] == 8

    listed = integration_client.get("/api/projects/1/incidents", params={"resolved": "true"})
    assert listed.json()["meta"]["total"] == 1

    closed = integration_client.post(f"/api/projects/1/incidents/{incident_id}/close", json={"user_id": 7})
    assert closed.json()["data"]["not_closed_by"] == [8]

    unresolved_for_ada = integration_client.get("/api/projects/1/incidents/unresolved", params={"user_id": 7})
    assert unresolved_for_ada.json()["data"] == []
    unresolved_for_grace = integration_client.get("/api/projects/1/incidents/unresolved", params={"user_id": 8})
    assert [item["id"] for item in unresolved_for_grace.json()["data"]] == [incident_id]

    removed = integration_client.delete(f"/api/projects/1/incidents/{incident_id}", params={"user_id": 7})
    assert removed.status_code == 204
    not_found = integration_client.get(f"/api/projects/1/incidents/{incident_id}")
    assert not_found.status_code == 404
    assert not_found.json()["error"]["code"] == "INCIDENT_NOT_FOUND"


def test_incoming_request_trigger_end_to_end(integration_client: TestClient) -> None:
    created = integration_client.post(
        "/api/projects/1/incoming-requests",
        json={
            "name": "Deploy hook",
            "create_incident": True,
            "monitors": [10, 11],
            "filter_criteria": "thirdPartyVariable",
            "filter_condition": "equalTo",
            "filter_text": "prod",
        },
    )
    assert created.status_code == 201
    request = created.json()["data"]
    assert request["url"].endswith(f"/incoming-request/1/request/{request['id']}")

    triggered = integration_client.post(
        f"/api/incoming-request/1/request/{request['id']}",
        json={"filter": "prod"},
    )
    assert triggered.status_code == 200
    incident_ids = triggered.json()["incident_ids"]
    assert len(incident_ids) == 1
    incident = integration_client.get(f"/api/projects/1/incidents/{incident_ids[0]}").json()["data"]
    assert incident["monitor_id"] == 10
    assert incident["incident_type"] == "offline"

    ignored = integration_client.get(f"/api/incoming-request/1/request/{request['id']}", params={"filter": "other"})
    assert ignored.json() == {"incident_ids": []}

    removed = integration_client.delete(f"/api/projects/1/incoming-requests/{request['id']}")
    assert removed.status_code == 204
    missing = integration_client.get(f"/api/projects/1/incoming-requests/{request['id']}")
    assert missing.status_code == 404


def test_domain_end_to_end(integration_client: TestClient) -> None:
    created = integration_client.post("/api/projects/1/domains", json={"domain": "Status.Acme.test"})
    assert created.status_code == 201
    domain = created.json()["data"]
    assert domain["domain"] == "status.acme.test"
    assert domain["domain_verification_text"].startswith("oneuptime-verification-")

    duplicate = integration_client.post("/api/projects/1/domains", json={"domain": "status.acme.test"})
    assert duplicate.status_code == 409

    listed = integration_client.get("/api/projects/1/domains")
    assert [item["id"] for item in listed.json()["data"]] == [domain["id"]]

    removed = integration_client.delete(f"/api/projects/1/domains/{domain['id']}")
    assert removed.status_code == 204
    missing = integration_client.delete(f"/api/projects/1/domains/{domain['id']}")
    assert missing.status_code == 400
