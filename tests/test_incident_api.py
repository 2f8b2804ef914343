from dataclasses import asdict

from fastapi import status
from fastapi.testclient import TestClient

from oneuptime.api.routes.incidents import get_incident_service
from oneuptime.core.errors import AppError
from oneuptime.main import app
from oneuptime.models.schemas.incident import (
    IncidentListMeta,
    IncidentListResponse,
    IncidentRead,
    SubProjectIncidents,
)
from tests.helpers.fakes import make_incident


def _read(**overrides) -> IncidentRead:
    return IncidentRead.model_validate(asdict(make_incident(**overrides)))


class _FakeIncidentService:
    def __init__(self) -> None:
        self.calls: list[tuple] = []

    def list_incidents(self, project_id, *, limit, skip, monitor_id=None, resolved=None):
        self.calls.append(("list", project_id, limit, skip, monitor_id, resolved))
        return IncidentListResponse(
            data=[_read(id=1, project_id=project_id)],
            meta=IncidentListMeta(skip=skip, limit=limit, total=1),
        )

    def create(self, **kwargs) -> IncidentRead:
        self.calls.append(("create", kwargs))
        return _read(id=2, project_id=kwargs["project_id"], monitor_id=kwargs["monitor_id"], manually_created=True)

    def get_incident(self, project_id: int, incident_id: int) -> IncidentRead:
        if incident_id != 1:
            raise AppError(
                status_code=status.HTTP_404_NOT_FOUND,
                code="INCIDENT_NOT_FOUND",
                message="Incident not found.",
                details={"incident_id": incident_id},
            )
        return _read(id=1, project_id=project_id)

    def acknowledge(self, incident_id, user_id, name, zapier=False) -> IncidentRead:
        self.calls.append(("acknowledge", incident_id, user_id, name, zapier))
        return _read(id=incident_id, acknowledged=True, acknowledged_by=user_id)

    def resolve(self, incident_id, user_id, name=None, zapier=False) -> IncidentRead:
        self.calls.append(("resolve", incident_id, user_id, name, zapier))
        return _read(id=incident_id, acknowledged=True, resolved=True, resolved_by=user_id)

    def close(self, incident_id, user_id) -> IncidentRead:
        self.calls.append(("close", incident_id, user_id))
        return _read(id=incident_id, not_closed_by=[])

    def get_unresolved_incidents(self, project_ids, user_id):
        self.calls.append(("unresolved", project_ids, user_id))
        return [_read(id=1)]

    def get_sub_project_incidents(self, project_ids):
        return [SubProjectIncidents(project_id=item, incidents=[], count=0) for item in project_ids]

    def delete_by(self, incident_filter, user_id) -> int:
        self.calls.append(("delete", incident_filter.id, incident_filter.project_ids, user_id))
        return incident_filter.id


def _override() -> _FakeIncidentService:
    fake = _FakeIncidentService()
    app.dependency_overrides[get_incident_service] = lambda: fake
    return fake


def test_list_incidents_passes_filters(client: TestClient) -> None:
    fake = _override()

    response = client.get("/api/projects/1/incidents", params={"resolved": "false", "limit": 5, "skip": 10})

    assert response.status_code == status.HTTP_200_OK
    payload = response.json()
    assert payload["meta"] == {"skip": 10, "limit": 5, "total": 1}
    assert fake.calls == [("list", 1, 5, 10, None, False)]


def test_list_incidents_rejects_large_page(client: TestClient) -> None:
    _override()

    response = client.get("/api/projects/1/incidents", params={"limit": 500})

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT
    assert response.json()["error"]["code"] == "VALIDATION_ERROR"


def test_create_incident(client: TestClient) -> None:
    fake = _override()

    response = client.post("/api/projects/1/incidents", json={"monitor_id": 10, "created_by_id": 7})

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["data"]["id"] == 2
    assert fake.calls[0][1]["incident_type"] == "offline"
    assert fake.calls[0][1]["manually_created"] is True


def test_get_missing_incident_returns_error_body(client: TestClient) -> None:
    _override()

    response = client.get("/api/projects/1/incidents/99")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"]["code"] == "INCIDENT_NOT_FOUND"


def test_acknowledge_resolve_and_close(client: TestClient) -> None:
    fake = _override()

    acknowledged = client.post("/api/projects/1/incidents/1/acknowledge", json={"user_id": 7, "name": "Ada"})
    resolved = client.post(
        "/api/projects/1/incidents/1/resolve",
        json={"user_id": 8, "name": "Grace", "zapier": True},
    )
    closed = client.post("/api/projects/1/incidents/1/close", json={"user_id": 7})

    assert acknowledged.json()["data"]["acknowledged"] is True
    assert resolved.json()["data"]["resolved"] is True
    assert closed.json()["data"]["not_closed_by"] == []
    assert fake.calls == [
        ("acknowledge", 1, 7, "Ada", False),
        ("resolve", 1, 8, "Grace", True),
        ("close", 1, 7),
    ]


def test_acknowledge_incident_from_other_project_is_not_found(client: TestClient) -> None:
    fake = _override()

    response = client.post("/api/projects/1/incidents/5/acknowledge", json={"user_id": 7, "name": "Ada"})

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert fake.calls == []


def test_unresolved_and_sub_project_listings(client: TestClient) -> None:
    fake = _override()

    unresolved = client.get("/api/projects/1/incidents/unresolved", params={"user_id": 7, "project_ids": [1, 2]})
    sub_projects = client.get("/api/projects/1/incidents/sub-projects", params={"project_ids": [2, 3]})

    assert unresolved.status_code == status.HTTP_200_OK
    assert fake.calls == [("unresolved", [1, 2], 7)]
    assert [item["project_id"] for item in sub_projects.json()["data"]] == [2, 3]


def test_delete_incident(client: TestClient) -> None:
    fake = _override()

    response = client.delete("/api/projects/1/incidents/1", params={"user_id": 7})

    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert fake.calls == [("delete", 1, [1], 7)]
