from dataclasses import asdict
from datetime import UTC, datetime

from fastapi import status
from fastapi.testclient import TestClient

from oneuptime.api.routes.incoming_requests import get_incoming_request_service
from oneuptime.core.errors import AppError, bad_data
from oneuptime.main import app
from oneuptime.models.schemas.incident import IncidentRead
from oneuptime.models.schemas.incoming_request import (
    IncomingRequestListResponse,
    IncomingRequestRead,
    IncomingRequestWriteRequest,
)
from oneuptime.services.incoming_request_service import NOT_FOUND_MESSAGE
from tests.helpers.fakes import make_incident


def _read(request_id: int, payload: IncomingRequestWriteRequest | None = None) -> IncomingRequestRead:
    now = datetime.now(UTC)
    payload = payload or IncomingRequestWriteRequest(name="Deploy hook", monitors=[10])
    return IncomingRequestRead(
        id=request_id,
        project_id=1,
        name=payload.name,
        url=f"http://localhost/api/incoming-request/1/request/{request_id}",
        is_default=payload.is_default,
        create_incident=payload.create_incident,
        filter_criteria=payload.filter_criteria,
        filter_condition=payload.filter_condition,
        filter_text=payload.filter_text,
        monitors=payload.monitors,
        created_at=now,
        updated_at=now,
    )


class _FakeIncomingRequestService:
    def __init__(self) -> None:
        self.triggers: list[tuple[int, int, str | None]] = []
        self.deleted: list[int | None] = []

    def list_requests(self, project_id: int, *, limit: int, skip: int) -> IncomingRequestListResponse:
        return IncomingRequestListResponse(data=[_read(1)], count=1)

    def create(self, project_id: int, payload: IncomingRequestWriteRequest) -> IncomingRequestRead:
        if not payload.monitors and not payload.is_default:
            raise bad_data("You need at least one monitor to create an incoming request")
        return _read(2, payload)

    def get_request(self, project_id: int, request_id: int) -> IncomingRequestRead:
        if request_id != 1:
            raise AppError(
                status_code=status.HTTP_404_NOT_FOUND,
                code="INCOMING_REQUEST_NOT_FOUND",
                message=NOT_FOUND_MESSAGE,
            )
        return _read(1)

    def update_request(self, project_id: int, request_id: int, payload: IncomingRequestWriteRequest):
        return _read(request_id, payload)

    def delete_by(self, request_filter) -> IncomingRequestRead:
        self.deleted.append(request_filter.id)
        return _read(request_filter.id)

    def handle_incoming_request_action(self, project_id: int, request_id: int, filter_text: str | None = None):
        self.triggers.append((project_id, request_id, filter_text))
        return [IncidentRead.model_validate(asdict(make_incident(id=11))), IncidentRead.model_validate(asdict(make_incident(id=12)))]


def _override() -> _FakeIncomingRequestService:
    fake = _FakeIncomingRequestService()
    app.dependency_overrides[get_incoming_request_service] = lambda: fake
    return fake


def test_incoming_request_crud(client: TestClient) -> None:
    fake = _override()

    listed = client.get("/api/projects/1/incoming-requests")
    created = client.post(
        "/api/projects/1/incoming-requests",
        json={"name": "Deploy hook", "monitors": [10, 11], "filter_condition": "equalTo"},
    )
    fetched = client.get("/api/projects/1/incoming-requests/1")
    updated = client.put("/api/projects/1/incoming-requests/1", json={"name": "Renamed", "monitors": [11]})
    deleted = client.delete("/api/projects/1/incoming-requests/1")

    assert listed.json()["count"] == 1
    assert created.status_code == status.HTTP_201_CREATED
    assert created.json()["data"]["monitors"] == [10, 11]
    assert fetched.json()["data"]["url"].endswith("/incoming-request/1/request/1")
    assert updated.json()["data"]["name"] == "Renamed"
    assert deleted.status_code == status.HTTP_204_NO_CONTENT
    assert fake.deleted == [1]


def test_create_without_monitors_is_bad_data(client: TestClient) -> None:
    _override()

    response = client.post("/api/projects/1/incoming-requests", json={"name": "Hook"})

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json()["error"] == {
        "code": "BAD_DATA",
        "message": "You need at least one monitor to create an incoming request",
        "details": {},
    }


def test_invalid_filter_condition_is_rejected(client: TestClient) -> None:
    _override()

    response = client.post(
        "/api/projects/1/incoming-requests",
        json={"name": "Hook", "monitors": [10], "filter_condition": "contains"},
    )

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_CONTENT


def test_missing_incoming_request_message(client: TestClient) -> None:
    _override()

    response = client.get("/api/projects/1/incoming-requests/2")

    assert response.status_code == status.HTTP_404_NOT_FOUND
    assert response.json()["error"]["message"] == NOT_FOUND_MESSAGE


def test_trigger_with_get_and_query_filter(client: TestClient) -> None:
    fake = _override()

    response = client.get("/api/incoming-request/1/request/3", params={"filter": "prod"})

    assert response.status_code == status.HTTP_200_OK
    assert response.json() == {"incident_ids": [11, 12]}
    assert fake.triggers == [(1, 3, "prod")]


def test_trigger_with_post_body_filter(client: TestClient) -> None:
    fake = _override()

    response = client.post(
        "/api/incoming-request/1/request/3",
        json={"filter": "eu-west", "payload": {"source": "ci"}},
    )

    assert response.status_code == status.HTTP_200_OK
    assert fake.triggers == [(1, 3, "eu-west")]
