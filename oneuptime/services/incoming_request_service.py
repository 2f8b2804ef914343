import logging
from typing import Any

from fastapi import status

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.database import get_connection
from oneuptime.core.errors import AppError, bad_data
from oneuptime.models.entities import IncomingRequestEntity, MonitorEntity
from oneuptime.models.schemas.incident import IncidentRead
from oneuptime.models.schemas.incoming_request import (
    IncomingRequestListResponse,
    IncomingRequestRead,
    IncomingRequestWriteRequest,
)
from oneuptime.repositories.incoming_request_repository import (
    IncomingRequestFilter,
    IncomingRequestRepository,
)
from oneuptime.repositories.monitor_repository import MonitorRepository
from oneuptime.services.incident_service import IncidentService

logger = logging.getLogger(__name__)

NOT_FOUND_MESSAGE = "Incoming request not found or does not exist"

# filter_criteria values and the monitor attribute they match against
FILTER_CRITERIA_FIELDS = {
    "thirdPartyVariable": "third_party_variables",
    "third_party_variables": "third_party_variables",
    "name": "name",
}


def _to_incoming_request_read(request: IncomingRequestEntity) -> IncomingRequestRead:
    return IncomingRequestRead(
        id=request.id,
        project_id=request.project_id,
        name=request.name,
        url=request.url,
        is_default=request.is_default,
        create_incident=request.create_incident,
        filter_criteria=request.filter_criteria,
        filter_condition=request.filter_condition,
        filter_text=request.filter_text,
        monitors=request.monitor_ids,
        created_at=request.created_at,
        updated_at=request.updated_at,
    )


def monitor_matches_filter(monitor: MonitorEntity, request: IncomingRequestEntity) -> bool:
    """Apply the request's filter to a monitor; requests without a full filter match all."""
    if not (request.filter_criteria and request.filter_condition and request.filter_text):
        return True

    attribute = FILTER_CRITERIA_FIELDS.get(request.filter_criteria)
    if attribute is None:
        logger.warning(
            "Incoming request %s has unsupported filter criteria %r",
            request.id,
            request.filter_criteria,
        )
        return False

    contains = request.filter_text in getattr(monitor, attribute)
    if request.filter_condition == "equalTo":
        return contains
    return not contains


class IncomingRequestService:
    def __init__(
        self,
        incoming_request_repository: IncomingRequestRepository,
        monitor_repository: MonitorRepository,
        incident_service: IncidentService,
        database_url: str | None = None,
        settings: Settings | None = None,
    ) -> None:
        self.incoming_request_repository = incoming_request_repository
        self.monitor_repository = monitor_repository
        self.incident_service = incident_service
        self.database_url = database_url
        self.settings = settings or get_settings()

    def find_by(
        self,
        request_filter: IncomingRequestFilter,
        *,
        limit: int | str | None = 0,
        skip: int | str | None = 0,
    ) -> list[IncomingRequestRead]:
        requests = self.incoming_request_repository.find_by(
            request_filter,
            limit=int(limit or 0),
            offset=int(skip or 0),
        )
        return [_to_incoming_request_read(request) for request in requests]

    def find_one_by(self, request_filter: IncomingRequestFilter) -> IncomingRequestRead | None:
        request = self.incoming_request_repository.find_one_by(request_filter)
        return _to_incoming_request_read(request) if request is not None else None

    def count_by(self, request_filter: IncomingRequestFilter) -> int:
        return self.incoming_request_repository.count_by(request_filter)

    def list_requests(self, project_id: int, *, limit: int, skip: int) -> IncomingRequestListResponse:
        request_filter = IncomingRequestFilter(project_id=project_id)
        with get_connection(self.database_url) as connection:
            requests = self.incoming_request_repository.find_by(
                request_filter,
                limit=limit,
                offset=skip,
                connection=connection,
            )
            count = self.incoming_request_repository.count_by(request_filter, connection=connection)
        return IncomingRequestListResponse(
            data=[_to_incoming_request_read(request) for request in requests],
            count=count,
        )

    def get_request(self, project_id: int, request_id: int) -> IncomingRequestRead:
        request = self.incoming_request_repository.find_one_by(
            IncomingRequestFilter(id=request_id, project_id=project_id)
        )
        if request is None:
            raise self._not_found(request_id)
        return _to_incoming_request_read(request)

    def create(self, project_id: int, payload: IncomingRequestWriteRequest) -> IncomingRequestRead:
        monitor_ids = self._validate_monitors(
            payload.is_default,
            payload.monitors,
            action="create",
        )

        with get_connection(self.database_url) as connection:
            if payload.is_default:
                self._clear_default(project_id, keep_request_id=None, connection=connection)

            request = self.incoming_request_repository.create(
                project_id=project_id,
                name=self._validate_name(payload.name),
                is_default=payload.is_default,
                create_incident=payload.create_incident,
                filter_criteria=payload.filter_criteria,
                filter_condition=payload.filter_condition,
                filter_text=payload.filter_text,
                monitor_ids=monitor_ids,
                connection=connection,
            )
            request = self.get_request_url(project_id, request.id, connection=connection)

        logger.info("Incoming request %s created in project %s", request.id, project_id)
        return _to_incoming_request_read(request)

    def get_request_url(
        self,
        project_id: int,
        request_id: int,
        connection: Any = None,
    ) -> IncomingRequestEntity:
        request_url = (
            f"{self.settings.api_host.rstrip('/')}/incoming-request/{project_id}/request/{request_id}"
        )
        return self._update_one(
            IncomingRequestFilter(id=request_id, project_id=project_id),
            {"url": request_url},
            exclude_monitors=True,
            connection=connection,
        )

    def update_request(
        self,
        project_id: int,
        request_id: int,
        payload: IncomingRequestWriteRequest,
    ) -> IncomingRequestRead:
        return self.update_one_by(
            IncomingRequestFilter(id=request_id, project_id=project_id),
            {
                "name": self._validate_name(payload.name),
                "is_default": payload.is_default,
                "create_incident": payload.create_incident,
                "filter_criteria": payload.filter_criteria,
                "filter_condition": payload.filter_condition,
                "filter_text": payload.filter_text,
                "monitor_ids": payload.monitors,
            },
        )

    def update_one_by(
        self,
        request_filter: IncomingRequestFilter,
        fields: dict[str, Any],
        exclude_monitors: bool = False,
    ) -> IncomingRequestRead:
        with get_connection(self.database_url) as connection:
            request = self._update_one(
                request_filter,
                fields,
                exclude_monitors=exclude_monitors,
                connection=connection,
            )
        return _to_incoming_request_read(request)

    def update_by(
        self,
        request_filter: IncomingRequestFilter,
        fields: dict[str, Any],
    ) -> list[IncomingRequestRead]:
        with get_connection(self.database_url) as connection:
            self.incoming_request_repository.update_by(request_filter, fields, connection=connection)
            requests = self.incoming_request_repository.find_by(request_filter, connection=connection)
        return [_to_incoming_request_read(request) for request in requests]

    def delete_by(self, request_filter: IncomingRequestFilter) -> IncomingRequestRead:
        request = self.incoming_request_repository.soft_delete_by(request_filter)
        if request is None:
            raise self._not_found(request_filter.id)
        logger.info("Incoming request %s deleted", request.id)
        return _to_incoming_request_read(request)

    def hard_delete_by(self, request_filter: IncomingRequestFilter) -> int:
        return self.incoming_request_repository.hard_delete_by(request_filter)

    def remove_monitor(self, monitor_id: int) -> None:
        with get_connection(self.database_url) as connection:
            requests = self.incoming_request_repository.find_by(
                IncomingRequestFilter(monitor_id=monitor_id),
                connection=connection,
            )
            for request in requests:
                remaining = [item for item in request.monitor_ids if item != monitor_id]
                self.incoming_request_repository.update(
                    request.id,
                    {"monitor_ids": remaining},
                    connection=connection,
                )
                if remaining or request.is_default:
                    continue

                self.incoming_request_repository.soft_delete_by(
                    IncomingRequestFilter(id=request.id),
                    connection=connection,
                )
                logger.info(
                    "Incoming request %s deleted after its last monitor %s was removed",
                    request.id,
                    monitor_id,
                )

    def handle_incoming_request_action(
        self,
        project_id: int,
        request_id: int,
        filter_text: str | None = None,
    ) -> list[IncidentRead]:
        request_filter = IncomingRequestFilter(id=request_id, project_id=project_id)
        if filter_text and filter_text.strip():
            request_filter.filter_text = filter_text

        with get_connection(self.database_url) as connection:
            request = self.incoming_request_repository.find_one_by(request_filter, connection=connection)
            if request is None or not request.create_incident:
                logger.info("Incoming request %s in project %s triggered nothing", request_id, project_id)
                return []

            if request.is_default:
                monitors = self.monitor_repository.list_by_project(project_id, connection=connection)
            else:
                monitors = self.monitor_repository.list_by_ids(request.monitor_ids, connection=connection)

        incidents: list[IncidentRead] = []
        for monitor in monitors:
            if not monitor_matches_filter(monitor, request):
                continue
            incidents.append(
                self.incident_service.create(
                    project_id=project_id,
                    monitor_id=monitor.id,
                    incident_type="offline",
                )
            )
        return incidents

    def _update_one(
        self,
        request_filter: IncomingRequestFilter,
        fields: dict[str, Any],
        *,
        exclude_monitors: bool,
        connection: Any,
    ) -> IncomingRequestEntity:
        changes = dict(fields)
        if not exclude_monitors:
            changes["monitor_ids"] = self._validate_monitors(
                bool(changes.get("is_default")),
                changes.get("monitor_ids") or [],
                action="update",
            )

        current = self.incoming_request_repository.find_one_by(request_filter, connection=connection)
        if current is None:
            raise self._not_found(request_filter.id)

        if changes.get("is_default"):
            self._clear_default(current.project_id, keep_request_id=current.id, connection=connection)

        updated = self.incoming_request_repository.update(current.id, changes, connection=connection)
        if updated is None:
            raise self._not_found(current.id)
        return updated

    def _clear_default(
        self,
        project_id: int,
        *,
        keep_request_id: int | None,
        connection: Any,
    ) -> None:
        existing = self.incoming_request_repository.find_one_by(
            IncomingRequestFilter(project_id=project_id, is_default=True),
            connection=connection,
        )
        if existing is not None and existing.id != keep_request_id:
            self.incoming_request_repository.update(
                existing.id,
                {"is_default": False},
                connection=connection,
            )

    def _validate_name(self, name: str) -> str:
        normalized = name.strip()
        if not normalized:
            raise AppError(
                status_code=status.HTTP_422_UNPROCESSABLE_CONTENT,
                code="VALIDATION_ERROR",
                message="Incoming request name cannot be empty.",
                details={"field": "name"},
            )
        return normalized

    def _validate_monitors(self, is_default: bool, monitor_ids: list[int], *, action: str) -> list[int]:
        if is_default:
            return list(dict.fromkeys(monitor_ids))
        if not monitor_ids:
            raise bad_data(f"You need at least one monitor to {action} an incoming request")
        if len(set(monitor_ids)) != len(monitor_ids):
            raise bad_data("You cannot have multiple selection of a monitor")
        return list(monitor_ids)

    def _not_found(self, request_id: int | None) -> AppError:
        return AppError(
            status_code=status.HTTP_404_NOT_FOUND,
            code="INCOMING_REQUEST_NOT_FOUND",
            message=NOT_FOUND_MESSAGE,
            details={"request_id": request_id},
        )
