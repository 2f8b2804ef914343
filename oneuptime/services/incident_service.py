import logging
from dataclasses import dataclass, field, fields
from datetime import UTC, datetime
from typing import Any

from fastapi import status

from oneuptime.core.database import get_connection
from oneuptime.core.errors import AppError, bad_data
from oneuptime.models.entities import IncidentEntity, IncidentType
from oneuptime.models.schemas.incident import (
    IncidentListMeta,
    IncidentListResponse,
    IncidentRead,
    SubProjectIncidents,
)
from oneuptime.repositories.incident_repository import IncidentFilter, IncidentRepository
from oneuptime.repositories.monitor_repository import MonitorRepository
from oneuptime.repositories.project_repository import ProjectRepository
from oneuptime.services.incident_notifier import IncidentNotifier

logger = logging.getLogger(__name__)

SUB_PROJECT_PAGE_SIZE = 10


@dataclass(slots=True)
class IncidentChanges:
    """Fields for ``IncidentService.update``; falsy values leave the stored value alone."""

    project_id: int | None = None
    monitor_id: int | None = None
    created_by_id: int | None = None
    incident_type: IncidentType | None = None
    manually_created: bool = False
    created_by_zapier: bool = False
    acknowledged: bool = False
    acknowledged_by: int | None = None
    acknowledged_at: datetime | None = None
    acknowledged_by_zapier: bool = False
    resolved: bool = False
    resolved_by: int | None = None
    resolved_at: datetime | None = None
    resolved_by_zapier: bool = False
    internal_note: str | None = None
    investigation_note: str | None = None
    not_closed_by: list[int] = field(default_factory=list)


# incident_type is fixed once the incident exists
_CREATE_ONLY = {"incident_type"}


def _to_int(value: int | str | None) -> int:
    if value in (None, ""):
        return 0
    return int(value)


def _to_incident_read(incident: IncidentEntity) -> IncidentRead:
    return IncidentRead(
        id=incident.id,
        project_id=incident.project_id,
        monitor_id=incident.monitor_id,
        monitor_name=incident.monitor_name,
        created_by_id=incident.created_by_id,
        created_by_name=incident.created_by_name,
        incident_type=incident.incident_type,
        manually_created=incident.manually_created,
        acknowledged=incident.acknowledged,
        acknowledged_by=incident.acknowledged_by,
        acknowledged_at=incident.acknowledged_at,
        acknowledged_by_zapier=incident.acknowledged_by_zapier,
        resolved=incident.resolved,
        resolved_by=incident.resolved_by,
        resolved_at=incident.resolved_at,
        resolved_by_zapier=incident.resolved_by_zapier,
        created_by_zapier=incident.created_by_zapier,
        internal_note=incident.internal_note,
        investigation_note=incident.investigation_note,
        not_closed_by=incident.not_closed_by,
        created_at=incident.created_at,
        updated_at=incident.updated_at,
    )


class IncidentService:
    def __init__(
        self,
        incident_repository: IncidentRepository,
        monitor_repository: MonitorRepository,
        project_repository: ProjectRepository,
        notifier: IncidentNotifier,
        database_url: str | None = None,
    ) -> None:
        self.incident_repository = incident_repository
        self.monitor_repository = monitor_repository
        self.project_repository = project_repository
        self.notifier = notifier
        self.database_url = database_url

    def find_by(
        self,
        incident_filter: IncidentFilter,
        *,
        limit: int | str | None = 0,
        skip: int | str | None = 0,
    ) -> list[IncidentRead]:
        incidents = self.incident_repository.find_by(
            incident_filter,
            limit=_to_int(limit),
            offset=_to_int(skip),
        )
        return [_to_incident_read(incident) for incident in incidents]

    def count_by(self, incident_filter: IncidentFilter) -> int:
        return self.incident_repository.count_by(incident_filter)

    def find_one_by(self, incident_filter: IncidentFilter) -> IncidentRead | None:
        incident = self.incident_repository.find_one_by(incident_filter)
        return _to_incident_read(incident) if incident is not None else None

    def list_incidents(
        self,
        project_id: int,
        *,
        limit: int,
        skip: int,
        monitor_id: int | None = None,
        resolved: bool | None = None,
    ) -> IncidentListResponse:
        incident_filter = IncidentFilter(
            project_ids=[project_id],
            monitor_id=monitor_id,
            resolved=resolved,
        )
        with get_connection(self.database_url) as connection:
            incidents = self.incident_repository.find_by(
                incident_filter,
                limit=limit,
                offset=skip,
                connection=connection,
            )
            total = self.incident_repository.count_by(incident_filter, connection=connection)
        return IncidentListResponse(
            data=[_to_incident_read(incident) for incident in incidents],
            meta=IncidentListMeta(skip=skip, limit=limit, total=total),
        )

    def get_incident(self, project_id: int, incident_id: int) -> IncidentRead:
        incident = self.incident_repository.find_one_by(
            IncidentFilter(id=incident_id, project_ids=[project_id])
        )
        if incident is None:
            self._raise_incident_not_found(incident_id)
        return _to_incident_read(incident)

    def create(
        self,
        *,
        project_id: int,
        monitor_id: int,
        created_by_id: int | None = None,
        incident_type: IncidentType | None = None,
        manually_created: bool = False,
        created_by_zapier: bool = False,
    ) -> IncidentRead:
        with get_connection(self.database_url) as connection:
            monitor = self.monitor_repository.get_by_id(monitor_id, connection=connection)
            if monitor is None or monitor.project_id != project_id:
                raise bad_data("Monitor is not present.", details={"monitor_id": monitor_id})

            user_ids = self.project_repository.list_user_ids(project_id, connection=connection)
            incident = self.incident_repository.create(
                project_id=project_id,
                monitor_id=monitor_id,
                created_by_id=created_by_id,
                incident_type=incident_type or "offline",
                manually_created=manually_created,
                created_by_zapier=created_by_zapier,
                not_closed_by=user_ids,
                connection=connection,
            )

        logger.info("Incident %s created for monitor %s", incident.id, monitor_id)
        self.notifier.send_incident_created(incident)
        return _to_incident_read(incident)

    def update(self, incident_id: int | None, changes: IncidentChanges) -> IncidentRead:
        if incident_id is None:
            if changes.project_id is None or changes.monitor_id is None:
                raise bad_data("Project and monitor are required to create an incident.")
            return self.create(
                project_id=changes.project_id,
                monitor_id=changes.monitor_id,
                created_by_id=changes.created_by_id,
                incident_type=changes.incident_type,
                manually_created=changes.manually_created,
                created_by_zapier=changes.created_by_zapier,
            )

        with get_connection(self.database_url) as connection:
            incident = self._update_entity(incident_id, changes, connection=connection)
        return _to_incident_read(incident)

    def acknowledge(
        self,
        incident_id: int,
        user_id: int,
        name: str,
        zapier: bool = False,
    ) -> IncidentRead:
        with get_connection(self.database_url) as connection:
            incident = self._get_entity(incident_id, connection=connection)
            if incident.acknowledged:
                return _to_incident_read(incident)

            incident = self._update_entity(
                incident_id,
                IncidentChanges(
                    acknowledged=True,
                    acknowledged_by=user_id,
                    acknowledged_at=datetime.now(UTC),
                    acknowledged_by_zapier=zapier,
                ),
                connection=connection,
            )

        logger.info("Incident %s acknowledged by user %s", incident_id, user_id)
        self.notifier.send_incident_acknowledged(incident, name)
        return _to_incident_read(incident)

    def resolve(
        self,
        incident_id: int,
        user_id: int,
        name: str | None = None,
        zapier: bool = False,
    ) -> IncidentRead:
        now = datetime.now(UTC)
        with get_connection(self.database_url) as connection:
            incident = self._get_entity(incident_id, connection=connection)
            if incident.resolved:
                return _to_incident_read(incident)

            changes = IncidentChanges(
                resolved=True,
                resolved_by=user_id,
                resolved_at=now,
                resolved_by_zapier=zapier,
            )
            if not incident.acknowledged:
                changes.acknowledged = True
                changes.acknowledged_by = user_id
                changes.acknowledged_at = now
                changes.acknowledged_by_zapier = zapier

            incident = self._update_entity(incident_id, changes, connection=connection)

        logger.info("Incident %s resolved by user %s", incident_id, user_id)
        self.notifier.send_incident_resolved(incident, name)
        return _to_incident_read(incident)

    def close(self, incident_id: int, user_id: int) -> IncidentRead:
        incident = self.incident_repository.remove_not_closed_by(incident_id, user_id)
        if incident is None:
            self._raise_incident_not_found(incident_id)
        return _to_incident_read(incident)

    def get_unresolved_incidents(self, project_ids: list[int], user_id: int) -> list[IncidentRead]:
        unresolved_filter = IncidentFilter(project_ids=project_ids, resolved=False)
        with get_connection(self.database_url) as connection:
            for incident in self.incident_repository.find_by(unresolved_filter, connection=connection):
                if user_id not in incident.not_closed_by:
                    self.incident_repository.update(
                        incident.id,
                        {"not_closed_by": [*incident.not_closed_by, user_id]},
                        connection=connection,
                    )

            unresolved = self.incident_repository.find_by(unresolved_filter, connection=connection)
            resolved_not_closed = self.incident_repository.find_by(
                IncidentFilter(project_ids=project_ids, resolved=True, not_closed_by=user_id),
                connection=connection,
            )

        return [_to_incident_read(incident) for incident in [*unresolved, *resolved_not_closed]]

    def get_sub_project_incidents(self, project_ids: list[int]) -> list[SubProjectIncidents]:
        results: list[SubProjectIncidents] = []
        with get_connection(self.database_url) as connection:
            for project_id in project_ids:
                incident_filter = IncidentFilter(project_ids=[project_id])
                incidents = self.incident_repository.find_by(
                    incident_filter,
                    limit=SUB_PROJECT_PAGE_SIZE,
                    connection=connection,
                )
                count = self.incident_repository.count_by(incident_filter, connection=connection)
                results.append(
                    SubProjectIncidents(
                        project_id=project_id,
                        incidents=[_to_incident_read(incident) for incident in incidents],
                        count=count,
                        skip=0,
                        limit=SUB_PROJECT_PAGE_SIZE,
                    )
                )
        return results

    def delete_by(self, incident_filter: IncidentFilter, user_id: int | None) -> int:
        deleted_id = self.incident_repository.soft_delete_by(incident_filter, user_id)
        if deleted_id is None:
            raise AppError(
                status_code=status.HTTP_404_NOT_FOUND,
                code="INCIDENT_NOT_FOUND",
                message="Incident not found.",
                details={"incident_id": incident_filter.id},
            )
        logger.info("Incident %s deleted by user %s", deleted_id, user_id)
        return deleted_id

    def hard_delete_by(self, incident_filter: IncidentFilter) -> int:
        return self.incident_repository.hard_delete_by(incident_filter)

    def _get_entity(self, incident_id: int, connection: Any) -> IncidentEntity:
        incident = self.incident_repository.get_by_id(incident_id, connection=connection)
        if incident is None:
            self._raise_incident_not_found(incident_id)
        return incident

    def _update_entity(
        self,
        incident_id: int,
        changes: IncidentChanges,
        connection: Any,
    ) -> IncidentEntity:
        current = self._get_entity(incident_id, connection=connection)

        update_fields: dict[str, Any] = {}
        for change in fields(IncidentChanges):
            if change.name in _CREATE_ONLY or change.name == "not_closed_by":
                continue
            value = getattr(changes, change.name)
            if value:
                update_fields[change.name] = value

        if changes.not_closed_by:
            update_fields["not_closed_by"] = list(
                dict.fromkeys([*current.not_closed_by, *changes.not_closed_by])
            )

        if not update_fields:
            return current

        updated = self.incident_repository.update(incident_id, update_fields, connection=connection)
        if updated is None:
            self._raise_incident_not_found(incident_id)
        return updated

    def _raise_incident_not_found(self, incident_id: int) -> None:
        raise AppError(
            status_code=status.HTTP_404_NOT_FOUND,
            code="INCIDENT_NOT_FOUND",
            message="Incident not found.",
            details={"incident_id": incident_id},
        )
