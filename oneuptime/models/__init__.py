"""Domain models and API schemas."""

from oneuptime.models.entities import (
    DomainEntity,
    IncidentEntity,
    IncomingRequestEntity,
    MonitorEntity,
    ScheduledMaintenanceEntity,
    StatusPageEntity,
    StatusPageSubscriberEntity,
    UserEntity,
)

__all__ = [
    "DomainEntity",
    "IncidentEntity",
    "IncomingRequestEntity",
    "MonitorEntity",
    "ScheduledMaintenanceEntity",
    "StatusPageEntity",
    "StatusPageSubscriberEntity",
    "UserEntity",
]
