"""Background notification jobs and the runner that schedules them."""

from oneuptime.jobs.runner import CronJob, JobRunner, build_default_runner
from oneuptime.jobs.scheduled_maintenance_notifications import (
    ScheduledMaintenanceSubscriberNotifier,
)
from oneuptime.jobs.status_page_owner_notifications import StatusPageOwnerAddedNotifier

__all__ = [
    "CronJob",
    "JobRunner",
    "ScheduledMaintenanceSubscriberNotifier",
    "StatusPageOwnerAddedNotifier",
    "build_default_runner",
]
