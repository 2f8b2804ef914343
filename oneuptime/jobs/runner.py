import argparse
import logging
import signal
import threading
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import Any

from oneuptime.core.config import Settings, get_settings
from oneuptime.core.logging_config import configure_logging
from oneuptime.jobs import scheduled_maintenance_notifications, status_page_owner_notifications

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CronJob:
    name: str
    func: Callable[[], Any]
    interval_seconds: float
    run_on_startup: bool = False


class JobRunner:
    """Runs each registered job on its own interval thread.

    A job that raises is logged and tried again on its next tick.
    """

    def __init__(self) -> None:
        self._jobs: dict[str, CronJob] = {}
        self._threads: list[threading.Thread] = []
        self._stop_event = threading.Event()

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    def register(self, job: CronJob) -> None:
        if job.name in self._jobs:
            raise ValueError(f"Job {job.name!r} is already registered.")
        self._jobs[job.name] = job

    def run_job(self, name: str) -> bool:
        job = self._jobs.get(name)
        if job is None:
            raise KeyError(f"Unknown job {name!r}.")

        logger.debug("Running job %s", name)
        try:
            job.func()
        except Exception:
            logger.exception("Job %s failed", name)
            return False
        return True

    def run_once(self, names: Sequence[str] | None = None) -> dict[str, bool]:
        return {name: self.run_job(name) for name in (names or self.job_names)}

    def start(self, names: Sequence[str] | None = None) -> None:
        self._stop_event.clear()
        for name in names or self.job_names:
            job = self._jobs[name]
            thread = threading.Thread(
                target=self._loop,
                args=(job,),
                name=f"job-{job.name}",
                daemon=True,
            )
            thread.start()
            self._threads.append(thread)
            logger.info("Job %s scheduled every %ss", job.name, job.interval_seconds)

    def stop(self, timeout: float = 5.0) -> None:
        self._stop_event.set()
        for thread in self._threads:
            thread.join(timeout=timeout)
        self._threads.clear()

    def wait(self) -> None:
        self._stop_event.wait()

    def _loop(self, job: CronJob) -> None:
        if job.run_on_startup:
            self.run_job(job.name)
        while not self._stop_event.wait(job.interval_seconds):
            self.run_job(job.name)


def build_default_runner(settings: Settings | None = None) -> JobRunner:
    settings = settings or get_settings()
    maintenance_job = scheduled_maintenance_notifications.build_scheduled_maintenance_job(settings)
    owner_job = status_page_owner_notifications.build_status_page_owner_job(settings)

    runner = JobRunner()
    runner.register(
        CronJob(
            name=scheduled_maintenance_notifications.JOB_NAME,
            func=maintenance_job.run,
            interval_seconds=settings.job_interval_seconds,
        )
    )
    runner.register(
        CronJob(
            name=status_page_owner_notifications.JOB_NAME,
            func=owner_job.run,
            interval_seconds=settings.job_interval_seconds,
        )
    )
    return runner


def main(argv: Sequence[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="OneUptime notification worker")
    parser.add_argument("--once", action="store_true", help="Run the jobs once and exit")
    parser.add_argument(
        "--job",
        action="append",
        dest="jobs",
        metavar="NAME",
        help="Only run the named job (repeatable)",
    )
    parser.add_argument("--list", action="store_true", help="List registered jobs and exit")
    args = parser.parse_args(argv)

    settings = get_settings()
    configure_logging(settings.log_level)
    runner = build_default_runner(settings)

    if args.list:
        for name in runner.job_names:
            print(name)
        return 0

    unknown = [name for name in args.jobs or [] if name not in runner.job_names]
    if unknown:
        parser.error(f"unknown job(s): {', '.join(unknown)}")

    if args.once:
        results = runner.run_once(args.jobs)
        return 0 if all(results.values()) else 1

    signal.signal(signal.SIGTERM, lambda *_: runner.stop())
    runner.start(args.jobs)
    try:
        runner.wait()
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        runner.stop()
    logger.info("Worker stopped")
    return 0
