"""Maintenance scheduler — asyncio daemon running periodic store jobs."""

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass

from aviator.application.services.backup_service import BackupManager
from aviator.application.services.prediction_engine import PredictionEngine
from aviator.application.services.record_store import RecordStore
from aviator.infrastructure.logging.colored_logger import MaintenanceLogger, MaintenanceStage, Stage

logger = logging.getLogger(__name__)

AUTOSAVE_INTERVAL = 30  # seconds
SNAPSHOT_INTERVAL = 60 * 60
RETENTION_INTERVAL = 24 * 60 * 60
RETENTION_MAX_AGE_DAYS = 30


@dataclass
class ScheduledJob:
    """A periodic action. ``interval`` returns seconds and is re-read before every wait."""

    name: str
    action: Callable[[], object]
    interval: Callable[[], float]
    stage: Stage


class MaintenanceScheduler:
    """Runs autosave, snapshot, retention and (optionally) prediction jobs on their own timers.

    Each job is an asyncio.Task started in the application lifespan. Jobs
    are isolated: an exception in one is logged and the others keep running.
    ``stop()`` sets the shutdown event, waits for every task, then performs a
    last autosave.
    """

    def __init__(
        self,
        store: RecordStore,
        backups: BackupManager,
        *,
        autosave_interval: float = AUTOSAVE_INTERVAL,
        snapshot_interval: float = SNAPSHOT_INTERVAL,
        retention_interval: float = RETENTION_INTERVAL,
        retention_max_age_days: int = RETENTION_MAX_AGE_DAYS,
    ) -> None:
        self._store = store
        self._backups = backups
        self._log = MaintenanceLogger("MaintenanceScheduler")
        self._stop_event = asyncio.Event()
        self._tasks: list[asyncio.Task] = []
        self._jobs: dict[str, ScheduledJob] = {}

        self.add_job("autosave", store.flush_all, lambda: autosave_interval, MaintenanceStage.AUTOSAVE)
        self.add_job("snapshot", backups.create_snapshot, lambda: snapshot_interval, MaintenanceStage.SNAPSHOT)
        self.add_job(
            "retention",
            lambda: store.sweep_retention(max_age_days=retention_max_age_days),
            lambda: retention_interval,
            MaintenanceStage.RETENTION,
        )

    @property
    def running(self) -> bool:
        return bool(self._tasks)

    @property
    def job_names(self) -> list[str]:
        return list(self._jobs)

    def add_job(
        self,
        name: str,
        action: Callable[[], object],
        interval: Callable[[], float],
        stage: Stage = MaintenanceStage.SCHEDULER,
    ) -> None:
        if self._tasks:
            raise RuntimeError("Cannot add jobs while the scheduler is running")
        self._jobs[name] = ScheduledJob(name=name, action=action, interval=interval, stage=stage)

    def add_prediction_cycle(self, engine: PredictionEngine) -> None:
        """Drive the prediction engine at the store's ``updateFrequency``."""
        self.add_job("prediction", engine.run_cycle, engine.cycle_interval_seconds, MaintenanceStage.PREDICTION)

    async def start(self) -> None:
        """Spawn one task per job."""
        if self._tasks:
            return
        self._stop_event.clear()
        self._tasks = [
            asyncio.create_task(self._loop(job), name=f"maintenance-{job.name}")
            for job in self._jobs.values()
        ]
        logger.info("MaintenanceScheduler started with jobs: %s", ", ".join(self._jobs))

    async def stop(self) -> None:
        """Signal every job to finish, wait for them, then autosave one last time."""
        if not self._tasks:
            return
        self._stop_event.set()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self.run_job("autosave")
        logger.info("MaintenanceScheduler stopped")

    def run_job(self, name: str) -> bool:
        """Run a job immediately. Returns False if it raised."""
        job = self._jobs[name]
        try:
            with self._log.timed_step(job.stage, f"Running {job.name}"):
                outcome = job.action()
                if outcome is not None:
                    self._log.detail(f"{job.name} finished", result=outcome)
        except Exception:
            logger.exception("Maintenance job '%s' failed", job.name)
            return False
        return True

    async def _loop(self, job: ScheduledJob) -> None:
        while not self._stop_event.is_set():
            try:
                interval = max(0.01, float(job.interval()))
            except Exception:
                logger.exception("Could not read interval for '%s' — stopping job", job.name)
                return
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=interval)
                return  # stop requested
            except asyncio.TimeoutError:
                pass
            except asyncio.CancelledError:
                return
            self.run_job(job.name)
