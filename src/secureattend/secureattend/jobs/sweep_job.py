from __future__ import annotations

import logging
from datetime import date, datetime, timezone as dt_timezone
from typing import Optional

from apscheduler.schedulers.background import BackgroundScheduler

from ..attendance.sweep import AbsenceSweep, SweepResult
from ..core.constants import DEFAULT_SWEEP_INTERVAL_MINUTES

logger = logging.getLogger(__name__)


class SweepJob:
    """Runs the absent / missed clock-out sweep on a fixed interval.

    The job id is fixed and ``max_instances=1``, so a slow run is never
    overlapped by the next tick.
    """

    JOB_ID = "absent-missed-clockout-sweep"

    def __init__(
        self,
        sweep: AbsenceSweep,
        *,
        interval_minutes: int = DEFAULT_SWEEP_INTERVAL_MINUTES,
        timezone: str = "UTC",
        scheduler: Optional[BackgroundScheduler] = None,
    ):
        self._sweep = sweep
        self._interval_minutes = int(interval_minutes)
        self._scheduler = scheduler or BackgroundScheduler(timezone=timezone)
        self._last_results: list[SweepResult] = []
        self._last_run_at: Optional[datetime] = None

    @property
    def is_running(self) -> bool:
        return self._scheduler.running and self._scheduler.get_job(self.JOB_ID) is not None

    def start(self) -> bool:
        if self.is_running:
            logger.warning("Absent marking and missed clock-out job is already running")
            return False

        self._scheduler.add_job(
            self._tick,
            trigger="interval",
            minutes=self._interval_minutes,
            id=self.JOB_ID,
            replace_existing=True,
            max_instances=1,
            coalesce=True,
            next_run_time=datetime.now(dt_timezone.utc),
        )
        if not self._scheduler.running:
            self._scheduler.start()

        logger.info("Absent marking and missed clock-out job started (every %d minutes)", self._interval_minutes)
        return True

    def stop(self) -> bool:
        if self._scheduler.get_job(self.JOB_ID) is None:
            logger.warning("Absent marking and missed clock-out job is not running")
            return False

        self._scheduler.remove_job(self.JOB_ID)
        logger.info("Absent marking and missed clock-out job stopped")
        return True

    def shutdown(self) -> None:
        if self._scheduler.running:
            self._scheduler.shutdown(wait=False)

    def _tick(self) -> None:
        try:
            self.run_now()
        except Exception:
            logger.exception("Scheduled sweep failed")

    def run_now(self, target_date: Optional[date] = None) -> list[SweepResult]:
        if target_date is not None:
            results = [self._sweep.run(target_date)]
        else:
            results = self._sweep.run_due()
        self._last_results = results
        self._last_run_at = datetime.now(dt_timezone.utc)
        return results

    def status(self) -> dict:
        job = self._scheduler.get_job(self.JOB_ID)
        next_run = getattr(job, "next_run_time", None) if job else None
        return {
            "is_running": self.is_running,
            "interval_minutes": self._interval_minutes,
            "next_run_time": next_run.isoformat() if next_run else None,
            "last_run_at": self._last_run_at.isoformat() if self._last_run_at else None,
            "last_results": [r.to_dict() for r in self._last_results],
        }
