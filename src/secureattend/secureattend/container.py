from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.clock_events import ClockEventService
from .attendance.factory import AttendanceStrategyFactory
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.overtime import OvertimeService
from .attendance.service import AttendanceService
from .attendance.settings import ResolverConfig
from .attendance.sweep import AbsenceSweep
from .core.constants import DEFAULT_SWEEP_INTERVAL_MINUTES
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .jobs.sweep_job import SweepJob
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .schedules.service import ScheduleService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    resolver_config: ResolverConfig

    employees_repo: MySQLEmployeeRepository
    schedules_repo: MySQLScheduleRepository
    attendance_repo: MySQLAttendanceRepository

    schedule_service: ScheduleService
    attendance_service: AttendanceService
    clock_event_service: ClockEventService
    overtime_service: OvertimeService
    absence_sweep: AbsenceSweep
    sweep_job: SweepJob


def build_container(
    *,
    db_config: Mapping[str, Any],
    attendance_settings: Optional[Mapping[str, Any]] = None,
    sweep_interval_minutes: int = DEFAULT_SWEEP_INTERVAL_MINUTES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_mapping(db_config))
    resolver_config = ResolverConfig.from_mapping(attendance_settings or {})

    employees_repo = MySQLEmployeeRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    strategy_factory = AttendanceStrategyFactory()
    schedule_service = ScheduleService(schedules_repo)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        schedule_service,
        config=resolver_config,
        strategy_factory=strategy_factory,
    )
    clock_event_service = ClockEventService(attendance_repo, employees_repo, schedule_service, config=resolver_config)
    overtime_service = OvertimeService(attendance_repo, employees_repo, schedule_service, config=resolver_config)
    absence_sweep = AbsenceSweep(
        attendance_repo,
        employees_repo,
        schedule_service,
        config=resolver_config,
        strategy_factory=strategy_factory,
    )
    sweep_job = SweepJob(
        absence_sweep,
        interval_minutes=sweep_interval_minutes,
        timezone=resolver_config.timezone,
    )

    return Container(
        conn=conn,
        resolver_config=resolver_config,
        employees_repo=employees_repo,
        schedules_repo=schedules_repo,
        attendance_repo=attendance_repo,
        schedule_service=schedule_service,
        attendance_service=attendance_service,
        clock_event_service=clock_event_service,
        overtime_service=overtime_service,
        absence_sweep=absence_sweep,
        sweep_job=sweep_job,
    )
