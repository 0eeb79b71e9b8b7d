from __future__ import annotations

from dataclasses import dataclass

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .common.datetime_utils import Clock
from .core.constants import DEFAULT_RADIUS_METERS, DEFAULT_SESSION_DURATION_MINUTES, DEFAULT_TIMEZONE
from .database.connection import DBConfig, DatabaseConnection
from .eligibility import EligibilityResolver
from .schedules.mysql_schedule_repository import MySQLScheduleRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.service import SessionService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: Clock

    users_repo: MySQLUserRepository
    schedules_repo: MySQLScheduleRepository
    sessions_repo: MySQLSessionRepository
    attendance_repo: MySQLAttendanceRepository

    auth_service: AuthService
    session_service: SessionService
    attendance_service: AttendanceService


def build_container(
    *,
    db_config: dict,
    timezone: str = DEFAULT_TIMEZONE,
    session_duration_minutes: int = DEFAULT_SESSION_DURATION_MINUTES,
    radius_meters: float = DEFAULT_RADIUS_METERS,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    clock = Clock(timezone)
    resolver = EligibilityResolver()

    users_repo = MySQLUserRepository(conn)
    schedules_repo = MySQLScheduleRepository(conn)
    sessions_repo = MySQLSessionRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)

    session_service = SessionService(
        sessions_repo,
        schedules_repo,
        users_repo,
        attendance_repo,
        clock=clock,
        resolver=resolver,
        duration_minutes=session_duration_minutes,
        radius_meters=radius_meters,
    )
    attendance_service = AttendanceService(
        attendance_repo,
        sessions_repo,
        schedules_repo,
        users_repo,
        clock=clock,
        resolver=resolver,
    )

    return Container(
        conn=conn,
        clock=clock,
        users_repo=users_repo,
        schedules_repo=schedules_repo,
        sessions_repo=sessions_repo,
        attendance_repo=attendance_repo,
        auth_service=AuthService(users_repo),
        session_service=session_service,
        attendance_service=attendance_service,
    )
