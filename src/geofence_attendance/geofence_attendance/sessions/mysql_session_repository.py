from __future__ import annotations

from datetime import datetime
from typing import Optional, Sequence, Tuple

import mysql.connector

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.exceptions import ConcurrencyConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceSession
from .repository import SessionRepository

_COLUMNS = """
    s.session_id, s.schedule_id, s.anchor_lat, s.anchor_lon, s.radius_meters,
    s.start_time, s.end_time, s.is_active, s.is_locked
"""


def _to_session(r: dict) -> AttendanceSession:
    return AttendanceSession(
        session_id=int(r["session_id"]),
        schedule_id=int(r["schedule_id"]),
        anchor_lat=float(r["anchor_lat"]),
        anchor_lon=float(r["anchor_lon"]),
        radius_meters=float(r["radius_meters"]),
        start_time=from_utc_naive(r["start_time"]),
        end_time=from_utc_naive(r["end_time"]),
        is_active=bool(r["is_active"]),
        is_locked=bool(r["is_locked"]),
    )


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM attendance_sessions s WHERE s.session_id=%s", (int(session_id),))
            r = fetchone(cur)
            return _to_session(r) if r else None

    def open_superseding(
        self,
        *,
        schedule_id: int,
        anchor_lat: float,
        anchor_lon: float,
        radius_meters: float,
        start_time: datetime,
        end_time: datetime,
    ) -> Tuple[AttendanceSession, int]:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Row lock on the schedule serialises concurrent opens for it.
                cur.execute(
                    "SELECT schedule_id FROM class_schedules WHERE schedule_id=%s FOR UPDATE",
                    (int(schedule_id),),
                )
                fetchone(cur)

                cur.execute(
                    """
                    UPDATE attendance_sessions
                    SET is_active=0, is_locked=1
                    WHERE schedule_id=%s AND is_active=1
                    """,
                    (int(schedule_id),),
                )
                superseded = int(cur.rowcount or 0)

                cur.execute(
                    """
                    INSERT INTO attendance_sessions
                        (schedule_id, anchor_lat, anchor_lon, radius_meters, start_time, end_time, is_active, is_locked)
                    VALUES (%s,%s,%s,%s,%s,%s,1,0)
                    """,
                    (
                        int(schedule_id),
                        float(anchor_lat),
                        float(anchor_lon),
                        float(radius_meters),
                        to_utc_naive(start_time),
                        to_utc_naive(end_time),
                    ),
                )
                session_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise ConcurrencyConflictError("Another attendance session was started at the same time, try again") from e
            raise

        session = AttendanceSession(
            session_id=session_id,
            schedule_id=int(schedule_id),
            anchor_lat=float(anchor_lat),
            anchor_lon=float(anchor_lon),
            radius_meters=float(radius_meters),
            start_time=start_time,
            end_time=end_time,
            is_active=True,
            is_locked=False,
        )
        return session, superseded

    def close(self, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_sessions
                SET is_active=0, is_locked=1
                WHERE session_id=%s AND (is_active=1 OR is_locked=0)
                """,
                (int(session_id),),
            )
            return cur.rowcount > 0

    def list_live(self, now: datetime) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions s
                WHERE s.is_active=1 AND s.is_locked=0 AND s.end_time >= %s
                ORDER BY s.start_time DESC, s.session_id DESC
                """,
                (to_utc_naive(now),),
            )
            return [_to_session(r) for r in fetchall(cur)]

    def list_for_teacher(self, teacher_id: int, *, start: datetime, end: datetime) -> Sequence[AttendanceSession]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_sessions s
                JOIN class_schedules cs ON cs.schedule_id = s.schedule_id
                WHERE cs.teacher_id=%s AND s.start_time >= %s AND s.start_time < %s
                ORDER BY s.start_time DESC, s.session_id DESC
                """,
                (int(teacher_id), to_utc_naive(start), to_utc_naive(end)),
            )
            return [_to_session(r) for r in fetchall(cur)]
