from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Sequence

import mysql.connector

from ..common.datetime_utils import from_utc_naive, to_utc_naive
from ..core.enums import MarkStatus
from ..core.exceptions import DuplicateMarkError, SessionExpiredError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, is_duplicate_key
from .model import AttendanceMark, RosterEntry
from .repository import AttendanceRepository


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def has_mark(self, *, student_id: int, session_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT 1 AS found FROM attendance_marks WHERE student_id=%s AND session_id=%s",
                (int(student_id), int(session_id)),
            )
            return fetchone(cur) is not None

    def create_mark(
        self,
        *,
        session_id: int,
        student_id: int,
        device_id: str,
        latitude: float,
        longitude: float,
        marked_at: datetime,
    ) -> AttendanceMark:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                # Inserts only while the session row, share-locked by the SELECT, is live.
                cur.execute(
                    """
                    INSERT INTO attendance_marks(session_id, student_id, device_id, latitude, longitude, marked_at, status)
                    SELECT s.session_id, %s, %s, %s, %s, %s, %s
                    FROM attendance_sessions s
                    WHERE s.session_id=%s AND s.is_active=1 AND s.is_locked=0 AND s.end_time >= %s
                    """,
                    (
                        int(student_id),
                        device_id,
                        float(latitude),
                        float(longitude),
                        to_utc_naive(marked_at),
                        MarkStatus.PRESENT.value,
                        int(session_id),
                        to_utc_naive(marked_at),
                    ),
                )
                if cur.rowcount == 0:
                    raise SessionExpiredError("Attendance is closed for this session")
                mark_id = int(cur.lastrowid)
        except mysql.connector.IntegrityError as e:
            if is_duplicate_key(e):
                raise DuplicateMarkError("Attendance already marked for this session") from e
            raise

        return AttendanceMark(
            mark_id=mark_id,
            session_id=int(session_id),
            student_id=int(student_id),
            device_id=device_id,
            latitude=float(latitude),
            longitude=float(longitude),
            marked_at=marked_at,
        )

    def list_roster(self, session_id: int) -> Sequence[RosterEntry]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT am.student_id, u.full_name, am.marked_at
                FROM attendance_marks am
                JOIN users u ON u.user_id = am.student_id
                WHERE am.session_id=%s
                ORDER BY am.marked_at ASC, am.mark_id ASC
                """,
                (int(session_id),),
            )
            return [
                RosterEntry(
                    student_id=int(r["student_id"]),
                    full_name=r["full_name"],
                    marked_at=from_utc_naive(r["marked_at"]),
                )
                for r in fetchall(cur)
            ]

    def count_by_session(self, session_ids: Iterable[int]) -> Dict[int, int]:
        ids = [int(i) for i in session_ids]
        if not ids:
            return {}

        placeholders = ",".join(["%s"] * len(ids))
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT session_id, COUNT(*) AS total
                FROM attendance_marks
                WHERE session_id IN ({placeholders})
                GROUP BY session_id
                """,
                tuple(ids),
            )
            counts = {int(r["session_id"]): int(r["total"]) for r in fetchall(cur)}
        return {i: counts.get(i, 0) for i in ids}
