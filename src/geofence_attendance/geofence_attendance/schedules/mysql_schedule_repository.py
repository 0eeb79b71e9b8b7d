from __future__ import annotations

from typing import Any, FrozenSet, Optional, Sequence

from ..core.enums import Weekday
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, normalize_mysql_time
from .model import ScheduledClass
from .repository import ScheduleRepository

_SELECT = """
    SELECT cs.schedule_id, cs.subject_id, cs.teacher_id, cs.dept_id, cs.semester, cs.section,
           cs.days, cs.start_time, cs.end_time, cs.is_active,
           sb.subject_name
    FROM class_schedules cs
    LEFT JOIN subjects sb ON sb.subject_id = cs.subject_id
"""


def parse_days(value: Any) -> FrozenSet[Weekday]:
    """SET columns come back as a Python set or a comma-separated string."""
    if not value:
        return frozenset()
    items = value if isinstance(value, (set, frozenset, list, tuple)) else str(value).split(",")
    return frozenset(Weekday(str(v).strip()) for v in items if str(v).strip())


def _to_schedule(r: dict) -> ScheduledClass:
    return ScheduledClass(
        schedule_id=int(r["schedule_id"]),
        subject_id=int(r["subject_id"]),
        teacher_id=int(r["teacher_id"]),
        dept_id=int(r["dept_id"]),
        semester=int(r["semester"]),
        section=r.get("section") or None,
        days=parse_days(r.get("days")),
        start_time=normalize_mysql_time(r["start_time"]),
        end_time=normalize_mysql_time(r["end_time"]),
        is_active=bool(r.get("is_active", True)),
        subject_name=r.get("subject_name"),
    )


class MySQLScheduleRepository(ScheduleRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, schedule_id: int) -> Optional[ScheduledClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE cs.schedule_id=%s", (int(schedule_id),))
            r = fetchone(cur)
            return _to_schedule(r) if r else None

    def list_for_teacher(self, teacher_id: int) -> Sequence[ScheduledClass]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE cs.teacher_id=%s AND cs.is_active=1 ORDER BY cs.start_time ASC, cs.schedule_id ASC",
                (int(teacher_id),),
            )
            return [_to_schedule(r) for r in fetchall(cur)]
