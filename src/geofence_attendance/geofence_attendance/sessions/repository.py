from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence, Tuple

from .model import AttendanceSession


class SessionRepository(Protocol):
    def get_by_id(self, session_id: int) -> Optional[AttendanceSession]:
        raise NotImplementedError

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
        """Deactivate+lock every active session of the schedule, then insert a new one.

        Both steps happen atomically with respect to other opens on the same
        schedule. Returns the new session and how many were superseded.
        Raises ConcurrencyConflictError if the storage guard rejects the insert.
        """

        raise NotImplementedError

    def close(self, session_id: int) -> bool:
        """Set is_active=0, is_locked=1. Returns False when nothing changed."""

        raise NotImplementedError

    def list_live(self, now: datetime) -> Sequence[AttendanceSession]:
        """Active, unlocked sessions whose end time is not past ``now``."""

        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int, *, start: datetime, end: datetime) -> Sequence[AttendanceSession]:
        """Sessions of the teacher's schedules started in [start, end), newest first."""

        raise NotImplementedError
