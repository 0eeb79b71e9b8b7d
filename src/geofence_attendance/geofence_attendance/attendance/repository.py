from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, Protocol, Sequence

from .model import AttendanceMark, RosterEntry


class AttendanceRepository(Protocol):
    def has_mark(self, *, student_id: int, session_id: int) -> bool:
        raise NotImplementedError

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
        """Insert guarded by the (student, session) unique index.

        Raises DuplicateMarkError when the index rejects the row and
        SessionExpiredError when the session stopped being live before
        the insert.
        """

        raise NotImplementedError

    def list_roster(self, session_id: int) -> Sequence[RosterEntry]:
        """Marks of a session joined with student names, earliest first."""

        raise NotImplementedError

    def count_by_session(self, session_ids: Iterable[int]) -> Dict[int, int]:
        raise NotImplementedError
