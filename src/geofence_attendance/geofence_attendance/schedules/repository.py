from __future__ import annotations

from typing import Optional, Protocol, Sequence

from .model import ScheduledClass


class ScheduleRepository(Protocol):
    def get_by_id(self, schedule_id: int) -> Optional[ScheduledClass]:
        raise NotImplementedError

    def list_for_teacher(self, teacher_id: int) -> Sequence[ScheduledClass]:
        """Active schedules owned by a teacher, ordered by start time."""

        raise NotImplementedError
