from __future__ import annotations

from dataclasses import dataclass
from datetime import time
from typing import FrozenSet, Optional

from ..common.datetime_utils import time_to_minutes
from ..core.enums import Weekday


@dataclass(frozen=True)
class ScheduledClass:
    """Recurring class slot owned by org management; read-only here."""

    schedule_id: int
    subject_id: int
    teacher_id: int
    dept_id: int
    semester: int
    section: Optional[str]
    days: FrozenSet[Weekday]
    start_time: time
    end_time: time
    is_active: bool = True
    subject_name: Optional[str] = None

    def recurs_on(self, day: Weekday) -> bool:
        return day in self.days

    def covers_minute(self, minute_of_day: int) -> bool:
        """Inclusive on both ends: [start_time, end_time]."""
        return time_to_minutes(self.start_time) <= minute_of_day <= time_to_minutes(self.end_time)

    def summary(self) -> dict:
        return {
            "schedule_id": self.schedule_id,
            "subject_id": self.subject_id,
            "subject_name": self.subject_name,
            "teacher_id": self.teacher_id,
            "dept_id": self.dept_id,
            "semester": self.semester,
            "section": self.section,
            "days": [d.value for d in Weekday if d in self.days],
            "start_time": self.start_time.strftime("%H:%M"),
            "end_time": self.end_time.strftime("%H:%M"),
        }
