from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from ..core.enums import MarkStatus


@dataclass(frozen=True)
class AttendanceMark:
    """Domain entity: a student's presence in one session. Never mutated."""

    mark_id: int
    session_id: int
    student_id: int
    device_id: str
    latitude: float
    longitude: float
    marked_at: datetime
    status: MarkStatus = MarkStatus.PRESENT

    def to_dict(self) -> dict:
        return {
            "id": self.mark_id,
            "session_id": self.session_id,
            "student_id": self.student_id,
            "location": {"latitude": self.latitude, "longitude": self.longitude},
            "marked_at": self.marked_at.isoformat(),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class RosterEntry:
    """Read-model for the teacher's live view."""

    student_id: int
    full_name: str
    marked_at: datetime

    def to_dict(self) -> dict:
        return {"id": self.student_id, "name": self.full_name, "marked_at": self.marked_at.isoformat()}
