from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class AttendanceSession:
    """Domain entity: one short attendance window for one class occurrence.

    ``start_time`` / ``end_time`` are timezone-aware instants. Terminal state
    is ``is_active=False, is_locked=True``.
    """

    session_id: int
    schedule_id: int
    anchor_lat: float
    anchor_lon: float
    radius_meters: float
    start_time: datetime
    end_time: datetime
    is_active: bool = True
    is_locked: bool = False

    def is_live_at(self, now: datetime) -> bool:
        # End time decides even when no one has flipped is_active yet.
        return self.is_active and not self.is_locked and now <= self.end_time

    @property
    def is_closed(self) -> bool:
        return not self.is_active and self.is_locked

    def to_dict(self) -> dict:
        return {
            "id": self.session_id,
            "schedule_id": self.schedule_id,
            "location": {"latitude": self.anchor_lat, "longitude": self.anchor_lon},
            "radius_meters": self.radius_meters,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat(),
            "is_active": self.is_active,
            "is_locked": self.is_locked,
        }
