from __future__ import annotations

from typing import Optional, Protocol

from .model import StudentProfile, User


class UserRepository(Protocol):
    """Repository port for accounts and student profiles.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_username(self, username: str) -> Optional[User]:
        raise NotImplementedError

    def get_student_profile(self, student_id: int) -> Optional[StudentProfile]:
        raise NotImplementedError

    def set_current_session(self, student_id: int, session_id: int) -> None:
        """Refresh the cached current-session pointer (best effort)."""

        raise NotImplementedError
