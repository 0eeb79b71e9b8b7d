from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: account used for login.

    Note: Plain data object, no DB access code.
    """

    user_id: int
    full_name: str
    username: str
    password_hash: str
    role: Role
    dept_id: Optional[int]
    is_active: bool = True


@dataclass(frozen=True)
class StudentProfile:
    """What the session engine reads about a student.

    ``current_session_id`` is a denormalized convenience pointer; nothing
    decides on it.
    """

    student_id: int
    full_name: str
    dept_id: Optional[int]
    semester: Optional[int]
    section: Optional[str]
    device_id: Optional[str]
    current_session_id: Optional[int] = None
