from __future__ import annotations

from typing import Optional

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import StudentProfile, User
from .repository import UserRepository


def _to_user(row: dict) -> User:
    return User(
        user_id=int(row["user_id"]),
        full_name=row["full_name"],
        username=row["username"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        dept_id=row.get("dept_id"),
        is_active=bool(row.get("is_active", True)),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_username(self, username: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, username, password_hash, role, dept_id, is_active
                FROM users
                WHERE username=%s
                """,
                (username,),
            )
            row = fetchone(cur)
            return _to_user(row) if row else None

    def get_student_profile(self, student_id: int) -> Optional[StudentProfile]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT user_id, full_name, dept_id, semester, section, device_id, current_session_id
                FROM users
                WHERE user_id=%s AND role='student' AND is_active=1
                """,
                (int(student_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return StudentProfile(
                student_id=int(row["user_id"]),
                full_name=row["full_name"],
                dept_id=row.get("dept_id"),
                semester=int(row["semester"]) if row.get("semester") is not None else None,
                section=row.get("section") or None,
                device_id=row.get("device_id"),
                current_session_id=row.get("current_session_id"),
            )

    def set_current_session(self, student_id: int, session_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE users SET current_session_id=%s WHERE user_id=%s",
                (int(session_id), int(student_id)),
            )
