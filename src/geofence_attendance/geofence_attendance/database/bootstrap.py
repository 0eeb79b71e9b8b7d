from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Iterable

import mysql.connector
from werkzeug.security import generate_password_hash

from .connection import DBConfig

logger = logging.getLogger(__name__)

# Demo accounts: (full_name, username, password, role, semester, section, device_id)
DEMO_USERS = (
    ("Admin Demo", "admin", "admin123", "admin", None, None, None),
    ("Teacher Demo", "teacher", "teacher123", "teacher", None, None, None),
    ("Student Demo", "student", "student123", "student", 3, "A", "device-demo-student"),
)


def _connect(target: DBConfig, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _as_target(db_config: dict) -> DBConfig:
    return DBConfig(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "geofence_attendance")),
    )


def _strip_create_db_and_use(sql: str) -> str:
    # Keep schema.sql compatible regardless of DB name.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return sql


def _iter_sql_statements(sql: str) -> Iterable[str]:
    # Minimal SQL splitter for schema/seed files (handles ';' inside quotes and -- comments).
    buf: list[str] = []
    in_single = False
    in_double = False
    escape = False
    in_comment = False
    prev = ""

    for ch in sql:
        if in_comment:
            if ch == "\n":
                in_comment = False
                buf.append(ch)
            prev = ch
            continue

        if escape:
            buf.append(ch)
            escape = False
        elif ch == "\\":
            buf.append(ch)
            escape = True
        elif ch == "-" and prev == "-" and not in_single and not in_double:
            buf.pop()
            in_comment = True
        elif ch == "'" and not in_double:
            in_single = not in_single
            buf.append(ch)
        elif ch == '"' and not in_single:
            in_double = not in_double
            buf.append(ch)
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            if stmt:
                yield stmt
        else:
            buf.append(ch)
        prev = ch

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def ensure_database_exists(db_config: dict) -> None:
    target = _as_target(db_config)
    conn = _connect(target, with_database=False)
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{target.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_sql_file(db_config: dict, *, path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    apply_sql_file(db_config, path=schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    apply_sql_file(db_config, path=seed_path)


def ensure_demo_users(db_config: dict) -> None:
    """Upsert the demo admin/teacher/student into the first seeded department."""
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor(dictionary=True)

        cur.execute("SELECT dept_id FROM departments ORDER BY dept_id ASC LIMIT 1")
        row = cur.fetchone()
        if not row:
            raise RuntimeError("Missing departments rows; apply seed.sql first")
        dept_id = int(row["dept_id"])

        for full_name, username, password, role, semester, section, device_id in DEMO_USERS:
            password_hash = generate_password_hash(password)
            cur.execute("SELECT user_id FROM users WHERE username=%s", (username,))
            if cur.fetchone():
                cur.execute(
                    """
                    UPDATE users
                    SET full_name=%s, password_hash=%s, role=%s, dept_id=%s, semester=%s, section=%s,
                        device_id=%s, is_active=1
                    WHERE username=%s
                    """,
                    (full_name, password_hash, role, dept_id, semester, section, device_id, username),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (full_name, username, password_hash, role, dept_id, semester, section, device_id)
                    VALUES (%s, %s, %s, %s, %s, %s, %s, %s)
                    """,
                    (full_name, username, password_hash, role, dept_id, semester, section, device_id),
                )

        # One all-day class for the demo teacher so sessions can be opened any day.
        cur.execute(
            """
            INSERT INTO class_schedules (subject_id, teacher_id, dept_id, semester, section, days, start_time, end_time)
            SELECT sb.subject_id, u.user_id, u.dept_id, 3, 'A', 'Mon,Tue,Wed,Thu,Fri,Sat,Sun', '00:00', '23:59'
            FROM users u
            JOIN subjects sb ON sb.dept_id = u.dept_id
            WHERE u.username = 'teacher'
              AND NOT EXISTS (SELECT 1 FROM class_schedules cs WHERE cs.teacher_id = u.user_id)
            ORDER BY sb.subject_id ASC
            LIMIT 1
            """
        )

        conn.commit()
        logger.info("demo users ready: %s", ", ".join(u[1] for u in DEMO_USERS))
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    conn = _connect(_as_target(db_config))
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
