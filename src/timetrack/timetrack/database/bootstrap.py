from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

import mysql.connector
from werkzeug.security import generate_password_hash

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DBTarget:
    host: str
    port: int
    user: str
    password: str
    database: str


def _as_target(db_config: dict) -> DBTarget:
    return DBTarget(
        host=str(db_config.get("host", "localhost")),
        port=int(db_config.get("port", 3306)),
        user=str(db_config.get("user", "root")),
        password=str(db_config.get("password", "")),
        database=str(db_config.get("database", "timetrack_db")),
    )


def _connect(target: DBTarget, *, with_database: bool = True):
    kwargs = dict(host=target.host, port=target.port, user=target.user, password=target.password, use_pure=True)
    if with_database:
        kwargs["database"] = target.database
    return mysql.connector.connect(**kwargs)


def _strip_create_db_and_use(sql: str) -> str:
    # schema.sql must work whatever the configured DB name is.
    sql = re.sub(r"(?im)^\s*CREATE\s+DATABASE\b.*?;\s*$", "", sql)
    sql = re.sub(r"(?im)^\s*USE\b.*?;\s*$", "", sql)
    return re.sub(r"(?m)^\s*--.*$", "", sql)


def iter_sql_statements(sql: str) -> Iterable[str]:
    """Split a SQL script on ';' outside quoted strings."""
    buf: list[str] = []
    quote: Optional[str] = None
    escaped = False

    for ch in sql:
        buf.append(ch)
        if escaped:
            escaped = False
        elif ch == "\\":
            escaped = True
        elif quote:
            if ch == quote:
                quote = None
        elif ch in ("'", '"'):
            quote = ch
        elif ch == ";":
            stmt = "".join(buf[:-1]).strip()
            buf.clear()
            if stmt:
                yield stmt

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _apply_sql_file(target: DBTarget, path: Path) -> int:
    sql = _strip_create_db_and_use(Path(path).read_text(encoding="utf-8"))
    conn = _connect(target)
    try:
        cur = conn.cursor()
        count = 0
        for stmt in iter_sql_statements(sql):
            cur.execute(stmt)
            count += 1
        conn.commit()
        return count
    finally:
        conn.close()


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


def apply_schema(db_config: dict, *, schema_path: str | Path) -> None:
    ensure_database_exists(db_config)
    count = _apply_sql_file(_as_target(db_config), Path(schema_path))
    logger.debug("Applied %d schema statements from %s", count, schema_path)


def apply_seed_sql(db_config: dict, *, seed_path: str | Path) -> None:
    count = _apply_sql_file(_as_target(db_config), Path(seed_path))
    logger.debug("Applied %d seed statements from %s", count, seed_path)


DEMO_USERS = (
    # name, email, password, role, department, manager email
    ("Admin Demo", "admin@timetrack.local", "admin123", "Admin", "IT", None),
    ("Manager Demo", "manager@timetrack.local", "manager123", "Manager", "Engineering", None),
    ("Employee Demo", "employee@timetrack.local", "employee123", "Employee", "Engineering", "manager@timetrack.local"),
)


def ensure_demo_users(db_config: dict) -> None:
    target = _as_target(db_config)

    conn = _connect(target)
    try:
        cur = conn.cursor(dictionary=True)

        def user_id_for(email: str) -> Optional[int]:
            cur.execute("SELECT user_id FROM users WHERE email=%s", (email,))
            row = cur.fetchone()
            return int(row["user_id"]) if row else None

        for name, email, password, role, department, manager_email in DEMO_USERS:
            password_hash = generate_password_hash(password)
            manager_id = user_id_for(manager_email) if manager_email else None
            if user_id_for(email) is not None:
                cur.execute(
                    """
                    UPDATE users
                    SET name=%s, password_hash=%s, role=%s, department=%s, manager_id=%s, status='Active'
                    WHERE email=%s
                    """,
                    (name, password_hash, role, department, manager_id, email),
                )
            else:
                cur.execute(
                    """
                    INSERT INTO users (name, email, password_hash, role, department, manager_id)
                    VALUES (%s, %s, %s, %s, %s, %s)
                    """,
                    (name, email, password_hash, role, department, manager_id),
                )

        conn.commit()
    finally:
        conn.close()


def list_tables(db_config: dict) -> list[str]:
    target = _as_target(db_config)
    conn = _connect(target)
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()
