from __future__ import annotations

import logging
import re
import time
from pathlib import Path
from typing import Any, Callable, Iterable

import mysql.connector

from ..core.constants import DEFAULT_CONNECT_ATTEMPTS
from .connection import DatabaseConnection, DBConfig

logger = logging.getLogger(__name__)


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
    in_comment = False
    escape = False
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
            prev = ch
            continue

        if ch == "\\":
            buf.append(ch)
            escape = True
            prev = ch
            continue

        if ch == "-" and prev == "-" and not in_single and not in_double:
            buf.pop()
            in_comment = True
            prev = ch
            continue

        if ch == "'" and not in_double:
            in_single = not in_single
        elif ch == '"' and not in_single:
            in_double = not in_double
        elif ch == ";" and not in_single and not in_double:
            stmt = "".join(buf).strip()
            buf.clear()
            prev = ch
            if stmt:
                yield stmt
            continue

        buf.append(ch)
        prev = ch

    tail = "".join(buf).strip()
    if tail:
        yield tail


def _exec_sql(cur, sql: str) -> None:
    for stmt in _iter_sql_statements(sql):
        cur.execute(stmt)


def _run_script(config: DBConfig, sql: str) -> None:
    conn = mysql.connector.connect(**config.connect_kwargs())
    try:
        cur = conn.cursor()
        _exec_sql(cur, sql)
        conn.commit()
    finally:
        conn.close()


def ensure_database_exists(config: DBConfig) -> None:
    conn = mysql.connector.connect(**config.connect_kwargs(with_database=False))
    try:
        cur = conn.cursor()
        cur.execute(
            f"CREATE DATABASE IF NOT EXISTS `{config.database}` CHARACTER SET utf8mb4 COLLATE utf8mb4_unicode_ci;"
        )
        conn.commit()
    finally:
        conn.close()


def apply_schema(config: DBConfig, *, schema_path: str | Path) -> None:
    ensure_database_exists(config)
    sql = _strip_create_db_and_use(Path(schema_path).read_text(encoding="utf-8"))
    _run_script(config, sql)
    logger.info("schema applied from %s to %s", schema_path, config.describe())


def apply_seed_sql(config: DBConfig, *, seed_path: str | Path) -> None:
    sql = _strip_create_db_and_use(Path(seed_path).read_text(encoding="utf-8"))
    _run_script(config, sql)
    logger.info("seed applied from %s to %s", seed_path, config.describe())


def list_tables(config: DBConfig) -> list[str]:
    conn = mysql.connector.connect(**config.connect_kwargs())
    try:
        cur = conn.cursor()
        cur.execute("SHOW TABLES")
        return [row[0] for row in cur.fetchall()]
    finally:
        conn.close()


def _retry_until(check: Callable[[], bool], target: str, *, attempts: int, sleep: Callable[[float], None]) -> None:
    # Backs off 0.5s, 1.0s, 1.5s, ... between attempts.
    for attempt in range(1, attempts + 1):
        if check():
            return
        delay = 0.5 * attempt
        logger.warning(
            "database %s not reachable (attempt %d/%d), retrying in %.1fs",
            target, attempt, attempts, delay,
        )
        sleep(delay)
    raise RuntimeError(f"failed to connect to database {target}")


def server_reachable(config: DBConfig, *, connect: Callable[..., Any] = mysql.connector.connect) -> bool:
    """True when the MySQL server accepts a login; the database itself may not exist yet."""
    try:
        conn = connect(**config.connect_kwargs(with_database=False))
    except mysql.connector.Error:
        return False
    conn.close()
    return True


def wait_for_server(
    config: DBConfig,
    *,
    attempts: int = DEFAULT_CONNECT_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
    connect: Callable[..., Any] = mysql.connector.connect,
) -> None:
    """Block until the server accepts connections. Used before creating the schema."""
    _retry_until(
        lambda: server_reachable(config, connect=connect),
        config.describe(),
        attempts=attempts,
        sleep=sleep,
    )


def wait_for_database(
    conn: DatabaseConnection,
    *,
    attempts: int = DEFAULT_CONNECT_ATTEMPTS,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Block until the store answers, backing off 0.5s, 1.0s, 1.5s, ...

    Raises RuntimeError once every attempt has failed.
    """
    _retry_until(conn.ping, conn.config.describe(), attempts=attempts, sleep=sleep)
