"""
Minimal forward-only SQL migrations.

    python -m gatekeeper.infrastructure.db.migrate up
    python -m gatekeeper.infrastructure.db.migrate status
"""

from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Iterable

import psycopg

from gatekeeper.logging import setup_logging
from gatekeeper.settings import get_settings

logger = logging.getLogger(__name__)

SCHEMA_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS schema_migrations (
  version    text PRIMARY KEY,
  applied_at timestamptz NOT NULL DEFAULT now()
);
"""


def migrations_dir() -> Path:
    return Path(os.environ.get("MIGRATIONS_DIR", "migrations"))


def list_migrations(directory: Path) -> list[Path]:
    if not directory.is_dir():
        raise FileNotFoundError(f"migrations dir not found: {directory}")
    return sorted(directory.glob("*.sql"))


def pending_migrations(paths: Iterable[Path], applied: set[str]) -> list[Path]:
    return [p for p in paths if p.stem not in applied]


def applied_versions(conn: psycopg.Connection) -> set[str]:
    with conn.cursor() as cur:
        cur.execute(SCHEMA_TABLE_SQL)
        cur.execute("SELECT version FROM schema_migrations")
        return {row[0] for row in cur.fetchall()}


def apply_one(conn: psycopg.Connection, path: Path) -> None:
    version = path.stem
    logger.info("applying migration", extra={"version": version})
    with conn.cursor() as cur:
        cur.execute(path.read_text(encoding="utf-8"))
        cur.execute(
            "INSERT INTO schema_migrations (version) VALUES (%s)",
            (version,),
        )
    conn.commit()


def cmd_up(directory: Path) -> int:
    with psycopg.connect(get_settings().database_url, autocommit=False) as conn:
        to_run = pending_migrations(list_migrations(directory), applied_versions(conn))
        if not to_run:
            logger.info("no pending migrations")
            return 0
        for path in to_run:
            try:
                apply_one(conn, path)
            except psycopg.Error:
                conn.rollback()
                logger.exception("migration failed", extra={"version": path.stem})
                return 1
    return 0


def cmd_status(directory: Path) -> int:
    with psycopg.connect(get_settings().database_url) as conn:
        applied = applied_versions(conn)
        conn.commit()
    for path in list_migrations(directory):
        state = "applied" if path.stem in applied else "pending"
        print(f"{state:8} {path.stem}")
    return 0


COMMANDS = {"up": cmd_up, "status": cmd_status}


def main(argv: list[str]) -> int:
    if len(argv) != 2 or argv[1] not in COMMANDS:
        print(
            "usage: python -m gatekeeper.infrastructure.db.migrate [up|status]",
            file=sys.stderr,
        )
        return 2
    settings = get_settings()
    setup_logging(settings.log_level, app_env=settings.app_env)
    return COMMANDS[argv[1]](migrations_dir())


if __name__ == "__main__":
    raise SystemExit(main(sys.argv))
