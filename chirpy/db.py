from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Iterator, List, Sequence
from urllib.parse import urlparse

from chirpy.schema import get_schema_sql


def _debug(msg: str) -> None:
    print(f"[db] {msg}")


def _detect_dialect(dsn: str) -> str:
    """Return 'postgres' or 'sqlite'."""
    s = (dsn or "").strip()
    if not s:
        return "sqlite"
    scheme = urlparse(s).scheme.lower()
    if scheme in ("postgres", "postgresql"):
        return "postgres"
    # sqlite:///path style or a plain file path.
    return "sqlite"


def _qmark_to_pct(sql: str) -> str:
    """Convert SQLite qmark placeholders (?) to psycopg2 placeholders (%s).

    Skips '?' inside single/double-quoted string literals. Not a full SQL
    parser, but sufficient for the statements in this codebase.
    """
    out: List[str] = []
    in_single = False
    in_double = False
    i = 0
    while i < len(sql):
        ch = sql[i]

        if ch == "'" and not in_double:
            out.append(ch)
            if in_single and i + 1 < len(sql) and sql[i + 1] == "'":
                # Escaped single quote: ''
                out.append("'")
                i += 2
                continue
            in_single = not in_single
            i += 1
            continue

        if ch == '"' and not in_single:
            out.append(ch)
            in_double = not in_double
            i += 1
            continue

        if ch == "?" and not in_single and not in_double:
            out.append("%s")
        else:
            out.append(ch)
        i += 1

    return "".join(out)


class PGCursor:
    def __init__(self, cur: Any):
        self._cur = cur

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> "PGCursor":
        self._cur.execute(_qmark_to_pct(sql), tuple(params or ()))
        return self

    def fetchone(self) -> Any:
        return self._cur.fetchone()

    def fetchall(self) -> Any:
        return self._cur.fetchall()

    @property
    def rowcount(self) -> int:
        return int(self._cur.rowcount or 0)

    def __getattr__(self, name: str) -> Any:
        return getattr(self._cur, name)


class PGConnection:
    """A tiny adapter that makes psycopg2 connections look like sqlite3 connections."""

    dialect = "postgres"

    def __init__(self, conn: Any):
        self._conn = conn

    def execute(self, sql: str, params: Sequence[Any] | None = None) -> PGCursor:
        return PGCursor(self._conn.cursor()).execute(sql, params)

    def commit(self) -> None:
        self._conn.commit()

    def rollback(self) -> None:
        self._conn.rollback()

    def close(self) -> None:
        self._conn.close()


@contextmanager
def connect(db_dsn: str) -> Iterator[Any]:
    """Connect to SQLite or Postgres; commit on success, roll back on error.

    - SQLite: WAL + NORMAL sync, foreign keys on (needed for ON DELETE CASCADE).
    - Postgres: psycopg2 with RealDictCursor so rows behave like dicts.
    """
    dsn = (db_dsn or "").strip()
    dialect = _detect_dialect(dsn)

    if dialect == "postgres":
        import psycopg2
        import psycopg2.extras

        raw = psycopg2.connect(dsn, cursor_factory=psycopg2.extras.RealDictCursor)
        conn: Any = PGConnection(raw)
    else:
        if dsn.lower().startswith("sqlite:///"):
            dsn = dsn[len("sqlite:///") :]
        Path(dsn).parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(dsn, timeout=30, check_same_thread=False)
        conn.row_factory = sqlite3.Row
        conn.execute("PRAGMA journal_mode=WAL;")
        conn.execute("PRAGMA synchronous=NORMAL;")
        conn.execute("PRAGMA busy_timeout=5000;")  # 5s
        conn.execute("PRAGMA foreign_keys = ON;")

    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()


def init_db(db_dsn: str) -> None:
    """Create all tables (idempotent)."""
    dialect = _detect_dialect(db_dsn)
    _debug(f"Initializing DB ({dialect}) at {db_dsn}")
    with connect(db_dsn) as conn:
        ddl = get_schema_sql(dialect)
        if dialect == "postgres":
            # Naive split is fine: the schema has no semicolons inside literals.
            for stmt in (s.strip() for s in ddl.split(";")):
                if stmt:
                    conn.execute(stmt)
            return
        conn.executescript(ddl)


def integrity_error(conn: Any) -> type:
    """The driver's constraint-violation exception for `conn` (unique, foreign key)."""
    if getattr(conn, "dialect", "sqlite") == "postgres":
        import psycopg2

        return psycopg2.IntegrityError
    return sqlite3.IntegrityError
