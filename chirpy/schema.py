"""Database schema for Chirpy.

Timestamps are ISO-8601 TEXT (UTC, with 'Z') for portability across SQLite and
Postgres. ISO strings sort lexicographically in time order, so ORDER BY
created_at behaves correctly.

Ids are UUIDs stored as TEXT.

NOTE: The Postgres schema is generated from the SQLite schema (pragmas stripped).
"""

from __future__ import annotations


SCHEMA_SQLITE = r"""
PRAGMA foreign_keys = ON;

-- Users / Auth
-- We use JWTs for stateless auth and store only password hashes.
CREATE TABLE IF NOT EXISTS users (
    id TEXT PRIMARY KEY,
    email TEXT NOT NULL UNIQUE,
    hashed_password TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS chirps (
    id TEXT PRIMARY KEY,
    body TEXT NOT NULL,
    user_id TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL,
    FOREIGN KEY (user_id) REFERENCES users(id) ON DELETE CASCADE
);
CREATE INDEX IF NOT EXISTS idx_chirps_created ON chirps (created_at);
CREATE INDEX IF NOT EXISTS idx_chirps_user ON chirps (user_id);
"""


def _sqlite_to_postgres(ddl: str) -> str:
    lines: list[str] = []
    for line in ddl.splitlines():
        if line.strip().upper().startswith("PRAGMA "):
            continue
        lines.append(line)
    return "\n".join(lines)


SCHEMA_POSTGRES = _sqlite_to_postgres(SCHEMA_SQLITE)


def get_schema_sql(dialect: str) -> str:
    d = (dialect or "").lower()
    if d.startswith("post"):
        return SCHEMA_POSTGRES
    return SCHEMA_SQLITE
