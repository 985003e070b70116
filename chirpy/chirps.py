from __future__ import annotations

import uuid
from typing import Any, Dict, List, Optional

from chirpy.util.time import utcnow_iso


MAX_CHIRP_LENGTH = 140

# Words are matched case-insensitively, whole space-separated words only
# ("Sharbert!" slips through on purpose).
PROFANE_WORDS = frozenset({"kerfuffle", "sharbert", "fornax"})
_MASK = "****"


def clean_body(body: str) -> str:
    words = body.split(" ")
    return " ".join(_MASK if w.lower() in PROFANE_WORDS else w for w in words)


def public_chirp(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    return dict(row)


def create_chirp(conn: Any, *, user_id: uuid.UUID | str, body: str) -> Dict[str, Any]:
    """Store a cleaned chirp for `user_id`.

    Raises ValueError("body_blank" | "chirp_too_long").
    """
    if not (body or "").strip():
        raise ValueError("body_blank")
    if len(body) > MAX_CHIRP_LENGTH:
        raise ValueError("chirp_too_long")

    chirp_id = str(uuid.uuid4())
    now = utcnow_iso()
    conn.execute(
        """
        INSERT INTO chirps (id, body, user_id, created_at, updated_at)
        VALUES (?,?,?,?,?)
        """,
        (chirp_id, clean_body(body), str(user_id), now, now),
    )
    row = get_chirp(conn, chirp_id)
    assert row is not None
    return public_chirp(row)


def list_chirps(conn: Any) -> List[Dict[str, Any]]:
    rows = conn.execute("SELECT * FROM chirps ORDER BY created_at ASC, id ASC").fetchall()
    return [public_chirp(r) for r in rows]


def get_chirp(conn: Any, chirp_id: uuid.UUID | str) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM chirps WHERE id=?",
        (str(chirp_id),),
    ).fetchone()
