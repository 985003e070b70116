from __future__ import annotations

import uuid
from typing import Any, Dict, Optional

from chirpy.db import integrity_error
from chirpy.util.time import utcnow_iso

from .errors import CredentialMismatch
from .security import check_password_hash, dummy_password_hash, hash_password


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


def public_user(row: Any | Dict[str, Any]) -> Dict[str, Any]:
    d = dict(row)
    d.pop("hashed_password", None)
    return d


def get_user_by_email(conn: Any, email: str) -> Optional[Any]:
    e = normalize_email(email)
    if not e:
        return None
    return conn.execute(
        "SELECT * FROM users WHERE email=?",
        (e,),
    ).fetchone()


def get_user_by_id(conn: Any, user_id: uuid.UUID | str) -> Optional[Any]:
    return conn.execute(
        "SELECT * FROM users WHERE id=?",
        (str(user_id),),
    ).fetchone()


def verify_user_credentials(conn: Any, email: str, password: str) -> Optional[Any]:
    """Return the user row when email + password match, else None.

    Unknown email and wrong password are deliberately indistinguishable to callers.
    """
    row = get_user_by_email(conn, email)
    # Unknown emails still pay for a bcrypt verify so timing does not reveal which accounts exist.
    stored = str(row["hashed_password"]) if row is not None else dummy_password_hash()
    try:
        check_password_hash(password, stored)
    except CredentialMismatch:
        return None
    # None for unknown emails, even if the password happened to match the dummy hash.
    return row


def create_user(conn: Any, *, email: str, password: str) -> Dict[str, Any]:
    """Insert a user and return its public view.

    Raises ValueError("email_blank" | "email_exists"); hashing failures
    propagate as HashingError.
    """
    e = normalize_email(email)
    if not e:
        raise ValueError("email_blank")

    existing = conn.execute("SELECT 1 FROM users WHERE email=?", (e,)).fetchone()
    if existing is not None:
        raise ValueError("email_exists")

    hashed = hash_password(password)
    user_id = str(uuid.uuid4())
    now = utcnow_iso()
    try:
        conn.execute(
            """
            INSERT INTO users (id, email, hashed_password, created_at, updated_at)
            VALUES (?,?,?,?,?)
            """,
            (user_id, e, hashed, now, now),
        )
    except integrity_error(conn) as ex:
        # Lost a race with a concurrent registration for the same email.
        raise ValueError("email_exists") from ex
    row = get_user_by_id(conn, user_id)
    assert row is not None
    return public_user(row)


def delete_all_users(conn: Any) -> int:
    """Remove every user; their chirps go with them (ON DELETE CASCADE)."""
    cur = conn.execute("DELETE FROM users")
    return int(cur.rowcount or 0)
