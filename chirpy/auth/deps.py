from __future__ import annotations

import uuid

from fastapi import HTTPException, Request

from .errors import AuthError
from .security import get_bearer_token, validate_jwt


def _debug(msg: str) -> None:
    print(f"[auth] {msg}")


def _unauthorized() -> HTTPException:
    # One detail string for every cause so clients can't probe which check failed.
    return HTTPException(status_code=401, detail="unauthorized", headers={"WWW-Authenticate": "Bearer"})


def get_current_user_id(request: Request) -> uuid.UUID:
    """Authenticate a request from its `Authorization: Bearer <jwt>` header.

    The failure cause is logged server-side (never the token itself) and the
    client only ever sees a generic 401.
    """

    cfg = getattr(request.app.state, "cfg", None)
    if cfg is None:
        raise HTTPException(status_code=500, detail="server_config_missing")

    try:
        token = get_bearer_token(request.headers)
        return validate_jwt(token, cfg.AUTH_JWT_SECRET)
    except AuthError as e:
        _debug(f"auth rejected: {request.method} {request.url.path} code={e.code}")
        raise _unauthorized()
