from __future__ import annotations

import uuid
from datetime import timedelta
from functools import lru_cache
from typing import Mapping, Optional

import jwt
from passlib.context import CryptContext
from passlib.exc import MissingBackendError

from chirpy.config import AUTH_BCRYPT_ROUNDS
from chirpy.util.time import utcnow

from .errors import (
    CredentialMismatch,
    EmptyBearerToken,
    HashingError,
    InvalidAuthScheme,
    InvalidSignature,
    InvalidSigningMethod,
    InvalidSubject,
    MalformedClaims,
    MissingAuthHeader,
    TokenExpired,
)


# bcrypt only looks at the first 72 bytes; refuse longer passwords instead of truncating.
_pwd = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=AUTH_BCRYPT_ROUNDS,
    bcrypt__truncate_error=True,
)

JWT_ISSUER = "chirpy"
_JWT_ALG = "HS256"
# Any HMAC variant is accepted on the way in; everything else (none, RS*, ES*) is refused.
_JWT_ALLOWED_ALGS = ["HS256", "HS384", "HS512"]
_JWT_REQUIRED_CLAIMS = ["exp", "iat", "iss", "sub"]

_BEARER_PREFIX = "bearer "


def hash_password(password: str) -> str:
    if not password:
        raise HashingError("password_blank")
    try:
        return _pwd.hash(password)
    except (ValueError, TypeError, MissingBackendError) as e:
        raise HashingError(str(e)) from e


def check_password_hash(password: str, password_hash: str) -> None:
    """Raise CredentialMismatch unless `password` matches `password_hash`."""
    if not password or not password_hash:
        raise CredentialMismatch()
    try:
        ok = _pwd.verify(password, password_hash)
    except (ValueError, TypeError) as e:
        # Unidentifiable/corrupt hash: treat like a wrong password.
        raise CredentialMismatch(str(e)) from e
    if not ok:
        raise CredentialMismatch()


@lru_cache(maxsize=1)
def dummy_password_hash() -> str:
    """A valid hash at the configured cost, for burning verify time on unknown accounts."""
    return _pwd.hash("chirpy-no-such-user")


def make_jwt(user_id: uuid.UUID, secret: str | bytes, expires_in: timedelta) -> str:
    """Issue an HS256 token for `user_id`.

    `expires_in` may be negative, which yields a token that is already expired.
    """
    now = utcnow()
    payload = {
        "iss": JWT_ISSUER,
        "iat": now,
        "exp": now + expires_in,
        "sub": str(user_id),
    }
    return jwt.encode(payload, secret, algorithm=_JWT_ALG)


def validate_jwt(token: str, secret: str | bytes) -> uuid.UUID:
    """Verify `token` and return the user id from its subject claim."""
    try:
        payload = jwt.decode(
            token,
            secret,
            algorithms=_JWT_ALLOWED_ALGS,
            issuer=JWT_ISSUER,
            options={"require": _JWT_REQUIRED_CLAIMS},
        )
    except jwt.InvalidAlgorithmError as e:
        raise InvalidSigningMethod(str(e)) from e
    except jwt.ExpiredSignatureError as e:
        raise TokenExpired(str(e)) from e
    except jwt.InvalidSignatureError as e:
        raise InvalidSignature(str(e)) from e
    except jwt.InvalidTokenError as e:
        raise MalformedClaims(str(e)) from e

    try:
        return uuid.UUID(str(payload["sub"]))
    except ValueError as e:
        raise InvalidSubject(str(e)) from e


def _header_value(headers: Mapping[str, str], name: str) -> Optional[str]:
    # Starlette/requests headers are already case-insensitive; plain dicts are not.
    value = headers.get(name)
    if value is not None:
        return value
    wanted = name.lower()
    for k, v in headers.items():
        if str(k).lower() == wanted:
            return v
    return None


def get_bearer_token(headers: Mapping[str, str]) -> str:
    """Pull the token out of an `Authorization: Bearer <token>` header."""
    raw = _header_value(headers, "Authorization")
    if not raw:
        raise MissingAuthHeader()

    value = raw.strip()
    if value.lower() == _BEARER_PREFIX.strip():
        raise EmptyBearerToken()
    if not value.lower().startswith(_BEARER_PREFIX):
        raise InvalidAuthScheme()

    return value[len(_BEARER_PREFIX):].strip()
