"""Authentication failures.

Every failure carries a stable snake_case `code`. The HTTP layer logs the code
server-side and collapses all of them into a generic 401 (or 500 for hashing
failures) so clients cannot tell which step failed.
"""

from __future__ import annotations


class AuthError(Exception):
    code = "auth_error"

    def __init__(self, message: str | None = None):
        super().__init__(message or self.code)


class HashingError(AuthError):
    """The password hashing primitive failed (blank/oversized password, missing backend)."""

    code = "hashing_error"


class CredentialMismatch(AuthError):
    code = "credential_mismatch"


# -----------------------------
# Tokens
# -----------------------------


class TokenError(AuthError):
    code = "token_invalid"


class TokenExpired(TokenError):
    code = "token_expired"


class InvalidSignature(TokenError):
    code = "token_bad_signature"


class InvalidSigningMethod(TokenError):
    code = "token_bad_alg"


class MalformedClaims(TokenError):
    code = "token_malformed"


class InvalidSubject(TokenError):
    code = "token_bad_sub"


# -----------------------------
# Authorization header
# -----------------------------


class BearerHeaderError(AuthError):
    code = "bearer_invalid"


class MissingAuthHeader(BearerHeaderError):
    code = "missing_auth_header"


class InvalidAuthScheme(BearerHeaderError):
    code = "invalid_auth_scheme"


class EmptyBearerToken(BearerHeaderError):
    code = "empty_bearer_token"
