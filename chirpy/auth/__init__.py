"""Authentication helpers.

Auth is intentionally lightweight:

- Users table (email + bcrypt password hash)
- Stateless JWT access tokens (HS256, issuer "chirpy"), sent as
  `Authorization: Bearer <token>`

There is no server-side session state and no revocation list; tokens expire
by timestamp alone.
"""

from .crud import create_user, verify_user_credentials
from .deps import get_current_user_id
from .security import check_password_hash, get_bearer_token, hash_password, make_jwt, validate_jwt

__all__ = [
    "check_password_hash",
    "create_user",
    "get_bearer_token",
    "get_current_user_id",
    "hash_password",
    "make_jwt",
    "validate_jwt",
    "verify_user_credentials",
]
