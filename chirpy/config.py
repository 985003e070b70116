import os
from dataclasses import dataclass
from typing import Optional

# Optional: load a local .env file if present.
try:
    from dotenv import load_dotenv

    load_dotenv()
except ImportError:
    # If python-dotenv isn't installed, plain environment variables still work.
    pass


def _env_int(name: str, default: int) -> int:
    """Parse an integer environment variable, falling back to default when unset/blank."""

    raw = (os.environ.get(name) or "").strip()
    if not raw:
        return default
    return int(raw)


def _env_list(name: str, default: str = "") -> tuple[str, ...]:
    raw = os.environ.get(name, default) or ""
    return tuple(p.strip() for p in raw.split(",") if p.strip())


# bcrypt work factor. Env-only: chirpy.auth.security builds its hashing context
# from it once at import, so it is not a Config field. Only lower this for tests.
AUTH_BCRYPT_ROUNDS: int = _env_int("AUTH_BCRYPT_ROUNDS", 12)


@dataclass(frozen=True)
class Config:
    """Runtime configuration.

    IMPORTANT: Provide secrets via environment variables or a .env file.
    Do not hardcode secrets in source code.
    """

    # -----------------
    # Core
    # -----------------
    # Preferred: set CHIRPY_DATABASE_URL (or DB_URL) to use Postgres.
    # Fallback: CHIRPY_DB_PATH for SQLite.
    DB_DSN: str = (
        os.environ.get("CHIRPY_DATABASE_URL")
        or os.environ.get("DB_URL")
        or os.environ.get("CHIRPY_DB_PATH", "./chirpy.sqlite")
    )

    # "dev" unlocks destructive admin endpoints (POST /admin/reset).
    PLATFORM: str = (os.environ.get("PLATFORM") or "").strip().lower()

    # Directory served under /app/.
    FILESERVER_ROOT: str = os.environ.get("FILESERVER_ROOT", ".")

    # -----------------
    # Auth (JWT + password hashing)
    # -----------------
    # NOTE: In dev, this defaults to a fixed string so you can get started.
    # In production, you MUST set AUTH_JWT_SECRET to a strong random value.
    AUTH_JWT_SECRET: str = os.environ.get("AUTH_JWT_SECRET", "dev_change_me")
    AUTH_TOKEN_EXPIRE_SECONDS: int = _env_int("AUTH_TOKEN_EXPIRE_SECONDS", 3600)  # 1 hour

    # -----------------
    # CORS (development)
    # -----------------
    # Comma-separated list of allowed origins. Empty disables the middleware.
    CORS_ALLOW_ORIGINS: tuple[str, ...] = _env_list("CORS_ALLOW_ORIGINS")


def load_config(**overrides: Optional[object]) -> Config:
    """Build a Config from the current environment.

    Keyword overrides replace individual fields (handy in tests and scripts).
    """
    if not overrides:
        return Config()
    return Config(**{k: v for k, v in overrides.items() if v is not None})
