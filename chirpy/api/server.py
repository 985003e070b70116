from __future__ import annotations

import uuid
from datetime import timedelta
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import HTMLResponse, JSONResponse, PlainTextResponse
from fastapi.staticfiles import StaticFiles
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from chirpy import __version__
from chirpy.auth import get_current_user_id
from chirpy.auth.crud import create_user, delete_all_users, get_user_by_id, public_user, verify_user_credentials
from chirpy.auth.errors import HashingError
from chirpy.auth.security import make_jwt
from chirpy.chirps import create_chirp, get_chirp, list_chirps, public_chirp
from chirpy.config import Config, load_config
from chirpy.db import connect, init_db
from chirpy.metrics import HitCounter, render_metrics_html


def _debug(msg: str) -> None:
    print(f"[api] {msg}")


router = APIRouter()


def _cfg(request: Request) -> Config:
    return request.app.state.cfg


def _error(status_code: int, message: str) -> HTTPException:
    return HTTPException(status_code=status_code, detail=message)


# -----------------------------
# Health
# -----------------------------


@router.get("/api/healthz", response_class=PlainTextResponse)
def healthz() -> str:
    return "OK"


# -----------------------------
# Admin
# -----------------------------


@router.get("/admin/metrics", response_class=HTMLResponse)
def admin_metrics(request: Request) -> str:
    return render_metrics_html(request.app.state.hits.load())


@router.post("/admin/reset")
def admin_reset(request: Request) -> Dict[str, Any]:
    """Wipe all users (chirps cascade) and zero the hit counter. Dev only."""
    cfg = _cfg(request)
    if cfg.PLATFORM != "dev":
        raise _error(403, "forbidden")

    with connect(cfg.DB_DSN) as conn:
        n = delete_all_users(conn)

    request.app.state.hits.reset()
    _debug(f"reset: deleted {n} users")
    return {"ok": True}


# -----------------------------
# Users / Auth
# -----------------------------


class CreateUserRequest(BaseModel):
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str
    # Optional shorter lifetime; capped at AUTH_TOKEN_EXPIRE_SECONDS.
    expires_in_seconds: Optional[int] = None


def _token_ttl(cfg: Config, requested: Optional[int]) -> timedelta:
    default = int(cfg.AUTH_TOKEN_EXPIRE_SECONDS)
    if requested is None or requested <= 0 or requested > default:
        return timedelta(seconds=default)
    return timedelta(seconds=int(requested))


@router.post("/api/users", status_code=201)
def users_create(payload: CreateUserRequest, request: Request) -> Dict[str, Any]:
    cfg = _cfg(request)
    if not payload.email.strip():
        raise _error(400, "email required")
    if not payload.password.strip():
        raise _error(400, "password required")

    with connect(cfg.DB_DSN) as conn:
        try:
            return create_user(conn, email=payload.email, password=payload.password)
        except ValueError as e:
            if str(e) == "email_exists":
                raise _error(409, "email already registered")
            raise _error(400, "email required")
        except HashingError as e:
            _debug(f"password hashing failed: code={e.code}")
            raise _error(500, "could not hash password")


@router.post("/api/login")
def login(payload: LoginRequest, request: Request) -> Dict[str, Any]:
    cfg = _cfg(request)
    with connect(cfg.DB_DSN) as conn:
        user_row = verify_user_credentials(conn, payload.email, payload.password)

    if user_row is None:
        # Same message for unknown email and wrong password.
        _debug("login rejected: credential_mismatch")
        raise _error(401, "Incorrect email or password")

    u = public_user(user_row)
    u["token"] = make_jwt(
        uuid.UUID(str(u["id"])),
        cfg.AUTH_JWT_SECRET,
        _token_ttl(cfg, payload.expires_in_seconds),
    )
    return u


# -----------------------------
# Chirps
# -----------------------------


class ChirpRequest(BaseModel):
    body: str


@router.post("/api/chirps", status_code=201)
def chirps_create(
    payload: ChirpRequest,
    request: Request,
    user_id: uuid.UUID = Depends(get_current_user_id),
) -> Dict[str, Any]:
    cfg = _cfg(request)
    with connect(cfg.DB_DSN) as conn:
        # A valid token can outlive its user (e.g. after /admin/reset).
        if get_user_by_id(conn, user_id) is None:
            raise HTTPException(status_code=401, detail="unauthorized", headers={"WWW-Authenticate": "Bearer"})
        try:
            return create_chirp(conn, user_id=user_id, body=payload.body)
        except ValueError as e:
            if str(e) == "chirp_too_long":
                raise _error(400, "Chirp is too long")
            raise _error(400, "body required")


@router.get("/api/chirps")
def chirps_list(request: Request) -> List[Dict[str, Any]]:
    with connect(_cfg(request).DB_DSN) as conn:
        return list_chirps(conn)


@router.get("/api/chirps/{chirp_id}")
def chirps_get(chirp_id: str, request: Request) -> Dict[str, Any]:
    try:
        cid = uuid.UUID(chirp_id)
    except ValueError:
        raise _error(400, "invalid chirp_id")

    with connect(_cfg(request).DB_DSN) as conn:
        row = get_chirp(conn, cid)
    if row is None:
        raise _error(404, "chirp not found")
    return public_chirp(row)


# -----------------------------
# App factory
# -----------------------------


async def _http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse({"error": exc.detail}, status_code=exc.status_code, headers=getattr(exc, "headers", None))


async def _validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    return JSONResponse({"error": "Invalid JSON"}, status_code=400)


def create_app(cfg: Config | None = None) -> FastAPI:
    cfg = cfg or load_config()

    app = FastAPI(title="Chirpy", version=__version__)
    app.state.cfg = cfg
    app.state.hits = HitCounter()

    if cfg.CORS_ALLOW_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=list(cfg.CORS_ALLOW_ORIGINS),
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    @app.middleware("http")
    async def _count_fileserver_hits(request: Request, call_next: Any) -> Any:
        if request.url.path.startswith("/app/"):
            request.app.state.hits.increment()
        return await call_next(request)

    @app.on_event("startup")
    def _on_startup() -> None:
        # Ensure schema exists.
        init_db(cfg.DB_DSN)
        if cfg.AUTH_JWT_SECRET == "dev_change_me":
            _debug("AUTH_JWT_SECRET is the dev default; set a real secret in production")

    app.add_exception_handler(StarletteHTTPException, _http_error)
    app.add_exception_handler(RequestValidationError, _validation_error)

    app.include_router(router)
    app.mount("/app", StaticFiles(directory=cfg.FILESERVER_ROOT, html=True, check_dir=False), name="app")
    return app


app = create_app()
