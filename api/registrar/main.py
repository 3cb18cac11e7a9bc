from __future__ import annotations

import importlib.util
import logging
import os
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from registrar.config import GitHubOAuthConfig, StarknetConfig, allowed_origins
from registrar.routers import health, registrations
from registrar.services.registration_service import build_registration_service
from registrar.services.starknet_rpc import StarknetRpcClient

app = FastAPI(title="GitHub Starknet Registrar API", version="1.0.0")
logger = logging.getLogger("registrar.api")
if not logger.handlers:
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s %(message)s"))
    logger.addHandler(handler)
logger.propagate = False
logger.setLevel(logging.INFO)


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name, "1" if default else "").strip().lower()
    return raw in {"1", "true", "yes", "on"}


def _slow_request_ms_threshold() -> float:
    raw = os.getenv("API_SLOW_REQUEST_MS", "1500").strip()
    try:
        return max(25.0, float(raw))
    except ValueError:
        return 1500.0


def _correlation_id(request: Request) -> str:
    for key in ("x-request-id", "x-amzn-trace-id", "cf-ray"):
        value = request.headers.get(key)
        if value:
            return value
    return "none"


def _starknet_library_available() -> bool:
    return importlib.util.find_spec("starknet_py") is not None


def configure_registrar(target: FastAPI) -> None:
    """Attach the registration pipeline to ``target.state``.

    Incomplete configuration or a missing starknet-py install leaves the service
    unset; the API still boots and answers 503 on readiness and registration.
    """
    target.state.registration_service = None
    target.state.starknet_rpc = None
    target.state.config_error = None
    try:
        github_config = GitHubOAuthConfig.from_env()
        starknet_config = StarknetConfig.from_env()
    except ValueError as exc:
        target.state.config_error = str(exc)
        logger.warning("registrar_config_incomplete error=%s", exc)
        return
    if not _starknet_library_available():
        target.state.config_error = "missing_dependency_starknet_py"
        logger.error("registrar_dependency_missing package=starknet-py")
        return

    rpc = StarknetRpcClient(starknet_config.rpc_url, timeout=starknet_config.timeout_seconds)
    target.state.starknet_rpc = rpc
    target.state.registration_service = build_registration_service(github_config, starknet_config, rpc)


app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

configure_registrar(app)


@app.get("/", include_in_schema=False)
async def root():
    """Landing info for API discovery."""
    return {"name": app.title, "version": app.version, "docs": "/docs", "health": "/api/health"}


app.include_router(registrations.router, prefix="/api", tags=["registrations"])
app.include_router(health.router, prefix="/api", tags=["health"])


@app.middleware("http")
async def log_slow_requests(request: Request, call_next):
    start = time.perf_counter()
    status_code: int | None = None
    exc_name: str | None = None
    try:
        response = await call_next(request)
        status_code = response.status_code
        return response
    except Exception as exc:
        status_code = 500
        exc_name = exc.__class__.__name__
        raise
    finally:
        elapsed_ms = (time.perf_counter() - start) * 1000.0
        if status_code is None:
            status_code = 500
        if elapsed_ms >= _slow_request_ms_threshold() or _env_flag("API_LOG_ALL_REQUESTS") or status_code >= 500:
            logger.warning(
                "slow_api_request method=%s path=%s status=%s elapsed_ms=%.2f correlation=%s exception=%s",
                request.method,
                request.url.path,
                status_code,
                elapsed_ms,
                _correlation_id(request),
                exc_name or "none",
            )
