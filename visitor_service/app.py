"""
FastAPI app for the headless visitor.

A cron service hits /run; the runner opens the target page in headless
Chromium and stays there for the configured time so the target (and this
instance) look active. /status reports the last run, /healthz is the
platform liveness probe.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from . import __version__
from .auth import get_token
from .config import VisitorSettings, get_settings, validate_config_on_startup
from .errors import AlreadyRunningError, AuthError, ValidationError
from .models import ErrorResponse, RunAcceptedResponse, StatusResponse
from .runner import JobRunner

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S"
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Headless Visitor", version=__version__)
app.state.runner = JobRunner(get_settings())


def get_runner(request: Request) -> JobRunner:
    """Dependency returning the app's job runner."""
    return request.app.state.runner


def _keepalive_url(request: Request, settings: VisitorSettings) -> Optional[str]:
    """Explicit KEEPALIVE_URL wins, else <scheme>://<host>/healthz of this request."""
    if settings.keepalive_url:
        return settings.keepalive_url
    host = request.headers.get("x-forwarded-host") or request.headers.get("host")
    if not host:
        return None
    scheme = request.headers.get("x-forwarded-proto") or request.url.scheme or "https"
    return f"{scheme}://{host}/healthz"


def _log_unhandled(loop: asyncio.AbstractEventLoop, context: dict) -> None:
    exc = context.get("exception")
    logger.error(f"Unhandled async error: {context.get('message')}", exc_info=exc)


# ============================================================================
# Startup / Shutdown
# ============================================================================

@app.on_event("startup")
async def on_startup():
    """Apply log level, log config and catch stray task errors."""
    settings = app.state.runner.settings
    logging.getLogger().setLevel(settings.log_level)
    validate_config_on_startup(settings)
    asyncio.get_running_loop().set_exception_handler(_log_unhandled)
    logger.info(f"Headless visitor {__version__} ready")


@app.on_event("shutdown")
async def on_shutdown():
    """Finish the current visit before exiting."""
    logger.info("Shutting down ...")
    await app.state.runner.drain()


# ============================================================================
# Error Handlers
# ============================================================================

@app.exception_handler(AuthError)
async def auth_error_handler(request: Request, exc: AuthError) -> JSONResponse:
    return JSONResponse(status_code=401, content=ErrorResponse(error=str(exc)).model_dump())


@app.exception_handler(ValidationError)
async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content=ErrorResponse(error=str(exc)).model_dump())


@app.exception_handler(AlreadyRunningError)
async def already_running_handler(request: Request, exc: AlreadyRunningError) -> JSONResponse:
    body = RunAcceptedResponse(accepted=False, message=str(exc))
    return JSONResponse(status_code=202, content=body.model_dump(exclude_none=True))


# ============================================================================
# Endpoints
# ============================================================================

@app.get("/healthz", response_class=PlainTextResponse)
async def healthz() -> str:
    """Liveness probe for the hosting platform."""
    return "ok"


@app.get("/status", response_model=StatusResponse)
async def status(runner: JobRunner = Depends(get_runner)) -> StatusResponse:
    """Snapshot of the last run plus the configured stay duration."""
    state = runner.status()
    return StatusResponse(
        running=state.running,
        lastRunAt=state.last_run_at,
        lastFinishedAt=state.last_finished_at,
        lastUrl=state.last_url,
        lastError=state.last_error,
        stayMinutes=runner.settings.stay_minutes,
    )


@app.get("/run", status_code=202, response_model=RunAcceptedResponse, response_model_exclude_none=True)
@app.get("/", status_code=202, response_model=RunAcceptedResponse, response_model_exclude_none=True)
async def run(
    request: Request,
    url: Optional[str] = Query(None, description="Target URL (defaults to TARGET_URL)"),
    stay: Optional[float] = Query(None, ge=0, allow_inf_nan=False, description="Stay duration in minutes"),
    token: Optional[str] = Depends(get_token),
    runner: JobRunner = Depends(get_runner),
) -> RunAcceptedResponse:
    """
    Trigger endpoint for cron-job.org and similar:

        GET /run?token=SECRET[&url=https://example.com][&stay=14]

    Responds 202 immediately; the visit continues in the background.
    """
    result = runner.trigger(
        url=url,
        stay_minutes=stay,
        token=token,
        keepalive_url=_keepalive_url(request, runner.settings),
    )
    logger.info(f"/run accepted for {result.url}")
    return RunAcceptedResponse(
        accepted=True,
        url=result.url,
        stayMinutes=result.stay_minutes,
    )
