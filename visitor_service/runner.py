"""
Job Runner

Owns the single-slot visit state. A trigger either starts one background
session (launch browser, navigate, stay, close) or is rejected; there is no
queue. The session runs as an asyncio task held by the runner so shutdown
can wait for it.
"""

import asyncio
import logging
import secrets
from dataclasses import dataclass, replace
from datetime import datetime, timezone
from typing import Awaitable, Callable, Optional

from .browser import visit_and_stay
from .config import VisitorSettings
from .errors import AlreadyRunningError, AuthError, ValidationError
from .keepalive import KeepAlivePinger

logger = logging.getLogger(__name__)

SessionFunc = Callable[[str, float, VisitorSettings], Awaitable[None]]


@dataclass
class RunState:
    """In-memory state of the visit slot."""

    running: bool = False
    last_run_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_url: Optional[str] = None
    last_error: Optional[str] = None


@dataclass(frozen=True)
class TriggerResult:
    """What an accepted trigger started."""

    url: str
    stay_minutes: float


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobRunner:
    """
    Single-slot visit runner.

    Args:
        settings: Service configuration
        session: Coroutine function running one visit; defaults to the
            Playwright implementation
    """

    def __init__(self, settings: VisitorSettings, session: Optional[SessionFunc] = None):
        self.settings = settings
        self._session = session or visit_and_stay
        self._state = RunState()
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._state.running

    def status(self) -> RunState:
        """Return a copy of the current state."""
        return replace(self._state)

    def authorize(self, token: Optional[str]) -> None:
        """
        Check the shared secret.

        Raises:
            AuthError: secret not configured, token missing or mismatched
        """
        expected = self.settings.cron_secret
        if not expected or not token:
            raise AuthError()
        if not secrets.compare_digest(token.encode(), expected.encode()):
            raise AuthError()

    def trigger(
        self,
        url: Optional[str],
        stay_minutes: Optional[float],
        token: Optional[str],
        keepalive_url: Optional[str] = None,
    ) -> TriggerResult:
        """
        Start a visit session in the background if the slot is free.

        Must be called from a running event loop. State is updated before
        this returns, so a following status() already reports running.

        Raises:
            AuthError: bad or missing token
            ValidationError: no url given and no default configured
            AlreadyRunningError: a session is in flight
        """
        try:
            self.authorize(token)
        except AuthError:
            logger.warning("Trigger unauthorized")
            raise

        target = url or self.settings.target_url
        if not target:
            raise ValidationError()

        if self._state.running:
            logger.info("Trigger received but a job is already running")
            raise AlreadyRunningError()

        stay = self.settings.stay_minutes if stay_minutes is None else stay_minutes

        self._state.running = True
        self._state.last_error = None
        self._state.last_url = target
        self._state.last_run_at = _utcnow()
        logger.info(f"Starting visit: {target} for {stay:g} min")

        self._task = asyncio.create_task(
            self._run(target, stay * 60, keepalive_url),
            name="visit-session",
        )
        return TriggerResult(url=target, stay_minutes=stay)

    async def _run(self, url: str, stay_seconds: float, keepalive_url: Optional[str]) -> None:
        pinger = None
        if keepalive_url:
            pinger = KeepAlivePinger(
                keepalive_url,
                interval_seconds=self.settings.keepalive_interval_ms / 1000,
                timeout_seconds=self.settings.keepalive_timeout_ms / 1000,
            )
            pinger.start()

        error = None
        try:
            await self._session(url, stay_seconds, self.settings)
        except Exception as e:
            error = str(e) or type(e).__name__
            logger.exception(f"Visit to {url} failed: {error}")
        finally:
            try:
                if pinger:
                    await pinger.stop()
            except Exception as e:
                logger.warning(f"Keep-alive shutdown failed (ignored): {e!r}")
            finally:
                self._state.last_finished_at = _utcnow()
                if error is not None:
                    self._state.last_error = error
                self._state.running = False
                logger.info(f"Visit to {url} finished (error={error})")

    async def drain(self) -> None:
        """Wait for the in-flight session, if any. Does not cancel it."""
        task = self._task
        if task is None or task.done():
            return
        logger.info("Waiting for in-flight visit to finish ...")
        await asyncio.wait({task})
