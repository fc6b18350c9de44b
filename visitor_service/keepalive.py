"""
Self keep-alive pinger.

While a visit is running the service pings its own public URL so the
hosting platform keeps counting the instance as active. Ping failures are
logged and otherwise ignored.
"""

import asyncio
import logging
from typing import Optional

import httpx

logger = logging.getLogger(__name__)


class KeepAlivePinger:
    """Fire-and-forget GET to a fixed URL on an interval until stopped."""

    def __init__(self, url: str, interval_seconds: float, timeout_seconds: float = 5.0):
        self.url = url
        self.interval_seconds = interval_seconds
        self.timeout_seconds = timeout_seconds
        self.pings_sent = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start pinging on the current event loop. The first ping is immediate."""
        if self.running:
            return
        logger.info(f"[keepalive] will ping {self.url} every {self.interval_seconds:g}s")
        self._task = asyncio.create_task(self._loop(), name="keepalive-pinger")

    async def stop(self) -> None:
        """Cancel the ping loop and wait for it to exit."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        except Exception as e:
            logger.warning(f"[keepalive] pinger exited with error: {e!r}")

    async def ping_once(self, client: httpx.AsyncClient) -> bool:
        """Send a single ping bounded by timeout_seconds. Returns False on any failure."""
        try:
            await asyncio.wait_for(client.get(self.url), timeout=self.timeout_seconds)
            self.pings_sent += 1
            return True
        except Exception as e:
            logger.info(f"[keepalive] ping failed: {e!r}")
            return False

    async def _loop(self) -> None:
        async with httpx.AsyncClient(timeout=self.timeout_seconds) as client:
            while True:
                await self.ping_once(client)
                await asyncio.sleep(self.interval_seconds)
