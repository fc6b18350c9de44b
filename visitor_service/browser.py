"""
Headless browser session.

Launches Chromium through Playwright, opens the target page and keeps it
open for the stay duration. The browser is always closed on the way out;
close failures are logged and never mask the original error.
"""

import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import AsyncIterator

from playwright.async_api import Browser, Error as PlaywrightError, async_playwright

from .config import VisitorSettings
from .errors import SessionError

logger = logging.getLogger(__name__)

# Flags for containers without a usable sandbox or /dev/shm
BROWSER_ARGS = [
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-gpu",
    "--no-zygote",
    "--disable-software-rasterizer",
]

VIEWPORT = {"width": 1280, "height": 800}


@asynccontextmanager
async def launch_browser(settings: VisitorSettings) -> AsyncIterator[Browser]:
    """
    Launch Chromium and guarantee it is closed on every exit path.

    Args:
        settings: Provides headless mode and the launch timeout (0 = unbounded)

    Yields:
        The launched Playwright browser
    """
    async with async_playwright() as p:
        logger.info(f"Launching browser (timeout={settings.launch_timeout_ms}ms) ...")
        browser = await p.chromium.launch(
            headless=settings.playwright_headless,
            args=BROWSER_ARGS,
            timeout=settings.launch_timeout_ms,
        )
        try:
            yield browser
        finally:
            try:
                await browser.close()
            except Exception as e:
                logger.warning(f"Browser close failed (ignored): {e}")


async def visit_and_stay(url: str, stay_seconds: float, settings: VisitorSettings) -> None:
    """
    Open url in a fresh browser and stay on it for stay_seconds.

    Navigation only waits for DOMContentLoaded. A navigation failure skips
    the stay wait; the browser is still closed.

    Raises:
        SessionError: if launching, navigating or waiting fails
    """
    started = datetime.now(timezone.utc)
    try:
        async with launch_browser(settings) as browser:
            context = await browser.new_context(viewport=VIEWPORT)
            page = await context.new_page()
            page.on("console", lambda msg: logger.info(f"[page] {msg.type}: {msg.text}"))

            logger.info(f"Navigating to {url} ...")
            await page.goto(
                url,
                wait_until="domcontentloaded",
                timeout=settings.navigation_timeout_ms,
            )

            logger.info(f"Staying on page ~{stay_seconds / 60:g} min ...")
            await page.wait_for_timeout(stay_seconds * 1000)
            logger.info("Done staying on page")
    except PlaywrightError as e:
        raise SessionError(str(e)) from e

    logger.info(
        f"Stayed on {url} for ~{stay_seconds / 60:g} min (started {started.isoformat()})"
    )
