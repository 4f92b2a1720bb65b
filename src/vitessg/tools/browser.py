"""Headless rendering engine backed by Playwright Chromium."""

from __future__ import annotations

import logging
from types import TracebackType

from playwright.async_api import Browser, Playwright, async_playwright
from playwright.async_api import Error as PlaywrightError

from vitessg.core.errors import RenderFailure

logger = logging.getLogger(__name__)


class PlaywrightEngine:
    """Renders pages in Chromium, one fresh browser context per call.

    Use as an async context manager; the browser lives for the duration of
    the block.
    """

    def __init__(self, *, navigation_timeout: float = 30.0, headless: bool = True) -> None:
        self.navigation_timeout = navigation_timeout
        self.headless = headless
        self._playwright: Playwright | None = None
        self._browser: Browser | None = None

    async def __aenter__(self) -> PlaywrightEngine:
        self._playwright = await async_playwright().start()
        try:
            self._browser = await self._playwright.chromium.launch(headless=self.headless)
        except PlaywrightError as e:
            await self._playwright.stop()
            self._playwright = None
            raise RenderFailure("*", f"browser launch failed: {e}") from e
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if self._browser is not None:
            await self._browser.close()
            self._browser = None
        if self._playwright is not None:
            await self._playwright.stop()
            self._playwright = None

    async def render(self, url: str) -> str:
        """Load url and return the DOM once the network has been idle.

        Raises:
            RenderFailure: On navigation error or timeout
        """
        if self._browser is None:
            raise RuntimeError("PlaywrightEngine used outside of its context")

        # Isolated cookies, storage and app state per route
        context = await self._browser.new_context()
        try:
            page = await context.new_page()
            await page.goto(
                url,
                wait_until="networkidle",
                timeout=self.navigation_timeout * 1000,
            )
            html = await page.content()
        except PlaywrightError as e:
            raise RenderFailure(url, e) from e
        finally:
            await context.close()
        logger.debug(f"Rendered {url} ({len(html)} chars)")
        return html
