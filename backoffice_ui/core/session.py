# backoffice_ui/core/session.py
from __future__ import annotations

"""Browser session
-----------------
One isolated browser + context + page per scenario. Teardown always runs and
is bounded: each resource gets CLOSE_TIMEOUT_MS, the whole teardown gets
TEARDOWN_GRACE_MS, after which the driver is stopped regardless.
"""

import asyncio
from typing import Any, Awaitable, Callable, Optional

from playwright.async_api import Browser, BrowserContext, Page, async_playwright
from playwright.async_api import Error as PWError

from backoffice_ui.utils.config import Settings, get_settings
from backoffice_ui.utils.logger import get_logger
from backoffice_ui.utils.timing import async_sleep_ms


class BrowserSession:
    """
    Usage:
        async with BrowserSession(settings) as session:
            await session.page.goto(settings.BASE_URL)
    """

    def __init__(self, settings: Optional[Settings] = None, *, driver_factory: Callable[[], Any] = async_playwright) -> None:
        self.settings = settings or get_settings()
        self.log = get_logger(__name__)
        self._driver_factory = driver_factory
        self._driver: Any = None
        self.browser: Optional[Browser] = None
        self.context: Optional[BrowserContext] = None
        self.page: Optional[Page] = None

    # ---------- Lifecycle ----------

    async def open(self) -> "BrowserSession":
        s = self.settings
        self._driver = await self._driver_factory().start()
        browser_type = getattr(self._driver, s.BROWSER_TYPE.value)
        self.browser = await browser_type.launch(**s.playwright_launch_kwargs())
        self.context = await self.browser.new_context(**s.playwright_context_kwargs())
        self.context.set_default_timeout(s.PAGE_LOAD_TIMEOUT)
        self.page = await self.context.new_page()
        self.log.debug(f"Opened {s.BROWSER_TYPE.value} session (headless={s.HEADLESS})")
        return self

    async def close(self) -> None:
        """Release everything; never raises for a stuck or already-dead browser."""
        s = self.settings
        if self._driver is None:
            return

        if not s.HEADLESS and s.HEADED_HOLD_MS > 0:
            await async_sleep_ms(s.HEADED_HOLD_MS)

        try:
            await asyncio.wait_for(self._close_all(), timeout=s.TEARDOWN_GRACE_MS / 1000.0)
        except asyncio.TimeoutError:
            self.log.warning(f"Teardown exceeded {s.TEARDOWN_GRACE_MS} ms; force-stopping the browser")
            await self._force_stop()
        finally:
            self.page = self.context = self.browser = None
            self._driver = None

    async def __aenter__(self) -> "BrowserSession":
        try:
            return await self.open()
        except BaseException:
            await self.close()
            raise

    async def __aexit__(self, exc_type, exc, tb) -> bool:
        await self.close()
        return False

    # ---------- Internals ----------

    async def _close_one(self, what: str, closer: Optional[Callable[[], Awaitable[Any]]]) -> None:
        if closer is None:
            return
        try:
            await asyncio.wait_for(closer(), timeout=self.settings.CLOSE_TIMEOUT_MS / 1000.0)
        except asyncio.TimeoutError:
            self.log.warning(f"Closing {what} timed out after {self.settings.CLOSE_TIMEOUT_MS} ms")
        except PWError as e:
            self.log.debug(f"{what} already gone: {e}")

    async def _close_all(self) -> None:
        await self._close_one("page", self.page.close if self.page else None)
        await self._close_one("context", self.context.close if self.context else None)
        await self._close_one("browser", self.browser.close if self.browser else None)
        await self._close_one("driver", self._driver.stop if self._driver else None)

    async def _force_stop(self) -> None:
        # stopping the driver kills every browser process it launched
        driver = self._driver
        if driver is None:
            return
        try:
            await asyncio.wait_for(driver.stop(), timeout=self.settings.CLOSE_TIMEOUT_MS / 1000.0)
        except asyncio.TimeoutError:
            self.log.error("Driver did not stop; browser processes may be left behind")
        except PWError as e:
            self.log.debug(f"Driver already stopped: {e}")
