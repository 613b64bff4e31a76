# backoffice_ui/pages/base.py
from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from playwright.async_api import Page

from backoffice_ui.detection.stability import settle_page
from backoffice_ui.interaction.interactor import Interactor
from backoffice_ui.selectors.locator import LocatorSet
from backoffice_ui.utils.config import Settings
from backoffice_ui.utils.logger import get_logger


class BasePage:
    """Shared plumbing: every page object talks to the app through an Interactor."""

    def __init__(self, interactor: Interactor, settings: Settings) -> None:
        self.interactor = interactor
        self.settings = settings
        self.log = get_logger(type(self).__module__)

    @property
    def page(self) -> Page:
        return self.interactor.page

    @property
    def url(self) -> str:
        return self.page.url

    @property
    def probe_timeout_ms(self) -> int:
        """Budget for presence checks whose negative answer is legitimate."""
        return self.interactor.policy.per_attempt_timeout_ms

    async def goto(self, url: str, *, settle: bool = True) -> None:
        self.log.info(f"Navigating to {url}")
        await self.page.goto(url, wait_until="domcontentloaded", timeout=self.settings.PAGE_LOAD_TIMEOUT)
        if settle:
            await settle_page(self.page, self.settings.PAGE_LOAD_TIMEOUT)

    async def is_visible(self, locators: LocatorSet, timeout_ms: Optional[int] = None) -> bool:
        return await self.interactor.is_present(locators, timeout_ms if timeout_ms is not None else self.probe_timeout_ms)

    async def screenshot(self, name: str) -> Path:
        stamp = datetime.now(timezone.utc).strftime("%Y-%m-%dT%H-%M-%S-%f")
        path = self.settings.SCREENSHOT_DIR / f"{name}-{stamp}.png"
        await self.page.screenshot(path=str(path), full_page=True)
        self.log.info(f"Screenshot saved: {path}")
        return path
