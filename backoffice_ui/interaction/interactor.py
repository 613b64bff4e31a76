# backoffice_ui/interaction/interactor.py
from __future__ import annotations

"""Interactor
------------
Per-scenario facade over the engine, bound to one page. Page objects talk to
this instead of to Playwright so that every lookup goes through the resolver
and every stateful change goes through the verified action.
"""

from dataclasses import dataclass
from typing import List, Optional

from playwright.async_api import Page

from backoffice_ui.interaction.types import ClickOptions, ConvergenceResult, RetryPolicy, TargetState
from backoffice_ui.interaction.verified import perform_and_verify
from backoffice_ui.interaction.widgets import RadioGroup, SearchableSelect, Widget
from backoffice_ui.selectors.locator import LocatorSet
from backoffice_ui.selectors.resolver import Resolution, WidgetHandle, require, resolve
from backoffice_ui.utils.logger import get_logger


@dataclass
class HistoryEntry:
    widget: str
    target: TargetState
    result: ConvergenceResult


class Interactor:
    def __init__(self, page: Page, policy: RetryPolicy) -> None:
        self.page = page
        self.policy = policy
        self.history: List[HistoryEntry] = []
        self.log = get_logger(__name__)

    # ---------- Lookup ----------

    def _timeout(self, timeout_ms: Optional[int]) -> int:
        return timeout_ms if timeout_ms is not None else self.policy.resolve_timeout_ms

    async def resolve(self, locators: LocatorSet, timeout_ms: Optional[int] = None) -> Resolution:
        return await resolve(self.page, locators, self._timeout(timeout_ms), self.policy.per_candidate_timeout_ms)

    async def require(self, locators: LocatorSet, timeout_ms: Optional[int] = None) -> WidgetHandle:
        return await require(self.page, locators, self._timeout(timeout_ms), self.policy.per_candidate_timeout_ms)

    async def is_present(self, locators: LocatorSet, timeout_ms: Optional[int] = None) -> bool:
        return isinstance(await self.resolve(locators, timeout_ms), WidgetHandle)

    # ---------- Plain actions ----------

    async def click(self, locators: LocatorSet, *, forced: bool = False, timeout_ms: Optional[int] = None) -> WidgetHandle:
        handle = await self.require(locators, timeout_ms)
        opts = ClickOptions(
            forced=forced,
            offset=self.policy.click_offset if forced else None,
            timeout_ms=self.policy.per_attempt_timeout_ms,
        )
        await handle.element.click(**opts.as_kwargs())
        self.log.debug(f"Clicked '{locators.name}' via {handle.selector}")
        return handle

    async def fill(self, locators: LocatorSet, text: str, *, timeout_ms: Optional[int] = None) -> WidgetHandle:
        handle = await self.require(locators, timeout_ms)
        await handle.element.fill(text, timeout=self.policy.per_attempt_timeout_ms)
        return handle

    async def value_of(self, locators: LocatorSet, *, timeout_ms: Optional[int] = None) -> str:
        handle = await self.require(locators, timeout_ms)
        return await handle.element.input_value(timeout=self.policy.per_attempt_timeout_ms)

    async def text_of(self, locators: LocatorSet, *, timeout_ms: Optional[int] = None) -> str:
        handle = await self.require(locators, timeout_ms)
        return (await handle.element.inner_text(timeout=self.policy.per_attempt_timeout_ms)).strip()

    # ---------- Verified state changes ----------

    async def set_state(self, widget: Widget, target: TargetState) -> ConvergenceResult:
        result = await perform_and_verify(self.page, widget, target, self.policy)
        self.history.append(HistoryEntry(widget=widget.name, target=target, result=result))
        return result

    async def choose(self, group: RadioGroup, label: str) -> ConvergenceResult:
        return await self.set_state(group.member(label), True)

    async def pick(self, select: SearchableSelect, label: str) -> ConvergenceResult:
        return await self.set_state(select, label)

    # ---------- Diagnostics ----------

    @property
    def fallbacks(self) -> List[HistoryEntry]:
        """State changes that needed forced-click or scripted-event."""
        return [h for h in self.history if h.result.needed_fallback]
