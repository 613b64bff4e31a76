# backoffice_ui/detection/stability.py
from __future__ import annotations

"""Page stability helpers
------------------------
Waits for network idle and DOM quiescence (MutationObserver) after
navigation, so the first interaction on a freshly rendered SPA view does
not race the framework.
"""


from playwright.async_api import Page
from playwright.async_api import TimeoutError as PWTimeoutError

from backoffice_ui.utils.logger import get_logger
from backoffice_ui.utils.timing import Deadline, async_sleep_ms, measure


log = get_logger(__name__)

_INSTALL_COUNTER_JS = """() => {
  window.__boUi = window.__boUi || {};
  if (!window.__boUi.dom) {
    window.__boUi.dom = { last: Date.now() };
    const obs = new MutationObserver(() => { window.__boUi.dom.last = Date.now(); });
    obs.observe(document.documentElement, {subtree: true, childList: true, attributes: true, characterData: true});
  }
  return true;
}"""

_IDLE_FOR_JS = "() => Date.now() - ((window.__boUi && window.__boUi.dom && window.__boUi.dom.last) || Date.now())"


@measure("wait_for_network_idle", level="DEBUG")
async def wait_for_network_idle(page: Page, timeout_ms: int) -> None:
    """Playwright-level network idle (no requests for ~500ms)."""
    await page.wait_for_load_state("networkidle", timeout=timeout_ms)


@measure("wait_for_dom_stable", level="DEBUG")
async def wait_for_dom_stable(page: Page, max_wait_ms: int, settle_ms: int = 300) -> bool:
    """
    Wait until no DOM mutation has been seen for `settle_ms`.
    Returns False (and logs) if the page never went quiet within `max_wait_ms`.
    """
    deadline = Deadline(max_wait_ms)

    await page.evaluate(_INSTALL_COUNTER_JS)
    while True:
        idle = int(await page.evaluate(_IDLE_FOR_JS) or 0)
        if idle >= settle_ms:
            return True
        if deadline.expired():
            log.debug(f"DOM stability timeout after {deadline.budget_ms} ms (idle seen: {idle} ms)")
            return False
        await async_sleep_ms(min(100, max(10, settle_ms // 4)))


async def settle_page(page: Page, timeout_ms: int, *, settle_ms: int = 300) -> None:
    """
    Composite: network idle, then DOM stable, each within `timeout_ms`.
    Best effort: a page that keeps polling the backend never reaches
    network idle, which is fine.
    """
    try:
        await wait_for_network_idle(page, timeout_ms)
    except PWTimeoutError:
        log.debug("Network never went idle; continuing")
    await wait_for_dom_stable(page, timeout_ms, settle_ms=settle_ms)
