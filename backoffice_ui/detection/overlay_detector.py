# backoffice_ui/detection/overlay_detector.py
from __future__ import annotations

"""Click interception hints
--------------------------
When a direct click fails, find out what is sitting on top of the target
(a Vuetify overlay, an open menu, a snackbar...). The answer only feeds the
attempt log; it never changes control flow.
"""

from typing import Optional

from playwright.async_api import Error as PWError
from playwright.async_api import Locator

from backoffice_ui.utils.logger import get_logger


_BLOCKER_JS = """(el) => {
    const r = el.getBoundingClientRect();
    if (!r.width || !r.height) return 'zero-size element';
    const x = r.left + r.width / 2, y = r.top + r.height / 2;
    const top = document.elementFromPoint(x, y);
    if (!top || top === el || el.contains(top) || top.contains(el)) return null;
    const cls = (typeof top.className === 'string' && top.className.trim())
        ? '.' + top.className.trim().split(/\\s+/).slice(0, 3).join('.')
        : '';
    const cs = getComputedStyle(el);
    const inert = cs.pointerEvents === 'none' ? ' (target has pointer-events: none)' : '';
    return (top.tagName.toLowerCase() + (top.id ? '#' + top.id : '') + cls).slice(0, 120) + inert;
}"""


class OverlayDetector:
    """
    Heuristic: hit-test the element's centre with elementFromPoint. If the
    topmost node there is neither the element nor related to it, that node
    is what swallowed the click.
    """

    def __init__(self) -> None:
        self.log = get_logger(__name__)

    async def blocker_of(self, element: Locator, timeout_ms: int) -> Optional[str]:
        """Short description of whatever covers `element`, or None."""
        try:
            hint = await element.evaluate(_BLOCKER_JS, timeout=timeout_ms)
        except PWError as e:
            self.log.debug(f"Overlay hit-test unavailable: {e}")
            return None
        if hint:
            self.log.debug(f"Click target covered by {hint}")
        return hint or None
