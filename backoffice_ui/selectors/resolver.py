# backoffice_ui/selectors/resolver.py
from __future__ import annotations

"""Selector resolver
-------------------
Walk a LocatorSet in order and return the first candidate that becomes
visible within a bounded wait. Read-only: nothing is clicked or typed here.

Absence is a value (`NotFound`), not an exception, so callers can decide
whether a missing element is fine (optional dropdowns) or an error
(`require`). A closed page is never "absent": it raises `SessionFault`.
"""

from dataclasses import dataclass, field, replace
from typing import Any, List, Optional, Union

from playwright.async_api import Error as PWError
from playwright.async_api import Locator, Page
from playwright.async_api import TimeoutError as PWTimeoutError

from backoffice_ui.interaction.errors import ElementNotFound, session_fault_for
from backoffice_ui.selectors.locator import LocatorSet, Selector, resolve_locator
from backoffice_ui.utils.logger import get_logger
from backoffice_ui.utils.timing import Deadline

log = get_logger(__name__)


@dataclass
class WidgetHandle:
    """
    A resolved element plus what it was resolved from. Transient: re-resolve
    instead of keeping one across steps, the app re-renders freely.
    """
    element: Locator
    selector: Selector
    locator_set: LocatorSet
    page: Page
    widget: Any = None

    def bind(self, widget: Any) -> "WidgetHandle":
        return replace(self, widget=widget)


@dataclass
class NotFound:
    name: str
    tried: List[str]
    timeout_ms: int
    errors: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return False

    def describe(self) -> str:
        parts = [f"'{self.name}' not found within {self.timeout_ms} ms; tried {len(self.tried)}"]
        parts += [f"  {e}" for e in self.errors]
        if self.skipped:
            parts.append(f"  skipped (deadline passed): {', '.join(self.skipped)}")
        return "\n".join(parts)


Resolution = Union[WidgetHandle, NotFound]


async def resolve(
    page: Page,
    locator_set: LocatorSet,
    timeout_ms: int,
    per_candidate_timeout_ms: Optional[int] = None,
) -> Resolution:
    """
    Each candidate waits `remaining // candidates_left`, or the fixed
    `per_candidate_timeout_ms` capped by what is left. The first candidate is
    always tried; later ones are skipped once the deadline has passed.
    """
    fault = session_fault_for(page)
    if fault is not None:
        raise fault

    deadline = Deadline(timeout_ms)
    candidates = locator_set.candidates
    tried: List[str] = []
    errors: List[str] = []
    skipped: List[str] = []

    for idx, sel in enumerate(candidates):
        if idx > 0 and deadline.expired():
            skipped = [str(c) for c in candidates[idx:]]
            break

        if per_candidate_timeout_ms:
            wait_ms = deadline.cap(per_candidate_timeout_ms)
        else:
            wait_ms = deadline.split(len(candidates) - idx)

        element = resolve_locator(page, sel).first
        tried.append(str(sel))
        try:
            await element.wait_for(state="visible", timeout=wait_ms)
        except PWTimeoutError:
            errors.append(f"[{idx}] {sel}: not visible within {wait_ms} ms")
            continue
        except PWError as exc:
            fault = session_fault_for(page, exc)
            if fault is not None:
                raise fault from exc
            errors.append(f"[{idx}] {sel}: {exc}")
            continue

        log.debug(f"Resolved '{locator_set.name}' via candidate {idx}: {sel}")
        return WidgetHandle(element=element, selector=sel, locator_set=locator_set, page=page)

    nf = NotFound(name=locator_set.name, tried=tried, timeout_ms=timeout_ms, errors=errors, skipped=skipped)
    log.debug(nf.describe())
    return nf


async def require(
    page: Page,
    locator_set: LocatorSet,
    timeout_ms: int,
    per_candidate_timeout_ms: Optional[int] = None,
) -> WidgetHandle:
    """Like `resolve`, but absence is an error."""
    found = await resolve(page, locator_set, timeout_ms, per_candidate_timeout_ms)
    if isinstance(found, NotFound):
        raise ElementNotFound(found)
    return found


async def first_present(page: Page, locator_set: LocatorSet, timeout_ms: int) -> Optional[Selector]:
    """Which candidate (if any) is showing. Used for multi-selector probes."""
    found = await resolve(page, locator_set, timeout_ms)
    return found.selector if isinstance(found, WidgetHandle) else None
