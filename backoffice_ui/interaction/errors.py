# backoffice_ui/interaction/errors.py
from __future__ import annotations

"""Interaction error taxonomy
----------------------------
`NotFound` (a value, see selectors.resolver) is the recoverable outcome of a
lookup. Everything here is raised:

  InteractionError
    ├── ElementNotFound     caller required presence and got NotFound
    ├── ConvergenceFailure  widget found but never reached its target state
    ├── SessionFault        page/context/browser closed under us; never retried
    └── StepFailed          scenario step wrapper (keyword + text)
"""

from typing import TYPE_CHECKING, Any, List, Optional, Sequence

if TYPE_CHECKING:
    from backoffice_ui.interaction.types import AttemptRecord
    from backoffice_ui.selectors.locator import LocatorSet
    from backoffice_ui.selectors.resolver import NotFound


_CLOSED_MARKERS = (
    "has been closed",
    "browser has disconnected",
    "target closed",
    "connection closed",
)


class InteractionError(RuntimeError):
    pass


class ElementNotFound(InteractionError):
    def __init__(self, not_found: "NotFound") -> None:
        self.not_found = not_found
        super().__init__(not_found.describe())


class ConvergenceFailure(InteractionError):
    """Carries every attempt, every strategy tried and every state observed."""

    def __init__(
        self,
        locator_set: "LocatorSet",
        target: Any,
        attempts_log: Sequence["AttemptRecord"],
        observed_state: Any = None,
    ) -> None:
        self.locator_set = locator_set
        self.target = target
        self.attempts_log: List["AttemptRecord"] = list(attempts_log)
        self.observed_state = observed_state
        super().__init__(self._message())

    def _message(self) -> str:
        lines = [
            f"'{self.locator_set.name}' did not converge to {self.target!r} "
            f"after {len(self.attempts_log)} attempt(s); last observed {self.observed_state!r}"
        ]
        lines += [f"  {rec.summary()}" for rec in self.attempts_log]
        return "\n".join(lines)


class SessionFault(InteractionError):
    pass


class StepFailed(InteractionError):
    def __init__(self, keyword: str, text: str, cause: BaseException) -> None:
        self.keyword = keyword
        self.text = text
        self.cause = cause
        super().__init__(f"{keyword} {text}: {type(cause).__name__}: {cause}")


def looks_closed(exc: BaseException) -> bool:
    msg = str(exc).lower()
    return any(m in msg for m in _CLOSED_MARKERS)


def session_fault_for(page: Any, exc: Optional[BaseException] = None) -> Optional[SessionFault]:
    """
    Return a SessionFault if the page is gone (or `exc` says so), else None.
    Callers raise it `from exc`.
    """
    closed = False
    try:
        closed = bool(page.is_closed())
    except AttributeError:
        closed = False
    if closed:
        return SessionFault(f"page closed mid-interaction ({page.url if hasattr(page, 'url') else '?'})")
    if exc is not None and looks_closed(exc):
        return SessionFault(f"session closed mid-interaction: {exc}")
    return None
