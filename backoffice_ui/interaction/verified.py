# backoffice_ui/interaction/verified.py
from __future__ import annotations

"""Verified action
-----------------
resolve → converge → check. The one place where "could not get the widget
into the requested state" becomes a fatal `ConvergenceFailure`.
"""

from typing import Optional

from playwright.async_api import Page

from backoffice_ui.interaction.actuator import converge
from backoffice_ui.interaction.errors import ConvergenceFailure
from backoffice_ui.interaction.types import AttemptRecord, ConvergenceResult, Offset, RetryPolicy, TargetState
from backoffice_ui.interaction.widgets import Widget
from backoffice_ui.selectors.resolver import WidgetHandle
from backoffice_ui.utils.logger import get_logger, log_with_context
from backoffice_ui.utils.timing import async_sleep_ms

log = get_logger(__name__)


async def _resolve_with_retries(page: Page, widget: Widget, policy: RetryPolicy, not_found: list[AttemptRecord]) -> Optional[WidgetHandle]:
    for attempt in range(1, policy.max_attempts + 1):
        found = await widget.resolve(page, policy.resolve_timeout_ms, policy.per_candidate_timeout_ms)
        if isinstance(found, WidgetHandle):
            return found
        not_found.append(AttemptRecord(attempt=attempt, not_found=found.describe()))
        if attempt < policy.max_attempts:
            await async_sleep_ms(policy.inter_attempt_delay_ms)
    return None


async def perform_and_verify(
    page: Page,
    widget: Widget,
    target: TargetState,
    policy: RetryPolicy,
    click_offset: Optional[Offset] = None,
) -> ConvergenceResult:
    """
    Put `widget` into `target` or raise ConvergenceFailure.

    A widget that never shows up within `max_attempts` resolutions is also a
    ConvergenceFailure: its attempts log holds one not-found record per try.
    """
    scoped = log_with_context(log, widget=widget.name, target=str(target))

    not_found: list[AttemptRecord] = []
    handle = await _resolve_with_retries(page, widget, policy, not_found)
    if handle is None:
        err = ConvergenceFailure(widget.locators, target, not_found, observed_state=None)
        scoped.error(str(err))
        raise err

    result = await converge(handle, target, policy, click_offset)
    if not result.achieved:
        err = ConvergenceFailure(widget.locators, target, result.attempts_log, result.observed_state)
        scoped.error(str(err))
        raise err

    if result.needed_fallback:
        scoped.warning(
            f"'{widget.name}' reached {target!r} only via {result.strategy_used.value} "
            f"(attempt {result.attempts}); the control may have become less automation-friendly"
        )
    elif result.strategy_used is None:
        scoped.debug(f"'{widget.name}' already {target!r}")
    else:
        scoped.info(f"'{widget.name}' set to {target!r}")
    return result
