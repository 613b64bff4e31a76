# backoffice_ui/interaction/actuator.py
from __future__ import annotations

"""State-convergence actuator
----------------------------
Drive one widget to a target state:

  read state ── equal? ── yes ──> done, nothing clicked (attempts=0)
       │ no
       ▼
  attempt 1..max_attempts
    (attempt > 1: wait, re-resolve, re-read)
    direct-click ─ settle ─ re-read ─ match? ─> done
    forced-click ─ settle ─ re-read ─ match? ─> done
    scripted-event ─ settle ─ re-read ─ match? ─> done
       │ none matched
       ▼
  achieved=False, attempts=max_attempts, full log

Each attempt runs on one time budget: every strategy gets an even share of
what is left, with part of that share kept back for the re-read.

Exhaustion is returned, not raised; the verified action decides it is fatal.
Only a closed session raises from here.
"""

from typing import Any, Optional

from playwright.async_api import Error as PWError

from backoffice_ui.detection.overlay_detector import OverlayDetector
from backoffice_ui.interaction.errors import session_fault_for
from backoffice_ui.interaction.types import (
    ESCALATION,
    AttemptRecord,
    ClickOptions,
    ConvergenceResult,
    Offset,
    RetryPolicy,
    Strategy,
    StrategyOutcome,
    TargetState,
)
from backoffice_ui.selectors.resolver import NotFound, WidgetHandle
from backoffice_ui.utils.logger import get_logger
from backoffice_ui.utils.timing import Deadline, async_sleep_ms

log = get_logger(__name__)
_overlays = OverlayDetector()


def _first_line(exc: BaseException) -> str:
    text = str(exc).strip()
    return text.splitlines()[0] if text else type(exc).__name__


async def _read(handle: WidgetHandle, timeout_ms: int) -> Any:
    """Current state, or None when the element cannot be read right now."""
    try:
        return await handle.widget.read_state(handle, timeout_ms)
    except PWError as exc:
        fault = session_fault_for(handle.page, exc)
        if fault is not None:
            raise fault from exc
        log.debug(f"'{handle.widget.name}': state unreadable ({_first_line(exc)})")
        return None


async def _apply(
    strategy: Strategy,
    handle: WidgetHandle,
    target: TargetState,
    timeout_ms: int,
    offset: Offset,
    probe_ms: int,
) -> StrategyOutcome:
    widget = handle.widget
    outcome = StrategyOutcome(strategy=strategy)
    try:
        if strategy is Strategy.direct_click:
            await widget.click(handle, target, ClickOptions(timeout_ms=timeout_ms))
        elif strategy is Strategy.forced_click:
            await widget.click(handle, target, ClickOptions(forced=True, offset=offset, timeout_ms=timeout_ms))
        else:
            await widget.scripted_event(handle, target, timeout_ms)
    except PWError as exc:
        fault = session_fault_for(handle.page, exc)
        if fault is not None:
            raise fault from exc
        outcome.error = _first_line(exc)
        if strategy is Strategy.direct_click:
            outcome.blocked_by = await _overlays.blocker_of(handle.element, probe_ms)
    return outcome


def _slot(deadline: Deadline, strategies_left: int) -> tuple[int, int]:
    """
    (action_ms, read_ms) for the next strategy. Each strategy gets an even
    share of what is left of the attempt; a quarter of that share is kept
    for the read after settling and another for the overlay hit-test, so a
    click that waits out its own timeout cannot starve either.
    """
    share = deadline.split(strategies_left)
    read_ms = max(1, share // 4)
    return max(1, share - 2 * read_ms), read_ms


async def converge(
    handle: WidgetHandle,
    target: TargetState,
    policy: RetryPolicy,
    click_offset: Optional[Offset] = None,
) -> ConvergenceResult:
    widget = handle.widget
    if widget is None:
        raise ValueError("converge() needs a handle bound to a widget (use Widget.resolve)")

    page = handle.page
    offset = click_offset or widget.offset or policy.click_offset

    observed = await _read(handle, policy.per_attempt_timeout_ms)
    if widget.matches(observed, target):
        log.debug(f"'{widget.name}' already {target!r}; nothing to do")
        return ConvergenceResult(achieved=True, strategy_used=None, attempts=0, observed_state=observed)

    log.debug(f"'{widget.name}' is {observed!r}, want {target!r}")
    attempts_log: list[AttemptRecord] = []
    last_strategy: Optional[Strategy] = None

    for attempt in range(1, policy.max_attempts + 1):
        if attempt > 1:
            await async_sleep_ms(policy.inter_attempt_delay_ms)
        # re-resolution, every action and every re-read of this attempt share one budget
        deadline = Deadline(policy.per_attempt_timeout_ms)
        if attempt > 1:
            found = await widget.resolve(page, deadline.split(len(ESCALATION) + 1), policy.per_candidate_timeout_ms)
            if isinstance(found, NotFound):
                log.debug(f"'{widget.name}' attempt {attempt}/{policy.max_attempts}: gone after re-render")
                attempts_log.append(AttemptRecord(attempt=attempt, not_found=found.describe()))
                continue
            handle = found
            observed = await _read(handle, _slot(deadline, len(ESCALATION))[1])
            if widget.matches(observed, target):
                # the previous attempt's action landed after its settle window
                log.debug(f"'{widget.name}' reached {target!r} late, after {last_strategy}")
                return ConvergenceResult(True, last_strategy, attempt - 1, observed, attempts_log)

        record = AttemptRecord(attempt=attempt, selector=str(handle.selector))
        attempts_log.append(record)

        for idx, strategy in enumerate(ESCALATION):
            action_ms, read_ms = _slot(deadline, len(ESCALATION) - idx)
            outcome = await _apply(strategy, handle, target, action_ms, offset, read_ms)
            record.outcomes.append(outcome)
            last_strategy = strategy

            await async_sleep_ms(policy.settle_delay_ms)
            observed = outcome.observed = await _read(handle, read_ms)
            log.debug(f"'{widget.name}' attempt {attempt}/{policy.max_attempts} {outcome.summary()}")

            if widget.matches(observed, target):
                outcome.matched = True
                return ConvergenceResult(True, strategy, attempt, observed, attempts_log)

        record.strategies_exhausted = True

    log.info(f"'{widget.name}' did not reach {target!r} in {policy.max_attempts} attempt(s); last seen {observed!r}")
    return ConvergenceResult(
        achieved=False,
        strategy_used=last_strategy,
        attempts=policy.max_attempts,
        observed_state=observed,
        attempts_log=attempts_log,
    )
