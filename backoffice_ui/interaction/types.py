# backoffice_ui/interaction/types.py
from __future__ import annotations

"""Interaction types
-------------------
Configuration models (pydantic, frozen) and result records (dataclasses)
shared by the actuator, the verified action and the page objects.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

if TYPE_CHECKING:
    from backoffice_ui.utils.config import Settings


TargetState = Union[bool, str]


class Strategy(str, Enum):
    direct_click = "direct-click"
    forced_click = "forced-click"
    scripted_event = "scripted-event"


# Escalation order; never reordered.
ESCALATION = (Strategy.direct_click, Strategy.forced_click, Strategy.scripted_event)
FALLBACKS = frozenset({Strategy.forced_click, Strategy.scripted_event})


# ---------- Configuration ----------

class Offset(BaseModel):
    model_config = ConfigDict(frozen=True)

    x: int = Field(default=5, ge=0)
    y: int = Field(default=5, ge=0)


class ClickOptions(BaseModel):
    """What a single click may do. Replaces free-form option bags."""
    model_config = ConfigDict(frozen=True)

    forced: bool = False
    offset: Optional[Offset] = None
    timeout_ms: int = Field(default=5000, ge=1)

    def as_kwargs(self) -> Dict[str, Any]:
        kw: Dict[str, Any] = {"timeout": self.timeout_ms}
        if self.forced:
            kw["force"] = True
        if self.offset is not None:
            kw["position"] = {"x": self.offset.x, "y": self.offset.y}
        return kw


class RetryPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    max_attempts: int = Field(default=3, ge=1)
    per_attempt_timeout_ms: int = Field(default=5000, ge=1)
    inter_attempt_delay_ms: int = Field(default=2000, ge=0)
    settle_delay_ms: int = Field(default=500, ge=0)
    per_candidate_timeout_ms: Optional[int] = Field(default=None, ge=1)
    resolve_timeout_ms: int = Field(default=10000, ge=1)
    click_offset: Offset = Field(default_factory=Offset)

    @classmethod
    def from_settings(cls, s: "Settings") -> "RetryPolicy":
        return cls(
            max_attempts=s.MAX_ATTEMPTS,
            per_attempt_timeout_ms=s.ATTEMPT_TIMEOUT_MS,
            inter_attempt_delay_ms=s.RETRY_DELAY_MS,
            settle_delay_ms=s.SETTLE_DELAY_MS,
            per_candidate_timeout_ms=s.PER_CANDIDATE_TIMEOUT_MS,
            resolve_timeout_ms=s.RESOLVE_TIMEOUT_MS,
            click_offset=Offset(x=s.FORCED_CLICK_OFFSET_X, y=s.FORCED_CLICK_OFFSET_Y),
        )


# ---------- Results ----------

@dataclass
class StrategyOutcome:
    strategy: Strategy
    observed: Any = None
    matched: bool = False
    error: Optional[str] = None
    blocked_by: Optional[str] = None

    def summary(self) -> str:
        s = f"{self.strategy.value} -> {self.observed!r}"
        if self.error:
            s += f" (error: {self.error})"
        if self.blocked_by:
            s += f" (blocked by {self.blocked_by})"
        return s


@dataclass
class AttemptRecord:
    attempt: int
    selector: Optional[str] = None
    outcomes: List[StrategyOutcome] = field(default_factory=list)
    strategies_exhausted: bool = False
    not_found: Optional[str] = None

    @property
    def strategies_tried(self) -> List[Strategy]:
        return [o.strategy for o in self.outcomes]

    def summary(self) -> str:
        if self.not_found:
            return f"attempt {self.attempt}: not found ({self.not_found.splitlines()[0]})"
        tried = "; ".join(o.summary() for o in self.outcomes) or "no strategy applied"
        return f"attempt {self.attempt} via {self.selector}: {tried}"


@dataclass
class ConvergenceResult:
    achieved: bool
    strategy_used: Optional[Strategy]
    attempts: int
    observed_state: Any
    attempts_log: List[AttemptRecord] = field(default_factory=list)

    @property
    def needed_fallback(self) -> bool:
        return self.strategy_used in FALLBACKS
