# backoffice_ui/core/scenario.py
from __future__ import annotations

"""Scenarios
-----------
Scenarios are plain async functions registered with `@scenario`. Steps are
async context blocks so a failure is reported against the sentence it
happened in:

    @scenario("Login", "Successful login with valid credentials", tags=("smoke",))
    async def valid_login(ctx: ScenarioContext) -> None:
        login = LoginPage(ctx.interactor, ctx.settings)
        async with ctx.given("I am on the login page"):
            await login.open()
        async with ctx.when("I log in with valid credentials"):
            await login.login(ctx.settings.E2E_USERNAME, ctx.password)
        async with ctx.then("I land on the devices page"):
            await login.wait_for_navigation()
"""

import contextlib
import importlib
from dataclasses import dataclass, field
from typing import Any, AsyncIterator, Awaitable, Callable, Dict, Iterable, List, Optional, Tuple

from playwright.async_api import Page

from backoffice_ui.interaction.errors import StepFailed
from backoffice_ui.interaction.interactor import Interactor
from backoffice_ui.interaction.types import RetryPolicy
from backoffice_ui.utils.config import Settings
from backoffice_ui.utils.logger import get_logger
from backoffice_ui.utils.timing import Stopwatch

log = get_logger(__name__)

ScenarioFunc = Callable[["ScenarioContext"], Awaitable[None]]

SCENARIO_PACKAGE = "backoffice_ui.scenarios"


# ---------- Definitions & registry ----------

@dataclass(frozen=True)
class ScenarioDef:
    feature: str
    name: str
    func: ScenarioFunc
    tags: Tuple[str, ...] = ()

    @property
    def id(self) -> str:
        return f"{self.feature}: {self.name}"


class ScenarioRegistry:
    def __init__(self) -> None:
        self._items: Dict[str, ScenarioDef] = {}

    def register(self, sc: ScenarioDef) -> None:
        if sc.id in self._items:
            raise ValueError(f"duplicate scenario: {sc.id}")
        self._items[sc.id] = sc

    def all(self) -> List[ScenarioDef]:
        return list(self._items.values())

    def features(self) -> List[str]:
        return sorted({sc.feature for sc in self._items.values()})

    def select(
        self,
        names: Iterable[str] = (),
        feature: Optional[str] = None,
        tags: Iterable[str] = (),
    ) -> List[ScenarioDef]:
        """
        Filter by feature (case-insensitive), any-of tags, and name substrings
        (matched against "Feature: Scenario", case-insensitive).
        """
        wanted_names = [n.lower() for n in names]
        wanted_tags = set(tags)
        out = []
        for sc in self._items.values():
            if feature and sc.feature.lower() != feature.lower():
                continue
            if wanted_tags and not wanted_tags.intersection(sc.tags):
                continue
            if wanted_names and not any(n in sc.id.lower() for n in wanted_names):
                continue
            out.append(sc)
        return out

    def __len__(self) -> int:
        return len(self._items)


REGISTRY = ScenarioRegistry()


def scenario(feature: str, name: str, tags: Iterable[str] = (), registry: Optional[ScenarioRegistry] = None):
    """Register an async scenario function."""
    reg = registry if registry is not None else REGISTRY

    def decorator(func: ScenarioFunc) -> ScenarioFunc:
        reg.register(ScenarioDef(feature=feature, name=name, func=func, tags=tuple(tags)))
        return func
    return decorator


def load_scenarios() -> ScenarioRegistry:
    """Import the bundled scenario modules (registration happens on import)."""
    importlib.import_module(SCENARIO_PACKAGE)
    return REGISTRY


# ---------- Runtime context ----------

@dataclass
class StepRecord:
    keyword: str
    text: str
    ok: bool = True
    duration_ms: int = 0
    error: Optional[str] = None


@dataclass
class ScenarioContext:
    """Everything a scenario may touch. Passed explicitly; nothing is global."""
    page: Page
    settings: Settings
    policy: RetryPolicy
    interactor: Interactor = field(init=False)
    data: Dict[str, Any] = field(default_factory=dict)
    steps: List[StepRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.interactor = Interactor(self.page, self.policy)

    @property
    def password(self) -> str:
        pw = self.settings.E2E_PASSWORD
        return pw.get_secret_value() if pw is not None else ""

    def given(self, text: str):
        return self._step("Given", text)

    def when(self, text: str):
        return self._step("When", text)

    def then(self, text: str):
        return self._step("Then", text)

    def and_(self, text: str):
        return self._step("And", text)

    @contextlib.asynccontextmanager
    async def _step(self, keyword: str, text: str) -> AsyncIterator["ScenarioContext"]:
        record = StepRecord(keyword=keyword, text=text)
        self.steps.append(record)
        log.info(f"{keyword} {text}")
        with Stopwatch() as sw:
            try:
                yield self
            except StepFailed:
                record.ok = False
                raise
            except Exception as e:
                record.ok = False
                record.error = f"{type(e).__name__}: {e}"
                raise StepFailed(keyword, text, e) from e
            finally:
                record.duration_ms = sw.elapsed_ms()
