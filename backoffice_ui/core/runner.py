# backoffice_ui/core/runner.py
from __future__ import annotations

"""Scenario runner
-----------------
Runs registered scenarios, each inside its own BrowserSession, and returns a
small result dict per scenario. With parallel execution, scenarios run as
concurrent asyncio tasks bounded by MAX_WORKERS; nothing is shared between
them except the logger.
"""

import asyncio
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Sequence

from playwright.async_api import Error as PWError
from playwright.async_api import Page

from backoffice_ui.core.scenario import ScenarioContext, ScenarioDef
from backoffice_ui.core.session import BrowserSession
from backoffice_ui.interaction.errors import StepFailed
from backoffice_ui.interaction.types import RetryPolicy
from backoffice_ui.utils.config import Settings, get_settings
from backoffice_ui.utils.logger import (
    attach_file_logger,
    detach_file_logger,
    enter_scope,
    exit_scope,
    get_logger,
    log_with_context,
)
from backoffice_ui.utils.timing import Stopwatch


def _ts() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d_%H-%M-%S-%f")


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-") or "scenario"


class ScenarioRunner:
    """Runs scenarios against live browser sessions."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_factory: Callable[[Settings], BrowserSession] = BrowserSession,
    ) -> None:
        self.settings = settings or get_settings()
        self.session_factory = session_factory
        self.policy = RetryPolicy.from_settings(self.settings)
        self.log = get_logger(__name__)

    async def _screenshot(self, page: Optional[Page], name: str) -> Optional[Path]:
        if page is None:
            return None
        path = self.settings.SCREENSHOT_DIR / f"{name}.png"
        try:
            await page.screenshot(path=str(path), full_page=True)
        except PWError as e:
            self.log.debug(f"Failure screenshot skipped: {e}")
            return None
        return path

    async def run(self, sc: ScenarioDef) -> Dict[str, Any]:
        """Execute one scenario and return {"ok": bool, ...}. Never raises for a failed scenario."""
        s = self.settings
        run_name = f"{_slug(sc.feature)}_{_slug(sc.name)}_{_ts()}"
        run_dir = s.RUN_LOG_DIR / _slug(sc.feature) / run_name

        token = enter_scope(run_name)
        handler = attach_file_logger(run_dir / "scenario.log", scope=run_name)
        scoped = log_with_context(self.log, feature=sc.feature, scenario=sc.name)
        result: Dict[str, Any] = {
            "ok": True,
            "scenario": sc.name,
            "feature": sc.feature,
            "run_dir": str(run_dir),
            "error": None,
            "error_type": None,
            "failed_step": None,
            "fallbacks": [],
        }
        ctx: Optional[ScenarioContext] = None
        sw = Stopwatch().start()
        try:
            async with self.session_factory(s) as session:
                ctx = ScenarioContext(page=session.page, settings=s, policy=self.policy)
                scoped.info(f"Starting scenario: {sc.id}")
                try:
                    await sc.func(ctx)
                except Exception:
                    shot = await self._screenshot(session.page, run_name)
                    if shot:
                        result["screenshot"] = str(shot)
                    raise
            scoped.info(f"Passed: {sc.id}")
        except StepFailed as e:
            scoped.error(f"Failed: {sc.id} at '{e.keyword} {e.text}'", exc_info=e.cause)
            result.update(
                ok=False,
                error=str(e.cause),
                error_type=type(e.cause).__name__,
                failed_step={"keyword": e.keyword, "text": e.text},
            )
        except Exception as e:
            scoped.exception(f"Failed: {sc.id}")
            result.update(ok=False, error=str(e), error_type=type(e).__name__)
        finally:
            detach_file_logger(handler)
            exit_scope(token)

        if ctx is not None:
            result["fallbacks"] = [
                {"widget": h.widget, "target": h.target, "strategy": h.result.strategy_used.value}
                for h in ctx.interactor.fallbacks
            ]
        result["duration_s"] = round(sw.elapsed_ms() / 1000.0, 3)
        return result

    async def run_many(
        self,
        scenarios: Sequence[ScenarioDef],
        parallel: Optional[bool] = None,
        max_workers: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Results come back in the order the scenarios were given."""
        run_parallel = self.settings.PARALLEL_EXECUTION if parallel is None else parallel
        workers = max(1, max_workers if max_workers is not None else self.settings.MAX_WORKERS)

        if not run_parallel or len(scenarios) <= 1:
            return [await self.run(sc) for sc in scenarios]

        sem = asyncio.Semaphore(workers)

        async def _guarded(sc: ScenarioDef) -> Dict[str, Any]:
            async with sem:
                return await self.run(sc)

        return list(await asyncio.gather(*(_guarded(sc) for sc in scenarios)))


def run_scenarios(
    scenarios: Sequence[ScenarioDef],
    settings: Optional[Settings] = None,
    parallel: Optional[bool] = None,
    max_workers: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """Synchronous entry point (CLI)."""
    runner = ScenarioRunner(settings=settings)
    return asyncio.run(runner.run_many(scenarios, parallel=parallel, max_workers=max_workers))
