import asyncio
import json

import pytest

from backoffice_ui.core.runner import ScenarioRunner
from backoffice_ui.core.scenario import ScenarioDef
from backoffice_ui.core.session import BrowserSession
from backoffice_ui.utils.config import Settings


@pytest.fixture
def settings(tmp_path):
    return Settings(
        RUN_LOG_DIR=tmp_path / "runs",
        SCREENSHOT_DIR=tmp_path / "shots",
        HEADLESS=True,
        MAX_ATTEMPTS=2,
        RETRY_DELAY_MS=0,
        SETTLE_DELAY_MS=0,
        ATTEMPT_TIMEOUT_MS=200,
        RESOLVE_TIMEOUT_MS=200,
        CLOSE_TIMEOUT_MS=50,
        TEARDOWN_GRACE_MS=200,
    )


class FakeSession:
    opened = []

    def __init__(self, page_factory, settings):
        self.page = page_factory()
        self.closed = False
        FakeSession.opened.append(self)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        self.closed = True
        return False


@pytest.fixture
def session_factory(page):
    FakeSession.opened = []
    page_cls = type(page)
    return lambda s: FakeSession(page_cls, s)


async def test_passing_scenario(settings, session_factory):
    async def ok(ctx):
        async with ctx.given("nothing to do"):
            pass

    runner = ScenarioRunner(settings, session_factory=session_factory)
    res = await runner.run(ScenarioDef("Login", "Does nothing", ok))
    assert res["ok"] is True
    assert res["error"] is None
    assert res["fallbacks"] == []
    assert FakeSession.opened[0].closed


async def test_failing_step_is_reported_and_session_closed(settings, session_factory):
    async def broken(ctx):
        async with ctx.given("setup"):
            pass
        async with ctx.then("the device should be added"):
            raise AssertionError("no success message appeared")

    runner = ScenarioRunner(settings, session_factory=session_factory)
    res = await runner.run(ScenarioDef("Devices", "Broken", broken))
    assert res["ok"] is False
    assert res["failed_step"] == {"keyword": "Then", "text": "the device should be added"}
    assert res["error_type"] == "AssertionError"
    assert "no success message" in res["error"]
    assert res["screenshot"].endswith(".png")
    session = FakeSession.opened[0]
    assert session.closed
    assert session.page.screenshots == [res["screenshot"]]


async def test_fallbacks_are_reported(settings, session_factory):
    from backoffice_ui.interaction.widgets import Toggle
    from backoffice_ui.selectors.locator import LocatorSet

    switch = Toggle(LocatorSet.of("#switch", name="report switch"))

    async def needs_force(ctx):
        ctx.page.add("#switch", checked=False, blocked=True)
        async with ctx.when("I enable the report"):
            await ctx.interactor.set_state(switch, True)

    runner = ScenarioRunner(settings, session_factory=session_factory)
    res = await runner.run(ScenarioDef("Profile", "Force", needs_force))
    assert res["ok"] is True
    assert res["fallbacks"] == [{"widget": "report switch", "target": True, "strategy": "forced-click"}]


async def test_parallel_runs_are_bounded_and_ordered(settings, session_factory):
    running = 0
    peak = 0

    def make(i):
        async def body(ctx):
            nonlocal running, peak
            running += 1
            peak = max(peak, running)
            await asyncio.sleep(0.02)
            running -= 1
            if i == 1:
                raise RuntimeError("boom")
        return ScenarioDef("Feature", f"s{i}", body)

    runner = ScenarioRunner(settings, session_factory=session_factory)
    results = await runner.run_many([make(i) for i in range(4)], parallel=True, max_workers=2)
    assert [r["scenario"] for r in results] == ["s0", "s1", "s2", "s3"]
    assert [r["ok"] for r in results] == [True, False, True, True]
    assert results[1]["error_type"] == "RuntimeError"
    assert peak == 2
    assert all(s.closed for s in FakeSession.opened)


async def test_each_scenario_gets_its_own_log_file(settings, session_factory):
    async def quiet(ctx):
        await asyncio.sleep(0.01)

    runner = ScenarioRunner(settings, session_factory=session_factory)
    results = await runner.run_many(
        [ScenarioDef("Logs", "alpha", quiet), ScenarioDef("Logs", "beta", quiet)],
        parallel=True,
        max_workers=2,
    )
    assert all(r["ok"] for r in results)
    for own, other in (("alpha", "beta"), ("beta", "alpha")):
        log_file = next((settings.RUN_LOG_DIR / "logs").glob(f"logs_{own}_*/scenario.log"))
        messages = " ".join(json.loads(line)["message"] for line in log_file.read_text(encoding="utf-8").splitlines())
        assert f"Logs: {own}" in messages
        assert f"Logs: {other}" not in messages


# ---------- BrowserSession teardown ----------


class Recorder:
    def __init__(self):
        self.closed = []
        self.hang = set()

    async def close(self, what):
        if what in self.hang:
            await asyncio.Event().wait()
        self.closed.append(what)


class FakeDriver:
    def __init__(self, rec):
        self.rec = rec
        self.chromium = self

    async def launch(self, **kw):
        return _Closable(self.rec, "browser", new_context=self._context)

    async def _context(self, **kw):
        return _Closable(self.rec, "context", new_page=self._page)

    async def _page(self):
        return _Closable(self.rec, "page")

    async def stop(self):
        await self.rec.close("driver")


class _Closable:
    def __init__(self, rec, what, **methods):
        self.rec = rec
        self.what = what
        for name, fn in methods.items():
            setattr(self, name, fn)

    def set_default_timeout(self, ms):
        self.default_timeout = ms

    async def close(self):
        await self.rec.close(self.what)


class _Manager:
    def __init__(self, rec):
        self.rec = rec

    async def start(self):
        return FakeDriver(self.rec)


async def test_session_closes_everything_in_order(settings):
    rec = Recorder()
    async with BrowserSession(settings, driver_factory=lambda: _Manager(rec)) as session:
        assert session.page is not None
    assert rec.closed == ["page", "context", "browser", "driver"]
    assert session.page is None


async def test_stuck_resource_does_not_block_the_rest(settings):
    rec = Recorder()
    rec.hang.add("context")
    async with BrowserSession(settings, driver_factory=lambda: _Manager(rec)):
        pass
    assert rec.closed == ["page", "browser", "driver"]


async def test_teardown_grace_force_stops_driver(settings):
    settings = settings.model_copy(update={"CLOSE_TIMEOUT_MS": 1000, "TEARDOWN_GRACE_MS": 50})
    rec = Recorder()
    rec.hang.add("browser")
    session = BrowserSession(settings, driver_factory=lambda: _Manager(rec))
    with pytest.raises(RuntimeError):
        async with session:
            raise RuntimeError("scenario blew up")
    assert rec.closed == ["page", "context", "driver"]
    assert session.browser is None
