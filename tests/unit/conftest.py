import asyncio
import os
import tempfile
from typing import Any, Callable, Dict, List, Optional

import pytest

# keep run logs and screenshots out of the working tree
_TMP = tempfile.mkdtemp(prefix="backoffice-ui-tests-")
os.environ.setdefault("RUN_LOG_DIR", os.path.join(_TMP, "runs"))
os.environ.setdefault("SCREENSHOT_DIR", os.path.join(_TMP, "screenshots"))
os.environ.setdefault("LOG_FILE", os.path.join(_TMP, "backoffice-ui.log"))

from playwright.async_api import Error as PWError  # noqa: E402
from playwright.async_api import TimeoutError as PWTimeoutError  # noqa: E402

from backoffice_ui.interaction.types import RetryPolicy  # noqa: E402


CLOSED_MESSAGE = "Target page, context or browser has been closed"


class FakeElement:
    """
    Stand-in for the `Locator.first` the engine works with.

    click behaviour:
      blocked  non-forced clicks raise "intercepts pointer events"
      inert    clicks are accepted but change nothing
      stall    a blocked click keeps retrying until its timeout, then raises
               the timeout error, as Playwright does
      hang     every click, script and dispatch waits out its timeout
    script_mode: "ok" | "inert" | "deferred" (applied on the next wait_for)
    """

    def __init__(
        self,
        page: "FakePage",
        key: str,
        *,
        visible: bool = True,
        checked: Optional[bool] = None,
        text: str = "",
        value: str = "",
        blocked: bool = False,
        inert: bool = False,
        stall: bool = False,
        hang: bool = False,
        script_mode: str = "ok",
        blocker: Optional[str] = None,
        wait_delay_s: float = 0.0,
        on_click: Optional[Callable[[], None]] = None,
        on_script: Optional[Callable[[], None]] = None,
    ) -> None:
        self.page = page
        self.key = key
        self.visible = visible
        self.checked = checked
        self.text = text
        self.value = value
        self.blocked = blocked
        self.inert = inert
        self.stall = stall
        self.hang = hang
        self.script_mode = script_mode
        self.blocker = blocker
        self.wait_delay_s = wait_delay_s
        self.on_click = on_click
        self.on_script = on_script
        self.children: Dict[str, "FakeElement"] = {}
        self.clicks: List[Dict[str, Any]] = []
        self.scripts: List[Dict[str, Any]] = []
        self.dispatched: List[str] = []
        self.pending: Optional[bool] = None

    # -- Locator surface --

    @property
    def first(self) -> "FakeElement":
        return self

    def locator(self, css: str) -> "FakeElement":
        return self.children.get(css) or FakeElement(self.page, css, visible=False)

    async def count(self) -> int:
        return 1 if self.visible else 0

    def _check_open(self) -> None:
        if self.page.closed:
            raise PWError(CLOSED_MESSAGE)

    async def wait_for(self, state: str = "visible", timeout: Optional[float] = None) -> None:
        self.page.waits.append((self.key, timeout))
        self._check_open()
        if self.wait_delay_s:
            await asyncio.sleep(self.wait_delay_s)
        if self.pending is not None:
            self.checked, self.pending = self.pending, None
        if not self.visible:
            raise PWTimeoutError(f"Timeout {timeout}ms exceeded waiting for {self.key}")

    async def _time_out(self, timeout: Optional[float], what: str) -> None:
        await asyncio.sleep((timeout or 0) / 1000)
        raise PWTimeoutError(f"Timeout {timeout}ms exceeded while {what} {self.key}")

    def _activate(self) -> None:
        if self.on_click is not None:
            self.on_click()
        elif self.checked is not None:
            self.checked = not self.checked

    async def click(self, timeout: Optional[float] = None, force: bool = False, position: Optional[dict] = None) -> None:
        self._check_open()
        kw = {"timeout": timeout, "force": force, "position": position}
        self.clicks.append(kw)
        self.page.log.append(("click", self.key, force))
        if self.hang:
            await self._time_out(timeout, "clicking")
        if self.blocked and not force:
            if self.stall:
                await self._time_out(timeout, "clicking")
            raise PWError('Element click intercepted: <div class="v-overlay__scrim"> intercepts pointer events')
        if self.inert:
            return
        self._activate()

    async def is_checked(self, timeout: Optional[float] = None) -> bool:
        self._check_open()
        return bool(self.checked)

    async def evaluate(self, js: str, arg: Any = None, timeout: Optional[float] = None) -> Any:
        self._check_open()
        if isinstance(arg, dict) and "checked" in arg:
            self.scripts.append(arg)
            if self.hang:
                await self._time_out(timeout, "evaluating on")
            self.page.log.append(("script", self.key, arg["checked"]))
            if self.on_script is not None:
                self.on_script()
            if self.script_mode == "ok":
                self.checked = arg["checked"]
            elif self.script_mode == "deferred":
                self.pending = arg["checked"]
            return self.checked
        return self.blocker

    async def dispatch_event(self, type: str, timeout: Optional[float] = None) -> None:
        self._check_open()
        self.dispatched.append(type)
        if self.hang:
            await self._time_out(timeout, "dispatching to")
        self.page.log.append(("dispatch", self.key, type))
        if self.script_mode != "inert":
            self._activate()

    async def fill(self, text: str, timeout: Optional[float] = None) -> None:
        self._check_open()
        self.value = text
        self.page.log.append(("fill", self.key, text))

    async def input_value(self, timeout: Optional[float] = None) -> str:
        return self.value

    async def inner_text(self, timeout: Optional[float] = None) -> str:
        return self.text

    async def all_inner_texts(self) -> List[str]:
        return [self.text] if self.visible else []


class FakePage:
    """Elements keyed by the string form of the selector that finds them."""

    def __init__(self, url: str = "https://backoffice.test/login") -> None:
        self.url = url
        self.closed = False
        self.elements: Dict[str, FakeElement] = {}
        self.waits: List[tuple] = []
        self.log: List[tuple] = []
        self.screenshots: List[str] = []

    def add(self, key: str, **kw: Any) -> FakeElement:
        el = FakeElement(self, key, **kw)
        self.elements[key] = el
        return el

    def is_closed(self) -> bool:
        return self.closed

    def locator(self, key: str) -> FakeElement:
        return self.elements.get(key) or FakeElement(self, key, visible=False)

    def get_by_text(self, text: str, exact: bool = False) -> FakeElement:
        return self.locator(f"text={text}")

    def get_by_role(self, role: str, name: Optional[str] = None) -> FakeElement:
        return self.locator(f"role={role}|{name}" if name else f"role={role}")

    async def wait_for_url(self, url: str, timeout: Optional[float] = None) -> None:
        if url.strip("*") not in self.url:
            raise PWTimeoutError(f"Timeout {timeout}ms exceeded waiting for {url}")

    async def goto(self, url: str, wait_until: str = "load", timeout: Optional[float] = None) -> None:
        self.url = url
        self.log.append(("goto", url, timeout))

    async def wait_for_load_state(self, state: str = "load", timeout: Optional[float] = None) -> None:
        self.log.append(("load_state", state, timeout))

    async def evaluate(self, js: str, arg: Any = None) -> Any:
        # DOM has been quiet for a long time
        return 60_000

    async def screenshot(self, path: str, full_page: bool = False) -> None:
        self.screenshots.append(path)


@pytest.fixture
def page() -> FakePage:
    return FakePage()


@pytest.fixture
def policy() -> RetryPolicy:
    return RetryPolicy(
        max_attempts=3,
        per_attempt_timeout_ms=1000,
        inter_attempt_delay_ms=0,
        settle_delay_ms=0,
        resolve_timeout_ms=1000,
    )
