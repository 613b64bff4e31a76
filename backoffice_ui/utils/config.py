# backoffice_ui/utils/config.py
from __future__ import annotations

import functools
from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BrowserType(str, Enum):
    chromium = "chromium"
    firefox = "firefox"
    webkit = "webkit"


class LogLevel(str, Enum):
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


# Chromium flags the suite has always launched with; harmless on other engines
# because they are only passed to chromium.
CHROMIUM_ARGS = (
    "--start-maximized",
    "--disable-web-security",
    "--disable-features=VizDisplayCompositor",
    "--no-sandbox",
    "--disable-dev-shm-usage",
    "--disable-background-timer-throttling",
    "--disable-backgrounding-occluded-windows",
    "--disable-renderer-backgrounding",
    "--disable-features=TranslateUI",
    "--disable-ipc-flooding-protection",
)


class Settings(BaseSettings):
    """
    Everything the suite needs to know about the app under test, the browser
    and the interaction engine. Environment variables win over `.env`, which
    wins over the defaults here. Engine timings feed `RetryPolicy.from_settings`.
    """

    # ---- Target application ----
    BASE_URL: str = Field(default="https://backoffice-stg.tod-multiverse.com/login")
    E2E_USERNAME: Optional[str] = Field(default=None)
    E2E_PASSWORD: Optional[SecretStr] = Field(default=None)
    DEFAULT_ORGANIZATION: str = Field(default="The Jenkins Organization")

    # ---- Browser configuration ----
    HEADLESS: bool = Field(default=True, description="Run the browser headless")
    BROWSER_TYPE: BrowserType = Field(default=BrowserType.chromium, description="Playwright browser")
    VIEWPORT_WIDTH: int = Field(default=1920, ge=320, le=7680)
    VIEWPORT_HEIGHT: int = Field(default=1080, ge=320, le=4320)
    SLOW_MO: int = Field(default=0, ge=0, description="Slow down actions (ms) for debugging")
    IGNORE_HTTPS_ERRORS: bool = Field(default=True)
    USER_AGENT: Optional[str] = Field(default=None)
    PAGE_LOAD_TIMEOUT: int = Field(default=15000, ge=1000)

    # ---- Interaction engine ----
    RESOLVE_TIMEOUT_MS: int = Field(default=10000, ge=1, description="Overall budget to resolve one LocatorSet")
    PER_CANDIDATE_TIMEOUT_MS: Optional[int] = Field(default=None, ge=1, description="Fixed wait per candidate; split evenly when unset")
    MAX_ATTEMPTS: int = Field(default=3, ge=1)
    ATTEMPT_TIMEOUT_MS: int = Field(default=5000, ge=1)
    RETRY_DELAY_MS: int = Field(default=2000, ge=0)
    SETTLE_DELAY_MS: int = Field(default=500, ge=0)
    FORCED_CLICK_OFFSET_X: int = Field(default=5, ge=0)
    FORCED_CLICK_OFFSET_Y: int = Field(default=5, ge=0)

    # ---- Session lifecycle ----
    HEADED_HOLD_MS: int = Field(default=3000, ge=0, description="Keep a headed browser on screen before teardown")
    CLOSE_TIMEOUT_MS: int = Field(default=5000, ge=1, description="Per-resource close timeout")
    TEARDOWN_GRACE_MS: int = Field(default=15000, ge=1, description="Whole-teardown budget before force close")

    # ---- Runner ----
    PARALLEL_EXECUTION: bool = Field(default=False)
    MAX_WORKERS: int = Field(default=3, ge=1)
    RUN_LOG_DIR: Path = Field(default=Path("./runs"))
    SCREENSHOT_DIR: Path = Field(default=Path("./screenshots"))

    # ---- Logging ----
    LOG_LEVEL: LogLevel = Field(default=LogLevel.INFO)
    LOG_TO_FILE: bool = Field(default=False)
    LOG_FILE: Path = Field(default=Path("./backoffice-ui.log"))
    COLORIZED_OUTPUT: bool = Field(default=True)

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @field_validator("RUN_LOG_DIR", "SCREENSHOT_DIR", "LOG_FILE", mode="after")
    @classmethod
    def _anchor_to_cwd(cls, path: Path) -> Path:
        # relative paths are taken from where the suite is launched
        return path if path.is_absolute() else Path.cwd().joinpath(path)

    @field_validator("BASE_URL")
    @classmethod
    def _base_url_http(cls, v: str) -> str:
        v = v.strip()
        if not v.startswith("http"):
            raise ValueError("BASE_URL must be an absolute http(s) URL")
        return v

    @property
    def origin(self) -> str:
        """Scheme + host of BASE_URL (BASE_URL itself points at /login)."""
        scheme, _, rest = self.BASE_URL.partition("://")
        return f"{scheme}://{rest.split('/', 1)[0]}"

    def ensure_dirs(self) -> None:
        for folder in (self.RUN_LOG_DIR, self.SCREENSHOT_DIR, self.LOG_FILE.parent):
            folder.mkdir(parents=True, exist_ok=True)

    def playwright_launch_kwargs(self) -> dict:
        """Keyword arguments for `BrowserType.launch`."""
        kwargs: dict = {"headless": self.HEADLESS, "slow_mo": self.SLOW_MO}
        if self.BROWSER_TYPE == BrowserType.chromium:
            args = list(CHROMIUM_ARGS)
            if not self.HEADLESS:
                args += ["--force-device-scale-factor=1", "--high-dpi-support=1"]
            kwargs["args"] = args
        return kwargs

    def playwright_context_kwargs(self) -> dict:
        """Keyword arguments for `Browser.new_context`."""
        options: dict = {
            "viewport": {"width": self.VIEWPORT_WIDTH, "height": self.VIEWPORT_HEIGHT},
            "ignore_https_errors": self.IGNORE_HTTPS_ERRORS,
        }
        if self.USER_AGENT:
            options["user_agent"] = self.USER_AGENT
        return options


@functools.lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Process-wide settings; tests call `get_settings.cache_clear()` after touching env."""
    settings = Settings()
    settings.ensure_dirs()
    return settings
