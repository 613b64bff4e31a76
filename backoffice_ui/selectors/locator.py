# backoffice_ui/selectors/locator.py
from __future__ import annotations

"""Selectors and locator sets
----------------------------
A `Selector` is one candidate way to find an element; a `LocatorSet` is the
ordered, immutable list of candidates for one logical element. First match
wins, so order candidates from specific to generic.

String form accepted by `Selector.parse` / `LocatorSet.of`:

  'button[type="submit"]'     css (default)
  'text=Forgot Password?'     text
  'role=button|Add Device'    role (+ accessible name)
  'xpath=//input[@name="x"]'  xpath
"""

from enum import Enum
from typing import Optional, Tuple

from playwright.async_api import Locator, Page
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SelectorStrategy(str, Enum):
    css = "css"
    text = "text"
    role = "role"
    xpath = "xpath"


_PREFIXES = {
    "text=": SelectorStrategy.text,
    "role=": SelectorStrategy.role,
    "xpath=": SelectorStrategy.xpath,
}


class Selector(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str = Field(..., description="Selector body without its strategy prefix")
    strategy: SelectorStrategy = Field(default=SelectorStrategy.css)

    @field_validator("value")
    @classmethod
    def _strip_and_require(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("empty selector")
        return value.strip()

    @classmethod
    def parse(cls, raw: "str | Selector") -> "Selector":
        if isinstance(raw, Selector):
            return raw
        for prefix, strategy in _PREFIXES.items():
            if raw.startswith(prefix):
                return cls(value=raw[len(prefix):], strategy=strategy)
        return cls(value=raw)

    def role_and_name(self) -> Tuple[str, Optional[str]]:
        """`button|Add Device` or `button name=Add Device`; the name part is optional."""
        role, sep, name = self.value.partition("|")
        if not sep:
            role, sep, name = self.value.partition(" name=")
        return role.strip(), (name.strip() or None) if sep else None

    def __str__(self) -> str:
        if self.strategy == SelectorStrategy.css:
            return self.value
        return f"{self.strategy.value}={self.value}"


class LocatorSet(BaseModel):
    """Named, ordered, never-empty tuple of candidate selectors."""
    model_config = ConfigDict(frozen=True)

    name: str
    candidates: Tuple[Selector, ...]

    @field_validator("candidates")
    @classmethod
    def _at_least_one(cls, v: Tuple[Selector, ...]) -> Tuple[Selector, ...]:
        if not v:
            raise ValueError("a LocatorSet needs at least one candidate")
        return v

    @classmethod
    def of(cls, *raw: "str | Selector", name: str) -> "LocatorSet":
        return cls(name=name, candidates=tuple(Selector.parse(r) for r in raw))

    def __len__(self) -> int:
        return len(self.candidates)

    def __str__(self) -> str:
        return f"{self.name} [{' | '.join(str(c) for c in self.candidates)}]"


def resolve_locator(page: Page, sel: Selector) -> Locator:
    """Lazy Playwright Locator for one candidate; the page is not queried yet."""
    if sel.strategy == SelectorStrategy.text:
        return page.get_by_text(sel.value, exact=False)
    if sel.strategy == SelectorStrategy.role:
        role, name = sel.role_and_name()
        if name is None:
            return page.get_by_role(role)  # type: ignore[arg-type]
        return page.get_by_role(role, name=name)  # type: ignore[arg-type]
    if sel.strategy == SelectorStrategy.xpath:
        return page.locator("xpath=" + sel.value)
    return page.locator(sel.value)
