# backoffice_ui/interaction/widgets.py
from __future__ import annotations

"""Widgets
---------
A widget knows three things about one kind of control: how to read its
state, how to click it towards a target, and how to force the target by
script. The actuator decides *when* to use which.

  Toggle            checkbox / role=switch, state = checked flag
  RadioOption       one member of a radio group, state = checked flag
  RadioGroup        container mapping labels to RadioOptions (not a widget)
  SearchableSelect  Vuetify v-select, state = label of the current selection
"""

from typing import Any, Dict, Mapping, Optional, Sequence

from playwright.async_api import Error as PWError
from playwright.async_api import Page

from backoffice_ui.interaction.types import ClickOptions, Offset, TargetState
from backoffice_ui.selectors.locator import LocatorSet
from backoffice_ui.selectors.resolver import NotFound, Resolution, WidgetHandle, resolve
from backoffice_ui.utils.logger import get_logger
from backoffice_ui.utils.timing import Deadline

log = get_logger(__name__)


_SET_CHECKED_JS = """(el, {checked, events}) => {
    el.checked = checked;
    for (const type of events) {
        el.dispatchEvent(new Event(type, { bubbles: true }));
    }
    return el.checked;
}"""


class Widget:
    def __init__(self, locators: LocatorSet, *, offset: Optional[Offset] = None) -> None:
        self.locators = locators
        self.offset = offset

    @property
    def name(self) -> str:
        return self.locators.name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    async def resolve(self, page: Page, timeout_ms: int, per_candidate_timeout_ms: Optional[int] = None) -> Resolution:
        found = await resolve(page, self.locators, timeout_ms, per_candidate_timeout_ms)
        if isinstance(found, NotFound):
            return found
        return found.bind(self)

    def matches(self, observed: Any, target: TargetState) -> bool:
        return observed is not None and observed == target

    async def read_state(self, handle: WidgetHandle, timeout_ms: int) -> TargetState:
        raise NotImplementedError

    async def click(self, handle: WidgetHandle, target: TargetState, opts: ClickOptions) -> None:
        await handle.element.click(**opts.as_kwargs())

    async def scripted_event(self, handle: WidgetHandle, target: TargetState, timeout_ms: int) -> None:
        raise NotImplementedError


class Toggle(Widget):
    """Checkbox or switch. Scripted path fires change, input and click."""

    script_events: Sequence[str] = ("change", "input", "click")

    async def read_state(self, handle: WidgetHandle, timeout_ms: int) -> bool:
        return bool(await handle.element.is_checked(timeout=timeout_ms))

    async def scripted_event(self, handle: WidgetHandle, target: TargetState, timeout_ms: int) -> None:
        await handle.element.evaluate(
            _SET_CHECKED_JS,
            {"checked": bool(target), "events": list(self.script_events)},
            timeout=timeout_ms,
        )


class RadioOption(Toggle):
    """
    A single radio input. Selecting it means converging it to True; a radio
    cannot be clicked off, so the scripted path always sets checked=true.
    """

    script_events = ("change", "input")

    def __init__(self, locators: LocatorSet, label: str, *, offset: Optional[Offset] = None) -> None:
        super().__init__(locators, offset=offset)
        self.label = label

    async def scripted_event(self, handle: WidgetHandle, target: TargetState, timeout_ms: int) -> None:
        await handle.element.evaluate(
            _SET_CHECKED_JS,
            {"checked": True, "events": list(self.script_events)},
            timeout=timeout_ms,
        )


class RadioGroup:
    """
    Mutually exclusive options keyed by label. "Exactly one selected" is the
    application's job; this only knows how to find each member.
    """

    def __init__(self, name: str, options: Mapping[str, LocatorSet], *, offset: Optional[Offset] = None) -> None:
        if not options:
            raise ValueError(f"radio group '{name}' needs at least one option")
        self.name = name
        self.options: Dict[str, LocatorSet] = dict(options)
        self.offset = offset

    @property
    def labels(self) -> list[str]:
        return list(self.options)

    def member(self, label: str) -> RadioOption:
        key = label.strip().lower()
        for known, locators in self.options.items():
            if known.lower() == key:
                return RadioOption(locators, known, offset=self.offset)
        raise ValueError(f"'{label}' is not an option of {self.name} (known: {', '.join(self.options)})")

    async def value(self, page: Page, timeout_ms: int) -> Optional[str]:
        """Label of the checked member, or None if nothing is checked (or visible)."""
        deadline = Deadline(timeout_ms)
        labels = list(self.options)
        for idx, label in enumerate(labels):
            found = await resolve(page, self.options[label], deadline.split(len(labels) - idx))
            if isinstance(found, NotFound):
                continue
            try:
                if await found.element.is_checked(timeout=deadline.cap(timeout_ms)):
                    return label
            except PWError as e:
                log.debug(f"{self.name}: could not read '{label}': {e}")
        return None


class SearchableSelect(Widget):
    """
    Vuetify v-select. Clicking the field opens a floating menu that is
    rendered outside the field, so options are looked up on the page.
    """


    def __init__(
        self,
        locators: LocatorSet,
        *,
        selection_css: str = ".v-select__selection",
        option_template: str = '.v-menu__content:visible .v-list-item:has-text("{label}")',
        offset: Optional[Offset] = None,
    ) -> None:
        super().__init__(locators, offset=offset)
        self.selection_css = selection_css
        self.option_template = option_template

    def option_selector(self, label: str) -> str:
        return self.option_template.format(label=str(label).replace('"', '\\"'))

    def matches(self, observed: Any, target: TargetState) -> bool:
        if observed is None:
            return False
        return str(observed).strip().casefold() == str(target).strip().casefold()

    async def read_state(self, handle: WidgetHandle, timeout_ms: int) -> str:
        selection = handle.element.locator(self.selection_css)
        if await selection.count() == 0:
            return ""
        return (await selection.first.inner_text(timeout=timeout_ms)).strip()

    async def click(self, handle: WidgetHandle, target: TargetState, opts: ClickOptions) -> None:
        deadline = Deadline(opts.timeout_ms)
        field_kw = opts.as_kwargs()
        field_kw["timeout"] = deadline.cap(opts.timeout_ms)
        await handle.element.click(**field_kw)

        option = handle.page.locator(self.option_selector(str(target))).first
        option_kw: Dict[str, Any] = {"timeout": deadline.cap(opts.timeout_ms)}
        if opts.forced:
            option_kw["force"] = True
        await option.click(**option_kw)

    async def scripted_event(self, handle: WidgetHandle, target: TargetState, timeout_ms: int) -> None:
        deadline = Deadline(timeout_ms)
        await handle.element.dispatch_event("click", timeout=deadline.cap(timeout_ms))
        option = handle.page.locator(self.option_selector(str(target))).first
        await option.dispatch_event("click", timeout=deadline.cap(timeout_ms))
