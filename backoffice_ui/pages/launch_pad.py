# backoffice_ui/pages/launch_pad.py
from __future__ import annotations

from typing import Optional

from backoffice_ui.pages.base import BasePage
from backoffice_ui.selectors.locator import LocatorSet
from backoffice_ui.utils.timing import async_sleep_ms


FILTER_BUTTON = LocatorSet.of(
    'button.v-btn--outlined:has-text("Filter")',
    "button.v-btn--outlined:has(i.mdi-filter)",
    name="filter button",
)
CLEAR_BUTTON = LocatorSet.of('button.v-btn--outlined:has-text("Clear")', name="clear button")
DONE_BUTTON = LocatorSet.of('button.v-btn--has-bg.primary:has-text("Done")', "role=button|Done", name="done button")
ORGANIZATION_SEARCH = LocatorSet.of(
    'input[autofocus="autofocus"][type="text"][autocomplete="off"]',
    'div.v-select__slot:has(label:has-text("Search StorageDefender organizations")) input',
    name="organization search",
)
OPEN_MENU = LocatorSet.of(".v-menu__content:visible", name="organization dropdown")

NAV_LINK_CSS = "a.v-btn--outlined.v-btn--router.v-btn--text.v-btn--tile.theme--light.v-size--small.primary--text"


def _quoted(text: str) -> str:
    return text.replace('"', '\\"')


def organization_option(name: str) -> LocatorSet:
    return LocatorSet.of(
        f'.v-menu__content:visible .v-list-item:has-text("{_quoted(name)}")',
        name=f"organization option {name!r}",
    )


def navigation_link(text: str) -> LocatorSet:
    return LocatorSet.of(
        f'{NAV_LINK_CSS}:has-text("{_quoted(text)}")',
        f'a.v-btn--router:has-text("{_quoted(text)}")',
        name=f"{text} link",
    )


class LaunchPad(BasePage):
    """Organization picker shown after login."""

    async def click_filter(self) -> None:
        await self.interactor.click(FILTER_BUTTON)

    async def click_clear(self) -> None:
        await self.interactor.click(CLEAR_BUTTON)

    async def click_done(self) -> None:
        await self.interactor.click(DONE_BUTTON)

    async def perform_filter_workflow(self) -> None:
        """Filter → Clear → Done."""
        await self.click_filter()
        await self.click_clear()
        await self.click_done()

    async def is_organization_search_visible(self) -> bool:
        return await self.is_visible(ORGANIZATION_SEARCH)

    async def enter_organization_name(self, name: Optional[str] = None) -> None:
        org = name or self.settings.DEFAULT_ORGANIZATION
        await self.interactor.fill(ORGANIZATION_SEARCH, org)
        # the search debounces before it renders results
        await async_sleep_ms(self.interactor.policy.settle_delay_ms)

    async def wait_for_organization_dropdown(self, timeout_ms: Optional[int] = None) -> bool:
        """The dropdown is optional: some searches resolve without one."""
        shown = await self.is_visible(OPEN_MENU, timeout_ms)
        if not shown:
            self.log.debug("No organization dropdown appeared")
        return shown

    async def select_organization(self, name: Optional[str] = None) -> None:
        org = name or self.settings.DEFAULT_ORGANIZATION
        await self.wait_for_organization_dropdown()
        await self.interactor.click(organization_option(org))

    async def search_organization(self, name: Optional[str] = None, select_from_dropdown: bool = False) -> None:
        await self.enter_organization_name(name)
        if select_from_dropdown:
            await self.select_organization(name)

    async def click_link(self, text: str) -> None:
        self.log.info(f"Opening '{text}'")
        await self.interactor.click(navigation_link(text))
