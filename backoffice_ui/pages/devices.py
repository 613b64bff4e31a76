# backoffice_ui/pages/devices.py
"""Devices page: list navigation and the Add Device form."""

from __future__ import annotations

import random
import string
from typing import Optional

from backoffice_ui.interaction.types import ConvergenceResult
from backoffice_ui.interaction.widgets import SearchableSelect
from backoffice_ui.pages.base import BasePage
from backoffice_ui.selectors.locator import LocatorSet, resolve_locator
from backoffice_ui.selectors.resolver import WidgetHandle, first_present


MENU_ITEM = LocatorSet.of('div.v-list-item__content:has-text("Devices")', "role=link|Devices", name="devices menu item")
ADD_BUTTON = LocatorSet.of('a[href="/devices/new"]', name="add button")
FORM = LocatorSet.of("form", name="add device form")
EXTERNAL_DEVICE_ID = LocatorSet.of('input[type="text"][autofocus]', name="external device id")
SHORT_ID = LocatorSet.of(
    '.v-text-field__slot:has(label:has-text("Short ID")) input[type="text"]',
    'xpath=//label[contains(normalize-space(.), "Short ID")]/following-sibling::input',
    name="short id",
)
ADD_DEVICE_BUTTON = LocatorSet.of('button[type="submit"]:has-text("Add Device")', "role=button|Add Device", name="add device button")
SUCCESS = LocatorSet.of(
    ".v-snack__content",
    ".v-alert--success",
    ".success-message",
    ".alert-success",
    '[data-testid="success-message"]',
    ".notification-success",
    name="success message",
)
ERROR = LocatorSet.of(".v-messages__wrapper", name="validation message")

NEW_DEVICE_PATH = "/devices/new"


def _select(label: str) -> SearchableSelect:
    # :text-is first so "Type" does not also match the "Subtype" field
    return SearchableSelect(
        LocatorSet.of(
            f'div.v-select:has(label:text-is("{label}"))',
            f'div.v-select:has(label:has-text("{label}"))',
            name=f"{label.lower()} select",
        )
    )


TYPE = _select("Type")
SUBTYPE = _select("Subtype")
STATUS = _select("Status")
DISPOSITION = _select("Disposition")
ASSIGNED_ORGANIZATION = _select("Assigned Organization")


# ---------- Test data generators ----------

def random_device_id(rng: Optional[random.Random] = None) -> str:
    """Six digits, 100000-999999."""
    rng = rng or random.Random()
    return str(rng.randint(100000, 999999))


def random_dash_device_id(rng: Optional[random.Random] = None, pairs: int = 8) -> str:
    """e.g. 12-83-45-10-99-37-21-64"""
    rng = rng or random.Random()
    return "-".join(str(rng.randint(10, 99)) for _ in range(pairs))


def random_short_id(rng: Optional[random.Random] = None) -> str:
    """Two capitals + five digits, AA00001-ZZ99999."""
    rng = rng or random.Random()
    letters = "".join(rng.choice(string.ascii_uppercase) for _ in range(2))
    return f"{letters}{rng.randint(1, 99999):05d}"


class DevicesPage(BasePage):

    # ---------- Navigation ----------

    async def open(self) -> None:
        await self.goto(f"{self.settings.origin}/devices")

    async def click_devices_menu_item(self) -> None:
        await self.interactor.click(MENU_ITEM)

    async def click_add_button(self) -> None:
        await self.interactor.click(ADD_BUTTON)
        await self.page.wait_for_load_state("domcontentloaded")
        if not self.is_on_add_device_page():
            self.log.warning(f"Add button did not land on {NEW_DEVICE_PATH} (at {self.url})")

    async def wait_for_add_device_form(self) -> None:
        await self.interactor.require(FORM)
        await self.interactor.require(EXTERNAL_DEVICE_ID)

    def is_on_add_device_page(self) -> bool:
        return NEW_DEVICE_PATH in self.url

    # ---------- Form fields ----------

    async def enter_external_device_id(self, device_id: str) -> None:
        self.log.info(f"External device id: {device_id}")
        await self.interactor.fill(EXTERNAL_DEVICE_ID, device_id)

    async def clear_external_device_id(self) -> None:
        await self.interactor.fill(EXTERNAL_DEVICE_ID, "")

    async def enter_short_id(self, short_id: str) -> None:
        self.log.info(f"Short id: {short_id}")
        await self.interactor.fill(SHORT_ID, short_id)

    async def select(self, field: SearchableSelect, value: str) -> ConvergenceResult:
        return await self.interactor.pick(field, value)

    async def select_type(self, value: str) -> ConvergenceResult:
        return await self.select(TYPE, value)

    async def select_subtype(self, value: str) -> ConvergenceResult:
        return await self.select(SUBTYPE, value)

    async def select_status(self, value: str) -> ConvergenceResult:
        return await self.select(STATUS, value)

    async def select_disposition(self, value: str) -> ConvergenceResult:
        return await self.select(DISPOSITION, value)

    async def select_assigned_organization(self, value: str) -> ConvergenceResult:
        return await self.select(ASSIGNED_ORGANIZATION, value)

    async def click_add_device(self) -> None:
        await self.interactor.click(ADD_DEVICE_BUTTON)

    # ---------- Outcome ----------

    async def success_message(self, timeout_ms: Optional[int] = None) -> Optional[str]:
        """Text of whichever success banner shows up first, or None."""
        budget = timeout_ms if timeout_ms is not None else self.probe_timeout_ms
        sel = await first_present(self.page, SUCCESS, budget)
        if sel is None:
            return None
        text = (await resolve_locator(self.page, sel).first.inner_text()).strip()
        return text or None

    async def is_error_visible(self, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_visible(ERROR, timeout_ms)

    async def error_message(self) -> Optional[str]:
        found = await self.interactor.resolve(ERROR, self.probe_timeout_ms)
        if not isinstance(found, WidgetHandle):
            return None
        return (await found.element.inner_text()).strip()
