# backoffice_ui/pages/login.py
from __future__ import annotations

from typing import Dict, List, Optional

from playwright.async_api import TimeoutError as PWTimeoutError

from backoffice_ui.pages.base import BasePage
from backoffice_ui.selectors.locator import LocatorSet, resolve_locator
from backoffice_ui.selectors.resolver import WidgetHandle


USERNAME = LocatorSet.of('input[autocomplete="username"]', 'input[type="text"]', name="username field")
PASSWORD = LocatorSet.of('input[type="password"]', name="password field")
LOGIN_BUTTON = LocatorSet.of('button[type="submit"]', "role=button|Login", name="login button")
CANCEL_BUTTON = LocatorSet.of('button:has-text("Cancel")', name="cancel button")
FORGOT_PASSWORD = LocatorSet.of('a:has-text("Forgot Password?")', "text=Forgot Password?", name="forgot password link")
TITLE = LocatorSet.of(".v-toolbar__title", name="login title")
FORM = LocatorSet.of("form", name="login form")
ERROR = LocatorSet.of(".v-messages__wrapper", name="validation message")
LOGOUT = LocatorSet.of(
    'button:has-text("Logout")',
    'a:has-text("Logout")',
    'button:has-text("Log out")',
    "role=menuitem|Logout",
    name="logout control",
)

DEVICES_URL_GLOB = "**/devices**"


class LoginPage(BasePage):

    # ---------- Navigation ----------

    async def open(self) -> None:
        await self.goto(self.settings.BASE_URL)

    async def wait_for_login_form(self, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_visible(FORM, timeout_ms)

    async def is_login_form_visible(self) -> bool:
        return await self.is_visible(FORM)

    async def title(self) -> Optional[str]:
        found = await self.interactor.resolve(TITLE, self.probe_timeout_ms)
        if not isinstance(found, WidgetHandle):
            return None
        return (await found.element.inner_text()).strip()

    # ---------- Fields ----------

    async def enter_username(self, username: str) -> None:
        await self.interactor.fill(USERNAME, username)

    async def enter_password(self, password: str) -> None:
        await self.interactor.fill(PASSWORD, password)

    async def clear_username(self) -> None:
        await self.interactor.fill(USERNAME, "")

    async def clear_password(self) -> None:
        await self.interactor.fill(PASSWORD, "")

    async def username_value(self) -> str:
        return await self.interactor.value_of(USERNAME)

    async def password_value(self) -> str:
        return await self.interactor.value_of(PASSWORD)

    async def is_username_empty(self) -> bool:
        return await self.username_value() == ""

    async def is_password_empty(self) -> bool:
        return await self.password_value() == ""

    # ---------- Actions ----------

    async def click_login(self) -> None:
        await self.interactor.click(LOGIN_BUTTON)

    async def click_cancel(self) -> None:
        await self.interactor.click(CANCEL_BUTTON)

    async def click_forgot_password(self) -> None:
        await self.interactor.click(FORGOT_PASSWORD)

    async def login(self, username: str, password: str) -> None:
        self.log.info(f"Logging in as {username!r}")
        await self.enter_username(username)
        await self.enter_password(password)
        await self.click_login()

    async def logout(self) -> None:
        await self.interactor.click(LOGOUT)

    async def wait_for_navigation(self, url_glob: str = DEVICES_URL_GLOB, timeout_ms: Optional[int] = None) -> bool:
        """True once the URL matches `url_glob`; False if it never does."""
        try:
            await self.page.wait_for_url(url_glob, timeout=timeout_ms or self.settings.PAGE_LOAD_TIMEOUT)
        except PWTimeoutError:
            self.log.debug(f"URL never matched {url_glob}; still at {self.url}")
            return False
        return True

    # ---------- Validation messages ----------

    async def is_error_visible(self, timeout_ms: Optional[int] = None) -> bool:
        return await self.is_visible(ERROR, timeout_ms)

    async def error_message(self) -> Optional[str]:
        if not await self.is_error_visible():
            return None
        return await self.interactor.text_of(ERROR)

    async def all_error_messages(self) -> List[str]:
        texts = await resolve_locator(self.page, ERROR.candidates[0]).all_inner_texts()
        return [t.strip() for t in texts]

    # ---------- Form inspection ----------

    async def form_element_states(self) -> Dict[str, bool]:
        return {
            "username_field": await self.is_visible(USERNAME),
            "password_field": await self.is_visible(PASSWORD),
            "login_button": await self.is_visible(LOGIN_BUTTON),
            "cancel_button": await self.is_visible(CANCEL_BUTTON),
            "forgot_password_link": await self.is_visible(FORGOT_PASSWORD),
            "form": await self.is_visible(FORM),
        }

    async def are_form_elements_present(self) -> bool:
        for locators in (USERNAME, PASSWORD, LOGIN_BUTTON, FORGOT_PASSWORD):
            if not await self.is_visible(locators):
                return False
        return True
