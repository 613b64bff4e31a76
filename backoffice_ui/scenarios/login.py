# backoffice_ui/scenarios/login.py
from __future__ import annotations

from backoffice_ui.core.scenario import ScenarioContext, scenario
from backoffice_ui.pages.login import LoginPage

FEATURE = "Login"


def _login_page(ctx: ScenarioContext) -> LoginPage:
    return LoginPage(ctx.interactor, ctx.settings)


@scenario(FEATURE, "Successful login with valid credentials", tags=("smoke", "login"))
async def valid_login(ctx: ScenarioContext) -> None:
    login = _login_page(ctx)
    async with ctx.given("I am on the login page"):
        await login.open()
    async with ctx.when("I log in with valid credentials"):
        await login.login(ctx.settings.E2E_USERNAME or "", ctx.password)
    async with ctx.then("I should be logged in successfully"):
        if not await login.wait_for_navigation():
            assert "/login" not in login.url, f"still on the login page: {login.url}"
    async with ctx.and_("I should be redirected to the devices page"):
        assert "/devices" in login.url, f"expected /devices in {login.url}"


@scenario(FEATURE, "Login with invalid credentials", tags=("login", "negative"))
async def invalid_login(ctx: ScenarioContext) -> None:
    login = _login_page(ctx)
    async with ctx.given("I am on the login page"):
        await login.open()
    async with ctx.when("I log in with an unknown user"):
        await login.login("invalid.user@example.com", "not-the-password")
    async with ctx.then("I should see an error message"):
        assert await login.is_error_visible(), "no validation message shown"
        assert await login.error_message(), "validation message is empty"
    async with ctx.and_("the login form should still be visible"):
        assert await login.is_login_form_visible()


@scenario(FEATURE, "Login with empty credentials", tags=("login", "negative"))
async def empty_credentials(ctx: ScenarioContext) -> None:
    login = _login_page(ctx)
    async with ctx.given("I am on the login page"):
        await login.open()
    async with ctx.when("I click the login button without entering credentials"):
        await login.clear_username()
        await login.clear_password()
        await login.click_login()
    async with ctx.then("I should see validation error messages"):
        assert await login.all_error_messages(), "expected at least one validation message"
    async with ctx.and_("both fields should be empty"):
        assert await login.is_username_empty()
        assert await login.is_password_empty()


@scenario(FEATURE, "Forgot password link", tags=("login",))
async def forgot_password(ctx: ScenarioContext) -> None:
    login = _login_page(ctx)
    async with ctx.given("I am on the login page"):
        await login.open()
    async with ctx.when('I click on the "Forgot Password?" link'):
        await login.click_forgot_password()
    async with ctx.then("I should be redirected to the forgot password page"):
        if not await login.wait_for_navigation("**/forgot-password**"):
            assert login.url != ctx.settings.BASE_URL, "still on the login URL"


@scenario(FEATURE, "Login form elements are present", tags=("smoke", "login"))
async def form_elements(ctx: ScenarioContext) -> None:
    login = _login_page(ctx)
    async with ctx.given("I am on the login page"):
        await login.open()
        await login.wait_for_login_form()
    async with ctx.then("I should see the login form with all required elements"):
        states = await login.form_element_states()
        missing = [k for k in ("username_field", "password_field", "login_button", "forgot_password_link", "form") if not states[k]]
        assert not missing, f"missing form elements: {missing}"
    async with ctx.and_("all form elements should be present"):
        assert await login.are_form_elements_present()
