# backoffice_ui/scenarios/devices.py
from __future__ import annotations

from backoffice_ui.core.scenario import ScenarioContext, scenario
from backoffice_ui.pages.devices import (
    DevicesPage,
    random_dash_device_id,
    random_device_id,
    random_short_id,
)
from backoffice_ui.pages.login import LoginPage

FEATURE = "Devices"


async def _open_add_device_form(ctx: ScenarioContext) -> DevicesPage:
    login = LoginPage(ctx.interactor, ctx.settings)
    devices = DevicesPage(ctx.interactor, ctx.settings)
    async with ctx.given("I am logged in"):
        await login.open()
        await login.login(ctx.settings.E2E_USERNAME or "", ctx.password)
        assert await login.wait_for_navigation(), f"login did not reach the devices page ({login.url})"
    async with ctx.and_("I navigate to the devices page"):
        await devices.open()
        assert ctx.settings.origin in devices.url
    async with ctx.when('I click the "Add" button'):
        await devices.click_add_button()
        await devices.wait_for_add_device_form()
    return devices


async def _fill_classification(ctx: ScenarioContext, devices: DevicesPage) -> None:
    async with ctx.and_('I select type "Cloud" and subtype "AWS"'):
        await devices.select_type("Cloud")
        await devices.select_subtype("AWS")
    async with ctx.and_("I enter a random short ID"):
        await devices.enter_short_id(random_short_id())
    async with ctx.and_('I select status "Active" and disposition "In Service"'):
        await devices.select_status("Active")
        await devices.select_disposition("In Service")
    async with ctx.and_("I select the assigned organization"):
        await devices.select_assigned_organization(ctx.settings.DEFAULT_ORGANIZATION)


async def _expect_success(ctx: ScenarioContext, devices: DevicesPage) -> None:
    async with ctx.then("I should see a success message"):
        text = await devices.success_message()
        if text is None and devices.is_on_add_device_page() and await devices.is_error_visible():
            raise AssertionError(f"Form validation error: {await devices.error_message()}")
        assert text, "no success message appeared"
    async with ctx.and_("the device should be added successfully"):
        if devices.is_on_add_device_page() and await devices.is_error_visible():
            raise AssertionError(f"Form validation error: {await devices.error_message()}")


@scenario(FEATURE, "Add a device with a random external id", tags=("devices", "smoke"))
async def add_device(ctx: ScenarioContext) -> None:
    devices = await _open_add_device_form(ctx)
    async with ctx.and_("I enter a random external device ID"):
        ctx.data["device_id"] = random_device_id()
        await devices.enter_external_device_id(ctx.data["device_id"])
    await _fill_classification(ctx, devices)
    async with ctx.and_("I click the Add Device button"):
        await devices.click_add_device()
    await _expect_success(ctx, devices)


@scenario(FEATURE, "Add a device with a dash-formatted external id", tags=("devices",))
async def add_device_dash_format(ctx: ScenarioContext) -> None:
    devices = await _open_add_device_form(ctx)
    async with ctx.and_("I enter a random dash-formatted external device ID"):
        ctx.data["device_id"] = random_dash_device_id()
        await devices.enter_external_device_id(ctx.data["device_id"])
    await _fill_classification(ctx, devices)
    async with ctx.and_("I click the Add Device button"):
        await devices.click_add_device()
    await _expect_success(ctx, devices)


@scenario(FEATURE, "Adding a device without an external id is rejected", tags=("devices", "negative"))
async def missing_external_id(ctx: ScenarioContext) -> None:
    devices = await _open_add_device_form(ctx)
    async with ctx.and_("I leave external device ID empty"):
        await devices.clear_external_device_id()
    await _fill_classification(ctx, devices)
    async with ctx.and_("I click the Add Device button"):
        await devices.click_add_device()
    async with ctx.then("I should see validation error for external device ID"):
        assert await devices.is_error_visible()
        assert await devices.error_message()
    async with ctx.and_("I should remain on the add device page"):
        assert devices.is_on_add_device_page()


@scenario(FEATURE, "Adding a device without a type is rejected", tags=("devices", "negative"))
async def missing_type(ctx: ScenarioContext) -> None:
    devices = await _open_add_device_form(ctx)
    async with ctx.and_("I enter a random external device ID"):
        await devices.enter_external_device_id(random_device_id())
    async with ctx.and_("I leave type unselected and click the Add Device button"):
        await devices.click_add_device()
    async with ctx.then("I should see validation error for type"):
        assert await devices.is_error_visible()
        assert await devices.error_message()
    async with ctx.and_("I should remain on the add device page"):
        assert devices.is_on_add_device_page()
