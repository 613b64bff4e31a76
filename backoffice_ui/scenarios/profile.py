# backoffice_ui/scenarios/profile.py
from __future__ import annotations

from backoffice_ui.core.scenario import ScenarioContext, scenario
from backoffice_ui.pages.profile import ProfilePage
from backoffice_ui.scenarios.launch_pad import logged_in_launch_pad

FEATURE = "Profile"


async def _profile(ctx: ScenarioContext) -> ProfilePage:
    pad = await logged_in_launch_pad(ctx)
    profile = ProfilePage(ctx.interactor, ctx.settings)
    async with ctx.and_('I click on link "Profile"'):
        await pad.click_link("Profile")
        await profile.wait_for_profile_page()
    return profile


@scenario(FEATURE, "Validate the Tenant Ledger Report section", tags=("profile", "smoke"))
async def validate_section(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    async with ctx.then("I should validate the Enable Tenant Ledger Report section"):
        result = await profile.validate_tenant_ledger_report_section()
        assert result.overall, f"section validation failed: {result.as_dict()}"
    async with ctx.and_("a frequency option and a report type should be selected"):
        assert await profile.selected_frequency() is not None
        assert await profile.selected_report_type() is not None


@scenario(FEATURE, "Enable the Tenant Ledger Report", tags=("profile",))
async def enable_slider(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    async with ctx.when("I enable the Tenant Ledger Report slider"):
        await profile.set_slider_state(True)
    async with ctx.then("the Tenant Ledger Report slider should be enabled"):
        assert await profile.slider_state() is True


@scenario(FEATURE, "Disable the Tenant Ledger Report", tags=("profile",))
async def disable_slider(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    async with ctx.when("I disable the Tenant Ledger Report slider"):
        await profile.set_slider_state(False)
    async with ctx.then("the Tenant Ledger Report slider should be disabled"):
        assert await profile.slider_state() is False


@scenario(FEATURE, "Toggle the Tenant Ledger Report twice", tags=("profile",))
async def toggle_slider(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    async with ctx.given("I note the slider state"):
        ctx.data["initial"] = await profile.slider_state()
    async with ctx.when("I toggle the Tenant Ledger Report slider"):
        await profile.toggle_slider()
    async with ctx.then("the slider state should have flipped"):
        assert await profile.slider_state() is (not ctx.data["initial"])
    async with ctx.when("I toggle the Tenant Ledger Report slider again"):
        await profile.toggle_slider()
    async with ctx.then("the slider should be back where it started"):
        assert await profile.slider_state() is ctx.data["initial"]


@scenario(FEATURE, "Select a report frequency", tags=("profile",))
async def select_frequency(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    async with ctx.when('I select the frequency "Weekly"'):
        await profile.select_frequency("Weekly")
    async with ctx.then('the selected frequency should be "Weekly"'):
        assert await profile.selected_frequency() == "weekly"


@scenario(FEATURE, "Select a report type", tags=("profile",))
async def select_report_type(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    async with ctx.when('I select the report type "Delta"'):
        await profile.select_report_type("Delta")
    async with ctx.then('the selected report type should be "Delta"'):
        assert await profile.selected_report_type() == "delta"


@scenario(FEATURE, "Enter the report email address", tags=("profile",))
async def enter_email(ctx: ScenarioContext) -> None:
    profile = await _profile(ctx)
    email = ctx.settings.E2E_USERNAME or "qa@example.com"
    async with ctx.when(f'I enter the email address "{email}"'):
        await profile.set_slider_state(True)
        await profile.enter_email(email)
    async with ctx.then(f'the email address should be "{email}"'):
        assert await profile.email() == email
