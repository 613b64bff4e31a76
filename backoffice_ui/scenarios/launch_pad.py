# backoffice_ui/scenarios/launch_pad.py
from __future__ import annotations

from backoffice_ui.core.scenario import ScenarioContext, scenario
from backoffice_ui.pages.launch_pad import LaunchPad
from backoffice_ui.pages.login import LoginPage

FEATURE = "Launch Pad"


async def logged_in_launch_pad(ctx: ScenarioContext) -> LaunchPad:
    """Shared background: log in, then clear the filter panel."""
    login = LoginPage(ctx.interactor, ctx.settings)
    pad = LaunchPad(ctx.interactor, ctx.settings)
    async with ctx.given("I am logged in"):
        await login.open()
        await login.login(ctx.settings.E2E_USERNAME or "", ctx.password)
        assert await login.wait_for_navigation(), f"login did not complete ({login.url})"
    async with ctx.and_("I am clearing the filter panel"):
        await pad.perform_filter_workflow()
    return pad


@scenario(FEATURE, "Clear the filter panel", tags=("launch-pad",))
async def clear_filters(ctx: ScenarioContext) -> None:
    pad = await logged_in_launch_pad(ctx)
    async with ctx.then("the organization search is available"):
        assert await pad.is_organization_search_visible(), "organization search not shown"


@scenario(FEATURE, "Search and select an organization", tags=("launch-pad",))
async def search_organization(ctx: ScenarioContext) -> None:
    pad = await logged_in_launch_pad(ctx)
    org = ctx.settings.DEFAULT_ORGANIZATION
    async with ctx.when(f'I search for an organization "{org}"'):
        await pad.search_organization(org)
    async with ctx.then(f'I should select the organization "{org}"'):
        await pad.select_organization(org)


@scenario(FEATURE, "Navigate to the profile page", tags=("launch-pad", "profile"))
async def open_profile(ctx: ScenarioContext) -> None:
    pad = await logged_in_launch_pad(ctx)
    async with ctx.when('I click on link "Profile"'):
        await pad.click_link("Profile")
    async with ctx.then("I should be on the profile page"):
        await pad.page.wait_for_url("**/profile**")
