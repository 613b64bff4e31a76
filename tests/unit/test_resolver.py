import pytest

from backoffice_ui.interaction.errors import ElementNotFound, SessionFault
from backoffice_ui.selectors.locator import LocatorSet
from backoffice_ui.selectors.resolver import NotFound, WidgetHandle, first_present, require, resolve


async def test_first_visible_candidate_wins(page):
    page.add("#primary")
    page.add("#secondary")
    found = await resolve(page, LocatorSet.of("#primary", "#secondary", name="x"), 1000)
    assert isinstance(found, WidgetHandle)
    assert str(found.selector) == "#primary"
    assert [k for k, _ in page.waits] == ["#primary"]


async def test_falls_back_in_order(page):
    page.add("#primary", visible=False)
    page.add(".fallback")
    found = await resolve(page, LocatorSet.of("#primary", "#missing", ".fallback", name="x"), 1000)
    assert isinstance(found, WidgetHandle)
    assert str(found.selector) == ".fallback"
    assert [k for k, _ in page.waits] == ["#primary", "#missing", ".fallback"]


async def test_budget_is_shared_across_candidates(page):
    page.add("#d")
    found = await resolve(page, LocatorSet.of("#a", "#b", "#c", "#d", name="x"), 5000)
    assert isinstance(found, WidgetHandle)
    assert str(found.selector) == "#d"
    first_wait = page.waits[0][1]
    assert 1200 <= first_wait <= 1250
    assert all(t <= 5000 for _, t in page.waits)


async def test_fixed_per_candidate_timeout(page):
    await resolve(page, LocatorSet.of("#a", "#b", name="x"), 5000, per_candidate_timeout_ms=300)
    assert [t for _, t in page.waits] == [300, 300]


async def test_not_found_is_a_value(page):
    found = await resolve(page, LocatorSet.of("#a", "#b", name="ghost"), 100)
    assert isinstance(found, NotFound)
    assert not found
    assert found.tried == ["#a", "#b"]
    assert "'ghost' not found" in found.describe()


async def test_candidates_after_deadline_are_skipped(page):
    page.add("#slow", visible=False, wait_delay_s=0.08)
    page.add("#late")
    found = await resolve(page, LocatorSet.of("#slow", "#late", name="x"), 50)
    assert isinstance(found, NotFound)
    assert found.skipped == ["#late"]


async def test_closed_page_raises_session_fault(page):
    page.add("#a")
    page.closed = True
    with pytest.raises(SessionFault):
        await resolve(page, LocatorSet.of("#a", name="x"), 1000)


async def test_require_raises_element_not_found(page):
    with pytest.raises(ElementNotFound) as ei:
        await require(page, LocatorSet.of("#a", name="submit"), 50)
    assert ei.value.not_found.name == "submit"


async def test_first_present_returns_matching_selector(page):
    page.add(".alert-success")
    sel = await first_present(page, LocatorSet.of(".v-snack__content", ".alert-success", name="success"), 500)
    assert str(sel) == ".alert-success"
    assert await first_present(page, LocatorSet.of(".nothing", name="none"), 50) is None
