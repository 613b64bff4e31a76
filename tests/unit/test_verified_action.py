import logging

import pytest

from backoffice_ui.interaction.errors import ConvergenceFailure
from backoffice_ui.interaction.interactor import Interactor
from backoffice_ui.interaction.types import Strategy
from backoffice_ui.interaction.verified import perform_and_verify
from backoffice_ui.interaction.widgets import RadioGroup, SearchableSelect, Toggle
from backoffice_ui.selectors.locator import LocatorSet

SWITCH = Toggle(LocatorSet.of('input[role="switch"]', name="report switch"))
TYPE_FIELD = 'div.v-select:has(label:text-is("Type"))'
TYPE = SearchableSelect(LocatorSet.of(TYPE_FIELD, name="type select"))


def _type_select(page, *, option_inert=False):
    field = page.add(TYPE_FIELD, on_click=lambda: None)
    selection = FieldSelection(field)
    option_key = TYPE.option_selector("Cloud")
    page.add(
        option_key,
        inert=option_inert,
        on_click=lambda: selection.set("Cloud"),
    )
    return field, page.elements[option_key]


class FieldSelection:
    def __init__(self, field):
        self.el = field.page.add(".v-select__selection", text="")
        field.children[".v-select__selection"] = self.el

    def set(self, text):
        self.el.text = text


async def test_success_returns_result(page, policy):
    page.add('input[role="switch"]', checked=False)
    result = await perform_and_verify(page, SWITCH, True, policy)
    assert result.achieved
    assert result.strategy_used is Strategy.direct_click


async def test_never_found_is_a_convergence_failure(page, policy):
    with pytest.raises(ConvergenceFailure) as ei:
        await perform_and_verify(page, SWITCH, True, policy)
    err = ei.value
    assert len(err.attempts_log) == policy.max_attempts
    assert all(rec.not_found for rec in err.attempts_log)
    assert "report switch" in str(err)


async def test_exhaustion_raises_with_full_log(page, policy):
    el = page.add('input[role="switch"]', checked=False, inert=True, script_mode="inert")
    with pytest.raises(ConvergenceFailure) as ei:
        await perform_and_verify(page, SWITCH, True, policy)
    err = ei.value
    assert err.target is True
    assert err.observed_state is False
    assert len(err.attempts_log) == 3
    assert "scripted-event" in str(err)
    assert el.checked is False


async def test_fallback_is_logged_as_warning(page, policy, caplog):
    page.add('input[role="switch"]', checked=False, blocked=True)
    with caplog.at_level(logging.WARNING):
        result = await perform_and_verify(page, SWITCH, True, policy)
    assert result.needed_fallback
    assert any("forced-click" in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)


async def test_select_picks_option_by_clicking(page, policy):
    field, option = _type_select(page)
    result = await perform_and_verify(page, TYPE, "Cloud", policy)
    assert result.strategy_used is Strategy.direct_click
    assert result.observed_state == "Cloud"
    assert len(field.clicks) == 1 and len(option.clicks) == 1


async def test_select_falls_back_to_dispatched_clicks(page, policy):
    field, option = _type_select(page, option_inert=True)
    result = await perform_and_verify(page, TYPE, "cloud", policy)
    assert result.achieved
    assert result.strategy_used is Strategy.scripted_event
    assert field.dispatched == ["click"]
    assert option.dispatched == ["click"]


async def test_interactor_keeps_history_of_fallbacks(page, policy):
    page.add('input[role="switch"]', checked=False, blocked=True)
    page.add('input[value="daily"]', checked=True)
    group = RadioGroup("frequency", {"daily": LocatorSet.of('input[value="daily"]', name="daily radio")})
    ia = Interactor(page, policy)
    await ia.set_state(SWITCH, True)
    await ia.choose(group, "Daily")
    assert [h.widget for h in ia.history] == ["report switch", "daily radio"]
    assert [h.widget for h in ia.fallbacks] == ["report switch"]


async def test_interactor_click_and_fill(page, policy):
    button = page.add('button[type="submit"]')
    field = page.add('input[type="password"]')
    ia = Interactor(page, policy)
    await ia.fill(LocatorSet.of('input[type="password"]', name="password"), "s3cret")
    await ia.click(LocatorSet.of('button[type="submit"]', name="login"), forced=True)
    assert field.value == "s3cret"
    assert await ia.value_of(LocatorSet.of('input[type="password"]', name="password")) == "s3cret"
    assert button.clicks[0]["force"] is True
    assert button.clicks[0]["position"] == {"x": 5, "y": 5}
