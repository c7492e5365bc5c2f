import pytest

from academic_market.config.params import DEFAULT_PARAMS
from academic_market.config.scenarios import Scenario
from academic_market.engines.conditions import resolve_year_conditions

pytestmark = pytest.mark.engines


def test_default_recession_inside_window():
    cond = resolve_year_conditions(2009)
    assert cond.in_recession_window
    assert cond.recession_active
    assert not cond.scenario_active
    assert cond.postdoc_multiplier == pytest.approx(1.3)
    assert cond.recession_effects == DEFAULT_PARAMS.recession_effects


def test_default_outside_window():
    cond = resolve_year_conditions(2005)
    assert not cond.recession_active
    assert cond.postdoc_multiplier == 1.0


@pytest.mark.parametrize("year", [2008, 2012])
def test_window_bounds_inclusive(year):
    assert resolve_year_conditions(year).in_recession_window


def test_active_scenario_uses_its_own_factors():
    scenario = Scenario(
        retirement_delay_factor=0.4, postdoc_duration_multiplier=1.5, apply_recession_effects=True
    )
    cond = resolve_year_conditions(2010, scenario=scenario)

    assert cond.scenario_active and cond.recession_active
    assert cond.postdoc_multiplier == 1.5
    assert cond.recession_effects.retirement_delay_factor == 0.4
    assert cond.recession_effects.mobility_multiplier == DEFAULT_PARAMS.recession_effects.mobility_multiplier


def test_inactive_scenario_disables_window():
    scenario = Scenario(postdoc_duration_multiplier=1.5, apply_recession_effects=False)
    cond = resolve_year_conditions(2010, scenario=scenario)

    assert cond.in_recession_window
    assert not cond.recession_active
    assert not cond.scenario_active
    assert cond.postdoc_multiplier == 1.0
