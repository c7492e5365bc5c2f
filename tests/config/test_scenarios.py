import pytest

from academic_market.config.params import RecessionEffects
from academic_market.config.scenarios import (
    BASELINE_TEST_FACTOR,
    Scenario,
    get_predefined_scenarios,
    scenario_from_dict,
)
from academic_market.exceptions import ConfigurationError

pytestmark = pytest.mark.config


def test_predefined_scenarios():
    scenarios = get_predefined_scenarios()
    assert list(scenarios) == [
        "baseline_pre2008",
        "retirement_delays_only",
        "failed_searches_only",
        "extended_postdocs_only",
        "all_factors_combined",
    ]
    assert not scenarios["baseline_pre2008"].apply_recession_effects
    assert scenarios["baseline_pre2008"].factor_label == BASELINE_TEST_FACTOR

    combined = scenarios["all_factors_combined"]
    assert combined.apply_recession_effects
    assert (
        combined.retirement_delay_factor,
        combined.search_standards_inflation,
        combined.search_failure_tolerance,
        combined.postdoc_duration_multiplier,
    ) == (0.5, 1.4, 0.5, 1.5)
    assert combined.factor_label == "combined"


def test_scenario_defaults():
    scenario = Scenario()
    assert scenario.name == "Custom Scenario"
    assert scenario.search_failure_tolerance == 0.3
    assert not scenario.apply_recession_effects


def test_to_recession_effects_keeps_base_knobs():
    base = RecessionEffects(mobility_multiplier=0.9, budget_constraint=0.6)
    effects = Scenario(retirement_delay_factor=0.5, search_standards_inflation=1.4).to_recession_effects(base)
    assert effects.retirement_delay_factor == 0.5
    assert effects.search_standards_inflation == 1.4
    assert effects.postdoc_duration_multiplier == 1.0
    assert effects.mobility_multiplier == 0.9
    assert effects.budget_constraint == 0.6


def test_scenario_from_dict_default_name():
    assert scenario_from_dict({}, default_name="from_file").name == "from_file"
    assert scenario_from_dict({"name": "Named"}, default_name="from_file").name == "Named"


@pytest.mark.parametrize(
    "data",
    [
        {"unknown_knob": 1.0},
        {"search_failure_tolerance": 1.5},
        {"retirement_delay_factor": 0.0},
        {"postdoc_duration_multiplier": -1.0},
    ],
)
def test_scenario_from_dict_rejects_invalid(data):
    with pytest.raises(ConfigurationError):
        scenario_from_dict(data)
