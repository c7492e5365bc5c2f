# academic_market/engines/conditions.py
"""
Resolves the economic conditions in force for one simulated year.

This is the one place that decides whether recession adjustments apply, so the
opening generator, the hiring market and the candidate lifecycle agree on gating.
"""

from dataclasses import dataclass
from typing import Optional

from academic_market.config.params import DEFAULT_PARAMS, RecessionEffects, SimulationParams
from academic_market.config.scenarios import Scenario


@dataclass(frozen=True)
class YearConditions:
    year: int
    in_recession_window: bool
    recession_active: bool
    scenario_active: bool
    recession_effects: RecessionEffects
    postdoc_multiplier: float


def resolve_year_conditions(
    year: int,
    params: SimulationParams = DEFAULT_PARAMS,
    scenario: Optional[Scenario] = None,
) -> YearConditions:
    """
    Work out which recession adjustments apply in ``year``.

    * no scenario: the default recession effects apply inside the window;
    * scenario with ``apply_recession_effects``: the scenario's multipliers apply
      inside the window;
    * scenario without ``apply_recession_effects``: the window has no effect, every
      year behaves like a non-recession year.
    """
    in_window = params.is_recession(year)
    scenario_active = scenario is not None and scenario.apply_recession_effects and in_window
    recession_active = in_window and (scenario is None or scenario.apply_recession_effects)

    if scenario is not None:
        effects = scenario.to_recession_effects(params.recession_effects)
    else:
        effects = params.recession_effects

    if scenario_active:
        postdoc_multiplier = scenario.postdoc_duration_multiplier
    elif in_window and scenario is None:
        postdoc_multiplier = params.recession_effects.postdoc_duration_multiplier
    else:
        postdoc_multiplier = 1.0

    return YearConditions(
        year=year,
        in_recession_window=in_window,
        recession_active=recession_active,
        scenario_active=scenario_active,
        recession_effects=effects,
        postdoc_multiplier=postdoc_multiplier,
    )
