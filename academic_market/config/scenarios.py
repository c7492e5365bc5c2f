# academic_market/config/scenarios.py
"""
Scenario definitions: named bundles of multipliers describing a counterfactual set
of post-2008 market dynamics.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from academic_market.config.params import RecessionEffects
from academic_market.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

BASELINE_TEST_FACTOR = "baseline"


class Scenario(BaseModel):
    """
    Immutable scenario configuration.

    Attributes:
        name: human readable label
        retirement_delay_factor: multiplier on retirement probability during recession
        search_standards_inflation: multiplier on department search standards during recession
        postdoc_duration_multiplier: multiplier on the postdoc entry probability during recession
        search_failure_tolerance: tolerance override for every department during recession
        apply_recession_effects: when False the recession window has no effect at all
        test_factor: informational label of the factor under test
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = "Custom Scenario"
    retirement_delay_factor: float = Field(1.0, gt=0.0)
    search_standards_inflation: float = Field(1.0, gt=0.0)
    postdoc_duration_multiplier: float = Field(1.0, gt=0.0)
    search_failure_tolerance: float = Field(0.3, ge=0.0, le=1.0)
    apply_recession_effects: bool = False
    test_factor: Optional[str] = None

    @property
    def factor_label(self) -> str:
        return self.test_factor or BASELINE_TEST_FACTOR

    def to_recession_effects(self, base: Optional[RecessionEffects] = None) -> RecessionEffects:
        """Recession effects implied by this scenario, other knobs taken from ``base``."""
        base = base or RecessionEffects()
        return base.model_copy(
            update={
                "retirement_delay_factor": self.retirement_delay_factor,
                "search_standards_inflation": self.search_standards_inflation,
                "postdoc_duration_multiplier": self.postdoc_duration_multiplier,
            }
        )


def scenario_from_dict(data: Mapping[str, Any], default_name: Optional[str] = None) -> Scenario:
    """
    Build a validated Scenario from a plain mapping (e.g. parsed YAML).

    Raises:
        ConfigurationError: if the mapping has unknown keys or invalid values.
    """
    payload = dict(data)
    if default_name and "name" not in payload:
        payload["name"] = default_name
    try:
        return Scenario(**payload)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid scenario '{payload.get('name', default_name)}': {e}") from e


def get_predefined_scenarios() -> Dict[str, Scenario]:
    """Return the predefined scenarios testing the different post-2008 factors."""
    return {
        "baseline_pre2008": Scenario(
            name="Pre-2008 Baseline",
            retirement_delay_factor=1.0,
            search_standards_inflation=1.0,
            search_failure_tolerance=0.3,
            postdoc_duration_multiplier=1.0,
            apply_recession_effects=False,
        ),
        "retirement_delays_only": Scenario(
            name="Retirement Delays Only",
            retirement_delay_factor=0.5,
            search_standards_inflation=1.0,
            search_failure_tolerance=0.3,
            postdoc_duration_multiplier=1.0,
            apply_recession_effects=True,
            test_factor="retirement_delays",
        ),
        "failed_searches_only": Scenario(
            name="Failed Searches Only",
            retirement_delay_factor=1.0,
            search_standards_inflation=1.4,
            search_failure_tolerance=0.5,
            postdoc_duration_multiplier=1.0,
            apply_recession_effects=True,
            test_factor="failed_searches",
        ),
        "extended_postdocs_only": Scenario(
            name="Extended Postdocs Only",
            retirement_delay_factor=1.0,
            search_standards_inflation=1.0,
            search_failure_tolerance=0.3,
            postdoc_duration_multiplier=1.5,
            apply_recession_effects=True,
            test_factor="extended_postdocs",
        ),
        "all_factors_combined": Scenario(
            name="All Factors Combined",
            retirement_delay_factor=0.5,
            search_standards_inflation=1.4,
            search_failure_tolerance=0.5,
            postdoc_duration_multiplier=1.5,
            apply_recession_effects=True,
            test_factor="combined",
        ),
    }


__all__ = [
    "Scenario",
    "BASELINE_TEST_FACTOR",
    "scenario_from_dict",
    "get_predefined_scenarios",
]
