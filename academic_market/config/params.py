# academic_market/config/params.py
"""
Simulation parameters and recession effects.

Module-level constants are the documented defaults. Every run receives an explicit,
frozen ``SimulationParams`` object instead of reading them from process state, so
concurrent runs with different overrides cannot interfere.
"""

import logging
from typing import Any, Dict, Literal, Mapping, Optional, Tuple, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, ValidationError, model_validator

from academic_market.exceptions import ConfigurationError
from academic_market.utils.status_enums import Period

logger = logging.getLogger(__name__)

# Global simulation defaults
SIMULATION_YEARS = 20  # 2000-2019
START_YEAR = 2000
RECESSION_START = 2008
RECESSION_END = 2012

# Population defaults
ANNUAL_PHD_COHORT = 300  # New PhDs per year
NUM_DEPARTMENTS = 150  # Total departments hiring
AVG_DEPT_SIZE = 15  # Average faculty per department


class RecessionEffects(BaseModel):
    """Multipliers applied while a recession is in effect."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    retirement_delay_factor: float = Field(
        0.5, gt=0.0, description="Multiplier on retirement probability (0.5 = 50% fewer)"
    )
    budget_constraint: float = Field(0.8, gt=0.0, description="Budget level relative to baseline")
    search_standards_inflation: float = Field(
        1.2, gt=0.0, description="Multiplier on department productivity thresholds"
    )
    postdoc_duration_multiplier: float = Field(
        1.3, gt=0.0, description="Multiplier on the postdoc entry probability"
    )
    mobility_multiplier: float = Field(
        0.7, ge=0.0, description="Multiplier on faculty mobility risk"
    )


def default_recession_effects() -> RecessionEffects:
    return RecessionEffects()


class SimulationParams(BaseModel):
    """All knobs of a single simulation run."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    # --- Horizon and economic window ---
    simulation_years: int = Field(SIMULATION_YEARS, gt=0)
    start_year: int = START_YEAR
    recession_start: int = RECESSION_START
    recession_end: int = RECESSION_END

    # --- Populations ---
    annual_phd_cohort: int = Field(ANNUAL_PHD_COHORT, gt=0)
    num_departments: int = Field(NUM_DEPARTMENTS, gt=0)
    avg_dept_size: int = Field(AVG_DEPT_SIZE, gt=0)
    min_dept_size: int = Field(5, gt=0)
    rank_mix: Tuple[float, float, float] = Field(
        (0.40, 0.35, 0.25), description="Share of assistant, associate and full faculty"
    )

    # --- Candidate lifecycle ---
    postdoc_entry_prob: float = Field(0.4, ge=0.0, le=1.0)
    postdoc_return_prob: float = Field(0.6, ge=0.0, le=1.0)
    postdoc_min_years_for_return: int = Field(2, ge=0)
    alt_career_prob: float = Field(0.1, ge=0.0, le=1.0)
    alt_career_after_years: int = Field(5, ge=0)
    postdoc_productivity_boost_mean: float = 0.5
    postdoc_productivity_boost_sd: float = Field(0.3, ge=0.0)

    # --- Openings ---
    growth_openings_lambda: float = Field(0.1, ge=0.0)
    baseline_openings_lambda: float = Field(0.5, ge=0.0)
    min_retirement_prob: float = Field(0.01, ge=0.0, le=1.0)

    # --- Hiring ---
    hire_quality_threshold: float = 0.8
    hiring_order: Literal["department_id", "prestige"] = "department_id"

    recession_effects: RecessionEffects = Field(default_factory=RecessionEffects)

    @model_validator(mode="after")
    def check_windows_and_mix(self) -> "SimulationParams":
        if self.recession_end < self.recession_start:
            raise ValueError(
                f"recession_end ({self.recession_end}) is before recession_start "
                f"({self.recession_start})"
            )
        if any(share < 0 for share in self.rank_mix):
            raise ValueError(f"rank_mix shares must be non-negative, got {self.rank_mix}")
        if not np.isclose(sum(self.rank_mix), 1.0):
            raise ValueError(f"rank_mix must sum to 1.0, got {sum(self.rank_mix):.4f}")
        return self

    @property
    def end_year(self) -> int:
        """Last simulated year (inclusive)."""
        return self.start_year + self.simulation_years - 1

    def is_recession(self, year: int) -> bool:
        return self.recession_start <= year <= self.recession_end

    def period_of(self, year: int) -> str:
        """Label a year (or cohort year) with its economic period."""
        if year < self.recession_start:
            return Period.PRE_RECESSION.value
        if year <= self.recession_end:
            return Period.RECESSION.value
        return Period.POST_RECESSION.value


DEFAULT_PARAMS = SimulationParams()


def build_params(
    base: Union[SimulationParams, Mapping[str, Any], None] = None, **overrides: Any
) -> SimulationParams:
    """
    Return ``base`` with ``overrides`` applied, validated.

    ``base`` may be a ``SimulationParams`` or a plain mapping of its fields.
    ``None`` values in ``overrides`` are ignored so callers can forward optional
    arguments directly. The result is always re-validated, so a model built with
    ``model_construct`` or mutated through ``__dict__`` cannot slip through.

    Raises:
        ConfigurationError: if the resulting parameter set is invalid.
    """
    if base is None:
        base = DEFAULT_PARAMS
    if isinstance(base, SimulationParams):
        data = base.model_dump()
    elif isinstance(base, Mapping):
        data = dict(base)
    else:
        raise ConfigurationError(
            f"params must be SimulationParams or a mapping, got {type(base).__name__}"
        )
    updates: Dict[str, Any] = {k: v for k, v in overrides.items() if v is not None}
    data.update(updates)
    try:
        params = SimulationParams(**data)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid simulation parameters: {e}") from e
    if updates:
        logger.debug(f"Built simulation parameters with overrides {updates}")
    return params


__all__ = [
    "SIMULATION_YEARS",
    "START_YEAR",
    "RECESSION_START",
    "RECESSION_END",
    "ANNUAL_PHD_COHORT",
    "NUM_DEPARTMENTS",
    "AVG_DEPT_SIZE",
    "RecessionEffects",
    "default_recession_effects",
    "SimulationParams",
    "DEFAULT_PARAMS",
    "build_params",
]
