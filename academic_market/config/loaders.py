import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional, Set, Tuple, Union

import yaml
from cerberus import Validator

from academic_market.config.params import DEFAULT_PARAMS, SimulationParams, build_params
from academic_market.config.scenarios import Scenario, scenario_from_dict
from academic_market.exceptions import ConfigurationError, ScenarioLoadError

# Configure logger for this module
logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

# Top-level layout of a run configuration file. Field-level checks are left to the
# pydantic models; this only guards the overall shape.
RUN_CONFIG_SCHEMA: Dict[str, Any] = {
    "simulation": {"type": "dict", "required": False},
    "recession_effects": {"type": "dict", "required": False},
    "scenarios": {
        "type": "dict",
        "required": False,
        "keysrules": {"type": "string"},
        "valuesrules": {"type": "dict"},
    },
    "monte_carlo": {
        "type": "dict",
        "required": False,
        "schema": {
            "n_sims": {"type": "integer", "min": 1},
            "n_workers": {"type": "integer", "min": 1},
            "base_seed": {"type": "integer"},
        },
    },
}


def load_yaml_config(config_path: PathLike) -> Dict[str, Any]:
    """
    Loads configuration data from a YAML file.

    Args:
        config_path: path to the YAML file.

    Returns:
        The parsed mapping (empty dict for an empty file).

    Raises:
        ScenarioLoadError: If the file cannot be found or parsed, or is not a mapping.
    """
    config_path = Path(config_path)
    logger.info(f"Attempting to load configuration from: {config_path}")

    if not config_path.is_file():
        logger.error(f"Configuration file not found at path: {config_path}")
        raise ScenarioLoadError(f"Configuration file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        logger.exception(f"Error parsing YAML configuration file {config_path}: {e}")
        raise ScenarioLoadError(f"Error parsing YAML file {config_path}") from e

    if not isinstance(config_data, dict):
        logger.error(f"Configuration file {config_path} did not parse into a dictionary.")
        raise ScenarioLoadError(
            f"Invalid configuration format in {config_path}: Expected a dictionary."
        )
    return config_data


def _deep_merge(a: dict, b: dict) -> dict:
    """Recursively merge b over a and return new dict."""
    out = dict(a)
    for k, v in b.items():
        if k in out and isinstance(out[k], dict) and isinstance(v, dict):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


def _load_file(fp: str, seen: Optional[Set[str]] = None) -> dict:
    if seen is None:
        seen = set()
    real = os.path.realpath(fp)
    if real in seen:
        raise ScenarioLoadError(f"Circular extends detected: {fp}")
    seen.add(real)

    data = load_yaml_config(fp)

    parent_cfg: dict = {}
    if "extends" in data:
        parent = data.pop("extends")
        # allow parent to be a relative path or a bare name
        parent_fp = os.path.join(os.path.dirname(fp), parent)
        if not os.path.exists(parent_fp) and not parent.endswith((".yml", ".yaml")):
            parent_fp = parent_fp + ".yaml"
        if not os.path.exists(parent_fp):
            raise ScenarioLoadError(f"Cannot find parent '{parent}' for '{fp}'")
        parent_cfg = _load_file(parent_fp, seen)

    return _deep_merge(parent_cfg, data)


def load_scenario_files(path: PathLike) -> Dict[str, Any]:
    """
    Load one or many scenario YAML(s), resolve `extends` chains, and return merged configs.

    If `path` is a dir, returns {scenario_name: config_dict, ...} keyed by file stem.
    If `path` is a file, returns config_dict.

    Raises:
        ScenarioLoadError: on unreadable files, a missing `extends` parent or a cycle.
    """
    path = str(path)
    if os.path.isdir(path):
        scenarios = {}
        for fn in sorted(os.listdir(path)):
            if fn.lower().endswith((".yaml", ".yml")):
                name = os.path.splitext(fn)[0]
                scenarios[name] = _load_file(os.path.join(path, fn))
        return scenarios

    # single file
    return _load_file(path)


def load_scenarios(path: PathLike) -> Dict[str, Scenario]:
    """
    Load validated Scenario objects from a YAML file or a directory of YAML files.

    A single file is keyed by its stem. Files in a directory that only serve as
    `extends` parents are loaded like any other scenario.
    """
    path = Path(path)
    if path.is_dir():
        raw = load_scenario_files(path)
    else:
        raw = {path.stem: load_scenario_files(path)}

    scenarios = {key: scenario_from_dict(cfg, default_name=key) for key, cfg in raw.items()}
    logger.info(f"Loaded {len(scenarios)} scenario(s) from {path}: {sorted(scenarios)}")
    return scenarios


def load_run_config(
    config_path: PathLike,
) -> Tuple[SimulationParams, Dict[str, Scenario], Dict[str, Any]]:
    """
    Loads a run configuration file, validates its layout and converts it to models.

    Returns:
        Tuple of (simulation parameters, scenarios keyed by name, monte carlo options).

    Raises:
        ScenarioLoadError: on unreadable files or a layout that fails validation.
        ConfigurationError: on invalid parameter or scenario values.
    """
    config_data = load_yaml_config(config_path)

    v = Validator(RUN_CONFIG_SCHEMA)
    if not v.validate(config_data):
        raise ScenarioLoadError(f"Config validation failed: {v.errors}")

    sim_section = dict(config_data.get("simulation") or {})
    effects_section = config_data.get("recession_effects")
    if effects_section:
        sim_section["recession_effects"] = effects_section
    params = build_params(DEFAULT_PARAMS, **sim_section)

    scenarios = {
        key: scenario_from_dict(cfg, default_name=key)
        for key, cfg in (config_data.get("scenarios") or {}).items()
    }
    mc_options = dict(config_data.get("monte_carlo") or {})

    logger.debug(f"Run configuration loaded: params={params}, scenarios={list(scenarios)}")
    return params, scenarios, mc_options


# Expose for import
__all__ = [
    "load_yaml_config",
    "load_scenario_files",
    "load_scenarios",
    "load_run_config",
    "RUN_CONFIG_SCHEMA",
    "ConfigurationError",
    "ScenarioLoadError",
]
