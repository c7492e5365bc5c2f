from pathlib import Path

import pytest
import yaml

from academic_market.config.loaders import load_run_config, load_scenario_files, load_scenarios
from academic_market.config.params import DEFAULT_PARAMS
from academic_market.config.scenarios import get_predefined_scenarios
from academic_market.exceptions import ConfigurationError, ScenarioLoadError

pytestmark = pytest.mark.config

CONFIG_DIR = Path(__file__).resolve().parents[2] / "config"


def test_simple_load_file(tmp_path):
    # simple config, no extends
    cfg = {"a": 1, "b": {"c": 2}}
    f = tmp_path / "simple.yaml"
    f.write_text(yaml.safe_dump(cfg))
    assert load_scenario_files(str(f)) == cfg


def test_load_directory(tmp_path):
    # two scenario files in dir
    cfg1 = {"x": "X"}
    f1 = tmp_path / "one.yaml"
    f1.write_text(yaml.safe_dump(cfg1))
    cfg2 = {"y": "Y"}
    f2 = tmp_path / "two.yml"
    f2.write_text(yaml.safe_dump(cfg2))
    result = load_scenario_files(str(tmp_path))
    assert result == {"one": cfg1, "two": cfg2}


def test_extends_deep_merge(tmp_path):
    # grandparent -> parent -> child
    gp = tmp_path / "gp.yaml"
    gp.write_text(yaml.safe_dump({"a": 1, "nested": {"k": 10}}))
    p = tmp_path / "parent.yaml"
    p.write_text(yaml.safe_dump({"extends": "gp.yaml", "nested": {"k": 20, "new": 30}, "b": 2}))
    c = tmp_path / "child.yaml"
    c.write_text(yaml.safe_dump({"extends": "parent", "nested": {"deep": 40}, "c": 3}))
    merged = load_scenario_files(str(c))
    expected = {"a": 1, "nested": {"k": 20, "new": 30, "deep": 40}, "b": 2, "c": 3}
    assert merged == expected


def test_missing_parent_error(tmp_path):
    f = tmp_path / "child.yaml"
    # extends a non-existent file
    f.write_text(yaml.safe_dump({"extends": "nope.yaml", "foo": "bar"}))
    with pytest.raises(ScenarioLoadError):
        load_scenario_files(str(f))


def test_circular_extends(tmp_path):
    (tmp_path / "a.yaml").write_text(yaml.safe_dump({"extends": "b.yaml"}))
    (tmp_path / "b.yaml").write_text(yaml.safe_dump({"extends": "a.yaml"}))
    with pytest.raises(ScenarioLoadError):
        load_scenario_files(str(tmp_path / "a.yaml"))


def test_non_mapping_file(tmp_path):
    f = tmp_path / "list.yaml"
    f.write_text("- 1\n- 2\n")
    with pytest.raises(ScenarioLoadError):
        load_scenario_files(str(f))


def test_bundled_scenarios_match_predefined():
    assert load_scenarios(CONFIG_DIR / "scenarios") == get_predefined_scenarios()


def test_single_scenario_file_keyed_by_stem(tmp_path):
    f = tmp_path / "slow_hiring.yaml"
    f.write_text(yaml.safe_dump({"search_standards_inflation": 1.6, "apply_recession_effects": True}))
    scenarios = load_scenarios(f)
    assert list(scenarios) == ["slow_hiring"]
    assert scenarios["slow_hiring"].name == "slow_hiring"
    assert scenarios["slow_hiring"].search_standards_inflation == 1.6


def test_invalid_scenario_values(tmp_path):
    f = tmp_path / "bad.yaml"
    f.write_text(yaml.safe_dump({"search_failure_tolerance": 2.0}))
    with pytest.raises(ConfigurationError):
        load_scenarios(f)


def test_bundled_run_config():
    params, scenarios, mc_options = load_run_config(CONFIG_DIR / "simulation.yaml")
    assert params == DEFAULT_PARAMS
    assert scenarios == {}
    assert mc_options == {"n_sims": 100, "base_seed": 0}


def test_run_config_with_scenarios(tmp_path):
    f = tmp_path / "run.yaml"
    f.write_text(
        yaml.safe_dump(
            {
                "simulation": {"simulation_years": 4},
                "recession_effects": {"retirement_delay_factor": 0.3},
                "scenarios": {"tight": {"name": "Tight", "search_standards_inflation": 1.5}},
                "monte_carlo": {"n_sims": 3, "n_workers": 1},
            }
        )
    )
    params, scenarios, mc_options = load_run_config(f)
    assert params.simulation_years == 4
    assert params.recession_effects.retirement_delay_factor == 0.3
    assert scenarios["tight"].name == "Tight"
    assert mc_options == {"n_sims": 3, "n_workers": 1}


@pytest.mark.parametrize(
    "content",
    [
        {"simulation": [1, 2]},
        {"monte_carlo": {"n_sims": 0}},
        {"unexpected_section": {}},
    ],
)
def test_run_config_bad_layout(tmp_path, content):
    f = tmp_path / "run.yaml"
    f.write_text(yaml.safe_dump(content))
    with pytest.raises(ScenarioLoadError):
        load_run_config(f)


def test_run_config_unknown_field(tmp_path):
    f = tmp_path / "run.yaml"
    f.write_text(yaml.safe_dump({"simulation": {"warp_speed": 9}}))
    with pytest.raises(ConfigurationError):
        load_run_config(f)


def test_missing_run_config(tmp_path):
    with pytest.raises(ScenarioLoadError):
        load_run_config(tmp_path / "absent.yaml")
