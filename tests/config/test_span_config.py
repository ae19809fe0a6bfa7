"""
Tests for configuration loading, validation and env overrides.
"""

import pytest
import yaml

from maxspan.config.loader import load_config, merge_config_with_env
from maxspan.config.span_config import SpanConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("MAXSPAN_LOG_LEVEL", "MAXSPAN_LOG_FILE", "MAXSPAN_SCENARIO_DECIMALS",
                 "MAXSPAN_MERGE_MODE", "MAXSPAN_TOP_CONTRIBUTORS"):
        monkeypatch.delenv(name, raising=False)


def write_yaml(tmp_path, data):
    path = tmp_path / "maxspan.yaml"
    path.write_text(yaml.safe_dump(data))
    return path


def test_defaults_are_valid():
    config = SpanConfig()

    assert config.validate() == []
    assert config.merge.default_mode == "merge-max"
    assert config.merge.decimals == 10
    assert config.parsing.placeholder_option_types == ["-", "XX"]
    assert "oopPf" in config.parsing.portfolio_tags


def test_load_from_file(tmp_path):
    path = write_yaml(tmp_path, {
        "merge": {"default_mode": "later-only", "decimals": 6},
        "report": {"top_contributors": 5},
        "logging": {"level": "DEBUG"},
    })

    config = load_config(path)

    assert config.merge.default_mode == "later-only"
    assert config.merge.decimals == 6
    assert config.report.top_contributors == 5
    assert config.report.scenario_preview == 20
    assert config.logging.level == "DEBUG"


def test_missing_file_uses_defaults(tmp_path, log_messages):
    config = load_config(tmp_path / "absent.yaml")

    assert config.merge.default_mode == "merge-max"
    assert any("Config file not found" in m for m in log_messages)


def test_empty_sections_use_defaults(tmp_path):
    config = load_config(write_yaml(tmp_path, {"parsing": None, "merge": None}))
    assert config.validate() == []


def test_env_overrides_file(tmp_path, monkeypatch):
    path = write_yaml(tmp_path, {"merge": {"decimals": 6}})
    monkeypatch.setenv("MAXSPAN_SCENARIO_DECIMALS", "4")
    monkeypatch.setenv("MAXSPAN_LOG_LEVEL", "WARNING")

    config = load_config(path)

    assert config.merge.decimals == 4
    assert config.logging.level == "WARNING"


def test_env_merge_does_not_mutate_input(monkeypatch):
    monkeypatch.setenv("MAXSPAN_MERGE_MODE", "earlier-only")
    data = {"merge": {"default_mode": "merge-max"}}

    merged = merge_config_with_env(data)

    assert merged["merge"]["default_mode"] == "earlier-only"
    assert data["merge"]["default_mode"] == "merge-max"


def test_bad_env_value(monkeypatch):
    monkeypatch.setenv("MAXSPAN_TOP_CONTRIBUTORS", "many")
    with pytest.raises(ValueError, match="MAXSPAN_TOP_CONTRIBUTORS"):
        merge_config_with_env({})


@pytest.mark.parametrize(
    "data,fragment",
    [
        ({"parsing": {"portfolio_tags": []}}, "portfolio_tags"),
        ({"merge": {"default_mode": "average"}}, "default_mode"),
        ({"merge": {"decimals": 20}}, "decimals"),
        ({"report": {"top_contributors": 0}}, "top_contributors"),
        ({"logging": {"level": "LOUD"}}, "logging.level"),
    ],
)
def test_invalid_config_rejected(tmp_path, data, fragment):
    with pytest.raises(ValueError, match=fragment):
        load_config(write_yaml(tmp_path, data))
