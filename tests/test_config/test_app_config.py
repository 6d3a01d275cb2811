"""
Tests for retirement_advisor/config.py.

What we test
------------
load_config():
  - Default TOML loads and matches the model defaults.
  - local.toml next to the config file is deep-merged on top.
  - RETIREMENT_ADVISOR_* environment variables override TOML values.
  - [telemetry] max_records is read from TOML.
  - Missing file → FileNotFoundError; out-of-range values → ValidationError.
AdviceConfig / CacheConfig:
  - is_enabled() per strategy; unknown names default to enabled.
  - for_strategy() returns per-strategy settings or the defaults.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from retirement_advisor.config import (
    AdviceConfig,
    AppConfig,
    CacheConfig,
    CacheSettings,
    TelemetryConfig,
    load_config,
)

_ENV_VARS = (
    "RETIREMENT_ADVISOR_LOG_LEVEL",
    "RETIREMENT_ADVISOR_DEBUG",
    "RETIREMENT_ADVISOR_MAX_RECOMMENDATIONS",
    "RETIREMENT_ADVISOR_MIN_EFFECTIVENESS",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    for name in _ENV_VARS:
        monkeypatch.delenv(name, raising=False)


def _write(path: Path, text: str) -> Path:
    path.write_text(text, encoding="utf-8")
    return path


class TestLoadConfig:
    def test_default_file_matches_model_defaults(self):
        config = load_config()
        assert config.advice == AdviceConfig()
        assert config.cache == CacheConfig()
        assert config.comparison == AppConfig().comparison
        assert config.telemetry == TelemetryConfig()
        assert config.debug is False

    def test_local_overrides_are_merged(self, tmp_path):
        cfg = _write(
            tmp_path / "settings.toml",
            "[advice]\nmax_recommendations = 5\n\n[cache.debt]\nmax_size = 10\nttl_seconds = 60\n",
        )
        _write(tmp_path / "local.toml", "[advice]\nmin_effectiveness_threshold = 30.0\n")
        config = load_config(cfg)
        assert config.advice.max_recommendations == 5
        assert config.advice.min_effectiveness_threshold == 30.0
        assert config.cache.debt == CacheSettings(max_size=10, ttl_seconds=60)
        assert config.cache.expense == CacheConfig().expense

    def test_env_overrides(self, tmp_path, monkeypatch):
        cfg = _write(tmp_path / "settings.toml", "[advice]\nmax_recommendations = 5\n")
        monkeypatch.setenv("RETIREMENT_ADVISOR_MAX_RECOMMENDATIONS", "3")
        monkeypatch.setenv("RETIREMENT_ADVISOR_LOG_LEVEL", "debug")
        monkeypatch.setenv("RETIREMENT_ADVISOR_DEBUG", "true")
        config = load_config(cfg)
        assert config.advice.max_recommendations == 3
        assert config.logging.level == "DEBUG"
        assert config.debug is True

    def test_telemetry_section(self, tmp_path):
        cfg = _write(tmp_path / "settings.toml", "[telemetry]\nmax_records = 25\n")
        assert load_config(cfg).telemetry.max_records == 25

    def test_project_debug_flag(self, tmp_path):
        cfg = _write(tmp_path / "settings.toml", "[project]\ndebug = true\n")
        assert load_config(cfg).debug is True

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_config(tmp_path / "nope.toml")

    @pytest.mark.parametrize(
        "toml_text",
        [
            "[advice]\nmin_effectiveness_threshold = 150.0\n",
            "[advice]\nmax_recommendations = 0\n",
            "[cache.income]\nmax_size = 0\n",
            "[telemetry]\nmax_records = 0\n",
            "[logging]\nlevel = \"LOUD\"\n",
        ],
    )
    def test_invalid_values(self, tmp_path, toml_text):
        cfg = _write(tmp_path / "settings.toml", toml_text)
        with pytest.raises(ValidationError):
            load_config(cfg)


class TestAdviceConfig:
    def test_is_enabled(self):
        config = AdviceConfig(include_income_advice=False)
        assert config.is_enabled("debt")
        assert not config.is_enabled("income")
        assert config.is_enabled("custom")

    def test_unbounded_recommendations(self):
        assert AdviceConfig(max_recommendations=None).max_recommendations is None


class TestCacheConfig:
    def test_per_strategy_settings(self):
        config = CacheConfig()
        assert config.for_strategy("expense").ttl_seconds == 900.0
        assert config.for_strategy("debt").max_size == 30

    def test_unknown_strategy_gets_defaults(self):
        assert CacheConfig().for_strategy("custom") == CacheSettings()
