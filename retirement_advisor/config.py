"""
Application configuration management.

Load order (each layer overrides the previous):
  1. ``config/default.toml``      — committed static defaults
  2. ``config/local.toml``        — optional local overrides (gitignored)
  3. ``.env``                     — local env overrides (gitignored)
  4. Environment variables        — ``RETIREMENT_ADVISOR_*`` prefix

Entry point: ``load_config(config_path=None) -> AppConfig``

Library code never calls ``load_config`` itself: ``AdviceEngine`` and
``ScenarioComparisonEngine`` take the relevant sub-config as a constructor
argument and fall back to the model defaults below, which mirror
``config/default.toml``.
"""

from __future__ import annotations

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, field_validator

ENV_PREFIX = "RETIREMENT_ADVISOR_"

# ── Sub-config models ─────────────────────────────────────────────────────────


class AdviceConfig(BaseModel):
    """Which strategies run and how the final list is trimmed."""

    model_config = ConfigDict(frozen=True)

    include_debt_advice: bool = True
    include_investment_advice: bool = True
    include_expense_advice: bool = True
    include_income_advice: bool = True
    include_person_advice: bool = True
    max_recommendations: Optional[int] = 10
    min_effectiveness_threshold: float = 20.0

    @field_validator("max_recommendations")
    @classmethod
    def validate_max_recommendations(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 1:
            raise ValueError(f"max_recommendations must be >= 1 or None, got {v}.")
        return v

    @field_validator("min_effectiveness_threshold")
    @classmethod
    def validate_threshold(cls, v: float) -> float:
        if not 0.0 <= v <= 100.0:
            raise ValueError(f"min_effectiveness_threshold must be in [0, 100], got {v}.")
        return v

    def is_enabled(self, strategy_name: str) -> bool:
        """Whether the strategy called ``strategy_name`` should run."""
        return bool(getattr(self, f"include_{strategy_name}_advice", True))


class CacheSettings(BaseModel):
    """Capacity and lifetime of one strategy cache."""

    model_config = ConfigDict(frozen=True)

    max_size: int = 30
    ttl_seconds: float = 600.0

    @field_validator("max_size")
    @classmethod
    def validate_max_size(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_size must be >= 1, got {v}.")
        return v

    @field_validator("ttl_seconds")
    @classmethod
    def validate_ttl(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"ttl_seconds must be > 0, got {v}.")
        return v


class CacheConfig(BaseModel):
    """Per-strategy cache settings.

    Debt and investment inputs move more often than expense and income
    inputs, so their entries are smaller and shorter-lived.
    """

    model_config = ConfigDict(frozen=True)

    debt: CacheSettings = CacheSettings(max_size=30, ttl_seconds=600.0)
    investment: CacheSettings = CacheSettings(max_size=30, ttl_seconds=600.0)
    expense: CacheSettings = CacheSettings(max_size=20, ttl_seconds=900.0)
    income: CacheSettings = CacheSettings(max_size=20, ttl_seconds=900.0)
    person: CacheSettings = CacheSettings(max_size=20, ttl_seconds=600.0)

    def for_strategy(self, strategy_name: str) -> CacheSettings:
        """Settings for ``strategy_name``; unknown names get the defaults."""
        settings = getattr(self, strategy_name, None)
        return settings if isinstance(settings, CacheSettings) else CacheSettings()


class ComparisonConfig(BaseModel):
    """Thresholds above which a matched recommendation counts as changed."""

    model_config = ConfigDict(frozen=True)

    effectiveness_points: float = 5.0
    feasibility_points: float = 5.0
    timeline_years: float = 0.5
    cost_savings: float = 1_000.0
    additional_assets: float = 5_000.0


class TelemetryConfig(BaseModel):
    """How many operation timings a telemetry sink retains."""

    model_config = ConfigDict(frozen=True)

    max_records: int = 500

    @field_validator("max_records")
    @classmethod
    def validate_max_records(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"max_records must be >= 1, got {v}.")
        return v


class LoggingConfig(BaseModel):
    """Logging output settings."""

    model_config = ConfigDict(frozen=True)

    level: str = "INFO"
    log_file: Optional[str] = None
    json_format: bool = False

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"Log level must be one of {sorted(valid)}, got '{v}'.")
        return v.upper()


class AppConfig(BaseModel):
    """Complete application configuration — the single source of truth.

    Constructed by ``load_config()`` which merges TOML + .env + environment.
    """

    model_config = ConfigDict(frozen=True)

    advice: AdviceConfig = AdviceConfig()
    cache: CacheConfig = CacheConfig()
    comparison: ComparisonConfig = ComparisonConfig()
    telemetry: TelemetryConfig = TelemetryConfig()
    logging: LoggingConfig = LoggingConfig()
    debug: bool = False


# ── Loader ────────────────────────────────────────────────────────────────────

_PROJECT_ROOT = Path(__file__).parent.parent


def _find_project_root() -> Path:
    """Walk up from this file to find the project root (contains pyproject.toml)."""
    candidate = Path(__file__).parent
    for _ in range(5):
        if (candidate / "pyproject.toml").exists():
            return candidate
        candidate = candidate.parent
    return _PROJECT_ROOT


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """Load and merge application configuration.

    Args:
        config_path: Explicit path to a TOML config file. Defaults to
            ``<project_root>/config/default.toml``.

    Returns:
        Fully validated ``AppConfig`` instance.

    Raises:
        FileNotFoundError: If the specified ``config_path`` does not exist.
        pydantic.ValidationError: If merged config values fail validation.
    """
    root = _find_project_root()

    # 1. Load .env file (silently skip if missing)
    load_dotenv(dotenv_path=root / ".env", override=False)

    # 2. Load TOML config
    if config_path is None:
        config_path = root / "config" / "default.toml"

    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "rb") as f:
        raw: dict[str, Any] = tomllib.load(f)

    # Also merge local.toml if present (gitignored local overrides)
    local_config_path = config_path.parent / "local.toml"
    if local_config_path.exists():
        with open(local_config_path, "rb") as f:
            local_raw: dict[str, Any] = tomllib.load(f)
        raw = _deep_merge(raw, local_raw)

    # 3. Apply RETIREMENT_ADVISOR_* environment variable overrides
    raw = _apply_env_overrides(raw)

    # 4. Build and validate AppConfig
    return _build_app_config(raw)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into ``base``."""
    result = dict(base)
    for key, val in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(val, dict):
            result[key] = _deep_merge(result[key], val)
        else:
            result[key] = val
    return result


def _apply_env_overrides(raw: dict[str, Any]) -> dict[str, Any]:
    """Apply RETIREMENT_ADVISOR_* env vars to the raw config dict.

    Supported overrides:
      RETIREMENT_ADVISOR_LOG_LEVEL            → raw["logging"]["level"]
      RETIREMENT_ADVISOR_DEBUG                → raw["debug"]
      RETIREMENT_ADVISOR_MAX_RECOMMENDATIONS  → raw["advice"]["max_recommendations"]
      RETIREMENT_ADVISOR_MIN_EFFECTIVENESS    → raw["advice"]["min_effectiveness_threshold"]
    """
    if log_level := os.environ.get(f"{ENV_PREFIX}LOG_LEVEL"):
        raw.setdefault("logging", {})["level"] = log_level

    if debug := os.environ.get(f"{ENV_PREFIX}DEBUG"):
        raw["debug"] = debug.lower() in ("1", "true", "yes")

    if max_recs := os.environ.get(f"{ENV_PREFIX}MAX_RECOMMENDATIONS"):
        raw.setdefault("advice", {})["max_recommendations"] = int(max_recs)

    if min_eff := os.environ.get(f"{ENV_PREFIX}MIN_EFFECTIVENESS"):
        raw.setdefault("advice", {})["min_effectiveness_threshold"] = float(min_eff)

    return raw


def _build_app_config(raw: dict[str, Any]) -> AppConfig:
    """Map raw TOML dict to ``AppConfig`` model structure."""
    project = raw.pop("project", {})

    cache_raw: dict[str, Any] = raw.get("cache", {})
    return AppConfig(
        advice=AdviceConfig(**raw.get("advice", {})),
        cache=CacheConfig(
            **{name: CacheSettings(**settings) for name, settings in cache_raw.items()}
        ),
        comparison=ComparisonConfig(**raw.get("comparison", {})),
        telemetry=TelemetryConfig(**raw.get("telemetry", {})),
        logging=LoggingConfig(**raw.get("logging", {})),
        debug=raw.get("debug", project.get("debug", False)),
    )
