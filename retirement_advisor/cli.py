"""
Retirement Advisor — CLI entry point.

All commands follow this pattern:
  1. Load ``AppConfig`` via ``load_config()``.
  2. Configure logging.
  3. Read and validate the JSON input file.
  4. Run the advice or comparison engine.
  5. Print an ASCII report (or JSON with ``--json``).

Input files
-----------
``advise``  expects ``{"params": {...}, "projection": {...}, "milestones": [...]}``.
``compare`` expects ``{"params": {...}, "with_transitions": {...},
"without_transitions": {...}, "metrics": {...}}``; each scenario is a
``ScenarioOutput`` and ``metrics`` is derived from the projections when
omitted.

Install and run::

    pip install -e .
    retirement-advisor --help
    retirement-advisor validate-config
    retirement-advisor advise household.json
    retirement-advisor compare scenarios.json --json
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

app = typer.Typer(
    name="retirement-advisor",
    help="Household retirement advice and scenario comparison CLI.",
    add_completion=False,
)


# ── Helpers ───────────────────────────────────────────────────────────────────

def _load_config_or_exit(config_path: Optional[str] = None):
    """Load AppConfig, printing a friendly error and exiting on failure."""
    from retirement_advisor.config import load_config

    try:
        cfg_path = Path(config_path) if config_path else None
        return load_config(cfg_path)
    except FileNotFoundError as exc:
        typer.echo(f"[ERROR] {exc}", err=True)
        raise typer.Exit(code=1)
    except Exception as exc:
        typer.echo(f"[ERROR] Config validation failed: {exc}", err=True)
        raise typer.Exit(code=1)


def _configure_logging(config):
    """Set up logging from config."""
    from retirement_advisor.utils.logging import configure_logging
    configure_logging(config.logging)


def _read_json_or_exit(path: str) -> dict[str, Any]:
    file_path = Path(path)
    if not file_path.exists():
        typer.echo(f"[ERROR] Input file not found: {file_path}", err=True)
        raise typer.Exit(code=1)
    try:
        data = json.loads(file_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as exc:
        typer.echo(f"[ERROR] Invalid JSON in {file_path}: {exc}", err=True)
        raise typer.Exit(code=1)
    if not isinstance(data, dict):
        typer.echo(f"[ERROR] Expected a JSON object in {file_path}.", err=True)
        raise typer.Exit(code=1)
    return data


def _build_advice_engine(config):
    from retirement_advisor.advice.engine import AdviceEngine
    from retirement_advisor.advice.telemetry import TelemetrySink
    return AdviceEngine(
        config=config.advice,
        cache_config=config.cache,
        telemetry=TelemetrySink.from_config(config.telemetry),
    )


# ── Commands ──────────────────────────────────────────────────────────────────

@app.command("validate-config")
def validate_config(
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file (default: config/default.toml).",
    ),
    show_full: bool = typer.Option(
        False,
        "--full",
        help="Print full config including all fields.",
    ),
) -> None:
    """Validate the configuration file and print parsed values.

    Exits with code 1 if the config fails validation.
    """
    config = _load_config_or_exit(config_path)

    enabled = [
        name
        for name in ("debt", "investment", "expense", "income", "person")
        if config.advice.is_enabled(name)
    ]

    typer.echo("Configuration validated successfully.")
    typer.echo("")
    typer.echo(f"  Enabled strategies:  {', '.join(enabled) or '(none)'}")
    typer.echo(f"  Max recommendations: {config.advice.max_recommendations}")
    typer.echo(f"  Min effectiveness:   {config.advice.min_effectiveness_threshold}")
    typer.echo(f"  Log level:           {config.logging.level}")
    typer.echo(f"  Debug mode:          {config.debug}")

    if show_full:
        typer.echo("")
        typer.echo("Full config (JSON):")
        typer.echo(json.dumps(config.model_dump(), indent=2, default=str))

    typer.echo("")
    typer.echo("[OK] Config valid.")


@app.command("advise")
def advise(
    input_file: str = typer.Argument(..., help="JSON file with params, projection, milestones."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full result as JSON instead of a table.",
    ),
    show_timings: bool = typer.Option(
        False,
        "--timings",
        help="Append the telemetry performance report.",
    ),
) -> None:
    """Generate ranked retirement advice for one projection.

    Exits with code 1 on invalid input or a critical generation error.
    """
    from pydantic import ValidationError

    from retirement_advisor.models.household import HouseholdParameters
    from retirement_advisor.models.milestone import Milestone
    from retirement_advisor.models.snapshot import ProjectionResult
    from retirement_advisor.reporting.formatters import format_advice_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _read_json_or_exit(input_file)

    try:
        params = HouseholdParameters.model_validate(data.get("params", {}))
        projection = ProjectionResult.model_validate(data.get("projection", {}))
        milestones = [Milestone.model_validate(m) for m in data.get("milestones", [])]
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid input: {exc}", err=True)
        raise typer.Exit(code=1)

    engine = _build_advice_engine(config)
    result = engine.generate(projection, params, milestones)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
    else:
        typer.echo(format_advice_report(result))
    if show_timings:
        typer.echo("")
        typer.echo(engine.telemetry.report())

    if result.has_critical_error:
        typer.echo("[ERROR] Advice generation failed; see issues above.", err=True)
        raise typer.Exit(code=1)
    if not as_json:
        typer.echo("")
        typer.echo(f"[OK] {len(result.advice.recommendations)} recommendation(s).")


@app.command("compare")
def compare(
    input_file: str = typer.Argument(..., help="JSON file with params and both scenarios."),
    config_path: Optional[str] = typer.Option(
        None,
        "--config",
        help="Path to TOML config file.",
    ),
    as_json: bool = typer.Option(
        False,
        "--json",
        help="Print the full comparison as JSON instead of a report.",
    ),
) -> None:
    """Compare milestones and advice between two scenarios.

    Exits with code 1 on invalid input.
    """
    from pydantic import ValidationError

    from retirement_advisor.comparison.differ import ComparisonThresholds
    from retirement_advisor.comparison.engine import ScenarioComparisonEngine
    from retirement_advisor.models.comparison import (
        ComparisonMetrics,
        ScenarioComparison,
        ScenarioOutput,
        build_comparison_metrics,
    )
    from retirement_advisor.models.household import HouseholdParameters
    from retirement_advisor.reporting.formatters import format_comparison_report

    config = _load_config_or_exit(config_path)
    _configure_logging(config)
    data = _read_json_or_exit(input_file)

    try:
        params = HouseholdParameters.model_validate(data.get("params", {}))
        scenario_a = ScenarioOutput.model_validate(data.get("with_transitions", {}))
        scenario_b = ScenarioOutput.model_validate(data.get("without_transitions", {}))
        metrics = (
            ComparisonMetrics.model_validate(data["metrics"])
            if "metrics" in data
            else build_comparison_metrics(scenario_a.projection, scenario_b.projection)
        )
    except ValidationError as exc:
        typer.echo(f"[ERROR] Invalid input: {exc}", err=True)
        raise typer.Exit(code=1)

    envelope = ScenarioComparison(
        with_transitions=scenario_a,
        without_transitions=scenario_b,
        metrics=metrics,
    )
    engine = ScenarioComparisonEngine(
        advice_engine=_build_advice_engine(config),
        thresholds=ComparisonThresholds.from_config(config.comparison),
    )
    result = engine.compare(envelope, params)

    if as_json:
        typer.echo(result.model_dump_json(indent=2))
        return

    typer.echo(format_comparison_report(result))
    typer.echo("")
    typer.echo("[OK] Comparison complete.")


if __name__ == "__main__":
    app()
