"""
ASCII terminal formatters for CLI output.

Every formatter takes result models and returns a multi-line string for
``typer.echo()``. No colour, no third-party rendering libraries.

Advice table layout::

    Rank  Category    Priority  Score  Feas.  Eff.  Title
    ------------------------------------------------------
       1  debt        high       73.5   85.0  68.0  Accelerate Home Loan Payments (+$250/month)
"""

from __future__ import annotations

from retirement_advisor.models.advice import AdviceGenerationResult, RankedAdvice
from retirement_advisor.models.comparison import ScenarioComparison
from retirement_advisor.utils.currency import format_currency

_TITLE_WIDTH = 60


# ── Advice ────────────────────────────────────────────────────────────────────


def format_advice_table(recommendations: list[RankedAdvice]) -> str:
    """Ranked recommendations as a fixed-width table."""
    if not recommendations:
        return "  (no recommendations)"

    header = (
        f"  {'Rank':>4}  {'Category':<10}  {'Priority':<8}  "
        f"{'Score':>5}  {'Feas.':>5}  {'Eff.':>5}  Title"
    )
    lines = [header, "  " + "-" * (len(header) - 2)]
    for rec in recommendations:
        lines.append(
            f"  {rec.rank:>4}  {rec.category:<10}  {rec.priority:<8}  "
            f"{rec.overall_score:>5.1f}  {rec.feasibility_score:>5.1f}  "
            f"{rec.effectiveness_score:>5.1f}  {rec.title[:_TITLE_WIDTH]}"
        )
    return "\n".join(lines)


def format_advice_report(result: AdviceGenerationResult) -> str:
    """Assessment, feasibility, ranked table, partitions and any errors."""
    advice = result.advice
    feasibility = advice.retirement_feasibility

    lines: list[str] = ["", "=== Retirement Advice ==="]
    lines.append(f"  Assessment:        {advice.overall_assessment}")
    lines.append(f"  Retire at target:  {'yes' if feasibility.can_retire_at_target else 'no'}")
    if feasibility.actual_retirement_age is not None:
        lines.append(f"  Projected age:     {feasibility.actual_retirement_age:.1f}")
    if feasibility.shortfall_amount is not None:
        lines.append(f"  Shortfall:         {format_currency(feasibility.shortfall_amount)}")
    if feasibility.surplus_amount is not None:
        lines.append(f"  Surplus:           {format_currency(feasibility.surplus_amount)}")

    lines += ["", "  [RECOMMENDATIONS]", format_advice_table(advice.recommendations)]

    lines += ["", "  [QUICK WINS]"]
    lines += [f"    #{r.rank} {r.title}" for r in advice.quick_wins] or ["    (none)"]
    lines += ["", "  [LONG-TERM STRATEGIES]"]
    lines += [f"    #{r.rank} {r.title}" for r in advice.long_term_strategies] or ["    (none)"]

    if result.errors:
        lines += ["", "  [ISSUES]"]
        for err in result.errors:
            lines.append(f"    [{err.severity.upper()}] {err.code}: {err.message}")

    return "\n".join(lines)


# ── Comparison ────────────────────────────────────────────────────────────────


def format_comparison_report(comparison: ScenarioComparison) -> str:
    """Headline metrics, milestone shifts, changed advice and explanations."""
    metrics = comparison.metrics
    lines: list[str] = ["", "=== Scenario Comparison (with vs without transitions) ==="]

    years = metrics.retirement_date_difference_years
    lines.append(
        f"  Retirement date shift: {'n/a' if years is None else f'{years:+.1f} years'}"
    )
    lines.append(
        f"  Final net worth diff:  {format_currency(metrics.final_net_worth_difference)}"
    )
    lines.append(f"  Sustainability change: {'yes' if metrics.sustainability_changed else 'no'}")

    milestones = comparison.milestone_comparison
    if milestones is not None:
        lines += ["", "  [MILESTONES]"]
        lines.append(
            f"    Common: {len(milestones.common_milestones)}  "
            f"Only with: {len(milestones.unique_to_a)}  "
            f"Only without: {len(milestones.unique_to_b)}"
        )
        for summary in milestones.timing_differences:
            lines.append(
                f"    {summary.milestone_type:<24} {summary.effect:<12} "
                f"avg {summary.average_timing_difference_days:+.0f} days (n={summary.count})"
            )

    advice = comparison.advice_comparison
    if advice is not None:
        lines += ["", "  [ADVICE CHANGES]"]
        if not advice.advice_differences:
            lines.append("    (no differences)")
        for diff in advice.advice_differences:
            lines.append(f"    {diff.category.upper()}")
            for item in diff.unique_to_a:
                lines.append(f"      + {item.title}")
            for item in diff.unique_to_b:
                lines.append(f"      - {item.title}")
            for change in diff.changed_advice:
                lines.append(f"      ~ {change.scenario_a.title}: {change.change_explanation}")

        lines += ["", "  [WHY ADVICE DIFFERS]"]
        lines += [f"    - {s}" for s in advice.variation_explanation] or ["    (no material differences)"]

    return "\n".join(lines)
