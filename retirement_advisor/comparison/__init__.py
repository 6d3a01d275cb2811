"""
Scenario comparison: match and diff milestones and advice across two projections.

Modules
-------
matcher : natural-key milestone matching + pluggable advice matcher.
differ  : milestone timing / advice change diffs and explanation sentences.
engine  : ``ScenarioComparisonEngine`` tying both to a ``ScenarioComparison``.
"""
