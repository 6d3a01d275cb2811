"""
Plain-text reporting for the CLI.

Modules
-------
formatters : ASCII renderings of advice and scenario comparisons.
"""
