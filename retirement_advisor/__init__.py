"""Retirement Advisor: ranked household retirement advice and scenario comparison."""

__version__ = "0.1.0"
