"""Pilot Pay Calc - contract pay, deductions and overtime estimates."""

__version__ = "0.3.0"
