"""
Financial Calculation Engine

Core calculation modules for rental property investment analysis.
All functions are pure: outputs depend only on their arguments.
"""

from realvest.calculations import irr, amortization, cashflow, sensitivity, risk, analysis

__all__ = ["irr", "amortization", "cashflow", "sensitivity", "risk", "analysis"]
