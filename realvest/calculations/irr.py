"""
IRR and NPV Calculations

Implements IRR using Newton-Raphson method on periodic (annual) cash flows.
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

logger = logging.getLogger(__name__)

MAX_ITERATIONS = 100
TOLERANCE = 1e-5
DEFAULT_GUESS = 0.1


@dataclass(frozen=True)
class IRRResult:
    """Newton-Raphson outcome. `rate` is the last estimate even when not converged."""

    rate: float
    converged: bool
    iterations: int


def _discount_factors(num_periods: int, rate: float) -> np.ndarray:
    return (1 + rate) ** np.arange(num_periods, dtype=float)


def calculate_npv(cash_flows: List[float], discount_rate: float) -> float:
    """
    Calculate NPV (Net Present Value) of cash flows.

    Index 0 is time zero and is not discounted.

    Args:
        cash_flows: Array of cash flows (negative = outflow, positive = inflow)
        discount_rate: Annual discount rate (e.g., 0.10 for 10%)

    Returns:
        NPV value
    """
    flows = np.asarray(cash_flows, dtype=float)
    return float(np.sum(flows / _discount_factors(len(flows), discount_rate)))


def _npv_derivative(cash_flows: List[float], rate: float) -> float:
    """Calculate derivative of NPV with respect to rate (for Newton-Raphson)."""
    flows = np.asarray(cash_flows, dtype=float)
    periods = np.arange(len(flows), dtype=float)
    return float(-np.sum(periods * flows / (1 + rate) ** (periods + 1)))


def solve_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> IRRResult:
    """
    Run Newton-Raphson on the NPV function.

    Stops when successive estimates differ by less than TOLERANCE or after
    MAX_ITERATIONS. A flat derivative stops the iteration at the current
    estimate instead of dividing by zero.
    """
    rate = guess

    for iteration in range(1, MAX_ITERATIONS + 1):
        npv = calculate_npv(cash_flows, rate)
        dnpv = _npv_derivative(cash_flows, rate)

        if dnpv == 0 or not np.isfinite(dnpv):
            logger.debug("IRR derivative vanished at rate %.6f", rate)
            return IRRResult(rate=rate, converged=False, iterations=iteration)

        new_rate = rate - npv / dnpv

        if abs(new_rate - rate) < TOLERANCE:
            return IRRResult(rate=new_rate, converged=True, iterations=iteration)

        rate = new_rate

    logger.debug("IRR did not converge after %d iterations", MAX_ITERATIONS)
    return IRRResult(rate=rate, converged=False, iterations=MAX_ITERATIONS)


def validate_cash_flows(cash_flows: List[float]) -> None:
    """Raise ValueError unless the cash flows can have an IRR."""
    if len(cash_flows) < 2:
        raise ValueError("At least 2 cash flows required")

    has_positive = any(cf > 0 for cf in cash_flows)
    has_negative = any(cf < 0 for cf in cash_flows)

    if not has_positive or not has_negative:
        raise ValueError("Cash flows must contain both positive and negative values")


def calculate_irr(cash_flows: List[float], guess: float = DEFAULT_GUESS) -> float:
    """
    Calculate IRR (Internal Rate of Return) using Newton-Raphson method.

    Args:
        cash_flows: Array of periodic cash flows
        guess: Initial guess for rate (default 0.1 = 10%)

    Returns:
        Annual IRR as decimal (e.g., 0.15 for 15%)

    Raises:
        ValueError: If the cash flows cannot have an IRR or Newton-Raphson diverges
    """
    validate_cash_flows(cash_flows)

    rate = solve_irr(cash_flows, guess).rate
    if not np.isfinite(rate):
        raise ValueError("IRR calculation diverged")
    return rate


def calculate_multiple(cash_flows: List[float]) -> float:
    """
    Calculate equity multiple.

    Args:
        cash_flows: Array of cash flows (investments are negative)

    Returns:
        Multiple (e.g., 2.0 = 2.0x return)
    """
    total_inflows = sum(cf for cf in cash_flows if cf > 0)
    total_outflows = abs(sum(cf for cf in cash_flows if cf < 0))

    if total_outflows == 0:
        raise ValueError("No investment (outflows) found")

    return total_inflows / total_outflows


def calculate_profit(cash_flows: List[float]) -> float:
    """Calculate profit (total inflows minus total outflows)."""
    return sum(cash_flows)
