"""
Cash Flow Calculations

Builds the annual levered cash flow vector for a single rental property
scenario and derives its return metrics.
"""

import math
from typing import List, Tuple
from dataclasses import dataclass

from realvest.calculations.amortization import (
    calculate_payment,
    calculate_remaining_balance,
)
from realvest.calculations.irr import calculate_npv, solve_irr


@dataclass(frozen=True)
class Scenario:
    """
    One fully parameterized investment case.

    Rates are percentages (7 means 7%). Defaults are the values applied when
    a request omits the field.
    """

    purchase_price: float
    annual_rental_income: float
    annual_expenses: float
    down_payment_percent: float = 20.0
    vacancy_rate: float = 5.0
    interest_rate: float = 7.0
    loan_term_years: int = 30
    appreciation_rate: float = 3.0
    holding_period_years: int = 5


@dataclass(frozen=True)
class ScenarioMetrics:
    """Derived metrics for one scenario evaluation."""

    irr: float  # Percent
    npv: float
    cash_on_cash: float  # Percent
    total_return: float  # Percent
    monthly_cash_flow: float
    annual_cash_flow: float
    total_investment: float
    final_equity: float
    irr_converged: bool = True
    cash_flows: Tuple[float, ...] = ()

    def get(self, metric: str) -> float:
        """Look up a metric value by its report name (e.g. 'cash_on_cash')."""
        return getattr(self, metric)


def calculate_annual_debt_service(scenario: Scenario) -> float:
    """Annualized principal and interest on the acquisition loan."""
    down_payment = scenario.purchase_price * (scenario.down_payment_percent / 100)
    loan_amount = scenario.purchase_price - down_payment
    monthly_rate = scenario.interest_rate / 100 / 12
    monthly_payment = calculate_payment(
        loan_amount, monthly_rate, scenario.loan_term_years * 12
    )
    return monthly_payment * 12


def calculate_annual_cash_flow(scenario: Scenario) -> float:
    """NOI after vacancy and expenses, less debt service."""
    effective_income = scenario.annual_rental_income * (1 - scenario.vacancy_rate / 100)
    noi = effective_income - scenario.annual_expenses
    return noi - calculate_annual_debt_service(scenario)


def calculate_sale_proceeds(scenario: Scenario) -> float:
    """Appreciated value at the end of the hold, less the loan payoff."""
    down_payment = scenario.purchase_price * (scenario.down_payment_percent / 100)
    loan_amount = scenario.purchase_price - down_payment
    holding = scenario.holding_period_years

    future_value = scenario.purchase_price * (1 + scenario.appreciation_rate / 100) ** holding
    remaining_balance = calculate_remaining_balance(
        loan_amount,
        scenario.interest_rate / 100 / 12,
        scenario.loan_term_years * 12,
        holding * 12,
    )
    return future_value - remaining_balance


def build_cash_flows(scenario: Scenario) -> List[float]:
    """
    Build the annual cash flow vector.

    Index 0 is the down payment (negative), years 1..N-1 are the annual cash
    flow, and year N adds the net sale proceeds.
    """
    down_payment = scenario.purchase_price * (scenario.down_payment_percent / 100)
    annual_cash_flow = calculate_annual_cash_flow(scenario)

    cash_flows = [-down_payment]
    for year in range(1, scenario.holding_period_years + 1):
        if year < scenario.holding_period_years:
            cash_flows.append(annual_cash_flow)
        else:
            cash_flows.append(annual_cash_flow + calculate_sale_proceeds(scenario))

    return cash_flows


def evaluate_scenario(scenario: Scenario, discount_rate: float) -> ScenarioMetrics:
    """
    Calculate return metrics for a scenario.

    Args:
        scenario: Scenario to evaluate
        discount_rate: Discount rate as decimal (e.g., 0.10 for 10%)

    Returns:
        ScenarioMetrics with IRR, cash-on-cash and total return in percent
    """
    down_payment = scenario.purchase_price * (scenario.down_payment_percent / 100)
    annual_cash_flow = calculate_annual_cash_flow(scenario)
    cash_flows = build_cash_flows(scenario)

    irr_result = solve_irr(cash_flows)
    irr_percent = irr_result.rate * 100
    # Diverged Newton estimates are reported as 0
    if not math.isfinite(irr_percent):
        irr_percent = 0.0

    if down_payment > 0:
        cash_on_cash = annual_cash_flow / down_payment * 100
        total_received = sum(cash_flows[1:])
        total_return = (total_received - down_payment) / down_payment * 100
    else:
        cash_on_cash = 0.0
        total_return = 0.0

    return ScenarioMetrics(
        irr=irr_percent,
        npv=calculate_npv(cash_flows, discount_rate),
        cash_on_cash=cash_on_cash,
        total_return=total_return,
        monthly_cash_flow=annual_cash_flow / 12,
        annual_cash_flow=annual_cash_flow,
        total_investment=down_payment,
        final_equity=cash_flows[-1] - annual_cash_flow,
        irr_converged=irr_result.converged,
        cash_flows=tuple(cash_flows),
    )
