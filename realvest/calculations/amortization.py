"""
Loan Amortization Calculations

Implements loan payment, remaining balance and amortization schedule
calculations for fixed-rate, fully amortizing mortgages.
"""

from typing import List, Dict, Optional
from datetime import date
from dateutil.relativedelta import relativedelta


def calculate_payment(
    principal: float, monthly_rate: float, num_payments: int
) -> float:
    """
    Calculate monthly loan payment.

    Standard amortizing payment formula (Excel's PMT()).

    Args:
        principal: Loan principal amount
        monthly_rate: Monthly interest rate as decimal (e.g., 0.07 / 12)
        num_payments: Total number of monthly payments

    Returns:
        Monthly payment amount (positive number), 0 when there is no loan
    """
    if principal <= 0:
        return 0.0
    if num_payments <= 0:
        return 0.0

    if monthly_rate == 0:
        return principal / num_payments

    growth = (1 + monthly_rate) ** num_payments
    return principal * monthly_rate * growth / (growth - 1)


def calculate_remaining_balance(
    principal: float,
    monthly_rate: float,
    total_payments: int,
    payments_made: int,
) -> float:
    """Calculate remaining loan balance after N payments."""
    if principal <= 0 or payments_made >= total_payments:
        return 0.0

    payment = calculate_payment(principal, monthly_rate, total_payments)

    if monthly_rate == 0:
        return max(0.0, principal - payment * payments_made)

    growth = (1 + monthly_rate) ** payments_made
    balance = principal * growth - payment * (growth - 1) / monthly_rate

    return max(0.0, balance)


def generate_amortization_schedule(
    principal: float,
    annual_rate: float,
    loan_term_years: int,
    total_months: Optional[int] = None,
    start_date: Optional[date] = None,
) -> List[Dict]:
    """
    Generate a month-by-month amortization schedule.

    Args:
        principal: Loan principal amount
        annual_rate: Annual interest rate in percent (e.g., 7 for 7%)
        loan_term_years: Amortization period in years
        total_months: Number of months to project (defaults to full term)
        start_date: Date of first payment

    Returns:
        List of amortization rows
    """
    schedule = []
    balance = principal
    monthly_rate = annual_rate / 100 / 12
    num_payments = loan_term_years * 12
    payment = calculate_payment(principal, monthly_rate, num_payments)

    if total_months is None:
        total_months = num_payments
    if start_date is None:
        start_date = date.today()

    for period in range(1, total_months + 1):
        if balance <= 0:
            break

        period_date = start_date + relativedelta(months=period - 1)
        interest = balance * monthly_rate
        principal_pmt = min(payment - interest, balance)
        ending_balance = balance - principal_pmt

        schedule.append(
            {
                "period": period,
                "date": period_date.isoformat(),
                "beginning_balance": round(balance, 2),
                "payment": round(principal_pmt + interest, 2),
                "interest": round(interest, 2),
                "principal": round(principal_pmt, 2),
                "ending_balance": round(max(0.0, ending_balance), 2),
            }
        )

        balance = max(0.0, ending_balance)

    return schedule


def calculate_total_interest(schedule: List[Dict]) -> float:
    """Calculate total interest paid over the schedule."""
    return sum(row["interest"] for row in schedule)
