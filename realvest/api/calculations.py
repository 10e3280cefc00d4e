"""
Financial calculation API endpoints.

These endpoints accept inputs and return calculated results.
"""

import math
from dataclasses import asdict
from typing import List

from fastapi import APIRouter, HTTPException
from pydantic import BaseModel

from realvest.calculations import irr
from realvest.calculations.amortization import (
    calculate_total_interest,
    generate_amortization_schedule,
)
from realvest.calculations.analysis import run_sensitivity_analysis
from realvest.calculations.cashflow import evaluate_scenario
from realvest.schemas import (
    ScenarioMetricsResponse,
    ScenarioRequest,
    SensitivityRequest,
    SensitivityResponse,
)

router = APIRouter()


@router.post("/sensitivity", response_model=SensitivityResponse)
def calculate_sensitivity(inputs: SensitivityRequest):
    """Run multi-variable sensitivity analysis on a base scenario."""
    return run_sensitivity_analysis(inputs.to_config())


@router.post("/scenario", response_model=ScenarioMetricsResponse)
def calculate_scenario(inputs: ScenarioRequest):
    """Calculate return metrics for a single scenario."""
    metrics = evaluate_scenario(inputs.scenario.to_scenario(), inputs.discount_rate / 100)
    return asdict(metrics)


class IRRInput(BaseModel):
    """Input for IRR calculation."""

    cash_flows: List[float]
    discount_rate: float = 10.0  # Percent, for the NPV figure


class IRRResponse(BaseModel):
    """Response with IRR calculation."""

    irr: float
    converged: bool
    multiple: float
    profit: float
    npv: float


@router.post("/irr", response_model=IRRResponse)
async def calculate_irr_endpoint(inputs: IRRInput):
    """Calculate IRR for given annual cash flows."""
    try:
        irr.validate_cash_flows(inputs.cash_flows)
        result = irr.solve_irr(inputs.cash_flows)
        if not math.isfinite(result.rate):
            raise ValueError("IRR calculation diverged")

        return IRRResponse(
            irr=result.rate,
            converged=result.converged,
            multiple=irr.calculate_multiple(inputs.cash_flows),
            profit=irr.calculate_profit(inputs.cash_flows),
            npv=irr.calculate_npv(inputs.cash_flows, inputs.discount_rate / 100),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


class AmortizationInput(BaseModel):
    """Input for amortization calculation."""

    principal: float
    annual_rate: float  # Percent
    loan_term_years: int = 30
    total_months: int = 120


@router.post("/amortization")
async def calculate_amortization(inputs: AmortizationInput):
    """Generate loan amortization schedule."""
    schedule = generate_amortization_schedule(
        principal=inputs.principal,
        annual_rate=inputs.annual_rate,
        loan_term_years=inputs.loan_term_years,
        total_months=inputs.total_months,
    )

    return {
        "schedule": schedule,
        "total_interest": calculate_total_interest(schedule),
        "total_principal": sum(row["principal"] for row in schedule),
    }
