"""
Request and response schemas.

Field bounds and defaults here are the validation boundary: once a request
has been parsed, the calculation engine assumes its inputs are valid.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from realvest.calculations.analysis import SensitivityConfig
from realvest.calculations.cashflow import Scenario
from realvest.calculations.sensitivity import (
    DEFAULT_METRICS,
    DEFAULT_SELECTIONS,
    DEFAULT_VARIATIONS,
    Metric,
    SensitivityVariable,
    VariableSelection,
)
from realvest.config import get_settings


def _default_discount_rate() -> float:
    return get_settings().default_discount_rate


class ScenarioInput(BaseModel):
    """Base investment scenario. Rates are percentages."""

    # Acquisition
    purchase_price: float = Field(..., ge=0, description="Property purchase price")
    down_payment_percent: float = Field(20, ge=0, le=100, description="Down payment percentage")

    # Operations
    annual_rental_income: float = Field(..., ge=0, description="Annual gross rental income")
    annual_expenses: float = Field(..., ge=0, description="Annual operating expenses")
    vacancy_rate: float = Field(5, ge=0, le=50, description="Expected vacancy rate (%)")

    # Financing
    interest_rate: float = Field(7, ge=0, le=20, description="Mortgage interest rate (%)")
    loan_term_years: int = Field(30, ge=1, le=40, description="Loan term in years")

    # Exit
    appreciation_rate: float = Field(3, ge=-10, le=20, description="Annual appreciation rate (%)")
    holding_period_years: int = Field(5, ge=1, le=30, description="Holding period in years")

    def to_scenario(self) -> Scenario:
        return Scenario(**self.model_dump())


class VariableInput(BaseModel):
    """A variable to analyze."""

    variable: SensitivityVariable
    variations: List[float] = Field(
        default_factory=lambda: list(DEFAULT_VARIATIONS),
        min_length=1,
        description="Percentage variations from base",
    )

    def to_selection(self) -> VariableSelection:
        return VariableSelection(variable=self.variable, variations=tuple(self.variations))


class SensitivityRequest(BaseModel):
    """Input for multi-variable sensitivity analysis."""

    base_scenario: ScenarioInput
    sensitivity_variables: List[VariableInput] = Field(
        default_factory=lambda: [
            VariableInput(variable=s.variable, variations=list(s.variations))
            for s in DEFAULT_SELECTIONS
        ]
    )
    analysis_metrics: List[Metric] = Field(
        default_factory=lambda: list(DEFAULT_METRICS), min_length=1
    )
    discount_rate: float = Field(
        default_factory=_default_discount_rate,
        ge=0,
        le=30,
        description="Discount rate for NPV calculation (%)",
    )

    def to_config(self) -> SensitivityConfig:
        return SensitivityConfig(
            base_scenario=self.base_scenario.to_scenario(),
            variables=tuple(v.to_selection() for v in self.sensitivity_variables),
            metrics=tuple(self.analysis_metrics),
            discount_rate=self.discount_rate,
        )


class SensitivityResponse(BaseModel):
    """Full sensitivity analysis report."""

    base_case: dict
    sensitivity_analysis: List[dict]
    two_way_analysis: Optional[dict] = None
    tornado_diagram: dict
    critical_values: List[dict]
    risk_assessment: dict
    recommendations: List[dict]


class ScenarioRequest(BaseModel):
    """Input for a single scenario evaluation."""

    scenario: ScenarioInput
    discount_rate: float = Field(default_factory=_default_discount_rate, ge=0, le=30)


class ScenarioMetricsResponse(BaseModel):
    """Metrics for a single scenario."""

    irr: float
    irr_converged: bool
    npv: float
    cash_on_cash: float
    total_return: float
    monthly_cash_flow: float
    annual_cash_flow: float
    total_investment: float
    final_equity: float
    cash_flows: List[float]
