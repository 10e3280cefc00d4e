"""
Sensitivity Calculations

Perturbs one or two scenario inputs at a time, re-evaluates the scenario and
summarizes how strongly each return metric responds. Also searches for the
break-even perturbation where NPV crosses zero.

Variations are percentages. Purchase price, rental income and expenses scale
multiplicatively; vacancy moves by absolute percentage points; interest and
appreciation rates move by a percentage of their own base value.
"""

import logging
from dataclasses import dataclass, replace
from enum import Enum
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from realvest.calculations.cashflow import Scenario, ScenarioMetrics, evaluate_scenario

logger = logging.getLogger(__name__)

DEFAULT_VARIATIONS: Tuple[float, ...] = (-20, -10, 0, 10, 20)

# Break-even bisection bounds, in percent change of the variable
BREAK_EVEN_LOW = -90.0
BREAK_EVEN_HIGH = 200.0
BREAK_EVEN_MAX_ITERATIONS = 50
BREAK_EVEN_NPV_TOLERANCE = 100.0
BREAK_EVEN_WIDTH_TOLERANCE = 0.1


class SensitivityVariable(str, Enum):
    """Scenario inputs that can be perturbed."""

    PURCHASE_PRICE = "purchase_price"
    RENTAL_INCOME = "rental_income"
    EXPENSES = "expenses"
    VACANCY_RATE = "vacancy_rate"
    INTEREST_RATE = "interest_rate"
    APPRECIATION_RATE = "appreciation_rate"


class Metric(str, Enum):
    """Scenario metrics that can be reported and ranked."""

    IRR = "irr"
    NPV = "npv"
    CASH_ON_CASH = "cash_on_cash"
    TOTAL_RETURN = "total_return"
    MONTHLY_CASH_FLOW = "monthly_cash_flow"


class PerturbationRule(Enum):
    MULTIPLICATIVE = "multiplicative"  # base * (1 + v/100)
    ABSOLUTE_POINTS = "absolute_points"  # base + v
    PROPORTIONAL_DELTA = "proportional_delta"  # base + v * base / 100


PERTURBATION_RULES: Dict[SensitivityVariable, PerturbationRule] = {
    SensitivityVariable.PURCHASE_PRICE: PerturbationRule.MULTIPLICATIVE,
    SensitivityVariable.RENTAL_INCOME: PerturbationRule.MULTIPLICATIVE,
    SensitivityVariable.EXPENSES: PerturbationRule.MULTIPLICATIVE,
    SensitivityVariable.VACANCY_RATE: PerturbationRule.ABSOLUTE_POINTS,
    SensitivityVariable.INTEREST_RATE: PerturbationRule.PROPORTIONAL_DELTA,
    SensitivityVariable.APPRECIATION_RATE: PerturbationRule.PROPORTIONAL_DELTA,
}

SCENARIO_FIELDS: Dict[SensitivityVariable, str] = {
    SensitivityVariable.PURCHASE_PRICE: "purchase_price",
    SensitivityVariable.RENTAL_INCOME: "annual_rental_income",
    SensitivityVariable.EXPENSES: "annual_expenses",
    SensitivityVariable.VACANCY_RATE: "vacancy_rate",
    SensitivityVariable.INTEREST_RATE: "interest_rate",
    SensitivityVariable.APPRECIATION_RATE: "appreciation_rate",
}

DISPLAY_NAMES: Dict[SensitivityVariable, str] = {
    SensitivityVariable.PURCHASE_PRICE: "Purchase Price",
    SensitivityVariable.RENTAL_INCOME: "Rental Income",
    SensitivityVariable.EXPENSES: "Operating Expenses",
    SensitivityVariable.VACANCY_RATE: "Vacancy Rate",
    SensitivityVariable.INTEREST_RATE: "Interest Rate",
    SensitivityVariable.APPRECIATION_RATE: "Appreciation Rate",
}

# True where raising the variable lowers NPV
WORSENS_WHEN_INCREASED: Dict[SensitivityVariable, bool] = {
    SensitivityVariable.PURCHASE_PRICE: True,
    SensitivityVariable.RENTAL_INCOME: False,
    SensitivityVariable.EXPENSES: True,
    SensitivityVariable.VACANCY_RATE: False,
    SensitivityVariable.INTEREST_RATE: True,
    SensitivityVariable.APPRECIATION_RATE: False,
}

# Dollar metrics report impact as an absolute delta, rate metrics as percent change
ABSOLUTE_IMPACT_METRICS = frozenset({Metric.NPV, Metric.MONTHLY_CASH_FLOW})


@dataclass(frozen=True)
class VariableSelection:
    """A variable to analyze and the percentage variations to test."""

    variable: SensitivityVariable
    variations: Tuple[float, ...] = DEFAULT_VARIATIONS

    @property
    def ordered_variations(self) -> List[float]:
        return sorted(self.variations)


DEFAULT_SELECTIONS: Tuple[VariableSelection, ...] = (
    VariableSelection(SensitivityVariable.PURCHASE_PRICE),
    VariableSelection(SensitivityVariable.RENTAL_INCOME),
    VariableSelection(SensitivityVariable.INTEREST_RATE),
)

DEFAULT_METRICS: Tuple[Metric, ...] = (Metric.IRR, Metric.CASH_ON_CASH, Metric.TOTAL_RETURN)


@dataclass(frozen=True)
class BreakEven:
    """Perturbation at which NPV crosses zero."""

    value: float
    change_percent: float

    @property
    def margin_of_safety(self) -> float:
        return round(100 - abs(self.change_percent), 2)


def get_variable_value(scenario: Scenario, variable: SensitivityVariable) -> float:
    """Current value of the scenario field a variable maps onto."""
    return getattr(scenario, SCENARIO_FIELDS[variable])


def perturb_scenario(
    scenario: Scenario, variable: SensitivityVariable, variation_percent: float
) -> Scenario:
    """
    Return a new scenario with one variable moved by `variation_percent`.

    The input scenario is never modified.
    """
    base_value = get_variable_value(scenario, variable)
    rule = PERTURBATION_RULES[variable]

    if rule is PerturbationRule.MULTIPLICATIVE:
        new_value = base_value * (1 + variation_percent / 100)
    elif rule is PerturbationRule.ABSOLUTE_POINTS:
        new_value = base_value + variation_percent
    else:
        new_value = base_value + variation_percent * base_value / 100

    return replace(scenario, **{SCENARIO_FIELDS[variable]: new_value})


def format_metrics(metrics: ScenarioMetrics, selected: Sequence[Metric]) -> Dict[str, float]:
    """Pick the requested metrics, rounded to cents / basis points."""
    return {metric.value: round(float(metrics.get(metric.value)), 2) for metric in selected}


def calculate_impact(
    base_metrics: ScenarioMetrics,
    scenario_metrics: ScenarioMetrics,
    selected: Sequence[Metric],
) -> Dict[str, float]:
    """Change of each metric versus the base case."""
    impact = {}
    for metric in selected:
        base_value = base_metrics.get(metric.value)
        scenario_value = scenario_metrics.get(metric.value)

        if metric in ABSOLUTE_IMPACT_METRICS:
            impact[metric.value] = round(scenario_value - base_value, 2)
        elif base_value != 0:
            impact[metric.value] = round(
                (scenario_value - base_value) / abs(base_value) * 100, 2
            )
        else:
            impact[metric.value] = 0.0
    return impact


def calculate_elasticity(variations: Sequence[float], values: Sequence[float]) -> float:
    """
    Average absolute elasticity over consecutive (variation, value) pairs.

    Pairs with equal variations or a zero prior value are skipped; returns 0
    when no pair qualifies.
    """
    total = 0.0
    count = 0

    for i in range(len(values) - 1):
        if variations[i + 1] != variations[i] and values[i] != 0:
            input_change = variations[i + 1] - variations[i]
            output_change = (values[i + 1] - values[i]) / abs(values[i]) * 100
            total += abs(output_change / input_change)
            count += 1

    return total / count if count > 0 else 0.0


def calculate_sensitivity_metrics(
    scenarios: List[Dict], selected: Sequence[Metric]
) -> Dict[str, Dict[str, float]]:
    """Range, elasticity and extremes for each metric across the tested variations."""
    if not scenarios:
        return {}

    variations = [s["variation_percent"] for s in scenarios]
    stats = {}

    for metric in selected:
        values = np.array([s["metrics"][metric.value] for s in scenarios], dtype=float)
        low = float(values.min())
        high = float(values.max())

        stats[metric.value] = {
            "range": round(high - low, 2),
            "elasticity": round(calculate_elasticity(variations, values.tolist()), 3),
            "min_value": round(low, 2),
            "max_value": round(high, 2),
        }

    return stats


def run_variable_sensitivity(
    base_scenario: Scenario,
    selection: VariableSelection,
    selected: Sequence[Metric],
    discount_rate: float,
    base_metrics: Optional[ScenarioMetrics] = None,
) -> Dict:
    """
    Evaluate every variation of one variable.

    Args:
        base_scenario: Unperturbed scenario
        selection: Variable and variations to test
        selected: Metrics to report
        discount_rate: Discount rate as decimal
        base_metrics: Base case metrics, computed when omitted

    Returns:
        Result dict with scenarios ordered by ascending variation
    """
    if base_metrics is None:
        base_metrics = evaluate_scenario(base_scenario, discount_rate)

    variable = selection.variable
    scenarios = []

    for variation in selection.ordered_variations:
        scenario = perturb_scenario(base_scenario, variable, variation)
        metrics = evaluate_scenario(scenario, discount_rate)

        scenarios.append(
            {
                "variation_percent": variation,
                "value": get_variable_value(scenario, variable),
                "metrics": format_metrics(metrics, selected),
                "impact": calculate_impact(base_metrics, metrics, selected),
            }
        )

    return {
        "variable": DISPLAY_NAMES[variable],
        "variable_key": variable.value,
        "base_value": get_variable_value(base_scenario, variable),
        "scenarios": scenarios,
        "sensitivity_metrics": calculate_sensitivity_metrics(scenarios, selected),
    }


def build_tornado(results: List[Dict], primary_metric: Metric) -> Dict:
    """Rank variables by the range of their impact on the primary metric."""
    data = []

    for result in results:
        sensitivity = result["sensitivity_metrics"].get(primary_metric.value)
        if sensitivity:
            data.append(
                {
                    "variable": result["variable"],
                    "min_impact": sensitivity["min_value"],
                    "max_impact": sensitivity["max_value"],
                    "range": sensitivity["range"],
                    "elasticity": sensitivity["elasticity"],
                }
            )

    data.sort(key=lambda row: row["range"], reverse=True)

    return {"metric": primary_metric.value, "variables": data}


def perform_two_way_analysis(
    base_scenario: Scenario,
    first: VariableSelection,
    second: VariableSelection,
    metric: Metric,
    discount_rate: float,
) -> Dict:
    """
    Evaluate one metric over the grid of two variables' variations.

    Rows follow the first variable's variations and columns the second's.
    Each cell applies the first variable's perturbation and then the second's.
    """
    row_changes = first.ordered_variations
    column_changes = second.ordered_variations
    data = []

    for var1_change in row_changes:
        row_base = perturb_scenario(base_scenario, first.variable, var1_change)
        values = []
        for var2_change in column_changes:
            scenario = perturb_scenario(row_base, second.variable, var2_change)
            metrics = evaluate_scenario(scenario, discount_rate)
            values.append(round(float(metrics.get(metric.value)), 2))

        data.append({"var1_change": var1_change, "values": values})

    return {
        "variable1": DISPLAY_NAMES[first.variable],
        "variable2": DISPLAY_NAMES[second.variable],
        "metric": metric.value,
        "var1_changes": row_changes,
        "var2_changes": column_changes,
        "data": data,
    }


def find_break_even(
    base_scenario: Scenario,
    variable: SensitivityVariable,
    discount_rate: float,
) -> Optional[BreakEven]:
    """
    Bisect the variable's percent change for the point where NPV is zero.

    Succeeds when |NPV| drops below BREAK_EVEN_NPV_TOLERANCE. If the bracket
    narrows below BREAK_EVEN_WIDTH_TOLERANCE first, or iterations run out,
    no break-even is reported.
    """
    low = BREAK_EVEN_LOW
    high = BREAK_EVEN_HIGH
    worsens = WORSENS_WHEN_INCREASED[variable]

    for _ in range(BREAK_EVEN_MAX_ITERATIONS):
        mid = (low + high) / 2
        scenario = perturb_scenario(base_scenario, variable, mid)
        npv = evaluate_scenario(scenario, discount_rate).npv

        if abs(npv) < BREAK_EVEN_NPV_TOLERANCE:
            return BreakEven(value=get_variable_value(scenario, variable), change_percent=mid)

        # Positive NPV: move toward the direction that makes the deal worse
        if (npv > 0) == worsens:
            low = mid
        else:
            high = mid

        if abs(high - low) < BREAK_EVEN_WIDTH_TOLERANCE:
            break

    logger.debug("No break-even found for %s within [%s, %s]", variable.value, low, high)
    return None


def find_critical_values(
    base_scenario: Scenario,
    selections: Sequence[VariableSelection],
    discount_rate: float,
) -> List[Dict]:
    """Break-even points for each analyzed variable; variables without one are omitted."""
    critical_values = []

    for selection in selections:
        variable = selection.variable
        break_even = find_break_even(base_scenario, variable, discount_rate)

        if break_even is not None:
            critical_values.append(
                {
                    "variable": DISPLAY_NAMES[variable],
                    "variable_key": variable.value,
                    "base_value": get_variable_value(base_scenario, variable),
                    "break_even_value": break_even.value,
                    "break_even_change_percent": break_even.change_percent,
                    "margin_of_safety": break_even.margin_of_safety,
                }
            )

    return critical_values
