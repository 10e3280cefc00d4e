"""
Sensitivity Analysis

Runs the full multi-variable analysis for one base scenario and assembles the
report: base case, per-variable sensitivity, two-way grid, tornado ranking,
break-even values, risk assessment and recommendations.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Dict, Tuple

from realvest.calculations.cashflow import Scenario, evaluate_scenario
from realvest.calculations.risk import assess_risk, generate_recommendations
from realvest.calculations.sensitivity import (
    DEFAULT_METRICS,
    DEFAULT_SELECTIONS,
    Metric,
    VariableSelection,
    build_tornado,
    find_critical_values,
    format_metrics,
    perform_two_way_analysis,
    run_variable_sensitivity,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SensitivityConfig:
    """
    A resolved analysis request.

    Attributes:
        base_scenario: Scenario every perturbation starts from
        variables: Variables to analyze; the first two also form the two-way grid
        metrics: Metrics to report; the first one drives ranking and risk
        discount_rate: NPV discount rate in percent
    """

    base_scenario: Scenario
    variables: Tuple[VariableSelection, ...] = DEFAULT_SELECTIONS
    metrics: Tuple[Metric, ...] = DEFAULT_METRICS
    discount_rate: float = 10.0

    @property
    def primary_metric(self) -> Metric:
        return self.metrics[0]


def run_sensitivity_analysis(config: SensitivityConfig) -> Dict:
    """
    Run the sensitivity analysis described by `config`.

    Returns:
        Nested report dict
    """
    if not config.metrics:
        raise ValueError("At least one analysis metric is required")

    discount_rate = config.discount_rate / 100
    base_scenario = config.base_scenario
    base_metrics = evaluate_scenario(base_scenario, discount_rate)

    sensitivity_results = []
    for selection in config.variables:
        logger.debug(
            "Analyzing %s over variations %s", selection.variable.value, selection.variations
        )
        sensitivity_results.append(
            run_variable_sensitivity(
                base_scenario, selection, config.metrics, discount_rate, base_metrics
            )
        )

    two_way = None
    if len(config.variables) >= 2:
        two_way = perform_two_way_analysis(
            base_scenario,
            config.variables[0],
            config.variables[1],
            config.primary_metric,
            discount_rate,
        )

    critical_values = find_critical_values(base_scenario, config.variables, discount_rate)
    risk_assessment = assess_risk(sensitivity_results, base_metrics, config.primary_metric)

    logger.info(
        "Sensitivity analysis complete: %d variables, risk level %s",
        len(sensitivity_results),
        risk_assessment["overall_risk_level"],
    )

    return {
        "base_case": {
            "scenario": asdict(base_scenario),
            "metrics": format_metrics(base_metrics, config.metrics),
        },
        "sensitivity_analysis": sensitivity_results,
        "two_way_analysis": two_way,
        "tornado_diagram": build_tornado(sensitivity_results, config.primary_metric),
        "critical_values": critical_values,
        "risk_assessment": risk_assessment,
        "recommendations": generate_recommendations(
            sensitivity_results, risk_assessment, critical_values, config.primary_metric
        ),
    }
