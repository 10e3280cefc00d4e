"""
Risk Assessment

Turns sensitivity results into an overall risk level, named risk factors and
prioritized recommendations.
"""

from typing import Dict, List

from realvest.calculations.cashflow import ScenarioMetrics
from realvest.calculations.sensitivity import (
    Metric,
    SensitivityVariable,
    build_tornado,
)

HIGH_SENSITIVITY_ELASTICITY = 1.0
CRITICAL_ELASTICITY = 1.5
CRITICAL_DOWNSIDE = 30.0
LOW_SENSITIVITY_ELASTICITY = 0.5
LOW_MARGIN_OF_SAFETY = 20.0

RISK_FACTORS: Dict[SensitivityVariable, Dict[str, str]] = {
    SensitivityVariable.INTEREST_RATE: {
        "factor": "Interest Rate Risk",
        "description": "Investment highly sensitive to rate changes",
        "mitigation": "Consider fixed-rate financing or rate locks",
    },
    SensitivityVariable.RENTAL_INCOME: {
        "factor": "Income Risk",
        "description": "Returns heavily dependent on rental income",
        "mitigation": "Diversify tenant base, consider long-term leases",
    },
    SensitivityVariable.PURCHASE_PRICE: {
        "factor": "Valuation Risk",
        "description": "Returns sensitive to purchase price",
        "mitigation": "Thorough due diligence and conservative valuations",
    },
    SensitivityVariable.VACANCY_RATE: {
        "factor": "Occupancy Risk",
        "description": "Performance vulnerable to vacancy",
        "mitigation": "Focus on high-demand locations and tenant retention",
    },
}


def calculate_downside_risk(result: Dict, metric: str, base_value: float) -> float:
    """
    Percent drop from the base value to the worst negative-variation outcome.

    Returns 0 when nothing was tested below the base or the base value is 0.
    """
    downside = [s["metrics"][metric] for s in result["scenarios"] if s["variation_percent"] < 0]
    if not downside or base_value == 0:
        return 0.0
    worst_case = min(downside)
    return (base_value - worst_case) / abs(base_value) * 100


def determine_risk_level(average_elasticity: float, max_downside_risk: float) -> str:
    if average_elasticity < 0.5 and max_downside_risk < 20:
        return "Low"
    if average_elasticity < 1 and max_downside_risk < 40:
        return "Medium"
    return "High"


def identify_risk_factors(critical_variables: List[SensitivityVariable]) -> List[Dict[str, str]]:
    """Risk factor descriptions for the critical variables that have one."""
    return [
        dict(factor)
        for variable, factor in RISK_FACTORS.items()
        if variable in critical_variables
    ]


def assess_risk(
    results: List[Dict], base_metrics: ScenarioMetrics, primary_metric: Metric
) -> Dict:
    """
    Aggregate per-variable sensitivity into an overall risk assessment.

    Args:
        results: Per-variable sensitivity results
        base_metrics: Unrounded base case metrics
        primary_metric: Metric every variable is judged on

    Returns:
        Risk level, average elasticity, max downside and critical variables
    """
    metric = primary_metric.value
    total_elasticity = 0.0
    max_downside_risk = 0.0
    high_sensitivity = []
    critical_keys = []
    critical_names = []

    for result in results:
        sensitivity = result["sensitivity_metrics"].get(metric)
        if sensitivity is None:
            continue

        elasticity = sensitivity["elasticity"]
        total_elasticity += elasticity

        if elasticity > HIGH_SENSITIVITY_ELASTICITY:
            high_sensitivity.append({"variable": result["variable"], "elasticity": elasticity})

        downside_risk = calculate_downside_risk(result, metric, base_metrics.get(metric))
        max_downside_risk = max(max_downside_risk, downside_risk)

        if elasticity > CRITICAL_ELASTICITY or downside_risk > CRITICAL_DOWNSIDE:
            critical_keys.append(SensitivityVariable(result["variable_key"]))
            critical_names.append(result["variable"])

    average_elasticity = total_elasticity / len(results) if results else 0.0

    return {
        "overall_risk_level": determine_risk_level(average_elasticity, max_downside_risk),
        "average_elasticity": round(average_elasticity, 3),
        "max_downside_risk": round(max_downside_risk, 2),
        "high_sensitivity_variables": high_sensitivity,
        "critical_variables": critical_names,
        "risk_factors": identify_risk_factors(critical_keys),
    }


def generate_recommendations(
    results: List[Dict],
    risk_assessment: Dict,
    critical_values: List[Dict],
    primary_metric: Metric,
) -> List[Dict[str, str]]:
    """Template recommendations keyed off the risk assessment and tornado ranking."""
    recommendations = []

    if risk_assessment["overall_risk_level"] == "High":
        recommendations.append(
            {
                "type": "Risk Management",
                "priority": "High",
                "message": "High sensitivity to multiple variables",
                "action": "Implement hedging strategies and maintain larger reserves",
            }
        )

    margins = {cv["variable"]: cv["margin_of_safety"] for cv in critical_values}
    for variable in risk_assessment["critical_variables"]:
        margin = margins.get(variable)
        if margin is not None and margin < LOW_MARGIN_OF_SAFETY:
            recommendations.append(
                {
                    "type": "Critical Risk",
                    "priority": "High",
                    "message": f"Low margin of safety for {variable} ({margin}%)",
                    "action": f"Monitor {variable} closely and develop contingency plans",
                }
            )

    if risk_assessment["average_elasticity"] > CRITICAL_ELASTICITY:
        recommendations.append(
            {
                "type": "Volatility",
                "priority": "Medium",
                "message": "High overall sensitivity to input changes",
                "action": "Consider more stable investment alternatives or risk reduction strategies",
            }
        )

    tornado = build_tornado(results, primary_metric)
    if tornado["variables"]:
        top = tornado["variables"][0]["variable"]
        recommendations.append(
            {
                "type": "Focus Area",
                "priority": "High",
                "message": f"{top} has the highest impact on returns",
                "action": f"Prioritize managing {top} risk through contracts or hedging",
            }
        )

    stable = []
    for result in results:
        sensitivity = result["sensitivity_metrics"].get(primary_metric.value)
        if sensitivity and sensitivity["elasticity"] < LOW_SENSITIVITY_ELASTICITY:
            stable.append(result["variable"])
    if stable:
        recommendations.append(
            {
                "type": "Strength",
                "priority": "Low",
                "message": f"Low sensitivity to {', '.join(stable)}",
                "action": "These factors provide stability to the investment",
            }
        )

    return recommendations
