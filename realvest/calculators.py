"""
Calculator registry.

Every calculator exposes the same invocation shape: a JSON schema describing
its parameters and a `calculate(params)` that validates those parameters and
returns a report dict. Hosts (HTTP, CLI, tool servers) dispatch by name.
"""

import logging
from dataclasses import asdict
from typing import Dict, List, Type

from pydantic import BaseModel

from realvest.calculations.analysis import run_sensitivity_analysis
from realvest.calculations.cashflow import evaluate_scenario
from realvest.schemas import ScenarioRequest, SensitivityRequest

logger = logging.getLogger(__name__)


class UnknownCalculatorError(KeyError):
    """Raised when no calculator is registered under a name."""


class Calculator:
    """Base class: validate params against `request_model`, then `run`."""

    name: str = ""
    description: str = ""
    request_model: Type[BaseModel] = BaseModel

    def get_schema(self) -> Dict:
        return self.request_model.model_json_schema()

    def calculate(self, params: Dict) -> Dict:
        """
        Validate params and compute the report.

        Raises:
            pydantic.ValidationError: If params violate the schema
        """
        request = self.request_model.model_validate(params)
        return self.run(request)

    def run(self, request: BaseModel) -> Dict:
        raise NotImplementedError


class SensitivityAnalysisCalculator(Calculator):
    name = "analyze_sensitivity"
    description = "Perform multi-variable sensitivity analysis on real estate investments"
    request_model = SensitivityRequest

    def run(self, request: SensitivityRequest) -> Dict:
        return run_sensitivity_analysis(request.to_config())


class ScenarioMetricsCalculator(Calculator):
    name = "evaluate_scenario"
    description = "Calculate IRR, NPV and cash returns for a single rental property scenario"
    request_model = ScenarioRequest

    def run(self, request: ScenarioRequest) -> Dict:
        metrics = evaluate_scenario(request.scenario.to_scenario(), request.discount_rate / 100)
        return asdict(metrics)


CALCULATORS: Dict[str, Calculator] = {
    calc.name: calc
    for calc in (SensitivityAnalysisCalculator(), ScenarioMetricsCalculator())
}


def get_calculator(name: str) -> Calculator:
    try:
        return CALCULATORS[name]
    except KeyError:
        raise UnknownCalculatorError(name) from None


def list_calculators() -> List[Dict]:
    """Names, descriptions and input schemas of all registered calculators."""
    return [
        {
            "name": calc.name,
            "description": calc.description,
            "input_schema": calc.get_schema(),
        }
        for calc in CALCULATORS.values()
    ]


def dispatch(name: str, params: Dict) -> Dict:
    """Route a request to a calculator by name."""
    calculator = get_calculator(name)
    logger.info("Dispatching calculator %s", name)
    return calculator.calculate(params)
