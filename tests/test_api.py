"""
Tests for calculation and calculator dispatch API endpoints.
"""

import inspect

import pytest
from pydantic import ValidationError

from realvest.api.calculations import calculate_scenario, calculate_sensitivity
from realvest.api.calculators import run_calculator

from realvest.calculators import (
    UnknownCalculatorError,
    dispatch,
    get_calculator,
    list_calculators,
)


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json()["status"] == "healthy"


class TestSensitivityAPI:
    """Test the sensitivity analysis endpoint."""

    def test_default_analysis(self, client, scenario_a_params):
        response = client.post(
            "/api/calculate/sensitivity", json={"base_scenario": scenario_a_params}
        )
        assert response.status_code == 200

        data = response.json()
        assert len(data["sensitivity_analysis"]) == 3
        assert data["tornado_diagram"]["metric"] == "irr"
        assert len(data["two_way_analysis"]["data"]) == 5
        assert data["risk_assessment"]["overall_risk_level"] in ("Low", "Medium", "High")

    def test_defaults_fill_missing_scenario_fields(self, client):
        response = client.post(
            "/api/calculate/sensitivity",
            json={
                "base_scenario": {
                    "purchase_price": 200000,
                    "annual_rental_income": 24000,
                    "annual_expenses": 8000,
                },
                "sensitivity_variables": [{"variable": "vacancy_rate", "variations": [0, 10]}],
                "analysis_metrics": ["npv"],
            },
        )
        assert response.status_code == 200

        data = response.json()
        assert data["base_case"]["scenario"]["vacancy_rate"] == 5
        assert data["base_case"]["scenario"]["holding_period_years"] == 5
        assert data["two_way_analysis"] is None
        values = [s["value"] for s in data["sensitivity_analysis"][0]["scenarios"]]
        assert values == [5, 15]

    def test_missing_required_field(self, client):
        response = client.post(
            "/api/calculate/sensitivity",
            json={"base_scenario": {"purchase_price": 200000, "annual_rental_income": 24000}},
        )
        assert response.status_code == 422

    def test_out_of_range_vacancy(self, client, scenario_a_params):
        scenario_a_params["vacancy_rate"] = 60
        response = client.post(
            "/api/calculate/sensitivity", json={"base_scenario": scenario_a_params}
        )
        assert response.status_code == 422

    def test_unknown_variable(self, client, scenario_a_params):
        response = client.post(
            "/api/calculate/sensitivity",
            json={
                "base_scenario": scenario_a_params,
                "sensitivity_variables": [{"variable": "cap_rate"}],
            },
        )
        assert response.status_code == 422


class TestCalculationsAPI:
    """Test single-purpose calculation endpoints."""

    def test_scenario_metrics(self, client, scenario_a_params):
        response = client.post(
            "/api/calculate/scenario",
            json={"scenario": scenario_a_params, "discount_rate": 10},
        )
        assert response.status_code == 200

        data = response.json()
        assert len(data["cash_flows"]) == 6
        assert data["cash_flows"][0] == -40000
        assert data["cash_on_cash"] == pytest.approx(data["annual_cash_flow"] / 40000 * 100)

    def test_irr(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [-100, 110]})
        assert response.status_code == 200

        data = response.json()
        assert abs(data["irr"] - 0.10) < 0.001
        assert data["converged"] is True
        assert data["multiple"] == pytest.approx(1.1)

    def test_irr_requires_sign_change(self, client):
        response = client.post("/api/calculate/irr", json={"cash_flows": [100, 50]})
        assert response.status_code == 400

    def test_irr_diverged(self, client):
        response = client.post(
            "/api/calculate/irr",
            json={"cash_flows": [-40.09866079831367, 0, 3.408974641165834e-07, 0]},
        )
        assert response.status_code == 400
        assert "diverged" in response.json()["detail"]

    def test_heavy_handlers_run_in_threadpool(self):
        """CPU-bound endpoints are sync so they do not block the event loop."""
        assert not inspect.iscoroutinefunction(calculate_sensitivity)
        assert not inspect.iscoroutinefunction(calculate_scenario)
        assert not inspect.iscoroutinefunction(run_calculator)

    def test_amortization(self, client):
        response = client.post(
            "/api/calculate/amortization",
            json={"principal": 160000, "annual_rate": 7, "loan_term_years": 30},
        )
        assert response.status_code == 200

        data = response.json()
        assert len(data["schedule"]) == 120
        assert data["schedule"][0]["payment"] == pytest.approx(1064.48, abs=0.01)


class TestCalculatorDispatch:
    """Test name-based calculator dispatch."""

    def test_list_calculators(self, client):
        response = client.get("/api/calculators/")
        assert response.status_code == 200

        names = [c["name"] for c in response.json()["calculators"]]
        assert names == ["analyze_sensitivity", "evaluate_scenario"]

    def test_schema(self, client):
        response = client.get("/api/calculators/analyze_sensitivity/schema")
        assert response.status_code == 200

        schema = response.json()
        assert schema["type"] == "object"
        assert "base_scenario" in schema["properties"]
        assert schema["required"] == ["base_scenario"]

    def test_dispatch(self, client, scenario_a_params):
        response = client.post(
            "/api/calculators/evaluate_scenario", json={"scenario": scenario_a_params}
        )
        assert response.status_code == 200
        assert response.json()["total_investment"] == 40000

    def test_dispatch_unknown(self, client):
        response = client.post("/api/calculators/fix_and_flip", json={})
        assert response.status_code == 404

        response = client.get("/api/calculators/fix_and_flip/schema")
        assert response.status_code == 404

    def test_dispatch_invalid_params(self, client):
        response = client.post(
            "/api/calculators/analyze_sensitivity",
            json={"base_scenario": {"purchase_price": -1}},
        )
        assert response.status_code == 422

    def test_calculate_in_process(self, scenario_a_params):
        report = dispatch("analyze_sensitivity", {"base_scenario": scenario_a_params})
        assert report["tornado_diagram"]["metric"] == "irr"
        assert len(list_calculators()) == 2

    def test_in_process_errors(self):
        with pytest.raises(UnknownCalculatorError):
            get_calculator("fix_and_flip")
        with pytest.raises(ValidationError):
            get_calculator("analyze_sensitivity").calculate({"base_scenario": {}})
