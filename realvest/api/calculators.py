"""
Calculator dispatch endpoints.

Routes any registered calculator by name: schema validation, calculation,
report.
"""

from typing import Any, Dict

from fastapi import APIRouter, HTTPException
from fastapi.exceptions import RequestValidationError
from pydantic import ValidationError

from realvest.calculators import UnknownCalculatorError, dispatch, get_calculator, list_calculators

router = APIRouter()


@router.get("/")
async def get_calculators():
    """List registered calculators with their input schemas."""
    calculators = list_calculators()
    return {"calculators": calculators, "total": len(calculators)}


@router.get("/{name}/schema")
async def get_calculator_schema(name: str):
    """Get the input schema for one calculator."""
    try:
        return get_calculator(name).get_schema()
    except UnknownCalculatorError:
        raise HTTPException(status_code=404, detail=f"Calculator not found: {name}")


@router.post("/{name}")
def run_calculator(name: str, params: Dict[str, Any]):
    """Validate params against the calculator's schema and run it."""
    try:
        return dispatch(name, params)
    except UnknownCalculatorError:
        raise HTTPException(status_code=404, detail=f"Calculator not found: {name}")
    except ValidationError as e:
        raise RequestValidationError(e.errors(include_url=False))
