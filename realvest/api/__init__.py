"""
API routes for the sensitivity engine.
"""

from fastapi import APIRouter

from realvest.api import calculations, calculators

router = APIRouter()

# Include sub-routers
router.include_router(calculations.router, prefix="/calculate", tags=["calculations"])
router.include_router(calculators.router, prefix="/calculators", tags=["calculators"])
