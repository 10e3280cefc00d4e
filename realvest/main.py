"""
Main FastAPI application entry point.
"""

import logging

import uvicorn
from fastapi import FastAPI

from realvest import __version__
from realvest.config import get_settings
from realvest.api import router as api_router

settings = get_settings()

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Real estate investment sensitivity analysis and scenario metrics",
    version=__version__,
    debug=settings.debug,
)

# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {"status": "healthy", "version": __version__}


if __name__ == "__main__":
    uvicorn.run(app, host=settings.host, port=settings.port)
