"""
Main FastAPI application bootstrap.
Configures logging, middleware and includes routers.
"""
import logging
from typing import Dict

from fastapi import FastAPI

from infrasizing.core.config import config
from infrasizing.api.sizing import router as sizing_router
from infrasizing.api.costs import router as costs_router
from infrasizing.api.growth import router as growth_router
from infrasizing.api.catalog import router as catalog_router
from infrasizing.middleware.request_size_limiter import RequestSizeLimiterMiddleware


logger = logging.getLogger(__name__)

# Validate configuration on startup
try:
    config.validate()
except ValueError as error:
    raise RuntimeError(f"Configuration error: {error}") from error

logging.basicConfig(
    level=config.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger.info(
    "Pricing defaults: currency=%s, provider=%s, region=%s",
    config.CURRENCY,
    config.DEFAULT_PROVIDER,
    config.DEFAULT_REGION
)


app = FastAPI(
    title="Infrastructure Sizing Calculator",
    description="Node sizing, cost estimation and growth projection for container platforms and VM fleets",
)

# Reject oversized payloads before they reach the engine
app.add_middleware(RequestSizeLimiterMiddleware)

# Include routers
app.include_router(sizing_router)
app.include_router(costs_router)
app.include_router(growth_router)
app.include_router(catalog_router)


@app.get("/health")
async def health() -> Dict[str, str]:
    """Liveness check."""
    return {"status": "ok"}
