"""
Main FastAPI application bootstrap.
Configures logging and includes routers.
"""
import logging

from fastapi import FastAPI

from awscost.core.config import config
from awscost.api.costs import router as costs_router
from awscost.api.recommendations import router as recommendations_router


logging.basicConfig(
    level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

# Validate configuration on startup
try:
    config.validate()
except ValueError as error:
    raise RuntimeError(f"Configuration error: {error}") from error

logger.info(
    "AWS public pricing estimator for region=%s, pricing_source=%s",
    config.AWS_REGION,
    config.PRICING_SOURCE,
)


app = FastAPI(
    title="AWS Cost Estimation",
    description="Projected and actual cost estimates from AWS public pricing",
)

# Include routers
app.include_router(costs_router)
app.include_router(recommendations_router)


@app.get("/health")
async def health() -> dict:
    """Health check endpoint."""
    return {"status": "ok", "region": config.AWS_REGION}
