"""
Shared service instances for API routes.

Routes receive these through FastAPI's Depends so tests can substitute a fake
pricing client with app.dependency_overrides.
"""
from functools import lru_cache

from awscost.core.config import config
from awscost.pricing.base import PricingClient
from awscost.pricing.factory import create_pricing_client
from awscost.services.cost_estimator import CostEstimator
from awscost.services.recommendations import RecommendationEngine


@lru_cache(maxsize=1)
def get_pricing_client() -> PricingClient:
    return create_pricing_client()


def get_cost_estimator() -> CostEstimator:
    return CostEstimator(get_pricing_client(), region=config.AWS_REGION)


def get_recommendation_engine() -> RecommendationEngine:
    return RecommendationEngine(get_pricing_client(), region=config.AWS_REGION)
