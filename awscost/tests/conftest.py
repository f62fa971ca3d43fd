"""
Shared pytest fixtures for awscost tests.
"""

import sys
import os
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent.parent
sys.path.insert(0, str(project_root))

# Pin configuration before awscost.core.config is imported
os.environ.setdefault('AWSCOST_REGION', 'us-east-1')
os.environ.setdefault('AWSCOST_PRICING_SOURCE', 'static')
os.environ.setdefault('AWSCOST_LOG_LEVEL', 'WARNING')

import pytest
from fastapi.testclient import TestClient

from awscost.main import app
from awscost.pricing.base import PriceQuote, PricingClient
from awscost.pricing.static_pricing import StaticPricingClient
from awscost.services.cost_estimator import CostEstimator
from awscost.services.recommendations import RecommendationEngine
from awscost.services.resource_types import build_resource


class FakePricingClient(PricingClient):
    """Pricing client serving a fixed {(service, sku): price} table, ignoring attributes."""

    def __init__(self, prices=None):
        self.prices = dict(prices or {})
        self.calls = []

    def lookup(self, service, sku, region, attributes=None):
        self.calls.append((service, sku, region, attributes))
        price = self.prices.get((service, sku))
        if price is None:
            return PriceQuote.unavailable()
        return PriceQuote(price, "Hrs")


@pytest.fixture
def client():
    """FastAPI test client."""
    app.dependency_overrides.clear()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def static_pricing():
    """Built-in rate card client."""
    return StaticPricingClient()


@pytest.fixture
def estimator(static_pricing):
    """Cost estimator for us-east-1 backed by static prices."""
    return CostEstimator(static_pricing, region='us-east-1')


@pytest.fixture
def recommendation_engine(static_pricing):
    """Recommendation engine for us-east-1 backed by static prices."""
    return RecommendationEngine(static_pricing, region='us-east-1')


@pytest.fixture
def fake_pricing():
    """Empty fake pricing client; tests fill in prices."""
    return FakePricingClient()


@pytest.fixture
def make_resource():
    """Factory for normalized AWS resources in us-east-1."""
    def _make(resource_type, sku='', region='us-east-1', tags=None, **kwargs):
        return build_resource('aws', resource_type, sku=sku, region=region, tags=tags, **kwargs)
    return _make
