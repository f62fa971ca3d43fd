"""
Pricing client selection.
"""
import logging

from awscost.core.config import config
from awscost.pricing.base import PricingClient
from awscost.pricing.static_pricing import StaticPricingClient


logger = logging.getLogger(__name__)


def create_pricing_client() -> PricingClient:
    """
    Build the pricing client configured by AWSCOST_PRICING_SOURCE.

    "bulk" reads offer files from AWSCOST_PRICING_CACHE_DIR and "api" queries
    the Price List API; both fall back to the static rate card. A missing
    offer cache downgrades to the static client with a warning.
    """
    static_client = StaticPricingClient()

    if config.PRICING_SOURCE == "bulk":
        from awscost.pricing.aws_bulk_pricing import AWSBulkPricingClient, AWSBulkPricingError
        try:
            return AWSBulkPricingClient(cache_dir=config.PRICING_CACHE_DIR, fallback=static_client)
        except AWSBulkPricingError as error:
            logger.warning("Bulk pricing unavailable, using static prices: %s", error)
            return static_client

    if config.PRICING_SOURCE == "api":
        from awscost.pricing.aws_pricing_client import AWSPricingClient
        return AWSPricingClient(fallback=static_client)

    return static_client
