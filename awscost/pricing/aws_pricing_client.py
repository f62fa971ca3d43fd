"""
AWS Pricing API client.
Uses boto3 to query the official AWS Price List API.
"""
from typing import Any, Dict, List, Optional, Tuple
import json
import logging
from datetime import datetime, timedelta

import boto3
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from awscost.core.config import config
from awscost.pricing.aws_bulk_pricing import RDS_STORAGE_VOLUME_TYPES, SERVICE_CODES
from awscost.pricing.aws_region_map import get_aws_pricing_location
from awscost.pricing.base import PriceQuote, PricingClient, build_lookup_key


logger = logging.getLogger(__name__)

_RDS_VOLUME_TYPE_NAMES = {api: name for name, api in RDS_STORAGE_VOLUME_TYPES.items()}


class AWSPricingError(Exception):
    """Raised when AWS pricing lookup fails."""
    pass


def _term_match(field: str, value: str) -> Dict[str, str]:
    return {"Type": "TERM_MATCH", "Field": field, "Value": value}


def build_product_filters(
    service: str,
    sku: str,
    location: str,
    attributes: Optional[Dict[str, str]] = None,
) -> Optional[List[Dict[str, str]]]:
    """
    Build get_products filters for a canonical service lookup.

    Returns:
        Filter list, or None if the service is not queried through the API
    """
    attributes = attributes or {}
    filters = [_term_match("location", location)]

    if service == "ec2":
        filters += [
            _term_match("instanceType", sku),
            _term_match("operatingSystem", attributes.get("operatingSystem", "Linux")),
            _term_match("tenancy", attributes.get("tenancy", "Shared")),
            _term_match("preInstalledSw", "NA"),
            _term_match("capacitystatus", "Used"),
        ]
    elif service == "ebs":
        filters += [
            _term_match("productFamily", "Storage"),
            _term_match("volumeApiName", sku),
        ]
    elif service == "rds" and attributes.get("component") == "storage":
        volume_type = _RDS_VOLUME_TYPE_NAMES.get(sku)
        if volume_type is None:
            return None
        filters += [
            _term_match("productFamily", "Database Storage"),
            _term_match("volumeType", volume_type),
            _term_match("deploymentOption", "Single-AZ"),
        ]
    elif service == "rds":
        filters += [
            _term_match("instanceType", sku),
            _term_match("databaseEngine", attributes.get("databaseEngine", "MySQL")),
            _term_match("deploymentOption", attributes.get("deploymentOption", "Single-AZ")),
        ]
    elif service == "elasticache":
        filters += [
            _term_match("instanceType", sku),
            _term_match("cacheEngine", attributes.get("cacheEngine", "Redis")),
        ]
    else:
        return None
    return filters


def parse_on_demand_price(price_item: str) -> Optional[Tuple[float, str]]:
    """
    Extract the first OnDemand USD price and its unit from a PriceList entry.

    Args:
        price_item: JSON string from the get_products PriceList

    Returns:
        Tuple of (price, unit), or None if the entry has no OnDemand price
    """
    price_data = json.loads(price_item)
    terms = price_data.get("terms", {}).get("OnDemand", {})
    for term in terms.values():
        for dimension in term.get("priceDimensions", {}).values():
            price_per_unit = dimension.get("pricePerUnit", {}).get("USD")
            if price_per_unit:
                return float(price_per_unit), dimension.get("unit", "")
    return None


class AWSPricingClient(PricingClient):
    """Client for querying AWS pricing using boto3."""

    def __init__(self, fallback: Optional[PricingClient] = None, pricing_client: Any = None):
        """
        Initialize AWS pricing client.

        Args:
            fallback: Client consulted for services the API client does not query
            pricing_client: Pre-built boto3 pricing client (tests)
        """
        if pricing_client is None:
            boto_config = Config(
                connect_timeout=10,
                read_timeout=10,
                retries={"max_attempts": 2},
            )
            pricing_client = boto3.client(
                "pricing",
                region_name=config.AWS_PRICING_REGION,
                config=boto_config,
            )
        self.pricing_client = pricing_client
        self.fallback = fallback
        self.cache_ttl = timedelta(seconds=config.PRICING_CACHE_TTL_SECONDS)
        # lookup key -> (quote, cached_at)
        self._cache: Dict[str, Tuple[PriceQuote, datetime]] = {}

    def _get_cached(self, cache_key: str) -> Optional[PriceQuote]:
        """Get cached quote if still valid."""
        # Batch lookups share this cache across worker threads
        entry = self._cache.get(cache_key)
        if entry is None:
            return None
        quote, timestamp = entry
        if datetime.now() - timestamp < self.cache_ttl:
            return quote
        self._cache.pop(cache_key, None)
        return None

    def lookup(
        self,
        service: str,
        sku: str,
        region: str,
        attributes: Optional[Dict[str, str]] = None,
    ) -> PriceQuote:
        """
        Look up a price with get_products.

        Raises:
            AWSPricingError: If the API call fails or returns an unparseable price
        """
        location = get_aws_pricing_location(region)
        if location is None:
            logger.warning("AWS region code '%s' not found in region map", region)
            return PriceQuote.unavailable()

        filters = build_product_filters(service, sku, location, attributes)
        if filters is None:
            if self.fallback is not None:
                return self.fallback.lookup(service, sku, region, attributes)
            return PriceQuote.unavailable()

        cache_key = build_lookup_key(service, sku, attributes) + f"|{region}"
        cached = self._get_cached(cache_key)
        if cached is not None:
            return cached

        try:
            response = self.pricing_client.get_products(
                ServiceCode=SERVICE_CODES[service],
                Filters=filters,
                MaxResults=10,
            )
            quote = PriceQuote.unavailable()
            for item in response.get("PriceList", []):
                parsed = parse_on_demand_price(item)
                if parsed is not None and (not quote.available or parsed[0] < quote.unit_price):
                    quote = PriceQuote(parsed[0], parsed[1])
        except ClientError as error:
            logger.error("AWS pricing API error: %s", error)
            raise AWSPricingError(f"Failed to query AWS pricing: {error}") from error
        except (BotoCoreError, ValueError, KeyError) as error:
            logger.error("Error parsing AWS pricing response: %s", error)
            raise AWSPricingError(f"Failed to parse AWS pricing response: {error}") from error

        if quote.available:
            self._cache[cache_key] = (quote, datetime.now())
        elif self.fallback is not None:
            return self.fallback.lookup(service, sku, region, attributes)
        return quote
