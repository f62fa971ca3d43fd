"""
AWS Bulk Pricing Client.
Reads from locally cached AWS Price List Bulk API offer files.

Offer files are fetched with awscost.pricing.offer_sync:

    awscost-sync-pricing --out pricing-cache/aws --services AmazonEC2,AmazonRDS --regions us-east-1

Lookups for services without offer-file indexing (Lambda, DynamoDB, ...) or
products missing from the files go to the fallback client.
"""
import json
import gzip
import logging
from pathlib import Path
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from awscost.pricing.base import PriceQuote, PricingClient, build_lookup_key


logger = logging.getLogger(__name__)


# Canonical service key -> offer file service code
SERVICE_CODES: Dict[str, str] = {
    "ec2": "AmazonEC2",
    "ebs": "AmazonEC2",
    "rds": "AmazonRDS",
    "elasticache": "AmazonElastiCache",
}

# Offer file "volumeType" for RDS storage -> API storage type
RDS_STORAGE_VOLUME_TYPES: Dict[str, str] = {
    "General Purpose": "gp2",
    "General Purpose-GP3": "gp3",
    "Provisioned IOPS": "io1",
    "Provisioned IOPS-IO2": "io2",
    "Magnetic": "standard",
}


class AWSBulkPricingError(Exception):
    """Raised when bulk pricing lookup fails."""
    pass


def _on_demand_dimensions(terms: Dict[str, Any], sku: str) -> Iterator[Tuple[float, str]]:
    """Yield (USD price, unit) for every OnDemand price dimension of a SKU."""
    for term_data in terms.get(sku, {}).values():
        for dimension in term_data.get("priceDimensions", {}).values():
            price_per_unit = dimension.get("pricePerUnit", {}).get("USD")
            if not price_per_unit:
                continue
            try:
                yield float(price_per_unit), dimension.get("unit", "")
            except (TypeError, ValueError):
                continue


def _ec2_instance_key(attributes: Dict[str, str]) -> Optional[str]:
    if attributes.get("productFamily") not in (None, "Compute Instance"):
        return None
    instance_type = attributes.get("instanceType", "")
    os_name = attributes.get("operatingSystem", "")
    tenancy = attributes.get("tenancy", "")
    # Plain images only, so "Linux with SQL" SKUs never shadow generic Linux
    if attributes.get("preInstalledSw", "NA") not in ("NA", ""):
        return None
    if attributes.get("capacitystatus", "Used").lower() != "used":
        return None
    if os_name not in ("Linux", "Windows") or attributes.get("licenseModel", "No License required") not in (
        "No License required", "License Included"
    ):
        return None
    if not (instance_type and tenancy):
        return None
    return build_lookup_key("ec2", instance_type, {"operatingSystem": os_name, "tenancy": tenancy})


def _ebs_volume_key(attributes: Dict[str, str]) -> Optional[str]:
    if attributes.get("productFamily") != "Storage":
        return None
    volume_type = attributes.get("volumeApiName", "")
    if not volume_type:
        return None
    return build_lookup_key("ebs", volume_type)


def _rds_key(attributes: Dict[str, str]) -> Optional[str]:
    family = attributes.get("productFamily", "")
    if family == "Database Storage":
        if attributes.get("deploymentOption", "Single-AZ") != "Single-AZ":
            return None
        storage_type = RDS_STORAGE_VOLUME_TYPES.get(attributes.get("volumeType", ""))
        if not storage_type:
            return None
        return build_lookup_key("rds", storage_type, {"component": "storage"})

    instance_type = attributes.get("instanceType", "")
    engine = attributes.get("databaseEngine", "")
    deployment = attributes.get("deploymentOption", "")
    if not (instance_type and engine and deployment):
        return None
    return build_lookup_key(
        "rds", instance_type, {"databaseEngine": engine, "deploymentOption": deployment}
    )


def _elasticache_key(attributes: Dict[str, str]) -> Optional[str]:
    node_type = attributes.get("instanceType", "")
    engine = attributes.get("cacheEngine", "")
    if not (node_type and engine):
        return None
    return build_lookup_key("elasticache", node_type, {"cacheEngine": engine})


PRODUCT_INDEXERS: Dict[str, Tuple[Callable[[Dict[str, str]], Optional[str]], ...]] = {
    "AmazonEC2": (_ec2_instance_key, _ebs_volume_key),
    "AmazonRDS": (_rds_key,),
    "AmazonElastiCache": (_elasticache_key,),
}


class AWSBulkPricingClient(PricingClient):
    """
    Client for reading AWS pricing from cached bulk offer files.

    Expects directory structure:
        pricing-cache/aws/
            AmazonEC2/
                us-east-1.json.gz
                ...
            AmazonRDS/
                ...
    """

    def __init__(self, cache_dir: str = "pricing-cache/aws", fallback: Optional[PricingClient] = None):
        """
        Initialize bulk pricing client.

        Args:
            cache_dir: Path to pricing cache directory
            fallback: Client consulted when the offer files have no matching product

        Raises:
            AWSBulkPricingError: If the cache directory does not exist
        """
        self.cache_dir = Path(cache_dir)
        if not self.cache_dir.exists():
            raise AWSBulkPricingError(
                f"Pricing cache directory not found: {cache_dir}. "
                f"Run: awscost-sync-pricing --out {cache_dir}"
            )
        self.fallback = fallback

        # (service_code, region) -> {lookup_key: PriceQuote}
        self._price_index: Dict[Tuple[str, str], Dict[str, PriceQuote]] = {}

    def _load_offer_file(self, service_code: str, region_code: str) -> Optional[Dict[str, Any]]:
        """
        Load and parse an offer file for a service/region.

        Returns:
            Parsed offer file data, or None if not found or unreadable
        """
        json_path = self.cache_dir / service_code / f"{region_code}.json.gz"
        if not json_path.exists():
            json_path = self.cache_dir / service_code / f"{region_code}.json"
            if not json_path.exists():
                logger.warning("Offer file not found: %s", json_path)
                return None

        try:
            if json_path.suffix == ".gz":
                with gzip.open(json_path, "rt", encoding="utf-8") as f:
                    return json.load(f)
            with open(json_path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (json.JSONDecodeError, OSError, gzip.BadGzipFile) as e:
            logger.error("Error loading offer file %s: %s", json_path, e)
            return None

    def _index_offer_file(self, service_code: str, offer_data: Dict[str, Any]) -> Dict[str, PriceQuote]:
        """
        Build a lookup index for one offer file.

        When several products map to the same key the lowest price wins.
        """
        products = offer_data.get("products", {})
        terms = offer_data.get("terms", {}).get("OnDemand", {})
        indexers = PRODUCT_INDEXERS.get(service_code, ())

        index: Dict[str, PriceQuote] = {}
        for sku, product in products.items():
            attributes = dict(product.get("attributes", {}))
            if "productFamily" in product:
                attributes.setdefault("productFamily", product["productFamily"])
            for indexer in indexers:
                lookup_key = indexer(attributes)
                if lookup_key is None:
                    continue
                for price, unit in _on_demand_dimensions(terms, sku):
                    existing = index.get(lookup_key)
                    if existing is None or price < existing.unit_price:
                        index[lookup_key] = PriceQuote(price, unit)
        return index

    def _get_index(self, service_code: str, region_code: str) -> Dict[str, PriceQuote]:
        cache_key = (service_code, region_code)
        if cache_key not in self._price_index:
            offer_data = self._load_offer_file(service_code, region_code)
            index = self._index_offer_file(service_code, offer_data) if offer_data else {}
            logger.debug("Indexed %d prices for %s/%s", len(index), service_code, region_code)
            self._price_index[cache_key] = index
        return self._price_index[cache_key]

    def lookup(
        self,
        service: str,
        sku: str,
        region: str,
        attributes: Optional[Dict[str, str]] = None,
    ) -> PriceQuote:
        service_code = SERVICE_CODES.get(service)
        if service_code:
            quote = self._get_index(service_code, region).get(build_lookup_key(service, sku, attributes))
            if quote is not None:
                return quote
        if self.fallback is not None:
            return self.fallback.lookup(service, sku, region, attributes)
        return PriceQuote.unavailable()

    def get_offer_publication_date(self, service_code: str, region_code: str) -> Optional[str]:
        """Publication date recorded in an offer file, or None if not found."""
        offer_data = self._load_offer_file(service_code, region_code)
        if not offer_data:
            return None
        return offer_data.get("publicationDate")
