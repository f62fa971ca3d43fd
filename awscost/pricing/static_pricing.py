"""
Static on-demand price table.

Published public list prices for the US regions that share the us-east-1 rate
card. Used as the default pricing source and as the fallback behind the
offer-file and Price List API clients.
"""
import logging
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from awscost.pricing.base import PriceQuote, PricingClient, build_lookup_key


logger = logging.getLogger(__name__)


# Regions billed at the us-east-1 rate card for every service below
STATIC_PRICED_REGIONS = frozenset({"us-east-1", "us-east-2", "us-west-2"})

# EC2 on-demand hourly, Linux / shared tenancy
EC2_LINUX_HOURLY: Dict[str, float] = {
    "t2.micro": 0.0116, "t2.small": 0.023, "t2.medium": 0.0464, "t2.large": 0.0928,
    "t3.nano": 0.0052, "t3.micro": 0.0104, "t3.small": 0.0208, "t3.medium": 0.0416,
    "t3.large": 0.0832, "t3.xlarge": 0.1664, "t3.2xlarge": 0.3328,
    "t3a.micro": 0.0094, "t3a.small": 0.0188, "t3a.medium": 0.0376, "t3a.large": 0.0752,
    "t4g.micro": 0.0084, "t4g.small": 0.0168, "t4g.medium": 0.0336, "t4g.large": 0.0672,
    "m4.large": 0.10, "m4.xlarge": 0.20,
    "m5.large": 0.096, "m5.xlarge": 0.192, "m5.2xlarge": 0.384,
    "m6i.large": 0.096, "m6i.xlarge": 0.192, "m6i.2xlarge": 0.384,
    "m6g.large": 0.077, "m6g.xlarge": 0.154,
    "m7i.large": 0.1008, "m7g.large": 0.0816,
    "c4.large": 0.10, "c5.large": 0.085, "c5.xlarge": 0.17,
    "c6i.large": 0.085, "c6i.xlarge": 0.17, "c6g.large": 0.068, "c6g.xlarge": 0.136,
    "c7i.large": 0.08925, "c7g.large": 0.0725,
    "r4.large": 0.133, "r5.large": 0.126, "r5.xlarge": 0.252,
    "r6i.large": 0.126, "r6g.large": 0.1008, "r7i.large": 0.1323, "r7g.large": 0.1071,
}

EC2_WINDOWS_HOURLY: Dict[str, float] = {
    "t2.micro": 0.0162, "t2.medium": 0.0644,
    "t3.micro": 0.0196, "t3.small": 0.0392, "t3.medium": 0.0600, "t3.large": 0.1108,
    "m5.large": 0.188, "m5.xlarge": 0.376,
    "c5.large": 0.177, "r5.large": 0.218,
}

# Dedicated tenancy surcharge is modeled only for the general purpose families
EC2_DEDICATED_LINUX_HOURLY: Dict[str, float] = {
    "m5.large": 0.106, "m5.xlarge": 0.211,
    "c5.large": 0.094, "r5.large": 0.139,
}

EBS_GB_MONTH: Dict[str, float] = {
    "gp2": 0.10, "gp3": 0.08, "io1": 0.125, "io2": 0.125,
    "st1": 0.045, "sc1": 0.015, "standard": 0.05,
}

S3_GB_MONTH: Dict[str, float] = {
    "STANDARD": 0.023, "INTELLIGENT_TIERING": 0.023, "STANDARD_IA": 0.0125,
    "ONEZONE_IA": 0.01, "GLACIER_IR": 0.004, "GLACIER": 0.0036, "DEEP_ARCHIVE": 0.00099,
}

# RDS single-AZ hourly by engine (pricing API engine names)
RDS_HOURLY: Dict[str, Dict[str, float]] = {
    "MySQL": {
        "db.t2.micro": 0.017, "db.t2.small": 0.034,
        "db.t3.micro": 0.017, "db.t3.small": 0.034, "db.t3.medium": 0.068, "db.t3.large": 0.136,
        "db.t4g.micro": 0.016, "db.t4g.small": 0.032, "db.t4g.medium": 0.065, "db.t4g.large": 0.129,
        "db.m4.large": 0.175, "db.m5.large": 0.171, "db.m5.xlarge": 0.342,
        "db.m6i.large": 0.171, "db.m6g.large": 0.152, "db.m7i.large": 0.18, "db.m7g.large": 0.168,
        "db.r4.large": 0.24, "db.r5.large": 0.25, "db.r6i.large": 0.25, "db.r6g.large": 0.225,
        "db.r7g.large": 0.239,
    },
    "PostgreSQL": {
        "db.t3.micro": 0.018, "db.t3.small": 0.036, "db.t3.medium": 0.072, "db.t3.large": 0.145,
        "db.t4g.micro": 0.016, "db.t4g.medium": 0.065,
        "db.m5.large": 0.178, "db.m6i.large": 0.178, "db.m6g.large": 0.159, "db.m7g.large": 0.175,
        "db.r5.large": 0.26, "db.r6i.large": 0.26, "db.r6g.large": 0.239,
    },
    "MariaDB": {
        "db.t3.micro": 0.017, "db.t3.medium": 0.068, "db.t4g.medium": 0.065,
        "db.m5.large": 0.171, "db.m6g.large": 0.152, "db.r5.large": 0.25,
    },
    "SQL Server": {
        "db.t3.small": 0.044, "db.m5.large": 0.977, "db.r5.large": 1.04,
    },
}

RDS_STORAGE_GB_MONTH: Dict[str, float] = {
    "gp2": 0.115, "gp3": 0.115, "io1": 0.125, "io2": 0.125, "standard": 0.10,
}

ELASTICACHE_HOURLY: Dict[str, float] = {
    "cache.t3.micro": 0.017, "cache.t3.small": 0.034, "cache.t3.medium": 0.068,
    "cache.t4g.micro": 0.016, "cache.t4g.small": 0.032, "cache.t4g.medium": 0.065,
    "cache.m5.large": 0.156, "cache.m6g.large": 0.149,
    "cache.r5.large": 0.216, "cache.r6g.large": 0.206,
}

# (service, component/sku, attributes) -> (unit price, unit)
COMPONENT_PRICES: Tuple[Tuple[str, str, Optional[Dict[str, str]], float, str], ...] = (
    ("eks", "standard", None, 0.10, "Hrs"),
    ("eks", "extended", None, 0.60, "Hrs"),
    ("lambda", "requests", None, 0.0000002, "Requests"),
    ("lambda", "duration", {"architecture": "x86_64"}, 0.0000166667, "GB-Second"),
    ("lambda", "duration", {"architecture": "arm64"}, 0.0000133334, "GB-Second"),
    ("dynamodb", "rcu", None, 0.00013, "ReadCapacityUnit-Hrs"),
    ("dynamodb", "wcu", None, 0.00065, "WriteCapacityUnit-Hrs"),
    ("dynamodb", "read_request", None, 0.00000025, "ReadRequestUnits"),
    ("dynamodb", "write_request", None, 0.00000125, "WriteRequestUnits"),
    ("dynamodb", "storage", None, 0.25, "GB-Mo"),
    ("elb", "alb", {"component": "hourly"}, 0.0225, "Hrs"),
    ("elb", "alb", {"component": "capacity_unit"}, 0.008, "LCU-Hrs"),
    ("elb", "nlb", {"component": "hourly"}, 0.0225, "Hrs"),
    ("elb", "nlb", {"component": "capacity_unit"}, 0.006, "NLCU-Hrs"),
    ("natgw", "hourly", None, 0.045, "Hrs"),
    ("natgw", "data_processed", None, 0.045, "GB"),
    ("cloudwatch", "log_ingestion", None, 0.50, "GB"),
    ("cloudwatch", "log_storage", None, 0.03, "GB-Mo"),
    ("cloudwatch", "custom_metrics", None, 0.30, "Metrics"),
)


def _build_index() -> Mapping[str, PriceQuote]:
    index: Dict[str, PriceQuote] = {}

    for instance_type, price in EC2_LINUX_HOURLY.items():
        key = build_lookup_key("ec2", instance_type, {"operatingSystem": "Linux", "tenancy": "Shared"})
        index[key] = PriceQuote(price, "Hrs")
    for instance_type, price in EC2_WINDOWS_HOURLY.items():
        key = build_lookup_key("ec2", instance_type, {"operatingSystem": "Windows", "tenancy": "Shared"})
        index[key] = PriceQuote(price, "Hrs")
    for instance_type, price in EC2_DEDICATED_LINUX_HOURLY.items():
        key = build_lookup_key("ec2", instance_type, {"operatingSystem": "Linux", "tenancy": "Dedicated"})
        index[key] = PriceQuote(price, "Hrs")

    for volume_type, price in EBS_GB_MONTH.items():
        index[build_lookup_key("ebs", volume_type)] = PriceQuote(price, "GB-Mo")
    for storage_class, price in S3_GB_MONTH.items():
        index[build_lookup_key("s3", storage_class)] = PriceQuote(price, "GB-Mo")

    for engine, prices in RDS_HOURLY.items():
        for instance_type, price in prices.items():
            key = build_lookup_key(
                "rds", instance_type, {"databaseEngine": engine, "deploymentOption": "Single-AZ"}
            )
            index[key] = PriceQuote(price, "Hrs")
    for storage_type, price in RDS_STORAGE_GB_MONTH.items():
        index[build_lookup_key("rds", storage_type, {"component": "storage"})] = PriceQuote(price, "GB-Mo")

    # Redis and Memcached share node pricing
    for engine in ("Redis", "Memcached"):
        for node_type, price in ELASTICACHE_HOURLY.items():
            key = build_lookup_key("elasticache", node_type, {"cacheEngine": engine})
            index[key] = PriceQuote(price, "Hrs")

    for service, sku, attributes, price, unit in COMPONENT_PRICES:
        index[build_lookup_key(service, sku, attributes)] = PriceQuote(price, unit)

    return MappingProxyType(index)


STATIC_PRICE_INDEX = _build_index()


class StaticPricingClient(PricingClient):
    """Pricing client backed by the built-in rate card."""

    def __init__(self, price_index: Optional[Mapping[str, PriceQuote]] = None,
                 regions: Optional[frozenset] = None):
        self._index = price_index if price_index is not None else STATIC_PRICE_INDEX
        self._regions = regions if regions is not None else STATIC_PRICED_REGIONS

    def lookup(
        self,
        service: str,
        sku: str,
        region: str,
        attributes: Optional[Dict[str, str]] = None,
    ) -> PriceQuote:
        if region not in self._regions:
            logger.debug("Static price table has no rates for region %s", region)
            return PriceQuote.unavailable()
        quote = self._index.get(build_lookup_key(service, sku, attributes))
        if quote is None:
            return PriceQuote.unavailable()
        return quote
