"""
FOCUS billing record builder.

Maps estimator output to FOCUS columns. Public list prices carry no discounts,
commitments or credits, so billed, effective and list cost are always equal.
"""
from datetime import datetime
from types import MappingProxyType
from typing import Mapping, Optional

from awscost.domain.cost_models import BillingRecord, CostEstimate, ServiceCategory


SERVICE_NAMES: Mapping[str, str] = MappingProxyType({
    "ec2": "Amazon EC2",
    "ebs": "Amazon EBS",
    "s3": "Amazon S3",
    "rds": "Amazon RDS",
    "lambda": "AWS Lambda",
    "dynamodb": "Amazon DynamoDB",
    "eks": "Amazon EKS",
    "elb": "Elastic Load Balancing",
    "natgw": "Amazon VPC NAT Gateway",
    "cloudwatch": "Amazon CloudWatch",
    "elasticache": "Amazon ElastiCache",
})

SERVICE_CATEGORIES: Mapping[str, ServiceCategory] = MappingProxyType({
    "ec2": ServiceCategory.COMPUTE,
    "lambda": ServiceCategory.COMPUTE,
    "eks": ServiceCategory.COMPUTE,
    "ebs": ServiceCategory.STORAGE,
    "s3": ServiceCategory.STORAGE,
    "rds": ServiceCategory.DATABASE,
    "dynamodb": ServiceCategory.DATABASE,
    "elasticache": ServiceCategory.DATABASE,
    "elb": ServiceCategory.NETWORK,
    "natgw": ServiceCategory.NETWORK,
    "cloudwatch": ServiceCategory.MANAGEMENT,
})

PRICING_UNITS: Mapping[str, str] = MappingProxyType({
    "ec2": "Hours",
    "rds": "Hours",
    "eks": "Hours",
    "elb": "Hours",
    "alb": "Hours",
    "nlb": "Hours",
    "natgw": "Hours",
    "elasticache": "Hours",
    "ebs": "GB-Mo",
    "s3": "GB-Mo",
    "lambda": "GB-Seconds",
    "dynamodb": "Requests",
    "cloudwatch": "GB",
})
DEFAULT_PRICING_UNIT = "Units"

CHARGE_CATEGORY = "Usage"
CHARGE_CLASS = "Regular"
CHARGE_FREQUENCY = "Usage-Based"
PRICING_CATEGORY = "Standard"
BILLING_CURRENCY = "USD"
SERVICE_PROVIDER_NAME = "AWS"


def get_service_name(service: str) -> str:
    return SERVICE_NAMES.get(service, f"AWS {service}")


def get_service_category(service: str) -> ServiceCategory:
    return SERVICE_CATEGORIES.get(service, ServiceCategory.OTHER)


def get_pricing_unit(service: str) -> str:
    return PRICING_UNITS.get(service, DEFAULT_PRICING_UNIT)


def build_billing_record(
    service: str,
    resource_type: str,
    region: str,
    cost: float,
    unit_price: float,
    pricing_unit: str,
    period_start: datetime,
    period_end: datetime,
    sku: str,
) -> BillingRecord:
    """
    Build a FOCUS-aligned billing record.

    Args:
        service: Canonical service key (selects category and display name)
        resource_type: Resource type string as supplied by the caller
        region: AWS region code
        cost: Cost for the charge period
        unit_price: List unit price
        pricing_unit: Unit of the list price; empty selects the service default
        period_start: Charge period start
        period_end: Charge period end
        sku: SKU the price was looked up for

    Returns:
        Immutable BillingRecord; equal inputs produce equal records
    """
    service_name = get_service_name(service)
    return BillingRecord(
        billed_cost=cost,
        effective_cost=cost,
        list_cost=cost,
        list_unit_price=unit_price,
        service_category=get_service_category(service),
        service_name=service_name,
        charge_category=CHARGE_CATEGORY,
        charge_class=CHARGE_CLASS,
        charge_frequency=CHARGE_FREQUENCY,
        pricing_category=PRICING_CATEGORY,
        pricing_unit=pricing_unit or get_pricing_unit(service),
        charge_period_start=period_start,
        charge_period_end=period_end,
        region_id=region,
        billing_currency=BILLING_CURRENCY,
        resource_type=resource_type,
        sku_id=sku,
        service_provider_name=SERVICE_PROVIDER_NAME,
        charge_description=f"Public pricing estimate for {service_name} in {region}",
    )


def billing_record_for_estimate(
    estimate: CostEstimate,
    period_start: datetime,
    period_end: datetime,
    cost: Optional[float] = None,
) -> BillingRecord:
    """Build a billing record from a CostEstimate. cost defaults to the monthly cost."""
    return build_billing_record(
        service=estimate.service,
        resource_type=estimate.resource_type,
        region=estimate.region,
        cost=estimate.monthly_cost_usd if cost is None else cost,
        unit_price=estimate.unit_price,
        pricing_unit=estimate.pricing_unit,
        period_start=period_start,
        period_end=period_end,
        sku=estimate.sku,
    )
