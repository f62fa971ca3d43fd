"""
Resource type normalization.

Maps Pulumi type tokens (aws:ec2/instance:Instance), Terraform resource types
(aws_instance), ARNs and canonical keys to the short service key used by the
classification table, the estimator and the billing record builder.
"""
import re
from typing import Dict, Optional

from awscost.domain.cost_models import NormalizedResource
from awscost.services.arn_parser import looks_like_arn, parse_arn


# Services with a dedicated pricing formula
PRICED_SERVICES = (
    "ec2", "ebs", "rds", "s3", "lambda", "dynamodb",
    "eks", "elb", "natgw", "cloudwatch", "elasticache",
)

# Recognized services without a dedicated pricing formula yet
UNMODELED_SERVICES = (
    "sqs", "sns", "route53", "cloudfront", "efs", "ecr",
    "kms", "apigateway", "secretsmanager",
)

# Resources that exist but carry no direct AWS charge
ZERO_COST_SERVICES = ("vpc", "securitygroup", "subnet", "iam")

# Pulumi path prefixes (after "aws:") for zero-cost networking resources.
# Must match a whole path segment: "ec2/vpc" matches "ec2/vpc:Vpc" but not "ec2/vpcEndpoint".
ZERO_COST_PULUMI_PATTERNS: Dict[str, str] = {
    "ec2/vpc": "vpc",
    "ec2/securitygroup": "securitygroup",
    "ec2/subnet": "subnet",
}

PULUMI_SERVICE_ALIASES: Dict[str, str] = {
    "lb": "elb",
    "alb": "elb",
    "nlb": "elb",
    "natgateway": "natgw",
}

TERRAFORM_TYPE_MAP: Dict[str, str] = {
    "aws_instance": "ec2",
    "aws_ebs_volume": "ebs",
    "aws_db_instance": "rds",
    "aws_s3_bucket": "s3",
    "aws_lambda_function": "lambda",
    "aws_dynamodb_table": "dynamodb",
    "aws_eks_cluster": "eks",
    "aws_lb": "elb",
    "aws_alb": "elb",
    "aws_elb": "elb",
    "aws_nat_gateway": "natgw",
    "aws_cloudwatch_log_group": "cloudwatch",
    "aws_cloudwatch_metric_alarm": "cloudwatch",
    "aws_elasticache_cluster": "elasticache",
    "aws_elasticache_replication_group": "elasticache",
    "aws_vpc": "vpc",
    "aws_security_group": "securitygroup",
    "aws_subnet": "subnet",
    "aws_sqs_queue": "sqs",
    "aws_sns_topic": "sns",
    "aws_route53_zone": "route53",
    "aws_cloudfront_distribution": "cloudfront",
    "aws_efs_file_system": "efs",
    "aws_ecr_repository": "ecr",
    "aws_kms_key": "kms",
    "aws_api_gateway_rest_api": "apigateway",
    "aws_secretsmanager_secret": "secretsmanager",
}

# Substring fallbacks for legacy type strings that normalization did not catch
LEGACY_TYPE_PATTERNS = (
    ("ec2/instance", "ec2"),
    ("ebs/volume", "ebs"),
    ("ec2/volume", "ebs"),
    ("rds/instance", "rds"),
    ("eks/cluster", "eks"),
    ("s3/bucket", "s3"),
    ("lambda/function", "lambda"),
    ("dynamodb/table", "dynamodb"),
    ("alb/loadbalancer", "elb"),
    ("nlb/loadbalancer", "elb"),
    ("lb/loadbalancer", "elb"),
    ("ec2/natgateway", "natgw"),
    ("cloudwatch/", "cloudwatch"),
    ("elasticache/", "elasticache"),
)

# Tag keys that may carry the SKU, highest priority first
SKU_TAG_KEYS = (
    "instanceType",
    "instance_class",
    "instanceClass",
    "type",
    "volumeType",
    "volume_type",
)

_REGION_PATTERN = re.compile(r"^([a-z]{2}(?:-gov|-iso[a-z]?)?-[a-z]+-\d+)")


def normalize_resource_type(resource_type: str) -> str:
    """
    Normalize a resource type string to its canonical service key.

    Recognized inputs:
        - ARNs: parsed and canonicalized (ec2 volumes become "ebs")
        - Pulumi tokens: "aws:ec2/instance:Instance" -> "ec2"
        - Terraform types: "aws_db_instance" -> "rds"
        - Canonical keys: returned unchanged

    Unrecognized "aws:" tokens are returned as given so detect_service can
    try its substring fallback; anything else is lowercased. Applying this
    function to its own output is a no-op.

    Args:
        resource_type: Resource type as supplied by the caller

    Returns:
        Canonical service key, or the (passthrough) input when unrecognized

    Raises:
        IdentifierParseError: If the input starts with "arn:" but is not a valid ARN
    """
    if looks_like_arn(resource_type):
        return parse_arn(resource_type).canonical_type()

    lowered = resource_type.lower()

    if lowered.startswith("aws:"):
        if "ec2/volume" in lowered:
            return "ebs"
        if "ec2/natgateway" in lowered:
            return "natgw"
        if lowered.startswith("aws:iam/"):
            return "iam"

        suffix = lowered[4:]
        for pattern, service in ZERO_COST_PULUMI_PATTERNS.items():
            if suffix.startswith(pattern):
                remaining = suffix[len(pattern):]
                if remaining == "" or remaining.startswith(":"):
                    return service

        service = suffix.split("/", 1)[0].split(":", 1)[0]
        if service in PRICED_SERVICES or service in UNMODELED_SERVICES:
            return service
        if service in PULUMI_SERVICE_ALIASES:
            return PULUMI_SERVICE_ALIASES[service]
        return resource_type

    if lowered in TERRAFORM_TYPE_MAP:
        return TERRAFORM_TYPE_MAP[lowered]
    if lowered.startswith("aws_iam_"):
        return "iam"

    return lowered


def detect_service(normalized_type: str) -> str:
    """
    Resolve a normalized type to a service key, with substring fallbacks.

    Returns the input unchanged when nothing matches.
    """
    if normalized_type in PRICED_SERVICES or normalized_type in ZERO_COST_SERVICES \
            or normalized_type in UNMODELED_SERVICES:
        return normalized_type
    if normalized_type in ("alb", "nlb"):
        return "elb"

    lowered = normalized_type.lower()
    for pattern, service in LEGACY_TYPE_PATTERNS:
        if pattern in lowered:
            return service
    return normalized_type


def extract_sku(sku: str, tags: Optional[Dict[str, str]]) -> str:
    """Return the explicit SKU, else the first SKU-bearing tag."""
    if sku:
        return sku
    if not tags:
        return ""
    if tags.get("sku"):
        return tags["sku"]
    for key in SKU_TAG_KEYS:
        if tags.get(key):
            return tags[key]
    return ""


def extract_region(region: str, tags: Optional[Dict[str, str]]) -> str:
    """
    Return the explicit region, else the region or availability zone tag.

    Availability zones are truncated to their region ("us-east-1a" -> "us-east-1").
    """
    if region:
        return region
    if not tags:
        return ""
    if tags.get("region"):
        return tags["region"]
    zone = tags.get("availabilityZone") or tags.get("availability_zone") or ""
    match = _REGION_PATTERN.match(zone)
    if match:
        return match.group(1)
    return ""


def build_resource(
    provider: str,
    resource_type: str,
    sku: str = "",
    region: str = "",
    tags: Optional[Dict[str, str]] = None,
    resource_id: str = "",
    usage_profile: str = "production",
    arn: Optional[str] = None,
) -> NormalizedResource:
    """
    Build a NormalizedResource from a raw descriptor.

    When an ARN is given, region and resource id default to the ARN's
    components and the service comes from the ARN; the SKU must still come
    from the descriptor or its tags. An ARN passed as the resource type is
    treated the same way.

    Raises:
        IdentifierParseError: If the ARN is malformed or in an isolated partition
    """
    tags = dict(tags or {})

    if not arn and looks_like_arn(resource_type):
        arn = resource_type

    if arn:
        identifier = parse_arn(arn)
        service = identifier.canonical_type()
        region = region or identifier.region
        resource_id = resource_id or identifier.resource_id
        resource_type = resource_type or service
    else:
        service = detect_service(normalize_resource_type(resource_type))

    return NormalizedResource(
        provider=provider,
        service=service,
        resource_type=resource_type,
        region=extract_region(region, tags),
        sku=extract_sku(sku, tags),
        tags=tags,
        resource_id=resource_id or tags.get("resource_id", ""),
        usage_profile=usage_profile or "production",
    )
