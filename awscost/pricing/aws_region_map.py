"""
AWS region metadata for pricing lookups.
The Price List API filters by human-readable location, not region code.
"""
from typing import Dict, List, Optional, Tuple


# region code -> (Price List API location, partition)
AWS_REGIONS: Dict[str, Tuple[str, str]] = {
    "us-east-1": ("US East (N. Virginia)", "aws"),
    "us-east-2": ("US East (Ohio)", "aws"),
    "us-west-1": ("US West (N. California)", "aws"),
    "us-west-2": ("US West (Oregon)", "aws"),
    "ca-central-1": ("Canada (Central)", "aws"),
    "ca-west-1": ("Canada West (Calgary)", "aws"),
    "sa-east-1": ("South America (Sao Paulo)", "aws"),
    "eu-west-1": ("EU (Ireland)", "aws"),
    "eu-west-2": ("EU (London)", "aws"),
    "eu-west-3": ("EU (Paris)", "aws"),
    "eu-central-1": ("EU (Frankfurt)", "aws"),
    "eu-central-2": ("EU (Zurich)", "aws"),
    "eu-north-1": ("EU (Stockholm)", "aws"),
    "eu-south-1": ("EU (Milan)", "aws"),
    "eu-south-2": ("EU (Spain)", "aws"),
    "ap-south-1": ("Asia Pacific (Mumbai)", "aws"),
    "ap-southeast-1": ("Asia Pacific (Singapore)", "aws"),
    "ap-southeast-2": ("Asia Pacific (Sydney)", "aws"),
    "ap-southeast-3": ("Asia Pacific (Jakarta)", "aws"),
    "ap-northeast-1": ("Asia Pacific (Tokyo)", "aws"),
    "ap-northeast-2": ("Asia Pacific (Seoul)", "aws"),
    "ap-northeast-3": ("Asia Pacific (Osaka)", "aws"),
    "ap-east-1": ("Asia Pacific (Hong Kong)", "aws"),
    "me-south-1": ("Middle East (Bahrain)", "aws"),
    "me-central-1": ("Middle East (UAE)", "aws"),
    "af-south-1": ("Africa (Cape Town)", "aws"),
    "us-gov-west-1": ("AWS GovCloud (US-West)", "aws-us-gov"),
    "us-gov-east-1": ("AWS GovCloud (US-East)", "aws-us-gov"),
    "cn-north-1": ("China (Beijing)", "aws-cn"),
    "cn-northwest-1": ("China (Ningxia)", "aws-cn"),
}


def get_aws_pricing_location(region_code: str) -> Optional[str]:
    """
    Get the Price List API location string for a region code.

    Returns:
        Location string (e.g., 'US East (N. Virginia)'), or None if unknown
    """
    entry = AWS_REGIONS.get(region_code)
    return entry[0] if entry else None


def get_region_partition(region_code: str) -> Optional[str]:
    """Partition a region belongs to ('aws', 'aws-cn', 'aws-us-gov'), or None if unknown."""
    entry = AWS_REGIONS.get(region_code)
    return entry[1] if entry else None


def is_known_region(region_code: str) -> bool:
    return region_code in AWS_REGIONS


def get_all_aws_regions(partition: Optional[str] = None) -> List[str]:
    """Region codes, optionally limited to one partition."""
    return [
        code for code, (_, region_partition) in AWS_REGIONS.items()
        if partition is None or region_partition == partition
    ]
