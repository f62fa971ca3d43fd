"""
AWS ARN parser.

Parses identifiers of the form
    arn:partition:service:region:account-id:resource
into their components. Only partitions with public pricing data are accepted.
"""
from dataclasses import dataclass

from awscost.domain.errors import IdentifierParseError, IsolatedPartitionError


ARN_PREFIX = "arn"

SUPPORTED_PARTITIONS = frozenset({"aws", "aws-cn", "aws-us-gov"})
ISOLATED_PARTITIONS = frozenset({"aws-iso", "aws-iso-b"})

# Services billed without a region component in their ARN
GLOBAL_SERVICES = frozenset({"s3", "iam"})


@dataclass(frozen=True)
class ResourceIdentifier:
    """Structured components of an ARN."""
    partition: str
    service: str
    region: str
    account_id: str
    resource_type: str
    resource_id: str

    def canonical_type(self) -> str:
        """
        Map service and resource type to the canonical service key.

        EBS volumes live under the ec2 service in ARNs but are priced as EBS.
        """
        if self.service == "ec2" and self.resource_type == "volume":
            return "ebs"
        return self.service

    def is_global(self) -> bool:
        """Whether the service is region-agnostic."""
        return is_global_service(self.service)


def is_global_service(service: str) -> bool:
    return service in GLOBAL_SERVICES


def looks_like_arn(value: str) -> bool:
    return value.startswith(ARN_PREFIX + ":")


def parse_arn(arn: str) -> ResourceIdentifier:
    """
    Parse an ARN string.

    The resource segment may itself contain ':' or '/'. It is split into
    type and id on the first '/', falling back to the first ':'. Without
    either separator the whole segment is the type (e.g. S3 bucket names).

    Args:
        arn: ARN string (e.g., 'arn:aws:ec2:us-east-1:123456789012:instance/i-abc')

    Returns:
        Parsed ResourceIdentifier

    Raises:
        IsolatedPartitionError: If the partition is aws-iso or aws-iso-b
        IdentifierParseError: If the ARN is malformed or the partition unknown
    """
    parts = arn.split(":", 5)
    if len(parts) < 6:
        raise IdentifierParseError(
            f"invalid ARN format: expected at least 6 colon-separated parts, got {len(parts)}"
        )

    prefix, partition, service, region, account_id, resource = parts
    if prefix != ARN_PREFIX:
        raise IdentifierParseError(f'invalid ARN prefix: expected "arn", got "{prefix}"')

    if not partition:
        raise IdentifierParseError("invalid ARN: partition is empty")
    if partition in ISOLATED_PARTITIONS:
        raise IsolatedPartitionError(partition)
    if partition not in SUPPORTED_PARTITIONS:
        raise IdentifierParseError(f'invalid ARN partition: "{partition}"')

    if not service:
        raise IdentifierParseError("invalid ARN: service is empty")
    if not resource:
        raise IdentifierParseError("invalid ARN: resource is empty")

    if "/" in resource:
        resource_type, resource_id = resource.split("/", 1)
    elif ":" in resource:
        resource_type, resource_id = resource.split(":", 1)
    else:
        resource_type, resource_id = resource, ""

    return ResourceIdentifier(
        partition=partition,
        service=service,
        region=region,
        account_id=account_id,
        resource_type=resource_type,
        resource_id=resource_id,
    )
