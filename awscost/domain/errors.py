"""
Domain errors for cost estimation.
Each error carries the structured context needed to act on it without parsing messages.
"""
from typing import Any, Dict


class AWSCostError(Exception):
    """Base class for cost estimation errors."""
    pass


class InvalidArgumentError(AWSCostError):
    """Raised when a resource descriptor or time window is malformed."""
    pass


class IdentifierParseError(InvalidArgumentError):
    """Raised when an ARN cannot be parsed."""
    pass


class IsolatedPartitionError(IdentifierParseError):
    """Raised for ARNs in air-gapped partitions, which have no public pricing."""

    def __init__(self, partition: str):
        self.partition = partition
        super().__init__(
            f'unsupported ARN partition "{partition}": isolated partitions '
            f"(aws-iso, aws-iso-b) do not have public pricing data available"
        )


class RegionMismatchError(AWSCostError):
    """Raised when a resource targets a region other than the configured one."""

    def __init__(self, configured_region: str, requested_region: str):
        self.configured_region = configured_region
        self.requested_region = requested_region
        super().__init__(
            f"Resource region {requested_region!r} does not match "
            f"configured pricing region {configured_region!r}"
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "message": str(self),
            "configured_region": self.configured_region,
            "requested_region": self.requested_region,
        }


class PricingNotFoundError(AWSCostError):
    """Raised when the pricing source has no rate for a service/SKU/region."""

    def __init__(self, service: str, sku: str, region: str, message: str):
        self.service = service
        self.sku = sku
        self.region = region
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "message": str(self),
            "service": self.service,
            "sku": self.sku,
            "region": self.region,
        }
