"""
Pricing lookup contract shared by all pricing sources.
"""
from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class PriceQuote:
    """A unit price from a pricing source. Unavailability is a normal outcome."""
    unit_price: float
    unit: str
    available: bool = True

    @classmethod
    def unavailable(cls) -> "PriceQuote":
        return cls(unit_price=0.0, unit="", available=False)


def build_lookup_key(service: str, sku: str, attributes: Optional[Dict[str, str]] = None) -> str:
    """
    Build a stable index key for a price.

    Attribute order does not matter; engine and OS values are compared
    case-insensitively.

    Returns:
        Key string (e.g., "ec2|t3.micro|operatingSystem:linux|tenancy:Shared")
    """
    parts = [service, sku]
    for key in sorted((attributes or {}).keys()):
        value = attributes[key]
        if key in ("databaseEngine", "operatingSystem", "cacheEngine", "architecture"):
            value = value.lower()
        parts.append(f"{key}:{value}")
    return "|".join(parts)


class PricingClient:
    """
    Base class for pricing sources.

    Service keys are canonical ("ec2", "rds", ...). Multi-component services
    use the component name as the SKU, e.g. ("lambda", "requests") or
    ("natgw", "data_processed").
    """

    def lookup(
        self,
        service: str,
        sku: str,
        region: str,
        attributes: Optional[Dict[str, str]] = None,
    ) -> PriceQuote:
        """
        Look up the on-demand unit price.

        Args:
            service: Canonical service key
            sku: Instance type, storage class or component name
            region: AWS region code
            attributes: Optional product attributes (operatingSystem, databaseEngine, ...)

        Returns:
            PriceQuote; available is False when no rate is known
        """
        raise NotImplementedError
