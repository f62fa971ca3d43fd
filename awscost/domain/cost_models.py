"""
Domain models for cost estimation.
Defines normalized resources, cost estimates and FOCUS billing records.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum


class EstimateKind(str, Enum):
    """Which pricing formula family produced an estimate."""
    COMPUTE = "compute"
    STORAGE = "storage"
    USAGE = "usage"
    ZERO_COST = "zero_cost"
    STUB = "stub"
    UNSUPPORTED = "unsupported"


class GrowthType(str, Enum):
    """How a service's cost tends to grow over time."""
    NONE = "none"
    LINEAR = "linear"


class ServiceCategory(str, Enum):
    """FOCUS service category bucket."""
    COMPUTE = "compute"
    STORAGE = "storage"
    DATABASE = "database"
    NETWORK = "network"
    MANAGEMENT = "management"
    OTHER = "other"


class Relationship(str, Enum):
    """How a child resource relates to the parent it is billed against."""
    ATTACHED_TO = "attached_to"
    WITHIN = "within"
    MANAGED_BY = "managed_by"


@dataclass(frozen=True)
class NormalizedResource:
    """A resource descriptor after type, SKU and region normalization."""
    provider: str
    service: str  # canonical key, e.g. "ec2", "ebs"
    resource_type: str  # as supplied by the caller
    region: str
    sku: str
    tags: Dict[str, str] = field(default_factory=dict)
    resource_id: str = ""
    usage_profile: str = "production"  # "production" | "development"


@dataclass(frozen=True)
class CostAllocationLineage:
    """Parent resource a cost should be allocated to."""
    parent_resource_id: str
    parent_resource_type: str
    relationship: Relationship

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "parent_resource_id": self.parent_resource_id,
            "parent_resource_type": self.parent_resource_type,
            "relationship": self.relationship.value,
        }


@dataclass(frozen=True)
class ImpactMetric:
    """A non-financial impact of running a resource, e.g. its carbon footprint."""
    kind: str  # "carbon_footprint"
    value: float
    unit: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {"kind": self.kind, "value": round(self.value, 4), "unit": self.unit}


@dataclass
class CostEstimate:
    """Projected (or prorated actual) cost for a single resource."""
    monthly_cost_usd: float
    unit_price: float
    billing_detail: str
    kind: EstimateKind
    pricing_unit: str = "Units"
    currency: str = "USD"
    service: str = ""
    resource_type: str = ""
    region: str = ""
    sku: str = ""
    error: Optional[str] = None  # "pricing_not_found" | "invalid_argument" | "region_mismatch"
    growth_type: Optional[GrowthType] = None
    lineage: Optional[CostAllocationLineage] = None
    assumptions: List[str] = field(default_factory=list)
    impact_metrics: List[ImpactMetric] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "monthly_cost_usd": round(self.monthly_cost_usd, 4),
            "unit_price": self.unit_price,
            "currency": self.currency,
            "billing_detail": self.billing_detail,
            "pricing_unit": self.pricing_unit,
            "kind": self.kind.value,
            "service": self.service,
            "resource_type": self.resource_type,
            "region": self.region,
            "sku": self.sku,
            "error": self.error,
            "growth_type": self.growth_type.value if self.growth_type else None,
            "lineage": self.lineage.to_dict() if self.lineage else None,
            "assumptions": self.assumptions,
            "impact_metrics": [metric.to_dict() for metric in self.impact_metrics],
        }


@dataclass
class ActualCostResult:
    """Prorated cost for a runtime window."""
    estimate: CostEstimate
    cost_usd: float
    runtime_hours: float
    period_start: datetime
    period_end: datetime
    confidence: str  # "HIGH" | "MEDIUM" | "LOW"
    source: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "cost_usd": round(self.cost_usd, 4),
            "runtime_hours": round(self.runtime_hours, 2),
            "period_start": self.period_start.isoformat(),
            "period_end": self.period_end.isoformat(),
            "confidence": self.confidence,
            "source": self.source,
            "estimate": self.estimate.to_dict(),
        }


@dataclass(frozen=True)
class BillingRecord:
    """A FOCUS-aligned billing record for one estimate."""
    billed_cost: float
    effective_cost: float
    list_cost: float
    list_unit_price: float
    service_category: ServiceCategory
    service_name: str
    charge_category: str
    charge_class: str
    charge_frequency: str
    pricing_category: str
    pricing_unit: str
    charge_period_start: datetime
    charge_period_end: datetime
    region_id: str
    billing_currency: str
    resource_type: str
    sku_id: str
    service_provider_name: str
    charge_description: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary using FOCUS column names."""
        return {
            "BilledCost": self.billed_cost,
            "EffectiveCost": self.effective_cost,
            "ListCost": self.list_cost,
            "ListUnitPrice": self.list_unit_price,
            "ServiceCategory": self.service_category.value,
            "ServiceName": self.service_name,
            "ChargeCategory": self.charge_category,
            "ChargeClass": self.charge_class,
            "ChargeFrequency": self.charge_frequency,
            "PricingCategory": self.pricing_category,
            "PricingUnit": self.pricing_unit,
            "ChargePeriodStart": self.charge_period_start.isoformat(),
            "ChargePeriodEnd": self.charge_period_end.isoformat(),
            "RegionId": self.region_id,
            "BillingCurrency": self.billing_currency,
            "ResourceType": self.resource_type,
            "SkuId": self.sku_id,
            "ServiceProviderName": self.service_provider_name,
            "ChargeDescription": self.charge_description,
        }


@dataclass(frozen=True)
class PricingSpec:
    """How a resource is billed, without a computed cost."""
    provider: str
    resource_type: str
    sku: str
    region: str
    billing_mode: str  # e.g. "per_hour", "per_gb_month", "on_demand", "unknown"
    rate_per_unit: float
    unit: str
    description: str
    currency: str = "USD"
    source: str = "aws-public"
    assumptions: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "provider": self.provider,
            "resource_type": self.resource_type,
            "sku": self.sku,
            "region": self.region,
            "billing_mode": self.billing_mode,
            "rate_per_unit": self.rate_per_unit,
            "currency": self.currency,
            "unit": self.unit,
            "description": self.description,
            "source": self.source,
            "assumptions": list(self.assumptions),
        }
