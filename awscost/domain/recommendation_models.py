"""
Domain models for right-sizing recommendations.
"""
from typing import List, Dict, Any, Optional
from dataclasses import dataclass, field


ALLOWED_MODIFICATION_TYPES = {
    "generation_upgrade",
    "graviton_migration",
    "volume_type_upgrade",
}


@dataclass
class RecommendedResource:
    """Identifies the resource a recommendation applies to."""
    resource_id: str
    resource_type: str
    sku: str
    region: str
    name: str = ""

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "resource_id": self.resource_id,
            "resource_type": self.resource_type,
            "sku": self.sku,
            "region": self.region,
            "name": self.name,
        }


@dataclass
class Recommendation:
    """A single cost-saving suggestion."""
    id: str
    resource: RecommendedResource
    modification_type: str
    current_config: Dict[str, str]
    recommended_config: Dict[str, str]
    current_monthly_cost: float
    projected_monthly_cost: float
    estimated_savings: float
    savings_percentage: float
    confidence: float
    description: str
    reasoning: List[str]
    category: str = "COST"
    action_type: str = "MODIFY"
    currency: str = "USD"
    source: str = "aws-public"
    metadata: Dict[str, str] = field(default_factory=dict)

    def __post_init__(self):
        if self.modification_type not in ALLOWED_MODIFICATION_TYPES:
            raise ValueError(f"Invalid modification type: {self.modification_type}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "id": self.id,
            "category": self.category,
            "action_type": self.action_type,
            "resource": self.resource.to_dict(),
            "modification_type": self.modification_type,
            "current_config": self.current_config,
            "recommended_config": self.recommended_config,
            "current_monthly_cost": round(self.current_monthly_cost, 2),
            "projected_monthly_cost": round(self.projected_monthly_cost, 2),
            "estimated_savings": round(self.estimated_savings, 2),
            "savings_percentage": round(self.savings_percentage, 1),
            "currency": self.currency,
            "confidence": self.confidence,
            "description": self.description,
            "reasoning": self.reasoning,
            "source": self.source,
            "metadata": self.metadata,
        }


@dataclass
class RecommendationFilter:
    """Criteria a resource must match (all set fields, AND-ed) to be considered."""
    region: Optional[str] = None
    resource_type: Optional[str] = None
    sku: Optional[str] = None
    tags: Dict[str, str] = field(default_factory=dict)


@dataclass
class RecommendationSummary:
    """Aggregate view over a list of recommendations."""
    total_recommendations: int
    total_estimated_savings: float
    count_by_modification_type: Dict[str, int]
    currency: str = "USD"

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "total_recommendations": self.total_recommendations,
            "total_estimated_savings": round(self.total_estimated_savings, 2),
            "count_by_modification_type": self.count_by_modification_type,
            "currency": self.currency,
        }
