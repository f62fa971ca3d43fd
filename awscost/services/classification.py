"""
Service classification table.

Static, read-only metadata per canonical service key: how cost grows, whether
development usage profiles reduce billed hours, and how to find the parent
resource a cost should be allocated to.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Dict, Optional, Tuple

from awscost.domain.cost_models import CostAllocationLineage, GrowthType, Relationship


VPC_PARENT_TYPE = "aws:ec2/vpc:Vpc"
INSTANCE_PARENT_TYPE = "aws:ec2/instance:Instance"


@dataclass(frozen=True)
class ServiceClassification:
    """Billing behavior of one service."""
    growth_type: GrowthType
    affected_by_dev_mode: bool
    parent_tag_keys: Tuple[str, ...] = ()
    parent_type: str = ""
    relationship: Optional[Relationship] = None


SERVICE_CLASSIFICATIONS: Mapping[str, ServiceClassification] = MappingProxyType({
    # Instance hours
    "ec2": ServiceClassification(GrowthType.NONE, affected_by_dev_mode=True),
    # Storage is provisioned, not time-based
    "ebs": ServiceClassification(
        GrowthType.NONE,
        affected_by_dev_mode=False,
        parent_tag_keys=("instance_id",),
        parent_type=INSTANCE_PARENT_TYPE,
        relationship=Relationship.ATTACHED_TO,
    ),
    "eks": ServiceClassification(GrowthType.NONE, affected_by_dev_mode=True),
    "s3": ServiceClassification(GrowthType.LINEAR, affected_by_dev_mode=False),
    "lambda": ServiceClassification(GrowthType.NONE, affected_by_dev_mode=False),
    "dynamodb": ServiceClassification(GrowthType.LINEAR, affected_by_dev_mode=False),
    "elb": ServiceClassification(
        GrowthType.NONE,
        affected_by_dev_mode=True,
        parent_tag_keys=("vpc_id",),
        parent_type=VPC_PARENT_TYPE,
        relationship=Relationship.WITHIN,
    ),
    "natgw": ServiceClassification(
        GrowthType.NONE,
        affected_by_dev_mode=True,
        parent_tag_keys=("vpc_id", "subnet_id"),
        parent_type=VPC_PARENT_TYPE,
        relationship=Relationship.WITHIN,
    ),
    "cloudwatch": ServiceClassification(GrowthType.NONE, affected_by_dev_mode=False),
    "elasticache": ServiceClassification(
        GrowthType.NONE,
        affected_by_dev_mode=True,
        parent_tag_keys=("vpc_id",),
        parent_type=VPC_PARENT_TYPE,
        relationship=Relationship.WITHIN,
    ),
    "rds": ServiceClassification(
        GrowthType.NONE,
        affected_by_dev_mode=True,
        parent_tag_keys=("vpc_id",),
        parent_type=VPC_PARENT_TYPE,
        relationship=Relationship.WITHIN,
    ),
})


def get_service_classification(service: str) -> Tuple[Optional[ServiceClassification], bool]:
    """
    Look up the classification for a canonical service key.

    Returns:
        Tuple of (classification, found); classification is None when not found
    """
    classification = SERVICE_CLASSIFICATIONS.get(service)
    return classification, classification is not None


def resolve_parent(service: str, tags: Optional[Dict[str, str]]) -> Optional[CostAllocationLineage]:
    """
    Find the parent resource of a child resource from its tags.

    Parent tag keys are checked in priority order; the first non-empty value wins.

    Returns:
        Lineage for the parent, or None if the service has no parent rule or no tag matched
    """
    classification, found = get_service_classification(service)
    if not found or not classification.parent_tag_keys or not tags:
        return None
    for key in classification.parent_tag_keys:
        value = tags.get(key)
        if value:
            return CostAllocationLineage(
                parent_resource_id=value,
                parent_resource_type=classification.parent_type,
                relationship=classification.relationship,
            )
    return None
