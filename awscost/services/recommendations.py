"""
Right-sizing recommendation service.

Suggests newer instance generations, Graviton (ARM) migrations and gp2 to gp3
volume upgrades, priced through the same pricing client as the estimator.
Each resource is evaluated independently.
"""
import logging
import uuid
from typing import Dict, List, Optional, Sequence

from awscost.core.config import config, warn_deprecated_settings
from awscost.domain.cost_models import NormalizedResource
from awscost.domain.errors import InvalidArgumentError
from awscost.domain.recommendation_models import (
    Recommendation,
    RecommendationFilter,
    RecommendationSummary,
    RecommendedResource,
)
from awscost.pricing.base import PricingClient
from awscost.services.cost_estimator import RDS_ENGINE_NAMES
from awscost.services.instance_types import (
    get_generation_upgrade,
    get_graviton_family,
    get_rds_generation_upgrade,
    get_rds_graviton_family,
    parse_instance_type,
    parse_rds_instance_type,
)


logger = logging.getLogger(__name__)


HOURS_PER_MONTH = 730
CONFIDENCE_HIGH = 0.9
CONFIDENCE_MEDIUM = 0.7
DEFAULT_EBS_VOLUME_GB = 100

GENERATION_UPGRADE = "generation_upgrade"
GRAVITON_MIGRATION = "graviton_migration"
VOLUME_TYPE_UPGRADE = "volume_type_upgrade"

# Engine aliases -> canonical engine slug
RDS_ENGINE_ALIASES: Dict[str, str] = {
    "mysql": "mysql", "mysql8": "mysql", "mysql-8.0": "mysql",
    "postgres": "postgresql", "postgresql": "postgresql",
    "postgres13": "postgresql", "postgres14": "postgresql", "postgres15": "postgresql",
    "mariadb": "mariadb", "maria": "mariadb",
    "oracle": "oracle", "oracle-ee": "oracle", "oracle-se": "oracle",
    "oracle-se1": "oracle", "oracle-se2": "oracle",
    "sqlserver": "sqlserver", "sql-server": "sqlserver", "sqlserver-ee": "sqlserver",
    "sqlserver-se": "sqlserver", "sqlserver-ex": "sqlserver", "sqlserver-web": "sqlserver",
    "aurora": "aurora-mysql", "aurora-mysql": "aurora-mysql",
    "aurora-postgresql": "aurora-postgresql",
}

EC2_PRICE_ATTRIBUTES = {"operatingSystem": "Linux", "tenancy": "Shared"}


def normalize_rds_engine(engine: str) -> str:
    """Canonical engine slug for an engine tag value; unknown values are lowercased."""
    cleaned = engine.strip().lower()
    return RDS_ENGINE_ALIASES.get(cleaned, cleaned)


def extract_rds_engine(tags: Dict[str, str]) -> str:
    engine = tags.get("engine") or tags.get("Engine") or ""
    if not engine:
        return "mysql"
    return normalize_rds_engine(engine)


def matches_filter(resource: NormalizedResource, criteria: Optional[RecommendationFilter]) -> bool:
    """
    Check a resource against filter criteria.

    Every field set on the filter must match; tag criteria require each key
    to be present with an equal value.
    """
    if criteria is None:
        return True
    if criteria.region and criteria.region != resource.region:
        return False
    if criteria.resource_type and criteria.resource_type != resource.resource_type:
        return False
    if criteria.sku and criteria.sku != resource.sku:
        return False
    for key, value in criteria.tags.items():
        if resource.tags.get(key) != value:
            return False
    return True


def summarize(recommendations: Sequence[Recommendation]) -> RecommendationSummary:
    counts: Dict[str, int] = {}
    for recommendation in recommendations:
        counts[recommendation.modification_type] = counts.get(recommendation.modification_type, 0) + 1
    return RecommendationSummary(
        total_recommendations=len(recommendations),
        total_estimated_savings=sum(r.estimated_savings for r in recommendations),
        count_by_modification_type=counts,
    )


def _savings_percentage(current: float, projected: float) -> float:
    if current <= 0:
        return 0.0
    return (current - projected) / current * 100


class RecommendationEngine:
    """Generates cost-saving recommendations for AWS resources."""

    def __init__(self, pricing_client: PricingClient, region: Optional[str] = None):
        self.pricing_client = pricing_client
        self.region = region or config.AWS_REGION

    def get_recommendations(
        self,
        resources: Sequence[NormalizedResource],
        criteria: Optional[RecommendationFilter] = None,
    ) -> List[Recommendation]:
        """
        Generate recommendations for a batch of resources.

        Args:
            resources: Normalized resource descriptors
            criteria: Optional filter; non-matching resources are skipped

        Returns:
            Recommendations in input order (up to two per instance, one per volume)

        Raises:
            InvalidArgumentError: If the batch is too large, or under strict
                validation when a resource cannot be evaluated
        """
        warn_deprecated_settings()
        if len(resources) > config.MAX_BATCH_SIZE:
            raise InvalidArgumentError(
                f"batch size {len(resources)} exceeds maximum of {config.MAX_BATCH_SIZE}"
            )

        recommendations: List[Recommendation] = []
        skipped = 0
        for resource in resources:
            if resource.provider and resource.provider != "aws":
                skipped += 1
                logger.debug("Skipping non-AWS resource %s (%s)", resource.resource_type, resource.provider)
                if config.STRICT_VALIDATION:
                    raise InvalidArgumentError(
                        f'strict validation: unsupported provider "{resource.provider}" (only "aws" supported)'
                    )
                continue

            if not matches_filter(resource, criteria):
                skipped += 1
                continue

            region = resource.region or self.region
            if resource.service == "ec2":
                generated = self._ec2_recommendations(resource.sku, region)
            elif resource.service == "ebs":
                generated = self._ebs_recommendations(resource.sku, region, resource.tags)
            elif resource.service == "rds":
                generated = self._rds_recommendations(resource.sku, extract_rds_engine(resource.tags), region)
            else:
                logger.debug("No recommendations for service %s", resource.service)
                if config.STRICT_VALIDATION:
                    raise InvalidArgumentError(
                        f'strict validation: service "{resource.service}" does not support recommendations '
                        f"(resource_type: {resource.resource_type})"
                    )
                generated = []

            for recommendation in generated:
                recommendation.resource.resource_id = resource.resource_id.strip()
                recommendation.resource.name = resource.tags.get("name", "")
            recommendations.extend(generated)

        logger.info(
            "Generated %d recommendations for %d resources (%d skipped), $%.2f/month potential savings",
            len(recommendations), len(resources), skipped,
            sum(r.estimated_savings for r in recommendations),
        )
        return recommendations

    def _price(self, service: str, sku: str, region: str, attributes: Optional[Dict[str, str]] = None) -> Optional[float]:
        quote = self.pricing_client.lookup(service, sku, region, attributes)
        if not quote.available:
            return None
        return quote.unit_price

    def _build(
        self,
        service: str,
        sku: str,
        region: str,
        modification_type: str,
        current_config: Dict[str, str],
        recommended_config: Dict[str, str],
        current_monthly: float,
        projected_monthly: float,
        confidence: float,
        description: str,
        reasoning: List[str],
        metadata: Optional[Dict[str, str]] = None,
    ) -> Recommendation:
        return Recommendation(
            id=str(uuid.uuid4()),
            resource=RecommendedResource(resource_id="", resource_type=service, sku=sku, region=region),
            modification_type=modification_type,
            current_config=current_config,
            recommended_config=recommended_config,
            current_monthly_cost=current_monthly,
            projected_monthly_cost=projected_monthly,
            estimated_savings=current_monthly - projected_monthly,
            savings_percentage=_savings_percentage(current_monthly, projected_monthly),
            confidence=confidence,
            description=description,
            reasoning=reasoning,
            metadata=metadata or {},
        )

    # EC2

    def _ec2_recommendations(self, instance_type: str, region: str) -> List[Recommendation]:
        family, size = parse_instance_type(instance_type)
        if not family:
            return []
        current_price = self._price("ec2", instance_type, region, EC2_PRICE_ATTRIBUTES)
        if current_price is None:
            return []

        recommendations = []
        upgrade = self._ec2_generation_upgrade(instance_type, family, size, current_price, region)
        if upgrade:
            recommendations.append(upgrade)
        graviton = self._ec2_graviton(instance_type, family, size, current_price, region)
        if graviton:
            recommendations.append(graviton)
        return recommendations

    def _ec2_generation_upgrade(
        self, instance_type: str, family: str, size: str, current_price: float, region: str
    ) -> Optional[Recommendation]:
        new_family = get_generation_upgrade(family)
        if not new_family:
            return None
        new_type = f"{new_family}.{size}"
        new_price = self._price("ec2", new_type, region, EC2_PRICE_ATTRIBUTES)
        if new_price is None or new_price > current_price:
            return None

        reasoning = [
            f"Newer {new_family} instances offer better performance",
            "Drop-in replacement with no architecture changes required",
        ]
        graviton_family = get_graviton_family(new_family)
        if graviton_family:
            reasoning.append(
                f"Alternative: consider {graviton_family}.{size} for ARM compatibility (~20% additional savings)"
            )

        return self._build(
            "ec2", instance_type, region, GENERATION_UPGRADE,
            current_config={"instance_type": instance_type},
            recommended_config={"instance_type": new_type},
            current_monthly=current_price * HOURS_PER_MONTH,
            projected_monthly=new_price * HOURS_PER_MONTH,
            confidence=CONFIDENCE_HIGH,
            description=f"Upgrade from {instance_type} to {new_type} for better performance at same or lower cost",
            reasoning=reasoning,
        )

    def _ec2_graviton(
        self, instance_type: str, family: str, size: str, current_price: float, region: str
    ) -> Optional[Recommendation]:
        graviton_family = get_graviton_family(family)
        if not graviton_family:
            return None
        graviton_type = f"{graviton_family}.{size}"
        graviton_price = self._price("ec2", graviton_type, region, EC2_PRICE_ATTRIBUTES)
        if graviton_price is None or graviton_price > current_price:
            return None

        current_monthly = current_price * HOURS_PER_MONTH
        projected_monthly = graviton_price * HOURS_PER_MONTH
        percent = _savings_percentage(current_monthly, projected_monthly)
        return self._build(
            "ec2", instance_type, region, GRAVITON_MIGRATION,
            current_config={"instance_type": instance_type, "architecture": "x86_64"},
            recommended_config={"instance_type": graviton_type, "architecture": "arm64"},
            current_monthly=current_monthly,
            projected_monthly=projected_monthly,
            confidence=CONFIDENCE_MEDIUM,
            description=f"Migrate from {instance_type} to {graviton_type} (Graviton) for ~{percent:.0f}% cost savings",
            reasoning=[
                "Graviton instances are typically ~20% cheaper with comparable performance",
                "Requires validation that application supports ARM architecture",
            ],
            metadata={
                "architecture_change": "x86_64 -> arm64",
                "requires_validation": "Application must support ARM architecture",
            },
        )

    # EBS

    def _ebs_recommendations(self, volume_type: str, region: str, tags: Dict[str, str]) -> List[Recommendation]:
        if volume_type != "gp2":
            return []

        size_gb = DEFAULT_EBS_VOLUME_GB
        raw_size = tags["size"] if "size" in tags else tags.get("volume_size")
        if raw_size:
            try:
                parsed = int(raw_size)
            except ValueError:
                parsed = 0
            if parsed > 0:
                size_gb = parsed

        gp2_price = self._price("ebs", "gp2", region)
        if gp2_price is None:
            return []
        gp3_price = self._price("ebs", "gp3", region)
        if gp3_price is None or gp3_price > gp2_price:
            return []

        current_monthly = gp2_price * size_gb
        projected_monthly = gp3_price * size_gb
        percent = _savings_percentage(current_monthly, projected_monthly)
        return [self._build(
            "ebs", volume_type, region, VOLUME_TYPE_UPGRADE,
            current_config={"volume_type": "gp2", "size_gb": str(size_gb)},
            recommended_config={"volume_type": "gp3", "size_gb": str(size_gb)},
            current_monthly=current_monthly,
            projected_monthly=projected_monthly,
            confidence=CONFIDENCE_HIGH,
            description=f"Upgrade {size_gb}GB gp2 volume to gp3 for ~{percent:.0f}% cost savings",
            reasoning=[
                "gp3 volumes are ~20% cheaper than gp2",
                "gp3 provides better baseline performance (3000 IOPS, 125 MB/s)",
                "API-compatible change with no data migration required",
            ],
            metadata={
                "baseline_iops": "gp2: 100 IOPS/GB, gp3: 3000 IOPS (included)",
                "baseline_throughput": "gp2: 128-250 MB/s, gp3: 125 MB/s (included)",
            },
        )]

    # RDS

    def _rds_recommendations(self, instance_type: str, engine: str, region: str) -> List[Recommendation]:
        family, size = parse_rds_instance_type(instance_type)
        if not family:
            return []
        pricing_engine = RDS_ENGINE_NAMES.get(engine)
        if pricing_engine is None:
            logger.debug("No RDS pricing engine for %s", engine)
            return []
        attributes = {"databaseEngine": pricing_engine, "deploymentOption": "Single-AZ"}
        current_price = self._price("rds", instance_type, region, attributes)
        if current_price is None:
            return []

        recommendations = []
        new_family = get_rds_generation_upgrade(family)
        if new_family:
            new_type = f"{new_family}.{size}"
            new_price = self._price("rds", new_type, region, attributes)
            if new_price is not None and new_price <= current_price:
                reasoning = [
                    f"Newer {new_family} instances offer better performance for {engine}",
                    "Drop-in replacement with no architecture changes required",
                ]
                alternative = get_rds_graviton_family(new_family, engine)
                if alternative:
                    reasoning.append(
                        f"Alternative: consider {alternative}.{size} for ARM compatibility (~20% additional savings)"
                    )
                recommendations.append(self._build(
                    "rds", instance_type, region, GENERATION_UPGRADE,
                    current_config={"instance_type": instance_type, "engine": engine},
                    recommended_config={"instance_type": new_type, "engine": engine},
                    current_monthly=current_price * HOURS_PER_MONTH,
                    projected_monthly=new_price * HOURS_PER_MONTH,
                    confidence=CONFIDENCE_HIGH,
                    description=(
                        f"Upgrade RDS {engine} from {instance_type} to {new_type} "
                        f"for better performance at same or lower cost"
                    ),
                    reasoning=reasoning,
                ))

        graviton_family = get_rds_graviton_family(family, engine)
        if graviton_family:
            graviton_type = f"{graviton_family}.{size}"
            graviton_price = self._price("rds", graviton_type, region, attributes)
            if graviton_price is not None and graviton_price <= current_price:
                current_monthly = current_price * HOURS_PER_MONTH
                projected_monthly = graviton_price * HOURS_PER_MONTH
                percent = _savings_percentage(current_monthly, projected_monthly)
                recommendations.append(self._build(
                    "rds", instance_type, region, GRAVITON_MIGRATION,
                    current_config={"instance_type": instance_type, "engine": engine, "architecture": "x86_64"},
                    recommended_config={"instance_type": graviton_type, "engine": engine, "architecture": "arm64"},
                    current_monthly=current_monthly,
                    projected_monthly=projected_monthly,
                    confidence=CONFIDENCE_MEDIUM,
                    description=(
                        f"Migrate RDS {engine} from {instance_type} to {graviton_type} (Graviton) "
                        f"for ~{percent:.0f}% cost savings"
                    ),
                    reasoning=[
                        "Graviton RDS instances are typically ~20% cheaper with comparable performance",
                        f"Validated: {engine} engine supports Graviton architecture",
                    ],
                    metadata={"architecture_change": "x86_64 -> arm64", "engine": engine},
                ))
        return recommendations
