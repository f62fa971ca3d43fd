"""
Cost estimation service.

Routes a normalized resource to its per-service pricing formula, prices it
through the injected pricing client and returns a CostEstimate. Also derives
actual cost for a runtime window by prorating the projected monthly rate.
"""
import logging
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from awscost.core.config import config
from awscost.domain.cost_models import ActualCostResult, CostEstimate, EstimateKind, ImpactMetric, NormalizedResource
from awscost.domain.errors import InvalidArgumentError, PricingNotFoundError, RegionMismatchError
from awscost.pricing.base import PriceQuote, PricingClient
from awscost.services.arn_parser import is_global_service
from awscost.services.billing_records import get_pricing_unit
from awscost.services.carbon import (
    CARBON_FOOTPRINT,
    CARBON_UNIT,
    estimate_ebs_carbon,
    estimate_instance_carbon,
    estimate_s3_carbon,
    resolve_utilization,
)
from awscost.services.classification import get_service_classification, resolve_parent
from awscost.services.resource_types import UNMODELED_SERVICES


logger = logging.getLogger(__name__)


# Failure message templates. Downstream tooling matches on these exactly.
PRICING_NOT_FOUND_TEMPLATE = '%s "%s" not found in pricing data'
PRICING_UNAVAILABLE_TEMPLATE = "%s pricing data not available for region %s"

PROVIDER_AWS = "aws"

SERVICE_KINDS: Mapping[str, EstimateKind] = MappingProxyType({
    "ec2": EstimateKind.COMPUTE,
    "rds": EstimateKind.COMPUTE,
    "elasticache": EstimateKind.COMPUTE,
    "eks": EstimateKind.COMPUTE,
    "elb": EstimateKind.COMPUTE,
    "natgw": EstimateKind.COMPUTE,
    "ebs": EstimateKind.STORAGE,
    "s3": EstimateKind.STORAGE,
    "lambda": EstimateKind.USAGE,
    "dynamodb": EstimateKind.USAGE,
    "cloudwatch": EstimateKind.USAGE,
    "vpc": EstimateKind.ZERO_COST,
    "securitygroup": EstimateKind.ZERO_COST,
    "subnet": EstimateKind.ZERO_COST,
    "iam": EstimateKind.ZERO_COST,
})

# Services whose SKU is the priced product itself. Others derive it from tags or defaults.
SKU_REQUIRED_SERVICES = frozenset({"ec2", "rds", "elasticache", "ebs"})

ZERO_COST_DESCRIPTIONS: Mapping[str, str] = MappingProxyType({
    "vpc": "VPC has no direct hourly or monthly charge. Costs may apply for associated resources (NAT Gateway, VPN, etc.)",
    "securitygroup": "Security Groups have no direct charge. They are a free networking feature.",
    "subnet": "Subnets have no direct charge. Costs may apply for data transfer between AZs.",
    "iam": "IAM resources (users, roles, policies) have no direct charge. They are a free AWS feature.",
})

RDS_ENGINE_NAMES: Mapping[str, str] = MappingProxyType({
    "mysql": "MySQL",
    "postgres": "PostgreSQL",
    "postgresql": "PostgreSQL",
    "mariadb": "MariaDB",
    "oracle": "Oracle",
    "oracle-se2": "Oracle",
    "sqlserver": "SQL Server",
    "sqlserver-ex": "SQL Server",
    "sql-server": "SQL Server",
})
RDS_STORAGE_TYPES = frozenset({"gp2", "gp3", "io1", "io2", "standard"})
DEFAULT_RDS_ENGINE = "mysql"
DEFAULT_RDS_STORAGE_TYPE = "gp2"
DEFAULT_RDS_STORAGE_GB = 20
DEFAULT_EBS_SIZE_GB = 8
DEFAULT_S3_SIZE_GB = 1.0
DEFAULT_LAMBDA_MEMORY_MB = 128
DEFAULT_LAMBDA_DURATION_MS = 100
MAX_CACHE_NODES = 1000
MAX_CUSTOM_METRICS = 1_000_000

CREATED_TAG = "pulumi:created"
EXTERNAL_TAG = "pulumi:external"
ACTUAL_COST_SOURCE = "aws-public-fallback"


class Priced(NamedTuple):
    """Output of a pricing formula."""
    monthly_cost: float
    unit_price: float
    detail: str


def _parse_non_negative(tags: Dict[str, str], key: str) -> Optional[float]:
    """
    Parse an optional numeric tag, rejecting bad input.

    Raises:
        InvalidArgumentError: If the tag is present but empty, not a number or negative
    """
    raw = tags.get(key)
    if raw is None:
        return None
    if raw == "":
        raise InvalidArgumentError(f"tag '{key}' is present but empty")
    try:
        value = float(raw)
    except ValueError:
        raise InvalidArgumentError(f"invalid value for '{key}': \"{raw}\" is not a valid number")
    if value < 0:
        raise InvalidArgumentError(f"invalid value for '{key}': {value:.2f} cannot be negative")
    return value


def _lenient_number(tags: Dict[str, str], keys: Sequence[str], cast=float) -> Optional[float]:
    """First tag among keys that parses as a positive number; bad values are ignored."""
    for key in keys:
        raw = tags.get(key)
        if not raw:
            continue
        try:
            value = cast(raw)
        except ValueError:
            logger.warning("Ignoring invalid value for tag %s: %r", key, raw)
            continue
        if value > 0:
            return value
    return None


def _ebs_size_gb(tags: Dict[str, str]) -> Tuple[int, bool]:
    """Volume size and whether it was defaulted."""
    size = _lenient_number(tags, ("size", "volume_size"), cast=int)
    if size is None:
        return DEFAULT_EBS_SIZE_GB, True
    return int(size), False


def _s3_size_gb(tags: Dict[str, str]) -> Tuple[float, bool]:
    """Stored GB and whether it was defaulted."""
    size = _lenient_number(tags, ("size", "size_gb"))
    if size is None:
        return DEFAULT_S3_SIZE_GB, True
    return size, False


def calculate_runtime_hours(start: datetime, end: datetime) -> float:
    """
    Hours elapsed between two instants.

    Raises:
        InvalidArgumentError: If end precedes start. A zero-length window is 0 hours.
    """
    if end < start:
        raise InvalidArgumentError(
            f"invalid time range: end ({end.isoformat()}) is before start ({start.isoformat()})"
        )
    return (end - start).total_seconds() / 3600.0


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def _parse_timestamp(raw: str, tag: str) -> datetime:
    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        raise InvalidArgumentError(f"invalid {tag} timestamp: {raw!r} is not RFC 3339")
    return _as_utc(parsed)


class CostEstimator:
    """Service for estimating AWS resource costs from public pricing."""

    def __init__(
        self,
        pricing_client: PricingClient,
        region: Optional[str] = None,
        hours_per_month: Optional[int] = None,
        dev_hours_per_month: Optional[int] = None,
    ):
        """
        Initialize cost estimator.

        Args:
            pricing_client: Pricing source (static, bulk or API client)
            region: The single region this estimator prices for
            hours_per_month: Billable hours in a production month (default 730)
            dev_hours_per_month: Billable hours for development usage profiles (default 160)
        """
        self.pricing_client = pricing_client
        self.region = region or config.AWS_REGION
        self.hours_per_month = hours_per_month or config.HOURS_PER_MONTH
        self.dev_hours_per_month = dev_hours_per_month or config.DEV_HOURS_PER_MONTH
        self._formulas: Mapping[str, Callable[[NormalizedResource, float], Priced]] = MappingProxyType({
            "ec2": self._estimate_ec2,
            "rds": self._estimate_rds,
            "elasticache": self._estimate_elasticache,
            "eks": self._estimate_eks,
            "elb": self._estimate_elb,
            "natgw": self._estimate_nat_gateway,
            "ebs": self._estimate_ebs,
            "s3": self._estimate_s3,
            "lambda": self._estimate_lambda,
            "dynamodb": self._estimate_dynamodb,
            "cloudwatch": self._estimate_cloudwatch,
        })

    # ------------------------------------------------------------------
    # Validation and routing
    # ------------------------------------------------------------------

    def resolve_kind(self, service: str) -> EstimateKind:
        """Closed classification of a canonical service key."""
        if service in SERVICE_KINDS:
            return SERVICE_KINDS[service]
        if service in UNMODELED_SERVICES:
            return EstimateKind.STUB
        return EstimateKind.UNSUPPORTED

    def _effective_region(self, resource: NormalizedResource) -> str:
        # Global services omit the region; they are billed in the configured one
        if not resource.region and is_global_service(resource.service):
            return self.region
        return resource.region

    def validate(self, resource: NormalizedResource) -> str:
        """
        Validate a resource and return the region it will be priced in.

        Raises:
            InvalidArgumentError: If provider, resource type, SKU or region is missing
            RegionMismatchError: If the resource is in a different region than the estimator
        """
        if not resource.provider:
            raise InvalidArgumentError("provider is required")
        if resource.provider != PROVIDER_AWS:
            raise InvalidArgumentError(f'only "{PROVIDER_AWS}" provider is supported')
        if not resource.resource_type:
            raise InvalidArgumentError("resource_type is required")
        if not resource.sku and resource.service in SKU_REQUIRED_SERVICES:
            raise InvalidArgumentError(f"sku is required for {resource.service} resources")

        region = self._effective_region(resource)
        if not region:
            raise InvalidArgumentError("region is required")
        if region != self.region:
            raise RegionMismatchError(configured_region=self.region, requested_region=region)
        return region

    def _billable_hours(self, resource: NormalizedResource) -> float:
        if resource.usage_profile != "development":
            return self.hours_per_month
        classification, found = get_service_classification(resource.service)
        if found and classification.affected_by_dev_mode:
            return self.dev_hours_per_month
        return self.hours_per_month

    def estimate(self, resource: NormalizedResource) -> CostEstimate:
        """
        Estimate the projected monthly cost of a resource.

        Zero-cost, unmodeled and unrecognized types return a $0 estimate with
        an explanatory billing detail rather than failing.

        Args:
            resource: Normalized resource descriptor

        Returns:
            CostEstimate

        Raises:
            InvalidArgumentError: If required fields are missing or tag values are invalid
            RegionMismatchError: If the resource region differs from the configured one
            PricingNotFoundError: If the pricing source has no rate for the resource
        """
        region = self.validate(resource)
        kind = self.resolve_kind(resource.service)
        hours = self._billable_hours(resource)
        assumptions: List[str] = []
        impact_metrics: List[ImpactMetric] = []

        if kind is EstimateKind.UNSUPPORTED:
            priced = Priced(0.0, 0.0, f'Resource type "{resource.resource_type}" not supported for cost estimation')
        elif kind is EstimateKind.STUB:
            priced = Priced(
                0.0, 0.0,
                f"{resource.resource_type} cost estimation not fully implemented - returns $0 estimate",
            )
        elif kind is EstimateKind.ZERO_COST:
            description = ZERO_COST_DESCRIPTIONS.get(
                resource.service, f"{resource.service} has no direct AWS charge"
            )
            priced = Priced(0.0, 0.0, description)
        else:
            priced = self._formulas[resource.service](resource, hours)
            impact_metrics = self._carbon_footprint(resource, region, hours)
            if hours != self.hours_per_month:
                assumptions.append(f"development usage profile: {hours:g} hours/month")
            else:
                assumptions.append(f"{hours:g} hours/month")

        classification, found = get_service_classification(resource.service)
        estimate = CostEstimate(
            monthly_cost_usd=priced.monthly_cost,
            unit_price=priced.unit_price,
            billing_detail=priced.detail,
            kind=kind,
            pricing_unit=get_pricing_unit(resource.service),
            service=resource.service,
            resource_type=resource.resource_type,
            region=region,
            sku=resource.sku,
            growth_type=classification.growth_type if found else None,
            lineage=resolve_parent(resource.service, resource.tags),
            assumptions=assumptions,
            impact_metrics=impact_metrics,
        )
        logger.debug(
            "Estimated %s (%s) in %s: $%.4f/month [%s]",
            resource.resource_type, resource.service, region, estimate.monthly_cost_usd, kind.value,
        )
        return estimate

    def _carbon_footprint(self, resource: NormalizedResource, region: str, hours: float) -> List[ImpactMetric]:
        """Carbon metric for EC2, EBS and S3; empty when there is no power data."""
        if resource.service == "ec2":
            grams = estimate_instance_carbon(resource.sku, region, resolve_utilization(resource.tags), hours)
        elif resource.service == "ebs":
            size_gb, _ = _ebs_size_gb(resource.tags)
            grams = estimate_ebs_carbon(resource.sku, size_gb, region, self.hours_per_month)
        elif resource.service == "s3":
            size_gb, _ = _s3_size_gb(resource.tags)
            grams = estimate_s3_carbon(resource.sku or "STANDARD", size_gb, region, self.hours_per_month)
        else:
            return []
        if grams is None:
            return []
        return [ImpactMetric(CARBON_FOOTPRINT, grams, CARBON_UNIT)]

    def estimate_batch(self, resources: Sequence[NormalizedResource], max_workers: int = 1) -> List[CostEstimate]:
        """
        Estimate many resources independently, preserving input order.

        Per-resource failures become estimates with an error classification so
        one bad descriptor does not fail the batch.
        """
        if max_workers > 1 and len(resources) > 1:
            with ThreadPoolExecutor(max_workers=max_workers) as executor:
                return list(executor.map(self._estimate_or_error, resources))
        return [self._estimate_or_error(resource) for resource in resources]

    def _estimate_or_error(self, resource: NormalizedResource) -> CostEstimate:
        try:
            return self.estimate(resource)
        except PricingNotFoundError as error:
            return self._error_estimate(resource, "pricing_not_found", str(error))
        except RegionMismatchError as error:
            return self._error_estimate(resource, "region_mismatch", str(error))
        except InvalidArgumentError as error:
            return self._error_estimate(resource, "invalid_argument", str(error))

    def _error_estimate(self, resource: NormalizedResource, error: str, detail: str) -> CostEstimate:
        return CostEstimate(
            monthly_cost_usd=0.0,
            unit_price=0.0,
            billing_detail=detail,
            kind=self.resolve_kind(resource.service),
            pricing_unit=get_pricing_unit(resource.service),
            service=resource.service,
            resource_type=resource.resource_type,
            region=resource.region,
            sku=resource.sku,
            error=error,
        )

    def supports(self, resource: NormalizedResource) -> Tuple[bool, str]:
        """
        Whether this estimator can price the resource.

        Returns:
            Tuple of (supported, reason); reason is empty when supported
        """
        if resource.provider != PROVIDER_AWS:
            return False, f'Provider "{resource.provider}" not supported (only "{PROVIDER_AWS}" is supported)'
        region = self._effective_region(resource)
        if region != self.region:
            return False, (
                f"Region not supported by this binary "
                f"(plugin region: {self.region}, resource region: {region})"
            )
        kind = self.resolve_kind(resource.service)
        if kind in (EstimateKind.COMPUTE, EstimateKind.STORAGE, EstimateKind.USAGE):
            return True, ""
        return False, f'Resource type "{resource.resource_type}" not supported'

    # ------------------------------------------------------------------
    # Actual cost
    # ------------------------------------------------------------------

    def estimate_actual(
        self,
        resource: NormalizedResource,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> ActualCostResult:
        """
        Estimate cost for a runtime window by prorating the projected monthly cost.

        actual = projected_monthly * runtime_hours / hours_per_month

        Args:
            resource: Normalized resource descriptor
            start: Window start; defaults to the pulumi:created tag
            end: Window end; defaults to now

        Returns:
            ActualCostResult with confidence and source annotations

        Raises:
            InvalidArgumentError: If no start is available or end precedes start
        """
        if start is None:
            created = resource.tags.get(CREATED_TAG)
            if not created:
                raise InvalidArgumentError(
                    f"start time is required (or provide the {CREATED_TAG} tag)"
                )
            start = _parse_timestamp(created, CREATED_TAG)
        start = _as_utc(start)
        end = _as_utc(end) if end is not None else datetime.now(timezone.utc)

        runtime_hours = calculate_runtime_hours(start, end)
        confidence, note = self._actual_confidence(resource)

        projected = self.estimate(resource)
        if runtime_hours == 0:
            cost = 0.0
        else:
            cost = projected.monthly_cost_usd * runtime_hours / self.hours_per_month

        projected.billing_detail = (
            f"Fallback estimate: ${projected.monthly_cost_usd:.2f}/month × {runtime_hours:.2f} hours "
            f"/ {self.hours_per_month} = ${cost:.4f}"
        )
        source = f"{ACTUAL_COST_SOURCE}[confidence:{confidence}]"
        if note:
            source = f"{source} {note}"

        return ActualCostResult(
            estimate=projected,
            cost_usd=cost,
            runtime_hours=runtime_hours,
            period_start=start,
            period_end=end,
            confidence=confidence,
            source=source,
        )

    @staticmethod
    def _actual_confidence(resource: NormalizedResource) -> Tuple[str, str]:
        # Imported resources carry the import time in pulumi:created, not the launch time
        if resource.tags.get(EXTERNAL_TAG, "").lower() == "true":
            return "MEDIUM", "imported resource; creation time reflects import"
        return "HIGH", ""

    # ------------------------------------------------------------------
    # Pricing helpers
    # ------------------------------------------------------------------

    def _require_sku_price(
        self,
        service: str,
        sku: str,
        label: str,
        attributes: Optional[Dict[str, str]] = None,
    ) -> PriceQuote:
        quote = self.pricing_client.lookup(service, sku, self.region, attributes)
        if not quote.available:
            logger.warning("No %s price for %s in %s", service, sku, self.region)
            raise PricingNotFoundError(service, sku, self.region, PRICING_NOT_FOUND_TEMPLATE % (label, sku))
        return quote

    def _require_component_price(
        self,
        service: str,
        sku: str,
        label: str,
        attributes: Optional[Dict[str, str]] = None,
    ) -> PriceQuote:
        quote = self.pricing_client.lookup(service, sku, self.region, attributes)
        if not quote.available:
            logger.warning("No %s %s price in %s", service, sku, self.region)
            raise PricingNotFoundError(service, sku, self.region, PRICING_UNAVAILABLE_TEMPLATE % (label, self.region))
        return quote

    def _optional_price(self, service: str, sku: str, attributes: Optional[Dict[str, str]] = None) -> PriceQuote:
        return self.pricing_client.lookup(service, sku, self.region, attributes)

    # ------------------------------------------------------------------
    # Formulas
    # ------------------------------------------------------------------

    def _estimate_ec2(self, resource: NormalizedResource, hours: float) -> Priced:
        platform = resource.tags.get("platform", "").lower()
        operating_system = "Windows" if platform == "windows" else "Linux"
        tenancy = {"dedicated": "Dedicated", "host": "Host"}.get(resource.tags.get("tenancy", "").lower(), "Shared")

        quote = self._require_sku_price(
            "ec2", resource.sku, "EC2 instance type",
            {"operatingSystem": operating_system, "tenancy": tenancy},
        )
        return Priced(
            quote.unit_price * hours,
            quote.unit_price,
            f"On-demand {operating_system}, {tenancy} tenancy, {hours:g} hrs/month",
        )

    def _estimate_ebs(self, resource: NormalizedResource, hours: float) -> Priced:
        volume_type = resource.sku
        size_gb, defaulted = _ebs_size_gb(resource.tags)

        quote = self._require_sku_price("ebs", volume_type, "EBS volume type")
        suffix = " (defaulted)" if defaulted else ""
        return Priced(
            quote.unit_price * size_gb,
            quote.unit_price,
            f"{volume_type} volume, {size_gb} GB{suffix}, ${quote.unit_price:.4f}/GB-month",
        )

    def _estimate_s3(self, resource: NormalizedResource, hours: float) -> Priced:
        storage_class = (resource.sku or "STANDARD").upper()
        size_gb, defaulted = _s3_size_gb(resource.tags)

        quote = self._require_sku_price("s3", storage_class, "S3 storage class")
        suffix = " (defaulted)" if defaulted else ""
        return Priced(
            quote.unit_price * size_gb,
            quote.unit_price,
            f"S3 {storage_class} storage, {size_gb:.0f} GB{suffix}, ${quote.unit_price:.4f}/GB-month",
        )

    def _estimate_rds(self, resource: NormalizedResource, hours: float) -> Priced:
        notes = []
        engine = resource.tags.get("engine", "").lower()
        if not engine:
            engine = DEFAULT_RDS_ENGINE
            notes.append("engine defaulted to MySQL")
        engine_name = RDS_ENGINE_NAMES.get(engine)
        if engine_name is None:
            engine_name = RDS_ENGINE_NAMES[DEFAULT_RDS_ENGINE]
            notes.append(f"unknown engine {engine!r}, defaulted to MySQL")

        storage_type = resource.tags.get("storage_type", "").lower()
        if storage_type not in RDS_STORAGE_TYPES:
            storage_type = DEFAULT_RDS_STORAGE_TYPE
            notes.append("storage type defaulted")

        storage_size = _lenient_number(resource.tags, ("storage_size", "allocated_storage"), cast=int)
        if storage_size is None:
            storage_gb = DEFAULT_RDS_STORAGE_GB
            notes.append(f"size defaulted to {DEFAULT_RDS_STORAGE_GB}GB")
        else:
            storage_gb = int(storage_size)

        instance_quote = self._require_sku_price(
            "rds", resource.sku, "RDS instance type",
            {"databaseEngine": engine_name, "deploymentOption": "Single-AZ"},
        )
        storage_quote = self._require_component_price(
            "rds", storage_type, "RDS storage", {"component": "storage"}
        )

        total = instance_quote.unit_price * hours + storage_quote.unit_price * storage_gb
        detail = f"RDS {resource.sku} {engine_name}, {hours:g} hrs/month + {storage_gb}GB {storage_type} storage"
        if notes:
            detail += f" ({', '.join(notes)})"
        return Priced(total, instance_quote.unit_price, detail)

    def _estimate_eks(self, resource: NormalizedResource, hours: float) -> Priced:
        support = resource.tags.get("support_type", "").lower()
        if "extended" in resource.sku.lower() or support == "extended":
            support = "extended"
        else:
            support = "standard"

        quote = self._require_component_price("eks", support, "EKS")
        return Priced(
            quote.unit_price * hours,
            quote.unit_price,
            f"EKS cluster ({support} support), {hours:g} hrs/month (control plane only, excludes worker nodes)",
        )

    def _estimate_lambda(self, resource: NormalizedResource, hours: float) -> Priced:
        notes = []
        tags = resource.tags

        memory = _lenient_number({"sku": resource.sku}, ("sku",), cast=int)
        if memory is None:
            memory_mb = DEFAULT_LAMBDA_MEMORY_MB
            notes.append("memory defaulted")
        else:
            memory_mb = int(memory)

        requests = _lenient_number(tags, ("requests_per_month",), cast=int)
        if requests is None:
            requests = 0
            notes.append("requests defaulted")
        duration = _lenient_number(tags, ("avg_duration_ms",), cast=int)
        if duration is None:
            duration = DEFAULT_LAMBDA_DURATION_MS
            notes.append("duration defaulted")

        architecture = tags.get("arch") or tags.get("architecture") or ""
        if not architecture:
            notes.append("arch defaulted to x86_64")
        architecture = "arm64" if architecture.lower() in ("arm", "arm64") else "x86_64"

        request_quote = self._require_component_price("lambda", "requests", "Lambda")
        duration_quote = self._require_component_price(
            "lambda", "duration", "Lambda", {"architecture": architecture}
        )

        gb_seconds = (memory_mb / 1024.0) * (duration / 1000.0) * requests
        total = requests * request_quote.unit_price + gb_seconds * duration_quote.unit_price

        detail = f"Lambda {memory_mb}MB ({architecture}), {int(requests)} requests/month, {int(duration)}ms avg duration"
        if notes:
            detail += f" ({', '.join(notes)})"
        detail += f", {gb_seconds:.0f} GB-seconds"
        return Priced(total, duration_quote.unit_price, detail)

    def _estimate_dynamodb(self, resource: NormalizedResource, hours: float) -> Priced:
        tags = resource.tags
        mode = (resource.sku or "on-demand").lower()
        storage_gb = _lenient_number(tags, ("storage_gb",)) or 0.0
        unavailable = []

        storage_quote = self._optional_price("dynamodb", "storage")
        if not storage_quote.available:
            unavailable.append("Storage")
        storage_cost = storage_gb * storage_quote.unit_price

        if mode == "provisioned":
            read_units = int(_lenient_number(tags, ("read_capacity_units",), cast=int) or 0)
            write_units = int(_lenient_number(tags, ("write_capacity_units",), cast=int) or 0)
            rcu_quote = self._optional_price("dynamodb", "rcu")
            wcu_quote = self._optional_price("dynamodb", "wcu")
            if not rcu_quote.available:
                unavailable.append("RCU")
            if not wcu_quote.available:
                unavailable.append("WCU")
            total = (
                read_units * hours * rcu_quote.unit_price
                + write_units * hours * wcu_quote.unit_price
                + storage_cost
            )
            unit_price = rcu_quote.unit_price
            detail = (
                f"DynamoDB provisioned, {read_units} RCUs, {write_units} WCUs, "
                f"{hours:g} hrs/month, {storage_gb:.0f}GB storage"
            )
        else:
            reads = int(_lenient_number(tags, ("read_requests_per_month",), cast=int) or 0)
            writes = int(_lenient_number(tags, ("write_requests_per_month",), cast=int) or 0)
            read_quote = self._optional_price("dynamodb", "read_request")
            write_quote = self._optional_price("dynamodb", "write_request")
            if not read_quote.available:
                unavailable.append("Read")
            if not write_quote.available:
                unavailable.append("Write")
            total = reads * read_quote.unit_price + writes * write_quote.unit_price + storage_cost
            unit_price = storage_quote.unit_price
            detail = f"DynamoDB on-demand, {reads} reads, {writes} writes, {storage_gb:.0f}GB storage"

        if unavailable:
            detail += f" (pricing unavailable: {', '.join(unavailable)})"
        if total == 0:
            detail += " (missing or zero usage inputs)"
        return Priced(total, unit_price, detail)

    def _estimate_elb(self, resource: NormalizedResource, hours: float) -> Priced:
        sku = resource.sku.lower()
        lb_type = "nlb" if ("nlb" in sku or "network" in sku) else "alb"
        metric = "NLCU" if lb_type == "nlb" else "LCU"
        specific_tag = "nlcu_per_hour" if lb_type == "nlb" else "lcu_per_hour"

        capacity_units = _lenient_number(resource.tags, (specific_tag, "capacity_units"))
        capacity_units = capacity_units or 0.0
        if capacity_units > 1000:
            logger.warning("Capacity units unusually high (%s) - verify this is intentional", capacity_units)

        label = lb_type.upper()
        fixed_quote = self._require_component_price("elb", lb_type, label, {"component": "hourly"})
        cu_quote = self._require_component_price("elb", lb_type, label, {"component": "capacity_unit"})

        total = hours * fixed_quote.unit_price + hours * capacity_units * cu_quote.unit_price
        return Priced(
            total,
            fixed_quote.unit_price,
            f"{label}, {hours:g} hrs/month, {capacity_units:.1f} {metric} avg/hr",
        )

    def _estimate_nat_gateway(self, resource: NormalizedResource, hours: float) -> Priced:
        data_processed_gb = _parse_non_negative(resource.tags, "data_processed_gb") or 0.0

        hourly_quote = self._require_component_price("natgw", "hourly", "NAT Gateway")
        data_quote = self._require_component_price("natgw", "data_processed", "NAT Gateway")

        total = hours * hourly_quote.unit_price + data_processed_gb * data_quote.unit_price
        detail = f"NAT Gateway, {hours:g} hrs/month (${hourly_quote.unit_price:.3f}/hr)"
        if data_processed_gb > 0:
            detail += f" + {data_processed_gb:.2f} GB data processed (${data_quote.unit_price:.3f}/GB)"
        return Priced(total, hourly_quote.unit_price, detail)

    def _estimate_cloudwatch(self, resource: NormalizedResource, hours: float) -> Priced:
        mode = (resource.sku or "logs").lower()
        ingestion_gb = _parse_non_negative(resource.tags, "log_ingestion_gb") or 0.0
        storage_gb = _parse_non_negative(resource.tags, "log_storage_gb") or 0.0
        custom_metrics = _parse_non_negative(resource.tags, "custom_metrics") or 0.0
        if custom_metrics > MAX_CUSTOM_METRICS:
            raise InvalidArgumentError(
                f"invalid value for 'custom_metrics': {custom_metrics:g} must be between 0 and {MAX_CUSTOM_METRICS}"
            )

        total = 0.0
        details = []
        if mode in ("logs", "combined"):
            if ingestion_gb > 0:
                quote = self._optional_price("cloudwatch", "log_ingestion")
                if quote.available:
                    cost = ingestion_gb * quote.unit_price
                    total += cost
                    details.append(f"{ingestion_gb:.2f} GB logs ingested (${cost:.2f})")
                else:
                    details.append(PRICING_UNAVAILABLE_TEMPLATE % ("CloudWatch Logs ingestion", self.region))
            if storage_gb > 0:
                quote = self._optional_price("cloudwatch", "log_storage")
                if quote.available:
                    cost = storage_gb * quote.unit_price
                    total += cost
                    details.append(f"{storage_gb:.2f} GB logs stored @ ${quote.unit_price:.4f}/GB-mo (${cost:.2f})")
                else:
                    details.append(PRICING_UNAVAILABLE_TEMPLATE % ("CloudWatch Logs storage", self.region))
        if mode in ("metrics", "combined") and custom_metrics > 0:
            quote = self._optional_price("cloudwatch", "custom_metrics")
            if quote.available:
                cost = custom_metrics * quote.unit_price
                total += cost
                details.append(f"{custom_metrics:.0f} custom metrics (${cost:.2f})")
            else:
                details.append(PRICING_UNAVAILABLE_TEMPLATE % ("CloudWatch Metrics", self.region))

        if details:
            detail = "CloudWatch: " + ", ".join(details)
        else:
            detail = "CloudWatch: No usage specified (use tags: log_ingestion_gb, log_storage_gb, custom_metrics)"
        return Priced(total, 0.0, detail)

    def _estimate_elasticache(self, resource: NormalizedResource, hours: float) -> Priced:
        engine = (resource.tags.get("engine") or "redis").lower()
        raw_nodes = resource.tags.get("num_nodes") or resource.tags.get("num_cache_nodes")
        num_nodes = 1
        if raw_nodes:
            try:
                num_nodes = int(raw_nodes)
            except ValueError:
                raise InvalidArgumentError(f'invalid value for node count: "{raw_nodes}" is not a valid integer')
            if not 1 <= num_nodes <= MAX_CACHE_NODES:
                raise InvalidArgumentError(
                    f"invalid value for node count: {num_nodes} must be between 1 and {MAX_CACHE_NODES}"
                )

        engine_name = {"memcached": "Memcached", "valkey": "Valkey"}.get(engine, "Redis")
        quote = self._require_sku_price(
            "elasticache", resource.sku, f"ElastiCache {engine} node", {"cacheEngine": engine_name}
        )
        nodes = "1 node" if num_nodes == 1 else f"{num_nodes} nodes"
        return Priced(
            quote.unit_price * hours * num_nodes,
            quote.unit_price,
            f"ElastiCache {resource.sku} ({engine}), {nodes}, {hours:g} hrs/month",
        )
