"""
Pricing specifications.

Describes how a resource is billed (billing mode, primary rate and unit)
without computing a monthly cost. Rates come from the same pricing client
and lookup keys the cost formulas use, so a spec and an estimate for the
same resource always agree on the rate.
"""
import logging
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional

from awscost.domain.cost_models import EstimateKind, NormalizedResource, PricingSpec
from awscost.pricing.base import PriceQuote
from awscost.services.billing_records import get_pricing_unit
from awscost.services.cost_estimator import (
    DEFAULT_RDS_ENGINE,
    PRICING_NOT_FOUND_TEMPLATE,
    RDS_ENGINE_NAMES,
    CostEstimator,
)


logger = logging.getLogger(__name__)


class PricingSpecService:
    """Builds pricing specifications through a cost estimator's pricing client."""

    def __init__(self, estimator: CostEstimator):
        self.estimator = estimator
        self._builders: Mapping[str, Callable[[NormalizedResource, str], PricingSpec]] = MappingProxyType({
            "ec2": self._ec2,
            "ebs": self._ebs,
            "s3": self._s3,
            "rds": self._rds,
            "elasticache": self._elasticache,
            "eks": self._eks,
            "lambda": self._lambda,
            "dynamodb": self._dynamodb,
            "elb": self._elb,
            "natgw": self._nat_gateway,
            "cloudwatch": self._cloudwatch,
        })

    def describe(self, resource: NormalizedResource) -> PricingSpec:
        """
        Describe how a resource is billed.

        Missing rates are reported in the spec (rate 0 and a not-found
        description) rather than raised.

        Raises:
            InvalidArgumentError: If required fields are missing
            RegionMismatchError: If the resource is in a different region than the estimator
        """
        region = self.estimator.validate(resource)
        kind = self.estimator.resolve_kind(resource.service)

        if kind is EstimateKind.ZERO_COST:
            spec = self._spec(
                resource, region, "free", None, f"{resource.resource_type} has no direct AWS charge",
            )
        elif resource.service in self._builders:
            spec = self._builders[resource.service](resource, region)
        else:
            spec = self._spec(
                resource, region, "unknown", None,
                f'Resource type "{resource.resource_type}" not supported for pricing specification',
            )

        logger.info(
            "Pricing spec for %s in %s: %s at %s/%s",
            resource.resource_type, region, spec.billing_mode, spec.rate_per_unit, spec.unit,
        )
        return spec

    def _lookup(self, service: str, sku: str, attributes: Optional[Dict[str, str]] = None) -> PriceQuote:
        return self.estimator.pricing_client.lookup(service, sku, self.estimator.region, attributes)

    @staticmethod
    def _spec(
        resource: NormalizedResource,
        region: str,
        billing_mode: str,
        quote: Optional[PriceQuote],
        description: str,
        assumptions: Optional[List[str]] = None,
        sku: Optional[str] = None,
    ) -> PricingSpec:
        available = quote is not None and quote.available
        return PricingSpec(
            provider=resource.provider,
            resource_type=resource.resource_type,
            sku=resource.sku if sku is None else sku,
            region=region,
            billing_mode=billing_mode,
            rate_per_unit=quote.unit_price if available else 0.0,
            unit=quote.unit if available and quote.unit else get_pricing_unit(resource.service),
            description=description,
            assumptions=list(assumptions or []),
        )

    def _not_found(self, resource, region, billing_mode, label, sku, note) -> PricingSpec:
        return self._spec(
            resource, region, billing_mode, None, PRICING_NOT_FOUND_TEMPLATE % (label, sku), [note], sku=sku,
        )

    # ------------------------------------------------------------------
    # Per-service specs
    # ------------------------------------------------------------------

    def _ec2(self, resource: NormalizedResource, region: str) -> PricingSpec:
        platform = resource.tags.get("platform", "").lower()
        operating_system = "Windows" if platform == "windows" else "Linux"
        tenancy = {"dedicated": "Dedicated", "host": "Host"}.get(resource.tags.get("tenancy", "").lower(), "Shared")

        quote = self._lookup("ec2", resource.sku, {"operatingSystem": operating_system, "tenancy": tenancy})
        if not quote.available:
            return self._not_found(
                resource, region, "per_hour", "EC2 instance type", resource.sku,
                "Instance type not found in pricing data",
            )
        return self._spec(
            resource, region, "per_hour", quote,
            f"On-demand {operating_system} EC2 instance with {tenancy} tenancy",
            [
                f"Operating System: {operating_system}",
                f"Tenancy: {tenancy}",
                "Pre-installed software: None",
                "Capacity Status: Used",
            ],
        )

    def _ebs(self, resource: NormalizedResource, region: str) -> PricingSpec:
        quote = self._lookup("ebs", resource.sku)
        if not quote.available:
            return self._not_found(
                resource, region, "per_gb_month", "EBS volume type", resource.sku,
                "Volume type not found in pricing data",
            )
        return self._spec(
            resource, region, "per_gb_month", quote, f"EBS {resource.sku} storage",
            ["Storage only (IOPS/throughput not included)", "Standard provisioned capacity"],
        )

    def _s3(self, resource: NormalizedResource, region: str) -> PricingSpec:
        storage_class = (resource.sku or "STANDARD").upper()
        quote = self._lookup("s3", storage_class)
        if not quote.available:
            return self._not_found(
                resource, region, "per_gb_month", "S3 storage class", storage_class,
                "Storage class not found in pricing data",
            )
        return self._spec(
            resource, region, "per_gb_month", quote, f"S3 {storage_class} storage",
            [
                "Storage cost only",
                "Requests and data transfer billed separately",
                "Lifecycle transitions not included",
            ],
            sku=storage_class,
        )

    def _rds(self, resource: NormalizedResource, region: str) -> PricingSpec:
        engine = resource.tags.get("engine", "").lower() or DEFAULT_RDS_ENGINE
        engine_name = RDS_ENGINE_NAMES.get(engine, RDS_ENGINE_NAMES[DEFAULT_RDS_ENGINE])

        quote = self._lookup("rds", resource.sku, {"databaseEngine": engine_name, "deploymentOption": "Single-AZ"})
        if not quote.available:
            return self._not_found(
                resource, region, "per_hour", "RDS instance type", resource.sku,
                f"Instance type {resource.sku} with engine {engine} not found",
            )
        return self._spec(
            resource, region, "per_hour", quote, f"RDS {resource.sku} instance with {engine_name} engine",
            [
                f"Database engine: {engine_name}",
                "Single-AZ deployment",
                "Storage costs billed separately",
                "Backup storage not included",
                "Read replicas billed separately",
            ],
        )

    def _elasticache(self, resource: NormalizedResource, region: str) -> PricingSpec:
        engine = (resource.tags.get("engine") or "redis").lower()
        engine_name = {"memcached": "Memcached", "valkey": "Valkey"}.get(engine, "Redis")

        quote = self._lookup("elasticache", resource.sku, {"cacheEngine": engine_name})
        if not quote.available:
            return self._not_found(
                resource, region, "per_hour", f"ElastiCache {engine} node", resource.sku,
                "Node type not found in pricing data",
            )
        return self._spec(
            resource, region, "per_hour", quote, f"ElastiCache {resource.sku} node ({engine_name})",
            ["Rate is per node", "Backup storage not included"],
        )

    def _eks(self, resource: NormalizedResource, region: str) -> PricingSpec:
        support = resource.tags.get("support_type", "").lower()
        if "extended" in resource.sku.lower() or support == "extended":
            support = "extended"
        else:
            support = "standard"

        quote = self._lookup("eks", support)
        if not quote.available:
            return self._spec(resource, region, "per_hour", None, "EKS pricing not found")
        return self._spec(
            resource, region, "per_hour", quote, f"EKS cluster with {support} support",
            [
                "Control plane costs only",
                "Worker node EC2 instances billed separately",
                "EKS add-ons may incur additional costs",
                "Data transfer costs not included",
            ],
        )

    def _lambda(self, resource: NormalizedResource, region: str) -> PricingSpec:
        architecture = resource.tags.get("arch") or resource.tags.get("architecture") or ""
        architecture = "arm64" if architecture.lower() in ("arm", "arm64") else "x86_64"

        request_quote = self._lookup("lambda", "requests")
        duration_quote = self._lookup("lambda", "duration", {"architecture": architecture})
        if not request_quote.available or not duration_quote.available:
            return self._spec(
                resource, region, "per_request_and_gb_second", None, "Lambda pricing not found",
                ["Lambda pricing data not available"], sku=architecture,
            )
        return self._spec(
            resource, region, "per_request_and_gb_second", duration_quote, f"Lambda {architecture} architecture",
            [
                f"Request rate: ${request_quote.unit_price:.10f} per request",
                f"Compute rate: ${duration_quote.unit_price:.10f} per GB-second ({architecture})",
                "Provisioned concurrency not included",
                "Lambda@Edge pricing differs",
            ],
            sku=architecture,
        )

    def _dynamodb(self, resource: NormalizedResource, region: str) -> PricingSpec:
        mode = (resource.sku or "on-demand").lower()
        storage_quote = self._lookup("dynamodb", "storage")

        if mode == "provisioned":
            rcu_quote = self._lookup("dynamodb", "rcu")
            wcu_quote = self._lookup("dynamodb", "wcu")
            if not (rcu_quote.available and wcu_quote.available and storage_quote.available):
                return self._spec(
                    resource, region, "provisioned_capacity", None, "DynamoDB provisioned pricing not found",
                    ["Provisioned capacity pricing data not available"], sku=mode,
                )
            return self._spec(
                resource, region, "provisioned_capacity", rcu_quote, "DynamoDB provisioned capacity mode",
                [
                    f"Read Capacity Unit: ${rcu_quote.unit_price:.6f} per hour",
                    f"Write Capacity Unit: ${wcu_quote.unit_price:.6f} per hour",
                    f"Storage: ${storage_quote.unit_price:.4f} per GB-month",
                    "Auto-scaling adjustments not included",
                    "Reserved capacity discounts not applied",
                ],
                sku=mode,
            )

        read_quote = self._lookup("dynamodb", "read_request")
        write_quote = self._lookup("dynamodb", "write_request")
        if not (read_quote.available and write_quote.available and storage_quote.available):
            return self._spec(
                resource, region, "on_demand", None, "DynamoDB on-demand pricing not found",
                ["On-demand pricing data not available"], sku=mode,
            )
        return self._spec(
            resource, region, "on_demand", storage_quote, "DynamoDB on-demand capacity mode",
            [
                f"Read request units: ${read_quote.unit_price * 1_000_000:.6f} per million",
                f"Write request units: ${write_quote.unit_price * 1_000_000:.6f} per million",
                f"Storage: ${storage_quote.unit_price:.4f} per GB-month",
                "Global tables replication costs not included",
                "DynamoDB Streams not included",
            ],
            sku=mode,
        )

    def _elb(self, resource: NormalizedResource, region: str) -> PricingSpec:
        sku = resource.sku.lower()
        if "nlb" in sku or "network" in sku:
            lb_type, metric, name = "nlb", "NLCU", "Network Load Balancer"
        else:
            lb_type, metric, name = "alb", "LCU", "Application Load Balancer"
        billing_mode = f"per_hour_plus_{metric.lower()}"

        fixed_quote = self._lookup("elb", lb_type, {"component": "hourly"})
        cu_quote = self._lookup("elb", lb_type, {"component": "capacity_unit"})
        if not fixed_quote.available or not cu_quote.available:
            return self._spec(resource, region, billing_mode, None, f"{lb_type.upper()} pricing not found", sku=lb_type)
        return self._spec(
            resource, region, billing_mode, fixed_quote, name,
            [
                f"{metric} rate: ${cu_quote.unit_price:.4f} per {metric}-hour",
                "Data transfer costs not included",
            ],
            sku=lb_type,
        )

    def _nat_gateway(self, resource: NormalizedResource, region: str) -> PricingSpec:
        hourly_quote = self._lookup("natgw", "hourly")
        data_quote = self._lookup("natgw", "data_processed")
        if not hourly_quote.available or not data_quote.available:
            return self._spec(resource, region, "per_hour_plus_data", None, "NAT Gateway pricing not found")
        return self._spec(
            resource, region, "per_hour_plus_data", hourly_quote, "NAT Gateway",
            [
                f"Data processing: ${data_quote.unit_price:.3f} per GB",
                "Data transfer OUT to internet billed separately",
                "Cross-AZ data transfer costs not included",
            ],
        )

    def _cloudwatch(self, resource: NormalizedResource, region: str) -> PricingSpec:
        mode = (resource.sku or "logs").lower()
        if mode == "metrics":
            quote = self._lookup("cloudwatch", "custom_metrics")
            if not quote.available:
                return self._spec(resource, region, "per_metric", None, "CloudWatch metrics pricing not found")
            return self._spec(
                resource, region, "per_metric", quote, "CloudWatch custom metrics",
                ["Rate is the first pricing tier", "API requests billed separately"],
            )

        ingestion_quote = self._lookup("cloudwatch", "log_ingestion")
        storage_quote = self._lookup("cloudwatch", "log_storage")
        if not ingestion_quote.available or not storage_quote.available:
            return self._spec(
                resource, region, "ingestion_plus_storage", None, "CloudWatch Logs pricing not found",
            )
        return self._spec(
            resource, region, "ingestion_plus_storage", ingestion_quote, "CloudWatch Logs",
            [
                f"Log storage: ${storage_quote.unit_price:.4f} per GB-month",
                "Logs Insights queries billed separately",
            ],
        )
