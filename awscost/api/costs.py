"""
API routes for projected and actual cost estimation.
"""
from datetime import datetime, timezone
from typing import Dict, Any, List, Optional, Tuple, Union
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from awscost.domain.cost_models import CostEstimate, EstimateKind, NormalizedResource
from awscost.domain.errors import InvalidArgumentError, PricingNotFoundError, RegionMismatchError
from awscost.pricing.aws_pricing_client import AWSPricingError
from awscost.services.billing_records import billing_record_for_estimate
from awscost.services.cost_estimator import CostEstimator
from awscost.services.pricing_spec import PricingSpecService
from awscost.services.resource_types import build_resource
from awscost.api.dependencies import get_cost_estimator


logger = logging.getLogger(__name__)
router = APIRouter()


class ResourceDescriptorModel(BaseModel):
    """A resource to price."""
    provider: str = Field(default="aws", description="Cloud provider (only 'aws' is supported)")
    resource_type: str = Field(
        default="",
        description="Pulumi token, Terraform type or canonical key (e.g. 'aws:ec2/instance:Instance')",
    )
    sku: str = Field(default="", description="Instance type, volume type, storage class or node type")
    region: str = Field(default="", description="AWS region code")
    tags: Dict[str, str] = Field(default_factory=dict, description="Resource tags and usage hints")
    id: str = Field(default="", description="Caller's resource identifier")
    arn: Optional[str] = Field(None, description="Optional ARN; supplies region, id and service")
    usage_profile: str = Field(default="production", description="'production' or 'development'")


class ActualCostRequest(BaseModel):
    """Request model for actual cost over a runtime window."""
    resource: ResourceDescriptorModel
    start: Optional[datetime] = Field(None, description="Window start (defaults to pulumi:created tag)")
    end: Optional[datetime] = Field(None, description="Window end (defaults to now)")


class BatchEstimateRequest(BaseModel):
    """Request model for batch estimation."""
    resources: List[ResourceDescriptorModel] = Field(..., description="Resources to estimate")


def _build(descriptor: ResourceDescriptorModel) -> NormalizedResource:
    return build_resource(
        provider=descriptor.provider,
        resource_type=descriptor.resource_type,
        sku=descriptor.sku,
        region=descriptor.region,
        tags=descriptor.tags,
        resource_id=descriptor.id,
        usage_profile=descriptor.usage_profile,
        arn=descriptor.arn,
    )


def to_normalized_resource(descriptor: ResourceDescriptorModel) -> NormalizedResource:
    """
    Normalize a request descriptor.

    Raises:
        HTTPException: If the ARN cannot be parsed
    """
    try:
        return _build(descriptor)
    except InvalidArgumentError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error


def _normalize_or_reject(descriptor: ResourceDescriptorModel) -> Union[NormalizedResource, CostEstimate]:
    """Normalize a batch item, turning an unparseable descriptor into an error estimate."""
    try:
        return _build(descriptor)
    except InvalidArgumentError as error:
        logger.info("Rejected batch descriptor %s: %s", descriptor.resource_type or descriptor.arn, error)
        return CostEstimate(
            monthly_cost_usd=0.0,
            unit_price=0.0,
            billing_detail=str(error),
            kind=EstimateKind.UNSUPPORTED,
            resource_type=descriptor.resource_type or descriptor.arn or "",
            region=descriptor.region,
            sku=descriptor.sku,
            error="invalid_argument",
        )


def _current_month() -> Tuple[datetime, datetime]:
    now = datetime.now(timezone.utc)
    start = now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)
    if start.month == 12:
        end = start.replace(year=start.year + 1, month=1)
    else:
        end = start.replace(month=start.month + 1)
    return start, end


def raise_for_estimation_error(error: Exception) -> None:
    """
    Map an estimation error to an HTTPException.

    Raises:
        HTTPException: Always
    """
    if isinstance(error, RegionMismatchError):
        raise HTTPException(status_code=412, detail=error.to_dict()) from error
    if isinstance(error, PricingNotFoundError):
        raise HTTPException(status_code=404, detail=error.to_dict()) from error
    if isinstance(error, InvalidArgumentError):
        raise HTTPException(status_code=400, detail=str(error)) from error
    if isinstance(error, AWSPricingError):
        raise HTTPException(status_code=503, detail="AWS pricing service unavailable") from error
    raise HTTPException(
        status_code=500,
        detail="An unexpected error occurred while estimating cost"
    ) from error


@router.post("/api/costs/projected")
async def get_projected_cost(
    descriptor: ResourceDescriptorModel,
    estimator: CostEstimator = Depends(get_cost_estimator),
) -> Dict[str, Any]:
    """
    Estimate the projected monthly cost of a single resource.

    Returns:
        JSON response with the estimate and a FOCUS billing record for the current month

    Raises:
        HTTPException: 400 on invalid input, 404 when pricing is missing,
                       412 on region mismatch, 503 when the pricing API fails
    """
    resource = to_normalized_resource(descriptor)
    try:
        estimate = await run_in_threadpool(estimator.estimate, resource)
    except HTTPException:
        raise
    except Exception as error:
        logger.info("Projected cost failed for %s: %s", resource.resource_type, error)
        raise_for_estimation_error(error)

    period_start, period_end = _current_month()
    record = billing_record_for_estimate(estimate, period_start, period_end)
    return {
        "estimate": estimate.to_dict(),
        "billing_record": record.to_dict(),
    }


@router.post("/api/costs/actual")
async def get_actual_cost(
    actual_request: ActualCostRequest,
    estimator: CostEstimator = Depends(get_cost_estimator),
) -> Dict[str, Any]:
    """
    Estimate the cost of a resource over a runtime window.

    The projected monthly cost is prorated by elapsed hours.

    Returns:
        JSON response with the estimate, billing record, confidence and source
    """
    resource = to_normalized_resource(actual_request.resource)
    try:
        result = await run_in_threadpool(
            estimator.estimate_actual, resource, actual_request.start, actual_request.end
        )
    except HTTPException:
        raise
    except Exception as error:
        logger.info("Actual cost failed for %s: %s", resource.resource_type, error)
        raise_for_estimation_error(error)

    record = billing_record_for_estimate(
        result.estimate, result.period_start, result.period_end, cost=result.cost_usd
    )
    response = result.to_dict()
    response["billing_record"] = record.to_dict()
    return response


@router.post("/api/costs/batch")
async def estimate_batch(
    batch_request: BatchEstimateRequest,
    estimator: CostEstimator = Depends(get_cost_estimator),
) -> Dict[str, Any]:
    """
    Estimate many resources; per-resource failures are reported inline.

    Returns:
        JSON response with estimates in request order
    """
    items = [_normalize_or_reject(descriptor) for descriptor in batch_request.resources]
    resources = [item for item in items if isinstance(item, NormalizedResource)]
    try:
        estimated = iter(await run_in_threadpool(estimator.estimate_batch, resources, 4))
    except AWSPricingError as error:
        raise HTTPException(status_code=503, detail="AWS pricing service unavailable") from error

    estimates = [next(estimated) if isinstance(item, NormalizedResource) else item for item in items]
    return {"estimates": [estimate.to_dict() for estimate in estimates]}


@router.post("/api/costs/supports")
async def supports(
    descriptor: ResourceDescriptorModel,
    estimator: CostEstimator = Depends(get_cost_estimator),
) -> Dict[str, Any]:
    """Report whether a resource can be priced, with a reason when it cannot."""
    resource = to_normalized_resource(descriptor)
    supported, reason = estimator.supports(resource)
    return {"supported": supported, "reason": reason}


@router.post("/api/costs/pricing-spec")
async def get_pricing_spec(
    descriptor: ResourceDescriptorModel,
    estimator: CostEstimator = Depends(get_cost_estimator),
) -> Dict[str, Any]:
    """
    Describe how a resource is billed without computing a cost.

    Returns:
        JSON response with the billing mode, rate per unit, unit and assumptions

    Raises:
        HTTPException: 400 on invalid input, 412 on region mismatch, 503 when the pricing API fails
    """
    resource = to_normalized_resource(descriptor)
    try:
        spec = await run_in_threadpool(PricingSpecService(estimator).describe, resource)
    except HTTPException:
        raise
    except Exception as error:
        logger.info("Pricing spec failed for %s: %s", resource.resource_type, error)
        raise_for_estimation_error(error)
    return {"spec": spec.to_dict()}
