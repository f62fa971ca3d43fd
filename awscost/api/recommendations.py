"""
API routes for cost-saving recommendations.
"""
from typing import Dict, Any, List, Optional
import logging

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from starlette.concurrency import run_in_threadpool

from awscost.api.costs import ResourceDescriptorModel, to_normalized_resource
from awscost.api.dependencies import get_recommendation_engine
from awscost.domain.errors import InvalidArgumentError
from awscost.domain.recommendation_models import RecommendationFilter
from awscost.pricing.aws_pricing_client import AWSPricingError
from awscost.services.recommendations import RecommendationEngine, summarize


logger = logging.getLogger(__name__)
router = APIRouter()


class RecommendationFilterModel(BaseModel):
    """Filter criteria; all set fields must match."""
    region: Optional[str] = Field(None, description="Only resources in this region")
    resource_type: Optional[str] = Field(None, description="Only resources of this type")
    sku: Optional[str] = Field(None, description="Only resources with this SKU")
    tags: Dict[str, str] = Field(default_factory=dict, description="Tags a resource must carry")


class RecommendationsRequest(BaseModel):
    """Request model for recommendations."""
    resources: List[ResourceDescriptorModel] = Field(..., description="Resources to analyze")
    filter: Optional[RecommendationFilterModel] = Field(None, description="Optional filter criteria")


@router.post("/api/recommendations")
async def get_recommendations(
    recommendations_request: RecommendationsRequest,
    engine: RecommendationEngine = Depends(get_recommendation_engine),
) -> Dict[str, Any]:
    """
    Generate generation-upgrade, Graviton and volume-type recommendations.

    Returns:
        JSON response with recommendations and a savings summary

    Raises:
        HTTPException: 400 if the batch is too large or fails strict validation,
                       503 when the pricing API fails
    """
    resources = [to_normalized_resource(descriptor) for descriptor in recommendations_request.resources]
    criteria = None
    if recommendations_request.filter is not None:
        criteria = RecommendationFilter(
            region=recommendations_request.filter.region,
            resource_type=recommendations_request.filter.resource_type,
            sku=recommendations_request.filter.sku,
            tags=dict(recommendations_request.filter.tags),
        )

    try:
        recommendations = await run_in_threadpool(engine.get_recommendations, resources, criteria)
    except InvalidArgumentError as error:
        raise HTTPException(status_code=400, detail=str(error)) from error
    except AWSPricingError as error:
        raise HTTPException(status_code=503, detail="AWS pricing service unavailable") from error

    return {
        "recommendations": [recommendation.to_dict() for recommendation in recommendations],
        "summary": summarize(recommendations).to_dict(),
    }
