"""Standalone shrinkage and variance calculators (no persistence).

Endpoints:
    POST /api/shrinkage/estimate   Shrinkage components for feed/transport hours
    POST /api/shrinkage/variance   Actual vs estimated slaughterhouse weight
"""

from fastapi import APIRouter

from flockpak.schemas.shrinkage import (
    ShrinkageOut,
    ShrinkageRequest,
    VarianceOut,
    VarianceRequest,
)
from flockpak.services.shrinkage import (
    compute_variance,
    estimate_shrinkage,
    estimated_slaughterhouse_weight,
)

router = APIRouter()


@router.post("/estimate", response_model=ShrinkageOut)
async def estimate(body: ShrinkageRequest):
    components = estimate_shrinkage(body.feed_removal_hours, body.transport_time_hours)
    out = ShrinkageOut(**components.as_dict())
    if body.farm_weight is not None:
        out.estimated_slaughterhouse_weight = estimated_slaughterhouse_weight(
            body.farm_weight, components.total_shrinkage_percent
        )
    return out


@router.post("/variance", response_model=VarianceOut)
async def variance(body: VarianceRequest):
    return VarianceOut.model_validate(
        compute_variance(body.estimated_weight, body.actual_weight)
    )
