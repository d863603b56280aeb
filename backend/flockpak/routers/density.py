"""Density router — stocking recommendation and crate distribution planning.

Endpoints:
    POST /api/density/recommend   Birds-per-crate band for a crate + catch date
    POST /api/density/plan        Standard/odd crate split for a target
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.database import get_db
from flockpak.schemas.density import (
    PlanOut,
    PlanRequest,
    PlanResponse,
    RecommendationOut,
    RecommendRequest,
)
from flockpak.services.catch_sessions import get_crate_type
from flockpak.services.density import (
    CrateGeometry,
    DensityRecommendation,
    plan_distribution,
    recommend_density_for_date,
)

router = APIRouter()


async def _geometry(db: AsyncSession, body: RecommendRequest) -> CrateGeometry:
    if body.crate_type_id:
        return CrateGeometry.from_crate_type(await get_crate_type(db, body.crate_type_id))
    return CrateGeometry(
        length_cm=body.length_cm,
        width_cm=body.width_cm,
        height_cm=body.height_cm or 0.0,
    )


@router.post("/recommend", response_model=RecommendationOut)
async def recommend(
    body: RecommendRequest,
    db: AsyncSession = Depends(get_db),
):
    """Recommend min / max / midpoint birds per crate.

    The season comes from the catch date unless ``season`` overrides it.
    """
    recommendation = recommend_density_for_date(
        await _geometry(db, body),
        body.catch_date,
        body.transport_duration_hours,
        season_override=body.season,
    )
    return RecommendationOut.model_validate(recommendation)


@router.post("/plan", response_model=PlanResponse)
async def plan(
    body: PlanRequest,
    db: AsyncSession = Depends(get_db),
):
    if body.recommendation is not None:
        recommendation = DensityRecommendation(**body.recommendation.model_dump())
    else:
        crate_type = await get_crate_type(db, body.crate_type_id)
        recommendation = recommend_density_for_date(
            CrateGeometry.from_crate_type(crate_type),
            body.catch_date,
            body.transport_duration_hours,
            season_override=body.season,
        )

    distribution = plan_distribution(body.target_birds, body.available_crates, recommendation)
    return PlanResponse(
        recommendation=RecommendationOut.model_validate(recommendation),
        distribution=PlanOut.model_validate(distribution),
    )
