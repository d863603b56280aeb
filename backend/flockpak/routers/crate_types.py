"""Crate type catalog — list for dropdowns + CRUD.

Endpoints:
    GET    /api/crate-types/              List crate types (cached)
    POST   /api/crate-types/              Create crate type
    GET    /api/crate-types/{id}          Single crate type
    PATCH  /api/crate-types/{id}          Update crate type
    DELETE /api/crate-types/{id}          Retire crate type (soft-delete)
"""

import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.database import get_db
from flockpak.middleware.exceptions import ResourceNotFoundError
from flockpak.models.crate_type import CrateType
from flockpak.schemas.common import PaginatedResponse
from flockpak.schemas.crate_type import CrateTypeCreate, CrateTypeOut, CrateTypeUpdate
from flockpak.utils.cache import cached, invalidate_cache

logger = logging.getLogger(__name__)

router = APIRouter()


async def _get_crate_type(db: AsyncSession, crate_type_id: str) -> CrateType:
    crate_type = await db.get(CrateType, crate_type_id)
    if crate_type is None:
        raise ResourceNotFoundError("Crate type", crate_type_id)
    return crate_type


@router.get("/", response_model=PaginatedResponse[CrateTypeOut])
@cached(ttl=300, prefix="crate_types")  # Cache for 5 minutes
async def list_crate_types(
    include_inactive: bool = Query(False),
    limit: int = Query(50, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: AsyncSession = Depends(get_db),
):
    """List crate types with caching (TTL: 5 minutes).

    Invalidated on every catalog write.
    """
    stmt = select(CrateType)
    if not include_inactive:
        stmt = stmt.where(CrateType.is_active == True)  # noqa: E712

    total = await db.scalar(select(func.count()).select_from(stmt.subquery())) or 0
    result = await db.execute(stmt.order_by(CrateType.name).limit(limit).offset(offset))
    items_out = [CrateTypeOut.model_validate(item) for item in result.scalars().all()]

    return PaginatedResponse(
        items=items_out,
        total=total,
        limit=limit,
        offset=offset,
    )


@router.post("/", response_model=CrateTypeOut, status_code=status.HTTP_201_CREATED)
async def create_crate_type(
    body: CrateTypeCreate,
    db: AsyncSession = Depends(get_db),
):
    crate_type = CrateType(**body.model_dump())
    db.add(crate_type)
    # Writes commit before the catalog cache is invalidated
    await db.commit()
    await db.refresh(crate_type)
    await invalidate_cache("crate_types:*")

    logger.info("Created crate type %s (%s)", crate_type.name, crate_type.id)
    return CrateTypeOut.model_validate(crate_type)


@router.get("/{crate_type_id}", response_model=CrateTypeOut)
async def get_crate_type(
    crate_type_id: str,
    db: AsyncSession = Depends(get_db),
):
    return CrateTypeOut.model_validate(await _get_crate_type(db, crate_type_id))


@router.patch("/{crate_type_id}", response_model=CrateTypeOut)
async def update_crate_type(
    crate_type_id: str,
    body: CrateTypeUpdate,
    db: AsyncSession = Depends(get_db),
):
    crate_type = await _get_crate_type(db, crate_type_id)

    updates = body.model_dump(exclude_unset=True)
    for key, value in updates.items():
        setattr(crate_type, key, value)

    await db.commit()
    await db.refresh(crate_type)
    await invalidate_cache("crate_types:*")
    return CrateTypeOut.model_validate(crate_type)


@router.delete("/{crate_type_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_crate_type(
    crate_type_id: str,
    db: AsyncSession = Depends(get_db),
):
    # Batches keep pointing at retired crate types, so never hard-delete
    crate_type = await _get_crate_type(db, crate_type_id)
    crate_type.is_active = False
    await db.commit()
    await invalidate_cache("crate_types:*")
    logger.info("Retired crate type %s", crate_type_id)
