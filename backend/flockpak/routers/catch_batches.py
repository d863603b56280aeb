"""Catch batch router — corrections to recorded weighings.

Endpoints:
    PATCH  /api/catch-batches/{batch_id}   Correct a weighing (merge + recompute)
    DELETE /api/catch-batches/{batch_id}   Remove a weighing
"""

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.database import get_db
from flockpak.schemas.catch import BatchUpdate, BatchUpdateResponse
from flockpak.services import catch_ledger

router = APIRouter()


@router.patch("/{batch_id}", response_model=BatchUpdateResponse)
async def update_batch(
    batch_id: str,
    body: BatchUpdate,
    db: AsyncSession = Depends(get_db),
):
    """Fields left out keep their stored value; totals are recomputed."""
    result = await catch_ledger.update_batch(db, batch_id, body.model_dump(exclude_unset=True))
    return BatchUpdateResponse(
        total_net_weight=result["total_net_weight"],
        average_bird_weight=result["average_bird_weight"],
    )


@router.delete("/{batch_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_batch(
    batch_id: str,
    db: AsyncSession = Depends(get_db),
):
    await catch_ledger.delete_batch(db, batch_id)
