"""Slaughter tracking router — catch records, shrinkage estimates, receipts.

Endpoints:
    POST   /api/slaughter/batches                                  Create slaughter batch
    GET    /api/slaughter/batches?flock_id=                        List batches for a flock
    GET    /api/slaughter/batches/{batch_id}                       Batch summary
    POST   /api/slaughter/batches/{batch_id}/catch-records         Add day's catch record
    DELETE /api/slaughter/catch-records/{record_id}                Delete catch record
    POST   /api/slaughter/catch-records/{record_id}/slaughterhouse Record actual weight
"""

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.database import get_db
from flockpak.schemas.slaughter import (
    CatchRecordCreate,
    CatchRecordDetailOut,
    CatchRecordOut,
    SlaughterBatchCreate,
    SlaughterBatchOut,
    SlaughterBatchSummary,
    SlaughterhouseRecordCreate,
    SlaughterhouseRecordOut,
)
from flockpak.services import slaughter

router = APIRouter()


# ── Slaughter batches ────────────────────────────────────────

@router.post("/batches", response_model=SlaughterBatchOut, status_code=status.HTTP_201_CREATED)
async def create_slaughter_batch(
    body: SlaughterBatchCreate,
    db: AsyncSession = Depends(get_db),
):
    batch = await slaughter.create_slaughter_batch(db, **body.model_dump())
    return SlaughterBatchOut.model_validate(batch)


@router.get("/batches", response_model=list[SlaughterBatchOut])
async def list_slaughter_batches(
    flock_id: str = Query(...),
    db: AsyncSession = Depends(get_db),
):
    batches = await slaughter.list_slaughter_batches(db, flock_id)
    return [SlaughterBatchOut.model_validate(b) for b in batches]


@router.get("/batches/{batch_id}", response_model=SlaughterBatchSummary)
async def get_slaughter_batch(
    batch_id: str,
    db: AsyncSession = Depends(get_db),
):
    """Batch with every catch record, its receipt (if any) and averages."""
    summary = await slaughter.get_slaughter_batch_summary(db, batch_id)
    return SlaughterBatchSummary(
        batch=SlaughterBatchOut.model_validate(summary["batch"]),
        catch_records=[
            CatchRecordDetailOut.model_validate(r) for r in summary["catch_records"]
        ],
        total_birds_caught=summary["total_birds_caught"],
        avg_farm_weight=summary["avg_farm_weight"],
        avg_estimated_slaughterhouse_weight=summary["avg_estimated_slaughterhouse_weight"],
    )


# ── Catch records ────────────────────────────────────────────

@router.post(
    "/batches/{batch_id}/catch-records",
    response_model=CatchRecordOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_catch_record(
    batch_id: str,
    body: CatchRecordCreate,
    db: AsyncSession = Depends(get_db),
):
    record = await slaughter.add_catch_record(db, batch_id, **body.model_dump())
    return CatchRecordOut.model_validate(record)


@router.delete("/catch-records/{record_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_catch_record(
    record_id: str,
    db: AsyncSession = Depends(get_db),
):
    await slaughter.delete_catch_record(db, record_id)


@router.post(
    "/catch-records/{record_id}/slaughterhouse",
    response_model=SlaughterhouseRecordOut,
    status_code=status.HTTP_201_CREATED,
)
async def add_slaughterhouse_record(
    record_id: str,
    body: SlaughterhouseRecordCreate,
    db: AsyncSession = Depends(get_db),
):
    receipt = await slaughter.add_slaughterhouse_record(db, record_id, **body.model_dump())
    return SlaughterhouseRecordOut.model_validate(receipt)
