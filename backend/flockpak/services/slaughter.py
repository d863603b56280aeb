"""Slaughter tracking — shrinkage estimates and slaughterhouse reconciliation.

    add_catch_record()          farm weighing → shrinkage estimate (frozen)
    add_slaughterhouse_record() actual weight → variance against that estimate

Transport time for an estimate is taken from the request, else from the
slaughter batch, else ``settings.shrinkage.default_transport_hours``.
"""

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flockpak.config import settings
from flockpak.middleware.exceptions import BusinessLogicError, ResourceNotFoundError
from flockpak.models.slaughter import (
    SlaughterBatch,
    SlaughterCatchRecord,
    SlaughterhouseRecord,
)
from flockpak.services.shrinkage import (
    compute_variance,
    estimate_shrinkage,
    estimated_slaughterhouse_weight,
)

logger = logging.getLogger(__name__)


async def create_slaughter_batch(
    db: AsyncSession,
    flock_id: str,
    batch_number: str,
    transport_time_hours: float | None = None,
    notes: str | None = None,
) -> SlaughterBatch:
    batch = SlaughterBatch(
        flock_id=flock_id,
        batch_number=batch_number,
        start_date=date.today(),
        status="in_progress",
        transport_time_hours=transport_time_hours,
        notes=notes,
    )
    db.add(batch)
    await db.flush()
    logger.info("Created slaughter batch %s for flock %s", batch_number, flock_id)
    return batch


async def list_slaughter_batches(db: AsyncSession, flock_id: str) -> list[SlaughterBatch]:
    result = await db.execute(
        select(SlaughterBatch)
        .where(SlaughterBatch.flock_id == flock_id)
        .order_by(SlaughterBatch.start_date.desc(), SlaughterBatch.created_at.desc())
    )
    return list(result.scalars().all())


async def _get_slaughter_batch(db: AsyncSession, batch_id: str) -> SlaughterBatch:
    batch = await db.get(SlaughterBatch, batch_id)
    if batch is None:
        raise ResourceNotFoundError("Slaughter batch", batch_id)
    return batch


async def add_catch_record(
    db: AsyncSession,
    slaughter_batch_id: str,
    catch_date: date,
    day_number: int,
    birds_caught: int,
    average_weight_at_farm: float,
    feed_removal_hours: float,
    transport_time_hours: float | None = None,
    notes: str | None = None,
) -> SlaughterCatchRecord:
    """Record a day's catch with its shrinkage estimate attached."""
    batch = await _get_slaughter_batch(db, slaughter_batch_id)

    if transport_time_hours is None:
        transport_time_hours = batch.transport_time_hours
    if transport_time_hours is None:
        transport_time_hours = settings.shrinkage.default_transport_hours

    shrinkage = estimate_shrinkage(feed_removal_hours, transport_time_hours)
    estimated = estimated_slaughterhouse_weight(
        average_weight_at_farm, shrinkage.total_shrinkage_percent
    )

    record = SlaughterCatchRecord(
        slaughter_batch_id=batch.id,
        catch_date=catch_date,
        day_number=day_number,
        birds_caught=birds_caught,
        average_weight_at_farm=average_weight_at_farm,
        feed_removal_hours=feed_removal_hours,
        transport_time_hours=transport_time_hours,
        estimated_weight_at_slaughterhouse=estimated,
        notes=notes,
        **shrinkage.as_dict(),
    )
    db.add(record)
    await db.flush()

    logger.info(
        "Catch record day %d on slaughter batch %s: %d birds, %.2f%% shrinkage, est. %.3f kg",
        day_number, batch.batch_number, birds_caught,
        shrinkage.total_shrinkage_percent, estimated,
    )
    return record


async def delete_catch_record(db: AsyncSession, catch_record_id: str) -> None:
    record = await db.get(SlaughterCatchRecord, catch_record_id)
    if record is None:
        raise ResourceNotFoundError("Catch record", catch_record_id)
    # Cascades to the slaughterhouse record, if any
    await db.delete(record)
    await db.flush()
    logger.info("Deleted catch record %s", catch_record_id)


async def _get_receipt(db: AsyncSession, catch_record_id: str) -> SlaughterhouseRecord | None:
    result = await db.execute(
        select(SlaughterhouseRecord).where(
            SlaughterhouseRecord.catch_record_id == catch_record_id
        )
    )
    return result.scalar_one_or_none()


async def add_slaughterhouse_record(
    db: AsyncSession,
    catch_record_id: str,
    actual_weight_at_slaughterhouse: float,
    slaughterhouse_reference: str | None = None,
    notes: str | None = None,
) -> SlaughterhouseRecord:
    """Reconcile the slaughterhouse weight against the stored estimate."""
    record = await db.get(SlaughterCatchRecord, catch_record_id)
    if record is None:
        raise ResourceNotFoundError("Catch record", catch_record_id)
    if await _get_receipt(db, catch_record_id) is not None:
        raise BusinessLogicError(
            f"Slaughterhouse data already recorded for catch record {catch_record_id}",
            error_code="DUPLICATE_RECEIPT",
            status_code=409,
        )

    result = compute_variance(
        record.estimated_weight_at_slaughterhouse, actual_weight_at_slaughterhouse
    )
    receipt = SlaughterhouseRecord(
        catch_record_id=catch_record_id,
        actual_weight_at_slaughterhouse=actual_weight_at_slaughterhouse,
        variance=result.variance,
        variance_percent=result.variance_percent,
        slaughterhouse_reference=slaughterhouse_reference,
        received_date=datetime.utcnow(),
        notes=notes,
    )
    db.add(receipt)
    await db.flush()

    logger.info(
        "Slaughterhouse receipt for catch record %s: variance %.3f kg (%.2f%%)",
        catch_record_id, result.variance, result.variance_percent,
    )
    return receipt


async def get_slaughter_batch_summary(db: AsyncSession, batch_id: str) -> dict:
    """Batch, its catch records (each with receipt or None) and averages."""
    result = await db.execute(
        select(SlaughterBatch)
        .where(SlaughterBatch.id == batch_id)
        .options(
            selectinload(SlaughterBatch.catch_records)
            .selectinload(SlaughterCatchRecord.slaughterhouse_record)
        )
    )
    batch = result.scalar_one_or_none()
    if batch is None:
        raise ResourceNotFoundError("Slaughter batch", batch_id)

    records = list(batch.catch_records)
    count = len(records)
    avg_farm = (
        sum(r.average_weight_at_farm for r in records) / count if count else 0.0
    )
    avg_estimated = (
        sum(r.estimated_weight_at_slaughterhouse for r in records) / count if count else 0.0
    )

    return {
        "batch": batch,
        "catch_records": records,
        "total_birds_caught": sum(r.birds_caught for r in records),
        "avg_farm_weight": round(avg_farm, 3),
        "avg_estimated_slaughterhouse_weight": round(avg_estimated, 3),
    }
