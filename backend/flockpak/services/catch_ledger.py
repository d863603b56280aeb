"""Batch weighing ledger — records stacked-crate weighings during a catch.

Every mutation (add / update / delete) is one atomic unit, serialized per
session by ``session_write_lock()``:

  1. validate the inputs and the session status
  2. write the batch row
  3. recompute the session totals from *all* current batches
  4. commit

Totals are never adjusted incrementally.  Recomputing from scratch means a
reader can never observe totals that disagree with the batch set.

Net weight:
    total_net_weight    = gross - crate_weight × crates - pallet_weight
    average_bird_weight = total_net_weight / (crates × birds_per_crate)
A batch whose net weight is zero or negative is rejected, never stored.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.middleware.exceptions import (
    ResourceNotFoundError,
    SessionLockedError,
    ValidationFailedError,
)
from flockpak.models.catch_batch import CatchBatch
from flockpak.models.catch_session import CatchSession
from flockpak.models.crate_type import CrateType
from flockpak.utils.locks import get_session_locks, session_write_lock

logger = logging.getLogger(__name__)

MAX_CRATES_PER_BATCH = 50

WEIGHT_FIELDS = (
    "number_of_crates", "birds_per_crate",
    "total_gross_weight", "crate_weight", "pallet_weight",
)


# ── Pure computation ─────────────────────────────────────────


def _validate_inputs(
    number_of_crates: int,
    birds_per_crate: int,
    total_gross_weight: float,
    crate_weight: float,
    pallet_weight: float,
) -> None:
    if not 1 <= number_of_crates <= MAX_CRATES_PER_BATCH:
        raise ValidationFailedError(
            f"number_of_crates must be between 1 and {MAX_CRATES_PER_BATCH}",
            field="number_of_crates",
        )
    if birds_per_crate <= 0:
        raise ValidationFailedError(
            "birds_per_crate must be positive", field="birds_per_crate"
        )
    if total_gross_weight <= 0:
        raise ValidationFailedError(
            "total_gross_weight must be positive", field="total_gross_weight"
        )
    if crate_weight <= 0:
        raise ValidationFailedError("crate_weight must be positive", field="crate_weight")
    if pallet_weight < 0:
        raise ValidationFailedError(
            "pallet_weight cannot be negative", field="pallet_weight"
        )


def compute_batch_figures(
    number_of_crates: int,
    birds_per_crate: int,
    total_gross_weight: float,
    crate_weight: float,
    pallet_weight: float | None = None,
) -> dict:
    """Derive totals for one weighing.  Raises if net weight is not positive."""
    pallet_weight = pallet_weight or 0.0
    _validate_inputs(
        number_of_crates, birds_per_crate, total_gross_weight, crate_weight, pallet_weight
    )

    total_crate_weight = crate_weight * number_of_crates
    total_net_weight = total_gross_weight - total_crate_weight - pallet_weight
    if total_net_weight <= 0:
        raise ValidationFailedError(
            f"Net weight is {total_net_weight:.3f} kg (gross {total_gross_weight} kg, "
            f"crates {total_crate_weight:.3f} kg, pallet {pallet_weight} kg). "
            "Check your weights.",
            field="total_gross_weight",
        )

    total_birds = number_of_crates * birds_per_crate
    return {
        "total_birds": total_birds,
        "total_crate_weight": total_crate_weight,
        "total_net_weight": total_net_weight,
        "average_bird_weight": total_net_weight / total_birds,
    }


# ── Session totals ───────────────────────────────────────────


async def recompute_session_totals(db: AsyncSession, session: CatchSession) -> None:
    """Overwrite the running totals with sums over every current batch."""
    await db.flush()
    result = await db.execute(
        select(CatchBatch)
        .where(CatchBatch.session_id == session.id)
        .order_by(CatchBatch.batch_number)
    )
    batches = result.scalars().all()

    total_birds = sum(b.total_birds for b in batches)
    total_net = sum(b.total_net_weight for b in batches)

    session.total_birds_caught = total_birds
    session.total_net_weight = total_net
    session.total_crates = sum(b.number_of_crates for b in batches)
    session.average_bird_weight = total_net / total_birds if total_birds > 0 else 0.0
    await db.flush()


def _ensure_writable(session: CatchSession) -> None:
    lock = get_session_locks(session).check_update({"batches"})
    if lock:
        raise SessionLockedError(lock.reason)


async def _next_batch_number(db: AsyncSession, session: CatchSession) -> int:
    """count(existing) + 1, but never below a number already issued."""
    result = await db.execute(
        select(CatchBatch.batch_number).where(CatchBatch.session_id == session.id)
    )
    numbers = list(result.scalars().all())
    issued = max([session.last_batch_number or 0, *numbers])
    return max(len(numbers) + 1, issued + 1)


# ── Mutations ────────────────────────────────────────────────


async def add_batch(
    db: AsyncSession,
    session_id: str,
    crate_type_id: str,
    number_of_crates: int,
    birds_per_crate: int,
    total_gross_weight: float,
    crate_weight: float,
    pallet_weight: float | None = None,
) -> dict:
    """Record one weighing and refresh the session totals.

    Returns:
        {"batch": CatchBatch, "batch_number", "total_birds",
         "total_net_weight", "average_bird_weight"}
    """
    figures = compute_batch_figures(
        number_of_crates, birds_per_crate, total_gross_weight, crate_weight, pallet_weight
    )

    async with session_write_lock(db, session_id) as session:
        _ensure_writable(session)

        crate_type = await db.get(CrateType, crate_type_id)
        if crate_type is None:
            raise ResourceNotFoundError("Crate type", crate_type_id)

        batch_number = await _next_batch_number(db, session)
        batch = CatchBatch(
            session_id=session.id,
            crate_type_id=crate_type_id,
            batch_number=batch_number,
            number_of_crates=number_of_crates,
            birds_per_crate=birds_per_crate,
            total_birds=figures["total_birds"],
            total_gross_weight=total_gross_weight,
            crate_weight=crate_weight,
            pallet_weight=pallet_weight if pallet_weight else None,
            total_net_weight=figures["total_net_weight"],
            average_bird_weight=figures["average_bird_weight"],
        )
        db.add(batch)
        session.last_batch_number = batch_number
        await recompute_session_totals(db, session)

    logger.info(
        "Added batch %d to catch session %s: %d birds, %.3f kg net",
        batch_number, session_id, figures["total_birds"], figures["total_net_weight"],
    )
    return {
        "batch": batch,
        "batch_number": batch_number,
        "total_birds": figures["total_birds"],
        "total_net_weight": figures["total_net_weight"],
        "average_bird_weight": figures["average_bird_weight"],
    }


async def _get_batch(db: AsyncSession, batch_id: str) -> CatchBatch:
    batch = await db.get(CatchBatch, batch_id)
    if batch is None:
        raise ResourceNotFoundError("Catch batch", batch_id)
    return batch


async def update_batch(db: AsyncSession, batch_id: str, changes: dict) -> dict:
    """Merge ``changes`` over the stored batch and recompute everything.

    Fields absent from ``changes`` (or given as None) keep their stored value.
    """
    changes = {k: v for k, v in changes.items() if k in WEIGHT_FIELDS and v is not None}
    session_id = (await _get_batch(db, batch_id)).session_id

    async with session_write_lock(db, session_id) as session:
        _ensure_writable(session)
        # Re-read under the lock in case a concurrent writer removed it
        result = await db.execute(
            select(CatchBatch)
            .where(CatchBatch.id == batch_id)
            .execution_options(populate_existing=True)
        )
        batch = result.scalar_one_or_none()
        if batch is None:
            raise ResourceNotFoundError("Catch batch", batch_id)

        merged = {name: getattr(batch, name) for name in WEIGHT_FIELDS}
        merged.update(changes)
        figures = compute_batch_figures(**merged)

        batch.number_of_crates = merged["number_of_crates"]
        batch.birds_per_crate = merged["birds_per_crate"]
        batch.total_gross_weight = merged["total_gross_weight"]
        batch.crate_weight = merged["crate_weight"]
        batch.pallet_weight = merged["pallet_weight"] or None
        batch.total_birds = figures["total_birds"]
        batch.total_net_weight = figures["total_net_weight"]
        batch.average_bird_weight = figures["average_bird_weight"]
        await recompute_session_totals(db, session)

    logger.info(
        "Updated batch %d in catch session %s (%s)",
        batch.batch_number, session_id, ", ".join(sorted(changes)) or "no changes",
    )
    return {
        "batch": batch,
        "total_net_weight": figures["total_net_weight"],
        "average_bird_weight": figures["average_bird_weight"],
    }


async def delete_batch(db: AsyncSession, batch_id: str) -> None:
    """Remove a batch; surviving batch numbers are left as they are."""
    session_id = (await _get_batch(db, batch_id)).session_id

    async with session_write_lock(db, session_id) as session:
        _ensure_writable(session)
        result = await db.execute(
            select(CatchBatch).where(CatchBatch.id == batch_id)
        )
        batch = result.scalar_one_or_none()
        if batch is None:
            raise ResourceNotFoundError("Catch batch", batch_id)

        batch_number = batch.batch_number
        await db.delete(batch)
        await recompute_session_totals(db, session)

    logger.info("Deleted batch %d from catch session %s", batch_number, session_id)


async def list_batches(db: AsyncSession, session_id: str) -> list[CatchBatch]:
    result = await db.execute(
        select(CatchBatch)
        .where(CatchBatch.session_id == session_id)
        .order_by(CatchBatch.batch_number)
    )
    return list(result.scalars().all())
