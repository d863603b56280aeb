"""Catch session lifecycle and distribution planning.

A session is started when a catch crew begins loading a flock.  If the
caller supplies a crate type, target bird count and available crates, the
density recommendation and distribution plan are computed here and stored
on the session.  The plan is read-only afterwards except through an
explicit ``plan_session()`` call while the session is still active.

Completing or cancelling a session freezes its batches.
"""

import logging
from datetime import date, datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from flockpak.middleware.exceptions import (
    ResourceNotFoundError,
    SessionLockedError,
)
from flockpak.models.catch_session import CatchSession
from flockpak.models.crate_type import CrateType
from flockpak.services.catch_ledger import recompute_session_totals
from flockpak.services.density import (
    CrateGeometry,
    DensityRecommendation,
    DistributionPlan,
    Season,
    plan_distribution,
    recommend_density_for_date,
)
from flockpak.utils.locks import get_session_locks, session_write_lock

logger = logging.getLogger(__name__)


async def get_crate_type(db: AsyncSession, crate_type_id: str) -> CrateType:
    crate_type = await db.get(CrateType, crate_type_id)
    if crate_type is None:
        raise ResourceNotFoundError("Crate type", crate_type_id)
    return crate_type


async def compute_plan(
    db: AsyncSession,
    crate_type_id: str,
    catch_date: date,
    target_birds: int,
    available_crates: int,
    transport_duration_hours: float | None = None,
    season: Season | None = None,
) -> tuple[DensityRecommendation, DistributionPlan]:
    """Recommend a density for the crate type and plan the loading."""
    crate_type = await get_crate_type(db, crate_type_id)
    recommendation = recommend_density_for_date(
        CrateGeometry.from_crate_type(crate_type),
        catch_date,
        transport_duration_hours,
        season_override=season,
    )
    plan = plan_distribution(target_birds, available_crates, recommendation)
    return recommendation, plan


def _apply_plan(
    session: CatchSession,
    recommendation: DensityRecommendation,
    plan: DistributionPlan,
    available_crates: int,
) -> None:
    session.season = recommendation.season.value
    session.planned_standard_density = plan.standard_density
    session.planned_standard_crates = plan.standard_crates
    session.planned_odd_density = plan.odd_density if plan.is_two_tier else None
    session.planned_odd_crates = plan.odd_crates
    session.planned_total_birds = plan.total_birds
    session.available_crates = available_crates


async def start_session(
    db: AsyncSession,
    flock_id: str,
    catch_date: date,
    catch_team: str | None = None,
    weighing_method: str = "digital_scale_stack",
    target_birds: int | None = None,
    target_weight: float | None = None,
    crate_type_id: str | None = None,
    transport_duration_hours: float | None = None,
    available_crates: int | None = None,
    season: Season | None = None,
    notes: str | None = None,
) -> dict:
    """Open a catch session, planning the crate distribution when possible.

    Returns:
        {"session": CatchSession, "recommendation": ... | None, "plan": ... | None}
    """
    session = CatchSession(
        flock_id=flock_id,
        catch_date=catch_date,
        catch_team=catch_team,
        weighing_method=weighing_method,
        target_birds=target_birds,
        target_weight=target_weight,
        crate_type_id=crate_type_id,
        transport_duration_hours=transport_duration_hours,
        season=season.value if season else None,
        notes=notes,
        status="active",
        start_time=datetime.utcnow(),
        total_birds_caught=0,
        total_net_weight=0.0,
        total_crates=0,
        average_bird_weight=0.0,
        last_batch_number=0,
    )

    recommendation = plan = None
    if crate_type_id and target_birds and available_crates:
        recommendation, plan = await compute_plan(
            db, crate_type_id, catch_date, target_birds, available_crates,
            transport_duration_hours, season,
        )
        _apply_plan(session, recommendation, plan, available_crates)
    elif crate_type_id:
        await get_crate_type(db, crate_type_id)

    db.add(session)
    await db.flush()

    logger.info(
        "Started catch session %s for flock %s (%s)",
        session.id, flock_id, "planned" if plan else "unplanned",
    )
    return {"session": session, "recommendation": recommendation, "plan": plan}


async def plan_session(
    db: AsyncSession,
    session_id: str,
    crate_type_id: str,
    target_birds: int,
    available_crates: int,
    transport_duration_hours: float | None = None,
    season: Season | None = None,
) -> dict:
    """Explicitly (re)plan an active session's crate distribution."""
    async with session_write_lock(db, session_id) as session:
        lock = get_session_locks(session).check_update({"planned_standard_density"})
        if lock:
            raise SessionLockedError(lock.reason)

        recommendation, plan = await compute_plan(
            db, crate_type_id, session.catch_date, target_birds, available_crates,
            transport_duration_hours, season,
        )
        session.crate_type_id = crate_type_id
        session.transport_duration_hours = transport_duration_hours
        session.target_birds = target_birds
        _apply_plan(session, recommendation, plan, available_crates)
        await db.flush()

    logger.info(
        "Planned catch session %s: %d×%d + %d×%d birds/crate",
        session_id, plan.standard_crates, plan.standard_density,
        plan.odd_crates, plan.odd_density,
    )
    return {"session": session, "recommendation": recommendation, "plan": plan}


async def get_session(db: AsyncSession, session_id: str, with_batches: bool = False) -> CatchSession:
    stmt = select(CatchSession).where(CatchSession.id == session_id)
    if with_batches:
        stmt = stmt.options(selectinload(CatchSession.batches))
    session = (await db.execute(stmt)).scalar_one_or_none()
    if session is None:
        raise ResourceNotFoundError("Catch session", session_id)
    return session


async def list_sessions(
    db: AsyncSession,
    flock_id: str | None = None,
    status: str | None = None,
) -> list[CatchSession]:
    stmt = select(CatchSession)
    if flock_id:
        stmt = stmt.where(CatchSession.flock_id == flock_id)
    if status:
        stmt = stmt.where(CatchSession.status == status)
    result = await db.execute(
        stmt.order_by(CatchSession.catch_date.desc(), CatchSession.created_at.desc())
    )
    return list(result.scalars().all())


async def _finish_session(
    db: AsyncSession, session_id: str, status: str, notes: str | None
) -> CatchSession:
    async with session_write_lock(db, session_id) as session:
        if session.status != "active":
            raise SessionLockedError(
                f"Catch session {session_id} is already {session.status}"
            )
        # Final recompute so the frozen totals match the frozen batch set
        await recompute_session_totals(db, session)
        session.status = status
        session.end_time = datetime.utcnow()
        if notes:
            session.notes = notes
        await db.flush()

    logger.info(
        "Catch session %s %s: %d birds, %d crates, %.3f kg net",
        session_id, status, session.total_birds_caught,
        session.total_crates, session.total_net_weight,
    )
    return session


async def complete_session(
    db: AsyncSession, session_id: str, notes: str | None = None
) -> CatchSession:
    return await _finish_session(db, session_id, "completed", notes)


async def cancel_session(
    db: AsyncSession, session_id: str, notes: str | None = None
) -> CatchSession:
    return await _finish_session(db, session_id, "cancelled", notes)
