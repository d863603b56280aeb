"""Catch session router — session lifecycle, batch weighing and progress.

Endpoints:
    POST   /api/catch-sessions/                       Start a session (optionally planned)
    GET    /api/catch-sessions/                       List sessions (with filters)
    GET    /api/catch-sessions/{session_id}           Session detail with batches
    POST   /api/catch-sessions/{session_id}/plan      (Re)plan crate distribution
    POST   /api/catch-sessions/{session_id}/batches   Record a weighing
    GET    /api/catch-sessions/{session_id}/batches   List weighings
    GET    /api/catch-sessions/{session_id}/progress  Distribution progress vs plan
    POST   /api/catch-sessions/{session_id}/complete  Close the session
    POST   /api/catch-sessions/{session_id}/cancel    Abandon the session
"""

from typing import Literal

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.database import get_db
from flockpak.schemas.catch import (
    BatchAddResponse,
    BatchCreate,
    BatchOut,
    ProgressOut,
    SessionDetailOut,
    SessionFinish,
    SessionOut,
    SessionPlanRequest,
    SessionPlanResponse,
    SessionStart,
)
from flockpak.schemas.density import PlanOut, RecommendationOut
from flockpak.services import catch_ledger, catch_sessions
from flockpak.services.progress import get_distribution_progress

router = APIRouter()


def _plan_response(result: dict) -> SessionPlanResponse:
    recommendation = result["recommendation"]
    plan = result["plan"]
    return SessionPlanResponse(
        session=SessionOut.model_validate(result["session"]),
        recommendation=RecommendationOut.model_validate(recommendation) if recommendation else None,
        distribution=PlanOut.model_validate(plan) if plan else None,
    )


# ── Lifecycle ────────────────────────────────────────────────

@router.post("/", response_model=SessionPlanResponse, status_code=status.HTTP_201_CREATED)
async def start_session(
    body: SessionStart,
    db: AsyncSession = Depends(get_db),
):
    """Open a catch session.

    When crate type, target birds and available crates are all given, the
    density recommendation and distribution plan are stored on the session.
    """
    result = await catch_sessions.start_session(db, **body.model_dump())
    return _plan_response(result)


@router.get("/", response_model=list[SessionOut])
async def list_sessions(
    flock_id: str | None = Query(None),
    status_filter: Literal["active", "completed", "cancelled"] | None = Query(None, alias="status"),
    db: AsyncSession = Depends(get_db),
):
    sessions = await catch_sessions.list_sessions(db, flock_id=flock_id, status=status_filter)
    return [SessionOut.model_validate(s) for s in sessions]


@router.get("/{session_id}", response_model=SessionDetailOut)
async def get_session(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    session = await catch_sessions.get_session(db, session_id, with_batches=True)
    return SessionDetailOut(
        session=SessionOut.model_validate(session),
        batches=[BatchOut.model_validate(b) for b in session.batches],
    )


@router.post("/{session_id}/plan", response_model=SessionPlanResponse)
async def plan_session(
    session_id: str,
    body: SessionPlanRequest,
    db: AsyncSession = Depends(get_db),
):
    result = await catch_sessions.plan_session(db, session_id, **body.model_dump())
    return _plan_response(result)


@router.post("/{session_id}/complete", response_model=SessionOut)
async def complete_session(
    session_id: str,
    body: SessionFinish | None = None,
    db: AsyncSession = Depends(get_db),
):
    session = await catch_sessions.complete_session(
        db, session_id, notes=body.notes if body else None
    )
    return SessionOut.model_validate(session)


@router.post("/{session_id}/cancel", response_model=SessionOut)
async def cancel_session(
    session_id: str,
    body: SessionFinish | None = None,
    db: AsyncSession = Depends(get_db),
):
    session = await catch_sessions.cancel_session(
        db, session_id, notes=body.notes if body else None
    )
    return SessionOut.model_validate(session)


# ── Batch weighing ───────────────────────────────────────────

@router.post(
    "/{session_id}/batches",
    response_model=BatchAddResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_batch(
    session_id: str,
    body: BatchCreate,
    db: AsyncSession = Depends(get_db),
):
    """Record one stacked-crate weighing and refresh the session totals."""
    result = await catch_ledger.add_batch(db, session_id, **body.model_dump())
    return BatchAddResponse(
        batch_id=result["batch"].id,
        batch_number=result["batch_number"],
        total_birds=result["total_birds"],
        total_net_weight=result["total_net_weight"],
        average_bird_weight=result["average_bird_weight"],
    )


@router.get("/{session_id}/batches", response_model=list[BatchOut])
async def list_batches(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    await catch_sessions.get_session(db, session_id)
    batches = await catch_ledger.list_batches(db, session_id)
    return [BatchOut.model_validate(b) for b in batches]


@router.get("/{session_id}/progress", response_model=ProgressOut)
async def distribution_progress(
    session_id: str,
    db: AsyncSession = Depends(get_db),
):
    return await get_distribution_progress(db, session_id)
