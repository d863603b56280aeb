"""Distribution progress — actual crate loading compared with the plan.

Each batch's average density (birds / crates, rounded) is matched against
the planned standard and odd densities.  Crates that match neither are
"off-plan".  A session stays on track while off-plan crates are at most
``on_track_tolerance_pct`` of all crates loaded so far.
"""

import math
from dataclasses import dataclass
from typing import Iterable

from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.config import ProgressSettings, settings
from flockpak.middleware.exceptions import ResourceNotFoundError
from flockpak.models.catch_batch import CatchBatch
from flockpak.models.catch_session import CatchSession
from flockpak.services.catch_ledger import list_batches


@dataclass(frozen=True)
class PlannedTiers:
    standard_density: int
    standard_crates: int
    odd_density: int
    odd_crates: int

    @classmethod
    def from_session(cls, session: CatchSession) -> "PlannedTiers | None":
        if not session.has_plan:
            return None
        return cls(
            standard_density=session.planned_standard_density,
            standard_crates=session.planned_standard_crates or 0,
            odd_density=session.planned_odd_density or 0,
            odd_crates=session.planned_odd_crates or 0,
        )


def round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def _matches(density: int, planned: int, tolerance: int) -> bool:
    return abs(density - planned) <= tolerance


def reconcile_progress(
    plan: PlannedTiers | None,
    batches: Iterable[CatchBatch],
    cfg: ProgressSettings | None = None,
) -> dict:
    """Classify each batch against ``plan`` and report completion."""
    cfg = cfg or settings.progress
    batches = list(batches)
    total_birds = sum(b.total_birds for b in batches)

    if plan is None:
        total_crates = sum(b.number_of_crates for b in batches)
        return {
            "has_planned_distribution": False,
            "total_crates": total_crates,
            "total_birds": total_birds,
            "average_density": (
                round_half_up(total_birds / total_crates) if total_crates > 0 else 0
            ),
        }

    standard = odd = off_plan = 0
    off_plan_densities: list[int] = []
    tolerance = cfg.density_match_tolerance

    for batch in batches:
        density = round_half_up(batch.total_birds / batch.number_of_crates)
        if _matches(density, plan.standard_density, tolerance):
            standard += batch.number_of_crates
        elif plan.odd_density and _matches(density, plan.odd_density, tolerance):
            odd += batch.number_of_crates
        else:
            off_plan += batch.number_of_crates
            off_plan_densities.append(density)

    total_crates = standard + odd + off_plan

    standard_progress = (
        round_half_up(standard / plan.standard_crates * 100)
        if plan.standard_crates > 0 else 0
    )
    odd_progress = (
        round_half_up(odd / plan.odd_crates * 100) if plan.odd_crates > 0 else 0
    )
    is_on_track = off_plan <= total_crates * cfg.on_track_tolerance_pct / 100
    is_complete = standard >= plan.standard_crates and (
        plan.odd_crates == 0 or odd >= plan.odd_crates
    )

    return {
        "has_planned_distribution": True,
        "planned": {
            "standard_density": plan.standard_density,
            "standard_crates": plan.standard_crates,
            "odd_density": plan.odd_density,
            "odd_crates": plan.odd_crates,
            "total_crates": plan.standard_crates + plan.odd_crates,
        },
        "actual": {
            "standard_crates": standard,
            "odd_crates": odd,
            "off_plan_crates": off_plan,
            "total_crates": total_crates,
            "total_birds": total_birds,
        },
        "progress": {
            "standard_progress": standard_progress,
            "odd_progress": odd_progress,
            "is_on_track": is_on_track,
            "is_complete": is_complete,
        },
        "off_plan_details": (
            {"count": off_plan, "densities": off_plan_densities}
            if off_plan_densities else None
        ),
    }


async def get_distribution_progress(db: AsyncSession, session_id: str) -> dict:
    session = await db.get(CatchSession, session_id)
    if session is None:
        raise ResourceNotFoundError("Catch session", session_id)
    batches = await list_batches(db, session_id)
    return reconcile_progress(PlannedTiers.from_session(session), batches)
