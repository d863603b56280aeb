"""Pydantic schemas for catch sessions, batch weighing and progress."""

from datetime import date, datetime
from typing import Literal

from pydantic import BaseModel, Field

from flockpak.schemas.density import PlanOut, RecommendationOut
from flockpak.services.density import Season

WeighingMethod = Literal["individual", "digital_scale_stack", "platform_scale"]


# ── Sessions ─────────────────────────────────────────────────

class SessionStart(BaseModel):
    """Payload for POST /api/catch-sessions/.

    Supplying ``crate_type_id``, ``target_birds`` and ``available_crates``
    computes and stores the crate distribution plan up front.
    """
    flock_id: str
    catch_date: date
    catch_team: str | None = None
    weighing_method: WeighingMethod = "digital_scale_stack"
    target_birds: int | None = Field(None, gt=0)
    target_weight: float | None = Field(None, gt=0)

    # Planning inputs (optional)
    crate_type_id: str | None = None
    transport_duration_hours: float | None = Field(None, ge=0)
    available_crates: int | None = Field(None, gt=0)
    season: Season | None = None
    notes: str | None = None


class SessionPlanRequest(BaseModel):
    crate_type_id: str
    target_birds: int = Field(..., gt=0)
    available_crates: int = Field(..., gt=0)
    transport_duration_hours: float | None = Field(None, ge=0)
    season: Season | None = None


class SessionFinish(BaseModel):
    notes: str | None = None


class SessionOut(BaseModel):
    id: str
    flock_id: str
    catch_date: date
    catch_team: str | None
    weighing_method: str
    target_birds: int | None
    target_weight: float | None
    status: str
    start_time: datetime | None
    end_time: datetime | None

    crate_type_id: str | None
    transport_duration_hours: float | None
    season: str | None
    planned_standard_density: int | None
    planned_standard_crates: int | None
    planned_odd_density: int | None
    planned_odd_crates: int | None
    available_crates: int | None
    planned_total_birds: int | None

    total_birds_caught: int
    total_net_weight: float
    total_crates: int
    average_bird_weight: float
    notes: str | None

    model_config = {"from_attributes": True}


class SessionPlanResponse(BaseModel):
    session: SessionOut
    recommendation: RecommendationOut | None = None
    distribution: PlanOut | None = None


# ── Batches ──────────────────────────────────────────────────

class BatchCreate(BaseModel):
    """One stacked-crate (or pallet) weighing."""
    crate_type_id: str
    number_of_crates: int = Field(..., ge=1, le=50)
    birds_per_crate: int = Field(..., gt=0)
    total_gross_weight: float = Field(..., gt=0)
    # Weighed per-crate value; may differ from the catalog tare
    crate_weight: float = Field(..., gt=0)
    # Platform-scale weighing only
    pallet_weight: float | None = Field(None, ge=0)


class BatchUpdate(BaseModel):
    number_of_crates: int | None = Field(None, ge=1, le=50)
    birds_per_crate: int | None = Field(None, gt=0)
    total_gross_weight: float | None = Field(None, gt=0)
    crate_weight: float | None = Field(None, gt=0)
    pallet_weight: float | None = Field(None, ge=0)


class BatchOut(BaseModel):
    id: str
    session_id: str
    crate_type_id: str
    batch_number: int
    number_of_crates: int
    birds_per_crate: int
    total_birds: int
    total_gross_weight: float
    crate_weight: float
    pallet_weight: float | None
    total_net_weight: float
    average_bird_weight: float
    recorded_at: datetime

    model_config = {"from_attributes": True}


class BatchAddResponse(BaseModel):
    batch_id: str
    batch_number: int
    total_birds: int
    total_net_weight: float
    average_bird_weight: float


class BatchUpdateResponse(BaseModel):
    total_net_weight: float
    average_bird_weight: float


class SessionDetailOut(BaseModel):
    session: SessionOut
    batches: list[BatchOut]


# ── Progress ─────────────────────────────────────────────────

class PlannedTiersOut(BaseModel):
    standard_density: int
    standard_crates: int
    odd_density: int
    odd_crates: int
    total_crates: int


class ActualTiersOut(BaseModel):
    standard_crates: int
    odd_crates: int
    off_plan_crates: int
    total_crates: int
    total_birds: int


class ProgressFlags(BaseModel):
    standard_progress: int
    odd_progress: int
    is_on_track: bool
    is_complete: bool


class OffPlanDetails(BaseModel):
    count: int
    densities: list[int]


class ProgressOut(BaseModel):
    """Either the unplanned totals or the full plan comparison."""
    has_planned_distribution: bool
    # Unplanned sessions
    total_crates: int | None = None
    total_birds: int | None = None
    average_density: int | None = None
    # Planned sessions
    planned: PlannedTiersOut | None = None
    actual: ActualTiersOut | None = None
    progress: ProgressFlags | None = None
    off_plan_details: OffPlanDetails | None = None
