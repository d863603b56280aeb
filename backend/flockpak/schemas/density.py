"""Schemas for density recommendation and distribution planning."""

from datetime import date

from pydantic import BaseModel, Field, model_validator

from flockpak.services.density import Season


# ── Recommendation ───────────────────────────────────────────

class RecommendRequest(BaseModel):
    """Either ``crate_type_id`` or explicit dimensions must be supplied."""
    crate_type_id: str | None = None
    length_cm: float | None = Field(None, gt=0)
    width_cm: float | None = Field(None, gt=0)
    height_cm: float | None = Field(None, ge=0)
    catch_date: date
    transport_duration_hours: float | None = Field(None, ge=0)
    # Overrides date-based detection; the only way to reach "moderate"
    season: Season | None = None

    @model_validator(mode="after")
    def crate_or_dimensions(self):
        if self.crate_type_id is None and (self.length_cm is None or self.width_cm is None):
            raise ValueError("Provide crate_type_id or both length_cm and width_cm")
        return self


class RecommendationOut(BaseModel):
    season: Season
    min_birds_per_crate: int
    max_birds_per_crate: int
    recommended_birds_per_crate: int
    legal_max_birds_per_crate: int
    floor_area_m2: float

    model_config = {"from_attributes": True}


# ── Distribution plan ────────────────────────────────────────

class PlanOut(BaseModel):
    standard_density: int
    standard_crates: int
    odd_density: int
    odd_crates: int
    total_birds: int
    total_crates: int
    shortage: int
    exceeds_recommendation: bool
    within_legal_limit: bool

    model_config = {"from_attributes": True}


class PlanRequest(BaseModel):
    """Plan from a crate type + catch date, or from a ready recommendation."""
    target_birds: int = Field(..., gt=0)
    available_crates: int = Field(..., gt=0)

    recommendation: RecommendationOut | None = None

    crate_type_id: str | None = None
    catch_date: date | None = None
    transport_duration_hours: float | None = Field(None, ge=0)
    season: Season | None = None

    @model_validator(mode="after")
    def recommendation_or_crate(self):
        if self.recommendation is None and (
            self.crate_type_id is None or self.catch_date is None
        ):
            raise ValueError(
                "Provide a recommendation, or crate_type_id together with catch_date"
            )
        return self


class PlanResponse(BaseModel):
    recommendation: RecommendationOut
    distribution: PlanOut
