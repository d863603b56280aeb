"""Schemas for the standalone shrinkage and variance calculators."""

from pydantic import BaseModel, Field


class ShrinkageRequest(BaseModel):
    feed_removal_hours: float = Field(..., ge=0)
    transport_time_hours: float | None = Field(None, ge=0)
    farm_weight: float | None = Field(None, gt=0)


class ShrinkageOut(BaseModel):
    gut_evacuation_percent: float
    catching_handling_percent: float
    loading_holding_percent: float
    transport_percent: float
    total_shrinkage_percent: float
    # Only when farm_weight was supplied
    estimated_slaughterhouse_weight: float | None = None


class VarianceRequest(BaseModel):
    estimated_weight: float
    actual_weight: float


class VarianceOut(BaseModel):
    variance: float
    variance_percent: float

    model_config = {"from_attributes": True}
