"""Pydantic schemas for the crate type catalog."""

from datetime import datetime

from pydantic import BaseModel, Field


class CrateTypeCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    length_cm: float = Field(..., gt=0)
    width_cm: float = Field(..., gt=0)
    height_cm: float = Field(..., gt=0)
    tare_weight_kg: float = Field(..., gt=0)
    notes: str | None = None


class CrateTypeUpdate(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=100)
    length_cm: float | None = Field(None, gt=0)
    width_cm: float | None = Field(None, gt=0)
    height_cm: float | None = Field(None, gt=0)
    tare_weight_kg: float | None = Field(None, gt=0)
    notes: str | None = None


class CrateTypeOut(BaseModel):
    id: str
    name: str
    length_cm: float
    width_cm: float
    height_cm: float
    tare_weight_kg: float
    floor_area_m2: float
    notes: str | None
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}
