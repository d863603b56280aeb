"""Schemas for slaughter batches, catch records and slaughterhouse receipts."""

from datetime import date, datetime

from pydantic import BaseModel, Field


class SlaughterBatchCreate(BaseModel):
    flock_id: str
    batch_number: str = Field(..., min_length=1, max_length=50)
    transport_time_hours: float | None = Field(None, ge=0)
    notes: str | None = None


class SlaughterBatchOut(BaseModel):
    id: str
    flock_id: str
    batch_number: str
    start_date: date
    end_date: date | None
    status: str
    transport_time_hours: float | None
    notes: str | None

    model_config = {"from_attributes": True}


class CatchRecordCreate(BaseModel):
    catch_date: date
    day_number: int = Field(..., ge=1)
    birds_caught: int = Field(..., gt=0)
    average_weight_at_farm: float = Field(..., gt=0)
    feed_removal_hours: float = Field(..., ge=0)
    transport_time_hours: float | None = Field(None, ge=0)
    notes: str | None = None


class SlaughterhouseRecordCreate(BaseModel):
    actual_weight_at_slaughterhouse: float = Field(..., gt=0)
    slaughterhouse_reference: str | None = Field(None, max_length=100)
    notes: str | None = None


class SlaughterhouseRecordOut(BaseModel):
    id: str
    catch_record_id: str
    actual_weight_at_slaughterhouse: float
    variance: float
    variance_percent: float
    slaughterhouse_reference: str | None
    received_date: datetime
    notes: str | None

    model_config = {"from_attributes": True}


class CatchRecordOut(BaseModel):
    id: str
    slaughter_batch_id: str
    catch_date: date
    day_number: int
    birds_caught: int
    average_weight_at_farm: float
    feed_removal_hours: float
    transport_time_hours: float
    gut_evacuation_percent: float
    catching_handling_percent: float
    loading_holding_percent: float
    transport_percent: float
    total_shrinkage_percent: float
    estimated_weight_at_slaughterhouse: float
    notes: str | None

    model_config = {"from_attributes": True}


class CatchRecordDetailOut(CatchRecordOut):
    slaughterhouse_record: SlaughterhouseRecordOut | None = None


class SlaughterBatchSummary(BaseModel):
    batch: SlaughterBatchOut
    catch_records: list[CatchRecordDetailOut]
    total_birds_caught: int
    avg_farm_weight: float
    avg_estimated_slaughterhouse_weight: float
