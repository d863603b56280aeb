"""Slaughter tracking — farm weighings reconciled against slaughterhouse receipt.

SlaughterBatch groups the daily catch records of one flock's depopulation.
Each SlaughterCatchRecord stores the shrinkage estimate computed when it
was created; that estimate is a historical artifact and is never
recomputed once a SlaughterhouseRecord (actual weight + variance) arrives.
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flockpak.database import Base


class SlaughterBatch(Base):
    __tablename__ = "slaughter_batches"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    flock_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    batch_number: Mapped[str] = mapped_column(String(50), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, default=date.today, index=True)
    end_date: Mapped[date | None] = mapped_column(Date)
    # in_progress | completed | at_slaughterhouse
    status: Mapped[str] = mapped_column(String(30), default="in_progress", index=True)
    transport_time_hours: Mapped[float | None] = mapped_column(Float)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    catch_records = relationship(
        "SlaughterCatchRecord", back_populates="slaughter_batch",
        order_by="SlaughterCatchRecord.catch_date.desc()",
        cascade="all, delete-orphan",
    )


class SlaughterCatchRecord(Base):
    __tablename__ = "slaughter_catch_records"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    slaughter_batch_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("slaughter_batches.id", ondelete="CASCADE"),
        nullable=False, index=True,
    )
    catch_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    day_number: Mapped[int] = mapped_column(Integer, nullable=False)
    birds_caught: Mapped[int] = mapped_column(Integer, nullable=False)
    average_weight_at_farm: Mapped[float] = mapped_column(Float, nullable=False)
    feed_removal_hours: Mapped[float] = mapped_column(Float, nullable=False)
    transport_time_hours: Mapped[float] = mapped_column(Float, nullable=False)

    # ── Shrinkage estimate (%), frozen at creation ───────────
    gut_evacuation_percent: Mapped[float] = mapped_column(Float, nullable=False)
    catching_handling_percent: Mapped[float] = mapped_column(Float, nullable=False)
    loading_holding_percent: Mapped[float] = mapped_column(Float, nullable=False)
    transport_percent: Mapped[float] = mapped_column(Float, nullable=False)
    total_shrinkage_percent: Mapped[float] = mapped_column(Float, nullable=False)
    estimated_weight_at_slaughterhouse: Mapped[float] = mapped_column(
        Float, nullable=False
    )

    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    slaughter_batch = relationship("SlaughterBatch", back_populates="catch_records")
    slaughterhouse_record = relationship(
        "SlaughterhouseRecord", back_populates="catch_record",
        uselist=False, cascade="all, delete-orphan",
    )


class SlaughterhouseRecord(Base):
    __tablename__ = "slaughterhouse_records"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    catch_record_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("slaughter_catch_records.id", ondelete="CASCADE"),
        nullable=False, unique=True, index=True,
    )
    actual_weight_at_slaughterhouse: Mapped[float] = mapped_column(Float, nullable=False)
    variance: Mapped[float] = mapped_column(Float, nullable=False)
    variance_percent: Mapped[float] = mapped_column(Float, nullable=False)
    slaughterhouse_reference: Mapped[str | None] = mapped_column(String(100))
    received_date: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    catch_record = relationship(
        "SlaughterCatchRecord", back_populates="slaughterhouse_record"
    )
