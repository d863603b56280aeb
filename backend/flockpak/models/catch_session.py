"""CatchSession — one physical catch operation for a flock.

A session optionally carries a planned crate distribution (set before
any crates are weighed) and always carries running totals that are
rewritten from scratch after every batch write.

Lifecycle:  active → completed | cancelled
"""

import uuid
from datetime import date, datetime

from sqlalchemy import Date, DateTime, Float, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flockpak.database import Base


class CatchSession(Base):
    __tablename__ = "catch_sessions"

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    # Flock identity belongs to the host application — no FK
    flock_id: Mapped[str] = mapped_column(String(36), nullable=False, index=True)
    catch_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    catch_team: Mapped[str | None] = mapped_column(String(100))
    # individual | digital_scale_stack | platform_scale
    weighing_method: Mapped[str] = mapped_column(
        String(30), default="digital_scale_stack"
    )
    target_birds: Mapped[int | None] = mapped_column(Integer)
    target_weight: Mapped[float | None] = mapped_column(Float)

    # ── Status ───────────────────────────────────────────────
    # active | completed | cancelled
    status: Mapped[str] = mapped_column(String(20), default="active", index=True)
    start_time: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    end_time: Mapped[datetime | None] = mapped_column(DateTime)

    # ── Planning context ─────────────────────────────────────
    crate_type_id: Mapped[str | None] = mapped_column(String(36))
    transport_duration_hours: Mapped[float | None] = mapped_column(Float)
    season: Mapped[str | None] = mapped_column(String(20))

    # ── Planned distribution (read-only unless replanned) ────
    planned_standard_density: Mapped[int | None] = mapped_column(Integer)
    planned_standard_crates: Mapped[int | None] = mapped_column(Integer)
    planned_odd_density: Mapped[int | None] = mapped_column(Integer)
    planned_odd_crates: Mapped[int | None] = mapped_column(Integer)
    available_crates: Mapped[int | None] = mapped_column(Integer)
    planned_total_birds: Mapped[int | None] = mapped_column(Integer)

    # ── Running totals (derived from batches) ────────────────
    total_birds_caught: Mapped[int] = mapped_column(Integer, default=0)
    total_net_weight: Mapped[float] = mapped_column(Float, default=0.0)
    total_crates: Mapped[int] = mapped_column(Integer, default=0)
    average_bird_weight: Mapped[float] = mapped_column(Float, default=0.0)
    # Highest batch_number ever issued; deleted numbers are not reissued
    last_batch_number: Mapped[int] = mapped_column(Integer, default=0)

    notes: Mapped[str | None] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    batches = relationship(
        "CatchBatch", back_populates="session",
        order_by="CatchBatch.batch_number",
        cascade="all, delete-orphan",
    )

    @property
    def has_plan(self) -> bool:
        return bool(self.planned_standard_density)
