"""CatchBatch — one weighing event covering one or more stacked crates.

``crate_weight`` is the per-crate weight the operator entered at the
scale, which may differ from the catalog tare weight.  ``pallet_weight``
is only present for platform-scale weighing.
"""

import uuid
from datetime import datetime

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from flockpak.database import Base


class CatchBatch(Base):
    __tablename__ = "catch_batches"
    __table_args__ = (
        Index("ix_catch_batches_session_batch_number", "session_id", "batch_number", unique=True),
    )

    id: Mapped[str] = mapped_column(
        String(36), primary_key=True, default=lambda: str(uuid.uuid4())
    )
    session_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("catch_sessions.id"), nullable=False, index=True
    )
    crate_type_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("crate_types.id"), nullable=False
    )
    # Sequential per session; survivors are never renumbered
    batch_number: Mapped[int] = mapped_column(Integer, nullable=False)

    number_of_crates: Mapped[int] = mapped_column(Integer, nullable=False)
    birds_per_crate: Mapped[int] = mapped_column(Integer, nullable=False)
    total_birds: Mapped[int] = mapped_column(Integer, nullable=False)

    # ── Weights (kg) ─────────────────────────────────────────
    total_gross_weight: Mapped[float] = mapped_column(Float, nullable=False)
    crate_weight: Mapped[float] = mapped_column(Float, nullable=False)
    pallet_weight: Mapped[float | None] = mapped_column(Float)
    total_net_weight: Mapped[float] = mapped_column(Float, nullable=False)
    average_bird_weight: Mapped[float] = mapped_column(Float, nullable=False)

    recorded_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow
    )

    session = relationship("CatchSession", back_populates="batches")
    crate_type = relationship("CrateType")
