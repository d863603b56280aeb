"""Aggregate model imports for Alembic auto-detection."""

from flockpak.models.crate_type import CrateType  # noqa: F401
from flockpak.models.catch_session import CatchSession  # noqa: F401
from flockpak.models.catch_batch import CatchBatch  # noqa: F401
from flockpak.models.slaughter import (  # noqa: F401
    SlaughterBatch,
    SlaughterCatchRecord,
    SlaughterhouseRecord,
)
