"""Catch-session locking.

Two kinds of lock live here:

  * Write serialization — every batch mutation for a session runs inside
    ``session_write_lock()``, which holds an in-process ``asyncio.Lock``
    for that session id and re-reads the session row ``FOR UPDATE`` so
    other worker processes also queue on PostgreSQL.  The transaction is
    committed before the lock is released; a failure rolls it back.

  * Status locks — once a session is completed or cancelled its batches
    are frozen.  ``get_session_locks()`` describes which fields are locked
    and why without raising; the ledger decides whether to block.
"""

from __future__ import annotations

import asyncio
import logging
from contextlib import asynccontextmanager
from dataclasses import dataclass, field
from typing import AsyncIterator

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from flockpak.middleware.exceptions import ResourceNotFoundError
from flockpak.models.catch_session import CatchSession

logger = logging.getLogger(__name__)


# ── Data structures ────────────────────────────────────────────


@dataclass
class FieldLock:
    """A single locked field with reason and unlock instructions."""
    field: str
    reason: str
    blocker_ref: str    # session id
    unlock_hint: str


@dataclass
class LockInfo:
    """Lock state for a session.  Empty locked_fields means nothing locked."""
    locked_fields: dict[str, FieldLock] = field(default_factory=dict)

    def check_update(self, updating_fields: set[str]) -> FieldLock | None:
        """Return the first FieldLock that conflicts, or None."""
        for f in sorted(updating_fields):
            if f in self.locked_fields:
                return self.locked_fields[f]
        return None


# ── Status locks ───────────────────────────────────────────────


BATCH_FIELDS = [
    "batches", "number_of_crates", "birds_per_crate",
    "total_gross_weight", "crate_weight", "pallet_weight",
]
PLAN_FIELDS = [
    "planned_standard_density", "planned_standard_crates",
    "planned_odd_density", "planned_odd_crates",
    "available_crates", "planned_total_birds",
]


def get_session_locks(session: CatchSession) -> LockInfo:
    """Lock batch and plan fields once the session has left ``active``."""
    info = LockInfo()
    if session.status == "active":
        return info

    for name in BATCH_FIELDS + PLAN_FIELDS:
        info.locked_fields[name] = FieldLock(
            field=name,
            reason=f"Cannot edit {name}: catch session {session.id} is {session.status}",
            blocker_ref=session.id,
            unlock_hint="Batches are frozen once a catch session is finalized.",
        )
    return info


# ── Write serialization ────────────────────────────────────────


# Entries live only while some task holds or waits on the session's lock.
_session_locks: dict[str, asyncio.Lock] = {}
_lock_users: dict[str, int] = {}


def _checkout_lock(session_id: str) -> asyncio.Lock:
    lock = _session_locks.setdefault(session_id, asyncio.Lock())
    _lock_users[session_id] = _lock_users.get(session_id, 0) + 1
    return lock


def _return_lock(session_id: str) -> None:
    remaining = _lock_users[session_id] - 1
    if remaining:
        _lock_users[session_id] = remaining
    else:
        del _lock_users[session_id]
        del _session_locks[session_id]


@asynccontextmanager
async def session_write_lock(
    db: AsyncSession, session_id: str
) -> AsyncIterator[CatchSession]:
    """Serialize a read-modify-write cycle on one catch session.

    Yields the session row, locked.  Commits on clean exit, rolls back
    on any exception.  Different session ids never contend.
    """
    lock = _checkout_lock(session_id)
    try:
        async with lock:
            try:
                result = await db.execute(
                    select(CatchSession)
                    .where(CatchSession.id == session_id)
                    .with_for_update()
                    .execution_options(populate_existing=True)
                )
                session = result.scalar_one_or_none()
                if session is None:
                    raise ResourceNotFoundError("Catch session", session_id)

                yield session

                await db.commit()
            except Exception:
                await db.rollback()
                raise
    finally:
        _return_lock(session_id)
