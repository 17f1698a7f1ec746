"""Per-coach serialization of the booking check-and-insert sequence.

On PostgreSQL a transaction-scoped advisory lock keyed on the coach is
taken inside the booking transaction; it is released by the commit or
rollback that ends it. Other dialects (SQLite in tests and local runs) fall
back to a process-local ``asyncio.Lock`` held until the ``async with`` block
exits, so the block must contain the commit.
"""

import asyncio
import hashlib
import weakref
from contextlib import asynccontextmanager
from typing import AsyncIterator

from libs.common.logging import get_logger
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

logger = get_logger(__name__)

_local_locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = (
    weakref.WeakValueDictionary()
)


def advisory_lock_key(coach_id: str) -> int:
    """Stable signed 64-bit key for ``pg_advisory_xact_lock``."""
    digest = hashlib.sha256(f"booking-coach:{coach_id}".encode()).digest()
    return int.from_bytes(digest[:8], "big", signed=True)


def _local_lock(coach_id: str) -> asyncio.Lock:
    lock = _local_locks.get(coach_id)
    if lock is None:
        lock = asyncio.Lock()
        _local_locks[coach_id] = lock
    return lock


@asynccontextmanager
async def coach_schedule_lock(db: AsyncSession, coach_id: str) -> AsyncIterator[None]:
    """Hold the coach's schedule lock for the duration of the block."""
    if db.get_bind().dialect.name == "postgresql":
        await db.execute(select(func.pg_advisory_xact_lock(advisory_lock_key(coach_id))))
        logger.debug("Acquired advisory schedule lock for coach %s", coach_id)
        yield
        return

    lock = _local_lock(coach_id)
    async with lock:
        logger.debug("Acquired local schedule lock for coach %s", coach_id)
        yield
