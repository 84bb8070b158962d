"""Snapshot provider – fetches the full company list and caches it briefly.

The query and aggregation engines never talk to the store; they are handed
whatever this provider returns.  A failed fetch is reported to the caller
(``SnapshotFetchError``) or, via :meth:`SnapshotProvider.snapshot_or_empty`,
degraded to an empty snapshot so the dashboard still renders zeros.
"""

from __future__ import annotations

import asyncio
import logging
import time

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from dealflow.config import settings
from dealflow.db import async_session_factory
from dealflow.schemas.company import CompanyRecord
from dealflow.services.company_service import SnapshotFetchError, fetch_all_companies

logger = logging.getLogger("dealflow.snapshot")


class SnapshotProvider:
    """Short-lived cache in front of ``fetch_all_companies``.

    Attributes:
        ttl_seconds: How long a successful fetch is reused.  ``0`` disables
            caching.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession] | None = None,
        ttl_seconds: float | None = None,
    ) -> None:
        self._session_factory = session_factory or async_session_factory
        self.ttl_seconds = settings.snapshot_ttl_seconds if ttl_seconds is None else ttl_seconds
        self._snapshot: tuple[CompanyRecord, ...] | None = None
        self._fetched_at = 0.0
        self._lock = asyncio.Lock()

    def _fresh(self) -> bool:
        return (
            self._snapshot is not None
            and time.monotonic() - self._fetched_at < self.ttl_seconds
        )

    async def fetch_all_companies(self) -> tuple[CompanyRecord, ...]:
        """Return the current snapshot, hitting the store when the cache is stale.

        Raises:
            SnapshotFetchError: the store could not be read.
        """
        async with self._lock:
            if self._fresh():
                return self._snapshot
            async with self._session_factory() as session:
                records = await fetch_all_companies(session)
            self._snapshot = tuple(records)
            self._fetched_at = time.monotonic()
            logger.debug("snapshot refreshed rows=%d", len(self._snapshot))
            return self._snapshot

    async def snapshot_or_empty(self) -> tuple[tuple[CompanyRecord, ...], str | None]:
        """Like :meth:`fetch_all_companies` but never raises.

        Returns:
            ``(snapshot, error_message)`` – on failure the snapshot is empty
            and *error_message* describes what went wrong.
        """
        try:
            return await self.fetch_all_companies(), None
        except SnapshotFetchError as exc:
            logger.error("company snapshot unavailable: %s", exc)
            return (), str(exc)

    def invalidate(self) -> None:
        """Drop the cached snapshot; the next read goes to the store."""
        self._snapshot = None
        self._fetched_at = 0.0


# Module-level singleton used by tool handlers.
snapshot_provider = SnapshotProvider()
