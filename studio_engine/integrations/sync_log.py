"""Append-only sync/audit log sink. The engine writes to it and never reads it back."""

import logging
from typing import Protocol

from studio_engine.schemas.sync_log_schema import SyncLogEntry, SyncStatus

logger = logging.getLogger(__name__)


class SyncLog(Protocol):
    async def append(self, entry: SyncLogEntry) -> None: ...


class InMemorySyncLog:
    """List-backed sink used by tests and the console demo."""

    def __init__(self) -> None:
        self._entries: list[SyncLogEntry] = []

    async def append(self, entry: SyncLogEntry) -> None:
        self._entries.append(entry)
        logger.debug(
            "sync_log %s/%s %s local_id=%s",
            entry.provider, entry.entity_type, entry.status.value, entry.local_id,
        )

    @property
    def entries(self) -> list[SyncLogEntry]:
        return list(self._entries)

    def with_status(self, status: SyncStatus) -> list[SyncLogEntry]:
        return [e for e in self._entries if e.status == status]

    def reset(self) -> None:
        self._entries.clear()
