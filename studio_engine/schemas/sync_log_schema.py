"""Append-only audit records for outbound integration calls."""

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field


class SyncDirection(str, Enum):
    INBOUND = "inbound"
    OUTBOUND = "outbound"


class SyncStatus(str, Enum):
    SUCCESS = "success"
    FAILED = "failed"
    SKIPPED = "skipped"


class SyncLogEntry(BaseModel):
    """One attempt to talk to an external provider."""

    provider: str
    direction: SyncDirection = SyncDirection.OUTBOUND
    status: SyncStatus
    entity_type: str
    local_id: Optional[str] = None
    remote_id: Optional[str] = None
    message: Optional[str] = None
    error_message: Optional[str] = None
    payload: Optional[dict[str, Any]] = None
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
