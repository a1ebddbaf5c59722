"""
Notification dispatch contract and a recording implementation.

In production this renders the booking email templates and hands them to
the email provider. The engine only needs ``send``; delivery failures
surface as exceptions which the orchestrator catches.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional, Protocol

logger = logging.getLogger(__name__)


class NotificationKind(str, Enum):
    """Booking emails the studio sends."""
    CONFIRMATION = "confirmation"
    CANCELLATION = "cancellation"
    COMPLETION = "completion"
    NO_SHOW = "no_show"
    RESCHEDULE = "reschedule"


class Notifier(Protocol):
    provider: str

    async def send(
        self, kind: NotificationKind, recipient_email: str, template_data: dict[str, Any]
    ) -> None: ...


class NotificationError(Exception):
    """The provider rejected or failed to deliver a message."""


@dataclass
class SentNotification:
    kind: NotificationKind
    recipient_email: str
    template_data: dict[str, Any]


@dataclass
class RecordingNotifier:
    """Keeps every message instead of delivering it.

    Set ``fail_with`` (or add kinds to ``failing_kinds``) to simulate
    provider outages in tests and demos.
    """

    provider: str = "resend"
    sent: list[SentNotification] = field(default_factory=list)
    fail_with: Optional[str] = None
    failing_kinds: set[NotificationKind] = field(default_factory=set)

    async def send(
        self, kind: NotificationKind, recipient_email: str, template_data: dict[str, Any]
    ) -> None:
        if self.fail_with is not None or kind in self.failing_kinds:
            raise NotificationError(self.fail_with or f"{kind.value} delivery failed")
        self.sent.append(SentNotification(kind, recipient_email, dict(template_data)))
        logger.info("Notification %s queued for %s", kind.value, recipient_email)

    def kinds(self) -> list[NotificationKind]:
        return [n.kind for n in self.sent]

    def reset(self) -> None:
        self.sent.clear()
        self.fail_with = None
        self.failing_kinds.clear()
