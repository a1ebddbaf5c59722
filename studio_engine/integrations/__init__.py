from studio_engine.integrations.client_directory import ClientDirectory, InMemoryClientDirectory
from studio_engine.integrations.notifier import (
    NotificationKind,
    Notifier,
    RecordingNotifier,
)
from studio_engine.integrations.payment_orders import (
    MockPaymentOrderClient,
    OrderRequest,
    PaymentOrderClient,
)
from studio_engine.integrations.record_store import BookingStore, InMemoryBookingStore
from studio_engine.integrations.sync_log import InMemorySyncLog, SyncLog

__all__ = [
    "BookingStore", "InMemoryBookingStore",
    "Notifier", "NotificationKind", "RecordingNotifier",
    "PaymentOrderClient", "MockPaymentOrderClient", "OrderRequest",
    "ClientDirectory", "InMemoryClientDirectory",
    "SyncLog", "InMemorySyncLog",
]
