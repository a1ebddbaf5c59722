"""Tests for import chains and module integrity.

Ensures all public modules can be imported without errors and
that re-exports from __init__.py files work correctly.
"""


class TestSchemaImports:
    def test_import_booking_schema(self):
        from studio_engine.schemas.booking_schema import Booking, BookingStatus, BookingInput
        assert BookingStatus.NO_SHOW == "no_show"
        assert Booking is not None and BookingInput is not None

    def test_import_schedule_schema(self):
        from studio_engine.schemas.schedule_schema import ClosureType, LunchBreak
        assert ClosureType.DAY_OFF == "day_off"
        assert not LunchBreak().enabled

    def test_import_sync_log_schema(self):
        from studio_engine.schemas.sync_log_schema import SyncDirection, SyncLogEntry, SyncStatus
        entry = SyncLogEntry(provider="resend", status=SyncStatus.SKIPPED, entity_type="x")
        assert entry.direction == SyncDirection.OUTBOUND


class TestPackageReExports:
    def test_scheduling_exports(self):
        from studio_engine.scheduling import (
            closed_blocks, layout_by_date, layout_day, resolve_day_availability, resolve_range,
        )
        assert callable(layout_day)

    def test_lifecycle_exports(self):
        from studio_engine.lifecycle import (
            BookingService,
            BookingSideEffectOrchestrator,
            BookingStateMachine,
            should_notify_reschedule,
        )
        assert BookingStateMachine(strict=True).strict

    def test_integration_exports(self):
        from studio_engine.integrations import (
            InMemoryBookingStore, InMemorySyncLog, RecordingNotifier,
        )
        assert RecordingNotifier().provider == "resend"

    def test_version(self):
        import studio_engine
        assert studio_engine.__version__ == "0.1.0"


class TestLoggingContext:
    def test_request_id_on_records(self):
        import logging

        from studio_engine.logging_context import RequestIdFilter, new_request_id

        request_id = new_request_id()
        record = logging.LogRecord("t", logging.INFO, __file__, 1, "msg", None, None)
        RequestIdFilter().filter(record)
        assert record.request_id == request_id
        assert request_id.startswith("REQ-")

    def test_request_scope_restores_previous_id(self):
        from studio_engine.logging_context import get_request_id, request_scope, set_request_id

        set_request_id("REQ-outer")
        with request_scope("REQ-inner") as request_id:
            assert request_id == get_request_id() == "REQ-inner"
        assert get_request_id() == "REQ-outer"

    def test_log_format_includes_request_id(self):
        import io
        import logging

        from studio_engine.logging_context import (
            LOG_FORMAT, install_request_id_filter, request_scope,
        )

        stream = io.StringIO()
        handler = logging.StreamHandler(stream)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger = logging.getLogger("studio_engine.test.format")
        logger.addHandler(handler)
        logger.propagate = False
        try:
            install_request_id_filter(logger)
            with request_scope("REQ-fmt001"):
                logger.warning("booking confirmed")
        finally:
            logger.removeHandler(handler)
        assert "[REQ-fmt001]" in stream.getvalue()
        assert "booking confirmed" in stream.getvalue()

    def test_root_handlers_carry_filter_after_config_load(self):
        import logging

        from studio_engine.config import load_config
        from studio_engine.logging_context import RequestIdFilter

        load_config()
        for handler in logging.getLogger().handlers:
            assert any(isinstance(f, RequestIdFilter) for f in handler.filters)

    def test_filter_attached_once(self):
        from studio_engine.logging_context import RequestIdFilter, get_request_logger

        logger = get_request_logger("studio_engine.test")
        get_request_logger("studio_engine.test")
        assert sum(isinstance(f, RequestIdFilter) for f in logger.filters) == 1
