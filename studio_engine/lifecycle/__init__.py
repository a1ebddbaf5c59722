from studio_engine.lifecycle.orchestrator import (
    BookingSideEffectOrchestrator,
    TransitionContext,
)
from studio_engine.lifecycle.reschedule import should_notify_reschedule
from studio_engine.lifecycle.service import BookingService
from studio_engine.lifecycle.state_machine import BookingStateMachine, TransitionResult

__all__ = [
    "BookingStateMachine",
    "TransitionResult",
    "BookingSideEffectOrchestrator",
    "TransitionContext",
    "BookingService",
    "should_notify_reschedule",
]
