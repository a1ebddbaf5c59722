"""Booking lifecycle and scheduling-availability engine for a studio dashboard."""

__version__ = "0.1.0"
