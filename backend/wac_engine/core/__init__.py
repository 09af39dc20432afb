"""Logging and tracing setup for the replay engine."""

from .logging import setup_logging
from .telemetry import setup_telemetry

__all__ = ["setup_logging", "setup_telemetry"]
