"""Observability utilities for the interview server."""
from .logger import configure_logging, log_event

__all__ = ["configure_logging", "log_event"]
