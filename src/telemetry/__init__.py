"""Telemetry package: structured logging and request correlation."""

from __future__ import annotations

from src.telemetry.logging import (
    RequestIdMiddleware,
    clear_context,
    configure_logging,
)

__all__ = [
    "RequestIdMiddleware",
    "clear_context",
    "configure_logging",
]
