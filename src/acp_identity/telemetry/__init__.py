"""Telemetry for acp-identity (system/operational logging)."""

from acp_identity.telemetry.system_logger import (
    configure_system_logger,
    get_system_logger,
)

__all__ = [
    "configure_system_logger",
    "get_system_logger",
]
