"""Command implementations for gosling CLI."""

from .migrate import (
    handle_down,
    handle_down_to,
    handle_redo,
    handle_reset,
    handle_up,
    handle_up_by_one,
    handle_up_to,
)
from .status import handle_status, handle_version

__all__ = [
    "handle_up",
    "handle_up_by_one",
    "handle_up_to",
    "handle_down",
    "handle_down_to",
    "handle_redo",
    "handle_reset",
    "handle_status",
    "handle_version",
]
