"""Adapters - I/O implementations of ports."""

from .memory_store import InMemoryTaskStore
from .json_store import JsonTaskStore
from .system_clock import SystemClock
from .file_state import FileSessionState, SessionState

__all__ = [
    "InMemoryTaskStore",
    "JsonTaskStore",
    "SystemClock",
    "FileSessionState",
    "SessionState",
]
