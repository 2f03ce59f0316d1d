"""Dismissal state for safetyhub issues.

Backends:
- Memory: process-local, used for tests and as the last fallback
- File: a JSON document on local disk
- Redis: shared between instances
"""

from .base import DismissalRecord, DismissalStore
from .file_store import FileDismissalStore
from .manager import DismissalBackendType, create_dismissal_store
from .memory_store import MemoryDismissalStore
from .redis_store import RedisDismissalStore

__all__ = [
    "DismissalBackendType",
    "DismissalRecord",
    "DismissalStore",
    "FileDismissalStore",
    "MemoryDismissalStore",
    "RedisDismissalStore",
    "create_dismissal_store",
]
