"""Dismissal store selection with fallback."""

from enum import Enum
from typing import List, Optional

import redis

from safetyhub.config import Config
from safetyhub.utils.logger import log_error, log_info, log_warning
from .base import DismissalStore
from .file_store import FileDismissalStore
from .memory_store import MemoryDismissalStore
from .redis_store import RedisDismissalStore


class DismissalBackendType(Enum):
    """Dismissal store backend types."""

    REDIS = "redis"
    FILE = "file"
    MEMORY = "memory"


_FALLBACK_CHAIN = {
    DismissalBackendType.REDIS: [DismissalBackendType.FILE, DismissalBackendType.MEMORY],
    DismissalBackendType.FILE: [DismissalBackendType.MEMORY],
    DismissalBackendType.MEMORY: [],
}


def _create_backend(backend_type: DismissalBackendType, config: Config) -> Optional[DismissalStore]:
    """Create a store of ``backend_type``; ``None`` if it is unusable."""
    try:
        if backend_type is DismissalBackendType.REDIS:
            store = RedisDismissalStore(
                redis_url=config.dismissal_redis_url,
                key_prefix=config.dismissal_redis_key_prefix,
            )
            if not store.ping():
                log_warning("Redis connection failed", redis_url=config.dismissal_redis_url)
                store.close()
                return None
            log_info("Redis dismissal store created")
            return store

        if backend_type is DismissalBackendType.FILE:
            store = FileDismissalStore(path=config.dismissal_file_path)
            log_info("File dismissal store created", path=config.dismissal_file_path)
            return store

        log_info("Memory dismissal store created")
        return MemoryDismissalStore()

    except (OSError, ValueError, redis.RedisError) as e:
        log_error(
            "Failed to create dismissal store",
            backend_type=backend_type.value,
            error=str(e),
        )
        return None


def create_dismissal_store(config: Config, backend: Optional[str] = None) -> DismissalStore:
    """Create the configured dismissal store, falling back redis -> file -> memory.

    Args:
        config: Application configuration.
        backend: Optional backend name overriding ``config.dismissal_backend``.

    Raises:
        ValueError: if the backend name is unknown.
    """
    backend_type = DismissalBackendType((backend or config.dismissal_backend).lower())
    candidates: List[DismissalBackendType] = [backend_type] + _FALLBACK_CHAIN[backend_type]

    for candidate in candidates:
        store = _create_backend(candidate, config)
        if store is None:
            continue
        if candidate is not backend_type:
            log_warning(
                "Using fallback dismissal store",
                backend=candidate.value,
                primary_failed=backend_type.value,
            )
        return store

    # memory never fails to construct
    return MemoryDismissalStore()
