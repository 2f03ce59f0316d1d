"""Redis-backed dismissal store for deployments sharing dismissal state."""

import json
from typing import Any, Dict, Optional

import redis

from safetyhub.issues import IssueKey
from safetyhub.utils.logger import log_error
from .base import DismissalRecord, DismissalStore


class RedisDismissalStore(DismissalStore):
    """One JSON value per dismissed issue under ``key_prefix``."""

    def __init__(self, redis_url: str = "redis://localhost:6379",
                 key_prefix: str = "safetyhub:dismissal:", name: str = "redis",
                 client: Optional[redis.Redis] = None):
        super().__init__(name)
        self.redis_url = redis_url
        self.key_prefix = key_prefix
        self.redis = client if client is not None else redis.Redis.from_url(
            redis_url, decode_responses=True
        )

    def ping(self) -> bool:
        """Return whether the server answers; connection errors count as ``False``."""
        try:
            return bool(self.redis.ping())
        except redis.RedisError:
            self._record_error()
            return False

    def _make_key(self, issue_key: IssueKey) -> str:
        return f"{self.key_prefix}{issue_key.to_string()}"

    def _load(self, issue_key: IssueKey) -> Optional[DismissalRecord]:
        raw = self.redis.get(self._make_key(issue_key))
        if raw is None:
            return None
        if isinstance(raw, bytes):
            raw = raw.decode("utf-8")
        return DismissalRecord.from_dict(json.loads(raw))

    def _save(self, issue_key: IssueKey, record: DismissalRecord) -> None:
        try:
            self.redis.set(self._make_key(issue_key), json.dumps(record.to_dict()))
        except redis.RedisError as e:
            self._record_error()
            log_error("Failed to store dismissal in Redis", issue_key=str(issue_key), error=str(e))
            raise

    def _delete(self, issue_key: IssueKey) -> bool:
        return bool(self.redis.delete(self._make_key(issue_key)))

    def _iter_keys(self):
        return self.redis.scan_iter(match=f"{self.key_prefix}*")

    def clear(self) -> None:
        keys = list(self._iter_keys())
        if keys:
            self.redis.delete(*keys)

    def size(self) -> int:
        return sum(1 for _ in self._iter_keys())

    def close(self) -> None:
        self.redis.close()

    def get_stats(self) -> Dict[str, Any]:
        return {**super().get_stats(), "key_prefix": self.key_prefix}
