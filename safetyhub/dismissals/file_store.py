"""File-based persistent dismissal store."""

import json
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional

from safetyhub.issues import IssueKey
from safetyhub.utils.logger import log_error, log_warning
from .base import DismissalRecord, DismissalStore


class FileDismissalStore(DismissalStore):
    """Dismissal records persisted as a single JSON document.

    The whole document is loaded on construction and rewritten after every
    mutation, or once at the end of a ``batch()`` block. Keys are
    ``IssueKey.to_string()``.
    """

    def __init__(self, path: str = ".safetyhub/dismissals.json", name: str = "file"):
        super().__init__(name)
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.records: Dict[str, DismissalRecord] = self._load_file()
        self._batch_depth = 0
        self._dirty = False

    def _load_file(self) -> Dict[str, DismissalRecord]:
        """Load dismissal records from disk; a missing or corrupt file yields an empty store."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
            if not isinstance(data, dict):
                raise ValueError("dismissal file must contain a JSON object")
            return {key: DismissalRecord.from_dict(value) for key, value in data.items()}
        except (OSError, ValueError, KeyError, TypeError) as e:
            self._record_error()
            log_warning("Ignoring unreadable dismissal file", path=str(self.path), error=str(e))
            return {}

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Defer rewriting the file until the outermost block exits."""
        self._batch_depth += 1
        try:
            yield
        finally:
            self._batch_depth -= 1
            if self._batch_depth == 0 and self._dirty:
                self._save_file()

    def _persist(self) -> None:
        if self._batch_depth:
            self._dirty = True
            return
        self._save_file()

    def _save_file(self) -> None:
        data: Dict[str, Any] = {key: record.to_dict() for key, record in self.records.items()}
        try:
            with open(self.path, "w", encoding="utf-8") as f:
                json.dump(data, f, ensure_ascii=False, indent=2, sort_keys=True)
            self._dirty = False
        except OSError as e:
            self._record_error()
            log_error("Failed to write dismissal file", path=str(self.path), error=str(e))
            raise

    def _load(self, issue_key: IssueKey) -> Optional[DismissalRecord]:
        return self.records.get(issue_key.to_string())

    def _save(self, issue_key: IssueKey, record: DismissalRecord) -> None:
        self.records[issue_key.to_string()] = record
        self._persist()

    def _delete(self, issue_key: IssueKey) -> bool:
        if self.records.pop(issue_key.to_string(), None) is None:
            return False
        self._persist()
        return True

    def clear(self) -> None:
        self.records.clear()
        self._persist()

    def size(self) -> int:
        return len(self.records)

    def close(self) -> None:
        self._save_file()

    def get_stats(self) -> Dict[str, Any]:
        return {**super().get_stats(), "path": str(self.path)}
