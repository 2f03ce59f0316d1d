"""In-memory dismissal store."""

from typing import Dict, Optional

from safetyhub.issues import IssueKey
from .base import DismissalRecord, DismissalStore


class MemoryDismissalStore(DismissalStore):
    """Dismissal records held in a dict; lost when the process exits."""

    def __init__(self, name: str = "memory"):
        super().__init__(name)
        self.records: Dict[IssueKey, DismissalRecord] = {}

    def _load(self, issue_key: IssueKey) -> Optional[DismissalRecord]:
        return self.records.get(issue_key)

    def _save(self, issue_key: IssueKey, record: DismissalRecord) -> None:
        self.records[issue_key] = record

    def _delete(self, issue_key: IssueKey) -> bool:
        return self.records.pop(issue_key, None) is not None

    def clear(self) -> None:
        self.records.clear()

    def size(self) -> int:
        return len(self.records)

    def close(self) -> None:
        pass
