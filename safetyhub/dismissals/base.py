"""Abstract base class for dismissal stores."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import dataclass, replace
from datetime import datetime
from typing import Any, Dict, Iterator, Optional

from safetyhub.issues import IssueKey
from safetyhub.utils.logger import log_debug, log_warning


@dataclass
class DismissalRecord:
    """Dismissal state of a single issue."""

    dismissed_at: datetime
    max_severity_at_dismissal: int
    dismiss_count: int = 1

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dismissed_at": self.dismissed_at.isoformat(),
            "max_severity_at_dismissal": int(self.max_severity_at_dismissal),
            "dismiss_count": self.dismiss_count,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DismissalRecord":
        return cls(
            dismissed_at=datetime.fromisoformat(data["dismissed_at"]),
            max_severity_at_dismissal=int(data["max_severity_at_dismissal"]),
            dismiss_count=int(data.get("dismiss_count", 1)),
        )


class DismissalStore(ABC):
    """Holds which issues a user dismissed, and up to which severity.

    The deduplicator only needs ``is_issue_dismissed`` and
    ``copy_dismissal_data``; the rest is used by the CLI and by callers that
    record user actions.
    """

    def __init__(self, name: str):
        self.name = name
        self.checks = 0
        self.copies = 0
        self.errors = 0

    @abstractmethod
    def _load(self, issue_key: IssueKey) -> Optional[DismissalRecord]:
        """Return the stored record for ``issue_key`` or ``None``."""

    @abstractmethod
    def _save(self, issue_key: IssueKey, record: DismissalRecord) -> None:
        """Store ``record`` under ``issue_key``, replacing any previous one."""

    @abstractmethod
    def _delete(self, issue_key: IssueKey) -> bool:
        """Remove the record of ``issue_key``; return whether one existed."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all dismissal records."""

    @abstractmethod
    def size(self) -> int:
        """Number of stored dismissal records."""

    @abstractmethod
    def close(self) -> None:
        """Release backend resources."""

    @contextmanager
    def batch(self) -> Iterator[None]:
        """Group several writes. Backends may defer persisting them until the block exits."""
        yield

    def is_issue_dismissed(self, issue_key: IssueKey, severity_level: int) -> bool:
        """Return whether ``issue_key`` is dismissed at ``severity_level`` or above.

        An issue that became more severe than it was when dismissed is shown again.
        """
        self.checks += 1
        record = self._load(issue_key)
        if record is None:
            return False
        return severity_level <= record.max_severity_at_dismissal

    def copy_dismissal_data(self, from_key: IssueKey, to_key: IssueKey) -> None:
        """Overwrite the dismissal data of ``to_key`` with that of ``from_key``."""
        record = self._load(from_key)
        if record is None:
            log_warning(
                "No dismissal data to copy",
                backend=self.name,
                from_key=str(from_key),
                to_key=str(to_key),
            )
            return
        self._save(to_key, replace(record))
        self.copies += 1

    def dismiss_issue(
        self, issue_key: IssueKey, severity_level: int, when: Optional[datetime] = None
    ) -> DismissalRecord:
        """Record a dismissal of ``issue_key`` at its current ``severity_level``."""
        previous = self._load(issue_key)
        record = DismissalRecord(
            dismissed_at=when or datetime.now(),
            max_severity_at_dismissal=int(severity_level),
            dismiss_count=previous.dismiss_count + 1 if previous else 1,
        )
        self._save(issue_key, record)
        log_debug("Issue dismissed", backend=self.name, issue_key=str(issue_key),
                  severity_level=int(severity_level))
        return record

    def undismiss_issue(self, issue_key: IssueKey) -> bool:
        return self._delete(issue_key)

    def get_dismissal(self, issue_key: IssueKey) -> Optional[DismissalRecord]:
        return self._load(issue_key)

    def get_stats(self) -> Dict[str, Any]:
        """Get store statistics."""
        return {
            "backend": self.name,
            "size": self.size(),
            "checks": self.checks,
            "copies": self.copies,
            "errors": self.errors,
        }

    def _record_error(self) -> None:
        self.errors += 1
