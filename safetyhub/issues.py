"""Issue records consumed by the deduplicator."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional
from urllib.parse import quote, unquote

from safetyhub.sources import SafetySource


class SeverityLevel(IntEnum):
    """Ordered severity scale. Higher value means more severe."""

    UNSPECIFIED = 100
    INFORMATION = 200
    RECOMMENDATION = 300
    CRITICAL_WARNING = 400

    @classmethod
    def _missing_(cls, value):
        """Accept member names case-insensitively (``"critical_warning"``)."""
        if isinstance(value, str):
            name = value.strip().upper()
            if name in cls.__members__:
                return cls[name]
            if name.isdigit():
                return cls(int(name))
        return None


@dataclass(frozen=True)
class IssueKey:
    """Identity of one issue for one user; also the unit of dismissal."""

    source_id: str
    issue_id: str
    user_id: int = 0

    def to_string(self) -> str:
        """Return ``source_id/issue_id/user_id`` with each id percent-escaped.

        Escaping keeps the form unambiguous when an id itself contains ``/``.
        """
        return f"{quote(self.source_id, safe='')}/{quote(self.issue_id, safe='')}/{self.user_id}"

    @classmethod
    def from_string(cls, value: str) -> "IssueKey":
        """Parse ``source_id/issue_id[/user_id]``, undoing percent-escaping of the ids.

        Raises:
            ValueError: if the text does not have two or three non-empty parts,
                or the user id is not an integer.
        """
        parts = value.split("/")
        if len(parts) not in (2, 3) or not all(parts):
            raise ValueError(f"Invalid issue key: {value!r}")
        user_id = int(parts[2]) if len(parts) == 3 else 0
        return cls(source_id=unquote(parts[0]), issue_id=unquote(parts[1]), user_id=user_id)

    def __str__(self) -> str:
        return self.to_string()


@dataclass
class SafetySourceIssue:
    """An issue as reported by a source."""

    id: str
    severity_level: int
    title: str = ""
    deduplication_id: Optional[str] = None


@dataclass
class SafetySourceIssueInfo:
    """An issue together with the source that reported it and its owning user."""

    issue: SafetySourceIssue
    source: SafetySource
    user_id: int = 0

    @property
    def issue_key(self) -> IssueKey:
        return IssueKey(source_id=self.source.id, issue_id=self.issue.id, user_id=self.user_id)

    @property
    def severity_level(self) -> int:
        return self.issue.severity_level

    @property
    def deduplication_id(self) -> Optional[str]:
        return self.issue.deduplication_id

    @property
    def deduplication_group(self) -> Optional[str]:
        return self.source.deduplication_group

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        return {
            "issue_key": self.issue_key.to_string(),
            "source_id": self.source.id,
            "issue_id": self.issue.id,
            "user_id": self.user_id,
            "severity_level": int(self.issue.severity_level),
            "title": self.issue.title,
            "deduplication_group": self.deduplication_group,
            "deduplication_id": self.deduplication_id,
        }
