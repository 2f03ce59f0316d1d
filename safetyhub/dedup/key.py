"""Deduplication key: the (group, id) pair that identifies duplicate issues."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from safetyhub.issues import SafetySourceIssueInfo


@dataclass(frozen=True)
class DeduplicationKey:
    """Value-equal, hashable pair of deduplication group and deduplication id."""

    deduplication_group: str
    deduplication_id: str


def get_dedup_key(issue_info: SafetySourceIssueInfo) -> Optional[DeduplicationKey]:
    """Return the deduplication key of ``issue_info``.

    ``None`` when either the source's group or the issue's deduplication id is
    missing; such issues are never considered duplicates.
    """
    deduplication_group = issue_info.deduplication_group
    deduplication_id = issue_info.deduplication_id

    if deduplication_group is None or deduplication_id is None:
        return None
    return DeduplicationKey(deduplication_group, deduplication_id)
