"""Safety sources: the independent producers of issues."""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from safetyhub.utils.logger import log_warning


class SafetySourceType(IntEnum):
    """How a source delivers its data."""

    STATIC = 1
    DYNAMIC = 2
    ISSUE_ONLY = 3


@dataclass(frozen=True)
class SafetySource:
    """A configured safety source.

    Attributes:
        id: Unique source identifier.
        type: One of ``SafetySourceType`` (kept as ``int`` so that unknown
            values coming from configuration survive loading).
        deduplication_group: Sources sharing a group may report duplicate
            issues. ``None`` disables deduplication for the source.
    """

    id: str
    type: int = SafetySourceType.DYNAMIC
    deduplication_group: Optional[str] = None


def is_external(safety_source: SafetySource) -> bool:
    """Return whether issue data can be provided for ``safety_source`` from outside.

    Static sources only carry fixed entries; dynamic and issue-only sources
    push their own data.
    """
    source_type = safety_source.type
    if source_type == SafetySourceType.STATIC:
        return False
    if source_type in (SafetySourceType.DYNAMIC, SafetySourceType.ISSUE_ONLY):
        return True
    log_warning("Unexpected safety source type", source_id=safety_source.id, source_type=source_type)
    return False
