"""Issue deduplication for safetyhub.

Issues reported by sources of the same deduplication group, with the same
deduplication id, collapse into the single highest priority issue.
"""

from safetyhub.dedup.key import DeduplicationKey, get_dedup_key
from safetyhub.dedup.deduplicator import IssueDeduplicator

__all__ = ["DeduplicationKey", "IssueDeduplicator", "get_dedup_key"]
