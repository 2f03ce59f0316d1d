"""Collapse duplicate issues reported by sources of the same deduplication group.

Issues are duplicates when they carry the same deduplication id and were sent
by sources in the same deduplication group. Only the highest priority issue
of each group of duplicates is kept. Dismissing any one of them dismisses all
duplicates of equal or lower severity.
"""

from __future__ import annotations

from typing import Dict, List, Optional, Set

from safetyhub.dedup.key import DeduplicationKey, get_dedup_key
from safetyhub.dismissals.base import DismissalStore
from safetyhub.issues import IssueKey, SafetySourceIssueInfo
from safetyhub.utils.logger import log_debug, log_dedup_summary


class IssueDeduplicator:
    """Filter duplicate issues out of a priority-sorted issue list.

    Not thread safe: callers must serialize calls sharing a dismissal store.

    Args:
        dismissal_store: Store used to read and align dismissal state.

    Usage::

        deduplicator = IssueDeduplicator(store)
        deduplicator.deduplicate_issues(sorted_issues)
    """

    def __init__(self, dismissal_store: DismissalStore):
        self.dismissal_store = dismissal_store

    def deduplicate_issues(self, sorted_issues: List[SafetySourceIssueInfo]) -> None:
        """Remove all but the highest priority duplicate from ``sorted_issues``.

        ``sorted_issues`` must already be sorted by descending priority. The
        list is modified in place; issues without a deduplication key always
        survive and the survivors keep their relative order.

        Before filtering, the dismissal data of the top dismissed issue of each
        bucket is copied onto every other duplicate of equal or lower severity.
        """
        dedup_buckets = self._create_dedup_buckets(sorted_issues)
        log_debug(
            "Deduplicating issues",
            issue_count=len(sorted_issues),
            bucket_count=len(dedup_buckets),
        )

        with self.dismissal_store.batch():
            self._dismiss_duplicate_issues_of_dismissed_issue(dedup_buckets)

        duplicates_to_filter_out = self._get_duplicates_to_filter_out(dedup_buckets)
        if not duplicates_to_filter_out:
            return

        input_count = len(sorted_issues)
        sorted_issues[:] = [
            issue_info
            for issue_info in sorted_issues
            if issue_info.issue_key not in duplicates_to_filter_out
        ]
        log_dedup_summary(input_count, len(dedup_buckets), input_count - len(sorted_issues))

    def _dismiss_duplicate_issues_of_dismissed_issue(
        self, dedup_buckets: Dict[DeduplicationKey, List[SafetySourceIssueInfo]]
    ) -> None:
        for duplicates in dedup_buckets.values():
            top_dismissed = self._get_highest_priority_dismissed_issue(duplicates)
            self._align_dismissals_within_bucket(top_dismissed, duplicates)

    def _align_dismissals_within_bucket(
        self,
        top_dismissed: Optional[SafetySourceIssueInfo],
        duplicates: List[SafetySourceIssueInfo],
    ) -> None:
        """Copy the top dismissed issue's dismissal onto duplicates of equal or lower severity."""
        if top_dismissed is None:
            return
        top_dismissed_key = top_dismissed.issue_key
        top_dismissed_severity = top_dismissed.severity_level
        for issue_info in duplicates:
            issue_key = issue_info.issue_key
            if issue_key != top_dismissed_key and issue_info.severity_level <= top_dismissed_severity:
                log_debug(
                    "Aligning dismissal of duplicate issue",
                    from_key=str(top_dismissed_key),
                    to_key=str(issue_key),
                )
                self.dismissal_store.copy_dismissal_data(top_dismissed_key, issue_key)

    def _get_highest_priority_dismissed_issue(
        self, duplicates: List[SafetySourceIssueInfo]
    ) -> Optional[SafetySourceIssueInfo]:
        for issue_info in duplicates:
            if self.dismissal_store.is_issue_dismissed(
                issue_info.issue_key, issue_info.severity_level
            ):
                return issue_info
        return None

    @staticmethod
    def _get_duplicates_to_filter_out(
        dedup_buckets: Dict[DeduplicationKey, List[SafetySourceIssueInfo]]
    ) -> Set[IssueKey]:
        duplicates_to_filter_out: Set[IssueKey] = set()
        for duplicates in dedup_buckets.values():
            # all but the top one in the bucket
            for issue_info in duplicates[1:]:
                duplicates_to_filter_out.add(issue_info.issue_key)
        return duplicates_to_filter_out

    @staticmethod
    def _create_dedup_buckets(
        sorted_issues: List[SafetySourceIssueInfo],
    ) -> Dict[DeduplicationKey, List[SafetySourceIssueInfo]]:
        """Return a mapping (dedup key) -> list(issues), each list in input order."""
        dedup_buckets: Dict[DeduplicationKey, List[SafetySourceIssueInfo]] = {}
        for issue_info in sorted_issues:
            dedup_key = get_dedup_key(issue_info)
            if dedup_key is None:
                continue
            dedup_buckets.setdefault(dedup_key, []).append(issue_info)
        return dedup_buckets
