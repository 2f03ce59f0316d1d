"""Unit tests for IssueDeduplicator."""

from datetime import datetime
from unittest.mock import MagicMock, patch

import pytest

from safetyhub.dedup import IssueDeduplicator
from safetyhub.dismissals import DismissalStore, FileDismissalStore
from safetyhub.issues import SeverityLevel

LOW = SeverityLevel.INFORMATION
MED = SeverityLevel.RECOMMENDATION
HIGH = SeverityLevel.CRITICAL_WARNING

pytestmark = pytest.mark.dedup


def _ids(issues):
    return [i.issue.id for i in issues]


class TestScenarios:
    def test_first_issue_survives_regardless_of_severity(self, issue_factory, memory_store):
        x = issue_factory("x", severity=LOW)
        y = issue_factory("y", severity=HIGH)
        issues = [x, y]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [x]
        assert memory_store.size() == 0

    def test_dismissed_duplicate_dismisses_less_severe_survivor(self, issue_factory, memory_store):
        x = issue_factory("x", severity=LOW)
        y = issue_factory("y", severity=HIGH)
        memory_store.dismiss_issue(y.issue_key, HIGH)
        issues = [x, y]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [x]
        assert memory_store.is_issue_dismissed(x.issue_key, LOW)
        assert memory_store.get_dismissal(x.issue_key) == memory_store.get_dismissal(y.issue_key)

    def test_partial_keys_are_never_grouped(self, issue_factory):
        a = issue_factory("a", group=None, dedup_id="1")
        b = issue_factory("b", group="g", dedup_id=None)
        store = MagicMock(spec=DismissalStore)
        issues = [a, b]

        IssueDeduplicator(store).deduplicate_issues(issues)

        assert issues == [a, b]
        store.is_issue_dismissed.assert_not_called()
        store.copy_dismissal_data.assert_not_called()

    def test_lower_priority_dismissal_only_reaches_equal_or_lower_severity(
        self, issue_factory, memory_store
    ):
        high = issue_factory("high", severity=HIGH)
        low = issue_factory("low", severity=LOW)
        med = issue_factory("med", severity=MED)
        memory_store.dismiss_issue(low.issue_key, LOW)
        issues = [high, low, med]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [high]
        assert memory_store.get_dismissal(high.issue_key) is None
        assert memory_store.get_dismissal(med.issue_key) is None
        assert memory_store.copies == 0

    def test_empty_list_is_noop(self, memory_store):
        issues = []
        IssueDeduplicator(memory_store).deduplicate_issues(issues)
        assert issues == []


class TestDismissalAlignment:
    def test_equal_severity_is_propagated(self, issue_factory, memory_store):
        a = issue_factory("a", severity=MED)
        b = issue_factory("b", severity=MED)
        memory_store.dismiss_issue(a.issue_key, MED)

        IssueDeduplicator(memory_store).deduplicate_issues([a, b])

        assert memory_store.is_issue_dismissed(b.issue_key, MED)

    def test_more_severe_duplicate_is_never_dismissed(self, issue_factory, memory_store):
        low = issue_factory("low", severity=LOW)
        high = issue_factory("high", severity=HIGH)
        memory_store.dismiss_issue(low.issue_key, LOW)
        issues = [low, high]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [low]
        assert not memory_store.is_issue_dismissed(high.issue_key, HIGH)
        assert memory_store.get_dismissal(high.issue_key) is None

    def test_highest_priority_dismissal_wins_and_overwrites(self, issue_factory, memory_store):
        first = issue_factory("first", severity=MED)
        second = issue_factory("second", severity=HIGH)
        third = issue_factory("third", severity=LOW)
        memory_store.dismiss_issue(first.issue_key, MED, when=datetime(2024, 1, 1))
        memory_store.dismiss_issue(third.issue_key, LOW, when=datetime(2023, 6, 1))

        IssueDeduplicator(memory_store).deduplicate_issues([first, second, third])

        # third is overwritten with first's data, second is more severe and untouched
        assert memory_store.get_dismissal(third.issue_key).dismissed_at == datetime(2024, 1, 1)
        assert memory_store.get_dismissal(second.issue_key) is None

    def test_source_search_stops_at_first_dismissed(self, issue_factory):
        a = issue_factory("a", severity=HIGH)
        b = issue_factory("b", severity=LOW)
        c = issue_factory("c", severity=LOW)
        store = MagicMock(spec=DismissalStore)
        store.is_issue_dismissed.side_effect = lambda key, sev: key == b.issue_key

        IssueDeduplicator(store).deduplicate_issues([a, b, c])

        checked = [call.args[0] for call in store.is_issue_dismissed.call_args_list]
        assert checked == [a.issue_key, b.issue_key]
        store.copy_dismissal_data.assert_called_once_with(b.issue_key, c.issue_key)

    def test_dismissal_check_uses_issue_own_severity(self, issue_factory):
        a = issue_factory("a", severity=HIGH)
        b = issue_factory("b", severity=LOW)
        store = MagicMock(spec=DismissalStore)
        store.is_issue_dismissed.return_value = False

        IssueDeduplicator(store).deduplicate_issues([a, b])

        store.is_issue_dismissed.assert_any_call(a.issue_key, HIGH)
        store.is_issue_dismissed.assert_any_call(b.issue_key, LOW)

    def test_buckets_are_aligned_independently(self, issue_factory, memory_store):
        g1_a = issue_factory("g1a", dedup_id="one", severity=LOW)
        g2_a = issue_factory("g2a", dedup_id="two", severity=LOW)
        g1_b = issue_factory("g1b", dedup_id="one", severity=LOW)
        g2_b = issue_factory("g2b", dedup_id="two", severity=LOW)
        memory_store.dismiss_issue(g1_b.issue_key, LOW)

        IssueDeduplicator(memory_store).deduplicate_issues([g1_a, g2_a, g1_b, g2_b])

        assert memory_store.is_issue_dismissed(g1_a.issue_key, LOW)
        assert not memory_store.is_issue_dismissed(g2_a.issue_key, LOW)
        assert not memory_store.is_issue_dismissed(g2_b.issue_key, LOW)

    def test_dismissed_survivor_with_no_lower_duplicates(self, issue_factory, memory_store):
        top = issue_factory("top", severity=LOW)
        other = issue_factory("other", severity=HIGH)
        memory_store.dismiss_issue(top.issue_key, LOW)
        issues = [top, other]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [top]
        assert memory_store.copies == 0


class TestFiltering:
    def test_same_id_in_different_groups_is_not_duplicate(self, issue_factory, memory_store):
        a = issue_factory("a", group="g1", dedup_id="1")
        b = issue_factory("b", group="g2", dedup_id="1")
        issues = [a, b]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [a, b]

    def test_order_is_preserved_and_first_of_each_group_wins(self, issue_factory, memory_store):
        issues = [
            issue_factory("n1", group=None),
            issue_factory("a1", dedup_id="a"),
            issue_factory("b1", dedup_id="b"),
            issue_factory("a2", dedup_id="a"),
            issue_factory("n2", dedup_id=None),
            issue_factory("b2", dedup_id="b"),
            issue_factory("c1", dedup_id="c"),
            issue_factory("a3", dedup_id="a"),
        ]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert _ids(issues) == ["n1", "a1", "b1", "n2", "c1"]

    def test_list_is_mutated_in_place(self, issue_factory, memory_store):
        issues = [issue_factory("a"), issue_factory("b")]
        alias = issues

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert alias is issues
        assert _ids(alias) == ["a"]

    def test_filtering_uses_full_issue_key_including_user(self, issue_factory, memory_store):
        u0 = issue_factory("a", source_id="s", user_id=0)
        u10 = issue_factory("a", source_id="s", user_id=10)
        issues = [u0, u10]

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        assert issues == [u0]

    def test_idempotent(self, issue_factory, memory_store):
        issues = [
            issue_factory("a1", severity=LOW),
            issue_factory("a2", severity=HIGH),
            issue_factory("b1", dedup_id="b", severity=MED),
            issue_factory("b2", dedup_id="b", severity=LOW),
        ]
        memory_store.dismiss_issue(issues[1].issue_key, HIGH)
        memory_store.dismiss_issue(issues[2].issue_key, MED)
        deduplicator = IssueDeduplicator(memory_store)

        deduplicator.deduplicate_issues(issues)
        first_pass = list(issues)
        snapshot = dict(memory_store.records)
        copies = memory_store.copies

        deduplicator.deduplicate_issues(issues)

        assert issues == first_pass
        assert memory_store.records == snapshot
        assert memory_store.copies == copies

    def test_one_survivor_per_key(self, issue_factory, memory_store):
        issues = []
        for n in range(30):
            dedup_id = None if n % 7 == 0 else str(n % 4)
            issues.append(issue_factory(f"i{n}", dedup_id=dedup_id))
        null_count = sum(1 for i in issues if i.deduplication_id is None)

        IssueDeduplicator(memory_store).deduplicate_issues(issues)

        keyed = [i.deduplication_id for i in issues if i.deduplication_id is not None]
        assert sorted(keyed) == sorted(set(keyed))
        assert sum(1 for i in issues if i.deduplication_id is None) == null_count


class TestPersistentStore:
    def test_alignment_writes_file_store_once(self, issue_factory, tmp_path):
        store = FileDismissalStore(path=str(tmp_path / "dismissals.json"))
        issues = [issue_factory(f"i{n}", severity=LOW) for n in range(6)]
        store.dismiss_issue(issues[0].issue_key, LOW)

        with patch.object(store, "_save_file", wraps=store._save_file) as save_file:
            IssueDeduplicator(store).deduplicate_issues(issues)

        assert save_file.call_count == 1
        assert store.copies == 5
        reloaded = FileDismissalStore(path=str(tmp_path / "dismissals.json"))
        assert reloaded.size() == 6
