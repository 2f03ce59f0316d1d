"""Pytest configuration and fixtures for safetyhub tests."""

import sys
from pathlib import Path

import pytest

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from safetyhub.dismissals import MemoryDismissalStore
from safetyhub.issues import SafetySourceIssue, SafetySourceIssueInfo, SeverityLevel
from safetyhub.sources import SafetySource, SafetySourceType


def make_issue(
    issue_id,
    group="g",
    dedup_id="1",
    severity=SeverityLevel.INFORMATION,
    source_id=None,
    user_id=0,
):
    """Build an issue record whose source is named after the issue unless given."""
    source = SafetySource(
        id=source_id or f"src-{issue_id}",
        type=SafetySourceType.DYNAMIC,
        deduplication_group=group,
    )
    return SafetySourceIssueInfo(
        issue=SafetySourceIssue(
            id=issue_id,
            severity_level=severity,
            title=f"Issue {issue_id}",
            deduplication_id=dedup_id,
        ),
        source=source,
        user_id=user_id,
    )


@pytest.fixture
def issue_factory():
    """Factory for issue records."""
    return make_issue


@pytest.fixture
def memory_store():
    """Fresh in-memory dismissal store."""
    store = MemoryDismissalStore(name="test_memory")
    yield store
    store.close()


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    """Run with no SAFETYHUB-related environment variables and no .env file."""
    for var in (
        "LOG_LEVEL",
        "LOG_FORMAT",
        "DEDUP_ENABLED",
        "DISMISSAL_BACKEND",
        "DISMISSAL_FILE_PATH",
        "DISMISSAL_REDIS_URL",
        "DISMISSAL_REDIS_KEY_PREFIX",
    ):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.chdir(tmp_path)
    return tmp_path
