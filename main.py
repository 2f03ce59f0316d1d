"""Command-line entry point for safetyhub.

Loads a priority-ordered issue file, applies requested dismissals, collapses
duplicate issues and prints the issues left to show.

Usage:
    python main.py issues.yaml
    python main.py issues.yaml --backend file --dismiss lockscreen/no-pin
    python main.py issues.yaml --json
"""
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import ValidationError

from safetyhub.config import VALID_DISMISSAL_BACKENDS, reload_config
from safetyhub.dedup import IssueDeduplicator
from safetyhub.dismissals import DismissalStore, create_dismissal_store
from safetyhub.issues import IssueKey, SafetySourceIssueInfo
from safetyhub.loader import load_issue_file
from safetyhub.utils.logger import configure_logging, log_error, log_info, log_warning


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Collapse duplicate safety issues.")
    parser.add_argument("file", help="YAML or JSON issue file, issues sorted by priority")
    parser.add_argument("--backend", choices=VALID_DISMISSAL_BACKENDS,
                        help="Dismissal store backend (overrides DISMISSAL_BACKEND).")
    parser.add_argument("--dismiss", action="append", default=[], metavar="KEY",
                        help="Dismiss the issue source_id/issue_id[/user_id] before deduplicating. Repeatable.")
    parser.add_argument("--no-dedup", dest="dedup", action="store_false", default=None,
                        help="Print issues without filtering duplicates.")
    parser.add_argument("--json", action="store_true", help="Print surviving issues as JSON.")
    return parser


def apply_dismissals(store: DismissalStore, issues: List[SafetySourceIssueInfo], keys: List[str]) -> None:
    """Dismiss each issue named in ``keys`` at its current severity.

    Raises:
        ValueError: if a key is malformed.
    """
    by_key = {issue_info.issue_key: issue_info for issue_info in issues}
    for raw_key in keys:
        issue_key = IssueKey.from_string(raw_key)
        issue_info = by_key.get(issue_key)
        if issue_info is None:
            log_warning("Cannot dismiss unknown issue", issue_key=raw_key)
            continue
        store.dismiss_issue(issue_key, issue_info.severity_level)


def format_issue(issue_info: SafetySourceIssueInfo, store: DismissalStore) -> str:
    dismissed = store.is_issue_dismissed(issue_info.issue_key, issue_info.severity_level)
    marker = " (dismissed)" if dismissed else ""
    return f"[{int(issue_info.severity_level)}] {issue_info.issue_key} {issue_info.issue.title}{marker}"


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    load_dotenv()
    try:
        config = reload_config()
    except ValidationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 1

    if args.backend:
        config = config.model_copy(update={"dismissal_backend": args.backend})

    configure_logging(config.log_level, config.log_format)
    config.log_configuration()

    problems = config.validate_configuration()
    if problems:
        log_error("Configuration validation failed", issues=problems)
        for problem in problems:
            print(f"  - {problem}", file=sys.stderr)
        return 1

    try:
        issues = load_issue_file(Path(args.file))
    except (OSError, ValueError) as exc:
        print(f"Cannot load {args.file}: {exc}", file=sys.stderr)
        return 1

    store = create_dismissal_store(config)
    try:
        try:
            apply_dismissals(store, issues, args.dismiss)
        except ValueError as exc:
            print(str(exc), file=sys.stderr)
            return 1

        dedup_enabled = config.dedup_enabled if args.dedup is None else args.dedup
        if dedup_enabled:
            IssueDeduplicator(store).deduplicate_issues(issues)
        else:
            log_info("Deduplication disabled; printing all issues")

        if args.json:
            payload = [
                {**issue_info.to_dict(),
                 "dismissed": store.is_issue_dismissed(issue_info.issue_key, issue_info.severity_level)}
                for issue_info in issues
            ]
            print(json.dumps(payload, indent=2))
        else:
            for issue_info in issues:
                print(format_issue(issue_info, store))
        log_info("Dismissal store stats", **store.get_stats())
    finally:
        store.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
