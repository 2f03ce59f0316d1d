"""Issue file loader.

Reads a YAML (or JSON) document describing the configured sources and the
priority-ordered issues they reported::

    sources:
      - id: lockscreen
        type: dynamic
        deduplication_group: device-security
    issues:
      - source_id: lockscreen
        id: no-pin
        severity_level: critical_warning
        title: Set a screen lock
        deduplication_id: screen-lock
"""

from __future__ import annotations

from pathlib import Path
from typing import Dict, List, Optional, Union

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from safetyhub.issues import SafetySourceIssue, SafetySourceIssueInfo, SeverityLevel
from safetyhub.sources import SafetySource, SafetySourceType
from safetyhub.utils.logger import log_error, log_info


class SourceSpec(BaseModel):
    """A source entry in the issue file."""

    id: str = Field(..., min_length=1, description="Unique source identifier")
    type: int = Field(SafetySourceType.DYNAMIC, description="static, dynamic, issue_only or raw number")
    deduplication_group: Optional[str] = Field(None, description="Deduplication group of the source")

    @field_validator("type", mode="before")
    @classmethod
    def parse_type(cls, v: Union[str, int]) -> int:
        if isinstance(v, str) and not v.isdigit():
            name = v.strip().upper()
            if name not in SafetySourceType.__members__:
                raise ValueError(f"Unknown source type: {v}")
            return SafetySourceType[name]
        return int(v)


class IssueSpec(BaseModel):
    """An issue entry in the issue file."""

    source_id: str = Field(..., min_length=1)
    id: str = Field(..., min_length=1)
    severity_level: int = Field(SeverityLevel.UNSPECIFIED, description="Severity name or number")
    title: str = ""
    deduplication_id: Optional[str] = None
    user_id: int = 0

    @field_validator("severity_level", mode="before")
    @classmethod
    def parse_severity(cls, v: Union[str, int]) -> int:
        if isinstance(v, str):
            return SeverityLevel(v)
        return v


class IssueFile(BaseModel):
    """Root document of an issue file."""

    sources: List[SourceSpec] = Field(default_factory=list)
    issues: List[IssueSpec] = Field(default_factory=list, description="Issues by descending priority")

    @model_validator(mode="after")
    def check_references(self) -> "IssueFile":
        source_ids = [s.id for s in self.sources]
        if len(source_ids) != len(set(source_ids)):
            raise ValueError("source ids must be unique")
        unknown = sorted({i.source_id for i in self.issues} - set(source_ids))
        if unknown:
            raise ValueError(f"issues reference unknown sources: {unknown}")
        return self

    def to_issue_infos(self) -> List[SafetySourceIssueInfo]:
        """Build issue records in file order."""
        sources: Dict[str, SafetySource] = {
            s.id: SafetySource(id=s.id, type=s.type, deduplication_group=s.deduplication_group)
            for s in self.sources
        }
        return [
            SafetySourceIssueInfo(
                issue=SafetySourceIssue(
                    id=i.id,
                    severity_level=i.severity_level,
                    title=i.title,
                    deduplication_id=i.deduplication_id,
                ),
                source=sources[i.source_id],
                user_id=i.user_id,
            )
            for i in self.issues
        ]


def load_issue_file(path: Path) -> List[SafetySourceIssueInfo]:
    """Load and validate an issue file.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        ValueError: on YAML syntax errors or schema violations
            (``pydantic.ValidationError`` is a ``ValueError``).
    """
    try:
        with open(path, "r", encoding="utf-8") as fh:
            raw = yaml.safe_load(fh) or {}
    except yaml.YAMLError as exc:
        log_error("Failed to parse issue file", path=str(path), error=str(exc))
        raise ValueError(f"YAML parse error: {exc}") from exc

    if not isinstance(raw, dict):
        raise ValueError("issue file must contain a mapping with 'sources' and 'issues'")

    issue_file = IssueFile(**raw)
    issue_infos = issue_file.to_issue_infos()
    log_info(
        "Loaded issue file",
        path=str(path),
        source_count=len(issue_file.sources),
        issue_count=len(issue_infos),
    )
    return issue_infos
