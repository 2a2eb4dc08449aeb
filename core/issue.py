# core/issue.py
"""
Issue - read-only snapshot of the Jira fields the audits look at.

Built from a Jira REST issue payload (``{"key": ..., "fields": {...}}``).
Absent optional fields map to their unset/empty equivalents; a payload without
``fields`` is treated as an issue with nothing filled in.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, FrozenSet, Iterable, Optional, Tuple

from core.dates import parse_jira_datetime

# Fields requested when searching/fetching issues for an audit
AUDIT_FIELDS = ["assignee", "resolutiondate", "fixVersions", "labels", "subtasks"]


@dataclass(frozen=True)
class Issue:
    key: str
    assignee: Optional[str] = None
    resolution_date: Optional[datetime] = None
    # None means Jira did not send the field at all
    fix_versions: Optional[Tuple[str, ...]] = ()
    labels: FrozenSet[str] = field(default_factory=frozenset)
    subtasks: Tuple[str, ...] = ()

    @classmethod
    def from_jira(cls, payload: Dict[str, Any]) -> "Issue":
        fields = (payload or {}).get("fields") or {}

        raw_versions = fields.get("fixVersions")
        fix_versions: Optional[Tuple[str, ...]] = None
        if raw_versions is not None:
            fix_versions = tuple(_version_name(v) for v in raw_versions)

        return cls(
            key=(payload or {}).get("key", ""),
            assignee=_identity(fields.get("assignee")),
            resolution_date=parse_jira_datetime(fields.get("resolutiondate")),
            fix_versions=fix_versions,
            labels=frozenset(fields.get("labels") or []),
            subtasks=tuple(s.get("key") for s in fields.get("subtasks") or [] if s.get("key")),
        )


def _identity(user: Any) -> Optional[str]:
    if not user:
        return None
    if isinstance(user, str):
        return user
    return user.get("accountId") or user.get("name") or user.get("displayName") or None


def _version_name(version: Any) -> str:
    if isinstance(version, dict):
        return str(version.get("name") or version.get("id") or "")
    return str(version)


def issue_contains_any_label(issue: Issue, labels: Iterable[str]) -> bool:
    """True when the issue carries at least one of ``labels`` (exact match)."""
    return any(label in issue.labels for label in labels)
