# rules/audit_result.py
"""
AuditResult - the verdict every audit rule returns.

A failing result (``passing=False``) is a normal outcome: the issue breaks the
business rule. Errors talking to Jira are raised, never folded into a result.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict

from core.issue import Issue


class AuditOutcome(str, Enum):
    PASS = "pass"
    FAIL = "fail"
    EXEMPT = "exempt"  # grandfathered, advisory period, or ignored by label


@dataclass(frozen=True)
class AuditResult:
    name: str
    issue: Issue
    passing: bool
    details: str
    outcome: AuditOutcome

    def __post_init__(self) -> None:
        if not self.details or not self.details.strip():
            raise ValueError(f"AuditResult for {self.name!r} needs details")
        if self.passing != (self.outcome is not AuditOutcome.FAIL):
            raise ValueError(f"passing={self.passing} contradicts outcome={self.outcome.value}")

    @classmethod
    def passed(cls, name: str, issue: Issue, details: str) -> "AuditResult":
        return cls(name, issue, True, details, AuditOutcome.PASS)

    @classmethod
    def failed(cls, name: str, issue: Issue, details: str) -> "AuditResult":
        return cls(name, issue, False, details, AuditOutcome.FAIL)

    @classmethod
    def exempt(cls, name: str, issue: Issue, details: str) -> "AuditResult":
        return cls(name, issue, True, details, AuditOutcome.EXEMPT)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "audit": self.name,
            "issue_key": self.issue.key,
            "passing": self.passing,
            "outcome": self.outcome.value,
            "details": self.details,
        }
