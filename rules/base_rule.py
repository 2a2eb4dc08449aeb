# rules/base_rule.py
"""
BaseRule - shared parent class for the audit rules.
Each rule defines:
  - run(issue, now): AuditResult

Only the engine contract lives here; each audit keeps its own decision logic.
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from core.dates import DateLike
from core.issue import Issue
from core.logging import logger
from rules.audit_result import AuditResult
from tools.audit_notifier import IssueNotifier


class BaseRule(ABC):
    """Abstract base class that all audit rules inherit from."""

    def __init__(self, name: str, notifier: IssueNotifier, enabled: bool = True):
        self.name = name
        self.notifier = notifier
        self.enabled = enabled

    @abstractmethod
    def run(self, issue: Issue, now: DateLike) -> AuditResult:
        """Audit one issue. Notifier errors propagate to the caller."""
        raise NotImplementedError

    def log_result(self, result: AuditResult) -> None:
        """Basic logging helper for consistent rule output."""
        logger.info(
            f"[{self.name}] {result.issue.key} → {result.outcome.value} | details={result.details!r}"
        )

    def __repr__(self) -> str:
        return f"<Rule name={self.name} enabled={self.enabled}>"
