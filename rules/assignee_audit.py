# rules/assignee_audit.py
"""
AssigneeAuditRule
-----------------
Every issue must have an assignee.

The audit became mandatory on 2019-03-25. Issues already resolved before that
day without an assignee are grandfathered and pass, so nobody has to backtrack
through closed work.

Side effects: exactly one notifier call per evaluation, remove on pass and
post on fail.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from core.dates import DateLike, as_date
from core.issue import Issue
from rules.audit_result import AuditResult
from rules.base_rule import BaseRule
from tools.audit_notifier import IssueNotifier

ASSIGNEE_GRANDFATHER_CUTOFF = date(2019, 3, 25)


class AssigneeAuditRule(BaseRule):
    AUDIT_NAME = "Issue Assigned"

    def __init__(
        self,
        notifier: IssueNotifier,
        cutoff: Optional[date] = None,
        enabled: bool = True,
    ):
        super().__init__(name=self.AUDIT_NAME, notifier=notifier, enabled=enabled)
        self.cutoff = cutoff or ASSIGNEE_GRANDFATHER_CUTOFF

    def run(self, issue: Issue, now: DateLike) -> AuditResult:
        return self.evaluate(issue)

    def evaluate(self, issue: Issue) -> AuditResult:
        if issue.assignee:
            result = AuditResult.passed(self.name, issue, "Assignee is indicated.")
            self.notifier.remove_issue_audit_failure_comment(issue, result)
        elif issue.resolution_date and as_date(issue.resolution_date) < self.cutoff:
            result = AuditResult.exempt(
                self.name,
                issue,
                "The Assignee audit is passing because it was resolved and closed "
                f"before {self.cutoff:%B} {self.cutoff.day}, {self.cutoff.year}.",
            )
            self.notifier.remove_issue_audit_failure_comment(issue, result)
        else:
            result = AuditResult.failed(self.name, issue, "Assignee must be indicated.")
            self.notifier.post_issue_audit_failure_comment(issue, result)

        self.log_result(result)
        return result
