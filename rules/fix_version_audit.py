# rules/fix_version_audit.py
"""
FixVersionAuditRule
-------------------
Every issue must name a fix version.

- IGNORE_FIX_VERSION_AUDIT label: the audit is skipped and the failure
  comments left on the issue's sub-tasks are cleansed.
- Before the enforcement date (2019-05-06) the audit auto-passes; the details
  warn whether the issue would pass once enforcement starts. Nothing is posted
  to the issue during this period.
- From the enforcement date on, an empty fix version list fails the audit.

``now`` is always supplied by the caller; the rule never reads the clock.
"""
from __future__ import annotations

from datetime import date
from typing import Optional

from core.dates import DateLike, as_date
from core.issue import Issue, issue_contains_any_label
from rules.audit_labels import IgnoreAuditLabel
from rules.audit_result import AuditResult
from rules.base_rule import BaseRule
from tools.audit_notifier import IssueNotifier

FIX_VERSION_ENFORCEMENT_DATE = date(2019, 5, 6)


class FixVersionAuditRule(BaseRule):
    AUDIT_NAME = "Fix Version Indicated"

    def __init__(
        self,
        notifier: IssueNotifier,
        enforcement_date: Optional[date] = None,
        enabled: bool = True,
    ):
        super().__init__(name=self.AUDIT_NAME, notifier=notifier, enabled=enabled)
        self.enforcement_date = enforcement_date or FIX_VERSION_ENFORCEMENT_DATE

    def run(self, issue: Issue, now: DateLike) -> AuditResult:
        return self.evaluate(issue, now)

    def evaluate(self, issue: Issue, now: DateLike) -> AuditResult:
        if issue_contains_any_label(issue, [IgnoreAuditLabel.FIX_VERSION.value]):
            result = AuditResult.exempt(self.name, issue, "Fix Version Audit ignored by label")
            self.notifier.cleanse_sub_tasks(issue)
            self.log_result(result)
            return result

        # fix_versions is None when Jira omitted the field; the advisory counts
        # that as missing, enforcement only fails a present-but-empty list
        missing = not issue.fix_versions

        if as_date(now) < self.enforcement_date:
            result = AuditResult.exempt(self.name, issue, self._advisory(missing))
            self.log_result(result)
            return result

        if issue.fix_versions is not None and len(issue.fix_versions) == 0:
            result = AuditResult.failed(self.name, issue, "A fix version must be indicated.")
            self.notifier.post_issue_audit_failure_comment(issue, result)
        else:
            result = AuditResult.passed(self.name, issue, "A fix version is indicated.")
            self.notifier.remove_issue_audit_failure_comment(issue, result)

        self.log_result(result)
        return result

    def _advisory(self, missing: bool) -> str:
        verdict = "FAILING" if missing else "PASSING"
        when = f"{self.enforcement_date:%B} {self.enforcement_date.day}, {self.enforcement_date.year}"
        return (
            f"This is currently {verdict} the Fix Version audit.\n"
            "Currently, this audit will auto pass no matter whether the Fix Version field is populated or not.\n"
            f"On {when}, this audit will no longer auto pass and missing Fix Version fields will trigger an audit failure.\n"
            f"Fix Version Audit will be ignored with {IgnoreAuditLabel.FIX_VERSION.value} label."
        )
