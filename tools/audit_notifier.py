# tools/audit_notifier.py
"""
Audit notifiers
---------------
The audit rules never talk to Jira directly; they ask an IssueNotifier to
post, update or remove the failure comment for an audit, or to cleanse the
failure comments left on an issue's sub-tasks.

JiraAuditNotifier
- Idempotent: one failure comment per audit per issue, updated in place
- Dry-run when Jira isn't configured (logs the action, no side effects)
- Jira error payloads are raised as AuditNotificationError so a failed write
  fails the whole evaluation
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Set

from core.issue import AUDIT_FIELDS, Issue
from core.logging import logger
from tools.comment_templates import load_templates, render
from tools.jira_api import adf_to_text

if TYPE_CHECKING:
    from rules.audit_result import AuditResult

FAILURE_MARKER = "[Audit Failure]"


class AuditNotificationError(RuntimeError):
    """A Jira write/read needed by an audit failed."""


class IssueNotifier(ABC):
    """Side effects an audit may request on an issue."""

    @abstractmethod
    def post_issue_audit_failure_comment(self, issue: Issue, result: "AuditResult") -> None:
        """Ensure exactly one failure comment for ``result.name`` reflecting its details."""
        raise NotImplementedError

    @abstractmethod
    def remove_issue_audit_failure_comment(self, issue: Issue, result: "AuditResult") -> None:
        """Ensure no failure comment for ``result.name`` remains. No comment is a no-op."""
        raise NotImplementedError

    @abstractmethod
    def cleanse_sub_tasks(self, issue: Issue) -> None:
        """Recursively remove audit failure comments from the issue's sub-tasks."""
        raise NotImplementedError


def failure_header(audit_name: str) -> str:
    return f"{FAILURE_MARKER} {audit_name}"


class JiraAuditNotifier(IssueNotifier):
    def __init__(self, jira=None, dry_run: bool = False, templates: Optional[Dict[str, str]] = None):
        self.jira = jira
        self.dry_run = bool(dry_run) or jira is None
        self.templates = templates or load_templates()

    # ----------------- notifier contract -----------------

    def post_issue_audit_failure_comment(self, issue: Issue, result: "AuditResult") -> None:
        body = self.render_failure_comment(result)
        if self.dry_run:
            logger.info(f"[dry_run] would post failure comment '{result.name}' on {issue.key}")
            return

        existing = self._failure_comments(issue.key, result.name)
        if not existing:
            self._check(self.jira.add_comment(issue.key, body), f"add comment on {issue.key}")
            logger.info(f"Posted '{result.name}' failure comment on {issue.key}")
            return

        first, duplicates = existing[0], existing[1:]
        if adf_to_text(first.get("body")).strip() != body.strip():
            self._check(
                self.jira.update_comment(issue.key, first["id"], body),
                f"update comment {first['id']} on {issue.key}",
            )
            logger.info(f"Updated '{result.name}' failure comment on {issue.key}")
        for dup in duplicates:
            self._delete(issue.key, dup["id"])

    def remove_issue_audit_failure_comment(self, issue: Issue, result: "AuditResult") -> None:
        if self.dry_run:
            logger.info(f"[dry_run] would remove failure comment '{result.name}' from {issue.key}")
            return
        for comment in self._failure_comments(issue.key, result.name):
            self._delete(issue.key, comment["id"])

    def cleanse_sub_tasks(self, issue: Issue) -> None:
        if self.dry_run:
            logger.info(f"[dry_run] would cleanse sub-tasks of {issue.key}: {list(issue.subtasks)}")
            return

        seen: Set[str] = {issue.key}
        pending: List[str] = list(issue.subtasks)
        while pending:
            key = pending.pop(0)
            if key in seen:
                continue
            seen.add(key)

            payload = self._check(self.jira.get_issue(key, fields=AUDIT_FIELDS), f"fetch sub-task {key}")
            sub_task = Issue.from_jira(payload)
            removed = 0
            for comment in self._failure_comments(key):
                self._delete(key, comment["id"])
                removed += 1
            logger.info(f"Cleansed {removed} audit comment(s) from sub-task {key}")
            pending.extend(sub_task.subtasks)

    # ----------------- internals -----------------

    def render_failure_comment(self, result: "AuditResult") -> str:
        return render(
            self.templates["failure_comment"],
            {"marker": FAILURE_MARKER, "audit": result.name, "details": result.details},
        )

    def _failure_comments(self, issue_key: str, audit_name: Optional[str] = None) -> List[Dict[str, Any]]:
        """Failure comments on an issue; all audits when ``audit_name`` is None."""
        resp = self._check(self.jira.get_comments(issue_key), f"list comments on {issue_key}")
        wanted = failure_header(audit_name) if audit_name else FAILURE_MARKER
        out = []
        for comment in resp.get("comments", []):
            lines = adf_to_text(comment.get("body")).strip().splitlines()
            first_line = lines[0].strip() if lines else ""
            if audit_name is None and first_line.startswith(wanted):
                out.append(comment)
            elif first_line == wanted:
                out.append(comment)
        return out

    def _delete(self, issue_key: str, comment_id: str) -> None:
        self._check(self.jira.delete_comment(issue_key, comment_id), f"delete comment {comment_id} on {issue_key}")
        logger.info(f"Removed failure comment {comment_id} from {issue_key}")

    @staticmethod
    def _check(resp: Any, action: str) -> Dict[str, Any]:
        if not isinstance(resp, dict):
            raise AuditNotificationError(f"{action}: unexpected Jira response {resp!r}")
        if "error" in resp:
            raise AuditNotificationError(f"{action}: {resp['error']}")
        return resp
