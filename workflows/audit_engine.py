from __future__ import annotations

"""
AuditEngine
-----------
Runs the issue audits against one issue, a Jira webhook payload, or a JQL
sweep.

- Rules run in order; a rule that raises is reported as an error and the
  remaining rules still run
- The current date comes from an injectable clock, so date-gated audits are
  deterministic under test
- Without Jira credentials the notifier runs dry (logs only) and sweeps
  report dry_run

Rules included:
  ✓ AssigneeAuditRule
  ✓ FixVersionAuditRule
"""

from typing import Any, Callable, Dict, List, Optional
from core.config import Config
from core.dates import DateLike, today_utc
from core.issue import AUDIT_FIELDS, Issue
from core.logging import logger

from rules.assignee_audit import AssigneeAuditRule
from rules.base_rule import BaseRule
from rules.fix_version_audit import FixVersionAuditRule
from tools.audit_notifier import IssueNotifier, JiraAuditNotifier
from tools.jira_api import JiraAPI

ISSUE_EVENTS = {"issue_created", "issue_updated"}
SWEEP_EVENT = "scheduled_sweep"


def build_audit_rules(
    notifier: IssueNotifier,
    config: Config,
    *,
    enable_assignee: bool = True,
    enable_fix_version: bool = True,
) -> List[BaseRule]:
    """Build the list of audit rules based on which ones are enabled."""
    rules: List[BaseRule] = []

    if enable_assignee:
        rules.append(AssigneeAuditRule(notifier, cutoff=config.audit_assignee_cutoff))

    if enable_fix_version:
        rules.append(
            FixVersionAuditRule(notifier, enforcement_date=config.audit_fix_version_cutoff)
        )

    return rules


def parse_projects(raw: Any, default: List[str]) -> List[str]:
    """Project keys from a list or a CSV string; falls back to ``default``."""
    if isinstance(raw, (list, tuple)) and raw:
        return [str(p).strip() for p in raw if str(p).strip()]
    if isinstance(raw, str) and raw.strip():
        return [p.strip() for p in raw.split(",") if p.strip()]
    return list(default)


def event_type(payload: Dict[str, Any]) -> str:
    """eventType (our sweeps/tests) or Jira's webhookEvent ("jira:issue_updated")."""
    payload = payload or {}
    raw = payload.get("eventType") or payload.get("webhookEvent") or ""
    return str(raw).lower().replace("jira:", "")


class AuditEngine:
    def __init__(
        self,
        *,
        notifier: Optional[IssueNotifier] = None,
        jira: Optional[Any] = None,
        config: Optional[Config] = None,
        enable_assignee: bool = True,
        enable_fix_version: bool = True,
        clock: Optional[Callable[[], DateLike]] = None,
        max_results: int = 1000,
        batch_size: int = 100,
    ):
        self.config = config or Config()

        if jira is None and self.config.jira_configured:
            jira = JiraAPI(self.config)
        self.jira = jira

        self.notifier = notifier or JiraAuditNotifier(jira, dry_run=self.config.audit_dry_run)
        self.clock = clock or today_utc
        self.max_results = max(1, max_results)
        self.batch_size = max(1, min(batch_size, 100))

        self.rules = build_audit_rules(
            self.notifier,
            self.config,
            enable_assignee=enable_assignee,
            enable_fix_version=enable_fix_version,
        )
        logger.info(f"AuditEngine initialized with {len(self.rules)} rules.")

    # ----------------- entry points -----------------

    def audit_issue(self, issue: Issue, now: Optional[DateLike] = None) -> Dict[str, Any]:
        """Run every enabled rule on one issue and collect a report."""
        today = now if now is not None else self.clock()
        results: List[Dict[str, Any]] = []
        errors: List[Dict[str, Any]] = []

        for rule in self.rules:
            if not rule.enabled:
                continue
            try:
                results.append(rule.run(issue, today).to_dict())
            except Exception as e:
                logger.error(f"[{rule.name}] {issue.key} failed: {e}")
                errors.append({"audit": rule.name, "status": "error", "error": str(e)})

        return {
            "issue_key": issue.key,
            "passing": not errors and all(r["passing"] for r in results),
            "results": results,
            "errors": errors,
        }

    def process(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Dispatch an event:
          issue_created / issue_updated → audit payload["issue"]
          scheduled_sweep               → sweep(projects, jql)
        """
        event = event_type(payload)
        logger.info(f"AuditEngine.process event={event or 'unknown'}")

        if event in ISSUE_EVENTS:
            raw_issue = (payload or {}).get("issue")
            if not raw_issue or not raw_issue.get("key"):
                return {"status": "skipped", "reason": "no_issue_context", "event_type": event}
            report = self.audit_issue(Issue.from_jira(raw_issue))
            return {"status": "ok", "event_type": event, "report": report}

        if event == SWEEP_EVENT:
            return self.sweep(projects=payload.get("projects"), jql=payload.get("jql"))

        return {"status": "skipped", "reason": "unsupported_event", "event_type": event}

    def sweep(self, projects: Any = None, jql: Optional[str] = None) -> Dict[str, Any]:
        """Audit every issue matched by ``jql`` (default: the given projects, list or CSV)."""
        projects = parse_projects(projects, self.config.AUDIT_DEFAULT_PROJECTS)
        jql = jql or self._build_jql(projects)

        if self.jira is None:
            res = {
                "status": "dry_run",
                "jql": jql,
                "issues_audited": 0,
                "issues_failing": 0,
                "reports": [],
                "note": "Jira not configured; nothing was audited.",
            }
            logger.info(f"AuditEngine.sweep → dry_run | jql={jql}")
            return res

        today = self.clock()
        reports = [self.audit_issue(issue, today) for issue in self._search_all(jql)]
        failing = [r["issue_key"] for r in reports if not r["passing"]]
        logger.info(f"AuditEngine.sweep audited={len(reports)} failing={len(failing)}")
        return {
            "status": "ok",
            "jql": jql,
            "issues_audited": len(reports),
            "issues_failing": len(failing),
            "failing_keys": failing,
            "reports": reports,
        }

    # ----------------- internals -----------------

    @staticmethod
    def _build_jql(projects: List[str]) -> str:
        csv_vals = ",".join(p.strip() for p in projects if p and p.strip())
        clause = f"project in ({csv_vals}) " if csv_vals else ""
        return f"{clause}ORDER BY key ASC".strip()

    def _search_all(self, jql: str) -> List[Issue]:
        """Follow the nextPageToken cursor of JiraAPI.search_issues, up to max_results."""
        results: List[Issue] = []
        next_page_token: Optional[str] = None
        remaining = self.max_results

        while remaining > 0:
            limit = min(self.batch_size, remaining)
            resp = self.jira.search_issues(
                jql, max_results=limit, next_page_token=next_page_token, fields=AUDIT_FIELDS
            )

            if isinstance(resp, dict) and "error" in resp:
                raise RuntimeError(resp["error"])
            if not isinstance(resp, dict) or "issues" not in resp:
                raise RuntimeError("Unexpected JiraAPI.search_issues() response shape")

            issues = resp.get("issues", []) or []
            if not issues:
                break

            issues = issues[:remaining]
            results.extend(Issue.from_jira(item) for item in issues if item.get("key"))
            remaining -= len(issues)

            next_page_token = resp.get("next_page_token")
            if resp.get("is_last") or not next_page_token:
                break
            logger.debug(f"AuditEngine.sweep fetched {len(results)} issues, getting next page...")

        return results
