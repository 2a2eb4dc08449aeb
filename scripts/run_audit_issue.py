#!/usr/bin/env python3
"""
Audit a single issue by key, for manual testing or debugging.
    python -m scripts.run_audit_issue SBX-42 [--dry-run]
"""
import argparse
import json
import sys

from core.config import Config
from core.issue import AUDIT_FIELDS, Issue
from tools.audit_notifier import JiraAuditNotifier
from tools.jira_api import JiraAPI
from workflows.audit_engine import AuditEngine

if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Audit one Jira issue")
    parser.add_argument("issue_key")
    parser.add_argument("--dry-run", action="store_true", help="log comment actions instead of writing them")
    args = parser.parse_args()

    cfg = Config()
    if not cfg.jira_configured:
        print("Jira is not configured (JIRA_BASE_URL / JIRA_TOKEN).")
        sys.exit(2)

    jira = JiraAPI(cfg)
    payload = jira.get_issue(args.issue_key, fields=AUDIT_FIELDS)
    if "error" in payload:
        print(f"Could not fetch {args.issue_key}: {payload['error']}")
        sys.exit(1)

    notifier = JiraAuditNotifier(jira, dry_run=args.dry_run or cfg.audit_dry_run)
    engine = AuditEngine(notifier=notifier, jira=jira, config=cfg)
    report = engine.audit_issue(Issue.from_jira(payload))
    print(json.dumps(report, indent=2))
    sys.exit(0 if report["passing"] else 1)
