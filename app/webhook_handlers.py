# app/webhook_handlers.py
from __future__ import annotations
from typing import Any, Dict

from core.logging import logger
from core.config import Config
from workflows.audit_engine import AuditEngine, parse_projects


def handle_issue_audit(payload: dict, engine: AuditEngine) -> dict:
    """
    Audit the issue carried by a Jira issue webhook.
    """
    issue_key = (payload.get("issue") or {}).get("key")
    logger.info(f"handler:issue_audit key={issue_key}")
    data = dict(payload)
    if not (data.get("eventType") or data.get("webhookEvent")):
        data["eventType"] = "issue_updated"
    return engine.process(data)


def handle_sweep(payload: Dict[str, Any], engine: AuditEngine, cfg: Config) -> dict:
    projects = parse_projects((payload or {}).get("projects"), cfg.AUDIT_DEFAULT_PROJECTS)
    jql = (payload or {}).get("jql") or None
    logger.info(f"audit sweep: projects={projects} jql={jql}")
    return engine.sweep(projects=projects, jql=jql)
