# app/main.py
"""FastAPI server exposing the issue audits as webhooks"""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import JSONResponse

from core.config import Config
from core.logging import logger
from app.auth import verify_header_secret
from app.webhook_handlers import handle_issue_audit, handle_sweep
from workflows.audit_engine import AuditEngine


def create_app(config: Optional[Config] = None, engine: Optional[AuditEngine] = None) -> FastAPI:
    cfg = config or Config()
    audit_engine = engine or AuditEngine(config=cfg)
    app = FastAPI(title="Jira Audit Agents", version="1.0.0")

    @app.post("/api/v1/audit")
    async def audit_webhook(request: Request):
        """
        Issue audit - Jira issue_created / issue_updated webhook
        """
        if not verify_header_secret(request, cfg):
            raise HTTPException(status_code=401, detail="Invalid webhook secret")

        try:
            data = await request.json()
        except ValueError:
            raise HTTPException(status_code=400, detail="Body must be JSON")

        issue = data.get("issue") if isinstance(data, dict) else None
        issue_key = issue.get("key") if isinstance(issue, dict) else None
        if not issue_key:
            raise HTTPException(status_code=400, detail="No issue key provided")

        logger.info(f"Audit webhook received for {issue_key}")
        try:
            result = handle_issue_audit(data, audit_engine)
        except Exception as e:
            logger.error(f"Audit webhook error: {e}")
            raise HTTPException(status_code=500, detail=str(e))

        return {"received": True, "issue_key": issue_key, "result": result}

    @app.post("/api/v1/audit/sweep")
    async def sweep_webhook(request: Request):
        """
        Audit sweep endpoint (scheduled).
        """
        if not verify_header_secret(request, cfg):
            raise HTTPException(status_code=401, detail="Invalid webhook secret")

        try:
            body = await request.json()
        except ValueError:
            body = {}

        try:
            result = handle_sweep(body if isinstance(body, dict) else {}, audit_engine, cfg)
            return JSONResponse(content=result, status_code=200)
        except Exception as e:
            logger.error(f"Sweep webhook error: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @app.get("/health")
    async def health_check():
        """
        Health check endpoint – validates Jira connectivity.
        """
        if audit_engine.jira is None:
            jira_status = {"error": "Jira not configured"}
        else:
            jira_status = audit_engine.jira.test_connection()

        status = "healthy" if jira_status.get("success") else "degraded"
        return {
            "status": status,
            "jira": jira_status,
            "config": {
                "jira_url": cfg.jira_base_url,
                "assignee_cutoff": cfg.audit_assignee_cutoff.isoformat(),
                "fix_version_cutoff": cfg.audit_fix_version_cutoff.isoformat(),
                "dry_run": getattr(audit_engine.notifier, "dry_run", None),
            },
        }

    return app


# Optional: allow direct `python -m app.main` run
if __name__ == "__main__":
    import uvicorn
    logger.info("Starting dev server from app.main __main__")
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
