#!/usr/bin/env python3
"""
Run the issue audits over the default projects once.
Intended for cron / scheduled automation.
"""
import json

from core.config import Config
from workflows.audit_engine import AuditEngine

if __name__ == "__main__":
    cfg = Config()
    engine = AuditEngine(config=cfg)
    result = engine.sweep(projects=cfg.AUDIT_DEFAULT_PROJECTS)
    print("✅ Audit sweep complete:")
    print(json.dumps({k: v for k, v in result.items() if k != "reports"}, indent=2))
