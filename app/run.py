# app/run.py
#!/usr/bin/env python3
"""Simple runner for the Jira audit webhooks"""
from __future__ import annotations

import uvicorn
from core.config import Config
from core.logging import logger

if __name__ == "__main__":
    _ = Config()
    logger.info("🚀 Starting Jira Audit Agents...")
    uvicorn.run(
        "app.main:create_app",
        factory=True,
        host="127.0.0.1",
        port=8000,
        reload=True,
        log_level="info",
    )
