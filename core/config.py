import os
from datetime import date
from typing import List

from dotenv import load_dotenv

from core.dates import parse_cutoff
from core.logging import logger

load_dotenv()

DEFAULT_ASSIGNEE_CUTOFF = "2019-03-25"
DEFAULT_FIX_VERSION_CUTOFF = "2019-05-06"

_TRUTHY = {"1", "true", "yes", "on"}


def _env_list(name: str, default: str) -> List[str]:
    raw = os.getenv(name, default)
    return [p.strip() for p in raw.split(",") if p.strip()]


class Config:
    def __init__(self):
        # Jira settings
        self.jira_base_url = os.getenv("JIRA_BASE_URL", "").rstrip("/")
        self.jira_api_token = os.getenv("JIRA_TOKEN", "")
        self.jira_email = os.getenv("JIRA_EMAIL", "")
        self.jira_bearer_token = os.getenv("JIRA_BEARER_TOKEN", "")

        # Webhook security
        self.webhook_secret = os.getenv("WEBHOOK_SECRET", "")

        # Environment
        self.environment = os.getenv("ENVIRONMENT", "development")

        # Audit settings
        self.AUDIT_DEFAULT_PROJECTS = _env_list("AUDIT_DEFAULT_PROJECTS", "SBX")
        self.audit_assignee_cutoff: date = parse_cutoff(
            os.getenv("AUDIT_ASSIGNEE_CUTOFF", DEFAULT_ASSIGNEE_CUTOFF)
        )
        self.audit_fix_version_cutoff: date = parse_cutoff(
            os.getenv("AUDIT_FIX_VERSION_CUTOFF", DEFAULT_FIX_VERSION_CUTOFF)
        )
        self.audit_dry_run = os.getenv("AUDIT_DRY_RUN", "false").strip().lower() in _TRUTHY

        # Validation
        if not self.jira_configured or not self.webhook_secret:
            logger.warning(
                "Missing required environment variables: "
                f"JIRA_BASE_URL={'✓' if self.jira_base_url else '✗'} "
                f"JIRA_TOKEN={'✓' if (self.jira_api_token or self.jira_bearer_token) else '✗'} "
                f"WEBHOOK_SECRET={'✓' if self.webhook_secret else '✗'}"
            )
        else:
            logger.info(
                f"Config loaded; default audit projects: {', '.join(self.AUDIT_DEFAULT_PROJECTS)}"
            )

    @property
    def jira_configured(self) -> bool:
        return bool(self.jira_base_url and (self.jira_api_token or self.jira_bearer_token))
