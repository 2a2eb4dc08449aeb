# app/auth.py
from __future__ import annotations
from fastapi import Request
import hmac

from core.config import Config


def verify_header_secret(request: Request, cfg: Config) -> bool:
    """
    Simple shared check. Compares the X header to your configured secret.
    An unconfigured secret rejects every request.
    """
    expected = cfg.webhook_secret or ""
    if not expected:
        return False
    sent = request.headers.get("x-webhook-secret", "") or ""
    return hmac.compare_digest(sent, expected)
