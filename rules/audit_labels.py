# rules/audit_labels.py
from enum import Enum


class IgnoreAuditLabel(str, Enum):
    """Labels that opt an issue out of a specific audit."""

    FIX_VERSION = "IGNORE_FIX_VERSION_AUDIT"
