# rules/__init__.py
from .audit_result import AuditOutcome, AuditResult
from .audit_labels import IgnoreAuditLabel
from .base_rule import BaseRule
from .assignee_audit import AssigneeAuditRule, ASSIGNEE_GRANDFATHER_CUTOFF
from .fix_version_audit import FixVersionAuditRule, FIX_VERSION_ENFORCEMENT_DATE

__all__ = [
    "AuditOutcome",
    "AuditResult",
    "IgnoreAuditLabel",
    "BaseRule",
    "AssigneeAuditRule",
    "FixVersionAuditRule",
    "ASSIGNEE_GRANDFATHER_CUTOFF",
    "FIX_VERSION_ENFORCEMENT_DATE",
]
