"""
Audit trail for tax computations.

    from audit import get_audit_logger

    events = get_audit_logger().query(resource_id=session_id)
"""

from audit.audit_logger import (
    AuditEventType,
    AuditLogger,
    AuditSeverity,
    audit_tax_calculation,
    export_session_audit_report,
    get_audit_logger,
    get_session_audit_trail,
    reset_audit_logger,
)

__all__ = [
    "AuditEventType",
    "AuditLogger",
    "AuditSeverity",
    "audit_tax_calculation",
    "export_session_audit_report",
    "get_audit_logger",
    "get_session_audit_trail",
    "reset_audit_logger",
]
