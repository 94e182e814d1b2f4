"""Audit log factory.

Provides get_audit_log() / set_audit_log() to swap implementations, and
``record_audit`` which command handlers call after a successful mutation.
"""

import structlog

from dinein.audit.memory_adapter import InMemoryAuditLog
from dinein.audit.port import AuditLog

logger = structlog.get_logger(__name__)

_current_audit_log: AuditLog | None = None


def get_audit_log() -> AuditLog:
    """Return the current audit log. Defaults to InMemoryAuditLog."""
    global _current_audit_log
    if _current_audit_log is None:
        _current_audit_log = InMemoryAuditLog()
    return _current_audit_log


def set_audit_log(audit_log: AuditLog) -> None:
    """Override the active audit log (useful for tests)."""
    global _current_audit_log
    _current_audit_log = audit_log


def reset_audit_log() -> None:
    """Reset to default audit log."""
    global _current_audit_log
    _current_audit_log = None


def record_audit(
    action: str,
    entity_id: str,
    before: dict | None = None,
    after: dict | None = None,
    actor_id: str | None = None,
    actor_role: str | None = None,
    request_context: dict | None = None,
    entity_type: str = "Order",
) -> None:
    """Record an audit entry. Failures are logged and never raised."""
    try:
        get_audit_log().record(
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor_id=actor_id,
            actor_role=actor_role,
            before=before,
            after=after,
            request_context=request_context,
        )
    except Exception:
        logger.warning(
            "audit_record_failed",
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            exc_info=True,
        )
