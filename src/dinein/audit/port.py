"""Audit log port (abstract interface).

Every successful order mutation is reported here with a before/after
snapshot. Recording is fire-and-forget from the caller's point of view:
adapters may fail, and callers log the failure instead of propagating it.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime


@dataclass(frozen=True)
class AuditEntry:
    """One recorded mutation."""

    action: str
    entity_type: str
    entity_id: str
    actor_id: str | None = None
    actor_role: str | None = None
    before: dict | None = None
    after: dict | None = None
    request_context: dict = field(default_factory=dict)
    recorded_at: datetime | None = None


class AuditLog(ABC):
    """Abstract audit sink."""

    @abstractmethod
    def record(
        self,
        action: str,
        entity_type: str,
        entity_id: str,
        actor_id: str | None = None,
        actor_role: str | None = None,
        before: dict | None = None,
        after: dict | None = None,
        request_context: dict | None = None,
    ) -> AuditEntry:
        """Persist one audit entry."""
        ...
