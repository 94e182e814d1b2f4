"""In-memory audit log for development and testing.

Keeps every entry in a list. ``fail_next`` makes the next ``record`` call
raise, so tests can check that a broken audit sink never fails a command.
"""

from datetime import UTC, datetime

from dinein.audit.port import AuditEntry, AuditLog


class AuditLogUnavailable(Exception):
    """The audit sink could not store an entry."""


class InMemoryAuditLog(AuditLog):
    """List-backed audit log."""

    def __init__(self) -> None:
        self.entries: list[AuditEntry] = []
        self._fail_next = False

    def fail_next(self) -> None:
        self._fail_next = True

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
        if self._fail_next:
            self._fail_next = False
            raise AuditLogUnavailable("Audit log unavailable")

        entry = AuditEntry(
            action=action,
            entity_type=entity_type,
            entity_id=str(entity_id),
            actor_id=actor_id,
            actor_role=actor_role,
            before=before,
            after=after,
            request_context=request_context or {},
            recorded_at=datetime.now(UTC),
        )
        self.entries.append(entry)
        return entry

    def actions_for(self, entity_id: str) -> list[str]:
        return [entry.action for entry in self.entries if entry.entity_id == str(entity_id)]
