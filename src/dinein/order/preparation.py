"""Line-item preparation lifecycle.

Items move PENDING -> PREPARING -> READY -> SERVED, but any status may be set
directly: nothing here refuses a transition. What entering a status does is
fixed:

- PREPARING stamps ``started_at`` the first time only.
- READY stamps ``ready_at``, backfills a missing ``started_at`` to one minute
  earlier, and records the elapsed time as ``m:ss``.
- SERVED lets the owning order check whether everything has been served.
"""

from datetime import UTC, datetime, timedelta
from enum import Enum

from protean.exceptions import ValidationError


class ItemStatus(Enum):
    PENDING = "PENDING"
    PREPARING = "PREPARING"
    READY = "READY"
    SERVED = "SERVED"


# Assumed preparation time for items marked READY without ever being PREPARING
READY_BACKFILL = timedelta(minutes=1)


def parse_item_status(status) -> ItemStatus:
    if isinstance(status, ItemStatus):
        return status
    try:
        return ItemStatus(status)
    except ValueError:
        raise ValidationError({"status": [f"Unknown item status: {status}"]}) from None


def _as_utc(value: datetime) -> datetime:
    return value.replace(tzinfo=UTC) if value.tzinfo is None else value


def format_elapsed(started_at: datetime, ready_at: datetime) -> str:
    """Render the time between two instants as ``minutes:seconds``."""
    seconds = round((_as_utc(ready_at) - _as_utc(started_at)).total_seconds())
    seconds = max(seconds, 0)
    return f"{seconds // 60}:{seconds % 60:02d}"


def apply_status(item, status, now: datetime | None = None) -> ItemStatus:
    """Set ``item.status`` and stamp its timing fields for the entered status.

    ``item`` is anything with ``status``, ``started_at``, ``ready_at`` and
    ``actual_prep_time`` attributes (order line items and ticket items).
    """
    target = parse_item_status(status)
    now = now or datetime.now(UTC)

    item.status = target.value
    if target == ItemStatus.PREPARING and item.started_at is None:
        item.started_at = now
    elif target == ItemStatus.READY:
        if item.started_at is None:
            item.started_at = now - READY_BACKFILL
        item.ready_at = now
        item.actual_prep_time = format_elapsed(item.started_at, now)
    return target


def all_served(items) -> bool:
    """True when every item is SERVED. An empty collection counts as served."""
    return all(item.status == ItemStatus.SERVED.value for item in items)
