"""Best-effort application of order events to other aggregates."""

from contextlib import contextmanager

import structlog

logger = structlog.get_logger(__name__)


@contextmanager
def best_effort(target: str, event, **context):
    """Log and swallow any failure while applying ``event`` to ``target``.

    Failures are reported as ``synchronization_warning`` so they can be found
    and repaired with ``ReconcileOrder``.
    """
    try:
        yield
    except Exception as exc:
        logger.warning(
            "synchronization_warning",
            target=target,
            event_type=event.__class__.__name__,
            order_id=str(event.order_id),
            error=str(exc),
            **context,
        )
