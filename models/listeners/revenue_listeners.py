# models/listeners/revenue_listeners.py
"""
Revenue Event Listeners - RevenueEvent rows are immutable once recorded.

Only status may change after insert (approval happens in the external store).
Changing amount or kind raises ImmutableRecordError and aborts the flush.
"""
import logging

from sqlalchemy import event, inspect

logger = logging.getLogger(__name__)

IMMUTABLE_FIELDS = ("amount", "kind")


def register_revenue_protection():
    """
    Register before_update guard on RevenueEvent.

    Called once during application startup from models/listeners/__init__.py
    """
    from models.revenue_event import RevenueEvent, ImmutableRecordError

    def guard_recorded_revenue(mapper, connection, target):
        """Reject changes to amount/kind of a recorded revenue event."""
        state = inspect(target)

        changed = [
            name for name in IMMUTABLE_FIELDS
            if state.attrs[name].history.has_changes()
        ]

        if changed:
            logger.warning(
                f"Blocked modification of recorded RevenueEvent {target.eventID}: "
                f"fields={changed}"
            )
            raise ImmutableRecordError(
                f"RevenueEvent {target.eventID} is immutable: cannot change {', '.join(changed)}"
            )

    event.listen(RevenueEvent, 'before_update', guard_recorded_revenue)
