# models/listeners/change_listeners.py
"""
Change Listeners - publish store changes to the event bus.

Architecture:
    AppSetting (INSERT/UPDATE/DELETE)        → settings.changed
    RevenueEvent (INSERT/UPDATE)             → revenue.recorded
    BinaryPosition (INSERT/UPDATE/DELETE)    → binary.position_updated
    BinaryDailyEarning (INSERT/UPDATE/DELETE)→ binary.daily_earning_updated
    BinaryDailySummary (INSERT/UPDATE/DELETE)→ binary.daily_summary_updated
    AIProviderPricing (INSERT/UPDATE/DELETE) → ai_pricing.changed

Mapper hooks run at flush time, before the rows are visible to other
sessions. They only queue the event on the writing session; the queue is
published after COMMIT and dropped on ROLLBACK.

Subscribers only invalidate cached figures; nothing is written back.
"""
import logging

from sqlalchemy import event
from sqlalchemy.orm import Session, object_session

logger = logging.getLogger(__name__)

PENDING_EVENTS_KEY = "pending_payout_events"


def queue_change(target, eventName: str, data: dict):
    """Queue an event on the session that is flushing target."""
    from affiliate_system.events.event_bus import eventBus

    session = object_session(target)
    if session is None:
        eventBus.publish(eventName, data)
        return

    session.info.setdefault(PENDING_EVENTS_KEY, []).append((eventName, data))


def publish_committed_changes(session):
    """Publish everything queued on session during the committed transaction."""
    from affiliate_system.events.event_bus import eventBus

    pending = session.info.pop(PENDING_EVENTS_KEY, [])
    if pending:
        logger.debug(f"Publishing {len(pending)} committed change events")

    for eventName, data in pending:
        eventBus.publish(eventName, data)


def discard_rolled_back_changes(session):
    pending = session.info.pop(PENDING_EVENTS_KEY, [])
    if pending:
        logger.debug(f"Discarded {len(pending)} change events after rollback")


def register_change_listeners():
    """
    Register mapper events that forward changes to the event bus.

    Called once during application startup from models/listeners/__init__.py
    """
    from models.app_setting import AppSetting
    from models.revenue_event import RevenueEvent
    from models.ai_pricing import AIProviderPricing
    from models.binary.position import BinaryPosition
    from models.binary.daily_earning import BinaryDailyEarning
    from models.binary.daily_summary import BinaryDailySummary
    from affiliate_system.events.event_bus import PayoutEvents

    # =========================================================================
    # TRANSACTION BOUNDARIES
    # =========================================================================

    event.listen(Session, 'after_commit', publish_committed_changes)
    event.listen(Session, 'after_rollback', discard_rolled_back_changes)

    # =========================================================================
    # SETTINGS
    # =========================================================================

    def on_setting_change(mapper, connection, target):
        queue_change(target, PayoutEvents.SETTINGS_CHANGED, {"key": target.key})

    for action in ('after_insert', 'after_update', 'after_delete'):
        event.listen(AppSetting, action, on_setting_change)

    # =========================================================================
    # REVENUE
    # =========================================================================

    def on_revenue_change(mapper, connection, target):
        queue_change(
            target,
            PayoutEvents.REVENUE_RECORDED,
            {
                "eventId": target.eventID,
                "userId": target.userID,
                "kind": target.kind,
                "status": target.status
            }
        )

    event.listen(RevenueEvent, 'after_insert', on_revenue_change)
    event.listen(RevenueEvent, 'after_update', on_revenue_change)

    # =========================================================================
    # BINARY NETWORK
    # =========================================================================

    def on_position_change(mapper, connection, target):
        queue_change(target, PayoutEvents.POSITION_UPDATED, {"userId": target.userID})

    def on_daily_earning_change(mapper, connection, target):
        queue_change(
            target,
            PayoutEvents.DAILY_EARNING_UPDATED,
            {"userId": target.userID, "earningDate": target.earningDate}
        )

    def on_daily_summary_change(mapper, connection, target):
        queue_change(
            target,
            PayoutEvents.DAILY_SUMMARY_UPDATED,
            {"summaryDate": target.summaryDate}
        )

    for action in ('after_insert', 'after_update', 'after_delete'):
        event.listen(BinaryPosition, action, on_position_change)
        event.listen(BinaryDailyEarning, action, on_daily_earning_change)
        event.listen(BinaryDailySummary, action, on_daily_summary_change)

    # =========================================================================
    # AI PRICING
    # =========================================================================

    def on_pricing_change(mapper, connection, target):
        queue_change(target, PayoutEvents.PRICING_CHANGED, {"pricingId": target.pricingID})

    for action in ('after_insert', 'after_update', 'after_delete'):
        event.listen(AIProviderPricing, action, on_pricing_change)
