"""
SQLAlchemy Event Listeners Package.

Registers all event listeners for the application.
Import this module once during app startup to activate listeners.

Listeners:
    - revenue_listeners: Keep recorded RevenueEvent amount/kind immutable
    - change_listeners: Publish store changes to the event bus
"""
import logging

logger = logging.getLogger(__name__)

_listeners_registered = False


def register_all_listeners():
    """
    Register all event listeners.

    Safe to call multiple times - listeners are registered only once.

    Call this from application startup, e.g.:
        from models.listeners import register_all_listeners
        register_all_listeners()
    """
    global _listeners_registered

    if _listeners_registered:
        logger.debug("Listeners already registered, skipping")
        return

    from models.listeners.revenue_listeners import register_revenue_protection
    from models.listeners.change_listeners import register_change_listeners

    register_revenue_protection()
    logger.info("Revenue protection listeners registered (RevenueEvent)")

    register_change_listeners()
    logger.info("Change listeners registered (settings, revenue, binary, pricing)")

    _listeners_registered = True
    logger.info("All event listeners registered successfully")
