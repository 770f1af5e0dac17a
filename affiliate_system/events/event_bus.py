# affiliate_system/events/event_bus.py
"""
Event bus for decoupled communication between components.
Store listeners publish here; the read model subscribes to invalidate its cache.
"""
from typing import Dict, List, Set, Callable, Any
import logging
import asyncio

logger = logging.getLogger(__name__)


class EventBus:
    """
    Simple in-process event bus.
    Can be replaced with a broker (Redis pub/sub, RabbitMQ) later.
    """

    _instance = None
    _handlers: Dict[str, List[Callable]] = {}
    _tasks: Set[asyncio.Task] = set()

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
            cls._instance._handlers = {}
            cls._instance._tasks = set()
        return cls._instance

    def subscribe(self, eventName: str, handler: Callable):
        """Subscribe handler to event."""
        if eventName not in self._handlers:
            self._handlers[eventName] = []

        if handler in self._handlers[eventName]:
            logger.debug(f"Handler {handler.__name__} already subscribed to {eventName}")
            return

        self._handlers[eventName].append(handler)
        logger.debug(f"Handler {handler.__name__} subscribed to {eventName}")

    def unsubscribe(self, eventName: str, handler: Callable):
        """Unsubscribe handler from event."""
        if eventName in self._handlers and handler in self._handlers[eventName]:
            self._handlers[eventName].remove(handler)
            logger.debug(f"Handler {handler.__name__} unsubscribed from {eventName}")

    def handlerCount(self, eventName: str) -> int:
        """Number of handlers subscribed to event."""
        return len(self._handlers.get(eventName, []))

    async def emit(self, eventName: str, data: Dict[str, Any]):
        """Emit event to all subscribers."""
        if eventName not in self._handlers:
            return

        logger.debug(f"Emitting event {eventName} with data: {data}")

        for handler in list(self._handlers[eventName]):
            try:
                if asyncio.iscoroutinefunction(handler):
                    await handler(data)
                else:
                    handler(data)
            except Exception as e:
                logger.error(
                    f"Error in handler {handler.__name__} for event {eventName}: {e}",
                    exc_info=True
                )

    def publish(self, eventName: str, data: Dict[str, Any]):
        """
        Emit event from synchronous code (SQLAlchemy commit listeners).

        Plain handlers run inline. Coroutine handlers are scheduled on the
        running loop and tracked until done, or run to completion when there
        is no loop.
        """
        if eventName not in self._handlers:
            return

        logger.debug(f"Publishing event {eventName} with data: {data}")

        for handler in list(self._handlers[eventName]):
            try:
                if asyncio.iscoroutinefunction(handler):
                    try:
                        loop = asyncio.get_running_loop()
                    except RuntimeError:
                        asyncio.run(handler(data))
                    else:
                        task = loop.create_task(handler(data), name=f"{eventName}:{handler.__name__}")
                        self._tasks.add(task)
                        task.add_done_callback(self._onTaskDone)
                else:
                    handler(data)
            except Exception as e:
                logger.error(
                    f"Error in handler {handler.__name__} for event {eventName}: {e}",
                    exc_info=True
                )

    def _onTaskDone(self, task: asyncio.Task):
        """Drop the finished handler task and log its failure."""
        self._tasks.discard(task)
        if task.cancelled():
            return

        exc = task.exception()
        if exc is not None:
            logger.error(
                f"Error in handler task {task.get_name()}: {exc}",
                exc_info=exc
            )

    def pendingTaskCount(self) -> int:
        """Coroutine handlers scheduled by publish() that have not finished."""
        return len(self._tasks)

    def clear(self):
        """Clear all event handlers."""
        self._handlers.clear()


# Global event bus instance
eventBus = EventBus()


# Predefined events
class PayoutEvents:
    """Standard payout engine events."""

    SETTINGS_CHANGED = "settings.changed"
    REVENUE_RECORDED = "revenue.recorded"

    POSITION_UPDATED = "binary.position_updated"
    DAILY_EARNING_UPDATED = "binary.daily_earning_updated"
    DAILY_SUMMARY_UPDATED = "binary.daily_summary_updated"

    PRICING_CHANGED = "ai_pricing.changed"

    READ_MODEL_REFRESHED = "read_model.refreshed"
