import logging
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, NamedTuple

logger = logging.getLogger(__name__)

__all__ = ['TRANSACTION_ADDED', 'TRANSACTION_UPDATED', 'TRANSACTION_DELETED', 'Event', 'EventBus']

TRANSACTION_ADDED = "TRANSACTION_ADDED"
TRANSACTION_UPDATED = "TRANSACTION_UPDATED"
TRANSACTION_DELETED = "TRANSACTION_DELETED"


class Event(NamedTuple):
    name: str
    ts: str
    payload: dict


Handler = Callable[[Event], Awaitable[Any]]


class EventBus:
    """Handlers run one after another, in subscription order."""

    def __init__(self):
        self._subscribers: Dict[str, List[Handler]] = {}

    def subscribe(self, name: str, handler: Handler) -> None:
        self._subscribers.setdefault(name, []).append(handler)

    def unsubscribe(self, name: str, handler: Handler) -> None:
        handlers = self._subscribers.get(name, [])
        if handler in handlers:
            handlers.remove(handler)

    async def publish(self, name: str, payload: dict) -> List[Any]:
        handlers = list(self._subscribers.get(name, []))
        if not handlers:
            return []

        event = Event(name=name, ts=datetime.now(timezone.utc).isoformat(), payload=payload)
        logger.debug("Publishing %s to %d handler(s)", name, len(handlers))

        results = []
        for handler in handlers:
            results.append(await handler(event))
        return results
