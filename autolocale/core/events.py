"""
Change-hook dispatcher.

Storage writes publish change events; the translator plugin subscribes to
them to start translation passes. Events whose write context marks them as
a translation echo are dropped before any handler sees them, so a pass can
never re-trigger itself through its own writes.
"""

from __future__ import annotations

import fnmatch
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable

from autolocale.core.models import WriteContext

logger = logging.getLogger(__name__)

# Handlers may return anything; results are collected for inspection only
HookHandler = Callable[["ChangeEvent"], Awaitable[Any]]
Middleware = Callable[["ChangeEvent"], "ChangeEvent | None"]


@dataclass
class ChangeEvent:
    """
    A document write that already happened.

    Carries the write context so subscribers can tell user edits from
    writes made by a translation pass.
    """

    event_type: str  # "document.created" or "document.updated"
    collection: str
    document_id: str
    locale: str
    doc: dict[str, Any]
    previous_doc: dict[str, Any] | None = None
    context: WriteContext = field(default_factory=WriteContext)

    id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def operation(self) -> str:
        return self.event_type.rsplit(".", 1)[-1]

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "event_type": self.event_type,
            "collection": self.collection,
            "document_id": self.document_id,
            "locale": self.locale,
            "context": self.context.to_payload(),
            "timestamp": self.timestamp.isoformat(),
        }


@dataclass
class Subscription:
    """A subscription to change events matching a pattern."""

    pattern: str  # e.g., "document.*" or "document.updated"
    handler: HookHandler
    filter: dict[str, Any] = field(default_factory=dict)

    def matches(self, event: ChangeEvent) -> bool:
        if not fnmatch.fnmatch(event.event_type, self.pattern):
            return False

        for key, value in self.filter.items():
            if getattr(event, key, None) != value:
                return False

        return True


def drop_translation_echoes(event: ChangeEvent) -> ChangeEvent | None:
    """Middleware that drops writes made by a translation or bulk pass."""
    if event.context.suppresses_translation:
        logger.debug(
            f"Dropping {event.event_type} for {event.collection}/{event.document_id} "
            f"[{event.locale}]: {event.context.intent.value}"
        )
        return None
    return event


class HookDispatcher:
    """
    In-memory change-hook dispatcher.

    Suitable for a single process. Handler failures are logged and never
    stop the remaining handlers.
    """

    def __init__(self, guard_echoes: bool = True, max_history: int = 1000):
        self._subscriptions: list[Subscription] = []
        self._history: list[ChangeEvent] = []
        self._dropped: list[ChangeEvent] = []
        self._max_history = max_history
        self._middlewares: list[Middleware] = []
        if guard_echoes:
            self._middlewares.append(drop_translation_echoes)

    def subscribe(
        self,
        pattern: str,
        handler: HookHandler,
        filter: dict[str, Any] | None = None,
    ) -> Subscription:
        """
        Subscribe to change events matching a pattern.

        Args:
            pattern: Event type pattern (supports wildcards like "document.*")
            handler: Async function called with each matching event
            filter: Attribute filters (e.g., {"collection": "insights"})
        """
        subscription = Subscription(pattern=pattern, handler=handler, filter=filter or {})
        self._subscriptions.append(subscription)
        return subscription

    def unsubscribe(self, subscription: Subscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)

    def add_middleware(self, middleware: Middleware) -> None:
        """Middleware can modify events or return None to drop them."""
        self._middlewares.append(middleware)

    async def publish(self, event: ChangeEvent) -> list[Any]:
        """Dispatch an event to every matching handler and return their results."""
        current: ChangeEvent | None = event
        for middleware in self._middlewares:
            current = middleware(current)
            if current is None:
                self._remember(self._dropped, event)
                return []

        self._remember(self._history, current)

        results: list[Any] = []
        for subscription in [s for s in self._subscriptions if s.matches(current)]:
            try:
                results.append(await subscription.handler(current))
            except Exception as e:
                logger.exception(f"Error in hook handler for {current.event_type}: {e}")

        return results

    def _remember(self, bucket: list[ChangeEvent], event: ChangeEvent) -> None:
        bucket.append(event)
        if len(bucket) > self._max_history:
            del bucket[: len(bucket) - self._max_history]

    def get_history(
        self,
        event_type: str | None = None,
        collection: str | None = None,
        include_dropped: bool = False,
        limit: int = 100,
    ) -> list[ChangeEvent]:
        """Query dispatched (and optionally dropped) events."""
        results = self._history + self._dropped if include_dropped else list(self._history)

        if event_type:
            results = [e for e in results if fnmatch.fnmatch(e.event_type, event_type)]
        if collection:
            results = [e for e in results if e.collection == collection]

        return results[-limit:]

    @property
    def dropped(self) -> list[ChangeEvent]:
        return list(self._dropped)


# Singleton dispatcher for the application
_default_dispatcher: HookDispatcher | None = None


def get_dispatcher() -> HookDispatcher:
    """Get the default dispatcher instance."""
    global _default_dispatcher
    if _default_dispatcher is None:
        _default_dispatcher = HookDispatcher()
    return _default_dispatcher


def reset_dispatcher() -> None:
    """Reset the default dispatcher (useful for testing)."""
    global _default_dispatcher
    _default_dispatcher = None
