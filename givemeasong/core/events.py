"""
Event Bus for GiveMeASong.

This module provides a simple pub/sub event system for decoupled communication
between the workflow and the layers around it. The workflow publishes state
changes and navigation requests; the application shell and renderers subscribe.

Event types:
- workflow.state: A workflow changed state (idle/submitting/resolved/loading/ready/failed)
- navigation.request: The workflow asks the shell to show another route
- view.mounted: A view instance was mounted
- view.unmounted: A view instance was unmounted

Usage:
    from givemeasong.core.events import event_bus

    async def on_state(event: WorkflowStateEvent) -> None:
        print(f"View {event.view_id} is now {event.state}")

    await event_bus.subscribe("workflow.state", on_state)
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Coroutine

logger = logging.getLogger(__name__)

# Type alias for event handlers
EventHandler = Callable[["Event"], Coroutine[Any, Any, None]]


@dataclass
class Event:
    """Base class for all events."""

    event_type: str = ""

    def to_dict(self) -> dict[str, Any]:
        """Convert event to dictionary for JSON serialization."""
        return {"type": self.event_type}


@dataclass
class WorkflowStateEvent(Event):
    """Fired whenever a workflow enters a new state."""

    event_type: str = field(default="workflow.state", init=False)
    view_id: str = ""
    state: str = ""  # idle, submitting, resolved, loading_song, ready, failed
    song_id: str | None = None
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "type": self.event_type,
            "view_id": self.view_id,
            "state": self.state,
        }
        if self.song_id is not None:
            result["song_id"] = self.song_id
        if self.error:
            result["error"] = self.error
        return result


@dataclass
class NavigationEvent(Event):
    """Fired when the workflow wants the shell to navigate to another route."""

    event_type: str = field(default="navigation.request", init=False)
    path: str = "/"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.event_type, "path": self.path}


@dataclass
class ViewMountedEvent(Event):
    """Fired when a view instance is mounted."""

    event_type: str = field(default="view.mounted", init=False)
    view_id: str = ""
    path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.event_type, "view_id": self.view_id, "path": self.path}


@dataclass
class ViewUnmountedEvent(Event):
    """Fired when a view instance is unmounted."""

    event_type: str = field(default="view.unmounted", init=False)
    view_id: str = ""
    path: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.event_type, "view_id": self.view_id, "path": self.path}


class EventBus:
    """
    Simple async pub/sub event bus.

    Supports:
    - Multiple handlers per event type
    - Wildcard subscriptions (e.g., "view.*")
    - Error isolation (one handler failing doesn't affect others)
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[EventHandler]] = {}
        self._lock = asyncio.Lock()

    async def subscribe(self, event_type: str, handler: EventHandler) -> None:
        """
        Subscribe to events of a specific type.

        Args:
            event_type: Event type to subscribe to. Use "*" suffix for wildcards.
            handler: Async function to call when event is published.
        """
        async with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)
            logger.debug("Subscribed to %s: %s", event_type, handler)

    async def unsubscribe(self, event_type: str, handler: EventHandler) -> bool:
        """
        Unsubscribe a handler from an event type.

        Returns True if handler was found and removed.
        """
        async with self._lock:
            if event_type in self._handlers:
                try:
                    self._handlers[event_type].remove(handler)
                    logger.debug("Unsubscribed from %s: %s", event_type, handler)
                    return True
                except ValueError:
                    pass
            return False

    async def publish(self, event: Event) -> int:
        """
        Publish an event to all subscribed handlers.

        Args:
            event: The event to publish.

        Returns:
            Number of handlers that received the event.
        """
        event_type = event.event_type
        handlers_called = 0

        async with self._lock:
            matching_handlers: list[EventHandler] = list(self._handlers.get(event_type, []))

            for pattern, handlers in self._handlers.items():
                if pattern.endswith(".*"):
                    prefix = pattern[:-2]
                    if event_type.startswith(prefix + "."):
                        matching_handlers.extend(handlers)
                elif pattern == "*":
                    matching_handlers.extend(handlers)

        # Call handlers outside of lock
        for handler in matching_handlers:
            try:
                await handler(event)
                handlers_called += 1
            except Exception as e:
                logger.exception("Error in event handler for %s: %s", event_type, e)

        if handlers_called > 0:
            logger.debug("Published %s to %d handlers", event_type, handlers_called)

        return handlers_called

    async def clear(self) -> None:
        """Remove all subscriptions."""
        async with self._lock:
            self._handlers.clear()
            logger.debug("Cleared all event subscriptions")


# Global event bus instance
event_bus = EventBus()
