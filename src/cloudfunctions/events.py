"""EventEmitter — named handler lists with a subscription-change hook.

Owned by an Operation rather than inherited from. Instead of emitting
meta-events when handlers come and go, the emitter reports each change to an
optional ``on_subscription_change(event, delta)`` callback.
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Optional

COMPLETE = "complete"
ERROR = "error"

Handler = Callable[..., Any]
SubscriptionHook = Callable[[str, int], None]

_log = logging.getLogger(__name__)


class EventEmitter:
    """Synchronous emitter. Handlers run in registration order.

    Emitting does not replay: a handler added after an emit never sees it.
    """

    def __init__(self, on_subscription_change: Optional[SubscriptionHook] = None) -> None:
        self._handlers: Dict[str, List[Handler]] = {}
        self._on_subscription_change = on_subscription_change

    def _notify(self, event: str, delta: int) -> None:
        if self._on_subscription_change is not None:
            self._on_subscription_change(event, delta)

    def on(self, event: str, handler: Handler) -> "EventEmitter":
        """Subscribe handler to event and return self."""
        self._handlers.setdefault(event, []).append(handler)
        self._notify(event, 1)
        return self

    def once(self, event: str, handler: Handler) -> "EventEmitter":
        """Subscribe handler for a single emit; it is removed before it runs."""

        def _once(*args: Any) -> Any:
            self.off(event, _once)
            return handler(*args)

        _once.listener = handler  # type: ignore[attr-defined]
        return self.on(event, _once)

    def off(self, event: str, handler: Handler) -> bool:
        """Unsubscribe handler. Returns True if it was registered."""
        handlers = self._handlers.get(event, [])
        for index, registered in enumerate(handlers):
            if registered == handler or getattr(registered, "listener", None) == handler:
                del handlers[index]
                if not handlers:
                    del self._handlers[event]
                self._notify(event, -1)
                return True
        return False

    def remove_all_listeners(self, event: Optional[str] = None) -> None:
        """Unsubscribe every handler of event, or of every event."""
        events = [event] if event is not None else list(self._handlers)
        for name in events:
            for handler in list(self._handlers.get(name, [])):
                self.off(name, handler)

    def emit(self, event: str, *args: Any) -> bool:
        """Call every handler of event with args. Returns False if there were none."""
        handlers = list(self._handlers.get(event, []))
        if not handlers:
            _log.debug("No handlers for '%s'", event)
            return False
        for handler in handlers:
            try:
                handler(*args)
            except Exception:
                _log.exception("Handler for '%s' raised", event)
        return True

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, []))

    def listeners(self, event: str) -> List[Handler]:
        return [
            getattr(handler, "listener", handler)
            for handler in self._handlers.get(event, [])
        ]

    def __repr__(self) -> str:
        counts = {name: len(handlers) for name, handlers in self._handlers.items()}
        return f"EventEmitter(listeners={counts})"
