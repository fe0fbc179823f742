"""ListenerDrivenPoller — polls an operation only while someone listens for completion.

The poller keeps an explicit count of ``complete`` subscribers. When the count
goes from zero to one a polling task starts; when it drops back to zero the
task notices at the top of its next cycle and exits on its own. Nothing
cancels the task from outside, so at most one fetch that was already in
flight finishes after the last unsubscribe.
"""

from __future__ import annotations

import asyncio
import enum
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

from cloudfunctions.events import COMPLETE

POLL_INTERVAL_MS = 500

_log = logging.getLogger(__name__)


class PollState(enum.Enum):
    IDLE = "idle"
    POLLING = "polling"
    TERMINAL = "terminal"


class ListenerDrivenPoller:
    """Drives a fetch loop for one operation.

    ``fetch`` returns the operation payload (or raises on transport failure),
    ``decorate`` turns a payload ``error`` field into an exception, and
    exactly one of ``on_complete(payload)`` / ``on_error(exc)`` is called once
    the operation is terminal.
    """

    def __init__(
        self,
        fetch: Callable[[], Awaitable[Dict[str, Any]]],
        decorate: Callable[[Dict[str, Any]], Exception],
        on_complete: Callable[[Dict[str, Any]], None],
        on_error: Callable[[Exception], None],
        name: str = "",
    ) -> None:
        self._fetch = fetch
        self._decorate = decorate
        self._on_complete = on_complete
        self._on_error = on_error
        self.name = name
        self.interval_ms = POLL_INTERVAL_MS
        self.complete_listeners = 0
        self.has_active_listeners = False
        self.state = PollState.IDLE
        self.task: Optional[asyncio.Task] = None
        self.fetch_count = 0

    def subscription_changed(self, event: str, delta: int) -> None:
        """Subscription hook for the owning emitter."""
        if event != COMPLETE:
            return
        self.complete_listeners += delta
        if self.state is PollState.TERMINAL:
            return

        if self.complete_listeners > 0 and not self.has_active_listeners:
            self.has_active_listeners = True
            self.state = PollState.POLLING
            self._start()
        elif self.complete_listeners == 0 and self.has_active_listeners:
            self.has_active_listeners = False
            self.state = PollState.IDLE
            _log.debug("Last complete listener left operation %s", self.name)

    def _start(self) -> None:
        # A loop that is still in flight sees the listeners again and carries on.
        if self.task is not None and not self.task.done():
            _log.debug("Resuming in-flight poll loop for operation %s", self.name)
            return
        _log.debug("Starting to poll operation %s", self.name)
        self.task = asyncio.get_running_loop().create_task(self._run())

    async def _wait_interval(self) -> None:
        await asyncio.sleep(self.interval_ms / 1000.0)

    async def _run(self) -> None:
        while True:
            if not self.has_active_listeners:
                _log.debug("Stopped polling operation %s", self.name)
                return

            self.fetch_count += 1
            try:
                response = await self._fetch()
            except Exception as error:
                self._finish(self._on_error, error)
                return

            response = response or {}
            if response.get("error"):
                try:
                    error = self._decorate(response["error"])
                except Exception as decorate_error:
                    error = decorate_error
                self._finish(self._on_error, error)
                return
            if response.get("done"):
                self._finish(self._on_complete, response)
                return

            await self._wait_interval()

    def _finish(self, callback: Callable[[Any], None], payload: Any) -> None:
        self.state = PollState.TERMINAL
        self.has_active_listeners = False
        _log.info(
            "Operation %s reached a terminal state after %d fetch(es)",
            self.name,
            self.fetch_count,
        )
        try:
            callback(payload)
        except Exception:
            _log.exception("Handler for operation %s raised", self.name)

    def __repr__(self) -> str:
        return (
            f"ListenerDrivenPoller(name={self.name!r}, state={self.state.value}, "
            f"listeners={self.complete_listeners})"
        )
