"""Operation — a handle on a long-running server-side job.

An Operation lets you interact with API calls that take a while to finish::

    operation = await functions.create_function("hello", config)

    operation.on("complete", lambda cloudfunction: ...)
    operation.on("error", lambda err: ...)

    # or, linearly
    cloudfunction = await operation

Registering the first ``complete`` handler (directly, through
``as_promise()``, or by awaiting the handle) starts polling the operations
service every 500ms. When the last ``complete`` handler is removed, polling
stops. An operation nobody listens to never polls.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Generator, Optional

from cloudfunctions.error import ConfigurationError, decorate_status
from cloudfunctions.events import COMPLETE, ERROR, EventEmitter, Handler
from cloudfunctions.poller import ListenerDrivenPoller, PollState
from cloudfunctions.promise import as_future, wait_for_completion

if TYPE_CHECKING:
    import asyncio

Transform = Callable[[Dict[str, Any]], Any]

_log = logging.getLogger(__name__)


class Operation:
    """Observable, awaitable handle for one operation.

    ``parent`` must expose ``api.operations`` (see ``OperationsApi``) and may
    expose ``decorate_status``. ``transform`` turns the final operation payload
    into the value delivered to ``complete`` handlers; without it handlers get
    the payload itself.
    """

    def __init__(
        self,
        parent: Any,
        name: str,
        transform: Optional[Transform] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        if not name:
            raise ConfigurationError("A name must be specified for an operation.")

        self.name = name
        self.parent = parent
        self.metadata = metadata
        self.result: Any = None
        self._transform = transform
        self._poller = ListenerDrivenPoller(
            fetch=self.get,
            decorate=getattr(parent, "decorate_status", decorate_status),
            on_complete=self._complete,
            on_error=self._fail,
            name=name,
        )
        self._events = EventEmitter(
            on_subscription_change=self._poller.subscription_changed
        )

    @property
    def _operations(self) -> Any:
        return self.parent.api.operations

    @property
    def poller(self) -> ListenerDrivenPoller:
        return self._poller

    @property
    def state(self) -> PollState:
        return self._poller.state

    async def cancel(self) -> Dict[str, Any]:
        """Ask the server to cancel the operation. Returns the raw response."""
        return await self._operations.cancel_operation(self.name)

    async def delete(self) -> Dict[str, Any]:
        """Delete the operation record. Returns the raw response."""
        return await self._operations.delete_operation(self.name)

    async def get(self) -> Dict[str, Any]:
        """Fetch the operation once and remember it as the latest metadata."""
        response = await self._operations.get_operation(self.name)
        self.metadata = response
        return response

    def on(self, event: str, handler: Handler) -> "Operation":
        self._events.on(event, handler)
        return self

    def once(self, event: str, handler: Handler) -> "Operation":
        self._events.once(event, handler)
        return self

    def off(self, event: str, handler: Handler) -> "Operation":
        self._events.off(event, handler)
        return self

    def listener_count(self, event: str) -> int:
        return self._events.listener_count(event)

    def as_promise(self) -> "asyncio.Future[Any]":
        """Return a future for the ``complete`` result or the ``error``."""
        return as_future(self)

    async def wait(self, timeout_ms: int) -> Any:
        """Await the result, raising TimeoutError after timeout_ms."""
        return await wait_for_completion(self, timeout_ms)

    def __await__(self) -> Generator[Any, None, Any]:
        return self.as_promise().__await__()

    def _complete(self, payload: Dict[str, Any]) -> None:
        self.metadata = payload
        if self._transform is None:
            self.result = payload
        else:
            try:
                self.result = self._transform(payload)
            except Exception as error:
                self._fail(error)
                return
        self._events.emit(COMPLETE, self.result)

    def _fail(self, error: Exception) -> None:
        if not self._events.emit(ERROR, error):
            _log.warning(
                "Operation %s failed with no error handler attached: %s",
                self.name,
                error,
            )

    def __repr__(self) -> str:
        return f"Operation(name={self.name!r}, state={self.state.value})"
