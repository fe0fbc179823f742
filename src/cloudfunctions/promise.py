"""Future adapters for operation events."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from cloudfunctions.error import TimeoutError
from cloudfunctions.events import COMPLETE, ERROR

if TYPE_CHECKING:
    from cloudfunctions.operation import Operation

_log = logging.getLogger(__name__)


def as_future(operation: "Operation") -> "asyncio.Future[Any]":
    """Wrap the ``complete`` and ``error`` events of operation in a future.

    Subscribing the completion handler starts polling like any other
    subscriber. Both handlers are released once the future is done, which
    includes the caller cancelling it.
    """
    future: asyncio.Future = asyncio.get_running_loop().create_future()

    def _reject(error: Exception) -> None:
        if not future.done():
            future.set_exception(error)

    def _resolve(result: Any) -> None:
        if not future.done():
            future.set_result(result)

    def _release(_: asyncio.Future) -> None:
        operation.off(ERROR, _reject)
        operation.off(COMPLETE, _resolve)

    operation.on(ERROR, _reject).on(COMPLETE, _resolve)
    future.add_done_callback(_release)
    return future


async def wait_for_completion(
    operation: "Operation",
    timeout_ms: int,
    warn_on_timeout: bool = True,
) -> Any:
    """Await the operation's result, raising TimeoutError past timeout_ms.

    On timeout the internal subscription is released, so polling stops if
    nothing else is listening.
    """
    try:
        return await asyncio.wait_for(
            operation.as_promise(), timeout=timeout_ms / 1000.0
        )
    except asyncio.TimeoutError:
        if warn_on_timeout:
            _log.warning(
                "Gave up waiting for operation '%s' after %dms",
                operation.name,
                timeout_ms,
            )
        raise TimeoutError(timeout_ms) from None
