"""TimeBoundOperationsApi — enforces a per-call timeout on operations RPCs using asyncio."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Any, Awaitable, Dict, Optional

from cloudfunctions.error import TimeoutError
from cloudfunctions.transport import OperationsApi

_log = logging.getLogger(__name__)


class TimeBoundOperationsApi(OperationsApi):
    """Wraps an OperationsApi so each call raises TimeoutError after timeout_ms."""

    def __init__(
        self,
        api: OperationsApi,
        timeout_ms: int,
        warn_on_timeout: bool = True,
    ) -> None:
        self._wrapped_api = api
        self._timeout_ms = timeout_ms
        self._warn_on_timeout = warn_on_timeout

    @property
    def wrapped(self) -> OperationsApi:
        return self._wrapped_api

    @property
    def timeout_ms(self) -> int:
        return self._timeout_ms

    def _log_timeout_warning(self, method: str, name: str) -> None:
        if self._warn_on_timeout:
            _log.warning(
                "%s '%s' was terminated due to timeout after %dms",
                method,
                name,
                self._timeout_ms,
            )

    def _log_near_timeout_completion(
        self, method: str, name: str, duration_s: float
    ) -> None:
        timeout_s = self._timeout_ms / 1000.0
        if timeout_s > 0 and (duration_s / timeout_s) > 0.8:
            _log.info(
                "%s '%s' completed in %.3fs (%d%% of %dms timeout)",
                method,
                name,
                duration_s,
                int((duration_s / timeout_s) * 100),
                self._timeout_ms,
            )

    async def _call(
        self, method: str, name: str, call: Awaitable[Dict[str, Any]]
    ) -> Dict[str, Any]:
        start = time.monotonic()
        try:
            result = await asyncio.wait_for(call, timeout=self._timeout_ms / 1000.0)
        except asyncio.TimeoutError:
            self._log_timeout_warning(method, name)
            raise TimeoutError(self._timeout_ms)

        self._log_near_timeout_completion(method, name, time.monotonic() - start)
        return result

    async def get_operation(self, name: str) -> Dict[str, Any]:
        return await self._call(
            "get_operation", name, self._wrapped_api.get_operation(name)
        )

    async def cancel_operation(self, name: str) -> Dict[str, Any]:
        return await self._call(
            "cancel_operation", name, self._wrapped_api.cancel_operation(name)
        )

    async def delete_operation(self, name: str) -> Dict[str, Any]:
        return await self._call(
            "delete_operation", name, self._wrapped_api.delete_operation(name)
        )


def create_logged_timeout_api(
    api: OperationsApi,
    timeout_ms: int,
    level: Optional[int] = None,
) -> "LoggingOperationsApi":
    """Compose TimeBoundOperationsApi inside LoggingOperationsApi."""
    from cloudfunctions.wrappers.logging_wrapper import LoggingOperationsApi

    timeout_api = TimeBoundOperationsApi(api, timeout_ms)
    if level is None:
        return LoggingOperationsApi(timeout_api)
    return LoggingOperationsApi(timeout_api, level=level)
