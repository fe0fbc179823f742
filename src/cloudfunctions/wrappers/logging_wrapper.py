"""LoggingOperationsApi — logs operations RPC start, success, and failure with ANSI colors and timing."""

from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, Optional

from cloudfunctions.transport import OperationsApi

# ANSI color codes
YELLOW = "\x1b[33m"
GREEN = "\x1b[32m"
RED = "\x1b[31m"
RESET = "\x1b[0m"

_log = logging.getLogger(__name__)


class LoggingOperationsApi(OperationsApi):
    """Wraps an OperationsApi with logging around every call."""

    def __init__(
        self,
        api: OperationsApi,
        level: int = logging.DEBUG,
        logger_name: Optional[str] = None,
    ) -> None:
        self._wrapped_api = api
        self._level = level
        self._logger_name = logger_name

    @property
    def wrapped(self) -> OperationsApi:
        return self._wrapped_api

    def _get_logger_name(self) -> str:
        return self._logger_name or "LoggingOperationsApi"

    def _log_call_start(self, method: str, name: str) -> None:
        _log.log(
            self._level,
            "%sStarting %s: %s%s",
            YELLOW,
            method,
            name,
            RESET,
            extra={"logger": self._get_logger_name()},
        )

    def _log_call_success(self, method: str, name: str, duration_s: float) -> None:
        _log.log(
            self._level,
            "%s%s '%s' completed in %.3f seconds%s",
            GREEN,
            method,
            name,
            duration_s,
            RESET,
            extra={"logger": self._get_logger_name()},
        )

    def _log_call_failure(
        self, method: str, name: str, error: Exception, duration_s: float
    ) -> None:
        _log.error(
            "%s%s '%s' failed after %.3f seconds: %r%s",
            RED,
            method,
            name,
            duration_s,
            error,
            RESET,
            extra={"logger": self._get_logger_name()},
        )

    async def _call(
        self,
        method: str,
        call: Callable[[str], Awaitable[Dict[str, Any]]],
        name: str,
    ) -> Dict[str, Any]:
        start = time.monotonic()
        self._log_call_start(method, name)

        try:
            result = await call(name)
        except Exception as error:
            self._log_call_failure(method, name, error, time.monotonic() - start)
            raise

        self._log_call_success(method, name, time.monotonic() - start)
        return result

    async def get_operation(self, name: str) -> Dict[str, Any]:
        return await self._call("get_operation", self._wrapped_api.get_operation, name)

    async def cancel_operation(self, name: str) -> Dict[str, Any]:
        return await self._call(
            "cancel_operation", self._wrapped_api.cancel_operation, name
        )

    async def delete_operation(self, name: str) -> Dict[str, Any]:
        return await self._call(
            "delete_operation", self._wrapped_api.delete_operation, name
        )
