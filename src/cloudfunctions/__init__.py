"""cloudfunctions — Cloud Functions client with self-polling long-running operation handles."""

from cloudfunctions.error import (
    CloudFunctionsError,
    TransportError,
    OperationFailedError,
    ConfigurationError,
    TimeoutError,
    DecodeError,
    GRPC_ERROR_CODE_TO_HTTP,
    decorate_status,
    error_from_json_error,
)
from cloudfunctions.events import COMPLETE, ERROR, EventEmitter
from cloudfunctions.poller import POLL_INTERVAL_MS, ListenerDrivenPoller, PollState
from cloudfunctions.promise import as_future, wait_for_completion
from cloudfunctions.operation import Operation
from cloudfunctions.transport import Apis, FunctionsApi, OperationsApi
from cloudfunctions.cloudfunction import CloudFunction
from cloudfunctions.functions import (
    Functions,
    decode_response,
    function_path,
    location_path,
)
from cloudfunctions.wrappers.logging_wrapper import LoggingOperationsApi, YELLOW, GREEN, RED, RESET
from cloudfunctions.wrappers.timeout_wrapper import (
    TimeBoundOperationsApi,
    create_logged_timeout_api,
)

__all__ = [
    # errors
    "CloudFunctionsError",
    "TransportError",
    "OperationFailedError",
    "ConfigurationError",
    "TimeoutError",
    "DecodeError",
    "GRPC_ERROR_CODE_TO_HTTP",
    "decorate_status",
    "error_from_json_error",
    # events
    "COMPLETE",
    "ERROR",
    "EventEmitter",
    # polling
    "POLL_INTERVAL_MS",
    "ListenerDrivenPoller",
    "PollState",
    "as_future",
    "wait_for_completion",
    "Operation",
    # transport
    "Apis",
    "FunctionsApi",
    "OperationsApi",
    # client
    "Functions",
    "CloudFunction",
    "decode_response",
    "function_path",
    "location_path",
    # wrappers
    "LoggingOperationsApi",
    "YELLOW",
    "GREEN",
    "RED",
    "RESET",
    "TimeBoundOperationsApi",
    "create_logged_timeout_api",
]
