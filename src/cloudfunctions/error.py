"""Error variants for Cloud Functions clients and operation handles."""

import copy
from typing import Any, Dict, List, Optional

# gRPC status code -> (HTTP code, default message)
GRPC_ERROR_CODE_TO_HTTP: Dict[int, Dict[str, Any]] = {
    0: {"code": 200, "message": "OK"},
    1: {"code": 499, "message": "Client Closed Request"},
    2: {"code": 500, "message": "Internal Server Error"},
    3: {"code": 400, "message": "Bad Request"},
    4: {"code": 504, "message": "Gateway Timeout"},
    5: {"code": 404, "message": "Not Found"},
    6: {"code": 409, "message": "Conflict"},
    7: {"code": 403, "message": "Forbidden"},
    8: {"code": 429, "message": "Too Many Requests"},
    9: {"code": 412, "message": "Precondition Failed"},
    10: {"code": 409, "message": "Conflict"},
    11: {"code": 400, "message": "Bad Request"},
    12: {"code": 501, "message": "Not Implemented"},
    13: {"code": 500, "message": "Internal Server Error"},
    14: {"code": 503, "message": "Service Unavailable"},
    15: {"code": 500, "message": "Internal Server Error"},
    16: {"code": 401, "message": "Unauthorized"},
}

GRPC_STATUS_NAMES: Dict[int, str] = {
    0: "OK",
    1: "CANCELLED",
    2: "UNKNOWN",
    3: "INVALID_ARGUMENT",
    4: "DEADLINE_EXCEEDED",
    5: "NOT_FOUND",
    6: "ALREADY_EXISTS",
    7: "PERMISSION_DENIED",
    8: "RESOURCE_EXHAUSTED",
    9: "FAILED_PRECONDITION",
    10: "ABORTED",
    11: "OUT_OF_RANGE",
    12: "UNIMPLEMENTED",
    13: "INTERNAL",
    14: "UNAVAILABLE",
    15: "DATA_LOSS",
    16: "UNAUTHENTICATED",
}


class CloudFunctionsError(Exception):
    """Base class for all errors raised by this package."""
    pass


class TransportError(CloudFunctionsError):
    """An RPC failed before the server could answer (network, auth, protocol)."""

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        response: Optional[Dict[str, Any]] = None,
    ):
        self.message = message
        self.code = code
        self.response = response
        super().__init__(str(self))

    def __str__(self) -> str:
        if self.code is None:
            return f"Transport error: {self.message}"
        return f"Transport error ({self.code}): {self.message}"

    def __copy__(self) -> "TransportError":
        return TransportError(self.message, self.code, copy.copy(self.response))


class OperationFailedError(CloudFunctionsError):
    """The operation RPC succeeded but the server-side job itself failed."""

    def __init__(
        self,
        code: int,
        message: str,
        details: Optional[List[Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = list(details or [])
        self.status = GRPC_STATUS_NAMES.get(code, "UNKNOWN")
        self.http_code = GRPC_ERROR_CODE_TO_HTTP.get(code, {}).get("code", 500)
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Operation failed with {self.status} ({self.http_code}): {self.message}"

    def __copy__(self) -> "OperationFailedError":
        return OperationFailedError(self.code, self.message, self.details)


class ConfigurationError(CloudFunctionsError):
    """A handle or client was built with missing or invalid arguments."""

    def __init__(self, message: str):
        self.message = message
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Configuration error: {self.message}"

    def __copy__(self) -> "ConfigurationError":
        return ConfigurationError(self.message)


class TimeoutError(CloudFunctionsError):
    """An RPC or a wait for completion ran past its deadline."""

    def __init__(self, timeout_ms: int):
        self.timeout_ms = timeout_ms
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Timed out after {self.timeout_ms}ms"

    def __copy__(self) -> "TimeoutError":
        return TimeoutError(self.timeout_ms)


class DecodeError(CloudFunctionsError):
    """Wraps a failure to decode an operation response payload."""

    def __init__(self, error: Exception):
        self.wrapped = error
        super().__init__(str(self))

    def __str__(self) -> str:
        return f"Could not decode operation response: {self.wrapped}"

    def __copy__(self) -> "DecodeError":
        return DecodeError(self.wrapped)


def error_from_json_error(err: Exception) -> DecodeError:
    """Convert a JSON parsing error to DecodeError."""
    return DecodeError(err)


def decorate_status(status: Any) -> OperationFailedError:
    """Turn a google.rpc.Status-shaped payload into an OperationFailedError.

    The server's message wins over the default message for the code. A
    payload without a known code is reported as UNKNOWN; a bare value is
    used as the message.
    """
    if not isinstance(status, dict):
        status = {"message": str(status)} if status else {}
    code = status.get("code", 2)
    if code not in GRPC_ERROR_CODE_TO_HTTP:
        code = 2
    message = status.get("message") or GRPC_ERROR_CODE_TO_HTTP[code]["message"]
    return OperationFailedError(code, message, status.get("details"))
