from cloudfunctions.wrappers.logging_wrapper import LoggingOperationsApi
from cloudfunctions.wrappers.timeout_wrapper import (
    TimeBoundOperationsApi,
    create_logged_timeout_api,
)

__all__ = ["LoggingOperationsApi", "TimeBoundOperationsApi", "create_logged_timeout_api"]
