"""Transport interfaces the clients call into.

The RPC stubs themselves (gRPC channels, credentials, generated request types)
live outside this package. Anything implementing these coroutines can back a
client: a generated stub adapter, an HTTP client, or an in-memory fake.
Implementations raise on RPC failure, ideally with ``TransportError``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Dict, Optional


class OperationsApi(ABC):
    """google.longrunning.Operations, keyed by operation name."""

    @abstractmethod
    async def get_operation(self, name: str) -> Dict[str, Any]:
        """Return the operation payload: ``name``, ``done``, ``error``, ``response``."""
        ...

    @abstractmethod
    async def cancel_operation(self, name: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def delete_operation(self, name: str) -> Dict[str, Any]:
        ...


class FunctionsApi(ABC):
    """google.cloud.functions CloudFunctionsService."""

    @abstractmethod
    async def create_function(
        self, location: str, function: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Start creating a function. Returns the operation payload."""
        ...

    @abstractmethod
    async def get_function(self, name: str) -> Dict[str, Any]:
        ...

    @abstractmethod
    async def update_function(
        self, name: str, function: Dict[str, Any]
    ) -> Dict[str, Any]:
        """Start updating a function. Returns the operation payload."""
        ...

    @abstractmethod
    async def delete_function(self, name: str) -> Dict[str, Any]:
        """Start deleting a function. Returns the operation payload."""
        ...

    @abstractmethod
    async def list_functions(
        self,
        location: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Return ``{"functions": [...], "nextPageToken": ...}``."""
        ...

    @abstractmethod
    async def call_function(self, name: str, data: str) -> Dict[str, Any]:
        ...


class Apis:
    """The transports one client talks to."""

    def __init__(self, functions: FunctionsApi, operations: OperationsApi) -> None:
        self.functions = functions
        self.operations = operations

    def __repr__(self) -> str:
        return f"Apis(functions={self.functions!r}, operations={self.operations!r})"
