"""Shared in-memory transports and fixtures."""

import asyncio
from typing import Any, Dict, List, Optional

import pytest

from cloudfunctions.functions import Functions
from cloudfunctions.poller import ListenerDrivenPoller
from cloudfunctions.transport import FunctionsApi, OperationsApi


class FakeOperationsApi(OperationsApi):
    """Scripted operations service.

    Each get_operation pops the next scripted item; exceptions are raised.
    When ``gate`` is set to an asyncio.Event, get_operation blocks on it after
    recording the call.
    """

    def __init__(self, responses: Optional[List[Any]] = None) -> None:
        self.responses: List[Any] = list(responses or [])
        self.calls: List[tuple] = []
        self.gate: Optional[asyncio.Event] = None

    @property
    def get_calls(self) -> List[str]:
        return [name for method, name in self.calls if method == "get"]

    async def get_operation(self, name: str) -> Dict[str, Any]:
        self.calls.append(("get", name))
        if self.gate is not None:
            await self.gate.wait()
        if self.responses:
            item = self.responses.pop(0)
        else:
            item = {"name": name, "done": False}
        if isinstance(item, BaseException):
            raise item
        return item

    async def cancel_operation(self, name: str) -> Dict[str, Any]:
        self.calls.append(("cancel", name))
        return {}

    async def delete_operation(self, name: str) -> Dict[str, Any]:
        self.calls.append(("delete", name))
        return {}


class FakeFunctionsApi(FunctionsApi):
    """Records calls and answers from canned dicts."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.functions: Dict[str, Dict[str, Any]] = {}
        self.pages: List[Dict[str, Any]] = []

    async def create_function(self, location: str, function: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("create", location, function))
        return {"name": "operations/create-1", "done": False}

    async def get_function(self, name: str) -> Dict[str, Any]:
        self.calls.append(("get", name))
        return self.functions[name]

    async def update_function(self, name: str, function: Dict[str, Any]) -> Dict[str, Any]:
        self.calls.append(("update", name, function))
        return {"name": "operations/update-1", "done": False}

    async def delete_function(self, name: str) -> Dict[str, Any]:
        self.calls.append(("delete", name))
        return {"name": "operations/delete-1", "done": False}

    async def list_functions(
        self,
        location: str,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
    ) -> Dict[str, Any]:
        self.calls.append(("list", location, page_size, page_token))
        return self.pages.pop(0)

    async def call_function(self, name: str, data: str) -> Dict[str, Any]:
        self.calls.append(("call", name, data))
        return {"executionId": "exec-1", "result": data}


@pytest.fixture(autouse=True)
def poll_intervals(monkeypatch) -> List[int]:
    """Skip the real poll delay and record each requested interval instead."""
    intervals: List[int] = []

    async def _record_interval(self: ListenerDrivenPoller) -> None:
        intervals.append(self.interval_ms)
        await asyncio.sleep(0)

    monkeypatch.setattr(ListenerDrivenPoller, "_wait_interval", _record_interval)
    return intervals


@pytest.fixture
def operations_api() -> FakeOperationsApi:
    return FakeOperationsApi()


@pytest.fixture
def functions_api() -> FakeFunctionsApi:
    return FakeFunctionsApi()


@pytest.fixture
def client(functions_api, operations_api) -> Functions:
    return Functions(functions_api, operations_api, project_id="my-project")
