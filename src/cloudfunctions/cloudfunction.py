"""CloudFunction — a reference to one deployed (or to-be-deployed) function."""

from __future__ import annotations

import json
from typing import TYPE_CHECKING, Any, Dict, Optional

from cloudfunctions.error import ConfigurationError

if TYPE_CHECKING:
    from cloudfunctions.functions import Functions
    from cloudfunctions.operation import Operation


class CloudFunction:
    """A named function within a project and region.

    ``metadata`` holds the last known server view, always including the fully
    qualified ``name``.
    """

    def __init__(
        self,
        functions: "Functions",
        name: str,
        project_id: Optional[str] = None,
        region: Optional[str] = None,
        **config: Any,
    ) -> None:
        if functions is None:
            raise ConfigurationError("A functions service object must be provided.")
        if not isinstance(name, str) or not name:
            raise ConfigurationError("A function name must be provided.")

        self.functions = functions
        self.name = name
        self.metadata: Dict[str, Any] = dict(config)
        self.metadata["projectId"] = project_id or functions.project_id
        self.metadata["region"] = region or functions.region
        self.metadata["name"] = functions.format_name(
            name, self.metadata["projectId"], self.metadata["region"]
        )

    @property
    def _api(self) -> Any:
        return self.functions.api.functions

    async def call(self, data: Any = "") -> Dict[str, Any]:
        """Invoke the function synchronously. Non-string data is sent as JSON."""
        if data is None:
            raise ConfigurationError("A data value must be provided.")
        if not isinstance(data, str):
            data = json.dumps(data)
        return await self._api.call_function(self.metadata["name"], data)

    async def create(self, config: Optional[Dict[str, Any]] = None) -> "Operation":
        return await self.functions.create_function(self.name, config)

    async def get(self) -> "CloudFunction":
        """Refresh metadata from the server and return self."""
        response = await self._api.get_function(self.metadata["name"])
        self.metadata.update(response)
        return self

    async def delete(self) -> "Operation":
        """Start deleting the function. The operation completes with its payload."""
        response = await self._api.delete_function(self.metadata["name"])
        return self.functions.operation(response["name"], metadata=response)

    async def update(self, config: Dict[str, Any]) -> "Operation":
        """Start updating the function.

        The returned operation completes with this CloudFunction, its metadata
        merged with the updated function.
        """
        if not isinstance(config, dict):
            raise ConfigurationError("A function configuration object must be provided.")

        defaults = {
            "projectId": self.metadata["projectId"],
            "region": self.metadata["region"],
        }
        body = self.functions.prepare_function_body(self.name, dict(defaults, **config))
        body = self.functions.format_function_body(self.name, body)

        response = await self._api.update_function(self.metadata["name"], body)
        return self.functions.operation(
            response["name"],
            transform=self.apply_operation_result,
            metadata=response,
        )

    def apply_operation_result(self, metadata: Dict[str, Any]) -> "CloudFunction":
        """Merge a finished operation's decoded response into metadata."""
        response = metadata.get("response")
        if response:
            self.metadata.update(self.functions.decode(response))
        return self

    def __repr__(self) -> str:
        return f"CloudFunction(name={self.metadata['name']!r})"
