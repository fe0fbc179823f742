"""Functions — the Cloud Functions client.

Google Cloud Functions is an event-based compute service for small,
single-purpose functions. This client shapes requests for the
CloudFunctionsService transport and hands back ``Operation`` handles for the
calls that start server-side jobs (create, update, delete).
"""

from __future__ import annotations

import json
import logging
import os
from typing import Any, AsyncIterator, Callable, Dict, List, Optional, Tuple

from cloudfunctions.cloudfunction import CloudFunction
from cloudfunctions.error import (
    ConfigurationError,
    OperationFailedError,
    decorate_status,
    error_from_json_error,
)
from cloudfunctions.operation import Operation, Transform
from cloudfunctions.transport import Apis, FunctionsApi, OperationsApi
from cloudfunctions.wrappers.logging_wrapper import LoggingOperationsApi
from cloudfunctions.wrappers.timeout_wrapper import create_logged_timeout_api

DEFAULT_REGION = "us-central1"
PROJECT_ENV_VAR = "GCLOUD_PROJECT"

_log = logging.getLogger(__name__)


def location_path(project_id: str, region: str) -> str:
    return f"projects/{project_id}/locations/{region}"


def function_path(project_id: str, region: str, name: str) -> str:
    return f"{location_path(project_id, region)}/functions/{name}"


def format_gcs_trigger(bucket_name: str) -> str:
    """Format a bucket as 'gs://{bucket}/'."""
    if not bucket_name.startswith("gs://"):
        bucket_name = "gs://" + bucket_name
    if not bucket_name.endswith("/"):
        bucket_name = bucket_name + "/"
    return bucket_name


def format_https_trigger(project_id: str, region: str, name: str) -> str:
    return f"https://{region}-{project_id}.cloudfunctions.net/{name}"


def format_pubsub_trigger(project_id: str, topic_name: str) -> str:
    if topic_name.startswith("projects/"):
        return topic_name
    return f"projects/{project_id}/topics/{topic_name}"


def decode_response(response: Dict[str, Any]) -> Dict[str, Any]:
    """Default decode hook for an operation's ``response`` field.

    Packed payloads (``{"@type": ..., "value": <json bytes or str>}``) are
    JSON-decoded; anything else is returned without its ``@type`` marker.
    """
    if "value" in response:
        value = response["value"]
        if isinstance(value, (bytes, bytearray)):
            value = value.decode("utf-8")
        if isinstance(value, str):
            try:
                return json.loads(value)
            except json.JSONDecodeError as err:
                raise error_from_json_error(err) from err
        return dict(value)
    return {key: value for key, value in response.items() if key != "@type"}


class Functions:
    """Client for one project and default region.

    ``project_id`` defaults to the GCLOUD_PROJECT environment variable.
    ``rpc_timeout_ms`` bounds every operations RPC (including each poll).
    ``decode`` unpacks the ``response`` field of finished operations.
    """

    def __init__(
        self,
        functions_api: FunctionsApi,
        operations_api: OperationsApi,
        project_id: Optional[str] = None,
        region: Optional[str] = None,
        rpc_timeout_ms: Optional[int] = None,
        decode: Callable[[Dict[str, Any]], Dict[str, Any]] = decode_response,
    ) -> None:
        self.project_id = project_id or os.environ.get(PROJECT_ENV_VAR)
        self.region = region or DEFAULT_REGION
        self.decode = decode

        if rpc_timeout_ms is None:
            operations = LoggingOperationsApi(operations_api)
        else:
            operations = create_logged_timeout_api(operations_api, rpc_timeout_ms)
        self.api = Apis(functions=functions_api, operations=operations)

    def decorate_status(self, status: Dict[str, Any]) -> OperationFailedError:
        return decorate_status(status)

    def format_location(
        self, project_id: Optional[str] = None, region: Optional[str] = None
    ) -> str:
        project_id = project_id or self.project_id
        if not project_id:
            raise ConfigurationError(
                f"A project ID must be provided or set in {PROJECT_ENV_VAR}."
            )
        return location_path(project_id, region or self.region)

    def format_name(
        self,
        name: str,
        project_id: Optional[str] = None,
        region: Optional[str] = None,
    ) -> str:
        """Fully qualify a function name. Names containing '/' are kept as is."""
        if "/" in name:
            return name
        project_id = project_id or self.project_id
        if not project_id:
            raise ConfigurationError(
                f"A project ID must be provided or set in {PROJECT_ENV_VAR}."
            )
        return function_path(project_id, region or self.region, name)

    def prepare_function_body(
        self, name: str, config: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Fill in project and region defaults and the qualified name."""
        body: Dict[str, Any] = {"projectId": self.project_id, "region": self.region}
        body.update({key: value for key, value in (config or {}).items() if value is not None})
        body["name"] = self.format_name(name, body["projectId"], body["region"])
        return body

    def format_function_body(self, name: str, body: Dict[str, Any]) -> Dict[str, Any]:
        """Shape triggers and timeout for the wire and drop projectId/region."""
        project_id = body.pop("projectId", None) or self.project_id
        region = body.pop("region", None) or self.region
        short_name = name.rsplit("/", 1)[-1]

        if body.get("gcsTrigger"):
            body["gcsTrigger"] = format_gcs_trigger(body["gcsTrigger"])
        elif body.get("pubsubTrigger"):
            body["pubsubTrigger"] = format_pubsub_trigger(
                project_id, body["pubsubTrigger"]
            )
        elif body.get("httpsTrigger"):
            body["httpsTrigger"] = {
                "url": format_https_trigger(project_id, region, short_name)
            }

        if isinstance(body.get("timeout"), (int, float)):
            body["timeout"] = {"seconds": body["timeout"]}
        return body

    def cloudfunction(self, name: str, **config: Any) -> CloudFunction:
        """Reference a function by name without calling the API."""
        return CloudFunction(self, name, **config)

    def operation(
        self,
        name: str,
        transform: Optional[Transform] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Operation:
        """Reference an operation by name.

        Raises ConfigurationError if name is empty.
        """
        return Operation(self, name, transform=transform, metadata=metadata)

    async def create_function(
        self, name: str, config: Optional[Dict[str, Any]] = None
    ) -> Operation:
        """Start creating a function.

        The returned operation completes with a CloudFunction carrying the
        server's view of the new function.
        """
        body = self.prepare_function_body(name, config)
        location = self.format_location(body["projectId"], body["region"])
        body = self.format_function_body(name, body)

        response = await self.api.functions.create_function(location, body)
        _log.info("Started creating function %s as %s", body["name"], response.get("name"))

        cloudfunction = self.cloudfunction(body["name"])
        return self.operation(
            response["name"],
            transform=cloudfunction.apply_operation_result,
            metadata=response,
        )

    async def get_functions(
        self,
        page_size: Optional[int] = None,
        page_token: Optional[str] = None,
        project_id: Optional[str] = None,
        region: Optional[str] = None,
    ) -> Tuple[List[CloudFunction], Optional[str]]:
        """Fetch one page of functions. Returns (functions, next_page_token)."""
        location = self.format_location(project_id, region)
        response = await self.api.functions.list_functions(
            location, page_size=page_size, page_token=page_token
        )
        cloudfunctions = []
        for metadata in response.get("functions") or []:
            cloudfunction = self.cloudfunction(metadata["name"])
            cloudfunction.metadata.update(metadata)
            cloudfunctions.append(cloudfunction)
        return cloudfunctions, response.get("nextPageToken") or None

    async def iter_functions(
        self,
        page_size: Optional[int] = None,
        project_id: Optional[str] = None,
        region: Optional[str] = None,
    ) -> AsyncIterator[CloudFunction]:
        """Yield every function, fetching pages as needed."""
        page_token: Optional[str] = None
        while True:
            cloudfunctions, page_token = await self.get_functions(
                page_size=page_size,
                page_token=page_token,
                project_id=project_id,
                region=region,
            )
            for cloudfunction in cloudfunctions:
                yield cloudfunction
            if not page_token:
                return

    def __repr__(self) -> str:
        return f"Functions(project_id={self.project_id!r}, region={self.region!r})"
