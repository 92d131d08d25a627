"""Async REST client for the n8n public API."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from types import TracebackType
from typing import Any, Self, TypeAlias

import httpx

from n8n_mcp.config import Settings
from n8n_mcp.core.errors import RemoteApiError

logger = logging.getLogger(__name__)

JSONObject: TypeAlias = dict[str, Any]


def unwrap_resource(payload: Any) -> Any:
    """Return the resource from either `{...}` or `{"data": {...}}` bodies."""
    if isinstance(payload, dict) and "id" not in payload:
        inner = payload.get("data")
        if isinstance(inner, dict):
            return inner
    return payload


def unwrap_collection(payload: Any) -> tuple[list[Any], str | None]:
    """Return `(items, next_cursor)` from an n8n list response."""
    if isinstance(payload, list):
        return payload, None
    if isinstance(payload, dict):
        items = payload.get("data")
        cursor = payload.get("nextCursor")
        return (items if isinstance(items, list) else []), cursor
    return [], None


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        message = body.get("message") or body.get("error")
        if isinstance(message, str) and message:
            return message
    reason = response.reason_phrase or "error"
    return f"Request failed with status code {response.status_code} ({reason})"


class N8nClient:
    """Thin wrapper over `httpx.AsyncClient` bound to one API key."""

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=f"{self._base_url}/api/v1",
            headers={
                "X-N8N-API-KEY": api_key,
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: Mapping[str, Any] | None = None,
        json_data: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        `path` is relative to `/api/v1` unless it is an absolute URL.
        Raises `RemoteApiError` for transport failures and non-2xx responses.
        """
        try:
            response = await self._client.request(
                method,
                path,
                params=dict(params) if params else None,
                json=json_data,
            )
        except httpx.RequestError as exc:
            logger.debug("%s %s failed: %s", method, path, exc)
            raise RemoteApiError(str(exc) or exc.__class__.__name__) from exc

        logger.debug("%s %s -> %s", method, path, response.status_code)
        if response.is_error:
            raise RemoteApiError(
                _error_message(response),
                status_code=response.status_code,
                payload=_safe_json(response),
            )
        return _safe_json(response)

    # Workflows

    async def list_workflows(self, *, limit: int) -> Any:
        return await self.request("GET", "/workflows", params={"limit": limit})

    async def get_workflow(self, workflow_id: str) -> JSONObject:
        return unwrap_resource(await self.request("GET", f"/workflows/{workflow_id}"))

    async def create_workflow(self, payload: JSONObject) -> JSONObject:
        return unwrap_resource(await self.request("POST", "/workflows", json_data=payload))

    async def replace_workflow(self, workflow_id: str, payload: JSONObject) -> JSONObject:
        return unwrap_resource(
            await self.request("PUT", f"/workflows/{workflow_id}", json_data=payload)
        )

    async def delete_workflow(self, workflow_id: str) -> Any:
        return await self.request("DELETE", f"/workflows/{workflow_id}")

    async def toggle_workflow(self, workflow_id: str, *, active: bool) -> JSONObject:
        action = "activate" if active else "deactivate"
        return unwrap_resource(
            await self.request("POST", f"/workflows/{workflow_id}/{action}", json_data={})
        )

    # Executions

    async def list_executions(self, *, limit: int) -> Any:
        return await self.request("GET", "/executions", params={"limit": limit})

    async def get_execution(self, execution_id: str) -> JSONObject:
        return unwrap_resource(await self.request("GET", f"/executions/{execution_id}"))

    async def run_workflow(self, workflow_id: str, input_data: JSONObject) -> Any:
        return await self.request(
            "POST", f"{self._base_url}/rest/workflows/{workflow_id}/run", json_data=input_data
        )

    async def create_execution(self, workflow_id: str, input_data: JSONObject) -> Any:
        return await self.request(
            "POST", "/executions", json_data={"workflowId": workflow_id, "data": input_data}
        )

    # Credentials

    async def list_credentials(self, *, limit: int) -> Any:
        return await self.request("GET", "/credentials", params={"limit": limit})

    async def create_credential(self, payload: JSONObject) -> JSONObject:
        return unwrap_resource(await self.request("POST", "/credentials", json_data=payload))

    async def delete_credential(self, credential_id: str) -> Any:
        return await self.request("DELETE", f"/credentials/{credential_id}")

    # Node catalog

    async def list_node_types(self) -> Any:
        return await self.request("GET", f"{self._base_url}/types/nodes.json")


def _safe_json(response: httpx.Response) -> Any:
    if not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


class N8nClientFactory:
    """Build per-credential clients from settings."""

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings
        self._transport = transport

    def __call__(self, api_key: str) -> N8nClient:
        return N8nClient(
            base_url=self._settings.n8n_base_url,
            api_key=api_key,
            timeout=self._settings.request_timeout_seconds,
            transport=self._transport,
        )


READ_ONLY_WORKFLOW_FIELDS: frozenset[str] = frozenset(
    {
        "createdAt",
        "updatedAt",
        "id",
        "active",
        "isArchived",
        "versionId",
        "triggerCount",
        "shared",
        "tags",
        "staticData",
        "meta",
        "pinData",
    }
)


def replacement_body(resource: Mapping[str, Any], **overrides: Any) -> JSONObject:
    """Build a full-replace body from a fetched workflow plus overrides."""
    body = {key: value for key, value in resource.items() if key not in READ_ONLY_WORKFLOW_FIELDS}
    body.update(overrides)
    return body
