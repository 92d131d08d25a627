"""Credential tool handlers."""

from __future__ import annotations

import logging
from typing import Any

from n8n_mcp.config import LIST_DEFAULTS
from n8n_mcp.core.dispatcher import Operation, ToolContext
from n8n_mcp.core.errors import RemoteApiError
from n8n_mcp.core.n8n_client import unwrap_collection
from n8n_mcp.core.results import Failure, OperationResult, Success, failure_from_remote
from n8n_mcp.mcp.tools.common import optional_object, parse_limit, required_string

logger = logging.getLogger(__name__)

_UNAVAILABLE_STATUSES = frozenset({404, 405})


def _unavailable(exc: RemoteApiError) -> Failure:
    return Failure(
        error="Credentials API not available",
        message="n8n credentials endpoint is not accessible (this is normal for security reasons)",
        status_code=exc.status_code,
        extras={"note": "Credentials management may be restricted in your n8n instance"},
    )


async def list_credentials(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    limit = parse_limit(arguments.get("limit"), default=LIST_DEFAULTS.credentials)
    async with context.client() as client:
        try:
            payload = await client.list_credentials(limit=limit)
        except RemoteApiError as exc:
            logger.warning("Error listing credentials: %s", exc)
            if exc.status_code in _UNAVAILABLE_STATUSES:
                return _unavailable(exc)
            return failure_from_remote(exc, "Failed to list credentials")
    items, _ = unwrap_collection(payload)
    return Success(
        data=items,
        message=f"Retrieved {len(items)} credentials successfully",
        extras={"count": len(items)},
    )


async def create_credential(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    name = required_string(arguments, "name")
    credential_type = required_string(arguments, "type")
    data = optional_object(arguments, "data") or {}
    async with context.client() as client:
        try:
            created = await client.create_credential(
                {"name": name, "type": credential_type, "data": data}
            )
        except RemoteApiError as exc:
            logger.warning("Error creating credential: %s", exc)
            if exc.status_code in _UNAVAILABLE_STATUSES:
                return _unavailable(exc)
            return failure_from_remote(exc, "Failed to create credential")
    return Success(data=created, message=f'Credential "{name}" created successfully')


async def delete_credential(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    credential_id = required_string(arguments, "credentialId")
    async with context.client() as client:
        try:
            await client.delete_credential(credential_id)
        except RemoteApiError as exc:
            logger.warning("Error deleting credential %s: %s", credential_id, exc)
            return failure_from_remote(exc, f"Failed to delete credential {credential_id}")
    return Success(
        data={"credentialId": credential_id},
        message=f"Credential {credential_id} deleted successfully",
    )


CREDENTIAL_OPERATIONS: tuple[Operation, ...] = (
    Operation("list_credentials", list_credentials),
    Operation("create_credential", create_credential),
    Operation("delete_credential", delete_credential),
)
