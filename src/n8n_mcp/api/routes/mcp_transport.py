"""MCP JSON-RPC transport endpoint."""

from __future__ import annotations

import json
import logging
from typing import Any, Final

from fastapi import APIRouter, Depends, HTTPException, Request, Response, status

from n8n_mcp.api.deps import get_dispatcher, get_session_store
from n8n_mcp.core.credentials import resolve_credential
from n8n_mcp.core.dispatcher import OperationDispatcher
from n8n_mcp.core.errors import AuthenticationRequired, OperationNotFound, ValidationError
from n8n_mcp.core.results import Failure, OperationResult
from n8n_mcp.core.sessions import SessionCredentialStore, store_client_credentials
from n8n_mcp.mcp.server import find_tool, registered_tools

logger = logging.getLogger(__name__)

router = APIRouter(tags=["mcp-transport"])

SESSION_HEADER: Final = "mcp-session-id"
PROTOCOL_VERSION: Final = "2025-06-18"


def _response(request_id: str | int | None, result: Any) -> dict[str, Any]:
    return {"jsonrpc": "2.0", "id": request_id, "result": result}


def _error(
    request_id: str | int | None,
    code: int,
    message: str,
    data: dict[str, Any] | None = None,
) -> dict[str, Any]:
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return {"jsonrpc": "2.0", "id": request_id, "error": error}


def _tool_result(result: OperationResult) -> dict[str, Any]:
    return {
        "content": [{"type": "text", "text": json.dumps(result.as_payload(), indent=2)}],
        "isError": not result.success,
    }


@router.post("/mcp")
async def mcp_transport(
    payload: dict[str, Any],
    request: Request,
    response: Response,
    dispatcher: OperationDispatcher = Depends(get_dispatcher),
    store: SessionCredentialStore = Depends(get_session_store),
) -> dict[str, Any]:
    request_id = payload.get("id")
    method = payload.get("method")
    params = payload.get("params", {})
    headers = dict(request.headers)
    session_id = request.headers.get(SESSION_HEADER)

    if not isinstance(method, str):
        return _error(request_id, -32600, "Invalid method")
    if params is None:
        params = {}
    if not isinstance(params, dict):
        return _error(request_id, -32602, "Invalid params")

    if method == "initialize":
        new_session = store_client_credentials(headers, store)
        if new_session is not None:
            response.headers[SESSION_HEADER] = new_session
        return _response(
            request_id,
            {
                "protocolVersion": PROTOCOL_VERSION,
                "serverInfo": {"name": "n8n-mcp", "version": "0.1.0"},
                "capabilities": {"tools": {"listChanged": False}},
            },
        )

    if method in {"notifications/initialized", "ping"}:
        return _response(request_id, {})

    if method == "tools/list":
        return _response(request_id, {"tools": [tool.as_payload() for tool in registered_tools()]})

    if method == "tools/call":
        tool_name = params.get("name")
        arguments = params.get("arguments") or {}
        if not isinstance(tool_name, str):
            return _error(request_id, -32602, "Missing tool name")
        if not isinstance(arguments, dict):
            return _error(request_id, -32602, "Invalid tool arguments")
        if find_tool(tool_name) is None:
            return _error(request_id, OperationNotFound.code, f"Unknown tool: {tool_name}")

        try:
            resolve_credential(session_id, headers, store, dispatcher.settings.default_credential)
        except AuthenticationRequired as exc:
            return _error(request_id, exc.code, str(exc), exc.as_payload())

        try:
            result = await dispatcher.dispatch(tool_name, arguments, headers, session_id, store)
        except OperationNotFound as exc:
            return _error(request_id, exc.code, str(exc))
        except AuthenticationRequired as exc:
            return _error(request_id, exc.code, str(exc), exc.as_payload())
        except ValidationError as exc:
            result = Failure(
                error=str(exc),
                message=f"Invalid arguments for {tool_name}: {exc}",
                status_code="validation",
            )
        except Exception as exc:
            logger.exception("Tool %s raised", tool_name)
            return _error(request_id, -32000, str(exc))
        return _response(request_id, _tool_result(result))

    return _error(request_id, -32601, f"Unknown method: {method}")


@router.delete("/mcp")
async def close_session(
    request: Request,
    store: SessionCredentialStore = Depends(get_session_store),
) -> dict[str, str]:
    session_id = request.headers.get(SESSION_HEADER)
    if not session_id or not store.drop(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return {"status": "closed"}
