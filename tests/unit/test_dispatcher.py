from __future__ import annotations

from typing import Any

import pytest

from n8n_mcp.core.dispatcher import Operation, OperationDispatcher, ToolContext
from n8n_mcp.core.errors import OperationNotFound, RemoteApiError
from n8n_mcp.core.n8n_client import N8nClientFactory
from n8n_mcp.core.results import OperationResult, Success
from n8n_mcp.core.sessions import SessionCredentialStore
from n8n_mcp.mcp.server import registered_tool_names
from n8n_mcp.mcp.tools.handlers import build_dispatcher, default_operations
from tests.support.n8n_fakes import make_settings


def _dispatcher(*operations: Operation) -> OperationDispatcher:
    settings = make_settings()
    return OperationDispatcher(
        operations, settings=settings, client_factory=N8nClientFactory(settings)
    )


async def handler_x(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    return Success(
        data={"args": arguments, "session": context.session_id},
        message="x",
    )


@pytest.mark.asyncio
async def test_unregistered_name_raises_operation_not_found() -> None:
    dispatcher = _dispatcher(Operation("list_x", handler_x))

    with pytest.raises(OperationNotFound, match="list_y"):
        await dispatcher.dispatch("list_y", {}, {}, None, SessionCredentialStore())


@pytest.mark.asyncio
async def test_dispatch_returns_handler_result_unchanged() -> None:
    dispatcher = _dispatcher(Operation("list_x", handler_x))

    result = await dispatcher.dispatch("list_x", {"limit": 2}, {}, "s1", SessionCredentialStore())

    assert isinstance(result, Success)
    assert result.data == {"args": {"limit": 2}, "session": "s1"}


@pytest.mark.asyncio
async def test_dispatch_does_not_catch_handler_errors() -> None:
    async def broken(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
        raise RemoteApiError("boom", status_code=500)

    dispatcher = _dispatcher(Operation("broken", broken))

    with pytest.raises(RemoteApiError, match="boom"):
        await dispatcher.dispatch("broken", {}, {}, None, SessionCredentialStore())


def test_duplicate_registration_is_rejected() -> None:
    with pytest.raises(ValueError, match="already registered"):
        _dispatcher(Operation("list_x", handler_x), Operation("list_x", handler_x))


def test_verify_registry_reports_both_directions() -> None:
    dispatcher = _dispatcher(Operation("list_x", handler_x))

    with pytest.raises(RuntimeError, match=r"missing handlers=\['list_y'\].*\['list_x'\]"):
        dispatcher.verify_registry(["list_y"])

    dispatcher.verify_registry(["list_x"])


def test_default_handlers_match_declared_tools_exactly() -> None:
    names = [operation.name for operation in default_operations()]

    assert len(names) == len(set(names))
    assert set(names) == set(registered_tool_names())


def test_build_dispatcher_verifies_registry() -> None:
    settings = make_settings()
    dispatcher = build_dispatcher(settings, N8nClientFactory(settings))

    assert dispatcher.names() == frozenset(registered_tool_names())
