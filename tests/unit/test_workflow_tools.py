from __future__ import annotations

from typing import Any

import pytest

from n8n_mcp.core.errors import AuthenticationRequired, ValidationError
from n8n_mcp.core.results import Failure, Success
from n8n_mcp.core.sessions import SessionCredentialStore
from n8n_mcp.mcp.tools.workflow_tools import parse_workflow_tool_call
from tests.support.n8n_fakes import FakeN8n, make_dispatcher

NODE: dict[str, Any] = {
    "id": "n1",
    "name": "Start",
    "type": "n8n-nodes-base.manualTrigger",
    "position": [250, 300],
    "parameters": {},
}


def test_parse_list_workflows_defaults_limit() -> None:
    call = parse_workflow_tool_call("list_workflows", {})
    assert call is not None
    assert call.operation == "list"
    assert call.limit == 50


def test_parse_list_workflows_ignores_unusable_limit() -> None:
    call = parse_workflow_tool_call("list_workflows", {"limit": "ten"})
    assert call is not None
    assert call.limit == 50


def test_parse_get_workflow_accepts_numeric_id() -> None:
    call = parse_workflow_tool_call("get_workflow", {"workflowId": 42})
    assert call is not None
    assert call.workflow_id == "42"


def test_parse_get_workflow_requires_id() -> None:
    with pytest.raises(ValidationError, match="workflowId is required"):
        parse_workflow_tool_call("get_workflow", {"workflowId": "  "})


def test_parse_create_requires_nodes() -> None:
    with pytest.raises(ValidationError, match="Name and nodes array are required"):
        parse_workflow_tool_call("create_workflow", {"name": "demo", "nodes": []})


@pytest.mark.parametrize(
    ("node", "message"),
    [
        ({**NODE, "id": ""}, "name, type, and id"),
        ({k: v for k, v in NODE.items() if k != "type"}, "name, type, and id"),
        ({**NODE, "position": [1]}, r"position array with \[x, y\]"),
        ({**NODE, "position": "0,0"}, r"position array with \[x, y\]"),
    ],
)
def test_parse_create_validates_nodes(node: dict[str, Any], message: str) -> None:
    with pytest.raises(ValidationError, match=message):
        parse_workflow_tool_call("create_workflow", {"name": "demo", "nodes": [node]})


def test_parse_update_collects_non_null_fields() -> None:
    call = parse_workflow_tool_call(
        "update_workflow",
        {"workflowId": "wf-1", "name": "renamed", "nodes": None, "settings": {"a": 1}},
    )
    assert call is not None
    assert call.operation == "update"
    assert call.updates == {"name": "renamed", "settings": {"a": 1}}


def test_parse_non_workflow_tool_returns_none() -> None:
    assert parse_workflow_tool_call("list_executions", {}) is None


@pytest.mark.asyncio
async def test_list_workflows_reports_count() -> None:
    fake = FakeN8n()
    fake.add_workflow("one")
    fake.add_workflow("two")
    dispatcher = make_dispatcher(fake)

    result = await dispatcher.dispatch(
        "list_workflows", {"limit": 1}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Success)
    assert [item["name"] for item in result.data] == ["one"]
    assert result.extras == {"count": 1, "total": 1}
    assert result.message == "Retrieved 1 workflows successfully"


@pytest.mark.asyncio
async def test_create_then_update_workflow() -> None:
    fake = FakeN8n()
    dispatcher = make_dispatcher(fake)
    store = SessionCredentialStore()

    created = await dispatcher.dispatch(
        "create_workflow", {"name": "demo", "nodes": [NODE]}, {}, None, store
    )
    assert isinstance(created, Success)
    workflow_id = created.data["id"]
    assert created.message == f'Workflow "demo" created successfully with ID: {workflow_id}'

    updated = await dispatcher.dispatch(
        "update_workflow", {"workflowId": workflow_id, "name": "renamed"}, {}, None, store
    )

    assert isinstance(updated, Success)
    assert updated.data["name"] == "renamed"
    assert updated.data["nodes"] == [NODE]
    assert fake.workflows[workflow_id]["name"] == "renamed"


@pytest.mark.asyncio
async def test_get_missing_workflow_is_failure() -> None:
    dispatcher = make_dispatcher(FakeN8n())

    result = await dispatcher.dispatch(
        "get_workflow", {"workflowId": "nope"}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Failure)
    assert result.status_code == 404
    assert result.message == "Failed to get workflow nope: Not Found"


@pytest.mark.asyncio
async def test_delete_workflow_reports_id() -> None:
    fake = FakeN8n()
    workflow = fake.add_workflow("doomed")
    dispatcher = make_dispatcher(fake)

    result = await dispatcher.dispatch(
        "delete_workflow", {"workflowId": workflow["id"]}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Success)
    assert result.as_payload()["workflowId"] == workflow["id"]
    assert workflow["id"] not in fake.workflows


@pytest.mark.asyncio
async def test_activate_uses_direct_endpoint() -> None:
    fake = FakeN8n()
    workflow = fake.add_workflow("demo")
    dispatcher = make_dispatcher(fake)

    result = await dispatcher.dispatch(
        "activate_workflow", {"workflowId": workflow["id"]}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Success)
    assert result.message == f"Workflow {workflow['id']} activated successfully"
    assert result.extras == {"strategy": "direct", "alreadyInState": False}


@pytest.mark.asyncio
async def test_activate_falls_back_to_full_update() -> None:
    fake = FakeN8n(toggle_mode="missing")
    workflow = fake.add_workflow("demo")
    dispatcher = make_dispatcher(fake)

    result = await dispatcher.dispatch(
        "activate_workflow", {"workflowId": workflow["id"]}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Success)
    assert result.message.endswith("activated successfully via full update")
    assert fake.workflows[workflow["id"]]["active"] is True


@pytest.mark.asyncio
async def test_deactivate_when_already_inactive() -> None:
    fake = FakeN8n(toggle_mode="strict")
    workflow = fake.add_workflow("demo", active=False)
    dispatcher = make_dispatcher(fake)

    result = await dispatcher.dispatch(
        "deactivate_workflow", {"workflowId": workflow["id"]}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Success)
    assert result.message == f"Workflow {workflow['id']} was already inactive"
    assert result.extras["alreadyInState"] is True


@pytest.mark.asyncio
async def test_activate_failure_is_reported() -> None:
    fake = FakeN8n()
    fake.fail("POST", "/api/v1/workflows/*/activate", 500, "database locked")
    workflow = fake.add_workflow("demo")
    dispatcher = make_dispatcher(fake)

    result = await dispatcher.dispatch(
        "activate_workflow", {"workflowId": workflow["id"]}, {}, None, SessionCredentialStore()
    )

    assert isinstance(result, Failure)
    assert result.status_code == 500
    assert "database locked" in result.message


@pytest.mark.asyncio
async def test_handler_requires_a_credential() -> None:
    fake = FakeN8n()
    dispatcher = make_dispatcher(fake, default_key=None)

    with pytest.raises(AuthenticationRequired):
        await dispatcher.dispatch("list_workflows", {}, {}, None, SessionCredentialStore())

    assert fake.requests == []


@pytest.mark.asyncio
async def test_session_credential_reaches_n8n() -> None:
    fake = FakeN8n()
    dispatcher = make_dispatcher(fake, default_key=None)
    store = SessionCredentialStore()
    session_id = store.store("tok-C")

    result = await dispatcher.dispatch("list_workflows", {}, {}, session_id, store)

    assert isinstance(result, Success)
    assert fake.seen_keys == ["tok-C"]
