"""Workflow tool handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Literal, TypeAlias

from n8n_mcp.config import LIST_DEFAULTS
from n8n_mcp.core.dispatcher import Operation, ToolContext
from n8n_mcp.core.errors import RemoteApiError, ValidationError
from n8n_mcp.core.n8n_client import replacement_body, unwrap_collection
from n8n_mcp.core.reconciliation import ReconcileState, ReconciliationEngine, state_label
from n8n_mcp.core.results import OperationResult, Success, failure_from_remote
from n8n_mcp.mcp.tools.common import optional_object, parse_limit, required_string

logger = logging.getLogger(__name__)

WorkflowOperation: TypeAlias = Literal[
    "list", "get", "create", "update", "delete", "activate", "deactivate"
]


@dataclass(slots=True)
class WorkflowToolCall:
    """Canonical workflow tool call payload."""

    operation: WorkflowOperation
    workflow_id: str | None = None
    limit: int | None = None
    name: str | None = None
    nodes: list[dict[str, Any]] | None = None
    connections: dict[str, Any] = field(default_factory=dict)
    settings: dict[str, Any] = field(default_factory=dict)
    updates: dict[str, Any] = field(default_factory=dict)


_WORKFLOW_TOOL_OPERATIONS: dict[str, WorkflowOperation] = {
    "list_workflows": "list",
    "get_workflow": "get",
    "create_workflow": "create",
    "update_workflow": "update",
    "delete_workflow": "delete",
    "activate_workflow": "activate",
    "deactivate_workflow": "deactivate",
}


def parse_workflow_tool_call(tool_name: str, arguments: dict[str, Any]) -> WorkflowToolCall | None:
    """Parse a workflow tool call into a normalized payload.

    Returns `None` when the tool is not a workflow tool.
    Raises `ValidationError` for malformed arguments.
    """
    operation = _WORKFLOW_TOOL_OPERATIONS.get(tool_name)
    if operation is None:
        return None

    if operation == "list":
        limit = parse_limit(arguments.get("limit"), default=LIST_DEFAULTS.workflows)
        return WorkflowToolCall(operation="list", limit=limit)

    if operation == "create":
        name = required_string(arguments, "name")
        nodes = arguments.get("nodes")
        if not isinstance(nodes, list) or not nodes:
            msg = "Name and nodes array are required"
            raise ValidationError(msg)
        validate_nodes(nodes)
        return WorkflowToolCall(
            operation="create",
            name=name,
            nodes=nodes,
            connections=optional_object(arguments, "connections") or {},
            settings=optional_object(arguments, "settings") or {},
        )

    workflow_id = required_string(arguments, "workflowId")

    if operation == "update":
        updates = {
            key: value
            for key, value in arguments.items()
            if key != "workflowId" and value is not None
        }
        nodes = updates.get("nodes")
        if nodes is not None:
            if not isinstance(nodes, list):
                msg = "nodes must be an array"
                raise ValidationError(msg)
            validate_nodes(nodes)
        return WorkflowToolCall(operation="update", workflow_id=workflow_id, updates=updates)

    return WorkflowToolCall(operation=operation, workflow_id=workflow_id)


def validate_nodes(nodes: list[Any]) -> None:
    for node in nodes:
        if not isinstance(node, dict):
            msg = "Each node must be an object"
            raise ValidationError(msg)
        if not node.get("name") or not node.get("type") or not node.get("id"):
            msg = "Each node must have name, type, and id fields"
            raise ValidationError(msg)
        position = node.get("position")
        if not isinstance(position, list | tuple) or len(position) != 2:
            msg = "Each node must have a position array with [x, y] coordinates"
            raise ValidationError(msg)


def _parse(tool_name: str, arguments: dict[str, Any]) -> WorkflowToolCall:
    call = parse_workflow_tool_call(tool_name, arguments)
    if call is None:  # pragma: no cover - handler table guarantees the name
        msg = f"Not a workflow tool: {tool_name}"
        raise ValidationError(msg)
    return call


async def list_workflows(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("list_workflows", arguments)
    limit = call.limit or LIST_DEFAULTS.workflows
    async with context.client() as client:
        try:
            payload = await client.list_workflows(limit=limit)
        except RemoteApiError as exc:
            logger.warning("Error listing workflows: %s", exc)
            return failure_from_remote(exc, "Failed to list workflows")
    items, cursor = unwrap_collection(payload)
    return Success(
        data=items,
        message=f"Retrieved {len(items)} workflows successfully",
        extras={"count": len(items), "total": "More available" if cursor else len(items)},
    )


async def get_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("get_workflow", arguments)
    workflow_id = str(call.workflow_id)
    async with context.client() as client:
        try:
            workflow = await client.get_workflow(workflow_id)
        except RemoteApiError as exc:
            logger.warning("Error getting workflow %s: %s", workflow_id, exc)
            return failure_from_remote(exc, f"Failed to get workflow {workflow_id}")
    return Success(data=workflow, message=f"Workflow {workflow_id} retrieved successfully")


async def create_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("create_workflow", arguments)
    payload = {
        "name": call.name,
        "nodes": call.nodes,
        "connections": call.connections,
        "settings": call.settings,
    }
    async with context.client() as client:
        try:
            created = await client.create_workflow(payload)
        except RemoteApiError as exc:
            logger.warning("Error creating workflow: %s", exc)
            return failure_from_remote(exc, "Failed to create workflow")
    created_id = created.get("id") if isinstance(created, dict) else None
    return Success(
        data=created,
        message=f'Workflow "{call.name}" created successfully with ID: {created_id}',
    )


async def update_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("update_workflow", arguments)
    workflow_id = str(call.workflow_id)
    async with context.client() as client:
        try:
            current = await client.get_workflow(workflow_id)
            updated = await client.replace_workflow(
                workflow_id, replacement_body(current, **call.updates)
            )
        except RemoteApiError as exc:
            logger.warning("Error updating workflow %s: %s", workflow_id, exc)
            return failure_from_remote(exc, f"Failed to update workflow {workflow_id}")
    name = updated.get("name") if isinstance(updated, dict) else None
    return Success(data=updated, message=f'Workflow "{name}" ({workflow_id}) updated successfully')


async def delete_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("delete_workflow", arguments)
    workflow_id = str(call.workflow_id)
    async with context.client() as client:
        try:
            await client.delete_workflow(workflow_id)
        except RemoteApiError as exc:
            logger.warning("Error deleting workflow %s: %s", workflow_id, exc)
            return failure_from_remote(
                exc, "Failed to delete workflow", workflowId=workflow_id
            )
    return Success(
        data={"workflowId": workflow_id},
        message=f"Workflow {workflow_id} deleted successfully",
        extras={"workflowId": workflow_id},
    )


async def _set_active(
    tool_name: str, arguments: dict[str, Any], context: ToolContext, *, active: bool
) -> OperationResult:
    call = _parse(tool_name, arguments)
    workflow_id = str(call.workflow_id)
    verb = "activate" if active else "deactivate"
    async with context.client() as client:
        try:
            outcome = await ReconciliationEngine(client).reconcile(workflow_id, active=active)
        except RemoteApiError as exc:
            logger.warning("Error trying to %s workflow %s: %s", verb, workflow_id, exc)
            return failure_from_remote(exc, f"Failed to {verb} workflow {workflow_id}")

    if outcome.already_in_state:
        message = f"Workflow {workflow_id} was already {state_label(active)}"
    elif outcome.strategy is ReconcileState.FULL_UPDATE:
        message = f"Workflow {workflow_id} {verb}d successfully via full update"
    else:
        message = f"Workflow {workflow_id} {verb}d successfully"
    return Success(
        data=outcome.resource,
        message=message,
        extras={"strategy": outcome.strategy.value, "alreadyInState": outcome.already_in_state},
    )


async def activate_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    return await _set_active("activate_workflow", arguments, context, active=True)


async def deactivate_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    return await _set_active("deactivate_workflow", arguments, context, active=False)


WORKFLOW_OPERATIONS: tuple[Operation, ...] = (
    Operation("list_workflows", list_workflows),
    Operation("get_workflow", get_workflow),
    Operation("create_workflow", create_workflow),
    Operation("update_workflow", update_workflow),
    Operation("delete_workflow", delete_workflow),
    Operation("activate_workflow", activate_workflow),
    Operation("deactivate_workflow", deactivate_workflow),
)
