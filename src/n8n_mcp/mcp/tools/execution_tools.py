"""Execution tool handlers."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Final, Literal, TypeAlias

from n8n_mcp.config import LIST_DEFAULTS
from n8n_mcp.core.dispatcher import Operation, ToolContext
from n8n_mcp.core.errors import RemoteApiError, ValidationError
from n8n_mcp.core.n8n_client import unwrap_collection
from n8n_mcp.core.results import Failure, OperationResult, Success, failure_from_remote
from n8n_mcp.mcp.tools.common import optional_object, parse_limit, required_string

logger = logging.getLogger(__name__)

ExecutionOperation: TypeAlias = Literal["list", "get", "execute"]

WEBHOOK_RECOMMENDATION: Final = (
    "Use webhook triggers with Execute Workflow nodes for API-based workflow execution"
)


@dataclass(slots=True)
class ExecutionToolCall:
    """Canonical execution tool call payload."""

    operation: ExecutionOperation
    execution_id: str | None = None
    workflow_id: str | None = None
    limit: int | None = None
    input_data: dict[str, Any] = field(default_factory=dict)


_EXECUTION_TOOL_OPERATIONS: dict[str, ExecutionOperation] = {
    "list_executions": "list",
    "get_execution": "get",
    "execute_workflow": "execute",
}


def parse_execution_tool_call(
    tool_name: str, arguments: dict[str, Any]
) -> ExecutionToolCall | None:
    """Parse an execution tool call; `None` when the tool is not one."""
    operation = _EXECUTION_TOOL_OPERATIONS.get(tool_name)
    if operation is None:
        return None
    if operation == "list":
        limit = parse_limit(
            arguments.get("limit"),
            default=LIST_DEFAULTS.executions,
            maximum=LIST_DEFAULTS.max_executions,
        )
        return ExecutionToolCall(operation="list", limit=limit)
    if operation == "get":
        return ExecutionToolCall(
            operation="get", execution_id=required_string(arguments, "executionId")
        )
    return ExecutionToolCall(
        operation="execute",
        workflow_id=required_string(arguments, "workflowId"),
        input_data=optional_object(arguments, "inputData") or {},
    )


def _parse(tool_name: str, arguments: dict[str, Any]) -> ExecutionToolCall:
    call = parse_execution_tool_call(tool_name, arguments)
    if call is None:  # pragma: no cover - handler table guarantees the name
        msg = f"Not an execution tool: {tool_name}"
        raise ValidationError(msg)
    return call


async def list_executions(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("list_executions", arguments)
    async with context.client() as client:
        try:
            payload = await client.list_executions(limit=call.limit or LIST_DEFAULTS.executions)
        except RemoteApiError as exc:
            logger.warning("Error listing executions: %s", exc)
            return failure_from_remote(exc, "Failed to list executions")
    items, cursor = unwrap_collection(payload)
    return Success(
        data=items,
        message=f"Retrieved {len(items)} executions successfully",
        extras={"count": len(items), "total": "More available" if cursor else len(items)},
    )


async def get_execution(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    call = _parse("get_execution", arguments)
    execution_id = str(call.execution_id)
    async with context.client() as client:
        try:
            execution = await client.get_execution(execution_id)
        except RemoteApiError as exc:
            return failure_from_remote(exc, f"Failed to get execution {execution_id}")
    return Success(data=execution, message=f"Execution {execution_id} retrieved successfully")


async def execute_workflow(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    """Run a workflow through n8n's internal run endpoint.

    The public API has no execution endpoint; `/rest/workflows/{id}/run` is
    internal and may reject API-key auth. A 405 falls back to `POST /executions`.
    """
    call = _parse("execute_workflow", arguments)
    workflow_id = str(call.workflow_id)
    async with context.client() as client:
        try:
            response = await client.run_workflow(workflow_id, call.input_data)
        except RemoteApiError as exc:
            if exc.status_code != 405:
                return _execution_failure(workflow_id, exc)
            try:
                response = await client.create_execution(workflow_id, call.input_data)
            except RemoteApiError:
                return _execution_failure(workflow_id, exc)

    execution_id = None
    if isinstance(response, dict):
        execution_id = response.get("id") or response.get("executionId")
    return Success(
        data=response,
        message=f"Workflow {workflow_id} executed successfully via internal API endpoint",
        extras={
            "executionId": execution_id,
            "note": "This uses n8n's internal API which may not work in all environments",
        },
    )


def _execution_failure(workflow_id: str, exc: RemoteApiError) -> Failure:
    if exc.status_code == 401:
        error = (
            "Unauthorized - The /rest/workflows/{id}/run endpoint is an internal API that "
            "requires different authentication than the public API. Consider implementing "
            "webhook-based workflow execution instead."
        )
    elif exc.status_code == 404:
        error = "Workflow not found or not accessible for execution via internal API"
    else:
        error = exc.message
    logger.warning("Error executing workflow %s: %s", workflow_id, error)
    return Failure(
        error=error,
        message=f"Failed to execute workflow {workflow_id}: {error}",
        status_code=exc.status_code,
        extras={
            "recommendation": (
                "For production use, implement webhook-based workflow execution as "
                "recommended by n8n"
            )
            if exc.status_code not in {401, 404}
            else WEBHOOK_RECOMMENDATION
        },
    )


EXECUTION_OPERATIONS: tuple[Operation, ...] = (
    Operation("list_executions", list_executions),
    Operation("get_execution", get_execution),
    Operation("execute_workflow", execute_workflow),
)
