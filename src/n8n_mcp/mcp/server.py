"""n8n MCP server tool catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Final


@dataclass(slots=True)
class MCPTool:
    """MCP tool descriptor exposed for discovery."""

    name: str
    description: str
    input_schema: dict[str, Any] = field(default_factory=dict)

    def as_payload(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "inputSchema": self.input_schema,
        }


def _schema(
    properties: dict[str, dict[str, Any]] | None = None,
    required: list[str] | None = None,
) -> dict[str, Any]:
    return {"type": "object", "properties": properties or {}, "required": required or []}


def _string(description: str) -> dict[str, Any]:
    return {"type": "string", "description": description}


_WORKFLOW_ID: Final = {"workflowId": _string("The workflow ID")}

_REGISTERED_TOOLS: Final[list[MCPTool]] = [
    MCPTool(
        name="self_test",
        description="Test basic server functionality and n8n API connectivity",
        input_schema=_schema(),
    ),
    MCPTool(
        name="list_workflows",
        description="List all workflows in the n8n instance",
        input_schema=_schema(
            {"limit": {"type": "number", "description": "Number of workflows to return (default: 50)"}}
        ),
    ),
    MCPTool(
        name="get_workflow",
        description="Get detailed information about a specific workflow by ID",
        input_schema=_schema(_WORKFLOW_ID, ["workflowId"]),
    ),
    MCPTool(
        name="create_workflow",
        description="Create a new workflow in n8n",
        input_schema=_schema(
            {
                "name": _string("The workflow name"),
                "nodes": {"type": "array", "description": "Array of nodes for the workflow"},
                "connections": {"type": "object", "description": "Connections between nodes"},
                "settings": {"type": "object", "description": "Workflow settings"},
            },
            ["name", "nodes"],
        ),
    ),
    MCPTool(
        name="update_workflow",
        description="Update an existing workflow",
        input_schema=_schema(
            {
                **_WORKFLOW_ID,
                "name": _string("The workflow name"),
                "nodes": {"type": "array", "description": "Array of nodes for the workflow"},
                "connections": {"type": "object", "description": "Connections between nodes"},
                "settings": {"type": "object", "description": "Workflow settings"},
            },
            ["workflowId"],
        ),
    ),
    MCPTool(
        name="delete_workflow",
        description="Delete an existing workflow",
        input_schema=_schema(_WORKFLOW_ID, ["workflowId"]),
    ),
    MCPTool(
        name="activate_workflow",
        description="Activate a workflow",
        input_schema=_schema(_WORKFLOW_ID, ["workflowId"]),
    ),
    MCPTool(
        name="deactivate_workflow",
        description="Deactivate a workflow",
        input_schema=_schema(_WORKFLOW_ID, ["workflowId"]),
    ),
    MCPTool(
        name="list_executions",
        description="List workflow executions",
        input_schema=_schema(
            {
                "limit": {
                    "type": "number",
                    "description": "Number of executions to return (default: 10, max: 100)",
                }
            }
        ),
    ),
    MCPTool(
        name="get_execution",
        description="Get detailed information about a specific execution by ID",
        input_schema=_schema({"executionId": _string("The execution ID")}, ["executionId"]),
    ),
    MCPTool(
        name="execute_workflow",
        description="Execute a workflow manually with optional input data",
        input_schema=_schema(
            {
                **_WORKFLOW_ID,
                "inputData": {
                    "type": "object",
                    "description": "Optional input data for the workflow execution",
                    "default": {},
                },
            },
            ["workflowId"],
        ),
    ),
    MCPTool(
        name="list_credentials",
        description="List all credentials in the n8n instance",
        input_schema=_schema(
            {"limit": {"type": "number", "description": "Number of credentials to return (default: 50)"}}
        ),
    ),
    MCPTool(
        name="create_credential",
        description="Create a new credential",
        input_schema=_schema(
            {
                "name": _string("The credential name"),
                "type": _string("The credential type (e.g., 'httpBasicAuth', 'telegramApi')"),
                "data": {"type": "object", "description": "The credential data/configuration"},
            },
            ["name", "type"],
        ),
    ),
    MCPTool(
        name="delete_credential",
        description="Delete an existing credential",
        input_schema=_schema({"credentialId": _string("The credential ID")}, ["credentialId"]),
    ),
    MCPTool(
        name="list_nodes",
        description="List all available node types that n8n currently supports",
        input_schema=_schema(),
    ),
]


def registered_tools() -> list[MCPTool]:
    """Return all n8n MCP tools."""
    return list(_REGISTERED_TOOLS)


def registered_tool_names() -> list[str]:
    return [tool.name for tool in _REGISTERED_TOOLS]


def find_tool(name: str) -> MCPTool | None:
    """Look up one MCP tool by name."""
    for tool in _REGISTERED_TOOLS:
        if tool.name == name:
            return tool
    return None
