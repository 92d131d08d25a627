"""Handler table for every registered MCP tool."""

from __future__ import annotations

from n8n_mcp.config import Settings
from n8n_mcp.core.dispatcher import ClientFactory, Operation, OperationDispatcher
from n8n_mcp.mcp.server import registered_tool_names
from n8n_mcp.mcp.tools.credential_tools import CREDENTIAL_OPERATIONS
from n8n_mcp.mcp.tools.execution_tools import EXECUTION_OPERATIONS
from n8n_mcp.mcp.tools.node_tools import NODE_OPERATIONS
from n8n_mcp.mcp.tools.test_tools import TEST_OPERATIONS
from n8n_mcp.mcp.tools.workflow_tools import WORKFLOW_OPERATIONS


def default_operations() -> list[Operation]:
    return [
        *TEST_OPERATIONS,
        *WORKFLOW_OPERATIONS,
        *EXECUTION_OPERATIONS,
        *CREDENTIAL_OPERATIONS,
        *NODE_OPERATIONS,
    ]


def build_dispatcher(settings: Settings, client_factory: ClientFactory) -> OperationDispatcher:
    """Create the dispatcher and check it against the declared tool catalog."""
    dispatcher = OperationDispatcher(
        default_operations(), settings=settings, client_factory=client_factory
    )
    dispatcher.verify_registry(registered_tool_names())
    return dispatcher
