"""Node-type catalog handler."""

from __future__ import annotations

import logging
from collections import Counter
from typing import Any

from n8n_mcp.core.dispatcher import Operation, ToolContext
from n8n_mcp.core.errors import RemoteApiError
from n8n_mcp.core.results import OperationResult, Success, failure_from_remote

logger = logging.getLogger(__name__)


def _iter_node_types(payload: Any) -> list[dict[str, Any]]:
    # nodes.json is a list on current n8n releases and a name-keyed mapping on older ones
    if isinstance(payload, list):
        return [node for node in payload if isinstance(node, dict)]
    if isinstance(payload, dict):
        nodes = []
        for name, node in payload.items():
            if isinstance(node, dict):
                nodes.append({"name": name, **node})
        return nodes
    return []


def summarize_node_types(payload: Any) -> tuple[dict[str, list[dict[str, Any]]], dict[str, int]]:
    """Group node types by their first group; return `(by_group, counts)`."""
    by_group: dict[str, list[dict[str, Any]]] = {}
    counts: Counter[str] = Counter()
    for node in _iter_node_types(payload):
        groups = node.get("group")
        group = groups[0] if isinstance(groups, list) and groups else "unknown"
        by_group.setdefault(group, []).append(
            {
                "name": node.get("name"),
                "displayName": node.get("displayName"),
                "description": node.get("description"),
                "version": node.get("version"),
                "usableAsTool": bool(node.get("usableAsTool", False)),
            }
        )
        counts[group] += 1
    return by_group, dict(counts)


async def list_nodes(arguments: dict[str, Any], context: ToolContext) -> OperationResult:
    async with context.client() as client:
        try:
            payload = await client.list_node_types()
        except RemoteApiError as exc:
            logger.warning("Failed to list node types: %s", exc)
            return failure_from_remote(exc, "Failed to list node types")

    by_group, counts = summarize_node_types(payload)
    total = sum(counts.values())
    return Success(
        data={"nodesByGroup": by_group, "summary": counts},
        message=f"Retrieved {total} available node types grouped by category",
        extras={"totalNodes": total},
    )


NODE_OPERATIONS: tuple[Operation, ...] = (Operation("list_nodes", list_nodes),)
