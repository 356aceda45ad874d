"""Function-call schema for configured MCP servers."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional


def _server_parameters() -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {
            "name": {"type": "string", "description": "Tool name"},
            "args": {"type": "object", "description": "Tool args"},
        },
        "required": ["name", "args"],
        "additionalProperties": False,
    }


def get_mcp_tool_definitions(
    servers: Optional[Mapping[str, Mapping[str, Any]]] = None,
) -> List[Dict[str, Any]]:
    """Return one function descriptor per server, in registry order.

    Server names are used verbatim as function names, so they must already be
    valid identifiers for the planner.
    """

    if not servers:
        return []
    return [
        {
            "type": "function",
            "name": server_name,
            "description": "Call remote MCP server '{0}' tool".format(server_name),
            "strict": False,
            "parameters": _server_parameters(),
        }
        for server_name in servers
    ]
