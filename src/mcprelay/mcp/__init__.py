"""MCP routing package."""

from .connections import MCPConnectionCache
from .router import MCPCallRouter
from .schema import get_mcp_tool_definitions
from .transport import MCPClientError, MCPConnectionError, SSETransport
from .types import FunctionCallOutput, MCPServerConfig

__all__ = [
    "FunctionCallOutput",
    "MCPCallRouter",
    "MCPClientError",
    "MCPConnectionCache",
    "MCPConnectionError",
    "MCPServerConfig",
    "SSETransport",
    "get_mcp_tool_definitions",
]
