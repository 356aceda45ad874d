"""Transport capability for reaching MCP servers, with the default SSE client."""

from __future__ import annotations

from contextlib import AsyncExitStack
from typing import Any, Dict, Optional, Protocol

from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.types import Implementation

from mcprelay.mcp.types import ClientInfo


class MCPClientError(RuntimeError):
    """Raised for MCP transport/protocol failures."""


class MCPConnectionError(MCPClientError):
    """Raised when a connection to an MCP server cannot be established."""

    def __init__(self, server_name: str, url: str, cause: object) -> None:
        self.server_name = server_name
        self.url = url
        super().__init__(
            "failed to connect to MCP server '{0}' at {1}: {2}".format(server_name, url, cause)
        )


class MCPConnection(Protocol):
    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        ...

    async def close(self) -> None:
        ...


class MCPTransport(Protocol):
    async def connect(self, server_name: str, url: str, client_info: ClientInfo) -> MCPConnection:
        ...


class SSEConnection:
    """One initialized MCP client session over an SSE stream."""

    def __init__(self, server_name: str, session: ClientSession, stack: AsyncExitStack) -> None:
        self.server_name = server_name
        self._session = session
        self._stack: Optional[AsyncExitStack] = stack

    @property
    def closed(self) -> bool:
        return self._stack is None

    async def call_tool(self, name: str, arguments: Dict[str, Any]) -> Any:
        if self._stack is None:
            raise MCPClientError("mcp connection closed: {0}".format(self.server_name))
        return await self._session.call_tool(name, arguments)

    async def close(self) -> None:
        stack = self._stack
        self._stack = None
        if stack is None:
            return
        await stack.aclose()


class SSETransport:
    """Connects with the MCP SDK SSE client and runs the initialize handshake."""

    def __init__(self, headers: Optional[Dict[str, str]] = None) -> None:
        self._headers = dict(headers or {})

    async def connect(self, server_name: str, url: str, client_info: ClientInfo) -> SSEConnection:
        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(
                sse_client(url, headers=self._headers or None)
            )
            session = await stack.enter_async_context(
                ClientSession(
                    read_stream,
                    write_stream,
                    client_info=Implementation(
                        name=client_info.name,
                        version=client_info.version,
                    ),
                )
            )
            await session.initialize()
        except Exception as exc:
            try:
                await stack.aclose()
            except Exception:
                pass
            raise MCPConnectionError(server_name, url, describe_error(exc)) from exc
        return SSEConnection(server_name, session, stack)


def describe_error(exc: BaseException) -> str:
    # anyio task groups wrap the real failure in an exception group.
    members = getattr(exc, "exceptions", None)
    if isinstance(members, (list, tuple)) and len(members) == 1:
        return describe_error(members[0])
    return str(exc) or type(exc).__name__
