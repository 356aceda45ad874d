"""Lazily created, per-server MCP connection cache."""

from __future__ import annotations

import asyncio
from typing import Dict, List, Optional

from mcprelay.kernel.debug_log import DebugLogWriter
from mcprelay.mcp.transport import MCPConnection, MCPTransport, describe_error
from mcprelay.mcp.types import ClientInfo


class MCPConnectionCache:
    """Holds at most one live connection per server name.

    The first caller for a server connects while holding that server's lock;
    concurrent callers wait on the lock and then reuse the cached entry. A
    failed connect leaves no entry, so a later call tries again.
    """

    def __init__(
        self,
        transport: MCPTransport,
        client_info: ClientInfo,
        debug_log: Optional[DebugLogWriter] = None,
    ) -> None:
        self._transport = transport
        self._client_info = client_info
        self._debug_log = debug_log
        self._connections: Dict[str, MCPConnection] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    @property
    def client_info(self) -> ClientInfo:
        return self._client_info

    def __contains__(self, server_name: object) -> bool:
        return server_name in self._connections

    def __len__(self) -> int:
        return len(self._connections)

    def get(self, server_name: str) -> Optional[MCPConnection]:
        return self._connections.get(server_name)

    def server_names(self) -> List[str]:
        return list(self._connections.keys())

    async def get_or_connect(self, server_name: str, url: str) -> MCPConnection:
        connection = self._connections.get(server_name)
        if connection is not None:
            return connection

        lock = self._locks.setdefault(server_name, asyncio.Lock())
        async with lock:
            connection = self._connections.get(server_name)
            if connection is not None:
                return connection

            self._log("info", "mcp.connect", "connecting", server_name, {"url": url})
            try:
                connection = await self._transport.connect(server_name, url, self._client_info)
            except Exception as exc:
                self._log(
                    "error",
                    "mcp.connect",
                    "connect failed: {0}".format(describe_error(exc)),
                    server_name,
                    {"url": url},
                )
                raise
            self._connections[server_name] = connection
            self._log("info", "mcp.connect", "connected", server_name, {"url": url})
            return connection

    async def aclose(self) -> None:
        """Close every cached connection; for use at process shutdown."""

        connections = self._connections
        self._connections = {}
        self._locks = {}
        for server_name, connection in connections.items():
            try:
                await connection.close()
            except Exception as exc:
                self._log(
                    "error",
                    "mcp.close",
                    "close failed: {0}".format(describe_error(exc)),
                    server_name,
                    {},
                )

    def _log(self, level: str, kind: str, message: str, server_name: str, data: Dict[str, object]) -> None:
        if self._debug_log is None:
            return
        self._debug_log.write_entry(
            level=level,
            kind=kind,
            message=message,
            server=server_name,
            data=dict(data),
        )
