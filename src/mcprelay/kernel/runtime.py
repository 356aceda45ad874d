"""Runtime container wiring settings, the server registry, and the call router."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from mcprelay.config import Settings
from mcprelay.kernel.debug_log import DebugLogWriter
from mcprelay.mcp.config import build_server_registry, load_mcp_server_configs
from mcprelay.mcp.connections import MCPConnectionCache
from mcprelay.mcp.router import MCPCallRouter, default_client_info
from mcprelay.mcp.schema import get_mcp_tool_definitions
from mcprelay.mcp.transport import MCPTransport, SSETransport
from mcprelay.mcp.types import FunctionCallOutput, MCPServerConfig, ServerRegistry


class Runtime:
    def __init__(self, settings: Settings, transport: Optional[MCPTransport] = None) -> None:
        self.settings = settings
        self.debug_log = DebugLogWriter(
            logs_dir=settings.logs_dir,
            enabled=settings.logs_enabled,
            log_format=settings.logs_format,
            max_file_bytes=settings.logs_max_file_bytes,
            max_files=settings.logs_max_files,
            redaction=settings.logs_redaction,
        )

        self.server_configs: List[MCPServerConfig] = []
        self.config_errors: List[str] = []
        self.registry: ServerRegistry = {}
        self.reload_servers()

        self.client_info = default_client_info(settings.originator)
        self.connections = MCPConnectionCache(
            transport or SSETransport(),
            self.client_info,
            debug_log=self.debug_log,
        )
        self.router = MCPCallRouter(self.connections, debug_log=self.debug_log)

    def reload_servers(self) -> ServerRegistry:
        configs, errors = load_mcp_server_configs(self.settings.mcp_servers_file)
        self.server_configs = configs
        self.config_errors = errors
        self.registry = build_server_registry(configs)
        for error in errors:
            self.debug_log.write_entry(
                level="warn",
                component="config",
                kind="mcp.config",
                message=error,
                data={"file": str(self.settings.mcp_servers_file)},
            )
        return self.registry

    def tool_definitions(self) -> List[Dict[str, Any]]:
        return get_mcp_tool_definitions(self.registry)

    async def dispatch(
        self,
        server_name: str,
        raw_arguments: Optional[str],
        call_id: str,
    ) -> List[FunctionCallOutput]:
        return await self.router.dispatch(self.registry, server_name, raw_arguments, call_id)

    async def aclose(self) -> None:
        await self.connections.aclose()

    def doctor(self) -> Dict[str, Any]:
        report: Dict[str, Any] = {
            "project_root": str(self.settings.project_root),
            "config_root": str(self.settings.config_root),
            "mcp_servers_file": str(self.settings.mcp_servers_file),
            "client_name": self.client_info.name,
            "client_version": self.client_info.version,
            "mcp_servers": [
                {
                    "server_id": config.server_id,
                    "url": config.url,
                    "enabled": bool(config.enabled),
                }
                for config in self.server_configs
            ],
            "mcp_servers_enabled": len(self.registry),
            "mcp_errors": list(self.config_errors),
        }
        report.update(self.debug_log.status())
        return report
