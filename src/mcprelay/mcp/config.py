"""MCP servers file loading."""

from __future__ import annotations

import re
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Tuple
from urllib.parse import urlparse

if sys.version_info >= (3, 11):  # pragma: no cover - Python 3.11+
    import tomllib
else:  # pragma: no cover - Python 3.10
    import tomli as tomllib

from mcprelay.mcp.types import MCPServerConfig, ServerRegistry

_SERVER_ID_RE = re.compile(r"^[A-Za-z0-9_-]+$")


def _valid_url(url: str) -> bool:
    parsed = urlparse(url)
    return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def load_mcp_server_configs(path: Path) -> Tuple[List[MCPServerConfig], List[str]]:
    if not path.exists():
        return [], ["missing mcp config: {0}".format(path)]

    try:
        raw = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        return [], ["invalid mcp config: {0}".format(exc)]

    rows = raw.get("servers")
    if rows is None:
        return [], []
    if not isinstance(rows, list):
        return [], ["invalid mcp config: servers must be an array"]

    configs: List[MCPServerConfig] = []
    errors: List[str] = []
    seen_ids: Dict[str, bool] = {}
    for index, row in enumerate(rows):
        if not isinstance(row, dict):
            errors.append("servers[{0}] must be a table".format(index))
            continue

        server_id = str(row.get("id") or "").strip()
        url = str(row.get("url") or "").strip()
        enabled = bool(row.get("enabled", True))

        if not server_id:
            errors.append("servers[{0}] missing id".format(index))
            continue
        if not _SERVER_ID_RE.match(server_id):
            errors.append(
                "servers[{0}] id must only use letters, digits, '_' or '-': {1}".format(index, server_id)
            )
            continue
        if not url:
            errors.append("servers[{0}] missing url".format(index))
            continue
        if not _valid_url(url):
            errors.append("servers[{0}] url must be http(s): {1}".format(index, url))
            continue
        if server_id in seen_ids:
            errors.append("duplicate mcp server id: {0}".format(server_id))
            continue

        seen_ids[server_id] = True
        configs.append(MCPServerConfig(server_id=server_id, url=url, enabled=enabled))

    return configs, errors


def build_server_registry(configs: Iterable[MCPServerConfig]) -> ServerRegistry:
    """Enabled servers as `{name: {"url": ...}}`, in file order."""

    return {config.server_id: {"url": config.url} for config in configs if config.enabled}
