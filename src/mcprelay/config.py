"""Configuration loading and directory resolution for mcprelay."""

from __future__ import annotations

import shutil
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

if sys.version_info >= (3, 11):  # pragma: no cover - Python 3.11+
    import tomllib
else:  # pragma: no cover - Python 3.10
    import tomli as tomllib

CONFIG_DIR_NAME = ".mcprelay_config"
CONFIG_FILE_NAME = "config.toml"
MCP_DIR_NAME = "mcp"
MCP_SERVERS_FILE_NAME = "servers.toml"
LOGS_DIR_NAME = "logs"

DEFAULT_LOGS_ENABLED = True
DEFAULT_LOGS_FORMAT = "jsonl"
DEFAULT_LOGS_MAX_FILE_BYTES = 10 * 1024 * 1024
DEFAULT_LOGS_MAX_FILES = 5
DEFAULT_LOGS_REDACTION = "default"
ALLOWED_LOG_FORMATS = ("jsonl",)
ALLOWED_LOG_REDACTION = ("default", "none", "strict")


class ProjectConfigError(RuntimeError):
    """Raised when project configuration is missing or invalid."""


@dataclass
class ProjectConfig:
    originator: str = ""
    logs_enabled: bool = DEFAULT_LOGS_ENABLED
    logs_format: str = DEFAULT_LOGS_FORMAT
    logs_max_file_bytes: int = DEFAULT_LOGS_MAX_FILE_BYTES
    logs_max_files: int = DEFAULT_LOGS_MAX_FILES
    logs_redaction: str = DEFAULT_LOGS_REDACTION


@dataclass
class Settings:
    """Resolved settings for one CLI invocation."""

    project_root: Path
    config_root: Path
    originator: str = ""
    logs_enabled: bool = DEFAULT_LOGS_ENABLED
    logs_format: str = DEFAULT_LOGS_FORMAT
    logs_max_file_bytes: int = DEFAULT_LOGS_MAX_FILE_BYTES
    logs_max_files: int = DEFAULT_LOGS_MAX_FILES
    logs_redaction: str = DEFAULT_LOGS_REDACTION

    @property
    def config_file(self) -> Path:
        return self.config_root / CONFIG_FILE_NAME

    @property
    def mcp_root(self) -> Path:
        return self.config_root / MCP_DIR_NAME

    @property
    def mcp_servers_file(self) -> Path:
        return self.mcp_root / MCP_SERVERS_FILE_NAME

    @property
    def logs_dir(self) -> Path:
        return self.config_root / LOGS_DIR_NAME


def resolve_project_root(workspace_dir: Optional[Path] = None) -> Path:
    return (workspace_dir or Path.cwd()).resolve()


def resolve_project_config_root(workspace_dir: Optional[Path] = None) -> Path:
    return resolve_project_root(workspace_dir) / CONFIG_DIR_NAME


def project_config_exists(workspace_dir: Optional[Path] = None) -> bool:
    config_root = resolve_project_config_root(workspace_dir)
    return config_root.is_dir() and (config_root / CONFIG_FILE_NAME).is_file()


def _safe_positive_int(value: object, default: int) -> int:
    if isinstance(value, bool):
        return default
    try:
        converted = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default
    if converted <= 0:
        return default
    return converted


def _safe_bool(value: object, default: bool) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value != 0
    if isinstance(value, str):
        normalized = value.strip().lower()
        if normalized in {"1", "true", "yes", "on"}:
            return True
        if normalized in {"0", "false", "no", "off"}:
            return False
    return default


def _safe_choice(value: object, allowed: tuple, default: str) -> str:
    normalized = str(value or default).strip().lower()
    if normalized not in allowed:
        return default
    return normalized


def _table(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _parse_project_config_data(data: Dict[str, Any]) -> ProjectConfig:
    client = _table(data, "client")
    logs = _table(_table(data, "runtime"), "logs")

    return ProjectConfig(
        originator=str(client.get("originator") or "").strip(),
        logs_enabled=_safe_bool(logs.get("enabled"), DEFAULT_LOGS_ENABLED),
        logs_format=_safe_choice(logs.get("format"), ALLOWED_LOG_FORMATS, DEFAULT_LOGS_FORMAT),
        logs_max_file_bytes=_safe_positive_int(logs.get("max_file_bytes"), DEFAULT_LOGS_MAX_FILE_BYTES),
        logs_max_files=_safe_positive_int(logs.get("max_files"), DEFAULT_LOGS_MAX_FILES),
        logs_redaction=_safe_choice(logs.get("redaction"), ALLOWED_LOG_REDACTION, DEFAULT_LOGS_REDACTION),
    )


def _render_project_config(config: ProjectConfig) -> str:
    originator = config.originator.replace("\\", "\\\\").replace('"', '\\"')
    lines: List[str] = [
        "[client]",
        "# Overrides the MCP client name sent on connect; empty uses $MCPRELAY_ORIGINATOR.",
        'originator = "{0}"'.format(originator),
        "",
        "[runtime.logs]",
        "enabled = {0}".format(str(bool(config.logs_enabled)).lower()),
        'format = "{0}"'.format(config.logs_format),
        "max_file_bytes = {0}".format(int(config.logs_max_file_bytes)),
        "max_files = {0}".format(int(config.logs_max_files)),
        'redaction = "{0}"'.format(config.logs_redaction),
        "",
    ]
    return "\n".join(lines)


def _default_mcp_servers_config() -> str:
    return "\n".join(
        [
            "# MCP servers reachable over SSE.",
            "# The id becomes the function name offered to the model.",
            "# Example:",
            "# [[servers]]",
            '# id = "docs"',
            '# url = "http://127.0.0.1:8000/sse"',
            "# enabled = true",
            "",
        ]
    )


def initialize_project_config(workspace_dir: Optional[Path] = None, force: bool = False) -> Path:
    config_root = resolve_project_config_root(workspace_dir)

    if config_root.exists():
        if not force:
            raise ProjectConfigError("configuration directory already exists: {0}".format(config_root))
        shutil.rmtree(config_root)

    (config_root / MCP_DIR_NAME).mkdir(parents=True, exist_ok=True)
    (config_root / LOGS_DIR_NAME).mkdir(parents=True, exist_ok=True)
    (config_root / CONFIG_FILE_NAME).write_text(
        _render_project_config(ProjectConfig()),
        encoding="utf-8",
    )
    (config_root / MCP_DIR_NAME / MCP_SERVERS_FILE_NAME).write_text(
        _default_mcp_servers_config(),
        encoding="utf-8",
    )
    return config_root


def load_project_config(config_root: Optional[Path] = None, workspace_dir: Optional[Path] = None) -> ProjectConfig:
    resolved_root = (config_root or resolve_project_config_root(workspace_dir)).resolve()
    config_file = resolved_root / CONFIG_FILE_NAME
    if not resolved_root.is_dir() or not config_file.is_file():
        raise ProjectConfigError(
            "missing project config directory: {0}; run `mcprelay init` first".format(resolved_root)
        )

    try:
        parsed = tomllib.loads(config_file.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        raise ProjectConfigError("invalid config file: {0}".format(config_file)) from exc

    return _parse_project_config_data(parsed)


def load_settings(workspace_dir: Optional[Path] = None) -> Settings:
    """Resolve settings from the project config directory."""

    project_root = resolve_project_root(workspace_dir)
    config_root = resolve_project_config_root(project_root)
    project_config = load_project_config(config_root=config_root)

    return Settings(
        project_root=project_root,
        config_root=config_root,
        originator=project_config.originator,
        logs_enabled=project_config.logs_enabled,
        logs_format=project_config.logs_format,
        logs_max_file_bytes=project_config.logs_max_file_bytes,
        logs_max_files=project_config.logs_max_files,
        logs_redaction=project_config.logs_redaction,
    )
