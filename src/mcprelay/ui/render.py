"""Presentation helpers for mcprelay CLI output."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, TextIO

from rich import box
from rich.console import Console
from rich.panel import Panel

from mcprelay.mcp.types import FunctionCallOutput


def bilingual_text(zh: str, en: Optional[str] = None) -> str:
    if not en:
        return zh
    return "{0} ({1})".format(zh, en)


def render_notice(level: str, zh: str, en: Optional[str] = None) -> str:
    prefix_map = {
        "info": bilingual_text("提示", "Info"),
        "warn": bilingual_text("警告", "Warning"),
        "error": bilingual_text("错误", "Error"),
        "success": bilingual_text("成功", "Success"),
    }
    prefix = prefix_map.get(level, prefix_map["info"])
    return "{0}: {1}".format(prefix, bilingual_text(zh, en))


def _is_tty(stream: TextIO, forced: Optional[bool]) -> bool:
    if forced is not None:
        return forced
    isatty = getattr(stream, "isatty", None)
    if not callable(isatty):
        return False
    try:
        return bool(isatty())
    except ValueError:
        # closed stream
        return False


def describe_call_output(record: FunctionCallOutput) -> Dict[str, Any]:
    """Split a record into display fields; raw passthroughs have no exit code."""

    try:
        envelope = record.envelope()
    except ValueError:
        return {"call_id": record.call_id, "text": record.output, "exit_code": None, "duration_seconds": None}
    metadata = envelope.get("metadata") if isinstance(envelope.get("metadata"), dict) else {}
    return {
        "call_id": record.call_id,
        "text": str(envelope.get("output") or ""),
        "exit_code": metadata.get("exit_code"),
        "duration_seconds": metadata.get("duration_seconds"),
    }


def render_call_output(
    record: FunctionCallOutput,
    stream: TextIO,
    is_tty: Optional[bool] = None,
) -> None:
    fields = describe_call_output(record)
    if fields["exit_code"] is None:
        title = bilingual_text("原样返回", "Passthrough")
        border_style = "yellow"
    else:
        title = "exit_code={0} duration={1}s".format(fields["exit_code"], fields["duration_seconds"])
        border_style = "green" if fields["exit_code"] == 0 else "red"

    if _is_tty(stream, is_tty):
        console = Console(file=stream, highlight=False, soft_wrap=True)
        console.print(
            Panel(
                fields["text"],
                title=title,
                subtitle=fields["call_id"],
                border_style=border_style,
                box=box.ROUNDED,
            )
        )
        return

    stream.write("[{0}] {1}\n".format(fields["call_id"], title))
    stream.write(fields["text"] + "\n")


def render_tool_definitions_text(definitions: List[Dict[str, Any]]) -> str:
    if not definitions:
        return render_notice("info", "未配置 MCP 服务器。", "No MCP servers configured.")
    lines = [bilingual_text("可调用函数", "Callable Functions")]
    for definition in definitions:
        lines.append("- {0}: {1}".format(definition.get("name", ""), definition.get("description", "")))
    return "\n".join(lines)


def render_doctor_text(report: Dict[str, Any]) -> str:
    server_lines: List[str] = []
    for row in report.get("mcp_servers") or []:
        server_lines.append(
            "{0} url={1} enabled={2}".format(
                row.get("server_id", ""),
                row.get("url", ""),
                bool(row.get("enabled")),
            )
        )
    if not server_lines:
        server_lines = ["(none)"]

    error_lines = ["- {0}".format(error) for error in report.get("mcp_errors") or []] or ["(none)"]

    lines = [
        bilingual_text("系统诊断", "Doctor Report"),
        "project_root={0}".format(report.get("project_root", "")),
        "config_root={0}".format(report.get("config_root", "")),
        "client={0}/{1}".format(report.get("client_name", ""), report.get("client_version", "")),
        "",
        bilingual_text("MCP 服务器", "MCP Servers"),
        "servers_file={0}".format(report.get("mcp_servers_file", "")),
        *server_lines,
        "",
        bilingual_text("配置错误", "Config Errors"),
        *error_lines,
        "",
        bilingual_text("调试日志", "Debug Logs"),
        "logs_enabled={0} redaction={1}".format(
            bool(report.get("logs_enabled")),
            report.get("logs_redaction", ""),
        ),
        "logs_active_file={0}".format(report.get("logs_active_file", "")),
        "logs_total_size_bytes={0} logs_write_errors={1}".format(
            int(report.get("logs_total_size_bytes") or 0),
            int(report.get("logs_write_errors") or 0),
        ),
    ]
    return "\n".join(lines)
