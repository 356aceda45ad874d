"""Typer CLI entrypoints for mcprelay."""

from __future__ import annotations

import asyncio
import json
import sys
import uuid
from typing import List, Optional

import typer

from mcprelay.config import (
    ProjectConfigError,
    Settings,
    initialize_project_config,
    load_settings,
    project_config_exists,
    resolve_project_config_root,
)
from mcprelay.kernel.runtime import Runtime
from mcprelay.mcp.transport import MCPClientError
from mcprelay.mcp.types import FunctionCallOutput
from mcprelay.ui.render import (
    render_call_output,
    render_doctor_text,
    render_notice,
    render_tool_definitions_text,
)

app = typer.Typer(
    no_args_is_help=True,
    help="MCP 函数调用桥接 (Route model function calls to MCP servers)",
)


def _missing_config_message() -> str:
    return render_notice(
        "error",
        "当前目录缺少项目配置目录：{0}，请先执行 `mcprelay init`。".format(resolve_project_config_root()),
        "Missing project config directory. Run `mcprelay init` first.",
    )


def _require_project_config() -> Settings:
    if not project_config_exists():
        typer.echo(_missing_config_message(), err=True)
        raise typer.Exit(code=2)
    try:
        return load_settings()
    except ProjectConfigError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=2)


def _normalize_format(output_format: str) -> str:
    normalized = output_format.strip().lower()
    if normalized not in {"json", "text"}:
        typer.echo(
            render_notice(
                "error",
                "不支持的格式：{0}".format(output_format),
                "Unsupported format: {0}".format(output_format),
            ),
            err=True,
        )
        raise typer.Exit(code=2)
    return normalized


def _build_runtime(settings: Settings) -> Runtime:
    return Runtime(settings)


def _new_call_id() -> str:
    return "call_{0}".format(uuid.uuid4().hex)


async def _dispatch_once(
    runtime: Runtime,
    server: str,
    arguments: Optional[str],
    call_id: str,
) -> List[FunctionCallOutput]:
    try:
        return await runtime.dispatch(server, arguments, call_id)
    finally:
        await runtime.aclose()


@app.command("init")
def init_cmd(
    force: bool = typer.Option(
        False,
        "--force",
        help="重建 .mcprelay_config（会先删除已有目录） (Recreate config directory)",
    ),
) -> None:
    try:
        config_root = initialize_project_config(force=force)
    except ProjectConfigError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=2)

    typer.echo(
        render_notice(
            "success",
            "项目配置初始化完成：{0}".format(config_root),
            "Initialized project config at: {0}".format(config_root),
        )
    )


@app.command("tools")
def tools_cmd(
    output_format: str = typer.Option("json", "--format", help="输出格式：json|text (Output format)"),
) -> None:
    normalized_format = _normalize_format(output_format)
    runtime = _build_runtime(_require_project_config())
    for error in runtime.config_errors:
        typer.echo(render_notice("warn", error), err=True)

    definitions = runtime.tool_definitions()
    if normalized_format == "json":
        typer.echo(json.dumps(definitions, ensure_ascii=False, indent=2))
        return
    typer.echo(render_tool_definitions_text(definitions))


@app.command("call")
def call_cmd(
    server: str = typer.Argument(..., help="MCP 服务器名称 (Server name / function name)"),
    arguments: Optional[str] = typer.Argument(
        None,
        help='函数参数 JSON，例如 {"name": "echo", "args": {}} (Function call arguments)',
    ),
    call_id: Optional[str] = typer.Option(None, "--call-id", help="调用 ID (Function call id)"),
    output_format: str = typer.Option("json", "--format", help="输出格式：json|text (Output format)"),
) -> None:
    normalized_format = _normalize_format(output_format)
    runtime = _build_runtime(_require_project_config())

    try:
        records = asyncio.run(_dispatch_once(runtime, server, arguments, call_id or _new_call_id()))
    except MCPClientError as exc:
        typer.echo(render_notice("error", str(exc)), err=True)
        raise typer.Exit(code=1)

    for record in records:
        if normalized_format == "json":
            typer.echo(json.dumps(record.as_message(), ensure_ascii=False))
        else:
            render_call_output(record, sys.stdout)


@app.command("doctor")
def doctor_cmd(
    output_format: str = typer.Option("json", "--format", help="输出格式：json|text (Output format)"),
) -> None:
    normalized_format = _normalize_format(output_format)
    report = _build_runtime(_require_project_config()).doctor()
    if normalized_format == "json":
        typer.echo(json.dumps(report, ensure_ascii=True, indent=2))
        return
    typer.echo(render_doctor_text(report))


if __name__ == "__main__":
    app()
