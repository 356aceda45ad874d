"""Route function calls to MCP servers and shape the function_call_output records."""

from __future__ import annotations

import json
import math
import time
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from mcprelay.kernel.debug_log import DebugLogWriter
from mcprelay.mcp.connections import MCPConnectionCache
from mcprelay.mcp.response import classify_response
from mcprelay.mcp.transport import MCPConnection, SSETransport, describe_error
from mcprelay.mcp.types import (
    ClientInfo,
    FunctionCallOutput,
    ToolCallFailure,
    ToolCallOutcome,
    ToolCallSuccess,
    ToolInvocation,
)
from mcprelay.session import CLI_VERSION, ORIGIN

EMPTY_ARGUMENTS = "{}"
ERROR_PREFIX = "MCP error: "


def default_client_info(originator: Optional[str] = None) -> ClientInfo:
    return ClientInfo(name=str(originator or "").strip() or ORIGIN, version=CLI_VERSION)


def _reject_constant(token: str) -> Any:
    raise ValueError("non-standard JSON constant: {0}".format(token))


def parse_tool_invocation(raw: str) -> Tuple[Optional[ToolInvocation], str]:
    """Parse `{name, args}` or `{name, ...flat_args}`.

    Returns `(invocation, "")` on success, otherwise `(None, reason)`.
    `args` wins when present and not null; otherwise every sibling of `name`
    becomes an argument. A non-object `args` is rejected.
    """

    try:
        # NaN/Infinity are not JSON.
        parsed = json.loads(raw, parse_constant=_reject_constant)
    except ValueError:
        return None, "invalid_json"
    if not isinstance(parsed, dict):
        return None, "not_an_object"

    tool_name = parsed.get("name")
    if not isinstance(tool_name, str):
        return None, "missing_tool_name"

    args = parsed.get("args")
    if args is None:
        arguments = {key: value for key, value in parsed.items() if key not in {"name", "args"}}
    elif isinstance(args, dict):
        arguments = dict(args)
    else:
        return None, "invalid_args"
    return ToolInvocation(tool_name=tool_name, arguments=arguments), ""


def round_duration(elapsed_seconds: float) -> float:
    """Seconds at 100 ms resolution, rounding halves up."""

    elapsed_ms = max(0.0, elapsed_seconds * 1000.0)
    return math.floor(elapsed_ms / 100.0 + 0.5) / 10.0


def format_outcome(outcome: ToolCallOutcome) -> str:
    if isinstance(outcome, ToolCallSuccess):
        text = outcome.output
        exit_code = 0
    else:
        text = outcome.message
        exit_code = 1
    return json.dumps(
        {
            "output": text,
            "metadata": {
                "exit_code": exit_code,
                "duration_seconds": outcome.duration_seconds,
            },
        },
        ensure_ascii=False,
        separators=(",", ":"),
    )


class MCPCallRouter:
    """Dispatches one function call to one MCP server and returns one record.

    Unroutable calls come back as the raw argument string. Tool failures come
    back as `exit_code = 1` envelopes. Connection failures are not converted:
    they propagate as `MCPConnectionError`.
    """

    def __init__(
        self,
        connections: Optional[MCPConnectionCache] = None,
        debug_log: Optional[DebugLogWriter] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if connections is None:
            connections = MCPConnectionCache(SSETransport(), default_client_info(), debug_log=debug_log)
        self._connections = connections
        self._debug_log = debug_log
        self._clock = clock

    @property
    def connections(self) -> MCPConnectionCache:
        return self._connections

    async def dispatch(
        self,
        registry: Optional[Mapping[str, Mapping[str, Any]]],
        server_name: str,
        raw_arguments: Optional[str],
        call_id: str,
    ) -> List[FunctionCallOutput]:
        raw = EMPTY_ARGUMENTS if raw_arguments is None else raw_arguments

        server = (registry or {}).get(server_name)
        if not server:
            return self._passthrough(server_name, raw, call_id, "unknown_server")

        invocation, reason = parse_tool_invocation(raw)
        if invocation is None:
            return self._passthrough(server_name, raw, call_id, reason)

        url = str(server.get("url") or "")
        connection = await self._connections.get_or_connect(server_name, url)
        outcome = await self._invoke(connection, invocation)

        self._log(
            "info" if isinstance(outcome, ToolCallSuccess) else "error",
            "mcp.dispatch",
            "tool call finished",
            server_name,
            call_id,
            {
                "tool": invocation.tool_name,
                "exit_code": 0 if isinstance(outcome, ToolCallSuccess) else 1,
                "duration_seconds": outcome.duration_seconds,
            },
        )
        return [FunctionCallOutput(call_id=call_id, output=format_outcome(outcome))]

    async def _invoke(self, connection: MCPConnection, invocation: ToolInvocation) -> ToolCallOutcome:
        start = self._clock()
        try:
            response = classify_response(
                await connection.call_tool(invocation.tool_name, invocation.arguments)
            )
            output = response.render()
        except Exception as exc:
            return ToolCallFailure(
                message=ERROR_PREFIX + describe_error(exc),
                duration_seconds=round_duration(self._clock() - start),
            )
        return ToolCallSuccess(
            output=output,
            duration_seconds=round_duration(self._clock() - start),
        )

    def _passthrough(self, server_name: str, raw: str, call_id: str, reason: str) -> List[FunctionCallOutput]:
        self._log("info", "mcp.passthrough", reason, server_name, call_id, {})
        return [FunctionCallOutput(call_id=call_id, output=raw)]

    def _log(
        self,
        level: str,
        kind: str,
        message: str,
        server_name: str,
        call_id: str,
        data: Dict[str, Any],
    ) -> None:
        if self._debug_log is None:
            return
        self._debug_log.write_entry(
            level=level,
            kind=kind,
            message=message,
            server=server_name,
            call_id=call_id,
            data=data,
        )
