"""Typed models for MCP routing: registry rows, invocations, responses, outputs."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple, Union

FUNCTION_CALL_OUTPUT = "function_call_output"

ServerRegistry = Dict[str, Dict[str, str]]


@dataclass(frozen=True)
class ClientInfo:
    name: str
    version: str


@dataclass(frozen=True)
class MCPServerConfig:
    server_id: str
    url: str
    enabled: bool = True


@dataclass(frozen=True)
class ToolInvocation:
    tool_name: str
    arguments: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class TextualContent:
    """Response carrying a `content` list; one text part per item."""

    parts: Tuple[str, ...] = ()

    def render(self) -> str:
        return "\n".join(self.parts)


@dataclass(frozen=True)
class OpaqueJson:
    """Any other response, forwarded as JSON text."""

    value: Any = None

    def render(self) -> str:
        return json.dumps(
            self.value,
            ensure_ascii=False,
            separators=(",", ":"),
            default=str,
        )


ToolResponse = Union[TextualContent, OpaqueJson]


@dataclass(frozen=True)
class ToolCallSuccess:
    output: str
    duration_seconds: float


@dataclass(frozen=True)
class ToolCallFailure:
    message: str
    duration_seconds: float


ToolCallOutcome = Union[ToolCallSuccess, ToolCallFailure]


@dataclass(frozen=True)
class FunctionCallOutput:
    call_id: str
    output: str

    @property
    def type(self) -> str:
        return FUNCTION_CALL_OUTPUT

    def as_message(self) -> Dict[str, Any]:
        return {
            "type": FUNCTION_CALL_OUTPUT,
            "call_id": self.call_id,
            "output": self.output,
        }

    def envelope(self) -> Dict[str, Any]:
        """Decode the `{output, metadata}` payload; raw passthroughs raise ValueError."""

        try:
            payload = json.loads(self.output)
        except ValueError:
            raise ValueError("output is a raw passthrough, not an envelope") from None
        if not isinstance(payload, dict) or "metadata" not in payload:
            raise ValueError("output is a raw passthrough, not an envelope")
        return payload
