"""Classify remote tool responses into textual content or opaque JSON."""

from __future__ import annotations

from typing import Any, List, Optional

from mcprelay.mcp.types import OpaqueJson, TextualContent, ToolResponse


def _field(value: Any, name: str) -> Any:
    if isinstance(value, dict):
        return value.get(name)
    return getattr(value, name, None)


def _content_items(response: Any) -> Optional[List[Any]]:
    content = _field(response, "content")
    if isinstance(content, (list, tuple)):
        return list(content)
    return None


def _jsonable(response: Any) -> Any:
    model_dump = getattr(response, "model_dump", None)
    if callable(model_dump):
        return model_dump(mode="json", by_alias=True, exclude_none=True)
    return response


def classify_response(response: Any) -> ToolResponse:
    items = _content_items(response)
    if items is None:
        return OpaqueJson(value=_jsonable(response))

    parts: List[str] = []
    for item in items:
        text = _field(item, "text")
        # Image/resource items have no text; they still occupy a line.
        parts.append("" if text is None else str(text))
    return TextualContent(parts=tuple(parts))
