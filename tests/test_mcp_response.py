from __future__ import annotations

from types import SimpleNamespace

import pytest
from mcp.types import CallToolResult, ImageContent, TextContent

from mcprelay.mcp.response import classify_response
from mcprelay.mcp.types import FunctionCallOutput, OpaqueJson, TextualContent


def test_sdk_call_tool_result_is_textual():
    result = CallToolResult(
        content=[
            TextContent(type="text", text="first"),
            ImageContent(type="image", data="aGk=", mimeType="image/png"),
            TextContent(type="text", text="second"),
        ]
    )

    classified = classify_response(result)

    assert classified == TextualContent(parts=("first", "", "second"))
    assert classified.render() == "first\n\nsecond"


def test_attribute_style_content_is_textual():
    response = SimpleNamespace(content=(SimpleNamespace(text="a"), SimpleNamespace(text="b")))
    assert classify_response(response).render() == "a\nb"


def test_empty_content_list_renders_empty_text():
    assert classify_response({"content": []}).render() == ""


def test_non_string_text_is_stringified():
    assert classify_response({"content": [{"text": 42}, {"text": None}]}).render() == "42\n"


def test_other_values_are_opaque_json():
    assert classify_response({"ok": True}) == OpaqueJson(value={"ok": True})
    assert classify_response(None).render() == "null"
    assert classify_response("plain").render() == '"plain"'
    assert classify_response({"text": "é"}).render() == '{"text":"é"}'


def test_pydantic_models_without_content_list_are_dumped():
    model = TextContent(type="text", text="hello")

    classified = classify_response(model)

    assert isinstance(classified, OpaqueJson)
    assert classified.value == {"type": "text", "text": "hello"}
    assert classified.render() == '{"type":"text","text":"hello"}'


def test_envelope_distinguishes_passthrough_from_wrapped_output():
    wrapped = FunctionCallOutput(
        call_id="c1",
        output='{"output":"hi","metadata":{"exit_code":0,"duration_seconds":0.1}}',
    )
    assert wrapped.envelope()["metadata"]["exit_code"] == 0

    raw = FunctionCallOutput(call_id="c2", output="{broken")
    with pytest.raises(ValueError):
        raw.envelope()
