from __future__ import annotations

from mcprelay.mcp.schema import get_mcp_tool_definitions


def test_missing_or_empty_registry_yields_no_definitions():
    assert get_mcp_tool_definitions(None) == []
    assert get_mcp_tool_definitions({}) == []


def test_one_definition_per_server_in_registry_order():
    definitions = get_mcp_tool_definitions(
        {
            "a": {"url": "http://127.0.0.1:1/sse"},
            "b": {"url": "http://127.0.0.1:2/sse"},
        }
    )

    assert [row["name"] for row in definitions] == ["a", "b"]
    for row in definitions:
        assert row["type"] == "function"
        assert row["strict"] is False
        assert row["description"] == "Call remote MCP server '{0}' tool".format(row["name"])
        assert row["parameters"] == {
            "type": "object",
            "properties": {
                "name": {"type": "string", "description": "Tool name"},
                "args": {"type": "object", "description": "Tool args"},
            },
            "required": ["name", "args"],
            "additionalProperties": False,
        }


def test_server_names_are_used_verbatim():
    definitions = get_mcp_tool_definitions({"My-Server_2": {"url": "http://x/sse"}})
    assert definitions[0]["name"] == "My-Server_2"


def test_definitions_do_not_share_mutable_state():
    registry = {"a": {"url": "http://x/sse"}, "b": {"url": "http://y/sse"}}
    first = get_mcp_tool_definitions(registry)
    first[0]["parameters"]["required"].append("extra")

    second = get_mcp_tool_definitions(registry)
    assert second[0]["parameters"]["required"] == ["name", "args"]
    assert first[1]["parameters"]["required"] == ["name", "args"]
