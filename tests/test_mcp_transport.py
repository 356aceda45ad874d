from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager

import pytest

from mcprelay.mcp import transport as transport_module
from mcprelay.mcp.transport import MCPClientError, MCPConnectionError, SSETransport, describe_error
from mcprelay.mcp.types import ClientInfo


def _install_fakes(monkeypatch, fail_initialize: bool = False):
    seen = {"events": []}

    @asynccontextmanager
    async def fake_sse_client(url, headers=None):
        seen["url"] = url
        seen["headers"] = headers
        seen["events"].append("stream_open")
        try:
            yield ("read-stream", "write-stream")
        finally:
            seen["events"].append("stream_closed")

    class FakeSession:
        def __init__(self, read_stream, write_stream, client_info=None):
            seen["streams"] = (read_stream, write_stream)
            seen["client_info"] = client_info

        async def __aenter__(self):
            seen["events"].append("session_open")
            return self

        async def __aexit__(self, *exc_info):
            seen["events"].append("session_closed")
            return False

        async def initialize(self):
            if fail_initialize:
                raise RuntimeError("handshake rejected")
            seen["events"].append("initialized")

        async def call_tool(self, name, arguments):
            seen["events"].append("call:{0}".format(name))
            return {"content": [{"text": "echo:{0}".format(arguments.get("text", ""))}]}

    monkeypatch.setattr(transport_module, "sse_client", fake_sse_client)
    monkeypatch.setattr(transport_module, "ClientSession", FakeSession)
    return seen


def test_sse_transport_connects_initializes_and_closes(monkeypatch):
    seen = _install_fakes(monkeypatch)

    async def _run():
        connection = await SSETransport().connect(
            "demo",
            "http://127.0.0.1:9000/sse",
            ClientInfo(name="tester", version="1.2.3"),
        )
        response = await connection.call_tool("echo", {"text": "hello"})
        await connection.close()
        await connection.close()
        return connection, response

    connection, response = asyncio.run(_run())

    assert seen["url"] == "http://127.0.0.1:9000/sse"
    assert seen["headers"] is None
    assert seen["streams"] == ("read-stream", "write-stream")
    assert seen["client_info"].name == "tester"
    assert seen["client_info"].version == "1.2.3"
    assert response == {"content": [{"text": "echo:hello"}]}
    assert connection.closed is True
    assert seen["events"] == [
        "stream_open",
        "session_open",
        "initialized",
        "call:echo",
        "session_closed",
        "stream_closed",
    ]


def test_sse_transport_passes_configured_headers(monkeypatch):
    seen = _install_fakes(monkeypatch)

    async def _run():
        connection = await SSETransport(headers={"X-Team": "tools"}).connect(
            "demo", "http://127.0.0.1:9000/sse", ClientInfo(name="t", version="1")
        )
        await connection.close()

    asyncio.run(_run())
    assert seen["headers"] == {"X-Team": "tools"}


def test_failed_handshake_raises_connection_error_and_releases_streams(monkeypatch):
    seen = _install_fakes(monkeypatch, fail_initialize=True)

    with pytest.raises(MCPConnectionError) as excinfo:
        asyncio.run(
            SSETransport().connect("demo", "http://127.0.0.1:9000/sse", ClientInfo(name="t", version="1"))
        )

    message = str(excinfo.value)
    assert "'demo'" in message
    assert "http://127.0.0.1:9000/sse" in message
    assert "handshake rejected" in message
    assert excinfo.value.server_name == "demo"
    assert seen["events"][-2:] == ["session_closed", "stream_closed"]


def test_closed_connection_rejects_calls(monkeypatch):
    _install_fakes(monkeypatch)

    async def _run():
        connection = await SSETransport().connect(
            "demo", "http://127.0.0.1:9000/sse", ClientInfo(name="t", version="1")
        )
        await connection.close()
        await connection.call_tool("echo", {})

    with pytest.raises(MCPClientError):
        asyncio.run(_run())


class _Group(Exception):
    def __init__(self, *members):
        super().__init__("unhandled errors in a TaskGroup ({0} sub-exception)".format(len(members)))
        self.exceptions = list(members)


def test_describe_error_unwraps_single_member_groups():
    assert describe_error(_Group(ValueError("inner"))) == "inner"
    assert describe_error(_Group(_Group(KeyError("deep")))) == "'deep'"
    assert describe_error(_Group(ValueError("a"), ValueError("b"))).startswith("unhandled errors")
    assert describe_error(RuntimeError()) == "RuntimeError"
