from __future__ import annotations

import json
import logging
import os

import anyio
import pytest

from mcp.client.session import ClientSession
from mcp.shared.message import SessionMessage

from devtools_mcp.server import create_server

REAL_TEST_URL = "https://example.com"

pytestmark = pytest.mark.skipif(
    os.environ.get("DEVTOOLS_MCP_REAL_BROWSER") != "1",
    reason="Set DEVTOOLS_MCP_REAL_BROWSER=1 (e.g. in .env.test) to drive a real browser",
)


@pytest.fixture(autouse=True)
def reset_browser_manager_state() -> None:
    from brui_core.browser.browser_manager import BrowserManager

    # Reset shared Playwright/browser objects between tests to avoid cross-event-loop hangs.
    manager = BrowserManager()
    manager.browser = None
    manager.playwright = None


async def _run_with_session(server, client_callable):
    client_to_server_send, server_read_stream = anyio.create_memory_object_stream[SessionMessage | Exception](0)
    server_to_client_send, client_read_stream = anyio.create_memory_object_stream[SessionMessage](0)

    async def server_task():
        await server._mcp_server.run(  # type: ignore[attr-defined]
            server_read_stream,
            server_to_client_send,
            server._mcp_server.create_initialization_options(),  # type: ignore[attr-defined]
            raise_exceptions=True,
        )

    async with anyio.create_task_group() as tg:
        tg.start_soon(server_task)
        async with ClientSession(client_read_stream, client_to_server_send) as session:
            await session.initialize()
            await client_callable(session)
        await client_to_server_send.aclose()
        await server_to_client_send.aclose()
        tg.cancel_scope.cancel()


async def _call_tool(session: ClientSession, name: str, args: dict, timeout: float = 60.0):
    logging.info("Calling tool %s", name)
    with anyio.fail_after(timeout):
        result = await session.call_tool(name, args)
    logging.info("Tool %s completed: %s", name, result.content[0].text.splitlines()[0])
    return result


def _text(result) -> str:
    return result.content[0].text


@pytest.mark.anyio
async def test_real_console_log_roundtrip():
    server = create_server()

    async def run_client(session: ClientSession) -> None:
        started = await _call_tool(session, "start_session", {"sessionId": "real"})
        assert "started successfully" in _text(started)
        try:
            nav = await _call_tool(session, "navigate", {"sessionId": "real", "url": REAL_TEST_URL})
            assert not _text(nav).startswith("Error")

            await _call_tool(
                session,
                "execute_script",
                {
                    "sessionId": "real",
                    "script": "console.log('one'); console.warn('two'); console.error({three: 3});",
                },
            )
            logs_result = await _call_tool(session, "get_console_logs", {"sessionId": "real"})
            logs = json.loads(_text(logs_result).split("\n", 1)[1])
            assert [log["level"] for log in logs] == ["INFO", "WARNING", "SEVERE"]
            assert logs[2]["message"] == '{"three":3}'

            info = await _call_tool(session, "get_page_info", {"sessionId": "real"})
            assert "Example Domain" in _text(info)

            inspected = await _call_tool(session, "inspect_element", {"sessionId": "real", "selector": "h1"})
            assert '"tagName": "h1"' in _text(inspected)

            shot = await _call_tool(session, "take_screenshot", {"sessionId": "real"})
            assert shot.content[1].type == "image"
        finally:
            await _call_tool(session, "close_session", {"sessionId": "real"})

        listed = await _call_tool(session, "list_sessions", {})
        assert _text(listed) == "Active Sessions (0):\n"

    await _run_with_session(server, run_client)
