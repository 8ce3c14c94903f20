from typing import Any

from mcp.server.fastmcp import FastMCP

from devtools_mcp.dispatcher import ContentBlock, ToolDispatcher


def register(server: FastMCP, dispatcher: ToolDispatcher) -> None:
    @server.tool(
        name="start_session",
        title="Start browser session",
        description=(
            "Start a browser automation session under a caller-chosen sessionId. "
            "options may set enableInspection, enableProfiling (console/network capture after "
            "each navigation, on unless false) and usesTechnologyPreview."
        ),
        structured_output=False,
    )
    async def start_session(sessionId: str, options: dict[str, Any] | None = None) -> list[ContentBlock]:
        return await dispatcher.dispatch("start_session", {"sessionId": sessionId, "options": options})

    @server.tool(
        name="list_sessions",
        title="List browser sessions",
        description="List active browser session IDs.",
        structured_output=False,
    )
    async def list_sessions() -> list[ContentBlock]:
        return await dispatcher.dispatch("list_sessions", {})

    @server.tool(
        name="close_session",
        title="Close browser session",
        description="Close a browser session and release its browser connection.",
        structured_output=False,
    )
    async def close_session(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("close_session", {"sessionId": sessionId})
