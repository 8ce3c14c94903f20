from mcp.server.fastmcp import FastMCP

from devtools_mcp.dispatcher import ContentBlock, ToolDispatcher


def register(server: FastMCP, dispatcher: ToolDispatcher) -> None:
    @server.tool(
        name="get_console_logs",
        title="Get console logs",
        description=(
            "Get captured browser console logs. logLevel filters by ALL, DEBUG, INFO, WARNING "
            "or SEVERE (WARN and ERROR are accepted); unknown or missing levels return everything."
        ),
        structured_output=False,
    )
    async def get_console_logs(sessionId: str, logLevel: str | None = None) -> list[ContentBlock]:
        return await dispatcher.dispatch("get_console_logs", {"sessionId": sessionId, "logLevel": logLevel})

    @server.tool(
        name="get_network_logs",
        title="Get network logs",
        description="Get captured network activity (resource timings and fetch responses).",
        structured_output=False,
    )
    async def get_network_logs(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("get_network_logs", {"sessionId": sessionId})

    @server.tool(
        name="clear_console_logs",
        title="Clear console logs",
        description="Clear captured console logs for a session.",
        structured_output=False,
    )
    async def clear_console_logs(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("clear_console_logs", {"sessionId": sessionId})

    @server.tool(
        name="clear_network_logs",
        title="Clear network logs",
        description="Clear captured network logs for a session.",
        structured_output=False,
    )
    async def clear_network_logs(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("clear_network_logs", {"sessionId": sessionId})
