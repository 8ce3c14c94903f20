from typing import Any

from mcp.server.fastmcp import FastMCP

from devtools_mcp.dispatcher import ContentBlock, ToolDispatcher


def register(server: FastMCP, dispatcher: ToolDispatcher) -> None:
    @server.tool(
        name="navigate",
        title="Navigate to URL",
        description="Navigate a browser session to a URL.",
        structured_output=False,
    )
    async def navigate(sessionId: str, url: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("navigate", {"sessionId": sessionId, "url": url})

    @server.tool(
        name="execute_script",
        title="Execute script",
        description=(
            "Execute JavaScript in the page. The script is a function body: read arguments "
            "through `arguments[i]` and use `return` to send a value back."
        ),
        structured_output=False,
    )
    async def execute_script(
        sessionId: str,
        script: str,
        args: list[Any] | None = None,
    ) -> list[ContentBlock]:
        return await dispatcher.dispatch(
            "execute_script",
            {"sessionId": sessionId, "script": script, "args": args or []},
        )

    @server.tool(
        name="take_screenshot",
        title="Take screenshot",
        description="Take a PNG screenshot of the current page.",
        structured_output=False,
    )
    async def take_screenshot(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("take_screenshot", {"sessionId": sessionId})

    @server.tool(
        name="inspect_element",
        title="Inspect element",
        description="Inspect the first DOM element matching a CSS selector.",
        structured_output=False,
    )
    async def inspect_element(
        sessionId: str,
        selector: str,
        includeStyles: bool = False,
    ) -> list[ContentBlock]:
        return await dispatcher.dispatch(
            "inspect_element",
            {"sessionId": sessionId, "selector": selector, "includeStyles": includeStyles},
        )

    @server.tool(
        name="get_performance_metrics",
        title="Get performance metrics",
        description="Get navigation and paint timings for the current page.",
        structured_output=False,
    )
    async def get_performance_metrics(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("get_performance_metrics", {"sessionId": sessionId})

    @server.tool(
        name="get_page_info",
        title="Get page info",
        description="Get the current page URL and title.",
        structured_output=False,
    )
    async def get_page_info(sessionId: str) -> list[ContentBlock]:
        return await dispatcher.dispatch("get_page_info", {"sessionId": sessionId})
