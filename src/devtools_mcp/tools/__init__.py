from mcp.server.fastmcp import FastMCP

from devtools_mcp.dispatcher import ToolDispatcher
from devtools_mcp.tools.logs import register as register_logs
from devtools_mcp.tools.page import register as register_page
from devtools_mcp.tools.sessions import register as register_sessions


def register_tools(server: FastMCP, dispatcher: ToolDispatcher) -> None:
    register_sessions(server, dispatcher)
    register_page(server, dispatcher)
    register_logs(server, dispatcher)
