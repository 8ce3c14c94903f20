import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import anyio
from mcp.server.fastmcp import FastMCP

from devtools_mcp.actions import SessionActions
from devtools_mcp.config import DevtoolsSettings, ServerConfig, load_settings
from devtools_mcp.dispatcher import ToolDispatcher
from devtools_mcp.driver import DriverFactory, create_driver_factory
from devtools_mcp.sessions import SessionRegistry
from devtools_mcp.tools import register_tools

logger = logging.getLogger(__name__)


def create_server(
    settings: DevtoolsSettings | None = None,
    server_config: ServerConfig | None = None,
    driver_factory: DriverFactory | None = None,
) -> FastMCP:
    resolved_settings = settings or load_settings()
    cfg = server_config or ServerConfig.from_env()
    registry = SessionRegistry(driver_factory or create_driver_factory(resolved_settings))
    actions = SessionActions(registry, resolved_settings)
    dispatcher = ToolDispatcher(registry, actions)

    @asynccontextmanager
    async def lifespan(_server: FastMCP) -> AsyncIterator[dict]:
        try:
            yield {}
        finally:
            with anyio.CancelScope(shield=True):
                failures = await registry.close_all_sessions()
            if failures:
                logger.warning("Shutdown left %d session(s) with close errors", len(failures))
            else:
                logger.info("All browser sessions closed")

    server = FastMCP(name=cfg.name, instructions=cfg.instructions, lifespan=lifespan)
    register_tools(server, dispatcher)
    return server


def main() -> None:
    settings = load_settings()
    logging.basicConfig(
        level=settings.log_level,
        format="%(asctime)s - %(levelname)s - %(name)s - %(message)s",
    )
    server = create_server(settings=settings)
    server.run()


if __name__ == "__main__":
    main()
