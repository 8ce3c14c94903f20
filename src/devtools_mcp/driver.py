import base64
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Protocol

from brui_core.ui_integrator import UIIntegrator

from devtools_mcp.config import DevtoolsSettings
from devtools_mcp.errors import DriverFailure, InvalidArguments

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class SessionOptions:
    enable_inspection: bool = True
    enable_profiling: bool = True
    uses_technology_preview: bool = False

    @classmethod
    def from_arguments(cls, raw: Mapping[str, Any] | None) -> "SessionOptions":
        if raw is None:
            return cls()
        if not isinstance(raw, Mapping):
            raise InvalidArguments("options must be an object")
        # Inspection and profiling stay on unless explicitly disabled.
        return cls(
            enable_inspection=raw.get("enableInspection") is not False,
            enable_profiling=raw.get("enableProfiling") is not False,
            uses_technology_preview=raw.get("usesTechnologyPreview") is True,
        )


class DriverHandle(Protocol):
    async def navigate(self, url: str) -> None: ...

    async def execute_script(self, script: str, *args: Any) -> Any: ...

    async def take_screenshot(self) -> str: ...

    async def find_element(self, selector: str) -> Any: ...

    async def get_current_url(self) -> str: ...

    async def get_title(self) -> str: ...

    async def quit(self) -> None: ...


DriverFactory = Callable[[SessionOptions], Awaitable[DriverHandle]]


def create_integrator() -> UIIntegrator:
    return UIIntegrator()


async def prepare_integrator(keep_alive: bool) -> UIIntegrator:
    integrator = create_integrator()
    await integrator.initialize()
    if keep_alive:
        await integrator.start_keep_alive()
    return integrator


def wrap_script(script: str) -> str:
    """Turn a WebDriver-style function body into a Playwright page function.

    The body sees its arguments through ``arguments`` and reports a value with ``return``.
    """
    return f"(args) => (function () {{\n{script}\n}}).apply(window, args)"


class PlaywrightDriver:
    def __init__(self, integrator: UIIntegrator, settings: DevtoolsSettings) -> None:
        self._integrator = integrator
        self._settings = settings

    @property
    def page(self):
        page = self._integrator.page
        if not page:
            raise DriverFailure("Playwright page not initialized")
        return page

    async def navigate(self, url: str) -> None:
        await self.page.goto(
            url,
            wait_until=self._settings.wait_until,
            timeout=self._settings.navigation_timeout_ms,
        )

    async def execute_script(self, script: str, *args: Any) -> Any:
        return await self.page.evaluate(wrap_script(script), list(args))

    async def take_screenshot(self) -> str:
        data = await self.page.screenshot(type="png", full_page=self._settings.full_page_screenshot)
        return base64.b64encode(data).decode("ascii")

    async def find_element(self, selector: str) -> Any:
        element = await self.page.query_selector(selector)
        if element is None:
            raise DriverFailure(f"No element matches selector '{selector}'")
        return element

    async def get_current_url(self) -> str:
        return self.page.url

    async def get_title(self) -> str:
        return await self.page.title()

    async def quit(self) -> None:
        await self._integrator.close(close_browser=self._settings.close_browser)


def create_driver_factory(settings: DevtoolsSettings) -> DriverFactory:
    async def open_driver(options: SessionOptions) -> DriverHandle:
        if options.uses_technology_preview:
            logger.warning("Technology preview builds are not available through brui_core; using the default browser.")
        integrator = await prepare_integrator(keep_alive=settings.keep_alive)
        return PlaywrightDriver(integrator, settings)

    return open_driver
