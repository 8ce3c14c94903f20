import asyncio
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Any, Iterator, Sequence

from devtools_mcp.config import DevtoolsSettings
from devtools_mcp.errors import DriverFailure
from devtools_mcp.instrumentation import CONSOLE_CAPTURE, NETWORK_CAPTURE, Instrumentation
from devtools_mcp.sessions import BrowserSession, SessionRegistry, get_session_or_raise
from devtools_mcp.types import (
    BoundingRect,
    ConsoleLogEntry,
    ElementInspectionResult,
    NetworkLogEntry,
    PageInfo,
    PerformanceMetrics,
)

logger = logging.getLogger(__name__)

TAG_NAME_SCRIPT = "return arguments[0].tagName.toLowerCase();"
TEXT_SCRIPT = "return arguments[0].innerText || '';"
ATTRIBUTES_SCRIPT = """
const attrs = {};
for (const attr of arguments[0].attributes) {
  attrs[attr.name] = attr.value;
}
return attrs;
"""
BOUNDING_RECT_SCRIPT = """
const rect = arguments[0].getBoundingClientRect();
return { x: rect.x, y: rect.y, width: rect.width, height: rect.height };
"""
COMPUTED_STYLES_SCRIPT = """
const style = window.getComputedStyle(arguments[0]);
const styles = {};
for (const name of arguments[1]) {
  styles[name] = style.getPropertyValue(name);
}
return styles;
"""
PERFORMANCE_METRICS_SCRIPT = """
const timing = performance.timing || {};
const paints = performance.getEntriesByType('paint');
const paint = (name) => {
  const entry = paints.find((item) => item.name === name);
  return entry ? entry.startTime : null;
};
return {
  navigationStart: timing.navigationStart,
  loadEventEnd: timing.loadEventEnd,
  domContentLoadedEventEnd: timing.domContentLoadedEventEnd,
  firstPaint: paint('first-paint'),
  firstContentfulPaint: paint('first-contentful-paint')
};
"""

INSPECTED_STYLE_PROPERTIES = (
    "display",
    "visibility",
    "opacity",
    "position",
    "z-index",
    "width",
    "height",
    "margin",
    "padding",
    "color",
    "background-color",
    "font-family",
    "font-size",
    "font-weight",
)
PERFORMANCE_METRIC_FIELDS = (
    "navigationStart",
    "loadEventEnd",
    "domContentLoadedEventEnd",
    "firstPaint",
    "firstContentfulPaint",
)
NETWORK_OPTIONAL_FIELDS = (
    "status",
    "requestHeaders",
    "responseHeaders",
    "duration",
    "transferSize",
    "encodedBodySize",
    "decodedBodySize",
    "error",
)


class LogLevel(str, Enum):
    ALL = "ALL"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    SEVERE = "SEVERE"

    @classmethod
    def parse(cls, raw: str | None) -> "LogLevel":
        """Resolve a caller-supplied level; unknown or missing values mean ALL."""
        if not raw:
            return cls.ALL
        normalized = _LEVEL_ALIASES.get(raw.strip().upper(), raw.strip().upper())
        try:
            return cls(normalized)
        except ValueError:
            return cls.ALL


_LEVEL_ALIASES = {"WARN": "WARNING", "ERROR": "SEVERE", "LOG": "INFO"}


def normalize_console_entry(raw: dict[str, Any]) -> ConsoleLogEntry:
    level = str(raw.get("level") or "INFO").upper()
    return ConsoleLogEntry(
        level=_LEVEL_ALIASES.get(level, level),
        message=str(raw.get("message", "")),
        timestamp=raw.get("timestamp"),
        source=raw.get("source") or "browser",
    )


def filter_console_logs(entries: Sequence[ConsoleLogEntry], level: LogLevel) -> list[ConsoleLogEntry]:
    if level is LogLevel.ALL:
        return list(entries)
    return [entry for entry in entries if entry["level"] == level.value]


def normalize_network_entry(raw: dict[str, Any]) -> NetworkLogEntry:
    entry = NetworkLogEntry(method=raw.get("method"), url=raw.get("url"), timestamp=raw.get("timestamp"))
    for key in NETWORK_OPTIONAL_FIELDS:
        value = raw.get(key)
        if value is not None:
            entry[key] = value
    return entry


@contextmanager
def _driver_errors(description: str) -> Iterator[None]:
    try:
        yield
    except Exception as exc:
        raise DriverFailure(f"{description}: {exc}") from exc


class SessionActions:
    """Session-scoped browser operations.

    Every action resolves its session first and fails with ``SessionNotFound``
    before touching the driver.
    """

    def __init__(self, registry: SessionRegistry, settings: DevtoolsSettings) -> None:
        self._registry = registry
        self._settings = settings

    async def navigate(self, session_id: str, url: str) -> None:
        session = await get_session_or_raise(self._registry, session_id)
        with _driver_errors("Navigation failed"):
            await session.driver.navigate(url)

        # The new document has none of the previous page's buffers.
        session.instrumentation.reset()
        if session.options.enable_inspection:
            await self._install_after_navigation(session, CONSOLE_CAPTURE)
        if session.options.enable_profiling:
            await self._install_after_navigation(session, NETWORK_CAPTURE)

    async def execute_script(self, session_id: str, script: str, args: Sequence[Any] | None = None) -> Any:
        session = await get_session_or_raise(self._registry, session_id)
        with _driver_errors("Script execution failed"):
            return await session.driver.execute_script(script, *(args or ()))

    async def get_console_logs(self, session_id: str, level: str | None = None) -> list[ConsoleLogEntry]:
        session = await get_session_or_raise(self._registry, session_id)
        raw_entries = await self._read_buffer(session, CONSOLE_CAPTURE, "Failed to get console logs")
        entries = [normalize_console_entry(raw) for raw in raw_entries]
        return filter_console_logs(entries, LogLevel.parse(level))

    async def clear_console_logs(self, session_id: str) -> None:
        session = await get_session_or_raise(self._registry, session_id)
        await self._clear_buffer(session, CONSOLE_CAPTURE, "Failed to clear console logs")

    async def get_network_logs(self, session_id: str) -> list[NetworkLogEntry]:
        session = await get_session_or_raise(self._registry, session_id)
        raw_entries = await self._read_buffer(session, NETWORK_CAPTURE, "Failed to get network logs")
        return [normalize_network_entry(raw) for raw in raw_entries]

    async def clear_network_logs(self, session_id: str) -> None:
        session = await get_session_or_raise(self._registry, session_id)
        await self._clear_buffer(session, NETWORK_CAPTURE, "Failed to clear network logs")

    async def take_screenshot(self, session_id: str) -> str:
        session = await get_session_or_raise(self._registry, session_id)
        with _driver_errors("Screenshot failed"):
            return await session.driver.take_screenshot()

    async def inspect_element(
        self,
        session_id: str,
        selector: str,
        include_styles: bool = False,
    ) -> ElementInspectionResult:
        session = await get_session_or_raise(self._registry, session_id)
        driver = session.driver
        with _driver_errors("Element inspection failed"):
            element = await driver.find_element(selector)
            queries = [
                driver.execute_script(TAG_NAME_SCRIPT, element),
                driver.execute_script(TEXT_SCRIPT, element),
                driver.execute_script(ATTRIBUTES_SCRIPT, element),
                driver.execute_script(BOUNDING_RECT_SCRIPT, element),
            ]
            if include_styles:
                queries.append(
                    driver.execute_script(COMPUTED_STYLES_SCRIPT, element, list(INSPECTED_STYLE_PROPERTIES))
                )
            results = await asyncio.gather(*queries)

        tag_name, text, attributes, rect = results[:4]
        rect = rect or {}
        inspection = ElementInspectionResult(
            tagName=str(tag_name).lower(),
            text=str(text or "")[: self._settings.max_element_text_chars],
            attributes=dict(attributes or {}),
            boundingRect=BoundingRect(
                x=rect.get("x", 0),
                y=rect.get("y", 0),
                width=rect.get("width", 0),
                height=rect.get("height", 0),
            ),
        )
        if include_styles:
            inspection["computedStyles"] = dict(results[4] or {})
        return inspection

    async def get_performance_metrics(self, session_id: str) -> PerformanceMetrics:
        session = await get_session_or_raise(self._registry, session_id)
        with _driver_errors("Failed to get performance metrics"):
            raw = await session.driver.execute_script(PERFORMANCE_METRICS_SCRIPT)
        raw = raw or {}
        metrics = PerformanceMetrics()
        for key in PERFORMANCE_METRIC_FIELDS:
            if raw.get(key) is not None:
                metrics[key] = raw[key]
        return metrics

    async def get_page_info(self, session_id: str) -> PageInfo:
        session = await get_session_or_raise(self._registry, session_id)
        with _driver_errors("Failed to get page info"):
            url, title = await asyncio.gather(
                session.driver.get_current_url(),
                session.driver.get_title(),
            )
        return PageInfo(url=url, title=title)

    async def _ensure_installed(self, session: BrowserSession, capture: Instrumentation) -> None:
        if getattr(session.instrumentation, capture.name):
            return
        with _driver_errors(f"Failed to install {capture.name} capture"):
            await session.driver.execute_script(capture.install_script)
        setattr(session.instrumentation, capture.name, True)
        logger.debug("Installed %s capture in session '%s'", capture.name, session.session_id)

    async def _install_after_navigation(self, session: BrowserSession, capture: Instrumentation) -> None:
        try:
            await self._ensure_installed(session, capture)
        except DriverFailure as exc:
            # Left uninstalled; the next log request retries.
            logger.warning("Session '%s': %s", session.session_id, exc)

    async def _read_buffer(self, session: BrowserSession, capture: Instrumentation, description: str) -> list[Any]:
        await self._ensure_installed(session, capture)
        with _driver_errors(description):
            raw = await session.driver.execute_script(capture.read_script)
        if raw is None:
            logger.debug("Session '%s' lost its %s buffer; reinstalling", session.session_id, capture.name)
            setattr(session.instrumentation, capture.name, False)
            await self._ensure_installed(session, capture)
            # A fresh network payload starts out holding the page's resource timings.
            with _driver_errors(description):
                raw = await session.driver.execute_script(capture.read_script)
        return list(raw or [])

    async def _clear_buffer(self, session: BrowserSession, capture: Instrumentation, description: str) -> None:
        if not getattr(session.instrumentation, capture.name):
            return
        with _driver_errors(description):
            await session.driver.execute_script(capture.clear_script)
