import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Mapping, Union

from mcp.types import ImageContent, TextContent

from devtools_mcp.actions import SessionActions
from devtools_mcp.driver import SessionOptions
from devtools_mcp.errors import DevtoolsError, InvalidArguments, UnknownTool
from devtools_mcp.sessions import SessionRegistry

logger = logging.getLogger(__name__)

ContentBlock = Union[TextContent, ImageContent]
ToolHandler = Callable[[Mapping[str, Any]], Awaitable[list[ContentBlock]]]


@dataclass(frozen=True, slots=True)
class ToolRoute:
    handler: ToolHandler
    required: tuple[str, ...] = ()


def text_block(text: str) -> TextContent:
    return TextContent(type="text", text=text)


def image_block(data: str, mime_type: str = "image/png") -> ImageContent:
    return ImageContent(type="image", data=data, mimeType=mime_type)


def to_json(value: Any) -> str:
    return json.dumps(value, indent=2, default=str)


class ToolDispatcher:
    """Routes tool calls to session actions and renders every outcome as content blocks."""

    def __init__(self, registry: SessionRegistry, actions: SessionActions) -> None:
        self._registry = registry
        self._actions = actions
        self._routes: dict[str, ToolRoute] = {
            "start_session": ToolRoute(self._start_session, ("sessionId",)),
            "navigate": ToolRoute(self._navigate, ("sessionId", "url")),
            "get_console_logs": ToolRoute(self._get_console_logs, ("sessionId",)),
            "get_network_logs": ToolRoute(self._get_network_logs, ("sessionId",)),
            "clear_console_logs": ToolRoute(self._clear_console_logs, ("sessionId",)),
            "clear_network_logs": ToolRoute(self._clear_network_logs, ("sessionId",)),
            "execute_script": ToolRoute(self._execute_script, ("sessionId", "script")),
            "take_screenshot": ToolRoute(self._take_screenshot, ("sessionId",)),
            "inspect_element": ToolRoute(self._inspect_element, ("sessionId", "selector")),
            "get_performance_metrics": ToolRoute(self._get_performance_metrics, ("sessionId",)),
            "get_page_info": ToolRoute(self._get_page_info, ("sessionId",)),
            "list_sessions": ToolRoute(self._list_sessions),
            "close_session": ToolRoute(self._close_session, ("sessionId",)),
        }

    @property
    def tool_names(self) -> list[str]:
        return list(self._routes)

    async def dispatch(self, name: str, arguments: Mapping[str, Any] | None = None) -> list[ContentBlock]:
        args = arguments or {}
        try:
            route = self._routes.get(name)
            if route is None:
                raise UnknownTool(name)
            _require(args, route.required)
            return await route.handler(args)
        except DevtoolsError as exc:
            logger.warning("Tool '%s' failed: %s", name, exc)
            return [text_block(f"Error: {exc}")]
        except Exception as exc:
            logger.exception("Tool '%s' failed unexpectedly", name)
            return [text_block(f"Error: {exc}")]

    async def _start_session(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        session_id = args["sessionId"]
        options = SessionOptions.from_arguments(args.get("options"))
        await self._registry.create_session(session_id, options)
        return [
            text_block(
                f"Session '{session_id}' started successfully with dev tools enabled.\n"
                f"Inspection: {_flag(options.enable_inspection)}\n"
                f"Profiling: {_flag(options.enable_profiling)}\n"
                f"Technology Preview: {_flag(options.uses_technology_preview)}"
            )
        ]

    async def _navigate(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        url = _string_arg(args, "url")
        await self._actions.navigate(args["sessionId"], url)
        return [text_block(f"Successfully navigated to: {url}")]

    async def _get_console_logs(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        level = args.get("logLevel")
        if level is not None and not isinstance(level, str):
            raise InvalidArguments("logLevel must be a string")
        logs = await self._actions.get_console_logs(args["sessionId"], level)
        return [text_block(f"Console Logs ({len(logs)} entries):\n\n{to_json(logs)}")]

    async def _get_network_logs(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        logs = await self._actions.get_network_logs(args["sessionId"])
        return [text_block(f"Network Logs ({len(logs)} entries):\n\n{to_json(logs)}")]

    async def _clear_console_logs(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        session_id = args["sessionId"]
        await self._actions.clear_console_logs(session_id)
        return [text_block(f"Console logs cleared for session '{session_id}'")]

    async def _clear_network_logs(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        session_id = args["sessionId"]
        await self._actions.clear_network_logs(session_id)
        return [text_block(f"Network logs cleared for session '{session_id}'")]

    async def _execute_script(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        script = _string_arg(args, "script")
        script_args = args.get("args") or []
        if not isinstance(script_args, (list, tuple)):
            raise InvalidArguments("args must be an array")
        result = await self._actions.execute_script(args["sessionId"], script, list(script_args))
        return [text_block(f"Script execution result:\n{to_json(result)}")]

    async def _take_screenshot(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        screenshot = await self._actions.take_screenshot(args["sessionId"])
        return [
            text_block(f"Screenshot captured successfully ({len(screenshot)} bytes base64 data)"),
            image_block(screenshot),
        ]

    async def _inspect_element(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        selector = _string_arg(args, "selector")
        include_styles = args.get("includeStyles") is True
        inspection = await self._actions.inspect_element(args["sessionId"], selector, include_styles=include_styles)
        return [text_block(f"Element inspection for selector '{selector}':\n\n{to_json(inspection)}")]

    async def _get_performance_metrics(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        metrics = await self._actions.get_performance_metrics(args["sessionId"])
        return [text_block(f"Performance Metrics:\n\n{to_json(metrics)}")]

    async def _get_page_info(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        info = await self._actions.get_page_info(args["sessionId"])
        return [text_block(f"Page Info:\nURL: {info['url']}\nTitle: {info['title']}")]

    async def _list_sessions(self, _args: Mapping[str, Any]) -> list[ContentBlock]:
        session_ids = self._registry.list_sessions()
        listing = "\n".join(session_ids)
        return [text_block(f"Active Sessions ({len(session_ids)}):\n{listing}")]

    async def _close_session(self, args: Mapping[str, Any]) -> list[ContentBlock]:
        session_id = args["sessionId"]
        await self._registry.close_session(session_id)
        return [text_block(f"Session '{session_id}' closed successfully")]


def _require(args: Mapping[str, Any], required: tuple[str, ...]) -> None:
    missing = [key for key in required if args.get(key) is None or args.get(key) == ""]
    if missing:
        raise InvalidArguments(f"Missing required argument(s): {', '.join(missing)}")
    session_id = args.get("sessionId")
    if "sessionId" in required and not isinstance(session_id, str):
        raise InvalidArguments("sessionId must be a string")


def _string_arg(args: Mapping[str, Any], key: str) -> str:
    value = args[key]
    if not isinstance(value, str):
        raise InvalidArguments(f"{key} must be a string")
    return value


def _flag(value: bool) -> str:
    return "true" if value else "false"
