from __future__ import annotations

from dataclasses import dataclass
import logging
import os
from typing import Mapping

DEFAULT_SERVER_NAME = "devtools-mcp"
DEFAULT_INSTRUCTIONS = (
    "Expose browser devtools over named sessions backed by brui_core/Playwright. "
    "Start a session with a sessionId of your choice, reuse it for navigation, scripts, "
    "console/network logs and inspection, and close it when done."
)
_WAIT_UNTIL_VALUES = ("load", "domcontentloaded", "networkidle")
_TRUE_VALUES = ("1", "true", "yes", "on")
_FALSE_VALUES = ("0", "false", "no", "off")


class ConfigError(ValueError):
    """Raised when devtools MCP configuration is invalid."""


@dataclass(frozen=True, slots=True)
class DevtoolsSettings:
    log_level: str = "INFO"
    navigation_timeout_ms: int = 60000
    wait_until: str = "load"
    max_element_text_chars: int = 500
    full_page_screenshot: bool = False
    keep_alive: bool = True
    close_browser: bool = False


@dataclass(frozen=True, slots=True)
class ServerConfig:
    name: str = DEFAULT_SERVER_NAME
    instructions: str = DEFAULT_INSTRUCTIONS

    @classmethod
    def from_env(cls, env: Mapping[str, str] | None = None) -> "ServerConfig":
        actual_env = env if env is not None else os.environ
        return cls(
            name=actual_env.get("DEVTOOLS_MCP_NAME", DEFAULT_SERVER_NAME),
            instructions=actual_env.get("DEVTOOLS_MCP_INSTRUCTIONS", DEFAULT_INSTRUCTIONS),
        )


def load_settings(env: Mapping[str, str] | None = None) -> DevtoolsSettings:
    actual_env = env if env is not None else os.environ

    log_level = _parse_log_level(actual_env.get("DEVTOOLS_MCP_LOG_LEVEL", "INFO"))
    navigation_timeout_ms = _parse_positive_int(
        actual_env.get("DEVTOOLS_MCP_NAVIGATION_TIMEOUT_MS", "60000"),
        "DEVTOOLS_MCP_NAVIGATION_TIMEOUT_MS",
    )
    wait_until = _parse_choice(
        actual_env.get("DEVTOOLS_MCP_WAIT_UNTIL", "load"),
        "DEVTOOLS_MCP_WAIT_UNTIL",
        _WAIT_UNTIL_VALUES,
    )
    max_element_text_chars = _parse_positive_int(
        actual_env.get("DEVTOOLS_MCP_MAX_ELEMENT_TEXT_CHARS", "500"),
        "DEVTOOLS_MCP_MAX_ELEMENT_TEXT_CHARS",
    )
    full_page_screenshot = _parse_bool(
        actual_env.get("DEVTOOLS_MCP_FULL_PAGE_SCREENSHOT", "false"),
        "DEVTOOLS_MCP_FULL_PAGE_SCREENSHOT",
    )
    keep_alive = _parse_bool(actual_env.get("DEVTOOLS_MCP_KEEP_ALIVE", "true"), "DEVTOOLS_MCP_KEEP_ALIVE")
    close_browser = _parse_bool(
        actual_env.get("DEVTOOLS_MCP_CLOSE_BROWSER", "false"),
        "DEVTOOLS_MCP_CLOSE_BROWSER",
    )

    return DevtoolsSettings(
        log_level=log_level,
        navigation_timeout_ms=navigation_timeout_ms,
        wait_until=wait_until,
        max_element_text_chars=max_element_text_chars,
        full_page_screenshot=full_page_screenshot,
        keep_alive=keep_alive,
        close_browser=close_browser,
    )


def _parse_positive_int(raw: str, field_name: str) -> int:
    try:
        value = int(raw)
    except ValueError as exc:
        raise ConfigError(f"{field_name} must be an integer.") from exc
    if value <= 0:
        raise ConfigError(f"{field_name} must be greater than zero.")
    return value


def _parse_bool(raw: str, field_name: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ConfigError(f"{field_name} must be a boolean (true/false). Received: {raw}")


def _parse_choice(raw: str, field_name: str, choices: tuple[str, ...]) -> str:
    value = raw.strip().lower()
    if value not in choices:
        allowed = ", ".join(choices)
        raise ConfigError(f"{field_name} must be one of: {allowed}. Received: {raw}")
    return value


def _parse_log_level(raw: str) -> str:
    value = raw.strip().upper()
    if not isinstance(logging.getLevelName(value), int):
        raise ConfigError(f"DEVTOOLS_MCP_LOG_LEVEL is not a valid logging level. Received: {raw}")
    return value
