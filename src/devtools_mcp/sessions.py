import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from devtools_mcp.driver import DriverFactory, DriverHandle, SessionOptions
from devtools_mcp.errors import DevtoolsError, DriverFailure, DuplicateSession, SessionNotFound

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class InstrumentationState:
    console: bool = False
    network: bool = False

    def reset(self) -> None:
        self.console = False
        self.network = False


@dataclass(slots=True)
class BrowserSession:
    session_id: str
    driver: DriverHandle
    options: SessionOptions
    created_at: datetime
    instrumentation: InstrumentationState = field(default_factory=InstrumentationState)


class SessionRegistry:
    def __init__(self, driver_factory: DriverFactory) -> None:
        self._driver_factory = driver_factory
        self._sessions: dict[str, BrowserSession] = {}
        self._pending: set[str] = set()
        self._generation = 0
        self._lock = asyncio.Lock()

    async def create_session(self, session_id: str, options: SessionOptions | None = None) -> BrowserSession:
        resolved_options = options or SessionOptions()
        async with self._lock:
            if session_id in self._sessions or session_id in self._pending:
                raise DuplicateSession(session_id)
            self._pending.add(session_id)
            generation = self._generation

        try:
            driver = await self._driver_factory(resolved_options)
        except Exception as exc:
            raise DriverFailure(f"Failed to create browser session: {exc}") from exc
        finally:
            self._pending.discard(session_id)

        session = BrowserSession(
            session_id=session_id,
            driver=driver,
            options=resolved_options,
            created_at=datetime.now(timezone.utc),
        )
        async with self._lock:
            # close_all_sessions ran while the driver was starting.
            swept = generation != self._generation
            if not swept:
                self._sessions[session_id] = session
        if swept:
            await self._discard_driver(session_id, driver)
            raise DriverFailure(f"Sessions were closed while '{session_id}' was starting")

        logger.info("Started session '%s' (%s)", session_id, resolved_options)
        return session

    def get_session(self, session_id: str) -> Optional[BrowserSession]:
        return self._sessions.get(session_id)

    def list_sessions(self) -> list[str]:
        return list(self._sessions)

    async def close_session(self, session_id: str) -> None:
        async with self._lock:
            session = self._sessions.pop(session_id, None)
        if not session:
            raise SessionNotFound(session_id)

        logger.info("Closing session '%s'", session_id)
        try:
            await session.driver.quit()
        except Exception as exc:
            raise DriverFailure(f"Failed to close session: {exc}") from exc

    async def close_all_sessions(self) -> dict[str, str]:
        async with self._lock:
            self._generation += 1
        failures: dict[str, str] = {}
        for session_id in self.list_sessions():
            try:
                await self.close_session(session_id)
            except DevtoolsError as exc:
                logger.error("Failed to close session '%s': %s", session_id, exc)
                failures[session_id] = str(exc)
        return failures

    async def _discard_driver(self, session_id: str, driver: DriverHandle) -> None:
        logger.warning("Releasing browser for '%s' started during shutdown", session_id)
        try:
            await driver.quit()
        except Exception as exc:
            logger.error("Failed to release browser for '%s': %s", session_id, exc)


async def get_session_or_raise(registry: SessionRegistry, session_id: str) -> BrowserSession:
    session = registry.get_session(session_id)
    if not session:
        raise SessionNotFound(session_id)
    return session
