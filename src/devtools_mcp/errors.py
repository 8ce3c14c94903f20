class DevtoolsError(Exception):
    """Base class for failures surfaced to tool callers."""


class DuplicateSession(DevtoolsError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} already exists")
        self.session_id = session_id


class SessionNotFound(DevtoolsError):
    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class UnknownTool(DevtoolsError):
    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class InvalidArguments(DevtoolsError):
    """Raised when a tool call is missing a required argument or has the wrong type."""


class DriverFailure(DevtoolsError):
    """Raised for any failure reported by the browser driver."""
