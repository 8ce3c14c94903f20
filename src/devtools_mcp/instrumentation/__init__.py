"""Browser-side capture payloads.

Each payload is a WebDriver-style function body shipped as a package resource.
Installing writes into a ``window`` buffer that later reads drain and clears reset.
"""

from dataclasses import dataclass
from functools import lru_cache
from importlib.resources import files

SNIPPET_VERSION = 1
CONSOLE_BUFFER = "__devtoolsMcpConsoleLogs"
NETWORK_BUFFER = "__devtoolsMcpNetworkLogs"


@lru_cache(maxsize=None)
def load_snippet(filename: str) -> str:
    return files(__name__).joinpath(filename).read_text(encoding="utf-8")


@dataclass(frozen=True, slots=True)
class Instrumentation:
    name: str
    buffer: str
    filename: str

    @property
    def install_script(self) -> str:
        return load_snippet(self.filename)

    @property
    def read_script(self) -> str:
        # null (not []) tells the caller the buffer is gone, e.g. after a page load.
        return f"return window.{self.buffer} || null;"

    @property
    def clear_script(self) -> str:
        return f"if (window.{self.buffer}) {{ window.{self.buffer} = []; }}"


CONSOLE_CAPTURE = Instrumentation(name="console", buffer=CONSOLE_BUFFER, filename="console_capture.js")
NETWORK_CAPTURE = Instrumentation(name="network", buffer=NETWORK_BUFFER, filename="network_capture.js")
