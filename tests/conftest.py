import logging
from pathlib import Path

import pytest

from dotenv import load_dotenv

project_root = Path(__file__).parent.parent
env_test_path = project_root / ".env.test"

if env_test_path.exists():
    load_dotenv(env_test_path, override=True)
    logging.info("Loaded test environment from %s", env_test_path)


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    # Playwright (brui_core) requires asyncio; avoid trio backend in pytest-anyio.
    return "asyncio"
