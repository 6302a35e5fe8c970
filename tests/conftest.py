"""Pytest fixtures.

This file adjusts sys.path for src-layout imports.
"""

# ruff: noqa: E402

import os
import sys

# Ensure `src` is on sys.path so imports like `from parse_rest.core...` resolve during tests
ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
SRC = os.path.join(ROOT, "src")
if os.path.isdir(SRC):
    sys.path.insert(0, SRC)
sys.path.insert(0, ROOT)

import httpx
import pytest
import pytest_asyncio
from rich.traceback import install

from parse_rest.core.auth.context import AuthContext
from parse_rest.core.client import ParseClient
from parse_rest.core.dispatcher.dispatcher import RequestDispatcher
from parse_rest.core.settings.settings import FLAT_ENV_KEYS, ParseSettings
from tests.utils import APP_ID, MASTER_KEY, REST_API_KEY, SERVER_URL, RecordingHandler

# Enable readable tracebacks in development / test environments.
# Can be disabled with PYTEST_RICH=0
if os.getenv("PYTEST_RICH", "1") == "1":
    install(
        show_locals=True,  # show local variables for each frame
        width=None,  # use terminal width
        word_wrap=True,  # wrap long lines
        extra_lines=1,  # some context around lines
        suppress=["/usr/lib/python3", "site-packages"],  # hide "noisy" third-party frames
    )


@pytest.fixture
def handler():
    """Record outgoing requests; queue responses with handler.queue(...)."""
    return RecordingHandler()


@pytest_asyncio.fixture
async def http_client(handler):
    """httpx.AsyncClient answering from the recording handler."""
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as client:
        yield client


@pytest.fixture
def dispatcher(http_client):
    """Dispatcher wired to the mock transport."""
    return RequestDispatcher(SERVER_URL, http_client=http_client)


@pytest.fixture
def auth():
    """Context with a master key and a REST API key, no session."""
    return AuthContext(application_id=APP_ID, master_key=MASTER_KEY, rest_api_key=REST_API_KEY)


@pytest.fixture
def anonymous_auth():
    """Context holding only the application id."""
    return AuthContext(application_id=APP_ID)


@pytest.fixture
def client(http_client):
    """ParseClient wired to the mock transport."""
    return ParseClient(
        SERVER_URL,
        APP_ID,
        master_key=MASTER_KEY,
        rest_api_key=REST_API_KEY,
        http_client=http_client,
    )


@pytest.fixture
def clean_env(monkeypatch):
    """Remove every parse-rest environment variable for the duration of a test."""
    prefix = f"{ParseSettings.ENV_PREFIX}{ParseSettings.ENV_SEPARATOR}"
    for name in list(os.environ):
        if name in FLAT_ENV_KEYS or name.startswith(prefix):
            monkeypatch.delenv(name)
    return monkeypatch
