"""Shared fixtures for the notifier test suite.

MockThemis stands in for a Themis instance behind an httpx.MockTransport:
it checks the API key and path like the real service, records every
request, and answers with a configurable status and body.
"""

import re
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import httpx
import pytest

from themis_notifier.core.config import ThemisInstance
from themis_notifier.reporting.types import BuildMetadata
from themis_notifier.reporting.workspace import Workspace

TEST_API_KEY = "test-api-key"
TEST_URL = "http://themis.local"
TEST_SOURCE_KEY = "src-key"


@dataclass
class Part:
    name: str
    filename: Optional[str]
    content_type: Optional[str]
    data: bytes


def parse_multipart(request: httpx.Request) -> dict[str, Part]:
    """Split a multipart/form-data request body into named parts."""
    content_type = request.headers["content-type"]
    boundary = content_type.split("boundary=", 1)[1].strip('"').encode()
    parts: dict[str, Part] = {}

    for chunk in request.content.split(b"--" + boundary):
        if not chunk.startswith(b"\r\n"):
            continue
        head, _, data = chunk[2:].partition(b"\r\n\r\n")
        headers = head.decode("utf-8")
        name = re.search(r'name="([^"]*)"', headers).group(1)
        filename = re.search(r'filename="([^"]*)"', headers)
        part_type = re.search(r"Content-Type: ([^\r\n]+)", headers, re.IGNORECASE)
        parts[name] = Part(
            name=name,
            filename=filename.group(1) if filename else None,
            content_type=part_type.group(1).strip() if part_type else None,
            data=data[:-2] if data.endswith(b"\r\n") else data,
        )
    return parts


class MockThemis:
    """In-process fake of a Themis instance."""

    def __init__(
        self,
        api_key: str = TEST_API_KEY,
        expected_path: Optional[str] = None,
        status: int = 200,
        body: str = "",
    ):
        self.api_key = api_key
        self.expected_path = expected_path
        self.status = status
        self.body = body
        self.requests: list[httpx.Request] = []
        self.on_request: Optional[Callable[[httpx.Request], None]] = None
        self._lock = threading.Lock()

    def handle(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        if self.on_request is not None:
            self.on_request(request)
        if request.headers.get("themis-api-key") != self.api_key:
            return httpx.Response(403, text="Wrong API key")
        if self.expected_path is not None and request.url.path != self.expected_path:
            return httpx.Response(400, text="KO")
        return httpx.Response(self.status, text=self.body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def mock_themis():
    return MockThemis(expected_path=f"/api/reportFiles/{TEST_SOURCE_KEY}")


@pytest.fixture
def instance():
    return ThemisInstance(name="local", url=TEST_URL, api_key=TEST_API_KEY)


@pytest.fixture
def workspace(tmp_path: Path) -> Workspace:
    """Workspace with one coverage report and one lint report."""
    (tmp_path / "build" / "coverage").mkdir(parents=True)
    (tmp_path / "build" / "coverage" / "cobertura.xml").write_text("<coverage/>")
    (tmp_path / "build" / "pmd.xml").write_text("<pmd/>")
    return Workspace(tmp_path)


@pytest.fixture
def metadata_base(workspace: Workspace) -> BuildMetadata:
    return BuildMetadata(
        execution_timestamp_millis=1_700_000_000_000,
        workspace_remote_path=workspace.remote_path,
        commit="abc123",
        branch="origin/main",
    )
