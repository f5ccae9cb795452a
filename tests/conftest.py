"""Pytest configuration and fixtures."""

import json
import shutil
import tempfile
from pathlib import Path

import httpx
import pytest

from museai.api.client import MuseClient
from museai.config.settings import APIConfig


class RecordingTransport(httpx.MockTransport):
    """Mock transport that records every request and replies with a canned response."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.status_code = 200
        self.response_kwargs: dict = {"json": {}}
        super().__init__(self._handle)

    def reply(self, status_code: int = 200, **kwargs) -> None:
        """Set the response returned for subsequent requests."""
        self.status_code = status_code
        self.response_kwargs = kwargs

    def _handle(self, request: httpx.Request) -> httpx.Response:
        request.read()
        self.requests.append(request)
        return httpx.Response(self.status_code, **self.response_kwargs)

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def temp_dir():
    """Create a temporary directory for tests."""
    temp_path = Path(tempfile.mkdtemp())
    yield temp_path
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def test_config():
    """Create a test API configuration."""
    return APIConfig(api_key="test-key")


@pytest.fixture
def transport():
    """Create a recording mock transport."""
    return RecordingTransport()


@pytest.fixture
def client(test_config, transport):
    """Create an API client wired to the recording transport."""
    return MuseClient(test_config, transport=transport)


@pytest.fixture
def sample_video():
    """Video descriptor as returned by files/videos/<svid>."""
    return {
        "creator": 1,
        "description": "A test video",
        "duration": 52.4,
        "embed_domains": ["example.com"],
        "fid": "a" * 64,
        "filename": "test.mp4",
        "height": 720,
        "ingesting": 0,
        "svid": "svid123",
        "title": "Test Video",
        "url": "https://muse.ai/v/svid123",
        "visibility": "unlisted",
        "width": "1280",
    }
