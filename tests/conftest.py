"""
Shared fixtures: isolated settings, a stub Replicate upstream and log capture.
"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from app import create_app
from core.app_config import Settings
from core.logger_config import logger
from core.utils.time_utils import FileStamp
from handlers.image_tools import ImageTools
from handlers.replicate_client import ReplicateClient

API_HOST = "api.replicate.com"
IMAGE_URL = "https://replicate.delivery/xezq/out-0.webp"
IMAGE_BYTES = b"RIFF\x1a\x00\x00\x00WEBPVP8 fake-image-bytes"


class FakeReplicate:
    """Stub upstream answering prediction POSTs and image GETs, recording every request."""

    def __init__(self):
        self.requests = []
        self.prediction = {"id": "pred-1", "status": "succeeded", "output": [IMAGE_URL]}
        self.prediction_status = 201
        self.prediction_exception = None
        self.image_status = 200
        self.image_bytes = IMAGE_BYTES

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if request.url.host == API_HOST:
            if self.prediction_exception is not None:
                raise self.prediction_exception
            return httpx.Response(self.prediction_status, json=self.prediction)
        return httpx.Response(self.image_status, content=self.image_bytes)

    @property
    def prediction_calls(self):
        return [r for r in self.requests if r.url.host == API_HOST]

    @property
    def download_calls(self):
        return [r for r in self.requests if r.url.host != API_HOST]

    def last_input(self) -> dict:
        return json.loads(self.prediction_calls[-1].content)["input"]


@pytest.fixture
def settings(tmp_path):
    """Settings rooted in a temporary directory with all folders created."""
    settings = Settings.for_root(tmp_path, replicate_api_token="test-token")
    settings.ensure_directories()
    return settings


@pytest.fixture
def fake_replicate():
    return FakeReplicate()


@pytest.fixture
def replicate_client(settings, fake_replicate):
    return ReplicateClient(settings, transport=httpx.MockTransport(fake_replicate.handler))


@pytest.fixture
def image_tools(settings, replicate_client):
    return ImageTools(settings, replicate_client, FileStamp())


@pytest.fixture
def client(settings, replicate_client):
    app = create_app(settings, replicate_client)
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def log_messages():
    """Collect loguru messages emitted during a test."""
    messages = []
    sink_id = logger.add(lambda message: messages.append(message.record["message"]), level="DEBUG")
    yield messages
    logger.remove(sink_id)
