"""
Shared fixtures for the MiniMax MCP server tests
"""

import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio

sys.path.append(str(Path(__file__).parent.parent))

from minimax_mcp.config import Settings
from minimax_mcp.dispatcher import ToolDispatcher
from minimax_mcp.gateway import InferenceGateway
from minimax_mcp.materializer import ArtifactMaterializer
from minimax_mcp.schemas import (
    GenerationOutput,
    GenerationResult,
    ImageResult,
    QueueHandle,
    QueueLog,
    QueueStatus,
)

PNG_BYTES = b"\x89PNG\r\n\x1a\nfake-image-data"


class FakeGateway(InferenceGateway):
    """In-memory gateway that records every call."""

    def __init__(self, output: Optional[GenerationOutput] = None, request_id: str = "abc123", error: Exception = None):
        self.output = output or GenerationOutput(images=[])
        self.request_id = request_id
        self.error = error
        self.calls: List[tuple] = []
        self.queue_status = QueueStatus(
            status="IN_PROGRESS",
            logs=[QueueLog(message="step 1/4", timestamp="2025-01-01T00:00:00Z")],
        )

    def _record(self, name: str, *args):
        self.calls.append((name,) + args)
        if self.error:
            raise self.error

    async def generate(self, arguments: Dict[str, Any]) -> GenerationResult:
        self._record("generate", arguments)
        return GenerationResult(request_id=self.request_id, output=self.output)

    async def submit(self, arguments: Dict[str, Any], webhook_url: Optional[str] = None) -> QueueHandle:
        self._record("submit", arguments, webhook_url)
        return QueueHandle(request_id=self.request_id, webhook_url=webhook_url)

    async def status(self, request_id: str, with_logs: bool = True) -> QueueStatus:
        self._record("status", request_id, with_logs)
        return self.queue_status

    async def result(self, request_id: str) -> GenerationOutput:
        self._record("result", request_id)
        return self.output


def make_output(count: int, seed: Optional[int] = 42) -> GenerationOutput:
    return GenerationOutput(
        images=[
            ImageResult(url=f"https://fal.media/files/img{i}.png", content_type="image/png", file_size=1024)
            for i in range(1, count + 1)
        ],
        seed=seed,
    )


def image_handler(failing_urls=()):
    """MockTransport handler serving PNG bytes, 404 for the given URLs."""
    def handler(request: httpx.Request) -> httpx.Response:
        if str(request.url) in failing_urls:
            return httpx.Response(404)
        return httpx.Response(200, content=PNG_BYTES, headers={"content-type": "image/png"})
    return handler


@pytest.fixture
def settings(tmp_path):
    return Settings(fal_key="test-key", images_dir=tmp_path / "images")


@pytest.fixture
def unconfigured_settings(tmp_path):
    return Settings(fal_key=None, images_dir=tmp_path / "images")


@pytest_asyncio.fixture
async def http_client():
    async with httpx.AsyncClient(transport=httpx.MockTransport(image_handler())) as client:
        yield client


@pytest.fixture
def materializer(settings, http_client):
    return ArtifactMaterializer(settings.images_dir, http_client)


@pytest.fixture
def gateway():
    return FakeGateway(output=make_output(2))


@pytest.fixture
def dispatcher(settings, gateway, materializer):
    return ToolDispatcher(settings, gateway, materializer)


@pytest.fixture
def own_http_clients(monkeypatch):
    """Route clients the materializer opens for itself through a MockTransport; returns the opened clients."""
    real_client = httpx.AsyncClient
    opened = []

    def factory(*args, **kwargs):
        kwargs["transport"] = httpx.MockTransport(image_handler())
        client = real_client(*args, **kwargs)
        opened.append(client)
        return client

    monkeypatch.setattr("minimax_mcp.materializer.httpx.AsyncClient", factory)
    return opened
