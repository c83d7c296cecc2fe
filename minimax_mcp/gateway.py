"""
Pass-through adapter between the tool handlers and the fal.ai queue API
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, Optional

import fal_client
from fal_client import AsyncClient

from minimax_mcp.config import Settings
from minimax_mcp.errors import ConfigurationError
from minimax_mcp.schemas import (
    GenerationOutput,
    GenerationResult,
    QueueHandle,
    QueueLog,
    QueueStatus,
)

logger = logging.getLogger(__name__)


class InferenceGateway(ABC):
    """
    Contract for the remote inference backend.

    Each method maps 1:1 to a platform primitive. Failures are raised to the
    caller unchanged; nothing here retries or overrides timeouts.
    """

    @abstractmethod
    async def generate(self, arguments: Dict[str, Any]) -> GenerationResult:
        """Run a request and wait for its output."""

    @abstractmethod
    async def submit(self, arguments: Dict[str, Any], webhook_url: Optional[str] = None) -> QueueHandle:
        """Enqueue a request and return its handle immediately."""

    @abstractmethod
    async def status(self, request_id: str, with_logs: bool = True) -> QueueStatus:
        """Fetch the current state of a queued request."""

    @abstractmethod
    async def result(self, request_id: str) -> GenerationOutput:
        """Fetch the output of a completed queued request."""


def _to_queue_logs(raw_logs: Any) -> list:
    logs = []
    for entry in raw_logs or []:
        if isinstance(entry, dict):
            logs.append(QueueLog(message=str(entry.get("message", "")), timestamp=entry.get("timestamp")))
        else:
            logs.append(QueueLog(message=str(entry)))
    return logs


def to_queue_status(status: Any, response_url: Optional[str] = None) -> QueueStatus:
    """Translate a fal_client status object into a QueueStatus; response_url is kept only once completed."""
    if isinstance(status, fal_client.Queued):
        return QueueStatus(status="IN_QUEUE", queue_position=status.position)
    if isinstance(status, fal_client.InProgress):
        return QueueStatus(status="IN_PROGRESS", logs=_to_queue_logs(status.logs))
    if isinstance(status, fal_client.Completed):
        return QueueStatus(status="COMPLETED", response_url=response_url, logs=_to_queue_logs(status.logs))
    raise ValueError(f"Unknown queue status: {status!r}")


class FalGateway(InferenceGateway):
    """InferenceGateway backed by fal_client.AsyncClient."""

    def __init__(self, settings: Settings, client: Optional[AsyncClient] = None):
        self.model_id = settings.model_id
        self._configured = settings.fal_configured
        self._client = client or AsyncClient(key=settings.fal_key)

    def _require_client(self) -> AsyncClient:
        if not self._configured:
            raise ConfigurationError("FAL_KEY environment variable is not set")
        return self._client

    async def generate(self, arguments: Dict[str, Any]) -> GenerationResult:
        client = self._require_client()
        handle = await client.submit(self.model_id, arguments=arguments)
        logger.info(f"Request {handle.request_id} enqueued for {self.model_id}")

        async for event in handle.iter_events(with_logs=True):
            if isinstance(event, fal_client.InProgress):
                for log in event.logs or []:
                    message = log.get("message") if isinstance(log, dict) else log
                    logger.info(message)

        data = await handle.get()
        return GenerationResult(request_id=handle.request_id, output=GenerationOutput.model_validate(data))

    async def submit(self, arguments: Dict[str, Any], webhook_url: Optional[str] = None) -> QueueHandle:
        client = self._require_client()
        handle = await client.submit(self.model_id, arguments=arguments, webhook_url=webhook_url)
        return QueueHandle(request_id=handle.request_id, webhook_url=webhook_url)

    async def status(self, request_id: str, with_logs: bool = True) -> QueueStatus:
        client = self._require_client()
        handle = client.get_handle(self.model_id, request_id)
        status = await handle.status(with_logs=with_logs)
        return to_queue_status(status, response_url=handle.response_url)

    async def result(self, request_id: str) -> GenerationOutput:
        client = self._require_client()
        data = await client.result(self.model_id, request_id)
        return GenerationOutput.model_validate(data)
