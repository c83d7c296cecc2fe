"""
Tool handlers: validate, call the gateway, materialize images, format a report
"""

import logging

from minimax_mcp import MODEL_ID
from minimax_mcp.config import Settings
from minimax_mcp.formatting import (
    MISSING_KEY_MESSAGE,
    format_generation_report,
    format_queue_result,
    format_queue_status,
    format_queue_submission,
)
from minimax_mcp.gateway import InferenceGateway
from minimax_mcp.materializer import ArtifactMaterializer
from minimax_mcp.schemas import (
    GenerateRequest,
    QueueResultRequest,
    QueueStatusRequest,
    QueueSubmitRequest,
    ToolResponse,
)

logger = logging.getLogger(__name__)


def _failure(prefix: str, error: Exception) -> ToolResponse:
    return ToolResponse.error(f"{prefix} Error: {error}")


class ToolDispatcher:
    """
    Runs the four MiniMax tools.

    Every handler returns a ToolResponse and never raises; unexpected errors
    are logged with traceback and reported by message only. When the fal.ai
    key was missing at startup, every handler returns the configuration error
    without touching the gateway.
    """

    def __init__(self, settings: Settings, gateway: InferenceGateway, materializer: ArtifactMaterializer):
        self.settings = settings
        self.gateway = gateway
        self.materializer = materializer

    def _check_configured(self):
        if not self.settings.fal_configured:
            return ToolResponse.error(MISSING_KEY_MESSAGE)
        return None

    async def generate(self, request: GenerateRequest) -> ToolResponse:
        not_configured = self._check_configured()
        if not_configured:
            return not_configured

        try:
            logger.info(f'Generating image with {MODEL_ID} - prompt: "{request.prompt}"')
            result = await self.gateway.generate(request.to_arguments())
            output = result.output

            artifacts = await self.materializer.materialize(output.images, request.prompt, output.seed)
            return ToolResponse.success(
                format_generation_report(request, artifacts, output.seed, result.request_id)
            )
        except Exception as e:
            logger.exception("Error generating image")
            return _failure(f"Failed to generate image with {MODEL_ID}.", e)

    async def generate_queue(self, request: QueueSubmitRequest) -> ToolResponse:
        not_configured = self._check_configured()
        if not_configured:
            return not_configured

        try:
            logger.info(f'Submitting queue request for {MODEL_ID} - prompt: "{request.prompt}"')
            handle = await self.gateway.submit(request.to_arguments(), webhook_url=request.webhook_url)
            logger.info(f"Queued request {handle.request_id}")
            return ToolResponse.success(format_queue_submission(request, handle))
        except Exception as e:
            logger.exception("Error submitting queue request")
            return _failure(f"Failed to submit queue request for {MODEL_ID}.", e)

    async def queue_status(self, request: QueueStatusRequest) -> ToolResponse:
        not_configured = self._check_configured()
        if not_configured:
            return not_configured

        try:
            logger.info(f"Checking status for request: {request.request_id}")
            status = await self.gateway.status(request.request_id, with_logs=request.logs)
            return ToolResponse.success(format_queue_status(request.request_id, status))
        except Exception as e:
            logger.exception("Error checking queue status")
            return _failure("Failed to check queue status.", e)

    async def queue_result(self, request: QueueResultRequest) -> ToolResponse:
        not_configured = self._check_configured()
        if not_configured:
            return not_configured

        try:
            logger.info(f"Getting result for request: {request.request_id}")
            output = await self.gateway.result(request.request_id)

            # the original prompt is not known here
            naming_seed = f"queue_result_{request.request_id}"
            artifacts = await self.materializer.materialize(output.images, naming_seed, output.seed)
            return ToolResponse.success(format_queue_result(request.request_id, artifacts, output.seed))
        except Exception as e:
            logger.exception("Error getting queue result")
            return _failure("Failed to get queue result.", e)
