#!/usr/bin/env python3
"""
fal.ai MiniMax MCP Server - text-to-image generation with fal-ai/minimax/image-01
"""

import argparse
import logging
import os
import signal
import sys
import time
from typing import Annotated, Optional

from fastmcp import FastMCP
from fastmcp.exceptions import ToolError
from pydantic import Field
from starlette.requests import Request
from starlette.responses import JSONResponse

from minimax_mcp import MODEL_ID, SERVER_NAME, __version__
from minimax_mcp.config import Settings, load_settings
from minimax_mcp.dispatcher import ToolDispatcher
from minimax_mcp.gateway import FalGateway
from minimax_mcp.materializer import ArtifactMaterializer
from minimax_mcp.schemas import (
    MAX_IMAGES,
    MAX_PROMPT_LENGTH,
    MIN_IMAGES,
    AspectRatio,
    GenerateRequest,
    QueueResultRequest,
    QueueStatusRequest,
    QueueSubmitRequest,
    ToolResponse,
)

logger = logging.getLogger(__name__)

Prompt = Annotated[
    str,
    Field(
        min_length=1,
        max_length=MAX_PROMPT_LENGTH,
        description=f"The text prompt to generate an image from (max {MAX_PROMPT_LENGTH} characters)",
    ),
]
NumImages = Annotated[int, Field(ge=MIN_IMAGES, le=MAX_IMAGES, description="Number of images to generate")]
AspectRatioArg = Annotated[AspectRatio, Field(description="The aspect ratio of the generated image")]
PromptOptimizer = Annotated[Optional[bool], Field(description="Enable prompt optimization for better results")]
RequestId = Annotated[str, Field(min_length=1, description="The request ID from queue submission")]


def configure_logging(level: Optional[str] = None) -> None:
    # stdout carries JSON-RPC in stdio mode, so logs always go to stderr
    logging.basicConfig(
        level=(level or os.getenv("LOG_LEVEL", "INFO")).upper(),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        stream=sys.stderr
    )


def _unwrap(response: ToolResponse) -> str:
    """Turn an error envelope into an MCP error result."""
    if response.is_error:
        raise ToolError(response.text)
    return response.text


def create_server(settings: Settings, dispatcher: Optional[ToolDispatcher] = None) -> FastMCP:
    """Build the FastMCP server and register the MiniMax tools."""
    if dispatcher is None:
        dispatcher = ToolDispatcher(
            settings=settings,
            gateway=FalGateway(settings),
            materializer=ArtifactMaterializer(settings.images_dir, timeout=settings.download_timeout),
        )

    mcp = FastMCP(SERVER_NAME, version=__version__)

    @mcp.tool(name="minimax_generate")
    async def minimax_generate(
        prompt: Prompt,
        aspect_ratio: AspectRatioArg = "1:1",
        num_images: NumImages = 1,
        prompt_optimizer: PromptOptimizer = None,
        sync_mode: Annotated[
            bool,
            Field(description="If set to true, wait for the image to be generated and uploaded before returning"),
        ] = True,
    ) -> str:
        """Generate high-quality images using fal-ai/minimax/image-01 - Advanced text-to-image generation model with superior capabilities"""
        request = GenerateRequest(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            num_images=num_images,
            prompt_optimizer=prompt_optimizer,
            sync_mode=sync_mode,
        )
        return _unwrap(await dispatcher.generate(request))

    @mcp.tool(name="minimax_generate_queue")
    async def minimax_generate_queue(
        prompt: Prompt,
        aspect_ratio: AspectRatioArg = "1:1",
        num_images: NumImages = 1,
        prompt_optimizer: PromptOptimizer = None,
        webhook_url: Annotated[Optional[str], Field(description="Optional webhook URL for result notifications")] = None,
    ) -> str:
        """Submit a long-running image generation request to the queue using fal-ai/minimax/image-01"""
        request = QueueSubmitRequest(
            prompt=prompt,
            aspect_ratio=aspect_ratio,
            num_images=num_images,
            prompt_optimizer=prompt_optimizer,
            webhook_url=webhook_url,
        )
        return _unwrap(await dispatcher.generate_queue(request))

    @mcp.tool(name="minimax_queue_status", annotations={"readOnlyHint": True, "idempotentHint": True})
    async def minimax_queue_status(
        request_id: RequestId,
        logs: Annotated[bool, Field(description="Include logs in response")] = True,
    ) -> str:
        """Check the status of a queued image generation request"""
        return _unwrap(await dispatcher.queue_status(QueueStatusRequest(request_id=request_id, logs=logs)))

    @mcp.tool(name="minimax_queue_result")
    async def minimax_queue_result(request_id: RequestId) -> str:
        """Get the result of a completed queued image generation request"""
        return _unwrap(await dispatcher.queue_result(QueueResultRequest(request_id=request_id)))

    @mcp.custom_route("/health", methods=["GET"])
    async def health_check(request: Request):
        """Health check endpoint (HTTP transports only)"""
        return JSONResponse({
            "status": "healthy",
            "timestamp": time.time(),
            "server": SERVER_NAME,
            "version": __version__,
            "model": MODEL_ID,
            "fal_configured": settings.fal_configured,
        })

    return mcp


def _handle_shutdown(signum, frame):
    logger.info(f"Received {signal.Signals(signum).name}, shutting down gracefully...")
    sys.exit(0)


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="fal.ai MiniMax image-01 MCP Server")
    parser.add_argument("--transport", default=os.getenv("MCP_TRANSPORT", "stdio"),
                        choices=["stdio", "http", "streamable-http"],
                        help="Transport method (stdio by default)")
    parser.add_argument("--host", default=os.getenv("HOST", "127.0.0.1"),
                        help="Host to bind to (http mode only)")
    parser.add_argument("--port", type=int, default=int(os.getenv("PORT", 8080)),
                        help="Port to bind to (http mode only)")
    args = parser.parse_args(argv)

    settings = load_settings()
    configure_logging(settings.log_level)
    if not settings.fal_configured:
        # keep serving; every tool call reports the missing key
        logger.error("FAL_KEY environment variable is required")
        logger.error("Please set your fal.ai API key: export FAL_KEY=your_api_key_here")
    signal.signal(signal.SIGTERM, _handle_shutdown)

    logger.info(f"Starting {SERVER_NAME} {__version__} ({MODEL_ID})")
    logger.info(f"  Transport: {args.transport}")
    logger.info(f"  fal.ai configured: {settings.fal_configured}")
    logger.info(f"  Images directory: {settings.images_dir}")

    mcp = create_server(settings)
    try:
        if args.transport == "stdio":
            mcp.run(transport="stdio")
        else:
            mcp.run(transport=args.transport, host=args.host, port=args.port, path="/mcp")
    except KeyboardInterrupt:
        logger.info("Received SIGINT, shutting down gracefully...")
        sys.exit(0)
    except Exception as e:
        logger.exception(f"Server error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
