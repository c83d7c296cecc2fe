"""Data models for the fal.ai MiniMax image MCP server."""

from pathlib import Path
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

AspectRatio = Literal["1:1", "16:9", "4:3", "3:2", "2:3", "3:4", "9:16", "21:9"]

MAX_PROMPT_LENGTH = 1500
MIN_IMAGES = 1
MAX_IMAGES = 9
DEFAULT_CONTENT_TYPE = "image/png"


class GenerateRequest(BaseModel):
    """Arguments of a synchronous generation call."""

    prompt: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH, description="Text prompt")
    aspect_ratio: AspectRatio = Field(default="1:1", description="Aspect ratio of the generated image")
    num_images: int = Field(default=1, ge=MIN_IMAGES, le=MAX_IMAGES, description="Number of images to generate")
    prompt_optimizer: Optional[bool] = Field(None, description="Enable prompt optimization")
    sync_mode: bool = Field(default=True, description="Wait for images to be uploaded before returning")

    def to_arguments(self) -> Dict[str, Any]:
        """Request body for the inference API; unset optional flags are omitted."""
        return self.model_dump(exclude_none=True)


class QueueSubmitRequest(BaseModel):
    """Arguments of a queued generation call."""

    prompt: str = Field(..., min_length=1, max_length=MAX_PROMPT_LENGTH, description="Text prompt")
    aspect_ratio: AspectRatio = Field(default="1:1", description="Aspect ratio of the generated image")
    num_images: int = Field(default=1, ge=MIN_IMAGES, le=MAX_IMAGES, description="Number of images to generate")
    prompt_optimizer: Optional[bool] = Field(None, description="Enable prompt optimization")
    webhook_url: Optional[str] = Field(None, description="Webhook URL for result notifications")

    def to_arguments(self) -> Dict[str, Any]:
        """Request body for the queue; the webhook travels out of band."""
        return self.model_dump(exclude_none=True, exclude={"webhook_url"})


class QueueStatusRequest(BaseModel):
    request_id: str = Field(..., min_length=1, description="Request ID from queue submission")
    logs: bool = Field(default=True, description="Include logs in response")


class QueueResultRequest(BaseModel):
    request_id: str = Field(..., min_length=1, description="Request ID from queue submission")


class QueueHandle(BaseModel):
    """Tracking handle returned by a queue submission."""

    request_id: str
    webhook_url: Optional[str] = None


class QueueLog(BaseModel):
    message: str
    timestamp: Optional[str] = None


class QueueStatus(BaseModel):
    """Snapshot of a queued request."""

    status: Literal["IN_QUEUE", "IN_PROGRESS", "COMPLETED"]
    response_url: Optional[str] = None
    queue_position: Optional[int] = None
    logs: List[QueueLog] = Field(default_factory=list)


class ImageResult(BaseModel):
    """One generated image as described by the inference API."""

    url: str
    content_type: Optional[str] = None
    file_name: Optional[str] = None
    file_size: Optional[int] = None


class GenerationOutput(BaseModel):
    """Payload of a finished minimax/image-01 request."""

    images: List[ImageResult] = Field(default_factory=list)
    seed: Optional[int] = None


class GenerationResult(BaseModel):
    """Output of a synchronous call together with the request id it ran under."""

    request_id: str
    output: GenerationOutput


class DownloadedArtifact(BaseModel):
    """Outcome of materializing one ImageResult; local_path is None when the download failed."""

    image: ImageResult
    local_path: Optional[Path] = None
    index: int
    filename: str

    @property
    def url(self) -> str:
        return self.image.url

    @property
    def content_type(self) -> str:
        return self.image.content_type or DEFAULT_CONTENT_TYPE

    @property
    def downloaded(self) -> bool:
        return self.local_path is not None


class ToolResponse(BaseModel):
    """Envelope returned by every tool handler."""

    text: str
    is_error: bool = False

    @classmethod
    def success(cls, text: str) -> "ToolResponse":
        return cls(text=text)

    @classmethod
    def error(cls, text: str) -> "ToolResponse":
        return cls(text=text, is_error=True)
