"""Text reports returned to the MCP client."""

from typing import List, Optional, Sequence

from minimax_mcp import MODEL_ID
from minimax_mcp.schemas import (
    DownloadedArtifact,
    GenerateRequest,
    QueueHandle,
    QueueStatus,
    QueueSubmitRequest,
)

MISSING_KEY_MESSAGE = "Error: FAL_KEY environment variable is not set. Please configure your fal.ai API key."


def format_image_details(artifacts: Sequence[DownloadedArtifact]) -> str:
    blocks = []
    for artifact in artifacts:
        lines = [f"Image {artifact.index}:"]
        if artifact.local_path:
            lines.append(f"  Local Path: {artifact.local_path}")
        lines.append(f"  Original URL: {artifact.url}")
        lines.append(f"  Filename: {artifact.filename}")
        lines.append(f"  Content Type: {artifact.content_type}")
        if artifact.image.file_size:
            lines.append(f"  File Size: {artifact.image.file_size} bytes")
        blocks.append("\n".join(lines))
    return "\n\n".join(blocks)


def format_download_note(artifacts: Sequence[DownloadedArtifact]) -> str:
    saved = [a.local_path for a in artifacts if a.downloaded]
    if saved:
        return f"Images have been downloaded to {saved[0].parent}."
    return "Note: Local download failed, but original URLs are available."


def format_seed(seed: Optional[int]) -> str:
    return f"Seed: {seed}" if seed else "Seed: Auto-generated"


def format_generation_report(
    request: GenerateRequest,
    artifacts: Sequence[DownloadedArtifact],
    seed: Optional[int],
    request_id: str,
) -> str:
    lines: List[str] = [
        f"Successfully generated {len(artifacts)} image(s) using {MODEL_ID}:",
        "",
        f'Prompt: "{request.prompt}"',
        f"Aspect Ratio: {request.aspect_ratio}",
        f"Number of Images: {request.num_images}",
    ]
    if request.prompt_optimizer is not None:
        lines.append(f"Prompt Optimizer: {'Enabled' if request.prompt_optimizer else 'Disabled'}")
    lines += [
        format_seed(seed),
        f"Request ID: {request_id}",
        "",
        "Generated Images:",
        format_image_details(artifacts),
        "",
        format_download_note(artifacts),
    ]
    return "\n".join(lines)


def format_queue_submission(request: QueueSubmitRequest, handle: QueueHandle) -> str:
    webhook = f"Webhook URL: {handle.webhook_url}" if handle.webhook_url else "No webhook configured"
    return "\n".join([
        "Successfully submitted image generation request to queue.",
        "",
        f"Request ID: {handle.request_id}",
        f'Prompt: "{request.prompt}"',
        f"Aspect Ratio: {request.aspect_ratio}",
        f"Number of Images: {request.num_images}",
        webhook,
        "",
        "Use the request ID with minimax_queue_status to check progress "
        "or minimax_queue_result to get the final result.",
    ])


def format_queue_status(request_id: str, status: QueueStatus) -> str:
    lines = [f"Queue Status for Request ID: {request_id}", "", f"Status: {status.status}"]
    if status.queue_position is not None:
        lines.append(f"Queue Position: {status.queue_position}")
    if status.response_url:
        lines.append(f"Response URL: {status.response_url}")
    if status.logs:
        lines += ["", "Logs:"]
        lines += [f"[{log.timestamp}] {log.message}" if log.timestamp else log.message for log in status.logs]
    return "\n".join(lines)


def format_queue_result(request_id: str, artifacts: Sequence[DownloadedArtifact], seed: Optional[int]) -> str:
    return "\n".join([
        f"Queue Result for Request ID: {request_id}",
        "",
        f"Successfully completed! Generated {len(artifacts)} image(s):",
        "",
        format_seed(seed),
        "",
        "Generated Images:",
        format_image_details(artifacts),
        "",
        format_download_note(artifacts),
    ])
