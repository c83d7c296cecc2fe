"""
Download generated images to the local images directory
"""

import base64
import binascii
import logging
import re
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

import aiofiles
import httpx

from minimax_mcp.errors import DownloadError
from minimax_mcp.schemas import DownloadedArtifact, ImageResult

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "minimax_"
MAX_PROMPT_SLUG_LENGTH = 50
CHUNK_SIZE = 64 * 1024
DEFAULT_TIMEOUT_SECONDS = 60.0

_DISALLOWED_CHARS = re.compile(r"[^a-z0-9\s_]")
_WHITESPACE = re.compile(r"\s+")


def sanitize_prompt(text: str) -> str:
    """Lowercase, drop anything but letters/digits/whitespace/underscores, join words with '_', cap at 50 chars."""
    slug = _DISALLOWED_CHARS.sub("", text.lower())
    slug = _WHITESPACE.sub("_", slug)
    return slug[:MAX_PROMPT_SLUG_LENGTH]


def format_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(timezone.utc)
    iso = now.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
    return iso.replace(":", "-").replace(".", "-")


def image_filename(naming_seed: str, index: int, seed: Optional[int] = None, now: Optional[datetime] = None) -> str:
    """
    Build the local filename for one image.

    Example: minimax_a_red_fox_42_1_2025-01-01T12-00-00-000Z.png
    """
    seed_part = f"_{seed}" if seed else ""
    return f"{FILENAME_PREFIX}{sanitize_prompt(naming_seed)}{seed_part}_{index}_{format_timestamp(now)}.png"


class ArtifactMaterializer:
    """
    Saves remote images under images_dir, one at a time, isolating failures per image.

    An injected http_client is shared by every call; otherwise each materialize
    call opens and closes its own client.
    """

    def __init__(
        self,
        images_dir: Path,
        http_client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ):
        self.images_dir = Path(images_dir)
        self.http_client = http_client
        self.timeout = timeout

    def ensure_images_dir(self) -> Path:
        self.images_dir.mkdir(parents=True, exist_ok=True)
        return self.images_dir

    @asynccontextmanager
    async def _client(self):
        if self.http_client is not None:
            yield self.http_client
            return
        async with httpx.AsyncClient(follow_redirects=True, timeout=self.timeout) as client:
            yield client

    async def download(self, url: str, filename: str, http_client: Optional[httpx.AsyncClient] = None) -> Path:
        """Save url to images_dir/filename and return the absolute path. Raises DownloadError."""
        target = self.ensure_images_dir() / filename

        if url.startswith("data:"):
            await self._write_data_uri(url, target)
        elif url.startswith("http://") or url.startswith("https://"):
            if http_client is not None:
                await self._stream_http(http_client, url, target)
            else:
                async with self._client() as client:
                    await self._stream_http(client, url, target)
        else:
            raise DownloadError(url, f"unsupported URL scheme: {url.split(':', 1)[0]}")

        return target.resolve()

    async def _stream_http(self, http_client: httpx.AsyncClient, url: str, target: Path) -> None:
        try:
            async with http_client.stream("GET", url) as response:
                if response.status_code != 200:
                    raise DownloadError(url, f"HTTP {response.status_code}")
                try:
                    async with aiofiles.open(target, "wb") as f:
                        async for chunk in response.aiter_bytes(CHUNK_SIZE):
                            await f.write(chunk)
                except (OSError, httpx.HTTPError) as e:
                    target.unlink(missing_ok=True)
                    raise DownloadError(url, str(e)) from e
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            raise DownloadError(url, str(e)) from e

    async def _write_data_uri(self, url: str, target: Path) -> None:
        try:
            header, payload = url.split(",", 1)
        except ValueError as e:
            raise DownloadError(url[:64], "malformed data URI") from e

        try:
            data = base64.b64decode(payload) if ";base64" in header else payload.encode()
        except (binascii.Error, ValueError) as e:
            raise DownloadError(url[:64], f"invalid base64 data: {e}") from e

        try:
            async with aiofiles.open(target, "wb") as f:
                await f.write(data)
        except OSError as e:
            target.unlink(missing_ok=True)
            raise DownloadError(url[:64], str(e)) from e

    async def materialize(
        self,
        images: Sequence[ImageResult],
        naming_seed: str,
        seed: Optional[int] = None,
    ) -> List[DownloadedArtifact]:
        """Download every image in order; the result has one entry per input image."""
        logger.info("Downloading images locally...")
        artifacts = []
        async with self._client() as client:
            for index, image in enumerate(images, start=1):
                filename = image_filename(naming_seed, index, seed)
                try:
                    local_path = await self.download(image.url, filename, http_client=client)
                    logger.info(f"Downloaded: {filename}")
                except Exception as e:
                    # one bad image never stops the rest of the batch
                    logger.error(f"Failed to download image {index}: {e}")
                    local_path = None

                artifacts.append(
                    DownloadedArtifact(image=image, local_path=local_path, index=index, filename=filename)
                )
        return artifacts
