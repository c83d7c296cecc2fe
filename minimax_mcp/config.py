"""
Process-wide configuration, read once at startup
"""

import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

from minimax_mcp import MODEL_ID

logger = logging.getLogger(__name__)

DEFAULT_IMAGES_DIRNAME = "images"
DEFAULT_DOWNLOAD_TIMEOUT_SECONDS = 60.0


class Settings(BaseModel):
    """Immutable server settings shared by the dispatcher, gateway and materializer"""
    model_config = ConfigDict(frozen=True)

    fal_key: Optional[str] = None
    model_id: str = MODEL_ID
    images_dir: Path
    download_timeout: float = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    log_level: str = "INFO"

    @property
    def fal_configured(self) -> bool:
        return bool(self.fal_key)


def load_settings() -> Settings:
    """Build Settings from the environment (and a .env file, if present)."""
    load_dotenv()

    fal_key = os.getenv("FAL_KEY") or None
    images_dir = Path(os.getenv("MINIMAX_IMAGES_DIR", Path.cwd() / DEFAULT_IMAGES_DIRNAME))

    timeout_raw = os.getenv("DOWNLOAD_TIMEOUT_SECONDS")
    try:
        download_timeout = float(timeout_raw) if timeout_raw else DEFAULT_DOWNLOAD_TIMEOUT_SECONDS
    except ValueError:
        logger.warning(f"Ignoring invalid DOWNLOAD_TIMEOUT_SECONDS={timeout_raw!r}")
        download_timeout = DEFAULT_DOWNLOAD_TIMEOUT_SECONDS

    return Settings(
        fal_key=fal_key,
        images_dir=images_dir.resolve(),
        download_timeout=download_timeout,
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
