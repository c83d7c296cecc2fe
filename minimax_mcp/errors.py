"""Exceptions raised inside the MiniMax MCP server."""


class MinimaxError(Exception):
    """Base class for errors raised by this package."""


class ConfigurationError(MinimaxError):
    """The fal.ai credential was not configured at startup."""


class DownloadError(MinimaxError):
    """A single generated image could not be saved locally."""

    def __init__(self, url: str, reason: str):
        self.url = url
        self.reason = reason
        super().__init__(f"Failed to download image: {reason}")
