"""Exception hierarchy.

Fatal errors abort the run from ``cli.main``; per-item errors are caught by
the runner and turned into :class:`~lychee_retitle.models.ProcessingError`.
"""

from __future__ import annotations


class RetitleError(Exception):
    """Base class for every error raised by this package."""


# ---------------------------------------------------------------------------
# Fatal
# ---------------------------------------------------------------------------


class ConfigError(RetitleError):
    pass


class StateError(RetitleError):
    pass


class CatalogError(RetitleError):
    """Database connection, query or update failure."""


class OCRClientError(RetitleError):
    pass


# ---------------------------------------------------------------------------
# Per-item
# ---------------------------------------------------------------------------


class AssetDownloadError(RetitleError):
    pass


class FrameExtractionError(RetitleError):
    """ffmpeg failed; ``output`` holds its combined stdout/stderr."""

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(f"{message} (ffmpeg output: {output})" if output else message)
        self.output = output


class CropError(RetitleError):
    pass


class OCRError(RetitleError):
    pass


class NoTextDetected(RetitleError):
    """Vision returned zero annotations. Not reported as an error."""
