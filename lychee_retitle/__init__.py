"""Retitle UUID-named Lychee photos from the text in their caption region.

Public API -- all symbols that tests and external code import live here.
Internally the code is split across focused submodules; this file
re-exports the stable public surface so ``from lychee_retitle import X`` works.
"""

__version__ = "0.1.0"

from .catalog import Catalog
from .config import AppConfig, build_database_url, load_config, parse_config
from .conversion import caption_box, crop_caption_region, extract_first_frame
from .errors import (
    AssetDownloadError,
    CatalogError,
    ConfigError,
    CropError,
    FrameExtractionError,
    NoTextDetected,
    OCRClientError,
    OCRError,
    RetitleError,
    StateError,
)
from .models import CatalogItem, Outcome, ProcessingError, RunOptions, RunSummary
from .ocr import TextDetector, create_vision_client
from .review import build_review_url, dispatch_review_task, open_review_url
from .runner import log_summary, process_photo, run_retitle
from .sources import download_asset
from .utils import (
    build_image_url,
    build_web_link,
    is_uuid_title,
    is_video_file,
    load_review_state,
    record_no_text,
    save_review_state,
)

__all__ = [
    "__version__",
    # Models
    "CatalogItem",
    "Outcome",
    "ProcessingError",
    "RunOptions",
    "RunSummary",
    # Errors
    "RetitleError",
    "ConfigError",
    "StateError",
    "CatalogError",
    "OCRClientError",
    "AssetDownloadError",
    "FrameExtractionError",
    "CropError",
    "OCRError",
    "NoTextDetected",
    # Config
    "AppConfig",
    "load_config",
    "parse_config",
    "build_database_url",
    # Utils
    "is_uuid_title",
    "is_video_file",
    "build_image_url",
    "build_web_link",
    "load_review_state",
    "save_review_state",
    "record_no_text",
    # Catalog
    "Catalog",
    # Sources
    "download_asset",
    # Conversion
    "extract_first_frame",
    "caption_box",
    "crop_caption_region",
    # OCR
    "create_vision_client",
    "TextDetector",
    # Review tasks
    "build_review_url",
    "dispatch_review_task",
    "open_review_url",
    # Runner
    "process_photo",
    "run_retitle",
    "log_summary",
]
