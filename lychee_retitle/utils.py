"""Cross-cutting helpers: constants, title/asset checks, URL builders, state I/O."""

from __future__ import annotations

import json
import os
import re
from pathlib import Path
from typing import Any
from urllib.parse import urlsplit

from .errors import StateError

# ---------------------------------------------------------------------------
# Constants
# ---------------------------------------------------------------------------

DEFAULT_CONFIG_FILE = "config.json"
DEFAULT_STATE_FILE = "state.json"

MEDIA_EXTENSIONS = (
    ".jpg",
    ".jpeg",
    ".png",
    ".gif",
    ".bmp",
    ".webp",
    ".mp4",
    ".mov",
    ".avi",
)
VIDEO_EXTENSIONS = frozenset({".mp4", ".mov", ".avi"})

UUID_PATTERN = re.compile(
    r"^[0-9a-f]{8}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{4}-[0-9a-f]{12}$"
)

STATE_KEY = "no_text_photos"


# ---------------------------------------------------------------------------
# Title and asset checks
# ---------------------------------------------------------------------------


def strip_media_extension(title: str) -> str:
    """Lower-case *title* and drop one trailing known media extension."""
    title = title.lower()
    for ext in MEDIA_EXTENSIONS:
        if title.endswith(ext):
            return title[: -len(ext)]
    return title


def is_uuid_title(title: str) -> bool:
    """True when *title* is a placeholder UUID, optionally with an extension."""
    return UUID_PATTERN.fullmatch(strip_media_extension(title)) is not None


def is_video_file(path: str) -> bool:
    """Classify a local path or URL as video by its extension."""
    ext = os.path.splitext(urlsplit(str(path)).path)[1].lower()
    return ext in VIDEO_EXTENSIONS


# ---------------------------------------------------------------------------
# URL builders
# ---------------------------------------------------------------------------


def build_image_url(base_url: str, short_path: str) -> str:
    return f"{base_url.rstrip('/')}/uploads/{short_path.lstrip('/')}"


def build_web_link(base_url: str, album_id: str, photo_id: str) -> str:
    return f"{base_url.rstrip('/')}/gallery/{album_id}/{photo_id}"


# ---------------------------------------------------------------------------
# Review state I/O
# ---------------------------------------------------------------------------


def empty_review_state() -> dict[str, Any]:
    return {STATE_KEY: {}}


def load_review_state(path: Path) -> dict[str, Any]:
    """Load the no-text state file, or an empty state if it does not exist.

    Raises:
        StateError: the file exists but cannot be read or decoded.
    """
    path = Path(path)
    if not path.exists():
        return empty_review_state()
    try:
        with open(path, "r", encoding="utf-8") as fh:
            state = json.load(fh)
    except OSError as exc:
        raise StateError(f"error opening state file: {exc}") from exc
    except ValueError as exc:
        raise StateError(f"error decoding state file: {exc}") from exc

    if not isinstance(state, dict):
        raise StateError("error decoding state file: top level must be an object")

    photos = state.get(STATE_KEY)
    if photos is None:
        state[STATE_KEY] = {}
    elif not isinstance(photos, dict):
        raise StateError(f"error decoding state file: '{STATE_KEY}' must be an object")
    return state


def save_review_state(path: Path, state: dict[str, Any]) -> Path:
    """Rewrite the whole state file and return its path."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as fh:
        json.dump(state, fh, indent=2, ensure_ascii=False)
        fh.write("\n")
        fh.flush()
        os.fsync(fh.fileno())
    return path


def is_known_no_text(state: dict[str, Any], photo_id: str) -> bool:
    return bool(state.get(STATE_KEY, {}).get(photo_id))


def record_no_text(path: Path, state: dict[str, Any], photo_id: str) -> Path:
    """Mark *photo_id* as having no text and flush the state file immediately."""
    state.setdefault(STATE_KEY, {})[photo_id] = True
    return save_review_state(path, state)
