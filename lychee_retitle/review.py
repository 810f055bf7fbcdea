"""Things review tasks for photos where no caption text was found."""

from __future__ import annotations

import logging
import subprocess
import sys
from urllib.parse import quote

log = logging.getLogger(__name__)

APP_NAME = "Lychee BB"
THINGS_ADD_URL = "things:///add"


def build_review_url(photo_id: str, image_url: str, web_link: str) -> str:
    """Return a ``things:///add`` deep link asking for a manual caption."""
    title = f"[{APP_NAME}] Review {photo_id}"
    notes = f"Image: {image_url}\nWeb UI: {web_link}"
    return f"{THINGS_ADD_URL}?title={quote(title, safe='')}&notes={quote(notes, safe='')}"


def _opener() -> str:
    return "open" if sys.platform == "darwin" else "xdg-open"


def open_review_url(url: str) -> bool:
    """Hand *url* to the OS opener. Returns False (and logs) on failure."""
    try:
        subprocess.run([_opener(), url], check=True, capture_output=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        log.error("Error opening Things URL: %s", exc)
        return False
    return True


def dispatch_review_task(
    photo_id: str,
    image_url: str,
    web_link: str,
    *,
    dry_run: bool,
) -> str:
    """Build the review link, then print it (dry run) or open it."""
    url = build_review_url(photo_id, image_url, web_link)
    if dry_run:
        print(f"Would open Things URL: {url}")
    else:
        open_review_url(url)
    return url
