"""Asset download from the Lychee uploads directory."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from urllib.parse import urlsplit

import requests

from .errors import AssetDownloadError

log = logging.getLogger(__name__)

DEFAULT_EXTENSION = ".jpg"
CHUNK_SIZE = 64 * 1024


def _extension_for(url: str) -> str:
    ext = os.path.splitext(urlsplit(url).path)[1]
    return ext or DEFAULT_EXTENSION


def download_asset(url: str, dest_dir: Path) -> Path:
    """Download *url* into a new file under *dest_dir* and return its path.

    The file keeps the URL's extension (``.jpg`` when there is none) so the
    video check and the decoders downstream see the right type.

    Raises:
        AssetDownloadError: transport failure, non-200 status or write error.
    """
    try:
        resp = requests.get(url, stream=True)
    except requests.RequestException as exc:
        raise AssetDownloadError(f"error downloading file: {exc}") from exc

    with resp:
        if resp.status_code != requests.codes.ok:
            raise AssetDownloadError(f"bad status: {resp.status_code} {resp.reason}")

        fd, name = tempfile.mkstemp(prefix="file-", suffix=_extension_for(url), dir=dest_dir)
        dest = Path(name)
        try:
            with os.fdopen(fd, "wb") as fh:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    fh.write(chunk)
        except (OSError, requests.RequestException) as exc:
            raise AssetDownloadError(f"error saving file: {exc}") from exc

    log.debug("  Downloaded: %s -> %s (%s bytes)", url, dest.name, dest.stat().st_size)
    return dest
