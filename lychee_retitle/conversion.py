"""Video frame extraction (ffmpeg) and caption-region cropping (Pillow)."""

from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from PIL import Image, UnidentifiedImageError

from .errors import CropError, FrameExtractionError

log = logging.getLogger(__name__)

FFMPEG = "ffmpeg"
# Fraction of the frame height, counted from the bottom, that holds the caption.
CAPTION_FRACTION = 5


def extract_first_frame(video_path: Path, output_path: Path) -> Path:
    """Write the first frame of *video_path* to *output_path* as a JPEG.

    Any existing file at *output_path* is overwritten.

    Raises:
        FrameExtractionError: ffmpeg is missing, exits non-zero, or produces
            no output. The captured ffmpeg output is attached.
    """
    if shutil.which(FFMPEG) is None:
        raise FrameExtractionError(f"error extracting frame: {FFMPEG} not found on PATH")

    cmd = [
        FFMPEG,
        "-i", str(video_path),
        "-vframes", "1",
        "-q:v", "2",
        "-y",
        str(output_path),
    ]
    log.debug("Running: %s", " ".join(cmd))
    try:
        completed = subprocess.run(
            cmd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            errors="replace",
        )
    except OSError as exc:
        raise FrameExtractionError(f"error extracting frame: {exc}") from exc

    if completed.returncode != 0:
        raise FrameExtractionError(
            f"error extracting frame: exit status {completed.returncode}",
            output=completed.stdout.strip(),
        )
    if not Path(output_path).exists():
        raise FrameExtractionError(
            f"error extracting frame: no frame written to {output_path}",
            output=completed.stdout.strip(),
        )
    return Path(output_path)


def caption_box(width: int, height: int) -> tuple[int, int, int, int]:
    """Return the ``(left, top, right, bottom)`` box of the bottom fifth."""
    crop_height = height // CAPTION_FRACTION
    return 0, height - crop_height, width, height


def crop_caption_region(image_path: Path, output_path: Path | None = None) -> Path:
    """Crop the caption region of a still image and save it as a JPEG.

    Defaults to ``<image_path>.cropped.jpg``.

    Raises:
        CropError: the image cannot be decoded or the crop cannot be written.
    """
    image_path = Path(image_path)
    if output_path is None:
        output_path = image_path.with_name(image_path.name + ".cropped.jpg")

    try:
        with Image.open(image_path) as img:
            img.load()
            box = caption_box(*img.size)
            cropped = img.crop(box)
    except FileNotFoundError as exc:
        raise CropError(f"error opening image: {exc}") from exc
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError) as exc:
        raise CropError(f"error decoding image: {exc}") from exc

    if cropped.mode not in ("RGB", "L"):
        cropped = cropped.convert("RGB")
    try:
        cropped.save(output_path, format="JPEG")
    except (OSError, ValueError, SystemError) as exc:
        raise CropError(f"error encoding cropped image: {exc}") from exc

    log.debug("Cropped %s to box %s -> %s", image_path.name, box, Path(output_path).name)
    return Path(output_path)
