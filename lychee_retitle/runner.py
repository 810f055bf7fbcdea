"""Per-photo retitle pipeline and the run loop around it.

Each eligible photo goes through download -> (video) frame extraction ->
crop -> OCR -> title update, strictly one at a time. Per-photo failures are
collected as :class:`ProcessingError` records and never stop the run.
"""

from __future__ import annotations

import logging
import tempfile
import time
from pathlib import Path
from typing import Any, Iterable, Protocol

from .conversion import crop_caption_region, extract_first_frame
from .errors import (
    AssetDownloadError,
    CatalogError,
    CropError,
    FrameExtractionError,
    NoTextDetected,
    OCRError,
)
from .models import CatalogItem, Outcome, ProcessingError, RunOptions, RunSummary
from .review import dispatch_review_task
from .sources import download_asset
from .utils import (
    build_image_url,
    build_web_link,
    is_known_no_text,
    is_uuid_title,
    is_video_file,
    record_no_text,
)

log = logging.getLogger(__name__)


class TitleWriter(Protocol):
    def update_title(self, photo_id: str, title: str) -> None: ...


class Detector(Protocol):
    def detect(self, image_path: Path) -> str: ...


def process_photo(
    photo: CatalogItem,
    *,
    catalog: TitleWriter,
    detector: Detector,
    options: RunOptions,
    state: dict[str, Any],
    summary: RunSummary,
) -> Outcome:
    """Run one eligible photo through the pipeline and update *summary*."""
    image_url = build_image_url(options.base_url, photo.short_path)
    web_link = build_web_link(options.base_url, options.album_id, photo.photo_id)

    def _fail(message: str) -> Outcome:
        log.warning("Photo %s: %s", photo.photo_id, message)
        summary.errors.append(
            ProcessingError(
                photo_id=photo.photo_id,
                url=image_url,
                error=message,
                web_link=web_link,
            )
        )
        return Outcome.ERRORED

    # Everything written for this photo lives here and goes away with it.
    with tempfile.TemporaryDirectory(prefix="lychee-retitle-") as tmp:
        work_dir = Path(tmp)

        try:
            file_path = download_asset(image_url, work_dir)
        except AssetDownloadError as exc:
            return _fail(f"Error downloading file: {exc}")

        image_path = file_path
        if is_video_file(image_url):
            try:
                image_path = extract_first_frame(file_path, work_dir / "frame.jpg")
            except FrameExtractionError as exc:
                return _fail(f"Error extracting frame from video: {exc}")

        try:
            cropped_path = crop_caption_region(image_path)
        except CropError as exc:
            return _fail(f"Error cropping image: {exc}")

        summary.processed_count += 1

        try:
            text = detector.detect(cropped_path)
        except NoTextDetected:
            if not options.review_tasks:
                log.info("Photo %s: no text detected", photo.photo_id)
                return Outcome.SKIPPED
            try:
                record_no_text(options.state_file, state, photo.photo_id)
            except OSError as exc:
                log.error("Error saving state: %s", exc)
            dispatch_review_task(
                photo.photo_id,
                image_url,
                web_link,
                dry_run=options.dry_run,
            )
            summary.things_count += 1
            return Outcome.FLAGGED
        except OCRError as exc:
            return _fail(f"OCR error: {exc}")

    log.info("Photo %s: %s", photo.photo_id, text)
    if options.dry_run:
        summary.recognized_count += 1
        return Outcome.RECOGNIZED

    try:
        catalog.update_title(photo.photo_id, text)
    except CatalogError as exc:
        return _fail(f"Error updating database: {exc}")

    summary.updated_count += 1
    log.info("Updated photo %s with new title: %s", photo.photo_id, text)
    return Outcome.UPDATED


def run_retitle(
    photos: Iterable[CatalogItem],
    *,
    catalog: TitleWriter,
    detector: Detector,
    options: RunOptions,
    state: dict[str, Any],
) -> RunSummary:
    """Process every eligible photo in *photos* and return the run summary."""
    from tqdm import tqdm

    summary = RunSummary()
    seen: set[str] = set()

    for photo in tqdm(photos, desc="Retitling photos", unit="photo"):
        if not is_uuid_title(photo.title):
            continue

        # The size-variant join may repeat a photo; handle each id once.
        if photo.photo_id in seen:
            log.debug("Skipping photo %s (duplicate row)", photo.photo_id)
            continue
        seen.add(photo.photo_id)

        if is_known_no_text(state, photo.photo_id):
            log.info("Skipping photo %s (previously found no text)", photo.photo_id)
            summary.skipped_count += 1
            continue

        if options.max_photos > 0 and summary.photo_count >= options.max_photos:
            log.info("Reached maximum number of images to process (%s)", options.max_photos)
            break

        summary.photo_count += 1
        t0 = time.perf_counter()
        outcome = process_photo(
            photo,
            catalog=catalog,
            detector=detector,
            options=options,
            state=state,
            summary=summary,
        )
        log.debug(
            "Photo %s finished: %s in %.2fs",
            photo.photo_id,
            outcome.value,
            time.perf_counter() - t0,
        )

    return summary


def log_summary(summary: RunSummary) -> None:
    """Emit the run counters and every accumulated error."""
    log.info("=" * 60)
    log.info(
        "Summary: Found %s photos, processed %s photos, updated %s photos, "
        "created %s review tasks",
        summary.photo_count,
        summary.processed_count,
        summary.updated_count,
        summary.things_count,
    )
    if summary.recognized_count:
        log.info("  Would update %s photos (dry run)", summary.recognized_count)
    if summary.skipped_count:
        log.info("  Skipped (previously no text): %s", summary.skipped_count)

    if summary.errors:
        log.warning("Errors encountered (%s):", len(summary.errors))
        for err in summary.errors:
            log.warning("Photo ID: %s", err.photo_id)
            log.warning("  Image URL: %s", err.url)
            log.warning("  Web UI:    %s", err.web_link)
            log.warning("  Error:     %s", err.error)
