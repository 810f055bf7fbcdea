"""CLI entrypoint for retitling UUID-named Lychee photos from caption OCR.

Usage:
    python -m lychee_retitle                          # dry run, config.json
    python -m lychee_retitle -config ./config.json -max 10
    python -m lychee_retitle -things                  # dry run, print review links
    python -m lychee_retitle -dry-run=false -things   # write titles, open Things
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from logging.handlers import RotatingFileHandler
from pathlib import Path

from . import __version__

log = logging.getLogger(__name__)

PROG = "lychee-retitle"


def _setup_logging(*, verbose: bool, log_file: Path | None) -> None:
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    root_level = logging.DEBUG if verbose else logging.INFO
    root_logger.setLevel(root_level)

    console_fmt = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    detailed_fmt = (
        "%(asctime)s | %(levelname)-8s | %(name)s | "
        "%(filename)s:%(lineno)d | %(message)s"
    )

    console_handler = logging.StreamHandler()
    console_handler.setLevel(root_level)
    console_handler.setFormatter(logging.Formatter(console_fmt, "%Y-%m-%d %H:%M:%S"))
    root_logger.addHandler(console_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=20 * 1024 * 1024,
            backupCount=5,
            encoding="utf-8",
        )
        file_handler.setLevel(logging.DEBUG)
        file_handler.setFormatter(logging.Formatter(detailed_fmt, "%Y-%m-%d %H:%M:%S"))
        root_logger.addHandler(file_handler)

    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.getLogger("google").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy").setLevel(logging.WARNING)
    logging.getLogger("PIL").setLevel(logging.WARNING)


def _parse_bool(value: str) -> bool:
    lowered = value.strip().lower()
    if lowered in ("1", "t", "true"):
        return True
    if lowered in ("0", "f", "false"):
        return False
    raise argparse.ArgumentTypeError(f"invalid boolean value: {value!r}")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Every option is accepted with a single dash (``-dry-run=false``,
    ``-max 10``) as well as the double-dash spelling.
    """
    parser = argparse.ArgumentParser(
        prog=PROG,
        description="Retitle UUID-named Lychee photos from their burned-in captions",
    )
    parser.add_argument(
        "-dry-run",
        "--dry-run",
        dest="dry_run",
        nargs="?",
        const=True,
        default=True,
        type=_parse_bool,
        metavar="BOOL",
        help="Do not update the database or open Things (default: true)",
    )
    parser.add_argument(
        "--no-dry-run",
        dest="dry_run",
        action="store_false",
        help="Same as -dry-run=false",
    )
    parser.add_argument(
        "-version",
        "--version",
        action="version",
        version=f"{PROG} version {__version__}",
    )
    parser.add_argument(
        "-config",
        "--config",
        type=Path,
        default=Path("config.json"),
        help="Path to configuration file (default: config.json)",
    )
    parser.add_argument(
        "-max",
        "--max",
        dest="max_photos",
        type=int,
        default=0,
        help="Maximum number of images to process (0 for unlimited)",
    )
    parser.add_argument(
        "-things",
        "--things",
        nargs="?",
        const=True,
        default=False,
        type=_parse_bool,
        metavar="BOOL",
        help="Create Things tasks for photos with no text detected",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional rotating log file (always DEBUG level)",
    )
    args = parser.parse_args(argv)
    if args.max_photos < 0:
        parser.error("--max must be 0 or a positive number")
    return args


def main(argv: list[str] | None = None) -> None:
    """Run one retitle pass over the configured album."""
    from .catalog import Catalog
    from .config import build_database_url, load_config
    from .errors import RetitleError
    from .models import RunOptions
    from .ocr import TextDetector
    from .runner import log_summary, run_retitle
    from .utils import load_review_state

    args = parse_args(argv)
    _setup_logging(verbose=args.verbose, log_file=args.log_file)

    overall_t0 = time.perf_counter()
    log.info(
        "%s %s: config=%s dry_run=%s max=%s things=%s",
        PROG,
        __version__,
        args.config,
        args.dry_run,
        args.max_photos,
        args.things,
    )

    catalog = None
    detector = None
    try:
        config = load_config(args.config)
        state = load_review_state(config.state_path)
        log.info(
            "Review state: %s photos previously found without text",
            len(state["no_text_photos"]),
        )

        catalog = Catalog.connect(build_database_url(config.database))
        detector = TextDetector.from_credentials(
            config.gcp.credentials_file,
            config.gcp.project_id,
        )
        photos = catalog.fetch_album_photos(config.album_id)

        options = RunOptions(
            base_url=config.base_url,
            album_id=config.album_id,
            state_file=config.state_path,
            dry_run=args.dry_run,
            max_photos=args.max_photos,
            review_tasks=args.things,
        )
        summary = run_retitle(
            photos,
            catalog=catalog,
            detector=detector,
            options=options,
            state=state,
        )
    except RetitleError as exc:
        log.error("%s", exc)
        sys.exit(1)
    finally:
        if detector is not None:
            detector.close()
        if catalog is not None:
            catalog.close()

    log_summary(summary)
    log.info("Total runtime: %.1fs", time.perf_counter() - overall_t0)
