"""Shared data models for the retitle run."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path


class Outcome(str, Enum):
    """Terminal outcome of a single catalog item."""

    UPDATED = "updated"
    RECOGNIZED = "recognized"
    FLAGGED = "flagged"
    SKIPPED = "skipped"
    ERRORED = "errored"


@dataclass
class CatalogItem:
    """One photo row as returned by the catalog query."""

    photo_id: str
    title: str
    short_path: str


@dataclass
class ProcessingError:
    """Per-item failure kept for the end-of-run report."""

    photo_id: str
    url: str
    error: str
    web_link: str


@dataclass
class RunOptions:
    base_url: str
    album_id: str
    state_file: Path
    dry_run: bool = True
    max_photos: int = 0
    review_tasks: bool = False


@dataclass
class RunSummary:
    """Counters and accumulated errors for one run."""

    photo_count: int = 0
    processed_count: int = 0
    updated_count: int = 0
    recognized_count: int = 0
    things_count: int = 0
    skipped_count: int = 0
    errors: list[ProcessingError] = field(default_factory=list)
