"""Lychee catalog access through SQLAlchemy Core.

One read per run (photos of an album with their original size variant) and
one single-row title update per accepted photo.
"""

from __future__ import annotations

import logging
from typing import Any

from sqlalchemy import create_engine, text
from sqlalchemy.engine import URL, Engine
from sqlalchemy.exc import SQLAlchemyError

from .errors import CatalogError
from .models import CatalogItem

log = logging.getLogger(__name__)

# size_variants.type 0 is the original upload
ALBUM_PHOTOS_QUERY = text(
    """
    SELECT p.id, p.title, sv.short_path
    FROM photos p
    JOIN size_variants sv ON p.id = sv.photo_id
    JOIN photo_album pa ON p.id = pa.photo_id
    WHERE pa.album_id = :album_id AND sv.type = 0
    """
)

UPDATE_TITLE_QUERY = text("UPDATE photos SET title = :title WHERE id = :id")


class Catalog:
    """Thin wrapper around an :class:`~sqlalchemy.engine.Engine`."""

    def __init__(self, engine: Engine):
        self._engine = engine

    @classmethod
    def connect(cls, url: URL | str, **engine_kwargs: Any) -> "Catalog":
        """Create the engine and verify the database is reachable.

        Raises:
            CatalogError: the driver is missing or the connection fails.
        """
        try:
            engine = create_engine(url, **engine_kwargs)
            with engine.connect():
                pass
        except (SQLAlchemyError, ImportError) as exc:
            raise CatalogError(f"error connecting to database: {exc}") from exc
        log.debug("Connected to catalog: %s", engine.url.render_as_string(hide_password=True))
        return cls(engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    def fetch_album_photos(self, album_id: str) -> list[CatalogItem]:
        """Return every photo of *album_id* with an original size variant.

        Raises:
            CatalogError: the query or row iteration fails.
        """
        try:
            with self._engine.connect() as conn:
                rows = conn.execute(ALBUM_PHOTOS_QUERY, {"album_id": album_id}).all()
        except SQLAlchemyError as exc:
            raise CatalogError(f"error querying photos: {exc}") from exc

        photos = [
            CatalogItem(photo_id=str(row[0]), title=row[1] or "", short_path=row[2] or "")
            for row in rows
        ]
        log.info("Catalog returned %s rows for album %s", len(photos), album_id)
        return photos

    def update_title(self, photo_id: str, title: str) -> None:
        """Set the title of one photo, committing immediately.

        Raises:
            CatalogError: the update fails.
        """
        try:
            with self._engine.begin() as conn:
                conn.execute(UPDATE_TITLE_QUERY, {"title": title, "id": photo_id})
        except SQLAlchemyError as exc:
            raise CatalogError(str(exc)) from exc

    def close(self) -> None:
        self._engine.dispose()
