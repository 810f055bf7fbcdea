"""Shared fixtures for the retitle test suite.

External collaborators (HTTP, Vision, ffmpeg, Things) are replaced with
fakes; the catalog is a real SQLite file driven through SQLAlchemy.
"""

from __future__ import annotations

import json
import logging
import shutil
import sys
import types
from pathlib import Path

import pytest
from PIL import Image
from sqlalchemy import create_engine, text

from lychee_retitle.errors import NoTextDetected
from lychee_retitle.models import CatalogItem

# ---------------------------------------------------------------------------
# Configure verbose logging for test debugging
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.DEBUG,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
    force=True,
)
log = logging.getLogger("conftest")

ALBUM_ID = "album-1"
BASE_URL = "https://photos.example.com/"

UUID_TEXT = "a1b2c3d4-e5f6-7890-abcd-ef1234567890"
UUID_BLANK = "0f8fad5b-d9cb-469f-a165-70867728950e"
CAPTION_TEXT = "BIRDS-2024-05"

WHITE = (255, 255, 255)
BLACK = (0, 0, 0)


class FakeDetector:
    """Reads white crops as :data:`CAPTION_TEXT` and anything else as blank."""

    def __init__(self):
        self.calls: list[Path] = []

    def detect(self, image_path: Path) -> str:
        self.calls.append(Path(image_path))
        with Image.open(image_path) as img:
            pixel = img.convert("RGB").getpixel((0, 0))
        if min(pixel) > 200:
            return CAPTION_TEXT
        raise NoTextDetected("no text detected")

    def close(self) -> None:
        pass


class FakeCatalog:
    def __init__(self):
        self.updates: list[tuple[str, str]] = []

    def update_title(self, photo_id: str, title: str) -> None:
        self.updates.append((photo_id, title))


@pytest.fixture(autouse=True)
def tqdm_stub(monkeypatch):
    stub = types.SimpleNamespace(tqdm=lambda iterable, **kwargs: iterable)
    monkeypatch.setitem(sys.modules, "tqdm", stub)
    return stub


@pytest.fixture
def make_image(tmp_path: Path):
    """Factory writing a solid-colour image and returning its path."""

    def _make(
        name: str = "image.jpg",
        size: tuple[int, int] = (40, 100),
        color: tuple[int, int, int] = WHITE,
    ) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        Image.new("RGB", size, color).save(path)
        return path

    return _make


@pytest.fixture
def assets_dir(make_image, tmp_path: Path) -> Path:
    """Served uploads: ``a.jpg`` has a caption, ``b.jpg`` does not."""
    make_image("uploads/a.jpg", color=WHITE)
    make_image("uploads/b.jpg", color=BLACK)
    make_image("uploads/vacation.jpg", color=WHITE)
    return tmp_path / "uploads"


@pytest.fixture
def fake_download(monkeypatch, assets_dir: Path):
    """Serve ``{base}/uploads/<name>`` from :func:`assets_dir`; record URLs and dirs."""
    calls: list[tuple[str, Path]] = []

    def _download(url: str, dest_dir: Path) -> Path:
        calls.append((url, Path(dest_dir)))
        src = assets_dir / url.rsplit("/", 1)[-1]
        dest = Path(dest_dir) / f"file-{src.name}"
        shutil.copyfile(src, dest)
        return dest

    monkeypatch.setattr("lychee_retitle.runner.download_asset", _download)
    return calls


@pytest.fixture
def fake_open(monkeypatch):
    """Capture Things URLs instead of handing them to the OS."""
    opened: list[str] = []

    def _open(url: str) -> bool:
        opened.append(url)
        return True

    monkeypatch.setattr("lychee_retitle.review.open_review_url", _open)
    return opened


@pytest.fixture
def detector() -> FakeDetector:
    return FakeDetector()


@pytest.fixture
def fake_catalog() -> FakeCatalog:
    return FakeCatalog()


@pytest.fixture
def album_rows() -> list[CatalogItem]:
    return [
        CatalogItem(photo_id="A", title=f"{UUID_TEXT}.JPG", short_path="/a.jpg"),
        CatalogItem(photo_id="B", title=UUID_BLANK, short_path="b.jpg"),
        CatalogItem(photo_id="C", title="vacation.jpg", short_path="vacation.jpg"),
    ]


@pytest.fixture
def catalog_db(tmp_path: Path) -> Path:
    """SQLite file with the three Lychee tables and the A/B/C album rows."""
    db_path = tmp_path / "lychee.sqlite"
    engine = create_engine(f"sqlite:///{db_path}")
    with engine.begin() as conn:
        conn.execute(text("CREATE TABLE photos (id TEXT PRIMARY KEY, title TEXT)"))
        conn.execute(
            text(
                "CREATE TABLE size_variants "
                "(id INTEGER PRIMARY KEY, photo_id TEXT, type INTEGER, short_path TEXT)"
            )
        )
        conn.execute(text("CREATE TABLE photo_album (album_id TEXT, photo_id TEXT)"))

        conn.execute(
            text("INSERT INTO photos (id, title) VALUES (:id, :title)"),
            [
                {"id": "A", "title": f"{UUID_TEXT}.jpg"},
                {"id": "B", "title": UUID_BLANK},
                {"id": "C", "title": "vacation.jpg"},
                {"id": "D", "title": "11111111-2222-3333-4444-555555555555"},
            ],
        )
        conn.execute(
            text(
                "INSERT INTO size_variants (photo_id, type, short_path) "
                "VALUES (:photo_id, :type, :short_path)"
            ),
            [
                {"photo_id": "A", "type": 0, "short_path": "/a.jpg"},
                {"photo_id": "A", "type": 1, "short_path": "/a_thumb.jpg"},
                {"photo_id": "B", "type": 0, "short_path": "b.jpg"},
                {"photo_id": "C", "type": 0, "short_path": "vacation.jpg"},
                {"photo_id": "D", "type": 0, "short_path": "d.jpg"},
            ],
        )
        conn.execute(
            text("INSERT INTO photo_album (album_id, photo_id) VALUES (:album_id, :photo_id)"),
            [
                {"album_id": ALBUM_ID, "photo_id": "A"},
                {"album_id": ALBUM_ID, "photo_id": "B"},
                {"album_id": ALBUM_ID, "photo_id": "C"},
                {"album_id": "other-album", "photo_id": "D"},
            ],
        )
    engine.dispose()
    return db_path


@pytest.fixture
def config_file(tmp_path: Path, catalog_db: Path) -> Path:
    path = tmp_path / "config.json"
    path.write_text(
        json.dumps(
            {
                "database": {"type": "sqlite3", "database": str(catalog_db)},
                "gcp": {"project_id": "proj", "credentials_file": ""},
                "base_url": BASE_URL,
                "album_id": ALBUM_ID,
                "statefile": str(tmp_path / "state" / "state.json"),
            }
        ),
        encoding="utf-8",
    )
    return path
