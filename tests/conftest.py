import base64
import io

import pytest
from PIL import Image

from site_config import store_paths


def _png_bytes(color=(200, 30, 30), size=(4, 4)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def png_bytes():
    return _png_bytes


@pytest.fixture
def photo_payload():
    """Factory for a PNG photo payload, as a data URI by default."""
    def make(color=(200, 30, 30), data_uri=True) -> str:
        b64 = base64.b64encode(_png_bytes(color)).decode("ascii")
        return f"data:image/png;base64,{b64}" if data_uri else b64
    return make


@pytest.fixture
def paths(tmp_path, monkeypatch):
    # last_error.log lands in the temp dir
    monkeypatch.chdir(tmp_path)
    return store_paths(tmp_path / "site")


@pytest.fixture
def submission(photo_payload):
    return {
        "title":        "Space Marine",
        "manufacturer": "Games Workshop",
        "date":         "2024-01-01",
        "scale":        "28mm",
        "photos":       [photo_payload()],
    }


@pytest.fixture
def client(paths):
    from app import app

    app.config.update(TESTING=True, STORE_PATHS=paths)
    with app.test_client() as c:
        yield c


def write_record(records_dir, slug: str, text: str):
    records_dir.mkdir(parents=True, exist_ok=True)
    (records_dir / f"{slug}.yaml").write_text(text, encoding="utf-8")


def store_files(paths) -> list:
    """All files under the records and photos directories."""
    found = []
    for key in ("records", "photos"):
        if paths[key].is_dir():
            found.extend(p for p in paths[key].iterdir() if p.is_file())
    return sorted(found)
