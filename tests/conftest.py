# tests/conftest.py
# Shared fixtures: fake credentials, fake HTTP responses, local image/index trees

from pathlib import Path
from typing import Dict, List

import pytest


class FakeCreds:
    """Stands in for google.oauth2 credentials that are already valid."""

    valid = True
    token = "test-token"

    def refresh(self, request):
        raise AssertionError("valid credentials must not be refreshed")


class FakeResponse:
    def __init__(self, payload=None, status_code: int = 200, text: str = ""):
        self._payload = payload
        self.status_code = status_code
        self.text = text

    def json(self):
        if self._payload is None:
            raise ValueError("No JSON object could be decoded")
        return self._payload


@pytest.fixture
def creds() -> FakeCreds:
    return FakeCreds()


@pytest.fixture
def image_dir(tmp_path: Path) -> Path:
    """
    Local image collection:
      images/a.jpg, images/2021/c.jpg, images/2020/a.jpg (duplicate name),
      images/.thumbs/b.jpg (hidden)
    """
    root = tmp_path / "images"
    (root / "2021").mkdir(parents=True)
    (root / "2020").mkdir()
    (root / ".thumbs").mkdir()
    (root / "a.jpg").write_bytes(b"a")
    (root / "2021" / "c.jpg").write_bytes(b"c")
    (root / "2020" / "a.jpg").write_bytes(b"a2")
    (root / ".thumbs" / "b.jpg").write_bytes(b"b")
    return root


@pytest.fixture
def index_dir(tmp_path: Path) -> Path:
    root = tmp_path / "index"
    root.mkdir()
    return root


def make_album_tree(albums_dir: Path, albums: Dict[str, List[str]], target: Path):
    """Create albums_dir/<title>/<filename> symlinks pointing at `target`."""
    albums_dir.mkdir(parents=True, exist_ok=True)
    for title, filenames in albums.items():
        (albums_dir / title).mkdir()
        for fn in filenames:
            (albums_dir / title / fn).symlink_to(target)
