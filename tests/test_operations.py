# tests/test_operations.py
# Tests for applying album operations to the local tree

import logging
import os
from pathlib import Path

import pytest

from photoindexer.operations import (
    AddAlbumLink,
    CreateAlbumDir,
    CreateRootAlbumDir,
    RemoveAlbumDir,
    RemoveAlbumLink,
    run_ops,
)


@pytest.fixture
def albums_dir(index_dir: Path) -> Path:
    return index_dir / "albums"


class TestOperations:

    def test_descriptions(self, albums_dir: Path):
        assert CreateRootAlbumDir(albums_dir).description == f"mkdir {albums_dir}"
        assert CreateAlbumDir("Trip").description == "mkdir Trip"
        assert RemoveAlbumDir("Trip").description == "rmdir Trip"
        assert AddAlbumLink("Trip", "/img/a.jpg", "a.jpg").description == "ln -s /img/a.jpg Trip/a.jpg"
        assert RemoveAlbumLink("Trip", "a.jpg").description == "rm Trip/a.jpg"

    def test_full_lifecycle(self, albums_dir: Path, image_dir: Path):
        target = str(image_dir / "a.jpg")

        CreateRootAlbumDir(albums_dir).run(albums_dir)
        CreateAlbumDir("Trip").run(albums_dir)
        AddAlbumLink("Trip", target, "a.jpg").run(albums_dir)

        link = albums_dir / "Trip" / "a.jpg"
        assert link.is_symlink()
        assert os.readlink(link) == target
        assert link.read_bytes() == b"a"

        RemoveAlbumLink("Trip", "a.jpg").run(albums_dir)
        assert not link.is_symlink()
        # the image itself is untouched
        assert (image_dir / "a.jpg").exists()

        RemoveAlbumDir("Trip").run(albums_dir)
        assert not (albums_dir / "Trip").exists()

    def test_create_existing_dir_fails(self, albums_dir: Path):
        albums_dir.mkdir()
        with pytest.raises(FileExistsError):
            CreateRootAlbumDir(albums_dir).run(albums_dir)

    def test_remove_non_empty_dir_fails(self, albums_dir: Path, image_dir: Path):
        (albums_dir / "Trip").mkdir(parents=True)
        (albums_dir / "Trip" / "a.jpg").symlink_to(image_dir / "a.jpg")

        with pytest.raises(OSError):
            RemoveAlbumDir("Trip").run(albums_dir)


class TestRunOps:

    def test_applies_in_order(self, albums_dir: Path, image_dir: Path):
        ops = [
            CreateRootAlbumDir(albums_dir),
            CreateAlbumDir("Trip"),
            AddAlbumLink("Trip", str(image_dir / "a.jpg"), "a.jpg"),
        ]

        assert run_ops(ops, albums_dir) == 0
        assert (albums_dir / "Trip" / "a.jpg").is_symlink()

    def test_failures_are_logged_and_skipped(self, albums_dir: Path, image_dir: Path, caplog):
        albums_dir.mkdir()
        ops = [
            CreateAlbumDir("bad\x00title"),
            CreateAlbumDir("Trip"),
            CreateAlbumDir("Trip"),
            RemoveAlbumLink("Trip", "missing.jpg"),
            AddAlbumLink("Trip", str(image_dir / "c.jpg"), "c.jpg"),
        ]

        with caplog.at_level(logging.ERROR, logger="photoindexer.operations"):
            failed = run_ops(ops, albums_dir)

        assert failed == 3
        assert (albums_dir / "Trip" / "c.jpg").is_symlink()
        assert "Failed running: mkdir bad" in caplog.text
        assert "Failed running: mkdir Trip" in caplog.text
        assert "Failed running: rm Trip/missing.jpg" in caplog.text

    def test_dry_run_changes_nothing(self, albums_dir: Path, caplog):
        ops = [CreateRootAlbumDir(albums_dir), CreateAlbumDir("Trip")]

        with caplog.at_level(logging.INFO, logger="photoindexer.operations"):
            assert run_ops(ops, albums_dir, dry_run=True) == 0

        assert not albums_dir.exists()
        assert "OP: mkdir Trip" in caplog.text
