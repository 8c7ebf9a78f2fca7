"""
Filesystem operations that bring the local album tree in line with Google Photos.

The set of operations is closed: Operation is the union of the five
dataclasses below. Every operation is applied against the albums root
(`<indexdir>/albums`), and they must run in the order they were produced.
"""

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Union

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CreateRootAlbumDir:
    root: Path

    @property
    def description(self) -> str:
        return f"mkdir {self.root}"

    def run(self, root: Path):
        Path(root).mkdir(parents=True)


@dataclass(frozen=True)
class CreateAlbumDir:
    album_title: str

    @property
    def description(self) -> str:
        return f"mkdir {self.album_title}"

    def run(self, root: Path):
        os.mkdir(Path(root) / self.album_title)


@dataclass(frozen=True)
class RemoveAlbumDir:
    album_title: str

    @property
    def description(self) -> str:
        return f"rmdir {self.album_title}"

    def run(self, root: Path):
        # fails unless the directory is already empty
        os.rmdir(Path(root) / self.album_title)


@dataclass(frozen=True)
class AddAlbumLink:
    album_title: str
    image_path: str
    filename: str

    @property
    def description(self) -> str:
        return f"ln -s {self.image_path} {self.album_title}/{self.filename}"

    def run(self, root: Path):
        os.symlink(self.image_path, Path(root) / self.album_title / self.filename)


@dataclass(frozen=True)
class RemoveAlbumLink:
    album_title: str
    filename: str

    @property
    def description(self) -> str:
        return f"rm {self.album_title}/{self.filename}"

    def run(self, root: Path):
        os.remove(Path(root) / self.album_title / self.filename)


Operation = Union[CreateRootAlbumDir, CreateAlbumDir, RemoveAlbumDir, AddAlbumLink, RemoveAlbumLink]


def run_ops(ops: Iterable[Operation], root: Path, dry_run: bool = False) -> int:
    """
    Apply `ops` one after another against `root`.

    A failing operation is logged and skipped; there is no rollback, the next
    run's diff picks up whatever was left behind. Returns the failure count.
    """
    ops = list(ops)
    logger.info("Running %d ops%s", len(ops), " (dry run)" if dry_run else "")
    failed = 0
    for op in ops:
        if dry_run:
            logger.info("OP: %s", op.description)
            continue
        logger.debug("OP: %s", op.description)
        try:
            op.run(root)
        except (OSError, ValueError) as e:
            failed += 1
            logger.error("Failed running: %s (%s)", op.description, e)
    return failed
