import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Set

from photoindexer.config import HIDDEN_PREFIX
from photoindexer.exceptions import FilesystemWalkError

logger = logging.getLogger(__name__)


@dataclass
class LocalImageIndex:
    """filename -> absolute path of the first file found with that name."""
    path_index: Dict[str, str] = field(default_factory=dict)
    duplicates: Set[str] = field(default_factory=set)

    def __contains__(self, filename: str) -> bool:
        return filename in self.path_index

    def get(self, filename: str):
        return self.path_index.get(filename)


@dataclass
class DirectoryIndex:
    """
    Album directory base name -> names of the links inside it.
    `root_exists` is False when the albums directory has not been created yet.
    """
    root: Path
    root_exists: bool = True
    albums: Dict[str, Set[str]] = field(default_factory=dict)


def _is_hidden(name: str) -> bool:
    return name.startswith(HIDDEN_PREFIX)


def _walk(root: Path):
    def onerror(err: OSError):
        raise FilesystemWalkError(Path(err.filename or root), err)

    for dirpath, dirnames, filenames in os.walk(root, onerror=onerror):
        # prune hidden directories in place so os.walk never enters them
        dirnames[:] = sorted(d for d in dirnames if not _is_hidden(d))
        yield dirpath, dirnames, sorted(f for f in filenames if not _is_hidden(f))


def scan_images(root: Path) -> LocalImageIndex:
    """
    Index every file below `root` by its base name. The first path seen for
    a name wins; later ones are only recorded as duplicates.
    """
    logger.info("Scanning local images in %s", root)
    out = LocalImageIndex()
    root = Path(os.path.abspath(root))
    if not root.is_dir():
        raise FilesystemWalkError(root, NotADirectoryError(f"{root} is not a directory"))

    for dirpath, _, filenames in _walk(root):
        for fname in filenames:
            if fname in out.path_index:
                if fname not in out.duplicates:
                    logger.debug("Duplicate filename %s at %s", fname, dirpath)
                out.duplicates.add(fname)
                continue
            out.path_index[fname] = os.path.join(dirpath, fname)

    if out.duplicates:
        logger.warning("Found %d duplicate filenames under %s", len(out.duplicates), root)
    logger.info("Found %d local images", len(out.path_index))
    return out


def scan_album_directories(root: Path) -> DirectoryIndex:
    """
    Build the index of existing album links under `root` (the albums directory).

    Every directory below root becomes a key under its base name, so two
    same-named directories at different depths share one entry.
    """
    logger.info("Scanning local index in %s", root)
    root = Path(root)
    if not root.exists() and not root.is_symlink():
        return DirectoryIndex(root=root, root_exists=False)

    out = DirectoryIndex(root=root)
    for dirpath, dirnames, filenames in _walk(root):
        for d in dirnames:
            out.albums.setdefault(d, set())
        if dirpath == str(root):
            # loose files directly under root belong to no album
            continue
        album = os.path.basename(dirpath)
        out.albums.setdefault(album, set()).update(filenames)

    logger.info("Found %d local album directories", len(out.albums))
    return out
