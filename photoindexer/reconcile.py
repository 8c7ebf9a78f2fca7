import logging
import os
from typing import Iterable, List, Mapping, Sequence, Tuple, Union

from photoindexer.config import HIDDEN_PREFIX
from photoindexer.local_store import DirectoryIndex, LocalImageIndex
from photoindexer.operations import (
    AddAlbumLink,
    CreateAlbumDir,
    CreateRootAlbumDir,
    Operation,
    RemoveAlbumDir,
    RemoveAlbumLink,
)

logger = logging.getLogger(__name__)

RemoteAlbums = Union[Mapping[str, Sequence[str]], Iterable[Tuple[str, Sequence[str]]]]


def is_album_dir_name(title: str) -> bool:
    """
    True if `title` can be used as one directory directly under the albums
    root and be found again by scan_album_directories.
    """
    if not title or title.startswith(HIDDEN_PREFIX):
        return False
    return not any(sep in title for sep in ("/", os.sep, "\x00"))


def compute_ops(remote_albums: RemoteAlbums, directory_index: DirectoryIndex,
                images: LocalImageIndex) -> List[Operation]:
    """
    Diff the remote albums (title -> wanted filenames) against the local
    album directories and the available images.

    The result is ordered: an album's directory is created before any link
    is added to it, and an orphan's links are removed before its directory.
    Neither index passed in is modified.
    """
    if isinstance(remote_albums, Mapping):
        remote_albums = remote_albums.items()

    # working copy, albums are dropped from it as they are reconciled
    local = {title: set(links) for title, links in directory_index.albums.items()}

    ops: List[Operation] = []
    if not directory_index.root_exists:
        ops.append(CreateRootAlbumDir(directory_index.root))

    processed = set()
    for title, wanted in remote_albums:
        if title in processed:
            logger.warning("Skipping duplicate album %s", title)
            continue
        processed.add(title)
        if not is_album_dir_name(title):
            logger.warning("Skipping album with unusable directory name %r", title)
            continue

        existing = local.get(title)
        if existing is None:
            # Need directory for the album
            ops.append(CreateAlbumDir(title))
            existing = set()

        missing = 0
        handled = set()
        for filename in wanted:
            if filename in handled:
                continue
            handled.add(filename)
            if filename in existing:
                # Already have the link
                existing.discard(filename)
                continue
            image_path = images.get(filename)
            if image_path is not None:
                ops.append(AddAlbumLink(title, image_path, filename))
            else:
                missing += 1
                logger.debug("Missing %s for album %s", filename, title)
        if missing:
            logger.warning("Missing %d images for album %s", missing, title)

        for filename in sorted(existing):
            ops.append(RemoveAlbumLink(title, filename))
        local.pop(title, None)

    for title, links in local.items():
        for filename in sorted(links):
            ops.append(RemoveAlbumLink(title, filename))
        ops.append(RemoveAlbumDir(title))

    return ops
