import logging
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Dict, List, Tuple

from photoindexer.auth import AuthManager
from photoindexer.config import IndexerConfig
from photoindexer.date_index import DateIndex
from photoindexer.local_store import scan_album_directories, scan_images
from photoindexer.operations import Operation, run_ops
from photoindexer.reconcile import compute_ops
from photoindexer import google_photos_api as gapi

logger = logging.getLogger(__name__)


class PhotoIndexer:
    """
    Main class mirroring Google Photos albums as directories of symlinks:
     - date index summary of the library
     - remote album index
     - local image and album directory scans
     - diff into operations, then apply them in order
    """

    def __init__(self, config: IndexerConfig, auth_manager: AuthManager = None):
        self.config = config
        self.auth_manager = auth_manager or AuthManager(config.token_path, config.credentials_path)
        self.creds = None

    def authenticate(self):
        self.creds = self.auth_manager.authenticate()

    # -----------------------------
    # 1) REMOTE
    # -----------------------------

    def build_date_index(self) -> DateIndex:
        """
        Fetch the library into a DateIndex and log how many images each day holds.
        """
        logger.info("Getting images by date")
        ibd = gapi.fill_date_index(
            self.creds,
            DateIndex(),
            start_date=self.config.start_date,
            max_images=self.config.max_date_images,
        )

        def log_day(y, m, d, filenames):
            logger.info("DAYS: %d-%02d-%02d %d images", y, m, d, len(filenames))

        ibd.visit_years(lambda y: ibd.visit_months(y, lambda y, m: ibd.visit_days(y, m, log_day)))
        return ibd

    def get_album_index(self) -> Dict[str, List[str]]:
        """
        Map album title -> filenames in that album.

        Albums past max_albums and albums repeating an earlier title are
        skipped. Album contents are fetched concurrently; every fetch must
        finish before the index is returned, and the first failure is raised.
        """
        logger.info("Getting album index")
        max_albums = self.config.max_albums

        selected: List[gapi.AlbumKey] = []
        titles = set()
        for album in gapi.list_albums(self.creds):
            if max_albums > 0 and len(selected) >= max_albums:
                logger.warning("Reached max album count %d", max_albums)
                break
            if album.title in titles:
                logger.warning("Skipping duplicate album %s", album.title)
                continue
            titles.add(album.title)
            selected.append(album)

        with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
            futures = {
                album.title: executor.submit(gapi.list_media_filenames, self.creds, album)
                for album in selected
            }
            wait(futures.values())

        return {title: future.result() for title, future in futures.items()}

    # -----------------------------
    # 2) DIFF
    # -----------------------------

    def get_ops(self) -> List[Operation]:
        self.build_date_index()

        directory_index = scan_album_directories(self.config.albums_dir)
        images = scan_images(self.config.image_dir)

        return compute_ops(self.get_album_index(), directory_index, images)

    # -----------------------------
    # 3) APPLY
    # -----------------------------

    def run(self) -> Tuple[int, int]:
        """
        Compute and apply the operations.
        Returns (number of operations, number that failed).
        """
        ops = self.get_ops()
        failed = run_ops(ops, self.config.albums_dir, dry_run=self.config.dry_run)
        return len(ops), failed
