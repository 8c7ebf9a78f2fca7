#!/usr/bin/env python3
"""
Entry point for the album indexer.
"""

import argparse
import logging
import sys
from pathlib import Path

from photoindexer.config import CONFIG_FILE, build_config, load_user_config
from photoindexer.exceptions import PhotoIndexerError
from photoindexer.syncer import PhotoIndexer

logger = logging.getLogger(__name__)


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Mirror Google Photos albums as directories of symlinks into a local image collection."
    )
    parser.add_argument("--indexdir", dest="index_dir", help="where the index will be created")
    parser.add_argument("--imagedir", dest="image_dir", help="where the images are located")
    parser.add_argument("--tokenpath", dest="token_path", help="path to the OAuth token (default: token.json)")
    parser.add_argument("--credentials", dest="credentials_path",
                        help="path to the OAuth client secrets (default: credentials.json)")
    parser.add_argument("--maxalbums", dest="max_albums", type=int,
                        help="max number of albums to index (default: unlimited)")
    parser.add_argument("--maxworkers", dest="max_workers", type=int,
                        help="number of albums fetched concurrently (default: 8)")
    parser.add_argument("--maxdateimages", dest="max_date_images", type=int,
                        help="max number of images in the date index (default: unlimited)")
    parser.add_argument("--startdate", dest="start_date", help="only index images by date from YYYY-MM-DD")
    parser.add_argument("--config", type=Path, default=CONFIG_FILE,
                        help=f"JSON file with default settings (default: {CONFIG_FILE})")
    parser.add_argument("--dry-run", dest="dry_run", action="store_true", default=None,
                        help="log the operations without applying them")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="log API calls and every operation")
    return parser.parse_args(argv)


def setup_logging(verbosity: int):
    logging.basicConfig(
        level=logging.DEBUG if verbosity else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    overrides = {k: v for k, v in vars(args).items() if k not in ("config", "verbose")}
    try:
        config = build_config(overrides, load_user_config(args.config))
    except PhotoIndexerError as e:
        logger.error("%s", e)
        return 1

    logger.info("Starting indexer")
    indexer = PhotoIndexer(config)
    try:
        indexer.authenticate()
        total, failed = indexer.run()
    except PhotoIndexerError as e:
        logger.error("Aborting: %s", e)
        return 1

    logger.info("Done: %d ops, %d failed", total, failed)
    return 0


if __name__ == "__main__":
    sys.exit(main())
