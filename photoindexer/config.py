import datetime
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from photoindexer.exceptions import ConfigError

# === PATH CONFIGURATION ===
CONFIG_FILE = Path("photoindexer.json")  # optional defaults for the flags
DEFAULT_TOKEN_PATH = Path("token.json")
DEFAULT_CREDENTIALS_PATH = Path("credentials.json")

ALBUMS_DIRNAME = "albums"
HIDDEN_PREFIX = "."

# === API ===
SCOPES = [
    "https://www.googleapis.com/auth/photoslibrary.readonly"
]
API_BASE_URL = "https://photoslibrary.googleapis.com/v1"
ALBUM_PAGE_SIZE = 50
MEDIA_PAGE_SIZE = 100

DEFAULT_MAX_WORKERS = 8


@dataclass
class IndexerConfig:
    index_dir: Path
    image_dir: Path
    token_path: Path = DEFAULT_TOKEN_PATH
    credentials_path: Path = DEFAULT_CREDENTIALS_PATH
    max_albums: int = -1
    max_workers: int = DEFAULT_MAX_WORKERS
    max_date_images: int = -1
    start_date: Optional[datetime.date] = None
    dry_run: bool = False

    @property
    def albums_dir(self) -> Path:
        return self.index_dir / ALBUMS_DIRNAME


def load_user_config(path: Path = CONFIG_FILE) -> dict:
    """
    Load the user's JSON config (same keys as IndexerConfig).
    Fallback to an empty dict if not found.
    """
    if not path.exists():
        return {}
    try:
        with open(path, "r") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        raise ConfigError(f"Cannot read config file '{path}': {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"Config file '{path}' must contain a JSON object")
    return data


def _parse_date(value) -> Optional[datetime.date]:
    if value is None or isinstance(value, datetime.date):
        return value
    try:
        return datetime.date.fromisoformat(str(value))
    except ValueError as e:
        raise ConfigError(f"Invalid start date '{value}', expected YYYY-MM-DD") from e


def build_config(overrides: dict, user_config: Optional[dict] = None) -> IndexerConfig:
    """
    Merge command-line values over the user config file.
    A value of None in `overrides` means "not given on the command line".
    """
    merged = dict(user_config or {})
    merged.update({k: v for k, v in overrides.items() if v is not None})

    index_dir = merged.get("index_dir")
    if not index_dir:
        raise ConfigError("Please specify the index directory via --indexdir")
    image_dir = merged.get("image_dir")
    if not image_dir:
        raise ConfigError("Please specify the image directory via --imagedir")

    try:
        max_albums = int(merged.get("max_albums", -1))
        max_workers = int(merged.get("max_workers", DEFAULT_MAX_WORKERS))
        max_date_images = int(merged.get("max_date_images", -1))
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid numeric setting: {e}") from e
    if max_workers < 1:
        raise ConfigError("max_workers must be at least 1")

    return IndexerConfig(
        index_dir=Path(index_dir),
        image_dir=Path(image_dir),
        token_path=Path(merged.get("token_path", DEFAULT_TOKEN_PATH)),
        credentials_path=Path(merged.get("credentials_path", DEFAULT_CREDENTIALS_PATH)),
        max_albums=max_albums,
        max_workers=max_workers,
        max_date_images=max_date_images,
        start_date=_parse_date(merged.get("start_date")),
        dry_run=bool(merged.get("dry_run", False)),
    )
