import datetime
import logging
import threading
from typing import List, NamedTuple, Optional, Tuple

import requests
from google.auth.exceptions import GoogleAuthError
from google.auth.transport.requests import Request

from photoindexer.config import API_BASE_URL, ALBUM_PAGE_SIZE, MEDIA_PAGE_SIZE
from photoindexer.date_index import DateIndex
from photoindexer.exceptions import DateIndexError, FetchError

logger = logging.getLogger(__name__)

# album contents are fetched from several threads sharing one set of creds
_refresh_lock = threading.Lock()


class AlbumKey(NamedTuple):
    id: str
    title: str


def get_headers(creds):
    """
    Return headers for authorized requests to Google Photos.
    """
    if not creds.valid:
        with _refresh_lock:
            if not creds.valid:
                try:
                    creds.refresh(Request())
                except GoogleAuthError as e:
                    raise FetchError(f"Error refreshing credentials: {e}") from e
    return {
        "Authorization": f"Bearer {creds.token}",
        "Content-Type": "application/json"
    }


def _json_or_raise(resp, what: str) -> dict:
    if resp.status_code != 200:
        raise FetchError(
            f"Error {what}: {resp.status_code} {resp.text}",
            status_code=resp.status_code,
            response_text=resp.text,
        )
    try:
        return resp.json()
    except ValueError as e:
        raise FetchError(f"Error {what}: invalid JSON response", status_code=resp.status_code) from e


def list_albums_page(creds, page_size: int = ALBUM_PAGE_SIZE,
                     page_token: Optional[str] = None) -> Tuple[List[dict], Optional[str]]:
    """
    Fetch one page of albums. Returns (album dicts, next page token or None).
    """
    params = {"pageSize": page_size}
    if page_token:
        params["pageToken"] = page_token
    try:
        resp = requests.get(f"{API_BASE_URL}/albums", headers=get_headers(creds), params=params)
    except requests.RequestException as e:
        raise FetchError(f"Error listing albums: {e}") from e
    data = _json_or_raise(resp, "listing albums")
    return data.get("albums", []), data.get("nextPageToken") or None


def search_media_items(creds, body: dict) -> dict:
    """
    Generic helper to call mediaItems:search with a given request body.
    """
    url = f"{API_BASE_URL}/mediaItems:search"
    try:
        resp = requests.post(url, headers=get_headers(creds), json=body)
    except requests.RequestException as e:
        raise FetchError(f"Error searching media items: {e}") from e
    return _json_or_raise(resp, "searching media items")


def list_albums(creds) -> List[AlbumKey]:
    """
    List all albums (paginated), in the order the service returns them.
    """
    albums = []
    page_token = None

    while True:
        if page_token:
            logger.debug("Sending API call: additional album list")
        else:
            logger.debug("Sending API call: initial album list")

        page, page_token = list_albums_page(creds, ALBUM_PAGE_SIZE, page_token)
        for alb in page:
            albums.append(AlbumKey(id=alb["id"], title=alb.get("title", "")))

        if not page_token:
            break

    logger.info("Found %d albums", len(albums))
    return albums


def list_media_filenames(creds, album: AlbumKey) -> List[str]:
    """
    Fetch the filenames of every media item in one album.
    """
    body = {
        "albumId": album.id,
        "pageSize": MEDIA_PAGE_SIZE
    }
    filenames = []

    while True:
        if "pageToken" in body:
            logger.debug("Sending API call: additional image search for album: %s", album.title)
        else:
            logger.debug("Sending API call: initial image search for album: %s", album.title)

        data = search_media_items(creds, body)
        for item in data.get("mediaItems", []):
            filenames.append(item["filename"])

        next_page_token = data.get("nextPageToken")
        if not next_page_token:
            break
        body["pageToken"] = next_page_token

    logger.info("Found %d images for album %s", len(filenames), album.title)
    return filenames


def _date(d: datetime.date) -> dict:
    return {"year": d.year, "month": d.month, "day": d.day}


def date_filter_body(start: Optional[datetime.date], end: Optional[datetime.date] = None) -> dict:
    """
    Build a mediaItems:search body, restricted to [start, end] when start is given.
    """
    body = {"pageSize": MEDIA_PAGE_SIZE}
    if start is not None:
        end = end or datetime.date.today()
        body["filters"] = {
            "dateFilter": {
                "ranges": [{
                    "startDate": _date(start),
                    "endDate": _date(end)
                }]
            }
        }
    return body


def fill_date_index(creds, index: DateIndex, start_date: Optional[datetime.date] = None,
                    max_images: int = -1) -> DateIndex:
    """
    Page through the library (optionally from start_date to today) into `index`.

    A negative max_images means no limit. The cap is checked before each page,
    so the page that crosses it is still added in full.
    """
    body = date_filter_body(start_date)

    while True:
        if max_images >= 0 and index.size() >= max_images:
            logger.warning("Reached max image count: %d", max_images)
            break

        if "pageToken" in body:
            logger.debug("Sending API call: additional image search by date")
        else:
            logger.debug("Sending API call: initial image search by date")

        data = search_media_items(creds, body)
        for item in data.get("mediaItems", []):
            filename = item.get("filename")
            creation_time = item.get("mediaMetadata", {}).get("creationTime")
            try:
                index.add_image(filename, creation_time)
            except DateIndexError as e:
                logger.warning("Got error %s adding image %s", e, item.get("id", filename))

        next_page_token = data.get("nextPageToken")
        if not next_page_token:
            break
        body["pageToken"] = next_page_token

    return index
