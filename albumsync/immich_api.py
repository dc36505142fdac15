import logging
from pathlib import Path

import requests

from albumsync.models import Album

logger = logging.getLogger(__name__)

CHUNK_SIZE = 64 * 1024


class ImmichApiError(Exception):
    """Base error for calls against the Immich server."""


class FetchError(ImmichApiError):
    """The album catalog could not be retrieved or understood."""


class DownloadError(ImmichApiError):
    """A single asset could not be downloaded."""

    def __init__(self, asset_id: str, message: str):
        super().__init__(message)
        self.asset_id = asset_id


def get_headers(api_key: str) -> dict:
    """
    Return headers for authorized requests to Immich.
    """
    return {
        "x-api-key": api_key,
        "Accept": "application/json",
    }


def build_session(api_key: str) -> requests.Session:
    session = requests.Session()
    session.headers.update(get_headers(api_key))
    return session


def get_album_with_assets(session: requests.Session, api_url: str, album_id: str) -> Album:
    """
    Retrieve album metadata together with every asset in it (single request, no paging).
    Raises FetchError on any failure.
    """
    url = f"{api_url.rstrip('/')}/albums/{album_id}"
    try:
        resp = session.get(url, params={"withoutAssets": "false"})
        resp.raise_for_status()
    except requests.RequestException as e:
        raise FetchError(f"Request for album {album_id} failed: {e}") from e

    try:
        data = resp.json()
    except ValueError as e:
        raise FetchError(f"Album {album_id} response is not valid JSON: {e}") from e

    try:
        album = Album.from_json(data)
    except ValueError as e:
        raise FetchError(f"Album {album_id} response is malformed: {e}") from e

    logger.debug("Fetched album %s with %d assets", album.id, len(album.assets))
    return album


def download_asset(session: requests.Session, api_url: str, asset_id: str, target: Path):
    """
    Stream the original file of an asset to target, creating or truncating it.
    A transfer that breaks off midway leaves the partial file behind.
    Raises DownloadError on any failure.
    """
    url = f"{api_url.rstrip('/')}/assets/{asset_id}/original"
    try:
        resp = session.get(url, stream=True)
    except requests.RequestException as e:
        raise DownloadError(asset_id, f"request failed: {e}") from e

    with resp:
        if not 200 <= resp.status_code < 300:
            raise DownloadError(asset_id, f"server answered {resp.status_code}")
        try:
            with open(target, "wb") as f:
                for chunk in resp.iter_content(chunk_size=CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
        except requests.RequestException as e:
            raise DownloadError(asset_id, f"transfer interrupted: {e}") from e
        except OSError as e:
            raise DownloadError(asset_id, f"cannot write {target}: {e}") from e
