"""Test configuration for pytest."""

import json
from pathlib import Path

import pytest
import requests

from albumsync.config import SyncConfig
from albumsync.context import RunContext

API_URL = "http://immich.local:2283/api"


class FakeResponse:
    def __init__(self, *, json_data=None, status_code=200, content_bytes: bytes = b"", fail_after=None):
        self._json_data = json_data
        self.status_code = status_code
        self._content_bytes = content_bytes
        # number of chunks to yield before the connection "drops"
        self._fail_after = fail_after
        self.closed = False

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        self.closed = True
        return False

    def json(self):
        if isinstance(self._json_data, Exception):
            raise self._json_data
        return self._json_data

    def raise_for_status(self):
        if not (200 <= self.status_code < 300):
            raise requests.HTTPError(f"HTTP {self.status_code}")

    def iter_content(self, chunk_size=8192):
        for n, i in enumerate(range(0, len(self._content_bytes), chunk_size)):
            if self._fail_after is not None and n >= self._fail_after:
                raise requests.ConnectionError("connection reset")
            yield self._content_bytes[i : i + chunk_size]


class FakeSession:
    """Stands in for requests.Session; maps URL -> FakeResponse or exception."""

    def __init__(self, routes=None):
        self.routes = dict(routes or {})
        self.calls = []
        self.headers = {}
        self.closed = False

    def get(self, url, **kwargs):
        self.calls.append((url, kwargs))
        response = self.routes.get(url)
        if response is None:
            return FakeResponse(status_code=404)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self):
        self.closed = True


def album_payload(assets, album_id="album-1", name="Family"):
    return {
        "id": album_id,
        "albumName": name,
        "assets": [{"id": asset_id, "originalPath": path} for asset_id, path in assets],
    }


def asset_url(asset_id):
    return f"{API_URL}/assets/{asset_id}/original"


@pytest.fixture
def local_folder(tmp_path: Path) -> Path:
    d = tmp_path / "album"
    d.mkdir()
    return d


@pytest.fixture
def sync_config(local_folder) -> SyncConfig:
    return SyncConfig(
        api_url=API_URL,
        api_key="secret-key",
        album_id="album-1",
        local_folder=str(local_folder),
    )


@pytest.fixture
def fake_session() -> FakeSession:
    return FakeSession()


@pytest.fixture
def run_context(sync_config, fake_session, tmp_path) -> RunContext:
    return RunContext(config=sync_config, session=fake_session, log_path=tmp_path / "sync.log")


@pytest.fixture
def write_config(tmp_path):
    def _write(data, name="config.json"):
        path = tmp_path / name
        if isinstance(data, str):
            path.write_text(data, encoding="utf-8")
        else:
            path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write
