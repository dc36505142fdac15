"""Tests for config.json loading."""

import pytest

from albumsync.config import ConfigError, SyncConfig, load_config, normalize_api_url

VALID = {
    "api_url": "http://immich.local:2283",
    "api_key": "secret-key",
    "album_id": "album-1",
    "local_folder": "/photos/album",
}


@pytest.mark.parametrize(
    "url, expected",
    [
        ("http://host:2283", "http://host:2283/api"),
        ("http://host:2283/", "http://host:2283/api"),
        ("http://host:2283/api", "http://host:2283/api"),
        ("http://host:2283/api/", "http://host:2283/api"),
        ("https://photos.example.com/immich", "https://photos.example.com/immich/api"),
    ],
)
def test_normalize_api_url(url, expected):
    assert normalize_api_url(url) == expected


def test_load_config(write_config):
    config = load_config(write_config(VALID))

    assert config == SyncConfig(
        api_url="http://immich.local:2283/api",
        api_key="secret-key",
        album_id="album-1",
        local_folder="/photos/album",
    )
    assert config.interval_minutes is None
    assert config.background_interval_minutes is None


def test_load_config_interval_hints(write_config):
    config = load_config(write_config({**VALID, "interval_minutes": 30, "background_interval_minutes": 120}))

    assert config.interval_minutes == 30
    assert config.background_interval_minutes == 120


def test_load_config_missing_file(tmp_path):
    with pytest.raises(ConfigError, match="Failed to read config file"):
        load_config(tmp_path / "nope.json")


def test_load_config_invalid_json(write_config):
    with pytest.raises(ConfigError, match="Failed to parse config JSON"):
        load_config(write_config("{not json"))


def test_load_config_not_an_object(write_config):
    with pytest.raises(ConfigError):
        load_config(write_config("[1, 2, 3]"))


@pytest.mark.parametrize("missing", ["api_url", "api_key", "album_id", "local_folder"])
def test_load_config_missing_field(write_config, missing):
    data = {k: v for k, v in VALID.items() if k != missing}
    with pytest.raises(ConfigError, match=missing):
        load_config(write_config(data))


def test_load_config_bad_interval(write_config):
    with pytest.raises(ConfigError, match="interval_minutes"):
        load_config(write_config({**VALID, "interval_minutes": "often"}))


@pytest.mark.parametrize("folder", ["", "   ", "\t"])
def test_load_config_empty_local_folder(write_config, folder):
    with pytest.raises(ConfigError, match="local_folder"):
        load_config(write_config({**VALID, "local_folder": folder}))
