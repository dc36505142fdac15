"""Album and asset records as returned by the Immich API."""

from dataclasses import dataclass
from pathlib import PurePath
from typing import Set, Tuple

DEFAULT_EXTENSION = ".jpg"


@dataclass(frozen=True)
class Asset:
    """A single remote media object."""

    id: str
    original_path: str

    @property
    def extension(self) -> str:
        """Extension of the original remote file, including the dot."""
        return PurePath(self.original_path).suffix or DEFAULT_EXTENSION

    @property
    def filename(self) -> str:
        """Local filename the asset is stored under."""
        return f"{self.id}{self.extension}"

    @classmethod
    def from_json(cls, data: dict) -> "Asset":
        if not isinstance(data, dict):
            raise ValueError(f"asset entry is not an object: {data!r}")
        asset_id = data.get("id")
        original_path = data.get("originalPath")
        if not isinstance(asset_id, str) or not isinstance(original_path, str):
            raise ValueError(f"asset entry missing 'id' or 'originalPath': {data!r}")
        return cls(id=asset_id, original_path=original_path)


@dataclass(frozen=True)
class Album:
    """A named, ordered collection of assets."""

    id: str
    name: str
    assets: Tuple[Asset, ...]

    def asset_ids(self) -> Set[str]:
        return {asset.id for asset in self.assets}

    @classmethod
    def from_json(cls, data: dict) -> "Album":
        """Build an Album from the body of GET /albums/{id}?withoutAssets=false.

        Raises:
            ValueError: If a required field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("album response is not an object")
        album_id = data.get("id")
        name = data.get("albumName")
        assets = data.get("assets")
        if not isinstance(album_id, str):
            raise ValueError("album response missing 'id'")
        if not isinstance(name, str):
            raise ValueError("album response missing 'albumName'")
        if not isinstance(assets, list):
            raise ValueError("album response missing 'assets'")
        return cls(
            id=album_id,
            name=name,
            assets=tuple(Asset.from_json(item) for item in assets),
        )
