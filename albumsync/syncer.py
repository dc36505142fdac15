import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from albumsync.config import (
    ConfigError,
    default_config_path,
    default_log_path,
    load_config,
)
from albumsync.context import RunContext, run_logging
from albumsync.immich_api import (
    DownloadError,
    FetchError,
    build_session,
    download_asset,
    get_album_with_assets,
)
from albumsync.local_store import delete_local_file, ensure_folder, find_orphans
from albumsync.models import Album

logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    new: int = 0
    skipped: int = 0
    failed: int = 0
    deleted: List[Path] = field(default_factory=list)
    delete_failed: List[Path] = field(default_factory=list)

    @property
    def total(self) -> int:
        return self.new + self.skipped + self.failed

    def summary(self) -> str:
        return f"Finished - new:{self.new}  skipped:{self.skipped}  failed:{self.failed}"


class AlbumSync:
    """
    Mirrors one Immich album into the local folder of a RunContext:
     - delete local files whose asset is gone from the album
     - download assets that have no local file yet
     - leave everything else alone
    """

    def __init__(self, ctx: RunContext):
        self.ctx = ctx

    # -----------------------------
    # 1) DELETE ORPHANS
    # -----------------------------

    def remove_orphans(self, album: Album, result: SyncResult):
        """
        Delete every local file whose stem isn't an asset id of the album.
        Only ever called with a complete album listing.
        """
        folder = self.ctx.local_folder
        try:
            orphans = find_orphans(folder, album.asset_ids())
        except OSError as e:
            logger.error("Cannot list local folder %s: %s. Skipping deletions.", folder, e)
            return

        for path in orphans:
            if delete_local_file(path):
                result.deleted.append(path)
            else:
                result.delete_failed.append(path)

    # -----------------------------
    # 2) DOWNLOAD MISSING
    # -----------------------------

    def download_missing(self, album: Album, result: SyncResult):
        """
        Download every asset that has no local file. Existing files are
        trusted as-is, without checking size or content.
        """
        folder = self.ctx.local_folder
        for asset in album.assets:
            target = folder / asset.filename

            if target.exists():
                result.skipped += 1
                continue

            try:
                download_asset(self.ctx.session, self.ctx.config.api_url, asset.id, target)
            except DownloadError as e:
                logger.error("Download failed for %s: %s", asset.id, e)
                result.failed += 1
                continue

            result.new += 1
            logger.info("Downloaded: %s -> %s", asset.id, target)

    def reconcile(self, album: Album) -> SyncResult:
        result = SyncResult()
        self.remove_orphans(album, result)
        self.download_missing(album, result)
        logger.info(result.summary())
        return result


def _program_path() -> str:
    if getattr(sys, "frozen", False):
        return sys.executable
    return str(Path(sys.argv[0]).resolve())


def run_sync(config_path: Optional[Path] = None, log_path: Optional[Path] = None) -> Optional[SyncResult]:
    """
    One full sync pass: config -> local folder -> album -> reconcile.
    Anything failing before reconciliation ends the run without touching files.
    Returns None in that case.
    """
    config_path = Path(config_path) if config_path else default_config_path()
    log_path = Path(log_path) if log_path else default_log_path()

    with run_logging(log_path):
        logger.info("Starting sync - Program: %s, Config path: %s", _program_path(), config_path)

        try:
            config = load_config(config_path)
        except ConfigError as e:
            logger.critical("Failed to load config from '%s': %s. Exiting sync.", config_path, e)
            return None

        try:
            ensure_folder(Path(config.local_folder))
        except OSError as e:
            logger.critical(
                "Failed to create local folder '%s': %s. Exiting sync.", config.local_folder, e
            )
            return None

        ctx = RunContext(config=config, session=build_session(config.api_key), log_path=log_path)
        try:
            try:
                album = get_album_with_assets(ctx.session, config.api_url, config.album_id)
            except FetchError as e:
                logger.critical(
                    "Failed to fetch album data from Immich API: %s. Exiting sync. "
                    "Check API URL, key, and network connectivity.",
                    e,
                )
                return None

            logger.info("Album '%s' - %d assets", album.name, len(album.assets))
            logger.info("Download path: %s", config.local_folder)

            return AlbumSync(ctx).reconcile(album)
        finally:
            ctx.close()
