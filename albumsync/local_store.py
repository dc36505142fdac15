import logging
from pathlib import Path
from typing import List, Set

logger = logging.getLogger(__name__)


def ensure_folder(path: Path):
    """
    Create the sync target (and parents) if it doesn't exist yet.
    """
    path.mkdir(parents=True, exist_ok=True)


def file_stem(name: str) -> str:
    """
    Asset id a local filename stands for: everything before the first dot.
    """
    return name.split(".", 1)[0]


def list_local_files(folder: Path) -> List[Path]:
    """
    Regular files directly inside folder, sorted by name. Subdirectories are ignored.
    """
    return sorted((p for p in folder.iterdir() if p.is_file()), key=lambda p: p.name)


def find_orphans(folder: Path, remote_ids: Set[str]) -> List[Path]:
    """
    Local files whose stem is not the id of any remote asset.
    """
    orphans = []
    for path in list_local_files(folder):
        if file_stem(path.name) not in remote_ids:
            logger.info("Local file %s is not in the album. Marking for deletion.", path)
            orphans.append(path)
    return orphans


def delete_local_file(path: Path) -> bool:
    """
    Delete a local file. Failures are logged, not raised.
    """
    try:
        path.unlink()
    except OSError as e:
        logger.error("Failed to delete orphaned local file %s: %s", path, e)
        return False
    logger.info("Deleted orphaned local file: %s", path)
    return True
