"""
File Database.

This module persists a FilesCollection as a TOML document: the snapshot
shape from upkeep.core.snapshot, written with tomlkit and read with tomllib.
"""

import logging
from pathlib import Path

import tomlkit

from upkeep.config.toml_handler import TOMLError, read_toml, write_toml
from upkeep.core import snapshot
from upkeep.core.collection import FilesCollection
from upkeep.core.sites import DEFAULT_SITE_URL
from upkeep.errors import SnapshotError

logger = logging.getLogger(__name__)


def write_database(path: Path, files: FilesCollection) -> None:
    """
    Write the sites and records of a collection.

    Raises:
        SnapshotError: If the file cannot be written
    """
    doc = tomlkit.document()
    doc.add(tomlkit.comment("upkeep file database; regenerated on every write"))
    for key, value in snapshot.serialize(files).items():
        if value != []:
            doc.add(key, value)
    try:
        write_toml(path, doc)
    except TOMLError as e:
        raise SnapshotError(str(e)) from e
    logger.info("Wrote %d files to %s", len(files), path)


def read_database(
    path: Path,
    platform: str | None = None,
    primary_url: str = DEFAULT_SITE_URL,
    upload_target: str | None = None,
) -> FilesCollection:
    """
    Read a collection written by write_database.

    Args:
        path: Database file; a missing file yields an empty collection
        platform: Active platform (auto-detected when None)
        primary_url: URL of the seeded default site
        upload_target: Session upload target of the default site (developer
            sessions, never written back)

    Returns:
        FilesCollection

    Raises:
        SnapshotError: If the file cannot be parsed
    """
    if not path.exists():
        logger.info("No database at %s, starting empty", path)
        return FilesCollection(
            platform=platform, primary_url=primary_url, upload_target=upload_target
        )
    try:
        data = read_toml(path)
    except TOMLError as e:
        raise SnapshotError(str(e)) from e
    files = snapshot.load(
        data, platform=platform, primary_url=primary_url, upload_target=upload_target
    )
    logger.debug("Read %d files from %s", len(files), path)
    return files
