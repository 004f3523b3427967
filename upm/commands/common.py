"""
Shared command helpers: settings, file database and output formatting.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import upkeep.config
from upkeep.config import Settings
from upkeep.core.collection import FilesCollection
from upkeep.core.reconcile import Reconciler, VersionComparison
from upkeep.core.records import FileRecord
from upkeep.store import read_database, write_database
from upm.cli import UPMError


@dataclass
class Session:
    """
    State of one command invocation.

    Attributes:
        settings: Loaded settings
        files: Collection read from the database
        database: Path of the database file
    """

    settings: Settings
    files: FilesCollection
    database: Path


def open_session(args: Any) -> Session:
    """
    Load settings and the file database for a command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Session
    """
    settings = upkeep.config.load(Path(args.config))
    if not args.verbose:
        logging.getLogger().setLevel(settings.log_level)

    database = Path(args.db) if args.db else Path(settings.database)
    files = read_database(
        database,
        platform=settings.platform or None,
        primary_url=settings.primary_site_url,
        upload_target=settings.upload_target if settings.developer else None,
    )

    # statuses follow the configured version comparison
    Reconciler(files, VersionComparison(settings.version_comparison)).refresh()

    return Session(settings=settings, files=files, database=database)


def save(session: Session) -> None:
    write_database(session.database, session.files)


def require_file(files: FilesCollection, filename: str) -> FileRecord:
    record = files.get(filename)
    if record is None:
        raise UPMError(f"File not tracked: {filename}")
    return record


def format_record(record: FileRecord) -> str:
    return f"{record.status.value:<21} {record.action.value:<10} {record.filename}"
