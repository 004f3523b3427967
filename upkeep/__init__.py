"""
upkeep - Package-manager core for files distributed from update sites.

This is the main package that exports the public API: the files collection
and its records, the reconciler, and the error taxonomy.
"""

__version__ = "0.1.0"

from upkeep.core import (
    Action,
    FileRecord,
    FilesCollection,
    LocalFact,
    Reconciler,
    RemoteFact,
    Status,
)
from upkeep.errors import (
    DuplicateNameError,
    InvalidActionError,
    MissingUpdateSiteError,
    NotFoundError,
    SnapshotError,
    UpdaterError,
)

__all__ = [
    "__version__",
    "Action",
    "DuplicateNameError",
    "FileRecord",
    "FilesCollection",
    "InvalidActionError",
    "LocalFact",
    "MissingUpdateSiteError",
    "NotFoundError",
    "Reconciler",
    "RemoteFact",
    "SnapshotError",
    "Status",
    "UpdaterError",
]
