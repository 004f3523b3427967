"""
Updater core - in-memory file tracking and planning.

This package handles:
- Update site registry
- File records and their status/action state machine
- Filtered views over records
- Dependency expansion and consistency checks
- Merging local and remote facts into a collection
"""

from upkeep.core.collection import FilesCollection
from upkeep.core.graph import DependencyGraph, DependencyMap
from upkeep.core.records import Action, Dependency, FileRecord, Status, Version
from upkeep.core.reconcile import (
    LocalFact,
    Reconciler,
    RemoteFact,
    VersionComparison,
    derive_status,
)
from upkeep.core.sites import DEFAULT_UPDATE_SITE, UpdateSite, UpdateSiteRegistry

__all__ = [
    "Action",
    "DEFAULT_UPDATE_SITE",
    "Dependency",
    "DependencyGraph",
    "DependencyMap",
    "FileRecord",
    "FilesCollection",
    "LocalFact",
    "Reconciler",
    "RemoteFact",
    "Status",
    "UpdateSite",
    "UpdateSiteRegistry",
    "Version",
    "VersionComparison",
    "derive_status",
]
