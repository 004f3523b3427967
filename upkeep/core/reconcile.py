"""
Reconciler.

This module merges the local disk scan and the remote site indices into a
FilesCollection and derives every record's status.

Key features:
- Merge by filename (records are never duplicated)
- Last registered site offering a current version wins the metadata
- Withdrawn files keep their history and become obsolete
- Version comparison against the full history or the latest version only
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from upkeep.core.collection import FilesCollection
from upkeep.core.records import Dependency, FileRecord, Status, Version
from upkeep.errors import NotFoundError

logger = logging.getLogger(__name__)


class VersionComparison(Enum):
    """How a differing local copy is classified."""

    # local copy matching any earlier remote version is an older version
    HISTORY = "history"
    # local copy older than the current remote version is an older version
    LATEST = "latest"


@dataclass(frozen=True)
class LocalFact:
    """A file found by the local disk scan."""

    filename: str
    checksum: str
    timestamp: int


@dataclass(frozen=True)
class RemoteFact:
    """
    A file listed in the index of an update site.

    Attributes:
        filename: File name
        site: Name of the update site
        checksum: Checksum of the current version, None if withdrawn
        timestamp: Timestamp of the current version
        previous: Earlier versions
        dependencies: Declared dependency edges
        platforms: Platforms the file applies to (empty means all)
        description: Free-form description
    """

    filename: str
    site: str
    checksum: str | None
    timestamp: int = 0
    previous: tuple[Version, ...] = ()
    dependencies: tuple[Dependency, ...] = ()
    platforms: frozenset[str] = field(default_factory=frozenset)
    description: str = ""


def derive_status(
    record: FileRecord,
    previous_status: Status | None = None,
    comparison: VersionComparison = VersionComparison.HISTORY,
) -> Status:
    """
    Classify a record from its local and remote facts.

    Args:
        record: Record with merged local and remote facts
        previous_status: Status before this reconciliation, None if first seen
        comparison: Source of "known older version" decisions

    Returns:
        Derived status
    """
    local = record.local_checksum

    if record.checksum is not None:
        if local is None:
            if previous_status in (None, Status.NEW_REMOTE):
                return Status.NEW_REMOTE
            return Status.NOT_INSTALLED
        if local == record.checksum:
            return Status.INSTALLED
        if comparison == VersionComparison.LATEST:
            older = record.local_timestamp < record.timestamp
        else:
            older = record.is_known_version(local)
        return Status.UPDATE_AVAILABLE if older else Status.MODIFIED

    if record.update_site is None or not record.previous:
        return Status.LOCAL_ONLY if local is not None else Status.OBSOLETE_UNINSTALLED

    # withdrawn from its site
    if local is None:
        return Status.OBSOLETE_UNINSTALLED
    if record.is_known_version(local):
        return Status.OBSOLETE
    return Status.OBSOLETE_MODIFIED


def _add_previous(record: FileRecord, version: Version) -> None:
    if version.checksum != record.checksum and version not in record.previous:
        record.previous.append(version)


class Reconciler:
    """
    Merges fact streams into a collection and recomputes statuses.

    Example:
        reconciler = Reconciler(files)
        reconciler.merge(scan_local(), fetch_indices())
        files.mark_for_update()
    """

    def __init__(
        self,
        files: FilesCollection,
        comparison: VersionComparison = VersionComparison.HISTORY,
    ):
        self.files = files
        self.comparison = comparison
        self._seen: set[str] = {record.filename for record in files}

    def merge(
        self,
        local_facts: Iterable[LocalFact],
        remote_facts: Iterable[RemoteFact],
        sites: Iterable[str] | None = None,
    ) -> FilesCollection:
        """
        Merge a local scan and remote indices into the collection.

        The local scan is complete: tracked files missing from it are not
        installed. Files of a fetched site that its index no longer lists are
        withdrawn.

        Args:
            local_facts: Files found on local disk
            remote_facts: Files listed by the fetched update sites
            sites: Names of the fetched sites (default: sites in remote_facts)

        Returns:
            The updated collection

        Raises:
            NotFoundError: If a remote fact names an unregistered site
        """
        order = {name: index for index, name in enumerate(self.files.sites.list_names())}
        by_file: dict[str, list[RemoteFact]] = {}
        fetched = set(sites) if sites is not None else set()
        for fact in remote_facts:
            if fact.site not in order:
                raise NotFoundError(
                    f"File {fact.filename} names unknown update site {fact.site}"
                )
            by_file.setdefault(fact.filename, []).append(fact)
            if sites is None:
                fetched.add(fact.site)
        for name in fetched:
            if name not in order:
                raise NotFoundError(f"Update site {name} does not exist")

        local = {fact.filename: fact for fact in local_facts}

        for filename, facts in by_file.items():
            facts.sort(key=lambda fact: order[fact.site])
            record = self.files.get(filename)
            if record is None:
                record = self.files.add(FileRecord(filename))
            self._apply_remote(record, facts)

        for record in self.files:
            if (
                record.filename not in by_file
                and record.update_site in fetched
                and record.checksum is not None
            ):
                logger.info("%s was withdrawn from %s", record, record.update_site)
                withdrawn = Version(record.checksum, record.timestamp)
                record.checksum = None
                _add_previous(record, withdrawn)

        for filename, fact in local.items():
            record = self.files.get(filename)
            if record is None:
                record = self.files.add(FileRecord(filename))
            record.local_checksum = fact.checksum
            record.local_timestamp = fact.timestamp
        for record in self.files:
            if record.filename not in local:
                record.local_checksum = None
                record.local_timestamp = 0

        self.refresh()
        return self.files

    def _apply_remote(self, record: FileRecord, facts: list[RemoteFact]) -> None:
        current = [fact for fact in facts if fact.checksum is not None]
        winner = current[-1] if current else facts[-1]

        history: list[Version] = list(record.previous)
        if record.checksum is not None:
            history.append(Version(record.checksum, record.timestamp))
        for fact in facts:
            history.extend(fact.previous)
            if fact is not winner and fact.checksum is not None:
                history.append(Version(fact.checksum, fact.timestamp))

        if winner.checksum is not None:
            record.checksum = winner.checksum
            record.timestamp = winner.timestamp
        elif record.checksum is not None:
            record.checksum = None

        record.update_site = winner.site
        record.previous = []
        for version in history:
            _add_previous(record, version)
        record.dependencies = {
            dependency.filename: dependency for dependency in winner.dependencies
        }
        record.platforms = set(winner.platforms)
        if winner.description:
            record.description = winner.description

    def refresh(self) -> int:
        """
        Recompute the status of every record.

        Queued actions that the new status no longer allows are reset; developer
        actions only stay on files whose site is uploadable.

        Returns:
            Number of records whose status changed
        """
        changed = 0
        for record in self.files:
            previous = record.status if record.filename in self._seen else None
            status = derive_status(record, previous, self.comparison)
            if status != previous:
                logger.debug("%s: %s -> %s", record, previous, status)
                changed += 1
            record.assign_status(
                status, developer=self.files.is_uploadable(record)
            )
            self._seen.add(record.filename)
        logger.info("Reconciled %d files (%d changed)", len(self.files), changed)
        return changed
