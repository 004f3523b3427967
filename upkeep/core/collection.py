"""
Files Collection.

This module provides the aggregate root holding all file records and the
update site registry.

Key features:
- Order-preserving record storage keyed by filename
- Named filtered views (to_install, to_upload, shown_by_default, ...)
- Action queries for single files and multi-selections
- Bulk "mark for update" sweep
- Display/install ordering and download URL composition
"""

import logging
import platform as platform_module
from collections.abc import Iterable, Iterator
from urllib.parse import quote

from upkeep.core import filters
from upkeep.core.filters import FilteredView, Predicate
from upkeep.core.graph import DependencyGraph, DependencyMap
from upkeep.core.records import Action, FileRecord, Status
from upkeep.core.sites import (
    DEFAULT_SITE_URL,
    DEFAULT_UPDATE_SITE,
    UpdateSite,
    UpdateSiteRegistry,
)
from upkeep.errors import (
    DuplicateNameError,
    InvalidActionError,
    MissingUpdateSiteError,
    NotFoundError,
)

logger = logging.getLogger(__name__)

# launcher files first, then plugins, jars, scripts, libs, misc
_SORT_PRIORITY = "CIfpjsim"

_UPDATE_CANDIDATES = (Action.UPDATE, Action.UNINSTALL, Action.INSTALL)


def current_platform() -> str:
    """Platform name of the running interpreter, e.g. "linux64"."""
    system = platform_module.system().lower()
    bits = "64" if platform_module.architecture()[0] == "64bit" else "32"
    if system == "darwin":
        return "macosx"
    if system == "windows":
        return "win" + bits
    return system + bits


def _sort_key(record: FileRecord) -> tuple[int, str]:
    first = record.filename[:1]
    index = _SORT_PRIORITY.find(first) if first else -1
    priority = index if index >= 0 else 0x200 + (ord(first) if first else 0)
    return priority, record.filename


class FilesCollection:
    """
    All tracked files and their update sites.

    The collection is a single-writer structure: mutate it from one thread
    of control and do not mutate it while a view is being traversed.
    """

    def __init__(
        self,
        platform: str | None = None,
        primary_url: str = DEFAULT_SITE_URL,
        upload_target: str | None = None,
        ssh_host: str | None = None,
    ):
        """
        Initialize FilesCollection.

        Args:
            platform: Active platform (auto-detected when None or empty)
            primary_url: URL of the default update site
            upload_target: Session upload target of the default site
                (developer sessions, never written to snapshots)
            ssh_host: SSH host of the default site (developer sessions)
        """
        self.platform = platform or current_platform()
        self.sites = UpdateSiteRegistry(
            primary_url, upload_target=upload_target, ssh_host=ssh_host
        )
        self._files: dict[str, FileRecord] = {}
        # site whose upload target belongs to this session, not to the database
        self.developer_site: UpdateSite | None = (
            self.sites.get(DEFAULT_UPDATE_SITE) if upload_target else None
        )

    # Records

    def add(self, record: FileRecord) -> FileRecord:
        """
        Add a record.

        Raises:
            DuplicateNameError: If a record with that filename exists already
        """
        if record.filename in self._files:
            raise DuplicateNameError(f"File {record.filename} is tracked already")
        self._files[record.filename] = record
        return record

    def get(self, filename: str) -> FileRecord | None:
        return self._files.get(filename)

    def get_from_digest(self, filename: str, checksum: str) -> FileRecord | None:
        """The record for filename if checksum is one of its known versions."""
        record = self._files.get(filename)
        if record is not None and record.is_known_version(checksum):
            return record
        return None

    def __iter__(self) -> Iterator[FileRecord]:
        return iter(self._files.values())

    def __len__(self) -> int:
        return len(self._files)

    def __contains__(self, filename: object) -> bool:
        return filename in self._files

    # Update sites

    def rename_update_site(self, old: str, new: str) -> None:
        self.sites.rename(old, new, self._files.values())

    def remove_update_site(self, name: str) -> None:
        """Remove a site; records still naming it get no download URL."""
        self.sites.remove(name)

    def is_uploadable(self, record: FileRecord) -> bool:
        if record.update_site is None:
            return self.sites.has_uploadable_site()
        site = self.sites.get(record.update_site)
        return site is not None and site.is_uploadable

    def site_names_to_upload(self) -> list[str]:
        """
        Sites touched by pending uploads, metadata changes and removals.

        Returns:
            Site names in registry order

        Raises:
            NotFoundError: If a pending file names an unknown site
        """
        wanted = {
            record.update_site
            for record in self.to_upload(include_metadata_changes=True)
        }
        wanted.update(record.update_site for record in self.to_remove())
        result = [name for name in self.sites.list_names() if name in wanted]
        if len(result) != len(wanted):
            unknown = sorted(str(name) for name in wanted if name not in result)
            raise NotFoundError(
                f"Unknown update site in {unknown} (known: {self.sites.list_names()})"
            )
        return result

    # Filtering

    def filter(self, predicate: Predicate) -> FilteredView:
        return filters.filter_records(predicate, self._files.values())

    def has(self, predicate: Predicate) -> bool:
        return any(predicate(record) for record in self._files.values())

    def does_platform_match(self) -> Predicate:
        return filters.does_platform_match(
            self.platform, everything=self.sites.has_uploadable_site()
        )

    def _dependencies_uploadable(self, record: FileRecord) -> bool:
        for filename in record.dependencies:
            other = self._files.get(filename)
            if other is None:
                return False
            if not other.has_current_version() and other.action != Action.UPLOAD:
                return False
        return True

    def to_upload(
        self, site: str | None = None, include_metadata_changes: bool = False
    ) -> FilteredView:
        predicate = filters.is_action(Action.UPLOAD)
        if include_metadata_changes:
            predicate = filters.or_(predicate, filters.has_metadata_changes())
        if site is not None:
            predicate = filters.and_(predicate, filters.is_update_site(site))
        return self.filter(predicate)

    def to_remove(self) -> FilteredView:
        return self.filter(filters.is_action(Action.REMOVE))

    def to_upload_or_remove(self) -> FilteredView:
        return self.filter(filters.one_of_actions((Action.UPLOAD, Action.REMOVE)))

    def to_install(self) -> FilteredView:
        return self.filter(filters.is_action(Action.INSTALL))

    def to_update(self) -> FilteredView:
        return self.filter(filters.is_action(Action.UPDATE))

    def to_install_or_update(self) -> FilteredView:
        return self.filter(filters.one_of_actions((Action.INSTALL, Action.UPDATE)))

    def to_uninstall(self) -> FilteredView:
        return self.filter(filters.is_action(Action.UNINSTALL))

    def up_to_date(self) -> FilteredView:
        return self.filter(
            filters.and_(filters.is_status(Status.INSTALLED), filters.is_no_action())
        )

    def locally_modified(self) -> FilteredView:
        return self.filter(
            filters.one_of_statuses((Status.MODIFIED, Status.OBSOLETE_MODIFIED))
        )

    def uninstalled(self) -> FilteredView:
        return self.filter(filters.is_status(Status.NOT_INSTALLED))

    def installed(self) -> FilteredView:
        return self.filter(
            filters.not_(
                filters.one_of_statuses((Status.LOCAL_ONLY, Status.NOT_INSTALLED))
            )
        )

    def local_only(self) -> FilteredView:
        return self.filter(filters.is_status(Status.LOCAL_ONLY))

    def for_update_site(self, name: str) -> FilteredView:
        return self.filter(filters.is_update_site(name))

    def not_hidden(self) -> FilteredView:
        return self.filter(
            filters.and_(
                filters.not_(filters.is_status(Status.OBSOLETE_UNINSTALLED)),
                self.does_platform_match(),
            )
        )

    def shown_by_default(self) -> FilteredView:
        """Files needing attention; not-installed files only when marked for install."""
        return self.filter(
            filters.or_(
                filters.one_of_statuses(
                    (
                        Status.UPDATE_AVAILABLE,
                        Status.NEW_REMOTE,
                        Status.OBSOLETE,
                        Status.OBSOLETE_MODIFIED,
                    )
                ),
                filters.is_action(Action.INSTALL),
            )
        )

    def uploadable(self) -> FilteredView:
        return self.filter(
            filters.and_(
                filters.not_(filters.is_status(Status.OBSOLETE_UNINSTALLED)),
                self.is_uploadable,
                self._dependencies_uploadable,
            )
        )

    def changes(self) -> FilteredView:
        return self.filter(filters.not_(filters.is_no_action()))

    def updateable(self, even_forced: bool = False) -> FilteredView:
        platform = self.platform
        return self.filter(
            lambda record: record.is_updateable(even_forced)
            and record.is_updateable_platform(platform)
        )

    # Actions

    def get_actions(self, file: FileRecord) -> list[Action]:
        """
        Actions the user can pick for a file.

        The no-op default is left out. Files on uploadable sites get the
        developer actions as well.
        """
        actions = file.valid_actions(developer=self.is_uploadable(file))
        return [action for action in actions if action != file.status.default_action]

    def get_common_actions(self, files: Iterable[FileRecord]) -> list[Action]:
        """
        Actions applicable to every file of a selection.

        Returns:
            Intersection in the order of the first file's actions (empty for
            an empty selection)
        """
        result: list[Action] | None = None
        for file in files:
            actions = self.get_actions(file)
            if result is None:
                result = actions
            else:
                result = [action for action in result if action in actions]
        return result or []

    def set_action(
        self, file: FileRecord, action: Action, site: str | None = None
    ) -> None:
        """
        Queue an action, allowing developer actions on uploadable files.

        Args:
            file: Record to change
            action: Action to queue
            site: Target site when uploading a file that has none yet

        Raises:
            InvalidActionError: If the action is not valid for the file
            NotFoundError: If site is not registered
        """
        if site is not None and action == Action.UPLOAD:
            if site not in self.sites:
                raise NotFoundError(f"Update site {site} does not exist")
            if file.update_site not in (None, site):
                raise InvalidActionError(
                    f"{file} belongs to update site {file.update_site}, not {site}"
                )
            if not self.sites.get(site).is_uploadable:
                raise InvalidActionError(f"Update site {site} is not uploadable")
            file.set_action(action, developer=True)
            file.update_site = site
            return
        if action == Action.UPLOAD and file.update_site is None:
            raise InvalidActionError(f"Choose an update site to upload {file} to")
        file.set_action(action, developer=self.is_uploadable(file))

    def has_changes(self) -> bool:
        return self.has(filters.not_(filters.is_no_action()))

    def has_upload_or_remove(self) -> bool:
        return self.has(filters.one_of_actions((Action.UPLOAD, Action.REMOVE)))

    def has_forcable_updates(self) -> bool:
        return any(
            not record.is_updateable(False) for record in self.updateable(True)
        )

    def mark_for_update(self, even_forced: bool = False) -> int:
        """
        Queue updates for every updateable file.

        Prefers UPDATE, falls back to UNINSTALL (withdrawn files) and then to
        INSTALL.

        Args:
            even_forced: Also overwrite locally modified files

        Returns:
            Number of files marked
        """
        marked = 0
        for record in list(self.updateable(even_forced)):
            if record.set_first_valid_action(
                _UPDATE_CANDIDATES, developer=self.is_uploadable(record)
            ):
                marked += 1
        logger.info("Marked %d files for update", marked)
        return marked

    # Ordering, URLs, dependencies

    def sort(self) -> None:
        """Order records by first-character priority, then by filename."""
        self._files = {
            record.filename: record
            for record in sorted(self._files.values(), key=_sort_key)
        }

    def get_url(self, file: FileRecord) -> str:
        """
        Download URL of the current version of file.

        Raises:
            MissingUpdateSiteError: If the file has no (registered) update site
        """
        if not file.update_site:
            raise MissingUpdateSiteError(f"File {file} has no update site")
        site = self.sites.get(file.update_site)
        if site is None:
            raise MissingUpdateSiteError(
                f"Update site {file.update_site} of {file} is not registered"
            )
        return f"{site.url}{quote(file.filename)}-{file.timestamp}"

    def dependency_graph(self) -> DependencyGraph:
        return DependencyGraph(self)

    def get_dependencies(self, overriding: bool = False) -> DependencyMap:
        return self.dependency_graph().get_dependencies(overriding)

    def check_consistency(self) -> list[str]:
        return self.dependency_graph().check_consistency()

    def __repr__(self) -> str:
        return f"FilesCollection({', '.join(self._files)})"
