"""
File Records.

This module provides the tracked-file entity and its status/action state
machine.

Key features:
- Closed Action and Status enumerations
- Explicit transition table (valid actions per status)
- Developer actions (upload/remove) for files on uploadable sites
- Dependency edges with "overrides" flag
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum

from upkeep.errors import InvalidActionError


class Action(Enum):
    """Operation queued to reconcile a file."""

    NONE = "none"
    INSTALL = "install"
    UPDATE = "update"
    UNINSTALL = "uninstall"
    UPLOAD = "upload"
    REMOVE = "remove"

    def __str__(self) -> str:
        return self.value


class Status(Enum):
    """Derived relationship between the local and the remote state of a file."""

    INSTALLED = "installed"
    UPDATE_AVAILABLE = "update-available"
    NEW_REMOTE = "new-remote"
    OBSOLETE = "obsolete"
    OBSOLETE_MODIFIED = "obsolete-modified"
    OBSOLETE_UNINSTALLED = "obsolete-uninstalled"
    MODIFIED = "modified"
    LOCAL_ONLY = "local-only"
    NOT_INSTALLED = "not-installed"

    @property
    def actions(self) -> tuple[Action, ...]:
        """Valid actions for a regular user; the first one is the no-op."""
        return _ACTIONS[self]

    @property
    def developer_actions(self) -> tuple[Action, ...]:
        """Valid actions when the file's update site is uploadable."""
        return _ACTIONS[self] + _DEVELOPER_ACTIONS[self]

    @property
    def default_action(self) -> Action:
        return _ACTIONS[self][0]

    def is_valid_action(self, action: Action, developer: bool = False) -> bool:
        actions = self.developer_actions if developer else self.actions
        return action in actions

    def __str__(self) -> str:
        return self.value


_ACTIONS: dict[Status, tuple[Action, ...]] = {
    Status.INSTALLED: (Action.NONE, Action.UNINSTALL),
    Status.UPDATE_AVAILABLE: (Action.NONE, Action.UPDATE, Action.UNINSTALL),
    Status.MODIFIED: (Action.NONE, Action.UPDATE),
    Status.NEW_REMOTE: (Action.NONE, Action.INSTALL),
    Status.NOT_INSTALLED: (Action.NONE, Action.INSTALL),
    Status.LOCAL_ONLY: (Action.NONE,),
    Status.OBSOLETE: (Action.NONE, Action.UNINSTALL),
    Status.OBSOLETE_MODIFIED: (Action.NONE, Action.UNINSTALL),
    Status.OBSOLETE_UNINSTALLED: (Action.NONE,),
}

_DEVELOPER_ACTIONS: dict[Status, tuple[Action, ...]] = {
    Status.INSTALLED: (Action.REMOVE,),
    Status.UPDATE_AVAILABLE: (Action.REMOVE,),
    Status.MODIFIED: (Action.UPLOAD, Action.REMOVE),
    Status.NEW_REMOTE: (Action.REMOVE,),
    Status.NOT_INSTALLED: (Action.REMOVE,),
    Status.LOCAL_ONLY: (Action.UPLOAD,),
    Status.OBSOLETE: (Action.UPLOAD,),
    Status.OBSOLETE_MODIFIED: (Action.UPLOAD,),
    Status.OBSOLETE_UNINSTALLED: (),
}

OBSOLETE_STATUSES = frozenset(
    {Status.OBSOLETE, Status.OBSOLETE_MODIFIED, Status.OBSOLETE_UNINSTALLED}
)


@dataclass(frozen=True)
class Version:
    """A version of a file as published on an update site."""

    checksum: str
    timestamp: int


@dataclass(frozen=True)
class Dependency:
    """
    A dependency edge.

    Attributes:
        filename: Name of the required (or replaced) file
        timestamp: Timestamp of the version the edge was declared against
        overrides: True for a non-transitive "replaces" edge
    """

    filename: str
    timestamp: int = 0
    overrides: bool = False


@dataclass(eq=False)
class FileRecord:
    """
    One tracked file.

    Records compare by identity so they can key dependency maps. The
    checksum/timestamp pair describes the current remote version; a checksum
    of None means the file is local-only or was withdrawn from its site.

    Attributes:
        filename: Unique key within a collection (e.g. "plugins/Foo.jar")
        checksum: Checksum of the current remote version
        timestamp: Timestamp of the current remote version
        update_site: Name of the owning update site, None for local-only files
        local_checksum: Checksum of the installed copy, None if not installed
        local_timestamp: Timestamp of the installed copy
        previous: Older remote versions
        dependencies: Declared dependency edges, keyed by filename
        platforms: Platforms the file applies to (empty means all)
        description: Free-form description from the remote index
        metadata_changed: Metadata needs to be re-uploaded
    """

    filename: str
    checksum: str | None = None
    timestamp: int = 0
    update_site: str | None = None
    local_checksum: str | None = None
    local_timestamp: int = 0
    previous: list[Version] = field(default_factory=list)
    dependencies: dict[str, Dependency] = field(default_factory=dict)
    platforms: set[str] = field(default_factory=set)
    description: str = ""
    metadata_changed: bool = False
    _status: Status = field(default=Status.LOCAL_ONLY, repr=False)
    _action: Action = field(default=Action.NONE, repr=False)

    @property
    def status(self) -> Status:
        return self._status

    @property
    def action(self) -> Action:
        return self._action

    def assign_status(self, status: Status, developer: bool = False) -> None:
        """
        Set the derived status.

        Only the reconciliation step (and snapshot restore) calls this. An
        action that is not valid for the new status is reset to the status's
        default.

        Args:
            status: Derived status
            developer: Whether developer actions stay valid (uploadable site)
        """
        self._status = status
        if not status.is_valid_action(self._action, developer):
            self._action = status.default_action

    def valid_actions(self, developer: bool = False) -> tuple[Action, ...]:
        return self._status.developer_actions if developer else self._status.actions

    def set_action(self, action: Action, developer: bool = False) -> None:
        """
        Queue an action for this file.

        Args:
            action: Action to queue
            developer: Whether developer actions are allowed

        Raises:
            InvalidActionError: If the action is not valid for the current status
        """
        if not self._status.is_valid_action(action, developer):
            raise InvalidActionError(
                f"Invalid action '{action}' for {self.filename} "
                f"(status '{self._status}', valid: "
                f"{', '.join(str(a) for a in self.valid_actions(developer))})"
            )
        self._action = action

    def set_first_valid_action(
        self, candidates: Iterable[Action], developer: bool = False
    ) -> bool:
        """Queue the first candidate valid for the current status; True if one was."""
        valid = self.valid_actions(developer)
        for action in candidates:
            if action in valid:
                self._action = action
                return True
        return False

    def has_default_action(self) -> bool:
        return self._action == self._status.default_action

    def add_dependency(
        self, filename: str, timestamp: int = 0, overrides: bool = False
    ) -> Dependency:
        dependency = Dependency(filename, timestamp, overrides)
        self.dependencies[filename] = dependency
        return dependency

    def remove_dependency(self, filename: str) -> None:
        self.dependencies.pop(filename, None)

    def get_dependencies(self) -> Iterator[Dependency]:
        return iter(self.dependencies.values())

    def is_installed(self) -> bool:
        return self.local_checksum is not None

    def is_obsolete(self) -> bool:
        return self._status in OBSOLETE_STATUSES

    def has_current_version(self) -> bool:
        return self.checksum is not None

    def is_known_version(self, checksum: str | None) -> bool:
        """True if checksum is the current or an earlier remote version."""
        if checksum is None:
            return False
        if checksum == self.checksum:
            return True
        return any(version.checksum == checksum for version in self.previous)

    def is_updateable_platform(self, platform: str) -> bool:
        return not self.platforms or platform in self.platforms

    def is_updateable(self, even_forced: bool = False) -> bool:
        """
        Whether a bulk update sweep should touch this file.

        Forced updates additionally overwrite local modifications.
        """
        if self._action in (Action.UPDATE, Action.INSTALL):
            return True
        if self._status in (Status.UPDATE_AVAILABLE, Status.OBSOLETE):
            return True
        return even_forced and self._status in (
            Status.MODIFIED,
            Status.OBSOLETE_MODIFIED,
        )

    def will_be_up_to_date(self) -> bool:
        if self._action == Action.UPLOAD:
            return True
        return self._status == Status.INSTALLED and self._action == Action.NONE

    def will_not_be_installed(self) -> bool:
        if self._action in (Action.UNINSTALL, Action.REMOVE):
            return True
        if self._action in (Action.INSTALL, Action.UPDATE):
            return False
        return not self.is_installed()

    def __str__(self) -> str:
        return self.filename
