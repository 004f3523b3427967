"""
Updater exceptions.

All errors raised synchronously by the updater core derive from
UpdaterError. Consistency problems are not errors: they are collected as
human-readable diagnostics by the dependency graph.
"""


class UpdaterError(Exception):
    """Base exception for updater errors."""

    pass


class InvalidActionError(UpdaterError):
    """Raised when an action is not valid for a file's current status."""

    pass


class DuplicateNameError(UpdaterError):
    """Raised when a name is already taken (update site or file)."""

    pass


class NotFoundError(UpdaterError):
    """Raised when an update site (or file) does not exist."""

    pass


class MissingUpdateSiteError(UpdaterError):
    """Raised when a URL is requested for a file without an update site."""

    pass


class SnapshotError(UpdaterError):
    """Raised when persisted collection data is malformed."""

    pass
