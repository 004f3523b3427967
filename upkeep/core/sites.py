"""
Update Site Registry.

This module provides the named remote repositories files are downloaded
from and uploaded to.

Key features:
- URL and upload target normalization (always end with '/')
- Order-preserving registry with in-place rename
- Uploadability check for developer sessions
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING

from upkeep.errors import DuplicateNameError, NotFoundError

if TYPE_CHECKING:
    from upkeep.core.records import FileRecord

logger = logging.getLogger(__name__)

DEFAULT_UPDATE_SITE = "Primary"
DEFAULT_SITE_URL = "https://update.imagej.net/"


def _with_slash(path: str | None) -> str | None:
    if path and not path.endswith("/"):
        return path + "/"
    return path


@dataclass
class UpdateSite:
    """
    A named remote repository of versioned files.

    Attributes:
        name: Site name (unique within a registry)
        url: Download URL, always ending with '/'
        ssh_host: Host used by the external uploader (optional)
        upload_target: Upload directory, ending with '/' when set
        timestamp: Last known modification time of the remote index
    """

    name: str
    url: str
    ssh_host: str | None = None
    upload_target: str | None = None
    timestamp: int = 0

    def __post_init__(self):
        self.url = _with_slash(self.url)
        self.upload_target = _with_slash(self.upload_target)

    @property
    def is_uploadable(self) -> bool:
        return bool(self.upload_target)

    def is_last_modified(self, timestamp: int) -> bool:
        return self.timestamp == timestamp

    def set_last_modified(self, timestamp: int) -> None:
        self.timestamp = timestamp

    def __str__(self) -> str:
        parts = [self.url]
        if self.ssh_host is not None:
            parts.append(self.ssh_host)
        if self.upload_target is not None:
            parts.append(self.upload_target)
        return ", ".join(parts)


class UpdateSiteRegistry:
    """
    Ordered registry of update sites, keyed by name.

    A default entry for the primary public repository is seeded at
    construction; it is the only implicit state.
    """

    def __init__(
        self,
        primary_url: str = DEFAULT_SITE_URL,
        upload_target: str | None = None,
        ssh_host: str | None = None,
    ):
        """
        Initialize UpdateSiteRegistry.

        Args:
            primary_url: URL of the default site
            upload_target: Upload target of the default site (developer sessions)
            ssh_host: SSH host of the default site (developer sessions)
        """
        self._sites: dict[str, UpdateSite] = {}
        self.add(
            DEFAULT_UPDATE_SITE,
            primary_url,
            ssh_host=ssh_host,
            upload_target=upload_target,
        )

    def add(
        self,
        name: str,
        url: str,
        ssh_host: str | None = None,
        upload_target: str | None = None,
        timestamp: int = 0,
    ) -> UpdateSite:
        """
        Add an update site, replacing an existing site of the same name in place.

        Returns:
            The new UpdateSite
        """
        site = UpdateSite(
            name=name,
            url=url,
            ssh_host=ssh_host,
            upload_target=upload_target,
            timestamp=timestamp,
        )
        self._sites[name] = site
        return site

    def rename(
        self, old: str, new: str, records: Iterable["FileRecord"] = ()
    ) -> None:
        """
        Rename an update site, keeping its position in the registry.

        Args:
            old: Current site name
            new: New site name
            records: File records to re-key from old to new

        Raises:
            DuplicateNameError: If a site named new exists already
            NotFoundError: If no site is named old
        """
        if new in self._sites:
            raise DuplicateNameError(f"Update site {new} exists already")
        if old not in self._sites:
            raise NotFoundError(f"Update site {old} does not exist")

        for record in records:
            if record.update_site == old:
                record.update_site = new

        renamed: dict[str, UpdateSite] = {}
        for name, site in self._sites.items():
            if name == old:
                site.name = new
                renamed[new] = site
            else:
                renamed[name] = site
        self._sites = renamed
        logger.info("Renamed update site %s to %s", old, new)

    def remove(self, name: str) -> None:
        """
        Remove an update site.

        Raises:
            NotFoundError: If no site has that name
        """
        if name not in self._sites:
            raise NotFoundError(f"Update site {name} does not exist")
        del self._sites[name]
        logger.info("Removed update site %s", name)

    def clear(self) -> None:
        """Remove every site, the default one included."""
        self._sites = {}

    def get(self, name: str | None) -> UpdateSite | None:
        if name is None:
            return None
        return self._sites.get(name)

    def list_names(self) -> list[str]:
        return list(self._sites)

    def has_uploadable_site(self) -> bool:
        return any(site.is_uploadable for site in self._sites.values())

    def __contains__(self, name: object) -> bool:
        return name in self._sites

    def __iter__(self) -> Iterator[UpdateSite]:
        return iter(self._sites.values())

    def __len__(self) -> int:
        return len(self._sites)

    def __repr__(self) -> str:
        return f"UpdateSiteRegistry({self.list_names()})"
