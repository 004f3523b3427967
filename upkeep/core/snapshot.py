"""
Collection Snapshots.

This module converts a FilesCollection to and from plain data (dicts, lists,
strings, integers, booleans) for an external codec. None values and empty lists
are left out so the shape can be written as TOML.
"""

from typing import Any

from upkeep.core.collection import FilesCollection
from upkeep.core.records import Action, Dependency, FileRecord, Status, Version
from upkeep.core.sites import DEFAULT_SITE_URL, DEFAULT_UPDATE_SITE
from upkeep.errors import DuplicateNameError, InvalidActionError, SnapshotError

SNAPSHOT_VERSION = 1


def _compact(data: dict[str, Any]) -> dict[str, Any]:
    # TOML has no null; empty arrays may not follow an array of tables
    return {
        key: value for key, value in data.items() if value is not None and value != []
    }


def serialize(files: FilesCollection) -> dict[str, Any]:
    """
    Snapshot the update sites and records of a collection.

    The session upload target of a developer collection is left out.

    Args:
        files: Collection to snapshot

    Returns:
        Plain data with "version", "sites" and "files" entries
    """
    sites = [
        _compact(
            {
                "name": site.name,
                "url": site.url,
                "ssh_host": site.ssh_host,
                "upload_target": (
                    None if site is files.developer_site else site.upload_target
                ),
                "timestamp": site.timestamp,
            }
        )
        for site in files.sites
    ]

    records = []
    for record in files:
        entry = _compact(
            {
                "filename": record.filename,
                "update_site": record.update_site,
                "checksum": record.checksum,
                "timestamp": record.timestamp,
                "local_checksum": record.local_checksum,
                "local_timestamp": record.local_timestamp,
                "status": record.status.value,
                "action": record.action.value,
                "description": record.description or None,
                "metadata_changed": record.metadata_changed,
                "platforms": sorted(record.platforms),
                "previous": [
                    {"checksum": version.checksum, "timestamp": version.timestamp}
                    for version in record.previous
                ],
                "dependencies": [
                    {
                        "filename": dependency.filename,
                        "timestamp": dependency.timestamp,
                        "overrides": dependency.overrides,
                    }
                    for dependency in record.get_dependencies()
                ],
            }
        )
        records.append(entry)

    return {"version": SNAPSHOT_VERSION, "sites": sites, "files": records}


def load(
    data: dict[str, Any],
    platform: str | None = None,
    primary_url: str = DEFAULT_SITE_URL,
    upload_target: str | None = None,
) -> FilesCollection:
    """
    Rebuild a collection from a snapshot.

    Persisted sites replace the registry exactly; the default site is only
    seeded when the snapshot lists no sites. Statuses are restored as
    persisted. Actions must be valid developer actions of the restored
    status; developer actions on sites that are not uploadable are reset.

    Args:
        data: Snapshot as produced by serialize()
        platform: Active platform (auto-detected when None)
        primary_url: URL of the seeded default site
        upload_target: Session upload target for the default site (developer
            sessions); ignored when the persisted site has one

    Returns:
        New FilesCollection

    Raises:
        SnapshotError: If the data is malformed
    """
    version = data.get("version", SNAPSHOT_VERSION)
    if version != SNAPSHOT_VERSION:
        raise SnapshotError(f"Unsupported snapshot version: {version}")

    files = FilesCollection(platform=platform, primary_url=primary_url)
    try:
        sites = data.get("sites") or []
        if sites:
            files.sites.clear()
        for site in sites:
            files.sites.add(
                site["name"],
                site["url"],
                ssh_host=site.get("ssh_host"),
                upload_target=site.get("upload_target"),
                timestamp=int(site.get("timestamp", 0)),
            )

        primary = files.sites.get(DEFAULT_UPDATE_SITE)
        if upload_target and primary is not None and not primary.is_uploadable:
            files.developer_site = files.sites.add(
                primary.name,
                primary.url,
                ssh_host=primary.ssh_host,
                upload_target=upload_target,
                timestamp=primary.timestamp,
            )

        for entry in data.get("files", []):
            files.add(_load_record(files, entry))
    except (KeyError, TypeError, ValueError) as e:
        raise SnapshotError(f"Malformed snapshot: {e!r}") from e
    except (DuplicateNameError, InvalidActionError) as e:
        raise SnapshotError(f"Inconsistent snapshot: {e}") from e

    for record in files:
        if record.update_site is not None and record.update_site not in files.sites:
            raise SnapshotError(
                f"File {record} names unknown update site {record.update_site}"
            )
    return files


def _load_record(files: FilesCollection, entry: dict[str, Any]) -> FileRecord:
    record = FileRecord(
        filename=entry["filename"],
        checksum=entry.get("checksum"),
        timestamp=int(entry.get("timestamp", 0)),
        update_site=entry.get("update_site"),
        local_checksum=entry.get("local_checksum"),
        local_timestamp=int(entry.get("local_timestamp", 0)),
        previous=[
            Version(version["checksum"], int(version["timestamp"]))
            for version in entry.get("previous", [])
        ],
        platforms=set(entry.get("platforms", [])),
        description=entry.get("description", ""),
        metadata_changed=bool(entry.get("metadata_changed", False)),
    )
    for dependency in entry.get("dependencies", []):
        record.dependencies[dependency["filename"]] = Dependency(
            dependency["filename"],
            int(dependency.get("timestamp", 0)),
            bool(dependency.get("overrides", False)),
        )

    record.assign_status(Status(entry.get("status", Status.LOCAL_ONLY.value)))
    record.set_action(Action(entry.get("action", Action.NONE.value)), developer=True)
    # developer actions only survive on uploadable sites
    record.assign_status(record.status, developer=files.is_uploadable(record))
    return record
