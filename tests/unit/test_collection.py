"""
Tests for FilesCollection.

This test suite covers:
1. Record storage and lookups
2. Action queries for single files and selections
3. The bulk update sweep
4. Uploads, site selection and uploadable files
5. Named views, ordering and download URLs
"""

import pytest

from upkeep.core.collection import FilesCollection
from upkeep.core.records import Action, FileRecord, Status, Version
from upkeep.errors import (
    DuplicateNameError,
    InvalidActionError,
    MissingUpdateSiteError,
    NotFoundError,
)


def make(filename: str, status: Status, **kwargs) -> FileRecord:
    if status != Status.LOCAL_ONLY:
        kwargs.setdefault("update_site", "Primary")
        kwargs.setdefault("checksum", "h-" + filename)
    record = FileRecord(filename, **kwargs)
    record.assign_status(status)
    return record


@pytest.fixture
def files():
    return FilesCollection(platform="linux64")


@pytest.fixture
def developer_files():
    return FilesCollection(platform="linux64", upload_target="/srv/update")


class TestRecords:
    """Test record storage."""

    def test_add_and_get(self, files):
        """Records are stored by filename."""
        record = files.add(FileRecord("jars/a.jar"))
        assert files.get("jars/a.jar") is record
        assert "jars/a.jar" in files
        assert len(files) == 1
        assert files.get("jars/b.jar") is None

    def test_duplicate(self, files):
        """Filenames are unique."""
        files.add(FileRecord("jars/a.jar"))
        with pytest.raises(DuplicateNameError, match="tracked already"):
            files.add(FileRecord("jars/a.jar"))

    def test_get_from_digest(self, files):
        """Lookup by digest accepts current and previous versions."""
        files.add(FileRecord("jars/a.jar", checksum="h2", previous=[Version("h1", 1)]))

        assert files.get_from_digest("jars/a.jar", "h1") is not None
        assert files.get_from_digest("jars/a.jar", "h2") is not None
        assert files.get_from_digest("jars/a.jar", "h3") is None
        assert files.get_from_digest("jars/b.jar", "h1") is None


class TestActions:
    """Test action queries."""

    def test_get_actions(self, files):
        """The no-op default is not offered."""
        assert files.get_actions(make("a.jar", Status.NEW_REMOTE)) == [Action.INSTALL]
        assert files.get_actions(make("b.jar", Status.MODIFIED)) == [Action.UPDATE]
        assert files.get_actions(make("c.jar", Status.UPDATE_AVAILABLE)) == [
            Action.UPDATE,
            Action.UNINSTALL,
        ]
        assert files.get_actions(make("d.jar", Status.LOCAL_ONLY)) == []

    def test_get_actions_developer(self, developer_files):
        """Files on uploadable sites get the developer actions."""
        record = make("a.jar", Status.MODIFIED)
        assert developer_files.get_actions(record) == [
            Action.UPDATE,
            Action.UPLOAD,
            Action.REMOVE,
        ]

    def test_common_actions(self, files):
        """Common actions are the intersection over the selection."""
        new = make("a.jar", Status.NEW_REMOTE)
        not_installed = make("b.jar", Status.NOT_INSTALLED)
        installed = make("c.jar", Status.INSTALLED)

        assert files.get_common_actions([new, not_installed]) == [Action.INSTALL]
        assert files.get_common_actions([new, installed]) == []
        assert files.get_common_actions([]) == []

    def test_set_action_rejects_developer_action(self, files):
        """Developer actions need an uploadable site."""
        record = files.add(make("a.jar", Status.MODIFIED))
        with pytest.raises(InvalidActionError):
            files.set_action(record, Action.UPLOAD)

    def test_has_changes(self, files):
        """A single queued action counts as a change."""
        record = files.add(make("a.jar", Status.UPDATE_AVAILABLE))
        assert not files.has_changes()

        files.set_action(record, Action.UPDATE)

        assert files.has_changes()
        assert not files.has_upload_or_remove()
        assert list(files.changes()) == [record]


class TestMarkForUpdate:
    """Test the bulk update sweep."""

    def test_mark_for_update(self, files):
        """Updates, withdrawals and marked installs are swept."""
        update = files.add(make("a.jar", Status.UPDATE_AVAILABLE))
        obsolete = files.add(make("b.jar", Status.OBSOLETE, checksum=None))
        modified = files.add(make("c.jar", Status.MODIFIED))
        installed = files.add(make("d.jar", Status.INSTALLED))

        assert files.mark_for_update() == 2

        assert update.action == Action.UPDATE
        assert obsolete.action == Action.UNINSTALL
        assert modified.action == Action.NONE
        assert installed.action == Action.NONE

    def test_forced(self, files):
        """Forced updates overwrite local modifications."""
        modified = files.add(make("c.jar", Status.MODIFIED))
        assert files.has_forcable_updates()

        assert files.mark_for_update(even_forced=True) == 1

        assert modified.action == Action.UPDATE

    def test_other_platform_skipped(self, files):
        """Files for other platforms are not swept."""
        record = files.add(
            make("lib/win64/a.dll", Status.UPDATE_AVAILABLE, platforms={"win64"})
        )
        assert files.mark_for_update() == 0
        assert record.action == Action.NONE


class TestUploads:
    """Test developer uploads."""

    def test_upload_to_site(self, developer_files):
        """Uploading a local-only file assigns its site."""
        record = developer_files.add(make("jars/new.jar", Status.LOCAL_ONLY))

        developer_files.set_action(record, Action.UPLOAD, site="Primary")

        assert record.action == Action.UPLOAD
        assert record.update_site == "Primary"
        assert list(developer_files.to_upload("Primary")) == [record]

    def test_upload_needs_site(self, developer_files):
        """Site-less files need an explicit site to upload to."""
        record = developer_files.add(make("jars/new.jar", Status.LOCAL_ONLY))
        with pytest.raises(InvalidActionError, match="Choose an update site"):
            developer_files.set_action(record, Action.UPLOAD)

    def test_upload_unknown_site(self, developer_files):
        """Unknown sites are rejected."""
        record = developer_files.add(make("jars/new.jar", Status.LOCAL_ONLY))
        with pytest.raises(NotFoundError):
            developer_files.set_action(record, Action.UPLOAD, site="Ghost")

    def test_upload_to_read_only_site(self, developer_files):
        """Sites without upload target accept no uploads."""
        developer_files.sites.add("Mirror", "https://mirror.example.org")
        record = developer_files.add(make("jars/new.jar", Status.LOCAL_ONLY))
        with pytest.raises(InvalidActionError, match="not uploadable"):
            developer_files.set_action(record, Action.UPLOAD, site="Mirror")
        assert record.update_site is None

    def test_site_names_to_upload(self, developer_files):
        """Touched sites are listed in registry order."""
        developer_files.sites.add("Mirror", "https://m.example.org", upload_target="/srv/m")
        removed = developer_files.add(
            make("jars/a.jar", Status.INSTALLED, update_site="Mirror")
        )
        uploaded = developer_files.add(make("jars/b.jar", Status.MODIFIED))
        developer_files.set_action(removed, Action.REMOVE)
        developer_files.set_action(uploaded, Action.UPLOAD)

        assert developer_files.site_names_to_upload() == ["Primary", "Mirror"]
        assert developer_files.has_upload_or_remove()

    def test_site_names_unknown_site(self, developer_files):
        """Pending files on unknown sites are an error."""
        developer_files.add(
            make("jars/a.jar", Status.INSTALLED, update_site="Ghost", metadata_changed=True)
        )
        with pytest.raises(NotFoundError, match="Unknown update site"):
            developer_files.site_names_to_upload()

    def test_uploadable(self, developer_files):
        """Files with unresolvable dependencies are not uploadable."""
        dangling = developer_files.add(make("jars/a.jar", Status.LOCAL_ONLY))
        dangling.add_dependency("jars/missing.jar")
        dependent = developer_files.add(make("jars/b.jar", Status.LOCAL_ONLY))
        dependent.add_dependency("jars/c.jar")
        local = developer_files.add(make("jars/c.jar", Status.LOCAL_ONLY))
        developer_files.add(make("jars/d.jar", Status.OBSOLETE_UNINSTALLED, checksum=None))

        assert [r.filename for r in developer_files.uploadable()] == ["jars/c.jar"]

        developer_files.set_action(local, Action.UPLOAD, site="Primary")

        assert [r.filename for r in developer_files.uploadable()] == [
            "jars/b.jar",
            "jars/c.jar",
        ]


class TestViews:
    """Test named views."""

    def test_shown_by_default(self, files):
        """Not-installed files are shown only when marked for install."""
        update = files.add(make("a.jar", Status.UPDATE_AVAILABLE))
        new = files.add(make("b.jar", Status.NEW_REMOTE))
        files.add(make("c.jar", Status.INSTALLED))
        not_installed = files.add(make("d.jar", Status.NOT_INSTALLED))

        assert list(files.shown_by_default()) == [update, new]

        files.set_action(not_installed, Action.INSTALL)

        assert list(files.shown_by_default()) == [update, new, not_installed]

    def test_status_views(self, files):
        """Status-based views partition the records."""
        installed = files.add(make("a.jar", Status.INSTALLED))
        modified = files.add(make("b.jar", Status.MODIFIED))
        local = files.add(make("c.jar", Status.LOCAL_ONLY))
        absent = files.add(make("d.jar", Status.NOT_INSTALLED))

        assert list(files.up_to_date()) == [installed]
        assert list(files.locally_modified()) == [modified]
        assert list(files.local_only()) == [local]
        assert list(files.uninstalled()) == [absent]
        assert list(files.installed()) == [installed, modified]
        assert list(files.for_update_site("Primary")) == [installed, modified, absent]

    def test_not_hidden(self, files):
        """Withdrawn absent files and other platforms are hidden."""
        shown = files.add(make("a.jar", Status.INSTALLED))
        files.add(make("b.jar", Status.OBSOLETE_UNINSTALLED, checksum=None))
        files.add(make("lib/win64/c.dll", Status.NEW_REMOTE, platforms={"win64"}))

        assert list(files.not_hidden()) == [shown]

    def test_action_views(self, files):
        """Action views follow queued actions."""
        new = files.add(make("a.jar", Status.NEW_REMOTE))
        update = files.add(make("b.jar", Status.UPDATE_AVAILABLE))
        gone = files.add(make("c.jar", Status.INSTALLED))
        files.set_action(new, Action.INSTALL)
        files.set_action(update, Action.UPDATE)
        files.set_action(gone, Action.UNINSTALL)

        assert list(files.to_install()) == [new]
        assert list(files.to_update()) == [update]
        assert list(files.to_install_or_update()) == [new, update]
        assert list(files.to_uninstall()) == [gone]
        assert list(files.to_remove()) == []


class TestOrderingAndUrls:
    """Test sort() and get_url()."""

    def test_sort(self, files):
        """Priority prefixes come first, the rest by code point; sorting is idempotent."""
        for name in (
            "lib/x.so",
            "jars/a.jar",
            "macros/m.ijm",
            "README.md",
            "images/icon.png",
            "plugins/b.jar",
            "scripts/s.py",
            "fiji-linux64",
            "ImageJ-linux64",
            "Contents/Info.plist",
        ):
            files.add(FileRecord(name))
        expected = [
            "Contents/Info.plist",
            "ImageJ-linux64",
            "fiji-linux64",
            "plugins/b.jar",
            "jars/a.jar",
            "scripts/s.py",
            "images/icon.png",
            "macros/m.ijm",
            "README.md",
            "lib/x.so",
        ]

        files.sort()
        assert [record.filename for record in files] == expected

        files.sort()
        assert [record.filename for record in files] == expected

    def test_get_url(self, files):
        """URLs join the site URL, the quoted filename and the timestamp."""
        record = files.add(
            make("plugins/My Plugin.jar", Status.NEW_REMOTE, timestamp=20240101120000)
        )
        assert (
            files.get_url(record)
            == "https://update.imagej.net/plugins/My%20Plugin.jar-20240101120000"
        )

    def test_get_url_without_site(self, files):
        """Site-less and orphaned files have no URL."""
        local = files.add(make("a.jar", Status.LOCAL_ONLY))
        with pytest.raises(MissingUpdateSiteError):
            files.get_url(local)

        files.sites.add("Mirror", "https://m.example.org")
        orphan = files.add(make("b.jar", Status.INSTALLED, update_site="Mirror"))
        files.remove_update_site("Mirror")
        with pytest.raises(MissingUpdateSiteError, match="not registered"):
            files.get_url(orphan)

    def test_rename_update_site(self, files):
        """Renaming a site re-keys its records."""
        files.sites.add("Mirror", "https://m.example.org")
        record = files.add(make("a.jar", Status.INSTALLED, update_site="Mirror"))

        files.rename_update_site("Mirror", "Backup")

        assert record.update_site == "Backup"
        assert files.get_url(record).startswith("https://m.example.org/a.jar-")
