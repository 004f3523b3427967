"""
Tests for the Update Site Registry.

This test suite covers:
1. URL normalization and uploadability
2. Default site seeding
3. Rename (order preservation, record re-keying, errors)
4. Removal and lookups
"""

import pytest

from upkeep.core.records import FileRecord
from upkeep.core.sites import (
    DEFAULT_SITE_URL,
    DEFAULT_UPDATE_SITE,
    UpdateSite,
    UpdateSiteRegistry,
)
from upkeep.errors import DuplicateNameError, NotFoundError


class TestUpdateSite:
    """Test the UpdateSite value."""

    def test_url_gets_trailing_slash(self):
        """URLs should always end with a path separator."""
        site = UpdateSite("Mirror", "https://mirror.example.org/update")
        assert site.url == "https://mirror.example.org/update/"

    def test_url_with_slash_is_unchanged(self):
        """A URL that already ends with '/' should not get a second one."""
        site = UpdateSite("Mirror", "https://mirror.example.org/update/")
        assert site.url == "https://mirror.example.org/update/"

    def test_upload_target_normalized(self):
        """Upload targets should be normalized like URLs."""
        site = UpdateSite("Mirror", "https://m.example.org", upload_target="/srv/update")
        assert site.upload_target == "/srv/update/"
        assert site.is_uploadable

    def test_not_uploadable_without_target(self):
        """Sites without (or with an empty) upload target are not uploadable."""
        assert not UpdateSite("A", "https://a.example.org").is_uploadable
        assert not UpdateSite("B", "https://b.example.org", upload_target="").is_uploadable

    def test_last_modified(self):
        """Sites should remember the last seen index timestamp."""
        site = UpdateSite("A", "https://a.example.org", timestamp=100)
        assert site.is_last_modified(100)
        site.set_last_modified(200)
        assert site.is_last_modified(200)
        assert not site.is_last_modified(100)


class TestRegistry:
    """Test UpdateSiteRegistry operations."""

    def test_default_site_seeded(self):
        """A new registry should contain only the primary site."""
        registry = UpdateSiteRegistry()
        assert registry.list_names() == [DEFAULT_UPDATE_SITE]
        assert registry.get(DEFAULT_UPDATE_SITE).url == DEFAULT_SITE_URL
        assert not registry.has_uploadable_site()

    def test_developer_registry_is_uploadable(self):
        """A primary site with an upload target makes the registry uploadable."""
        registry = UpdateSiteRegistry(upload_target="/srv/update")
        assert registry.has_uploadable_site()

    def test_add_and_get(self):
        """Added sites should be retrievable by name."""
        registry = UpdateSiteRegistry()
        registry.add("Mirror", "https://mirror.example.org", timestamp=42)

        site = registry.get("Mirror")
        assert site.name == "Mirror"
        assert site.timestamp == 42
        assert "Mirror" in registry
        assert len(registry) == 2

    def test_get_unknown_or_none(self):
        """Unknown names and None should yield None."""
        registry = UpdateSiteRegistry()
        assert registry.get("Nope") is None
        assert registry.get(None) is None

    def test_add_existing_replaces_in_place(self):
        """Re-adding a site should replace it without moving it."""
        registry = UpdateSiteRegistry()
        registry.add("Mirror", "https://mirror.example.org")
        registry.add(DEFAULT_UPDATE_SITE, "https://other.example.org")

        assert registry.list_names() == [DEFAULT_UPDATE_SITE, "Mirror"]
        assert registry.get(DEFAULT_UPDATE_SITE).url == "https://other.example.org/"

    def test_rename_preserves_order(self):
        """Renaming should keep the site at its position."""
        registry = UpdateSiteRegistry()
        registry.add("A", "https://a.example.org")
        registry.add("B", "https://b.example.org")

        registry.rename("A", "Alpha")

        assert registry.list_names() == [DEFAULT_UPDATE_SITE, "Alpha", "B"]
        assert "A" not in registry
        assert registry.get("Alpha").name == "Alpha"
        assert registry.get("Alpha").url == "https://a.example.org/"

    def test_rename_rekeys_records(self):
        """Records on the old site should move to the new name."""
        registry = UpdateSiteRegistry()
        registry.add("A", "https://a.example.org")
        on_a = [FileRecord("jars/a.jar", update_site="A"), FileRecord("jars/b.jar", update_site="A")]
        elsewhere = FileRecord("jars/c.jar", update_site=DEFAULT_UPDATE_SITE)
        local = FileRecord("jars/d.jar")

        registry.rename("A", "Alpha", on_a + [elsewhere, local])

        assert all(record.update_site == "Alpha" for record in on_a)
        assert elsewhere.update_site == DEFAULT_UPDATE_SITE
        assert local.update_site is None

    def test_rename_to_existing_name(self):
        """Renaming onto an existing site should fail."""
        registry = UpdateSiteRegistry()
        registry.add("A", "https://a.example.org")

        with pytest.raises(DuplicateNameError, match="exists already"):
            registry.rename("A", DEFAULT_UPDATE_SITE)

        assert registry.list_names() == [DEFAULT_UPDATE_SITE, "A"]

    def test_rename_unknown_site(self):
        """Renaming an unknown site should fail."""
        registry = UpdateSiteRegistry()
        with pytest.raises(NotFoundError, match="does not exist"):
            registry.rename("Nope", "Other")

    def test_remove(self):
        """Removed sites should disappear from the registry."""
        registry = UpdateSiteRegistry()
        registry.add("A", "https://a.example.org")
        registry.remove("A")
        assert registry.list_names() == [DEFAULT_UPDATE_SITE]

    def test_remove_unknown_site(self):
        """Removing an unknown site should fail."""
        registry = UpdateSiteRegistry()
        with pytest.raises(NotFoundError):
            registry.remove("Nope")
