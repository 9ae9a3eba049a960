"""Unit tests for the license caches."""

import threading
from pathlib import Path

import pytest

from license_resolver.cache import (
    DEFAULT_CACHE_DIR,
    WILDCARD_VERSION,
    LicenseFileCache,
    LicenseMemoryCache,
)
from license_resolver.config import ResolverSettings


@pytest.fixture
def file_cache(tmp_path):
    """Create a LicenseFileCache with temporary storage."""
    return LicenseFileCache(root=tmp_path / "cache")


@pytest.fixture
def memory_cache():
    """Create an empty LicenseMemoryCache."""
    return LicenseMemoryCache()


@pytest.fixture(params=["file", "memory"])
def cache(request, tmp_path):
    """Run a test against both cache variants."""
    if request.param == "file":
        return LicenseFileCache(root=tmp_path / "cache")
    return LicenseMemoryCache()


class TestCacheBasicOperations:
    """Behaviour shared by every cache variant."""

    def test_write_and_read(self, cache):
        """Test storing and retrieving a license id."""
        cache.write("Newtonsoft.Json", "13.0.1", "MIT")
        assert cache.read("Newtonsoft.Json", "13.0.1") == "MIT"

    def test_read_missing_entry(self, cache):
        """Test cache miss returns None."""
        assert cache.read("nonexistent", "1.0.0") is None

    def test_read_is_case_insensitive_on_id(self, cache):
        """Test that package ids are matched regardless of case."""
        cache.write("Newtonsoft.Json", "13.0.1", "MIT")
        assert cache.read("newtonsoft.json", "13.0.1") == "MIT"
        assert cache.read("NEWTONSOFT.JSON", "13.0.1") == "MIT"

    def test_version_is_exact(self, cache):
        """Test that versions are not matched loosely."""
        cache.write("pkg", "1.0.0", "MIT")
        assert cache.read("pkg", "1.0") is None

    @pytest.mark.parametrize(
        "package_id,version,license_id",
        [
            ("", "1.0.0", "MIT"),
            ("pkg", "", "MIT"),
            ("pkg", "1.0.0", ""),
            ("   ", "1.0.0", "MIT"),
        ],
    )
    def test_write_with_empty_value_is_noop(self, cache, package_id, version, license_id):
        """Test that empty arguments are silently ignored."""
        cache.write(package_id, version, license_id)
        assert cache.read(package_id or "pkg", version or "1.0.0") is None

    def test_first_write_wins(self, cache):
        """Test that an existing entry is never overwritten."""
        cache.write("pkg", "1.0.0", "MIT")
        cache.write("pkg", "1.0.0", "Apache-2.0")
        assert cache.read("pkg", "1.0.0") == "MIT"

    def test_different_versions_stored_separately(self, cache):
        """Test that versions of the same package are cached separately."""
        cache.write("pkg", "1.0.0", "MIT")
        cache.write("pkg", "2.0.0", "Apache-2.0")
        assert cache.read("pkg", "1.0.0") == "MIT"
        assert cache.read("pkg", "2.0.0") == "Apache-2.0"

    def test_write_rejects_record_separator(self, cache):
        """Test that values that would break the record format are ignored."""
        cache.write("pkg", "1.0.0", "MIT||Apache-2.0")
        cache.write("pkg", "2.0.0", "MIT\nApache-2.0")
        assert cache.read("pkg", "1.0.0") is None
        assert cache.read("pkg", "2.0.0") is None


class TestWildcardOverride:
    """Test the "*" version override."""

    def test_wildcard_applies_to_any_version(self, cache):
        """Test that a wildcard answers for versions without an entry."""
        cache.set_override("Internal.Library", "Proprietary")
        assert cache.read("Internal.Library", "1.0.0") == "Proprietary"
        assert cache.read("internal.library", "99.1-beta") == "Proprietary"

    def test_exact_version_wins_over_wildcard(self, cache):
        """Test that an exact entry takes precedence over the wildcard."""
        cache.write("pkg", WILDCARD_VERSION, "Proprietary")
        cache.write("pkg", "1.0.0", "MIT")
        assert cache.read("pkg", "1.0.0") == "MIT"
        assert cache.read("pkg", "2.0.0") == "Proprietary"

    def test_exact_version_wins_when_written_before_wildcard(self, cache):
        """Test precedence does not depend on write order."""
        cache.write("pkg", "1.0.0", "MIT")
        cache.write("pkg", WILDCARD_VERSION, "Proprietary")
        assert cache.read("pkg", "1.0.0") == "MIT"

    def test_wildcard_is_per_package(self, cache):
        """Test that an override does not leak to other packages."""
        cache.set_override("pkg-a", "Proprietary")
        assert cache.read("pkg-b", "1.0.0") is None


class TestCacheClear:
    """Test manual clearing."""

    def test_clear_all(self, cache):
        cache.write("pkg-a", "1.0.0", "MIT")
        cache.write("pkg-b", "1.0.0", "MIT")
        cache.clear()
        assert cache.read("pkg-a", "1.0.0") is None
        assert cache.read("pkg-b", "1.0.0") is None
        assert cache.info()["count"] == 0

    def test_clear_package(self, cache):
        cache.write("pkg-a", "1.0.0", "MIT")
        cache.write("pkg-a", "2.0.0", "MIT")
        cache.write("pkg-b", "1.0.0", "MIT")
        cache.clear(package_id="PKG-A")
        assert cache.read("pkg-a", "1.0.0") is None
        assert cache.read("pkg-a", "2.0.0") is None
        assert cache.read("pkg-b", "1.0.0") == "MIT"

    def test_clear_package_version(self, cache):
        cache.write("pkg-a", "1.0.0", "MIT")
        cache.write("pkg-a", "2.0.0", "Apache-2.0")
        cache.clear(package_id="pkg-a", version="1.0.0")
        assert cache.read("pkg-a", "1.0.0") is None
        assert cache.read("pkg-a", "2.0.0") == "Apache-2.0"

    def test_clear_allows_rewrite(self, cache):
        """Test that a cleared entry can be written with a new value."""
        cache.write("pkg", "1.0.0", "MIT")
        cache.clear(package_id="pkg", version="1.0.0")
        cache.write("pkg", "1.0.0", "Apache-2.0")
        assert cache.read("pkg", "1.0.0") == "Apache-2.0"

    def test_info_counts_entries(self, cache):
        cache.write("pkg-a", "1.0.0", "MIT")
        cache.write("pkg-a", "2.0.0", "MIT")
        cache.write("pkg-b", "1.0.0", "MIT")
        info = cache.info()
        assert info["count"] == 3
        assert info["packages"] == 2


class TestLicenseFileCache:
    """Tests specific to the durable file cache."""

    def test_default_root_created(self, tmp_path, monkeypatch):
        """Test that the default cache directory is created when missing."""
        default_root = tmp_path / "home" / ".cache" / "license_resolver"
        monkeypatch.setattr("license_resolver.cache.DEFAULT_CACHE_DIR", default_root)
        cache = LicenseFileCache()
        assert cache.root == default_root
        assert cache.root.is_dir()

    def test_default_root_shared_with_settings(self):
        """Test that settings and the file cache agree on the default root."""
        assert ResolverSettings().cache_dir == DEFAULT_CACHE_DIR
        assert DEFAULT_CACHE_DIR == Path.home() / ".cache" / "license_resolver"

    def test_one_file_per_casefolded_id(self, file_cache):
        """Test on-disk layout: one file per id, one record per line."""
        file_cache.write("Newtonsoft.Json", "12.0.3", "MIT")
        file_cache.write("newtonsoft.JSON", "13.0.1", "MIT")

        path = file_cache.root / "newtonsoft.json"
        assert path.read_text(encoding="utf-8") == "12.0.3||MIT\n13.0.1||MIT\n"
        assert [p.name for p in file_cache.root.iterdir()] == ["newtonsoft.json"]

    def test_persists_across_instances(self, tmp_path):
        """Test that entries survive a new cache instance."""
        LicenseFileCache(root=tmp_path).write("pkg", "1.0.0", "MIT")
        assert LicenseFileCache(root=tmp_path).read("pkg", "1.0.0") == "MIT"

    def test_reads_hand_written_override(self, file_cache):
        """Test that a user-authored wildcard line is honoured."""
        (file_cache.root / "internal.lib").write_text("*||Proprietary", encoding="utf-8")
        assert file_cache.read("Internal.Lib", "3.2.1") == "Proprietary"

    def test_append_after_line_without_newline(self, file_cache):
        """Test that appending never merges into an unterminated last line."""
        (file_cache.root / "pkg").write_text("*||Proprietary", encoding="utf-8")
        file_cache.write("pkg", "1.0.0", "MIT")
        assert (file_cache.root / "pkg").read_text(encoding="utf-8") == (
            "*||Proprietary\n1.0.0||MIT\n"
        )
        assert file_cache.read("pkg", "1.0.0") == "MIT"

    def test_malformed_lines_are_skipped(self, file_cache):
        """Test that garbage lines do not break lookups."""
        (file_cache.root / "pkg").write_text(
            "garbage\n||MIT\n1.0.0||\n1.0.0||MIT\n", encoding="utf-8"
        )
        assert file_cache.read("pkg", "1.0.0") == "MIT"

    def test_duplicate_records_first_wins(self, file_cache):
        """Test that duplicate lines from racing writers resolve to the first."""
        (file_cache.root / "pkg").write_text(
            "1.0.0||MIT\n1.0.0||MIT\n", encoding="utf-8"
        )
        assert file_cache.read("pkg", "1.0.0") == "MIT"

    @pytest.mark.parametrize("package_id", ["../escape", "a/b", "..", "."])
    def test_ids_that_are_not_file_names_are_ignored(self, file_cache, package_id):
        """Test that ids cannot address files outside the cache root."""
        file_cache.write(package_id, "1.0.0", "MIT")
        assert file_cache.read(package_id, "1.0.0") is None
        assert list(file_cache.root.iterdir()) == []

    def test_concurrent_writers_same_id(self, file_cache):
        """Test that threads writing one id do not duplicate records."""

        def writer():
            file_cache.write("pkg", "1.0.0", "MIT")

        threads = [threading.Thread(target=writer) for _ in range(16)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert (file_cache.root / "pkg").read_text(encoding="utf-8") == "1.0.0||MIT\n"

    def test_info_reports_location_and_size(self, file_cache):
        file_cache.write("pkg", "1.0.0", "MIT")
        info = file_cache.info()
        assert info["path"] == str(file_cache.root)
        assert info["size_bytes"] == len("1.0.0||MIT\n")


class TestLicenseMemoryCache:
    """Tests specific to the in-memory cache."""

    def test_concurrent_writers_first_wins(self, memory_cache):
        """Test atomic insert-if-absent under concurrent writers."""
        barrier = threading.Barrier(8)

        def writer(license_id):
            barrier.wait()
            memory_cache.write("pkg", "1.0.0", license_id)

        threads = [
            threading.Thread(target=writer, args=(f"LICENSE-{i}",)) for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        stored = memory_cache.read("pkg", "1.0.0")
        assert stored is not None
        assert stored.startswith("LICENSE-")
        assert memory_cache.info()["count"] == 1

    def test_instances_do_not_share_state(self):
        first = LicenseMemoryCache()
        first.write("pkg", "1.0.0", "MIT")
        assert LicenseMemoryCache().read("pkg", "1.0.0") is None
