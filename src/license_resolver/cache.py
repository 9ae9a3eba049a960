"""Cache layer for license resolution results.

This module provides the caches consulted by the resolution engine before
any provider is called. A cache maps (package id, version) to a license
identifier. A record whose version is ``"*"`` is a user override that applies
to every version of the package; an exact version record still wins over it.

Entries never expire. They are trusted until cleared by hand.
"""

import logging
import threading
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

WILDCARD_VERSION = "*"
RECORD_SEPARATOR = "||"

DEFAULT_CACHE_DIR = Path.home() / ".cache" / "license_resolver"


def _normalize_id(package_id: str) -> str:
    return package_id.strip().casefold()


class LicenseCacheRepository(ABC):
    """Abstract base class for license caches."""

    @abstractmethod
    def read(self, package_id: str, version: str) -> Optional[str]:
        """Look up the cached license id for a package version.

        Args:
            package_id: Package identifier, matched case-insensitively.
            version: Package version.

        Returns:
            The exact-version license id if present, else the wildcard
            license id if present, else None.
        """
        ...

    @abstractmethod
    def write(self, package_id: str, version: str, license_id: str) -> None:
        """Store a license id unless one is already stored for the version.

        Empty arguments make this a no-op. An existing (id, version) record
        is never overwritten.
        """
        ...

    @abstractmethod
    def clear(
        self, package_id: Optional[str] = None, version: Optional[str] = None
    ) -> None:
        """Clear cache entries.

        Args:
            package_id: If specified, clear only this package.
                If None, clear all entries.
            version: If specified (with package_id), clear only this
                version. Ignored if package_id is None.
        """
        ...

    @abstractmethod
    def info(self) -> dict:
        """Return cache statistics."""
        ...

    def set_override(self, package_id: str, license_id: str) -> None:
        """Pin a license for every version of a package."""
        self.write(package_id, WILDCARD_VERSION, license_id)

    @staticmethod
    def _is_valid_record(package_id: str, version: str, license_id: str) -> bool:
        if not package_id or not package_id.strip():
            return False
        if not version or not license_id:
            return False
        # Either value would corrupt the line-based record format
        for value in (version, license_id):
            if RECORD_SEPARATOR in value or "\n" in value or "\r" in value:
                return False
        return True


class LicenseFileCache(LicenseCacheRepository):
    """Durable cache storing one file per package id.

    Each file is named after the case-folded package id and holds one
    ``version||licenseId`` record per line.

    Writes are check-then-append. Writers for the same id inside one process
    are serialized by a per-id lock. Separate processes writing the same id
    can still race between the check and the append; the worst outcome is a
    duplicate, identical record, which reads tolerate because the first
    matching line wins.

    Attributes:
        root: Directory holding the per-package files.
    """

    def __init__(self, root: Optional[Path] = None) -> None:
        """Initialize the file cache.

        Args:
            root: Cache directory. If None, uses
                ~/.cache/license_resolver.
        """
        if root is None:
            root = DEFAULT_CACHE_DIR
        root.mkdir(parents=True, exist_ok=True)

        self.root = root
        self._locks: dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            return self._locks.setdefault(key, threading.Lock())

    def _path_for(self, package_id: str) -> Optional[Path]:
        """Return the storage file for a package id.

        Returns None for ids that cannot name a file inside the root.
        """
        key = _normalize_id(package_id)
        if not key or key in (".", "..") or Path(key).name != key:
            return None
        return self.root / key

    def _read_records(self, path: Path) -> list[tuple[str, str]]:
        """Read the (version, license id) records stored in a file."""
        try:
            text = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except (OSError, UnicodeDecodeError) as e:
            logger.warning("Could not read cache file %s: %s", path, e)
            return []

        records = []
        for line in text.splitlines():
            parts = line.split(RECORD_SEPARATOR, 1)
            if len(parts) != 2 or not parts[0] or not parts[1]:
                # Skip malformed lines rather than failing the whole lookup
                continue
            records.append((parts[0], parts[1]))
        return records

    def read(self, package_id: str, version: str) -> Optional[str]:
        if not package_id or not version:
            return None
        path = self._path_for(package_id)
        if path is None:
            return None

        wildcard = None
        for record_version, license_id in self._read_records(path):
            if record_version == version:
                return license_id
            if record_version == WILDCARD_VERSION and wildcard is None:
                wildcard = license_id
        return wildcard

    def write(self, package_id: str, version: str, license_id: str) -> None:
        if not self._is_valid_record(package_id, version, license_id):
            return
        path = self._path_for(package_id)
        if path is None:
            return

        with self._lock_for(path.name):
            if any(v == version for v, _ in self._read_records(path)):
                return

            try:
                prefix = ""
                if path.exists() and path.stat().st_size > 0:
                    with path.open("rb") as f:
                        f.seek(-1, 2)
                        if f.read(1) != b"\n":
                            prefix = "\n"
                with path.open("a", encoding="utf-8") as f:
                    f.write(f"{prefix}{version}{RECORD_SEPARATOR}{license_id}\n")
            except OSError as e:
                logger.warning("Could not write cache file %s: %s", path, e)

    def clear(
        self, package_id: Optional[str] = None, version: Optional[str] = None
    ) -> None:
        if package_id is None:
            for path in self.root.iterdir():
                if path.is_file():
                    path.unlink(missing_ok=True)
            return

        path = self._path_for(package_id)
        if path is None:
            return

        with self._lock_for(path.name):
            if version is None:
                path.unlink(missing_ok=True)
                return

            remaining = [
                (v, lic) for v, lic in self._read_records(path) if v != version
            ]
            if remaining:
                path.write_text(
                    "".join(f"{v}{RECORD_SEPARATOR}{lic}\n" for v, lic in remaining),
                    encoding="utf-8",
                )
            else:
                path.unlink(missing_ok=True)

    def info(self) -> dict:
        """Get cache statistics.

        Returns:
            Dictionary with cache information:
                - path: Path to the cache directory
                - packages: Number of package files
                - count: Number of cached records
                - size_bytes: Total size of the package files in bytes
        """
        files = [path for path in self.root.iterdir() if path.is_file()]
        return {
            "path": str(self.root),
            "packages": len(files),
            "count": sum(len(self._read_records(path)) for path in files),
            "size_bytes": sum(path.stat().st_size for path in files),
        }


class LicenseMemoryCache(LicenseCacheRepository):
    """Process-lifetime cache keyed by ``"id/version"``.

    Safe to share between concurrent resolutions: inserts are atomic and the
    first writer for a key wins.
    """

    def __init__(self) -> None:
        self._entries: dict[str, str] = {}
        self._lock = threading.Lock()

    @staticmethod
    def _key(package_id: str, version: str) -> str:
        return f"{_normalize_id(package_id)}/{version}"

    def read(self, package_id: str, version: str) -> Optional[str]:
        if not package_id or not version:
            return None
        with self._lock:
            found = self._entries.get(self._key(package_id, version))
            if found is None:
                found = self._entries.get(self._key(package_id, WILDCARD_VERSION))
        return found

    def write(self, package_id: str, version: str, license_id: str) -> None:
        if not self._is_valid_record(package_id, version, license_id):
            return
        with self._lock:
            self._entries.setdefault(self._key(package_id, version), license_id)

    def clear(
        self, package_id: Optional[str] = None, version: Optional[str] = None
    ) -> None:
        with self._lock:
            if package_id is None:
                self._entries.clear()
            elif version is None:
                prefix = f"{_normalize_id(package_id)}/"
                for key in [k for k in self._entries if k.startswith(prefix)]:
                    del self._entries[key]
            else:
                self._entries.pop(self._key(package_id, version), None)

    def info(self) -> dict:
        with self._lock:
            packages = {key.rsplit("/", 1)[0] for key in self._entries}
            return {
                "path": None,
                "packages": len(packages),
                "count": len(self._entries),
                "size_bytes": 0,
            }
