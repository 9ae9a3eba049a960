"""Core data models for license_resolver.

This module defines the value objects passed between the resolution engine,
its providers and the cache: the package being resolved, the license that
comes back, and the repository coordinates derived from a license URL.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

DEFAULT_REF = "master"


@dataclass(frozen=True)
class PackageDescriptor:
    """Immutable description of a package whose license is wanted.

    Frozen for hashability so descriptors can key batch results.

    Attributes:
        id: Package identifier (e.g., "Newtonsoft.Json").
        version: Version string, treated as opaque (e.g., "13.0.1").
        license_url: Optional license URL declared by the package.

    Raises:
        ValueError: If id or version is empty or blank.
    """

    id: str
    version: str
    license_url: Optional[str] = None

    def __post_init__(self) -> None:
        if not isinstance(self.id, str) or not self.id.strip():
            raise ValueError("package id must be a non-empty string")
        if not isinstance(self.version, str) or not self.version.strip():
            raise ValueError("package version must be a non-empty string")


@dataclass(frozen=True)
class License:
    """A resolved license.

    Attributes:
        id: Short identifier, usually an SPDX code (e.g., "MIT") but may be
            the raw declared string.
        name: Human-readable name (e.g., "MIT License"). May equal id.
    """

    id: str
    name: str

    @classmethod
    def from_id(cls, license_id: str) -> "License":
        """Build a License whose name is its identifier."""
        return cls(id=license_id, name=license_id)


class RepositoryHost(str, Enum):
    """Kind of host a license URL points at."""

    GITHUB = "github.com"
    RAW_CONTENT = "raw.githubusercontent.com"


@dataclass(frozen=True)
class RepositoryReference:
    """Repository coordinates extracted from a license URL.

    Attributes:
        host: Host the URL was served from.
        owner: Repository owner (user or organisation).
        repo: Repository name.
        ref: Branch name, "master" when the URL does not name one reliably.
        path: File path inside the repository, may be empty.
    """

    host: RepositoryHost
    owner: str
    repo: str
    ref: str = DEFAULT_REF
    path: str = ""

    @property
    def repository_id(self) -> str:
        """Return the "owner/repo" form used by the GitHub API."""
        return f"{self.owner}/{self.repo}"
