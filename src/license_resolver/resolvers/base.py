"""Base interface for license resolvers.

Resolvers are the providers of the resolution chain. Each one asks a single
external source (GitHub, ClearlyDefined, Libraries.io) for the license of a
package and answers with a License or None.
"""

import logging
from abc import ABC, abstractmethod
from typing import Any, Optional

from license_resolver.events import EventKind, EventReporter, LoggingReporter, ResolutionEvent
from license_resolver.models import License, PackageDescriptor

# Placeholder values upstream services use when they do not know the license
UNKNOWN_LICENSE_IDS = frozenset(
    {
        "unknown",
        "other",
        "noassertion",
        "none",
        "unlicensed",
        "see license",
    }
)


def is_known_license(value: Any) -> bool:
    """Return True if value is a non-blank string that is not a placeholder.

    Args:
        value: Raw license value taken from a provider response.

    Returns:
        False for non-strings, blank strings and the placeholder values in
        UNKNOWN_LICENSE_IDS (compared case-insensitively).
    """
    if not isinstance(value, str) or not value.strip():
        return False
    return value.strip().lower() not in UNKNOWN_LICENSE_IDS


class BaseResolver(ABC):
    """Abstract base class for license resolvers.

    Resolvers must never raise for upstream failures. A missing package, an
    error status or a malformed payload are all reported through the
    injected EventReporter and answered with None so the next resolver in
    the chain gets its turn.
    """

    def __init__(self, reporter: Optional[EventReporter] = None) -> None:
        """Initialize the resolver.

        Args:
            reporter: Receiver for resolution events. Defaults to a
                LoggingReporter writing to this resolver's module logger.
        """
        self.reporter = reporter or LoggingReporter(
            logging.getLogger(type(self).__module__)
        )

    @abstractmethod
    async def resolve(self, descriptor: PackageDescriptor) -> Optional[License]:
        """Resolve the license of a package.

        Args:
            descriptor: Package to resolve.

        Returns:
            License if this source knows it, None otherwise.
        """
        ...

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the short resolver name, e.g. "GitHub"."""
        ...

    @property
    def display_name(self) -> str:
        """Return a descriptive name including the service URL."""
        return self.name

    @property
    def priority(self) -> int:
        """Return resolver priority for waterfall ordering.

        Lower numbers are tried first. Default is 100.

        Returns:
            Priority value.
        """
        return 100

    async def close(self) -> None:
        """Release resources held by the resolver."""

    def _report(
        self,
        kind: EventKind,
        descriptor: PackageDescriptor,
        message: str = "",
        **details: Any,
    ) -> None:
        self.reporter.report(
            ResolutionEvent(
                kind=kind,
                source=self.name,
                package_id=descriptor.id,
                version=descriptor.version,
                message=message,
                details=details,
            )
        )


class WaterfallResolverBase(ABC):
    """Abstract base for waterfall resolution strategy.

    Orchestrates multiple resolvers in priority order, stopping at the
    first successful resolution.
    """

    def __init__(self, resolvers: list[BaseResolver]) -> None:
        """Initialize with a list of resolvers.

        Args:
            resolvers: Resolvers to chain, in any order.
        """
        self.resolvers = sorted(resolvers, key=lambda r: r.priority)

    @abstractmethod
    async def resolve(self, descriptor: PackageDescriptor) -> Optional[License]:
        """Resolve using waterfall strategy.

        Tries each resolver in priority order until one succeeds.

        Args:
            descriptor: Package to resolve.

        Returns:
            License from the first successful resolver, or None.
        """
        ...

    @abstractmethod
    async def resolve_batch(
        self, descriptors: list[PackageDescriptor]
    ) -> dict[PackageDescriptor, Optional[License]]:
        """Resolve multiple packages concurrently.

        Args:
            descriptors: Packages to resolve.

        Returns:
            Dictionary mapping descriptors to their license (or None).
        """
        ...
