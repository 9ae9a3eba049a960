"""Waterfall resolver orchestrating multiple resolvers in priority order.

This module implements the resolution engine. For each package it consults
the cache, then asks each resolver in ascending priority order until one
answers, and writes that answer back to the cache.
"""

import asyncio
import logging
from typing import Optional

from license_resolver.cache import LicenseCacheRepository, LicenseFileCache, LicenseMemoryCache
from license_resolver.config import ResolverSettings
from license_resolver.events import EventKind, EventReporter, LoggingReporter, ResolutionEvent
from license_resolver.models import License, PackageDescriptor
from license_resolver.resolvers.base import BaseResolver, WaterfallResolverBase
from license_resolver.resolvers.clearlydefined import ClearlyDefinedResolver
from license_resolver.resolvers.github import GitHubResolver
from license_resolver.resolvers.librariesio import LibrariesIOResolver

logger = logging.getLogger(__name__)

ENGINE_SOURCE = "engine"


class WaterfallResolver(WaterfallResolverBase):
    """Resolves package licenses through a cache and a chain of resolvers.

    Resolution flow per package:
    1. Cache: a hit is returned immediately and never re-validated
    2. Resolvers: tried one at a time in ascending priority; the first
       License returned wins and the rest are skipped
    3. Cache write: the winning license id is stored for (id, version)

    A resolver that raises is reported and skipped; it never stops the
    chain. Independent packages may be resolved concurrently with
    resolve_batch().

    Cache reads and writes are synchronous and run on the event loop
    thread. With a LicenseFileCache each lookup briefly blocks the loop
    for a small file read or append.

    Attributes:
        resolvers: Resolvers sorted by priority.
        cache: Cache consulted before and written after the chain.
        reporter: Receiver for engine-level events.
    """

    def __init__(
        self,
        resolvers: list[BaseResolver],
        cache: Optional[LicenseCacheRepository] = None,
        reporter: Optional[EventReporter] = None,
    ) -> None:
        """Initialize WaterfallResolver.

        Args:
            resolvers: Resolvers to chain, in any order.
            cache: Cache to use. If not provided, an in-memory cache is
                created.
            reporter: Receiver for engine-level events. Defaults to a
                LoggingReporter on this module's logger.
        """
        super().__init__(resolvers=resolvers)
        self.cache = cache if cache is not None else LicenseMemoryCache()
        self.reporter = reporter or LoggingReporter(logger)

    @classmethod
    def from_settings(
        cls,
        settings: ResolverSettings,
        reporter: Optional[EventReporter] = None,
    ) -> "WaterfallResolver":
        """Build the default resolver chain from settings.

        GitHub and ClearlyDefined are always included. Libraries.io is only
        included when an API key is configured.

        Args:
            settings: Credentials, cache location and timeouts.
            reporter: Receiver for events from the engine and every
                resolver. Defaults to logging.

        Returns:
            Configured WaterfallResolver.
        """
        resolvers: list[BaseResolver] = [
            GitHubResolver(
                username=settings.github_username,
                password=settings.github_token,
                timeout=settings.request_timeout,
                reporter=reporter,
            ),
            ClearlyDefinedResolver(timeout=settings.request_timeout, reporter=reporter),
        ]
        if settings.libraries_io_api_key:
            resolvers.append(
                LibrariesIOResolver(
                    api_key=settings.libraries_io_api_key,
                    delay=settings.libraries_io_delay,
                    timeout=settings.request_timeout,
                    reporter=reporter,
                )
            )

        if settings.use_memory_cache:
            cache: LicenseCacheRepository = LicenseMemoryCache()
        else:
            cache = LicenseFileCache(settings.cache_dir)

        return cls(resolvers=resolvers, cache=cache, reporter=reporter)

    def _report(
        self,
        kind: EventKind,
        descriptor: PackageDescriptor,
        message: str = "",
        **details,
    ) -> None:
        self.reporter.report(
            ResolutionEvent(
                kind=kind,
                source=ENGINE_SOURCE,
                package_id=descriptor.id,
                version=descriptor.version,
                message=message,
                details=details,
            )
        )

    async def resolve(self, descriptor: PackageDescriptor) -> Optional[License]:
        """Resolve the license of a package.

        Args:
            descriptor: Package to resolve.

        Returns:
            License from the cache or the first resolver that knows it, or
            None when the license is unknown.
        """
        cached = self.cache.read(descriptor.id, descriptor.version)
        if cached:
            self._report(EventKind.CACHE_HIT, descriptor, "served from cache", license=cached)
            return License.from_id(cached)

        for resolver in self.resolvers:
            try:
                found = await resolver.resolve(descriptor)
            except Exception as e:
                self._report(
                    EventKind.PROVIDER_ERROR,
                    descriptor,
                    "resolver raised",
                    resolver=resolver.display_name,
                    error=repr(e),
                )
                continue

            if found is not None:
                self._report(
                    EventKind.RESOLVED,
                    descriptor,
                    "license resolved",
                    resolver=resolver.display_name,
                    license=found.id,
                )
                self.cache.write(descriptor.id, descriptor.version, found.id)
                self._report(EventKind.CACHE_WRITE, descriptor, license=found.id)
                return found

        self._report(EventKind.UNRESOLVED, descriptor, "license unknown")
        return None

    async def resolve_batch(
        self, descriptors: list[PackageDescriptor]
    ) -> dict[PackageDescriptor, Optional[License]]:
        """Resolve multiple packages concurrently.

        Each package still walks the resolver chain sequentially; only
        different packages run in parallel. Exceptions are contained so a
        single failure does not stop the batch.

        Args:
            descriptors: Packages to resolve.

        Returns:
            Dictionary mapping each descriptor to its License, or None if
            the license is unknown. Every descriptor has an entry.
        """
        logger.info("Starting batch resolution of %d packages", len(descriptors))

        tasks = [self.resolve(descriptor) for descriptor in descriptors]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        result_dict: dict[PackageDescriptor, Optional[License]] = {}
        for descriptor, result in zip(descriptors, results):
            if isinstance(result, Exception):
                logger.error(
                    "Exception resolving %s %s: %s",
                    descriptor.id,
                    descriptor.version,
                    result,
                )
                result_dict[descriptor] = None
            else:
                result_dict[descriptor] = result

        successful = sum(1 for found in result_dict.values() if found is not None)
        logger.info(
            "Batch resolution complete: %d/%d resolved", successful, len(descriptors)
        )

        return result_dict

    async def close(self) -> None:
        """Close any open resources (like HTTP sessions)."""
        for resolver in self.resolvers:
            await resolver.close()

    async def __aenter__(self) -> "WaterfallResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
