"""License Resolver - license lookup for packages with incomplete metadata.

This package resolves a machine-usable license identifier for a package from
its declared license URL and from third-party license services, caching the
answers between runs.
"""

__version__ = "0.1.0"

from license_resolver.cache import LicenseFileCache, LicenseMemoryCache
from license_resolver.config import ResolverSettings
from license_resolver.models import License, PackageDescriptor, RepositoryReference
from license_resolver.resolvers import WaterfallResolver

__all__ = [
    "__version__",
    "License",
    "LicenseFileCache",
    "LicenseMemoryCache",
    "PackageDescriptor",
    "RepositoryReference",
    "ResolverSettings",
    "WaterfallResolver",
]
