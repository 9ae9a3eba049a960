"""License resolvers for fetching license data from various sources.

This module provides resolvers for GitHub, ClearlyDefined and Libraries.io,
and the waterfall engine that chains them.
"""

from license_resolver.resolvers.base import BaseResolver, WaterfallResolverBase
from license_resolver.resolvers.clearlydefined import ClearlyDefinedResolver
from license_resolver.resolvers.github import GitHubResolver
from license_resolver.resolvers.http import HttpResolver
from license_resolver.resolvers.librariesio import LibrariesIOResolver
from license_resolver.resolvers.waterfall import WaterfallResolver

__all__ = [
    "BaseResolver",
    "WaterfallResolverBase",
    "ClearlyDefinedResolver",
    "GitHubResolver",
    "HttpResolver",
    "LibrariesIOResolver",
    "WaterfallResolver",
]
