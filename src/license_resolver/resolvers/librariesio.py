"""Libraries.io license resolver.

Libraries.io tracks packages across registries. Its package endpoint is not
version scoped: it returns the package with a list of known versions, so a
license is only trusted when the requested version is among them.

The API allows roughly one request per second per key. Requests from one
resolver are serialized and spaced at least a fixed delay apart, including
when packages are resolved concurrently.
"""

import asyncio
from typing import Any, Optional

import aiohttp

from license_resolver.events import EventKind, EventReporter
from license_resolver.exceptions import ConfigurationError
from license_resolver.models import License, PackageDescriptor
from license_resolver.resolvers.base import is_known_license
from license_resolver.resolvers.http import DEFAULT_TIMEOUT, HttpResolver

LIBRARIES_IO_API_URL = "https://libraries.io/api/nuget"

# Minimum seconds between two requests
DEFAULT_REQUEST_DELAY = 1.01


class LibrariesIOResolver(HttpResolver):
    """Resolver that fetches license information from Libraries.io.

    License preference: the package "licenses" field, then the
    "repository_license" field. Placeholder values are skipped.

    Attributes:
        api_key: Libraries.io API key.
        delay: Minimum seconds between the start of two requests.
    """

    def __init__(
        self,
        api_key: str,
        delay: float = DEFAULT_REQUEST_DELAY,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        reporter: Optional[EventReporter] = None,
    ) -> None:
        """Initialize LibrariesIOResolver.

        Args:
            api_key: Libraries.io API key.
            delay: Minimum seconds between the start of two requests.
            session: Optional externally owned aiohttp session.
            timeout: Total timeout in seconds for sessions created here.
            reporter: Receiver for resolution events.

        Raises:
            ConfigurationError: If api_key is empty or delay is negative.
        """
        if not api_key or not api_key.strip():
            raise ConfigurationError("Libraries.io resolver requires an API key")
        if delay < 0:
            raise ConfigurationError("Libraries.io request delay cannot be negative")

        super().__init__(session=session, timeout=timeout, reporter=reporter)
        self.api_key = api_key.strip()
        self.delay = delay

        self._request_lock = asyncio.Lock()
        self._last_request: Optional[float] = None

    @property
    def name(self) -> str:
        return "Libraries.io"

    @property
    def display_name(self) -> str:
        return f"Libraries.io ({LIBRARIES_IO_API_URL})"

    @property
    def priority(self) -> int:
        return 4

    async def _wait_for_slot(self) -> None:
        """Sleep until the delay has passed since the previous request.

        The first request also waits the full delay. Callers must hold
        the request lock.
        """
        loop = asyncio.get_running_loop()
        wait = self.delay
        if self._last_request is not None:
            wait = self._last_request + self.delay - loop.time()
        if wait > 0:
            await asyncio.sleep(wait)
        self._last_request = loop.time()

    async def resolve(self, descriptor: PackageDescriptor) -> Optional[License]:
        """Resolve license from Libraries.io.

        Args:
            descriptor: Package to resolve.

        Returns:
            License if Libraries.io lists the requested version and knows
            a license for the package, None otherwise.
        """
        self._report(EventKind.LOOKUP, descriptor, "retrieving license")

        url = f"{LIBRARIES_IO_API_URL}/{descriptor.id}"
        async with self._request_lock:
            await self._wait_for_slot()
            data = await self._get_json(
                url, descriptor, params={"api_key": self.api_key}
            )
        if data is None:
            return None

        return self._parse_license(data, descriptor)

    def _parse_license(
        self, data: Any, descriptor: PackageDescriptor
    ) -> Optional[License]:
        """Extract the License from a Libraries.io package response.

        Args:
            data: Decoded response body.
            descriptor: Package being resolved.

        Returns:
            License or None. Bodies of the wrong shape are reported and
            answered with None.
        """
        if not isinstance(data, dict) or not isinstance(data.get("versions"), list):
            self._report(
                EventKind.PROVIDER_ERROR, descriptor, "malformed package response"
            )
            return None

        numbers = {
            version["number"]
            for version in data["versions"]
            if isinstance(version, dict) and isinstance(version.get("number"), str)
        }
        if descriptor.version not in numbers:
            self._report(
                EventKind.NOT_FOUND, descriptor, "version not listed by Libraries.io"
            )
            return None

        for field in ("licenses", "repository_license"):
            value = data.get(field)
            if is_known_license(value):
                self._report(
                    EventKind.RESOLVED,
                    descriptor,
                    "license found",
                    license=value,
                    field=field,
                )
                return License.from_id(value)

        self._report(EventKind.NOT_FOUND, descriptor, "no license listed")
        return None
