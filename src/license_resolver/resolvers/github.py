"""GitHub license resolver.

Turns a declared license URL that points into a GitHub repository into a
call to GitHub's repository license API, which reports the SPDX identifier
GitHub detected for that repository.
"""

from typing import Any, Optional

import aiohttp

from license_resolver.events import EventKind, EventReporter
from license_resolver.exceptions import ConfigurationError
from license_resolver.models import License, PackageDescriptor
from license_resolver.resolvers.base import is_known_license
from license_resolver.resolvers.http import DEFAULT_TIMEOUT, HttpResolver
from license_resolver.urls import parse_license_url

GITHUB_API_URL = "https://api.github.com"


class GitHubResolver(HttpResolver):
    """Resolver that fetches license information from GitHub's API.

    Requires the package to declare a license URL on github.com or one of
    GitHub's raw-content hosts. Supports basic authentication (username and
    password or personal access token) for higher rate limits.

    Attributes:
        username: Optional GitHub user name for basic authentication.
        password: Optional password or token paired with username.
    """

    def __init__(
        self,
        username: Optional[str] = None,
        password: Optional[str] = None,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        reporter: Optional[EventReporter] = None,
    ) -> None:
        """Initialize GitHubResolver.

        Args:
            username: Optional GitHub user name. Credentials are only sent
                when both username and password are given.
            password: Optional password or personal access token.
            session: Optional externally owned aiohttp session.
            timeout: Total timeout in seconds for sessions created here.
            reporter: Receiver for resolution events.

        Raises:
            ConfigurationError: If username contains a colon.
        """
        super().__init__(session=session, timeout=timeout, reporter=reporter)
        self.username = username
        self.password = password

        self._authorization: Optional[str] = None
        if username and password:
            try:
                self._authorization = aiohttp.BasicAuth(username, password).encode()
            except ValueError as e:
                raise ConfigurationError(f"Invalid GitHub credentials: {e}") from e

    @property
    def name(self) -> str:
        """Return the resolver name.

        Returns:
            "GitHub"
        """
        return "GitHub"

    @property
    def display_name(self) -> str:
        return f"GitHub ({GITHUB_API_URL})"

    @property
    def priority(self) -> int:
        """Return resolver priority.

        Returns:
            1 (tried before the aggregator services)
        """
        return 1

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._authorization:
            headers["Authorization"] = self._authorization
        return headers

    async def resolve(self, descriptor: PackageDescriptor) -> Optional[License]:
        """Resolve license from the repository behind the license URL.

        Args:
            descriptor: Package to resolve. Must carry a license_url.

        Returns:
            License reported by GitHub, or None if the URL is missing or not
            a GitHub license file URL, or the lookup failed.
        """
        if not descriptor.license_url:
            self._report(EventKind.CONFIGURATION, descriptor, "no license URL")
            return None

        reference = parse_license_url(descriptor.license_url)
        if reference is None:
            self._report(
                EventKind.NOT_FOUND,
                descriptor,
                "not a recognized repository URL",
                url=descriptor.license_url,
            )
            return None

        self._report(
            EventKind.LOOKUP,
            descriptor,
            "retrieving license",
            repository=reference.repository_id,
            ref=reference.ref,
        )

        url = f"{GITHUB_API_URL}/repos/{reference.owner}/{reference.repo}/license"
        data = await self._get_json(
            url, descriptor, params={"ref": reference.ref}, headers=self._headers()
        )
        if data is None:
            return None

        return self._parse_license(data, descriptor)

    def _parse_license(
        self, data: Any, descriptor: PackageDescriptor
    ) -> Optional[License]:
        """Extract the License from a GitHub license API response.

        Args:
            data: Decoded response body.
            descriptor: Package being resolved, used for reporting.

        Returns:
            License built from license.spdx_id and license.name, or None.
        """
        license_info = data.get("license") if isinstance(data, dict) else None
        if not isinstance(license_info, dict):
            self._report(
                EventKind.PROVIDER_ERROR, descriptor, "response has no license object"
            )
            return None

        spdx_id = license_info.get("spdx_id")
        if not is_known_license(spdx_id):
            # GitHub answers NOASSERTION when it cannot classify the file
            self._report(
                EventKind.NOT_FOUND,
                descriptor,
                "license not identified",
                spdx_id=spdx_id,
            )
            return None

        name = license_info.get("name")
        if not isinstance(name, str) or not name.strip():
            name = spdx_id

        self._report(EventKind.RESOLVED, descriptor, "license found", license=spdx_id)
        return License(id=spdx_id, name=name)
