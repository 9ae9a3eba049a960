from typing import Any, Optional

import aiohttp

from license_resolver.events import EventKind, EventReporter
from license_resolver.models import PackageDescriptor
from license_resolver.resolvers.base import BaseResolver

DEFAULT_TIMEOUT = 30.0


class HttpResolver(BaseResolver):
    """Base class for resolvers that make HTTP requests.

    Manages a shared aiohttp.ClientSession for connection pooling and reuse.
    A session passed in by the caller is used as-is and left open on close().
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout: float = DEFAULT_TIMEOUT,
        reporter: Optional[EventReporter] = None,
    ) -> None:
        """Initialize the HttpResolver.

        Args:
            session: Optional externally owned aiohttp session.
            timeout: Total timeout in seconds for sessions created here.
            reporter: Receiver for resolution events.
        """
        super().__init__(reporter=reporter)
        self._session = session
        self._owns_session = session is None
        self.timeout = timeout

    async def _get_session(self) -> aiohttp.ClientSession:
        """Get or create the aiohttp session.

        Returns:
            The shared aiohttp ClientSession.
        """
        if self._session is None or self._session.closed:
            self._session = self._create_session()
            self._owns_session = True
        return self._session

    def _create_session(self) -> aiohttp.ClientSession:
        """Create a new aiohttp.ClientSession.

        Subclasses can override this to provide custom session configuration.

        Returns:
            A new aiohttp.ClientSession instance.
        """
        return aiohttp.ClientSession(
            timeout=aiohttp.ClientTimeout(total=self.timeout)
        )

    async def _get_json(
        self,
        url: str,
        descriptor: PackageDescriptor,
        params: Optional[dict[str, str]] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> Optional[Any]:
        """Issue a GET request and decode its JSON body.

        Every failure is reported and turned into None: 404 as NOT_FOUND,
        any other status, network errors and undecodable bodies as
        PROVIDER_ERROR.

        Args:
            url: Request URL without query string.
            descriptor: Package being resolved, used for reporting.
            params: Query parameters.
            headers: Extra request headers.

        Returns:
            Decoded JSON payload, or None.
        """
        request_headers = {"Accept": "application/json"}
        if headers:
            request_headers.update(headers)

        try:
            session = await self._get_session()
            async with session.get(
                url, params=params, headers=request_headers
            ) as response:
                if response.status == 404:
                    self._report(
                        EventKind.NOT_FOUND,
                        descriptor,
                        "package not found",
                        url=url,
                    )
                    return None

                if response.status != 200:
                    self._report(
                        EventKind.PROVIDER_ERROR,
                        descriptor,
                        "unexpected response",
                        url=url,
                        status=response.status,
                        reason=response.reason,
                    )
                    return None

                try:
                    return await response.json(content_type=None)
                except ValueError as e:
                    self._report(
                        EventKind.PROVIDER_ERROR,
                        descriptor,
                        "malformed JSON response",
                        url=url,
                        error=str(e),
                    )
                    return None

        except aiohttp.ClientError as e:
            self._report(
                EventKind.PROVIDER_ERROR,
                descriptor,
                "network error",
                url=url,
                error=str(e),
            )
            return None
        except TimeoutError as e:
            self._report(
                EventKind.PROVIDER_ERROR,
                descriptor,
                "request timed out",
                url=url,
                error=str(e),
            )
            return None

    async def close(self) -> None:
        """Close the aiohttp session.

        Should be called when done using the resolver to release resources.
        """
        if (
            self._owns_session
            and self._session is not None
            and not self._session.closed
        ):
            await self._session.close()
        if self._owns_session:
            self._session = None

    async def __aenter__(self) -> "HttpResolver":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
