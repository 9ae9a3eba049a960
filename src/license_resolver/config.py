"""Settings for building the default resolution engine.

Credentials and cache location come from the environment, following the
GITHUB_TOKEN convention used by GitHub tooling.
"""

import os
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from license_resolver.cache import DEFAULT_CACHE_DIR
from license_resolver.exceptions import ConfigurationError

DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_LIBRARIES_IO_DELAY = 1.01

ENV_GITHUB_USERNAME = "GITHUB_USERNAME"
ENV_GITHUB_TOKEN = "GITHUB_TOKEN"
ENV_LIBRARIES_IO_API_KEY = "LIBRARIES_IO_API_KEY"
ENV_CACHE_DIR = "LICENSE_RESOLVER_CACHE_DIR"
ENV_TIMEOUT = "LICENSE_RESOLVER_TIMEOUT"


@dataclass(frozen=True)
class ResolverSettings:
    """Configuration for the resolver chain and its cache.

    Attributes:
        github_username: GitHub user name for basic authentication.
        github_token: GitHub password or personal access token.
        libraries_io_api_key: Libraries.io API key. The Libraries.io
            resolver is only enabled when this is set.
        cache_dir: Directory of the durable file cache.
        use_memory_cache: Use a process-lifetime cache instead of files.
        request_timeout: Total timeout in seconds per HTTP request.
        libraries_io_delay: Minimum seconds between Libraries.io requests.
    """

    github_username: Optional[str] = None
    github_token: Optional[str] = None
    libraries_io_api_key: Optional[str] = None
    cache_dir: Path = DEFAULT_CACHE_DIR
    use_memory_cache: bool = False
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    libraries_io_delay: float = DEFAULT_LIBRARIES_IO_DELAY

    def __post_init__(self) -> None:
        if self.request_timeout <= 0:
            raise ConfigurationError(
                f"request_timeout must be positive, got {self.request_timeout}"
            )
        if self.libraries_io_delay < 0:
            raise ConfigurationError(
                f"libraries_io_delay cannot be negative, got {self.libraries_io_delay}"
            )

    @classmethod
    def from_env(
        cls, environ: Optional[Mapping[str, str]] = None
    ) -> "ResolverSettings":
        """Load settings from environment variables.

        Args:
            environ: Mapping to read instead of os.environ.

        Returns:
            ResolverSettings with unset variables left at their defaults.

        Raises:
            ConfigurationError: If LICENSE_RESOLVER_TIMEOUT is not a number.
        """
        env = os.environ if environ is None else environ

        timeout = DEFAULT_REQUEST_TIMEOUT
        raw_timeout = env.get(ENV_TIMEOUT)
        if raw_timeout:
            try:
                timeout = float(raw_timeout)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid {ENV_TIMEOUT} value '{raw_timeout}': expected seconds"
                ) from e

        cache_dir = env.get(ENV_CACHE_DIR)

        return cls(
            github_username=env.get(ENV_GITHUB_USERNAME) or None,
            github_token=env.get(ENV_GITHUB_TOKEN) or None,
            libraries_io_api_key=env.get(ENV_LIBRARIES_IO_API_KEY) or None,
            cache_dir=Path(cache_dir).expanduser() if cache_dir else DEFAULT_CACHE_DIR,
            request_timeout=timeout,
        )
