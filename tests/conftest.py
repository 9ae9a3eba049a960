"""Pytest configuration and fixtures."""

from typing import Any

import pytest

from license_resolver.events import RecordingReporter
from license_resolver.models import PackageDescriptor

GITHUB_LICENSE_URL = "https://api.github.com/repos/CycloneDX/cyclonedx-dotnet/license"


@pytest.fixture
def reporter() -> RecordingReporter:
    """Return a reporter that records events for assertions."""
    return RecordingReporter()


@pytest.fixture
def descriptor() -> PackageDescriptor:
    """Return a package declaring a GitHub license URL."""
    return PackageDescriptor(
        id="cyclonedx-dotnet",
        version="1.8",
        license_url="https://github.com/CycloneDX/cyclonedx-dotnet/blob/master/LICENSE",
    )


@pytest.fixture
def sample_github_license_response() -> dict[str, Any]:
    """Return a GitHub repository license API response."""
    return {
        "name": "LICENSE",
        "path": "LICENSE",
        "html_url": "https://github.com/CycloneDX/cyclonedx-dotnet/blob/master/LICENSE",
        "license": {
            "key": "apache-2.0",
            "name": "Apache License 2.0",
            "spdx_id": "Apache-2.0",
        },
    }


@pytest.fixture
def sample_clearlydefined_response() -> dict[str, Any]:
    """Return a ClearlyDefined definition with a declared license."""
    return {
        "described": {"releaseDate": "2021-03-17"},
        "licensed": {
            "declared": "MIT",
            "toolScore": {"total": 60},
            "facets": {"core": {"files": 12}},
        },
        "coordinates": {
            "type": "nuget",
            "provider": "nuget",
            "name": "Newtonsoft.Json",
            "revision": "13.0.1",
        },
    }


@pytest.fixture
def sample_librariesio_response() -> dict[str, Any]:
    """Return a Libraries.io package response."""
    return {
        "name": "Newtonsoft.Json",
        "platform": "NuGet",
        "licenses": "MIT",
        "normalized_licenses": ["MIT"],
        "repository_license": "MIT",
        "versions": [
            {"number": "12.0.3", "published_at": "2019-11-09T01:27:59.000Z"},
            {"number": "13.0.1", "published_at": "2021-03-22T21:35:54.000Z"},
        ],
    }
