"""Interpretation of license URLs that point into a source repository.

Packages often declare their license only as a link to a LICENSE file on
GitHub. This module turns such a link into a :class:`RepositoryReference`
so a provider can ask the GitHub API about the repository's license.

Recognized shapes::

    https://github.com/<owner>/<repo>/blob/<ref>/<path>
    https://github.com/<owner>/<repo>/raw/<ref>/<path>
    https://raw.githubusercontent.com/<owner>/<repo>/<ref>/<path>
    https://raw.github.com/<owner>/<repo>/<ref>/<path>
"""

import re
from typing import Optional
from urllib.parse import unquote, urlparse

from license_resolver.models import DEFAULT_REF, RepositoryHost, RepositoryReference

GITHUB_HOSTS = ("github.com", "www.github.com")
RAW_CONTENT_HOSTS = ("raw.githubusercontent.com", "raw.github.com")

# Path kinds on github.com that are followed by <ref>/<path>
FILE_VIEW_KINDS = ("blob", "raw")

LICENSE_EXTENSIONS = ("md", "txt", "bsd", "mit")

# LICENSE, LICENSE.md, LICENSE-MIT, LICENSE-APACHE-2.0.txt, ...
_LICENSE_FILE_RE = re.compile(
    r"^license"
    r"(?:-[a-z0-9][a-z0-9_-]*(?:\.[0-9]+)*)?"
    r"(?:\.(?:" + "|".join(LICENSE_EXTENSIONS) + r"))?$",
    re.IGNORECASE,
)

# Refs that look like release tags. The GitHub license endpoint cannot be
# trusted to answer for them, so they fall back to the default branch.
_VERSION_TAG_RE = re.compile(
    r"^(?:v|release[-_]?)?\d+(?:\.\d+)*(?:[-+][0-9a-z.-]+)?$",
    re.IGNORECASE,
)


def is_license_file(path: str) -> bool:
    """Return True if the last segment of a path names a license file.

    Matching is case-insensitive: ``LICENSE``, ``License.txt`` and
    ``license.TXT`` all qualify.

    Args:
        path: File path inside a repository, possibly with directories.

    Returns:
        True for ``license``, ``license.<md|txt|bsd|mit>`` and
        ``license-<suffix>`` file names.
    """
    if not path:
        return False
    filename = path.rstrip("/").rsplit("/", 1)[-1]
    return bool(_LICENSE_FILE_RE.match(filename))


def normalize_ref(ref: str) -> str:
    """Return the ref to query, falling back to the default branch.

    Empty refs and refs that look like version tags are not used as-is.
    """
    ref = ref.strip()
    if not ref or _VERSION_TAG_RE.match(ref):
        return DEFAULT_REF
    return ref


def parse_license_url(url: Optional[str]) -> Optional[RepositoryReference]:
    """Parse a license URL into repository coordinates.

    Args:
        url: License URL declared by a package.

    Returns:
        RepositoryReference if the URL points at a license file in a GitHub
        repository, None otherwise.
    """
    if not url or not url.strip():
        return None

    parsed = urlparse(url.strip())
    if parsed.scheme.lower() not in ("http", "https"):
        return None

    netloc = (parsed.hostname or "").lower()
    parts = [unquote(part) for part in parsed.path.strip("/").split("/")]

    if netloc in GITHUB_HOSTS:
        host = RepositoryHost.GITHUB
        # owner / repo / blob|raw / ref / path...
        if len(parts) < 5 or parts[2].lower() not in FILE_VIEW_KINDS:
            return None
        owner, repo, ref = parts[0], parts[1], parts[3]
        file_path = "/".join(parts[4:])
    elif netloc in RAW_CONTENT_HOSTS:
        host = RepositoryHost.RAW_CONTENT
        # owner / repo / ref / path...
        if len(parts) < 4:
            return None
        owner, repo, ref = parts[0], parts[1], parts[2]
        file_path = "/".join(parts[3:])
    else:
        return None

    if repo.endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        return None

    if not is_license_file(file_path):
        return None

    return RepositoryReference(
        host=host,
        owner=owner,
        repo=repo,
        ref=normalize_ref(ref),
        path=file_path,
    )
