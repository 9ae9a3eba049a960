"""ClearlyDefined license resolver.

ClearlyDefined curates license data for open source packages. Its
definitions API is keyed by package type, provider, namespace, name and
revision; this resolver always queries the NuGet namespace.
"""

from typing import Any, Optional

from license_resolver.events import EventKind
from license_resolver.models import License, PackageDescriptor
from license_resolver.resolvers.base import is_known_license
from license_resolver.resolvers.http import HttpResolver

CLEARLYDEFINED_API_URL = "https://api.clearlydefined.io/definitions/nuget/nuget/-"


class ClearlyDefinedResolver(HttpResolver):
    """Resolver that reads the declared license from ClearlyDefined.

    The declared value is used verbatim as both license id and name.
    """

    @property
    def name(self) -> str:
        return "ClearlyDefined"

    @property
    def display_name(self) -> str:
        return "Clearly Defined (https://clearlydefined.io)"

    @property
    def priority(self) -> int:
        return 5

    async def resolve(self, descriptor: PackageDescriptor) -> Optional[License]:
        """Resolve license from the ClearlyDefined definition of a package.

        Args:
            descriptor: Package to resolve.

        Returns:
            License from licensed.declared, or None.
        """
        self._report(EventKind.LOOKUP, descriptor, "retrieving license")

        url = f"{CLEARLYDEFINED_API_URL}/{descriptor.id}/{descriptor.version}"
        data = await self._get_json(url, descriptor)
        if data is None:
            return None

        return self._parse_license(data, descriptor)

    def _parse_license(
        self, data: Any, descriptor: PackageDescriptor
    ) -> Optional[License]:
        licensed = data.get("licensed") if isinstance(data, dict) else None
        declared = licensed.get("declared") if isinstance(licensed, dict) else None

        if not is_known_license(declared):
            self._report(
                EventKind.NOT_FOUND,
                descriptor,
                "no declared license",
                declared=declared,
            )
            return None

        self._report(EventKind.RESOLVED, descriptor, "license found", license=declared)
        return License.from_id(declared)
