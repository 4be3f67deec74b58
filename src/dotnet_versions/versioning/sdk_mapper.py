"""Look up the Runtime and ASP.NET Core versions bundled with an SDK."""

from __future__ import annotations

import logging

from .errors import SdkInclusionLookupFailure
from .models import SdkIncludedVersions
from .release_cache import ReleaseManifestCache

logger = logging.getLogger(__name__)


class SdkInclusionMapper:
    """Maps concrete SDK versions to the runtimes shipped inside them."""

    def __init__(self, manifests: ReleaseManifestCache):
        self._manifests = manifests

    async def get_sdk_included_versions(self, sdk_version: str) -> SdkIncludedVersions:
        """Return the runtime/aspnetcore versions bundled with ``sdk_version``.

        Never raises: an unknown SDK or a failed manifest lookup yields an
        empty result, so missing inclusion data at worst costs a redundant
        install.
        """
        logger.debug("Getting SDK-included versions for SDK %s", sdk_version)
        try:
            return await self._lookup(sdk_version)
        except SdkInclusionLookupFailure as exc:
            logger.debug("Error fetching SDK-included versions for %s: %s", sdk_version, exc)
            return SdkIncludedVersions()

    async def _lookup(self, sdk_version: str) -> SdkIncludedVersions:
        try:
            manifest = await self._manifests.fetch_release_manifest(sdk_version)
        except Exception as exc:  # pylint: disable=broad-exception-caught
            raise SdkInclusionLookupFailure(str(exc)) from exc

        release = manifest.find_sdk_release(sdk_version)
        if release is None:
            logger.debug("SDK version %s not found in channel %s releases", sdk_version, manifest.channel)
            return SdkIncludedVersions()

        result = SdkIncludedVersions(runtime=release.runtime, aspnetcore=release.aspnetcore_runtime)
        logger.debug(
            "SDK %s includes: runtime=%s, aspnetcore=%s", sdk_version, result.runtime, result.aspnetcore
        )
        return result
