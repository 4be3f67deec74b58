"""Wiring of caches, resolver, inclusion mapper and deduplicator."""

from __future__ import annotations

import logging
from typing import Optional

from ..common.http_client import ReleaseMetadataClient
from .deduplicator import VersionDeduplicator
from .models import ComponentType, VersionRequestSet, VersionSet
from .release_cache import ReleaseCache
from .resolver import VersionResolver
from .sdk_mapper import SdkInclusionMapper

logger = logging.getLogger(__name__)


class VersionPlanService:
    """Builds install plans against one ``ReleaseCache``.

    Each service owns its cache, so separate services never share index or
    manifest state.
    """

    def __init__(self, cache: Optional[ReleaseCache] = None, client: Optional[ReleaseMetadataClient] = None):
        self.cache = cache or ReleaseCache(client)
        self.resolver = VersionResolver(self.cache.index)
        self.mapper = SdkInclusionMapper(self.cache.manifests)
        self.deduplicator = VersionDeduplicator(self.resolver, self.mapper)

    async def init(self, allow_preview: bool = False) -> None:
        await self.cache.init(allow_preview)

    def reset(self) -> None:
        self.cache.reset()

    def resolve(self, specifier: str, component_type: ComponentType, allow_preview: Optional[bool] = None) -> str:
        return self.resolver.resolve_version(specifier, component_type, allow_preview)

    async def plan(self, requests: VersionRequestSet) -> VersionSet:
        """Load the index if needed, then deduplicate ``requests``."""
        await self.init(requests.wants_prerelease())
        version_set = await self.deduplicator.deduplicate_versions(requests)
        logger.debug("Version plan: %s", version_set.to_dict())
        return version_set

    async def close(self) -> None:
        await self.cache.client.stop()

    async def __aenter__(self) -> "VersionPlanService":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
