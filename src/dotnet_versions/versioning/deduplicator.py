"""Turn raw version requests into a minimal install plan.

Hierarchy used for redundancy: an SDK bundles an ASP.NET Core runtime,
which in turn covers the plain .NET runtime of the same version.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Iterable, List, Set

from .models import ComponentType, ResolvedVersion, VersionRequest, VersionRequestSet, VersionSet
from .resolver import VersionResolver
from .sdk_mapper import SdkInclusionMapper

logger = logging.getLogger(__name__)


class VersionDeduplicator:
    """Resolves every request and drops installs another request already covers."""

    def __init__(self, resolver: VersionResolver, mapper: SdkInclusionMapper):
        self._resolver = resolver
        self._mapper = mapper

    def _resolve_all(self, requests: Iterable[VersionRequest]) -> List[ResolvedVersion]:
        return [
            ResolvedVersion(
                original=r.specifier,
                resolved=self._resolver.resolve_version(r.specifier, r.component_type, r.allow_prerelease),
            )
            for r in requests
        ]

    async def _sdk_included_runtimes(self, sdk_versions: List[str]) -> Set[str]:
        results = await asyncio.gather(
            *(self._mapper.get_sdk_included_versions(v) for v in sdk_versions)
        )
        included: Set[str] = set()
        for sdk, result in zip(sdk_versions, results):
            if result.runtime:
                included.add(result.runtime)
                logger.debug("SDK %s includes runtime %s", sdk, result.runtime)
        return included

    async def deduplicate_versions(self, requests: VersionRequestSet) -> VersionSet:
        """Resolve ``requests`` and return the concrete, deduplicated plan.

        Resolution errors propagate unchanged and abort the whole call.
        Inclusion lookups never fail; unknown inclusion data only means a
        runtime may be installed redundantly.
        """
        resolved_sdk = self._resolve_all(requests.sdk)
        resolved_runtime = self._resolve_all(requests.runtime)
        resolved_aspnetcore = self._resolve_all(requests.aspnetcore)

        sdk_set = {v.resolved for v in resolved_sdk}
        aspnetcore_set = {v.resolved for v in resolved_aspnetcore}

        sdk_included_runtimes = await self._sdk_included_runtimes(
            _unique([v.resolved for v in resolved_sdk])
        )

        filtered_runtime = []
        for v in resolved_runtime:
            if v.resolved in sdk_included_runtimes:
                logger.info("Skipping redundant Runtime %s (included in SDK)", v.original)
            elif v.resolved in aspnetcore_set:
                logger.info("Skipping redundant Runtime %s (covered by ASP.NET Core)", v.original)
            elif v.resolved in sdk_set:
                logger.info("Skipping redundant Runtime %s (covered by SDK)", v.original)
            else:
                filtered_runtime.append(v)

        # ASP.NET Core is only checked against SDK data, never against the
        # plain runtime requests.
        filtered_aspnetcore = []
        for v in resolved_aspnetcore:
            if v.resolved in sdk_included_runtimes:
                logger.info("Skipping redundant ASP.NET Core %s (included in SDK)", v.original)
            elif v.resolved in sdk_set:
                logger.info("Skipping redundant ASP.NET Core %s (covered by SDK)", v.original)
            else:
                filtered_aspnetcore.append(v)

        return VersionSet(
            sdk=remove_duplicates_within_type(resolved_sdk, ComponentType.SDK),
            runtime=remove_duplicates_within_type(filtered_runtime, ComponentType.RUNTIME),
            aspnetcore=remove_duplicates_within_type(filtered_aspnetcore, ComponentType.ASPNETCORE),
        )


def remove_duplicates_within_type(versions: Iterable[ResolvedVersion], component_type: ComponentType) -> List[str]:
    """Keep the first occurrence of each resolved version, preserving order."""
    seen: Set[str] = set()
    result: List[str] = []
    for v in versions:
        if v.resolved in seen:
            logger.info(
                "Skipping duplicate %s %s (already resolved to %s)", component_type.label, v.original, v.resolved
            )
            continue
        seen.add(v.resolved)
        result.append(v.resolved)
    return result


def _unique(values: Iterable[str]) -> List[str]:
    return list(dict.fromkeys(values))
