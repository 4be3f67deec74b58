"""Resolve exact, wildcard and keyword specifiers to concrete .NET versions."""

from __future__ import annotations

import functools
import logging
import re
from typing import List, Optional

from ..constants import Constants
from .errors import NoAvailableReleasesError, NoMatchingVersionError, NoTierReleasesError
from .models import ComponentType, ReleaseChannelSummary
from .release_cache import ReleaseIndexCache

logger = logging.getLogger(__name__)

_LEADING_INT = re.compile(r"^\d+")


def _segment_value(segment: str) -> int:
    # Only the leading integer counts; "100-preview" compares as 100.
    m = _LEADING_INT.match(segment)
    return int(m.group(0)) if m else 0


def compare_versions(a: str, b: str) -> int:
    """Compare dot-separated versions numerically, segment by segment.

    Shorter versions are padded with zeros, so ``1.0`` equals ``1.0.0``.
    Prerelease suffixes get no special precedence: ``8.0.100-rc.1`` and
    ``8.0.100`` compare equal on their first three segments.

    Returns:
        Negative, zero or positive like ``a - b``.
    """
    a_parts = [_segment_value(p) for p in a.split(".")]
    b_parts = [_segment_value(p) for p in b.split(".")]
    for i in range(max(len(a_parts), len(b_parts))):
        a_part = a_parts[i] if i < len(a_parts) else 0
        b_part = b_parts[i] if i < len(b_parts) else 0
        if a_part != b_part:
            return a_part - b_part
    return 0


def is_exact(specifier: str) -> bool:
    """True when ``specifier`` needs no index lookup."""
    lowered = specifier.lower()
    return Constants.WILDCARD_CHAR not in lowered and lowered not in Constants.VERSION_KEYWORDS


def normalize_version_pattern(pattern: str) -> str:
    """Pad a wildcard pattern to three segments: ``10.x`` -> ``10.x.x``."""
    parts = pattern.split(".")
    while len(parts) < Constants.PATTERN_SEGMENTS:
        parts.append(Constants.WILDCARD_CHAR)
    return ".".join(parts)


def pattern_to_regex(pattern: str) -> "re.Pattern[str]":
    """Compile a normalized wildcard pattern; each ``x`` matches one numeric segment."""
    body = re.escape(normalize_version_pattern(pattern)).replace(Constants.WILDCARD_CHAR, r"\d+")
    return re.compile(f"^{body}$")


class VersionResolver:
    """Resolves one specifier at a time against a loaded releases index."""

    def __init__(self, index: ReleaseIndexCache):
        self._index = index

    def resolve_version(
        self,
        specifier: str,
        component_type: ComponentType,
        allow_preview: Optional[bool] = None,
    ) -> str:
        """Resolve ``specifier`` to a concrete version.

        Exact versions are returned unchanged without touching the index.
        ``latest``, ``lts`` and ``sts`` pick the newest eligible channel;
        wildcard patterns such as ``8.x`` or ``8.0.x`` pick the highest
        matching channel candidate.

        Args:
            specifier: Exact version, wildcard pattern or keyword.
            component_type: Which candidate field to read from each channel.
            allow_preview: Whether preview channels are eligible for keywords.
                None falls back to the flag recorded when the index was loaded.

        Raises:
            CacheNotInitializedError: non-exact specifier before index load.
            NoAvailableReleasesError: ``latest`` with no eligible channel.
            NoTierReleasesError: ``lts``/``sts`` with no eligible channel.
            NoMatchingVersionError: wildcard with no matching candidate.
        """
        lowered = specifier.lower()
        if is_exact(specifier):
            return specifier

        releases = self._index.releases
        preview = self._index.allow_preview if allow_preview is None else allow_preview

        if lowered == "latest":
            resolved = self._resolve_latest(releases, component_type, preview)
            logger.info("Resolved LATEST (%s) -> %s", component_type.label, resolved)
            return resolved

        if lowered in ("lts", "sts"):
            resolved = self._resolve_support_tier(releases, lowered, component_type, preview)
            logger.info("Resolved %s (%s) -> %s", lowered.upper(), component_type.label, resolved)
            return resolved

        resolved = self._resolve_pattern(releases, specifier, component_type)
        logger.debug("Resolved %s -> %s", specifier, resolved)
        return resolved

    @staticmethod
    def _eligible(releases: List[ReleaseChannelSummary], allow_preview: bool) -> List[ReleaseChannelSummary]:
        if allow_preview:
            return list(releases)
        return [r for r in releases if not r.is_preview]

    def _resolve_latest(
        self, releases: List[ReleaseChannelSummary], component_type: ComponentType, allow_preview: bool
    ) -> str:
        logger.debug("Resolving LATEST version for %s", component_type.value)
        eligible = self._eligible(releases, allow_preview)
        if not eligible:
            raise NoAvailableReleasesError("latest")
        # The index is ordered newest channel first.
        return eligible[0].candidate_for(component_type)

    def _resolve_support_tier(
        self,
        releases: List[ReleaseChannelSummary],
        tier: str,
        component_type: ComponentType,
        allow_preview: bool,
    ) -> str:
        logger.debug("Resolving %s version for %s", tier.upper(), component_type.value)
        eligible = [r for r in self._eligible(releases, allow_preview) if r.release_type == tier]
        if not eligible:
            raise NoTierReleasesError(tier)
        return eligible[0].candidate_for(component_type)

    def _resolve_pattern(
        self, releases: List[ReleaseChannelSummary], pattern: str, component_type: ComponentType
    ) -> str:
        regex = pattern_to_regex(pattern.lower())
        candidates = [r.candidate_for(component_type) for r in releases]
        matching = [v for v in candidates if v and regex.match(v)]
        if not matching:
            logger.debug("No versions matched pattern %s. Available: %s", pattern, ", ".join(candidates))
            raise NoMatchingVersionError(pattern)
        matching.sort(key=functools.cmp_to_key(compare_versions), reverse=True)
        return matching[0]
