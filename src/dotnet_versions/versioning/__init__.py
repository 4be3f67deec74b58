"""Version resolution and deduplication for .NET SDK/Runtime installs."""

from .errors import (
    CacheNotInitializedError,
    InvalidVersionFormatError,
    ManifestFetchError,
    NoAvailableReleasesError,
    NoEligibleVersionError,
    NoMatchingVersionError,
    NoTierReleasesError,
    SdkInclusionLookupFailure,
    VersionResolutionError,
)
from .models import ComponentType, VersionRequest, VersionRequestSet, VersionSet
from .release_cache import ReleaseCache
from .resolver import VersionResolver, compare_versions
from .service import VersionPlanService

__all__ = [
    "CacheNotInitializedError",
    "ComponentType",
    "InvalidVersionFormatError",
    "ManifestFetchError",
    "NoAvailableReleasesError",
    "NoEligibleVersionError",
    "NoMatchingVersionError",
    "NoTierReleasesError",
    "ReleaseCache",
    "SdkInclusionLookupFailure",
    "VersionPlanService",
    "VersionRequest",
    "VersionRequestSet",
    "VersionResolutionError",
    "VersionResolver",
    "VersionSet",
    "compare_versions",
]
