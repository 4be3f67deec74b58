"""Errors raised while resolving and deduplicating .NET versions."""


class VersionResolutionError(RuntimeError):
    """Base class for all fatal resolution errors."""


class ManifestFetchError(VersionResolutionError):
    """Raised when a release index or channel manifest cannot be fetched or parsed."""


class InvalidVersionFormatError(VersionResolutionError, ValueError):
    """Raised when a channel key cannot be derived from a version string."""

    def __init__(self, version: str):
        super().__init__(f"Invalid version format: {version}")
        self.version = version


class CacheNotInitializedError(VersionResolutionError):
    """Raised when resolution is attempted before the release index is loaded."""

    def __init__(self) -> None:
        super().__init__(
            "Release index not initialized. Call load_release_index() before resolve_version()."
        )


class NoEligibleVersionError(VersionResolutionError):
    """A specifier had no eligible candidates after filtering."""

    def __init__(self, specifier: str, message: str):
        super().__init__(message)
        self.specifier = specifier


class NoMatchingVersionError(NoEligibleVersionError):
    """No channel candidate matched a wildcard pattern."""

    def __init__(self, specifier: str):
        super().__init__(specifier, f"No matching version found for pattern: {specifier}")


class NoTierReleasesError(NoEligibleVersionError):
    """No channel of the requested support tier (LTS/STS) is eligible."""

    def __init__(self, specifier: str):
        super().__init__(specifier, f"No {specifier.upper()} releases found")


class NoAvailableReleasesError(NoEligibleVersionError):
    """The index holds no eligible channel for ``latest``."""

    def __init__(self, specifier: str = "latest"):
        super().__init__(specifier, f"No available releases found for '{specifier}'")


class SdkInclusionLookupFailure(VersionResolutionError):
    """Wraps any failure while determining SDK-bundled versions.

    Recovered inside the inclusion mapper and never raised to its callers.
    """
