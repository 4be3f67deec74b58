"""Data models for release metadata and version resolution."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence

from ..constants import Constants


class ComponentType(Enum):
    """Installable .NET component kinds."""
    SDK = "sdk"
    RUNTIME = "runtime"
    ASPNETCORE = "aspnetcore"

    @property
    def label(self) -> str:
        """Display name used in log messages and plan summaries."""
        return _LABELS[self]


_LABELS = {
    ComponentType.SDK: "SDK",
    ComponentType.RUNTIME: "Runtime",
    ComponentType.ASPNETCORE: "ASP.NET Core",
}


@dataclass(frozen=True)
class ReleaseChannelSummary:
    """One entry of the top-level releases index."""
    channel_version: str
    latest_sdk: str
    latest_release: str
    release_type: str  # "lts" | "sts"
    support_phase: str

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ReleaseChannelSummary":
        """Build a summary from the hyphenated upstream JSON keys."""
        return cls(
            channel_version=str(data.get("channel-version", "")),
            latest_sdk=str(data.get("latest-sdk", "")),
            latest_release=str(data.get("latest-release", "")),
            release_type=str(data.get("release-type", "")).lower(),
            support_phase=str(data.get("support-phase", "")).lower(),
        )

    @property
    def is_preview(self) -> bool:
        return self.support_phase == Constants.SUPPORT_PHASE_PREVIEW

    def candidate_for(self, component_type: ComponentType) -> str:
        """Concrete version this channel offers for ``component_type``.

        Runtime and ASP.NET Core share ``latest-release``; ASP.NET Core
        versions track the paired runtime build.
        """
        if component_type == ComponentType.SDK:
            return self.latest_sdk
        return self.latest_release


@dataclass
class ChannelRelease:
    """One release entry inside a channel manifest."""
    sdks: List[str] = field(default_factory=list)
    runtime: Optional[str] = None
    aspnetcore_runtime: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ChannelRelease":
        """Build a release entry, tolerating missing or null sections."""
        sdks = [
            str(s["version"])
            for s in (data.get("sdks") or [])
            if isinstance(s, dict) and s.get("version")
        ]
        return cls(
            sdks=sdks,
            runtime=_nested_version(data.get("runtime")),
            aspnetcore_runtime=_nested_version(data.get("aspnetcore-runtime")),
        )


def _nested_version(section: Any) -> Optional[str]:
    if isinstance(section, dict) and section.get("version"):
        return str(section["version"])
    return None


@dataclass
class ChannelManifest:
    """Detailed releases.json document for one ``major.minor`` channel."""
    channel: str
    releases: List[ChannelRelease]

    @classmethod
    def from_dict(cls, channel: str, data: Dict[str, Any]) -> "ChannelManifest":
        return cls(
            channel=channel,
            releases=[ChannelRelease.from_dict(r) for r in data["releases"] if isinstance(r, dict)],
        )

    def find_sdk_release(self, sdk_version: str) -> Optional[ChannelRelease]:
        """Return the release whose SDK list contains exactly ``sdk_version``."""
        for release in self.releases:
            if sdk_version in release.sdks:
                return release
        return None


@dataclass
class VersionRequest:
    """A raw specifier requested for one component type."""
    specifier: str
    component_type: ComponentType
    allow_prerelease: bool = False


@dataclass
class ResolvedVersion:
    """Pairs a requested specifier with its concrete version, for logging."""
    original: str
    resolved: str


@dataclass
class SdkIncludedVersions:
    """Runtime and ASP.NET Core versions bundled with an SDK."""
    runtime: Optional[str] = None
    aspnetcore: Optional[str] = None


@dataclass
class VersionRequestSet:
    """All requests handed to the deduplicator, grouped by component type."""
    sdk: List[VersionRequest] = field(default_factory=list)
    runtime: List[VersionRequest] = field(default_factory=list)
    aspnetcore: List[VersionRequest] = field(default_factory=list)

    @classmethod
    def from_specifiers(
        cls,
        sdk: Sequence[str] = (),
        runtime: Sequence[str] = (),
        aspnetcore: Sequence[str] = (),
        allow_prerelease: bool = False,
    ) -> "VersionRequestSet":
        """Build requests from plain specifier lists sharing one prerelease flag."""
        return cls(
            sdk=[VersionRequest(v, ComponentType.SDK, allow_prerelease) for v in sdk],
            runtime=[VersionRequest(v, ComponentType.RUNTIME, allow_prerelease) for v in runtime],
            aspnetcore=[VersionRequest(v, ComponentType.ASPNETCORE, allow_prerelease) for v in aspnetcore],
        )

    @classmethod
    def from_dict(cls, data: Dict[str, Dict[str, Any]]) -> "VersionRequestSet":
        """Build from ``{"sdk": {"versions": [...], "allow_prerelease": bool}, ...}``."""
        groups = {}
        for component_type in ComponentType:
            info = data.get(component_type.value) or {}
            allow = bool(info.get("allow_prerelease", False))
            groups[component_type.value] = [
                VersionRequest(v, component_type, allow) for v in info.get("versions", [])
            ]
        return cls(**groups)

    def is_empty(self) -> bool:
        return not (self.sdk or self.runtime or self.aspnetcore)

    def wants_prerelease(self) -> bool:
        """True when any request allows prerelease versions."""
        return any(r.allow_prerelease for r in self.sdk + self.runtime + self.aspnetcore)


@dataclass
class VersionSet:
    """Concrete, deduplicated versions to install per component type."""
    sdk: List[str] = field(default_factory=list)
    runtime: List[str] = field(default_factory=list)
    aspnetcore: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, List[str]]:
        return {
            "sdk": list(self.sdk),
            "runtime": list(self.runtime),
            "aspnetcore": list(self.aspnetcore),
        }

    def is_empty(self) -> bool:
        return not (self.sdk or self.runtime or self.aspnetcore)
