"""Render install plans for humans and machines."""

import json
from typing import List

from .models import ComponentType, VersionSet


def format_version_plan(version_set: VersionSet) -> str:
    """One-line summary, e.g. ``SDK 8.0.100 | Runtime 6.0.21``.

    Component groups with no versions are omitted.
    """
    parts: List[str] = []
    for component_type in ComponentType:
        versions = getattr(version_set, component_type.value)
        if versions:
            parts.append(f"{component_type.label} {', '.join(versions)}")
    return " | ".join(parts)


def version_plan_json(version_set: VersionSet, indent: int = 2) -> str:
    return json.dumps(version_set.to_dict(), indent=indent)
