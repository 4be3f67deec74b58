"""Parse version inputs as they arrive from workflow files and the CLI."""

import re
from typing import Iterable, List, Optional

_SEPARATORS = re.compile(r"[\n,]")


def parse_versions(value: Optional[str]) -> List[str]:
    """Split a comma- or newline-separated version input.

    Accepts a single version (``10.x.x``), comma lists (``10.x.x, 9.0.0``)
    and YAML block text; entries starting with ``-`` (YAML list markers left
    on their own line) and blank entries are dropped.
    """
    if not value:
        return []
    versions = []
    for part in _SEPARATORS.split(value):
        item = part.strip()
        if item and not item.startswith("-"):
            versions.append(item)
    return versions


def parse_version_args(values: Optional[Iterable[str]]) -> List[str]:
    """Flatten repeated CLI values, each of which may itself be a list."""
    result: List[str] = []
    for value in values or []:
        result.extend(parse_versions(value))
    return result
