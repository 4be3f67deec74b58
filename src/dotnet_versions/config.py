"""Runtime configuration: defaults, optional config file, then CLI overrides."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

import yaml

from .constants import Constants

logger = logging.getLogger(__name__)


@dataclass
class ResolverConfig:
    """Settings for one resolution run."""

    metadata_base_url: str = Constants.RELEASE_METADATA_BASE_URL
    timeout: int = Constants.REQUEST_TIMEOUT
    allow_prerelease: bool = False
    log_level: str = "INFO"

    @classmethod
    def from_mapping(cls, data: Dict[str, Any]) -> "ResolverConfig":
        """Create config from a config-file mapping, ignoring unknown keys."""
        config = cls()
        if data.get("metadata_base_url"):
            config.metadata_base_url = str(data["metadata_base_url"])
        if data.get("timeout") is not None:
            config.timeout = int(data["timeout"])
        if data.get("allow_prerelease") is not None:
            config.allow_prerelease = bool(data["allow_prerelease"])
        if data.get("log_level"):
            config.log_level = str(data["log_level"]).upper()
        return config

    @classmethod
    def from_args(cls, args: Any) -> "ResolverConfig":
        """Create config from CLI arguments, layered over ``--config`` if given.

        Args:
            args: Parsed CLI arguments namespace.

        Returns:
            ResolverConfig instance.
        """
        config = cls.from_mapping(load_config_file(getattr(args, "CONFIG", None)))

        env_level = os.environ.get(Constants.ENV_LOG_LEVEL)
        if env_level:
            config.log_level = env_level.upper()

        if getattr(args, "METADATA_URL", None):
            config.metadata_base_url = args.METADATA_URL
        if getattr(args, "TIMEOUT", None) is not None:
            config.timeout = args.TIMEOUT
        if getattr(args, "ALLOW_PRERELEASE", None) is not None:
            config.allow_prerelease = bool(args.ALLOW_PRERELEASE)
        if getattr(args, "LOG_LEVEL", None):
            config.log_level = str(args.LOG_LEVEL).upper()

        return config


def load_config_file(config_path: Optional[str]) -> Dict[str, Any]:
    """Load settings from a YAML (or JSON) file.

    A top-level ``dotnet_versions`` section is used when present, otherwise
    the whole mapping.

    Raises:
        ValueError: the file cannot be parsed or is not a mapping.
    """
    if not config_path:
        return {}

    if not os.path.isfile(config_path):
        logger.warning("Config file not found: %s", config_path)
        return {}

    with open(config_path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid config file {config_path}: {exc}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid config file {config_path}: expected a mapping")
    section = data.get(Constants.CONFIG_SECTION, data)
    if not isinstance(section, dict):
        raise ValueError(f"Invalid config file {config_path}: '{Constants.CONFIG_SECTION}' must be a mapping")
    return section
