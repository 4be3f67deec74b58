"""CLI entry point: resolve requested .NET versions and print the install plan."""

from __future__ import annotations

import asyncio
import logging
import sys
from typing import Any, List, Optional

from .args import parse_args
from .common.http_client import ReleaseMetadataClient
from .common.logging_utils import add_file_handler, configure_logging
from .config import ResolverConfig
from .constants import ExitCodes
from .versioning.errors import ManifestFetchError, VersionResolutionError
from .versioning.models import VersionRequestSet, VersionSet
from .versioning.output import format_version_plan, version_plan_json
from .versioning.parser import parse_version_args
from .versioning.service import VersionPlanService

logger = logging.getLogger(__name__)


def _setup_logging(config: ResolverConfig, args: Any) -> None:
    """Configure logging from the resolved config and ``--logfile``."""
    configure_logging(config.log_level)

    log_file = getattr(args, "LOG_FILE", None)
    if log_file:
        add_file_handler(log_file)
        logger.info("Logging to file: %s", log_file)


def build_requests(args: Any, allow_prerelease: bool) -> VersionRequestSet:
    """Translate CLI values into a request set."""
    return VersionRequestSet.from_specifiers(
        sdk=parse_version_args(getattr(args, "SDK", None)),
        runtime=parse_version_args(getattr(args, "RUNTIME", None)),
        aspnetcore=parse_version_args(getattr(args, "ASPNETCORE", None)),
        allow_prerelease=allow_prerelease,
    )


async def resolve_plan(requests: VersionRequestSet, config: ResolverConfig) -> VersionSet:
    """Run one resolution against a fresh client and cache."""
    client = ReleaseMetadataClient(base_url=config.metadata_base_url, timeout=config.timeout)
    async with VersionPlanService(client=client) as service:
        return await service.plan(requests)


def _emit(text: str, output: Optional[str]) -> None:
    if output:
        with open(output, "w", encoding="utf-8") as f:
            f.write(text + "\n")
        logger.info("Plan written to %s", output)
    else:
        print(text)


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the ``dotnet-versions`` command.

    Returns:
        int: Exit code
    """
    args = parse_args(argv)
    try:
        config = ResolverConfig.from_args(args)
    except ValueError as exc:
        configure_logging()
        logger.error("%s", exc)
        return ExitCodes.INPUT_ERROR.value
    _setup_logging(config, args)

    requests = build_requests(args, config.allow_prerelease)
    if requests.is_empty():
        logger.error("At least one of --sdk, --runtime or --aspnetcore must be specified")
        return ExitCodes.INPUT_ERROR.value

    try:
        version_set = asyncio.run(resolve_plan(requests, config))
    except ManifestFetchError as exc:
        logger.error("Failed to load .NET release metadata: %s", exc)
        return ExitCodes.CONNECTION_ERROR.value
    except VersionResolutionError as exc:
        logger.error("Failed to resolve versions: %s", exc)
        return ExitCodes.RESOLUTION_ERROR.value

    logger.debug("Install plan: %s", format_version_plan(version_set) or "(nothing to install)")
    if args.OUTPUT_FORMAT == "json":
        _emit(version_plan_json(version_set), getattr(args, "OUTPUT", None))
    else:
        _emit(format_version_plan(version_set), getattr(args, "OUTPUT", None))
    return ExitCodes.SUCCESS.value


def run() -> None:
    """Console-script wrapper."""
    sys.exit(main())


if __name__ == "__main__":
    run()
