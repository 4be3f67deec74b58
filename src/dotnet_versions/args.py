"""Argument parsing functionality for dotnet-versions."""

import argparse

from .constants import Constants


def build_parser():
    """Build the argument parser for the ``dotnet-versions`` command."""
    parser = argparse.ArgumentParser(
        prog="dotnet-versions",
        description=(
            "Resolve .NET SDK/Runtime/ASP.NET Core version specifiers into a minimal install plan"
        ),
        add_help=True,
    )

    parser.add_argument("--sdk",
                        dest="SDK",
                        help="SDK versions: exact, wildcard (8.0.x) or latest/lts/sts. Comma-separated; repeatable.",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--runtime",
                        dest="RUNTIME",
                        help="Runtime versions, same syntax as --sdk.",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--aspnetcore",
                        dest="ASPNETCORE",
                        help="ASP.NET Core runtime versions, same syntax as --sdk.",
                        action="append", type=str,
                        default=[])
    parser.add_argument("--allow-prerelease",
                        dest="ALLOW_PRERELEASE",
                        help="Allow preview channels when resolving latest/lts/sts.",
                        action="store_true",
                        default=None)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Path to output file for the plan",
                        action="store",
                        type=str)
    parser.add_argument("-f", "--format",
                        dest="OUTPUT_FORMAT",
                        help="Output format (text or json, default: text)",
                        action="store",
                        type=str.lower,
                        choices=Constants.OUTPUT_FORMATS,
                        default="text")
    parser.add_argument("--metadata-url",
                        dest="METADATA_URL",
                        help="Base URL of the .NET release-metadata tree",
                        action="store",
                        type=str)
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="HTTP request timeout in seconds",
                        action="store",
                        type=int)

    parser.add_argument("-c", "--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML, YML, or JSON)",
                        action="store",
                        type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store",
                        type=str)

    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
