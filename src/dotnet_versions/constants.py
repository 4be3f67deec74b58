"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    RESOLUTION_ERROR = 1
    CONNECTION_ERROR = 2
    INPUT_ERROR = 3


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    RELEASE_METADATA_BASE_URL = "https://builds.dotnet.microsoft.com/dotnet/release-metadata"
    RELEASES_INDEX_FILE = "releases-index.json"
    CHANNEL_RELEASES_FILE = "releases.json"
    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    USER_AGENT = "dotnet-versions/1.0"

    VERSION_KEYWORDS = ("latest", "lts", "sts")
    SUPPORT_PHASE_PREVIEW = "preview"
    WILDCARD_CHAR = "x"
    PATTERN_SEGMENTS = 3

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "DOTNET_VERSIONS_LOG_LEVEL"
    CONFIG_SECTION = "dotnet_versions"
    OUTPUT_FORMATS = ["text", "json"]
