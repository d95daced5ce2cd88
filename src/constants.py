"""Constants used in the project."""

from enum import Enum


class ExitCodes(Enum):
    """Exit codes for the program.

    Args:
        Enum (int): Exit codes for the program.
    """

    SUCCESS = 0
    FILE_ERROR = 1
    CONNECTION_ERROR = 2
    VALIDATION_ERROR = 3
    PARSE_ERROR = 4


class RepositoryFormats(Enum):
    """Nexus repository formats with a dedicated query-parameter mapping.

    Args:
        Enum (string): Format tags as reported by the repositories API.
    """

    MAVEN2 = "maven2"
    NPM = "npm"
    NUGET = "nuget"


class Constants:  # pylint: disable=too-few-public-methods
    """General constants used in the project.
    Data holder for configuration constants; not intended to provide behavior.
    """

    REST_API_PREFIX = "/service/rest/v1"
    REPOSITORIES_API_PATH = "/repositories/{repository}"
    DOWNLOAD_API_PATH = "/search/assets/download"
    DEFAULT_FORMAT = RepositoryFormats.MAVEN2.value
    SNAPSHOT_SUFFIX = "-SNAPSHOT"
    SCHEME_USERNAME_PASSWORD = "UsernamePassword"
    SCHEME_NONE = "None"

    LOG_FORMAT = "[%(levelname)s] %(message)s"
    LOG_FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
    ENV_LOG_LEVEL = "NEXUS3_LOG_LEVEL"
    ENV_URL = "NEXUS3_URL"
    ENV_USERNAME = "NEXUS3_USERNAME"
    ENV_PASSWORD = "NEXUS3_PASSWORD"
    ENV_CONFIG = "NEXUS3_CONFIG"

    REQUEST_TIMEOUT = 30  # Timeout in seconds for all HTTP requests
    DOWNLOAD_CHUNK_SIZE = 64 * 1024
    USER_AGENT = "nexus3-download/1.0"

    # Repository metadata cache
    CACHE_ENABLED = True
    CACHE_FILE = None  # in-memory only unless set
    CACHE_TTL_SEC = None  # never expire unless set
