"""nexus3-download - fetch one asset from a Nexus Repository Manager 3 instance.

    Returns:
        int: Exit code
"""
import logging
import sys

from constants import ExitCodes
from common.logging_utils import add_file_handler, configure_logging, extra_context, is_debug_enabled
from args import parse_args
from cli_config import load_settings
from nexus3 import (
    ArtifactCoordinates,
    NexusClient,
    ParseError,
    RepositoryInfoCache,
    TransportError,
    ValidationError,
)

logger = logging.getLogger(__name__)


def build_client(settings):
    """Create a client with the cache the settings ask for."""
    cache_file = settings.cache_file if settings.cache_enabled else None
    cache = RepositoryInfoCache(cache_file=cache_file, ttl=settings.cache_ttl)
    return NexusClient(
        settings.nexus_url,
        credentials=settings.credentials,
        accept_untrusted_certs=settings.accept_untrusted_certs,
        cache=cache,
        timeout=settings.timeout,
    )


def coordinates_from_args(args):
    """Build artifact coordinates from parsed CLI arguments."""
    return ArtifactCoordinates(
        repository=args.REPOSITORY,
        group=args.GROUP,
        artifact=args.ARTIFACT,
        version=args.VERSION,
        extension=args.EXTENSION,
        classifier=args.CLASSIFIER,
        packaging=args.PACKAGING,
    )


def run(args):
    """Resolve and download according to ``args``; returns an exit code."""
    try:
        settings = load_settings(args)
    except OSError as e:
        logging.error("Configuration file couldn't be read: %s", e)
        return ExitCodes.FILE_ERROR.value
    except ParseError as e:
        logging.error("%s", e)
        return ExitCodes.PARSE_ERROR.value

    if not settings.nexus_url:
        logging.error("No Nexus URL given; use --url, NEXUS3_URL or the config file.")
        return ExitCodes.PARSE_ERROR.value

    if settings.accept_untrusted_certs:
        logging.warning("TLS certificate validation is disabled for Nexus requests.")

    try:
        client = build_client(settings)
        coordinates = coordinates_from_args(args)
        if args.PRINT_URL:
            print(client.resolve_download_url(coordinates))
            return ExitCodes.SUCCESS.value
        written = client.download_asset(coordinates, args.OUTPUT)
    except ValidationError as e:
        logging.error("Missing required parameters:\n%s", e)
        return ExitCodes.VALIDATION_ERROR.value
    except TransportError as e:
        logging.error("%s", e)
        return ExitCodes.CONNECTION_ERROR.value
    except ParseError as e:
        logging.error("%s", e)
        return ExitCodes.PARSE_ERROR.value
    except OSError as e:
        logging.error("File couldn't be written to disk: %s", e)
        return ExitCodes.FILE_ERROR.value

    logging.info("Asset has been successfully downloaded at: %s", written)
    return ExitCodes.SUCCESS.value


def main(argv=None):
    """Main function of the program."""
    args = parse_args(argv)
    configure_logging(args.LOG_LEVEL)
    if args.LOG_FILE:
        add_file_handler(args.LOG_FILE)

    if is_debug_enabled(logger):
        logger.debug(
            "CLI start",
            extra=extra_context(event="function_entry", component="cli", action="main")
        )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
