"""Argument parsing functionality for nexus3-download."""

import argparse


def build_parser():
    """Builds the argument parser."""
    parser = argparse.ArgumentParser(
        prog="nexus3-download",
        description=(
            "Resolve and download a single asset from a Nexus Repository Manager 3 instance"
        ),
        add_help=True,
    )

    server = parser.add_argument_group("server")
    server.add_argument("--url",
                        dest="NEXUS_URL",
                        help="Nexus base URL, e.g. https://nexus.example.com/nexus (env: NEXUS3_URL)",
                        action="store", type=str)
    server.add_argument("--username",
                        dest="USERNAME",
                        help="Username for basic auth (env: NEXUS3_USERNAME)",
                        action="store", type=str)
    server.add_argument("--password",
                        dest="PASSWORD",
                        help="Password for basic auth (env: NEXUS3_PASSWORD)",
                        action="store", type=str)
    server.add_argument("-k", "--insecure",
                        dest="ACCEPT_UNTRUSTED_CERTS",
                        help="Accept untrusted TLS certificates for these requests.",
                        action="store_true",
                        default=None)

    coords = parser.add_argument_group("artifact")
    coords.add_argument("-r", "--repository",
                        dest="REPOSITORY",
                        help="Repository name",
                        action="store", type=str,
                        required=True)
    coords.add_argument("-g", "--group",
                        dest="GROUP",
                        help="Group (maven groupId, npm scope)",
                        action="store", type=str)
    coords.add_argument("-a", "--artifact",
                        dest="ARTIFACT",
                        help="Artifact name (maven artifactId, npm name, nuget id)",
                        action="store", type=str,
                        required=True)
    coords.add_argument("-v", "--version",
                        dest="VERSION",
                        help="Version; a -SNAPSHOT version resolves the latest snapshot build",
                        action="store", type=str)
    coords.add_argument("-e", "--extension",
                        dest="EXTENSION",
                        help="Asset extension (maven only)",
                        action="store", type=str)
    coords.add_argument("-p", "--packaging",
                        dest="PACKAGING",
                        help="Packaging (accepted for compatibility, not sent)",
                        action="store", type=str)
    coords.add_argument("-c", "--classifier",
                        dest="CLASSIFIER",
                        help="Classifier (maven only)",
                        action="store", type=str)

    parser.add_argument("-o", "--output",
                        dest="OUTPUT",
                        help="Destination file or directory (default: current directory)",
                        action="store", type=str,
                        default=".")
    parser.add_argument("--print-url",
                        dest="PRINT_URL",
                        help="Only resolve and print the download URL.",
                        action="store_true")
    parser.add_argument("--timeout",
                        dest="TIMEOUT",
                        help="HTTP request timeout in seconds",
                        action="store", type=float)

    cache = parser.add_argument_group("cache")
    cache.add_argument("--cache-file",
                       dest="CACHE_FILE",
                       help="Persist repository metadata in this JSON file between runs",
                       action="store", type=str)
    cache.add_argument("--no-cache",
                       dest="NO_CACHE",
                       help="Do not read or write the persistent metadata cache.",
                       action="store_true")

    parser.add_argument("--config",
                        dest="CONFIG",
                        help="Path to configuration file (YAML) (env: NEXUS3_CONFIG)",
                        action="store", type=str)
    parser.add_argument("--loglevel",
                        dest="LOG_LEVEL",
                        help="Set the logging level",
                        action="store",
                        type=str.upper,
                        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'])
    parser.add_argument("--logfile",
                        dest="LOG_FILE",
                        help="Log output file",
                        action="store", type=str)
    return parser


def parse_args(argv=None):
    """Parses the arguments passed to the program."""
    return build_parser().parse_args(argv)
