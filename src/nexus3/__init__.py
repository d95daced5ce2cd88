"""Nexus Repository Manager 3 single-asset downloader.

This package provides format-aware download resolution:
- formats.py: per-format mapping of coordinate fields to search parameters
- cache.py: repository metadata cache keyed by request URL
- urls.py: REST API URL construction under optional sub-paths
- http.py: HTTP(S) requests with basic auth and per-request TLS trust
- resolver.py: coordinates -> download URL
- client.py: resolve-then-download entry points
"""

from .cache import RepositoryInfoCache
from .client import NexusClient, download_asset
from .errors import NexusError, ParseError, TransportError, ValidationError
from .models import ArtifactCoordinates, Credentials
from .resolver import DownloadUriResolver

__all__ = [
    "ArtifactCoordinates",
    "Credentials",
    "DownloadUriResolver",
    "NexusClient",
    "NexusError",
    "ParseError",
    "RepositoryInfoCache",
    "TransportError",
    "ValidationError",
    "download_asset",
]
