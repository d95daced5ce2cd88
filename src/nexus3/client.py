"""High-level entry points: resolve coordinates, then download the asset."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, Optional, Union

from common.logging_utils import safe_url, Timer
from .cache import RepositoryInfoCache
from .http import download_to_file, execute_request
from .models import ArtifactCoordinates, Credentials
from .resolver import DownloadUriResolver, Executor

logger = logging.getLogger(__name__)


class NexusClient:
    """Downloads single assets from one Nexus 3 instance."""

    def __init__(
        self,
        nexus_url: str,
        credentials: Optional[Credentials] = None,
        accept_untrusted_certs: bool = False,
        cache: Optional[RepositoryInfoCache] = None,
        timeout: Optional[float] = None,
        executor: Optional[Executor] = None,
    ):
        """Initialize the client.

        Args:
            nexus_url: Base URL, optionally with a sub-path (``https://host/nexus``).
            credentials: Basic-auth credentials; anonymous when omitted.
            accept_untrusted_certs: Skip TLS validation on this client's requests.
            cache: Repository metadata cache; a fresh in-memory one when omitted.
            timeout: Request timeout in seconds.
            executor: Replacement for ``execute_request`` (metadata and discarded downloads).
        """
        self.nexus_url = nexus_url
        self.credentials = credentials or Credentials.anonymous()
        self.accept_untrusted_certs = accept_untrusted_certs
        self.timeout = timeout
        self._executor = executor or execute_request
        self.resolver = DownloadUriResolver(cache=cache, executor=self._executor, timeout=timeout)

    @property
    def cache(self) -> RepositoryInfoCache:
        return self.resolver.cache

    def get_repository_info(self, repository: str) -> Dict[str, Any]:
        return self.resolver.get_repository_info(
            self.nexus_url, repository, self.credentials, self.accept_untrusted_certs
        )

    def resolve_download_url(self, coordinates: ArtifactCoordinates) -> str:
        return self.resolver.resolve(
            self.nexus_url, coordinates, self.credentials, self.accept_untrusted_certs
        )

    def download_asset(
        self,
        coordinates: ArtifactCoordinates,
        destination: Optional[Union[str, Path]] = None,
    ) -> Optional[Path]:
        """Resolve and download one asset.

        Without ``destination`` the body is fetched and discarded; otherwise it
        is streamed to disk and the written path is returned.
        """
        download_url = self.resolve_download_url(coordinates)
        logger.info("Download asset using '%s'.", safe_url(download_url))
        with Timer() as t:
            if destination is None:
                body = self.resolver.execute(download_url, self.credentials, self.accept_untrusted_certs)
                written = None
                logger.debug("Discarded %d characters of response body", len(body))
            else:
                written = download_to_file(
                    download_url,
                    destination,
                    self.credentials,
                    self.accept_untrusted_certs,
                    timeout=self.timeout,
                )
        logger.info("Completed download asset using '%s' in %d ms.", safe_url(download_url), t.duration_ms())
        return written


def download_asset(
    nexus_url: str,
    credentials: Optional[Credentials],
    accept_untrusted_certs: bool,
    repository: str,
    group: Optional[str],
    artifact: str,
    version: Optional[str],
    extension: Optional[str] = None,
    packaging: Optional[str] = None,
    classifier: Optional[str] = None,
    *,
    destination: Optional[Union[str, Path]] = None,
    cache: Optional[RepositoryInfoCache] = None,
    timeout: Optional[float] = None,
) -> Optional[Path]:
    """Resolve and download a single asset from ``nexus_url``.

    Raises:
        ValidationError: Required fields are missing for the repository format.
        TransportError: The metadata or download request failed.
        ParseError: Bad base URL or malformed repository metadata.
    """
    coordinates = ArtifactCoordinates(
        repository=repository,
        group=group,
        artifact=artifact,
        version=version,
        extension=extension,
        packaging=packaging,
        classifier=classifier,
    )
    client = NexusClient(
        nexus_url,
        credentials=credentials,
        accept_untrusted_certs=accept_untrusted_certs,
        cache=cache,
        timeout=timeout,
    )
    return client.download_asset(coordinates, destination)
