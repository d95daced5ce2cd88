"""Resolve artifact coordinates into a Nexus search-download URL.

The repository's package format decides which query parameters the search
API understands, so resolution first looks the repository up (through the
metadata cache) and then maps each coordinate field through the format's
``ParameterMap``.

https://help.sonatype.com/repomanager3/rest-and-integration-api/search-api
"""
from __future__ import annotations

import json
import logging
import re
import urllib.parse
from typing import Any, Callable, Dict, List, Optional, Tuple

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url
from . import formats
from .cache import RepositoryInfoCache
from .errors import ParseError, ValidationError
from .http import execute_request
from .models import ArtifactCoordinates, Credentials
from .urls import build_api_url

logger = logging.getLogger(__name__)

# Executor signature: (url, credentials, accept_untrusted_certs) -> body text
Executor = Callable[..., str]

_BLANK_MARKER = re.compile(r"^\s*-\s*$")


def has_value(value: Optional[str]) -> bool:
    """True when ``value`` is non-empty after trim and not the lone ``-`` marker."""
    if not isinstance(value, str):
        return False
    return bool(value.strip()) and not _BLANK_MARKER.match(value)


def is_snapshot(version: str) -> bool:
    return version.endswith(Constants.SNAPSHOT_SUFFIX)


def _set_param(params: List[Tuple[str, str]], name: str, value: str) -> None:
    """Replace every ``name`` entry with a single one appended last."""
    params[:] = [(k, v) for k, v in params if k != name]
    params.append((name, value))


class DownloadUriResolver:
    """Turns coordinates into the final download URL for one asset.

    The resolver owns no global state: the metadata cache is passed in, so
    separate resolvers (or tests) can share or isolate it as they need.
    """

    def __init__(
        self,
        cache: Optional[RepositoryInfoCache] = None,
        executor: Executor = execute_request,
        timeout: Optional[float] = None,
    ):
        self.cache = cache if cache is not None else RepositoryInfoCache()
        self._executor = executor
        self._timeout = timeout

    def execute(self, url: str, credentials: Optional[Credentials], accept_untrusted_certs: bool) -> str:
        if self._timeout is None:
            return self._executor(url, credentials, accept_untrusted_certs)
        return self._executor(url, credentials, accept_untrusted_certs, timeout=self._timeout)

    def get_repository_info(
        self,
        nexus_url: str,
        repository: str,
        credentials: Optional[Credentials] = None,
        accept_untrusted_certs: bool = False,
    ) -> Dict[str, Any]:
        """Fetch (or reuse) the repositories API document for ``repository``.

        Raises:
            TransportError: The metadata request failed.
            ParseError: Bad base URL, or the body is not a JSON object.
        """
        api_path = Constants.REPOSITORIES_API_PATH.format(
            repository=urllib.parse.quote(repository, safe="")
        )
        info_url = build_api_url(nexus_url, api_path)
        logger.info("Getting repository information from: %s", safe_url(info_url))
        raw = self.cache.get(
            info_url, lambda: self.execute(info_url, credentials, accept_untrusted_certs)
        )
        try:
            info = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise ParseError(f"Malformed repository metadata from {safe_url(info_url)}: {exc}") from exc
        if not isinstance(info, dict):
            raise ParseError(f"Malformed repository metadata from {safe_url(info_url)}: expected a JSON object")
        return info

    def build_download_url(
        self,
        nexus_url: str,
        coordinates: ArtifactCoordinates,
        repository_format: Optional[str] = None,
    ) -> str:
        """Assemble the search-download URL for an already known format.

        Raises:
            ValidationError: Required fields for the format are missing; every
                missing field is listed.
            ParseError: ``nexus_url`` is not a valid absolute URL.
        """
        format_name = repository_format or Constants.DEFAULT_FORMAT
        parameter_map = formats.lookup(format_name)
        base_url = build_api_url(nexus_url, Constants.DOWNLOAD_API_PATH)

        params: List[Tuple[str, str]] = []
        missing: List[str] = []
        for field_name in formats.FIELD_ORDER:
            value = getattr(coordinates, field_name)
            spec = parameter_map.get(field_name)
            if spec is None:
                if has_value(value):
                    logger.info(
                        "Ignoring %s '%s': not supported for %s repositories.",
                        field_name, value, format_name,
                    )
                continue
            if has_value(value):
                params.append((spec.name, value))
            elif spec.default is not None:
                params.append((spec.name, spec.default))
            elif spec.required:
                missing.append(
                    f"{field_name} is required for {format_name} repositories (parameter '{spec.name}')"
                )

        if has_value(coordinates.packaging):
            logger.debug("Packaging '%s' is not used by the search API.", coordinates.packaging)

        version = coordinates.version
        if has_value(version):
            if is_snapshot(version):
                params.append(("maven.baseVersion", version))
                _set_param(params, "sort", "version")
            else:
                params.append(("version", version))

        if missing:
            raise ValidationError(missing)

        parts = urllib.parse.urlsplit(base_url)
        existing = urllib.parse.parse_qsl(parts.query, keep_blank_values=True)
        if any(name == "sort" for name, _ in params):
            existing = [(k, v) for k, v in existing if k != "sort"]
        query = urllib.parse.urlencode(existing + params)
        return urllib.parse.urlunsplit((parts.scheme, parts.netloc, parts.path, query, ""))

    def resolve(
        self,
        nexus_url: str,
        coordinates: ArtifactCoordinates,
        credentials: Optional[Credentials] = None,
        accept_untrusted_certs: bool = False,
    ) -> str:
        """Look up the repository format and build the download URL."""
        if not has_value(coordinates.repository):
            # No repository to look the format up for.
            raise ValidationError(["repository is required (parameter 'repository')"])
        info = self.get_repository_info(
            nexus_url, coordinates.repository, credentials, accept_untrusted_certs
        )
        repository_format = info.get("format") or Constants.DEFAULT_FORMAT
        if is_debug_enabled(logger):
            logger.debug(
                "Resolved repository format",
                extra=extra_context(
                    event="decision",
                    component="resolver",
                    action="select_parameters",
                    repository=coordinates.repository,
                    repository_format=repository_format,
                ),
            )
        return self.build_download_url(nexus_url, coordinates, str(repository_format))
