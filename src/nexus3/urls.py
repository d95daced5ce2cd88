"""Nexus REST API URL construction."""
from __future__ import annotations

import urllib.parse

from constants import Constants
from .errors import ParseError


def _join_paths(*segments: str) -> str:
    parts = [part for segment in segments for part in segment.split("/") if part]
    return "/" + "/".join(parts)


def build_api_url(base_url: str, api_path: str) -> str:
    """Join the REST prefix and ``api_path`` onto ``base_url``.

    A Nexus hosted under a sub-path keeps it: ``https://host/nexus`` with
    ``/search/assets`` yields ``https://host/nexus/service/rest/v1/search/assets``.

    Raises:
        ParseError: ``base_url`` is not an absolute http(s) URL.
    """
    try:
        parts = urllib.parse.urlsplit(str(base_url).strip())
        # Accessing port validates it.
        _ = parts.port
    except ValueError as exc:
        raise ParseError(f"Invalid Nexus URL '{base_url}': {exc}") from exc
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise ParseError(f"Invalid Nexus URL '{base_url}': expected an absolute http(s) URL")

    request_path = _join_paths(Constants.REST_API_PREFIX, api_path)
    if parts.path not in ("", "/"):
        request_path = _join_paths(parts.path, request_path)
    return urllib.parse.urlunsplit((parts.scheme, parts.netloc, request_path, parts.query, ""))
