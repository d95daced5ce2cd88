"""Shared HTTP helpers for talking to Nexus.

Encapsulates auth, TLS-trust and error handling so the resolver and client
avoid duplicating try/except blocks. Failures are raised as
``TransportError``; nothing is retried.
"""
from __future__ import annotations

import logging
import os
import re
import tempfile
import urllib.parse
from pathlib import Path
from typing import Optional, Union

import requests

from constants import Constants
from common.logging_utils import extra_context, is_debug_enabled, safe_url, Timer
from .errors import TransportError
from .models import Credentials

logger = logging.getLogger(__name__)

_CONTENT_DISPOSITION_FILENAME = re.compile(
    r"filename\*?=(?:UTF-8'')?\"?([^\";]+)\"?", re.IGNORECASE
)


def _send(
    url: str,
    credentials: Optional[Credentials],
    accept_untrusted_certs: bool,
    *,
    timeout: Optional[float],
    stream: bool = False,
) -> requests.Response:
    """Perform a GET and raise TransportError unless the response is 2xx."""
    safe_target = safe_url(url)
    auth = credentials.as_auth() if credentials is not None else None
    # verify=False applies to this request only.
    verify = not (accept_untrusted_certs and url.lower().startswith("https:"))
    effective_timeout = timeout if timeout is not None else Constants.REQUEST_TIMEOUT

    with Timer() as t:
        if is_debug_enabled(logger):
            logger.debug(
                "HTTP request",
                extra=extra_context(
                    event="http_request",
                    component="http",
                    action="GET",
                    target=safe_target,
                    authenticated=auth is not None,
                    verify_tls=verify,
                ),
            )
        try:
            response = requests.get(
                url,
                auth=auth,
                verify=verify,
                timeout=effective_timeout,
                stream=stream,
                headers={"User-Agent": Constants.USER_AGENT},
            )
        except requests.Timeout as exc:
            logger.info("Failed to execute request '%s'.", safe_target)
            raise TransportError(
                f"Request to {safe_target} timed out after {effective_timeout} seconds", url
            ) from exc
        except requests.RequestException as exc:  # includes ConnectionError, SSLError
            logger.info("Failed to execute request '%s'.", safe_target)
            raise TransportError(f"Request to {safe_target} failed: {exc}", url) from exc

    if is_debug_enabled(logger):
        logger.debug(
            "HTTP response",
            extra=extra_context(
                event="http_response",
                component="http",
                action="GET",
                status_code=response.status_code,
                duration_ms=t.duration_ms(),
                target=safe_target,
            ),
        )

    if not 200 <= response.status_code < 300:
        reason = response.reason or ""
        response.close()
        logger.info("Failed to execute request '%s'.", safe_target)
        raise TransportError(
            f"Request to {safe_target} returned HTTP {response.status_code} {reason}".rstrip(),
            url,
            status_code=response.status_code,
        )
    return response


def execute_request(
    url: str,
    credentials: Optional[Credentials] = None,
    accept_untrusted_certs: bool = False,
    *,
    timeout: Optional[float] = None,
) -> str:
    """GET ``url`` and return the response body as text.

    Args:
        url: Absolute http(s) URL.
        credentials: Basic-auth credentials, or None/anonymous.
        accept_untrusted_certs: Skip certificate validation for this request.
        timeout: Seconds; defaults to ``Constants.REQUEST_TIMEOUT``.

    Raises:
        TransportError: Network failure, TLS failure, or non-2xx status.
    """
    response = _send(url, credentials, accept_untrusted_certs, timeout=timeout)
    return response.text


def filename_from_response(response: requests.Response) -> str:
    """Pick a file name from Content-Disposition or the final URL path."""
    disposition = response.headers.get("Content-Disposition", "")
    match = _CONTENT_DISPOSITION_FILENAME.search(disposition)
    if match:
        name = os.path.basename(urllib.parse.unquote(match.group(1).strip()))
        if name:
            return name
    path = urllib.parse.urlsplit(response.url or "").path
    name = os.path.basename(urllib.parse.unquote(path))
    return name or "download"


def download_to_file(
    url: str,
    destination: Union[str, Path],
    credentials: Optional[Credentials] = None,
    accept_untrusted_certs: bool = False,
    *,
    timeout: Optional[float] = None,
    chunk_size: Optional[int] = None,
) -> Path:
    """Stream ``url`` into ``destination`` and return the written path.

    When ``destination`` is an existing directory, or ends with a path
    separator, the file name is taken from the response. The body is written
    to a temporary file next to the target and moved into place only once
    complete, so a failed download leaves any existing file untouched.
    """
    response = _send(url, credentials, accept_untrusted_certs, timeout=timeout, stream=True)
    as_directory = str(destination).endswith(("/", os.sep))
    target = Path(destination)
    with response:
        if as_directory or target.is_dir():
            target = target / filename_from_response(response)
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=str(target.parent), prefix=target.name, suffix=".part")
        try:
            with os.fdopen(fd, "wb") as f:
                for chunk in response.iter_content(chunk_size=chunk_size or Constants.DOWNLOAD_CHUNK_SIZE):
                    if chunk:
                        f.write(chunk)
            os.replace(tmp_name, target)
        except requests.RequestException as exc:
            _discard_partial(tmp_name)
            raise TransportError(f"Download from {safe_url(url)} failed: {exc}", url) from exc
        except OSError:
            _discard_partial(tmp_name)
            raise
    logger.debug("Wrote %s", target)
    return target


def _discard_partial(path: str) -> None:
    if os.path.exists(path):
        os.unlink(path)
