"""Error kinds raised while resolving or downloading an asset.

Every error aborts the in-flight resolution; nothing here is retried.
"""
from __future__ import annotations

from typing import List, Optional, Sequence


class NexusError(Exception):
    """Base class for all resolution and download failures."""


class ValidationError(NexusError):
    """One or more required query fields are missing for the resolved format."""

    def __init__(self, missing: Sequence[str]):
        self.missing: List[str] = list(missing)
        super().__init__("\n".join(self.missing))


class TransportError(NexusError):
    """An HTTP request failed (network, TLS, or non-success status)."""

    def __init__(self, message: str, url: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class ParseError(NexusError):
    """Malformed URL input or malformed repository metadata."""
