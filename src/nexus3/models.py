"""Data models for asset resolution."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping, Optional, Tuple

from constants import Constants


@dataclass(frozen=True)
class ArtifactCoordinates:
    """Raw coordinates of the asset to resolve; input to a single resolution."""
    repository: str
    artifact: str
    group: Optional[str] = None
    version: Optional[str] = None  # None means no version constraint
    extension: Optional[str] = None
    classifier: Optional[str] = None
    packaging: Optional[str] = None  # accepted but not mapped by any format


@dataclass(frozen=True)
class Credentials:
    """Pass-through credentials; only basic auth is sent on the wire."""
    scheme: str = Constants.SCHEME_NONE
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)

    @classmethod
    def anonymous(cls) -> "Credentials":
        return cls()

    @classmethod
    def basic(cls, username: str, password: str) -> "Credentials":
        return cls(Constants.SCHEME_USERNAME_PASSWORD, username, password)

    @classmethod
    def from_endpoint(cls, scheme: Optional[str], parameters: Optional[Mapping[str, Any]] = None) -> "Credentials":
        """Build credentials from a host endpoint shape (scheme + parameters)."""
        if scheme == Constants.SCHEME_USERNAME_PASSWORD:
            params = parameters or {}
            if params.get("username"):
                return cls.basic(str(params["username"]), str(params.get("password") or ""))
        return cls.anonymous()

    @property
    def is_basic(self) -> bool:
        return self.scheme == Constants.SCHEME_USERNAME_PASSWORD

    def as_auth(self) -> Optional[Tuple[str, str]]:
        """Return a requests-style ``(user, password)`` tuple, or None."""
        if not self.is_basic or not self.username:
            return None
        return (self.username, self.password or "")
