"""Runtime settings for the CLI: YAML config file, environment, CLI overrides.

Precedence, highest first: CLI flags, environment variables, config file,
defaults in ``Constants``.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional

import yaml

from constants import Constants
from nexus3.errors import ParseError
from nexus3.models import Credentials

logger = logging.getLogger(__name__)

_TRUE = {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Effective configuration for one CLI invocation."""
    nexus_url: Optional[str] = None
    username: Optional[str] = None
    password: Optional[str] = field(default=None, repr=False)
    accept_untrusted_certs: bool = False
    timeout: float = Constants.REQUEST_TIMEOUT
    cache_enabled: bool = Constants.CACHE_ENABLED
    cache_file: Optional[str] = Constants.CACHE_FILE
    cache_ttl: Optional[float] = Constants.CACHE_TTL_SEC

    @property
    def credentials(self) -> Credentials:
        if self.username:
            return Credentials.basic(self.username, self.password or "")
        return Credentials.anonymous()


def load_config_file(path: str) -> Dict[str, Any]:
    """Load a YAML configuration file.

    Raises:
        OSError: The file cannot be read.
        ParseError: The file is not valid YAML or not a mapping.
    """
    with open(path, "r", encoding="utf-8") as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as exc:
            raise ParseError(f"Invalid configuration file {path}: {exc}") from exc
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(f"Invalid configuration file {path}: expected a mapping at the top level")
    return data


def _section(data: Mapping[str, Any], name: str) -> Mapping[str, Any]:
    value = data.get(name)
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ParseError(f"Configuration section '{name}' must be a mapping")
    return value


def _as_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in _TRUE


def _as_float(value: Any, key: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ParseError(f"Configuration value '{key}' must be a number, got {value!r}") from exc


def apply_config(settings: Settings, data: Mapping[str, Any]) -> None:
    """Apply values from a parsed config document onto ``settings``."""
    nexus = _section(data, "nexus")
    if nexus.get("url"):
        settings.nexus_url = str(nexus["url"])
    if nexus.get("username"):
        settings.username = str(nexus["username"])
    if nexus.get("password") is not None:
        settings.password = str(nexus["password"])
    if "accept_untrusted_certs" in nexus:
        settings.accept_untrusted_certs = _as_bool(nexus["accept_untrusted_certs"])

    http = _section(data, "http")
    if http.get("timeout") is not None:
        settings.timeout = _as_float(http["timeout"], "http.timeout")

    cache = _section(data, "cache")
    if "enabled" in cache:
        settings.cache_enabled = _as_bool(cache["enabled"])
    if cache.get("file"):
        settings.cache_file = os.path.expanduser(str(cache["file"]))
    if cache.get("ttl") is not None:
        settings.cache_ttl = _as_float(cache["ttl"], "cache.ttl")


def apply_environment(settings: Settings, environ: Mapping[str, str]) -> None:
    """Apply ``NEXUS3_*`` environment variables onto ``settings``."""
    if environ.get(Constants.ENV_URL):
        settings.nexus_url = environ[Constants.ENV_URL]
    if environ.get(Constants.ENV_USERNAME):
        settings.username = environ[Constants.ENV_USERNAME]
    if environ.get(Constants.ENV_PASSWORD) is not None:
        settings.password = environ[Constants.ENV_PASSWORD]


def apply_cli_overrides(settings: Settings, args) -> None:
    """Apply CLI flags onto ``settings``; flags left unset are skipped."""
    if getattr(args, "NEXUS_URL", None):
        settings.nexus_url = args.NEXUS_URL
    if getattr(args, "USERNAME", None):
        settings.username = args.USERNAME
    if getattr(args, "PASSWORD", None) is not None:
        settings.password = args.PASSWORD
    if getattr(args, "ACCEPT_UNTRUSTED_CERTS", None):
        settings.accept_untrusted_certs = True
    if getattr(args, "TIMEOUT", None) is not None:
        settings.timeout = float(args.TIMEOUT)
    if getattr(args, "CACHE_FILE", None):
        settings.cache_file = args.CACHE_FILE
    if getattr(args, "NO_CACHE", False):
        settings.cache_enabled = False


def load_settings(args, environ: Optional[Mapping[str, str]] = None) -> Settings:
    """Build effective settings from config file, environment and CLI flags."""
    env = os.environ if environ is None else environ
    settings = Settings()
    config_path = getattr(args, "CONFIG", None) or env.get(Constants.ENV_CONFIG)
    if config_path:
        logger.debug("Loading configuration from %s", config_path)
        apply_config(settings, load_config_file(config_path))
    apply_environment(settings, env)
    apply_cli_overrides(settings, args)
    return settings
