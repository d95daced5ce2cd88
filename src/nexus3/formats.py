"""Per-format mapping of logical coordinate fields to search query parameters.

Nexus' search API names its filters differently for each repository format.
Each known format gets an immutable ``ParameterMap``; any other format
(including a missing one) degrades to the maven2 map.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional, Tuple

from constants import Constants, RepositoryFormats

logger = logging.getLogger(__name__)

# Logical fields in the order their parameters are emitted.
FIELD_ORDER: Tuple[str, ...] = ("repository", "group", "artifact", "extension", "classifier")


@dataclass(frozen=True)
class ParameterSpec:
    """Wire name of a field plus whether it must be present."""
    name: str
    required: bool = False
    default: Optional[str] = None


ParameterMap = Mapping[str, ParameterSpec]


def _freeze(**specs: ParameterSpec) -> ParameterMap:
    return MappingProxyType(dict(specs))


MAVEN2_PARAMETERS: ParameterMap = _freeze(
    repository=ParameterSpec("repository", required=True),
    group=ParameterSpec("maven.groupId", required=True),
    artifact=ParameterSpec("maven.artifactId", required=True),
    extension=ParameterSpec("maven.extension"),
    classifier=ParameterSpec("maven.classifier", default=""),
)

NPM_PARAMETERS: ParameterMap = _freeze(
    repository=ParameterSpec("repository", required=True),
    group=ParameterSpec("npm.scope"),
    artifact=ParameterSpec("name", required=True),
)

NUGET_PARAMETERS: ParameterMap = _freeze(
    repository=ParameterSpec("repository", required=True),
    artifact=ParameterSpec("nuget.id", required=True),
)

FORMAT_PARAMETERS: Mapping[str, ParameterMap] = MappingProxyType({
    RepositoryFormats.MAVEN2.value: MAVEN2_PARAMETERS,
    RepositoryFormats.NPM.value: NPM_PARAMETERS,
    RepositoryFormats.NUGET.value: NUGET_PARAMETERS,
})


def lookup(repository_format: Optional[str]) -> ParameterMap:
    """Return the parameter map for ``repository_format``.

    Unknown formats fall back to the maven2 map instead of failing.
    """
    key = (repository_format or "").strip().lower()
    parameters = FORMAT_PARAMETERS.get(key)
    if parameters is None:
        logger.info(
            "No parameter mapping for repository format '%s', using %s parameters.",
            repository_format,
            Constants.DEFAULT_FORMAT,
        )
        return FORMAT_PARAMETERS[Constants.DEFAULT_FORMAT]
    return parameters
