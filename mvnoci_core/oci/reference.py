"""Registry references for Maven coordinates.

A registry base URL such as ``https://registry.com:5000/maven/snapshots`` is
split into the host (``registry.com:5000``) and a namespace prefix
(``maven/snapshots``). The coordinate ``com.example:my-lib:1.0.0`` is then
addressed as::

    registry.com:5000/maven/snapshots/com-example/my-lib:1.0.0

Publishing and resolving both derive the reference from the same inputs, so
the two directions agree on addressing without sharing any state.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from mvnoci_core.errors import InvalidInputError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.maven.group import sanitize

_SCHEME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9+.-]*://")
_TAG_RE = re.compile(r"[A-Za-z0-9_][A-Za-z0-9._-]{0,127}")


@dataclass(frozen=True)
class RegistryLocation:
    host: str
    path_segments: tuple[str, ...] = ()


@dataclass(frozen=True)
class RegistryReference:
    host: str
    path_segments: tuple[str, ...]
    tag: str

    @property
    def repository(self) -> str:
        return "/".join((self.host, *self.path_segments))

    def digest_ref(self, digest: str) -> str:
        return f"{self.repository}@{digest}"

    def __str__(self) -> str:
        return f"{self.repository}:{self.tag}"


def parse_registry_url(registry_url: str | None) -> RegistryLocation:
    value = (registry_url or "").strip()
    if not value:
        raise InvalidInputError("registry URL cannot be null or empty")
    value = _SCHEME_RE.sub("", value, count=1)
    host, _, path = value.partition("/")
    host = host.strip().lower()
    if not host or host.startswith(":"):
        raise InvalidInputError(f"invalid registry URL: missing host in {registry_url!r}")
    segments = tuple(segment.strip().lower() for segment in path.split("/") if segment.strip())
    return RegistryLocation(host=host, path_segments=segments)


def build_reference(registry_url: str, coordinate: MavenCoordinate) -> RegistryReference:
    location = parse_registry_url(registry_url)
    if not _TAG_RE.fullmatch(coordinate.version):
        raise InvalidInputError(f"version {coordinate.version!r} is not a valid OCI tag")
    return RegistryReference(
        host=location.host,
        path_segments=(*location.path_segments, sanitize(coordinate.group_id), coordinate.artifact_id),
        tag=coordinate.version,
    )
