from __future__ import annotations

import hashlib
import logging
import shutil
from pathlib import Path

from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.maven.group import group_path
from mvnoci_core.maven.layout import ArtifactRole, artifact_filename, minimal_pom
from mvnoci_core.oci.types import RegistryConfig

from .resolver import Resolver

logger = logging.getLogger(__name__)

# Maven's own record of where the files in a version directory came from
RESOLVED_MARKER = "_remote.repositories"


def registry_cache_key(registry_url: str) -> str:
    return hashlib.sha1(registry_url.encode("utf-8"), usedforsecurity=False).hexdigest()[:8]


def default_cache_root() -> Path:
    return Path.home() / ".cache" / "mvnoci"


class MavenLocalCache:
    """Maven repository tree holding artifacts resolved from one registry.

    Layout: ``<root>/repositories/<registry-key>/<group/path>/<artifactId>/<version>/``,
    which a build tool can consume as a plain file-based Maven repository.
    """

    def __init__(self, registry_url: str, root: Path | None = None) -> None:
        self.registry_url = registry_url
        self.root = (root or default_cache_root()).resolve()
        self.repository_id = registry_cache_key(registry_url)
        self.repository_dir = self.root / "repositories" / self.repository_id

    def artifact_dir(self, coordinate: MavenCoordinate) -> Path:
        return self.repository_dir / group_path(coordinate.group_id) / coordinate.artifact_id / coordinate.version

    def has_artifact(self, coordinate: MavenCoordinate) -> bool:
        """True when a previous materialization completed and its files are still present."""
        directory = self.artifact_dir(coordinate)
        recorded = _recorded_files(directory / RESOLVED_MARKER)
        if artifact_filename(coordinate, ArtifactRole.DESCRIPTOR) not in recorded:
            return False
        return all((directory / name).is_file() for name in recorded)

    def materialize(
        self,
        coordinate: MavenCoordinate,
        resolver: Resolver,
        registry_config: RegistryConfig,
    ) -> bool:
        if self.has_artifact(coordinate):
            logger.debug("cache hit for %s in %s", coordinate, self.repository_dir)
            return True
        directory = self.artifact_dir(coordinate)
        report = resolver.resolve_with_report(coordinate, registry_config, directory)
        if not report.ok:
            logger.debug("cache miss for %s could not be resolved from %s", coordinate, registry_config.url)
            return False
        pom = directory / artifact_filename(coordinate, ArtifactRole.DESCRIPTOR)
        if not pom.exists():
            logger.debug("no POM published for %s, writing a minimal one", coordinate)
            pom.write_text(minimal_pom(coordinate), encoding="utf-8")
        names = sorted({path.name for path in report.files} | {pom.name})
        _record_files(directory / RESOLVED_MARKER, names, self.repository_id)
        logger.info("cached %s -> %s", coordinate, directory)
        return True

    def clear(self) -> None:
        if self.repository_dir.exists():
            shutil.rmtree(self.repository_dir)
            logger.info("cleared OCI cache for registry %s", self.registry_url)


def _recorded_files(marker: Path) -> set[str]:
    if not marker.is_file():
        return set()
    names: set[str] = set()
    for line in marker.read_text(encoding="utf-8").splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        names.add(line.partition(">")[0])
    return names


def _record_files(marker: Path, names: list[str], repository_id: str) -> None:
    lines = ["#NOTE: written by mvnoci after a completed resolution"]
    lines.extend(f"{name}>{repository_id}=" for name in names)
    marker.write_text("\n".join(lines) + "\n", encoding="utf-8")
