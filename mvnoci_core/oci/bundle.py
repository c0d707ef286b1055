"""Bundle local Maven artifact files into ordered OCI layers."""

from __future__ import annotations

import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Sequence

from mvnoci_core.errors import EmptyBundleError, InvalidInputError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.maven.layout import (
    CHECKSUM_ALGORITHMS,
    MEDIATYPE_CHECKSUM,
    ArtifactRole,
    artifact_filename,
    checksum_filename,
    extension_for,
    media_type_for,
    role_for,
)

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 1024 * 1024


@dataclass(frozen=True)
class ArtifactFile:
    filename: str
    media_type: str
    role: ArtifactRole
    digest: str
    size: int
    extension: str = ""
    local_path: Path | None = None
    content: bytes | None = None
    checksum_of: "ArtifactFile | None" = None
    algorithm: str | None = None

    def read_bytes(self) -> bytes:
        if self.content is not None:
            return self.content
        if self.local_path is None:
            raise InvalidInputError(f"artifact {self.filename} has neither content nor a local path")
        return self.local_path.read_bytes()


@dataclass(frozen=True)
class ArtifactBundle:
    coordinate: MavenCoordinate
    entries: tuple[ArtifactFile, ...]

    def __iter__(self) -> Iterator[ArtifactFile]:
        return iter(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    @property
    def originals(self) -> tuple[ArtifactFile, ...]:
        return tuple(entry for entry in self.entries if entry.role is not ArtifactRole.CHECKSUM)

    def checksums_for(self, artifact: ArtifactFile) -> tuple[ArtifactFile, ...]:
        return tuple(entry for entry in self.entries if entry.checksum_of is artifact)

    def write_checksums(self, directory: Path) -> list[Path]:
        """Persist the generated checksum side files next to each other in ``directory``."""
        directory.mkdir(parents=True, exist_ok=True)
        written: list[Path] = []
        for original in self.originals:
            for entry in self.checksums_for(original):
                target = directory / entry.filename
                target.write_bytes(entry.read_bytes())
                written.append(target)
        return written


def file_digests(path: Path, algorithms: Sequence[str] = ("sha256", *CHECKSUM_ALGORITHMS)) -> dict[str, str]:
    hashers = {name: hashlib.new(name, usedforsecurity=False) for name in algorithms}
    with path.open("rb") as handle:
        for chunk in iter(lambda: handle.read(_CHUNK_SIZE), b""):
            for hasher in hashers.values():
                hasher.update(chunk)
    return {name: hasher.hexdigest() for name, hasher in hashers.items()}


def sha256_digest(data: bytes) -> str:
    return f"sha256:{hashlib.sha256(data).hexdigest()}"


def bundle_artifacts(files: Sequence[Path | str], coordinate: MavenCoordinate) -> ArtifactBundle:
    """Classify ``files`` and attach SHA-1 and MD5 checksum entries to each one.

    Entries keep the input order; the checksum entries of a file directly
    follow it. Checksum files among the inputs are ignored since they are
    always regenerated from the artifact bytes.
    """
    paths = [Path(item) for item in files]
    if not paths:
        raise EmptyBundleError("no artifact files to bundle")

    entries: list[ArtifactFile] = []
    claimed: dict[str, Path] = {}
    for path in paths:
        if extension_for(path.name) in CHECKSUM_ALGORITHMS:
            logger.debug("skipping authored checksum file path=%s", path)
            continue
        if not path.is_file():
            raise InvalidInputError(f"artifact file not found: {path}")

        role = role_for(path.name)
        extension = _layout_extension(role, path.name)
        filename = artifact_filename(coordinate, role, extension)
        if filename in claimed:
            raise InvalidInputError(f"{path} and {claimed[filename]} both map to {filename}")
        claimed[filename] = path

        digests = file_digests(path)
        artifact = ArtifactFile(
            filename=filename,
            media_type=media_type_for(path.name),
            role=role,
            digest=f"sha256:{digests['sha256']}",
            size=int(path.stat().st_size),
            extension=extension,
            local_path=path,
        )
        entries.append(artifact)
        for algorithm in CHECKSUM_ALGORITHMS:
            content = digests[algorithm].encode("ascii")
            entries.append(
                ArtifactFile(
                    filename=checksum_filename(filename, algorithm),
                    media_type=MEDIATYPE_CHECKSUM,
                    role=ArtifactRole.CHECKSUM,
                    digest=sha256_digest(content),
                    size=len(content),
                    extension=algorithm,
                    content=content,
                    checksum_of=artifact,
                    algorithm=algorithm,
                )
            )

    if not entries:
        raise EmptyBundleError("no artifact files to bundle")
    logger.debug("bundled coordinate=%s entries=%s", coordinate, len(entries))
    return ArtifactBundle(coordinate=coordinate, entries=tuple(entries))


def _layout_extension(role: ArtifactRole, filename: str) -> str:
    if role is ArtifactRole.DESCRIPTOR:
        return "pom"
    if role in (ArtifactRole.SOURCES, ArtifactRole.JAVADOC):
        return "jar"
    return extension_for(filename)
