"""Pull a published coordinate back into a Maven-layout directory.

Each attempt walks ``START -> REFERENCE_BUILT -> MANIFEST_FETCHED ->
BLOBS_FETCHED -> LAYOUT_WRITTEN`` and drops to ``FAILED`` from any step.
Blobs are staged outside the destination and only moved in once every layer
has been fetched and verified, so a failed attempt leaves no new files behind.
Failures are reported as ``False`` (or a failed :class:`ResolutionReport`)
rather than raised: a miss here is an ordinary outcome for a caller that
searches several repositories in turn.
"""

from __future__ import annotations

import hashlib
import logging
import shutil
import tempfile
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Callable

from mvnoci_core.errors import InvalidInputError, OciError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.maven.layout import (
    CHECKSUM_ALGORITHMS,
    MEDIATYPE_JAR,
    MEDIATYPE_XML,
    ArtifactRole,
    artifact_filename,
    checksum_filename,
    normalize_filename,
)
from mvnoci_core.oci.bundle import sha256_digest
from mvnoci_core.oci.client import OciClient, RegistryClient
from mvnoci_core.oci.manifest import (
    ANNOTATION_CHECKSUM_ALGORITHM,
    ANNOTATION_CHECKSUM_OF,
    ANNOTATION_EXTENSION,
    ManifestLayer,
    PublishedManifest,
    parse_manifest,
)
from mvnoci_core.oci.reference import RegistryReference, build_reference
from mvnoci_core.oci.security import confined_path
from mvnoci_core.oci.types import RegistryConfig

logger = logging.getLogger(__name__)

ClientFactory = Callable[[RegistryConfig], RegistryClient]


class ResolutionState(str, Enum):
    START = "start"
    REFERENCE_BUILT = "reference_built"
    MANIFEST_FETCHED = "manifest_fetched"
    BLOBS_FETCHED = "blobs_fetched"
    LAYOUT_WRITTEN = "layout_written"
    FAILED = "failed"


@dataclass(frozen=True)
class ResolutionReport:
    coordinate: MavenCoordinate
    state: ResolutionState
    reference: str | None = None
    files: tuple[Path, ...] = ()
    failed_at: ResolutionState | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.state is ResolutionState.LAYOUT_WRITTEN


@dataclass(frozen=True)
class _PlannedFile:
    layer: ManifestLayer
    filename: str
    checksum_target: str | None = None
    algorithm: str | None = None


def _default_client_factory(config: RegistryConfig) -> RegistryClient:
    return OciClient(config.client)


class Resolver:
    def __init__(self, client_factory: ClientFactory | None = None) -> None:
        self._client_factory = client_factory or _default_client_factory

    def exists(self, coordinate: MavenCoordinate, registry_config: RegistryConfig) -> bool:
        try:
            reference = build_reference(registry_config.url, coordinate)
            client = self._client_factory(registry_config)
            found = client.get_manifest(str(reference)) is not None
        except (OciError, ValueError, OSError) as exc:
            logger.debug("existence check failed for %s at %s: %s", coordinate, registry_config.url, exc)
            return False
        logger.debug("existence check ref=%s found=%s", reference, found)
        return found

    def resolve(self, coordinate: MavenCoordinate, registry_config: RegistryConfig, destination_dir: Path) -> bool:
        return self.resolve_with_report(coordinate, registry_config, destination_dir).ok

    def resolve_with_report(
        self,
        coordinate: MavenCoordinate,
        registry_config: RegistryConfig,
        destination_dir: Path,
    ) -> ResolutionReport:
        state = ResolutionState.START
        reference: RegistryReference | None = None
        try:
            reference = build_reference(registry_config.url, coordinate)
            state = ResolutionState.REFERENCE_BUILT
            logger.debug("resolving %s ref=%s", coordinate, reference)

            client = self._client_factory(registry_config)
            payload = client.get_manifest(str(reference))
            if payload is None:
                raise InvalidInputError(f"manifest not found: {reference}")
            manifest = parse_manifest(payload)
            if not manifest.layers:
                raise InvalidInputError(f"manifest {reference} lists no layers")
            state = ResolutionState.MANIFEST_FETCHED

            planned = plan_files(manifest, coordinate)
            with tempfile.TemporaryDirectory(prefix="mvnoci-resolve-") as tmp:
                staging = Path(tmp)
                for item in planned:
                    _fetch_layer(client, reference, item, staging)
                _verify_checksums(planned, staging)
                state = ResolutionState.BLOBS_FETCHED
                written = _install(staging, planned, Path(destination_dir))
        except (OciError, ValueError, OSError) as exc:
            logger.debug(
                "failed to resolve %s from %s state=%s: %s",
                coordinate,
                registry_config.url,
                state.value,
                exc,
            )
            return ResolutionReport(
                coordinate=coordinate,
                state=ResolutionState.FAILED,
                reference=str(reference) if reference is not None else None,
                failed_at=state,
                error=str(exc),
            )

        logger.debug("resolved %s files=%s into %s", coordinate, len(written), destination_dir)
        return ResolutionReport(
            coordinate=coordinate,
            state=ResolutionState.LAYOUT_WRITTEN,
            reference=str(reference),
            files=tuple(written),
        )


def plan_files(manifest: PublishedManifest, coordinate: MavenCoordinate) -> list[_PlannedFile]:
    """Assign a Maven-layout file name to every manifest layer."""
    names_by_title: dict[str, str] = {}
    planned: list[_PlannedFile | None] = []
    for layer in manifest.layers:
        if _is_checksum_layer(layer):
            planned.append(None)
            continue
        filename = _artifact_layer_filename(layer, coordinate)
        if layer.title:
            names_by_title[layer.title] = filename
        planned.append(_PlannedFile(layer=layer, filename=filename))

    result: list[_PlannedFile] = []
    for layer, item in zip(manifest.layers, planned):
        if item is None:
            item = _checksum_layer_plan(layer, coordinate, names_by_title)
        result.append(item)

    seen: set[str] = set()
    for item in result:
        if item.filename in seen:
            raise InvalidInputError(f"manifest maps more than one layer to {item.filename}")
        seen.add(item.filename)
    return result


def _is_checksum_layer(layer: ManifestLayer) -> bool:
    if layer.role is not None:
        return layer.role is ArtifactRole.CHECKSUM
    title = (layer.title or "").lower()
    return any(title.endswith(f".{algorithm}") for algorithm in CHECKSUM_ALGORITHMS)


def _artifact_layer_filename(layer: ManifestLayer, coordinate: MavenCoordinate) -> str:
    role = layer.role
    if role is not None:
        return artifact_filename(coordinate, role, layer.annotations.get(ANNOTATION_EXTENSION, "jar"))
    if layer.title:
        name = PurePosixPath(layer.title).name
        return normalize_filename(name, coordinate) or name
    if layer.media_type == MEDIATYPE_JAR:
        return artifact_filename(coordinate, ArtifactRole.PRIMARY, "jar")
    if layer.media_type == MEDIATYPE_XML:
        return artifact_filename(coordinate, ArtifactRole.DESCRIPTOR)
    raise InvalidInputError(f"cannot determine a file name for layer {layer.digest} ({layer.media_type})")


def _checksum_layer_plan(
    layer: ManifestLayer,
    coordinate: MavenCoordinate,
    names_by_title: dict[str, str],
) -> _PlannedFile:
    title_name = PurePosixPath(layer.title or "").name
    algorithm = layer.annotations.get(ANNOTATION_CHECKSUM_ALGORITHM) or title_name.rpartition(".")[2].lower()
    target_title = layer.annotations.get(ANNOTATION_CHECKSUM_OF)
    if not target_title and title_name:
        target_title = title_name[: -(len(algorithm) + 1)]
    target = names_by_title.get(target_title or "")
    if target is None and target_title:
        target = normalize_filename(PurePosixPath(target_title).name, coordinate)
    if not target or algorithm not in CHECKSUM_ALGORITHMS:
        raise InvalidInputError(f"cannot determine the file checked by layer {layer.digest}")
    return _PlannedFile(
        layer=layer,
        filename=checksum_filename(target, algorithm),
        checksum_target=target,
        algorithm=algorithm,
    )


def _fetch_layer(client: RegistryClient, reference: RegistryReference, item: _PlannedFile, staging: Path) -> None:
    data = client.get_blob(reference.repository, item.layer.digest)
    if item.layer.digest.startswith("sha256:") and sha256_digest(data) != item.layer.digest:
        raise InvalidInputError(f"blob {item.layer.digest} does not match its digest")
    target = confined_path(staging, item.filename)
    target.write_bytes(data)
    logger.debug(
        "fetched layer ref=%s file=%s size=%s", reference.digest_ref(item.layer.digest), item.filename, len(data)
    )


def _verify_checksums(planned: list[_PlannedFile], staging: Path) -> None:
    for item in planned:
        if item.checksum_target is None or item.algorithm is None:
            continue
        target = staging / item.checksum_target
        if not target.exists():
            continue
        expected = (staging / item.filename).read_text(encoding="ascii", errors="replace").strip().split()
        actual = hashlib.new(item.algorithm, target.read_bytes(), usedforsecurity=False).hexdigest()
        if not expected or expected[0].lower() != actual:
            raise InvalidInputError(f"{item.algorithm} checksum mismatch for {item.checksum_target}")


def _install(staging: Path, planned: list[_PlannedFile], destination_dir: Path) -> list[Path]:
    targets = [(item.filename, confined_path(destination_dir, item.filename)) for item in planned]
    created_dir = not destination_dir.exists()
    destination_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []
    try:
        for filename, target in targets:
            shutil.move(str(staging / filename), str(target))
            written.append(target)
    except OSError:
        for path in written:
            path.unlink(missing_ok=True)
        if created_dir:
            shutil.rmtree(destination_dir, ignore_errors=True)
        raise
    return written
