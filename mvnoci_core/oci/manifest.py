"""OCI image manifests describing one published Maven coordinate."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping

from mvnoci_core.errors import InvalidInputError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.maven.layout import ArtifactRole

from .bundle import ArtifactBundle, ArtifactFile, sha256_digest
from .reference import RegistryReference

OCI_MANIFEST_MEDIATYPE = "application/vnd.oci.image.manifest.v1+json"
OCI_EMPTY_MEDIATYPE = "application/vnd.oci.empty.v1+json"
OCI_EMPTY_CONFIG = b"{}"
MAVEN_ARTIFACT_TYPE = "application/vnd.maven.artifact.v1"

ANNOTATION_TITLE = "org.opencontainers.image.title"
ANNOTATION_ROLE = "io.mvnoci.role"
ANNOTATION_EXTENSION = "io.mvnoci.extension"
ANNOTATION_CHECKSUM_ALGORITHM = "io.mvnoci.checksum.algorithm"
ANNOTATION_CHECKSUM_OF = "io.mvnoci.checksum.of"
ANNOTATION_GROUP_ID = "io.mvnoci.maven.groupId"
ANNOTATION_ARTIFACT_ID = "io.mvnoci.maven.artifactId"
ANNOTATION_VERSION = "io.mvnoci.maven.version"
ANNOTATION_REFERENCE = "io.mvnoci.reference"


@dataclass(frozen=True)
class ManifestLayer:
    media_type: str
    digest: str
    size: int
    annotations: Mapping[str, str] = field(default_factory=dict)

    @property
    def title(self) -> str | None:
        return self.annotations.get(ANNOTATION_TITLE) or None

    @property
    def role(self) -> ArtifactRole | None:
        raw = self.annotations.get(ANNOTATION_ROLE)
        if not raw:
            return None
        try:
            return ArtifactRole(raw)
        except ValueError:
            return None

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"mediaType": self.media_type, "digest": self.digest, "size": self.size}
        if self.annotations:
            payload["annotations"] = dict(self.annotations)
        return payload


@dataclass(frozen=True)
class PublishedManifest:
    schema_version: int
    artifact_type: str
    annotations: Mapping[str, str]
    layers: tuple[ManifestLayer, ...]
    digest: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "schemaVersion": self.schema_version,
            "mediaType": OCI_MANIFEST_MEDIATYPE,
            "artifactType": self.artifact_type,
            "config": {
                "mediaType": OCI_EMPTY_MEDIATYPE,
                "digest": sha256_digest(OCI_EMPTY_CONFIG),
                "size": len(OCI_EMPTY_CONFIG),
            },
            "layers": [layer.to_dict() for layer in self.layers],
            "annotations": dict(self.annotations),
        }

    def to_bytes(self) -> bytes:
        return json.dumps(self.to_dict(), ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")

    def coordinate(self) -> MavenCoordinate | None:
        group_id = self.annotations.get(ANNOTATION_GROUP_ID)
        artifact_id = self.annotations.get(ANNOTATION_ARTIFACT_ID)
        version = self.annotations.get(ANNOTATION_VERSION)
        if not (group_id and artifact_id and version):
            return None
        return MavenCoordinate(group_id=group_id, artifact_id=artifact_id, version=version)


def layer_annotations(entry: ArtifactFile) -> dict[str, str]:
    annotations = {
        ANNOTATION_TITLE: entry.filename,
        ANNOTATION_ROLE: entry.role.value,
        # empty for extensionless primaries, which resolve without a suffix
        ANNOTATION_EXTENSION: entry.extension,
    }
    if entry.checksum_of is not None and entry.algorithm:
        annotations[ANNOTATION_CHECKSUM_OF] = entry.checksum_of.filename
        annotations[ANNOTATION_CHECKSUM_ALGORITHM] = entry.algorithm
    return annotations


def build_manifest(
    coordinate: MavenCoordinate,
    bundle: ArtifactBundle,
    reference: RegistryReference,
) -> PublishedManifest:
    layers = tuple(
        ManifestLayer(
            media_type=entry.media_type,
            digest=entry.digest,
            size=entry.size,
            annotations=layer_annotations(entry),
        )
        for entry in bundle
    )
    return PublishedManifest(
        schema_version=2,
        artifact_type=MAVEN_ARTIFACT_TYPE,
        annotations={
            ANNOTATION_GROUP_ID: coordinate.group_id,
            ANNOTATION_ARTIFACT_ID: coordinate.artifact_id,
            ANNOTATION_VERSION: coordinate.version,
            ANNOTATION_REFERENCE: str(reference),
        },
        layers=layers,
    )


def parse_manifest(payload: Mapping[str, Any], *, digest: str | None = None) -> PublishedManifest:
    if not isinstance(payload, Mapping):
        raise InvalidInputError("OCI manifest payload must be an object")
    raw_layers = payload.get("layers")
    if not isinstance(raw_layers, list):
        raise InvalidInputError("OCI manifest has no layer list")

    layers: list[ManifestLayer] = []
    for item in raw_layers:
        if not isinstance(item, Mapping):
            raise InvalidInputError("OCI manifest layers must be objects")
        media_type = str(item.get("mediaType") or "").strip()
        layer_digest = str(item.get("digest") or "").strip()
        if not media_type or not layer_digest:
            raise InvalidInputError("OCI manifest layer is missing mediaType or digest")
        try:
            size = int(item.get("size") or 0)
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(f"invalid size for layer {layer_digest}") from exc
        layers.append(
            ManifestLayer(
                media_type=media_type,
                digest=layer_digest,
                size=size,
                annotations=_string_mapping(item.get("annotations")),
            )
        )

    try:
        schema_version = int(payload.get("schemaVersion") or 2)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError("invalid manifest schemaVersion") from exc
    return PublishedManifest(
        schema_version=schema_version,
        artifact_type=str(payload.get("artifactType") or ""),
        annotations=_string_mapping(payload.get("annotations")),
        layers=tuple(layers),
        digest=digest,
    )


def _string_mapping(value: Any) -> dict[str, str]:
    if not isinstance(value, Mapping):
        return {}
    return {str(key): str(item) for key, item in value.items()}
