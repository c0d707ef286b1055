"""Push a bundle of Maven artifacts to a registry under one tag."""

from __future__ import annotations

import logging
from enum import Enum
from pathlib import Path
from typing import Sequence

from mvnoci_core.errors import EmptyBundleError, InvalidInputError, OciError, PublishError
from mvnoci_core.maven.coordinates import MavenCoordinate

from .bundle import ArtifactBundle, bundle_artifacts, sha256_digest
from .client import RegistryClient
from .manifest import OCI_EMPTY_CONFIG, OCI_EMPTY_MEDIATYPE, PublishedManifest, build_manifest, parse_manifest
from .reference import RegistryReference, build_reference

logger = logging.getLogger(__name__)


class OverwritePolicy(str, Enum):
    """What to do when the tag already points at a manifest."""

    FAIL = "fail"
    OVERRIDE = "override"
    SKIP = "skip"

    @classmethod
    def from_string(cls, value: str | None, default: "OverwritePolicy | None" = None) -> "OverwritePolicy":
        normalized = (value or "").strip().lower()
        if not normalized:
            return default or cls.OVERRIDE
        if normalized in {"fail", "error"}:
            return cls.FAIL
        if normalized in {"override", "overwrite", "replace"}:
            return cls.OVERRIDE
        if normalized in {"skip", "ignore"}:
            return cls.SKIP
        raise InvalidInputError(
            f"invalid overwrite policy: {value!r}. Valid values are: fail, override, skip"
        )


def publish(
    coordinate: MavenCoordinate,
    bundle: ArtifactBundle,
    reference: RegistryReference,
    registry_client: RegistryClient,
    *,
    overwrite_policy: OverwritePolicy = OverwritePolicy.OVERRIDE,
) -> PublishedManifest:
    """Push every bundle entry as a blob, then the manifest that lists them.

    The manifest push is the only step consumers observe: until it succeeds
    the tag keeps pointing at the previous manifest (or nothing). Blobs pushed
    before a failure are left in place.
    """
    if not len(bundle):
        raise EmptyBundleError(f"nothing to publish for {coordinate}")
    if bundle.coordinate != coordinate:
        raise InvalidInputError(f"bundle was built for {bundle.coordinate}, not {coordinate}")

    ref = str(reference)
    manifest = build_manifest(coordinate, bundle, reference)
    try:
        if overwrite_policy is not OverwritePolicy.OVERRIDE:
            existing = registry_client.get_manifest(ref)
            if existing is not None:
                if overwrite_policy is OverwritePolicy.FAIL:
                    raise PublishError(f"{ref} already exists and overwrite policy is 'fail'")
                logger.info("skipping publish, %s already exists", ref)
                return parse_manifest(existing)

        logger.info("publishing %s entries to %s", len(bundle), ref)
        for entry in bundle:
            _push_blob(registry_client, reference.repository, entry.read_bytes(), entry.media_type, entry.digest)
        _push_blob(
            registry_client,
            reference.repository,
            OCI_EMPTY_CONFIG,
            OCI_EMPTY_MEDIATYPE,
            sha256_digest(OCI_EMPTY_CONFIG),
        )
        digest = registry_client.put_manifest(ref, manifest.to_dict())
    except PublishError:
        raise
    except (OciError, OSError, InvalidInputError) as exc:
        raise PublishError(f"failed to publish {coordinate} to {ref}: {exc}") from exc

    logger.info("published %s ref=%s digest=%s", coordinate, ref, digest)
    return PublishedManifest(
        schema_version=manifest.schema_version,
        artifact_type=manifest.artifact_type,
        annotations=manifest.annotations,
        layers=manifest.layers,
        digest=digest,
    )


def publish_files(
    registry_url: str,
    coordinate: MavenCoordinate,
    files: Sequence[Path | str],
    registry_client: RegistryClient,
    *,
    overwrite_policy: OverwritePolicy = OverwritePolicy.OVERRIDE,
) -> PublishedManifest:
    reference = build_reference(registry_url, coordinate)
    bundle = bundle_artifacts(files, coordinate)
    return publish(coordinate, bundle, reference, registry_client, overwrite_policy=overwrite_policy)


def _push_blob(
    registry_client: RegistryClient,
    repository: str,
    data: bytes,
    media_type: str,
    expected_digest: str,
) -> None:
    actual = sha256_digest(data)
    if actual != expected_digest:
        raise PublishError(f"content changed since bundling: expected {expected_digest}, read {actual}")
    if registry_client.blob_exists(repository, expected_digest):
        logger.debug("blob already present repository=%s digest=%s", repository, expected_digest)
        return
    pushed = registry_client.put_blob(repository, data, media_type)
    if pushed != expected_digest:
        raise PublishError(f"registry stored blob as {pushed}, expected {expected_digest}")
    logger.debug("pushed blob repository=%s digest=%s size=%s", repository, pushed, len(data))
