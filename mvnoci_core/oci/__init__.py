"""OCI side of the bridge: references, bundles, manifests and publishing."""

from mvnoci_core.errors import (
    EmptyBundleError,
    InvalidInputError,
    OciCommandError,
    OciError,
    OciNotFoundError,
    OciSecurityError,
    PublishError,
)

from .bundle import ArtifactBundle, ArtifactFile, bundle_artifacts
from .client import OciClient, RegistryClient
from .manifest import (
    MAVEN_ARTIFACT_TYPE,
    OCI_MANIFEST_MEDIATYPE,
    ManifestLayer,
    PublishedManifest,
    build_manifest,
    parse_manifest,
)
from .publisher import OverwritePolicy, publish, publish_files
from .reference import RegistryLocation, RegistryReference, build_reference, parse_registry_url
from .types import OciClientConfig, RegistryConfig

__all__ = [
    "OciClient",
    "OciClientConfig",
    "RegistryClient",
    "RegistryConfig",
    "OciError",
    "OciCommandError",
    "OciNotFoundError",
    "OciSecurityError",
    "InvalidInputError",
    "EmptyBundleError",
    "PublishError",
    "ArtifactBundle",
    "ArtifactFile",
    "bundle_artifacts",
    "MAVEN_ARTIFACT_TYPE",
    "OCI_MANIFEST_MEDIATYPE",
    "ManifestLayer",
    "PublishedManifest",
    "build_manifest",
    "parse_manifest",
    "OverwritePolicy",
    "publish",
    "publish_files",
    "RegistryLocation",
    "RegistryReference",
    "build_reference",
    "parse_registry_url",
]
