"""Maven-side vocabulary: coordinates, group codec and file layout."""

from .coordinates import MavenCoordinate
from .group import group_path, is_valid, reverse, sanitize
from .layout import (
    CHECKSUM_ALGORITHMS,
    MEDIATYPE_CHECKSUM,
    MEDIATYPE_GZIP,
    MEDIATYPE_JAR,
    MEDIATYPE_JSON,
    MEDIATYPE_OCTET_STREAM,
    MEDIATYPE_XML,
    ArtifactRole,
    artifact_filename,
    checksum_filename,
    extension_for,
    media_type_for,
    minimal_pom,
    normalize_filename,
    role_for,
)

__all__ = [
    "MavenCoordinate",
    "sanitize",
    "reverse",
    "is_valid",
    "group_path",
    "ArtifactRole",
    "CHECKSUM_ALGORITHMS",
    "MEDIATYPE_CHECKSUM",
    "MEDIATYPE_GZIP",
    "MEDIATYPE_JAR",
    "MEDIATYPE_JSON",
    "MEDIATYPE_OCTET_STREAM",
    "MEDIATYPE_XML",
    "artifact_filename",
    "checksum_filename",
    "extension_for",
    "media_type_for",
    "minimal_pom",
    "normalize_filename",
    "role_for",
]
