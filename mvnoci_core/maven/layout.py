"""Maven repository file naming and artifact classification."""

from __future__ import annotations

from enum import Enum
from xml.sax.saxutils import escape

from .coordinates import MavenCoordinate

MEDIATYPE_JAR = "application/java-archive"
MEDIATYPE_XML = "application/xml"
MEDIATYPE_JSON = "application/json"
MEDIATYPE_GZIP = "application/gzip"
MEDIATYPE_OCTET_STREAM = "application/octet-stream"
MEDIATYPE_CHECKSUM = "text/plain"

CHECKSUM_ALGORITHMS: tuple[str, ...] = ("sha1", "md5")

_MEDIA_TYPES_BY_EXTENSION = {
    "jar": MEDIATYPE_JAR,
    "pom": MEDIATYPE_XML,
    "xml": MEDIATYPE_XML,
    "json": MEDIATYPE_JSON,
    "tar": MEDIATYPE_GZIP,
    "tgz": MEDIATYPE_GZIP,
    "tar.gz": MEDIATYPE_GZIP,
    "sha1": MEDIATYPE_CHECKSUM,
    "md5": MEDIATYPE_CHECKSUM,
}

# Gradle's maven-publish plugin writes the POM under this name.
GRADLE_POM_FILENAME = "pom-default.xml"


class ArtifactRole(str, Enum):
    PRIMARY = "primary"
    SOURCES = "sources"
    JAVADOC = "javadoc"
    DESCRIPTOR = "descriptor"
    CHECKSUM = "checksum"


def extension_for(filename: str) -> str:
    lowered = filename.lower()
    if lowered.endswith(".tar.gz"):
        return "tar.gz"
    _, dot, ext = lowered.rpartition(".")
    return ext if dot and ext else ""


def media_type_for(filename: str) -> str:
    return _MEDIA_TYPES_BY_EXTENSION.get(extension_for(filename), MEDIATYPE_OCTET_STREAM)


def role_for(filename: str) -> ArtifactRole:
    lowered = filename.lower()
    if lowered.endswith("-sources.jar"):
        return ArtifactRole.SOURCES
    if lowered.endswith("-javadoc.jar"):
        return ArtifactRole.JAVADOC
    if lowered.endswith(".pom") or lowered == GRADLE_POM_FILENAME:
        return ArtifactRole.DESCRIPTOR
    return ArtifactRole.PRIMARY


def artifact_filename(coordinate: MavenCoordinate, role: ArtifactRole, extension: str = "jar") -> str:
    """Maven local-repository name for a non-checksum artifact of ``coordinate``."""
    base = coordinate.base_name
    if role is ArtifactRole.SOURCES:
        return f"{base}-sources.jar"
    if role is ArtifactRole.JAVADOC:
        return f"{base}-javadoc.jar"
    if role is ArtifactRole.DESCRIPTOR:
        return f"{base}.pom"
    if role is ArtifactRole.PRIMARY:
        return f"{base}.{extension}" if extension else base
    raise ValueError("checksum files are named after the file they check")


def checksum_filename(target_filename: str, algorithm: str) -> str:
    return f"{target_filename}.{algorithm}"


def normalize_filename(filename: str, coordinate: MavenCoordinate) -> str | None:
    """Map a file name pulled from a registry onto the Maven layout.

    Covers artifacts pushed without role annotations, e.g. raw ``oras push``
    uploads or Gradle build outputs such as ``pom-default.xml``. Returns
    ``None`` when no rule applies.
    """
    lowered = filename.lower()
    for algorithm in CHECKSUM_ALGORITHMS:
        suffix = f".{algorithm}"
        if lowered.endswith(suffix):
            target = normalize_filename(filename[: -len(suffix)], coordinate)
            return checksum_filename(target, algorithm) if target else None
    if lowered == GRADLE_POM_FILENAME or lowered.endswith(".pom"):
        return artifact_filename(coordinate, ArtifactRole.DESCRIPTOR)
    if lowered.endswith(".jar"):
        if "sources" in lowered:
            return artifact_filename(coordinate, ArtifactRole.SOURCES)
        if "javadoc" in lowered:
            return artifact_filename(coordinate, ArtifactRole.JAVADOC)
        return artifact_filename(coordinate, ArtifactRole.PRIMARY, "jar")
    if lowered.endswith(".xml"):
        return artifact_filename(coordinate, ArtifactRole.DESCRIPTOR)
    return None


def minimal_pom(coordinate: MavenCoordinate) -> str:
    """POM used when a published artifact carried no descriptor of its own."""
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<project xmlns="http://maven.apache.org/POM/4.0.0" '
        'xmlns:xsi="http://www.w3.org/2001/XMLSchema-instance" '
        'xsi:schemaLocation="http://maven.apache.org/POM/4.0.0 http://maven.apache.org/xsd/maven-4.0.0.xsd">\n'
        "  <modelVersion>4.0.0</modelVersion>\n"
        f"  <groupId>{escape(coordinate.group_id)}</groupId>\n"
        f"  <artifactId>{escape(coordinate.artifact_id)}</artifactId>\n"
        f"  <version>{escape(coordinate.version)}</version>\n"
        "  <packaging>jar</packaging>\n"
        "  <description>Artifact resolved from OCI registry</description>\n"
        "</project>\n"
    )
