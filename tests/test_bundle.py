from __future__ import annotations

import hashlib
from pathlib import Path

import pytest

from mvnoci_core.errors import EmptyBundleError, InvalidInputError
from mvnoci_core.maven import (
    MEDIATYPE_CHECKSUM,
    MEDIATYPE_GZIP,
    MEDIATYPE_JAR,
    MEDIATYPE_JSON,
    MEDIATYPE_OCTET_STREAM,
    MEDIATYPE_XML,
    ArtifactRole,
    MavenCoordinate,
)
from mvnoci_core.oci import bundle_artifacts

COORDINATE = MavenCoordinate("com.example", "a", "1.0")


def _write(root: Path, name: str, payload: bytes = b"payload") -> Path:
    path = root / name
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(payload)
    return path


def test_empty_input_is_rejected() -> None:
    with pytest.raises(EmptyBundleError):
        bundle_artifacts([], COORDINATE)


def test_only_checksum_inputs_count_as_empty(tmp_path: Path) -> None:
    with pytest.raises(EmptyBundleError):
        bundle_artifacts([_write(tmp_path, "x.jar.sha1", b"abc")], COORDINATE)


def test_jar_and_pom_produce_six_entries(artifact_files: list[Path]) -> None:
    jar, pom = artifact_files
    bundle = bundle_artifacts(artifact_files, COORDINATE)

    assert len(bundle) == 6
    assert [entry.filename for entry in bundle] == [
        "a-1.0.jar",
        "a-1.0.jar.sha1",
        "a-1.0.jar.md5",
        "a-1.0.pom",
        "a-1.0.pom.sha1",
        "a-1.0.pom.md5",
    ]
    assert [entry.role for entry in bundle] == [
        ArtifactRole.PRIMARY,
        ArtifactRole.CHECKSUM,
        ArtifactRole.CHECKSUM,
        ArtifactRole.DESCRIPTOR,
        ArtifactRole.CHECKSUM,
        ArtifactRole.CHECKSUM,
    ]
    assert bundle.entries[0].media_type == MEDIATYPE_JAR
    assert bundle.entries[3].media_type == MEDIATYPE_XML
    assert bundle.entries[0].digest == "sha256:" + hashlib.sha256(jar.read_bytes()).hexdigest()
    assert bundle.entries[0].size == len(jar.read_bytes())


def test_checksum_entries_hold_lowercase_hex(artifact_files: list[Path]) -> None:
    jar, _ = artifact_files
    bundle = bundle_artifacts(artifact_files, COORDINATE)
    primary = bundle.entries[0]
    sha1_entry, md5_entry = bundle.checksums_for(primary)

    assert sha1_entry.read_bytes() == hashlib.sha1(jar.read_bytes()).hexdigest().encode("ascii")
    assert md5_entry.read_bytes() == hashlib.md5(jar.read_bytes()).hexdigest().encode("ascii")
    assert not sha1_entry.read_bytes().endswith(b"\n")
    assert sha1_entry.media_type == MEDIATYPE_CHECKSUM
    assert sha1_entry.checksum_of is primary
    assert (sha1_entry.algorithm, md5_entry.algorithm) == ("sha1", "md5")
    assert sha1_entry.digest == "sha256:" + hashlib.sha256(sha1_entry.read_bytes()).hexdigest()


def test_entry_count_is_three_per_input(tmp_path: Path) -> None:
    files = [
        _write(tmp_path, "lib.jar"),
        _write(tmp_path, "lib.pom"),
        _write(tmp_path, "lib-sources.jar"),
        _write(tmp_path, "lib-javadoc.jar"),
    ]
    bundle = bundle_artifacts(files, COORDINATE)
    assert len(bundle) == 12
    assert len(bundle.originals) == 4


@pytest.mark.parametrize(
    ("name", "filename", "role", "media_type"),
    [
        ("lib-sources.jar", "a-1.0-sources.jar", ArtifactRole.SOURCES, MEDIATYPE_JAR),
        ("lib-javadoc.jar", "a-1.0-javadoc.jar", ArtifactRole.JAVADOC, MEDIATYPE_JAR),
        ("pom-default.xml", "a-1.0.pom", ArtifactRole.DESCRIPTOR, MEDIATYPE_XML),
        ("data.json", "a-1.0.json", ArtifactRole.PRIMARY, MEDIATYPE_JSON),
        ("dist.tar.gz", "a-1.0.tar.gz", ArtifactRole.PRIMARY, MEDIATYPE_GZIP),
        ("native.bin", "a-1.0.bin", ArtifactRole.PRIMARY, MEDIATYPE_OCTET_STREAM),
    ],
)
def test_classification(tmp_path: Path, name: str, filename: str, role: ArtifactRole, media_type: str) -> None:
    entry = bundle_artifacts([_write(tmp_path, name)], COORDINATE).entries[0]
    assert entry.filename == filename
    assert entry.role is role
    assert entry.media_type == media_type


def test_missing_file_is_rejected(tmp_path: Path) -> None:
    with pytest.raises(InvalidInputError, match="not found"):
        bundle_artifacts([tmp_path / "missing.jar"], COORDINATE)


def test_two_inputs_for_one_layout_name_are_rejected(tmp_path: Path) -> None:
    files = [_write(tmp_path, "one.jar"), _write(tmp_path, "two.jar")]
    with pytest.raises(InvalidInputError, match="a-1.0.jar"):
        bundle_artifacts(files, COORDINATE)


def test_authored_checksums_are_regenerated(tmp_path: Path) -> None:
    jar = _write(tmp_path, "x.jar", b"jar")
    stale = _write(tmp_path, "x.jar.sha1", b"0000")
    bundle = bundle_artifacts([jar, stale], COORDINATE)
    assert len(bundle) == 3
    assert bundle.entries[1].read_bytes() == hashlib.sha1(b"jar").hexdigest().encode("ascii")


def test_bundling_does_not_touch_the_filesystem(artifact_files: list[Path]) -> None:
    build_dir = artifact_files[0].parent
    before = sorted(path.name for path in build_dir.iterdir())
    bundle_artifacts(artifact_files, COORDINATE)
    assert sorted(path.name for path in build_dir.iterdir()) == before


def test_write_checksums(artifact_files: list[Path], tmp_path: Path) -> None:
    bundle = bundle_artifacts(artifact_files, COORDINATE)
    written = bundle.write_checksums(tmp_path / "checksums")
    assert sorted(path.name for path in written) == [
        "a-1.0.jar.md5",
        "a-1.0.jar.sha1",
        "a-1.0.pom.md5",
        "a-1.0.pom.sha1",
    ]
    jar_sha1 = tmp_path / "checksums" / "a-1.0.jar.sha1"
    assert jar_sha1.read_bytes() == hashlib.sha1(artifact_files[0].read_bytes()).hexdigest().encode("ascii")


def test_extensionless_primary_keeps_no_suffix(tmp_path: Path) -> None:
    bundle = bundle_artifacts([_write(tmp_path, "LICENSE", b"Apache-2.0")], COORDINATE)
    primary = bundle.entries[0]
    assert primary.filename == "a-1.0"
    assert primary.extension == ""
    assert primary.media_type == MEDIATYPE_OCTET_STREAM
    assert [entry.filename for entry in bundle.checksums_for(primary)] == ["a-1.0.sha1", "a-1.0.md5"]
