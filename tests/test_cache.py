from __future__ import annotations

from pathlib import Path

from mvnoci_core.maven import MavenCoordinate
from mvnoci_core.oci import RegistryConfig, publish_files
from mvnoci_core.sources import MavenLocalCache, Resolver, registry_cache_key
from mvnoci_core.sources.cache import RESOLVED_MARKER

REGISTRY = "https://registry.example.com/maven"
COORDINATE = MavenCoordinate("com.example", "a", "1.0")


def test_registry_cache_key_is_stable() -> None:
    key = registry_cache_key(REGISTRY)
    assert key == registry_cache_key(REGISTRY)
    assert len(key) == 8
    assert key != registry_cache_key("https://other.example.com/maven")


def test_materialize_writes_maven_repository_tree(fake_registry, artifact_files: list[Path], tmp_path: Path) -> None:
    publish_files(REGISTRY, COORDINATE, artifact_files, fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    resolver = Resolver(client_factory=lambda config: fake_registry)

    assert cache.has_artifact(COORDINATE) is False
    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY)) is True

    directory = cache.artifact_dir(COORDINATE)
    assert directory == (tmp_path / "cache").resolve() / "repositories" / registry_cache_key(REGISTRY) / "com/example/a/1.0"
    assert (directory / "a-1.0.jar").read_bytes() == artifact_files[0].read_bytes()
    assert (directory / "a-1.0.pom").read_bytes() == artifact_files[1].read_bytes()
    assert cache.has_artifact(COORDINATE) is True


def test_materialize_uses_cached_copy(fake_registry, artifact_files: list[Path], tmp_path: Path) -> None:
    publish_files(REGISTRY, COORDINATE, artifact_files, fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    resolver = Resolver(client_factory=lambda config: fake_registry)
    cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY))
    fetches = fake_registry.count("get_manifest")

    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY)) is True
    assert fake_registry.count("get_manifest") == fetches


def test_materialize_writes_minimal_pom_when_none_published(
    fake_registry, artifact_files: list[Path], tmp_path: Path
) -> None:
    publish_files(REGISTRY, COORDINATE, artifact_files[:1], fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")

    assert cache.materialize(COORDINATE, Resolver(client_factory=lambda config: fake_registry), RegistryConfig(url=REGISTRY))

    pom = (cache.artifact_dir(COORDINATE) / "a-1.0.pom").read_text(encoding="utf-8")
    assert "<groupId>com.example</groupId>" in pom
    assert "<artifactId>a</artifactId>" in pom
    assert "<version>1.0</version>" in pom
    assert cache.has_artifact(COORDINATE)


def test_materialize_miss_leaves_no_directory(fake_registry, tmp_path: Path) -> None:
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    resolver = Resolver(client_factory=lambda config: fake_registry)
    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY)) is False
    assert not cache.artifact_dir(COORDINATE).exists()


def test_clear_removes_registry_tree(fake_registry, artifact_files: list[Path], tmp_path: Path) -> None:
    publish_files(REGISTRY, COORDINATE, artifact_files, fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    cache.materialize(COORDINATE, Resolver(client_factory=lambda config: fake_registry), RegistryConfig(url=REGISTRY))

    cache.clear()
    assert not cache.repository_dir.exists()
    assert cache.has_artifact(COORDINATE) is False


def test_non_jar_primary_is_a_cache_hit(fake_registry, tmp_path: Path) -> None:
    archive = tmp_path / "dist.tar.gz"
    archive.write_bytes(b"\x1f\x8b archive")
    publish_files(REGISTRY, COORDINATE, [archive], fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    resolver = Resolver(client_factory=lambda config: fake_registry)

    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY))
    fetches = fake_registry.count("get_manifest")
    assert cache.has_artifact(COORDINATE)
    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY))
    assert fake_registry.count("get_manifest") == fetches
    assert (cache.artifact_dir(COORDINATE) / "a-1.0.tar.gz").read_bytes() == b"\x1f\x8b archive"


def test_pom_only_publication_is_a_cache_hit(fake_registry, artifact_files: list[Path], tmp_path: Path) -> None:
    publish_files(REGISTRY, COORDINATE, artifact_files[1:], fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    resolver = Resolver(client_factory=lambda config: fake_registry)

    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY))
    assert cache.has_artifact(COORDINATE)
    marker = (cache.artifact_dir(COORDINATE) / RESOLVED_MARKER).read_text(encoding="utf-8")
    assert f"a-1.0.pom>{registry_cache_key(REGISTRY)}=" in marker


def test_missing_recorded_file_is_a_cache_miss(fake_registry, artifact_files: list[Path], tmp_path: Path) -> None:
    publish_files(REGISTRY, COORDINATE, artifact_files, fake_registry)
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    resolver = Resolver(client_factory=lambda config: fake_registry)
    cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY))

    (cache.artifact_dir(COORDINATE) / "a-1.0.jar").unlink()
    assert cache.has_artifact(COORDINATE) is False
    assert cache.materialize(COORDINATE, resolver, RegistryConfig(url=REGISTRY))
    assert (cache.artifact_dir(COORDINATE) / "a-1.0.jar").exists()


def test_files_without_record_are_not_trusted(tmp_path: Path) -> None:
    cache = MavenLocalCache(REGISTRY, tmp_path / "cache")
    directory = cache.artifact_dir(COORDINATE)
    directory.mkdir(parents=True)
    (directory / "a-1.0.jar").write_bytes(b"jar")
    (directory / "a-1.0.pom").write_text("<project/>", encoding="utf-8")
    assert cache.has_artifact(COORDINATE) is False
