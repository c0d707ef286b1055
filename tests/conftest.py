from __future__ import annotations

import copy
import hashlib
import json
from pathlib import Path
from typing import Any, Mapping

import pytest

from mvnoci_core.errors import OciCommandError, OciNotFoundError


class FakeRegistry:
    """In-memory stand-in for the registry client boundary."""

    def __init__(self) -> None:
        self.blobs: dict[tuple[str, str], bytes] = {}
        self.manifests: dict[str, dict[str, Any]] = {}
        self.calls: list[tuple[str, str]] = []
        self.fail_operations: set[str] = set()
        self.fail_after_puts: int | None = None
        self.missing_blobs: set[str] = set()

    def _check(self, operation: str) -> None:
        if operation in self.fail_operations:
            raise OciCommandError(f"{operation} failed: connection refused")

    def blob_exists(self, repository: str, digest: str) -> bool:
        self.calls.append(("blob_exists", digest))
        self._check("blob_exists")
        return (repository, digest) in self.blobs

    def put_blob(self, repository: str, data: bytes, media_type: str) -> str:
        self.calls.append(("put_blob", media_type))
        self._check("put_blob")
        if self.fail_after_puts is not None:
            puts = sum(1 for name, _ in self.calls if name == "put_blob")
            if puts > self.fail_after_puts:
                raise OciCommandError("put_blob failed: connection reset")
        digest = "sha256:" + hashlib.sha256(data).hexdigest()
        self.blobs[(repository, digest)] = bytes(data)
        return digest

    def get_blob(self, repository: str, digest: str) -> bytes:
        self.calls.append(("get_blob", digest))
        self._check("get_blob")
        if digest in self.missing_blobs or (repository, digest) not in self.blobs:
            raise OciNotFoundError(f"blob {digest} not found")
        return self.blobs[(repository, digest)]

    def put_manifest(self, ref: str, manifest: Mapping[str, Any]) -> str:
        self.calls.append(("put_manifest", ref))
        self._check("put_manifest")
        payload = json.dumps(manifest, sort_keys=True, separators=(",", ":")).encode("utf-8")
        self.manifests[ref] = json.loads(payload)
        return "sha256:" + hashlib.sha256(payload).hexdigest()

    def get_manifest(self, ref: str) -> dict[str, Any] | None:
        self.calls.append(("get_manifest", ref))
        self._check("get_manifest")
        manifest = self.manifests.get(ref)
        return copy.deepcopy(manifest) if manifest is not None else None

    def count(self, operation: str) -> int:
        return sum(1 for name, _ in self.calls if name == operation)


@pytest.fixture
def fake_registry() -> FakeRegistry:
    return FakeRegistry()


@pytest.fixture
def artifact_files(tmp_path: Path) -> list[Path]:
    build = tmp_path / "build"
    build.mkdir()
    jar = build / "a.jar"
    jar.write_bytes(b"PK\x03\x04jar-bytes\x00\x01")
    pom = build / "a.pom"
    pom.write_text("<project><artifactId>a</artifactId></project>\n", encoding="utf-8")
    return [jar, pom]
