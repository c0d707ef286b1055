"""Registry client boundary and its ORAS CLI implementation."""

from __future__ import annotations

import json
import logging
import re
import subprocess
import tempfile
import time
from pathlib import Path
from typing import Any, Mapping, Protocol

from mvnoci_core.errors import OciCommandError, OciNotFoundError

from .bundle import sha256_digest
from .manifest import OCI_MANIFEST_MEDIATYPE
from .security import assert_allowlisted, redact_command
from .types import OciClientConfig

logger = logging.getLogger(__name__)
_DIGEST_RE = re.compile(r"sha256:[a-f0-9]{64}")
# registry error codes and status text; refs and digests are removed before matching
_NOT_FOUND_RE = re.compile(r"manifest_unknown|blob_unknown|name_unknown|\bnot found\b|(?<![\w.:-])404(?![\w.-])")
_ANY_DIGEST_RE = re.compile(r"[a-z0-9]+:[a-f0-9]{32,}")


class RegistryClient(Protocol):
    """Operations the publisher and resolver need from a registry.

    ``repository`` is a reference without tag or digest
    (``host/ns/group/artifact``); ``ref`` is a tagged reference.
    """

    def blob_exists(self, repository: str, digest: str) -> bool: ...

    def put_blob(self, repository: str, data: bytes, media_type: str) -> str: ...

    def get_blob(self, repository: str, digest: str) -> bytes: ...

    def put_manifest(self, ref: str, manifest: Mapping[str, Any]) -> str: ...

    def get_manifest(self, ref: str) -> dict[str, Any] | None: ...


class OciClient:
    """Thin ORAS CLI wrapper with retries and security checks."""

    def __init__(self, config: OciClientConfig | None = None) -> None:
        self.config = config or OciClientConfig()

    def blob_exists(self, repository: str, digest: str) -> bool:
        assert_allowlisted(repository, self.config.allowlist_domains)
        try:
            self._run(["oras", "blob", "fetch", "--descriptor", f"{repository}@{digest}"])
        except OciNotFoundError:
            return False
        return True

    def put_blob(self, repository: str, data: bytes, media_type: str) -> str:
        assert_allowlisted(repository, self.config.allowlist_domains)
        expected = sha256_digest(data)
        with tempfile.TemporaryDirectory(prefix="mvnoci-blob-") as tmp:
            blob_path = Path(tmp) / "blob.bin"
            blob_path.write_bytes(data)
            result = self._run(["oras", "blob", "push", "--media-type", media_type, repository, str(blob_path)])
        digest = _extract_digest(result.stdout) or _extract_digest(result.stderr) or expected
        if digest != expected:
            raise OciCommandError(f"registry stored blob as {digest}, expected {expected}")
        return digest

    def get_blob(self, repository: str, digest: str) -> bytes:
        assert_allowlisted(repository, self.config.allowlist_domains)
        if not digest:
            raise OciCommandError("missing blob digest")
        with tempfile.TemporaryDirectory(prefix="mvnoci-blob-") as tmp:
            output_path = Path(tmp) / "blob.bin"
            self._run(["oras", "blob", "fetch", "--output", str(output_path), f"{repository}@{digest}"])
            if not output_path.exists():
                raise OciCommandError(f"oras did not write blob {digest}")
            self._enforce_size_limit(output_path.stat().st_size)
            return output_path.read_bytes()

    def put_manifest(self, ref: str, manifest: Mapping[str, Any]) -> str:
        assert_allowlisted(ref, self.config.allowlist_domains)
        payload = json.dumps(manifest, ensure_ascii=False, sort_keys=True, separators=(",", ":")).encode("utf-8")
        with tempfile.TemporaryDirectory(prefix="mvnoci-manifest-") as tmp:
            manifest_path = Path(tmp) / "manifest.json"
            manifest_path.write_bytes(payload)
            result = self._run(
                ["oras", "manifest", "push", "--media-type", OCI_MANIFEST_MEDIATYPE, ref, str(manifest_path)]
            )
        return _extract_digest(result.stdout) or _extract_digest(result.stderr) or sha256_digest(payload)

    def get_manifest(self, ref: str) -> dict[str, Any] | None:
        assert_allowlisted(ref, self.config.allowlist_domains)
        try:
            result = self._run(["oras", "manifest", "fetch", ref])
        except OciNotFoundError:
            return None
        payload = _parse_json_document(result.stdout)
        if not isinstance(payload, dict):
            raise OciCommandError("unable to parse OCI manifest payload")
        return payload

    def _run(self, command: list[str]) -> subprocess.CompletedProcess[str]:
        if self.config.insecure:
            command = [*command, "--insecure"]
        if self.config.username and self.config.password:
            command = [*command, "--username", self.config.username, "--password", self.config.password]
        elif self.config.token:
            command = [*command, "--identity-token", self.config.token]

        timeout = max(float(self.config.timeout_seconds), 1.0)
        retries = max(int(self.config.max_retries), 1)
        backoff = max(float(self.config.backoff_seconds), 0.0)

        last_error: Exception | None = None
        for attempt in range(1, retries + 1):
            redacted = " ".join(redact_command(command))
            try:
                logger.debug("oci command attempt=%s/%s cmd=%s", attempt, retries, redacted)
                result = subprocess.run(
                    command,
                    check=False,
                    capture_output=True,
                    text=True,
                    timeout=timeout,
                )
            except FileNotFoundError as exc:
                raise OciCommandError(
                    "oras CLI not found. Install ORAS and ensure it is available in PATH."
                ) from exc
            except subprocess.TimeoutExpired as exc:
                last_error = exc
                if attempt >= retries:
                    raise OciCommandError(f"oras command timed out after {timeout:.1f}s") from exc
            else:
                if result.returncode == 0:
                    return result
                if _is_not_found(result.stderr):
                    raise OciNotFoundError(_format_failure(command, result.returncode, result.stderr))
                last_error = OciCommandError(_format_failure(command, result.returncode, result.stderr))
                if attempt >= retries:
                    raise last_error
            time.sleep(min(backoff * attempt, 2.0))
        raise OciCommandError("oras command failed after retries") from last_error

    def _enforce_size_limit(self, size: int) -> None:
        limit = self.config.max_artifact_size_bytes
        if limit is None:
            return
        if size > limit:
            raise OciCommandError(f"artifact size {size} exceeds configured limit {limit} bytes")


def _extract_digest(text: str | None) -> str | None:
    if not text:
        return None
    match = _DIGEST_RE.search(text)
    if not match:
        return None
    return match.group(0)


def _is_not_found(stderr: str | None) -> bool:
    detail = _ANY_DIGEST_RE.sub("", (stderr or "").lower())
    words = " ".join(word for word in detail.split() if "/" not in word and "@" not in word)
    return bool(_NOT_FOUND_RE.search(words))


def _format_failure(command: list[str], code: int, stderr: str | None) -> str:
    redacted = " ".join(redact_command(command))
    detail = (stderr or "").strip()
    if detail:
        return f"oras command failed (exit={code}) cmd='{redacted}' err='{detail}'"
    return f"oras command failed (exit={code}) cmd='{redacted}'"


def _parse_json_document(payload: str | None) -> Any:
    text = (payload or "").strip()
    if not text:
        return None
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise OciCommandError("invalid JSON payload from oras command") from exc
