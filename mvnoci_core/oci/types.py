"""OCI client datatypes and configuration."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class OciClientConfig:
    timeout_seconds: float = 30.0
    max_retries: int = 2
    backoff_seconds: float = 0.2
    insecure: bool = False
    allowlist_domains: tuple[str, ...] = ()
    max_artifact_size_bytes: int | None = None
    username: str | None = None
    password: str | None = None
    token: str | None = None


@dataclass(frozen=True)
class RegistryConfig:
    """Where a coordinate lives and how to reach it.

    ``url`` is a registry base URL such as ``https://ghcr.io/acme/maven``; the
    path after the host becomes the namespace prefix of every reference.
    """

    url: str
    client: OciClientConfig = field(default_factory=OciClientConfig)
