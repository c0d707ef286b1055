"""Configuration loading for the CLI: TOML registry settings and YAML publication descriptors."""

from __future__ import annotations

import logging
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from mvnoci_core.errors import InvalidInputError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.oci.types import OciClientConfig

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path(".mvnoci") / "config.toml"
DEFAULT_DESCRIPTOR_NAME = "mvnoci.yml"


@dataclass(frozen=True)
class PublicationDescriptor:
    coordinate: MavenCoordinate
    files: tuple[Path, ...]


def load_oci_config(config_path: Path | None) -> dict[str, Any]:
    """Return the ``[oci]`` table of ``config_path``; missing or unreadable files yield ``{}``."""
    path = config_path or DEFAULT_CONFIG_PATH
    if not path.exists():
        return {}
    try:
        payload = tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError) as exc:
        logger.warning("ignoring unreadable config %s: %s", path, exc)
        return {}
    section = payload.get("oci")
    return section if isinstance(section, dict) else {}


def client_config_from(config: dict[str, Any], *, insecure: bool = False) -> OciClientConfig:
    return OciClientConfig(
        timeout_seconds=float(config.get("timeout_seconds", 30.0)),
        max_retries=int(config.get("max_retries", 2)),
        backoff_seconds=float(config.get("backoff_seconds", 0.2)),
        insecure=bool(insecure or config.get("insecure", False)),
        allowlist_domains=tuple(str(item) for item in config.get("allowlist_domains", []) if str(item).strip()),
        max_artifact_size_bytes=(
            int(config["max_artifact_size_bytes"]) if config.get("max_artifact_size_bytes") is not None else None
        ),
        username=string_or_none(config.get("username")),
        password=string_or_none(config.get("password")),
        token=string_or_none(config.get("token")),
    )


def load_publication_descriptor(path: Path) -> PublicationDescriptor:
    """Read a YAML descriptor such as::

        groupId: com.example
        artifactId: my-lib
        version: 1.0.0
        files:
          - build/libs/my-lib-1.0.0.jar
          - build/publications/maven/pom-default.xml

    Relative file paths are resolved against the descriptor's directory.
    """
    if not path.is_file():
        raise InvalidInputError(f"publication descriptor not found: {path}")
    try:
        payload = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as exc:
        raise InvalidInputError(f"invalid publication descriptor {path}: {exc}") from exc
    if not isinstance(payload, dict):
        raise InvalidInputError(f"publication descriptor {path} must be a mapping")

    coordinate = MavenCoordinate(
        group_id=str(payload.get("groupId") or "").strip(),
        artifact_id=str(payload.get("artifactId") or "").strip(),
        version=str(payload.get("version") or "").strip(),
    )
    raw_files = payload.get("files") or []
    if not isinstance(raw_files, list):
        raise InvalidInputError(f"'files' in {path} must be a list")
    base_dir = path.parent
    files = tuple((base_dir / str(item)).resolve() for item in raw_files if str(item).strip())
    return PublicationDescriptor(coordinate=coordinate, files=files)


def string_or_none(value: Any) -> str | None:
    if value is None:
        return None
    data = str(value).strip()
    return data if data else None
