"""Shared plumbing for builtin commands."""

from __future__ import annotations

from argparse import ArgumentParser
from pathlib import Path
from typing import Any

from mvnoci_core.config import client_config_from, load_oci_config
from mvnoci_core.errors import InvalidInputError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.oci.types import RegistryConfig


class _RegistryCommand:
    name = ""

    @classmethod
    def add_registry_arguments(cls, parser: ArgumentParser) -> None:
        parser.add_argument("--config", help="TOML file with an [oci] table (default: .mvnoci/config.toml)")
        parser.add_argument("--registry", help="Registry base URL, e.g. https://ghcr.io/acme/maven")
        parser.add_argument("--insecure", action="store_true", help="Allow plain HTTP / unverified TLS")

    @classmethod
    def add_coordinate_argument(cls, parser: ArgumentParser, *, required: bool = True) -> None:
        parser.add_argument("--coordinate", required=required, help="Maven coordinate groupId:artifactId:version")

    def say(self, message: str) -> None:
        print(f"[mvnoci:{self.name}] {message}")

    def load_config(self, argv: Any) -> dict[str, Any]:
        raw = str(getattr(argv, "config", "") or "").strip()
        return load_oci_config(Path(raw) if raw else None)

    def registry_config(self, argv: Any, config: dict[str, Any]) -> RegistryConfig:
        url = str(getattr(argv, "registry", "") or config.get("url") or "").strip()
        if not url:
            raise InvalidInputError("missing registry URL. Set --registry or [oci].url in the config file")
        return RegistryConfig(
            url=url,
            client=client_config_from(config, insecure=bool(getattr(argv, "insecure", False))),
        )

    def coordinate(self, argv: Any) -> MavenCoordinate:
        return MavenCoordinate.parse(str(getattr(argv, "coordinate", "") or ""))
