"""Builtin commands that read from an OCI registry."""

from __future__ import annotations

from argparse import ArgumentParser
from pathlib import Path
from typing import Any

from mvnoci_core.api import mvnocicommand
from mvnoci_core.oci import OciClient, RegistryConfig, build_reference
from mvnoci_core.sources import MavenLocalCache, Resolver

from .commands import _RegistryCommand


def _client_factory(config: RegistryConfig) -> OciClient:
    return OciClient(config.client)


@mvnocicommand(name="resolve", help="Download a published coordinate into a Maven layout")
class ResolveCommand(_RegistryCommand):
    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_registry_arguments(parser)
        cls.add_coordinate_argument(parser)
        target = parser.add_mutually_exclusive_group(required=True)
        target.add_argument("--dest", help="Write {artifactId}-{version}.* files into this directory")
        target.add_argument("--cache-dir", help="Materialize into a Maven repository tree under this directory")

    def run(self, argv: Any) -> int:
        try:
            config = self.load_config(argv)
            registry = self.registry_config(argv, config)
            coordinate = self.coordinate(argv)
        except ValueError as exc:
            self.say(str(exc))
            return 1

        resolver = Resolver(client_factory=_client_factory)
        cache_dir = str(getattr(argv, "cache_dir", "") or "").strip()
        if cache_dir:
            cache = MavenLocalCache(registry.url, Path(cache_dir))
            if not cache.materialize(coordinate, resolver, registry):
                self.say(f"unable to resolve {coordinate} from {registry.url}")
                return 1
            self.say(f"resolved {coordinate} -> {cache.artifact_dir(coordinate)}")
            return 0

        report = resolver.resolve_with_report(coordinate, registry, Path(str(argv.dest)))
        if not report.ok:
            self.say(f"unable to resolve {coordinate} from {registry.url} ({report.error})")
            return 1
        for path in report.files:
            self.say(f"wrote {path}")
        return 0


@mvnocicommand(name="exists", help="Check whether a coordinate is published")
class ExistsCommand(_RegistryCommand):
    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_registry_arguments(parser)
        cls.add_coordinate_argument(parser)

    def run(self, argv: Any) -> int:
        try:
            config = self.load_config(argv)
            registry = self.registry_config(argv, config)
            coordinate = self.coordinate(argv)
        except ValueError as exc:
            self.say(str(exc))
            return 1
        if Resolver(client_factory=_client_factory).exists(coordinate, registry):
            self.say(f"{coordinate} is published at {build_reference(registry.url, coordinate)}")
            return 0
        self.say(f"{coordinate} not found at {registry.url}")
        return 1


@mvnocicommand(name="ref", help="Print the registry reference of a coordinate")
class RefCommand(_RegistryCommand):
    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_registry_arguments(parser)
        cls.add_coordinate_argument(parser)

    def run(self, argv: Any) -> int:
        try:
            config = self.load_config(argv)
            registry = self.registry_config(argv, config)
            reference = build_reference(registry.url, self.coordinate(argv))
        except ValueError as exc:
            self.say(str(exc))
            return 1
        print(reference)
        return 0
