"""Builtin OCI publish command."""

from __future__ import annotations

import logging
from argparse import ArgumentParser
from pathlib import Path
from typing import Any

from mvnoci_core.api import mvnocicommand
from mvnoci_core.config import DEFAULT_DESCRIPTOR_NAME, load_publication_descriptor
from mvnoci_core.errors import EmptyBundleError, OciError
from mvnoci_core.maven.coordinates import MavenCoordinate
from mvnoci_core.oci import OciClient, OverwritePolicy, build_reference, bundle_artifacts, publish

from .commands import _RegistryCommand

logger = logging.getLogger(__name__)


@mvnocicommand(name="publish", help="Publish Maven artifact files to an OCI registry")
class PublishCommand(_RegistryCommand):
    @classmethod
    def configure(cls, parser: ArgumentParser) -> None:
        cls.add_registry_arguments(parser)
        cls.add_coordinate_argument(parser, required=False)
        parser.add_argument(
            "--descriptor",
            help=f"YAML publication descriptor (default: ./{DEFAULT_DESCRIPTOR_NAME} when no --coordinate is given)",
        )
        parser.add_argument(
            "--overwrite-policy",
            help="What to do when the version is already published: fail, override (default), skip",
        )
        parser.add_argument("--checksums-dir", help="Also write the generated .sha1/.md5 files to this directory")
        parser.add_argument("files", nargs="*", help="Artifact files (jar, pom, sources, javadoc, ...)")

    def run(self, argv: Any) -> int:
        try:
            config = self.load_config(argv)
            registry = self.registry_config(argv, config)
            coordinate, files = self._publication(argv)
            policy = OverwritePolicy.from_string(
                getattr(argv, "overwrite_policy", None) or config.get("overwrite_policy")
            )
            reference = build_reference(registry.url, coordinate)
            bundle = bundle_artifacts(files, coordinate)
        except EmptyBundleError:
            self.say("no artifact files to publish")
            return 1
        except ValueError as exc:
            self.say(str(exc))
            return 1

        checksums_dir = str(getattr(argv, "checksums_dir", "") or "").strip()
        try:
            if checksums_dir:
                for path in bundle.write_checksums(Path(checksums_dir)):
                    logger.debug("wrote checksum file %s", path)
            manifest = publish(coordinate, bundle, reference, OciClient(registry.client), overwrite_policy=policy)
        except (OSError, OciError) as exc:
            self.say(f"failed: {exc}")
            return 1

        self.say(f"published {coordinate} ({len(bundle)} files)")
        self.say(f"ref={reference}")
        if manifest.digest:
            self.say(f"digest={manifest.digest}")
        return 0

    def _publication(self, argv: Any) -> tuple[MavenCoordinate, list[Path]]:
        files = [Path(item) for item in getattr(argv, "files", None) or []]
        raw_coordinate = str(getattr(argv, "coordinate", "") or "").strip()
        raw_descriptor = str(getattr(argv, "descriptor", "") or "").strip()
        if raw_coordinate and not raw_descriptor:
            return MavenCoordinate.parse(raw_coordinate), files

        descriptor = load_publication_descriptor(Path(raw_descriptor or DEFAULT_DESCRIPTOR_NAME))
        coordinate = MavenCoordinate.parse(raw_coordinate) if raw_coordinate else descriptor.coordinate
        return coordinate, [*descriptor.files, *files]
