"""Argument parsing and dispatch for ``mvnoci``."""

from __future__ import annotations

import logging
from argparse import ArgumentParser
from typing import Sequence

from mvnoci_core import __version__
from mvnoci_core.api import registered_commands

logger = logging.getLogger(__name__)


def build_parser() -> ArgumentParser:
    import mvnoci_core.builtins  # noqa: F401  registers the builtin commands

    parser = ArgumentParser(prog="mvnoci", description="Publish and resolve Maven artifacts via OCI registries")
    parser.add_argument("--version", action="version", version=f"mvnoci {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", metavar="<command>")
    for name, command_cls in registered_commands().items():
        sub = subparsers.add_parser(name, help=getattr(command_cls, "help", ""))
        command_cls.configure(sub)
        sub.set_defaults(_command_cls=command_cls)
    return parser


def configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(list(argv) if argv is not None else None)
    configure_logging(bool(args.verbose))
    command_cls = getattr(args, "_command_cls", None)
    if command_cls is None:
        parser.print_help()
        return 1
    logger.debug("running command=%s", args.command)
    return int(command_cls().run(args))
