"""Builtin ``mvnoci`` commands; importing this package registers them."""

from .publish import PublishCommand
from .resolve import ExistsCommand, RefCommand, ResolveCommand

__all__ = ["PublishCommand", "ResolveCommand", "ExistsCommand", "RefCommand"]
