"""Command registration for the ``mvnoci`` CLI."""

from __future__ import annotations

from argparse import ArgumentParser
from typing import Any, Callable, Protocol, TypeVar


class Command(Protocol):
    name: str
    help: str

    @classmethod
    def configure(cls, parser: ArgumentParser) -> None: ...

    def run(self, argv: Any) -> int: ...


_C = TypeVar("_C")
_REGISTRY: dict[str, type] = {}


def mvnocicommand(*, name: str, help: str = "") -> Callable[[type[_C]], type[_C]]:
    def decorator(cls: type[_C]) -> type[_C]:
        if name in _REGISTRY and _REGISTRY[name] is not cls:
            raise ValueError(f"command '{name}' is already registered")
        setattr(cls, "name", name)
        setattr(cls, "help", help)
        _REGISTRY[name] = cls
        return cls

    return decorator


def registered_commands() -> dict[str, type]:
    return dict(sorted(_REGISTRY.items()))
