"""Resolution of published coordinates into local Maven layouts."""

from .cache import MavenLocalCache, default_cache_root, registry_cache_key
from .resolver import ResolutionReport, ResolutionState, Resolver, plan_files

__all__ = [
    "MavenLocalCache",
    "default_cache_root",
    "registry_cache_key",
    "ResolutionReport",
    "ResolutionState",
    "Resolver",
    "plan_files",
]
