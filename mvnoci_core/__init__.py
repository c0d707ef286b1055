"""Publish and resolve Maven artifacts through OCI registries."""

__version__ = "0.1.0"
