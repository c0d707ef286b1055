"""Error types shared by the Maven/OCI bridge."""

from __future__ import annotations


class InvalidInputError(ValueError):
    """Malformed coordinate, group identifier, registry URL or manifest payload."""


class EmptyBundleError(ValueError):
    """Raised when there is nothing to publish."""


class OciError(Exception):
    """Base class for registry transport failures."""


class OciCommandError(OciError):
    """An ORAS invocation failed or produced unusable output."""


class OciNotFoundError(OciCommandError):
    """The registry reported a missing manifest, blob or repository."""


class OciSecurityError(OciError):
    """A reference or extraction path violated the configured policy."""


class PublishError(OciError):
    """Publishing a bundle failed; ``__cause__`` carries the transport error."""
