"""Mapping between Maven group identifiers and OCI repository path segments.

Registry path components must be lowercase and only allow a small set of
separators, while Maven group ids are dotted and often mixed-case. The mapping
is deterministic but lossy: characters outside the registry alphabet are
dropped rather than escaped, so distinct group ids may share a segment
(``com.example`` and ``com-example`` both become ``com-example``) and
:func:`reverse` only restores the dotted separators.

Examples::

    com.example          -> com-example
    Com.EXAMPLE.Test     -> com-example-test
    com.example@version  -> com-exampleversion
    -invalid.start       -> invalid-start
"""

from __future__ import annotations

import re

from mvnoci_core.errors import InvalidInputError

_SEPARATOR_RUN_RE = re.compile(r"[._\-\s]+")
_ILLEGAL_CHARS_RE = re.compile(r"[^a-z0-9-]")
_HYPHEN_RUN_RE = re.compile(r"-{2,}")
_VALID_SEGMENT_RE = re.compile(r"[a-z0-9._-]+")
_SEPARATORS = ("-", "_", ".")


def sanitize(group_id: str | None) -> str:
    if group_id is None or not group_id.strip():
        raise InvalidInputError("group id cannot be null or empty")
    value = _SEPARATOR_RUN_RE.sub("-", group_id.lower())
    value = _ILLEGAL_CHARS_RE.sub("", value)
    # dropped characters can leave separators next to each other
    value = _HYPHEN_RUN_RE.sub("-", value).strip("-")
    if not value:
        raise InvalidInputError(f"group id results in empty string after sanitization: {group_id!r}")
    return value


def reverse(segment: str | None) -> str:
    """Best-effort inverse of :func:`sanitize`; only separators are restored."""
    if segment is None or not segment.strip():
        raise InvalidInputError("sanitized group cannot be null or empty")
    return segment.replace("-", ".")


def is_valid(segment: str | None) -> bool:
    if not segment:
        return False
    if not _VALID_SEGMENT_RE.fullmatch(segment):
        return False
    return not segment.startswith(_SEPARATORS) and not segment.endswith(_SEPARATORS)


def group_path(group_id: str) -> str:
    """Directory form of a group id, as used by Maven repository layouts."""
    if not group_id or not group_id.strip():
        raise InvalidInputError("group id cannot be null or empty")
    return "/".join(part for part in group_id.strip().split(".") if part)
