"""Guards around ORAS invocations.

Registry hosts are checked against the configured allowlist before any
command runs, credentials never reach the debug log, and file names taken
from registry content are confined to the directory they are written into.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Sequence

from mvnoci_core.errors import OciSecurityError

MASK = "***"
_SECRET_OPTIONS = frozenset({"--password", "--identity-token", "--token"})
_SECRET_WORDS = ("password", "token", "authorization", "bearer")
_URL_USERINFO_RE = re.compile(r"(?P<prefix>[A-Za-z][A-Za-z0-9+.-]*://[^:/@\s]+):[^@/\s]+@")


def registry_host(ref: str) -> str:
    """Lowercased host of a repository or reference, without its port."""
    host = ref.strip().partition("/")[0].partition(":")[0].strip().lower()
    if not host:
        raise OciSecurityError(f"cannot determine registry host of {ref!r}")
    return host


def assert_allowlisted(ref: str, allowlist_domains: Sequence[str]) -> None:
    domains = [domain.strip().lower().lstrip(".") for domain in allowlist_domains if domain.strip()]
    if not domains:
        return
    host = registry_host(ref)
    if any(host == domain or host.endswith(f".{domain}") for domain in domains):
        return
    raise OciSecurityError(f"registry host '{host}' is not in OCI allowlist")


def confined_path(root: Path, name: str) -> Path:
    """Resolve ``name`` strictly below ``root``."""
    base = root.resolve()
    target = base.joinpath(name).resolve()
    if target == base or not target.is_relative_to(base):
        raise OciSecurityError(f"refusing to write {name!r} outside {root}")
    return target


def redact_command(command: Sequence[str]) -> list[str]:
    """Copy of ``command`` safe to log: secret option values and URL passwords are masked."""
    redacted: list[str] = []
    mask_value = False
    for arg in command:
        if mask_value:
            redacted.append(MASK)
            mask_value = False
            continue
        option, has_value, _ = arg.partition("=")
        if option.lower() in _SECRET_OPTIONS:
            if has_value:
                redacted.append(f"{option}={MASK}")
            else:
                redacted.append(arg)
                mask_value = True
            continue
        if any(word in arg.lower() for word in _SECRET_WORDS):
            redacted.append(MASK)
            continue
        redacted.append(_URL_USERINFO_RE.sub(rf"\g<prefix>:{MASK}@", arg))
    return redacted
