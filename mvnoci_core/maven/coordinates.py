"""Maven coordinate value type."""

from __future__ import annotations

import re
from dataclasses import dataclass

from mvnoci_core.errors import InvalidInputError

_ARTIFACT_ID_RE = re.compile(r"[A-Za-z0-9._-]+")


@dataclass(frozen=True)
class MavenCoordinate:
    group_id: str
    artifact_id: str
    version: str

    def __post_init__(self) -> None:
        if not isinstance(self.group_id, str) or not self.group_id.strip():
            raise InvalidInputError("maven coordinate requires a groupId")
        if not isinstance(self.artifact_id, str) or not _ARTIFACT_ID_RE.fullmatch(self.artifact_id):
            raise InvalidInputError(f"invalid maven artifactId: {self.artifact_id!r}")
        if not isinstance(self.version, str) or not self.version.strip():
            raise InvalidInputError("maven coordinate requires a version")

    @classmethod
    def parse(cls, value: str) -> "MavenCoordinate":
        parts = [part.strip() for part in str(value or "").split(":")]
        if len(parts) != 3 or not all(parts):
            raise InvalidInputError(f"expected groupId:artifactId:version, got {value!r}")
        return cls(group_id=parts[0], artifact_id=parts[1], version=parts[2])

    @property
    def base_name(self) -> str:
        return f"{self.artifact_id}-{self.version}"

    def __str__(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.version}"
