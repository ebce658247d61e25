"""Immutable descriptions of runtime libraries."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Optional

from runtimelibs.modules.libraries.util.constants import MAVEN_CENTRAL, PATTERN_ESCAPES


@dataclass(frozen=True)
class RewriteRule:
    """A namespace relocation: everything under ``match_pattern`` moves to ``replacement_prefix``."""

    match_pattern: str
    replacement_prefix: str

    def __post_init__(self) -> None:
        for name in ("match_pattern", "replacement_prefix"):
            value = getattr(self, name)
            if not value or not value.strip():
                raise ValueError(f"{name} must not be empty")
            if any(char in value for char in PATTERN_ESCAPES):
                raise ValueError(f"{name} still contains an escape character: {value!r}")

    @classmethod
    def declared(cls, pattern: str, new_pattern: str) -> "RewriteRule":
        """Build a rule from declaration text, where ``#`` and ``/`` stand for dots."""
        return cls(_unescape(pattern), _unescape(new_pattern))

    def __str__(self) -> str:
        return f"{self.match_pattern} -> {self.replacement_prefix}"


def _unescape(value: str) -> str:
    for char in PATTERN_ESCAPES:
        value = value.replace(char, ".")
    return value.strip()


class DescriptorKind(str, Enum):
    COORDINATES = "coordinates"
    DIRECT_URL = "direct_url"


@dataclass(frozen=True)
class Descriptor:
    """One external artifact to resolve, relocate and activate."""

    group: str
    artifact: str
    version: str
    source_repository: str = MAVEN_CENTRAL
    direct_url: Optional[str] = None
    rewrite_rules: FrozenSet[RewriteRule] = field(default_factory=frozenset)

    @property
    def kind(self) -> DescriptorKind:
        if self.direct_url:
            return DescriptorKind.DIRECT_URL
        return DescriptorKind.COORDINATES

    @property
    def has_rewrite_rules(self) -> bool:
        return bool(self.rewrite_rules)

    @property
    def coordinate_key(self) -> str:
        if self.group:
            return f"{self.group}:{self.artifact}:{self.version}"
        return f"{self.artifact}:{self.version}"

    @property
    def file_stem(self) -> str:
        return f"{self.artifact}-{self.version}"

    def derive_url(self) -> str:
        if self.kind is DescriptorKind.DIRECT_URL:
            return str(self.direct_url)
        base = self.source_repository.rstrip("/") + "/"
        group_path = self.group.replace(".", "/")
        return f"{base}{group_path}/{self.artifact}/{self.version}/{self.file_stem}.jar"

    def __str__(self) -> str:
        return self.coordinate_key
