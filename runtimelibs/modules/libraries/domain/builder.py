"""Builder that accumulates descriptor state from code, XML or a direct URL."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from typing import Dict, List, Optional

from runtimelibs.modules.libraries.domain.descriptor import Descriptor, RewriteRule
from runtimelibs.modules.libraries.util.constants import AIKAR, JCENTER, JITPACK, MAVEN_CENTRAL
from runtimelibs.modules.libraries.util.exceptions import IncompleteDescriptor, MalformedCoordinateDocument

_COORDINATE_TAGS = ("groupId", "artifactId", "version")


class DescriptorBuilder:
    """Mutable accumulator producing an immutable :class:`Descriptor`.

    Three entry points converge here: plain construction followed by the
    ``set_*`` calls, :meth:`parse_xml` for a Maven coordinate document and
    :meth:`from_url` for a direct download. ``build()`` validates the result.
    """

    def __init__(self) -> None:
        self.group: Optional[str] = None
        self.artifact: Optional[str] = None
        self.version: Optional[str] = None
        self.source_repository: str = MAVEN_CENTRAL
        self.direct_url: Optional[str] = None
        self._rules: List[RewriteRule] = []

    @classmethod
    def from_url(cls, url: str) -> "DescriptorBuilder":
        return cls().set_direct_url(url)

    @classmethod
    def parse_xml(cls, document: str) -> "DescriptorBuilder":
        """Read groupId/artifactId/version from a Maven ``<dependency>`` snippet or POM."""
        try:
            root = ET.fromstring(document.strip())
        except ET.ParseError as exc:
            raise MalformedCoordinateDocument(f"failed to parse XML: {exc}") from exc

        values: Dict[str, str] = {}
        for element in root.iter():
            tag = _local_name(element.tag)
            if tag in _COORDINATE_TAGS and tag not in values:
                values[tag] = (element.text or "").strip()

        missing = [tag for tag in _COORDINATE_TAGS if not values.get(tag)]
        if missing:
            raise MalformedCoordinateDocument(
                f"coordinate document is missing {', '.join(missing)}"
            )
        return (
            cls()
            .set_group(values["groupId"])
            .set_artifact(values["artifactId"])
            .set_version(values["version"])
        )

    def set_group(self, group: str) -> "DescriptorBuilder":
        self.group = _require(group, "groupId")
        return self

    def set_artifact(self, artifact: str) -> "DescriptorBuilder":
        self.artifact = _require(artifact, "artifactId")
        return self

    def set_version(self, version: str) -> "DescriptorBuilder":
        self.version = _require(version, "version")
        return self

    def set_version_numbers(self, *numbers: int) -> "DescriptorBuilder":
        return self.set_version(".".join(str(number) for number in numbers))

    def set_source_repository(self, repository: str) -> "DescriptorBuilder":
        self.source_repository = _require(repository, "repository")
        return self

    def set_direct_url(self, url: str) -> "DescriptorBuilder":
        self.direct_url = _require(url, "url")
        return self

    def add_rewrite_rule(self, rule: RewriteRule) -> "DescriptorBuilder":
        if rule is None:
            raise ValueError("relocation is None")
        if rule not in self._rules:
            self._rules.append(rule)
        return self

    def maven_central(self) -> "DescriptorBuilder":
        return self.set_source_repository(MAVEN_CENTRAL)

    def jitpack(self) -> "DescriptorBuilder":
        return self.set_source_repository(JITPACK)

    def jcenter(self) -> "DescriptorBuilder":
        return self.set_source_repository(JCENTER)

    def aikar(self) -> "DescriptorBuilder":
        return self.set_source_repository(AIKAR)

    def build(self) -> Descriptor:
        missing = []
        if not _present(self.artifact):
            missing.append("artifactId")
        if not _present(self.version):
            missing.append("version")
        if not _present(self.group) and not _present(self.direct_url):
            missing.append("groupId or url")
        if missing:
            raise IncompleteDescriptor(missing)

        return Descriptor(
            group=(self.group or "").strip(),
            artifact=str(self.artifact).strip(),
            version=str(self.version).strip(),
            source_repository=self.source_repository,
            direct_url=self.direct_url.strip() if self.direct_url else None,
            rewrite_rules=frozenset(self._rules),
        )


def _require(value: str, name: str) -> str:
    if value is None:
        raise ValueError(f"{name} is None")
    return value


def _present(value: Optional[str]) -> bool:
    return bool(value and value.strip())


def _local_name(tag: object) -> str:
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1]
