"""Pydantic models for the ``runtime-libraries`` declaration section.

Structure::

    runtime-libraries:
      relocation-prefix: org.example.libs
      libraries-folder: libs
      delete-after-relocation: false
      global-relocations:
        "com#google#gson": gson
      libraries:
        caffeine:
          groupId: com.github.ben-manes.caffeine
          artifactId: caffeine
          version: 2.8.8
          relocation:
            "com#github#benmanes#caffeine": caffeine
        sidecar:
          url: https://example.org/sidecar.jar
          artifactId: sidecar
          version: "1.0"

Relocation keys are the namespace to move; ``#`` or ``/`` may stand in for
dots. Values are the sub-package placed under ``relocation-prefix``.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from runtimelibs.modules.libraries.domain import DescriptorBuilder
from runtimelibs.modules.libraries.util.constants import DEFAULT_LIBRARIES_FOLDER


def _as_text(value: Any) -> Any:
    # YAML turns ``version: 1.4`` into a float
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return value


def _relocation_table(value: Any) -> Any:
    if value is None:
        return {}
    if not isinstance(value, dict):
        return value
    table: Dict[str, str] = {}
    for key, target in value.items():
        pattern = "" if key is None else str(key).strip()
        replacement = _as_text(target)
        if not pattern or not isinstance(replacement, str) or not replacement.strip():
            raise ValueError(f"relocation {key!r}: {target!r} needs a non-blank pattern and target")
        table[pattern] = replacement.strip()
    return table


class RuntimeLibEntry(BaseModel):
    """One library under ``libraries``."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    xml: Optional[str] = None
    url: Optional[str] = None
    group_id: Optional[str] = Field(None, alias="groupId")
    artifact_id: Optional[str] = Field(None, alias="artifactId")
    version: Optional[str] = None
    repository: Optional[str] = None
    relocation: Dict[str, str] = Field(default_factory=dict)

    @field_validator("group_id", "artifact_id", "version", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        return _as_text(value)

    @field_validator("relocation", mode="before")
    @classmethod
    def _coerce_relocation(cls, value: Any) -> Any:
        return _relocation_table(value)

    def builder(self, default_repository: str) -> DescriptorBuilder:
        """Start a builder: ``url`` wins over ``xml``; explicit fields override both."""
        if self.url is not None:
            builder = DescriptorBuilder.from_url(self.url)
        elif self.xml is not None:
            builder = DescriptorBuilder.parse_xml(self.xml)
        else:
            builder = DescriptorBuilder()
        builder.set_source_repository(default_repository)
        if self.group_id is not None:
            builder.set_group(self.group_id)
        if self.artifact_id is not None:
            builder.set_artifact(self.artifact_id)
        if self.version is not None:
            builder.set_version(self.version)
        if self.repository is not None:
            builder.set_source_repository(self.repository)
        return builder


class LibrariesOptions(BaseModel):
    """The whole declaration section."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    relocation_prefix: Optional[str] = Field(None, alias="relocation-prefix")
    libraries_folder: str = Field(DEFAULT_LIBRARIES_FOLDER, alias="libraries-folder")
    global_relocations: Dict[str, str] = Field(default_factory=dict, alias="global-relocations")
    delete_after_relocation: bool = Field(False, alias="delete-after-relocation")
    libraries: Dict[str, RuntimeLibEntry] = Field(default_factory=dict)

    @field_validator("global_relocations", mode="before")
    @classmethod
    def _coerce_global_relocations(cls, value: Any) -> Any:
        return _relocation_table(value)

    @field_validator("libraries", mode="before")
    @classmethod
    def _none_is_empty(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("libraries_folder", mode="before")
    @classmethod
    def _blank_folder_is_default(cls, value: Any) -> Any:
        if value is None or (isinstance(value, str) and not value.strip()):
            return DEFAULT_LIBRARIES_FOLDER
        return value

    @property
    def prefix(self) -> Optional[str]:
        if self.relocation_prefix and self.relocation_prefix.strip():
            return self.relocation_prefix.strip().rstrip(".")
        return None
