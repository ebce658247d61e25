"""Load the declared runtime libraries once and turn them into descriptors."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, List, Mapping, Optional, Tuple, Union

import yaml
from pydantic import ValidationError

from runtimelibs.modules.libraries.declaration.schema import LibrariesOptions
from runtimelibs.modules.libraries.domain import Descriptor, ResolutionSettings, RewriteRule
from runtimelibs.modules.libraries.util.exceptions import InvalidDeclaration, MissingRelocationPrefix
from runtimelibs.settings import Settings

log = logging.getLogger(__name__)

DeclarationSource = Union[Mapping[str, Any], Path, str]


@dataclass(frozen=True)
class Declaration:
    settings: ResolutionSettings
    descriptors: Tuple[Descriptor, ...]


def read_manifest(path: Path) -> Mapping[str, Any]:
    """Read a YAML manifest (``name`` plus the declaration section)."""
    try:
        with open(path, encoding="utf-8") as fh:
            document = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        raise InvalidDeclaration(f"invalid YAML in {path}: {exc}") from exc
    if document is None:
        return {}
    if not isinstance(document, Mapping):
        raise InvalidDeclaration(f"manifest {path} must be a mapping, got {type(document).__name__}")
    return document


class DeclarationLoader:
    """Parses the declaration at most once; later ``load()`` calls reuse the result."""

    def __init__(self, settings: Settings, source: Optional[DeclarationSource] = None) -> None:
        self.settings = settings
        self.source = source
        self._declaration: Optional[Declaration] = None

    def load(self) -> Declaration:
        if self._declaration is None:
            self._declaration = self._load()
        return self._declaration

    def _load(self) -> Declaration:
        document = self._read_document()
        app_name = str(document.get("name") or self.settings.app_name)
        section = document.get(self.settings.manifest_section)
        try:
            options = LibrariesOptions.model_validate(section or {})
        except ValidationError as exc:
            raise InvalidDeclaration(f"invalid {self.settings.manifest_section} section: {exc}") from exc

        prefix = options.prefix
        self._check_prefix(options, prefix)

        global_rules = frozenset(
            RewriteRule.declared(pattern, f"{prefix}.{target}")
            for pattern, target in options.global_relocations.items()
            if prefix
        )
        resolution = ResolutionSettings(
            storage_root=self.settings.storage_root_path,
            app_name=app_name,
            libraries_subdir=options.libraries_folder,
            shared_namespace_prefix=prefix,
            global_rewrite_rules=global_rules,
            delete_source_after_rewrite=options.delete_after_relocation,
        )

        descriptors: List[Descriptor] = []
        for key, entry in options.libraries.items():
            builder = entry.builder(self.settings.default_repository)
            for pattern, target in entry.relocation.items():
                builder.add_rewrite_rule(RewriteRule.declared(pattern, f"{prefix}.{target}"))
            for rule in global_rules:
                builder.add_rewrite_rule(rule)
            descriptor = builder.build()
            log.debug("Declared library %s -> %s (%d relocations)", key, descriptor, len(descriptor.rewrite_rules))
            descriptors.append(descriptor)

        log.info(
            "Loaded %d runtime libraries for %s into %s",
            len(descriptors),
            app_name,
            resolution.libraries_dir,
        )
        return Declaration(settings=resolution, descriptors=tuple(descriptors))

    def _read_document(self) -> Mapping[str, Any]:
        source = self.source
        if isinstance(source, Mapping):
            return source
        if source is not None:
            path = Path(source)
            if not path.exists():
                raise InvalidDeclaration(f"manifest not found: {path}")
            return read_manifest(path)

        path = Path(self.settings.manifest_path)
        if not path.exists():
            log.info("No manifest at %s, no runtime libraries declared", path)
            return {}
        return read_manifest(path)

    @staticmethod
    def _check_prefix(options: LibrariesOptions, prefix: Optional[str]) -> None:
        if prefix:
            return
        relocating = [key for key, entry in options.libraries.items() if entry.relocation]
        if relocating or (options.global_relocations and options.libraries):
            raise MissingRelocationPrefix(relocating)
