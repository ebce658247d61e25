"""Build relocation mappings and hand them to a transformation service."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, Iterable, Mapping, Protocol

from runtimelibs.modules.libraries.domain import RewriteRule
from runtimelibs.modules.libraries.util.exceptions import RelocationFailed


class TransformationService(Protocol):
    """Rewrites the archive at ``input_path`` into ``output_path``."""

    def transform(self, input_path: Path, output_path: Path, mapping: Mapping[str, str]) -> None:
        ...


class NamespaceRewriter:
    def __init__(self, service: TransformationService) -> None:
        self.service = service
        self.log = logging.getLogger(self.__class__.__name__)

    @staticmethod
    def build_mapping(rules: Iterable[RewriteRule]) -> Dict[str, str]:
        """Map each pattern to its new prefix, most specific pattern first."""
        ordered = sorted(rules, key=lambda rule: (-len(rule.match_pattern), rule.match_pattern))
        return {rule.match_pattern: rule.replacement_prefix for rule in ordered}

    def rewrite(self, input_path: Path, output_path: Path, rules: Iterable[RewriteRule]) -> Path:
        if output_path.exists():
            self.log.debug("Relocated artifact already present %s", output_path)
            return output_path

        mapping = self.build_mapping(rules)
        self.log.info("Relocating %s -> %s (%d rules)", input_path.name, output_path.name, len(mapping))
        try:
            self.service.transform(input_path, output_path, mapping)
        except Exception as exc:  # noqa: BLE001 - any service failure is a relocation failure
            output_path.unlink(missing_ok=True)
            self.log.error("Relocation of %s failed: %s", input_path, exc)
            raise RelocationFailed(None, output_path, str(exc) or exc.__class__.__name__) from exc

        if not output_path.exists():
            raise RelocationFailed(None, output_path, "transformation produced no output")
        return output_path
