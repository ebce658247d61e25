"""Process-wide resolution settings derived from the declaration."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import FrozenSet, Optional

from runtimelibs.modules.libraries.domain.descriptor import RewriteRule
from runtimelibs.modules.libraries.util.constants import DEFAULT_LIBRARIES_FOLDER


@dataclass(frozen=True)
class ResolutionSettings:
    storage_root: Path
    app_name: str
    libraries_subdir: str = DEFAULT_LIBRARIES_FOLDER
    shared_namespace_prefix: Optional[str] = None
    global_rewrite_rules: FrozenSet[RewriteRule] = field(default_factory=frozenset)
    delete_source_after_rewrite: bool = False

    @property
    def libraries_dir(self) -> Path:
        return Path(self.storage_root) / self.app_name / self.libraries_subdir
