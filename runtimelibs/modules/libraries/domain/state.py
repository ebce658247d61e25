"""Per-descriptor lifecycle tracking."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from runtimelibs.modules.libraries.domain.descriptor import Descriptor


class LibraryStatus(str, Enum):
    DECLARED = "DECLARED"
    FETCHING = "FETCHING"
    FETCHED = "FETCHED"
    REWRITING = "REWRITING"
    REWRITTEN = "REWRITTEN"
    ACTIVATED = "ACTIVATED"
    FAILED_FETCH = "FAILED_FETCH"
    FAILED_REWRITE = "FAILED_REWRITE"
    FAILED_ACTIVATION = "FAILED_ACTIVATION"

    @property
    def is_terminal(self) -> bool:
        return self in _TERMINAL

    @property
    def is_failure(self) -> bool:
        return self.value.startswith("FAILED_")


_TERMINAL = {
    LibraryStatus.ACTIVATED,
    LibraryStatus.FAILED_FETCH,
    LibraryStatus.FAILED_REWRITE,
    LibraryStatus.FAILED_ACTIVATION,
}

_TRANSITIONS = {
    LibraryStatus.DECLARED: {LibraryStatus.FETCHING},
    LibraryStatus.FETCHING: {LibraryStatus.FETCHED, LibraryStatus.FAILED_FETCH},
    LibraryStatus.FETCHED: {LibraryStatus.REWRITING, LibraryStatus.ACTIVATED, LibraryStatus.FAILED_ACTIVATION},
    LibraryStatus.REWRITING: {LibraryStatus.REWRITTEN, LibraryStatus.FAILED_REWRITE},
    LibraryStatus.REWRITTEN: {LibraryStatus.ACTIVATED, LibraryStatus.FAILED_ACTIVATION},
}


@dataclass
class LibraryState:
    descriptor: Descriptor
    status: LibraryStatus = LibraryStatus.DECLARED
    path: Optional[Path] = None
    error_message: Optional[str] = None

    def advance(self, status: LibraryStatus, *, path: Optional[Path] = None, error: Optional[str] = None) -> None:
        allowed = _TRANSITIONS.get(self.status, set())
        if status not in allowed:
            raise ValueError(f"illegal transition {self.status.value} -> {status.value} for {self.descriptor}")
        self.status = status
        if path is not None:
            self.path = path
        if error is not None:
            self.error_message = error

    def as_dict(self) -> Dict[str, Any]:
        return {
            "key": self.descriptor.coordinate_key,
            "url": self.descriptor.derive_url(),
            "status": self.status.value,
            "path": str(self.path) if self.path else None,
            "relocations": sorted(str(rule) for rule in self.descriptor.rewrite_rules),
            "error": self.error_message,
        }

    def __repr__(self) -> str:
        return f"LibraryState(key={self.descriptor.coordinate_key}, status={self.status.value}, path={self.path})"
