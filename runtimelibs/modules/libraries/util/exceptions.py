"""Error taxonomy for runtime library resolution."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:  # pragma: no cover
    from runtimelibs.modules.libraries.domain.descriptor import Descriptor


class RuntimeLibraryError(RuntimeError):
    """Base class for every error raised by the library pipeline."""


class ConfigurationError(RuntimeLibraryError):
    """Raised while loading declarations; never retried."""


class IncompleteDescriptor(ConfigurationError):
    def __init__(self, missing: Iterable[str]) -> None:
        self.missing = tuple(missing)
        super().__init__(f"descriptor is incomplete, missing: {', '.join(self.missing)}")


class MalformedCoordinateDocument(ConfigurationError):
    """Raised when a coordinate XML document cannot be used."""


class MissingRelocationPrefix(ConfigurationError):
    def __init__(self, libraries: Iterable[str]) -> None:
        self.libraries = tuple(libraries)
        super().__init__(
            "relocation-prefix must be defined when relocations are declared "
            f"(libraries: {', '.join(self.libraries) or '<global>'})"
        )


class InvalidDeclaration(ConfigurationError):
    """Raised when the declaration does not match the expected schema."""


class ArtifactUnavailable(RuntimeLibraryError):
    def __init__(self, descriptor: "Descriptor", url: str, reason: Optional[str] = None) -> None:
        self.descriptor = descriptor
        self.url = url
        message = f"unable to download dependency {descriptor.coordinate_key} from {url}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class RelocationFailed(RuntimeLibraryError):
    def __init__(self, descriptor: Optional["Descriptor"], path: Path, reason: str) -> None:
        self.descriptor = descriptor
        self.path = path
        name = descriptor.coordinate_key if descriptor else path.name
        super().__init__(f"relocation of {name} into {path} failed: {reason}")


class ActivationFailed(RuntimeLibraryError):
    def __init__(self, descriptor: "Descriptor", path: Path, reason: str) -> None:
        self.descriptor = descriptor
        self.path = path
        super().__init__(f"unable to load dependency {descriptor.coordinate_key} from {path}: {reason}")
