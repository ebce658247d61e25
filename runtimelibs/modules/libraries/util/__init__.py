from .constants import (
    AIKAR,
    ARCHIVE_SUFFIX,
    DEFAULT_LIBRARIES_FOLDER,
    JCENTER,
    JITPACK,
    MAVEN_CENTRAL,
    PARTIAL_SUFFIX,
    PATTERN_ESCAPES,
    RELOCATED_SUFFIX,
)
from .exceptions import (
    ActivationFailed,
    ArtifactUnavailable,
    ConfigurationError,
    IncompleteDescriptor,
    InvalidDeclaration,
    MalformedCoordinateDocument,
    MissingRelocationPrefix,
    RelocationFailed,
    RuntimeLibraryError,
)

__all__ = [
    "AIKAR",
    "ARCHIVE_SUFFIX",
    "DEFAULT_LIBRARIES_FOLDER",
    "JCENTER",
    "JITPACK",
    "MAVEN_CENTRAL",
    "PARTIAL_SUFFIX",
    "PATTERN_ESCAPES",
    "RELOCATED_SUFFIX",
    "ActivationFailed",
    "ArtifactUnavailable",
    "ConfigurationError",
    "IncompleteDescriptor",
    "InvalidDeclaration",
    "MalformedCoordinateDocument",
    "MissingRelocationPrefix",
    "RelocationFailed",
    "RuntimeLibraryError",
]
