from .loader import Declaration, DeclarationLoader, DeclarationSource, read_manifest
from .schema import LibrariesOptions, RuntimeLibEntry

__all__ = ["Declaration", "DeclarationLoader", "DeclarationSource", "LibrariesOptions", "RuntimeLibEntry", "read_manifest"]
