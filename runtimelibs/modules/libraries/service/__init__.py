from .core import RuntimeLibraryService

__all__ = ["RuntimeLibraryService"]
