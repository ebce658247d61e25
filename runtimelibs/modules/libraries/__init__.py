"""Runtime library module exports."""

from .service import RuntimeLibraryService
from .controller import router as libraries_router

__all__ = ["RuntimeLibraryService", "libraries_router"]
