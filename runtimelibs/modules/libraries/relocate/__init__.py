from .rewriter import NamespaceRewriter, TransformationService
from .zip_relocator import ZipNamespaceRelocator

__all__ = ["NamespaceRewriter", "TransformationService", "ZipNamespaceRelocator"]
