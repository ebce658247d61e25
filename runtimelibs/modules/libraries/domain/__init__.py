from .builder import DescriptorBuilder
from .descriptor import Descriptor, DescriptorKind, RewriteRule
from .settings import ResolutionSettings
from .state import LibraryState, LibraryStatus

__all__ = [
    "Descriptor",
    "DescriptorBuilder",
    "DescriptorKind",
    "LibraryState",
    "LibraryStatus",
    "ResolutionSettings",
    "RewriteRule",
]
