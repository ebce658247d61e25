"""One-time startup wiring for runtime libraries."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, Optional

import httpx

from runtimelibs.modules.libraries.activate import Activator, LoaderExtension, SysPathLoaderExtension
from runtimelibs.modules.libraries.declaration import Declaration, DeclarationLoader, DeclarationSource
from runtimelibs.modules.libraries.domain import LibraryState
from runtimelibs.modules.libraries.fileget import ArtifactCache
from runtimelibs.modules.libraries.relocate import NamespaceRewriter, TransformationService, ZipNamespaceRelocator
from runtimelibs.modules.libraries.service import RuntimeLibraryService
from .settings import Settings

log = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container that wires the pipeline components with shared settings.

    The declaration is loaded while the container is built, so configuration
    errors surface before any download starts.
    """

    settings: Settings
    source: Optional[DeclarationSource] = None
    loader_extension: LoaderExtension = field(default_factory=SysPathLoaderExtension)
    transformation_service: TransformationService = field(default_factory=ZipNamespaceRelocator)
    client: Optional[httpx.Client] = None
    declaration_loader: DeclarationLoader = field(init=False)
    declaration: Declaration = field(init=False)
    rewriter: NamespaceRewriter = field(init=False)
    artifact_cache: ArtifactCache = field(init=False)
    activator: Activator = field(init=False)
    library_service: RuntimeLibraryService = field(init=False)
    _bootstrapped: bool = field(default=False, init=False, repr=False)

    def __post_init__(self) -> None:
        self.declaration_loader = DeclarationLoader(self.settings, self.source)
        self.declaration = self.declaration_loader.load()
        self.rewriter = NamespaceRewriter(self.transformation_service)
        self.artifact_cache = ArtifactCache(
            self.declaration.settings,
            self.settings,
            self.rewriter,
            client=self.client,
        )
        self.activator = Activator(self.loader_extension)
        self.library_service = RuntimeLibraryService(self.declaration, self.artifact_cache, self.activator)


def bootstrap_libraries(container: ServiceContainer) -> Dict[str, LibraryState]:
    """Resolve and activate every declared library; later calls are no-ops."""
    if container._bootstrapped:
        log.debug("Runtime libraries already bootstrapped")
        return container.library_service.states()

    resolution = container.declaration.settings
    log.info(
        "########### app=%s libraries=%d dir=%s prefix=%s ############",
        resolution.app_name,
        len(container.declaration.descriptors),
        resolution.libraries_dir,
        resolution.shared_namespace_prefix or "-",
    )
    try:
        states = container.library_service.run()
    finally:
        container._bootstrapped = True
    return states
