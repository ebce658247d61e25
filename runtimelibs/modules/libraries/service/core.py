"""Resolve, relocate and activate declared runtime libraries."""

from __future__ import annotations

import logging
from typing import Dict, Iterable, List, Optional

from runtimelibs.modules.libraries.activate import Activator
from runtimelibs.modules.libraries.declaration import Declaration
from runtimelibs.modules.libraries.domain import Descriptor, LibraryState, LibraryStatus
from runtimelibs.modules.libraries.fileget import ArtifactCache
from runtimelibs.modules.libraries.util.exceptions import (
    ActivationFailed,
    ArtifactUnavailable,
    RelocationFailed,
    RuntimeLibraryError,
)

log = logging.getLogger(__name__)


class RuntimeLibraryService:
    """Runs the fetch -> relocate -> activate pipeline sequentially.

    Fetch and relocation failures are isolated per descriptor: they are logged,
    the remaining descriptors still run, and the first failure is raised once
    all of them were attempted. Activation failures abort immediately.
    """

    def __init__(self, declaration: Declaration, cache: ArtifactCache, activator: Activator) -> None:
        self.declaration = declaration
        self.cache = cache
        self.activator = activator
        self._states: Dict[str, LibraryState] = {}

    def run(self, descriptors: Optional[Iterable[Descriptor]] = None) -> Dict[str, LibraryState]:
        targets = list(self.declaration.descriptors if descriptors is None else descriptors)
        log.info("...................RUNTIME-LIBRARIES-BEGIN (%d)...................", len(targets))

        failures: List[RuntimeLibraryError] = []
        for descriptor in targets:
            state = self._states.setdefault(descriptor.coordinate_key, LibraryState(descriptor))
            if state.status.is_terminal:
                log.debug("Skipping %s, already %s", descriptor, state.status.value)
                continue
            try:
                self._process(state)
            except (ArtifactUnavailable, RelocationFailed) as exc:
                log.error("Library %s failed: %s", descriptor, exc)
                failures.append(exc)

        log.info("...................RUNTIME-LIBRARIES-END...................")
        if failures:
            raise failures[0]
        return self.states()

    def states(self) -> Dict[str, LibraryState]:
        return dict(self._states)

    def _process(self, state: LibraryState) -> None:
        descriptor = state.descriptor

        state.advance(LibraryStatus.FETCHING)
        try:
            if descriptor.has_rewrite_rules and self.cache.is_relocated(descriptor):
                raw_path = None
            else:
                raw_path = self.cache.resolve(descriptor)
        except Exception as exc:
            state.advance(LibraryStatus.FAILED_FETCH, error=str(exc))
            raise
        state.advance(LibraryStatus.FETCHED, path=raw_path)

        path = raw_path
        if descriptor.has_rewrite_rules:
            state.advance(LibraryStatus.REWRITING)
            try:
                path = self.cache.resolve_relocated(descriptor)
            except Exception as exc:
                state.advance(LibraryStatus.FAILED_REWRITE, error=str(exc))
                raise
            state.advance(LibraryStatus.REWRITTEN, path=path)

        try:
            path = self.activator.activate(descriptor, path)
        except ActivationFailed as exc:
            state.advance(LibraryStatus.FAILED_ACTIVATION, error=str(exc))
            raise
        state.advance(LibraryStatus.ACTIVATED, path=path)
