"""Inject resolved artifacts into the running interpreter."""

from __future__ import annotations

import importlib
import importlib.util
import logging
import sys
from pathlib import Path
from typing import List, Protocol

from runtimelibs.modules.libraries.domain import Descriptor
from runtimelibs.modules.libraries.util.exceptions import ActivationFailed


class LoaderExtension(Protocol):
    """Host capability that appends one archive to the active code search path."""

    def add_artifact(self, path: Path) -> None:
        ...


class SysPathLoaderExtension:
    """Appends archives to ``sys.path`` so zipimport can load them."""

    def __init__(self, search_path: List[str] | None = None) -> None:
        self.search_path = sys.path if search_path is None else search_path

    def add_artifact(self, path: Path) -> None:
        entry = str(path)
        if entry in self.search_path:
            return
        self.search_path.append(entry)
        importlib.invalidate_caches()


class Activator:
    """Performs the one-time injection of a resolved artifact.

    Injecting two versions of the same coordinate in one process is a
    configuration error that is not detected here.
    """

    def __init__(self, loader: LoaderExtension) -> None:
        self.loader = loader
        self.log = logging.getLogger(self.__class__.__name__)

    def activate(self, descriptor: Descriptor, resolved_path: Path) -> Path:
        path = Path(resolved_path).resolve()
        if not path.is_file():
            self.log.error("Cannot activate %s, %s does not exist", descriptor, path)
            raise ActivationFailed(descriptor, path, "resolved artifact does not exist")
        try:
            self.loader.add_artifact(path)
        except Exception as exc:  # noqa: BLE001 - the capability is opaque
            self.log.error("Unable to load dependency %s from %s: %s", descriptor, path, exc)
            raise ActivationFailed(descriptor, path, str(exc) or exc.__class__.__name__) from exc
        self.log.info("Activated %s from %s", descriptor, path)
        return path


def module_available(name: str) -> bool:
    """Whether ``name`` can be imported right now."""
    try:
        return importlib.util.find_spec(name) is not None
    except (ImportError, ValueError):
        return False
