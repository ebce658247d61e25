"""ASGI entrypoint: ``uvicorn runtimelibs.main:app``.

Declared libraries are fetched and activated while the module is imported,
using ``RUNTIME_LIBS_*`` settings.
"""

from __future__ import annotations

from .factory import create_app
from .settings import get_settings

app = create_app(get_settings())
