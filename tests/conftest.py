import io
import zipfile
from typing import Callable, Dict, List

import httpx
import pytest

from runtimelibs.settings import Settings


@pytest.fixture
def settings(tmp_path) -> Settings:
    return Settings(_env_file=None, storage_root=str(tmp_path / "storage"), app_name="demo-app")


@pytest.fixture
def make_jar() -> Callable[[Dict[str, bytes]], bytes]:
    def _make(entries: Dict[str, bytes]) -> bytes:
        buffer = io.BytesIO()
        with zipfile.ZipFile(buffer, "w") as zf:
            for name, data in entries.items():
                zf.writestr(name, data)
        return buffer.getvalue()

    return _make


class RecordingTransport:
    """Serves fixed payloads per URL and remembers every request."""

    def __init__(self, payloads: Dict[str, bytes]) -> None:
        self.payloads = payloads
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        body = self.payloads.get(str(request.url))
        if body is None:
            return httpx.Response(404, content=b"not found")
        return httpx.Response(200, content=body)

    def client(self) -> httpx.Client:
        return httpx.Client(transport=httpx.MockTransport(self))


@pytest.fixture
def recording_transport() -> Callable[[Dict[str, bytes]], RecordingTransport]:
    return RecordingTransport
