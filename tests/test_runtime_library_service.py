import importlib
import sys

import httpx
import pytest

from runtimelibs.bootstrap import ServiceContainer, bootstrap_libraries
from runtimelibs.modules.libraries.activate import SysPathLoaderExtension
from runtimelibs.modules.libraries.domain import LibraryStatus
from runtimelibs.modules.libraries.util.exceptions import ActivationFailed, ArtifactUnavailable, RelocationFailed

REPO = "https://repo.example.org/maven2/"


def url(group, artifact, version):
    return f"{REPO}{group.replace('.', '/')}/{artifact}/{version}/{artifact}-{version}.jar"


def library(artifact, version="1.0", **extra):
    entry = {"groupId": "com.acme", "artifactId": artifact, "version": version, "repository": REPO}
    entry.update(extra)
    return entry


def build_source(libraries, **options):
    section = {"relocation-prefix": "org.example.libs", "libraries": libraries}
    section.update(options)
    return {"name": "pipeline-test", "runtime-libraries": section}


class SealedLoader:
    def __init__(self):
        self.calls = []

    def add_artifact(self, path):
        self.calls.append(path)
        raise OSError("cannot extend loader")


def test_pipeline_activates_plain_and_relocated(settings, make_jar, recording_transport):
    transport = recording_transport(
        {
            url("com.acme", "plain", "1.0"): make_jar({"acme_plain.py": b"VALUE = 1\n"}),
            url("com.acme", "moved", "1.0"): make_jar({"com/acme/moved/__init__.py": b"import com.acme.moved\n"}),
        }
    )
    search_path = []
    container = ServiceContainer(
        settings,
        source=build_source(
            {
                "plain": library("plain"),
                "moved": library("moved", relocation={"com.acme.moved": "moved"}),
            }
        ),
        client=transport.client(),
        loader_extension=SysPathLoaderExtension(search_path),
    )

    states = bootstrap_libraries(container)

    plain = states["com.acme:plain:1.0"]
    moved = states["com.acme:moved:1.0"]
    assert plain.status is LibraryStatus.ACTIVATED
    assert moved.status is LibraryStatus.ACTIVATED
    assert moved.path.name == "moved-1.0-relocated.jar"
    assert search_path == [str(plain.path), str(moved.path)]


def test_rerun_is_a_no_op(settings, make_jar, recording_transport):
    transport = recording_transport({url("com.acme", "plain", "1.0"): make_jar({"a.py": b""})})
    search_path = []
    container = ServiceContainer(
        settings,
        source=build_source({"plain": library("plain")}),
        client=transport.client(),
        loader_extension=SysPathLoaderExtension(search_path),
    )

    container.library_service.run()
    container.library_service.run()
    bootstrap_libraries(container)
    bootstrap_libraries(container)

    assert len(transport.requests) == 1
    assert len(search_path) == 1


def test_restart_reuses_disk_cache(settings, make_jar, recording_transport):
    transport = recording_transport({url("com.acme", "moved", "1.0"): make_jar({"com/acme/moved/x.py": b""})})
    source = build_source({"moved": library("moved", relocation={"com.acme.moved": "moved"})}, **{"delete-after-relocation": True})

    for _ in range(2):
        container = ServiceContainer(
            settings, source=source, client=transport.client(), loader_extension=SysPathLoaderExtension([])
        )
        states = bootstrap_libraries(container)
        assert states["com.acme:moved:1.0"].status is LibraryStatus.ACTIVATED

    assert len(transport.requests) == 1


def test_fetch_failure_is_isolated_then_raised(settings, make_jar, recording_transport):
    transport = recording_transport({url("com.acme", "present", "1.0"): make_jar({"p.py": b""})})
    search_path = []
    container = ServiceContainer(
        settings,
        source=build_source({"absent": library("absent"), "present": library("present")}),
        client=transport.client(),
        loader_extension=SysPathLoaderExtension(search_path),
    )

    with pytest.raises(ArtifactUnavailable):
        container.library_service.run()

    states = container.library_service.states()
    assert states["com.acme:absent:1.0"].status is LibraryStatus.FAILED_FETCH
    assert states["com.acme:absent:1.0"].error_message
    assert states["com.acme:present:1.0"].status is LibraryStatus.ACTIVATED
    assert len(search_path) == 1


def test_relocation_failure_is_recorded(settings, recording_transport):
    transport = recording_transport({url("com.acme", "broken", "1.0"): b"not a zip archive"})
    container = ServiceContainer(
        settings,
        source=build_source({"broken": library("broken", relocation={"com.acme": "acme"})}),
        client=transport.client(),
        loader_extension=SysPathLoaderExtension([]),
    )

    with pytest.raises(RelocationFailed):
        container.library_service.run()

    state = container.library_service.states()["com.acme:broken:1.0"]
    assert state.status is LibraryStatus.FAILED_REWRITE
    assert container.artifact_cache.artifact_path(state.descriptor).exists()


def test_activation_failure_aborts_immediately(settings, make_jar, recording_transport):
    transport = recording_transport(
        {
            url("com.acme", "first", "1.0"): make_jar({"f.py": b""}),
            url("com.acme", "second", "1.0"): make_jar({"s.py": b""}),
        }
    )
    loader = SealedLoader()
    container = ServiceContainer(
        settings,
        source=build_source({"first": library("first"), "second": library("second")}),
        client=transport.client(),
        loader_extension=loader,
    )

    with pytest.raises(ActivationFailed):
        bootstrap_libraries(container)

    states = container.library_service.states()
    assert states["com.acme:first:1.0"].status is LibraryStatus.FAILED_ACTIVATION
    assert "com.acme:second:1.0" not in states
    assert len(loader.calls) == 1



@pytest.fixture
def isolated_imports(monkeypatch):
    monkeypatch.setattr(sys, "path", list(sys.path))
    yield
    for name in [name for name in sys.modules if name.startswith("rtl_")]:
        del sys.modules[name]


def serve(make_jar, entries):
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, content=make_jar(entries))

    return httpx.Client(transport=httpx.MockTransport(handler))


def test_activated_module_is_importable(settings, make_jar, isolated_imports):
    container = ServiceContainer(
        settings,
        source=build_source({"demo": library("demo")}),
        client=serve(make_jar, {"rtl_pipeline_demo.py": b"ANSWER = 42\n"}),
    )

    bootstrap_libraries(container)

    assert importlib.import_module("rtl_pipeline_demo").ANSWER == 42


def test_relocated_module_is_importable_under_prefix(settings, make_jar, isolated_imports):
    container = ServiceContainer(
        settings,
        source=build_source(
            {"moved": library("moved", relocation={"rtl_moved": "rtl_moved"})},
            **{"relocation-prefix": "rtl_vendor.libs"},
        ),
        client=serve(make_jar, {"rtl_moved/__init__.py": b"X = 7\n", "rtl_moved/helpers.py": b"from rtl_moved import X\n"}),
    )

    states = bootstrap_libraries(container)

    assert states["com.acme:moved:1.0"].status is LibraryStatus.ACTIVATED
    assert importlib.import_module("rtl_vendor.libs.rtl_moved").X == 7
    assert importlib.import_module("rtl_vendor.libs.rtl_moved.helpers").X == 7


def test_unexpected_fetch_error_is_recorded(settings, make_jar, recording_transport, monkeypatch):
    transport = recording_transport({url("com.acme", "plain", "1.0"): make_jar({"a.py": b""})})
    container = ServiceContainer(
        settings,
        source=build_source({"plain": library("plain")}),
        client=transport.client(),
        loader_extension=SysPathLoaderExtension([]),
    )

    def explode(descriptor):
        raise ValueError("bad header")

    monkeypatch.setattr(container.artifact_cache, "resolve", explode)

    with pytest.raises(ValueError):
        container.library_service.run()

    state = container.library_service.states()["com.acme:plain:1.0"]
    assert state.status is LibraryStatus.FAILED_FETCH
    assert state.error_message == "bad header"
    assert container.library_service.run()["com.acme:plain:1.0"] is state
