"""Download runtime libraries into the local cache exactly once."""

from __future__ import annotations

import logging
import threading
import time
from pathlib import Path
from typing import Dict, Optional

import httpx

from runtimelibs.modules.libraries.domain import Descriptor, ResolutionSettings
from runtimelibs.modules.libraries.relocate import NamespaceRewriter
from runtimelibs.modules.libraries.util.constants import ARCHIVE_SUFFIX, PARTIAL_SUFFIX, RELOCATED_SUFFIX
from runtimelibs.modules.libraries.util.exceptions import ArtifactUnavailable, RelocationFailed
from runtimelibs.settings import Settings

_CHUNK_SIZE = 65536
_UNKNOWN_SIZE_LOG_STEP = 5 * 1024 * 1024


class ArtifactCache:
    """Keeps raw and relocated artifacts under ``<storage>/<app>/<libs>``.

    The presence of the target file is the only idempotency gate: a file that
    exists is never downloaded or relocated again, across process restarts too.
    """

    def __init__(
        self,
        resolution: ResolutionSettings,
        settings: Settings,
        rewriter: NamespaceRewriter,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self.resolution = resolution
        self.rewriter = rewriter
        self.libraries_dir = resolution.libraries_dir
        self.log = logging.getLogger(self.__class__.__name__)
        auth = None
        if settings.repository_username and settings.repository_password:
            auth = (settings.repository_username, settings.repository_password)
        self._auth = auth
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=settings.http_timeout,
            verify=settings.http_verify,
            follow_redirects=True,
        )
        self._locks: Dict[str, threading.Lock] = {}
        self._locks_guard = threading.Lock()

    def artifact_path(self, descriptor: Descriptor) -> Path:
        return self.libraries_dir / f"{descriptor.file_stem}{ARCHIVE_SUFFIX}"

    def relocated_path(self, descriptor: Descriptor) -> Path:
        return self.libraries_dir / f"{descriptor.file_stem}{RELOCATED_SUFFIX}"

    def is_relocated(self, descriptor: Descriptor) -> bool:
        return self.relocated_path(descriptor).exists()

    def resolve(self, descriptor: Descriptor) -> Path:
        """Return the raw artifact, downloading it on a cache miss."""
        target = self.artifact_path(descriptor)
        with self._lock_for(f"fetch:{target.name}"):
            if target.exists():
                self.log.debug("Reusing cached artifact %s -> %s", descriptor, target)
                return target

            self.libraries_dir.mkdir(parents=True, exist_ok=True)
            url = descriptor.derive_url()
            reason: Optional[str] = None
            try:
                self._download(descriptor, url, target)
            except (httpx.HTTPError, OSError) as exc:
                reason = str(exc) or exc.__class__.__name__
                self.log.error("Failed to download %s from %s: %s", descriptor, url, reason)

            if not target.exists():
                raise ArtifactUnavailable(descriptor, url, reason)
            return target

    def resolve_relocated(self, descriptor: Descriptor) -> Path:
        """Return the relocated artifact, fetching and relocating only what is missing."""
        output = self.relocated_path(descriptor)
        with self._lock_for(f"relocate:{output.name}"):
            if output.exists():
                self.log.debug("Reusing relocated artifact %s -> %s", descriptor, output)
                return output

            source = self.resolve(descriptor)
            try:
                self.rewriter.rewrite(source, output, descriptor.rewrite_rules)
            except RelocationFailed as exc:
                if exc.descriptor is None:
                    raise RelocationFailed(descriptor, output, str(exc.__cause__ or exc)) from exc
                raise

            if self.resolution.delete_source_after_rewrite:
                source.unlink(missing_ok=True)
                self.log.info("Deleted source artifact %s after relocation", source)
            return output

    def resolve_final(self, descriptor: Descriptor) -> Path:
        if descriptor.has_rewrite_rules:
            return self.resolve_relocated(descriptor)
        return self.resolve(descriptor)

    def close(self) -> None:
        """Close the HTTP client if this cache created it."""
        if self._owns_client:
            self._client.close()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._locks_guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    def _download(self, descriptor: Descriptor, url: str, target: Path) -> None:
        partial = target.with_name(target.name + PARTIAL_SUFFIX)
        self.log.info("Downloading %s url=%s", descriptor, url)
        start_time = time.time()
        downloaded = 0
        try:
            with self._client.stream("GET", url, auth=self._auth) as response:
                response.raise_for_status()
                total = _content_length(response.headers.get("content-length"))
                next_percent = 10
                next_bytes_logged = _UNKNOWN_SIZE_LOG_STEP
                with open(partial, "wb") as fh:
                    for chunk in response.iter_bytes(_CHUNK_SIZE):
                        if not chunk:
                            continue
                        fh.write(chunk)
                        downloaded += len(chunk)
                        if total:
                            percent = int(downloaded * 100 / total)
                            if percent >= next_percent:
                                self.log.info(
                                    "Download progress %s %s%% (%d/%d bytes)",
                                    descriptor,
                                    percent,
                                    downloaded,
                                    total,
                                )
                                next_percent = (percent // 10 + 1) * 10
                        elif downloaded >= next_bytes_logged:
                            self.log.info("Download progress %s %d bytes", descriptor, downloaded)
                            next_bytes_logged += _UNKNOWN_SIZE_LOG_STEP
            partial.replace(target)
        finally:
            partial.unlink(missing_ok=True)

        elapsed = max(time.time() - start_time, 1e-3)
        speed_mb_s = (downloaded / 1024 / 1024) / elapsed
        self.log.info(
            "Downloaded %s -> %s (%d bytes, %.2f MB/s, %.2fs)",
            descriptor,
            target,
            downloaded,
            speed_mb_s,
            elapsed,
        )


def _content_length(value: Optional[str]) -> int:
    # an unparsable header is treated as an unknown size
    try:
        return max(int(value or 0), 0)
    except ValueError:
        return 0
