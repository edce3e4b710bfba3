"""Download binary artifacts (jars) into a local file cache."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING, Callable, Iterable, Optional

import requests

from common.http_client import HttpTransport
from common.logging_utils import Timer, extra_context, is_debug_enabled, safe_url
from constants import Constants
from errors import MavenDownloadingError
from .cache import SingleFlightCache
from .repository import MavenRepositoryCredentials

if TYPE_CHECKING:
    from .resolver import ResolvedDependency

logger = logging.getLogger(__name__)

_CHUNK_SIZE = 64 * 1024


class MavenArtifactDownloader:
    """Fetch the jar of a resolved dependency into ``cache_dir``.

    Files already on disk are reused. Concurrent requests for the same file
    share one download. Credentials of a server whose id matches the
    repository id take precedence over the repository's own.
    """

    def __init__(
        self,
        cache_dir: Path,
        transport: HttpTransport,
        servers: Optional[Iterable[MavenRepositoryCredentials]] = None,
        on_error: Optional[Callable[[Exception], None]] = None,
    ):
        self.cache_dir = Path(cache_dir)
        self.transport = transport
        self.servers = {server.id: server for server in servers or ()}
        self.on_error = on_error or (lambda e: logger.warning("%s", e))
        self._inflight: SingleFlightCache[Path, Path] = SingleFlightCache("artifacts")

    def artifact_path(self, dependency: "ResolvedDependency") -> Path:
        gav = dependency.gav
        return (
            self.cache_dir.joinpath(*gav.group.split("."))
            / gav.artifact
            / gav.version
            / f"{gav.artifact}-{gav.effective_version}.{Constants.JAR_EXTENSION}"
        )

    def download_artifact(self, dependency: "ResolvedDependency") -> Optional[Path]:
        """Return the local path of the dependency's jar, or None when unavailable.

        Dependencies of any type other than ``jar`` are skipped.
        """
        if dependency.type is not None and dependency.type != Constants.JAR_EXTENSION:
            return None
        target = self.artifact_path(dependency)
        if target.is_file():
            return target
        return self._inflight.compute(target, lambda: self._fetch(dependency, target))

    def _auth(self, dependency: "ResolvedDependency"):
        server = self.servers.get(dependency.repository.id or "")
        if server is not None and server.username is not None and server.password is not None:
            return (server.username, server.password)
        return dependency.repository.auth

    def _fetch(self, dependency: "ResolvedDependency", target: Path) -> Optional[Path]:
        gav = dependency.gav
        repo = dependency.repository
        url = (
            f"{repo.uri.rstrip('/')}/{gav.group.replace('.', '/')}/{gav.artifact}/{gav.version}/"
            f"{gav.artifact}-{gav.effective_version}.{Constants.JAR_EXTENSION}"
        )
        try:
            with Timer() as t:
                res = self.transport.get(url, auth=self._auth(dependency), context="artifact", stream=True)
                try:
                    if not 200 <= res.status_code < 300:
                        self.on_error(MavenDownloadingError(
                            gav, {repo: f"Download failure. Response code is [{res.status_code}]."}
                        ))
                        return None
                    self._write(res, target)
                finally:
                    res.close()
        except (requests.RequestException, OSError) as e:
            self.on_error(MavenDownloadingError(gav, {repo: f"Download failure. {e}"}))
            return None

        if is_debug_enabled(logger):
            logger.debug(
                "Artifact downloaded",
                extra=extra_context(
                    event="artifact_fetch",
                    component="artifacts",
                    action="download_artifact",
                    outcome="downloaded",
                    duration_ms=t.duration_ms(),
                    target=safe_url(url),
                ),
            )
        return target

    @staticmethod
    def _write(res: requests.Response, target: Path) -> None:
        """Stream the body to a temporary file beside ``target`` and move it into place."""
        target.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=f".{target.name}.", suffix=".part")
        try:
            with os.fdopen(fd, "wb") as out:
                for chunk in res.iter_content(chunk_size=_CHUNK_SIZE):
                    if chunk:
                        out.write(chunk)
            os.replace(tmp, target)
        except BaseException:
            if os.path.exists(tmp):
                os.unlink(tmp)
            raise
