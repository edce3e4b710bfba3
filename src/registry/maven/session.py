"""Explicit scope for one resolution pass: configuration, transport and cache."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Callable, Dict, Iterable, Mapping, Optional

from common.http_client import HttpTransport
from versioning.models import ResolvedGroupArtifactVersion
from .cache import MavenPomCache
from .pom import Pom
from .repository import (
    MavenRepository,
    MavenRepositoryCredentials,
    MavenRepositoryMirror,
    apply_credentials,
    apply_mirrors,
)
from .settings import MavenSettings

logger = logging.getLogger(__name__)

ErrorHandler = Callable[[Exception], None]


def log_error(exc: Exception) -> None:
    """Default ``on_error``: report the failure and carry on."""
    logger.warning("%s", exc)


def _pom_key(path: Path) -> Path:
    return Path(os.path.normpath(str(path)))


class ResolutionSession:
    """Everything shared by the workers of one resolution pass.

    Create one explicitly, use it as a context manager, and let it close: the
    transport it created is closed and the cache is discarded.
    """

    def __init__(
        self,
        repositories: Iterable[MavenRepository] = (),
        mirrors: Iterable[MavenRepositoryMirror] = (),
        credentials: Iterable[MavenRepositoryCredentials] = (),
        pinned_snapshot_versions: Iterable[ResolvedGroupArtifactVersion] = (),
        on_error: Optional[ErrorHandler] = None,
        project_poms: Optional[Mapping[Path, Pom]] = None,
        artifact_cache_dir: Optional[Path] = None,
        transport: Optional[HttpTransport] = None,
        include_maven_central: bool = True,
    ):
        self.repositories = list(repositories)
        self.mirrors = list(mirrors)
        self.credentials = list(credentials)
        self.pinned_snapshot_versions = list(pinned_snapshot_versions)
        self.on_error: ErrorHandler = on_error or log_error
        self.project_poms: Dict[Path, Pom] = {
            _pom_key(Path(path)): pom for path, pom in (project_poms or {}).items()
        }
        self.artifact_cache_dir = Path(artifact_cache_dir) if artifact_cache_dir is not None else None
        self._owns_transport = transport is None
        self.transport = transport if transport is not None else HttpTransport()
        self.include_maven_central = include_maven_central
        self.cache = MavenPomCache()
        self.closed = False

    @classmethod
    def from_settings(
        cls,
        settings: MavenSettings,
        active_profiles: Iterable[str] = (),
        **kwargs: Any,
    ) -> "ResolutionSession":
        """Build a session from parsed ``settings.xml``.

        Servers become credentials, mirrors are kept as declared, and the
        repositories of the active profiles come first in the search order.
        """
        repositories = settings.active_repositories(active_profiles) + list(kwargs.pop("repositories", ()))
        return cls(
            repositories=repositories,
            mirrors=settings.mirrors,
            credentials=settings.servers,
            **kwargs,
        )

    def project_pom(self, path: Path) -> Optional[Pom]:
        return self.project_poms.get(_pom_key(path))

    def add_project_pom(self, pom: Pom) -> None:
        if pom.source_path is None:
            raise ValueError(f"project POM {pom.gav} has no source path")
        self.project_poms[_pom_key(pom.source_path)] = pom

    def apply_mirrors(self, repository: MavenRepository) -> MavenRepository:
        return apply_mirrors(self.mirrors, repository)

    def apply_credentials(self, repository: MavenRepository) -> MavenRepository:
        return apply_credentials(self.credentials, repository)

    def close(self) -> None:
        if self.closed:
            return
        if self._owns_transport:
            self.transport.close()
        self.cache.clear()
        self.closed = True
        logger.debug("Resolution session closed")

    def __enter__(self) -> "ResolutionSession":
        return self

    def __exit__(self, *exc: Any) -> None:
        self.close()
