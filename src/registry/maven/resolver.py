"""Resolve many coordinates in parallel within one session."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Tuple

from constants import Constants
from errors import ResolutionError
from versioning import semver
from versioning.models import GroupArtifact, GroupArtifactVersion, ResolutionResult, ResolvedGroupArtifactVersion
from versioning.requested import RequestedVersion, RequestedVersions
from .artifacts import MavenArtifactDownloader
from .downloader import MavenPomDownloader
from .pom import Pom
from .repository import MavenRepository
from .session import ResolutionSession

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DependencyRequest:
    """A coordinate plus the constraints declared for it, nearest first."""
    group: str
    artifact: str
    constraints: Tuple[str, ...]
    type: Optional[str] = None

    @property
    def group_artifact(self) -> GroupArtifact:
        return GroupArtifact(self.group, self.artifact)

    @property
    def identifier(self) -> str:
        return f"{self.group}:{self.artifact}"

    @classmethod
    def parse(cls, coordinate: str) -> "DependencyRequest":
        """Parse ``group:artifact:constraint``."""
        parts = coordinate.strip().split(":", 2)
        if len(parts) != 3 or not all(p.strip() for p in parts):
            raise ValueError(f"expected group:artifact:version, got '{coordinate}'")
        return cls(parts[0].strip(), parts[1].strip(), (parts[2].strip(),))


@dataclass(frozen=True)
class ResolvedDependency:
    gav: ResolvedGroupArtifactVersion
    repository: Optional[MavenRepository]
    requested: str
    pom: Pom
    type: Optional[str] = None
    artifact_path: Optional[Path] = None


class DependencyResolver:
    """Turn declared constraints into concrete versions, POMs and jars."""

    def __init__(self, session: ResolutionSession):
        self.session = session
        self.downloader = MavenPomDownloader(session)
        self.artifacts = (
            MavenArtifactDownloader(
                session.artifact_cache_dir,
                session.transport,
                servers=session.credentials,
                on_error=session.on_error,
            )
            if session.artifact_cache_dir is not None
            else None
        )

    def _repositories(self, repositories: Iterable[MavenRepository]) -> List[MavenRepository]:
        return list(self.session.repositories) + list(repositories)

    def requested_version(
        self,
        group_artifact: GroupArtifact,
        constraints: Sequence[str],
        arena: Optional[RequestedVersions] = None,
    ) -> RequestedVersion:
        """Chain ``constraints`` (nearest first) and return the farthest declaration.

        Each call without ``arena`` starts a fresh one, so declarations live only
        as long as the pass that uses them.
        """
        if arena is None:
            arena = RequestedVersions()
        return arena.chain(group_artifact, constraints)

    def resolve_version(
        self,
        group_artifact: GroupArtifact,
        constraints: Sequence[str],
        repositories: Iterable[MavenRepository] = (),
    ) -> Optional[str]:
        handle = self.requested_version(group_artifact, constraints)
        return handle.resolve(self.downloader, self._repositories(repositories))

    def resolve(self, request: DependencyRequest, repositories: Iterable[MavenRepository] = ()) -> ResolvedDependency:
        """Resolve one request to its version, POM and (when configured) jar.

        Raises:
            ResolutionError: when no version satisfies the constraints, or the
                POM cannot be downloaded.
        """
        handle = self.requested_version(request.group_artifact, request.constraints)
        return self._resolve(request, handle, self._repositories(repositories))

    def _resolve(
        self, request: DependencyRequest, handle: RequestedVersion, repos: List[MavenRepository]
    ) -> ResolvedDependency:
        version = handle.resolve(self.downloader, repos)
        if version is None:
            raise ResolutionError(f"No version of {request.identifier} satisfies {handle.describe()}")

        pom = self.downloader.download(
            GroupArtifactVersion(request.group, request.artifact, version), repositories=repos
        )
        dependency = ResolvedDependency(
            gav=pom.gav,
            repository=pom.repository,
            requested=request.constraints[0],
            pom=pom,
            type=request.type,
        )
        if self.artifacts is not None and dependency.repository is not None:
            path = self.artifacts.download_artifact(dependency)
            dependency = replace(dependency, artifact_path=path)
        return dependency

    def _resolve_one(self, request: DependencyRequest, arena: RequestedVersions) -> ResolutionResult:
        result = ResolutionResult(
            identifier=request.identifier,
            requested_spec=request.constraints[0] if request.constraints else None,
            resolved_version=None,
            resolution_mode=None,
            constraints=list(request.constraints),
        )
        try:
            handle = self.requested_version(request.group_artifact, request.constraints, arena)
            result.resolution_mode = handle.mode
            dependency = self._resolve(request, handle, self._repositories(()))
        except Exception as e:  # pylint: disable=broad-exception-caught
            logger.warning("Unable to resolve %s: %s", request.identifier, e)
            result.error = str(e)
            return result
        result.resolved_version = dependency.gav.version
        result.dependency = dependency
        return result

    def resolve_all(self, requests: Iterable[DependencyRequest]) -> List[ResolutionResult]:
        """Resolve every request on a thread pool, one result per request in input order.

        The batch shares one declaration arena, released when the call returns.
        """
        requests = list(requests)
        if not requests:
            return []
        arena = RequestedVersions()
        workers = max(1, min(Constants.MAX_WORKERS, len(requests)))
        with ThreadPoolExecutor(max_workers=workers) as pool:
            return list(pool.map(lambda request: self._resolve_one(request, arena), requests))

    def find_upgrade(
        self,
        group_artifact: GroupArtifact,
        current_version: Optional[str],
        to_version: str,
        metadata_pattern: Optional[str] = None,
        repositories: Iterable[MavenRepository] = (),
    ) -> Optional[str]:
        """Return the best published upgrade of ``current_version`` allowed by ``to_version``.

        Raises:
            InvalidConstraintError: before any network access, when no dialect accepts ``to_version``.
        """
        comparator = semver.validate(to_version, metadata_pattern).value_or_raise()
        metadata = self.downloader.download_metadata(group_artifact, self._repositories(repositories))
        return comparator.upgrade(current_version, metadata.versions)
