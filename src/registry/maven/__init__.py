"""Maven dependency resolution.

This package downloads POMs, repository metadata and jars from an ordered
list of Maven repositories, resolving version constraints along the way.
Everything is scoped to an explicit ``ResolutionSession``.
"""

from .repository import (
    MAVEN_CENTRAL,
    MavenRepository,
    MavenRepositoryCredentials,
    MavenRepositoryMirror,
)
from .metadata import MavenMetadata, Snapshot, SnapshotVersion
from .pom import Dependency, Pom, load_pom, parse_pom
from .cache import NOT_ATTEMPTED, MavenPomCache, SingleFlightCache
from .settings import MavenSettings
from .session import ResolutionSession
from .normalizer import RepositoryNormalizer
from .downloader import MavenPomDownloader
from .artifacts import MavenArtifactDownloader
from .resolver import DependencyRequest, DependencyResolver, ResolvedDependency

__all__ = [
    "MAVEN_CENTRAL",
    "MavenRepository",
    "MavenRepositoryCredentials",
    "MavenRepositoryMirror",
    "MavenMetadata",
    "Snapshot",
    "SnapshotVersion",
    "Dependency",
    "Pom",
    "load_pom",
    "parse_pom",
    "NOT_ATTEMPTED",
    "MavenPomCache",
    "SingleFlightCache",
    "MavenSettings",
    "ResolutionSession",
    "RepositoryNormalizer",
    "MavenPomDownloader",
    "MavenArtifactDownloader",
    "DependencyRequest",
    "DependencyResolver",
    "ResolvedDependency",
]
