"""Maven repository descriptions plus mirror and credential overlays."""

from __future__ import annotations

import re
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, Optional, Tuple
from urllib.parse import urlsplit

from constants import Constants

_MILESTONE_RE = re.compile(r".*(M|RC)\d+$")
_LOCAL_HOSTS = ("localhost", "127.0.0.1", "::1")


@dataclass(frozen=True)
class MavenRepository:
    """A remote repository.

    ``uri`` may still hold ``${...}`` placeholders until it is normalized
    against the POM that declared it. Credentials take no part in equality
    and are never rendered or serialized.
    """
    id: Optional[str]
    uri: str
    releases: bool = True
    snapshots: bool = False
    known_to_exist: bool = field(default=False, compare=False)
    username: Optional[str] = field(default=None, compare=False, repr=False)
    password: Optional[str] = field(default=None, compare=False, repr=False)

    def accepts_version(self, version: str) -> bool:
        """True when this repository may publish ``version``."""
        if version.endswith(Constants.SNAPSHOT_SUFFIX):
            return self.snapshots
        if self.uri.lower() == Constants.SPRING_MILESTONE_URL:
            return _MILESTONE_RE.match(version) is not None
        return self.releases

    @property
    def auth(self) -> Optional[Tuple[str, str]]:
        """HTTP Basic credentials for ``requests``, when both parts are set."""
        if self.username is not None and self.password is not None:
            return (self.username, self.password)
        return None

    def with_uri(self, uri: str) -> "MavenRepository":
        return replace(self, uri=uri)

    def with_credentials(self, username: Optional[str], password: Optional[str]) -> "MavenRepository":
        return replace(self, username=username, password=password)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "uri": self.uri,
            "releases": self.releases,
            "snapshots": self.snapshots,
            "known_to_exist": self.known_to_exist,
        }


MAVEN_CENTRAL = MavenRepository(
    id=Constants.MAVEN_CENTRAL_ID,
    uri=Constants.MAVEN_CENTRAL_URL,
    releases=True,
    snapshots=False,
    known_to_exist=True,
)


def maven_central() -> MavenRepository:
    """Maven Central, honoring a configured URL override."""
    if MAVEN_CENTRAL.uri == Constants.MAVEN_CENTRAL_URL:
        return MAVEN_CENTRAL
    return MAVEN_CENTRAL.with_uri(Constants.MAVEN_CENTRAL_URL)


def _is_external(repository: MavenRepository) -> bool:
    try:
        parts = urlsplit(repository.uri)
    except ValueError:
        return True
    if parts.scheme == "file":
        return False
    return (parts.hostname or "") not in _LOCAL_HOSTS


@dataclass(frozen=True)
class MavenRepositoryMirror:
    """A mirror that replaces every repository its ``mirror_of`` selects.

    ``mirror_of`` is a comma separated list of repository ids or URIs, ``*``,
    ``external:*`` and ``!id`` exclusions, as in ``settings.xml``.
    """
    id: Optional[str]
    url: str
    mirror_of: str
    releases: Optional[bool] = None
    snapshots: Optional[bool] = None

    def matches(self, repository: MavenRepository) -> bool:
        matched = False
        for pattern in (p.strip() for p in self.mirror_of.split(",")):
            if not pattern:
                continue
            if pattern.startswith("!"):
                if pattern[1:] in (repository.id, repository.uri):
                    return False
            elif pattern == "*":
                matched = True
            elif pattern == "external:*":
                matched = matched or _is_external(repository)
            elif pattern in (repository.id, repository.uri):
                matched = True
        return matched

    def apply_to(self, repository: MavenRepository) -> MavenRepository:
        if not self.matches(repository):
            return repository
        return replace(
            repository,
            id=self.id,
            uri=self.url,
            releases=repository.releases if self.releases is None else self.releases,
            snapshots=repository.snapshots if self.snapshots is None else self.snapshots,
        )


def apply_mirrors(mirrors: Iterable[MavenRepositoryMirror], repository: MavenRepository) -> MavenRepository:
    """Return ``repository`` replaced by the first mirror that selects it."""
    for mirror in mirrors:
        if mirror.matches(repository):
            return mirror.apply_to(repository)
    return repository


@dataclass(frozen=True)
class MavenRepositoryCredentials:
    id: str
    username: Optional[str] = field(default=None, repr=False)
    password: Optional[str] = field(default=None, repr=False)


def apply_credentials(
    credentials: Iterable[MavenRepositoryCredentials], repository: MavenRepository
) -> MavenRepository:
    """Attach the credentials whose id matches the repository id, if any."""
    for cred in credentials:
        if cred.id == repository.id:
            return repository.with_credentials(cred.username, cred.password)
    return repository
