"""Reader for Maven ``settings.xml``: servers, mirrors, profiles and active profiles."""

from __future__ import annotations

import logging
import os
import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Union

from .repository import MavenRepository, MavenRepositoryCredentials, MavenRepositoryMirror

logger = logging.getLogger(__name__)

_ENV_PLACEHOLDER_RE = re.compile(r"\$\{env\.([^}]+)\}")


@dataclass(frozen=True)
class Profile:
    id: Optional[str]
    repositories: List[MavenRepository] = field(default_factory=list)
    active_by_default: bool = False


@dataclass(frozen=True)
class MavenSettings:
    servers: List[MavenRepositoryCredentials] = field(default_factory=list)
    mirrors: List[MavenRepositoryMirror] = field(default_factory=list)
    profiles: List[Profile] = field(default_factory=list)
    active_profiles: List[str] = field(default_factory=list)

    def active_repositories(self, active_profiles: Iterable[str] = ()) -> List[MavenRepository]:
        """Repositories of every profile that is active by default or by name."""
        wanted = set(self.active_profiles) | set(active_profiles)
        repositories: List[MavenRepository] = []
        for profile in self.profiles:
            if profile.active_by_default or profile.id in wanted:
                repositories.extend(profile.repositories)
        return repositories

    @classmethod
    def parse(cls, source: Union[str, Path]) -> "MavenSettings":
        """Parse settings from a file path or from XML text.

        ``${env.NAME}`` placeholders are expanded from the environment; unset
        variables are left as written.
        """
        if isinstance(source, Path) or not source.lstrip().startswith("<"):
            text = Path(source).read_text(encoding="utf-8")
        else:
            text = source
        root = ET.fromstring(text)
        for el in root.iter():
            if isinstance(el.tag, str) and "}" in el.tag:
                el.tag = el.tag.split("}", 1)[1]

        settings = cls(
            servers=[_server(el) for el in root.findall("servers/server")],
            mirrors=[m for m in (_mirror(el) for el in root.findall("mirrors/mirror")) if m is not None],
            profiles=[_profile(el) for el in root.findall("profiles/profile")],
            active_profiles=[
                name for name in (_expand(el.text) for el in root.findall("activeProfiles/activeProfile")) if name
            ],
        )
        logger.debug(
            "Parsed Maven settings: %d servers, %d mirrors, %d profiles",
            len(settings.servers), len(settings.mirrors), len(settings.profiles),
        )
        return settings


def _expand(text: Optional[str]) -> Optional[str]:
    if text is None:
        return None
    text = text.strip()
    return _ENV_PLACEHOLDER_RE.sub(lambda m: os.environ.get(m.group(1), m.group(0)), text) or None


def _text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    if parent is None:
        return None
    el = parent.find(tag)
    return None if el is None else _expand(el.text)


def _flag(parent: ET.Element, tag: str) -> Optional[bool]:
    el = parent.find(tag)
    if el is None:
        return None
    enabled = _text(el, "enabled")
    return enabled is None or enabled.lower() == "true"


def _server(el: ET.Element) -> MavenRepositoryCredentials:
    return MavenRepositoryCredentials(
        id=_text(el, "id") or "",
        username=_text(el, "username"),
        password=_text(el, "password"),
    )


def _mirror(el: ET.Element) -> Optional[MavenRepositoryMirror]:
    url, mirror_of = _text(el, "url"), _text(el, "mirrorOf")
    if url is None or mirror_of is None:
        logger.warning("Ignoring mirror %s without url or mirrorOf", _text(el, "id"))
        return None
    return MavenRepositoryMirror(
        id=_text(el, "id"),
        url=url,
        mirror_of=mirror_of,
        releases=_flag(el, "releases"),
        snapshots=_flag(el, "snapshots"),
    )


def _profile(el: ET.Element) -> Profile:
    repositories = []
    for repo in el.findall("repositories/repository"):
        url = _text(repo, "url")
        if url is None:
            continue
        releases = _flag(repo, "releases")
        repositories.append(MavenRepository(
            id=_text(repo, "id"),
            uri=url,
            releases=releases is None or releases,
            snapshots=bool(_flag(repo, "snapshots")),
        ))
    active = (_text(el.find("activation"), "activeByDefault") or "").lower() == "true"
    return Profile(id=_text(el, "id"), repositories=repositories, active_by_default=active)
