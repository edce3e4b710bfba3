"""Minimal POM descriptor model: coordinates, parent, properties, dependencies, repositories."""

from __future__ import annotations

import re
import xml.etree.ElementTree as ET
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Dict, Optional, Tuple, Union

from versioning.models import GroupArtifactVersion, ResolvedGroupArtifactVersion
from .repository import MavenRepository

_PLACEHOLDER_RE = re.compile(r"\$\{([^}]+)\}")
_MAX_EXPANSION_PASSES = 10


@dataclass(frozen=True)
class Dependency:
    gav: GroupArtifactVersion
    scope: Optional[str] = None
    type: Optional[str] = None
    classifier: Optional[str] = None
    optional: bool = False


@dataclass(frozen=True)
class Pom:
    """A parsed POM, tagged with the repository it came from (None for project POMs)."""
    gav: ResolvedGroupArtifactVersion
    parent: Optional[GroupArtifactVersion] = None
    packaging: str = "jar"
    properties: Dict[str, str] = field(default_factory=dict)
    dependencies: Tuple[Dependency, ...] = ()
    repositories: Tuple[MavenRepository, ...] = ()
    source_path: Optional[Path] = None
    repository: Optional[MavenRepository] = field(default=None, compare=False)

    @property
    def group(self) -> str:
        return self.gav.group

    @property
    def artifact(self) -> str:
        return self.gav.artifact

    @property
    def version(self) -> str:
        return self.gav.version

    def with_gav(self, gav: ResolvedGroupArtifactVersion) -> "Pom":
        return replace(self, gav=gav)

    def _lookup(self, name: str) -> Optional[str]:
        builtins = {
            "project.groupId": self.group,
            "project.artifactId": self.artifact,
            "project.version": self.version,
            "pom.groupId": self.group,
            "pom.artifactId": self.artifact,
            "pom.version": self.version,
        }
        if self.parent is not None:
            builtins["project.parent.groupId"] = self.parent.group
            builtins["project.parent.version"] = self.parent.version
        if name in self.properties:
            return self.properties[name]
        return builtins.get(name)

    def value(self, text: Optional[str]) -> Optional[str]:
        """Expand ``${name}`` placeholders; unknown names are left as written."""
        if text is None:
            return None

        def substitute(m: "re.Match[str]") -> str:
            found = self._lookup(m.group(1))
            return m.group(0) if found is None else found

        for _ in range(_MAX_EXPANSION_PASSES):
            expanded = _PLACEHOLDER_RE.sub(substitute, text)
            if expanded == text:
                break
            text = expanded
        return text


def _strip_namespaces(root: ET.Element) -> None:
    for el in root.iter():
        if isinstance(el.tag, str) and "}" in el.tag:
            el.tag = el.tag.split("}", 1)[1]


def _text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    if parent is None:
        return None
    el = parent.find(tag)
    if el is None or el.text is None:
        return None
    return el.text.strip() or None


def _enabled(parent: Optional[ET.Element], tag: str) -> bool:
    flag = _text(parent.find(tag) if parent is not None else None, "enabled")
    return flag is None or flag.lower() == "true"


def parse_pom(
    content: Union[str, bytes],
    source_path: Optional[Path] = None,
    repository: Optional[MavenRepository] = None,
) -> Pom:
    """Parse POM text.

    Args:
        content: The POM document.
        source_path: Where a project POM lives on disk; None for downloaded POMs.
        repository: The repository a downloaded POM came from.

    Raises:
        ET.ParseError: when the document is not well-formed XML.
        ValueError: when the POM has no artifactId.
    """
    root = ET.fromstring(content)
    _strip_namespaces(root)

    parent = None
    parent_el = root.find("parent")
    if parent_el is not None:
        parent = GroupArtifactVersion(
            _text(parent_el, "groupId"), _text(parent_el, "artifactId"), _text(parent_el, "version")
        )

    artifact = _text(root, "artifactId")
    if artifact is None:
        raise ValueError("POM has no artifactId")
    group = _text(root, "groupId") or (parent.group if parent else None) or ""
    version = _text(root, "version") or (parent.version if parent else None) or ""

    properties: Dict[str, str] = {}
    props_el = root.find("properties")
    if props_el is not None:
        for prop in props_el:
            if isinstance(prop.tag, str):
                properties[prop.tag] = (prop.text or "").strip()

    dependencies = []
    deps_el = root.find("dependencies")
    if deps_el is not None:
        for dep in deps_el.findall("dependency"):
            dependencies.append(Dependency(
                gav=GroupArtifactVersion(_text(dep, "groupId"), _text(dep, "artifactId"), _text(dep, "version")),
                scope=_text(dep, "scope"),
                type=_text(dep, "type"),
                classifier=_text(dep, "classifier"),
                optional=(_text(dep, "optional") or "").lower() == "true",
            ))

    repositories = []
    repos_el = root.find("repositories")
    if repos_el is not None:
        for repo in repos_el.findall("repository"):
            url = _text(repo, "url")
            if url is None:
                continue
            repositories.append(MavenRepository(
                id=_text(repo, "id"),
                uri=url,
                releases=_enabled(repo, "releases"),
                snapshots=_enabled(repo, "snapshots"),
            ))

    return Pom(
        gav=ResolvedGroupArtifactVersion(
            repository=repository.uri if repository else None,
            group=group,
            artifact=artifact,
            version=version,
        ),
        parent=parent,
        packaging=_text(root, "packaging") or "jar",
        properties=properties,
        dependencies=tuple(dependencies),
        repositories=tuple(repositories),
        source_path=source_path,
        repository=repository,
    )


def load_pom(path: Union[str, Path]) -> Pom:
    """Read a project POM from disk."""
    path = Path(path)
    return parse_pom(path.read_bytes(), source_path=path)
