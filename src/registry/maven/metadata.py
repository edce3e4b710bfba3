"""``maven-metadata.xml`` model, parser and merge."""

from __future__ import annotations

import xml.etree.ElementTree as ET
from dataclasses import dataclass, field
from typing import List, Optional, Union


@dataclass(frozen=True)
class Snapshot:
    timestamp: str
    build_number: str


@dataclass(frozen=True)
class SnapshotVersion:
    extension: Optional[str]
    classifier: Optional[str]
    value: str
    updated: Optional[str] = None


@dataclass(frozen=True)
class MavenMetadata:
    """Published versions of one coordinate, merged across repositories."""
    versions: List[str] = field(default_factory=list)
    snapshot: Optional[Snapshot] = None
    snapshot_versions: List[SnapshotVersion] = field(default_factory=list)
    latest: Optional[str] = None
    release: Optional[str] = None
    last_updated: Optional[str] = None

    def merge(self, other: "MavenMetadata") -> "MavenMetadata":
        """Concatenate version lists; duplicates are kept for later filtering."""
        if other is EMPTY:
            return self
        if self is EMPTY:
            return other
        return MavenMetadata(
            versions=self.versions + other.versions,
            snapshot=self.snapshot or other.snapshot,
            snapshot_versions=self.snapshot_versions + other.snapshot_versions,
        )


EMPTY = MavenMetadata()


def _text(parent: Optional[ET.Element], tag: str) -> Optional[str]:
    if parent is None:
        return None
    el = parent.find(tag)
    if el is None or el.text is None:
        return None
    return el.text.strip() or None


def parse_metadata(content: Union[str, bytes]) -> MavenMetadata:
    """Parse a metadata document.

    Raises:
        ET.ParseError: when the document is not well-formed XML.
    """
    root = ET.fromstring(content)
    versioning = root.find("versioning")
    if versioning is None:
        return MavenMetadata()

    versions: List[str] = []
    versions_el = versioning.find("versions")
    if versions_el is not None:
        for version_el in versions_el.findall("version"):
            if version_el.text and version_el.text.strip():
                versions.append(version_el.text.strip())

    snapshot = None
    snapshot_el = versioning.find("snapshot")
    timestamp = _text(snapshot_el, "timestamp")
    build_number = _text(snapshot_el, "buildNumber")
    if timestamp and build_number:
        snapshot = Snapshot(timestamp=timestamp, build_number=build_number)

    snapshot_versions: List[SnapshotVersion] = []
    sv_parent = versioning.find("snapshotVersions")
    if sv_parent is not None:
        for sv in sv_parent.findall("snapshotVersion"):
            value = _text(sv, "value")
            if value:
                snapshot_versions.append(SnapshotVersion(
                    extension=_text(sv, "extension"),
                    classifier=_text(sv, "classifier"),
                    value=value,
                    updated=_text(sv, "updated"),
                ))

    return MavenMetadata(
        versions=versions,
        snapshot=snapshot,
        snapshot_versions=snapshot_versions,
        latest=_text(versioning, "latest"),
        release=_text(versioning, "release"),
        last_updated=_text(versioning, "lastUpdated"),
    )
