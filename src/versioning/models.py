"""Data models for coordinates, version specs and resolution outcomes."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, List, Optional, Tuple, Union


@dataclass(frozen=True)
class GroupArtifact:
    """A group:artifact identity, usable as a map key."""
    group: str
    artifact: str

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}"


@dataclass(frozen=True)
class GroupArtifactVersion:
    """A coordinate whose version may still be unknown."""
    group: Optional[str]
    artifact: Optional[str]
    version: Optional[str] = None

    @property
    def group_artifact(self) -> GroupArtifact:
        return GroupArtifact(self.group or "", self.artifact or "")

    def with_version(self, version: Optional[str]) -> "GroupArtifactVersion":
        return replace(self, version=version)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.version}"


@dataclass(frozen=True)
class ResolvedGroupArtifactVersion:
    """A coordinate pinned to the repository it was resolved from.

    ``dated_snapshot_version`` is the timestamped file version published for a
    ``-SNAPSHOT`` coordinate, when one was found.
    """
    repository: Optional[str]
    group: str
    artifact: str
    version: str
    dated_snapshot_version: Optional[str] = None

    @property
    def effective_version(self) -> str:
        return self.dated_snapshot_version or self.version

    @property
    def gav(self) -> GroupArtifactVersion:
        return GroupArtifactVersion(self.group, self.artifact, self.version)

    def with_dated_snapshot_version(self, dated: Optional[str]) -> "ResolvedGroupArtifactVersion":
        return replace(self, dated_snapshot_version=dated)

    def __str__(self) -> str:
        return f"{self.group}:{self.artifact}:{self.effective_version}"


class DynamicKind(Enum):
    """Dynamic version markers resolved against live metadata."""
    LATEST = "LATEST"
    RELEASE = "RELEASE"


@dataclass(frozen=True)
class ExactVersion:
    """A soft requirement on one version."""
    version: str


@dataclass(frozen=True)
class DynamicVersion:
    kind: DynamicKind


@dataclass(frozen=True)
class Range:
    """One bracketed range; a missing bound is unbounded on that side."""
    lower: Optional[str]
    lower_closed: bool
    upper: Optional[str]
    upper_closed: bool

    def __str__(self) -> str:
        return (
            ("[" if self.lower_closed else "(")
            + (self.lower or "")
            + ","
            + (self.upper or "")
            + ("]" if self.upper_closed else ")")
        )


@dataclass(frozen=True)
class RangeSet:
    ranges: Tuple[Range, ...] = ()

    def __str__(self) -> str:
        return ",".join(str(r) for r in self.ranges)


VersionSpec = Union[ExactVersion, DynamicVersion, RangeSet]


class ResolutionMode(Enum):
    """Resolution strategy derived from the requested version chain."""
    EXACT = "exact"
    RANGE = "range"
    DYNAMIC = "dynamic"


@dataclass
class ResolutionResult:
    """Resolution outcome for one requested coordinate in a batch."""
    identifier: str
    requested_spec: Optional[str]
    resolved_version: Optional[str]
    resolution_mode: Optional[ResolutionMode]
    dependency: Optional[Any] = None
    error: Optional[str] = None
    constraints: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.error is None and self.resolved_version is not None
