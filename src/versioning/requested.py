"""Nearest-wins version selection across a chain of declarations.

Every declaration of a group:artifact found while walking a dependency graph
is added to a ``RequestedVersions`` arena with a link to the declaration of
the same coordinate that is nearer the root. A fixed version nearer the root
overrides anything farther away; ranges intersect along the chain instead.
Folds over the chain are iterative, so deep graphs cannot exhaust the stack.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, Iterator, List, Optional, Sequence

from constants import Constants
from .models import DynamicKind, DynamicVersion, ExactVersion, GroupArtifact, RangeSet, ResolutionMode, VersionSpec
from .parser import parse_version_spec
from .version import Version

if TYPE_CHECKING:
    from registry.maven.downloader import MavenPomDownloader
    from registry.maven.repository import MavenRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class _Node:
    group_artifact: GroupArtifact
    nearer: Optional[int]
    spec: VersionSpec
    requested: str


def range_set_matches(spec: RangeSet, version: Version) -> bool:
    """True when any range of the set contains ``version``."""
    for r in spec.ranges:
        lower_matches = True
        if r.lower is not None:
            low = Version(r.lower).compare_to(version)
            lower_matches = r.lower_closed if low == 0 else low < 0
        upper_matches = True
        if r.upper is not None:
            up = Version(r.upper).compare_to(version)
            upper_matches = r.upper_closed if up == 0 else up > 0
        if lower_matches and upper_matches:
            return True
    return False


class RequestedVersions:
    """Arena holding every declaration seen during one resolution pass."""

    def __init__(self):
        self._nodes: List[_Node] = []
        self._lock = threading.Lock()

    def add(
        self,
        group_artifact: GroupArtifact,
        requested: str,
        nearer: Optional["RequestedVersion"] = None,
    ) -> "RequestedVersion":
        """Record a declaration and return its handle.

        Args:
            group_artifact: The coordinate being requested.
            requested: Version text as written: fixed, range, LATEST or RELEASE.
            nearer: The declaration of the same coordinate nearer the root.
        """
        if nearer is not None:
            if nearer.arena is not self:
                raise ValueError("nearer declaration belongs to a different arena")
            if nearer.group_artifact != group_artifact:
                raise ValueError(f"nearer declaration is for {nearer.group_artifact}, not {group_artifact}")
        node = _Node(
            group_artifact=group_artifact,
            nearer=nearer.index if nearer is not None else None,
            spec=parse_version_spec(requested, group_artifact),
            requested=requested,
        )
        with self._lock:
            self._nodes.append(node)
            index = len(self._nodes) - 1
        return RequestedVersion(self, index)

    def chain(self, group_artifact: GroupArtifact, constraints: Sequence[str]) -> "RequestedVersion":
        """Build a chain from ``constraints`` ordered nearest first.

        Returns the handle of the farthest declaration.
        """
        if not constraints:
            raise ValueError(f"no version constraints given for {group_artifact}")
        handle = self.add(group_artifact, constraints[0])
        for requested in constraints[1:]:
            handle = self.add(group_artifact, requested, handle)
        return handle

    def node(self, index: int) -> _Node:
        return self._nodes[index]

    def __len__(self) -> int:
        return len(self._nodes)


class RequestedVersion:
    """Handle to one declaration in a ``RequestedVersions`` arena."""

    __slots__ = ("arena", "index")

    def __init__(self, arena: RequestedVersions, index: int):
        self.arena = arena
        self.index = index

    @property
    def _node(self) -> _Node:
        return self.arena.node(self.index)

    @property
    def group_artifact(self) -> GroupArtifact:
        return self._node.group_artifact

    @property
    def spec(self) -> VersionSpec:
        return self._node.spec

    @property
    def nearer(self) -> Optional["RequestedVersion"]:
        nearer = self._node.nearer
        return None if nearer is None else RequestedVersion(self.arena, nearer)

    def _walk(self) -> Iterator[_Node]:
        """Yield this node, then each nearer node up to the root."""
        index: Optional[int] = self.index
        while index is not None:
            node = self.arena.node(index)
            yield node
            index = node.nearer

    def _root(self) -> _Node:
        node = self._node
        for node in self._walk():
            pass
        return node

    def is_range(self) -> bool:
        """True when this declaration and every nearer one is a range set."""
        return all(isinstance(node.spec, RangeSet) for node in self._walk())

    def is_dynamic(self) -> bool:
        """True when not a range and the nearest declaration is LATEST/RELEASE."""
        return not self.is_range() and isinstance(self._root().spec, DynamicVersion)

    @property
    def mode(self) -> ResolutionMode:
        if self.is_range():
            return ResolutionMode.RANGE
        if self.is_dynamic():
            return ResolutionMode.DYNAMIC
        return ResolutionMode.EXACT

    def nearest_version(self) -> Optional[str]:
        """The fixed version nearest the root, or None for range/dynamic chains."""
        if self.is_range() or self.is_dynamic():
            return None
        root = self._root()
        return root.spec.version if isinstance(root.spec, ExactVersion) else None

    def _range_match(self, version: Version) -> bool:
        return all(
            range_set_matches(node.spec, version)
            for node in self._walk()
            if isinstance(node.spec, RangeSet)
        )

    def select_from(self, available_versions: Iterable[str]) -> Optional[str]:
        """Select the latest available version allowed by the chain.

        Args:
            available_versions: Versions listed in repository metadata.

        Returns:
            The greatest matching version, or None when nothing matches.
        """
        if self.is_range():
            candidates = [Version(v) for v in available_versions if self._range_match(Version(v))]
        elif self.is_dynamic():
            kind = self._root().spec.kind
            candidates = [
                Version(v)
                for v in available_versions
                if kind == DynamicKind.LATEST or not v.endswith(Constants.SNAPSHOT_SUFFIX)
            ]
        else:
            return self.nearest_version()
        if not candidates:
            return None
        return str(max(candidates))

    def resolve(
        self,
        downloader: "MavenPomDownloader",
        repositories: Sequence["MavenRepository"],
    ) -> Optional[str]:
        """Resolve to one concrete version.

        Fixed chains are answered locally; range and dynamic chains read the
        merged repository metadata for the coordinate.
        """
        if self.is_range() or self.is_dynamic():
            metadata = downloader.download_metadata(self.group_artifact, repositories)
            selected = self.select_from(metadata.versions)
        else:
            selected = self.nearest_version()
        if selected is None:
            logger.debug("No version of %s satisfies %s", self.group_artifact, self.describe())
        return selected

    def describe(self) -> str:
        """Constraint texts from this declaration up to the root."""
        return " <- ".join(node.requested for node in self._walk())

    def __repr__(self) -> str:
        return f"RequestedVersion({self.group_artifact}, {self.describe()!r})"
