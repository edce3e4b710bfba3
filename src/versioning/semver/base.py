"""Shared pieces of the version comparator family."""

from __future__ import annotations

import functools
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple, cast

import semantic_version

from errors import InvalidConstraintError
from ..version import Version

_CORE_RE = re.compile(r"^(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:\.(\d+))?([-.+].*)?$")
_RELEASE_MARKER_RE = re.compile(r"[.-](release|final|ga)", re.IGNORECASE)


@dataclass(frozen=True)
class ValidationFailure:
    """One reason a constraint was rejected."""
    property: str
    message: str
    invalid_value: Optional[str]

    def __str__(self) -> str:
        return f"{self.property} {self.message} (was {self.invalid_value!r})"


class Validated:
    """Outcome of validating a constraint: a comparator or the reasons it failed."""

    def __init__(
        self,
        constraint: Optional[str],
        value: Optional["VersionComparator"] = None,
        failures: Iterable[ValidationFailure] = (),
    ):
        self.constraint = constraint
        self.value = value
        self.failures: List[ValidationFailure] = list(failures)

    @classmethod
    def invalid(cls, constraint: Optional[str], prop: str, message: str) -> "Validated":
        return cls(constraint, failures=[ValidationFailure(prop, message, constraint)])

    def is_valid(self) -> bool:
        return self.value is not None and not self.failures

    def value_or_raise(self) -> "VersionComparator":
        """Return the comparator, or raise ``InvalidConstraintError`` with every failure."""
        if not self.is_valid():
            raise InvalidConstraintError(self.constraint or "", self.failures)
        return cast("VersionComparator", self.value)

    def __repr__(self) -> str:
        if self.is_valid():
            return f"Validated({self.value!r})"
        return f"Validated(failures={self.failures!r})"


@dataclass(frozen=True)
class VersionParts:
    """A version split into its numeric core and the text that follows it.

    ``29.0-jre`` has core ``(29, 0, 0, 0)`` and remainder ``-jre``. Release
    markers such as ``.RELEASE`` or ``-Final`` leave an empty remainder.
    """
    core: Tuple[int, int, int, int]
    remainder: str

    @property
    def major(self) -> int:
        return self.core[0]

    @property
    def minor(self) -> int:
        return self.core[1]

    def as_semver(self) -> semantic_version.Version:
        return semantic_version.Version(major=self.core[0], minor=self.core[1], patch=self.core[2])


def split_version(version: Optional[str]) -> Optional[VersionParts]:
    """Split ``version`` into numeric core and remainder, or None if it has no numeric core."""
    if not version:
        return None
    m = _CORE_RE.match(version.strip())
    if not m:
        return None
    core = tuple(int(g) if g else 0 for g in m.groups()[:4])
    remainder = m.group(5) or ""
    if _RELEASE_MARKER_RE.fullmatch(remainder):
        remainder = ""
    return VersionParts(core=core, remainder=remainder)  # type: ignore[arg-type]


class VersionComparator(ABC):
    """Capabilities shared by every constraint dialect."""

    name = "comparator"

    def __init__(self, constraint: str, metadata_pattern: Optional[str] = None):
        self.constraint = constraint
        self.metadata_pattern = metadata_pattern
        self._metadata_re = re.compile(metadata_pattern) if metadata_pattern is not None else None

    def _qualifies(self, parts: VersionParts) -> bool:
        """Without a metadata pattern only releases qualify; with one the remainder must match it."""
        if self._metadata_re is None:
            return parts.remainder == ""
        return self._metadata_re.fullmatch(parts.remainder) is not None

    @abstractmethod
    def is_valid(self, current: Optional[str], candidate: str) -> bool:
        """True when ``candidate`` satisfies this constraint relative to ``current``."""

    def compare(self, current: Optional[str], v1: str, v2: str) -> int:
        """Order two versions by numeric core, breaking ties with natural ordering."""
        p1, p2 = split_version(v1), split_version(v2)
        if p1 is not None and p2 is not None and p1.core != p2.core:
            return -1 if p1.core < p2.core else 1
        return Version(v1).compare_to(Version(v2))

    def upgrade(self, current: Optional[str], candidates: Iterable[str]) -> Optional[str]:
        """Return the best valid candidate at or above ``current``, or None."""
        valid = [c for c in candidates if self.is_valid(current, c)]
        if not valid:
            return None
        best = max(valid, key=functools.cmp_to_key(lambda a, b: self.compare(current, a, b)))
        if current is not None and self.compare(current, best, current) < 0:
            return None
        return best

    def __repr__(self) -> str:
        pattern = f", metadata_pattern={self.metadata_pattern!r}" if self.metadata_pattern else ""
        return f"{type(self).__name__}({self.constraint!r}{pattern})"


class NpmRangeComparator(VersionComparator):
    """Base for dialects evaluated with node-semver semantics on the numeric core."""

    def __init__(self, constraint: str, metadata_pattern: Optional[str], npm_spec: str):
        super().__init__(constraint, metadata_pattern)
        self.spec = semantic_version.NpmSpec(npm_spec)

    def is_valid(self, current: Optional[str], candidate: str) -> bool:
        parts = split_version(candidate)
        if parts is None or not self._qualifies(parts):
            return False
        return self.spec.match(parts.as_semver())
