"""Exact version constraints such as ``1.2.3`` or ``29.0-jre``."""

from __future__ import annotations

import re
from typing import Optional

from ..version import Version
from .base import Validated, VersionComparator
from .hyphen import HYPHEN_RE

_EXACT_RE = re.compile(r"^\d[\w.\-+]*$")
_WILDCARDS = frozenset({"x", "X", "*"})


class ExactVersionComparator(VersionComparator):
    """Accepts exactly one version; ordering is natural version ordering."""

    name = "exact version"

    def is_valid(self, current: Optional[str], candidate: str) -> bool:
        return candidate == self.constraint

    def compare(self, current: Optional[str], v1: str, v2: str) -> int:
        return Version(v1).compare_to(Version(v2))

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        if not _EXACT_RE.match(to_version):
            return Validated.invalid(to_version, "to_version", "is not an exact version")
        if any(segment in _WILDCARDS for segment in to_version.split(".")):
            return Validated.invalid(to_version, "to_version", "contains a wildcard segment")
        if HYPHEN_RE.match(to_version):
            return Validated.invalid(to_version, "to_version", "is a hyphen range")
        # An exact version already names its qualifier, so a pattern is rejected
        # here instead of being silently ignored.
        if metadata_pattern is not None:
            return Validated.invalid(to_version, "metadata_pattern", "is not supported for exact versions")
        return Validated(to_version, cls(to_version))
