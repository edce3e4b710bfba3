"""``latest.patch`` and ``latest.release`` selectors."""

from __future__ import annotations

from typing import Optional

from .base import Validated, VersionComparator, split_version

LATEST_PATCH = "latest.patch"
LATEST_RELEASE = "latest.release"


class LatestPatchComparator(VersionComparator):
    """Any qualifying version sharing major and minor with the current one."""

    name = "latest patch"

    def is_valid(self, current: Optional[str], candidate: str) -> bool:
        parts = split_version(candidate)
        if parts is None or not self._qualifies(parts):
            return False
        now = split_version(current)
        if now is None:
            return False
        return parts.major == now.major and parts.minor == now.minor

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        if to_version != LATEST_PATCH:
            return Validated.invalid(to_version, "to_version", f"is not {LATEST_PATCH}")
        return Validated(to_version, cls(to_version, metadata_pattern))


class LatestReleaseComparator(VersionComparator):
    """Any qualifying version."""

    name = "latest release"

    def is_valid(self, current: Optional[str], candidate: str) -> bool:
        parts = split_version(candidate)
        return parts is not None and self._qualifies(parts)

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        if to_version != LATEST_RELEASE:
            return Validated.invalid(to_version, "to_version", f"is not {LATEST_RELEASE}")
        return Validated(to_version, cls(to_version, metadata_pattern))
