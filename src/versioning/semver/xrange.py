"""Wildcard ranges: ``*``, ``1.x``, ``1.2.*``."""

from __future__ import annotations

import re
from typing import Optional

from .base import NpmRangeComparator, Validated

_PART = r"(\d+|[xX*])"
_XRANGE_RE = re.compile(rf"^{_PART}(?:\.{_PART})?(?:\.{_PART})?$")


def _is_wildcard(part: Optional[str]) -> bool:
    return part is not None and part in ("x", "X", "*")


class XRangeComparator(NpmRangeComparator):
    name = "x-range"

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        m = _XRANGE_RE.match(to_version)
        if not m:
            return Validated.invalid(to_version, "to_version", "is not an x-range")
        parts = [p for p in m.groups() if p is not None]
        wildcard_at = next((i for i, p in enumerate(parts) if _is_wildcard(p)), None)
        if wildcard_at is None:
            return Validated.invalid(to_version, "to_version", "has no wildcard segment")
        if any(not _is_wildcard(p) for p in parts[wildcard_at:]):
            return Validated.invalid(to_version, "to_version", "has a fixed segment after a wildcard")

        fixed = [int(p) for p in parts[:wildcard_at]]
        if not fixed:
            npm = ">=0.0.0"
        elif len(fixed) == 1:
            npm = f">={fixed[0]}.0.0 <{fixed[0] + 1}.0.0"
        else:
            npm = f">={fixed[0]}.{fixed[1]}.0 <{fixed[0]}.{fixed[1] + 1}.0"
        return Validated(to_version, cls(to_version, metadata_pattern, npm))
