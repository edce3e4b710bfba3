"""Tilde ranges: ``~1.2.3`` allows patch-level changes, ``~1`` minor-level ones."""

from __future__ import annotations

import re
from typing import Optional

from .base import NpmRangeComparator, Validated

_TILDE_RE = re.compile(r"^~\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


class TildeRangeComparator(NpmRangeComparator):
    name = "tilde range"

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        m = _TILDE_RE.match(to_version)
        if not m:
            return Validated.invalid(to_version, "to_version", "is not a tilde range")
        npm = "~" + ".".join(g for g in m.groups() if g is not None)
        return Validated(to_version, cls(to_version, metadata_pattern, npm))
