"""Caret ranges: ``^1.2.3`` allows changes that keep the left-most non-zero segment."""

from __future__ import annotations

import re
from typing import Optional

from .base import NpmRangeComparator, Validated

_CARET_RE = re.compile(r"^\^\s*(\d+)(?:\.(\d+))?(?:\.(\d+))?$")


class CaretRangeComparator(NpmRangeComparator):
    name = "caret range"

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        m = _CARET_RE.match(to_version)
        if not m:
            return Validated.invalid(to_version, "to_version", "is not a caret range")
        npm = "^" + ".".join(g for g in m.groups() if g is not None)
        return Validated(to_version, cls(to_version, metadata_pattern, npm))
