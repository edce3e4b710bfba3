"""Inclusive hyphen ranges: ``1.2.3 - 2.0.0`` and the compact ``25-29``.

A partial upper bound covers everything below the next value of its last
given segment, so ``25-29`` allows every ``29.x``.
"""

from __future__ import annotations

import re
from typing import List, Optional

from .base import NpmRangeComparator, Validated

HYPHEN_RE = re.compile(r"^(\d+(?:\.\d+){0,2})\s*-\s*(\d+(?:\.\d+){0,2})$")


def _pad(segments: List[int]) -> str:
    return ".".join(str(s) for s in (segments + [0, 0, 0])[:3])


def _upper_bound(text: str) -> str:
    segments = [int(s) for s in text.split(".")]
    if len(segments) == 3:
        return f"<={_pad(segments)}"
    segments[-1] += 1
    return f"<{_pad(segments)}"


class HyphenRangeComparator(NpmRangeComparator):
    name = "hyphen range"

    @classmethod
    def build(cls, to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
        m = HYPHEN_RE.match(to_version)
        if not m:
            return Validated.invalid(to_version, "to_version", "is not a hyphen range")
        lower = _pad([int(s) for s in m.group(1).split(".")])
        npm = f">={lower} {_upper_bound(m.group(2))}"
        return Validated(to_version, cls(to_version, metadata_pattern, npm))
