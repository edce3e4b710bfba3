"""Version comparator family.

``validate`` picks the first dialect that recognizes a constraint, trying
exact, tilde, caret, x-range, hyphen, ``latest.patch`` and ``latest.release``
in that order.
"""

import re
from typing import Optional

from .base import Validated, ValidationFailure, VersionComparator, VersionParts, split_version
from .caret import CaretRangeComparator
from .exact import ExactVersionComparator
from .hyphen import HyphenRangeComparator
from .latest import LatestPatchComparator, LatestReleaseComparator
from .tilde import TildeRangeComparator
from .xrange import XRangeComparator

DIALECTS = (
    ExactVersionComparator,
    TildeRangeComparator,
    CaretRangeComparator,
    XRangeComparator,
    HyphenRangeComparator,
    LatestPatchComparator,
    LatestReleaseComparator,
)

_SEGMENT_DELIMITER = re.compile(r"[.$]")


def validate(to_version: str, metadata_pattern: Optional[str] = None) -> Validated:
    """Build the comparator for ``to_version``.

    Args:
        to_version: Constraint text, e.g. ``1.2.3``, ``~1.2``, ``1.x`` or ``latest.release``.
        metadata_pattern: Regular expression the text after the numeric core must match.

    Returns:
        A valid ``Validated`` holding the comparator, or one holding a failure per dialect.
    """
    if metadata_pattern is not None:
        try:
            re.compile(metadata_pattern)
        except re.error as e:
            return Validated.invalid(metadata_pattern, "metadata_pattern", f"must be a valid regular expression: {e}")

    to_version = (to_version or "").strip()
    failures = []
    for dialect in DIALECTS:
        result = dialect.build(to_version, metadata_pattern)
        if result.is_valid():
            return result
        failures.extend(result.failures)
    return Validated(to_version, failures=failures)


def _segments(version: str):
    return [s for s in _SEGMENT_DELIMITER.split(version) if s]


def major_version(version: str) -> str:
    """First segment of ``version``, split on ``.`` or ``$``."""
    segments = _segments(version)
    return segments[0] if segments else version


def minor_version(version: str) -> str:
    """Second segment of ``version``, or the whole string when there is none."""
    segments = _segments(version)
    return segments[1] if len(segments) > 1 else version


__all__ = [
    "DIALECTS",
    "CaretRangeComparator",
    "ExactVersionComparator",
    "HyphenRangeComparator",
    "LatestPatchComparator",
    "LatestReleaseComparator",
    "TildeRangeComparator",
    "Validated",
    "ValidationFailure",
    "VersionComparator",
    "VersionParts",
    "XRangeComparator",
    "major_version",
    "minor_version",
    "split_version",
    "validate",
]
