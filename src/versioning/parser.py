"""Parse version constraint strings into typed version specs.

Three shapes are recognized:

* ``LATEST`` / ``RELEASE``: dynamic markers
* anything containing ``[`` or ``(``: a bracketed range set such as
  ``[1.0,2.0)``, ``(,1.5]``, ``[1.2]`` or ``[1,2),[3,4]``
* everything else: an exact (soft) version requirement
"""

import logging
import re
from typing import List, Optional, Tuple

from .models import DynamicKind, DynamicVersion, ExactVersion, GroupArtifact, Range, RangeSet, VersionSpec

logger = logging.getLogger(__name__)

_PUNCTUATION = frozenset("[](),")
_TOKEN_RE = re.compile(r"\s*(?:([\[\]\(\),])|([^\s\[\]\(\),]+))")


class _RangeSyntaxError(Exception):
    def __init__(self, position: int, message: str):
        super().__init__(message)
        self.position = position


def _tokenize(text: str) -> List[Tuple[str, int]]:
    """Return (token, column) pairs; whitespace between tokens is ignored."""
    tokens = []
    pos = 0
    while pos < len(text):
        m = _TOKEN_RE.match(text, pos)
        if not m or m.end() == pos:
            break
        token = m.group(1) or m.group(2)
        if token:
            tokens.append((token, m.start(1) if m.group(1) else m.start(2)))
        pos = m.end()
    return tokens


class _RangeParser:
    """Recursive-descent parser for ``range (',' range)*``."""

    def __init__(self, text: str):
        self.tokens = _tokenize(text)
        self.index = 0

    def _peek(self) -> Optional[str]:
        return self.tokens[self.index][0] if self.index < len(self.tokens) else None

    def _column(self) -> int:
        if self.index < len(self.tokens):
            return self.tokens[self.index][1]
        return self.tokens[-1][1] + 1 if self.tokens else 0

    def _take(self) -> str:
        token = self._peek()
        if token is None:
            raise _RangeSyntaxError(self._column(), "unexpected end of input")
        self.index += 1
        return token

    def _version(self) -> str:
        column = self._column()
        token = self._take()
        if token in _PUNCTUATION:
            raise _RangeSyntaxError(column, f"expected a version, found '{token}'")
        return token

    def _is_version(self, token: Optional[str]) -> bool:
        return token is not None and token not in _PUNCTUATION

    def parse_range(self) -> Range:
        column = self._column()
        opener = self._take()
        if opener not in "[(":
            raise _RangeSyntaxError(column, f"expected '[' or '(', found '{opener}'")
        lower_closed = opener == "["

        if self._peek() == ",":
            # unbounded lower: (,1.0]
            self._take()
            lower, upper = None, self._version()
        else:
            lower = self._version()
            if self._peek() == ",":
                self._take()
                upper = self._version() if self._is_version(self._peek()) else None
            else:
                # exactly: [1.0]
                upper = lower

        column = self._column()
        closer = self._take()
        if closer not in "])":
            raise _RangeSyntaxError(column, f"expected ']' or ')', found '{closer}'")
        return Range(lower=lower, lower_closed=lower_closed, upper=upper, upper_closed=closer == "]")

    def parse(self, ranges: List[Range]) -> None:
        """Append each parsed range to ``ranges`` so partial results survive errors."""
        ranges.append(self.parse_range())
        while self._peek() is not None:
            column = self._column()
            if self._take() != ",":
                raise _RangeSyntaxError(column, "expected ',' between ranges")
            ranges.append(self.parse_range())


def parse_range_set(requested: str, group_artifact: Optional[GroupArtifact] = None) -> RangeSet:
    """Parse a bracketed range set, logging (not raising) syntax errors."""
    # Some published POMs leave ranges unclosed, e.g. "[1.8" in profile activation.
    if "]" not in requested and ")" not in requested:
        requested = requested + "]"

    ranges: List[Range] = []
    try:
        _RangeParser(requested).parse(ranges)
    except _RangeSyntaxError as e:
        logger.warning(
            "Syntax error at line 1:%d %s in version range '%s'%s",
            e.position,
            e,
            requested,
            f" for {group_artifact}" if group_artifact else "",
        )
    return RangeSet(tuple(ranges))


def parse_version_spec(requested: str, group_artifact: Optional[GroupArtifact] = None) -> VersionSpec:
    """Return the version spec for a constraint string.

    Args:
        requested: Any version text that can appear in a POM: a fixed version,
            a range, ``LATEST`` or ``RELEASE``.
        group_artifact: Coordinate the constraint belongs to; only used to make
            range syntax warnings traceable.
    """
    requested = requested.strip()
    if requested == DynamicKind.LATEST.value:
        return DynamicVersion(DynamicKind.LATEST)
    if requested == DynamicKind.RELEASE.value:
        return DynamicVersion(DynamicKind.RELEASE)
    if "[" in requested or "(" in requested:
        return parse_range_set(requested, group_artifact)
    return ExactVersion(requested)
