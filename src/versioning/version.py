"""Natural ordering of Maven version strings.

Follows Maven's ComparableVersion rules: versions split on ``.``, ``-`` and
digit/letter transitions into integer items, qualifier items and nested
lists (introduced by ``-`` or a transition). Known qualifiers order as
``alpha < beta < milestone < rc < snapshot < (release) < sp``; unknown
qualifiers sort after ``sp``, lexically among themselves.
"""

from __future__ import annotations

import functools
from typing import List, Optional, Union

_QUALIFIERS = ["alpha", "beta", "milestone", "rc", "snapshot", "", "sp"]
_ALIASES = {"ga": "", "final": "", "release": "", "cr": "rc"}
_RELEASE_INDEX = str(_QUALIFIERS.index(""))


def _comparable_qualifier(qualifier: str) -> str:
    try:
        return str(_QUALIFIERS.index(qualifier))
    except ValueError:
        return f"{len(_QUALIFIERS)}-{qualifier}"


def _cmp(a, b) -> int:
    return (a > b) - (a < b)


class _IntItem:
    __slots__ = ("value",)

    def __init__(self, value: int):
        self.value = value

    def is_null(self) -> bool:
        return self.value == 0

    def compare(self, other: Optional["_Item"]) -> int:
        if other is None:
            return 0 if self.value == 0 else 1
        if isinstance(other, _IntItem):
            return _cmp(self.value, other.value)
        return 1  # 1.1 > 1-sp and 1.1 > 1-1

    def __repr__(self) -> str:
        return str(self.value)


class _StringItem:
    __slots__ = ("value",)

    def __init__(self, value: str, followed_by_digit: bool):
        if followed_by_digit and len(value) == 1:
            value = {"a": "alpha", "b": "beta", "m": "milestone"}.get(value, value)
        self.value = _ALIASES.get(value, value)

    def is_null(self) -> bool:
        return _comparable_qualifier(self.value) == _RELEASE_INDEX

    def compare(self, other: Optional["_Item"]) -> int:
        if other is None:
            return _cmp(_comparable_qualifier(self.value), _RELEASE_INDEX)
        if isinstance(other, _StringItem):
            return _cmp(_comparable_qualifier(self.value), _comparable_qualifier(other.value))
        return -1

    def __repr__(self) -> str:
        return self.value


class _ListItem(list):

    def is_null(self) -> bool:
        return len(self) == 0

    def normalize(self) -> None:
        for i in range(len(self) - 1, -1, -1):
            item = self[i]
            if item.is_null():
                del self[i]
            elif not isinstance(item, _ListItem):
                break

    def compare(self, other: Optional["_Item"]) -> int:
        if other is None:
            if not self:
                return 0
            return self[0].compare(None)
        if isinstance(other, _IntItem):
            return -1
        if isinstance(other, _StringItem):
            return 1
        for i in range(max(len(self), len(other))):
            left = self[i] if i < len(self) else None
            right = other[i] if i < len(other) else None
            if left is None:
                result = 0 if right is None else -1 * right.compare(None)
            else:
                result = left.compare(right)
            if result != 0:
                return result
        return 0


_Item = Union[_IntItem, _StringItem, _ListItem]


def _parse_item(is_digit: bool, buf: str) -> _Item:
    if is_digit:
        return _IntItem(int(buf))
    return _StringItem(buf, False)


def _parse(version: str) -> _ListItem:
    version = version.lower()
    items = _ListItem()
    current = items
    stack: List[_ListItem] = [items]
    is_digit = False
    start = 0

    for i, c in enumerate(version):
        if c == ".":
            current.append(_IntItem(0) if i == start else _parse_item(is_digit, version[start:i]))
            start = i + 1
        elif c == "-":
            current.append(_IntItem(0) if i == start else _parse_item(is_digit, version[start:i]))
            start = i + 1
            nested = _ListItem()
            current.append(nested)
            current = nested
            stack.append(current)
        elif c.isdigit():
            if not is_digit and i > start:
                current.append(_StringItem(version[start:i], True))
                start = i
                nested = _ListItem()
                current.append(nested)
                current = nested
                stack.append(current)
            is_digit = True
        else:
            if is_digit and i > start:
                current.append(_parse_item(True, version[start:i]))
                start = i
                nested = _ListItem()
                current.append(nested)
                current = nested
                stack.append(current)
            is_digit = False

    if len(version) > start:
        current.append(_parse_item(is_digit, version[start:]))

    while stack:
        stack.pop().normalize()
    return items


@functools.total_ordering
class Version:
    """A version string with Maven's natural ordering.

    ``str(Version(s))`` is always ``s``; equality follows the ordering, so
    ``Version("1.0") == Version("1")``.
    """

    __slots__ = ("_raw", "_items")

    def __init__(self, raw: str):
        self._raw = raw
        self._items = _parse(raw)

    def compare_to(self, other: "Version") -> int:
        return self._items.compare(other._items)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) == 0

    def __lt__(self, other: "Version") -> bool:
        if not isinstance(other, Version):
            return NotImplemented
        return self.compare_to(other) < 0

    def __hash__(self) -> int:
        return hash(repr(self._items))

    def __str__(self) -> str:
        return self._raw

    def __repr__(self) -> str:
        return f"Version({self._raw!r})"


def compare_versions(left: str, right: str) -> int:
    """Return -1, 0 or 1 comparing two version strings naturally."""
    return Version(left).compare_to(Version(right))
