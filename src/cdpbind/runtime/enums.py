"""Closed string enumerations with a structured parse error."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any, Self


class ParseEnumError(ValueError):
    """A string is not one of an enum's wire values.

    Compares equal to another ``ParseEnumError`` with the same
    ``expected`` set and ``actual`` string.
    """

    def __init__(self, expected: tuple[str, ...], actual: str) -> None:
        self.expected = tuple(expected)
        self.actual = actual
        super().__init__(f"expected one of {list(self.expected)!r}; actual: {actual!r}")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ParseEnumError):
            return NotImplemented
        return (self.expected, self.actual) == (other.expected, other.actual)

    def __hash__(self) -> int:
        return hash((self.expected, self.actual))

    def __repr__(self) -> str:
        return f"ParseEnumError(expected={self.expected!r}, actual={self.actual!r})"


class _ClassValue:
    """Read-only attribute computed from the class it is looked up on."""

    def __init__(self, compute: Callable[[Any], Any]) -> None:
        self._compute = compute

    def __get__(self, obj: object, owner: type) -> Any:
        return self._compute(owner)


class ProtocolEnum(StrEnum):
    """Base of every generated enumeration.

    Members are declared in wire order; ``ENUM_VALUES`` and ``STR_VALUES``
    follow that order.
    """

    ENUM_VALUES = _ClassValue(lambda cls: tuple(cls))
    STR_VALUES = _ClassValue(lambda cls: tuple(member.value for member in cls))

    @classmethod
    def parse(cls, value: str) -> Self:
        """Wire string -> member.

        Raises:
            ParseEnumError: If *value* is not a declared wire value.
        """
        try:
            return cls(value)
        except ValueError:
            raise ParseEnumError(cls.STR_VALUES, value) from None

    def to_wire(self) -> str:
        """Member -> wire string; the exact inverse of :meth:`parse`."""
        return self.value

    def format(self, *args: Any, **kwargs: Any) -> str:
        """Without arguments, same as :meth:`to_wire`.

        With arguments this is ``str.format`` on the wire value, so members
        still work wherever a plain string is formatted.
        """
        if args or kwargs:
            return self.value.format(*args, **kwargs)
        return self.to_wire()
