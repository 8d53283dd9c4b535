"""Primitive value kinds for pcdistance.
This module defines the static kinds carried by expression nodes and symbols,
together with the JVM-style numeric casts used when lowering conversions.
"""

from __future__ import annotations

import math
import struct
from enum import Enum, auto
from typing import Any


class PrimitiveKind(Enum):
    """Static primitive kind of an expression node or a primitive symbol."""

    BOOLEAN = auto()
    BYTE = auto()
    CHAR = auto()
    SHORT = auto()
    INT = auto()
    LONG = auto()
    FLOAT = auto()
    DOUBLE = auto()

    @property
    def is_integral(self) -> bool:
        return self in _INTEGRAL_BITS

    @property
    def is_floating(self) -> bool:
        return self in (PrimitiveKind.FLOAT, PrimitiveKind.DOUBLE)

    @property
    def is_numeric(self) -> bool:
        return self is not PrimitiveKind.BOOLEAN

    @property
    def bits(self) -> int:
        """Width in bits (1 for booleans)."""
        if self is PrimitiveKind.BOOLEAN:
            return 1
        if self is PrimitiveKind.FLOAT:
            return 32
        if self is PrimitiveKind.DOUBLE:
            return 64
        return _INTEGRAL_BITS[self]

    @property
    def signed(self) -> bool:
        return self is not PrimitiveKind.CHAR and self is not PrimitiveKind.BOOLEAN

    @property
    def value_range(self) -> tuple[int, int]:
        """Inclusive range of an integral kind."""
        if not self.is_integral:
            raise ValueError(f"{self.name} is not an integral kind")
        if not self.signed:
            return 0, (1 << self.bits) - 1
        half = 1 << (self.bits - 1)
        return -half, half - 1


class ValueKind(Enum):
    """Kind of a symbol that is not primitive."""

    REFERENCE = auto()


_INTEGRAL_BITS: dict[PrimitiveKind, int] = {
    PrimitiveKind.BYTE: 8,
    PrimitiveKind.CHAR: 16,
    PrimitiveKind.SHORT: 16,
    PrimitiveKind.INT: 32,
    PrimitiveKind.LONG: 64,
}

_TYPE_CODES: dict[str, PrimitiveKind] = {
    "Z": PrimitiveKind.BOOLEAN,
    "B": PrimitiveKind.BYTE,
    "C": PrimitiveKind.CHAR,
    "S": PrimitiveKind.SHORT,
    "I": PrimitiveKind.INT,
    "J": PrimitiveKind.LONG,
    "F": PrimitiveKind.FLOAT,
    "D": PrimitiveKind.DOUBLE,
}


def kind_from_code(code: str) -> PrimitiveKind:
    """Map a one-letter type descriptor (``I``, ``J``, ``D`` ...) to a kind."""
    try:
        return _TYPE_CODES[code]
    except KeyError:
        raise ValueError(f"Unknown primitive type code: {code!r}") from None


def wrap(value: int, kind: PrimitiveKind) -> int:
    """Two's-complement wrap of an integer to the width of ``kind``."""
    bits = kind.bits
    value &= (1 << bits) - 1
    if kind.signed and value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def _float_to_integral(value: float, kind: PrimitiveKind) -> int:
    if math.isnan(value):
        return 0
    wide = PrimitiveKind.LONG if kind is PrimitiveKind.LONG else PrimitiveKind.INT
    lo, hi = wide.value_range
    if value <= lo:
        result = lo
    elif value >= hi:
        result = hi
    else:
        result = int(value)
    return wrap(result, kind)


def to_float32(value: float) -> float:
    """Round a Python float through IEEE single precision."""
    try:
        return struct.unpack("f", struct.pack("f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def cast(value: Any, kind: PrimitiveKind) -> Any:
    """Numeric cast of ``value`` to ``kind`` with JVM semantics."""
    if kind is PrimitiveKind.BOOLEAN:
        return bool(value)
    if isinstance(value, bool):
        value = int(value)
    if kind.is_integral:
        if isinstance(value, float):
            return _float_to_integral(value, kind)
        return wrap(int(value), kind)
    if kind is PrimitiveKind.FLOAT:
        return to_float32(float(value))
    return float(value)


def accepts(kind: PrimitiveKind, value: Any) -> bool:
    """Check whether a concrete value is a legal binding for ``kind``."""
    if kind is PrimitiveKind.BOOLEAN:
        return isinstance(value, bool)
    if isinstance(value, bool):
        return False
    if kind is PrimitiveKind.CHAR and isinstance(value, str):
        return len(value) == 1
    if kind.is_integral:
        return isinstance(value, int)
    return isinstance(value, (int, float))


def coerce(kind: PrimitiveKind, value: Any) -> Any:
    """Bring an accepted binding to the canonical Python type for ``kind``."""
    if kind is PrimitiveKind.CHAR and isinstance(value, str):
        return ord(value)
    if kind.is_floating:
        return float(value)
    return value


__all__ = [
    "PrimitiveKind",
    "ValueKind",
    "kind_from_code",
    "wrap",
    "to_float32",
    "cast",
    "accepts",
    "coerce",
]
