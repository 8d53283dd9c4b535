"""Error taxonomy for pcdistance.
Every error here aborts the distance computation for the candidate at hand.
A low similarity score means "evaluable and violated"; an error means the
clause or expression cannot be evaluated at all.
"""

from __future__ import annotations

from typing import Any


class DistanceError(Exception):
    """Base class for errors raised while computing a distance."""


class UnsupportedExpressionError(DistanceError):
    """An expression contains a term that cannot be normalized or evaluated."""

    def __init__(self, message: str, expression: Any = None):
        self.expression = expression
        super().__init__(message)


class StructuralInconsistencyError(DistanceError):
    """The path condition violates an ordering or heap invariant."""

    def __init__(self, message: str, heap_id: int | None = None):
        self.heap_id = heap_id
        super().__init__(message)


class TypeMismatchError(DistanceError):
    """A symbol's declared kind disagrees with the value bound to its origin."""

    def __init__(self, origin: Any, expected: Any, value: Any):
        self.origin = origin
        self.expected = expected
        self.value = value
        super().__init__(
            f"Value at {origin} does not match {expected}: "
            f"got {type(value).__name__} {value!r}"
        )


class UnboundInputError(DistanceError):
    """The candidate does not supply a value for a root input."""

    def __init__(self, origin: Any):
        self.origin = origin
        super().__init__(f"No candidate value for input {origin}")


class UnboundSymbolError(DistanceError):
    """A distance formula was evaluated without a binding for a symbol."""

    def __init__(self, symbol: Any):
        self.symbol = symbol
        super().__init__(f"No binding for symbol {symbol}")


class MissingConstantError(DistanceError):
    """A pooled constant id is absent from the constant pool."""

    def __init__(self, pool_id: int):
        self.pool_id = pool_id
        super().__init__(f"Constant #{pool_id} is not in the constant pool")


class OriginSyntaxError(DistanceError, ValueError):
    """An origin string is malformed."""

    def __init__(self, text: str, position: int, reason: str):
        self.text = text
        self.position = position
        super().__init__(f"Malformed origin {text!r} at {position}: {reason}")


__all__ = [
    "DistanceError",
    "UnsupportedExpressionError",
    "StructuralInconsistencyError",
    "TypeMismatchError",
    "UnboundInputError",
    "UnboundSymbolError",
    "MissingConstantError",
    "OriginSyntaxError",
]
