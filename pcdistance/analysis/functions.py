"""External numeric functions callable from path-condition expressions.
Engines record calls to library functions they do not execute symbolically
(``java/lang/Math:(D)D:sqrt``, ``math.sqrt``, ``sqrt``...). The registry
maps those ids onto Python callables. The default registry also carries
the ``smt.*`` operations that give SMT-LIB Int terms their own meaning.
"""

from __future__ import annotations

import math
import threading
from collections.abc import Callable
from typing import Any

from pcdistance.core.errors import UnsupportedExpressionError

NumericFunction = Callable[..., Any]


def _signum(x: float) -> float:
    if math.isnan(x):
        return x
    if x > 0:
        return 1.0
    if x < 0:
        return -1.0
    return x


def _rint(x: float) -> float:
    if math.isnan(x) or math.isinf(x):
        return x
    return float(round(x))


def _sqrt(x: float) -> float:
    return math.sqrt(x) if x >= 0 else math.nan


def _log(x: float) -> float:
    if x > 0:
        return math.log(x)
    return -math.inf if x == 0 else math.nan


def _log10(x: float) -> float:
    if x > 0:
        return math.log10(x)
    return -math.inf if x == 0 else math.nan


def _guarded(fn: NumericFunction) -> NumericFunction:
    """Domain errors become NaN, as in IEEE library functions."""

    def call(*args: Any) -> Any:
        try:
            return fn(*args)
        except (ValueError, ZeroDivisionError):
            return math.nan
        except OverflowError:
            return math.inf

    call.__name__ = getattr(fn, "__name__", "call")
    return call


_MATH_FUNCTIONS: dict[str, NumericFunction] = {
    "abs": abs,
    "sqrt": _sqrt,
    "cbrt": lambda x: math.copysign(abs(x) ** (1.0 / 3.0), x),
    "sin": _guarded(math.sin),
    "cos": _guarded(math.cos),
    "tan": _guarded(math.tan),
    "asin": _guarded(math.asin),
    "acos": _guarded(math.acos),
    "atan": math.atan,
    "atan2": math.atan2,
    "sinh": _guarded(math.sinh),
    "cosh": _guarded(math.cosh),
    "tanh": math.tanh,
    "exp": _guarded(math.exp),
    "log": _log,
    "log10": _log10,
    "pow": _guarded(math.pow),
    "floor": lambda x: float(math.floor(x)) if math.isfinite(x) else x,
    "ceil": lambda x: float(math.ceil(x)) if math.isfinite(x) else x,
    "min": min,
    "max": max,
    "hypot": math.hypot,
    "signum": _signum,
    "rint": _rint,
}


def _smt_div(a: Any, b: Any) -> Any:
    """Integer division with a non-negative remainder."""
    if isinstance(a, float) or isinstance(b, float) or b == 0:
        return math.nan
    return a // b if b > 0 else -(a // -b)


def _smt_mod(a: Any, b: Any) -> Any:
    if isinstance(a, float) or isinstance(b, float) or b == 0:
        return math.nan
    return a % abs(b)


def _smt_to_int(x: Any) -> Any:
    if isinstance(x, float) and not math.isfinite(x):
        return math.nan
    return math.floor(x)


# Unbounded SMT-LIB Int arithmetic; a zero divisor gives NaN
SMT_FUNCTIONS: dict[str, NumericFunction] = {
    "smt.add": lambda a, b: a + b,
    "smt.sub": lambda a, b: a - b,
    "smt.mul": lambda a, b: a * b,
    "smt.neg": lambda a: -a,
    "smt.div": _smt_div,
    "smt.mod": _smt_mod,
    "smt.to_int": _smt_to_int,
}


class FunctionRegistry:
    """Thread-safe mapping from external function ids to callables."""

    def __init__(self, functions: dict[str, NumericFunction] | None = None):
        self._functions: dict[str, NumericFunction] = dict(functions or {})
        self._lock = threading.RLock()

    def register(self, name: str, fn: NumericFunction) -> None:
        """Register ``fn`` under ``name``."""
        with self._lock:
            self._functions[name] = fn

    def unregister(self, name: str) -> bool:
        with self._lock:
            return self._functions.pop(name, None) is not None

    def candidates(self, function_id: str) -> list[str]:
        """Names tried, in order, when looking up ``function_id``.
        ``owner:descriptor:name`` ids are tried as given, then as
        ``owner.name`` (dotted), then as the bare ``name``.
        """
        names = [function_id]
        parts = function_id.split(":")
        if len(parts) == 3:
            owner, _, name = parts
            names.append(f"{owner.replace('/', '.')}.{name}")
            names.append(name)
        elif "." in function_id:
            names.append(function_id.rsplit(".", 1)[1])
        return names

    def resolve(self, function_id: str) -> NumericFunction:
        """Look up the callable for ``function_id``.
        Raises:
            UnsupportedExpressionError: No registered function matches.
        """
        with self._lock:
            for name in self.candidates(function_id):
                fn = self._functions.get(name)
                if fn is not None:
                    return fn
        raise UnsupportedExpressionError(f"Unknown external function {function_id}")

    def __contains__(self, function_id: str) -> bool:
        try:
            self.resolve(function_id)
        except UnsupportedExpressionError:
            return False
        return True

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._functions)

    def copy(self) -> FunctionRegistry:
        with self._lock:
            return FunctionRegistry(self._functions)


_default: FunctionRegistry | None = None


def default_registry() -> FunctionRegistry:
    """Get the shared registry of ``math`` and ``smt.*`` functions."""
    global _default
    if _default is None:
        _default = FunctionRegistry({**_MATH_FUNCTIONS, **SMT_FUNCTIONS})
    return _default


__all__ = ["NumericFunction", "SMT_FUNCTIONS", "FunctionRegistry", "default_registry"]
