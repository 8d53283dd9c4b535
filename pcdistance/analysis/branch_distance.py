"""Branch-distance compiler.
A predicate in negation normal form is lowered into a tree of closures that
computes how far a binding is from satisfying it:

- a comparison scores 0 when it holds, ``SMALL_DISTANCE + |L - R|`` when it
  does not (just ``SMALL_DISTANCE`` for ``!=``), and ``BIG_DISTANCE`` when
  ``L - R`` is not a number;
- a conjunction scores the sum of its sides, a disjunction their product.

Operands of comparisons, arithmetic, conversions and function arguments are
lowered in value mode and compute ordinary values with JVM numeric semantics.
"""

from __future__ import annotations

import math
from collections.abc import Callable, Mapping
from typing import Any

from pcdistance.analysis.functions import FunctionRegistry, default_registry
from pcdistance.analysis.normal_form import to_negation_normal_form
from pcdistance.core.errors import (
    MissingConstantError,
    UnboundSymbolError,
    UnsupportedExpressionError,
)
from pcdistance.core.expressions import (
    BinaryOp,
    Constant,
    Expression,
    FunctionApplication,
    NarrowingConversion,
    OpaqueTerm,
    Operator,
    Symbol,
    SymbolRef,
    UnaryOp,
    WideningConversion,
    symbols_in,
    walk,
)
from pcdistance.core.kinds import PrimitiveKind, cast, to_float32, wrap

SMALL_DISTANCE = 1.0
BIG_DISTANCE = 1e300


class Environment:
    """Values visible to a compiled formula during one evaluation."""

    __slots__ = ("bindings", "constants")

    def __init__(
        self, bindings: Mapping[Symbol, Any], constants: Mapping[int, Any] | None = None
    ):
        self.bindings = bindings
        self.constants = constants or {}


Evaluator = Callable[[Environment], Any]


def relation_distance(holds: bool, left: Any, right: Any, gradient: bool = True) -> float:
    """Distance of one comparison whose outcome is ``holds``."""
    if holds:
        return 0.0
    diff = float(left - right)
    if math.isnan(diff):
        return BIG_DISTANCE
    if not gradient:
        return SMALL_DISTANCE
    return SMALL_DISTANCE + abs(diff)


def _product(left: float, right: float) -> float:
    # 0 * inf is NaN; a satisfied side must still zero the disjunction
    if left == 0 or right == 0:
        return 0.0
    return left * right


_RELATIONS: dict[Operator, Callable[[Any, Any], bool]] = {
    Operator.EQ: lambda a, b: a == b,
    Operator.NE: lambda a, b: a != b,
    Operator.LT: lambda a, b: a < b,
    Operator.LE: lambda a, b: a <= b,
    Operator.GT: lambda a, b: a > b,
    Operator.GE: lambda a, b: a >= b,
}


def _literal(value: Any, kind: PrimitiveKind) -> Any:
    """Convert a constant-pool entry to a value of ``kind``."""
    if isinstance(value, str):
        text = value.strip()
        if kind is PrimitiveKind.BOOLEAN:
            return text.lower() == "true"
        if kind is PrimitiveKind.CHAR and len(text) == 1 and not text.isdigit():
            return ord(text)
        if kind.is_integral:
            return wrap(int(text, 0), kind)
        return cast(float(text), kind)
    return cast(value, kind)


def _as_ints(a: Any, b: Any) -> tuple[int, int] | None:
    """Integral operands, or None when NaN has propagated into them."""
    if isinstance(a, float):
        if math.isnan(a) or math.isinf(a):
            return None
        a = int(a)
    if isinstance(b, float):
        if math.isnan(b) or math.isinf(b):
            return None
        b = int(b)
    return int(a), int(b)


def _integral_op(op: Operator, kind: PrimitiveKind) -> Callable[[Any, Any], Any]:
    mask = 63 if kind is PrimitiveKind.LONG else 31
    bits = kind.bits

    def apply(a: Any, b: Any) -> Any:
        operands = _as_ints(a, b)
        if operands is None:
            return math.nan
        x, y = operands
        if op is Operator.ADD:
            return wrap(x + y, kind)
        if op is Operator.SUB:
            return wrap(x - y, kind)
        if op is Operator.MUL:
            return wrap(x * y, kind)
        if op is Operator.DIV or op is Operator.REM:
            if y == 0:
                return math.nan
            quotient = abs(x) // abs(y)
            if (x < 0) != (y < 0):
                quotient = -quotient
            if op is Operator.DIV:
                return wrap(quotient, kind)
            return wrap(x - y * quotient, kind)
        if op is Operator.SHL:
            return wrap(x << (y & mask), kind)
        if op is Operator.SHR:
            return wrap(x >> (y & mask), kind)
        if op is Operator.USHR:
            return wrap((x & ((1 << bits) - 1)) >> (y & mask), kind)
        if op is Operator.ANDBW:
            return wrap(x & y, kind)
        if op is Operator.ORBW:
            return wrap(x | y, kind)
        if op is Operator.XORBW:
            return wrap(x ^ y, kind)
        raise UnsupportedExpressionError(f"Operator {op.name} on {kind.name}")

    return apply


def _floating_div(a: float, b: float) -> float:
    if b == 0:
        if a == 0 or math.isnan(a):
            return math.nan
        return math.copysign(math.inf, a) * math.copysign(1.0, b)
    return a / b


def _floating_rem(a: float, b: float) -> float:
    try:
        return math.fmod(a, b)
    except ValueError:
        return math.nan


def _floating_op(op: Operator, kind: PrimitiveKind) -> Callable[[Any, Any], Any]:
    table: dict[Operator, Callable[[float, float], float]] = {
        Operator.ADD: lambda a, b: a + b,
        Operator.SUB: lambda a, b: a - b,
        Operator.MUL: lambda a, b: a * b,
        Operator.DIV: _floating_div,
        Operator.REM: _floating_rem,
    }
    if op not in table:
        raise UnsupportedExpressionError(f"Operator {op.name} on {kind.name}")
    fn = table[op]
    if kind is PrimitiveKind.FLOAT:
        return lambda a, b: to_float32(fn(float(a), float(b)))
    return lambda a, b: fn(float(a), float(b))


def _boolean_op(op: Operator) -> Callable[[Any, Any], Any]:
    table: dict[Operator, Callable[[Any, Any], bool]] = {
        Operator.ANDBW: lambda a, b: bool(a) & bool(b),
        Operator.ORBW: lambda a, b: bool(a) | bool(b),
        Operator.XORBW: lambda a, b: bool(a) ^ bool(b),
    }
    if op not in table:
        raise UnsupportedExpressionError(f"Operator {op.name} on BOOLEAN")
    return table[op]


def arithmetic(op: Operator, kind: PrimitiveKind) -> Callable[[Any, Any], Any]:
    """Binary arithmetic function for ``op`` at result kind ``kind``."""
    if kind is PrimitiveKind.BOOLEAN:
        return _boolean_op(op)
    if kind.is_integral:
        return _integral_op(op, kind)
    return _floating_op(op, kind)


class _Compiler:
    def __init__(self, functions: FunctionRegistry):
        self.functions = functions

    def predicate(self, expr: Expression) -> Evaluator:
        """Lower ``expr`` into a distance-valued evaluator."""
        if isinstance(expr, BinaryOp):
            if expr.op is Operator.AND:
                left, right = self.predicate(expr.left), self.predicate(expr.right)
                return lambda env: left(env) + right(env)
            if expr.op is Operator.OR:
                left, right = self.predicate(expr.left), self.predicate(expr.right)
                return lambda env: _product(left(env), right(env))
            if expr.op.is_comparison:
                return self.comparison(expr)
        if isinstance(expr, UnaryOp) and expr.op is Operator.NOT:
            raise UnsupportedExpressionError(
                f"Negation left in predicate position: {expr}", expr
            )
        if expr.kind is not PrimitiveKind.BOOLEAN:
            raise UnsupportedExpressionError(
                f"{expr} of kind {expr.kind.name} is not a predicate", expr
            )
        value = self.value(expr)
        return lambda env: 0.0 if value(env) else SMALL_DISTANCE

    def comparison(self, expr: BinaryOp) -> Evaluator:
        left, right = self.value(expr.left), self.value(expr.right)
        relation = _RELATIONS[expr.op]
        gradient = expr.op is not Operator.NE

        def distance(env: Environment) -> float:
            a, b = left(env), right(env)
            return relation_distance(relation(a, b), a, b, gradient)

        return distance

    def value(self, expr: Expression) -> Evaluator:
        """Lower ``expr`` into an evaluator of its plain value."""
        if isinstance(expr, Constant):
            return self.constant(expr)
        if isinstance(expr, SymbolRef):
            symbol = expr.symbol

            def lookup(env: Environment) -> Any:
                try:
                    return env.bindings[symbol]
                except KeyError:
                    raise UnboundSymbolError(symbol) from None

            return lookup
        if isinstance(expr, UnaryOp):
            operand = self.value(expr.operand)
            if expr.op is Operator.NOT:
                return lambda env: not operand(env)
            if expr.kind.is_integral:
                kind = expr.kind
                return lambda env: _negate_integral(operand(env), kind)
            return lambda env: -operand(env)
        if isinstance(expr, BinaryOp):
            left, right = self.value(expr.left), self.value(expr.right)
            if expr.op.is_comparison:
                relation = _RELATIONS[expr.op]
                return lambda env: relation(left(env), right(env))
            if expr.op is Operator.AND:
                return lambda env: bool(left(env)) and bool(right(env))
            if expr.op is Operator.OR:
                return lambda env: bool(left(env)) or bool(right(env))
            fn = arithmetic(expr.op, expr.kind)
            return lambda env: fn(left(env), right(env))
        if isinstance(expr, WideningConversion):
            return self.widening(expr)
        if isinstance(expr, NarrowingConversion):
            operand = self.value(expr.operand)
            kind = expr.kind
            return lambda env: cast(operand(env), kind)
        if isinstance(expr, FunctionApplication):
            fn = self.functions.resolve(expr.function)
            args = [self.value(arg) for arg in expr.args]
            return lambda env: fn(*(arg(env) for arg in args))
        if isinstance(expr, OpaqueTerm):
            raise UnsupportedExpressionError(f"Cannot evaluate opaque term {expr}", expr)
        raise UnsupportedExpressionError(
            f"Unknown expression node {type(expr).__name__}", expr
        )

    def constant(self, expr: Constant) -> Evaluator:
        if expr.pool_id is None:
            value = expr.value
            return lambda env: value
        pool_id, kind = expr.pool_id, expr.kind

        def lookup(env: Environment) -> Any:
            try:
                raw = env.constants[pool_id]
            except KeyError:
                raise MissingConstantError(pool_id) from None
            return _literal(raw, kind)

        return lookup

    def widening(self, expr: WideningConversion) -> Evaluator:
        operand = self.value(expr.operand)
        if expr.operand.kind is PrimitiveKind.BOOLEAN and expr.kind.is_numeric:
            one, zero = (1.0, 0.0) if expr.kind.is_floating else (1, 0)
            return lambda env: one if operand(env) else zero
        if expr.kind.is_floating:
            return lambda env: float(operand(env))
        return operand


def _negate_integral(value: Any, kind: PrimitiveKind) -> Any:
    if isinstance(value, float):
        return -value
    return wrap(-value, kind)


class DistanceFormula:
    """Compiled branch distance of one predicate.
    Calling the formula with a binding from symbols to concrete values
    returns a distance that is 0 exactly when the predicate holds.
    """

    def __init__(self, expression: Expression, normalized: Expression, evaluator: Evaluator):
        self.expression = expression
        self.normalized = normalized
        self.symbols: list[Symbol] = symbols_in(normalized)
        self.pool_ids: tuple[int, ...] = tuple(
            dict.fromkeys(
                node.pool_id
                for node in walk(normalized)
                if isinstance(node, Constant) and node.pool_id is not None
            )
        )
        self._evaluator = evaluator

    def __call__(
        self, bindings: Mapping[Symbol, Any], constants: Mapping[int, Any] | None = None
    ) -> float:
        return float(self._evaluator(Environment(bindings, constants)))

    def __repr__(self) -> str:
        return f"DistanceFormula({self.normalized})"


def compile_distance(
    expr: Expression, functions: FunctionRegistry | None = None
) -> DistanceFormula:
    """Normalize ``expr`` and compile its branch distance.
    Raises:
        UnsupportedExpressionError: The predicate holds a negation that cannot
            be eliminated, an opaque term, or an unknown external function.
    """
    normalized = to_negation_normal_form(expr)
    compiler = _Compiler(functions or default_registry())
    return DistanceFormula(expr, normalized, compiler.predicate(normalized))


def branch_distance(
    expr: Expression,
    bindings: Mapping[Symbol, Any],
    constants: Mapping[int, Any] | None = None,
    functions: FunctionRegistry | None = None,
) -> float:
    """One-shot form of :func:`compile_distance`."""
    return compile_distance(expr, functions)(bindings, constants)


__all__ = [
    "SMALL_DISTANCE",
    "BIG_DISTANCE",
    "Environment",
    "DistanceFormula",
    "relation_distance",
    "arithmetic",
    "compile_distance",
    "branch_distance",
]
