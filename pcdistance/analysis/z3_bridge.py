"""Bridge between Z3 terms and the pcdistance expression model.
Symbolic engines built on Z3 keep their path constraints as ``z3.BoolRef``
terms. :func:`from_z3` turns them into expression trees the distance
compiler understands; :func:`to_z3` goes the other way so that a
predicate can be handed back to the solver.

Supported sorts are Int, Real and Bool. Int terms become ``LONG``
expressions and Real terms ``DOUBLE`` expressions. Int arithmetic keeps
Z3's meaning: it is unbounded, ``div``/``mod`` are Euclidean and ``ToInt``
is floor, so it is expressed through the ``smt.*`` functions of
:func:`~pcdistance.analysis.functions.default_registry` rather than through
JVM operators. In the other direction, truncating JVM division, remainder
and narrowing are encoded exactly.
"""
from __future__ import annotations
from collections.abc import Iterable, Mapping
from typing import Any
import z3
from pcdistance.core.clauses import NumericAssumption, PathCondition
from pcdistance.core.errors import UnsupportedExpressionError
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
)
from pcdistance.core.kinds import PrimitiveKind
from pcdistance.core.origins import ROOT_PREFIX, Origin
_COMPARISON_TESTS = [
    (z3.is_eq, Operator.EQ),
    (z3.is_distinct, Operator.NE),
    (z3.is_lt, Operator.LT),
    (z3.is_le, Operator.LE),
    (z3.is_gt, Operator.GT),
    (z3.is_ge, Operator.GE),
]
_REAL_ARITHMETIC_TESTS = [
    (z3.is_add, Operator.ADD),
    (z3.is_sub, Operator.SUB),
    (z3.is_mul, Operator.MUL),
    (z3.is_div, Operator.DIV),
]
# Int terms are unbounded with Euclidean div/mod; no JVM operator matches
_INT_ARITHMETIC_TESTS = [
    (z3.is_add, "smt.add"),
    (z3.is_sub, "smt.sub"),
    (z3.is_mul, "smt.mul"),
    (z3.is_idiv, "smt.div"),
    (z3.is_mod, "smt.mod"),
]
_SMT_TO_Z3 = {
    "smt.add": lambda a, b: a + b,
    "smt.sub": lambda a, b: a - b,
    "smt.mul": lambda a, b: a * b,
    "smt.neg": lambda a: -a,
    "smt.div": lambda a, b: a / b,
    "smt.mod": lambda a, b: a % b,
    "smt.to_int": z3.ToInt,
}
def kind_of_sort(sort: z3.SortRef) -> PrimitiveKind:
    """Primitive kind used for terms of ``sort``."""
    sort_kind = sort.kind()
    if sort_kind == z3.Z3_BOOL_SORT:
        return PrimitiveKind.BOOLEAN
    if sort_kind == z3.Z3_INT_SORT:
        return PrimitiveKind.LONG
    if sort_kind == z3.Z3_REAL_SORT:
        return PrimitiveKind.DOUBLE
    raise UnsupportedExpressionError(f"Unsupported Z3 sort {sort}")
class _FromZ3:
    def __init__(self, symbols: Mapping[str, Symbol] | None):
        self.symbols: dict[str, Symbol] = dict(symbols or {})
    def symbol(self, name: str, kind: PrimitiveKind) -> Symbol:
        symbol = self.symbols.get(name)
        if symbol is None:
            origin = Origin.parse(name) if name.startswith(ROOT_PREFIX) else Origin.root_of(name)
            symbol = Symbol(origin, kind)
            self.symbols[name] = symbol
        return symbol
    def fold(self, op: Operator, args: list[Expression], kind: PrimitiveKind) -> Expression:
        result = args[0]
        for arg in args[1:]:
            result = BinaryOp(op, result, arg, kind)
        return result
    def fold_call(self, name: str, args: list[Expression], kind: PrimitiveKind) -> Expression:
        result = args[0]
        for arg in args[1:]:
            result = FunctionApplication(name, (result, arg), kind)
        return result
    def convert(self, e: z3.ExprRef) -> Expression:
        try:
            kind = kind_of_sort(e.sort())
        except UnsupportedExpressionError:
            return OpaqueTerm(str(e), PrimitiveKind.LONG)
        if z3.is_true(e):
            return Constant(True, kind)
        if z3.is_false(e):
            return Constant(False, kind)
        if z3.is_int_value(e):
            return Constant(e.as_long(), kind)
        if z3.is_rational_value(e):
            fraction = e.as_fraction()
            return Constant(fraction.numerator / fraction.denominator, kind)
        if not z3.is_app(e):
            return OpaqueTerm(str(e), kind)
        args = [self.convert(e.arg(i)) for i in range(e.num_args())]
        decl_kind = e.decl().kind()
        if decl_kind == z3.Z3_OP_UNINTERPRETED:
            name = e.decl().name()
            if not args:
                return SymbolRef(self.symbol(name, kind))
            return FunctionApplication(name, tuple(args), kind)
        if z3.is_not(e):
            return UnaryOp(Operator.NOT, args[0], kind)
        if z3.is_and(e):
            return self.fold(Operator.AND, args, kind)
        if z3.is_or(e):
            return self.fold(Operator.OR, args, kind)
        if z3.is_implies(e):
            return BinaryOp(
                Operator.OR, UnaryOp(Operator.NOT, args[0], kind), args[1], kind
            )
        for test, op in _COMPARISON_TESTS:
            if test(e):
                if len(args) != 2:
                    return OpaqueTerm(str(e), kind)
                return BinaryOp(op, args[0], args[1], kind)
        if decl_kind == z3.Z3_OP_UMINUS:
            if kind.is_integral:
                return FunctionApplication("smt.neg", (args[0],), kind)
            return UnaryOp(Operator.NEG, args[0], kind)
        if kind.is_integral:
            for test, name in _INT_ARITHMETIC_TESTS:
                if test(e):
                    return self.fold_call(name, args, kind)
        else:
            for test, op in _REAL_ARITHMETIC_TESTS:
                if test(e):
                    return self.fold(op, args, kind)
        if z3.is_to_real(e):
            return WideningConversion(args[0], kind)
        if z3.is_to_int(e):
            return FunctionApplication("smt.to_int", (args[0],), kind)
        return OpaqueTerm(str(e), kind)
def from_z3(
    expr: z3.ExprRef, symbols: Mapping[str, Symbol] | None = None
) -> Expression:
    """Convert a Z3 term into an expression tree.
    Args:
        expr: Z3 term over Int, Real and Bool sorts.
        symbols: Symbols to use for named Z3 constants. Other constants get
            the origin ``{ROOT}:<name>``, or ``<name>`` itself when it is
            already an origin.
    Returns:
        The expression; sub-terms with no counterpart become ``OpaqueTerm``.
    """
    return _FromZ3(symbols).convert(expr)
def numeric_assumptions(
    constraints: Iterable[z3.BoolRef], symbols: Mapping[str, Symbol] | None = None
) -> list[NumericAssumption]:
    """Wrap each Z3 path constraint into a numeric clause."""
    converter = _FromZ3(symbols)
    return [NumericAssumption(converter.convert(c)) for c in constraints]
def path_condition_from_z3(
    constraints: Iterable[z3.BoolRef], symbols: Mapping[str, Symbol] | None = None
) -> PathCondition:
    return PathCondition(numeric_assumptions(constraints, symbols))
def _z3_constant(value: Any, kind: PrimitiveKind) -> z3.ExprRef:
    if kind is PrimitiveKind.BOOLEAN:
        return z3.BoolVal(bool(value))
    if kind.is_integral:
        return z3.IntVal(int(value))
    if isinstance(value, float) and (value != value or value in (float("inf"), float("-inf"))):
        raise UnsupportedExpressionError(f"No Z3 real for {value}")
    return z3.RealVal(value)
def _z3_variable(symbol: Symbol) -> z3.ExprRef:
    name = str(symbol.origin)
    if symbol.kind is PrimitiveKind.BOOLEAN:
        return z3.Bool(name)
    if symbol.kind.is_integral:
        return z3.Int(name)
    if symbol.kind.is_floating:
        return z3.Real(name)
    raise UnsupportedExpressionError(f"No Z3 variable for reference {symbol}")
def _truncated_div(left: z3.ArithRef, right: z3.ArithRef) -> z3.ArithRef:
    quotient = z3.If(left >= 0, left, -left) / z3.If(right >= 0, right, -right)
    return z3.If((left >= 0) == (right >= 0), quotient, -quotient)
def to_z3(expr: Expression, constants: Mapping[int, Any] | None = None) -> z3.ExprRef:
    """Convert an expression tree into a Z3 term.
    Integral values are taken as unbounded; JVM overflow is not modelled.
    Raises:
        UnsupportedExpressionError: For opaque terms, bitwise operators and
            function applications other than ``smt.*``, which have no
            Int/Real counterpart.
    """
    if isinstance(expr, Constant):
        value = expr.value
        if expr.pool_id is not None:
            if constants is None or expr.pool_id not in constants:
                raise UnsupportedExpressionError(f"Unresolved pooled constant {expr}")
            value = constants[expr.pool_id]
        return _z3_constant(value, expr.kind)
    if isinstance(expr, SymbolRef):
        return _z3_variable(expr.symbol)
    if isinstance(expr, UnaryOp):
        operand = to_z3(expr.operand, constants)
        if expr.op is Operator.NOT:
            return z3.Not(operand)
        return -operand
    if isinstance(expr, BinaryOp):
        left, right = to_z3(expr.left, constants), to_z3(expr.right, constants)
        op = expr.op
        if op is Operator.AND:
            return z3.And(left, right)
        if op is Operator.OR:
            return z3.Or(left, right)
        if op is Operator.EQ:
            return left == right
        if op is Operator.NE:
            return left != right
        if op is Operator.LT:
            return left < right
        if op is Operator.LE:
            return left <= right
        if op is Operator.GT:
            return left > right
        if op is Operator.GE:
            return left >= right
        if op is Operator.ADD:
            return left + right
        if op is Operator.SUB:
            return left - right
        if op is Operator.MUL:
            return left * right
        if op is Operator.DIV:
            if expr.kind.is_integral:
                return _truncated_div(left, right)
            return left / right
        if op is Operator.REM and expr.kind.is_integral:
            return left - right * _truncated_div(left, right)
        raise UnsupportedExpressionError(f"No Z3 counterpart for {op.name}", expr)
    if isinstance(expr, WideningConversion):
        operand = to_z3(expr.operand, constants)
        if expr.operand.kind is PrimitiveKind.BOOLEAN:
            one, zero = (
                (z3.RealVal(1), z3.RealVal(0))
                if expr.kind.is_floating
                else (z3.IntVal(1), z3.IntVal(0))
            )
            return z3.If(operand, one, zero)
        if expr.kind.is_floating and expr.operand.kind.is_integral:
            return z3.ToReal(operand)
        return operand
    if isinstance(expr, NarrowingConversion):
        operand = to_z3(expr.operand, constants)
        if expr.kind.is_integral and expr.operand.kind.is_floating:
            return z3.If(operand >= 0, z3.ToInt(operand), -z3.ToInt(-operand))
        return operand
    if isinstance(expr, FunctionApplication) and expr.function in _SMT_TO_Z3:
        return _SMT_TO_Z3[expr.function](*(to_z3(arg, constants) for arg in expr.args))
    raise UnsupportedExpressionError(f"No Z3 counterpart for {expr}", expr)
__all__ = [
    "kind_of_sort",
    "from_z3",
    "to_z3",
    "numeric_assumptions",
    "path_condition_from_z3",
]
