"""Expression model for pcdistance.
Path-condition predicates arrive from the symbolic engine as trees over
symbols and constants. Every node kind is a frozen dataclass and
``Expression`` is the union of them; traversals in the analysis package
dispatch on the node class and fail loudly on anything else.
"""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum, auto
from typing import Any, Union

from pcdistance.core.kinds import PrimitiveKind, ValueKind
from pcdistance.core.origins import Origin


class Operator(Enum):
    """Unary and binary operators of the expression model."""

    NEG = auto()
    NOT = auto()
    AND = auto()
    OR = auto()
    EQ = auto()
    NE = auto()
    LT = auto()
    LE = auto()
    GT = auto()
    GE = auto()
    ADD = auto()
    SUB = auto()
    MUL = auto()
    DIV = auto()
    REM = auto()
    SHL = auto()
    SHR = auto()
    USHR = auto()
    ANDBW = auto()
    ORBW = auto()
    XORBW = auto()

    @property
    def text(self) -> str:
        return OPERATOR_TEXT[self]

    @property
    def is_unary(self) -> bool:
        return self in (Operator.NEG, Operator.NOT)

    @property
    def is_logical(self) -> bool:
        return self in (Operator.AND, Operator.OR)

    @property
    def is_comparison(self) -> bool:
        return self in COMPARISONS

    @property
    def is_arithmetic(self) -> bool:
        return not (self.is_unary or self.is_logical or self.is_comparison)

    @staticmethod
    def from_text(text: str) -> Operator:
        """Look up a binary operator by its infix spelling."""
        for op, spelling in OPERATOR_TEXT.items():
            if spelling == text and not op.is_unary:
                return op
        raise ValueError(f"Unknown binary operator: {text!r}")


OPERATOR_TEXT: dict[Operator, str] = {
    Operator.NEG: "-",
    Operator.NOT: "!",
    Operator.AND: "&&",
    Operator.OR: "||",
    Operator.EQ: "==",
    Operator.NE: "!=",
    Operator.LT: "<",
    Operator.LE: "<=",
    Operator.GT: ">",
    Operator.GE: ">=",
    Operator.ADD: "+",
    Operator.SUB: "-",
    Operator.MUL: "*",
    Operator.DIV: "/",
    Operator.REM: "%",
    Operator.SHL: "<<",
    Operator.SHR: ">>",
    Operator.USHR: ">>>",
    Operator.ANDBW: "&",
    Operator.ORBW: "|",
    Operator.XORBW: "^",
}

COMPARISONS = frozenset(
    {Operator.EQ, Operator.NE, Operator.LT, Operator.LE, Operator.GT, Operator.GE}
)

_DUALS: dict[Operator, Operator] = {
    Operator.AND: Operator.OR,
    Operator.OR: Operator.AND,
    Operator.GT: Operator.LE,
    Operator.LE: Operator.GT,
    Operator.GE: Operator.LT,
    Operator.LT: Operator.GE,
    Operator.EQ: Operator.NE,
    Operator.NE: Operator.EQ,
}


def dual(op: Operator) -> Operator:
    """Operator whose result is the negation of ``op`` (an involution)."""
    try:
        return _DUALS[op]
    except KeyError:
        raise ValueError(f"{op.name} has no dual") from None


@dataclass(frozen=True)
class Symbol:
    """An input-derived value, identified by its origin.
    Attributes:
        origin: Structural path from the unit's inputs to the value.
        kind: Primitive kind, or ``ValueKind.REFERENCE``.
        static_type: Declared type name, for references only.
    """

    origin: Origin
    kind: PrimitiveKind | ValueKind
    static_type: str | None = None

    def __post_init__(self) -> None:
        if not isinstance(self.origin, Origin):
            object.__setattr__(self, "origin", Origin.parse(self.origin))

    @property
    def is_reference(self) -> bool:
        return self.kind is ValueKind.REFERENCE

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Symbol):
            return NotImplemented
        return self.origin == other.origin and self.kind == other.kind

    def __hash__(self) -> int:
        return hash((self.origin, self.kind))

    def __str__(self) -> str:
        return str(self.origin)


@dataclass(frozen=True)
class Constant:
    """Literal value, inline or held in the constant pool under ``pool_id``."""

    value: Any
    kind: PrimitiveKind
    pool_id: int | None = None

    def __str__(self) -> str:
        if self.pool_id is not None:
            return f"#{self.pool_id}"
        if isinstance(self.value, bool):
            return "true" if self.value else "false"
        return str(self.value)


@dataclass(frozen=True)
class SymbolRef:
    symbol: Symbol

    @property
    def kind(self) -> PrimitiveKind:
        return self.symbol.kind

    def __str__(self) -> str:
        return str(self.symbol)


@dataclass(frozen=True)
class UnaryOp:
    op: Operator
    operand: Expression
    kind: PrimitiveKind

    def __str__(self) -> str:
        return f"{self.op.text}({self.operand})"


@dataclass(frozen=True)
class BinaryOp:
    op: Operator
    left: Expression
    right: Expression
    kind: PrimitiveKind

    def __str__(self) -> str:
        return f"({self.left}) {self.op.text} ({self.right})"


@dataclass(frozen=True)
class WideningConversion:
    operand: Expression
    kind: PrimitiveKind

    def __str__(self) -> str:
        return f"WIDEN-{self.kind.name}({self.operand})"


@dataclass(frozen=True)
class NarrowingConversion:
    operand: Expression
    kind: PrimitiveKind

    def __str__(self) -> str:
        return f"({self.kind.name.lower()}) ({self.operand})"


@dataclass(frozen=True)
class FunctionApplication:
    """Call of an external numeric function, identified by ``function``."""

    function: str
    args: tuple[Expression, ...]
    kind: PrimitiveKind

    def __str__(self) -> str:
        return f"{self.function}({', '.join(str(a) for a in self.args)})"


@dataclass(frozen=True)
class OpaqueTerm:
    """A term the engine could not describe further."""

    name: str
    kind: PrimitiveKind

    def __str__(self) -> str:
        return self.name


Expression = Union[
    Constant,
    SymbolRef,
    UnaryOp,
    BinaryOp,
    WideningConversion,
    NarrowingConversion,
    FunctionApplication,
    OpaqueTerm,
]


def children(expr: Expression) -> tuple[Expression, ...]:
    """Direct sub-expressions in evaluation order."""
    if isinstance(expr, (UnaryOp, WideningConversion, NarrowingConversion)):
        return (expr.operand,)
    if isinstance(expr, BinaryOp):
        return (expr.left, expr.right)
    if isinstance(expr, FunctionApplication):
        return expr.args
    return ()


def walk(expr: Expression) -> Iterator[Expression]:
    """Pre-order, left-to-right traversal."""
    stack = [expr]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(children(node)))


def symbols_in(expr: Expression) -> list[Symbol]:
    """Distinct symbols of ``expr`` in order of first occurrence."""
    seen: dict[Symbol, None] = {}
    for node in walk(expr):
        if isinstance(node, SymbolRef):
            seen.setdefault(node.symbol, None)
    return list(seen)


_RANK = {
    PrimitiveKind.BOOLEAN: 0,
    PrimitiveKind.BYTE: 1,
    PrimitiveKind.SHORT: 2,
    PrimitiveKind.CHAR: 2,
    PrimitiveKind.INT: 3,
    PrimitiveKind.LONG: 4,
    PrimitiveKind.FLOAT: 5,
    PrimitiveKind.DOUBLE: 6,
}


def promote(left: PrimitiveKind, right: PrimitiveKind) -> PrimitiveKind:
    """Binary numeric promotion."""
    widest = max(left, right, key=_RANK.__getitem__)
    if _RANK[widest] < _RANK[PrimitiveKind.INT]:
        return PrimitiveKind.INT
    return widest


def const(value: Any, kind: PrimitiveKind | None = None) -> Constant:
    if kind is None:
        if isinstance(value, bool):
            kind = PrimitiveKind.BOOLEAN
        elif isinstance(value, int):
            lo, hi = PrimitiveKind.INT.value_range
            kind = PrimitiveKind.INT if lo <= value <= hi else PrimitiveKind.LONG
        else:
            kind = PrimitiveKind.DOUBLE
    return Constant(value, kind)


def pooled(pool_id: int, kind: PrimitiveKind) -> Constant:
    return Constant(None, kind, pool_id=pool_id)


def sym(
    origin: str | Origin, kind: PrimitiveKind = PrimitiveKind.INT
) -> SymbolRef:
    return SymbolRef(Symbol(Origin.of(origin), kind))


def not_(operand: Expression) -> UnaryOp:
    return UnaryOp(Operator.NOT, operand, PrimitiveKind.BOOLEAN)


def neg(operand: Expression) -> UnaryOp:
    return UnaryOp(Operator.NEG, operand, operand.kind)


def _fold(op: Operator, operands: tuple[Expression, ...]) -> Expression:
    result = operands[0]
    for operand in operands[1:]:
        result = BinaryOp(op, result, operand, PrimitiveKind.BOOLEAN)
    return result


def and_(first: Expression, *rest: Expression) -> Expression:
    return _fold(Operator.AND, (first,) + rest)


def or_(first: Expression, *rest: Expression) -> Expression:
    return _fold(Operator.OR, (first,) + rest)


def cmp(left: Expression, op: Operator | str, right: Expression) -> BinaryOp:
    if isinstance(op, str):
        op = Operator.from_text(op)
    if not op.is_comparison:
        raise ValueError(f"{op.name} is not a comparison")
    return BinaryOp(op, left, right, PrimitiveKind.BOOLEAN)


def arith(
    left: Expression,
    op: Operator | str,
    right: Expression,
    kind: PrimitiveKind | None = None,
) -> BinaryOp:
    if isinstance(op, str):
        op = Operator.from_text(op)
    if not op.is_arithmetic:
        raise ValueError(f"{op.name} is not an arithmetic operator")
    if kind is None:
        if op in (Operator.SHL, Operator.SHR, Operator.USHR):
            kind = promote(left.kind, left.kind)
        else:
            kind = promote(left.kind, right.kind)
    return BinaryOp(op, left, right, kind)


def widen(operand: Expression, kind: PrimitiveKind) -> WideningConversion:
    return WideningConversion(operand, kind)


def narrow(operand: Expression, kind: PrimitiveKind) -> NarrowingConversion:
    return NarrowingConversion(operand, kind)


def call(
    function: str, *args: Expression, kind: PrimitiveKind = PrimitiveKind.DOUBLE
) -> FunctionApplication:
    return FunctionApplication(function, tuple(args), kind)


__all__ = [
    "Operator",
    "OPERATOR_TEXT",
    "COMPARISONS",
    "dual",
    "Symbol",
    "Constant",
    "SymbolRef",
    "UnaryOp",
    "BinaryOp",
    "WideningConversion",
    "NarrowingConversion",
    "FunctionApplication",
    "OpaqueTerm",
    "Expression",
    "children",
    "walk",
    "symbols_in",
    "promote",
    "const",
    "pooled",
    "sym",
    "not_",
    "neg",
    "and_",
    "or_",
    "cmp",
    "arith",
    "widen",
    "narrow",
    "call",
]
