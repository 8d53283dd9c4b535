"""Core data model: primitive kinds, origins, expressions and clauses."""
from pcdistance.core.clauses import (
    AliasAssumption,
    Clause,
    FreshObjectAssumption,
    HeapObject,
    NullAssumption,
    NumericAssumption,
    PathCondition,
    SymbolicState,
)
from pcdistance.core.errors import (
    DistanceError,
    MissingConstantError,
    OriginSyntaxError,
    StructuralInconsistencyError,
    TypeMismatchError,
    UnboundInputError,
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
    dual,
    symbols_in,
)
from pcdistance.core.kinds import PrimitiveKind, ValueKind, cast
from pcdistance.core.origins import Origin

__all__ = [
    "AliasAssumption",
    "Clause",
    "FreshObjectAssumption",
    "HeapObject",
    "NullAssumption",
    "NumericAssumption",
    "PathCondition",
    "SymbolicState",
    "DistanceError",
    "MissingConstantError",
    "OriginSyntaxError",
    "StructuralInconsistencyError",
    "TypeMismatchError",
    "UnboundInputError",
    "UnboundSymbolError",
    "UnsupportedExpressionError",
    "BinaryOp",
    "Constant",
    "Expression",
    "FunctionApplication",
    "NarrowingConversion",
    "OpaqueTerm",
    "Operator",
    "Symbol",
    "SymbolRef",
    "UnaryOp",
    "WideningConversion",
    "dual",
    "symbols_in",
    "PrimitiveKind",
    "ValueKind",
    "cast",
    "Origin",
]
