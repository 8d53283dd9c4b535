"""Negation normal form for path-condition predicates.
Logical negation is pushed through AND/OR (De Morgan) and folded into
comparisons (by taking the dual operator) so that the distance compiler
never sees a NOT. A negation that cannot be pushed any further makes the
predicate unusable and raises :class:`UnsupportedExpressionError`.
"""

from __future__ import annotations

from pcdistance.core.errors import UnsupportedExpressionError
from pcdistance.core.expressions import (
    BinaryOp,
    Constant,
    Expression,
    FunctionApplication,
    NarrowingConversion,
    OpaqueTerm,
    Operator,
    SymbolRef,
    UnaryOp,
    WideningConversion,
    dual,
)
from pcdistance.core.kinds import PrimitiveKind


def to_negation_normal_form(expr: Expression) -> Expression:
    """Rewrite ``expr`` so that it contains no logical negation.
    Args:
        expr: Predicate tree as produced by the symbolic engine.
    Returns:
        An equivalent tree without NOT nodes.
    Raises:
        UnsupportedExpressionError: NOT is applied to a term that is neither a
            boolean constant, a negation, a conjunction/disjunction nor a
            comparison.
    """
    if isinstance(expr, UnaryOp):
        if expr.op is Operator.NOT:
            return _negate(expr.operand)
        # NEG is arithmetic, not logical
        return expr
    if isinstance(expr, BinaryOp):
        return BinaryOp(
            expr.op,
            to_negation_normal_form(expr.left),
            to_negation_normal_form(expr.right),
            expr.kind,
        )
    if isinstance(expr, FunctionApplication):
        return FunctionApplication(
            expr.function,
            tuple(to_negation_normal_form(arg) for arg in expr.args),
            expr.kind,
        )
    if isinstance(
        expr,
        (Constant, SymbolRef, WideningConversion, NarrowingConversion, OpaqueTerm),
    ):
        return expr
    raise UnsupportedExpressionError(
        f"Unknown expression node {type(expr).__name__}", expr
    )


normalize = to_negation_normal_form


def _negate(operand: Expression) -> Expression:
    """Normal form of NOT(operand)."""
    if isinstance(operand, Constant) and operand.kind is PrimitiveKind.BOOLEAN:
        if operand.pool_id is not None:
            raise UnsupportedExpressionError(
                f"Cannot negate pooled constant {operand}", operand
            )
        return Constant(not operand.value, PrimitiveKind.BOOLEAN)
    if isinstance(operand, UnaryOp) and operand.op is Operator.NOT:
        return to_negation_normal_form(operand.operand)
    if isinstance(operand, BinaryOp):
        if operand.op.is_logical:
            return BinaryOp(
                dual(operand.op),
                _negate(operand.left),
                _negate(operand.right),
                operand.kind,
            )
        if operand.op.is_comparison:
            return BinaryOp(
                dual(operand.op),
                to_negation_normal_form(operand.left),
                to_negation_normal_form(operand.right),
                operand.kind,
            )
    raise UnsupportedExpressionError(f"Cannot eliminate negation of {operand}", operand)


def is_negation_free(expr: Expression) -> bool:
    """Check that no NOT node occurs outside conversion operands."""
    if isinstance(expr, UnaryOp):
        return expr.op is not Operator.NOT
    if isinstance(expr, BinaryOp):
        return is_negation_free(expr.left) and is_negation_free(expr.right)
    if isinstance(expr, FunctionApplication):
        return all(is_negation_free(arg) for arg in expr.args)
    return True


__all__ = ["to_negation_normal_form", "normalize", "is_negation_free"]
