"""
Test negation normal form.
"""

import pytest

from pcdistance.analysis.normal_form import is_negation_free, normalize
from pcdistance.core.errors import UnsupportedExpressionError
from pcdistance.core.expressions import (
    Constant,
    OpaqueTerm,
    Operator,
    and_,
    arith,
    call,
    cmp,
    const,
    neg,
    not_,
    or_,
    sym,
    widen,
)
from pcdistance.core.kinds import PrimitiveKind

X = sym("{ROOT}:x")
Y = sym("{ROOT}:y")
B = sym("{ROOT}:flag", PrimitiveKind.BOOLEAN)

GT = cmp(X, ">", const(0))
LT = cmp(Y, "<", X)
EQ = cmp(arith(X, "%", const(2)), "==", const(0))

EXPRESSIONS = [
    GT,
    not_(GT),
    and_(GT, LT),
    not_(and_(GT, or_(LT, EQ))),
    or_(not_(GT), not_(not_(LT))),
    not_(not_(not_(EQ))),
    cmp(neg(X), ">=", Y),
    const(True),
    not_(const(False)),
]


class TestNormalize:
    """Test negation elimination."""

    def test_negated_comparison_takes_dual(self):
        assert normalize(not_(GT)) == cmp(X, "<=", const(0))

    def test_negated_constant(self):
        assert normalize(not_(const(True))) == Constant(False, PrimitiveKind.BOOLEAN)

    @pytest.mark.parametrize("expr", EXPRESSIONS)
    def test_double_negation(self, expr):
        assert normalize(not_(not_(expr))) == normalize(expr)

    @pytest.mark.parametrize("expr", EXPRESSIONS)
    def test_idempotent(self, expr):
        once = normalize(expr)
        assert normalize(once) == once

    @pytest.mark.parametrize("expr", EXPRESSIONS)
    def test_result_is_negation_free(self, expr):
        assert is_negation_free(normalize(expr))

    def test_de_morgan_and(self):
        result = normalize(not_(and_(GT, LT)))
        assert result == or_(normalize(not_(GT)), normalize(not_(LT)))

    def test_de_morgan_or(self):
        result = normalize(not_(or_(GT, EQ)))
        assert result.op is Operator.AND
        assert result == and_(normalize(not_(GT)), normalize(not_(EQ)))

    def test_recurses_into_function_arguments(self):
        expr = call("pick", not_(GT), X, kind=PrimitiveKind.INT)
        assert normalize(expr).args[0] == cmp(X, "<=", const(0))

    def test_neg_untouched(self):
        expr = neg(X)
        assert normalize(expr) is expr

    def test_conversions_untouched(self):
        expr = widen(not_(B), PrimitiveKind.INT)
        assert normalize(expr) is expr
        assert is_negation_free(expr)


class TestUnsupported:
    """Test negations that cannot be eliminated."""

    def test_negated_opaque_term(self):
        with pytest.raises(UnsupportedExpressionError):
            normalize(not_(OpaqueTerm("any", PrimitiveKind.BOOLEAN)))

    def test_negated_boolean_symbol(self):
        with pytest.raises(UnsupportedExpressionError):
            normalize(not_(B))

    def test_negation_nested_in_conjunction(self):
        with pytest.raises(UnsupportedExpressionError) as info:
            normalize(and_(GT, not_(B)))
        assert info.value.expression == B
