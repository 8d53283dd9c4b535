"""
Test compilation of path conditions into handler lists.
"""

import pytest

from pcdistance.core.clauses import (
    AliasAssumption,
    FreshObjectAssumption,
    HeapObject,
    NullAssumption,
    NumericAssumption,
    PathCondition,
    SymbolicState,
)
from pcdistance.core.errors import (
    StructuralInconsistencyError,
    TypeMismatchError,
    UnsupportedExpressionError,
)
from pcdistance.core.expressions import OpaqueTerm, Symbol, cmp, const, not_, sym
from pcdistance.core.kinds import PrimitiveKind, ValueKind
from pcdistance.fitness.handlers import handlers_for, handlers_for_state
from pcdistance.fitness.similarity import (
    SimilarityWithNumericExpression,
    SimilarityWithRefToAlias,
    SimilarityWithRefToFreshObject,
    SimilarityWithRefToNull,
    exponential,
)

R1 = Symbol("{ROOT}:r1", ValueKind.REFERENCE)
R2 = Symbol("{ROOT}:r2", ValueKind.REFERENCE)
X = sym("{ROOT}:x")


class TestHandlersFor:
    """Test handler construction per clause kind."""

    def test_one_handler_per_clause_in_order(self):
        pc = PathCondition(
            [
                FreshObjectAssumption(R1, 1, "Node"),
                AliasAssumption(R2, 1),
                NullAssumption(Symbol("{ROOT}:r1.next", ValueKind.REFERENCE)),
                NumericAssumption(cmp(X, ">", const(0))),
            ]
        )
        handlers = handlers_for(pc)
        assert [type(h) for h in handlers] == [
            SimilarityWithRefToFreshObject,
            SimilarityWithRefToAlias,
            SimilarityWithRefToNull,
            SimilarityWithNumericExpression,
        ]

    def test_numeric_clause_is_normalized(self):
        [handler] = handlers_for([NumericAssumption(not_(cmp(X, ">", const(0))))])
        assert handler.formula.normalized == cmp(X, "<=", const(0))

    def test_transform_is_passed_on(self):
        [handler] = handlers_for([NumericAssumption(cmp(X, ">", const(0)))], transform=exponential)
        assert handler.transform is exponential

    def test_alias_before_fresh(self):
        with pytest.raises(StructuralInconsistencyError) as info:
            handlers_for([AliasAssumption(R2, 1), FreshObjectAssumption(R1, 1, "Node")])
        assert info.value.heap_id == 1

    def test_alias_of_unknown_heap_id(self):
        with pytest.raises(StructuralInconsistencyError):
            handlers_for([FreshObjectAssumption(R1, 1, "Node"), AliasAssumption(R2, 2)])

    def test_fresh_type_from_state(self):
        pc = PathCondition([FreshObjectAssumption(R1, 4)])
        state = SymbolicState(pc, heap={4: HeapObject(4, "pkg/Node")})
        [handler] = handlers_for(pc, state)
        assert handler.expected_type == "pkg/Node"

    def test_fresh_without_type(self):
        with pytest.raises(StructuralInconsistencyError):
            handlers_for([FreshObjectAssumption(R1, 4)])

    def test_fresh_missing_from_heap(self):
        pc = PathCondition([FreshObjectAssumption(R1, 4)])
        with pytest.raises(StructuralInconsistencyError):
            handlers_for(pc, SymbolicState(pc))

    def test_reference_clause_on_primitive_symbol(self):
        with pytest.raises(TypeMismatchError):
            handlers_for([NullAssumption(Symbol("{ROOT}:x", PrimitiveKind.INT))])

    def test_unsupported_numeric_clause(self):
        opaque = OpaqueTerm("any", PrimitiveKind.BOOLEAN)
        with pytest.raises(UnsupportedExpressionError):
            handlers_for([NumericAssumption(not_(opaque))])

    def test_not_a_clause(self):
        with pytest.raises(TypeError):
            handlers_for([cmp(X, ">", const(0))])


class TestHandlersForState:
    """Test state-level compilation."""

    def test_uses_state_path_condition(self):
        pc = [FreshObjectAssumption(R1, 1), NumericAssumption(cmp(X, ">", const(0)))]
        state = SymbolicState(pc, heap={1: HeapObject(1, "Node")}, identifier="s.1")
        handlers = handlers_for_state(state)
        assert len(handlers) == 2
        assert state.origin_of_object(1) == R1.origin
