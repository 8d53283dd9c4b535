"""
Test the path-condition distance end to end.
"""

import io
import math

import pytest

from pcdistance import (
    AliasAssumption,
    FreshObjectAssumption,
    NullAssumption,
    NumericAssumption,
    PathCondition,
    PrimitiveKind,
    Symbol,
    ValueKind,
    and_,
    arith,
    call,
    cmp,
    const,
    distance,
    evaluate,
    prepare_handlers,
    sym,
)
from pcdistance.analysis.branch_distance import BIG_DISTANCE, SMALL_DISTANCE
from pcdistance.analysis.functions import FunctionRegistry
from pcdistance.config import DistanceConfig, EvaluationConfig
from pcdistance.core.errors import (
    StructuralInconsistencyError,
    TypeMismatchError,
    UnboundInputError,
)
from pcdistance.fitness.backbone import CandidateBackbone
from pcdistance.fitness.cache import SimilarityCache
from pcdistance.logging import DistanceLogger, LogLevel, set_logger


class Node:
    def __init__(self, value=0, next=None):
        self.value = value
        self.next = next


class Other:
    pass


X = sym("{ROOT}:x")
Y = sym("{ROOT}:y")
D = sym("{ROOT}:d", PrimitiveKind.DOUBLE)


def ref(origin):
    return Symbol(origin, ValueKind.REFERENCE)


def raw_distance(pc, candidate):
    [handler] = prepare_handlers(pc)
    return handler.raw_distance(CandidateBackbone.new(), candidate, {})


class TestScenarios:
    """End-to-end scenarios."""

    def test_positive_x(self):
        """[x > 0]: 0 at x = 5, small penalty + 3 at x = -3."""
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        assert distance(pc, {"x": 5}) == 0.0
        assert raw_distance(pc, {"x": -3}) == SMALL_DISTANCE + 3
        assert distance(pc, {"x": -3}) == pytest.approx(1 - 1 / (1 + SMALL_DISTANCE + 3))

    def test_nan_producing_computation(self):
        """[d / 0.0 == 0] at d = 0.0 scores the large sentinel."""
        pc = PathCondition(
            [NumericAssumption(cmp(arith(D, "/", const(0.0)), "==", const(0.0)))]
        )
        assert raw_distance(pc, {"d": 0.0}) == BIG_DISTANCE
        assert distance(pc, {"d": 0.0}) == pytest.approx(1.0)

    def test_null_reference_violated(self):
        """[r is null] with a non-null r: score 0, distance 1."""
        pc = PathCondition([NullAssumption(ref("{ROOT}:r"))])
        result = evaluate(pc, {"r": Node()})
        assert result.scores == [0.0]
        assert result.distance == 1.0

    def test_fresh_then_alias(self):
        """[r1 fresh Node, r2 aliases r1] with r1 is r2: distance 0."""
        pc = PathCondition(
            [
                FreshObjectAssumption(ref("{ROOT}:r1"), 1, Node),
                AliasAssumption(ref("{ROOT}:r2"), 1),
            ]
        )
        node = Node()
        assert distance(pc, {"r1": node, "r2": node}) == 0.0
        assert distance(pc, {"r1": node, "r2": Node()}) == 1.0

    def test_conjunction_with_one_side_violated(self):
        """[a && b], a satisfied: the clause's raw distance is b's."""
        pc = PathCondition(
            [NumericAssumption(and_(cmp(X, ">", const(0)), cmp(Y, "==", const(2))))]
        )
        d = SMALL_DISTANCE + 7
        assert raw_distance(pc, {"x": 5, "y": 9}) == d
        assert distance(pc, {"x": 5, "y": 9}) == pytest.approx(1 - 1 / (1 + d))


class TestAggregate:
    """Test aggregation over clauses."""

    PC = PathCondition(
        [
            FreshObjectAssumption(ref("{ROOT}:list"), 1, Node),
            NumericAssumption(cmp(sym("{ROOT}:list.value"), ">", const(10))),
            AliasAssumption(ref("{ROOT}:list.next"), 1),
            NumericAssumption(cmp(X, "!=", const(0))),
        ]
    )

    def test_satisfying_candidate(self):
        node = Node(11)
        node.next = node
        assert distance(self.PC, {"list": node, "x": 1}) == 0.0

    @pytest.mark.parametrize(
        "candidate",
        [
            {"list": None, "x": 0},
            {"list": Node(3), "x": 0},
            {"list": Node(11, Node(11)), "x": 5},
            {"list": Other(), "x": 0},
        ],
    )
    def test_bounds(self, candidate):
        if isinstance(candidate["list"], Other):
            with pytest.raises(TypeMismatchError):
                distance(self.PC, candidate)
            return
        result = distance(self.PC, candidate)
        assert 0.0 < result <= len(self.PC)

    def test_unreachable_origins_score_zero(self):
        result = evaluate(self.PC, {"list": None, "x": 1})
        assert result.scores == [0.0, 0.0, 0.0, 1.0]
        assert result.distance == 3.0

    def test_empty_path_condition(self):
        assert distance(PathCondition(), {}) == 0.0

    def test_accepts_clause_list_and_handlers(self):
        node = Node(11)
        node.next = node
        candidate = {"list": node, "x": 0}
        expected = distance(self.PC, candidate)
        assert distance(list(self.PC), candidate) == expected
        assert distance(prepare_handlers(self.PC), candidate) == expected

    def test_backbone_is_returned(self):
        result = evaluate(self.PC, {"list": Node(11, Node()), "x": 1})
        bindings = result.backbone.bindings()
        assert bindings["{ROOT}:list.value"] == 11
        assert not result.satisfied
        assert result.clause_count == 4

    def test_cache_does_not_change_results(self):
        cache = SimilarityCache()
        handlers = prepare_handlers(self.PC)
        candidates = [{"list": Node(v), "x": v % 3} for v in range(20)]
        plain = [distance(self.PC, c) for c in candidates]
        cached = [distance(handlers, c, cache=cache) for c in candidates]
        again = [distance(handlers, c, cache=cache) for c in candidates]
        assert plain == cached == again
        assert cache.stats.hits > 0

    def test_exponential_transform_from_config(self):
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        config = DistanceConfig(evaluation=EvaluationConfig(similarity="exponential"))
        result = distance(pc, {"x": -3}, config=config)
        assert result == pytest.approx(1 - math.exp(-(SMALL_DISTANCE + 3)))


class TestErrors:
    """Test errors that abort an evaluation."""

    def test_missing_input(self):
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        with pytest.raises(UnboundInputError):
            distance(pc, {"y": 1})

    def test_value_of_wrong_kind(self):
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        with pytest.raises(TypeMismatchError):
            distance(pc, {"x": "five"})

    def test_alias_before_fresh(self):
        pc = PathCondition(
            [AliasAssumption(ref("{ROOT}:b"), 1), FreshObjectAssumption(ref("{ROOT}:a"), 1, Node)]
        )
        with pytest.raises(StructuralInconsistencyError):
            distance(pc, {"a": Node(), "b": Node()})


class TestLogging:
    """Test diagnostic output of evaluations."""

    def test_debug_logs_clause_scores(self):
        stream = io.StringIO()
        logger = DistanceLogger(level=LogLevel.DEBUG, color=False, stream=stream)
        set_logger(logger)
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        distance(pc, {"x": -3})
        entries = logger.get_entries(category="distance")
        assert [e.level for e in entries] == [LogLevel.DEBUG, LogLevel.VERBOSE]
        assert "clause 0" in entries[0].message
        assert "[distance]" in stream.getvalue()

    def test_quiet_logger_records_nothing(self, quiet_logger):
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        distance(pc, {"x": 1})
        assert quiet_logger.get_entries() == []


class TestCacheTransparency:
    """Test that a shared cache never changes a distance."""

    def test_signed_zero(self):
        pc = PathCondition(
            [NumericAssumption(cmp(arith(const(1.0), "/", D), ">", const(0.0)))]
        )
        handlers = prepare_handlers(pc)
        candidates = [{"d": 0.0}, {"d": -0.0}]
        plain = [distance(handlers, c) for c in candidates]
        cache = SimilarityCache()
        cached = [distance(handlers, c, cache=cache) for c in candidates]
        assert plain == [0.0, 1.0]
        assert cached == plain

    def test_same_shape_with_different_functions(self):
        zero, five = FunctionRegistry({"f": lambda v: 0}), FunctionRegistry({"f": lambda v: 5})
        pc = PathCondition(
            [NumericAssumption(cmp(call("f", X, kind=PrimitiveKind.INT), "==", const(0)))]
        )
        cache = SimilarityCache()
        first = distance(prepare_handlers(pc, functions=zero), {"x": 1}, cache=cache)
        second = distance(prepare_handlers(pc, functions=five), {"x": 1}, cache=cache)
        assert first == 0.0
        assert second == pytest.approx(1 - 1 / (1 + SMALL_DISTANCE + 5))

    def test_handlers_do_not_share_entries(self):
        pc = PathCondition([NumericAssumption(cmp(X, ">", const(0)))])
        cache = SimilarityCache()
        distance(prepare_handlers(pc), {"x": 1}, cache=cache)
        distance(prepare_handlers(pc), {"x": 1}, cache=cache)
        assert len(cache) == 2
        assert cache.stats.hits == 0
