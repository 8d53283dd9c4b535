"""
Test clause similarity handlers.
"""

import math

import pytest

from pcdistance.analysis.branch_distance import compile_distance
from pcdistance.core.errors import StructuralInconsistencyError, TypeMismatchError
from pcdistance.core.expressions import cmp, const, pooled, sym
from pcdistance.core.kinds import PrimitiveKind
from pcdistance.fitness.backbone import CandidateBackbone
from pcdistance.fitness.cache import SimilarityCache
from pcdistance.fitness.similarity import (
    SimilarityWithNumericExpression,
    SimilarityWithRefToAlias,
    SimilarityWithRefToFreshObject,
    SimilarityWithRefToNull,
    exponential,
    get_transform,
    reciprocal,
    type_matches,
)


class Node:
    def __init__(self, next=None):
        self.next = next


class Other:
    pass


class Outer:
    class Inner:
        pass


def score(handler, candidate, backbone=None, cache=None, constants=None):
    backbone = CandidateBackbone.new() if backbone is None else backbone
    return handler.evaluate_similarity(backbone, candidate, constants or {}, cache)


class TestTransforms:
    """Test distance-to-similarity transforms."""

    def test_reciprocal(self):
        assert reciprocal(0.0) == 1.0
        assert reciprocal(1.0) == 0.5
        assert reciprocal(math.nan) == 0.0

    def test_exponential(self):
        assert exponential(0.0) == 1.0
        assert exponential(2.0) == pytest.approx(math.exp(-2.0))

    def test_lookup(self):
        assert get_transform("exponential") is exponential
        with pytest.raises(ValueError):
            get_transform("linear")


class TestTypeMatches:
    """Test runtime type checks against asserted types."""

    def test_class(self):
        assert type_matches(Node(), Node)
        assert not type_matches(Node(), Other)

    def test_names(self):
        assert type_matches(Node(), "Node")
        assert type_matches(Node(), f"{Node.__module__}.Node")
        assert type_matches(Node(), f"{Node.__module__.replace('.', '/')}/Node")
        assert not type_matches(Node(), "Other")

    def test_nested_class_name(self):
        assert type_matches(Outer.Inner(), "Outer$Inner")
        assert type_matches(Outer.Inner(), "Inner")


class TestRefToNull:
    """Test the null handler."""

    handler = SimilarityWithRefToNull("{ROOT}:r")

    def test_null(self):
        assert score(self.handler, {"r": None}) == 1.0

    def test_non_null(self):
        assert score(self.handler, {"r": Node()}) == 0.0

    def test_unreachable(self):
        handler = SimilarityWithRefToNull("{ROOT}:r.next.next")
        assert score(handler, {"r": Node()}) == 0.0

    def test_primitive_value(self):
        with pytest.raises(TypeMismatchError):
            score(self.handler, {"r": 3})


class TestRefToFreshObject:
    """Test the fresh-object handler."""

    def test_fresh_object_of_right_type(self):
        backbone = CandidateBackbone.new()
        handler = SimilarityWithRefToFreshObject("{ROOT}:r", 1, "Node")
        assert score(handler, {"r": Node()}, backbone) == 1.0
        assert str(backbone.origin_of(1)) == "{ROOT}:r"

    def test_null_still_registers(self):
        backbone = CandidateBackbone.new()
        handler = SimilarityWithRefToFreshObject("{ROOT}:r", 1, "Node")
        assert score(handler, {"r": None}, backbone) == 0.0
        assert backbone.origin_of(1) is not None

    def test_wrong_type(self):
        handler = SimilarityWithRefToFreshObject("{ROOT}:r", 1, Node)
        assert score(handler, {"r": Other()}) == 0.5

    def test_same_object_at_two_origins_is_not_fresh(self):
        shared = Node()
        backbone = CandidateBackbone.new()
        first = SimilarityWithRefToFreshObject("{ROOT}:a", 1, Node)
        second = SimilarityWithRefToFreshObject("{ROOT}:b", 2, Node)
        candidate = {"a": shared, "b": shared}
        assert score(first, candidate, backbone) == 1.0
        assert score(second, candidate, backbone) == 0.5

    def test_unreachable(self):
        handler = SimilarityWithRefToFreshObject("{ROOT}:r.next", 1, Node)
        assert score(handler, {"r": None}) == 0.0


class TestRefToAlias:
    """Test the alias handler."""

    def introduce(self, backbone, candidate):
        fresh = SimilarityWithRefToFreshObject("{ROOT}:a", 1, Node)
        score(fresh, candidate, backbone)

    def test_identical(self):
        node = Node()
        candidate = {"a": node, "b": node}
        backbone = CandidateBackbone.new()
        self.introduce(backbone, candidate)
        assert score(SimilarityWithRefToAlias("{ROOT}:b", 1), candidate, backbone) == 1.0

    def test_distinct_objects(self):
        candidate = {"a": Node(), "b": Node()}
        backbone = CandidateBackbone.new()
        self.introduce(backbone, candidate)
        assert score(SimilarityWithRefToAlias("{ROOT}:b", 1), candidate, backbone) == 0.0

    def test_both_null(self):
        candidate = {"a": None, "b": None}
        backbone = CandidateBackbone.new()
        self.introduce(backbone, candidate)
        assert score(SimilarityWithRefToAlias("{ROOT}:b", 1), candidate, backbone) == 0.0

    def test_unintroduced_heap_id(self):
        with pytest.raises(StructuralInconsistencyError):
            score(SimilarityWithRefToAlias("{ROOT}:b", 9), {"b": Node()})


class TestNumericExpression:
    """Test the numeric handler."""

    X = sym("{ROOT}:x")

    def handler(self, expr=None):
        return SimilarityWithNumericExpression(compile_distance(expr or cmp(self.X, ">", const(0))))

    def test_satisfied(self):
        assert score(self.handler(), {"x": 5}) == 1.0

    def test_violated(self):
        assert score(self.handler(), {"x": -3}) == pytest.approx(1 / 5)

    def test_raw_distance(self):
        handler = self.handler()
        assert handler.raw_distance(CandidateBackbone.new(), {"x": -3}, {}) == 4.0

    def test_kind_mismatch(self):
        with pytest.raises(TypeMismatchError):
            score(self.handler(), {"x": 1.5})
        with pytest.raises(TypeMismatchError):
            score(self.handler(), {"x": True})

    def test_char_from_string(self):
        c = sym("{ROOT}:c", PrimitiveKind.CHAR)
        handler = self.handler(cmp(c, "==", const(97, PrimitiveKind.CHAR)))
        assert score(handler, {"c": "a"}) == 1.0

    def test_unreachable_origin(self):
        node = sym("{ROOT}:n.value")
        handler = self.handler(cmp(node, ">", const(0)))
        assert score(handler, {"n": None}) == 0.0

    def test_cache_hit_on_same_values(self):
        cache = SimilarityCache()
        handler = self.handler()
        first = score(handler, {"x": -3}, cache=cache)
        second = score(handler, {"x": -3, "y": 8}, cache=cache)
        assert first == second
        assert cache.stats.hits == 1
        assert cache.stats.misses == 1

    def test_cache_key_includes_pool(self):
        cache = SimilarityCache()
        handler = self.handler(cmp(self.X, "<", pooled(1, PrimitiveKind.INT)))
        assert score(handler, {"x": 5}, cache=cache, constants={1: 10}) == 1.0
        assert score(handler, {"x": 5}, cache=cache, constants={1: 2}) < 1.0
