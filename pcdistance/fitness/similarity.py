"""Clause similarity handlers.
One handler per kind of path-condition clause. A handler scores, in
[0, 1], how well the candidate satisfies its clause: 1 means satisfied,
0 means maximally violated. Handlers read the candidate only through the
backbone, and may extend it.
"""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping
from typing import Any

from pcdistance.analysis.branch_distance import DistanceFormula
from pcdistance.core.errors import StructuralInconsistencyError, TypeMismatchError
from pcdistance.core.kinds import accepts, coerce
from pcdistance.core.origins import Origin
from pcdistance.fitness.backbone import CandidateBackbone, OriginNotInCandidate
from pcdistance.fitness.cache import SimilarityCache

SUCCESS_SIMILARITY = 1.0
PARTIAL_SIMILARITY = 0.5
FAILURE_SIMILARITY = 0.0

SimilarityTransform = Callable[[float], float]


def reciprocal(distance: float) -> float:
    """``1 / (1 + d)``: 1 at distance 0, tending to 0."""
    if math.isnan(distance):
        return FAILURE_SIMILARITY
    return 1.0 / (1.0 + distance)


def exponential(distance: float) -> float:
    """``exp(-d)``: 1 at distance 0, decaying quickly."""
    if math.isnan(distance):
        return FAILURE_SIMILARITY
    return math.exp(-distance)


TRANSFORMS: dict[str, SimilarityTransform] = {
    "reciprocal": reciprocal,
    "exponential": exponential,
}


def get_transform(name: str) -> SimilarityTransform:
    """Look up a distance-to-similarity transform by name."""
    try:
        return TRANSFORMS[name]
    except KeyError:
        raise ValueError(
            f"Unknown similarity transform {name!r}; expected one of {sorted(TRANSFORMS)}"
        ) from None


_PRIMITIVE_TYPES = (bool, int, float, complex)


def _check_reference(origin: Origin, value: Any) -> None:
    if isinstance(value, _PRIMITIVE_TYPES):
        raise TypeMismatchError(origin, "reference", value)


def type_matches(obj: Any, expected: str | type) -> bool:
    """Check the runtime type of ``obj`` against an asserted type.
    A class must match exactly. A name may be the bare or the qualified
    class name, in dotted or slashed (``pkg/Outer$Inner``) form.
    """
    cls = type(obj)
    if isinstance(expected, type):
        return cls is expected
    name = expected.replace("/", ".").replace("$", ".")
    qualified = f"{cls.__module__}.{cls.__qualname__}"
    return name in (cls.__qualname__, cls.__name__, qualified)


class ClauseSimilarityHandler(ABC):
    """Scores one clause against a candidate."""

    @abstractmethod
    def evaluate_similarity(
        self,
        backbone: CandidateBackbone,
        candidate: Mapping[str, Any],
        constants: Mapping[int, Any],
        cache: SimilarityCache | None = None,
    ) -> float:
        """Similarity in [0, 1] of the candidate with this clause."""


class SimilarityWithRefToNull(ClauseSimilarityHandler):
    """The reference at ``origin`` must be null."""

    def __init__(self, origin: Origin | str):
        self.origin = Origin.of(origin)

    def evaluate_similarity(self, backbone, candidate, constants, cache=None) -> float:
        try:
            obj = backbone.retrieve_or_visit(self.origin, candidate)
        except OriginNotInCandidate:
            return FAILURE_SIMILARITY
        _check_reference(self.origin, obj)
        return SUCCESS_SIMILARITY if obj is None else FAILURE_SIMILARITY

    def __repr__(self) -> str:
        return f"SimilarityWithRefToNull({self.origin})"


class SimilarityWithRefToFreshObject(ClauseSimilarityHandler):
    """The reference at ``origin`` must be a new object of ``expected_type``.
    The heap identity is registered under ``origin`` whatever the outcome,
    so that later alias clauses know where to look. Scores:

    - 0 when the reference is null or unreachable;
    - 0.5 when it is an object of another type, or one already matched as
      fresh under a different origin;
    - 1 otherwise.
    """

    def __init__(self, origin: Origin | str, heap_id: int, expected_type: str | type):
        self.origin = Origin.of(origin)
        self.heap_id = heap_id
        self.expected_type = expected_type

    def evaluate_similarity(self, backbone, candidate, constants, cache=None) -> float:
        backbone.register_fresh(self.heap_id, self.origin)
        try:
            obj = backbone.retrieve_or_visit(self.origin, candidate)
        except OriginNotInCandidate:
            return FAILURE_SIMILARITY
        _check_reference(self.origin, obj)
        if obj is None:
            return FAILURE_SIMILARITY
        seen_at = backbone.visited_origin(obj)
        if seen_at is not None and seen_at != self.origin:
            return PARTIAL_SIMILARITY
        if not type_matches(obj, self.expected_type):
            return PARTIAL_SIMILARITY
        backbone.mark_visited(obj, self.origin)
        return SUCCESS_SIMILARITY

    def __repr__(self) -> str:
        return (
            f"SimilarityWithRefToFreshObject({self.origin}, "
            f"Object[{self.heap_id}], {self.expected_type})"
        )


class SimilarityWithRefToAlias(ClauseSimilarityHandler):
    """The reference at ``origin`` must be the object introduced at ``heap_id``."""

    def __init__(self, origin: Origin | str, heap_id: int):
        self.origin = Origin.of(origin)
        self.heap_id = heap_id

    def evaluate_similarity(self, backbone, candidate, constants, cache=None) -> float:
        target = backbone.origin_of(self.heap_id)
        if target is None:
            raise StructuralInconsistencyError(
                f"{self.origin} aliases Object[{self.heap_id}], "
                "which no earlier clause introduced",
                heap_id=self.heap_id,
            )
        try:
            obj = backbone.retrieve_or_visit(self.origin, candidate)
            _check_reference(self.origin, obj)
            aliased = backbone.retrieve_or_visit(target, candidate)
        except OriginNotInCandidate:
            return FAILURE_SIMILARITY
        if obj is not None and obj is aliased:
            return SUCCESS_SIMILARITY
        return FAILURE_SIMILARITY

    def __repr__(self) -> str:
        return f"SimilarityWithRefToAlias({self.origin}, Object[{self.heap_id}])"


def _value_key(value: Any) -> Any:
    """Cache key part that tells apart values Python compares equal (0.0, -0.0)."""
    if isinstance(value, float):
        return float, value.hex()
    return type(value), value


class SimilarityWithNumericExpression(ClauseSimilarityHandler):
    """A numeric predicate, scored through its branch distance."""

    def __init__(
        self, formula: DistanceFormula, transform: SimilarityTransform = reciprocal
    ):
        self.formula = formula
        self.transform = transform

    def resolve(self, backbone: CandidateBackbone, candidate: Mapping[str, Any]) -> list[Any]:
        """Concrete values of the formula's symbols, in formula order.
        Raises:
            OriginNotInCandidate: A symbol's origin is not reachable.
            TypeMismatchError: A value does not fit its symbol's kind.
        """
        values = []
        for symbol in self.formula.symbols:
            value = backbone.retrieve_or_visit(symbol.origin, candidate)
            if symbol.is_reference or not accepts(symbol.kind, value):
                raise TypeMismatchError(symbol.origin, symbol.kind.name, value)
            values.append(coerce(symbol.kind, value))
        return values

    def raw_distance(
        self,
        backbone: CandidateBackbone,
        candidate: Mapping[str, Any],
        constants: Mapping[int, Any],
    ) -> float:
        values = self.resolve(backbone, candidate)
        return self.formula(dict(zip(self.formula.symbols, values)), constants)

    def evaluate_similarity(self, backbone, candidate, constants, cache=None) -> float:
        try:
            values = self.resolve(backbone, candidate)
        except OriginNotInCandidate:
            return FAILURE_SIMILARITY
        key = None
        if cache is not None:
            # entries belong to this handler: its formula, functions and transform
            pooled = tuple(_value_key(constants.get(i)) for i in self.formula.pool_ids)
            key = (self, tuple(map(_value_key, values)), pooled)
            cached = cache.get(key)
            if cached is not None:
                return cached
        distance = self.formula(dict(zip(self.formula.symbols, values)), constants)
        similarity = self.transform(distance)
        if key is not None:
            cache.put(key, similarity)
        return similarity

    def __repr__(self) -> str:
        return f"SimilarityWithNumericExpression({self.formula.normalized})"


__all__ = [
    "SUCCESS_SIMILARITY",
    "PARTIAL_SIMILARITY",
    "FAILURE_SIMILARITY",
    "SimilarityTransform",
    "reciprocal",
    "exponential",
    "TRANSFORMS",
    "get_transform",
    "type_matches",
    "ClauseSimilarityHandler",
    "SimilarityWithRefToNull",
    "SimilarityWithRefToFreshObject",
    "SimilarityWithRefToAlias",
    "SimilarityWithNumericExpression",
]
