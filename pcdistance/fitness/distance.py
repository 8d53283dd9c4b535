"""Path-condition distance.
The distance of a candidate from a path condition is the number of clauses
minus the summed similarities of the candidate with each clause. It is 0
exactly when every clause is satisfied and grows as the candidate diverges,
so a search can minimize it directly.
"""

from __future__ import annotations

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Union

from pcdistance.analysis.functions import FunctionRegistry
from pcdistance.core.clauses import Clause, PathCondition, SymbolicState
from pcdistance.fitness.backbone import CandidateBackbone
from pcdistance.fitness.cache import SimilarityCache
from pcdistance.fitness.handlers import handlers_for
from pcdistance.fitness.similarity import ClauseSimilarityHandler, reciprocal
from pcdistance.logging import LogLevel, get_logger

if TYPE_CHECKING:
    from pcdistance.config import DistanceConfig

PathConditionLike = Union[PathCondition, Iterable[Clause], Sequence[ClauseSimilarityHandler]]


@dataclass
class EvaluationResult:
    """Distance of one candidate together with how it was obtained."""

    distance: float
    scores: list[float] = field(default_factory=list)
    backbone: CandidateBackbone | None = None

    @property
    def satisfied(self) -> bool:
        return self.distance == 0.0

    @property
    def clause_count(self) -> int:
        return len(self.scores)


def prepare_handlers(
    path_condition: PathConditionLike,
    state: SymbolicState | None = None,
    functions: FunctionRegistry | None = None,
    config: DistanceConfig | None = None,
) -> list[ClauseSimilarityHandler]:
    """Handler list for ``path_condition``, compiling clauses if needed.
    An already compiled handler list is returned as is.
    """
    items = list(path_condition)
    if items and all(isinstance(item, ClauseSimilarityHandler) for item in items):
        return items
    transform = config.evaluation.transform() if config is not None else reciprocal
    return handlers_for(items, state, functions, transform)


def run_handlers(
    handlers: Sequence[ClauseSimilarityHandler],
    candidate: Mapping[str, Any],
    constants: Mapping[int, Any],
    cache: SimilarityCache | None = None,
) -> EvaluationResult:
    """Score ``candidate`` against compiled handlers with a fresh backbone."""
    logger = get_logger()
    detailed = logger.is_enabled(LogLevel.DEBUG)
    backbone = CandidateBackbone.new()
    scores = []
    for position, handler in enumerate(handlers):
        score = handler.evaluate_similarity(backbone, candidate, constants, cache)
        if detailed:
            logger.debug(f"clause {position} {handler!r} -> {score:.6g}", category="distance")
        scores.append(score)
    result = float(len(handlers)) - math.fsum(scores)
    if result < 0:
        raise AssertionError(f"Negative path-condition distance {result}; scores {scores}")
    if logger.is_enabled(LogLevel.VERBOSE):
        logger.verbose(f"distance {result:.6g} over {len(handlers)} clauses", category="distance")
    return EvaluationResult(result, scores, backbone)


def evaluate(
    path_condition: PathConditionLike,
    candidate: Mapping[str, Any],
    constants: Mapping[int, Any] | None = None,
    cache: SimilarityCache | None = None,
    *,
    state: SymbolicState | None = None,
    functions: FunctionRegistry | None = None,
    config: DistanceConfig | None = None,
) -> EvaluationResult:
    """Like :func:`distance`, keeping per-clause scores and the backbone."""
    handlers = prepare_handlers(path_condition, state, functions, config)
    return run_handlers(handlers, candidate, constants or {}, cache)


def distance(
    path_condition: PathConditionLike,
    candidate: Mapping[str, Any],
    constants: Mapping[int, Any] | None = None,
    cache: SimilarityCache | None = None,
    *,
    state: SymbolicState | None = None,
    functions: FunctionRegistry | None = None,
    config: DistanceConfig | None = None,
) -> float:
    """Distance of ``candidate`` from satisfying ``path_condition``.
    Args:
        path_condition: A path condition, its clauses, or the handler list
            compiled from it by :func:`prepare_handlers`.
        candidate: Concrete root inputs, keyed by ``{ROOT}:name`` or ``name``.
        constants: Constant pool for pooled literals.
        cache: Shared similarity cache; optional.
        state: Final symbolic state, for object types missing from clauses.
        functions: Registry for external function calls.
        config: Selects the similarity transform.
    Returns:
        A value in ``[0, number of clauses]``, 0 iff every clause holds.
    Raises:
        DistanceError: The path condition or the candidate is malformed.
    """
    return evaluate(
        path_condition,
        candidate,
        constants,
        cache,
        state=state,
        functions=functions,
        config=config,
    ).distance


__all__ = [
    "EvaluationResult",
    "PathConditionLike",
    "prepare_handlers",
    "run_handlers",
    "evaluate",
    "distance",
]
