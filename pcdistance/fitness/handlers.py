"""Translation of path conditions into similarity handlers.
Compiling a path condition once and reusing the handler list is what makes
population-wide evaluation cheap: numeric clauses are normalized and
compiled here, heap clauses get their types and alias targets resolved.
"""
from __future__ import annotations
from collections.abc import Iterable
from pcdistance.analysis.branch_distance import compile_distance
from pcdistance.analysis.functions import FunctionRegistry
from pcdistance.core.clauses import (
    AliasAssumption,
    Clause,
    FreshObjectAssumption,
    NullAssumption,
    NumericAssumption,
    PathCondition,
    SymbolicState,
)
from pcdistance.core.errors import StructuralInconsistencyError, TypeMismatchError
from pcdistance.fitness.similarity import (
    ClauseSimilarityHandler,
    SimilarityTransform,
    SimilarityWithNumericExpression,
    SimilarityWithRefToAlias,
    SimilarityWithRefToFreshObject,
    SimilarityWithRefToNull,
    reciprocal,
)
from pcdistance.logging import get_logger
def _require_reference(clause: Clause) -> None:
    symbol = clause.symbol
    if not symbol.is_reference:
        raise TypeMismatchError(symbol.origin, "reference symbol", symbol.kind)
def handlers_for(
    path_condition: PathCondition | Iterable[Clause],
    state: SymbolicState | None = None,
    functions: FunctionRegistry | None = None,
    transform: SimilarityTransform = reciprocal,
) -> list[ClauseSimilarityHandler]:
    """Build the ordered handler list for ``path_condition``.
    Args:
        path_condition: Clauses in collection order.
        state: Final state; supplies object types missing from fresh clauses.
        functions: Registry for external function calls.
        transform: Mapping from raw branch distance to similarity.
    Raises:
        StructuralInconsistencyError: An alias clause precedes the
            fresh-object clause of its heap identity, or a fresh object has
            no known type.
        UnsupportedExpressionError: A numeric clause cannot be compiled.
    """
    logger = get_logger()
    handlers: list[ClauseSimilarityHandler] = []
    introduced: set[int] = set()
    for position, clause in enumerate(path_condition):
        logger.trace(f"clause {position}: {clause}", category="compile")
        if isinstance(clause, NumericAssumption):
            formula = compile_distance(clause.condition, functions)
            handlers.append(SimilarityWithNumericExpression(formula, transform))
        elif isinstance(clause, NullAssumption):
            _require_reference(clause)
            handlers.append(SimilarityWithRefToNull(clause.symbol.origin))
        elif isinstance(clause, FreshObjectAssumption):
            _require_reference(clause)
            expected = clause.type_name
            if expected is None:
                if state is None:
                    raise StructuralInconsistencyError(
                        f"No type for Object[{clause.heap_id}] at position {position}",
                        heap_id=clause.heap_id,
                    )
                expected = state.type_of_object(clause.heap_id)
            introduced.add(clause.heap_id)
            handlers.append(
                SimilarityWithRefToFreshObject(clause.symbol.origin, clause.heap_id, expected)
            )
        elif isinstance(clause, AliasAssumption):
            _require_reference(clause)
            if clause.heap_id not in introduced:
                raise StructuralInconsistencyError(
                    f"Clause {position} aliases Object[{clause.heap_id}] "
                    "before any clause introduces it",
                    heap_id=clause.heap_id,
                )
            handlers.append(SimilarityWithRefToAlias(clause.symbol.origin, clause.heap_id))
        else:
            raise TypeError(f"Not a path-condition clause: {clause!r}")
    return handlers
def handlers_for_state(
    state: SymbolicState,
    functions: FunctionRegistry | None = None,
    transform: SimilarityTransform = reciprocal,
) -> list[ClauseSimilarityHandler]:
    """Handler list for the path condition of a final state."""
    logger = get_logger()
    with logger.timer(f"compile state {state.identifier or '?'}", category="compile"):
        return handlers_for(state.path_condition, state, functions, transform)
__all__ = ["handlers_for", "handlers_for_state"]
