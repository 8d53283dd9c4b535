"""Population-wide distance evaluation.
Handlers are compiled once and shared by worker threads; each candidate
gets its own backbone, so only the similarity cache is shared.
"""
from __future__ import annotations
from collections.abc import Iterable, Mapping
from concurrent.futures import Future, ThreadPoolExecutor
from typing import TYPE_CHECKING, Any
from pcdistance.analysis.functions import FunctionRegistry
from pcdistance.core.clauses import SymbolicState
from pcdistance.fitness.cache import SimilarityCache
from pcdistance.fitness.distance import PathConditionLike, prepare_handlers, run_handlers
from pcdistance.logging import get_logger
if TYPE_CHECKING:
    from pcdistance.config import DistanceConfig
DEFAULT_MAX_WORKERS = 4
def distance_batch(
    path_condition: PathConditionLike,
    candidates: Iterable[Mapping[str, Any]],
    constants: Mapping[int, Any] | None = None,
    cache: SimilarityCache | None = None,
    max_workers: int | None = None,
    config: DistanceConfig | None = None,
    *,
    state: SymbolicState | None = None,
    functions: FunctionRegistry | None = None,
) -> list[float]:
    """Distances of many candidates from one path condition.
    Args:
        path_condition: Path condition, clauses or compiled handlers.
        candidates: Candidate input mappings.
        constants: Constant pool shared by all candidates.
        cache: Shared cache; when absent and ``config`` enables caching, a
            cache sized by ``config`` is created for this batch.
        max_workers: Thread count; defaults to ``config`` or 4.
        config: Evaluation, cache and transform settings.
    Returns:
        Distances in candidate order.
    Raises:
        DistanceError: The first failure in candidate order; pending
            evaluations are cancelled.
    """
    logger = get_logger()
    candidates = list(candidates)
    if not candidates:
        return []
    if max_workers is None:
        max_workers = config.evaluation.max_workers if config is not None else DEFAULT_MAX_WORKERS
    if cache is None and config is not None and config.cache.enabled:
        cache = SimilarityCache(config.cache.max_size)
    handlers = prepare_handlers(path_condition, state, functions, config)
    constants = constants or {}
    workers = max(1, min(max_workers, len(candidates)))
    with logger.timer(f"{len(candidates)} candidates on {workers} workers", category="batch"):
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures: list[Future] = [
                executor.submit(run_handlers, handlers, candidate, constants, cache)
                for candidate in candidates
            ]
            try:
                results = [future.result().distance for future in futures]
            except BaseException:
                for future in futures:
                    future.cancel()
                raise
    if cache is not None:
        logger.debug(f"batch cache: {cache.stats}", category="batch")
    return results
__all__ = ["distance_batch", "DEFAULT_MAX_WORKERS"]
