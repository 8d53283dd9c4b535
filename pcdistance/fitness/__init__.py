"""Fitness of candidates against path conditions.
This module provides:
- The candidate backbone (origin to concrete value bindings)
- Similarity handlers for null, fresh-object, alias and numeric clauses
- Handler compilation from path conditions and symbolic states
- The path-condition distance, for one candidate or a population
- A shared, thread-safe similarity cache
"""
from pcdistance.fitness.backbone import CandidateBackbone
from pcdistance.fitness.cache import SimilarityCache
from pcdistance.fitness.distance import EvaluationResult, distance, evaluate, prepare_handlers
from pcdistance.fitness.handlers import handlers_for, handlers_for_state
from pcdistance.fitness.parallel import distance_batch
from pcdistance.fitness.similarity import (
    ClauseSimilarityHandler,
    SimilarityWithNumericExpression,
    SimilarityWithRefToAlias,
    SimilarityWithRefToFreshObject,
    SimilarityWithRefToNull,
)

__all__ = [
    "CandidateBackbone",
    "SimilarityCache",
    "EvaluationResult",
    "distance",
    "evaluate",
    "prepare_handlers",
    "handlers_for",
    "handlers_for_state",
    "distance_batch",
    "ClauseSimilarityHandler",
    "SimilarityWithNumericExpression",
    "SimilarityWithRefToAlias",
    "SimilarityWithRefToFreshObject",
    "SimilarityWithRefToNull",
]
