"""pcdistance: distance of test inputs from symbolic-execution path conditions.
A path condition, as collected by a symbolic executor, is a sequence of
numeric predicates and heap-shape assumptions (null, fresh object, alias)
over the inputs of a program unit. pcdistance scores a concrete candidate
input against it: the distance is 0 exactly when the candidate drives
execution down that path, and grows smoothly as it diverges, which makes
it a fitness function for search-based test generation.
Example:
    >>> from pcdistance import PathCondition, NumericAssumption, cmp, const, sym, distance
    >>> x = sym("{ROOT}:x")
    >>> pc = PathCondition([NumericAssumption(cmp(x, ">", const(10)))])
    >>> distance(pc, {"x": 20})
    0.0
    >>> distance(pc, {"x": 5})
    0.8571428571428572
"""

from pcdistance.analysis.branch_distance import (
    BIG_DISTANCE,
    SMALL_DISTANCE,
    branch_distance,
    compile_distance,
)
from pcdistance.analysis.functions import FunctionRegistry, default_registry
from pcdistance.analysis.normal_form import to_negation_normal_form
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
    DistanceError,
    MissingConstantError,
    OriginSyntaxError,
    StructuralInconsistencyError,
    TypeMismatchError,
    UnboundInputError,
    UnboundSymbolError,
    UnsupportedExpressionError,
)
from pcdistance.core.expressions import (
    Operator,
    Symbol,
    and_,
    arith,
    call,
    cmp,
    const,
    narrow,
    neg,
    not_,
    or_,
    pooled,
    sym,
    widen,
)
from pcdistance.core.kinds import PrimitiveKind, ValueKind
from pcdistance.core.origins import Origin
from pcdistance.fitness.cache import SimilarityCache
from pcdistance.fitness.distance import EvaluationResult, distance, evaluate, prepare_handlers
from pcdistance.fitness.handlers import handlers_for, handlers_for_state
from pcdistance.fitness.parallel import distance_batch

__version__ = "0.1.0"
from pcdistance.config import DistanceConfig, apply_logging, load_config
from pcdistance.logging import LogLevel, configure_logging, get_logger

__all__ = [
    "BIG_DISTANCE",
    "SMALL_DISTANCE",
    "branch_distance",
    "compile_distance",
    "FunctionRegistry",
    "default_registry",
    "to_negation_normal_form",
    "AliasAssumption",
    "FreshObjectAssumption",
    "HeapObject",
    "NullAssumption",
    "NumericAssumption",
    "PathCondition",
    "SymbolicState",
    "DistanceError",
    "MissingConstantError",
    "OriginSyntaxError",
    "StructuralInconsistencyError",
    "TypeMismatchError",
    "UnboundInputError",
    "UnboundSymbolError",
    "UnsupportedExpressionError",
    "Operator",
    "Symbol",
    "and_",
    "arith",
    "call",
    "cmp",
    "const",
    "narrow",
    "neg",
    "not_",
    "or_",
    "pooled",
    "sym",
    "widen",
    "PrimitiveKind",
    "ValueKind",
    "Origin",
    "SimilarityCache",
    "EvaluationResult",
    "distance",
    "evaluate",
    "prepare_handlers",
    "handlers_for",
    "handlers_for_state",
    "distance_batch",
    "DistanceConfig",
    "load_config",
    "apply_logging",
    "LogLevel",
    "configure_logging",
    "get_logger",
]
