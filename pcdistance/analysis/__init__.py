"""Analysis of numeric predicates.
This module provides:
- Negation normal form for boolean/arithmetic expression trees
- Branch-distance compilation of predicates
- External function registry for calls inside predicates
- Conversion between z3 terms and the expression model
"""
from pcdistance.analysis.branch_distance import (
    BIG_DISTANCE,
    SMALL_DISTANCE,
    DistanceFormula,
    branch_distance,
    compile_distance,
)
from pcdistance.analysis.functions import FunctionRegistry, default_registry
from pcdistance.analysis.normal_form import normalize, to_negation_normal_form
from pcdistance.analysis.z3_bridge import from_z3, numeric_assumptions, to_z3

__all__ = [
    "BIG_DISTANCE",
    "SMALL_DISTANCE",
    "DistanceFormula",
    "branch_distance",
    "compile_distance",
    "FunctionRegistry",
    "default_registry",
    "normalize",
    "to_negation_normal_form",
    "from_z3",
    "numeric_assumptions",
    "to_z3",
]
