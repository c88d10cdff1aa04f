from .eliminator import NormalForm, eliminate, eliminate_entries
from .exceptions import (
    ContractViolationError,
    DimensionError,
    FormError,
    IndexOutOfRangeError,
    RingElimError,
    UnsupportedRingError,
)
from .lu import LUFactorization, lu_factorize
from .matrix import RingMatrix
from .pivots import PivotResult, find_pivots
from .result import EliminationResult
from .ring import INTEGERS, RATIONALS, PolynomialRing, RingZModN
from .rowstore import SparseRowStore
from .snf import invariant_factors, smith_normal_form
from .solver import has_solution, solve, solve_regular_left

__all__ = [
    "ContractViolationError",
    "DimensionError",
    "EliminationResult",
    "FormError",
    "INTEGERS",
    "IndexOutOfRangeError",
    "LUFactorization",
    "NormalForm",
    "PivotResult",
    "PolynomialRing",
    "RATIONALS",
    "RingElimError",
    "RingMatrix",
    "RingZModN",
    "SparseRowStore",
    "UnsupportedRingError",
    "eliminate",
    "eliminate_entries",
    "find_pivots",
    "has_solution",
    "invariant_factors",
    "lu_factorize",
    "smith_normal_form",
    "solve",
    "solve_regular_left",
]
