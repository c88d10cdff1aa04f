"""Front-ends for linear systems."""

from typing import Optional, Sequence, Union

import numpy as np

from .eliminator import NormalForm, eliminate
from .exceptions import DimensionError, UnsupportedRingError
from .lu import lu_factorize
from .matrix import RingMatrix
from .pivots import find_pivots
from .rowstore import SparseRowStore


def _column(A: RingMatrix, b) -> RingMatrix:
    if not isinstance(b, RingMatrix):
        b = RingMatrix.column_vector(A.ring, list(b))
    if b.shape != (A.nrows, 1):
        raise DimensionError(f"right-hand side of shape {b.shape}, expected {(A.nrows, 1)}")
    return b


def _row_height(M: RingMatrix) -> int:
    return max((i + 1 for i, _, _ in M.entries()), default=0)


def solve(A: RingMatrix, b: Union[RingMatrix, Sequence]) -> Optional[RingMatrix]:
    """Solve ``A x = b``; ``None`` when there is no solution."""
    return eliminate(A, NormalForm.DIAGONAL).solve(_column(A, b))


def solve_regular_left(A: RingMatrix, b: Union[RingMatrix, Sequence]) -> Optional[RingMatrix]:
    """
    Solve ``x * A = b`` for a square, invertible ``A``.

    The column Hermite form of an invertible ``A`` is the identity, so
    ``A * Q = I`` and ``x = b * Q`` is ``b`` with the column operations
    replayed on it. Returns a ``1 x n`` matrix, or ``None`` when ``A`` is
    singular.
    """
    n, m = A.shape
    if n != m:
        raise DimensionError(f"expected a square matrix, got {n}x{m}")
    if not isinstance(b, RingMatrix):
        b = RingMatrix.from_rows(A.ring, [list(b)], ncols=n)
    if b.shape != (1, n):
        raise DimensionError(f"left-hand side of shape {b.shape}, expected {(1, n)}")

    e = eliminate(A, NormalForm.COL_HERMITE)
    if not e.result.is_identity():
        return None

    x = SparseRowStore(A.ring, (1, n), b.entries())
    for op in e.col_ops:
        x.apply(op)
    return x.to_matrix()


def has_solution(A: RingMatrix, b: Union[RingMatrix, Sequence]) -> bool:
    """
    Decide whether ``A x = b`` is solvable over a field.

    Factorizing ``[A | b]`` along the pivots of ``A`` leaves the Schur
    complement ``[S | s]``, with ``rank(A) = r + rank(S)`` and
    ``rank([A | b]) = r + rank([S | s])``. In a row echelon form of
    ``[S | s]`` the two ranks agree iff ``s`` reaches no lower than ``S``.
    """
    ring = A.ring
    if not ring.is_field:
        raise UnsupportedRingError(f"has_solution needs a field, got {ring}")

    b = _column(A, b)
    m = A.ncols

    pivots = find_pivots(A)
    r = pivots.rank

    Ab = RingMatrix(ring, np.hstack([A.data, b.data]))
    S = lu_factorize(Ab, pivots).S
    if S.nrows == 0:
        return True

    E = eliminate(S, NormalForm.ROW_ECHELON).result
    r1 = _row_height(E.submatrix(0, E.nrows, 0, m - r))
    r2 = _row_height(E.submatrix(0, E.nrows, m - r, m - r + 1))
    return r1 >= r2
