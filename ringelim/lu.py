"""
Permuted LU factorization with a Schur complement remainder.

With pivots from ``find_pivots`` and the permutations they induce::

    P * A * Q = [ U  B ]
                [ C  D ]

where ``U`` (``r x r``) is upper triangular with invertible diagonal. Each
non-pivot row ``c`` of ``[C D]`` is reduced against the pivot rows in
pivot order, which solves ``x * U = c`` by forward substitution and
leaves ``d - x * B`` behind. Hence::

    P * A * Q = [I; L] * [U, B] + [[0, 0], [0, S]],    S = D - L * B

Only the pivots need to be invertible, so any ring works.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .exceptions import ContractViolationError, IndexOutOfRangeError
from .matrix import RingMatrix
from .pivots import PivotResult, find_pivots
from .ring import Ring
from .rowstore import SparseRowStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LUFactorization:
    ring: Ring
    L: RingMatrix
    U: RingMatrix
    S: RingMatrix
    pivots: PivotResult

    @property
    def rank(self) -> int:
        return self.pivots.rank

    @property
    def is_complete(self) -> bool:
        """True when the pivots account for the whole matrix, i.e. ``S == 0``."""
        return self.S.is_zero()

    @property
    def P(self) -> RingMatrix:
        return self.pivots.row_permutation_matrix(self.ring)

    @property
    def Q(self) -> RingMatrix:
        return self.pivots.col_permutation_matrix(self.ring)

    def reconstruct(self) -> RingMatrix:
        """``[I; L] * [U, B] + [[0, 0], [0, S]]``, which equals ``P * A * Q``."""
        LU = self.L @ self.U
        r = self.rank
        entries = list(LU.entries())
        for i, j, v in self.S.entries():
            entries.append((r + i, r + j, v))

        ring = self.ring
        M = RingMatrix.zeros(ring, *LU.shape)
        for i, j, v in entries:
            M.data[i, j] = ring.add(M.data[i, j], v)
        return M


def permuted_store(A: RingMatrix, pivots: PivotResult) -> SparseRowStore:
    """``P * A * Q`` as a row store."""
    rp, cp = pivots.row_permutation, pivots.col_permutation
    return SparseRowStore(A.ring, A.shape, ((rp[i], cp[j], v) for i, j, v in A.entries()))


def lu_factorize(A: RingMatrix, pivots: Optional[PivotResult] = None,
                 max_workers: Optional[int] = None) -> LUFactorization:
    """
    Factorize ``A`` along its pivots.

    Args:
        A: Input matrix over any ring.
        pivots: Pivots to factor along. Computed with ``find_pivots`` when
            omitted. The pivot list is re-read against the shape of ``A``,
            so pivots found for a leading block of ``A`` may be reused.
        max_workers: Passed on to ``find_pivots``.

    Returns:
        The factorization; see ``LUFactorization``.
    """
    ring = A.ring
    n, m = A.shape

    if pivots is None:
        pivots = find_pivots(A, max_workers=max_workers)
    elif any(not (0 <= i < n and 0 <= j < m) for i, j in pivots.pivots):
        raise IndexOutOfRangeError(f"pivots do not fit a {n}x{m} matrix")
    else:
        pivots = PivotResult.from_pivots(pivots.pivots, A.shape)

    r = pivots.rank
    store = permuted_store(A, pivots)

    inverses = []
    for k in range(r):
        inv = ring.inverse(store.get(k, k))
        if inv is None:
            raise ContractViolationError(f"pivot {pivots.pivots[k]} is not invertible")
        inverses.append(inv)

    L_entries = [(i, i, ring.one) for i in range(r)]
    for p in range(r, n):
        # forward substitution: the head of row p is its next unsolved column
        while True:
            head = store.head(p)
            if head is None or head[0] >= r:
                break
            j, a = head
            x = ring.mul(a, inverses[j])
            L_entries.append((p, j, x))
            store.add_row(j, p, ring.neg(x))

    U = RingMatrix.from_entries(ring, (r, m), ((i, j, v) for i, j, v in store.entries() if i < r))
    L = RingMatrix.from_entries(ring, (n, r), L_entries)
    S = RingMatrix.from_entries(
        ring, (n - r, m - r), ((i - r, j - r, v) for i, j, v in store.entries() if i >= r))

    logger.debug("LU: %dx%d over %s, rank %d", n, m, ring, r)

    return LUFactorization(ring=ring, L=L, U=U, S=S, pivots=pivots)
