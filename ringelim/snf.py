from typing import List, Tuple

from .diagonal import DiagonalStrategy
from .eliminator import EliminationStrategy, MatrixEliminator, NormalForm, eliminate
from .matrix import RingMatrix
from .operations import AddCol, AddRow, ScaleRow, SwapRows


class SmithStrategy(EliminationStrategy):
    """
    Smith normal form from a diagonal form.

    Runs the diagonal strategy, then repeatedly takes the first adjacent
    pair ``(d[i], d[i + 1])`` with ``d[i]`` not dividing ``d[i + 1]`` and
    replaces it with ``(gcd, lcm)``. Finally every diagonal entry is
    normalized.
    """

    def __init__(self):
        self.settled = False

    def prepare(self, e: MatrixEliminator) -> None:
        e.subrun(DiagonalStrategy())

    def is_done(self, e: MatrixEliminator) -> bool:
        return self.settled

    def iteration(self, e: MatrixEliminator) -> None:
        ring = e.ring
        diag = _nonzero_diagonal(e)

        for i in range(len(diag) - 1):
            if not ring.divides(diag[i], diag[i + 1]):
                self.diagonal_gcd(e, i, i + 1)
                return

        self.settled = True

    def finalize(self, e: MatrixEliminator) -> None:
        ring = e.ring
        for i, d in enumerate(_nonzero_diagonal(e)):
            unit = ring.normalizing_unit(d)
            if unit != ring.one:
                e.apply(ScaleRow(i, unit))

    @staticmethod
    def diagonal_gcd(e: MatrixEliminator, i: int, j: int) -> None:
        """
        Turn the diagonal pair ``(a, b)`` at ``i, j`` into ``(gcd, lcm)``.

        With ``s*a + t*b = g``::

            [a, 0]    [a, 0]    [a, 0]    [0, m]    [0, m]    [g, 0]
            [0, b] -> [sa, b] -> [g, b] -> [g, b] -> [g, 0] -> [0, m]

        where ``m = -a*b/g``; the sign is fixed by the final normalization.
        """
        ring = e.ring
        a = e.store.get(i, i)
        b = e.store.get(j, j)
        g, s, t, u, v = ring.gcdex(a, b)

        for op in (AddRow(i, j, s), AddCol(j, i, t), AddRow(j, i, ring.neg(v)),
                   AddCol(i, j, u), SwapRows(i, j)):
            if isinstance(op, SwapRows) or not ring.is_zero(op.mult):
                e.apply(op)


def _nonzero_diagonal(e: MatrixEliminator) -> List:
    store = e.store
    ring = e.ring
    diag = []
    for i in range(min(store.nrows, store.ncols)):
        d = store.get(i, i)
        if ring.is_zero(d):
            break
        diag.append(d)
    return diag


def smith_normal_form(A: RingMatrix) -> Tuple[RingMatrix, RingMatrix, RingMatrix]:
    """
    Smith normal form front-end.

    Returns (U, V, S) with S = U * A * V in Smith form: diagonal, with
    normalized entries each dividing the next.
    """
    result = eliminate(A, NormalForm.SMITH)
    return result.left, result.right, result.result


def invariant_factors(A: RingMatrix) -> List:
    """The nonzero diagonal entries of the Smith form of ``A``."""
    result = eliminate(A, NormalForm.SMITH)
    return result.diagonal[:result.rank]
