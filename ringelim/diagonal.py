"""Diagonal elimination.

At step ``t`` the lightest entry among rows ``t..`` is swapped to
``(t, t)`` and its column and row are cleared by Euclidean division. A
nonzero remainder restarts the step with a lighter pivot. Once the
column and the row are clear, every remaining entry must be divisible by
the pivot; otherwise the offending row is added to row ``t`` and the step
restarts. The resulting diagonal therefore already satisfies
``d[t] | d[t + 1]``.
"""

from .eliminator import EliminationStrategy, MatrixEliminator
from .operations import AddCol, AddRow, ScaleRow, SwapCols, SwapRows


class DiagonalStrategy(EliminationStrategy):
    def __init__(self):
        self.t = 0
        self.finished = False

    def is_done(self, e: MatrixEliminator) -> bool:
        nrows, ncols = e.shape
        return self.finished or self.t >= min(nrows, ncols)

    def iteration(self, e: MatrixEliminator) -> None:
        store = e.store
        ring = e.ring
        t = self.t

        pivot = self._find_pivot(e)
        if pivot is None:
            self.finished = True
            return

        i0, j0 = pivot
        if i0 != t:
            e.apply(SwapRows(i0, t))
        if j0 != t:
            e.apply(SwapCols(j0, t))

        a0 = store.get(t, t)
        again = False

        # column t
        for i, a in store.col_entries(t, range(t + 1, store.nrows)):
            q, r = ring.divmod(a, a0)
            if not ring.is_zero(q):
                e.apply(AddRow(t, i, ring.neg(q)))
            if not ring.is_zero(r):
                again = True

        if again:
            return

        # row t; its first entry is the pivot itself
        for j, a in list(store.row(t))[1:]:
            q, r = ring.divmod(a, a0)
            if not ring.is_zero(q):
                e.apply(AddCol(t, j, ring.neg(q)))
            if not ring.is_zero(r):
                again = True

        if again:
            return

        for i in range(t + 1, store.nrows):
            if any(not ring.divides(a0, a) for _, a in store.row(i)):
                e.apply(AddRow(i, t, ring.one))
                return

        unit = ring.normalizing_unit(a0)
        if unit != ring.one:
            e.apply(ScaleRow(t, unit))

        self.t += 1

    def _find_pivot(self, e: MatrixEliminator):
        """The lightest entry of rows ``t..``, by (degree, row weight, row, col)."""
        store = e.store
        weight = e.ring.elimination_weight

        best = None
        for i in range(self.t, store.nrows):
            row = store.row(i)
            if not row:
                continue
            w = store.row_weight(i)
            for j, a in row:
                key = (weight(a), w, i, j)
                if best is None or key < best:
                    best = key

        if best is None:
            return None
        return best[2], best[3]
