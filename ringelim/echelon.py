"""Row and column echelon strategies.

``RowEchelonStrategy`` walks across the columns. For each column it takes
the rows whose leading entry lies in that column, picks the lightest one
as pivot and reduces the other leading entries by Euclidean division
against it. When every remainder vanishes the pivot is normalized and
swapped into place; otherwise the column is retried with the smaller
remainders as new candidates.

With ``reduced=True`` the entries above each pivot are also reduced
modulo the pivot, which yields the Hermite normal form.

``ColEchelonStrategy`` runs the row strategy on the transposed store.
"""

from .eliminator import EliminationStrategy, MatrixEliminator
from .operations import AddRow, ScaleRow, SwapRows


class RowEchelonStrategy(EliminationStrategy):
    def __init__(self, reduced: bool = False):
        self.reduced = reduced
        self.current_row = 0
        self.current_col = 0

    def is_done(self, e: MatrixEliminator) -> bool:
        nrows, ncols = e.shape
        return self.current_row >= nrows or self.current_col >= ncols

    def iteration(self, e: MatrixEliminator) -> None:
        store = e.store
        ring = e.ring
        col = self.current_col

        candidates = sorted(store.rows_with_head_in(col))
        if not candidates:
            self.current_col += 1
            return

        i0 = self._find_pivot(e, candidates)
        a0 = store.head(i0)[1]

        again = False
        for i in candidates:
            if i == i0:
                continue
            q, r = ring.divmod(store.head(i)[1], a0)
            if not ring.is_zero(q):
                e.apply(AddRow(i0, i, ring.neg(q)))
            if not ring.is_zero(r):
                again = True

        if again:
            return

        unit = ring.normalizing_unit(a0)
        if unit != ring.one:
            e.apply(ScaleRow(i0, unit))

        if i0 != self.current_row:
            e.apply(SwapRows(i0, self.current_row))

        if self.reduced:
            self._reduce_current_col(e)

        self.current_row += 1
        self.current_col += 1

    def _find_pivot(self, e: MatrixEliminator, candidates) -> int:
        store = e.store
        weight = e.ring.elimination_weight
        return min(candidates,
                   key=lambda i: (weight(store.head(i)[1]), store.row_weight(i), i))

    def _reduce_current_col(self, e: MatrixEliminator) -> None:
        """Reduce the entries above the pivot modulo the pivot."""
        store = e.store
        ring = e.ring
        row, col = self.current_row, self.current_col
        a0 = store.head(row)[1]

        for i, a in store.col_entries(col, range(row)):
            q, _ = ring.divmod(a, a0)
            if not ring.is_zero(q):
                e.apply(AddRow(row, i, ring.neg(q)))

    def __str__(self) -> str:
        return "RowHermiteStrategy" if self.reduced else "RowEchelonStrategy"


class ColEchelonStrategy(EliminationStrategy):
    def __init__(self, reduced: bool = False):
        self.reduced = reduced

    def prepare(self, e: MatrixEliminator) -> None:
        e.subrun(RowEchelonStrategy(reduced=self.reduced), transpose=True)

    def __str__(self) -> str:
        return "ColHermiteStrategy" if self.reduced else "ColEchelonStrategy"
