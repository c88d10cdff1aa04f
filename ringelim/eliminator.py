"""
Elimination driver.

``MatrixEliminator`` owns a row store and the operation log. A strategy
object decides which operations to apply; the eliminator runs every
strategy through the same loop::

    strategy.prepare(e)
    while not aborted and not strategy.is_done(e):
        strategy.iteration(e)
    strategy.finalize(e)

The strategy for each ``NormalForm`` is chosen once, at construction.
"""

import logging
from enum import Enum
from typing import Iterable, List, Tuple

from .exceptions import UnsupportedRingError
from .matrix import MatrixEntry, RingMatrix
from .operations import ColOperation, RowOperation
from .ring import Ring
from .rowstore import SparseRowStore

logger = logging.getLogger(__name__)


class NormalForm(Enum):
    ROW_ECHELON = "row_echelon"
    COL_ECHELON = "col_echelon"
    ROW_HERMITE = "row_hermite"
    HERMITE = "row_hermite"
    COL_HERMITE = "col_hermite"
    DIAGONAL = "diagonal"
    SMITH = "smith"

    @property
    def is_diagonal(self) -> bool:
        return self in (NormalForm.DIAGONAL, NormalForm.SMITH)

    @property
    def is_column_form(self) -> bool:
        return self in (NormalForm.COL_ECHELON, NormalForm.COL_HERMITE)


class EliminationStrategy:
    """Base strategy: a single no-op iteration."""

    def prepare(self, e: "MatrixEliminator") -> None:
        pass

    def is_done(self, e: "MatrixEliminator") -> bool:
        return True

    def iteration(self, e: "MatrixEliminator") -> None:
        pass

    def finalize(self, e: "MatrixEliminator") -> None:
        pass

    def __str__(self) -> str:
        return type(self).__name__


def strategy_for(form: NormalForm) -> EliminationStrategy:
    from .diagonal import DiagonalStrategy
    from .echelon import ColEchelonStrategy, RowEchelonStrategy
    from .snf import SmithStrategy

    if form is NormalForm.ROW_ECHELON:
        return RowEchelonStrategy()
    if form is NormalForm.ROW_HERMITE:
        return RowEchelonStrategy(reduced=True)
    if form is NormalForm.COL_ECHELON:
        return ColEchelonStrategy()
    if form is NormalForm.COL_HERMITE:
        return ColEchelonStrategy(reduced=True)
    if form is NormalForm.SMITH:
        return SmithStrategy()
    return DiagonalStrategy()


class MatrixEliminator:
    def __init__(self, store: SparseRowStore):
        if not store.ring.is_euclidean:
            raise UnsupportedRingError(f"normal forms need a Euclidean ring, got {store.ring}")
        if not store.track:
            store = store.copy(track=True)
        self.store = store
        self.row_ops: List[RowOperation] = []
        self.col_ops: List[ColOperation] = []
        self.aborted = False

    @property
    def ring(self) -> Ring:
        return self.store.ring

    @property
    def shape(self) -> Tuple[int, int]:
        return self.store.shape

    def run(self, strategy: EliminationStrategy) -> None:
        logger.debug("Start: %s on %s", strategy, self.store)

        strategy.prepare(self)

        itr = 0
        while not self.aborted and not strategy.is_done(self):
            strategy.iteration(self)
            itr += 1

        strategy.finalize(self)

        logger.debug("Done: %s, %d iterations, %d steps",
                     strategy, itr, len(self.row_ops) + len(self.col_ops))

    def subrun(self, strategy: EliminationStrategy, transpose: bool = False) -> None:
        """Run ``strategy`` on the same store and merge its log into ours."""
        if transpose:
            self.store.transpose()

        sub = MatrixEliminator(self.store)
        sub.run(strategy)

        if not transpose:
            self.row_ops += sub.row_ops
            self.col_ops += sub.col_ops
        else:
            self.store.transpose()
            self.row_ops += [op.transposed() for op in sub.col_ops]
            self.col_ops += [op.transposed() for op in sub.row_ops]

    def apply(self, op) -> None:
        self.store.apply(op)
        if op.is_row_operation:
            self.row_ops.append(op)
        else:
            self.col_ops.append(op)
        logger.debug("%s", op)

    def abort(self) -> None:
        self.aborted = True


def eliminate(matrix: RingMatrix, form: NormalForm = NormalForm.DIAGONAL):
    """
    Bring ``matrix`` into ``form`` by invertible row and column operations.

    Returns an ``EliminationResult`` holding the final form and both
    operation logs. Raises ``UnsupportedRingError`` for rings that are not
    Euclidean.
    """
    return eliminate_entries(matrix.ring, matrix.shape, matrix.entries(), form)


def eliminate_entries(ring: Ring, shape: Tuple[int, int], entries: Iterable[MatrixEntry],
                      form: NormalForm = NormalForm.DIAGONAL):
    """As ``eliminate``, for a matrix given as sparse ``(row, col, value)`` triples."""
    from .result import EliminationResult

    if not ring.is_euclidean:
        raise UnsupportedRingError(f"normal forms need a Euclidean ring, got {ring}")

    form = NormalForm(form)
    store = SparseRowStore(ring, shape, entries, track=True)
    e = MatrixEliminator(store)
    e.run(strategy_for(form))

    return EliminationResult(
        form=form,
        store=e.store,
        row_ops=tuple(e.row_ops),
        col_ops=tuple(e.col_ops),
    )
