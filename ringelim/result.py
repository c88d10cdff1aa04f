"""
Quantities derived from an elimination.

Everything here is read off the final form and the two operation logs.
With ``P`` the product of the row operations and ``Q`` the product of the
column operations, ``P * A * Q = B``. For the diagonal forms::

    P * A * Q = [ D_r | O   ]
                [ O   | O_k ]

so that

* ``Ker(A) = Q * [O; I_k]``, the last ``k`` columns of ``Q``;
* ``Im(A) = P^-1 * [D_r; O]``;
* ``A x = b`` iff ``B y = P b`` with ``x = Q y``.

No matrix is multiplied out: each quantity replays a log, or its inverse,
against a small sparse seed. Results are computed once and cached.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .eliminator import NormalForm
from .exceptions import DimensionError, FormError
from .matrix import MatrixEntry, RingMatrix
from .operations import AddCol, AddRow, ColOperation, RowOperation
from .ring import Ring
from .rowstore import SparseRowStore


def _replay(ring: Ring, shape: Tuple[int, int], seed: Iterable[MatrixEntry],
            ops: Iterable) -> SparseRowStore:
    store = SparseRowStore(ring, shape, seed)
    for op in ops:
        store.apply(op)
    return store


def _identity_seed(n: int, ring: Ring):
    return ((i, i, ring.one) for i in range(n))


def _as_left_factor(op: ColOperation) -> RowOperation:
    """The row operation with the same matrix as the column operation ``op``."""
    if isinstance(op, AddCol):
        return AddRow(op.dst, op.src, op.mult)
    return op.transposed()


def _as_right_factor(op: RowOperation) -> ColOperation:
    """The column operation with the same matrix as the row operation ``op``."""
    if isinstance(op, AddRow):
        return AddCol(op.dst, op.src, op.mult)
    return op.transposed()


@dataclass(frozen=True, eq=False)
class EliminationResult:
    form: NormalForm
    store: SparseRowStore
    row_ops: Tuple[RowOperation, ...]
    col_ops: Tuple[ColOperation, ...]

    @property
    def ring(self) -> Ring:
        return self.store.ring

    @property
    def shape(self) -> Tuple[int, int]:
        return self.store.shape

    @cached_property
    def result(self) -> RingMatrix:
        return self.store.to_matrix()

    # returns P of: P * A * Q = B

    @cached_property
    def left(self) -> RingMatrix:
        n = self.shape[0]
        return _replay(self.ring, (n, n), _identity_seed(n, self.ring), self.row_ops).to_matrix()

    @cached_property
    def left_inverse(self) -> RingMatrix:
        n = self.shape[0]
        ring = self.ring
        ops = (op.inverse(ring) for op in reversed(self.row_ops))
        return _replay(ring, (n, n), _identity_seed(n, ring), ops).to_matrix()

    # returns Q of: P * A * Q = B, built transposed so that every step is a row operation

    @cached_property
    def right(self) -> RingMatrix:
        m = self.shape[1]
        ops = (op.transposed() for op in self.col_ops)
        store = _replay(self.ring, (m, m), _identity_seed(m, self.ring), ops)
        store.transpose()
        return store.to_matrix()

    @cached_property
    def right_inverse(self) -> RingMatrix:
        m = self.shape[1]
        ring = self.ring
        ops = (op.inverse(ring).transposed() for op in reversed(self.col_ops))
        store = _replay(ring, (m, m), _identity_seed(m, ring), ops)
        store.transpose()
        return store.to_matrix()

    @cached_property
    def rank(self) -> int:
        ring = self.ring
        if self.form.is_diagonal:
            return sum(1 for d in self.diagonal if not ring.is_zero(d))
        if self.form.is_column_form:
            return len({j for _, j, _ in self.store.entries()})
        return sum(1 for i in range(self.shape[0]) if self.store.row(i))

    @property
    def nullity(self) -> int:
        return self.shape[1] - self.rank

    @cached_property
    def diagonal(self) -> List:
        self._require_diagonal("diagonal")
        n, m = self.shape
        return [self.store.get(i, i) for i in range(min(n, m))]

    @cached_property
    def kernel_basis(self) -> RingMatrix:
        """``Z`` (``m x k``) whose columns form a basis of ``Ker(A)``."""
        self._require_diagonal("kernel_basis")
        m, r = self.shape[1], self.rank
        k = m - r
        one = self.ring.one
        seed = ((r + j, j, one) for j in range(k))
        ops = (_as_left_factor(op) for op in reversed(self.col_ops))
        return _replay(self.ring, (m, k), seed, ops).to_matrix()

    @cached_property
    def kernel_transition(self) -> RingMatrix:
        """``T`` (``k x m``) with ``T * kernel_basis == I_k``."""
        self._require_diagonal("kernel_transition")
        m, r = self.shape[1], self.rank
        k = m - r
        ring = self.ring
        seed = ((i, r + i, ring.one) for i in range(k))
        ops = (op.inverse(ring) for op in reversed(self.col_ops))
        return _replay(ring, (k, m), seed, ops).to_matrix()

    @cached_property
    def image_basis(self) -> RingMatrix:
        """``P^-1 * [D_r; O]`` (``n x r``), columns spanning ``Im(A)``."""
        self._require_diagonal("image_basis")
        n, r = self.shape[0], self.rank
        ring = self.ring
        seed = ((i, i, self.diagonal[i]) for i in range(r))
        ops = (op.inverse(ring) for op in reversed(self.row_ops))
        return _replay(ring, (n, r), seed, ops).to_matrix()

    @cached_property
    def image_transition(self) -> RingMatrix:
        """``T = [I_r, O] * P`` (``r x n``) with ``T * image_basis == D_r``."""
        self._require_diagonal("image_transition")
        n, r = self.shape[0], self.rank
        seed = _identity_seed(r, self.ring)
        ops = (_as_right_factor(op) for op in reversed(self.row_ops))
        return _replay(self.ring, (r, n), seed, ops).to_matrix()

    @cached_property
    def determinant(self):
        self._require_diagonal("determinant")
        n, m = self.shape
        if n != m:
            raise DimensionError(f"determinant of a non-square {n}x{m} matrix")

        ring = self.ring
        if self.rank < n:
            return ring.zero

        det = ring.one
        for op in self.row_ops + self.col_ops:
            det = ring.mul(det, op.determinant(ring))
        # every logged operation has a unit determinant
        det = ring.inverse(det)
        for d in self.diagonal:
            det = ring.mul(det, d)
        return det

    @cached_property
    def inverse(self) -> Optional[RingMatrix]:
        """``A^-1``, or ``None`` when ``A`` is not invertible."""
        self._require_diagonal("inverse")
        n, m = self.shape
        if n != m:
            raise DimensionError(f"inverse of a non-square {n}x{m} matrix")
        if not self.result.is_identity():
            return None
        return self.right @ self.left

    @property
    def is_injective(self) -> bool:
        return self.rank == self.shape[1]

    @property
    def is_surjective(self) -> bool:
        self._require_diagonal("is_surjective")
        ring = self.ring
        return self.rank == self.shape[0] and all(ring.is_unit(d) for d in self.diagonal)

    @property
    def is_bijective(self) -> bool:
        return self.is_injective and self.is_surjective

    def solve(self, b: Union[RingMatrix, Sequence]) -> Optional[RingMatrix]:
        """
        Find ``x`` with ``A x = b``.

        Returns an ``m x 1`` matrix, or ``None`` when no solution exists.
        """
        self._require_diagonal("solve")
        ring = self.ring
        n, m = self.shape

        if not isinstance(b, RingMatrix):
            b = RingMatrix.column_vector(ring, list(b))
        if b.shape != (n, 1):
            raise DimensionError(f"right-hand side of shape {b.shape}, expected {(n, 1)}")

        y = _replay(ring, (n, 1), b.entries(), self.row_ops)

        r = self.rank
        z = []
        for i in range(n):
            yi = y.get(i, 0)
            if i >= r:
                if not ring.is_zero(yi):
                    return None
                continue
            d = self.diagonal[i]
            if not ring.divides(d, yi):
                return None
            z.append((i, 0, ring.exact_div(yi, d)))

        ops = (_as_left_factor(op) for op in reversed(self.col_ops))
        return _replay(ring, (m, 1), z, ops).to_matrix()

    def _require_diagonal(self, name: str) -> None:
        if not self.form.is_diagonal:
            raise FormError(f"{name} needs a diagonal form, got {self.form.name}")
