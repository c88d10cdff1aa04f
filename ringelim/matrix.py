from dataclasses import dataclass
from typing import Any, Iterable, Iterator, List, Optional, Sequence, Tuple

import numpy as np

from .exceptions import DimensionError, IndexOutOfRangeError
from .ring import Ring

MatrixEntry = Tuple[int, int, Any]


def _filled(nrows: int, ncols: int, value) -> np.ndarray:
    arr = np.empty((nrows, ncols), dtype=object)
    arr.fill(value)
    return arr


def _object_array(rows: Sequence[Sequence[Any]], ncols: Optional[int] = None) -> np.ndarray:
    nrows = len(rows)
    if ncols is None:
        ncols = len(rows[0]) if nrows else 0
    arr = np.empty((nrows, ncols), dtype=object)
    for i, row in enumerate(rows):
        if len(row) != ncols:
            raise DimensionError("All rows must have the same length")
        for j, x in enumerate(row):
            arr[i, j] = x
    return arr


@dataclass(eq=False)
class RingMatrix:
    """Dense matrix over a ring, backed by a numpy object array.

    Used for small results, debugging and as a convenient input format.
    The elimination engine itself works on ``SparseRowStore``.
    """

    ring: Ring
    data: np.ndarray

    def __post_init__(self):
        if isinstance(self.data, np.ndarray):
            if self.data.ndim != 2:
                raise DimensionError(f"expected a 2-dimensional array, got shape {self.data.shape}")
            arr = self.data.astype(object)
        else:
            arr = _object_array(self.data)
        coerce = self.ring.coerce
        for idx, x in np.ndenumerate(arr):
            arr[idx] = coerce(x)
        self.data = arr

    @property
    def nrows(self) -> int:
        return self.data.shape[0]

    @property
    def ncols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrows, self.ncols

    @classmethod
    def from_rows(cls, ring: Ring, rows: Sequence[Sequence[Any]],
                  ncols: Optional[int] = None) -> "RingMatrix":
        return cls(ring=ring, data=_object_array(rows, ncols))

    @classmethod
    def zeros(cls, ring: Ring, nrows: int, ncols: int) -> "RingMatrix":
        return cls(ring, _filled(nrows, ncols, ring.zero))

    @classmethod
    def identity(cls, ring: Ring, n: int) -> "RingMatrix":
        M = cls.zeros(ring, n, n)
        for i in range(n):
            M.data[i, i] = ring.one
        return M

    @classmethod
    def diagonal(cls, ring: Ring, diag: Sequence[Any],
                 shape: Optional[Tuple[int, int]] = None) -> "RingMatrix":
        n = len(diag)
        nrows, ncols = shape if shape is not None else (n, n)
        if n > min(nrows, ncols):
            raise DimensionError(f"{n} diagonal entries do not fit shape {(nrows, ncols)}")
        M = cls.zeros(ring, nrows, ncols)
        for i, v in enumerate(diag):
            M.data[i, i] = ring.coerce(v)
        return M

    @classmethod
    def from_entries(cls, ring: Ring, shape: Tuple[int, int],
                     entries: Iterable[MatrixEntry]) -> "RingMatrix":
        nrows, ncols = shape
        M = cls.zeros(ring, nrows, ncols)
        for i, j, v in entries:
            if not (0 <= i < nrows and 0 <= j < ncols):
                raise IndexOutOfRangeError(f"entry ({i}, {j}) outside shape {shape}")
            M.data[i, j] = ring.coerce(v)
        return M

    @classmethod
    def column_vector(cls, ring: Ring, values: Sequence[Any]) -> "RingMatrix":
        return cls.from_rows(ring, [[v] for v in values], ncols=1)

    def entries(self) -> Iterator[MatrixEntry]:
        """Yield ``(row, col, value)`` for every nonzero entry, row-major."""
        is_zero = self.ring.is_zero
        for (i, j), v in np.ndenumerate(self.data):
            if not is_zero(v):
                yield i, j, v

    def __getitem__(self, key: Tuple[int, int]):
        return self.data[key]

    def row(self, i: int) -> List[Any]:
        return list(self.data[i, :])

    def column(self, j: int) -> List[Any]:
        return list(self.data[:, j])

    def copy(self) -> "RingMatrix":
        return RingMatrix(self.ring, self.data.copy())

    def transpose(self) -> "RingMatrix":
        return RingMatrix(self.ring, self.data.T.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, RingMatrix):
            return NotImplemented
        if self.ring != other.ring or self.shape != other.shape:
            return False
        return all(a == b for a, b in zip(self.data.flat, other.data.flat))

    def _check_same(self, other: "RingMatrix") -> None:
        if self.ring != other.ring:
            raise DimensionError("Cannot combine matrices over different rings")
        if self.shape != other.shape:
            raise DimensionError(f"Dimension mismatch: {self.shape} != {other.shape}")

    def __add__(self, other: "RingMatrix") -> "RingMatrix":
        self._check_same(other)
        add = self.ring.add
        C = _filled(self.nrows, self.ncols, self.ring.zero)
        for idx, a in np.ndenumerate(self.data):
            C[idx] = add(a, other.data[idx])
        return RingMatrix(self.ring, C)

    def __sub__(self, other: "RingMatrix") -> "RingMatrix":
        self._check_same(other)
        sub = self.ring.sub
        C = _filled(self.nrows, self.ncols, self.ring.zero)
        for idx, a in np.ndenumerate(self.data):
            C[idx] = sub(a, other.data[idx])
        return RingMatrix(self.ring, C)

    def __matmul__(self, other: "RingMatrix") -> "RingMatrix":
        if self.ring != other.ring:
            raise DimensionError("Cannot multiply matrices over different rings")

        rA, cA = self.shape
        rB, cB = other.shape

        if cA != rB:
            raise DimensionError(f"Dimension mismatch: {cA} != {rB}")

        ring = self.ring
        add, mul, is_zero = ring.add, ring.mul, ring.is_zero

        A = self.data
        B = other.data

        # Pre-allocate result
        C = _filled(rA, cB, ring.zero)

        for i in range(rA):
            Ai = A[i]
            Ci = C[i]
            for k in range(cA):
                aik = Ai[k]
                if is_zero(aik):
                    continue
                Bk = B[k]
                for j in range(cB):
                    Ci[j] = add(Ci[j], mul(aik, Bk[j]))

        return RingMatrix(ring, C)

    def submatrix(self, row_start: int, row_end: int,
                  col_start: int, col_end: int) -> "RingMatrix":
        """
        Return a copy of rows [row_start:row_end) and
        cols [col_start:col_end).
        """
        return RingMatrix(self.ring, self.data[row_start:row_end, col_start:col_end].copy())

    def is_zero(self) -> bool:
        return all(self.ring.is_zero(x) for x in self.data.flat)

    def is_diagonal(self) -> bool:
        return all(i == j for i, j, _ in self.entries())

    def is_identity(self) -> bool:
        if self.nrows != self.ncols:
            return False
        one = self.ring.one
        return all(i == j and v == one for i, j, v in self.entries()) \
            and all(self.data[i, i] == one for i in range(self.nrows))

    def diagonal_entries(self) -> List[Any]:
        n = min(self.nrows, self.ncols)
        return [self.data[i, i] for i in range(n)]

    def eliminate(self, form=None):
        """Run the elimination engine on this matrix.

        See ``ringelim.eliminator.eliminate``.
        """
        from .eliminator import NormalForm, eliminate
        return eliminate(self, form if form is not None else NormalForm.DIAGONAL)

    def to_sympy(self):
        import sympy as sp

        def convert(x):
            return x.as_expr() if isinstance(x, sp.Poly) else sp.sympify(x)

        return sp.Matrix(self.nrows, self.ncols, lambda i, j: convert(self.data[i, j]))

    def pprint(self):
        from sympy import pprint
        pprint(self.to_sympy())
