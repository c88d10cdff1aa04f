"""Sparse row storage for in-place elimination.

Each row is a Python list of ``(col, value)`` pairs sorted by column and
holding no zero values. Row operations rewrite a single row list in
place (two-pointer merge for ``add_row``), so their cost is linear in the
lengths of the rows involved and independent of the matrix size.

With ``track=True`` the store also keeps, updated per operation:

* the weight of every row, the sum of the euclidean degrees of its
  entries, used to break ties between pivot candidates;
* a reverse index ``col -> {rows whose leading entry is in col}``, which
  is how the echelon and diagonal strategies find pivot candidates
  without scanning the matrix.
"""

from bisect import bisect_left
from operator import itemgetter
from typing import Any, Dict, Iterable, Iterator, List, Optional, Set, Tuple

from .exceptions import ContractViolationError, DimensionError, IndexOutOfRangeError
from .matrix import MatrixEntry, RingMatrix
from .operations import AddCol, AddRow, ScaleCol, ScaleRow, SwapCols, SwapRows
from .ring import Ring

SparseRow = List[Tuple[int, Any]]


class SparseRowStore:
    def __init__(self, ring: Ring, shape: Tuple[int, int],
                 entries: Iterable[MatrixEntry] = (), track: bool = False):
        nrows, ncols = shape
        if nrows < 0 or ncols < 0:
            raise DimensionError(f"invalid shape {shape}")

        self.ring = ring
        self.nrows = nrows
        self.ncols = ncols
        self.track = track

        rows: List[SparseRow] = [[] for _ in range(nrows)]
        is_zero, coerce = ring.is_zero, ring.coerce
        for i, j, v in entries:
            self._check_index(i, j)
            v = coerce(v)
            if not is_zero(v):
                rows[i].append((j, v))

        for i, row in enumerate(rows):
            row.sort(key=itemgetter(0))
            for k in range(1, len(row)):
                if row[k - 1][0] == row[k][0]:
                    raise DimensionError(f"duplicate entry at ({i}, {row[k][0]})")

        self._rows = rows
        self._weights: List[int] = []
        self._heads: Dict[int, Set[int]] = {}
        if track:
            self._init_tracking()

    @classmethod
    def from_matrix(cls, matrix: RingMatrix, track: bool = False) -> "SparseRowStore":
        return cls(matrix.ring, matrix.shape, matrix.entries(), track=track)

    @classmethod
    def identity(cls, ring: Ring, n: int, track: bool = False) -> "SparseRowStore":
        return cls(ring, (n, n), ((i, i, ring.one) for i in range(n)), track=track)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrows, self.ncols

    @property
    def nnz(self) -> int:
        return sum(len(row) for row in self._rows)

    # --- reading ---

    def get(self, i: int, j: int):
        self._check_index(i, j)
        row = self._rows[i]
        pos = bisect_left(row, (j,))
        if pos < len(row) and row[pos][0] == j:
            return row[pos][1]
        return self.ring.zero

    def row(self, i: int) -> SparseRow:
        """The live row list. Callers must not mutate it."""
        self._check_row(i)
        return self._rows[i]

    def head(self, i: int) -> Optional[Tuple[int, Any]]:
        self._check_row(i)
        row = self._rows[i]
        return row[0] if row else None

    def rows_with_head_in(self, col: int) -> Set[int]:
        self._require_tracking()
        return set(self._heads.get(col, ()))

    def row_weight(self, i: int) -> int:
        self._require_tracking()
        return self._weights[i]

    def col_entries(self, col: int, rows: Optional[Iterable[int]] = None) -> List[Tuple[int, Any]]:
        """``(row, value)`` pairs of the nonzero entries in ``col``."""
        if not 0 <= col < self.ncols:
            raise IndexOutOfRangeError(f"column {col} outside 0..{self.ncols - 1}")
        result = []
        for i in (range(self.nrows) if rows is None else rows):
            row = self._rows[i]
            pos = bisect_left(row, (col,))
            if pos < len(row) and row[pos][0] == col:
                result.append((i, row[pos][1]))
        return result

    def entries(self) -> Iterator[MatrixEntry]:
        for i, row in enumerate(self._rows):
            for j, v in row:
                yield i, j, v

    def to_matrix(self) -> RingMatrix:
        return RingMatrix.from_entries(self.ring, self.shape, self.entries())

    def copy(self, track: Optional[bool] = None) -> "SparseRowStore":
        return SparseRowStore(self.ring, self.shape, self.entries(),
                              track=self.track if track is None else track)

    def __eq__(self, other) -> bool:
        if not isinstance(other, SparseRowStore):
            return NotImplemented
        return self.ring == other.ring and self.shape == other.shape \
            and self._rows == other._rows

    def __repr__(self) -> str:
        return f"SparseRowStore({self.ring}, shape={self.shape}, nnz={self.nnz})"

    # --- writing ---

    def set(self, i: int, j: int, value) -> None:
        """Set one entry; a zero value deletes it."""
        self._check_index(i, j)
        self._set(i, j, value)

    def apply(self, op) -> None:
        if isinstance(op, AddRow):
            self.add_row(op.src, op.dst, op.mult)
        elif isinstance(op, ScaleRow):
            self.scale_row(op.row, op.factor)
        elif isinstance(op, SwapRows):
            self.swap_rows(op.a, op.b)
        elif isinstance(op, AddCol):
            self.add_col(op.src, op.dst, op.mult)
        elif isinstance(op, ScaleCol):
            self.scale_col(op.col, op.factor)
        elif isinstance(op, SwapCols):
            self.swap_cols(op.a, op.b)
        else:
            raise ContractViolationError(f"not an elementary operation: {op!r}")

    def add_row(self, src: int, dst: int, mult) -> None:
        """Row ``dst`` += ``mult`` * row ``src``."""
        self._check_row(src)
        self._check_row(dst)
        if src == dst:
            raise ContractViolationError(f"cannot add row {src} to itself")

        src_row = self._rows[src]
        if not src_row or self.ring.is_zero(mult):
            return

        dst_row = self._rows[dst]
        merged, delta = self._merge(src_row, dst_row, mult)

        if self.track:
            self._unlink_head(dst)
        dst_row[:] = merged
        if self.track:
            self._link_head(dst)
            self._weights[dst] += delta

    def scale_row(self, i: int, factor) -> None:
        self._check_row(i)
        ring = self.ring
        if ring.is_zero(factor):
            raise ContractViolationError("cannot scale a row by zero")

        row = self._rows[i]
        if not row:
            return

        mul, is_zero = ring.mul, ring.is_zero
        scaled = []
        for j, v in row:
            w = mul(factor, v)
            # zero divisors can annihilate entries
            if not is_zero(w):
                scaled.append((j, w))

        if self.track:
            self._unlink_head(i)
            deg = ring.elimination_weight
            self._weights[i] += sum(deg(w) for _, w in scaled) - sum(deg(v) for _, v in row)
        row[:] = scaled
        if self.track:
            self._link_head(i)

    def swap_rows(self, a: int, b: int) -> None:
        self._check_row(a)
        self._check_row(b)
        if a == b:
            return

        if self.track:
            self._unlink_head(a)
            self._unlink_head(b)

        rows = self._rows
        rows[a], rows[b] = rows[b], rows[a]

        if self.track:
            self._link_head(a)
            self._link_head(b)
            w = self._weights
            w[a], w[b] = w[b], w[a]

    def add_col(self, src: int, dst: int, mult) -> None:
        """Col ``dst`` += ``mult`` * col ``src``."""
        self._check_col(src)
        self._check_col(dst)
        if src == dst:
            raise ContractViolationError(f"cannot add column {src} to itself")

        ring = self.ring
        if ring.is_zero(mult):
            return
        for i, v in self.col_entries(src):
            self._set(i, dst, ring.add(self._find(i, dst), ring.mul(mult, v)))

    def scale_col(self, j: int, factor) -> None:
        self._check_col(j)
        ring = self.ring
        if ring.is_zero(factor):
            raise ContractViolationError("cannot scale a column by zero")
        for i, v in self.col_entries(j):
            self._set(i, j, ring.mul(factor, v))

    def swap_cols(self, a: int, b: int) -> None:
        self._check_col(a)
        self._check_col(b)
        if a == b:
            return
        for i in range(self.nrows):
            va, vb = self._find(i, a), self._find(i, b)
            self._set(i, a, vb)
            self._set(i, b, va)

    def transpose(self) -> None:
        """Swap the roles of rows and columns in place."""
        rows: List[SparseRow] = [[] for _ in range(self.ncols)]
        # entries() walks rows in ascending order, so each new row comes out sorted
        for i, j, v in self.entries():
            rows[j].append((i, v))

        self.nrows, self.ncols = self.ncols, self.nrows
        self._rows = rows
        if self.track:
            self._init_tracking()

    # --- internals ---

    def _merge(self, a: SparseRow, b: SparseRow, k) -> Tuple[SparseRow, int]:
        """Return ``b + k * a`` and the change in weight."""
        ring = self.ring
        add, mul, is_zero = ring.add, ring.mul, ring.is_zero
        deg = ring.elimination_weight if self.track else None

        out: SparseRow = []
        append = out.append
        delta = 0
        i = j = 0
        la, lb = len(a), len(b)

        while i < la and j < lb:
            ca, va = a[i]
            cb, vb = b[j]
            if ca < cb:
                w = mul(k, va)
                if not is_zero(w):
                    append((ca, w))
                    if deg:
                        delta += deg(w)
                i += 1
            elif cb < ca:
                append(b[j])
                j += 1
            else:
                w = add(vb, mul(k, va))
                if deg:
                    delta -= deg(vb)
                if not is_zero(w):
                    append((ca, w))
                    if deg:
                        delta += deg(w)
                i += 1
                j += 1

        while i < la:
            ca, va = a[i]
            w = mul(k, va)
            if not is_zero(w):
                append((ca, w))
                if deg:
                    delta += deg(w)
            i += 1

        out.extend(b[j:])
        return out, delta

    def _find(self, i: int, j: int):
        row = self._rows[i]
        pos = bisect_left(row, (j,))
        if pos < len(row) and row[pos][0] == j:
            return row[pos][1]
        return self.ring.zero

    def _set(self, i: int, j: int, value) -> None:
        ring = self.ring
        row = self._rows[i]
        pos = bisect_left(row, (j,))
        present = pos < len(row) and row[pos][0] == j

        if self.track:
            self._unlink_head(i)
            deg = ring.elimination_weight
            if present:
                self._weights[i] -= deg(row[pos][1])
            if not ring.is_zero(value):
                self._weights[i] += deg(value)

        if ring.is_zero(value):
            if present:
                del row[pos]
        elif present:
            row[pos] = (j, value)
        else:
            row.insert(pos, (j, value))

        if self.track:
            self._link_head(i)

    def _init_tracking(self) -> None:
        deg = self.ring.elimination_weight
        self._weights = [sum(deg(v) for _, v in row) for row in self._rows]
        self._heads = {}
        for i, row in enumerate(self._rows):
            if row:
                self._heads.setdefault(row[0][0], set()).add(i)

    def _unlink_head(self, i: int) -> None:
        row = self._rows[i]
        if not row:
            return
        j = row[0][0]
        rows = self._heads[j]
        rows.discard(i)
        if not rows:
            del self._heads[j]

    def _link_head(self, i: int) -> None:
        row = self._rows[i]
        if row:
            self._heads.setdefault(row[0][0], set()).add(i)

    def _require_tracking(self) -> None:
        if not self.track:
            raise ContractViolationError("row tracking is disabled for this store")

    def _check_row(self, i: int) -> None:
        if not 0 <= i < self.nrows:
            raise IndexOutOfRangeError(f"row {i} outside 0..{self.nrows - 1}")

    def _check_col(self, j: int) -> None:
        if not 0 <= j < self.ncols:
            raise IndexOutOfRangeError(f"column {j} outside 0..{self.ncols - 1}")

    def _check_index(self, i: int, j: int) -> None:
        self._check_row(i)
        self._check_col(j)
