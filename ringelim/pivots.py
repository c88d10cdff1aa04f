"""
Pivot search for sparse PLU factorization.

Follows Bouillaguet, Delaplace and Voge, "Parallel Sparse PLUQ
Factorization modulo p": Faugère-Lachartre pivots first, then a column
sweep, then a parallel search for pivots that keep the pivot dependency
graph acyclic, and finally a topological sort of the pivots.
"""

import logging
import threading
from collections import deque
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from graphlib import TopologicalSorter
from typing import Dict, List, Optional, Sequence, Set, Tuple, Union

from .matrix import RingMatrix
from .rowstore import SparseRowStore

logger = logging.getLogger(__name__)

Pivot = Tuple[int, int]


def _as_permutation(order: Sequence[int], n: int) -> Tuple[int, ...]:
    """Map each index to its new position: ``order`` first, then the rest ascending."""
    taken = set(order)
    sequence = list(order) + [k for k in range(n) if k not in taken]
    perm = [0] * n
    for new, old in enumerate(sequence):
        perm[old] = new
    return tuple(perm)


@dataclass(frozen=True)
class PivotResult:
    """
    Pivots ``(row, col)`` in dependency order, with the permutations that
    move them onto the leading diagonal.

    ``row_permutation[i]`` is the new position of row ``i``; likewise for
    columns.
    """

    pivots: Tuple[Pivot, ...]
    row_permutation: Tuple[int, ...]
    col_permutation: Tuple[int, ...]

    @classmethod
    def from_pivots(cls, pivots: Sequence[Pivot], shape: Tuple[int, int]) -> "PivotResult":
        nrows, ncols = shape
        pivots = tuple((i, j) for i, j in pivots)
        return cls(
            pivots=pivots,
            row_permutation=_as_permutation([i for i, _ in pivots], nrows),
            col_permutation=_as_permutation([j for _, j in pivots], ncols),
        )

    @property
    def rank(self) -> int:
        return len(self.pivots)

    def row_permutation_matrix(self, ring) -> RingMatrix:
        """``P`` with ``(P @ A)[row_permutation[i]] == A[i]``."""
        n = len(self.row_permutation)
        return RingMatrix.from_entries(
            ring, (n, n), ((new, old, ring.one) for old, new in enumerate(self.row_permutation)))

    def col_permutation_matrix(self, ring) -> RingMatrix:
        """``Q`` with ``(A @ Q)[:, col_permutation[j]] == A[:, j]``."""
        m = len(self.col_permutation)
        return RingMatrix.from_entries(
            ring, (m, m), ((old, new, ring.one) for old, new in enumerate(self.col_permutation)))


class PivotFinder:
    """
    One pivot search over a row store.

    The store is only read. Phase three runs one task per remaining row on
    a thread pool; the shared pivot map is guarded by a single lock held
    for the snapshot and for the verify-then-commit step, never while a
    candidate is being searched.
    """

    def __init__(self, store: SparseRowStore, max_workers: Optional[int] = None):
        if not store.track:
            store = store.copy(track=True)
        self.store = store
        self.max_workers = max_workers

        self._pivots: Dict[int, int] = {}  # col -> row
        self._pivot_rows: Set[int] = set()
        self._lock = threading.Lock()

    def run(self) -> List[Pivot]:
        self._find_fl_pivots()
        logger.debug("FL pivots: %d", len(self._pivots))

        self._find_fl_column_pivots()
        logger.debug("FL column pivots: %d", len(self._pivots))

        retries = self._find_cycle_free_pivots()
        logger.debug("cycle-free pivots: %d (%d retries)", len(self._pivots), retries)

        return self._sort_pivots()

    def _set_pivot(self, i: int, j: int) -> None:
        self._pivots[j] = i
        self._pivot_rows.add(i)

    def _find_fl_pivots(self) -> None:
        store = self.store
        ring = store.ring
        found: Dict[int, int] = {}

        for i in range(store.nrows):
            head = store.head(i)
            if head is None:
                continue
            j, a = head
            if not ring.is_unit(a):
                continue
            if j not in found or self._is_better(i, found[j]):
                found[j] = i

        for j, i in found.items():
            self._set_pivot(i, j)

    def _is_better(self, i1: int, i2: int) -> bool:
        store = self.store
        weight = store.ring.elimination_weight
        w1 = weight(store.head(i1)[1])
        w2 = weight(store.head(i2)[1])
        return w1 < w2 or (w1 == w2 and store.row_weight(i1) < store.row_weight(i2))

    def _find_fl_column_pivots(self) -> None:
        store = self.store
        is_unit = store.ring.is_unit
        reserved = {j for i in self._pivot_rows for j, _ in store.row(i)}

        for i in range(store.nrows):
            is_pivot_row = i in self._pivot_rows
            for j, a in store.row(i):
                if j in reserved:
                    continue
                reserved.add(j)
                if not is_pivot_row and is_unit(a):
                    self._set_pivot(i, j)
                    is_pivot_row = True

    def _find_cycle_free_pivots(self) -> int:
        store = self.store
        rows = [i for i in range(store.nrows)
                if i not in self._pivot_rows and store.row(i)]
        if not rows:
            return 0

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            return sum(executor.map(self._claim_pivot, rows))

    def _claim_pivot(self, i: int) -> int:
        """Search row ``i`` until a pivot is committed or none is left; return the retry count."""
        retries = 0
        while True:
            with self._lock:
                snapshot = dict(self._pivots)

            pivot = self._find_cycle_free_pivot(i, snapshot)
            if pivot is None:
                return retries

            with self._lock:
                if len(self._pivots) == len(snapshot):
                    self._set_pivot(*pivot)
                    return retries
            retries += 1

    def _find_cycle_free_pivot(self, i: int, pivots: Dict[int, int]) -> Optional[Pivot]:
        store = self.store
        is_unit = store.ring.is_unit

        queue = deque()
        candidates: Set[int] = set()
        visited: Set[int] = set()

        for j, a in store.row(i):
            if j in pivots:
                queue.append(j)
            elif is_unit(a):
                candidates.add(j)

        # Any candidate reachable through pivot rows would close a cycle.
        while queue and candidates:
            j = queue.popleft()
            for l, _ in store.row(pivots[j]):
                if l in pivots:
                    if l not in visited:
                        visited.add(l)
                        queue.append(l)
                else:
                    candidates.discard(l)

        # First acyclic candidate, not the lightest one.
        if candidates:
            return i, min(candidates)
        return None

    def _sort_pivots(self) -> List[Pivot]:
        store = self.store
        pivots = self._pivots

        sorter = TopologicalSorter()
        for j in sorted(pivots):
            sorter.add(j)
            for k, _ in store.row(pivots[j]):
                if k != j and k in pivots:
                    sorter.add(k, j)

        return [(pivots[j], j) for j in sorter.static_order()]


def find_pivots(target: Union[RingMatrix, SparseRowStore],
                max_workers: Optional[int] = None) -> PivotResult:
    """
    Find a maximal acyclic set of invertible pivots.

    Works over any ring; only unit tests on entries are needed. With
    ``max_workers=1`` the result is deterministic.
    """
    if isinstance(target, RingMatrix):
        store = SparseRowStore.from_matrix(target, track=True)
    else:
        store = target

    pivots = PivotFinder(store, max_workers=max_workers).run()
    return PivotResult.from_pivots(pivots, store.shape)
