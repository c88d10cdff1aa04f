import random

import numpy as np

from ringelim.matrix import RingMatrix
from ringelim.ring import Ring


def make_random_matrix(
    ring: Ring,
    nrows: int,
    ncols: int,
    bound: int = 9,
    density: float = 1.0,
) -> RingMatrix:
    """Generate a random matrix over the given ring.

    Entries are integers in ``[-bound, bound]`` coerced into the ring;
    each position is filled with probability ``density``.
    """
    data = [
        [
            random.randint(-bound, bound) if random.random() < density else 0
            for _ in range(ncols)
        ]
        for _ in range(nrows)
    ]
    return RingMatrix.from_rows(ring, data, ncols=ncols)


def det_ring_matrix(M: RingMatrix):
    """
    Naive cofactor determinant for small square matrices over any ring.
    """
    ring = M.ring
    data = M.data
    n = M.nrows
    assert n == M.ncols

    if n == 0:
        return ring.one
    if n == 1:
        return data[0, 0]
    if n == 2:
        a, b = data[0]
        c, d = data[1]
        return ring.sub(ring.mul(a, d), ring.mul(b, c))

    det = ring.zero
    for j in range(n):
        sub_rows = np.concatenate((data[1:, :j], data[1:, j+1:]), axis=1)
        subM = RingMatrix(ring, sub_rows)
        term = ring.mul(data[0, j], det_ring_matrix(subM))
        if j % 2 == 0:
            det = ring.add(det, term)
        else:
            det = ring.sub(det, term)
    return det


def verify_echelon_structure(T: RingMatrix) -> bool:
    """
    Check:
    - For each non-zero row, the first non-zero column index strictly increases.
    - Once a zero row appears, all later rows are zero.
    """
    ring = T.ring
    nrows, ncols = T.nrows, T.ncols
    last_pivot_col = -1
    zero_row_seen = False

    for r in range(nrows):
        row = T.data[r]
        pivot_col = -1
        for c in range(ncols):
            if not ring.is_zero(row[c]):
                pivot_col = c
                break

        if pivot_col == -1:
            zero_row_seen = True
        else:
            if zero_row_seen:
                return False
            if pivot_col <= last_pivot_col:
                return False
            last_pivot_col = pivot_col

    return True


def pivot_positions(T: RingMatrix) -> list[tuple[int, int]]:
    """Leading entry position of every nonzero row."""
    ring = T.ring
    positions = []
    for r in range(T.nrows):
        for c in range(T.ncols):
            if not ring.is_zero(T.data[r, c]):
                positions.append((r, c))
                break
    return positions


def verify_smith_form_properties(S: RingMatrix) -> tuple[bool, str]:
    """
    Diagonal, normalized, nonzero entries first, each dividing the next.
    """
    ring = S.ring
    if not S.is_diagonal():
        return False, "not diagonal"

    diag = S.diagonal_entries()
    seen_zero = False
    for i, d in enumerate(diag):
        if ring.is_zero(d):
            seen_zero = True
            continue
        if seen_zero:
            return False, f"nonzero entry {d} after a zero at {i}"
        if not ring.is_normalized(d):
            return False, f"entry {d} at {i} is not normalized"
        if i + 1 < len(diag) and not ring.divides(d, diag[i + 1]):
            return False, f"{d} does not divide {diag[i + 1]}"
    return True, ""


def assert_equivalence(A: RingMatrix, E) -> None:
    """``left @ A @ right == result`` and the inverse transforms undo it."""
    assert np.array_equal((E.left @ A @ E.right).data, E.result.data), "P * A * Q != B"
    assert (E.left_inverse @ E.result @ E.right_inverse) == A, "P^-1 * B * Q^-1 != A"
