import numpy as np
import pytest
import sympy

from ringelim.eliminator import MatrixEliminator, NormalForm, eliminate
from ringelim.matrix import RingMatrix
from ringelim.result import EliminationResult
from ringelim.ring import INTEGERS, RATIONALS, PolynomialRing, RingZModN
from ringelim.rowstore import SparseRowStore
from ringelim.snf import SmithStrategy, invariant_factors, smith_normal_form
from tests.helpers import (
    assert_equivalence,
    det_ring_matrix,
    make_random_matrix,
    verify_smith_form_properties,
)


def test_smith_normal_form_small():
    A = RingMatrix.from_rows(INTEGERS, [[2, 4, 4], [-6, 6, 12], [10, -4, -16]])

    U, V, S = smith_normal_form(A)

    assert np.array_equal(S.data, RingMatrix.diagonal(INTEGERS, [2, 6, 12]).data)
    assert np.array_equal((U @ A @ V).data, S.data)
    assert det_ring_matrix(U) in (1, -1)
    assert det_ring_matrix(V) in (1, -1)


@pytest.mark.parametrize("shape", [(4, 4), (3, 5), (5, 3)])
@pytest.mark.parametrize("seeded_rng", [42, 137, 2025], indirect=True)
def test_smith_properties_random(shape, seeded_rng):
    A = make_random_matrix(INTEGERS, *shape, bound=12)

    E = eliminate(A, NormalForm.SMITH)

    ok, msg = verify_smith_form_properties(E.result)
    assert ok, msg
    assert_equivalence(A, E)
    if shape[0] == shape[1]:
        assert det_ring_matrix(E.left) in (1, -1)
        assert det_ring_matrix(E.right) in (1, -1)


def test_invariant_factors():
    A = RingMatrix.from_rows(INTEGERS, [[2, 4, 4], [-6, 6, 12], [10, -4, -16]])
    assert invariant_factors(A) == [2, 6, 12]

    B = RingMatrix.from_rows(INTEGERS, [[2, 4], [2, 4]])
    assert invariant_factors(B) == [2]


class TestDiagonalGcd:
    def _run(self, diag):
        A = RingMatrix.diagonal(INTEGERS, diag)
        e = MatrixEliminator(SparseRowStore.from_matrix(A, track=True))
        SmithStrategy.diagonal_gcd(e, 0, 1)
        E = EliminationResult(NormalForm.SMITH, e.store, tuple(e.row_ops), tuple(e.col_ops))
        return A, E

    def test_gcd_and_lcm_land_on_the_diagonal(self):
        A, E = self._run([4, 6])
        assert np.array_equal(E.result.data, np.array([[2, 0], [0, -12]], dtype=object))
        assert_equivalence(A, E)

    def test_coprime_pair(self):
        A, E = self._run([3, 5])
        assert E.result.is_diagonal()
        assert E.result[0, 0] == 1
        assert abs(E.result[1, 1]) == 15
        assert_equivalence(A, E)


def test_smith_fixes_non_dividing_diagonal():
    A = RingMatrix.diagonal(INTEGERS, [6, 4, 10])
    E = eliminate(A, NormalForm.SMITH)
    assert E.diagonal == [2, 2, 60]
    assert_equivalence(A, E)


def test_normalized_smith_form_needs_no_operations():
    A = RingMatrix.diagonal(INTEGERS, [1, 2, 6])
    for form in (NormalForm.SMITH, NormalForm.DIAGONAL):
        E = eliminate(A, form)
        assert E.row_ops == () and E.col_ops == ()


def test_single_entry_normalization():
    assert eliminate(RingMatrix.from_rows(INTEGERS, [[-2]]), NormalForm.SMITH).result == \
        RingMatrix.from_rows(INTEGERS, [[2]])
    assert eliminate(RingMatrix.from_rows(RATIONALS, [[-3]]), NormalForm.SMITH).result == \
        RingMatrix.from_rows(RATIONALS, [[1]])


def test_prime_field_smith_is_rank_ones():
    ring = RingZModN(5)
    A = RingMatrix.from_rows(ring, [[1, 2, 3], [2, 4, 1], [3, 1, 1]])
    E = eliminate(A, NormalForm.SMITH)
    assert E.diagonal == [1, 1, 0]
    assert_equivalence(A, E)


def test_polynomial_characteristic_matrix():
    x = sympy.Symbol("x")
    ring = PolynomialRing(x)
    A = [[0, 2, 1], [-4, 6, 2], [4, -4, 0]]
    xIA = RingMatrix.from_rows(ring, [
        [(x if i == j else 0) - A[i][j] for j in range(3)] for i in range(3)
    ])

    E = eliminate(xIA, NormalForm.SMITH)

    diag = [d.as_expr() for d in E.diagonal]
    assert diag == [1, x - 2, sympy.expand((x - 2) ** 2)]
    assert E.result.is_diagonal()
    assert_equivalence(xIA, E)
