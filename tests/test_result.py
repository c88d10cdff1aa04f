import random
from fractions import Fraction

import numpy as np
import pytest

from ringelim.eliminator import NormalForm, eliminate
from ringelim.exceptions import DimensionError, FormError
from ringelim.matrix import RingMatrix
from ringelim.ring import INTEGERS, RATIONALS, RingZModN
from tests.helpers import det_ring_matrix, make_random_matrix

DET_MATRIX = [[3, -1, 2, 4], [2, 1, 1, 3], [-2, 0, 3, -1], [0, -2, 1, 3]]


def _low_rank(ring, n, m, r):
    return make_random_matrix(ring, n, r, bound=4) @ make_random_matrix(ring, r, m, bound=4)


class TestTransforms:
    CASES = [
        pytest.param(INTEGERS, 5, 5, 3, id="ZZ-5x5-r3"),
        pytest.param(INTEGERS, 4, 7, 2, id="ZZ-4x7-r2"),
        pytest.param(RATIONALS, 6, 4, 2, id="QQ-6x4-r2"),
        pytest.param(RingZModN(13), 5, 6, 4, id="F13-5x6-r4"),
    ]

    @pytest.mark.parametrize("ring, n, m, r", CASES)
    @pytest.mark.parametrize("seed", [3, 14, 159])
    def test_left_and_right_are_inverse_pairs(self, ring, n, m, r, seed):
        random.seed(seed)
        A = _low_rank(ring, n, m, r)
        E = eliminate(A, NormalForm.SMITH)

        assert (E.left @ E.left_inverse).is_identity()
        assert (E.left_inverse @ E.left).is_identity()
        assert (E.right @ E.right_inverse).is_identity()
        assert (E.right_inverse @ E.right).is_identity()

    @pytest.mark.parametrize("ring, n, m, r", CASES)
    @pytest.mark.parametrize("seed", [3, 14, 159])
    def test_kernel_and_image(self, ring, n, m, r, seed):
        random.seed(seed)
        A = _low_rank(ring, n, m, r)
        E = eliminate(A, NormalForm.DIAGONAL)
        k = E.nullity

        assert E.rank <= min(n, m, r)
        assert E.rank + k == m

        Z = E.kernel_basis
        assert Z.shape == (m, k)
        assert (A @ Z).is_zero()
        assert (E.kernel_transition @ Z).is_identity()

        Y = E.image_basis
        assert Y.shape == (n, E.rank)
        assert Y == A @ E.right.submatrix(0, m, 0, E.rank)
        D_r = RingMatrix.diagonal(ring, E.diagonal[:E.rank])
        assert E.image_transition @ Y == D_r


class TestSolve:
    def test_unique_solution(self):
        A = RingMatrix.from_rows(INTEGERS, DET_MATRIX)
        x = eliminate(A).solve([19, 10, -2, 14])

        assert np.array_equal(x.data, np.array([[1], [-2], [1], [3]], dtype=object))

    @pytest.mark.parametrize("seed", [5, 6, 7])
    def test_solution_of_consistent_system(self, seed):
        random.seed(seed)
        A = _low_rank(INTEGERS, 5, 6, 3)
        x0 = make_random_matrix(INTEGERS, 6, 1)
        b = A @ x0

        x = eliminate(A).solve(b)

        assert x is not None
        assert A @ x == b

    def test_no_solution_over_integers(self):
        A = RingMatrix.from_rows(INTEGERS, [[2, 0], [0, 3]])
        E = eliminate(A)
        assert E.solve([1, 3]) is None
        assert E.solve([4, 3]) == RingMatrix.column_vector(INTEGERS, [2, 1])

    def test_no_solution_outside_image(self):
        A = RingMatrix.from_rows(INTEGERS, [[1, 2], [1, 2]])
        assert eliminate(A).solve([1, 2]) is None
        assert eliminate(A).solve([3, 3]) is not None

    def test_rhs_shape_checked(self):
        E = eliminate(RingMatrix.from_rows(INTEGERS, [[1, 2], [3, 4]]))
        with pytest.raises(DimensionError):
            E.solve([1, 2, 3])


class TestDeterminantAndInverse:
    def test_determinant(self):
        assert eliminate(RingMatrix.from_rows(INTEGERS, DET_MATRIX)).determinant == 66
        A = RingMatrix.from_rows(INTEGERS, [[2, 4, 4], [-6, 6, 12], [10, -4, -16]])
        assert eliminate(A, NormalForm.SMITH).determinant == -144

    @pytest.mark.parametrize("seed", [10, 11, 12, 13])
    def test_determinant_matches_cofactors(self, seed):
        random.seed(seed)
        A = make_random_matrix(INTEGERS, 4, 4, bound=5)
        assert eliminate(A).determinant == det_ring_matrix(A)

    def test_singular_determinant_is_zero(self):
        A = RingMatrix.from_rows(INTEGERS, [[1, 2], [2, 4]])
        assert eliminate(A).determinant == 0

    def test_determinant_needs_square(self):
        with pytest.raises(DimensionError):
            eliminate(RingMatrix.zeros(INTEGERS, 2, 3)).determinant

    def test_unimodular_inverse(self):
        A = RingMatrix.from_rows(INTEGERS, [[2, 1], [1, 1]])
        inv = eliminate(A).inverse
        assert inv == RingMatrix.from_rows(INTEGERS, [[1, -1], [-1, 2]])

    def test_inverse_over_rationals_but_not_integers(self):
        assert eliminate(RingMatrix.from_rows(INTEGERS, DET_MATRIX)).inverse is None

        A = RingMatrix.from_rows(RATIONALS, DET_MATRIX)
        inv = eliminate(A).inverse
        assert (A @ inv).is_identity()
        assert inv[0, 0] == Fraction(det_ring_matrix(A.submatrix(1, 4, 1, 4)), 66)


class TestProperties:
    def test_injective_and_surjective(self):
        wide = eliminate(RingMatrix.from_rows(INTEGERS, [[1, 0, 0], [0, 1, 0]]))
        assert wide.is_surjective and not wide.is_injective

        scaled = eliminate(RingMatrix.from_rows(INTEGERS, [[2]]))
        assert scaled.is_injective and not scaled.is_surjective
        assert not scaled.is_bijective

        assert eliminate(RingMatrix.from_rows(RATIONALS, [[2]])).is_bijective

    def test_results_are_cached(self):
        E = eliminate(RingMatrix.from_rows(INTEGERS, [[1, 2], [3, 4]]))
        assert E.left is E.left
        assert E.kernel_basis is E.kernel_basis

    def test_diagonal_queries_need_a_diagonal_form(self):
        E = eliminate(RingMatrix.from_rows(INTEGERS, [[1, 2], [3, 4]]), NormalForm.ROW_HERMITE)
        for name in ("kernel_basis", "image_basis", "determinant", "diagonal", "inverse"):
            with pytest.raises(FormError):
                getattr(E, name)
        with pytest.raises(FormError):
            E.solve([1, 1])

    def test_identity_has_empty_logs(self):
        for form in NormalForm:
            E = eliminate(RingMatrix.identity(INTEGERS, 3), form)
            assert E.row_ops == () and E.col_ops == ()
            assert E.left.is_identity() and E.right.is_identity()

    def test_kernel_of_rank_one(self):
        E = eliminate(RingMatrix.from_rows(INTEGERS, [[1, 2], [1, 2]]))
        assert E.kernel_basis.shape == (2, 1)
        assert E.image_basis == RingMatrix.column_vector(INTEGERS, [1, 1])

    def test_image_of_non_unit_rank_one(self):
        E = eliminate(RingMatrix.from_rows(INTEGERS, [[2, 4], [2, 4]]))
        assert E.image_basis == RingMatrix.column_vector(INTEGERS, [2, 2])
