import logging
from concurrent.futures import ThreadPoolExecutor

import pytest

from euclidsnf.elimination import eliminate
from euclidsnf.eliminator import Form
from euclidsnf.matrix import RingMatrix
from euclidsnf.ring import QQ, ZZ, PrimeField
from tests.helpers import det_ring_matrix, make_random_matrix

REGULAR = [
    [2, -1, -2, -2, -3],
    [1, 2, -1, 1, -1],
    [2, -2, -4, -3, -6],
    [1, 7, 1, 5, 3],
    [1, -12, -6, -10, -11],
]

DET66 = [
    [3, -1, 2, 4],
    [2, 1, 1, 3],
    [-2, 0, 3, -1],
    [0, -2, 1, 3],
]

KERNEL_GRID = [
    [-1, -1, 0, 0, 0, 0, 0, -1, -1, 0, -1, 0, 0, 0, 0],
    [1, 0, -1, -1, 0, -1, 0, 0, 0, 0, 0, -1, 0, 0, 0],
    [0, 1, 1, 0, -1, 0, 0, 0, 0, 0, 0, 0, 0, 1, -1],
    [0, 0, 0, 1, 1, 0, 1, 1, 0, -1, 0, 0, 0, 0, 0],
    [0, 0, 0, 0, 0, 1, -1, 0, 1, 0, 0, 0, -1, -1, 0],
    [0, 0, 0, 0, 0, 0, 0, 0, 0, 1, 1, 1, 1, 0, 1],
]

ALL_FORMS = [pytest.param(f, id=f.value) for f in Form]


@pytest.fixture
def regular():
    return RingMatrix.from_rows(ZZ, REGULAR)


class TestTransformations:

    @pytest.mark.parametrize("form", ALL_FORMS)
    def test_left_times_a_times_right(self, form, seeded_rng):
        A = make_random_matrix(ZZ, 5, 4, density=0.7)
        E = eliminate(A, form)
        assert E.left @ A @ E.right == E.result
        assert E.left_inverse @ E.result @ E.right_inverse == A

    def test_left_and_left_inverse(self, regular):
        E = eliminate(regular, Form.SMITH)
        I = RingMatrix.identity(ZZ, 5)
        assert E.left @ E.left_inverse == I
        assert E.left_inverse @ E.left == I

    def test_right_and_right_inverse(self, regular):
        E = eliminate(regular, Form.SMITH)
        I = RingMatrix.identity(ZZ, 5)
        assert E.right @ E.right_inverse == I
        assert E.right_inverse @ E.right == I

    def test_input_is_not_modified(self, regular):
        before = regular.copy()
        eliminate(regular, Form.SMITH)
        assert regular == before

    def test_executor_gives_same_result(self, seeded_rng):
        A = make_random_matrix(ZZ, 12, 9)
        expected = eliminate(A, Form.SMITH)
        with ThreadPoolExecutor(max_workers=4) as pool:
            E = eliminate(A, Form.SMITH, executor=pool)
        assert E.result == expected.result
        assert E.row_ops == expected.row_ops
        assert E.col_ops == expected.col_ops

    def test_debug_flag_traces(self, caplog):
        A = RingMatrix.from_rows(ZZ, [[2, 3], [4, 5]])
        with caplog.at_level(logging.DEBUG, logger="euclidsnf.eliminator"):
            eliminate(A, Form.SMITH, debug=True)
        messages = [r.getMessage() for r in caplog.records]
        assert messages[0] == "Start: Smith"
        assert any(m == "Start: RowEchelon(transposed)" for m in messages)


class TestKernelAndImage:

    def test_kernel(self):
        A = RingMatrix.from_rows(ZZ, [[1, 2], [1, 2]])
        E = eliminate(A)
        K = E.kernel

        assert K.shape == (2, 1)
        assert (A @ K).is_zero()

        T = E.kernel_transition
        assert T @ K == RingMatrix.identity(ZZ, 1)

    def test_kernel_of_wide_matrix(self):
        A = RingMatrix.from_rows(ZZ, KERNEL_GRID)
        E = eliminate(A)
        K = E.kernel

        assert K.shape == (15, 10)
        assert A @ K == RingMatrix.zeros(ZZ, 6, 10)
        assert E.kernel_transition @ K == RingMatrix.identity(ZZ, 10)
        assert E.nullity == 10

    def test_kernel_matches_right_columns(self, seeded_rng):
        A = make_random_matrix(ZZ, 3, 6)
        E = eliminate(A, Form.SMITH)
        r = E.rank
        assert E.kernel == E.right.submatrix(0, 6, r, 6)
        assert E.kernel_transition == E.right_inverse.submatrix(r, 6, 0, 6)

    def test_image(self):
        A = RingMatrix.from_rows(ZZ, [[2, 4], [2, 4]])
        E = eliminate(A)
        I = E.image

        assert I.shape == (2, 1)
        assert list(I.data[:, 0]) == [2, 2]

    def test_image_transition(self, seeded_rng):
        A = make_random_matrix(ZZ, 6, 3)
        E = eliminate(A, Form.SMITH)
        r = E.rank
        assert E.image_transition == E.left.submatrix(0, r, 0, 6)
        assert E.image_transition @ E.image == RingMatrix.diagonal(ZZ, E.diagonal)

    def test_image_matches_column_blocks(self, seeded_rng):
        A = make_random_matrix(ZZ, 5, 5, density=0.5)
        E = eliminate(A, Form.SMITH)
        r = E.rank
        # A·R = L^-1·N, so the first r columns of A·R span the image.
        assert E.image == (A @ E.right).submatrix(0, 5, 0, r)

    def test_cokernel_of_coprime_diagonal(self):
        A = RingMatrix.diagonal(ZZ, [2, 3])
        E = eliminate(A, Form.SMITH)
        C = E.cokernel
        T = E.cokernel_transition

        assert C.shape == (2, 1)
        assert T.shape == (1, 2)
        assert T @ C == RingMatrix.identity(ZZ, 1)
        # Relations of the cokernel are multiples of 6.
        assert all(x % 6 == 0 for x in (T @ A).data.flat)

    def test_cokernel_includes_free_part(self):
        A = RingMatrix.from_rows(ZZ, [[1, 0], [0, 0], [0, 0]])
        E = eliminate(A, Form.SMITH)
        assert E.cokernel.shape == (3, 2)
        assert (E.cokernel_transition @ A).is_zero()


class TestPredicates:

    def test_regular_is_bijective(self, regular):
        E = eliminate(regular, Form.SMITH)
        assert E.is_injective and E.is_surjective and E.is_bijective

    def test_rank_deficient(self):
        E = eliminate(RingMatrix.from_rows(ZZ, [[1, 2], [1, 2]]))
        assert not E.is_injective
        assert not E.is_surjective

    def test_projection_is_surjective(self):
        E = eliminate(RingMatrix.from_rows(ZZ, [[1, 0, 0], [0, 1, 0]]))
        assert E.is_surjective
        assert not E.is_injective

    def test_multiplication_by_two(self):
        E = eliminate(RingMatrix.from_rows(ZZ, [[2]]))
        assert E.is_injective
        assert not E.is_surjective
        assert not E.is_bijective

    def test_invariant_factors_require_smith(self, regular):
        E = eliminate(regular, Form.DIAGONAL)
        with pytest.raises(ValueError):
            E.invariant_factors


class TestSquare:

    @pytest.mark.parametrize("form", ALL_FORMS)
    def test_determinant(self, form):
        A = RingMatrix.from_rows(ZZ, DET66)
        assert eliminate(A, form).determinant == 66

    def test_determinant_matches_cofactor_expansion(self, seeded_rng):
        for ring in (ZZ, QQ, PrimeField(11)):
            A = make_random_matrix(ring, 4, 4)
            assert eliminate(A, Form.SMITH).determinant == det_ring_matrix(A)

    def test_determinant_of_singular_matrix(self):
        A = RingMatrix.from_rows(ZZ, [[1, 2], [2, 4]])
        assert eliminate(A).determinant == 0

    def test_determinant_requires_square(self):
        with pytest.raises(ValueError):
            eliminate(RingMatrix.zeros(ZZ, 2, 3)).determinant

    def test_inverse(self, regular):
        E = eliminate(regular, Form.SMITH)
        Ainv = E.inverse
        assert Ainv is not None
        assert regular @ Ainv == RingMatrix.identity(ZZ, 5)
        assert Ainv @ regular == RingMatrix.identity(ZZ, 5)

    def test_inverse_over_rationals(self):
        A = RingMatrix.from_rows(QQ, DET66)
        Ainv = eliminate(A, Form.ROW_HERMITE).inverse
        assert A @ Ainv == RingMatrix.identity(QQ, 4)

    def test_not_invertible_over_integers(self):
        A = RingMatrix.from_rows(ZZ, DET66)
        assert eliminate(A).inverse is None


class TestSolve:

    def test_linear_equation(self):
        A = RingMatrix.from_rows(ZZ, DET66)
        b = RingMatrix.from_rows(ZZ, [[19], [10], [-2], [14]])
        x = eliminate(A).solve(b)
        assert x == RingMatrix.from_rows(ZZ, [[1], [-2], [1], [3]])

    def test_several_right_hand_sides(self, regular):
        X = RingMatrix.from_rows(ZZ, [[1, 0], [2, 1], [0, 0], [-1, 4], [3, 3]])
        B = regular @ X
        assert eliminate(regular, Form.SMITH).solve(B) == X

    def test_no_integer_solution(self):
        E = eliminate(RingMatrix.from_rows(ZZ, [[2]]))
        assert E.solve(RingMatrix.from_rows(ZZ, [[1]])) is None

    def test_inconsistent_system(self):
        E = eliminate(RingMatrix.from_rows(ZZ, [[1], [1]]))
        assert E.solve(RingMatrix.from_rows(ZZ, [[1], [2]])) is None

    def test_underdetermined_system(self, seeded_rng):
        A = make_random_matrix(ZZ, 2, 4)
        x0 = RingMatrix.from_rows(ZZ, [[1], [0], [-2], [5]])
        b = A @ x0
        x = eliminate(A, Form.SMITH).solve(b)
        assert x is not None
        assert A @ x == b

    def test_rhs_shape_checked(self):
        E = eliminate(RingMatrix.identity(ZZ, 2))
        with pytest.raises(ValueError):
            E.solve(RingMatrix.zeros(ZZ, 3, 1))
