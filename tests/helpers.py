import random

import numpy as np
from sympy import GF
from sympy.polys.matrices import DomainMatrix

from euclidsnf.matrix import RingMatrix
from euclidsnf.ring import PrimeField
from euclidsnf.worker import EliminationWorker, Tracker


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

    det = ring.zero
    for j in range(n):
        sub_rows = np.concatenate((data[1:, :j], data[1:, j+1:]), axis=1)
        subM = RingMatrix(ring, sub_rows)
        sub_det = det_ring_matrix(subM)
        term = ring.mul(data[0, j], sub_det)
        if j % 2 == 0:
            det = ring.add(det, term)
        else:
            det = ring.sub(det, term)
    return det

def pivot_columns(T: RingMatrix) -> list:
    """First non-zero column of every row, -1 for zero rows."""
    ring = T.ring
    cols = []
    for r in range(T.nrows):
        pivot_col = -1
        for c in range(T.ncols):
            if not ring.is_zero(T[r, c]):
                pivot_col = c
                break
        cols.append(pivot_col)
    return cols

def verify_echelon_structure(T: RingMatrix) -> bool:
    """
    Check:
    - For each non-zero row, the first non-zero column index strictly increases.
    - Once a zero row appears, all later rows are zero.
    - Every pivot is normalized.
    """
    ring = T.ring
    last_pivot_col = -1
    zero_row_seen = False

    for r, pivot_col in enumerate(pivot_columns(T)):
        if pivot_col == -1:
            zero_row_seen = True
            continue
        # non-zero row; we must not have seen a zero row before
        if zero_row_seen:
            return False
        if pivot_col <= last_pivot_col:
            return False
        if not ring.is_normalized(T[r, pivot_col]):
            return False
        last_pivot_col = pivot_col

    return True

def verify_hermite_structure(T: RingMatrix) -> bool:
    """
    Echelon structure plus every entry above a pivot already reduced
    modulo that pivot.
    """
    if not verify_echelon_structure(T):
        return False
    ring = T.ring
    for r, c in enumerate(pivot_columns(T)):
        if c == -1:
            break
        p = T[r, c]
        for i in range(r):
            x = T[i, c]
            if not ring.eq(ring.rem(x, p), x):
                return False
    return True

def verify_smith_form_properties(S: RingMatrix):
    """
    Returns (ok, message). Checks:
    - S is diagonal with the non-zero entries packed first,
    - every diagonal entry is normalized,
    - d_i | d_{i+1}.
    """
    ring = S.ring
    if not S.is_diagonal():
        return False, "S is not diagonal"

    diag = S.diagonal_entries()
    nonzero = [d for d in diag if not ring.is_zero(d)]
    if diag[:len(nonzero)] != nonzero:
        return False, f"zero entries before non-zero ones: {diag}"

    for d in nonzero:
        if not ring.is_normalized(d):
            return False, f"{ring.format(d)} is not normalized"

    for a, b in zip(nonzero, nonzero[1:]):
        if not ring.divides(a, b):
            return False, f"{ring.format(a)} does not divide {ring.format(b)}"

    return True, "ok"

def assert_tracker_consistent(worker: EliminationWorker) -> None:
    """Compare the incrementally maintained tracker with a fresh one."""
    assert worker.tracker is not None
    fresh = Tracker(worker.ring, worker.ncols, worker.rows)
    assert worker.tracker.row_weights == fresh.row_weights
    assert worker.tracker.col_heads == fresh.col_heads

def sympy_rank(M: RingMatrix) -> int:
    """Rank computed by sympy, over GF(p) for prime field matrices."""
    ring = M.ring
    if isinstance(ring, PrimeField):
        dM = DomainMatrix.from_Matrix(M.to_sympy()).convert_to(GF(ring.p))
        return dM.rank()
    return M.to_sympy().rank()

def get_normalized_invariants(M: RingMatrix) -> list:
    """
    Non-zero diagonal entries of an integer matrix up to sign, sorted.
    """
    n = min(M.nrows, M.ncols)
    invariants = [abs(int(M[i, i])) for i in range(n) if M[i, i] != 0]
    invariants.sort()
    return invariants

def make_random_matrix(
    ring,
    nrows: int,
    ncols: int,
    bound: int = 9,
    density: float = 1.0,
) -> RingMatrix:
    """Random matrix with integer entries in ``[-bound, bound]``.

    Entries are zero with probability ``1 - density``.
    """
    data = [
        [
            random.randint(-bound, bound) if random.random() < density else 0
            for _ in range(ncols)
        ]
        for _ in range(nrows)
    ]
    return RingMatrix.from_rows(ring, data)
