"""Smith normal form from a diagonal form.

After ``Diagonal`` the worker holds ``diag(a_1, ..., a_k)`` with non-zero
entries first. The loop picks the remaining entry of least degree as pivot.
Whenever some other entry ``b`` is not divisible by the pivot ``a``, the pair
is replaced by ``(gcd, lcm)`` through five elementary operations::

    [a, 0]  AddRow   [a,  0]  AddCol   [a, 0]  AddRow   [0, m]  AddCol   [0, m]  SwapRows  [d, 0]
    [0, b]  ------>  [sa, b]  ------>  [d, b]  ------>  [d, b]  ------>  [d, 0]  -------->  [0, m]

with ``d = s*a + t*b`` and ``m = -a*b/d``. Once the pivot divides every
remaining entry it is normalized and moved to the current index.

The diagonal is kept in a list while iterating; operations are only logged
and the list is written back into the worker in ``finalize``.
"""

from euclidsnf.diagonal import Diagonal
from euclidsnf.operations import AddCol, AddRow, MulRow, SwapCols, SwapRows


class Smith:
    def __init__(self):
        self.current_index = 0
        self.diagonal = []

    def prepare(self, e) -> None:
        e.subrun(Diagonal())
        for k, (i, j, a) in enumerate(e.worker.components()):
            assert i == j == k, f"unexpected entry at ({i}, {j}) after diagonalization"
            self.diagonal.append(a)

    def is_done(self, e) -> bool:
        return self.current_index >= len(self.diagonal)

    def iteration(self, e) -> None:
        ring = e.ring
        i0, a0 = self._find_pivot(e)

        if not ring.is_unit(a0):
            for i in range(self.current_index, len(self.diagonal)):
                if i == i0:
                    continue
                a = self.diagonal[i]
                if not ring.divides(a0, a):
                    self._diagonal_gcd(e, (i0, a0), (i, a))
                    return

        if not ring.is_normalized(a0):
            u = ring.normalizing_unit(a0)
            self.diagonal[i0] = ring.mul(u, a0)
            e.append(MulRow(i0, u))

        if i0 != self.current_index:
            self._swap_diagonal(e, i0, self.current_index)

        self.current_index += 1

    def finalize(self, e) -> None:
        ring = e.ring
        e.worker.assign(
            (i, i, a) for i, a in enumerate(self.diagonal) if not ring.is_zero(a)
        )

    def _find_pivot(self, e):
        degree = e.ring.degree
        return min(
            enumerate(self.diagonal[self.current_index:], start=self.current_index),
            key=lambda c: degree(c[1]),
        )

    def _diagonal_gcd(self, e, d1, d2) -> None:
        ring = e.ring
        i, a = d1
        j, b = d2

        # d = gcd(a, b) = s*a + t*b,  u = -b/d,  v = a/d,  m = u*a = lcm(a, b)
        d, s, t, u, v = ring.gcdex(a, b)
        m = ring.mul(u, a)

        self.diagonal[i] = d
        self.diagonal[j] = m

        e.trace("DiagonalGCD: (%d, %d), (%d, %d)", i, i, j, j)

        e.append(AddRow(i, j, s))            # [a, 0; sa, b]
        e.append(AddCol(j, i, t))            # [a, 0;  d, b]
        e.append(AddRow(j, i, ring.neg(v)))  # [0, m;  d, b]
        e.append(AddCol(i, j, u))            # [0, m;  d, 0]
        e.append(SwapRows(i, j))             # [d, 0;  0, m]

    def _swap_diagonal(self, e, i: int, j: int) -> None:
        self.diagonal[i], self.diagonal[j] = self.diagonal[j], self.diagonal[i]

        e.trace("SwapDiagonal: (%d, %d), (%d, %d)", i, i, j, j)

        e.append(SwapRows(i, j))
        e.append(SwapCols(i, j))
