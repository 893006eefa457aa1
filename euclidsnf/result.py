"""Results of an elimination run.

The run leaves a normal form ``N`` and two operation logs. With ``L`` the
product of the row operations and ``R`` the product of the column
operations, ``N = L·A·R``. Transformation matrices are never tracked during
the run; they are rebuilt here on demand by replaying the logs on sparse
identity workers, and only the blocks that are asked for are rebuilt.
"""

from dataclasses import dataclass
from functools import cached_property
from typing import List, Optional, Tuple

from euclidsnf.eliminator import Form
from euclidsnf.matrix import RingMatrix
from euclidsnf.operations import AddCol, AddRow, ColOperation, RowOperation
from euclidsnf.worker import EliminationWorker

_ROW_FORMS = (Form.ROW_ECHELON, Form.ROW_HERMITE)
_COL_FORMS = (Form.COL_ECHELON, Form.COL_HERMITE)
_DIAGONAL_FORMS = (Form.DIAGONAL, Form.SMITH)


def _unit_columns(ring, size, pairs) -> EliminationWorker:
    """Worker of ``size`` with ``ring.one`` at each ``(row, col)`` in ``pairs``."""
    return EliminationWorker(ring, size, ((i, j, ring.one) for i, j in pairs))


def _left_action(op: ColOperation) -> RowOperation:
    # Row operation equal to left multiplication by the elementary matrix of
    # the column operation ``op``.
    if isinstance(op, AddCol):
        return AddRow(op.target, op.source, op.multiplier)
    return op.transposed()


def _right_action_transposed(op: RowOperation) -> RowOperation:
    # Row operation on ``X^T`` equal to ``X·E`` for the elementary matrix
    # ``E`` of the row operation ``op``.
    if isinstance(op, AddRow):
        return AddRow(op.target, op.source, op.multiplier)
    return op


@dataclass(frozen=True)
class EliminationResult:
    form: Form
    result: RingMatrix
    row_ops: Tuple[RowOperation, ...]
    col_ops: Tuple[ColOperation, ...]

    @property
    def ring(self):
        return self.result.ring

    @property
    def nrows(self) -> int:
        return self.result.nrows

    @property
    def ncols(self) -> int:
        return self.result.ncols

    def _require_diagonal(self, what: str) -> None:
        if self.form not in _DIAGONAL_FORMS:
            raise ValueError(
                f"{what} is only available for diagonal or Smith form, got {self.form.value}"
            )

    # --- transformation matrices ---

    @cached_property
    def left(self) -> RingMatrix:
        """``L`` with ``L·A·R == result``."""
        w = EliminationWorker.identity(self.ring, self.nrows)
        for op in self.row_ops:
            w.apply(op)
        return w.to_matrix()

    @cached_property
    def left_inverse(self) -> RingMatrix:
        ring = self.ring
        w = EliminationWorker.identity(ring, self.nrows)
        for op in reversed(self.row_ops):
            w.apply(op.inverse(ring))
        return w.to_matrix()

    @cached_property
    def right(self) -> RingMatrix:
        """``R`` with ``L·A·R == result``, built as its transpose."""
        w = EliminationWorker.identity(self.ring, self.ncols)
        for op in self.col_ops:
            w.apply(op.transposed())
        w.transpose()
        return w.to_matrix()

    @cached_property
    def right_inverse(self) -> RingMatrix:
        ring = self.ring
        w = EliminationWorker.identity(ring, self.ncols)
        for op in reversed(self.col_ops):
            w.apply(op.inverse(ring).transposed())
        w.transpose()
        return w.to_matrix()

    # --- rank and diagonal ---

    @cached_property
    def rank(self) -> int:
        components = self.result.components()
        if self.form in _ROW_FORMS:
            return len({i for i, _, _ in components})
        if self.form in _COL_FORMS:
            return len({j for _, j, _ in components})
        return len([1 for i, j, _ in components if i == j])

    @property
    def nullity(self) -> int:
        return self.ncols - self.rank

    @cached_property
    def diagonal(self) -> list:
        """The non-zero diagonal entries, in order."""
        self._require_diagonal("diagonal")
        ring = self.ring
        return [a for a in self.result.diagonal_entries() if not ring.is_zero(a)]

    @property
    def invariant_factors(self) -> list:
        if self.form != Form.SMITH:
            raise ValueError(
                f"invariant_factors requires Smith form, got {self.form.value}"
            )
        return self.diagonal

    # --- kernel, image, cokernel ---

    @cached_property
    def kernel(self) -> RingMatrix:
        """Columns spanning the kernel of ``A``: the last ``nullity`` columns of ``R``."""
        self._require_diagonal("kernel")
        m, r = self.ncols, self.rank
        k = m - r
        w = _unit_columns(self.ring, (m, k), ((r + j, j) for j in range(k)))
        for op in reversed(self.col_ops):
            w.apply(_left_action(op))
        return w.to_matrix()

    @cached_property
    def kernel_transition(self) -> RingMatrix:
        """The last ``nullity`` rows of ``R^-1``; maps kernel vectors to coordinates."""
        self._require_diagonal("kernel_transition")
        ring = self.ring
        m, r = self.ncols, self.rank
        k = m - r
        w = _unit_columns(ring, (m, k), ((r + j, j) for j in range(k)))
        for op in reversed(self.col_ops):
            w.apply(op.inverse(ring).transposed())
        w.transpose()
        return w.to_matrix()

    @cached_property
    def image(self) -> RingMatrix:
        """Columns spanning the image of ``A``: ``L^-1·[D_r; 0]``."""
        self._require_diagonal("image")
        ring = self.ring
        n = self.nrows
        w = EliminationWorker(ring, (n, self.rank), ((i, i, d) for i, d in enumerate(self.diagonal)))
        for op in reversed(self.row_ops):
            w.apply(op.inverse(ring))
        return w.to_matrix()

    @cached_property
    def image_transition(self) -> RingMatrix:
        """The first ``rank`` rows of ``L``."""
        self._require_diagonal("image_transition")
        n, r = self.nrows, self.rank
        w = _unit_columns(self.ring, (n, r), ((i, i) for i in range(r)))
        for op in reversed(self.row_ops):
            w.apply(_right_action_transposed(op))
        w.transpose()
        return w.to_matrix()

    def _cokernel_indices(self) -> List[int]:
        ring = self.ring
        d = self.diagonal
        return [
            i for i in range(self.nrows)
            if i >= len(d) or not ring.is_unit(d[i])
        ]

    @cached_property
    def cokernel(self) -> RingMatrix:
        """Generators of ``coker A``: columns of ``L^-1`` at non-unit or zero diagonal positions."""
        self._require_diagonal("cokernel")
        indices = self._cokernel_indices()
        Linv = self.left_inverse
        return RingMatrix.from_entries(
            self.ring, self.nrows, len(indices),
            ((i, k, Linv[i, j]) for k, j in enumerate(indices) for i in range(self.nrows)),
        )

    @cached_property
    def cokernel_transition(self) -> RingMatrix:
        self._require_diagonal("cokernel_transition")
        indices = self._cokernel_indices()
        L = self.left
        return RingMatrix.from_entries(
            self.ring, len(indices), self.nrows,
            ((k, j, L[i, j]) for k, i in enumerate(indices) for j in range(self.nrows)),
        )

    # --- predicates ---

    @property
    def is_injective(self) -> bool:
        return self.rank == self.ncols

    @property
    def is_surjective(self) -> bool:
        """Surjective onto ``R^n``: full row rank with unit pivots."""
        self._require_diagonal("is_surjective")
        ring = self.ring
        return self.rank == self.nrows and all(ring.is_unit(d) for d in self.diagonal)

    @property
    def is_bijective(self) -> bool:
        return self.is_injective and self.is_surjective

    # --- square matrices ---

    def _require_square(self, what: str) -> None:
        if self.nrows != self.ncols:
            raise ValueError(f"{what} requires a square matrix, got {self.nrows}x{self.ncols}")

    @cached_property
    def determinant(self):
        self._require_square("determinant")
        ring = self.ring
        # Every form is triangular, so det(N) is the product of its diagonal.
        det = ring.one
        for a in self.result.diagonal_entries():
            det = ring.mul(det, a)
        if ring.is_zero(det):
            return ring.zero
        for op in self.row_ops:
            det = ring.mul(det, ring.inverse(op.determinant(ring)))
        for op in self.col_ops:
            det = ring.mul(det, ring.inverse(op.determinant(ring)))
        return det

    @cached_property
    def inverse(self) -> Optional[RingMatrix]:
        """``A^-1 = R·L`` when the normal form is the identity, else ``None``."""
        self._require_square("inverse")
        if not self.result.is_identity():
            return None
        return self.right @ self.left

    def solve(self, b: RingMatrix) -> Optional[RingMatrix]:
        """Return ``x`` with ``A·x == b``, or ``None`` if there is no solution.

        ``b`` may carry several right-hand sides as columns.
        """
        self._require_diagonal("solve")
        if b.ring != self.ring:
            raise ValueError("Right-hand side is over a different ring")
        if b.nrows != self.nrows:
            raise ValueError(f"Right-hand side has {b.nrows} rows, expected {self.nrows}")

        ring = self.ring
        d = self.diagonal
        Pb = self.left @ b
        entries = []
        for i, j, a in Pb.components():
            if i >= len(d) or not ring.divides(d[i], a):
                return None
            entries.append((i, j, ring.quo(a, d[i])))
        y = RingMatrix.from_entries(ring, self.ncols, b.ncols, entries)
        return self.right @ y

    def __repr__(self) -> str:
        return (
            f"EliminationResult({self.form.value}, {self.nrows}x{self.ncols}, "
            f"rank={self.rank}, ops={len(self.row_ops) + len(self.col_ops)})"
        )
