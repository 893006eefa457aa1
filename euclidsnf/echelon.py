"""Row-echelon and row-Hermite elimination.

The routine walks across the columns. In each column it collects the rows
whose head entry sits there, picks the candidate of smallest Euclidean
degree as pivot, and subtracts quotient multiples of the pivot row from the
other candidates. A non-zero remainder means a smaller entry appeared, so
the same column is processed again; otherwise the pivot is normalized,
swapped into the current row, and the boundary advances.

Column echelon forms are this algorithm run on the transpose (see
``Eliminator.subrun``).
"""

from euclidsnf.operations import MulRow, SwapRows


class RowEchelon:
    """Drive the worker to row-echelon form.

    Args:
        reduced: Also reduce the entries above every pivot by the pivot
            (Hermite normal form).
    """

    def __init__(self, reduced: bool = False):
        self.reduced = reduced
        self.current_row = 0
        self.current_col = 0

    def prepare(self, e) -> None:
        e.worker.enable_tracking()

    def is_done(self, e) -> bool:
        nrows, ncols = e.size
        return self.current_row >= nrows or self.current_col >= ncols

    def iteration(self, e) -> None:
        worker = e.worker
        ring = e.ring

        candidates = worker.heads_in_column(self.current_col)
        if not candidates:
            self.current_col += 1
            return

        i0, a0 = self._find_pivot(e, candidates)
        e.trace("Pivot: (%d, %d), %s", i0, self.current_col, a0)

        # Eliminate the other heads in this column.
        if len(candidates) > 1:
            again = False
            targets = []
            for i, a in candidates:
                if i == i0:
                    continue
                q, r = ring.divmod(a, a0)
                if not ring.is_zero(r):
                    again = True
                if not ring.is_zero(q):
                    targets.append((i, ring.neg(q)))

            e.batch_add_row(i0, targets)

            if again:
                return

        if not ring.is_normalized(a0):
            e.apply(MulRow(i0, ring.normalizing_unit(a0)))

        if i0 != self.current_row:
            e.apply(SwapRows(i0, self.current_row))

        if self.reduced:
            self._reduce_current_col(e)

        self.current_row += 1
        self.current_col += 1

    def finalize(self, e) -> None:
        e.worker.disable_tracking()

    def _find_pivot(self, e, candidates):
        ring = e.ring
        worker = e.worker
        return min(
            candidates,
            key=lambda c: (ring.degree(c[1]), worker.row_weight(c[0]), c[0]),
        )

    def _reduce_current_col(self, e) -> None:
        ring = e.ring
        _, a0 = e.worker.head(self.current_row)
        targets = []
        for i, a in e.worker.entries_in_column(self.current_col, range(self.current_row)):
            q = ring.quo(a, a0)
            if not ring.is_zero(q):
                targets.append((i, ring.neg(q)))
        e.batch_add_row(self.current_row, targets)
