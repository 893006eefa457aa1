"""Diagonalization by alternating row and column echelon passes."""

from euclidsnf.echelon import RowEchelon


class Diagonal:
    """Alternate row echelon and column echelon until the worker is diagonal.

    Each pass leaves a strictly smaller off-diagonal remainder, so the loop
    ends after at most ``min(rows, cols)`` alternations.
    """

    def prepare(self, e) -> None:
        pass

    def is_done(self, e) -> bool:
        # Non-zero entries must also be packed at the top-left, so that
        # diag(1, 0, 3) still goes through a row pass.
        ring = e.ring
        return all(
            i == j == k and ring.is_normalized(a)
            for k, (i, j, a) in enumerate(e.worker.components())
        )

    def iteration(self, e) -> None:
        e.subrun(RowEchelon())

        if self.is_done(e):
            return

        e.subrun(RowEchelon(), transpose=True)

    def finalize(self, e) -> None:
        pass
