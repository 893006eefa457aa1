from dataclasses import dataclass
from typing import Iterable, List, Tuple

import numpy as np

from euclidsnf.ring import EuclideanRing


def _object_array(ring: EuclideanRing, rows, nrows: int, ncols: int) -> np.ndarray:
    # Element-wise fill: numpy must not try to unpack ring elements.
    out = np.empty((nrows, ncols), dtype=object)
    for i in range(nrows):
        row = rows[i]
        for j in range(ncols):
            out[i, j] = ring.coerce(row[j])
    return out


@dataclass(eq=False)
class RingMatrix:
    ring: EuclideanRing
    data: np.ndarray

    def __post_init__(self):
        if isinstance(self.data, np.ndarray):
            if self.data.ndim != 2:
                raise ValueError(f"Expected a 2-D array, got ndim={self.data.ndim}")
            nrows, ncols = self.data.shape
        else:
            nrows = len(self.data)
            ncols = len(self.data[0]) if nrows else 0
            for row in self.data:
                if len(row) != ncols:
                    raise ValueError("All rows must have the same length")
        self.data = _object_array(self.ring, self.data, nrows, ncols)

    @property
    def nrows(self) -> int:
        return self.data.shape[0]

    @property
    def ncols(self) -> int:
        return self.data.shape[1]

    @property
    def shape(self) -> Tuple[int, int]:
        return self.nrows, self.ncols

    @classmethod
    def from_rows(cls, ring: EuclideanRing, rows: List[list]) -> "RingMatrix":
        return cls(ring=ring, data=rows)

    @classmethod
    def zeros(cls, ring: EuclideanRing, nrows: int, ncols: int) -> "RingMatrix":
        data = np.empty((nrows, ncols), dtype=object)
        for i in range(nrows):
            for j in range(ncols):
                data[i, j] = ring.zero
        return cls(ring, data)

    @classmethod
    def from_entries(cls, ring: EuclideanRing, nrows: int, ncols: int,
                     entries: Iterable[Tuple[int, int, object]]) -> "RingMatrix":
        """Build a matrix from ``(row, col, value)`` triples; unset cells are zero."""
        M = cls.zeros(ring, nrows, ncols)
        for i, j, a in entries:
            M.data[i, j] = ring.coerce(a)
        return M

    @classmethod
    def identity(cls, ring: EuclideanRing, n: int) -> "RingMatrix":
        return cls.from_entries(ring, n, n, ((i, i, ring.one) for i in range(n)))

    @classmethod
    def diagonal(cls, ring: EuclideanRing, diag: list) -> "RingMatrix":
        n = len(diag)
        return cls.from_entries(ring, n, n, ((i, i, a) for i, a in enumerate(diag)))

    def copy(self) -> "RingMatrix":
        return RingMatrix(self.ring, self.data.copy())

    def transpose(self) -> "RingMatrix":
        return RingMatrix(self.ring, self.data.T.copy())

    def __getitem__(self, index):
        return self.data[index]

    def __eq__(self, other) -> bool:
        if not isinstance(other, RingMatrix):
            return NotImplemented
        if self.shape != other.shape:
            return False
        eq = self.ring.eq
        return all(eq(x, y) for x, y in zip(self.data.flat, other.data.flat))

    __hash__ = None

    def __matmul__(self, other: "RingMatrix") -> "RingMatrix":
        if self.ring != other.ring:
            raise ValueError("Cannot multiply matrices over different rings")

        rA, cA = self.shape
        rB, cB = other.shape

        if cA != rB:
            raise ValueError(f"Dimension mismatch: {cA} != {rB}")

        ring = self.ring
        A = self.data
        B = other.data

        C = RingMatrix.zeros(ring, rA, cB)
        Cd = C.data

        for i in range(rA):
            for k in range(cA):
                aik = A[i, k]
                if ring.is_zero(aik):
                    continue
                for j in range(cB):
                    bkj = B[k, j]
                    if not ring.is_zero(bkj):
                        Cd[i, j] = ring.add(Cd[i, j], ring.mul(aik, bkj))

        return C

    def submatrix(self, row_start: int, row_end: int,
                  col_start: int, col_end: int) -> "RingMatrix":
        """
        Return a copy of rows [row_start:row_end) and
        cols [col_start:col_end).
        """
        return RingMatrix(self.ring, self.data[row_start:row_end, col_start:col_end].copy())

    def concat(self, other: "RingMatrix") -> "RingMatrix":
        """Horizontal concatenation ``[self | other]``."""
        if self.ring != other.ring:
            raise ValueError("Cannot concatenate matrices over different rings")
        if self.nrows != other.nrows:
            raise ValueError(f"Row count mismatch: {self.nrows} != {other.nrows}")
        return RingMatrix(self.ring, np.hstack([self.data, other.data]))

    def stack(self, other: "RingMatrix") -> "RingMatrix":
        """Vertical concatenation ``[self; other]``."""
        if self.ring != other.ring:
            raise ValueError("Cannot stack matrices over different rings")
        if self.ncols != other.ncols:
            raise ValueError(f"Column count mismatch: {self.ncols} != {other.ncols}")
        return RingMatrix(self.ring, np.vstack([self.data, other.data]))

    def components(self) -> List[Tuple[int, int, object]]:
        """Non-zero entries as ``(row, col, value)`` in row-major order."""
        is_zero = self.ring.is_zero
        return [
            (i, j, self.data[i, j])
            for i in range(self.nrows)
            for j in range(self.ncols)
            if not is_zero(self.data[i, j])
        ]

    def diagonal_entries(self) -> list:
        return [self.data[i, i] for i in range(min(self.shape))]

    def is_zero(self) -> bool:
        return not self.components()

    def is_diagonal(self) -> bool:
        return all(i == j for i, j, _ in self.components())

    def is_identity(self) -> bool:
        if self.nrows != self.ncols:
            return False
        return self == RingMatrix.identity(self.ring, self.nrows)

    def to_sympy(self):
        import sympy as sp
        to_sympy = self.ring.to_sympy
        return sp.Matrix(self.nrows, self.ncols,
                         lambda i, j: to_sympy(self.data[i, j]))

    def format_grid(self) -> str:
        fmt = self.ring.format
        cells = [[fmt(x) for x in row] for row in self.data]
        width = max((len(c) for row in cells for c in row), default=0)
        return "\n".join(
            "[" + " ".join(c.rjust(width) for c in row) + "]" for row in cells
        )

    def __repr__(self) -> str:
        return f"RingMatrix({self.ring!r}, {self.nrows}x{self.ncols})"
