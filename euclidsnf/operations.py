"""Elementary row and column operations.

Row operations act on the left of a matrix, column operations on the right.
Transposition maps one family onto the other: ``AddRow(i, j, r)`` applied to
``A^T`` is ``AddCol(i, j, r)`` applied to ``A``.
"""

from dataclasses import dataclass
from typing import Any, Union

from euclidsnf.ring import EuclideanRing


@dataclass(frozen=True)
class AddRow:
    """``row[target] += multiplier * row[source]``."""

    source: int
    target: int
    multiplier: Any
    is_row = True

    def transposed(self) -> "AddCol":
        return AddCol(self.source, self.target, self.multiplier)

    def inverse(self, ring: EuclideanRing) -> "AddRow":
        return AddRow(self.source, self.target, ring.neg(self.multiplier))

    def determinant(self, ring: EuclideanRing):
        return ring.one


@dataclass(frozen=True)
class MulRow:
    index: int
    unit: Any
    is_row = True

    def transposed(self) -> "MulCol":
        return MulCol(self.index, self.unit)

    def inverse(self, ring: EuclideanRing) -> "MulRow":
        return MulRow(self.index, ring.inverse(self.unit))

    def determinant(self, ring: EuclideanRing):
        return self.unit


@dataclass(frozen=True)
class SwapRows:
    i: int
    j: int
    is_row = True

    def transposed(self) -> "SwapCols":
        return SwapCols(self.i, self.j)

    def inverse(self, ring: EuclideanRing) -> "SwapRows":
        return self

    def determinant(self, ring: EuclideanRing):
        return ring.neg(ring.one)


@dataclass(frozen=True)
class AddCol:
    """``col[target] += multiplier * col[source]``."""

    source: int
    target: int
    multiplier: Any
    is_row = False

    def transposed(self) -> AddRow:
        return AddRow(self.source, self.target, self.multiplier)

    def inverse(self, ring: EuclideanRing) -> "AddCol":
        return AddCol(self.source, self.target, ring.neg(self.multiplier))

    def determinant(self, ring: EuclideanRing):
        return ring.one


@dataclass(frozen=True)
class MulCol:
    index: int
    unit: Any
    is_row = False

    def transposed(self) -> MulRow:
        return MulRow(self.index, self.unit)

    def inverse(self, ring: EuclideanRing) -> "MulCol":
        return MulCol(self.index, ring.inverse(self.unit))

    def determinant(self, ring: EuclideanRing):
        return self.unit


@dataclass(frozen=True)
class SwapCols:
    i: int
    j: int
    is_row = False

    def transposed(self) -> SwapRows:
        return SwapRows(self.i, self.j)

    def inverse(self, ring: EuclideanRing) -> "SwapCols":
        return self

    def determinant(self, ring: EuclideanRing):
        return ring.neg(ring.one)


RowOperation = Union[AddRow, MulRow, SwapRows]
ColOperation = Union[AddCol, MulCol, SwapCols]
ElementaryOperation = Union[RowOperation, ColOperation]
