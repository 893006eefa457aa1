"""Mutable sparse working matrix for the eliminators.

``EliminationWorker`` owns one ``SparseRow`` per matrix row. While tracking
is enabled it also keeps a ``Tracker``: for every column the set of rows
whose head entry sits in that column, and for every row the summed weight of
its entries. Every mutation updates both in the same step, so pivot
candidates for a column are found without scanning all rows.
"""

from concurrent.futures import Executor
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from euclidsnf.matrix import RingMatrix
from euclidsnf.operations import AddRow, MulRow, RowOperation, SwapRows
from euclidsnf.ring import EuclideanRing
from euclidsnf.sparse import SparseRow


class Tracker:
    def __init__(self, ring: EuclideanRing, ncols: int, rows: Sequence[SparseRow]):
        self.row_weights: List[int] = [
            sum(ring.weight(a) for _, a in row) for row in rows
        ]
        self.col_heads: List[Set[int]] = [set() for _ in range(ncols)]
        for i, row in enumerate(rows):
            j = row.head_col
            if j is not None:
                self.col_heads[j].add(i)

    def rows_in_column(self, j: int) -> Set[int]:
        return self.col_heads[j]

    def weight(self, i: int) -> int:
        return self.row_weights[i]

    def add_weight(self, i: int, dw: int) -> None:
        self.row_weights[i] += dw

    def update_head(self, i: int, old: Optional[int], new: Optional[int]) -> None:
        if old == new:
            return
        if old is not None:
            self.col_heads[old].discard(i)
        if new is not None:
            self.col_heads[new].add(i)

    def swap(self, i: int, ci: Optional[int], j: int, cj: Optional[int]) -> None:
        self.row_weights[i], self.row_weights[j] = self.row_weights[j], self.row_weights[i]
        if ci == cj:
            return
        if ci is not None:
            self.col_heads[ci].discard(i)
            self.col_heads[ci].add(j)
        if cj is not None:
            self.col_heads[cj].discard(j)
            self.col_heads[cj].add(i)


class EliminationWorker:
    def __init__(self, ring: EuclideanRing, size: Tuple[int, int],
                 entries: Iterable[Tuple[int, int, object]] = (),
                 track: bool = False, executor: Optional[Executor] = None):
        self.ring = ring
        self.size = size
        self.executor = executor
        self.rows: List[SparseRow] = self._build_rows(size[0], entries)
        self.tracker: Optional[Tracker] = None
        if track:
            self.enable_tracking()

    def _build_rows(self, nrows: int, entries) -> List[SparseRow]:
        grouped = [[] for _ in range(nrows)]
        is_zero = self.ring.is_zero
        for i, j, a in entries:
            if not is_zero(a):
                grouped[i].append((j, a))
        return [SparseRow.from_pairs(pairs) for pairs in grouped]

    @classmethod
    def from_matrix(cls, A: RingMatrix, track: bool = False,
                    executor: Optional[Executor] = None) -> "EliminationWorker":
        return cls(A.ring, A.shape, A.components(), track=track, executor=executor)

    @classmethod
    def identity(cls, ring: EuclideanRing, n: int) -> "EliminationWorker":
        return cls(ring, (n, n), ((i, i, ring.one) for i in range(n)))

    @property
    def nrows(self) -> int:
        return self.size[0]

    @property
    def ncols(self) -> int:
        return self.size[1]

    # --- tracking ---

    def enable_tracking(self) -> None:
        self.tracker = Tracker(self.ring, self.ncols, self.rows)

    def disable_tracking(self) -> None:
        self.tracker = None

    def _weigh(self):
        return self.ring.weight if self.tracker is not None else None

    # --- queries ---

    def head(self, i: int) -> Optional[Tuple[int, object]]:
        return self.rows[i].first()

    def heads_in_column(self, j: int) -> List[Tuple[int, object]]:
        """Rows whose first non-zero entry lies in column ``j``, by row index."""
        assert self.tracker is not None, "heads_in_column requires tracking"
        return [(i, self.rows[i].head.value)
                for i in sorted(self.tracker.rows_in_column(j))]

    def row_weight(self, i: int) -> int:
        return self.tracker.weight(i) if self.tracker is not None else 0

    def entry(self, i: int, j: int):
        return self.rows[i].get(j, self.ring.zero)

    def entries_in_column(self, j: int, rows: Iterable[int]) -> List[Tuple[int, object]]:
        """Non-zero entries of column ``j`` restricted to ``rows``."""
        result = []
        for i in rows:
            a = self.rows[i].get(j)
            if a is not None:
                result.append((i, a))
        return result

    def components(self) -> List[Tuple[int, int, object]]:
        return [(i, j, a) for i, row in enumerate(self.rows) for j, a in row]

    # --- mutations ---

    def apply(self, op: RowOperation) -> None:
        if isinstance(op, AddRow):
            self.add_row(op.source, op.target, op.multiplier)
        elif isinstance(op, MulRow):
            self.mul_row(op.index, op.unit)
        elif isinstance(op, SwapRows):
            self.swap_rows(op.i, op.j)
        else:
            raise TypeError(f"Worker only applies row operations, got {op!r}")

    def add_row(self, source: int, target: int, r) -> None:
        self.batch_add_row(source, [target], [r])

    def batch_add_row(self, source: int, targets: Sequence[int], multipliers: Sequence) -> None:
        """Add ``multipliers[k] * row[source]`` to each ``row[targets[k]]``.

        Targets are disjoint and the source is read-only, so with an executor
        the merges run concurrently; tracker updates are applied afterwards.
        """
        assert len(targets) == len(multipliers)
        assert source not in targets, "source row cannot be its own target"
        assert len(set(targets)) == len(targets), "batch targets must be distinct"

        src = self.rows[source]
        if not src or not targets:
            return

        ring = self.ring
        weigh = self._weigh()
        old_cols = [self.rows[i].head_col for i in targets]

        def merge(job):
            i, r = job
            return self.rows[i].add(ring, src, r, weigh)

        jobs = list(zip(targets, multipliers))
        if self.executor is not None and len(jobs) > 1:
            deltas = list(self.executor.map(merge, jobs))
        else:
            deltas = [merge(job) for job in jobs]

        if self.tracker is not None:
            for i, old, dw in zip(targets, old_cols, deltas):
                self.tracker.add_weight(i, dw)
                self.tracker.update_head(i, old, self.rows[i].head_col)

    def mul_row(self, i: int, r) -> None:
        row = self.rows[i]
        old = row.head_col
        dw = row.multiply(self.ring, r, self._weigh())
        if self.tracker is not None:
            self.tracker.add_weight(i, dw)
            self.tracker.update_head(i, old, row.head_col)

    def swap_rows(self, i: int, j: int) -> None:
        if i == j:
            return
        if self.tracker is not None:
            self.tracker.swap(i, self.rows[i].head_col, j, self.rows[j].head_col)
        self.rows[i], self.rows[j] = self.rows[j], self.rows[i]

    def transpose(self) -> None:
        """Physically transpose in place; the tracker is rebuilt if enabled."""
        nrows, ncols = self.size
        grouped = [[] for _ in range(ncols)]
        for i, row in enumerate(self.rows):
            for j, a in row:
                grouped[j].append((i, a))
        self.size = (ncols, nrows)
        self.rows = [SparseRow(pairs) for pairs in grouped]
        if self.tracker is not None:
            self.enable_tracking()

    def assign(self, entries: Iterable[Tuple[int, int, object]]) -> None:
        """Replace all entries, keeping the size."""
        self.rows = self._build_rows(self.nrows, entries)
        if self.tracker is not None:
            self.enable_tracking()

    # --- export ---

    def serialize(self) -> list:
        """Dense row-major sequence of all entries. Only for small matrices."""
        zero = self.ring.zero
        out = []
        for row in self.rows:
            dense = [zero] * self.ncols
            for j, a in row:
                dense[j] = a
            out.extend(dense)
        return out

    def to_matrix(self) -> RingMatrix:
        return RingMatrix.from_entries(self.ring, self.nrows, self.ncols, self.components())

    def __repr__(self) -> str:
        return f"EliminationWorker({self.ring!r}, {self.nrows}x{self.ncols})"
