"""The elimination state machine.

An ``Eliminator`` drives one algorithm over a shared ``EliminationWorker``::

    [transpose] -> prepare -> while not done: iteration -> finalize -> [transpose back]

Algorithms are plain objects exposing ``prepare``, ``is_done``, ``iteration``
and ``finalize``; each receives the running eliminator and mutates the
worker through it so that every row operation lands in the log. Algorithms
compose by ``subrun``: the child runs on the same worker, optionally
transposed, and its operation logs are merged into the parent's. A row
operation recorded on the transpose becomes a column operation of the
parent.
"""

import enum
import logging
from typing import List, Protocol, Sequence, Tuple

from euclidsnf.operations import AddRow, ColOperation, ElementaryOperation, RowOperation
from euclidsnf.worker import EliminationWorker

_logger = logging.getLogger(__name__)

# Matrix snapshots are skipped in the trace above this size.
_TRACE_MAX_SIZE = 100


class Form(enum.Enum):
    ROW_ECHELON = "row_echelon"
    COL_ECHELON = "col_echelon"
    ROW_HERMITE = "row_hermite"
    COL_HERMITE = "col_hermite"
    DIAGONAL = "diagonal"
    SMITH = "smith"


class Algorithm(Protocol):
    def prepare(self, e: "Eliminator") -> None: ...

    def is_done(self, e: "Eliminator") -> bool: ...

    def iteration(self, e: "Eliminator") -> None: ...

    def finalize(self, e: "Eliminator") -> None: ...


class Eliminator:
    """Runs one algorithm once; not reusable."""

    def __init__(self, worker: EliminationWorker, algorithm: Algorithm,
                 transpose: bool = False, debug: bool = False):
        self.worker = worker
        self.algorithm = algorithm
        self.transposed = transpose
        self.debug = debug
        self.row_ops: List[RowOperation] = []
        self.col_ops: List[ColOperation] = []
        self.aborted = False
        self.iterations = 0

    @property
    def ring(self):
        return self.worker.ring

    @property
    def size(self) -> Tuple[int, int]:
        return self.worker.size

    def run(self) -> "Eliminator":
        self.trace("Start: %s", self)

        if self.transposed:
            self.transpose()

        self.algorithm.prepare(self)

        while not self.aborted and not self.algorithm.is_done(self):
            self.trace("%s iteration: %d", self, self.iterations)
            self.algorithm.iteration(self)
            self.iterations += 1
            self.trace_matrix()

        self.algorithm.finalize(self)

        if self.transposed:
            self.transpose()

        self.trace("Done: %s, %d steps", self, len(self.row_ops) + len(self.col_ops))
        return self

    def subrun(self, algorithm: Algorithm, transpose: bool = False) -> "Eliminator":
        e = Eliminator(self.worker, algorithm, transpose=transpose, debug=self.debug)
        e.run()
        self.row_ops += e.row_ops
        self.col_ops += e.col_ops
        return e

    def abort(self) -> None:
        self.aborted = True

    def apply(self, op: RowOperation) -> None:
        self.worker.apply(op)
        self.append(op)

    def batch_add_row(self, source: int, targets: Sequence[Tuple[int, object]]) -> None:
        """Apply ``AddRow(source, i, r)`` for every ``(i, r)`` in ``targets``."""
        if not targets:
            return
        rows = [i for i, _ in targets]
        multipliers = [r for _, r in targets]
        self.worker.batch_add_row(source, rows, multipliers)
        for i, r in targets:
            self.append(AddRow(source, i, r))

    def append(self, op: ElementaryOperation) -> None:
        """Record ``op`` without touching the worker."""
        if op.is_row:
            self.row_ops.append(op)
        else:
            self.col_ops.append(op)
        self.trace("%s", op)

    def transpose(self) -> None:
        self.trace("Transpose: %s", self)
        self.worker.transpose()
        self.row_ops, self.col_ops = (
            [s.transposed() for s in self.col_ops],
            [s.transposed() for s in self.row_ops],
        )

    def trace(self, msg: str, *args) -> None:
        if self.debug:
            _logger.debug(msg, *args)

    def trace_matrix(self) -> None:
        if not self.debug:
            return
        nrows, ncols = self.size
        if nrows > _TRACE_MAX_SIZE or ncols > _TRACE_MAX_SIZE:
            return
        _logger.debug("\n%s", self.worker.to_matrix().format_grid())

    def __str__(self) -> str:
        name = type(self.algorithm).__name__
        return f"{name}(transposed)" if self.transposed else name
