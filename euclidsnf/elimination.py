from concurrent.futures import Executor
from typing import Optional, Tuple, Union

from euclidsnf.diagonal import Diagonal
from euclidsnf.echelon import RowEchelon
from euclidsnf.eliminator import Eliminator, Form
from euclidsnf.matrix import RingMatrix
from euclidsnf.result import EliminationResult
from euclidsnf.snf import Smith
from euclidsnf.worker import EliminationWorker


def _algorithm(form: Form):
    """Fresh algorithm instance for ``form`` and whether it runs transposed."""
    if form == Form.ROW_ECHELON:
        return RowEchelon(), False
    if form == Form.COL_ECHELON:
        return RowEchelon(), True
    if form == Form.ROW_HERMITE:
        return RowEchelon(reduced=True), False
    if form == Form.COL_HERMITE:
        return RowEchelon(reduced=True), True
    if form == Form.DIAGONAL:
        return Diagonal(), False
    return Smith(), False


def eliminate(matrix: RingMatrix, form: Union[Form, str] = Form.DIAGONAL,
              debug: bool = False, executor: Optional[Executor] = None) -> EliminationResult:
    """
    Reduce ``matrix`` to the normal form ``form``.

    The input is not modified. The returned result holds the normal form ``N``
    and the operation logs from which ``L`` and ``R`` with ``N = L·A·R`` are
    rebuilt on demand.

    Args:
        matrix: Matrix over a Euclidean ring.
        form: A ``Form`` or its string value, e.g. ``"smith"``.
        debug: Emit a step-by-step trace on the ``euclidsnf.eliminator``
            logger at DEBUG level.
        executor: Optional ``concurrent.futures.Executor`` used to fan out
            independent row additions.
    """
    form = Form(form)
    algorithm, transpose = _algorithm(form)

    worker = EliminationWorker.from_matrix(matrix, executor=executor)
    e = Eliminator(worker, algorithm, transpose=transpose, debug=debug).run()

    return EliminationResult(
        form=form,
        result=worker.to_matrix(),
        row_ops=tuple(e.row_ops),
        col_ops=tuple(e.col_ops),
    )


def smith_normal_form(A: RingMatrix) -> Tuple[RingMatrix, RingMatrix, RingMatrix]:
    """
    Smith normal form front-end.

    Returns (U, V, S) with S = U * A * V in Smith normal form: diagonal,
    normalized, each invariant factor dividing the next.
    """
    res = eliminate(A, Form.SMITH)
    return res.left, res.right, res.result
