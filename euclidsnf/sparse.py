"""Sparse matrix rows as singly linked lists.

A ``SparseRow`` stores the non-zero entries of one row as ``(col, value)``
nodes with strictly increasing columns. Row combination is a single merge
walk over the two lists: new nodes are spliced in for columns present only
in the source, and nodes whose value cancels to zero are unlinked.
"""

from typing import Callable, Iterable, Iterator, Optional, Tuple

from euclidsnf.ring import EuclideanRing


class _Entry:
    __slots__ = ("col", "value", "next")

    def __init__(self, col: int, value, next: "Optional[_Entry]" = None):
        self.col = col
        self.value = value
        self.next = next


class SparseRow:
    __slots__ = ("head",)

    def __init__(self, pairs: Iterable[Tuple[int, object]] = ()):
        """Build a row from ``(col, value)`` pairs sorted by column."""
        self.head: Optional[_Entry] = None
        tail = None
        for col, value in pairs:
            node = _Entry(col, value)
            if tail is None:
                self.head = node
            else:
                assert tail.col < col, "columns must be strictly increasing"
                tail.next = node
            tail = node

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[int, object]]) -> "SparseRow":
        return cls(sorted(pairs, key=lambda p: p[0]))

    def __iter__(self) -> Iterator[Tuple[int, object]]:
        node = self.head
        while node is not None:
            yield node.col, node.value
            node = node.next

    def __len__(self) -> int:
        return sum(1 for _ in self)

    def __bool__(self) -> bool:
        return self.head is not None

    def first(self) -> Optional[Tuple[int, object]]:
        if self.head is None:
            return None
        return self.head.col, self.head.value

    @property
    def head_col(self) -> Optional[int]:
        return None if self.head is None else self.head.col

    def get(self, col: int, default=None):
        node = self.head
        while node is not None and node.col < col:
            node = node.next
        if node is not None and node.col == col:
            return node.value
        return default

    def copy(self) -> "SparseRow":
        return SparseRow(iter(self))

    def add(self, ring: EuclideanRing, source: "SparseRow", r,
            weigh: Optional[Callable[[object], int]] = None) -> int:
        """In place ``self += r * source``.

        Returns the change of the summed entry weights when ``weigh`` is
        given, otherwise 0.
        """
        assert source is not self
        dw = 0
        # Sentinel in front of the head so that head insertion and head
        # removal are ordinary splices.
        sentinel = _Entry(-1, None, self.head)
        prev, cur = sentinel, self.head

        for col, value in source:
            while cur is not None and cur.col < col:
                prev, cur = cur, cur.next

            a = ring.mul(r, value)
            if cur is not None and cur.col == col:
                a0 = cur.value
                b = ring.add(a0, a)
                if ring.is_zero(b):
                    prev.next = cur.next
                    cur = cur.next
                    if weigh is not None:
                        dw -= weigh(a0)
                else:
                    cur.value = b
                    prev, cur = cur, cur.next
                    if weigh is not None:
                        dw += weigh(b) - weigh(a0)
            elif not ring.is_zero(a):
                node = _Entry(col, a, cur)
                prev.next = node
                prev = node
                if weigh is not None:
                    dw += weigh(a)

        self.head = sentinel.next
        return dw

    def multiply(self, ring: EuclideanRing, r,
                 weigh: Optional[Callable[[object], int]] = None) -> int:
        """In place ``self *= r``; returns the weight change like ``add``."""
        dw = 0
        sentinel = _Entry(-1, None, self.head)
        prev, cur = sentinel, self.head
        while cur is not None:
            a0 = cur.value
            a = ring.mul(r, a0)
            if weigh is not None:
                dw -= weigh(a0)
            if ring.is_zero(a):
                prev.next = cur.next
            else:
                cur.value = a
                prev = cur
                if weigh is not None:
                    dw += weigh(a)
            cur = cur.next
        self.head = sentinel.next
        return dw

    def __repr__(self) -> str:
        return "SparseRow(" + ", ".join(f"{c}: {v}" for c, v in self) + ")"
