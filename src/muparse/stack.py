"""Persistent continuation stack.

The stack is a chain of immutable frames plus a per-view head pointer.  Pushing
allocates a new frame in front of the current head and popping only moves the
head, so frames reachable from one view are never altered by another and
``share`` is O(1).
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from muparse.syntax import Syntax


@dataclass(frozen=True)
class _Frame:
    node: Syntax
    below: _Frame | None
    depth: int


class ContinuationStack:
    """Pending syntax nodes still to be matched, most urgent on top."""

    def __init__(self, nodes: Iterable[Syntax] = ()) -> None:
        self._head: _Frame | None = None
        self.push_all(nodes)

    def share(self) -> ContinuationStack:
        """Return an independent view with the same contents."""
        view = ContinuationStack()
        view._head = self._head
        return view

    def push(self, node: Syntax) -> None:
        depth = self._head.depth + 1 if self._head is not None else 1
        self._head = _Frame(node, self._head, depth)

    def push_all(self, nodes: Iterable[Syntax]) -> None:
        """Push nodes so that the first of them ends up on top."""
        for node in reversed(list(nodes)):
            self.push(node)

    def pop(self) -> Syntax:
        if self._head is None:
            raise IndexError("pop from an empty continuation stack")
        frame = self._head
        self._head = frame.below
        return frame.node

    def peek(self) -> Syntax:
        if self._head is None:
            raise IndexError("peek at an empty continuation stack")
        return self._head.node

    def is_empty(self) -> bool:
        return self._head is None

    def __bool__(self) -> bool:
        return self._head is not None

    def __len__(self) -> int:
        return self._head.depth if self._head is not None else 0

    def __iter__(self) -> Iterator[Syntax]:
        frame = self._head
        while frame is not None:
            yield frame.node
            frame = frame.below
