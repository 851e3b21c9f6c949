"""Stack and queue simulators with strict LIFO/FIFO access."""

from __future__ import annotations

from collections import deque
from typing import Deque, Generic, Iterator, List, TypeVar

from .errors import EmptyError

T = TypeVar("T")


class Stack(Generic[T]):
    """Last-in first-out sequence.

    :meth:`pop` and :meth:`peek` raise :class:`EmptyError` on an empty stack and leave
    it unchanged.
    """

    def __init__(self) -> None:
        self._items: List[T] = []

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        """Iterate from bottom to top."""
        return iter(self._items)

    @property
    def empty(self) -> bool:
        return not self._items

    def push(self, value: T) -> None:
        self._items.append(value)

    def pop(self) -> T:
        if not self._items:
            raise EmptyError("stack is empty")
        return self._items.pop()

    def peek(self) -> T:
        if not self._items:
            raise EmptyError("stack is empty")
        return self._items[-1]

    def reset(self) -> None:
        self._items.clear()

    def snapshot(self) -> dict:
        return {"items": list(self._items), "top": len(self._items) - 1}


class Queue(Generic[T]):
    """First-in first-out sequence with the same empty semantics as :class:`Stack`."""

    def __init__(self) -> None:
        self._items: Deque[T] = deque()

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[T]:
        """Iterate from front to rear."""
        return iter(self._items)

    @property
    def empty(self) -> bool:
        return not self._items

    def enqueue(self, value: T) -> None:
        self._items.append(value)

    def dequeue(self) -> T:
        if not self._items:
            raise EmptyError("queue is empty")
        return self._items.popleft()

    def peek(self) -> T:
        if not self._items:
            raise EmptyError("queue is empty")
        return self._items[0]

    def reset(self) -> None:
        self._items.clear()

    def snapshot(self) -> dict:
        return {"items": list(self._items)}
