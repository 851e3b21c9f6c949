"""Tests for the stack and queue simulators."""

import pytest

from engilab.errors import EmptyError
from engilab.structures import Queue, Stack


class TestStack:
    def test_push_push_pop_then_peek(self):
        stack = Stack()
        stack.push("a")
        stack.push("b")
        assert stack.pop() == "b"
        assert stack.peek() == "a"

    def test_lifo_order(self):
        stack = Stack()
        for value in ("A", "B", "C"):
            stack.push(value)
        assert stack.pop() == "C"
        assert stack.peek() == "B"
        assert len(stack) == 2

    def test_pop_empty_raises_and_keeps_state(self):
        stack = Stack()
        with pytest.raises(EmptyError):
            stack.pop()
        with pytest.raises(EmptyError):
            stack.peek()
        assert stack.empty
        assert stack.snapshot() == {"items": [], "top": -1}

    def test_empty_error_is_index_error(self):
        with pytest.raises(IndexError):
            Stack().pop()

    def test_reset_and_iteration(self):
        stack = Stack()
        stack.push(1)
        stack.push(2)
        assert list(stack) == [1, 2]
        assert stack.snapshot() == {"items": [1, 2], "top": 1}
        stack.reset()
        assert len(stack) == 0


class TestQueue:
    def test_fifo_order(self):
        queue = Queue()
        for value in (1, 2, 3):
            queue.enqueue(value)
        assert queue.dequeue() == 1
        assert queue.peek() == 2
        assert list(queue) == [2, 3]

    def test_dequeue_empty_raises_and_keeps_state(self):
        queue = Queue()
        with pytest.raises(EmptyError):
            queue.dequeue()
        with pytest.raises(EmptyError):
            queue.peek()
        assert queue.snapshot() == {"items": []}

    def test_reset(self):
        queue = Queue()
        queue.enqueue(4)
        queue.reset()
        assert queue.empty
