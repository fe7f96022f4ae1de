"""A doubly linked list whose nodes can be removed in constant time."""

from __future__ import annotations

from typing import Any, Generic, Iterator, TypeVar

T = TypeVar("T")


class Node(Generic[T]):
    """A list node holding one value and links to its neighbours."""

    __slots__ = ("value", "prev", "next", "_owner")

    def __init__(self, value: T) -> None:
        self.value = value
        self.prev: Node[T] | None = None
        self.next: Node[T] | None = None
        self._owner: Any = None

    def __repr__(self) -> str:
        return f"Node({self.value!r})"


class DoublyLinkedList(Generic[T]):
    """Insertion-ordered list with O(1) append, pop from the front and removal by node."""

    def __init__(self) -> None:
        self._head: Node[T] | None = None
        self._tail: Node[T] | None = None
        self._count = 0

    def push_back(self, value: T) -> Node[T]:
        """Append a value and return the node that holds it."""
        node: Node[T] = Node(value)
        node._owner = self
        if self._tail is None:
            self._head = node
        else:
            self._tail.next = node
            node.prev = self._tail
        self._tail = node
        self._count += 1
        return node

    def remove(self, node: Node[T]) -> None:
        """Unlink a node that belongs to this list."""
        if node._owner is not self:
            raise ValueError("node does not belong to this list")
        prev, nxt = node.prev, node.next
        if prev is None:
            self._head = nxt
        else:
            prev.next = nxt
        if nxt is None:
            self._tail = prev
        else:
            nxt.prev = prev
        node.prev = node.next = None
        node._owner = None
        self._count -= 1

    def pop_front(self) -> Node[T] | None:
        """Remove and return the first node, or None if the list is empty."""
        head = self._head
        if head is None:
            return None
        self.remove(head)
        return head

    def peek_front(self) -> Node[T] | None:
        """Return the first node without removing it, or None if empty."""
        return self._head

    def is_empty(self) -> bool:
        return self._head is None

    def __len__(self) -> int:
        return self._count

    def __iter__(self) -> Iterator[T]:
        node = self._head
        while node is not None:
            nxt = node.next
            yield node.value
            node = nxt

    def __repr__(self) -> str:
        return f"DoublyLinkedList({list(self)!r})"