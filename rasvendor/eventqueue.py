"""A first-in first-out queue of timestamped counter values."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Iterator


@dataclass
class QueueNode:
    """One queued value and the time it was recorded."""

    time: float
    value: int


class EventQueue:
    """Queue of timestamped values, oldest first."""

    def __init__(self) -> None:
        self._nodes: deque[QueueNode] = deque()

    def push(self, time: float, value: int) -> QueueNode:
        """Append a value at the tail and return its node."""
        node = QueueNode(time, value)
        self._nodes.append(node)
        return node

    def pop(self) -> QueueNode:
        """Remove and return the oldest node; raise IndexError when empty."""
        if not self._nodes:
            raise IndexError("pop from an empty queue")
        return self._nodes.popleft()

    def front(self) -> QueueNode | None:
        """Return the oldest node without removing it, or None when empty."""
        return self._nodes[0] if self._nodes else None

    def clear(self) -> None:
        """Remove every node."""
        self._nodes.clear()

    def is_empty(self) -> bool:
        return not self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[QueueNode]:
        return iter(self._nodes)