# MIT License © 2025 Motohiro Suzuki
"""
transport/loopback.py

In-memory point-to-point line link for tests and the single-process demo.

- LoopbackLink.pair() returns two connected endpoints.
- An optional drop filter simulates the unreliable link: lines for which it
  returns True vanish in transit and are never retransmitted.
"""

from __future__ import annotations

from collections import deque
from typing import Callable, Optional

DropFilter = Callable[[str], bool]


class LoopbackEndpoint:
    def __init__(self, name: str) -> None:
        self.name = name
        self._inbox: deque[str] = deque()
        self._peer: Optional["LoopbackEndpoint"] = None
        self.drop_filter: Optional[DropFilter] = None
        self.sent: list[str] = []
        self.dropped: list[str] = []

    def send(self, line: str) -> None:
        if self._peer is None:
            raise ConnectionError(f"{self.name}: endpoint not connected")
        self.sent.append(line)
        if self.drop_filter is not None and self.drop_filter(line):
            self.dropped.append(line)
            return
        self._peer._inbox.append(line)

    def try_receive_line(self) -> Optional[str]:
        if not self._inbox:
            return None
        return self._inbox.popleft()

    def pending(self) -> int:
        return len(self._inbox)


class LoopbackLink:
    @staticmethod
    def pair(a: str = "a", b: str = "b") -> tuple[LoopbackEndpoint, LoopbackEndpoint]:
        ea = LoopbackEndpoint(a)
        eb = LoopbackEndpoint(b)
        ea._peer = eb
        eb._peer = ea
        return ea, eb


def drop_first(prefix: str) -> DropFilter:
    """Drop the first line starting with prefix, pass everything else."""
    state = {"done": False}

    def _f(line: str) -> bool:
        if not state["done"] and line.startswith(prefix):
            state["done"] = True
            return True
        return False

    return _f
