# conversation/accumulator.py

import threading
from typing import List


class ResponseAccumulator:
    """
    Buffer for the assistant reply of the turn in flight.

    The network task appends, the display task snapshots. Every access goes
    through `lock`, which the loading indicator also uses for its active flag.
    """

    def __init__(self):
        self.lock = threading.Lock()
        self._parts: List[str] = []
        self._deltas = 0

    def append(self, delta: str) -> None:
        """Add a delta to the end of the buffer."""
        with self.lock:
            self._parts.append(delta)
            self._deltas += 1

    def snapshot(self) -> str:
        """Return the full text so far without clearing it."""
        with self.lock:
            text = ''.join(self._parts)
            # Collapse the parts so repeated snapshots stay cheap
            self._parts = [text] if text else []
            return text

    def reset(self) -> None:
        """Clear the buffer at the start of a turn."""
        with self.lock:
            self._parts = []
            self._deltas = 0

    @property
    def delta_count(self) -> int:
        with self.lock:
            return self._deltas

    def __len__(self) -> int:
        return len(self.snapshot())

    def __bool__(self) -> bool:
        return len(self) > 0
