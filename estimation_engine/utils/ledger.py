from collections import deque
from typing import Deque, Iterator, List

from estimation_engine.schemas import ProjectData


class HistoricalLedger:
    """Fixed-capacity FIFO of completed projects.

    Appending past capacity evicts the oldest entry.
    """

    def __init__(self, capacity: int = 100):
        if capacity <= 0:
            raise ValueError("Ledger capacity must be positive")
        self._entries: Deque[ProjectData] = deque(maxlen=capacity)

    @property
    def capacity(self) -> int:
        return self._entries.maxlen

    def append(self, project: ProjectData) -> None:
        self._entries.append(project)

    def clear(self) -> None:
        self._entries.clear()

    def snapshot(self) -> List[ProjectData]:
        """Defensive copy, oldest first."""
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[ProjectData]:
        return iter(list(self._entries))
