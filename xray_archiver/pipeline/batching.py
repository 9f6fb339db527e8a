"""
Trace id batching.

X-Ray's bulk trace retrieval accepts at most five ids per call, so accepted
ids are grouped into ordered runs of that size as they arrive. The final
partial run of a window is flushed explicitly by the caller.
"""

from __future__ import annotations

from typing import Callable, List

MAX_BATCH_SIZE = 5


class BatchAccumulator:
    """
    Ordered, fixed-capacity buffer of trace ids.

    Usage:
        acc = BatchAccumulator(on_batch=process)
        for trace_id in ids:
            acc.add(trace_id)     # calls process() every 5 ids
        acc.flush()               # calls process() with the remainder, if any
    """

    def __init__(self, on_batch: Callable[[List[str]], None], *, capacity: int = MAX_BATCH_SIZE) -> None:
        if capacity < 1:
            raise ValueError(f"capacity must be at least 1, got {capacity}")
        self._on_batch = on_batch
        self._capacity = int(capacity)
        self._buffer: List[str] = []

    def __len__(self) -> int:
        return len(self._buffer)

    def add(self, trace_id: str) -> None:
        """Buffer one id; emit the batch once capacity is reached."""
        self._buffer.append(trace_id)
        if len(self._buffer) >= self._capacity:
            self.flush()

    def flush(self) -> None:
        """Emit the buffered ids, if any, and clear the buffer."""
        if not self._buffer:
            return
        batch = self._buffer
        self._buffer = []
        self._on_batch(batch)
