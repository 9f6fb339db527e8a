"""
Hexagonal interfaces (Ports) for the archiver.

These define the boundary between the collection engine and the AWS
clients. Keep them small and implementation-agnostic so they're easy to
fake in tests.
"""

from __future__ import annotations

from datetime import datetime
from typing import IO, Callable, Iterable, Optional, Protocol, Sequence

from .dto import TraceSegments, TraceSummary


class TraceSourcePort(Protocol):
    """
    Supplies trace summaries and segment documents from the tracing service.
    """

    def fetch_summaries(self, start: datetime, end: datetime) -> Iterable[Sequence[TraceSummary]]:
        """
        Return a lazy, forward-only iterable of pages for [start, end).
        Each page is an ordered sequence of summary dicts with at least `id`.
        """
        ...

    def fetch_segments(self, trace_ids: Sequence[str]) -> Iterable[TraceSegments]:
        """
        Bulk-retrieve the segment documents for at most five trace ids.
        """
        ...


class ObjectStorePort(Protocol):
    """
    Object storage for finished partitions.
    """

    def locate_bucket(self, bucket: str) -> Optional[str]:
        """Return the bucket's region; empty or None means the default region."""
        ...

    def put_object(self, bucket: str, key: str, body: IO[bytes]) -> None:
        """Store `body` as a single object; raise on failure."""
        ...


# Builds a store bound to a region (None = client default), like a client class.
ObjectStoreFactory = Callable[[Optional[str]], ObjectStorePort]
