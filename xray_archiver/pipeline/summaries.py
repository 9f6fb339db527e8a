"""
Trace summary intake for one window.

Responsibilities:
- Walk the paginated summaries for [start, end) in arrival order.
- Drop empty summaries (no duration and no entry point); X-Ray reports these
  for traces whose segments are not available yet.
- Append every accepted summary, verbatim, to the summary partition as it
  arrives and hand its id downstream for segment retrieval.
"""

from __future__ import annotations

from typing import Callable, Iterator, Mapping, Sequence, Tuple

from ..dto import TimeWindow, TraceSummary
from ..errors import ArchiverError, FetchError
from ..ports import TraceSourcePort
from ..storage.partition import PartitionStream


def is_empty_summary(summary: Mapping[str, object]) -> bool:
    """True if the summary has neither a duration nor an entry point."""
    return summary.get("duration") is None and summary.get("entry_point") is None


class SummaryFetcher:
    """
    Streams one window's trace summaries into a partition.

    Parameters
    ----------
    source : TraceSourcePort
        Tracing-service collaborator.
    """

    def __init__(self, source: TraceSourcePort) -> None:
        self._source = source

    def run(
        self,
        window: TimeWindow,
        stream: PartitionStream,
        on_accepted: Callable[[str], None],
    ) -> Tuple[int, int]:
        """
        Process every summary page of `window`.

        Returns (accepted, skipped).
        """
        accepted = 0
        skipped = 0
        for page in self._pages(window):
            for summary in page:
                if is_empty_summary(summary):
                    skipped += 1
                    continue
                stream.write_record(summary)
                accepted += 1
                on_accepted(summary["id"])
        return accepted, skipped

    def _pages(self, window: TimeWindow) -> Iterator[Sequence[TraceSummary]]:
        """Yield pages, translating collaborator failures into FetchError."""
        try:
            for page in self._source.fetch_summaries(window.start, window.end):
                yield page
        except ArchiverError as e:
            e.annotate(window=window, artifact="summary")
            raise
        except Exception as e:
            raise FetchError(f"Could not load trace summaries: {e}", window=window, artifact="summary") from e
