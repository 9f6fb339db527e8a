"""
Collection orchestration.

`TraceCollector.collect_traces` archives the configured number of full hours,
most recent first. Per window:

  1. open the summary and segment partitions (local staging files)
  2. stream summaries; accepted ids fill batches of five, each full batch is
     flattened into the segment partition right away
  3. flush the final partial batch
  4. close both partitions and upload segments, then summaries

The run is fail-fast: the first error propagates and the remaining windows
are left for the next run. Keys are deterministic, so a rerun overwrites or
completes them.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional

from ..config import ArchiverConfig
from ..dto import TimeWindow, WindowReport
from ..pipeline.batching import BatchAccumulator
from ..pipeline.flatten import SegmentFlattener
from ..pipeline.summaries import SummaryFetcher
from ..pipeline.windowing import plan_windows
from ..ports import TraceSourcePort
from ..storage.destination import BucketDestination, PartitionWriter
from ..storage.partition import open_partition

Clock = Callable[[], datetime]

_log = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class TraceCollector:
    """
    Composes scheduling, intake, flattening and storage for a run.

    Parameters
    ----------
    source : TraceSourcePort
        Tracing-service collaborator.
    destination : BucketDestination
        Archive location; caches the bucket region for as long as the
        collector lives.
    config : ArchiverConfig
    clock : callable, optional
        Returns the reference instant; defaults to the current UTC time.
    logger : logging.Logger, optional
    """

    def __init__(
        self,
        *,
        source: TraceSourcePort,
        destination: BucketDestination,
        config: ArchiverConfig,
        clock: Optional[Clock] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._config = config
        self._clock = clock or utc_now
        self._logger = logger or _log
        self._summaries = SummaryFetcher(source)
        self._flattener = SegmentFlattener(source)
        self._writer = PartitionWriter(destination, key_region=config.key_region, logger=self._logger)

    def collect_traces(self) -> List[WindowReport]:
        """Archive every planned window; return one report per window."""
        reports: List[WindowReport] = []
        for window in plan_windows(self._clock(), self._config.window_count):
            reports.append(self.collect_window(window))
        return reports

    def collect_window(self, window: TimeWindow) -> WindowReport:
        """Archive the summaries and segments of a single window."""
        self._logger.info("Loading summaries and segments for %s", window.label)
        options = {"compression": self._config.compression, "staging_dir": self._config.staging_dir}

        with open_partition("summary", window, **options) as summary_stream, \
                open_partition("segment", window, **options) as segment_stream:
            self._logger.debug("Buffering trace summaries for %s in %s", window.label, summary_stream.path)
            self._logger.debug("Buffering trace segments for %s in %s", window.label, segment_stream.path)

            segment_count = 0

            def process_batch(trace_ids: List[str]) -> None:
                nonlocal segment_count
                segment_count += self._flattener.process_batch(trace_ids, segment_stream, window)

            batches = BatchAccumulator(process_batch)
            accepted, skipped = self._summaries.run(window, summary_stream, batches.add)
            batches.flush()

            summary_stream.close()
            segment_stream.close()
            # segments first: a stored summary partition implies its segments are stored
            segment_key = self._writer.store(segment_stream, window)
            summary_key = self._writer.store(summary_stream, window)

        if skipped > 0:
            self._logger.debug("Skipped %d empty trace summaries for %s", skipped, window.label)

        return WindowReport(
            window=window,
            accepted=accepted,
            skipped=skipped,
            segments=segment_count,
            summary_key=summary_key,
            segment_key=segment_key,
        )
