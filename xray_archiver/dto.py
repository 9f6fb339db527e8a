"""
Data Transfer Objects (DTOs) used across the archiver.

Trace summaries, segment documents and flattened records stay plain dicts:
their fields are defined by X-Ray and must pass through unchanged. Only the
shapes the archiver itself owns are modelled here.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Any, Dict, List, Literal

Artifact = Literal["summary", "segment"]

# Pluralized artifact names used in log lines ("Storing 4 trace summaries ...").
ARTIFACT_PLURALS: Dict[str, str] = {
    "summary": "summaries",
    "segment": "segments",
}

TraceSummary = Dict[str, Any]
SegmentNode = Dict[str, Any]
FlatRecord = Dict[str, Any]

ONE_HOUR = timedelta(hours=1)


# === Scheduling ===
@dataclass(frozen=True)
class TimeWindow:
    """One hour-aligned UTC window: [start, end)."""
    start: datetime
    end: datetime

    @property
    def label(self) -> str:
        """ISO 8601 interval label, e.g. 2019-01-19T03:00:00Z/P1H."""
        return self.start.strftime("%Y-%m-%dT%H:%M:%SZ") + "/P1H"


# === Intake ===
@dataclass(frozen=True)
class TraceSegments:
    """Raw segment documents of one trace, in service-defined order."""
    trace_id: str
    documents: List[str]


# === Run report ===
@dataclass(frozen=True)
class WindowReport:
    window: TimeWindow
    accepted: int            # summaries written
    skipped: int             # empty summaries dropped
    segments: int            # flat segment + subsegment records written
    summary_key: str
    segment_key: str
