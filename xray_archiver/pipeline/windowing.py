"""
Windowing utilities.

The archiver operates on fixed, tumbling hourly windows in UTC. A run covers
the `count` full hours preceding the hour that contains the reference
instant, most recent first.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import List

from ..dto import ONE_HOUR, TimeWindow


def hour_floor(instant: datetime) -> datetime:
    """
    Truncate `instant` to the start of its hour, in UTC.

    Naive datetimes are taken to be UTC already; aware ones are converted.
    """
    if instant.tzinfo is None:
        instant = instant.replace(tzinfo=timezone.utc)
    else:
        instant = instant.astimezone(timezone.utc)
    return instant.replace(minute=0, second=0, microsecond=0)


def plan_windows(reference: datetime, count: int) -> List[TimeWindow]:
    """
    Return `count` consecutive one-hour windows ending at the hour floor of
    `reference`, most recent first.

    Parameters
    ----------
    reference : datetime
        The clock reading the run is anchored to.
    count : int
        Number of windows, at least 1.
    """
    if count < 1:
        raise ValueError(f"window count must be at least 1, got {count}")

    anchor = hour_floor(reference)
    windows: List[TimeWindow] = []
    for n in range(count):
        end = anchor - n * ONE_HOUR
        windows.append(TimeWindow(start=end - ONE_HOUR, end=end))
    return windows
