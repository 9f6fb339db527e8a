"""
X-Ray-backed TraceSource adapter.

Wraps a boto3 X-Ray client behind TraceSourcePort:
- `fetch_summaries` pages through GetTraceSummaries for [start, end).
- `fetch_segments` pages through BatchGetTraces for up to five trace ids.

Summary keys are converted from the API's CamelCase to snake_case so the
archive format does not depend on the SDK that produced it. User-keyed maps
(annotations) are copied as they are.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from typing import Any, Dict, Iterable, Iterator, List, Sequence

from botocore.exceptions import BotoCoreError, ClientError

from ..dto import TraceSegments, TraceSummary
from ..errors import FetchError
from ..ports import TraceSourcePort

logger = logging.getLogger(__name__)

# Members whose values are maps keyed by user data.
_VERBATIM_MEMBERS = frozenset({"Annotations"})

# Acronym plurals the generic rule would split apart.
_KEY_OVERRIDES: Dict[str, str] = {
    "ResourceARNs": "resource_arns",
}

_ACRONYM_BOUNDARY = re.compile(r"([A-Z]+)([A-Z][a-z])")
_WORD_BOUNDARY = re.compile(r"([a-z\d])([A-Z])")


def snake_case(name: str) -> str:
    """EntryPoint -> entry_point, HTTPMethod -> http_method."""
    if name in _KEY_OVERRIDES:
        return _KEY_OVERRIDES[name]
    name = _ACRONYM_BOUNDARY.sub(r"\1_\2", name)
    return _WORD_BOUNDARY.sub(r"\1_\2", name).lower()


def normalize_keys(value: Any) -> Any:
    """Recursively snake_case dict keys, leaving user-keyed maps untouched."""
    if isinstance(value, dict):
        out: Dict[str, Any] = {}
        for key, item in value.items():
            if key in _VERBATIM_MEMBERS:
                out[snake_case(key)] = item
            else:
                out[snake_case(key)] = normalize_keys(item)
        return out
    if isinstance(value, list):
        return [normalize_keys(item) for item in value]
    return value


class XRayTraceSource(TraceSourcePort):
    """
    Parameters
    ----------
    client : botocore.client.XRay
        e.g. boto3.client("xray").
    """

    def __init__(self, client: Any) -> None:
        self._client = client

    @property
    def region(self) -> str:
        return self._client.meta.region_name

    def fetch_summaries(self, start: datetime, end: datetime) -> Iterable[Sequence[TraceSummary]]:
        paginator = self._client.get_paginator("get_trace_summaries")

        def _iter() -> Iterator[List[TraceSummary]]:
            try:
                for page in paginator.paginate(StartTime=start, EndTime=end):
                    yield [normalize_keys(s) for s in page.get("TraceSummaries", [])]
            except (BotoCoreError, ClientError) as e:
                raise FetchError(f"GetTraceSummaries failed: {e}", artifact="summary") from e

        return _iter()

    def fetch_segments(self, trace_ids: Sequence[str]) -> Iterable[TraceSegments]:
        paginator = self._client.get_paginator("batch_get_traces")

        def _iter() -> Iterator[TraceSegments]:
            try:
                for page in paginator.paginate(TraceIds=list(trace_ids)):
                    unprocessed = page.get("UnprocessedTraceIds") or []
                    if unprocessed:
                        logger.warning("X-Ray did not return traces %s", ", ".join(unprocessed))
                    for trace in page.get("Traces", []):
                        yield TraceSegments(
                            trace_id=trace.get("Id"),
                            documents=[s["Document"] for s in trace.get("Segments", [])],
                        )
            except (BotoCoreError, ClientError) as e:
                raise FetchError(f"BatchGetTraces failed: {e}", artifact="segment") from e

        return _iter()
